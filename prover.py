# prover.py
"""
Honest prover: knows a Hamiltonian cycle of G and proves it round by round.

Per round (3 moves):
  1) commit    : pi uniform, G' = pi(G), commitment to the canonical edge list of G'
  2) challenge : one bit from the verifier (or from a pre-supplied sequence)
  3) respond   : c=0 -> pi + edges(G')
                 c=1 -> edges(G') + normalized edges of pi(cycle), pi withheld
"""

from commitment import commit_to_graph
from errors import InvalidWitness, ProtocolStructureError
from hamiltonian_cycle import cycle_edges, is_valid_hamiltonian_cycle
from permutation import apply_to_cycle, apply_to_graph, generate_random_permutation
from rng import resolve
from zkp_types import Proof, ProofRound, RevealCycle, RevealPermutation, is_challenge_bit


class ProverRound:
    """
    One round of the prover state machine. Only the digest is public before the
    challenge; the permutation, permuted graph and nonce are held until
    respond() and then dropped.
    """

    def __init__(self, graph, cycle, rng):
        self._cycle = cycle
        self._perm = generate_random_permutation(graph.vertex_count(), rng)
        self._permuted = apply_to_graph(graph, self._perm)
        self._commitment = commit_to_graph(self._permuted, rng)

    @property
    def digest(self) -> bytes:
        # the only value sent before the challenge; the nonce travels with the response
        return self._commitment.digest

    @property
    def answered(self) -> bool:
        return self._perm is None

    def respond(self, challenge: int) -> ProofRound:
        if not is_challenge_bit(challenge):
            raise ProtocolStructureError(f"challenge must be 0 or 1, got {challenge!r}")
        if self.answered:
            raise ProtocolStructureError("round already answered")
        edges = tuple(self._permuted.edges())
        if challenge == 0:
            response = RevealPermutation(tuple(self._perm), edges)
        else:
            permuted_cycle = apply_to_cycle(self._cycle, self._perm)
            response = RevealCycle(edges, tuple(cycle_edges(permuted_cycle)))
        # round secrets must not outlive the response
        self._perm = None
        self._permuted = None
        self._cycle = None
        return ProofRound(self._commitment, response)


class Prover:
    def __init__(self, graph, cycle, rng=None):
        if not is_valid_hamiltonian_cycle(cycle, graph):
            raise InvalidWitness("cycle is not a Hamiltonian cycle of the graph")
        self.graph = graph
        self._cycle = tuple(cycle)
        self.rng = resolve(rng)

    def start_round(self) -> ProverRound:
        return ProverRound(self.graph, self._cycle, self.rng)

    def prove_round(self, challenge: int) -> ProofRound:
        return self.start_round().respond(challenge)

    def generate_proof(self, k: int, challenges) -> Proof:
        if isinstance(k, bool) or not isinstance(k, int) or k < 1:
            raise ProtocolStructureError(f"round count must be a positive int, got {k!r}")
        challenges = list(challenges)
        if len(challenges) != k:
            raise ProtocolStructureError(f"expected {k} challenges, got {len(challenges)}")
        for c in challenges:
            if not is_challenge_bit(c):
                raise ProtocolStructureError(f"challenge must be 0 or 1, got {c!r}")
        # fresh pi and fresh nonce every round
        return Proof(k, tuple(self.prove_round(c) for c in challenges))
