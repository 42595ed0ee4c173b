# verifier.py
"""
Verifier: issues challenge bits and checks rounds against the public graph G.

verify_round order:
  - shape of the round (malformed -> ProtocolStructureError, raised)
  - response branch matches the challenge that was issued, when known
  - commitment opens on the canonical serialization of the revealed G'
  - c=0: pi is a bijection on [0, n) and G' == pi(G)
  - c=1: the revealed edges form one n-cycle through every vertex, all in G'
Any failed check is a rejection (Verdict), not an exception.
"""

from commitment import Commitment, open_commitment, serialize_edges
from errors import ConstructionError, ProtocolStructureError, Verdict, VerificationFailure
from graph_model import Graph, normalize_edge
from permutation import is_permutation
from rng import resolve
from zkp_types import Proof, ProofRound, RevealCycle, RevealPermutation, is_challenge_bit


def _is_int(x) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def _check_edge_list(edges, what):
    if not isinstance(edges, (list, tuple)):
        raise ProtocolStructureError(f"{what} must be a sequence of edges")
    for e in edges:
        if not isinstance(e, (list, tuple)) or len(e) != 2 or not all(_is_int(x) for x in e):
            raise ProtocolStructureError(f"{what}: malformed edge {e!r}")


def check_round_shape(rnd) -> None:
    if not isinstance(rnd, ProofRound):
        raise ProtocolStructureError(f"expected a ProofRound, got {type(rnd).__name__}")
    c = rnd.commitment
    if not isinstance(c, Commitment) or not isinstance(c.digest, bytes) or not isinstance(c.nonce, bytes):
        raise ProtocolStructureError("malformed commitment")
    resp = rnd.response
    if isinstance(resp, RevealPermutation):
        if not isinstance(resp.permutation, (list, tuple)):
            raise ProtocolStructureError("revealed permutation must be a sequence")
    elif isinstance(resp, RevealCycle):
        _check_edge_list(resp.cycle_edges, "cycle edges")
    else:
        raise ProtocolStructureError(f"unknown response type {type(resp).__name__}")
    _check_edge_list(resp.permuted_edges, "permuted graph edges")


def cycle_shape_problem(edges, n: int):
    """
    None if edges are exactly n distinct undirected edges forming a single cycle
    through all n vertices, otherwise a short description of what is wrong.
    """
    if n < 3:
        return f"no Hamiltonian cycle exists on {n} vertices"
    if len(edges) != n:
        return f"expected {n} cycle edges, got {len(edges)}"
    adj = [[] for _ in range(n)]
    seen = set()
    for u, v in edges:
        if not (0 <= u < n and 0 <= v < n):
            return f"edge ({u}, {v}) out of range"
        if u == v:
            return f"self-loop on {u}"
        e = normalize_edge(u, v)
        if e in seen:
            return f"duplicate edge {e}"
        seen.add(e)
        adj[u].append(v)
        adj[v].append(u)
    for v in range(n):
        if len(adj[v]) != 2:
            return f"vertex {v} has degree {len(adj[v])}"
    # all degrees are 2: walk from 0 and count steps until back at 0
    prev, cur, steps = 0, adj[0][0], 1
    while cur != 0:
        a, b = adj[cur]
        prev, cur = cur, (b if a == prev else a)
        steps += 1
    if steps != n:
        return f"edges split into several cycles (first has length {steps})"
    return None


class Verifier:
    def __init__(self, rng=None):
        self.rng = resolve(rng)

    def generate_challenge(self) -> int:
        return self.rng.randbit()

    def generate_challenges(self, k: int) -> list[int]:
        return [self.generate_challenge() for _ in range(k)]

    def verify_round(self, rnd, graph, expected_challenge=None) -> Verdict:
        check_round_shape(rnd)
        n = graph.vertex_count()
        resp = rnd.response

        if expected_challenge is not None:
            if not is_challenge_bit(expected_challenge):
                raise ProtocolStructureError(f"challenge must be 0 or 1, got {expected_challenge!r}")
            if expected_challenge != rnd.challenge:
                return Verdict.reject(
                    VerificationFailure.CHALLENGE_MISMATCH,
                    f"asked branch {expected_challenge}, prover answered branch {rnd.challenge}")

        # 1) the revealed G' must be the committed one
        if not open_commitment(rnd.commitment, serialize_edges(resp.permuted_edges)):
            return Verdict.reject(VerificationFailure.COMMITMENT_MISMATCH,
                                  "revealed graph does not open the commitment")
        try:
            permuted = Graph(n, resp.permuted_edges)
        except ConstructionError as e:
            raise ProtocolStructureError(f"committed graph is malformed: {e}") from e

        # 2) c=0: isomorphism under the revealed pi
        if isinstance(resp, RevealPermutation):
            if not is_permutation(resp.permutation, n):
                return Verdict.reject(VerificationFailure.INVALID_PERMUTATION,
                                      f"revealed permutation is not a bijection on [0, {n})")
            if not graph.is_isomorphic_under(resp.permutation, permuted):
                return Verdict.reject(VerificationFailure.ISOMORPHISM_MISMATCH,
                                      "committed graph is not pi(G)")
            return Verdict.ok()

        # 3) c=1: Hamiltonian cycle inside the committed graph
        problem = cycle_shape_problem(resp.cycle_edges, n)
        if problem is not None:
            return Verdict.reject(VerificationFailure.INVALID_CYCLE_SHAPE, problem)
        for u, v in resp.cycle_edges:
            if not permuted.has_edge(u, v):
                return Verdict.reject(VerificationFailure.EDGE_NOT_IN_COMMITTED_GRAPH,
                                      f"cycle edge ({u}, {v}) is not in the committed graph")
        return Verdict.ok()

    def verify_proof(self, proof, graph, expected_challenges=None) -> Verdict:
        if not isinstance(proof, Proof) or not isinstance(proof.rounds, (list, tuple)):
            raise ProtocolStructureError(f"expected a Proof, got {type(proof).__name__}")
        if len(proof.rounds) != proof.k:
            return Verdict.reject(VerificationFailure.ROUND_COUNT_MISMATCH,
                                  f"declared k={proof.k}, got {len(proof.rounds)} rounds")
        if expected_challenges is not None:
            expected_challenges = list(expected_challenges)
            if len(expected_challenges) != proof.k:
                raise ProtocolStructureError(
                    f"expected {proof.k} challenges, got {len(expected_challenges)}")
        # fail fast: the first rejected round decides
        for i, rnd in enumerate(proof.rounds):
            c = None if expected_challenges is None else expected_challenges[i]
            verdict = self.verify_round(rnd, graph, c)
            if not verdict:
                return verdict.at_round(i)
        return Verdict.ok()
