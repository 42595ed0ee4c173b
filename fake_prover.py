#!/usr/bin/env python3
"""
fake_prover.py
Cheating provers that do not know a Hamiltonian cycle, used to check that the
verifier rejects them.

Modes:
  guess        : guesses the challenge before committing; commits to pi(G) for a
                 guess of 0, to a relabeled n-cycle for a guess of 1. Passes a round
                 exactly when the guess is right (probability 1/2 per round).
  bad_cycle    : commits to pi(G) honestly and always answers branch 1 with n
                 edges that do not form a cycle.
  bad_nonce    : opens its commitment with a fresh random nonce.
  tamper_graph : commits to pi(G) then opens a graph with one edge changed.
  random       : picks one of the above per round.

With k rounds the guessing prover is accepted with probability 2^-k.

Usage:
    python fake_prover.py --trials 20 --rounds 8 --mode guess
"""

import argparse

import networkx as nx

from commitment import Commitment, commit_to_graph
from errors import ProtocolStructureError
from graph_model import Graph
from permutation import apply_to_graph, generate_random_permutation
from rng import HmacCounterDRBG, resolve
from zkp_types import Proof, ProofRound, RevealCycle, RevealPermutation, is_challenge_bit

MODES = ("guess", "bad_cycle", "bad_nonce", "tamper_graph")


def fan_edges(n: int) -> list[tuple[int, int]]:
    # n edges, vertex 0 has degree n-1 >= 3 so they never form a Hamiltonian cycle
    if n < 4:
        raise ValueError(f"need at least 4 vertices for a non-cycle of n edges, got {n}")
    return [(0, i) for i in range(1, n)] + [(1, 2)]


def ring_graph(n: int) -> Graph:
    return Graph(n, [(i, (i + 1) % n) for i in range(n)])


def tamper(graph: Graph) -> Graph:
    """Same vertex set, one edge removed (or added if the graph has none)."""
    edges = graph.edges()
    if edges:
        return Graph(graph.vertex_count(), edges[1:])
    return Graph(graph.vertex_count(), [(0, 1)])


class FakeRound:
    def __init__(self, graph, mode, rng):
        self.mode = mode
        self._rng = rng
        n = graph.vertex_count()
        self._perm = generate_random_permutation(n, rng)
        self._guess = rng.randbit() if mode == "guess" else 0
        if self._guess == 1:
            committed = apply_to_graph(ring_graph(n), self._perm)
        else:
            committed = apply_to_graph(graph, self._perm)
        self._committed = committed
        self._commitment = commit_to_graph(committed, rng)
        self.answered = False

    @property
    def digest(self) -> bytes:
        return self._commitment.digest

    def respond(self, challenge: int) -> ProofRound:
        if not is_challenge_bit(challenge):
            raise ProtocolStructureError(f"challenge must be 0 or 1, got {challenge!r}")
        if self.answered:
            raise ProtocolStructureError("round already answered")
        self.answered = True
        n = self._committed.vertex_count()
        opened = self._committed
        commitment = self._commitment

        if self.mode == "tamper_graph":
            opened = tamper(opened)
        elif self.mode == "bad_nonce":
            commitment = Commitment(commitment.digest, self._rng.token_bytes(len(commitment.nonce)))

        edges = tuple(opened.edges())
        if self.mode == "bad_cycle":
            return ProofRound(commitment, RevealCycle(edges, tuple(fan_edges(n))))
        if challenge == 0:
            return ProofRound(commitment, RevealPermutation(tuple(self._perm), edges))
        if self._guess == 1:
            # committed graph is the relabeled ring: its edges are a Hamiltonian cycle
            return ProofRound(commitment, RevealCycle(edges, edges))
        return ProofRound(commitment, RevealCycle(edges, tuple(fan_edges(n))))


class FakeProver:
    def __init__(self, graph, mode="guess", rng=None):
        if mode not in MODES and mode != "random":
            raise ValueError(f"unknown mode {mode!r}")
        if graph.vertex_count() < 4:
            # on 3 vertices every 3 distinct edges form the triangle
            raise ValueError(f"fake prover needs at least 4 vertices, got {graph.vertex_count()}")
        self.graph = graph
        self.mode = mode
        self.rng = resolve(rng)

    def start_round(self) -> FakeRound:
        mode = self.mode
        if mode == "random":
            mode = MODES[self.rng.randbelow(len(MODES))]
        return FakeRound(self.graph, mode, self.rng)

    def prove_round(self, challenge: int) -> ProofRound:
        return self.start_round().respond(challenge)

    def generate_proof(self, k: int, challenges) -> Proof:
        challenges = list(challenges)
        if len(challenges) != k:
            raise ProtocolStructureError(f"expected {k} challenges, got {len(challenges)}")
        return Proof(k, tuple(self.prove_round(c) for c in challenges))


def petersen() -> Graph:
    # 10 vertices, 3-regular, no Hamiltonian cycle
    G = nx.petersen_graph()
    return Graph(G.number_of_nodes(), list(G.edges()))


def main(trials=20, rounds=8, mode="guess", graph=None, seed=None):
    from verifier import Verifier
    from zkp_session import run_interactive

    graph = graph if graph is not None else petersen()
    rng = HmacCounterDRBG.from_seed(seed) if seed is not None else None
    stats = {"total": 0, "accepted": 0, "rejected": 0}
    reasons = {}
    for t in range(trials):
        stats["total"] += 1
        prover = FakeProver(graph, mode, rng)
        verifier = Verifier(rng)
        verdict = run_interactive(prover, verifier, graph, rounds, verbose=False)
        if verdict.accepted:
            print(f"[attacker] trial {t+1}/{trials}: VERIFIER ACCEPTED forged proof")
            stats["accepted"] += 1
        else:
            stats["rejected"] += 1
            reasons[verdict.reason.value] = reasons.get(verdict.reason.value, 0) + 1
    print(f"[attacker] summary: {stats} reasons={reasons}")
    print(f"[attacker] expected acceptance for a guessing prover: 2^-{rounds} = {2.0 ** -rounds:.6f}")
    return stats


def cli(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument("--trials", type=int, default=20)
    p.add_argument("--rounds", type=int, default=8)
    p.add_argument("--mode", choices=list(MODES) + ["random"], default="guess")
    p.add_argument("--graph", default=None, help="graph file (default: Petersen graph)")
    p.add_argument("--index-base", type=int, choices=[0, 1], default=0)
    p.add_argument("--seed", default=None, help="hex seed for a reproducible run")
    args = p.parse_args(argv)

    g = None
    if args.graph:
        from graph_io import load_graph
        g = load_graph(args.graph, args.index_base)
    main(args.trials, args.rounds, args.mode, g, bytes.fromhex(args.seed) if args.seed else None)


if __name__ == "__main__":
    cli()
