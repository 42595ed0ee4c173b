#!/usr/bin/env python3
"""
zkp_session.py
Runs a Prover and a Verifier against the same public graph and reports the result.

Two ways to run k rounds:
  interactive : per round commit -> challenge -> respond -> verify (fail-fast)
  batch       : verifier draws all k challenges, prover builds the whole proof,
                verifier checks it against the challenges it issued

Usage:
    python zkp_session.py prove --graph graph.txt --cycle cycle.txt --rounds 20
    python zkp_session.py prove --graph graph.txt --sealed-cycle ~/.zkp-ham/cycle --mode batch \
        --proof-out proof.json --challenges-out challenges.json
    python zkp_session.py verify --graph graph.txt --proof proof.json --challenges challenges.json
"""

import argparse, sys

from errors import ProtocolStructureError, Verdict, VerificationFailure, ZKPError
from graph_io import load_challenges, load_cycle, load_graph, load_proof, write_challenges, write_proof
from prover import Prover
from rng import HmacCounterDRBG
from verifier import Verifier

DEFAULT_ROUNDS = 20


def _report(tag, rr, k, verbose):
    if verbose and (rr == 1 or rr % 32 == 0 or rr == k):
        print(f"[{tag}] passed {rr}/{k} rounds...")


def run_interactive(prover, verifier, graph, k: int, verbose: bool = True) -> Verdict:
    if isinstance(k, bool) or not isinstance(k, int) or k < 1:
        raise ProtocolStructureError(f"round count must be a positive int, got {k!r}")
    for rr in range(k):
        # 1) commit: the verifier only keeps the digest
        rnd = prover.start_round()
        digest = rnd.digest
        # 2) challenge, drawn after the commitment is fixed
        c = verifier.generate_challenge()
        # 3) response
        answer = rnd.respond(c)
        if answer.commitment.digest != digest:
            verdict = Verdict.reject(VerificationFailure.COMMITMENT_MISMATCH,
                                     "commitment changed after the challenge", rr)
        else:
            verdict = verifier.verify_round(answer, graph, expected_challenge=c).at_round(rr)
        if not verdict:
            if verbose:
                print(f"[verifier] round {rr} failed: {verdict.reason.value} ({verdict.detail})")
            return verdict
        _report("verifier", rr + 1, k, verbose)
    return Verdict.ok()


def run_batch(prover, verifier, graph, k: int, verbose: bool = True, challenges=None):
    if challenges is None:
        challenges = verifier.generate_challenges(k)
    if verbose:
        print(f"[verifier] issued {k} challenges")
    proof = prover.generate_proof(k, challenges)
    if verbose:
        print(f"[prover] built proof with {len(proof.rounds)} rounds")
    verdict = verifier.verify_proof(proof, graph, expected_challenges=challenges)
    return proof, verdict


def print_result(verdict: Verdict):
    if verdict.accepted:
        print("[session] RESULT: proof ACCEPTED")
    elif verdict.failed_round_index is not None:
        print(f"[session] RESULT: proof REJECTED at round {verdict.failed_round_index}: "
              f"{verdict.reason.value} ({verdict.detail})")
    else:
        print(f"[session] RESULT: proof REJECTED: {verdict.reason.value} ({verdict.detail})")


def cmd_prove(args) -> int:
    graph = load_graph(args.graph, args.index_base)
    n = graph.vertex_count()
    if args.sealed_cycle:
        from getpass import getpass
        from cycle_store import unseal_cycle
        pw = getpass("Passphrase to unseal cycle: ")
        cycle = unseal_cycle(pw, args.sealed_cycle, n)
    else:
        cycle = load_cycle(args.cycle, n)
    print(f"[session] graph: {n} vertices, {graph.edge_count()} edges")
    print(f"[session] {args.rounds} rounds, soundness error 2^-{args.rounds} = {2.0 ** -args.rounds:.3g}")

    rng = HmacCounterDRBG.from_seed(bytes.fromhex(args.seed)) if args.seed else None
    prover = Prover(graph, cycle, rng)
    cycle = None
    verifier = Verifier(rng)
    verbose = not args.quiet

    if args.mode == "interactive":
        verdict = run_interactive(prover, verifier, graph, args.rounds, verbose)
    else:
        challenges = verifier.generate_challenges(args.rounds)
        proof, verdict = run_batch(prover, verifier, graph, args.rounds, verbose, challenges)
        if args.proof_out:
            write_proof(args.proof_out, proof)
            write_challenges(args.challenges_out, challenges)
            print(f"[session] wrote proof to {args.proof_out}, challenges to {args.challenges_out}")
    print_result(verdict)
    return 0 if verdict.accepted else 1


def cmd_verify(args) -> int:
    graph = load_graph(args.graph, args.index_base)
    proof = load_proof(args.proof)
    # the round challenge fields are written by the prover; only the issued bits count
    challenges = load_challenges(args.challenges)
    print(f"[verifier] checking {len(proof.rounds)} rounds (declared k={proof.k})")
    verdict = Verifier().verify_proof(proof, graph, expected_challenges=challenges)
    print_result(verdict)
    return 0 if verdict.accepted else 1


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Hamiltonian-cycle zero-knowledge proof session")
    sub = p.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("prove", help="run prover and verifier on a graph")
    pp.add_argument("--graph", required=True)
    src = pp.add_mutually_exclusive_group(required=True)
    src.add_argument("--cycle", help="plain cycle file (zero-based vertices)")
    src.add_argument("--sealed-cycle", help="base path of a sealed cycle (see cycle_store.py)")
    pp.add_argument("--rounds", type=int, default=DEFAULT_ROUNDS)
    pp.add_argument("--mode", choices=["interactive", "batch"], default="interactive")
    pp.add_argument("--proof-out", default=None, help="write the proof as JSON (batch mode)")
    pp.add_argument("--challenges-out", default=None,
                    help="write the issued challenges as JSON (batch mode, required with --proof-out)")
    pp.add_argument("--seed", default=None, help="hex seed: deterministic replay, NOT for real proofs")
    pp.add_argument("--index-base", type=int, choices=[0, 1], default=0)
    pp.add_argument("--quiet", action="store_true")
    pp.set_defaults(func=cmd_prove)

    pv = sub.add_parser("verify", help="verify a proof file")
    pv.add_argument("--graph", required=True)
    pv.add_argument("--proof", required=True)
    pv.add_argument("--challenges", required=True, help="challenges issued for this proof (from --challenges-out)")
    pv.add_argument("--index-base", type=int, choices=[0, 1], default=0)
    pv.set_defaults(func=cmd_verify)

    args = p.parse_args(argv)
    if args.cmd == "prove" and args.rounds < 1:
        p.error("--rounds must be >= 1")
    if args.cmd == "prove" and args.proof_out and not args.challenges_out:
        p.error("--proof-out needs --challenges-out: a proof is only checkable against the issued challenges")
    try:
        return args.func(args)
    except ZKPError as e:
        print(f"[session] error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
