#!/usr/bin/env python3
"""
enroll.py
- Builds a random graph with a planted Hamiltonian cycle (random vertex order),
  then adds random edges until the average degree is about d_avg
- Writes:
    - graph.txt  (public: "n m" + edge lines)
    - cycle.txt  (secret, or sealed with a passphrase via --seal)
Usage:
    python enroll.py --n 200 --davg 4.0 --out-graph graph.txt --out-cycle cycle.txt
    python enroll.py --n 200 --seal ~/.zkp-ham/cycle
"""

import argparse, os

from graph_io import MAX_VERTICES, write_cycle, write_graph
from graph_model import Graph, normalize_edge
from permutation import generate_random_permutation
from rng import HmacCounterDRBG, resolve

DEFAULT_N = 64
DEFAULT_DAVG = 4.0


def generate_graph_with_planted_cycle(n: int, d_avg: float = DEFAULT_DAVG, rng=None):
    if n < 3:
        raise ValueError("a Hamiltonian cycle needs at least 3 vertices")
    rng = resolve(rng)

    # 1) plant the cycle: edges (sigma[i], sigma[i+1])
    sigma = generate_random_permutation(n, rng)
    edges = {normalize_edge(sigma[i], sigma[(i + 1) % n]) for i in range(n)}

    # 2) noise edges up to ~ n * d_avg / 2 edges in total
    target_edges = min(int(n * d_avg / 2), n * (n - 1) // 2)
    trials = 0
    max_trials = n * 50  # bound so dense targets cannot loop forever
    while len(edges) < target_edges and trials < max_trials:
        trials += 1
        u = rng.randbelow(n)
        v = rng.randbelow(n)
        if u == v:
            continue
        edges.add(normalize_edge(u, v))
    return Graph(n, edges), sigma


def enroll(n, d_avg, out_graph="graph.txt", out_cycle="cycle.txt", seal_path=None, index_base=0, rng=None):
    graph, cycle = generate_graph_with_planted_cycle(n, d_avg, rng)
    write_graph(out_graph, graph, index_base)
    print(f"[enroll] wrote graph to {out_graph} (n={graph.vertex_count()}, m={graph.edge_count()})")

    if seal_path:
        from getpass import getpass
        from cycle_store import seal_cycle
        pw = getpass("Passphrase to seal cycle: ")
        seal_cycle(cycle, pw, seal_path)
        print(f"[enroll] sealed cycle to {seal_path}")
    else:
        write_cycle(out_cycle, cycle)
        print(f"[enroll] wrote cycle to {out_cycle} (keep it secret)")

    degs = [graph.degree(v) for v in range(n)]
    print(f"[deg] min={min(degs)} max={max(degs)} avg={sum(degs)/n:.2f}")
    return graph, cycle


def cli(argv=None):
    p = argparse.ArgumentParser()
    p.add_argument("--n", type=int, default=DEFAULT_N, help="number of vertices")
    p.add_argument("--davg", type=float, default=DEFAULT_DAVG, help="average degree target")
    p.add_argument("--out-graph", default="graph.txt")
    p.add_argument("--out-cycle", default="cycle.txt")
    p.add_argument("--seal", default=None, help="seal the cycle at this base path instead of writing it in clear")
    p.add_argument("--index-base", type=int, choices=[0, 1], default=0)
    p.add_argument("--seed", default=None, help="hex seed for a reproducible instance")
    args = p.parse_args(argv)

    if not 3 <= args.n <= MAX_VERTICES:
        p.error(f"--n must be between 3 and {MAX_VERTICES}")
    rng = HmacCounterDRBG.from_seed(bytes.fromhex(args.seed), b"hamzkp-enroll") if args.seed else None
    seal_path = os.path.expanduser(args.seal) if args.seal else None
    enroll(args.n, args.davg, args.out_graph, args.out_cycle, seal_path, args.index_base, rng)


if __name__ == "__main__":
    cli()
