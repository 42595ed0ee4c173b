#!/usr/bin/env python3
"""
graph_visualizer.py

Usage:
  python graph_visualizer.py graph.txt [--cycle cycle.txt] [--out png|html|both] [--sample k]

If --cycle is given its edges are drawn in red (never do this with a real secret).
If --sample k is given and the graph is large, a random induced subgraph of k vertices is drawn.
"""
import sys, os, argparse, random
import numpy as np
import networkx as nx

from graph_io import load_cycle, load_graph
from hamiltonian_cycle import cycle_edges


def graph_from_adj(mat: np.ndarray) -> nx.Graph:
    return nx.from_numpy_array(mat)


def to_nx(graph, cycle=None) -> nx.Graph:
    G = graph_from_adj(graph.adjacency_matrix())
    highlighted = set(cycle_edges(cycle)) if cycle else set()
    for u, v in G.edges():
        G.edges[u, v]["on_cycle"] = (min(u, v), max(u, v)) in highlighted
    return G


def sample_subgraph(G: nx.Graph, sample=None) -> nx.Graph:
    if sample and sample < G.number_of_nodes():
        nodes = random.sample(list(G.nodes()), sample)
        return G.subgraph(nodes).copy()
    return G


def draw_static(G, outpath, sample=None):
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    Gs = sample_subgraph(G, sample)
    plt.figure(figsize=(10, 10))
    pos = nx.spring_layout(Gs, seed=42, iterations=100)
    colors = ["red" if d.get("on_cycle") else "gray" for _, _, d in Gs.edges(data=True)]
    nx.draw_networkx_nodes(Gs, pos, node_size=60)
    nx.draw_networkx_edges(Gs, pos, edge_color=colors, alpha=0.6, width=0.8)
    if Gs.number_of_nodes() <= 100:
        nx.draw_networkx_labels(Gs, pos, font_size=7)
    plt.axis("off")
    plt.tight_layout()
    plt.savefig(outpath, dpi=200)
    plt.close()
    print(f"[OK] saved static image to {outpath}")


def export_html(G, outpath, sample=None):
    from pyvis.network import Network
    Gs = sample_subgraph(G, sample)
    net = Network(height="800px", width="100%", notebook=False, cdn_resources="remote")
    for v in Gs.nodes():
        net.add_node(int(v), label=str(v))
    for u, v, d in Gs.edges(data=True):
        net.add_edge(int(u), int(v), color="red" if d.get("on_cycle") else "gray")
    net.write_html(outpath)
    print(f"[OK] saved interactive HTML to {outpath}")


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument("file", help="graph file")
    ap.add_argument("--cycle", default=None, help="cycle file to highlight")
    ap.add_argument("--index-base", type=int, choices=[0, 1], default=0)
    ap.add_argument("--out", choices=["png", "html", "both"], default="png")
    ap.add_argument("--sample", type=int, default=None, help="sample k vertices (recommended for large graphs)")
    args = ap.parse_args(argv)

    if not os.path.exists(args.file):
        print("File not found:", args.file); sys.exit(1)
    graph = load_graph(args.file, args.index_base)
    cycle = load_cycle(args.cycle, graph.vertex_count()) if args.cycle else None
    G = to_nx(graph, cycle)
    print(f"Graph loaded: n={graph.vertex_count()}, m={G.number_of_edges()} edges")

    base = os.path.splitext(args.file)[0]
    if args.out in ("png", "both"):
        draw_static(G, base + ".png", sample=args.sample)
    if args.out in ("html", "both"):
        export_html(G, base + ".html", sample=args.sample)


if __name__ == "__main__":
    main()
