# graph_io.py
"""
Text formats at the edge of the system.

Graph file : first line "n m", then m lines "u v" (vertex numbering starts at
             index_base, 0 by default). Duplicate edges are rejected here so the
             core always receives a duplicate-free, zero-based edge list.
Cycle file : one line of whitespace-separated zero-based vertex indices.
Proof file : JSON, see zkp_types.proof_to_dict.
Challenges : JSON {"challenges": [0|1, ...]}, written by the verifier side of a
             batch run and required to check a proof file.

Writes are atomic: .tmp + fsync + replace.
"""

import json, os

from errors import ConstructionError, GraphFormatError
from graph_model import Graph, normalize_edge
from zkp_types import is_challenge_bit, proof_from_dict, proof_to_dict

MAX_VERTICES = 1000


def atomic_write(path, data: str):
    tmp = path + ".tmp"
    with open(tmp, "w") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())
    os.replace(tmp, path)


def _parse_ints(line, lineno):
    try:
        return [int(tok) for tok in line.split()]
    except ValueError:
        raise GraphFormatError(f"line {lineno}: expected integers, got {line.strip()!r}") from None


def parse_graph(text: str, index_base: int = 0) -> Graph:
    lines = [ln for ln in text.splitlines() if ln.strip()]
    if not lines:
        raise GraphFormatError("empty graph description")
    header = _parse_ints(lines[0], 1)
    if len(header) != 2:
        raise GraphFormatError("first line must contain n and m")
    n, m = header
    if n < 0 or m < 0:
        raise GraphFormatError(f"invalid n or m: n={n}, m={m}")
    if n > MAX_VERTICES:
        raise GraphFormatError(f"n must be <= {MAX_VERTICES}, got {n}")
    if len(lines) - 1 != m:
        raise GraphFormatError(f"header announces {m} edges, found {len(lines) - 1} edge lines")

    edges = []
    seen = set()
    for lineno, line in enumerate(lines[1:], start=2):
        pair = _parse_ints(line, lineno)
        if len(pair) != 2:
            raise GraphFormatError(f"line {lineno}: edge must contain two vertices")
        u, v = pair[0] - index_base, pair[1] - index_base
        if not (0 <= u < n and 0 <= v < n):
            raise GraphFormatError(f"line {lineno}: edge ({pair[0]}, {pair[1]}) out of range (n={n})")
        if u == v:
            raise GraphFormatError(f"line {lineno}: self-loop on vertex {pair[0]}")
        e = normalize_edge(u, v)
        if e in seen:
            raise GraphFormatError(f"line {lineno}: duplicate edge ({pair[0]}, {pair[1]})")
        seen.add(e)
        edges.append(e)
    try:
        return Graph(n, edges)
    except ConstructionError as e:
        raise GraphFormatError(str(e)) from e


def format_graph(graph: Graph, index_base: int = 0) -> str:
    out = [f"{graph.vertex_count()} {graph.edge_count()}"]
    out += [f"{u + index_base} {v + index_base}" for u, v in graph.edges()]
    return "\n".join(out) + "\n"


def parse_cycle(text: str, n=None) -> list[int]:
    lines = [ln for ln in text.splitlines() if ln.strip()]
    if not lines:
        raise GraphFormatError("empty cycle description")
    cycle = _parse_ints(lines[0], 1)
    if n is not None:
        if len(cycle) != n:
            raise GraphFormatError(f"cycle must list {n} vertices, got {len(cycle)}")
        if any(v < 0 or v >= n for v in cycle):
            raise GraphFormatError(f"cycle vertex out of range (n={n})")
    if len(set(cycle)) != len(cycle):
        raise GraphFormatError("cycle repeats a vertex")
    return cycle


def format_cycle(cycle) -> str:
    return " ".join(str(v) for v in cycle) + "\n"


def load_graph(path, index_base: int = 0) -> Graph:
    with open(path, "r") as f:
        return parse_graph(f.read(), index_base)


def write_graph(path, graph: Graph, index_base: int = 0):
    atomic_write(path, format_graph(graph, index_base))


def load_cycle(path, n=None) -> list[int]:
    with open(path, "r") as f:
        return parse_cycle(f.read(), n)


def write_cycle(path, cycle):
    atomic_write(path, format_cycle(cycle))


def load_proof(path):
    with open(path, "r") as f:
        try:
            obj = json.load(f)
        except json.JSONDecodeError as e:
            raise GraphFormatError(f"{path}: not valid JSON ({e})") from e
    return proof_from_dict(obj)


def write_proof(path, proof, extra=None):
    obj = proof_to_dict(proof)
    if extra:
        obj.update(extra)
    atomic_write(path, json.dumps(obj))


def load_challenges(path, k=None) -> list[int]:
    """Challenge bits the verifier issued for a batch proof (kept by the verifier)."""
    with open(path, "r") as f:
        try:
            obj = json.load(f)
        except json.JSONDecodeError as e:
            raise GraphFormatError(f"{path}: not valid JSON ({e})") from e
    challenges = obj.get("challenges") if isinstance(obj, dict) else None
    if not isinstance(challenges, list) or not all(is_challenge_bit(c) for c in challenges):
        raise GraphFormatError(f"{path}: expected {{\"challenges\": [0|1, ...]}}")
    if k is not None and len(challenges) != k:
        raise GraphFormatError(f"{path}: expected {k} challenges, got {len(challenges)}")
    return challenges


def write_challenges(path, challenges):
    atomic_write(path, json.dumps({"challenges": list(challenges)}))
