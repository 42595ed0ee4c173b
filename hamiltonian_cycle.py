# hamiltonian_cycle.py
# A Hamiltonian cycle is a list of the n vertices in visiting order; the last
# vertex connects back to the first.

from graph_model import normalize_edge


def is_valid_hamiltonian_cycle(cycle, graph) -> bool:
    n = graph.vertex_count()
    # a cycle in a simple graph needs at least 3 distinct vertices
    if n < 3 or len(cycle) != n:
        return False
    seen = [False] * n
    for v in cycle:
        if isinstance(v, bool) or not isinstance(v, int):
            return False
        if v < 0 or v >= n or seen[v]:
            return False
        seen[v] = True
    for i in range(n):
        if not graph.has_edge(cycle[i], cycle[(i + 1) % n]):
            return False
    return True


def cycle_edges(cycle) -> list[tuple[int, int]]:
    """Closing edges of a vertex sequence, each normalized to (min, max)."""
    n = len(cycle)
    return [normalize_edge(cycle[i], cycle[(i + 1) % n]) for i in range(n)]
