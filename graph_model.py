# graph_model.py
# Immutable undirected simple graph over dense vertex ids 0..n-1.
# Adjacency is an arena of frozensets indexed by vertex id (O(1) has_edge).

import numpy as np
import networkx as nx

from errors import ConstructionError
from permutation import invert, validate_permutation


def normalize_edge(u: int, v: int) -> tuple[int, int]:
    return (u, v) if u < v else (v, u)


class Graph:
    def __init__(self, n: int, edges=()):
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise ConstructionError(f"vertex count must be a non-negative int, got {n!r}")
        self._n = n
        adj = [set() for _ in range(n)]
        edge_set = set()
        for edge in edges:
            try:
                u, v = edge
            except (TypeError, ValueError):
                raise ConstructionError(f"edge must be a pair of vertices, got {edge!r}") from None
            for x in (u, v):
                if isinstance(x, bool) or not isinstance(x, int):
                    raise ConstructionError(f"vertex must be an int, got {x!r}")
                if x < 0 or x >= n:
                    raise ConstructionError(f"vertex out of range: {x} (n={n})")
            if u == v:
                raise ConstructionError(f"self-loop on vertex {u} is not allowed")
            adj[u].add(v)
            adj[v].add(u)
            edge_set.add(normalize_edge(u, v))
        self._adj = tuple(frozenset(s) for s in adj)
        self._edges = tuple(sorted(edge_set))
        self._edge_set = frozenset(edge_set)

    # ----- queries -----

    def vertex_count(self) -> int:
        return self._n

    def edge_count(self) -> int:
        return len(self._edges)

    def edges(self) -> list[tuple[int, int]]:
        """Normalized (u < v) edges, ascending by (u, v)."""
        return list(self._edges)

    def has_edge(self, u: int, v: int) -> bool:
        if not (0 <= u < self._n and 0 <= v < self._n):
            return False
        return v in self._adj[u]

    def neighbors(self, v: int) -> frozenset:
        if not 0 <= v < self._n:
            raise IndexError(f"vertex out of range: {v} (n={self._n})")
        return self._adj[v]

    def degree(self, v: int) -> int:
        return len(self.neighbors(v))

    def is_isomorphic_under(self, perm, other: "Graph") -> bool:
        """
        True iff other is exactly perm(self): every edge (u,v) of self maps to an
        edge (perm[u], perm[v]) of other, and every edge of other maps back through
        perm^-1 to an edge of self. Raises InvalidPermutation if perm is not a
        bijection on [0, n).
        """
        n = self._n
        validate_permutation(perm, n)
        if other.vertex_count() != n:
            return False
        if other.edge_count() != self.edge_count():
            return False
        for u, v in self._edges:
            if not other.has_edge(perm[u], perm[v]):
                return False
        inv = invert(perm)
        for u, v in other.edges():
            if not self.has_edge(inv[u], inv[v]):
                return False
        return True

    # ----- conversions -----

    def adjacency_matrix(self) -> np.ndarray:
        mat = np.zeros((self._n, self._n), dtype=np.uint8)
        if self._edges:
            us, vs = np.array(self._edges).T
            mat[us, vs] = 1
            mat[vs, us] = 1
        return mat

    def to_networkx(self) -> nx.Graph:
        G = nx.Graph()
        G.add_nodes_from(range(self._n))
        G.add_edges_from(self._edges)
        return G

    # ----- value semantics -----

    def __eq__(self, other):
        if not isinstance(other, Graph):
            return NotImplemented
        return self._n == other._n and self._edge_set == other._edge_set

    def __hash__(self):
        return hash((self._n, self._edge_set))

    def __repr__(self):
        return f"Graph(n={self._n}, m={len(self._edges)})"
