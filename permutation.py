# permutation.py
# Permutations of [0, n) as lists where perm[i] = pi(i).
# Fisher–Yates driven by an explicit random source (rng.SecureRandom by default).

from errors import InvalidPermutation
from rng import resolve


def is_permutation(perm, n: int) -> bool:
    try:
        if len(perm) != n:
            return False
    except TypeError:
        return False
    seen = [False] * n
    for x in perm:
        if isinstance(x, bool) or not isinstance(x, int):
            return False
        if x < 0 or x >= n or seen[x]:
            return False
        seen[x] = True
    return True


def validate_permutation(perm, n: int) -> None:
    if not is_permutation(perm, n):
        raise InvalidPermutation(f"not a bijection on [0, {n})")


def generate_random_permutation(n: int, rng=None) -> list[int]:
    # uniform over all n! permutations: j uniform on [0, i] with no modulo bias
    rng = resolve(rng)
    perm = list(range(n))
    for i in range(n - 1, 0, -1):
        j = rng.randbelow(i + 1)
        perm[i], perm[j] = perm[j], perm[i]
    return perm


def invert(perm) -> list[int]:
    n = len(perm)
    validate_permutation(perm, n)
    inv = [0] * n
    for i, p in enumerate(perm):
        inv[p] = i
    return inv


def apply_to_graph(graph, perm):
    """Return pi(G): same kind of graph, edge (u, v) relabeled to (pi(u), pi(v))."""
    n = graph.vertex_count()
    validate_permutation(perm, n)
    return type(graph)(n, [(perm[u], perm[v]) for u, v in graph.edges()])


def apply_to_cycle(cycle, perm) -> list[int]:
    n = len(perm)
    validate_permutation(perm, n)
    out = []
    for v in cycle:
        if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v < n:
            raise InvalidPermutation(f"vertex {v!r} outside permutation domain [0, {n})")
        out.append(perm[v])
    return out
