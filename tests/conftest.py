import pytest
from hypothesis import strategies as st
from hypothesis.strategies import composite

from graph_model import Graph
from rng import HmacCounterDRBG


FIVE_CYCLE_EDGES = [(0, 1), (1, 2), (2, 3), (3, 4), (4, 0)]


@pytest.fixture
def five_cycle():
    return Graph(5, FIVE_CYCLE_EDGES)


@pytest.fixture
def house():
    # 5-cycle 0-1-2-3-4 plus the chord (1, 4)
    return Graph(5, FIVE_CYCLE_EDGES + [(1, 4)])


@pytest.fixture
def drbg():
    def make(label=b"test"):
        return HmacCounterDRBG.from_seed(b"fixed-test-seed", label)
    return make


@composite
def hamiltonian_graphs(draw, min_n=3, max_n=10):
    """(graph, cycle) with a planted cycle in random vertex order plus random chords."""
    n = draw(st.integers(min_value=min_n, max_value=max_n))
    cycle = draw(st.permutations(list(range(n))))
    extra = draw(st.lists(
        st.tuples(st.integers(0, n - 1), st.integers(0, n - 1)).filter(lambda e: e[0] != e[1]),
        max_size=2 * n,
    ))
    edges = [(cycle[i], cycle[(i + 1) % n]) for i in range(n)] + extra
    return Graph(n, edges), list(cycle)
