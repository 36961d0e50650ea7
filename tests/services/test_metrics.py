import math

import pytest

from models.metrics import Weighting
from services.metrics import entropy, find_cycles, shannon_entropy
from tests.utils import make_graph, module_id


def test_find_cycles__on_acyclic_graph__returns_nothing() -> None:
    graph = make_graph([("a.py", "b.py"), ("b.py", "c.py"), ("a.py", "c.py")])

    assert find_cycles(graph) == []


@pytest.mark.parametrize(
    "edges",
    [
        [("a.py", "b.py"), ("b.py", "c.py"), ("c.py", "a.py")],
        [("c.py", "a.py"), ("b.py", "c.py"), ("a.py", "b.py")],
        [("b.py", "c.py"), ("c.py", "a.py"), ("a.py", "b.py")],
    ],
)
def test_find_cycles__on_triangle__returns_one_component_regardless_of_insertion_order(
    edges: list[tuple[str, str]],
) -> None:
    (cycle,) = find_cycles(make_graph(edges))

    assert cycle.members == (module_id("a.py"), module_id("b.py"), module_id("c.py"))
    assert not cycle.is_self_loop


def test_find_cycles__on_self_import__returns_self_loop() -> None:
    (cycle,) = find_cycles(make_graph([("a.py", "a.py"), ("a.py", "b.py")]))

    assert cycle.members == (module_id("a.py"),)
    assert cycle.is_self_loop
    assert module_id("a.py") in cycle


def test_find_cycles__on_separate_cycles__orders_by_smallest_member() -> None:
    graph = make_graph(
        [
            ("x.py", "y.py"),
            ("y.py", "x.py"),
            ("b.py", "c.py"),
            ("c.py", "b.py"),
            ("c.py", "x.py"),
        ]
    )

    cycles = find_cycles(graph)

    assert [cycle.members for cycle in cycles] == [
        (module_id("b.py"), module_id("c.py")),
        (module_id("x.py"), module_id("y.py")),
    ]


@pytest.mark.parametrize(
    "weights, expected",
    [
        ([], 0.0),
        ([5], 0.0),
        ([1, 1], 1.0),
        ([2, 2, 2, 2], 2.0),
        ([1, 1, 1], math.log2(3)),
    ],
)
def test_shannon_entropy__on_distribution__returns_base_2_entropy(
    weights: list[int], expected: float
) -> None:
    assert shannon_entropy(weights) == pytest.approx(expected)


def test_entropy__on_single_neighbor__is_zero() -> None:
    report = entropy(make_graph([("a.py", "b.py", ["x", "y"])]))

    assert report.nodes[module_id("a.py")].entropy == 0.0
    assert report.graph_entropy == 0.0


def test_entropy__on_equal_neighbors__is_log2_k() -> None:
    graph = make_graph([("a.py", "b.py"), ("a.py", "c.py"), ("a.py", "d.py")])

    node = entropy(graph).nodes[module_id("a.py")]

    assert node.entropy == pytest.approx(math.log2(3))
    assert node.out_degree == 3
    assert node.weight == 3


def test_entropy__weighting_changes_the_distribution() -> None:
    graph = make_graph([("a.py", "b.py", ["x", "y", "z"]), ("a.py", "c.py", ["w"])])

    by_symbols = entropy(graph, Weighting.SYMBOLS).nodes[module_id("a.py")]
    by_edges = entropy(graph, Weighting.EDGES).nodes[module_id("a.py")]

    assert by_symbols.entropy == pytest.approx(-(0.75 * math.log2(0.75) + 0.25 * math.log2(0.25)))
    assert by_edges.entropy == pytest.approx(1.0)


def test_entropy__graph_score_is_weighted_mean_of_importing_modules() -> None:
    graph = make_graph(
        [
            ("a.py", "b.py"),
            ("a.py", "c.py"),
            ("b.py", "c.py"),
        ]
    )

    report = entropy(graph, Weighting.EDGES)

    # a: entropy 1 with weight 2, b: entropy 0 with weight 1, c imports nothing
    assert report.graph_entropy == pytest.approx(2 / 3)
    assert report.nodes[module_id("c.py")].in_degree == 2


def test_entropy__on_graph_without_edges__is_zero() -> None:
    report = entropy(make_graph([], nodes=["a.py"]))

    assert report.graph_entropy == 0.0
    assert report.nodes[module_id("a.py")].entropy == 0.0
