import pytest

from models.base import ImportRecord
from models.edge import Edge
from models.module_node import ModuleNode
from tests.utils import make_graph, module_id


def test_add_edge__on_missing_endpoint__raises() -> None:
    graph = make_graph([], nodes=["a.py"])
    graph._frozen = False

    with pytest.raises(ValueError):
        graph.add_edge(Edge(src=module_id("a.py"), dst=module_id("missing.py")))


def test_frozen_graph__rejects_mutation() -> None:
    graph = make_graph([("a.py", "b.py")])

    with pytest.raises(RuntimeError):
        graph.add_node(ModuleNode(id=module_id("c.py"), language="python"))
    with pytest.raises(RuntimeError):
        graph.add_edge(Edge(src=module_id("b.py"), dst=module_id("a.py")))


def test_add_node__on_duplicate_id__raises() -> None:
    graph = make_graph([], nodes=["a.py"])
    graph._frozen = False

    with pytest.raises(ValueError):
        graph.add_node(ModuleNode(id=module_id("a.py"), language="python"))


def test_queries__return_sorted_distinct_neighbors() -> None:
    graph = make_graph(
        [
            ("a.py", "c.py", ["x"]),
            ("a.py", "b.py"),
            ("a.py", "c.py", ["y"]),
            ("d.py", "a.py"),
            ("b.py", "a.py"),
        ]
    )

    assert len(graph.outgoing(module_id("a.py"))) == 3
    assert graph.dependencies(module_id("a.py")) == [module_id("b.py"), module_id("c.py")]
    assert graph.dependents(module_id("a.py")) == [module_id("b.py"), module_id("d.py")]
    assert graph.neighbors(module_id("a.py")) == [
        module_id("b.py"),
        module_id("c.py"),
        module_id("d.py"),
    ]


def test_relative__returns_root_relative_posix_path() -> None:
    graph = make_graph([], nodes=["pkg/mod.py"])

    assert graph.relative(module_id("pkg/mod.py")) == "pkg/mod.py"
    assert graph.relative("/elsewhere/x.py") == "../elsewhere/x.py"


@pytest.mark.parametrize(
    "record, expected",
    [
        (ImportRecord(path=("a", "b")), "a/b"),
        (ImportRecord(path=("a",), relative_depth=1), "./a"),
        (ImportRecord(path=("a",), relative_depth=3), "../../a"),
        (ImportRecord(relative_depth=1), "./"),
    ],
)
def test_import_record_specifier__renders_relative_markers(
    record: ImportRecord, expected: str
) -> None:
    assert record.specifier == expected
