from collections.abc import Iterable, Mapping
from pathlib import Path

from models.base import ImportedName, ModuleID
from models.edge import Edge
from models.graph import ModuleGraph
from models.module_node import ErrorKind, ModuleNode, NodeError

GRAPH_ROOT = Path("/project")


def module_id(name: str) -> ModuleID:
    """Identifier of ``name`` below the in-memory test root."""
    return ModuleID((GRAPH_ROOT / name).as_posix())


def make_graph(
    edges: Iterable[tuple[str, str] | tuple[str, str, Iterable[str]]],
    nodes: Iterable[str] = (),
    errors: Mapping[str, list[str]] | None = None,
    entry: str | None = None,
) -> ModuleGraph:
    """Build a frozen graph from relative names without touching the disk.

    Edges are ``(src, dst)`` or ``(src, dst, symbols)``; nodes are created for
    every name mentioned, in order of appearance.
    """
    edges = list(edges)
    names: list[str] = list(nodes)
    for edge in edges:
        for name in edge[:2]:
            if name not in names:
                names.append(name)

    graph = ModuleGraph(
        root=GRAPH_ROOT, entry_ids=[module_id(entry or names[0])] if names else []
    )
    for name in names:
        node_errors = [
            NodeError(kind=ErrorKind.UNRESOLVED_IMPORT, message=message)
            for message in (errors or {}).get(name, [])
        ]
        graph.add_node(ModuleNode(id=module_id(name), language="python", errors=node_errors))
    for edge in edges:
        symbols = edge[2] if len(edge) > 2 else ()
        graph.add_edge(
            Edge(
                src=module_id(edge[0]),
                dst=module_id(edge[1]),
                imported_symbols=frozenset(ImportedName(name=s) for s in symbols),
            )
        )
    graph.freeze()
    return graph
