from __future__ import annotations

import os
from collections import defaultdict
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from models.base import ModuleID
from models.edge import Edge
from models.module_node import ModuleNode, NodeError


class ModuleGraph(BaseModel):
    """Module nodes and the edges between them.

    The graph is filled by the graph builder and frozen once the build
    completes. Every edge references nodes that exist in ``nodes``.
    """

    root: Path = Field(..., description="Project root used for display paths")
    entry_ids: list[ModuleID] = Field(default_factory=list)
    nodes: dict[ModuleID, ModuleNode] = Field(default_factory=dict)
    edges: list[Edge] = Field(default_factory=list)

    _outgoing: dict[ModuleID, list[Edge]] = PrivateAttr(
        default_factory=lambda: defaultdict(list)
    )
    _incoming: dict[ModuleID, list[Edge]] = PrivateAttr(
        default_factory=lambda: defaultdict(list)
    )
    _frozen: bool = PrivateAttr(default=False)

    def model_post_init(self, context: Any) -> None:
        for edge in self.edges:
            self._index(edge)
        return super().model_post_init(context)

    def _index(self, edge: Edge) -> None:
        self._outgoing[edge.src].append(edge)
        self._incoming[edge.dst].append(edge)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("module graph is read-only once the build completed")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def add_node(self, node: ModuleNode) -> None:
        self._check_mutable()
        if node.id in self.nodes:
            raise ValueError(f"Duplicate module id {node.id!s}")
        self.nodes[node.id] = node

    def add_edge(self, edge: Edge) -> None:
        self._check_mutable()
        for endpoint in (edge.src, edge.dst):
            if endpoint not in self.nodes:
                raise ValueError(f"Edge endpoint {endpoint!s} is not a module of the graph")
        self.edges.append(edge)
        self._index(edge)

    def replace_edges(self, edges: list[Edge]) -> None:
        """Swap the whole edge list, rebuilding the adjacency index."""

        self._check_mutable()
        self.edges = []
        self._outgoing = defaultdict(list)
        self._incoming = defaultdict(list)
        for edge in edges:
            self.add_edge(edge)

    def node(self, module_id: str) -> ModuleNode:
        return self.nodes[ModuleID(module_id)]

    def outgoing(self, module_id: str) -> list[Edge]:
        return list(self._outgoing.get(ModuleID(module_id), ()))

    def incoming(self, module_id: str) -> list[Edge]:
        return list(self._incoming.get(ModuleID(module_id), ()))

    def dependencies(self, module_id: str) -> list[ModuleID]:
        """Distinct imported modules, sorted."""

        return sorted({edge.dst for edge in self.outgoing(module_id)})

    def dependents(self, module_id: str) -> list[ModuleID]:
        """Distinct importing modules, sorted."""

        return sorted({edge.src for edge in self.incoming(module_id)})

    def neighbors(self, module_id: str) -> list[ModuleID]:
        """Dependencies followed by dependents that are not also dependencies."""

        dependencies = self.dependencies(module_id)
        seen = set(dependencies)
        return dependencies + [
            dependent for dependent in self.dependents(module_id) if dependent not in seen
        ]

    def errors(self, module_id: str) -> list[NodeError]:
        return list(self.node(module_id).errors)

    def all_errors(self) -> Iterator[tuple[ModuleID, NodeError]]:
        for module_id in sorted(self.nodes):
            for error in self.nodes[module_id].errors:
                yield module_id, error

    def relative(self, module_id: str) -> str:
        """Root-relative POSIX path of a module, used for display and rules."""

        absolute = Path(module_id)
        try:
            return absolute.relative_to(self.root).as_posix()
        except ValueError:
            return Path(os.path.relpath(absolute, self.root)).as_posix()

    def __len__(self) -> int:
        return len(self.nodes)
