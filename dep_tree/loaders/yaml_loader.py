from __future__ import annotations

import logging
from pathlib import Path
from typing import TypedDict

import yaml

from models.graph import ModuleGraph
from models.metrics import Cycle, EntropyReport

logger = logging.getLogger(__name__)


class _LiteralString(str):
    """Marker type to force YAML literal block style (|) for multi-line strings."""


def _literal_str_representer(dumper: yaml.SafeDumper, data: _LiteralString):  # type: ignore[name-defined]
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(data), style="|")


yaml.SafeDumper.add_representer(_LiteralString, _literal_str_representer)  # type: ignore[arg-type]


class ErrorRow(TypedDict):
    kind: str
    message: str


class NodeRow(TypedDict, total=False):
    id: str
    language: str
    imports: list[str]
    errors: list[ErrorRow]
    entropy: float


class EdgeRow(TypedDict):
    src: str
    dst: str
    symbols: list[str]
    wildcard: bool
    reexport: bool


class GraphYAML(TypedDict, total=False):
    root: str
    entrypoints: list[str]
    nodes: list[NodeRow]
    edges: list[EdgeRow]
    cycles: list[list[str]]
    entropy: float


class YamlLoader:
    """Persist a module graph as YAML.

    Module ids are written root-relative so the output does not depend on
    where the project is checked out. Multi-line error messages are emitted
    as YAML literal blocks (|).
    """

    def __init__(self, output_path: str | Path | None = None, indent: int = 2) -> None:
        """Create a YAML loader.

        Args:
            output_path: Target file. ``None`` only allows ``dumps``.
            indent: Indentation level for pretty-printing YAML.
        """
        self.output_path: Path | None = Path(output_path) if output_path else None
        self.indent: int = indent

    def _to_serializable(
        self,
        graph: ModuleGraph,
        cycles: list[Cycle] | None = None,
        report: EntropyReport | None = None,
    ) -> GraphYAML:
        """Convert the graph into plain Python structures suitable for YAML dumping."""
        node_rows: list[NodeRow] = []
        for module_id in sorted(graph.nodes, key=graph.relative):
            node = graph.nodes[module_id]
            errors: list[ErrorRow] = []
            for error in node.errors:
                message = error.message
                if "\n" in message or "\r" in message:
                    message = _LiteralString(message)
                errors.append({"kind": str(error.kind), "message": message})
            row: NodeRow = {
                "id": graph.relative(module_id),
                "language": node.language,
                "imports": [record.specifier for record in node.raw_imports],
                "errors": errors,
            }
            if report is not None and module_id in report.nodes:
                row["entropy"] = round(report.nodes[module_id].entropy, 6)
            node_rows.append(row)

        edge_rows: list[EdgeRow] = [
            {
                "src": graph.relative(edge.src),
                "dst": graph.relative(edge.dst),
                "symbols": sorted(str(symbol) for symbol in edge.imported_symbols),
                "wildcard": edge.is_wildcard,
                "reexport": edge.is_reexport,
            }
            for edge in graph.edges
        ]

        payload: GraphYAML = {
            "root": graph.root.as_posix(),
            "entrypoints": [graph.relative(entry) for entry in graph.entry_ids],
            "nodes": node_rows,
            "edges": edge_rows,
        }
        if cycles is not None:
            payload["cycles"] = [
                [graph.relative(member) for member in cycle.members] for cycle in cycles
            ]
        if report is not None:
            payload["entropy"] = round(report.graph_entropy, 6)
        return payload

    def dumps(
        self,
        graph: ModuleGraph,
        cycles: list[Cycle] | None = None,
        report: EntropyReport | None = None,
    ) -> str:
        return yaml.safe_dump(
            self._to_serializable(graph, cycles, report),
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False,
            indent=self.indent,
            width=4096,  # avoid line folding for readability
        )

    def load(
        self,
        graph: ModuleGraph,
        cycles: list[Cycle] | None = None,
        report: EntropyReport | None = None,
    ) -> None:
        """Write the graph to the configured YAML file.

        Args:
            graph: The module graph to export.
            cycles: Optional cycles to include.
            report: Optional entropy report; adds per-node and graph scores.
        """
        if self.output_path is None:
            raise ValueError("YamlLoader.load needs an output path")
        if self.output_path.parent and not self.output_path.parent.exists():
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

        content = self.dumps(graph, cycles, report)

        try:
            with self.output_path.open("w", encoding="utf-8") as f:
                f.write(content)
        except OSError:
            logger.exception("Failed to write module graph YAML to %s", self.output_path)
            raise
