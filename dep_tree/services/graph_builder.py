import logging
import threading
from collections import defaultdict
from collections.abc import Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from functools import cached_property
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from errors import (
    BuildCancelledError,
    EntryFileError,
    ExtractionError,
    NoEntryFilesError,
    UnresolvedImportError,
)
from models.base import ImportedName, ImportRecord, ModuleID
from models.config import ModuleSystemConfig
from models.edge import Edge
from models.graph import ModuleGraph
from models.module_node import ErrorKind, ModuleNode, NodeError
from services.languages.base import Language
from services.resolver import PathResolver
from utils import globs

logger = logging.getLogger(__name__)


class FileResult(BaseModel):
    """Outcome of processing one file, handed back to the graph owner."""

    node: ModuleNode
    targets: list[tuple[ImportRecord, ModuleID]] = Field(default_factory=list)


class GraphBuilder(BaseModel):
    """Build a module graph by following imports from a set of entry files.

    Files are read, parsed and resolved by a bounded pool of worker threads.
    Workers only return results; the calling thread is the single writer of
    the visited set and the graph.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: Path
    language: Language
    config: ModuleSystemConfig = Field(default_factory=ModuleSystemConfig)
    workers: int = Field(default=8, ge=1)
    stop_event: threading.Event = Field(default_factory=threading.Event)

    @cached_property
    def resolver(self) -> PathResolver:
        return PathResolver(root=self.root, language=self.language, config=self.config)

    @cached_property
    def _root(self) -> Path:
        return self.root.resolve()

    def is_excluded(self, module_id: str) -> bool:
        """Whether a module path matches one of the exclude globs."""

        relative = Path(module_id)
        try:
            relative = relative.relative_to(self._root)
        except ValueError:
            pass
        return any(
            globs.match(pattern, module_id) or globs.match(pattern, relative.as_posix())
            for pattern in self.config.exclude
        )

    def build(self, entry_files: Iterable[Path]) -> ModuleGraph:
        """Traverse the import graph reachable from ``entry_files``.

        Args:
            entry_files: Files to start the traversal from.

        Returns:
            The frozen module graph.

        Raises:
            NoEntryFilesError: If no entry file was given.
            EntryFileError: If an entry file cannot be read.
            BuildCancelledError: If ``stop_event`` was set during the build.
        """

        entry_ids: list[ModuleID] = list(
            dict.fromkeys(ModuleID.from_path(path) for path in entry_files)
        )
        if not entry_ids:
            raise NoEntryFilesError("no entry files were provided")

        graph = ModuleGraph(root=self._root, entry_ids=entry_ids)
        visited: set[ModuleID] = set()
        results: dict[ModuleID, FileResult] = {}
        pending: dict[Future[FileResult], ModuleID] = {}

        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="dep-tree"
        ) as pool:

            def enqueue(module_id: ModuleID, is_entry: bool = False) -> None:
                if module_id in visited:
                    return
                visited.add(module_id)
                future = pool.submit(self._process_file, module_id, is_entry)
                pending[future] = module_id

            for entry_id in entry_ids:
                enqueue(entry_id, is_entry=True)

            try:
                while pending:
                    self._check_stopped()
                    done, _not_done = wait(pending, return_when=FIRST_COMPLETED)
                    self._check_stopped()
                    for future in done:
                        pending.pop(future)
                        result = future.result()
                        graph.add_node(result.node)
                        results[result.node.id] = result
                        for _record, target in result.targets:
                            if self.is_excluded(target):
                                logger.debug("Skipping excluded module %s", target)
                                continue
                            enqueue(target)
            except BaseException:
                for future in pending:
                    future.cancel()
                raise

        for module_id in sorted(results):
            for record, target in results[module_id].targets:
                if target not in graph.nodes:
                    continue
                graph.add_edge(
                    Edge(
                        src=module_id,
                        dst=target,
                        imported_symbols=frozenset(record.imported_names),
                        is_wildcard=record.is_wildcard,
                        is_reexport=record.is_reexport,
                    )
                )

        if self.config.unwrap_re_exports:
            self._unwrap_re_exports(graph)
        graph.freeze()

        logger.info(
            "Built module graph with %d modules and %d edges", len(graph.nodes), len(graph.edges)
        )
        return graph

    def _check_stopped(self) -> None:
        if self.stop_event.is_set():
            raise BuildCancelledError("graph build was cancelled")

    def _process_file(self, module_id: ModuleID, is_entry: bool) -> FileResult:
        """Read, extract and resolve one file. Runs on a worker thread."""

        path = Path(module_id)
        node = ModuleNode(id=module_id, language=self.language.name)

        try:
            content = path.read_bytes()
        except OSError as e:
            if is_entry:
                raise EntryFileError(path, e.strerror or str(e)) from e
            logger.warning("Failed to read %s: %s", path, e)
            node.errors.append(NodeError(kind=ErrorKind.READ, message=f"could not read file: {e}"))
            return FileResult(node=node)

        try:
            records = self.language.extract_imports(content)
        except ExtractionError as e:
            logger.warning("Failed to extract imports from %s: %s", path, e)
            node.errors.append(NodeError(kind=ErrorKind.EXTRACTION, message=str(e)))
            return FileResult(node=node)

        if self.config.exclude_conditional_imports:
            records = [record for record in records if not record.is_conditional]
        node.raw_imports = records

        targets: list[tuple[ImportRecord, ModuleID]] = []
        for record in records:
            try:
                resolved = self.resolver.resolve_targets(record, path)
            except UnresolvedImportError as e:
                logger.debug("%s: %s", path, e)
                node.errors.append(NodeError(kind=ErrorKind.UNRESOLVED_IMPORT, message=str(e)))
                continue
            targets.extend(resolved)

        logger.debug("Processed %s: %d imports, %d resolved", path, len(records), len(targets))
        return FileResult(node=node, targets=targets)

    def _unwrap_re_exports(self, graph: ModuleGraph) -> None:
        """Point edges at the module that declares the imported symbols.

        Only named re-exports are followed; ``export * from`` cannot be traced
        without knowing the names the target declares.
        """

        reexports: dict[ModuleID, list[Edge]] = defaultdict(list)
        for edge in graph.edges:
            if edge.is_reexport and not edge.is_wildcard:
                reexports[edge.src].append(edge)

        unwrapped: list[Edge] = []
        for edge in graph.edges:
            if edge.is_reexport or edge.is_wildcard or not edge.imported_symbols:
                unwrapped.append(edge)
                continue

            by_target: dict[ModuleID, set[ImportedName]] = defaultdict(set)
            for symbol in edge.imported_symbols:
                declaring = self._declaring_module(edge.dst, symbol.name, reexports, set())
                by_target[declaring].add(symbol)

            for target in sorted(by_target):
                if target != edge.dst:
                    logger.debug("Unwrapped %s -> %s into %s", edge.src, edge.dst, target)
                unwrapped.append(
                    edge.model_copy(
                        update={"dst": target, "imported_symbols": frozenset(by_target[target])}
                    )
                )

        graph.replace_edges(unwrapped)

    def _declaring_module(
        self,
        module_id: ModuleID,
        name: str,
        reexports: dict[ModuleID, list[Edge]],
        seen: set[ModuleID],
    ) -> ModuleID:
        if module_id in seen:
            return module_id
        seen.add(module_id)
        for edge in reexports.get(module_id, ()):
            for symbol in edge.imported_symbols:
                if (symbol.alias or symbol.name) == name:
                    return self._declaring_module(edge.dst, symbol.name, reexports, seen)
        return module_id
