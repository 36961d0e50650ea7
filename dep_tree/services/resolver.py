import json
import logging
from functools import cached_property
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from errors import UnresolvedImportError
from models.base import ImportRecord, ModuleID
from models.config import ModuleSystemConfig
from services.languages.base import Language

logger = logging.getLogger(__name__)


def _prefix_matches(specifier: str, prefix: str) -> bool:
    """Whether ``prefix`` covers ``specifier`` on a path segment boundary."""

    if prefix.endswith("/"):
        return specifier.startswith(prefix) or specifier == prefix.rstrip("/")
    return specifier == prefix or specifier.startswith(prefix + "/")


def _segments(specifier: str) -> tuple[str, ...]:
    return tuple(part for part in specifier.split("/") if part and part != ".")


class PathResolver(BaseModel):
    """Turn import records into module identifiers.

    Resolution is a pure function of the record, the importing file, the
    configuration and the files on disk. It never mutates anything.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: Path
    language: Language
    config: ModuleSystemConfig = Field(default_factory=ModuleSystemConfig)

    @cached_property
    def _root(self) -> Path:
        return self.root.resolve()

    @cached_property
    def _aliases(self) -> list[tuple[str, Path]]:
        """Alias table, longest prefix first."""

        aliases = [
            (prefix, self._absolute(target))
            for prefix, target in self.config.path_aliases.items()
        ]
        return sorted(aliases, key=lambda item: len(item[0]), reverse=True)

    @cached_property
    def _workspaces(self) -> list[tuple[Path, str | None]]:
        """Workspace directories with the package name declared in them."""

        workspaces: list[tuple[Path, str | None]] = []
        for raw in self.config.workspace_roots:
            directory = self._absolute(str(raw))
            name: str | None = None
            manifest = directory / "package.json"
            if manifest.is_file():
                try:
                    name = json.loads(manifest.read_text(encoding="utf-8")).get("name")
                except (OSError, ValueError, AttributeError):
                    logger.warning("Ignoring unreadable workspace manifest %s", manifest)
            workspaces.append((directory, name))
        return workspaces

    def _absolute(self, target: str) -> Path:
        path = Path(target)
        if not path.is_absolute():
            path = self._root / path
        return path.resolve()

    def resolve(self, record: ImportRecord, importing_file: str | Path) -> ModuleID | None:
        """Resolve one import record.

        Args:
            record: Import record extracted from ``importing_file``.
            importing_file: File containing the import statement.

        Returns:
            Identifier of the imported module, or None when the import targets
            an external package or a non-source asset. A from-import of
            several members of a package without an index file returns the
            first member; ``resolve_targets`` returns all of them.

        Raises:
            UnresolvedImportError: If the import should point to a project file
                but none exists.
        """

        targets = self.resolve_targets(record, importing_file)
        return targets[0][1] if targets else None

    def resolve_targets(
        self, record: ImportRecord, importing_file: str | Path
    ) -> list[tuple[ImportRecord, ModuleID]]:
        """Resolve one import record into every module it links to.

        ``from pkg import a, b`` where ``pkg`` is a directory without an index
        file (a namespace package) links to ``pkg/a`` and ``pkg/b``. Each of
        those targets is paired with a copy of the record narrowed to the
        name it was found for.

        Raises:
            UnresolvedImportError: If the import should point to a project file
                but none exists.
        """

        importing_file = Path(importing_file)

        if record.relative_depth > 0:
            base = importing_file.parent
            for _ in range(record.relative_depth - 1):
                base = base.parent
            found = self._find(base, record.path)
            if found is not None:
                return [(record, found)]
            if self._is_asset(base, record.path):
                return []
            members = self._find_members(base, record)
            if members:
                return members
            raise self._unresolved(record, importing_file)

        specifier = "/".join(record.path)

        if self.config.follow_path_aliases:
            for prefix, target in self._aliases:
                if not _prefix_matches(specifier, prefix):
                    continue
                rest = _segments(specifier[len(prefix) :])
                found = self._find(target, rest)
                if found is not None:
                    return [(record, found)]
                if self._is_asset(target, rest):
                    return []
                raise self._unresolved(record, importing_file)

        if self.config.follow_workspaces:
            for directory, name in self._workspaces:
                if name and _prefix_matches(specifier, name):
                    rest = _segments(specifier[len(name) :])
                    found = self._find(directory, rest)
                    if found is not None:
                        return [(record, found)]
                    if self._is_asset(directory, rest):
                        return []
                    raise self._unresolved(record, importing_file)

        bases = self._absolute_bases(importing_file)
        for base in bases:
            found = self._find(base, record.path)
            if found is not None:
                return [(record, found)]
            if self._is_asset(base, record.path):
                return []
            members = self._find_members(base, record)
            if members:
                return members

        if not record.path or not any(
            self._first_segment_exists(base, record.path[0]) for base in bases
        ):
            logger.debug("Treating '%s' as an external package", record.specifier)
            return []

        raise self._unresolved(record, importing_file)

    def _find_members(
        self, base: Path, record: ImportRecord
    ) -> list[tuple[ImportRecord, ModuleID]]:
        """Imported names found as modules of a package directory without index."""

        if record.is_wildcard or not base.joinpath(*record.path).is_dir():
            return []
        members: list[tuple[ImportRecord, ModuleID]] = []
        for name in record.imported_names:
            found = self._find(base, (*record.path, name.name))
            if found is not None:
                members.append((record.model_copy(update={"imported_names": (name,)}), found))
        return members

    def _unresolved(self, record: ImportRecord, importing_file: Path) -> UnresolvedImportError:
        return UnresolvedImportError(record.specifier, importing_file, line=record.line)

    def _absolute_bases(self, importing_file: Path) -> list[Path]:
        bases: list[Path] = []
        if self.config.follow_workspaces:
            bases.extend(directory for directory, _name in self._workspaces)
        bases.append(self._root)
        if self.language.absolute_from_parents:
            parent = importing_file.parent
            while parent != self._root and self._root in parent.parents:
                bases.append(parent)
                parent = parent.parent
        return list(dict.fromkeys(bases))

    def _first_segment_exists(self, base: Path, segment: str) -> bool:
        candidate = base / segment
        if candidate.exists():
            return True
        return any(
            candidate.with_name(candidate.name + ext).is_file()
            for ext in self.language.extensions
        )

    def _is_asset(self, base: Path, segments: tuple[str, ...]) -> bool:
        """An existing file that is not source code (stylesheets, JSON, ...)."""

        if not segments:
            return False
        candidate = base.joinpath(*segments)
        return candidate.is_file() and not self.language.handles(candidate.name)

    def _find(self, base: Path, segments: tuple[str, ...]) -> ModuleID | None:
        """Apply the language resolution order below ``base``.

        Exact file, then each extension appended, then the directory index.
        """

        candidate = base.joinpath(*segments)

        if candidate.is_file() and self.language.handles(candidate.name):
            return ModuleID.from_path(candidate)
        if segments:
            for ext in self.language.extensions:
                with_ext = candidate.with_name(candidate.name + ext)
                if with_ext.is_file():
                    return ModuleID.from_path(with_ext)
            if candidate.suffix in (".js", ".jsx", ".mjs", ".cjs"):
                for ext in (".ts", ".tsx", ".mts", ".cts"):
                    sibling = candidate.with_suffix(ext)
                    if sibling.is_file():
                        return ModuleID.from_path(sibling)

        if candidate.is_dir():
            for index in self.language.index_names:
                for ext in self.language.extensions:
                    index_file = candidate / f"{index}{ext}"
                    if index_file.is_file():
                        return ModuleID.from_path(index_file)

        return None
