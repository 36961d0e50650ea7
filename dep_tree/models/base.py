from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema


class ModuleID(str):
    """Canonical identifier of a module: the absolute POSIX path of its file."""

    @classmethod
    def from_path(cls, path: str | Path) -> "ModuleID":
        return cls(Path(path).resolve().as_posix())

    @property
    def path(self) -> Path:
        return Path(self)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        return core_schema.no_info_after_validator_function(cls, handler(str))


class ImportedName(BaseModel):
    """A single name pulled in by an import statement."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Imported symbol name")
    alias: str | None = Field(default=None, description="Local alias, if any")

    def __str__(self) -> str:
        if self.alias:
            return f"{self.name} as {self.alias}"
        return self.name


class ImportRecord(BaseModel):
    """Normalized representation of one import statement.

    Attributes:
        path: Path segments of the imported module, without relative markers.
        alias: Alias given to the whole module (``import foo as bar``).
        relative_depth: Number of leading relative markers. 0 means absolute,
            1 means the importing file's own directory.
        imported_names: Names imported from the module, in statement order.
        is_wildcard: Whether every exported name is imported (``*``).
        is_conditional: Whether the statement sits inside an ``if`` or ``try``
            block, or is a lazy import.
        is_reexport: Whether the statement re-exports the names it imports.
        line: 1-based line of the statement in its file.
    """

    model_config = ConfigDict(frozen=True)

    path: tuple[str, ...] = Field(default=())
    alias: str | None = None
    relative_depth: int = Field(default=0, ge=0)
    imported_names: tuple[ImportedName, ...] = Field(default=())
    is_wildcard: bool = False
    is_conditional: bool = False
    is_reexport: bool = False
    line: int | None = Field(default=None, ge=1)

    @property
    def specifier(self) -> str:
        """Human readable form of the imported path."""

        if self.relative_depth == 0:
            return "/".join(self.path)
        prefix = "./" if self.relative_depth == 1 else "../" * (self.relative_depth - 1)
        return prefix + "/".join(self.path)
