from enum import StrEnum

from pydantic import BaseModel, Field

from models.base import ImportRecord, ModuleID


class ErrorKind(StrEnum):
    """Categories of per-file problems recorded during the build."""

    EXTRACTION = "extraction"
    UNRESOLVED_IMPORT = "unresolved_import"
    READ = "read"


class NodeError(BaseModel):
    kind: ErrorKind
    message: str


class ModuleNode(BaseModel):
    """A resolved source file participating in the dependency graph."""

    id: ModuleID = Field(..., description="Absolute path of the module file")
    language: str = Field(..., description="Language tag of the file")
    raw_imports: list[ImportRecord] = Field(
        default_factory=list, description="Import records in statement order"
    )
    errors: list[NodeError] = Field(
        default_factory=list, description="Non-fatal problems found in this file"
    )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
