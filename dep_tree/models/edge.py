from pydantic import BaseModel, ConfigDict, Field

from models.base import ImportedName, ModuleID


class Edge(BaseModel):
    """A dependency from one module to another.

    Attributes:
        src: Importing module.
        dst: Imported module.
        imported_symbols: Names imported through this edge.
        is_wildcard: Whether the edge imports every exported name.
        is_reexport: Whether ``src`` re-exports the symbols it takes from ``dst``.
    """

    model_config = ConfigDict(frozen=True)

    src: ModuleID = Field(..., description="Source module identifier")
    dst: ModuleID = Field(..., description="Destination module identifier")
    imported_symbols: frozenset[ImportedName] = Field(default_factory=frozenset)
    is_wildcard: bool = False
    is_reexport: bool = False

    @property
    def key(self) -> tuple[ModuleID, ModuleID, frozenset[ImportedName]]:
        return (self.src, self.dst, self.imported_symbols)

    @property
    def weight(self) -> int:
        """Number of imported symbols, 1 when the edge carries none."""

        return max(1, len(self.imported_symbols))
