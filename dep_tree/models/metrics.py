from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from models.base import ModuleID


class Weighting(StrEnum):
    """How much each outgoing edge weighs in the entropy computation."""

    SYMBOLS = "symbols"
    EDGES = "edges"


class Cycle(BaseModel):
    """One strongly connected component of size > 1, or a self-loop."""

    model_config = ConfigDict(frozen=True)

    members: tuple[ModuleID, ...]

    @property
    def is_self_loop(self) -> bool:
        return len(self.members) == 1

    def __contains__(self, module_id: object) -> bool:
        return module_id in self.members


class NodeEntropy(BaseModel):
    entropy: float = Field(..., ge=0)
    out_degree: int = Field(..., ge=0, description="Distinct imported modules")
    in_degree: int = Field(..., ge=0, description="Distinct importing modules")
    weight: int = Field(..., ge=0, description="Total outgoing weight")


class EntropyReport(BaseModel):
    weighting: Weighting
    nodes: dict[ModuleID, NodeEntropy] = Field(default_factory=dict)
    graph_entropy: float = Field(default=0.0, ge=0)
