from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from models.base import ModuleID


class RuleAction(StrEnum):
    ALLOW = "allow"
    DENY = "deny"


class Rule(BaseModel):
    """Allows or denies edges whose endpoints match two glob patterns."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action: RuleAction
    from_pattern: str = Field(..., alias="from", min_length=1)
    to_pattern: str = Field(..., alias="to", min_length=1)
    reason: str | None = None

    def __str__(self) -> str:
        return f"{self.action} {self.from_pattern} -> {self.to_pattern}"


class Violation(BaseModel):
    """An edge rejected by the rule set. ``rule`` is None for default denials."""

    src: ModuleID
    dst: ModuleID
    rule: Rule | None = None
    reason: str
