from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from models.metrics import Weighting
from models.rules import Rule, RuleAction


class ModuleSystemConfig(BaseModel):
    """Options controlling how imports are extracted and resolved."""

    model_config = ConfigDict(extra="forbid")

    exclude: list[str] = Field(
        default_factory=list, description="Glob patterns of files to leave out"
    )
    path_aliases: dict[str, str] = Field(
        default_factory=dict, description="Specifier prefix -> replacement path"
    )
    workspace_roots: list[Path] = Field(
        default_factory=list, description="Directories searched for absolute imports"
    )
    follow_path_aliases: bool = True
    follow_workspaces: bool = True
    exclude_conditional_imports: bool = False
    unwrap_re_exports: bool = False


class CheckConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entrypoints: list[Path] = Field(default_factory=list)
    rules: list[Rule] = Field(default_factory=list)
    aliases: dict[str, str] = Field(
        default_factory=dict, description="Named globs referenced from rules as alias:<name>"
    )
    default_action: RuleAction = RuleAction.DENY
    allow_circular_dependencies: bool = True


class EntropyConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weighting: Weighting = Weighting.SYMBOLS


class TuiConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    indent: int = Field(default=2, ge=1)


class Config(BaseModel):
    """Full dep-tree configuration, built once and passed down explicitly."""

    model_config = ConfigDict(extra="forbid")

    root: Path | None = None
    workers: int = Field(default=8, ge=1)
    module_system: ModuleSystemConfig = Field(default_factory=ModuleSystemConfig)
    check: CheckConfig = Field(default_factory=CheckConfig)
    entropy: EntropyConfig = Field(default_factory=EntropyConfig)
    tui: TuiConfig = Field(default_factory=TuiConfig)
