from .base import ImportedName, ImportRecord, ModuleID
from .config import CheckConfig, Config, EntropyConfig, ModuleSystemConfig, TuiConfig
from .edge import Edge
from .graph import ModuleGraph
from .metrics import Cycle, EntropyReport, NodeEntropy, Weighting
from .module_node import ErrorKind, ModuleNode, NodeError
from .rules import Rule, RuleAction, Violation

__all__ = [
    "CheckConfig",
    "Config",
    "Cycle",
    "Edge",
    "EntropyConfig",
    "EntropyReport",
    "ErrorKind",
    "ImportedName",
    "ImportRecord",
    "ModuleGraph",
    "ModuleID",
    "ModuleNode",
    "ModuleSystemConfig",
    "NodeEntropy",
    "NodeError",
    "Rule",
    "RuleAction",
    "TuiConfig",
    "Violation",
    "Weighting",
]
