import logging
from collections import deque
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from errors import ConfigError
from models.base import ModuleID
from models.config import CheckConfig
from models.edge import Edge
from models.graph import ModuleGraph
from models.rules import Rule, RuleAction, Violation
from services.metrics import find_cycles
from utils import globs

logger = logging.getLogger(__name__)

ALIAS_PREFIX = "alias:"


class RuleChecker(BaseModel):
    """Check every edge of a module graph against allow/deny rules.

    Patterns are globs matched against root-relative paths. For each edge the
    most specific matching rule decides: the rule with the longest literal
    prefix (from and to patterns together), the first declared one on ties.
    """

    config: CheckConfig = Field(default_factory=CheckConfig)

    _rules: list[Rule] = PrivateAttr(default_factory=list)

    def model_post_init(self, context: Any) -> None:
        self._rules = [
            rule.model_copy(
                update={
                    "from_pattern": self._expand(rule.from_pattern),
                    "to_pattern": self._expand(rule.to_pattern),
                }
            )
            for rule in self.config.rules
        ]
        for rule in self._rules:
            globs.validate_pattern(rule.from_pattern)
            globs.validate_pattern(rule.to_pattern)
        return super().model_post_init(context)

    def _expand(self, pattern: str) -> str:
        """Replace an ``alias:<name>`` pattern with the aliased glob."""

        if not pattern.startswith(ALIAS_PREFIX):
            return pattern
        name = pattern[len(ALIAS_PREFIX) :]
        try:
            return self.config.aliases[name]
        except KeyError:
            raise ConfigError(f"unknown rule alias '{name}'") from None

    @staticmethod
    def _specificity(rule: Rule) -> int:
        return len(globs.literal_prefix(rule.from_pattern)) + len(
            globs.literal_prefix(rule.to_pattern)
        )

    def match(self, src: str, dst: str) -> Rule | None:
        """Most specific rule matching an edge between two relative paths."""

        best: Rule | None = None
        best_specificity = -1
        for rule in self._rules:
            if not (globs.match(rule.from_pattern, src) and globs.match(rule.to_pattern, dst)):
                continue
            specificity = self._specificity(rule)
            if specificity > best_specificity:
                best, best_specificity = rule, specificity
        return best

    def check(self, graph: ModuleGraph) -> list[Violation]:
        """Return one violation per offending edge.

        Args:
            graph: The module graph to check.

        Returns:
            Violations ordered by source then destination.
        """

        edges = self._edges_in_scope(graph)
        violations: list[Violation] = []

        for edge in edges:
            src, dst = graph.relative(edge.src), graph.relative(edge.dst)
            rule = self.match(src, dst)
            if rule is None:
                if self.config.default_action == RuleAction.DENY:
                    violations.append(
                        Violation(
                            src=edge.src,
                            dst=edge.dst,
                            reason=f"{src} -> {dst} is not allowed by any rule",
                        )
                    )
                continue
            if rule.action == RuleAction.DENY:
                violations.append(
                    Violation(
                        src=edge.src,
                        dst=edge.dst,
                        rule=rule,
                        reason=rule.reason or f"{src} -> {dst} is denied by '{rule}'",
                    )
                )

        if not self.config.allow_circular_dependencies:
            violations.extend(self._cycle_violations(graph, edges))

        violations.sort(key=lambda violation: (violation.src, violation.dst))
        logger.info("Checked %d edges, found %d violations", len(edges), len(violations))
        return violations

    def _edges_in_scope(self, graph: ModuleGraph) -> list[Edge]:
        if not self.config.entrypoints:
            return list(graph.edges)

        queue: deque[ModuleID] = deque()
        for entrypoint in self.config.entrypoints:
            path = entrypoint if entrypoint.is_absolute() else graph.root / entrypoint
            module_id = ModuleID.from_path(path)
            if module_id in graph.nodes:
                queue.append(module_id)
            else:
                logger.warning("Check entrypoint %s is not part of the graph", Path(entrypoint))

        reachable: set[ModuleID] = set(queue)
        while queue:
            current = queue.popleft()
            for dependency in graph.dependencies(current):
                if dependency not in reachable:
                    reachable.add(dependency)
                    queue.append(dependency)
        return [edge for edge in graph.edges if edge.src in reachable]

    def _cycle_violations(self, graph: ModuleGraph, edges: list[Edge]) -> list[Violation]:
        violations: list[Violation] = []
        seen: set[tuple[ModuleID, ModuleID]] = set()
        for cycle in find_cycles(graph):
            members = set(cycle.members)
            description = " -> ".join(graph.relative(member) for member in cycle.members)
            for edge in edges:
                pair = (edge.src, edge.dst)
                if edge.src in members and edge.dst in members and pair not in seen:
                    seen.add(pair)
                    violations.append(
                        Violation(
                            src=edge.src,
                            dst=edge.dst,
                            reason=f"circular dependency between {description}",
                        )
                    )
        return violations
