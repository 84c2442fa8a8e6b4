"""Rule registry: identifiers mapped to predicates and severities."""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from aipcheck.core.errors import RuleConfigurationError
from aipcheck.schemas.report import Severity
from aipcheck.schemas.report import Violation


class RuleCategory(str, Enum):
    ERROR_RESPONSE = "error_response"
    REVISION_SCHEMA = "revision_schema"
    REVISION_INSTANCE = "revision_instance"
    REVISION_HISTORY = "revision_history"


@dataclass(frozen=True)
class Finding:
    """A failed predicate outcome: explanation plus the offending field path."""

    message: str
    path: str


RuleCheck = Callable[[Any], list[Finding]]


@dataclass(frozen=True)
class Rule:
    """A registered guideline rule; an empty findings list means the rule passed."""

    rule_id: str
    category: RuleCategory
    severity: Severity
    check: RuleCheck
    description: str = ""

    def evaluate(self, subject: Any) -> list[Violation]:
        return [
            Violation(
                rule_id=self.rule_id,
                severity=self.severity,
                message=finding.message,
                path=finding.path,
            )
            for finding in self.check(subject)
        ]


class RuleRegistry:
    """Ordered, duplicate-free collection of rules grouped by category."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> Rule:
        if rule.rule_id in self._rules:
            raise RuleConfigurationError(
                message=f"Rule `{rule.rule_id}` is already registered",
                rule_id=rule.rule_id,
            )
        self._rules[rule.rule_id] = rule
        return rule

    def get(self, rule_id: str) -> Rule:
        rule = self._rules.get(rule_id)
        if rule is None:
            raise RuleConfigurationError(message=f"Unknown rule `{rule_id}`", rule_id=rule_id)
        return rule

    def rules_for(self, category: RuleCategory) -> list[Rule]:
        """Return the rules of one category in registration order."""
        return [rule for rule in self._rules.values() if rule.category == category]

    def without(self, rule_ids: Iterable[str]) -> RuleRegistry:
        """Return a copy of this registry with the given rules removed."""
        excluded = set(rule_ids)
        for rule_id in sorted(excluded):
            self.get(rule_id)
        return RuleRegistry(rule for rule in self._rules.values() if rule.rule_id not in excluded)

    def rule_ids(self) -> list[str]:
        return list(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)
