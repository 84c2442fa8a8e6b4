"""Unit tests for rule registration and lookup."""

from __future__ import annotations

import pytest

from aipcheck.core.config import CheckerSettings
from aipcheck.core.errors import RuleConfigurationError
from aipcheck.rules.defaults import BUILTIN_RULES
from aipcheck.rules.defaults import build_default_registry
from aipcheck.rules.defaults import default_registry
from aipcheck.rules.registry import Finding
from aipcheck.rules.registry import Rule
from aipcheck.rules.registry import RuleCategory
from aipcheck.rules.registry import RuleRegistry
from aipcheck.schemas.report import Severity
from aipcheck.services.error_validator import check_error_response


def _always_fails(subject: object) -> list[Finding]:
    return [Finding(message=f"rejected {subject}", path="subject")]


def _rule(rule_id: str, category: RuleCategory = RuleCategory.ERROR_RESPONSE) -> Rule:
    return Rule(rule_id=rule_id, category=category, severity=Severity.WARNING, check=_always_fails)


def test_duplicate_rule_ids_are_rejected() -> None:
    registry = RuleRegistry([_rule("OnlyOnce")])

    with pytest.raises(RuleConfigurationError) as exc_info:
        registry.register(_rule("OnlyOnce", RuleCategory.REVISION_SCHEMA))

    assert exc_info.value.rule_id == "OnlyOnce"
    assert len(registry) == 1


def test_rules_for_filters_by_category_in_registration_order() -> None:
    registry = RuleRegistry(
        [
            _rule("B", RuleCategory.REVISION_INSTANCE),
            _rule("A"),
            _rule("C", RuleCategory.REVISION_INSTANCE),
        ]
    )

    assert [rule.rule_id for rule in registry.rules_for(RuleCategory.REVISION_INSTANCE)] == ["B", "C"]
    assert [rule.rule_id for rule in registry.rules_for(RuleCategory.REVISION_HISTORY)] == []
    assert "A" in registry
    assert registry.get("A").category == RuleCategory.ERROR_RESPONSE


def test_unknown_rule_lookup_is_a_configuration_error() -> None:
    with pytest.raises(RuleConfigurationError):
        RuleRegistry().get("Nope")


def test_rule_evaluate_turns_findings_into_violations() -> None:
    violations = _rule("Custom").evaluate("payload")

    assert len(violations) == 1
    assert violations[0].rule_id == "Custom"
    assert violations[0].severity == Severity.WARNING
    assert violations[0].message == "rejected payload"
    assert violations[0].path == "subject"


def test_default_registry_holds_every_builtin_rule_once() -> None:
    registry = build_default_registry(CheckerSettings())

    assert registry.rule_ids() == [rule.rule_id for rule in BUILTIN_RULES]
    assert len(set(registry.rule_ids())) == len(BUILTIN_RULES)
    assert [rule.rule_id for rule in registry.rules_for(RuleCategory.ERROR_RESPONSE)][:2] == [
        "InvalidCode",
        "StatusCodeMismatch",
    ]


def test_disabled_rules_are_left_out() -> None:
    registry = build_default_registry(CheckerSettings(disabled_rules=frozenset({"UnknownDetailType"})))

    assert "UnknownDetailType" not in registry
    assert "MalformedReason" in registry


def test_disabling_an_unknown_rule_fails_fast() -> None:
    with pytest.raises(RuleConfigurationError):
        build_default_registry(CheckerSettings(disabled_rules=frozenset({"NoSuchRule"})))


def test_empty_registry_is_used_as_given() -> None:
    report = check_error_response({"code": 99}, registry=RuleRegistry())

    assert report.ok
    assert report.violations == []


def test_rules_registered_on_a_default_registry_stay_local(quota_error) -> None:
    settings = CheckerSettings()
    default_registry(settings).register(_rule("Extra"))

    report = check_error_response(quota_error, settings=settings)

    assert report.violations == []
    assert "Extra" not in default_registry(settings)
