"""Revision schema, instance and history validation service."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from aipcheck.core.config import CheckerSettings
from aipcheck.core.config import get_checker_settings
from aipcheck.ingestion.revision_mapper import map_revision
from aipcheck.ingestion.revision_mapper import map_revision_history
from aipcheck.ingestion.revision_mapper import map_revision_schema
from aipcheck.rules.defaults import default_registry
from aipcheck.rules.registry import RuleCategory
from aipcheck.rules.registry import RuleRegistry
from aipcheck.rules.revision_rules import HistoryCheckContext
from aipcheck.schemas.report import Report
from aipcheck.schemas.report import Violation
from aipcheck.schemas.revision import ResourceRevision
from aipcheck.schemas.revision import RevisionSchema
from aipcheck.services.policy import apply_settings


def _run(registry: RuleRegistry, category: RuleCategory, subject: Any) -> list[Violation]:
    violations: list[Violation] = []
    for rule in registry.rules_for(category):
        violations.extend(rule.evaluate(subject))
    return violations


def _prefixed(violations: list[Violation], prefix: str) -> list[Violation]:
    return [violation.model_copy(update={"path": f"{prefix}.{violation.path}"}) for violation in violations]


def validate_revision_schema(
    schema: RevisionSchema,
    *,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> list[Violation]:
    settings = settings or get_checker_settings()
    if registry is None:
        registry = default_registry(settings)
    return apply_settings(_run(registry, RuleCategory.REVISION_SCHEMA, schema), settings)


def validate_revision(
    revision: ResourceRevision,
    *,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> list[Violation]:
    settings = settings or get_checker_settings()
    if registry is None:
        registry = default_registry(settings)
    return apply_settings(_run(registry, RuleCategory.REVISION_INSTANCE, revision), settings)


def validate_revision_history(
    revisions: Sequence[ResourceRevision],
    *,
    previous: Sequence[ResourceRevision] | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> list[Violation]:
    """Validate each revision, then the history as a whole.

    Per-revision findings come first, in revision order, with paths under
    `revisions[i]`; history-wide findings follow.
    """
    settings = settings or get_checker_settings()
    if registry is None:
        registry = default_registry(settings)
    violations: list[Violation] = []
    for index, revision in enumerate(revisions):
        violations.extend(
            _prefixed(_run(registry, RuleCategory.REVISION_INSTANCE, revision), f"revisions[{index}]")
        )
    ctx = HistoryCheckContext(revisions=list(revisions), previous=previous)
    violations.extend(_run(registry, RuleCategory.REVISION_HISTORY, ctx))
    return apply_settings(violations, settings)


def check_revision(
    raw_revision: Any | None = None,
    *,
    raw_schema: Any | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> Report:
    """Validate a raw revision type description and/or a raw revision instance.

    Schema findings precede instance findings. Raises `MalformedInputError`.
    """
    violations: list[Violation] = []
    if raw_schema is not None:
        violations.extend(
            validate_revision_schema(map_revision_schema(raw_schema), registry=registry, settings=settings)
        )
    if raw_revision is not None:
        violations.extend(validate_revision(map_revision(raw_revision), registry=registry, settings=settings))
    return Report(violations=violations)


def check_revision_history(
    raw_history: Any,
    *,
    raw_previous: Any | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> Report:
    revisions = map_revision_history(raw_history)
    previous = map_revision_history(raw_previous) if raw_previous is not None else None
    return Report(
        violations=validate_revision_history(
            revisions,
            previous=previous,
            registry=registry,
            settings=settings,
        )
    )
