"""Severity policy applied to validator output."""

from __future__ import annotations

from collections.abc import Iterable

from aipcheck.core.config import CheckerSettings
from aipcheck.schemas.report import Severity
from aipcheck.schemas.report import Violation


def apply_settings(violations: Iterable[Violation], settings: CheckerSettings) -> list[Violation]:
    """Promote warnings to errors in strict mode; order is preserved."""
    if not settings.strict:
        return list(violations)
    return [
        violation.model_copy(update={"severity": Severity.ERROR})
        if violation.severity == Severity.WARNING
        else violation
        for violation in violations
    ]
