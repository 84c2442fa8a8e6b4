"""Checker exception taxonomy."""

from __future__ import annotations

from collections.abc import Sequence

from aipcheck.schemas.report import ErrorDetail
from aipcheck.schemas.report import ErrorObject


class CheckerError(Exception):
    """Base exception for failures that stop a check from producing a report."""

    def __init__(
        self,
        *,
        code: str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = list(details) if details else None

    def to_error_object(self) -> ErrorObject:
        return ErrorObject(code=self.code, message=self.message, details=self.details)


class MalformedInputError(CheckerError, ValueError):
    """Raised when input cannot be parsed into the expected schema."""

    def __init__(
        self,
        *,
        message: str,
        field: str = "input",
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(
            code="malformed_input",
            message=message,
            details=details or [ErrorDetail(field=field, issue=message)],
        )
        self.field = field


class RuleConfigurationError(CheckerError):
    """Raised when the rule registry is configured inconsistently."""

    def __init__(self, *, message: str, rule_id: str | None = None) -> None:
        super().__init__(
            code="rule_configuration",
            message=message,
            details=[ErrorDetail(field="rule_id", issue=rule_id)] if rule_id else None,
        )
        self.rule_id = rule_id
