"""Violation and report schemas produced by the validators."""

from __future__ import annotations

from enum import Enum
import json
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ErrorDetail(BaseModel):
    """Single field-level issue detail."""

    field: str
    issue: str


class ErrorObject(BaseModel):
    """Error payload describing why an input could not be checked."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Violation(BaseModel):
    """One unmet guideline constraint, located by field path."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str = Field(alias="ruleId")
    severity: Severity
    message: str
    path: str

    def to_record(self) -> dict[str, str]:
        return self.model_dump(mode="json", by_alias=True)


class Report(BaseModel):
    """Ordered collection of violations for one checked input."""

    model_config = ConfigDict(frozen=True)

    violations: list[Violation] = Field(default_factory=list)

    @property
    def errors(self) -> list[Violation]:
        return [violation for violation in self.violations if violation.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Violation]:
        return [violation for violation in self.violations if violation.severity == Severity.WARNING]

    @property
    def ok(self) -> bool:
        """True when no error-severity violation was reported."""
        return not self.errors

    def rule_ids(self) -> list[str]:
        return [violation.rule_id for violation in self.violations]

    def to_records(self) -> list[dict[str, str]]:
        return [violation.to_record() for violation in self.violations]

    def to_json(self) -> str:
        """Serialize the report deterministically."""
        return json.dumps(self.to_records(), indent=2, ensure_ascii=False)


class BatchEntry(BaseModel):
    """Outcome of one input inside a batch check."""

    model_config = ConfigDict(frozen=True)

    index: int
    report: Report | None = None
    error: ErrorObject | None = None

    @property
    def malformed(self) -> bool:
        return self.error is not None

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
