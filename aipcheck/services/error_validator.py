"""Error response validation service."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import requests

from aipcheck.core.config import CheckerSettings
from aipcheck.core.config import get_checker_settings
from aipcheck.ingestion.error_mapper import map_error_response
from aipcheck.ingestion.http import read_error_response
from aipcheck.rules.defaults import default_registry
from aipcheck.rules.error_rules import ErrorCheckContext
from aipcheck.rules.registry import RuleCategory
from aipcheck.rules.registry import RuleRegistry
from aipcheck.schemas.error import StatusPayload
from aipcheck.schemas.report import Report
from aipcheck.schemas.report import Violation
from aipcheck.services.policy import apply_settings


def validate_error_payload(
    payload: StatusPayload,
    *,
    message_bindings: Mapping[str, str] | None = None,
    http_status: int | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> list[Violation]:
    """Run every error-response rule over a typed payload, in registration order.

    `message_bindings` maps message template variables to the ErrorInfo
    metadata keys that supply them. Without it, message text cannot be
    traced to metadata and a warning is reported instead.
    """
    settings = settings or get_checker_settings()
    if registry is None:
        registry = default_registry(settings)
    ctx = ErrorCheckContext(
        payload=payload,
        message_bindings=message_bindings,
        http_status=http_status,
        require_message_bindings=settings.require_message_bindings,
    )
    violations: list[Violation] = []
    for rule in registry.rules_for(RuleCategory.ERROR_RESPONSE):
        violations.extend(rule.evaluate(ctx))
    return apply_settings(violations, settings)


def check_error_response(
    raw: Any,
    *,
    message_bindings: Mapping[str, str] | None = None,
    http_status: int | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> Report:
    """Map raw JSON into a payload and validate it. Raises `MalformedInputError`."""
    payload = map_error_response(raw)
    return Report(
        violations=validate_error_payload(
            payload,
            message_bindings=message_bindings,
            http_status=http_status,
            registry=registry,
            settings=settings,
        )
    )


def check_http_error_response(
    response: requests.Response,
    *,
    message_bindings: Mapping[str, str] | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> Report:
    """Validate a captured HTTP error response, including its transport status."""
    observed = read_error_response(response)
    return check_error_response(
        observed.body,
        message_bindings=message_bindings,
        http_status=observed.http_status,
        registry=registry,
        settings=settings,
    )
