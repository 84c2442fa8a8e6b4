"""Report aggregation and batch checking."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import partial
import logging
from typing import Any

from aipcheck.core.config import CheckerSettings
from aipcheck.core.config import get_checker_settings
from aipcheck.core.errors import MalformedInputError
from aipcheck.rules.defaults import default_registry
from aipcheck.rules.registry import RuleRegistry
from aipcheck.schemas.report import BatchEntry
from aipcheck.schemas.report import Report
from aipcheck.schemas.report import Violation
from aipcheck.services.error_validator import check_error_response
from aipcheck.services.revision_validator import check_revision

logger = logging.getLogger(__name__)


def aggregate(
    error_violations: Iterable[Violation],
    revision_violations: Iterable[Violation],
) -> Report:
    """Concatenate error results before revision results, keeping each order intact."""
    return Report(violations=[*error_violations, *revision_violations])


def check(
    *,
    error_payload: Any | None = None,
    revision: Any | None = None,
    revision_schema: Any | None = None,
    message_bindings: Mapping[str, str] | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> Report:
    """Check an error payload and a revision definition together in one report."""
    settings = settings or get_checker_settings()
    if registry is None:
        registry = default_registry(settings)

    error_violations: list[Violation] = []
    if error_payload is not None:
        error_violations = check_error_response(
            error_payload,
            message_bindings=message_bindings,
            registry=registry,
            settings=settings,
        ).violations

    revision_violations: list[Violation] = []
    if revision is not None or revision_schema is not None:
        revision_violations = check_revision(
            revision,
            raw_schema=revision_schema,
            registry=registry,
            settings=settings,
        ).violations

    return aggregate(error_violations, revision_violations)


def check_batch(
    items: Sequence[Any],
    *,
    message_bindings: Mapping[str, str] | None = None,
    max_workers: int | None = None,
    registry: RuleRegistry | None = None,
    settings: CheckerSettings | None = None,
) -> list[BatchEntry]:
    """Check independent error payloads concurrently; results keep input order.

    A malformed item yields an entry carrying its error instead of a report
    and never aborts the rest of the batch.
    """
    settings = settings or get_checker_settings()
    if registry is None:
        registry = default_registry(settings)
    workers = settings.batch_max_workers if max_workers is None else max_workers
    if workers <= 0:
        raise ValueError("max_workers must be positive")

    logger.info(
        "Starting batch check of %s payloads with settings=%s",
        len(items),
        settings.safe_for_logging(),
    )
    check_one = partial(
        _check_one,
        message_bindings=message_bindings,
        registry=registry,
        settings=settings,
    )
    with ThreadPoolExecutor(max_workers=workers) as executor:
        entries = list(executor.map(check_one, range(len(items)), items))

    malformed = sum(1 for entry in entries if entry.malformed)
    logger.info("Completed batch check: payloads=%s malformed=%s", len(entries), malformed)
    return entries


def _check_one(
    index: int,
    raw: Any,
    *,
    message_bindings: Mapping[str, str] | None,
    registry: RuleRegistry,
    settings: CheckerSettings,
) -> BatchEntry:
    try:
        report = check_error_response(
            raw,
            message_bindings=message_bindings,
            registry=registry,
            settings=settings,
        )
    except MalformedInputError as exc:
        logger.warning("Payload %s is malformed: %s", index, exc.message)
        return BatchEntry(index=index, error=exc.to_error_object())
    return BatchEntry(index=index, report=report)
