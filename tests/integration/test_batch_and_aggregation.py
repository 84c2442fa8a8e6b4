"""Integration tests for batch checking and cross-validator aggregation."""

from __future__ import annotations

import copy
import logging

import pytest

from aipcheck.core.config import CheckerSettings
from aipcheck.schemas.report import Severity
from aipcheck.schemas.report import Violation
from aipcheck.services.reports import aggregate
from aipcheck.services.reports import check
from aipcheck.services.reports import check_batch


def _violation(rule_id: str, path: str) -> Violation:
    return Violation(rule_id=rule_id, severity=Severity.ERROR, message=rule_id, path=path)


def test_aggregate_puts_error_results_before_revision_results() -> None:
    report = aggregate(
        [_violation("MalformedReason", "details[0].reason"), _violation("MissingDomain", "details[0].domain")],
        [_violation("MissingField", "create_time"), _violation("MissingField", "create_time")],
    )

    assert report.rule_ids() == ["MalformedReason", "MissingDomain", "MissingField", "MissingField"]


def test_check_combines_both_validators(quota_error, book_revision, book_revision_schema) -> None:
    quota_error["details"] = []
    book_revision["alternate_ids"] = ["latest"]
    book_revision_schema["fields"].pop(2)

    report = check(
        error_payload=quota_error,
        revision=book_revision,
        revision_schema=book_revision_schema,
        settings=CheckerSettings(),
    )

    assert report.rule_ids() == ["MissingErrorInfo", "MissingSchemaField", "ReservedAlias"]


def test_check_batch_isolates_malformed_items(quota_error, caplog: pytest.LogCaptureFixture) -> None:
    bad_reason = copy.deepcopy(quota_error)
    bad_reason["details"][0]["reason"] = "lower_case"
    items = [quota_error, {"code": "oops"}, bad_reason, "not-json-object"]

    with caplog.at_level(logging.INFO, logger="aipcheck.services.reports"):
        entries = check_batch(items, max_workers=3, settings=CheckerSettings())

    assert [entry.index for entry in entries] == [0, 1, 2, 3]
    assert entries[0].report is not None and entries[0].report.violations == []
    assert entries[1].malformed
    assert entries[1].error.code == "malformed_input"
    assert entries[1].error.details[0].field == "code"
    assert entries[2].report.rule_ids() == ["MalformedReason"]
    assert entries[3].malformed
    assert "Completed batch check: payloads=4 malformed=2" in caplog.text


def test_batch_entries_serialize_without_empty_fields(quota_error) -> None:
    entries = check_batch([quota_error, []], settings=CheckerSettings(batch_max_workers=1))

    assert entries[0].to_record() == {"index": 0, "report": {"violations": []}}
    assert entries[1].to_record()["error"]["message"] == "Error payload must be a JSON object"


def test_batch_results_match_single_checks(quota_error) -> None:
    payloads = []
    for reason in ("OK_REASON", "bad", "ALSO_FINE", "x"):
        payload = copy.deepcopy(quota_error)
        payload["details"][0]["reason"] = reason
        payloads.append(payload)

    entries = check_batch(payloads, max_workers=4, settings=CheckerSettings())

    assert [entry.report.rule_ids() for entry in entries] == [[], ["MalformedReason"], [], ["MalformedReason"]]


@pytest.mark.parametrize("max_workers", [0, -2])
def test_batch_rejects_non_positive_worker_counts(quota_error, max_workers) -> None:
    with pytest.raises(ValueError):
        check_batch([quota_error], max_workers=max_workers, settings=CheckerSettings())
