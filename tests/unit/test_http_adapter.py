"""Unit tests for reading captured HTTP error responses."""

from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from aipcheck.core.config import CheckerSettings
from aipcheck.core.errors import MalformedInputError
from aipcheck.ingestion.http import read_error_response
from aipcheck.services.error_validator import check_http_error_response


def _response(status_code: int, body: Any, content_type: str | None = "application/json") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    if content_type is not None:
        response.headers["Content-Type"] = content_type
    return response


def test_read_error_response_returns_body_and_status(enveloped_error) -> None:
    observed = read_error_response(_response(403, enveloped_error, "application/json; charset=UTF-8"))

    assert observed.http_status == 403
    assert observed.body == enveloped_error


@pytest.mark.parametrize(
    ("response", "field"),
    [
        (_response(200, {"ok": True}), "http_status"),
        (_response(500, b"<html>oops</html>", "text/html"), "content_type"),
        (_response(500, b"{not json"), "body"),
    ],
)
def test_unusable_responses_are_malformed(response, field) -> None:
    with pytest.raises(MalformedInputError) as exc_info:
        read_error_response(response)

    assert exc_info.value.field == field


def test_check_http_error_response_compares_transport_status(enveloped_error) -> None:
    settings = CheckerSettings(require_message_bindings=False)

    matching = check_http_error_response(_response(403, enveloped_error), settings=settings)
    mismatched = check_http_error_response(_response(400, enveloped_error), settings=settings)

    assert matching.violations == []
    assert mismatched.rule_ids() == ["HttpStatusMismatch"]
    assert mismatched.violations[0].path == "error.code"
