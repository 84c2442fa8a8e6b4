"""Adapter from captured HTTP responses to raw error payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from aipcheck.core.errors import MalformedInputError

JSON_CONTENT_TYPES = ("application/json", "application/problem+json")


@dataclass(frozen=True)
class ObservedErrorResponse:
    """Error body plus the transport status it was served with."""

    http_status: int
    body: Any


def read_error_response(response: requests.Response) -> ObservedErrorResponse:
    """Extract the JSON error body and HTTP status from a captured response."""
    if response.status_code < 400:
        raise MalformedInputError(
            message=f"Response status {response.status_code} is not an error status",
            field="http_status",
        )

    content_type = response.headers.get("Content-Type")
    if content_type is not None:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type not in JSON_CONTENT_TYPES:
            raise MalformedInputError(
                message=f"Error responses must be JSON, got `{media_type}`",
                field="content_type",
            )

    try:
        body = response.json()
    except requests.exceptions.JSONDecodeError as exc:
        raise MalformedInputError(message="Error response body is not valid JSON", field="body") from exc

    return ObservedErrorResponse(http_status=response.status_code, body=body)
