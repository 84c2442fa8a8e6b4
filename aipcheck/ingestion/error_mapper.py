"""Raw error-response to typed status payload mapping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from aipcheck.core.errors import MalformedInputError
from aipcheck.schemas.error import DetailPayload
from aipcheck.schemas.error import StatusPayload
from aipcheck.schemas.error import UnknownDetail
from aipcheck.schemas.error import resolve_detail_model
from aipcheck.schemas.report import ErrorDetail

ENVELOPE_KEY = "error"
TYPE_KEY = "@type"


def map_error_response(raw: Any) -> StatusPayload:
    """Map an HTTP+JSON error envelope or a bare rpc Status into a `StatusPayload`."""
    if not isinstance(raw, Mapping):
        raise MalformedInputError(message="Error payload must be a JSON object")

    if ENVELOPE_KEY in raw:
        inner = raw[ENVELOPE_KEY]
        if not isinstance(inner, Mapping):
            raise MalformedInputError(
                message="Field `error` must be a JSON object",
                field=ENVELOPE_KEY,
            )
        return _map_status(inner, representation="http", prefix=f"{ENVELOPE_KEY}.", enveloped=True)

    # `status` only exists in the HTTP+JSON form; a bare rpc Status never carries it.
    representation = "http" if "status" in raw else "rpc"
    return _map_status(raw, representation=representation, prefix="", enveloped=False)


def _map_status(
    raw: Mapping[str, Any],
    *,
    representation: str,
    prefix: str,
    enveloped: bool,
) -> StatusPayload:
    code = raw.get("code")
    if code is None:
        raise MalformedInputError(message="Missing required field `code`", field=f"{prefix}code")
    if isinstance(code, bool) or not isinstance(code, int):
        raise MalformedInputError(
            message=f"Field `code` must be an integer, got {code!r}",
            field=f"{prefix}code",
        )

    message = _as_optional_string(raw.get("message"), field=f"{prefix}message")
    status = _as_optional_string(raw.get("status"), field=f"{prefix}status")

    raw_details = raw.get("details")
    if raw_details is None:
        raw_details = []
    if not isinstance(raw_details, list):
        raise MalformedInputError(
            message="Field `details` must be a list",
            field=f"{prefix}details",
        )

    details = [
        map_detail(item, field=f"{prefix}details[{index}]")
        for index, item in enumerate(raw_details)
    ]
    return StatusPayload(
        code=code,
        message=message,
        status=status,
        details=details,
        representation=representation,
        enveloped=enveloped,
    )


def map_detail(raw: Any, *, field: str = "detail") -> DetailPayload:
    """Map one `details` entry onto its typed model, keyed by `@type`."""
    if not isinstance(raw, Mapping):
        raise MalformedInputError(message="Detail entries must be JSON objects", field=field)

    type_url = raw.get(TYPE_KEY)
    if not isinstance(type_url, str) or not type_url:
        raise MalformedInputError(
            message="Detail entries require a non-empty `@type`",
            field=f"{field}.{TYPE_KEY}",
        )

    model = resolve_detail_model(type_url)
    if model is None:
        return UnknownDetail(
            type_url=type_url,
            raw_fields={key: value for key, value in raw.items() if key != TYPE_KEY},
        )

    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        details = _validation_details(exc, prefix=field)
        raise MalformedInputError(
            message=f"Detail `{type_url}` does not match its schema",
            field=field,
            details=details,
        ) from exc


def _validation_details(exc: ValidationError, *, prefix: str) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for issue in exc.errors():
        location = _format_location(issue.get("loc", ()))
        field = f"{prefix}.{location}" if location else prefix
        details.append(ErrorDetail(field=field, issue=str(issue.get("msg", "Invalid value"))))
    return details


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    formatted = ""
    for part in location:
        if isinstance(part, int):
            formatted += f"[{part}]"
        elif formatted:
            formatted += f".{part}"
        else:
            formatted = str(part)
    return formatted


def _as_optional_string(value: Any, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedInputError(message=f"Field `{field}` must be a string", field=field)
    return value
