"""Raw revision definitions and instances to typed revision models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from datetime import timezone
from typing import Any

from pydantic import ValidationError

from aipcheck.core.errors import MalformedInputError
from aipcheck.schemas.report import ErrorDetail
from aipcheck.schemas.revision import ResourceRevision
from aipcheck.schemas.revision import RevisionSchema

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name",),
    "snapshot": ("snapshot",),
    "create_time": ("create_time", "createTime"),
    "alternate_ids": ("alternate_ids", "alternateIds"),
}


def map_revision_schema(raw: Any) -> RevisionSchema:
    """Map a structural revision type description into a `RevisionSchema`."""
    if not isinstance(raw, Mapping):
        raise MalformedInputError(message="Revision schema must be a JSON object")
    try:
        return RevisionSchema.model_validate(dict(raw))
    except ValidationError as exc:
        raise MalformedInputError(
            message="Revision schema does not match the expected structure",
            details=[
                ErrorDetail(
                    field=".".join(str(part) for part in issue.get("loc", ())) or "input",
                    issue=str(issue.get("msg", "Invalid value")),
                )
                for issue in exc.errors()
            ],
        ) from exc


def map_revision(raw: Any, *, field: str = "revision") -> ResourceRevision:
    """Map one revision instance, keeping absent fields as None."""
    if not isinstance(raw, Mapping):
        raise MalformedInputError(message="Revision must be a JSON object", field=field)

    prefix = "" if field == "revision" else f"{field}."

    name = _lookup(raw, "name")
    if name is not None and not isinstance(name, str):
        raise MalformedInputError(message="Field `name` must be a string", field=f"{prefix}name")

    snapshot = _lookup(raw, "snapshot")
    if snapshot is not None and not isinstance(snapshot, Mapping):
        raise MalformedInputError(message="Field `snapshot` must be a JSON object", field=f"{prefix}snapshot")

    alternate_ids = _lookup(raw, "alternate_ids")
    if alternate_ids is None:
        alternate_ids = []
    if not isinstance(alternate_ids, list) or not all(isinstance(item, str) for item in alternate_ids):
        raise MalformedInputError(
            message="Field `alternate_ids` must be a list of strings",
            field=f"{prefix}alternate_ids",
        )

    return ResourceRevision(
        name=name,
        snapshot=dict(snapshot) if snapshot is not None else None,
        create_time=parse_timestamp(_lookup(raw, "create_time"), field=f"{prefix}create_time"),
        alternate_ids=list(alternate_ids),
    )


def map_revision_history(raw: Any) -> list[ResourceRevision]:
    """Map a list of revisions (or a `{"revisions": [...]}` page) in creation order."""
    if isinstance(raw, Mapping):
        raw = raw.get("revisions")
    if not isinstance(raw, list):
        raise MalformedInputError(
            message="Revision history must be a list of revisions",
            field="revisions",
        )
    return [map_revision(item, field=f"revisions[{index}]") for index, item in enumerate(raw)]


def parse_timestamp(value: Any, *, field: str) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError as exc:
            raise MalformedInputError(message=f"Invalid timestamp value: {value}", field=field) from exc
    else:
        raise MalformedInputError(message="Timestamp fields must be RFC 3339 strings", field=field)

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _lookup(raw: Mapping[str, Any], key: str) -> Any:
    for candidate in _FIELD_ALIASES[key]:
        if candidate in raw:
            return raw[candidate]
    return None
