"""Pydantic schemas for resource-revision definitions and instances."""

from __future__ import annotations

from datetime import datetime
import re
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

REVISIONS_COLLECTION = "revisions"
LATEST_ALIAS = "latest"
REVISION_NAME_PATTERN = re.compile(
    rf"(?P<parent>[^/](?:.*[^/])?)/{REVISIONS_COLLECTION}/(?P<revision_id>[^/]+)"
)


class FieldDescriptor(BaseModel):
    """One field of a revision message definition."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "string"
    repeated: bool = False
    ordered: bool = False


class RevisionSchema(BaseModel):
    """Structural description of a revision resource type."""

    model_config = ConfigDict(frozen=True)

    type_name: str
    parent_type: str
    name_pattern: str
    fields: list[FieldDescriptor] = Field(default_factory=list)

    def field_named(self, name: str) -> FieldDescriptor | None:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        return None


class ResourceRevision(BaseModel):
    """Point-in-time snapshot of a parent resource."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    snapshot: dict[str, Any] | None = None
    create_time: datetime | None = None
    alternate_ids: list[str] = Field(default_factory=list)

    @property
    def parent(self) -> str | None:
        """Parent resource name, or None when `name` is not a revision name."""
        match = REVISION_NAME_PATTERN.fullmatch(self.name or "")
        return match.group("parent") if match else None

    @property
    def revision_id(self) -> str | None:
        match = REVISION_NAME_PATTERN.fullmatch(self.name or "")
        return match.group("revision_id") if match else None
