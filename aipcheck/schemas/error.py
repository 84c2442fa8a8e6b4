"""Typed error-response schemas checked by the error validator."""

from __future__ import annotations

from typing import Any
from typing import ClassVar
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import SerializeAsAny
from pydantic.alias_generators import to_camel

Representation = Literal["http", "rpc"]

RPC_TYPE_PREFIX = "google.rpc."


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class DetailPayload(_WireModel):
    """Base for one entry of `Status.details`."""

    detail_type: ClassVar[str] = ""

    type_url: str = Field(default="", alias="@type")


class ErrorInfo(DetailPayload):
    """Machine-readable reason, domain and metadata for an error."""

    detail_type: ClassVar[str] = "ErrorInfo"

    reason: str = ""
    domain: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)


class LocalizedMessage(DetailPayload):
    detail_type: ClassVar[str] = "LocalizedMessage"

    locale: str = ""
    message: str = ""


class HelpLink(_WireModel):
    description: str = ""
    url: str = ""


class Help(DetailPayload):
    detail_type: ClassVar[str] = "Help"

    links: list[HelpLink] = Field(default_factory=list)


class RetryInfo(DetailPayload):
    detail_type: ClassVar[str] = "RetryInfo"

    retry_delay: str | None = None


class DebugInfo(DetailPayload):
    detail_type: ClassVar[str] = "DebugInfo"

    stack_entries: list[str] = Field(default_factory=list)
    detail: str = ""


class QuotaViolation(_WireModel):
    subject: str = ""
    description: str = ""


class QuotaFailure(DetailPayload):
    detail_type: ClassVar[str] = "QuotaFailure"

    violations: list[QuotaViolation] = Field(default_factory=list)


class PreconditionViolation(_WireModel):
    type: str = ""
    subject: str = ""
    description: str = ""


class PreconditionFailure(DetailPayload):
    detail_type: ClassVar[str] = "PreconditionFailure"

    violations: list[PreconditionViolation] = Field(default_factory=list)


class FieldViolation(_WireModel):
    field: str = ""
    description: str = ""


class BadRequest(DetailPayload):
    detail_type: ClassVar[str] = "BadRequest"

    field_violations: list[FieldViolation] = Field(default_factory=list)


class RequestInfo(DetailPayload):
    detail_type: ClassVar[str] = "RequestInfo"

    request_id: str = ""
    serving_data: str = ""


class ResourceInfo(DetailPayload):
    detail_type: ClassVar[str] = "ResourceInfo"

    resource_type: str = ""
    resource_name: str = ""
    owner: str = ""
    description: str = ""


class UnknownDetail(DetailPayload):
    """Detail whose `@type` is not one of the standard payloads."""

    raw_fields: dict[str, Any] = Field(default_factory=dict)

    @property
    def type_name(self) -> str:
        return self.type_url.rsplit("/", 1)[-1]


DETAIL_MODELS: dict[str, type[DetailPayload]] = {
    model.detail_type: model
    for model in (
        ErrorInfo,
        LocalizedMessage,
        Help,
        RetryInfo,
        DebugInfo,
        QuotaFailure,
        PreconditionFailure,
        BadRequest,
        RequestInfo,
        ResourceInfo,
    )
}


def resolve_detail_model(type_url: str) -> type[DetailPayload] | None:
    """Return the standard detail model named by a `@type` URL, if any."""
    type_name = type_url.rsplit("/", 1)[-1]
    if type_name.startswith(RPC_TYPE_PREFIX):
        type_name = type_name[len(RPC_TYPE_PREFIX):]
    return DETAIL_MODELS.get(type_name)


class StatusPayload(_WireModel):
    """Canonical error payload: code, message and typed details."""

    code: int
    message: str | None = None
    status: str | None = None
    details: list[SerializeAsAny[DetailPayload]] = Field(default_factory=list)
    representation: Representation = "rpc"
    enveloped: bool = False

    def detail_key(self, index: int) -> str:
        """Stable identity of the detail type at `index` for duplicate checks."""
        detail = self.details[index]
        if isinstance(detail, UnknownDetail):
            return detail.type_name
        return detail.detail_type

    def error_infos(self) -> list[tuple[int, ErrorInfo]]:
        return [
            (index, detail)
            for index, detail in enumerate(self.details)
            if isinstance(detail, ErrorInfo)
        ]

    def localized_messages(self) -> list[tuple[int, LocalizedMessage]]:
        return [
            (index, detail)
            for index, detail in enumerate(self.details)
            if isinstance(detail, LocalizedMessage)
        ]
