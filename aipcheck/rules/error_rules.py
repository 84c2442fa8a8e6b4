"""Rules for error responses built on `google.rpc.Status`.

Each check receives an `ErrorCheckContext` and returns one `Finding` per
offending field. Paths are relative to the checked input, so payloads that
arrived inside the HTTP+JSON envelope are reported under `error.`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import re
from urllib.parse import urlparse

from aipcheck.core.codes import CANONICAL_HTTP_STATUSES
from aipcheck.core.codes import code_from_name
from aipcheck.core.codes import code_from_number
from aipcheck.core.codes import http_status_for
from aipcheck.rules.registry import Finding
from aipcheck.rules.registry import Rule
from aipcheck.rules.registry import RuleCategory
from aipcheck.schemas.error import Help
from aipcheck.schemas.error import StatusPayload
from aipcheck.schemas.error import UnknownDetail
from aipcheck.schemas.report import Severity

REASON_PATTERN = re.compile(r"[A-Z][A-Z0-9_]+[A-Z0-9]")
REASON_MAX_LENGTH = 63
METADATA_KEY_PATTERN = re.compile(r"[a-z][a-zA-Z0-9_-]+")
METADATA_KEY_MAX_LENGTH = 64
DOMAIN_PATTERN = re.compile(
    r"(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]([a-z0-9-]{0,61}[a-z0-9])?",
    re.IGNORECASE,
)
LOCALE_PATTERN = re.compile(
    r"(?:[A-Za-z]{2,3}(-[A-Za-z]{4})?(-([A-Za-z]{2}|[0-9]{3}))?(-([A-Za-z0-9]{5,8}|[0-9][A-Za-z0-9]{3}))*"
    r"(-[0-9A-WY-Za-wy-z](-[A-Za-z0-9]{2,8})+)*(-[Xx](-[A-Za-z0-9]{1,8})+)?"
    r"|[Xx](-[A-Za-z0-9]{1,8})+)"
)


@dataclass(frozen=True)
class ErrorCheckContext:
    """Everything an error-response rule may look at."""

    payload: StatusPayload
    message_bindings: Mapping[str, str] | None = None
    http_status: int | None = None
    require_message_bindings: bool = True

    def path(self, suffix: str) -> str:
        if self.payload.enveloped:
            return f"error.{suffix}"
        return suffix

    def expected_http_status(self) -> int | None:
        """HTTP status implied by the payload code, or None when the code is not canonical."""
        code = self.payload.code
        if self.payload.representation == "http":
            return code if code in CANONICAL_HTTP_STATUSES else None
        canonical = code_from_number(code)
        return http_status_for(canonical) if canonical is not None else None


def check_canonical_code(ctx: ErrorCheckContext) -> list[Finding]:
    payload = ctx.payload
    findings: list[Finding] = []
    if payload.representation == "http":
        if payload.code not in CANONICAL_HTTP_STATUSES:
            findings.append(
                Finding(
                    message=f"HTTP code {payload.code} does not correspond to any canonical status code",
                    path=ctx.path("code"),
                )
            )
    elif code_from_number(payload.code) is None:
        findings.append(
            Finding(
                message=f"Code {payload.code} is not a canonical status code (0-16)",
                path=ctx.path("code"),
            )
        )

    if payload.status is not None and code_from_name(payload.status) is None:
        findings.append(
            Finding(
                message=f"Status `{payload.status}` is not a canonical status code name",
                path=ctx.path("status"),
            )
        )
    return findings


def check_status_matches_code(ctx: ErrorCheckContext) -> list[Finding]:
    payload = ctx.payload
    canonical = code_from_name(payload.status)
    if payload.representation != "http" or canonical is None:
        return []
    if payload.code not in CANONICAL_HTTP_STATUSES:
        return []

    expected = http_status_for(canonical)
    if expected == payload.code:
        return []
    return [
        Finding(
            message=f"Status `{canonical.value}` maps to HTTP {expected}, but code is {payload.code}",
            path=ctx.path("status"),
        )
    ]


def check_transport_status(ctx: ErrorCheckContext) -> list[Finding]:
    if ctx.http_status is None:
        return []
    expected = ctx.expected_http_status()
    if expected is None or expected == ctx.http_status:
        return []
    return [
        Finding(
            message=f"Response was served with HTTP {ctx.http_status}, but the payload code implies HTTP {expected}",
            path=ctx.path("code"),
        )
    ]


def check_error_info_present(ctx: ErrorCheckContext) -> list[Finding]:
    if ctx.payload.error_infos():
        return []
    return [Finding(message="Error details must include an ErrorInfo", path=ctx.path("details"))]


def check_single_error_info(ctx: ErrorCheckContext) -> list[Finding]:
    error_infos = ctx.payload.error_infos()
    if len(error_infos) < 2:
        return []
    index, _ = error_infos[1]
    return [
        Finding(
            message=f"Error details carry {len(error_infos)} ErrorInfo entries; exactly one is allowed",
            path=ctx.path(f"details[{index}]"),
        )
    ]


def check_reason_format(ctx: ErrorCheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for index, info in ctx.payload.error_infos():
        reason = info.reason
        if REASON_PATTERN.fullmatch(reason) and len(reason) <= REASON_MAX_LENGTH:
            continue
        findings.append(
            Finding(
                message=(
                    f"Reason `{reason}` must be UPPER_SNAKE_CASE matching "
                    f"{REASON_PATTERN.pattern} and at most {REASON_MAX_LENGTH} characters"
                ),
                path=ctx.path(f"details[{index}].reason"),
            )
        )
    return findings


def check_domain(ctx: ErrorCheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for index, info in ctx.payload.error_infos():
        path = ctx.path(f"details[{index}].domain")
        if not info.domain.strip():
            findings.append(Finding(message="ErrorInfo domain must not be empty", path=path))
        elif not DOMAIN_PATTERN.fullmatch(info.domain):
            findings.append(
                Finding(
                    message=f"Domain `{info.domain}` is not a globally scoped service name",
                    path=path,
                )
            )
    return findings


def check_metadata_keys(ctx: ErrorCheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for index, info in ctx.payload.error_infos():
        for key in info.metadata:
            if METADATA_KEY_PATTERN.fullmatch(key) and len(key) <= METADATA_KEY_MAX_LENGTH:
                continue
            findings.append(
                Finding(
                    message=(
                        f"Metadata key `{key}` must match {METADATA_KEY_PATTERN.pattern} "
                        f"and be at most {METADATA_KEY_MAX_LENGTH} characters"
                    ),
                    path=ctx.path(f"details[{index}].metadata.{key}"),
                )
            )
    return findings


def _message_paths(ctx: ErrorCheckContext) -> list[str]:
    paths: list[str] = []
    if ctx.payload.message:
        paths.append(ctx.path("message"))
    for index, localized in ctx.payload.localized_messages():
        if localized.message:
            paths.append(ctx.path(f"details[{index}].message"))
    return paths


def check_dynamic_content_verifiable(ctx: ErrorCheckContext) -> list[Finding]:
    if ctx.message_bindings is not None or not ctx.require_message_bindings:
        return []
    return [
        Finding(
            message=(
                "Message text cannot be correlated with ErrorInfo metadata "
                "without template variable bindings"
            ),
            path=path,
        )
        for path in _message_paths(ctx)
    ]


def check_bound_metadata_present(ctx: ErrorCheckContext) -> list[Finding]:
    if not ctx.message_bindings:
        return []
    findings: list[Finding] = []
    for index, info in ctx.payload.error_infos():
        for variable, key in ctx.message_bindings.items():
            if key in info.metadata:
                continue
            findings.append(
                Finding(
                    message=(
                        f"Message variable `{variable}` is bound to metadata key `{key}`, "
                        "which ErrorInfo metadata does not contain"
                    ),
                    path=ctx.path(f"details[{index}].metadata"),
                )
            )
    return findings


def check_unique_detail_types(ctx: ErrorCheckContext) -> list[Finding]:
    payload = ctx.payload
    seen: set[str] = set()
    reported: set[str] = set()
    findings: list[Finding] = []
    for index in range(len(payload.details)):
        key = payload.detail_key(index)
        if key not in seen:
            seen.add(key)
            continue
        if key in reported:
            continue
        reported.add(key)
        findings.append(
            Finding(
                message=f"Detail type `{key}` appears more than once",
                path=ctx.path(f"details[{index}]"),
            )
        )
    return findings


def check_localized_message_complete(ctx: ErrorCheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for index, localized in ctx.payload.localized_messages():
        if bool(localized.locale) == bool(localized.message):
            continue
        missing = "message" if localized.locale else "locale"
        findings.append(
            Finding(
                message="LocalizedMessage must populate locale and message together",
                path=ctx.path(f"details[{index}].{missing}"),
            )
        )
    return findings


def check_locale_format(ctx: ErrorCheckContext) -> list[Finding]:
    return [
        Finding(
            message=f"Locale `{localized.locale}` is not a BCP-47 language tag",
            path=ctx.path(f"details[{index}].locale"),
        )
        for index, localized in ctx.payload.localized_messages()
        if localized.locale and not LOCALE_PATTERN.fullmatch(localized.locale)
    ]


def check_help_links(ctx: ErrorCheckContext) -> list[Finding]:
    findings: list[Finding] = []
    for index, detail in enumerate(ctx.payload.details):
        if not isinstance(detail, Help):
            continue
        for link_index, link in enumerate(detail.links):
            prefix = f"details[{index}].links[{link_index}]"
            parsed = urlparse(link.url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                findings.append(
                    Finding(
                        message=f"Help link url `{link.url}` must be an absolute http(s) URL",
                        path=ctx.path(f"{prefix}.url"),
                    )
                )
            if not link.description.strip():
                findings.append(
                    Finding(
                        message="Help link must describe what the link offers",
                        path=ctx.path(f"{prefix}.description"),
                    )
                )
    return findings


def check_known_detail_types(ctx: ErrorCheckContext) -> list[Finding]:
    return [
        Finding(
            message=f"Detail type `{detail.type_url}` is not a standard error detail payload",
            path=ctx.path(f"details[{index}].@type"),
        )
        for index, detail in enumerate(ctx.payload.details)
        if isinstance(detail, UnknownDetail)
    ]


def _rule(rule_id: str, severity: Severity, check, description: str) -> Rule:
    return Rule(
        rule_id=rule_id,
        category=RuleCategory.ERROR_RESPONSE,
        severity=severity,
        check=check,
        description=description,
    )


ERROR_RESPONSE_RULES: tuple[Rule, ...] = (
    _rule("InvalidCode", Severity.ERROR, check_canonical_code, "Code and status are canonical"),
    _rule(
        "StatusCodeMismatch",
        Severity.ERROR,
        check_status_matches_code,
        "Status name agrees with the HTTP code",
    ),
    _rule(
        "HttpStatusMismatch",
        Severity.ERROR,
        check_transport_status,
        "Transport status agrees with the payload code",
    ),
    _rule("MissingErrorInfo", Severity.ERROR, check_error_info_present, "An ErrorInfo is present"),
    _rule("DuplicateErrorInfo", Severity.ERROR, check_single_error_info, "At most one ErrorInfo is present"),
    _rule("MalformedReason", Severity.ERROR, check_reason_format, "ErrorInfo reason format"),
    _rule("MissingDomain", Severity.ERROR, check_domain, "ErrorInfo domain is globally scoped"),
    _rule("MalformedMetadataKey", Severity.ERROR, check_metadata_keys, "ErrorInfo metadata key format"),
    _rule(
        "UnverifiableDynamicContent",
        Severity.WARNING,
        check_dynamic_content_verifiable,
        "Dynamic message content can be traced to metadata",
    ),
    _rule(
        "MissingMetadataKey",
        Severity.ERROR,
        check_bound_metadata_present,
        "Bound message variables appear in metadata",
    ),
    _rule(
        "DuplicateDetailType",
        Severity.ERROR,
        check_unique_detail_types,
        "At most one detail of each type",
    ),
    _rule(
        "IncompleteLocalizedMessage",
        Severity.ERROR,
        check_localized_message_complete,
        "LocalizedMessage fields are set together",
    ),
    _rule("MalformedLocale", Severity.ERROR, check_locale_format, "LocalizedMessage locale is BCP-47"),
    _rule("MalformedHelpLink", Severity.ERROR, check_help_links, "Help links are absolute and described"),
    _rule(
        "UnknownDetailType",
        Severity.WARNING,
        check_known_detail_types,
        "Details use the standard payload types",
    ),
)
