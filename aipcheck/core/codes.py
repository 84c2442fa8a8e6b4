"""Canonical status codes and their HTTP mappings."""

from __future__ import annotations

from enum import Enum


class CanonicalCode(str, Enum):
    OK = "OK"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RESOURCE_EXHAUSTED = "RESOURCE_EXHAUSTED"
    FAILED_PRECONDITION = "FAILED_PRECONDITION"
    ABORTED = "ABORTED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    UNIMPLEMENTED = "UNIMPLEMENTED"
    INTERNAL = "INTERNAL"
    UNAVAILABLE = "UNAVAILABLE"
    DATA_LOSS = "DATA_LOSS"
    UNAUTHENTICATED = "UNAUTHENTICATED"


RPC_CODE_NUMBERS: dict[CanonicalCode, int] = {
    CanonicalCode.OK: 0,
    CanonicalCode.CANCELLED: 1,
    CanonicalCode.UNKNOWN: 2,
    CanonicalCode.INVALID_ARGUMENT: 3,
    CanonicalCode.DEADLINE_EXCEEDED: 4,
    CanonicalCode.NOT_FOUND: 5,
    CanonicalCode.ALREADY_EXISTS: 6,
    CanonicalCode.PERMISSION_DENIED: 7,
    CanonicalCode.RESOURCE_EXHAUSTED: 8,
    CanonicalCode.FAILED_PRECONDITION: 9,
    CanonicalCode.ABORTED: 10,
    CanonicalCode.OUT_OF_RANGE: 11,
    CanonicalCode.UNIMPLEMENTED: 12,
    CanonicalCode.INTERNAL: 13,
    CanonicalCode.UNAVAILABLE: 14,
    CanonicalCode.DATA_LOSS: 15,
    CanonicalCode.UNAUTHENTICATED: 16,
}

HTTP_STATUS_BY_CODE: dict[CanonicalCode, int] = {
    CanonicalCode.OK: 200,
    CanonicalCode.CANCELLED: 499,
    CanonicalCode.UNKNOWN: 500,
    CanonicalCode.INVALID_ARGUMENT: 400,
    CanonicalCode.DEADLINE_EXCEEDED: 504,
    CanonicalCode.NOT_FOUND: 404,
    CanonicalCode.ALREADY_EXISTS: 409,
    CanonicalCode.PERMISSION_DENIED: 403,
    CanonicalCode.RESOURCE_EXHAUSTED: 429,
    CanonicalCode.FAILED_PRECONDITION: 400,
    CanonicalCode.ABORTED: 409,
    CanonicalCode.OUT_OF_RANGE: 400,
    CanonicalCode.UNIMPLEMENTED: 501,
    CanonicalCode.INTERNAL: 500,
    CanonicalCode.UNAVAILABLE: 503,
    CanonicalCode.DATA_LOSS: 500,
    CanonicalCode.UNAUTHENTICATED: 401,
}

CANONICAL_HTTP_STATUSES = frozenset(HTTP_STATUS_BY_CODE.values())
_CODES_BY_NUMBER = {number: code for code, number in RPC_CODE_NUMBERS.items()}


def code_from_name(name: str | None) -> CanonicalCode | None:
    """Return the canonical code for an enum name, or None when unknown."""
    if name is None:
        return None
    try:
        return CanonicalCode(name)
    except ValueError:
        return None


def code_from_number(number: int) -> CanonicalCode | None:
    return _CODES_BY_NUMBER.get(number)


def http_status_for(code: CanonicalCode) -> int:
    return HTTP_STATUS_BY_CODE[code]
