"""Shared pytest fixtures for aipcheck test suites."""

from collections.abc import Generator
import copy
from pathlib import Path
import sys
from typing import Any

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

ERROR_INFO_TYPE = "type.googleapis.com/google.rpc.ErrorInfo"
LOCALIZED_MESSAGE_TYPE = "type.googleapis.com/google.rpc.LocalizedMessage"
HELP_TYPE = "type.googleapis.com/google.rpc.Help"

_QUOTA_ERROR: dict[str, Any] = {
    "code": 429,
    "status": "RESOURCE_EXHAUSTED",
    "details": [
        {
            "@type": ".../ErrorInfo",
            "reason": "RESOURCE_AVAILABILITY",
            "domain": "compute.googleapis.com",
            "metadata": {"zone": "us-east1-a"},
        }
    ],
}

_BOOK_REVISION: dict[str, Any] = {
    "name": "publishers/acme/books/les-miserables/revisions/c7cfa2a8",
    "snapshot": {"title": "Les Misérables", "author": "Victor Hugo"},
    "create_time": "2026-02-20T11:00:00Z",
    "alternate_ids": ["first-edition"],
}

_BOOK_REVISION_SCHEMA: dict[str, Any] = {
    "type_name": "library.googleapis.com/BookRevision",
    "parent_type": "library.googleapis.com/Book",
    "name_pattern": "publishers/{publisher}/books/{book}/revisions/{revision}",
    "fields": [
        {"name": "name", "type": "string"},
        {"name": "snapshot", "type": "library.googleapis.com/Book"},
        {"name": "create_time", "type": "google.protobuf.Timestamp"},
        {"name": "alternate_ids", "type": "string", "repeated": True},
    ],
}


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep checker settings independent from the caller's environment."""
    from aipcheck.core.config import get_checker_settings

    for name in (
        "AIPCHECK_DISABLED_RULES",
        "AIPCHECK_STRICT",
        "AIPCHECK_BATCH_MAX_WORKERS",
        "AIPCHECK_REQUIRE_MESSAGE_BINDINGS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_checker_settings.cache_clear()
    yield
    get_checker_settings.cache_clear()


@pytest.fixture
def quota_error() -> dict[str, Any]:
    """Well-formed bare status for an exhausted zonal resource."""
    return copy.deepcopy(_QUOTA_ERROR)


@pytest.fixture
def enveloped_error() -> dict[str, Any]:
    """Well-formed HTTP+JSON error envelope with a message and localized text."""
    return {
        "error": {
            "code": 403,
            "status": "PERMISSION_DENIED",
            "message": "Permission denied on project my-project.",
            "details": [
                {
                    "@type": ERROR_INFO_TYPE,
                    "reason": "API_DISABLED",
                    "domain": "googleapis.com",
                    "metadata": {"service": "pubsub.googleapis.com", "project": "my-project"},
                },
                {
                    "@type": LOCALIZED_MESSAGE_TYPE,
                    "locale": "en-US",
                    "message": "The Pub/Sub API is disabled for project my-project.",
                },
            ],
        }
    }


@pytest.fixture
def book_revision() -> dict[str, Any]:
    return copy.deepcopy(_BOOK_REVISION)


@pytest.fixture
def book_revision_schema() -> dict[str, Any]:
    return copy.deepcopy(_BOOK_REVISION_SCHEMA)
