"""Unit tests for environment-driven checker settings."""

from __future__ import annotations

import pytest

from aipcheck.core.config import DEFAULT_BATCH_MAX_WORKERS
from aipcheck.core.config import CheckerSettings
from aipcheck.core.config import get_checker_settings


def test_defaults_without_environment() -> None:
    settings = get_checker_settings()

    assert settings == CheckerSettings()
    assert settings.batch_max_workers == DEFAULT_BATCH_MAX_WORKERS
    assert settings.require_message_bindings is True


def test_settings_are_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIPCHECK_DISABLED_RULES", "UnknownDetailType, MalformedLocale,")
    monkeypatch.setenv("AIPCHECK_STRICT", "yes")
    monkeypatch.setenv("AIPCHECK_BATCH_MAX_WORKERS", "2")
    monkeypatch.setenv("AIPCHECK_REQUIRE_MESSAGE_BINDINGS", "false")

    settings = get_checker_settings()

    assert settings.disabled_rules == frozenset({"UnknownDetailType", "MalformedLocale"})
    assert settings.strict is True
    assert settings.batch_max_workers == 2
    assert settings.require_message_bindings is False
    assert settings.safe_for_logging()["disabled_rules"] == "MalformedLocale,UnknownDetailType"


def test_invalid_boolean_flag_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AIPCHECK_STRICT", "sometimes")

    with pytest.raises(ValueError):
        get_checker_settings()


def test_worker_count_must_be_positive() -> None:
    with pytest.raises(ValueError):
        CheckerSettings(batch_max_workers=0)
