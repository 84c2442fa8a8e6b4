"""Checker configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from functools import lru_cache
import os

DEFAULT_BATCH_MAX_WORKERS = 4

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _get_csv_env(name: str) -> frozenset[str]:
    raw = os.getenv(name)
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class CheckerSettings:
    """Runtime settings for rule selection and reporting."""

    disabled_rules: frozenset[str] = field(default_factory=frozenset)
    strict: bool = False
    batch_max_workers: int = DEFAULT_BATCH_MAX_WORKERS
    require_message_bindings: bool = True

    def __post_init__(self) -> None:
        if self.batch_max_workers <= 0:
            raise ValueError("batch_max_workers must be positive")

    def safe_for_logging(self) -> dict[str, str | int | bool]:
        """Return checker settings safe for logs."""
        return {
            "disabled_rules": ",".join(sorted(self.disabled_rules)),
            "strict": self.strict,
            "batch_max_workers": self.batch_max_workers,
            "require_message_bindings": self.require_message_bindings,
        }


@lru_cache(maxsize=1)
def get_checker_settings() -> CheckerSettings:
    """Load checker settings from the environment."""
    return CheckerSettings(
        disabled_rules=_get_csv_env("AIPCHECK_DISABLED_RULES"),
        strict=_get_bool_env("AIPCHECK_STRICT", False),
        batch_max_workers=_get_int_env("AIPCHECK_BATCH_MAX_WORKERS", DEFAULT_BATCH_MAX_WORKERS),
        require_message_bindings=_get_bool_env("AIPCHECK_REQUIRE_MESSAGE_BINDINGS", True),
    )
