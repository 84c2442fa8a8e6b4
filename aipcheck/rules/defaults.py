"""Static registration of the built-in rule set."""

from __future__ import annotations

from functools import lru_cache
import logging

from aipcheck.core.config import CheckerSettings
from aipcheck.core.config import get_checker_settings
from aipcheck.rules.error_rules import ERROR_RESPONSE_RULES
from aipcheck.rules.registry import Rule
from aipcheck.rules.registry import RuleRegistry
from aipcheck.rules.revision_rules import REVISION_RULES

logger = logging.getLogger(__name__)

BUILTIN_RULES = ERROR_RESPONSE_RULES + REVISION_RULES


def build_default_registry(settings: CheckerSettings | None = None) -> RuleRegistry:
    """Register every built-in rule, minus the ones disabled in settings."""
    settings = settings or get_checker_settings()
    registry = RuleRegistry(BUILTIN_RULES)
    if settings.disabled_rules:
        registry = registry.without(settings.disabled_rules)
    logger.debug(
        "Built rule registry with %s rules (disabled=%s)",
        len(registry),
        sorted(settings.disabled_rules),
    )
    return registry


@lru_cache(maxsize=8)
def _enabled_rules(settings: CheckerSettings) -> tuple[Rule, ...]:
    return tuple(build_default_registry(settings))


def default_registry(settings: CheckerSettings) -> RuleRegistry:
    """Fresh registry of the enabled built-in rules.

    Only the immutable rule selection is cached per settings value, so a
    caller registering extra rules never affects other checks.
    """
    return RuleRegistry(_enabled_rules(settings))
