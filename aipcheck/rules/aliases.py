"""Alias resolution for revision histories.

An alias is either unassigned or assigned to exactly one revision. Assigning
always succeeds and overwrites the previous target; deleting returns the alias
to unassigned. The reserved `latest` alias is never stored: it always resolves
to the most recently registered revision.
"""

from __future__ import annotations

from dataclasses import dataclass

from aipcheck.schemas.revision import LATEST_ALIAS


@dataclass(frozen=True)
class Unassigned:
    pass


@dataclass(frozen=True)
class Assigned:
    target: str


AliasState = Unassigned | Assigned

UNASSIGNED = Unassigned()


class ReservedAliasError(ValueError):
    """Raised when a caller tries to assign the server-managed `latest` alias."""


class AliasTable:
    """Mutable alias → revision pointer table for one parent resource."""

    def __init__(self) -> None:
        self._targets: dict[str, str] = {}
        self._latest: str | None = None

    def record_revision(self, revision_name: str) -> None:
        """Register a newly created revision; `latest` now points at it."""
        self._latest = revision_name

    def assign(self, alias: str, target: str) -> AliasState:
        """Point `alias` at `target`, returning the state it replaced.

        Always succeeds and overwrites, except for the server-managed `latest`
        alias, which raises `ReservedAliasError`.
        """
        if alias == LATEST_ALIAS:
            raise ReservedAliasError(f"`{LATEST_ALIAS}` is managed by the server")
        previous = self.state(alias)
        self._targets[alias] = target
        return previous

    def delete(self, alias: str) -> AliasState:
        previous = self.state(alias)
        self._targets.pop(alias, None)
        return previous

    def state(self, alias: str) -> AliasState:
        if alias == LATEST_ALIAS:
            return Assigned(self._latest) if self._latest is not None else UNASSIGNED
        target = self._targets.get(alias)
        return Assigned(target) if target is not None else UNASSIGNED

    def resolve(self, alias: str) -> str | None:
        state = self.state(alias)
        return state.target if isinstance(state, Assigned) else None

    def aliases(self) -> dict[str, str]:
        return dict(self._targets)
