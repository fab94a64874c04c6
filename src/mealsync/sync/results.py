"""Result types returned at the sync operation boundary."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from mealsync.client.errors import RemoteError, UnauthorizedError


class Outcome(str, Enum):
    """How a mutation ended after reconciliation."""

    RECONCILED = "reconciled"
    NOOP = "noop"
    SUPERSEDED = "superseded"
    REJECTED = "rejected"
    ROLLED_BACK = "rolled_back"
    RELOADED = "reloaded"
    ABORTED = "aborted"
    IMPORTED = "imported"
    NO_RECIPES = "no_recipes"
    FAILED = "failed"


SUCCESS_OUTCOMES = frozenset({Outcome.RECONCILED, Outcome.NOOP, Outcome.IMPORTED, Outcome.NO_RECIPES})


@dataclass(frozen=True)
class MutationResult:
    outcome: Outcome
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES


@dataclass(frozen=True)
class DeleteAttempt:
    """Outcome of one remote delete inside a batch."""

    item_id: str
    error: Optional[RemoteError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    @property
    def unauthorized(self) -> bool:
        return isinstance(self.error, UnauthorizedError)


@dataclass(frozen=True)
class BatchResult:
    """What a bulk operation committed, rolled back and never attempted."""

    outcome: Outcome
    committed: tuple[str, ...] = ()
    failed: Optional[str] = None
    restored: tuple[str, ...] = ()
    unattempted: tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES


@dataclass(frozen=True)
class ImportResult:
    outcome: Outcome
    recipe_ids: frozenset[str] = field(default_factory=frozenset)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES


__all__ = [
    "Outcome",
    "MutationResult",
    "DeleteAttempt",
    "BatchResult",
    "ImportResult",
]
