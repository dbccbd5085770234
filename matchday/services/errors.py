"""
Error types and store results for the match-day engine.

Validation problems in stored data are recovered where they are found and
only logged. Store operations never raise: they return a ``StoreResult`` and
the caller decides whether to surface a ``PersistenceError``.
"""
from dataclasses import dataclass
from typing import Any, Optional


class MatchdayError(Exception):
    """Base class for engine errors."""
    pass


class ValidationError(MatchdayError):
    """A stored or submitted record is structurally invalid."""
    pass


class NotFoundError(MatchdayError):
    """An operation referenced a game or player id that is not present."""
    pass


class PersistenceError(MatchdayError):
    """A durable write or delete failed; in-memory state was preserved or rolled back."""
    pass


class ConflictError(MatchdayError):
    """Reserved: concurrent edits of one session are not detected."""
    pass


class GameFinishedError(MatchdayError):
    """A gameplay mutator was called on a finished game."""
    pass


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a durable-store call."""
    ok: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None) -> "StoreResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> "StoreResult":
        return cls(ok=False, error=error)
