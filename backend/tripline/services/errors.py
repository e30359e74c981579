from __future__ import annotations


class TimelineError(Exception):
    """Base class for business friendly errors surfaced to API consumers."""

    def __init__(self, message: str, code: int = 15000) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ReorderError(TimelineError):
    pass


class PersistenceError(TimelineError):
    pass


DRAGGED_ITEM_MISSING = 15001
UNKNOWN_ANCHOR = 15002
PERSISTENCE_FAILED = 15020
TRIP_NOT_FOUND = 15021

__all__ = [
    "TimelineError",
    "ReorderError",
    "PersistenceError",
    "DRAGGED_ITEM_MISSING",
    "UNKNOWN_ANCHOR",
    "PERSISTENCE_FAILED",
    "TRIP_NOT_FOUND",
]
