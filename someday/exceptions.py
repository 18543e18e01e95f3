"""
Someday — Matching engine error taxonomy.

``InvalidVectorError`` and ``DuplicateSwipeError`` are caller faults and are
not retryable as-is.  ``StoreUnavailableError`` is transient: the engine never
retries internally, callers retry with backoff.
"""

from __future__ import annotations


class SomedayError(Exception):
    """Base exception for the matching engine."""
    pass


class InvalidVectorError(SomedayError, ValueError):
    """A preference vector is missing a field or has an out-of-range value."""

    def __init__(self, message: str, fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.fields: list[str] = fields or []


class DuplicateSwipeError(SomedayError):
    """The user already decided on this candidate."""

    def __init__(self, user_id: str, target_id: str) -> None:
        super().__init__(f"User {user_id} already swiped on {target_id}")
        self.user_id = user_id
        self.target_id = target_id


class StoreUnavailableError(SomedayError):
    """A persistence call timed out or failed.  Safe to retry."""

    def __init__(self, operation: str, reason: str = "") -> None:
        message = f"Store unavailable during {operation}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.operation = operation
        self.reason = reason
