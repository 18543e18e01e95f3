"""
Someday — Store interface

The matching engine holds no process-wide state: profiles, swipes, the
per-user undo pointer and matches all live behind a ``BaseStore``.  Two
implementations ship with the package:

* ``InMemoryStore`` — dictionaries guarded by per-pair ``asyncio.Lock``s,
  used by the test-suite and ``STORE_BACKEND=memory`` development runs.
* ``SQLStore`` — async SQLAlchemy with bounded timeouts; a pair's
  unit of work is one transaction holding a PostgreSQL advisory lock.
"""

from __future__ import annotations

import asyncio
import weakref
from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional

from someday.schemas.match import MatchRecord, SwipeRecord
from someday.schemas.profile import ProfileRecord


def pair_key(user_a_id: str, user_b_id: str) -> tuple[str, str]:
    """Order-independent key for a pair of users."""
    return (user_a_id, user_b_id) if user_a_id <= user_b_id else (user_b_id, user_a_id)


class PairLocks:
    """Process-local ``asyncio.Lock`` per user pair.

    Locks are held weakly so that pairs nobody is evaluating do not
    accumulate.
    """

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def get(self, user_a_id: str, user_b_id: str) -> asyncio.Lock:
        key = pair_key(user_a_id, user_b_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


class PairScope(ABC):
    """Operations available inside one pair's isolated unit of work.

    ``BaseStore.pair_lock`` yields a scope; every read and write made through
    it sees, and is serialized with, every other evaluation of the same pair.
    """

    @abstractmethod
    async def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        ...

    @abstractmethod
    async def get_swipe(self, user_id: str, target_id: str) -> Optional[SwipeRecord]:
        ...

    @abstractmethod
    async def find_reciprocal_like(
        self, user_id: str, target_id: str
    ) -> Optional[SwipeRecord]:
        """Return ``target_id``'s like on ``user_id``, if any."""

    @abstractmethod
    async def delete_swipe(self, swipe_id: str) -> None:
        """Delete a swipe and any undo pointer that references it."""

    @abstractmethod
    async def clear_last_swipe(self, user_id: str) -> None:
        ...

    @abstractmethod
    async def find_match(self, user_a_id: str, user_b_id: str) -> Optional[MatchRecord]:
        ...

    @abstractmethod
    async def add_match(self, record: MatchRecord) -> MatchRecord:
        """Persist ``record`` unless the pair already has a match, in which
        case the existing match is returned unchanged."""


class BaseStore(PairScope):
    """Persistence contract consumed by the engine services.

    Any method may raise ``StoreUnavailableError``.
    """

    # ── Profiles ──────────────────────────────────────────────────────────

    @abstractmethod
    async def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        """Insert or replace a profile, keeping the original ``created_at``."""

    @abstractmethod
    async def list_profiles(self) -> list[ProfileRecord]:
        ...

    # ── Swipes ────────────────────────────────────────────────────────────

    @abstractmethod
    async def append_swipe(self, record: SwipeRecord) -> SwipeRecord:
        """Append ``record`` and make it the user's last swipe, atomically.

        Raises ``DuplicateSwipeError`` if the (user_id, target_id) pair is
        already present.
        """

    @abstractmethod
    async def get_last_swipe(self, user_id: str) -> Optional[SwipeRecord]:
        ...

    @abstractmethod
    async def list_swipes(self, user_id: str) -> list[SwipeRecord]:
        """Return the user's swipes, oldest first."""

    # ── Matches ───────────────────────────────────────────────────────────

    @abstractmethod
    async def list_matches(self, user_id: str) -> list[MatchRecord]:
        """Return matches involving ``user_id``, newest first."""

    # ── Isolation ─────────────────────────────────────────────────────────

    @abstractmethod
    def pair_lock(self, user_a_id: str, user_b_id: str) -> AsyncContextManager[PairScope]:
        """Open an isolated unit of work for one pair of users.

        Mutual-match evaluation and undo both run inside it, so neither can
        observe the other half-done.  Writes made through the yielded scope
        are committed when the block exits cleanly.
        """
