"""
Someday — In-memory store.

Everything lives on the instance, so each test (or each development process
with ``STORE_BACKEND=memory``) gets an isolated world.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog

from someday.exceptions import DuplicateSwipeError
from someday.schemas.match import MatchRecord, SwipeRecord
from someday.schemas.profile import ProfileRecord
from someday.stores.base import BaseStore, PairLocks, PairScope, pair_key

logger = structlog.get_logger("someday.stores.memory")


class InMemoryStore(BaseStore):

    def __init__(self) -> None:
        self._profiles: dict[str, ProfileRecord] = {}
        self._swipes: dict[str, list[SwipeRecord]] = {}
        self._last_swipe: dict[str, str] = {}
        self._matches: dict[tuple[str, str], MatchRecord] = {}
        self._pair_locks = PairLocks()

    # ── Profiles ──────────────────────────────────────────────────────────

    async def get_profile(self, user_id: str) -> Optional[ProfileRecord]:
        return self._profiles.get(user_id)

    async def save_profile(self, profile: ProfileRecord) -> ProfileRecord:
        existing = self._profiles.get(profile.user_id)
        if existing is not None:
            profile = profile.model_copy(
                update={"created_at": existing.created_at, "updated_at": profile.created_at}
            )
        self._profiles[profile.user_id] = profile
        return profile

    async def list_profiles(self) -> list[ProfileRecord]:
        return sorted(self._profiles.values(), key=lambda p: p.created_at)

    # ── Swipes ────────────────────────────────────────────────────────────

    def _find_swipe(self, user_id: str, target_id: str) -> Optional[SwipeRecord]:
        for record in self._swipes.get(user_id, []):
            if record.target_id == target_id:
                return record
        return None

    async def get_swipe(self, user_id: str, target_id: str) -> Optional[SwipeRecord]:
        return self._find_swipe(user_id, target_id)

    async def append_swipe(self, record: SwipeRecord) -> SwipeRecord:
        if self._find_swipe(record.user_id, record.target_id) is not None:
            raise DuplicateSwipeError(record.user_id, record.target_id)
        self._swipes.setdefault(record.user_id, []).append(record)
        self._last_swipe[record.user_id] = record.id
        return record

    async def get_last_swipe(self, user_id: str) -> Optional[SwipeRecord]:
        swipe_id = self._last_swipe.get(user_id)
        if swipe_id is None:
            return None
        for record in self._swipes.get(user_id, []):
            if record.id == swipe_id:
                return record
        return None

    async def clear_last_swipe(self, user_id: str) -> None:
        self._last_swipe.pop(user_id, None)

    async def delete_swipe(self, swipe_id: str) -> None:
        for user_id, records in self._swipes.items():
            remaining = [r for r in records if r.id != swipe_id]
            if len(remaining) != len(records):
                self._swipes[user_id] = remaining
                if self._last_swipe.get(user_id) == swipe_id:
                    del self._last_swipe[user_id]
                return

    async def list_swipes(self, user_id: str) -> list[SwipeRecord]:
        return list(self._swipes.get(user_id, []))

    async def find_reciprocal_like(
        self, user_id: str, target_id: str
    ) -> Optional[SwipeRecord]:
        reciprocal = self._find_swipe(target_id, user_id)
        if reciprocal is not None and reciprocal.liked:
            return reciprocal
        return None

    # ── Matches ───────────────────────────────────────────────────────────

    async def find_match(self, user_a_id: str, user_b_id: str) -> Optional[MatchRecord]:
        return self._matches.get(pair_key(user_a_id, user_b_id))

    async def add_match(self, record: MatchRecord) -> MatchRecord:
        key = pair_key(record.user_id, record.counterparty_id)
        existing = self._matches.get(key)
        if existing is not None:
            logger.info("match_already_stored", match_id=existing.id)
            return existing
        self._matches[key] = record
        return record

    async def list_matches(self, user_id: str) -> list[MatchRecord]:
        matches = [m for m in self._matches.values() if m.involves(user_id)]
        return sorted(matches, key=lambda m: m.matched_at, reverse=True)

    # ── Isolation ─────────────────────────────────────────────────────────

    @asynccontextmanager
    async def pair_lock(
        self, user_a_id: str, user_b_id: str
    ) -> AsyncIterator[PairScope]:
        # Every write here is already atomic, so the store is its own scope.
        async with self._pair_locks.get(user_a_id, user_b_id):
            yield self
