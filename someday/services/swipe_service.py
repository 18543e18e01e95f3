"""
Someday — Swipe ledger.

Owns the lifecycle of swipe records:

* ``record``    — at most one decision per (user, candidate); a second
                  attempt raises ``DuplicateSwipeError`` instead of
                  overwriting.  The new record becomes the user's last swipe.
* ``undo_last`` — single-level undo.  Removes the last swipe, clears the
                  pointer and hands the record back so the candidate can be
                  shown again.  A second undo in a row is a no-op.

A swipe that already completed a match is terminal: undoing it would
reopen a matched candidate, so the pointer is dropped and nothing is
removed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog

from someday.exceptions import DuplicateSwipeError
from someday.schemas.match import SwipeRecord
from someday.stores.base import BaseStore

logger = structlog.get_logger("someday.swipe_service")


class SwipeLedger:
    """Record and undo swipe decisions against an injected store."""

    def __init__(self, store: BaseStore) -> None:
        self.store = store

    async def record(
        self,
        user_id: str,
        target_id: str,
        liked: bool,
        compatibility_score: float,
    ) -> SwipeRecord:
        """Append a like/pass decision.

        Parameters
        ----------
        user_id:
            Opaque id of the swiping user (trusted from the caller).
        target_id:
            Id of the candidate being decided on.
        liked:
            ``True`` for a like, ``False`` for a pass.
        compatibility_score:
            0-100 snapshot of the candidate's score at swipe time.  It is
            stored as-is and never recomputed.

        Raises
        ------
        DuplicateSwipeError
            If ``user_id`` already has a swipe on ``target_id``.
        ValueError
            If ``user_id == target_id`` or the score is outside 0-100.
        """
        log = logger.bind(user_id=user_id, target_id=target_id)

        if user_id == target_id:
            raise ValueError("A user cannot swipe on themselves")
        if not 0.0 <= compatibility_score <= 100.0:
            raise ValueError(
                f"compatibility_score must be between 0 and 100, got {compatibility_score}"
            )

        existing = await self.store.get_swipe(user_id, target_id)
        if existing is not None:
            log.info("swipe_duplicate_rejected", existing_swipe_id=existing.id)
            raise DuplicateSwipeError(user_id, target_id)

        record = SwipeRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            target_id=target_id,
            liked=liked,
            compatibility_score_at_time=compatibility_score,
            created_at=datetime.now(timezone.utc),
        )
        stored = await self.store.append_swipe(record)

        log.info(
            "swipe_recorded",
            swipe_id=stored.id,
            liked=liked,
            compatibility_score=compatibility_score,
        )
        return stored

    async def undo_last(self, user_id: str) -> Optional[SwipeRecord]:
        """Remove the user's last swipe, if it is still undoable.

        Returns the removed record, or ``None`` when there is nothing to
        undo.
        """
        log = logger.bind(user_id=user_id)

        last = await self.store.get_last_swipe(user_id)
        if last is None:
            log.info("swipe_undo_noop")
            return None

        # Same pair lock as match evaluation: a like cannot be removed while
        # a concurrent evaluation is turning it into a match.
        async with self.store.pair_lock(user_id, last.target_id) as pair:
            if last.liked:
                match = await pair.find_match(last.user_id, last.target_id)
                if match is not None:
                    await pair.clear_last_swipe(user_id)
                    log.info(
                        "swipe_undo_blocked_by_match",
                        swipe_id=last.id,
                        match_id=match.id,
                    )
                    return None

            # Also drops the undo pointer that refers to this swipe.
            await pair.delete_swipe(last.id)

        log.info("swipe_undone", swipe_id=last.id, target_id=last.target_id)
        return last

    async def history(self, user_id: str) -> list[SwipeRecord]:
        """Return every swipe the user has made, oldest first."""
        return await self.store.list_swipes(user_id)
