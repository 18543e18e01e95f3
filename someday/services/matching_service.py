"""
Someday — Mutual-like detection & match creation

Consumes recorded swipes and decides whether they complete a pair:

  1. Pass  — a pass never matches; return immediately.
  2. Like  — look up the counterparty's like on the swiping user.  Strict
             reciprocity: without a real reciprocal like there is no match.
  3. Match — explain the pair's compatibility from both preference vectors,
             snapshot the score from the triggering swipe, persist, then
             notify both parties.

The swipe re-check, the reciprocal lookup, the duplicate-match check and
the insert all run in one unit of work under the store's per-pair lock, so
concurrent evaluations of the same pair see each other's likes and collapse
onto one match, and a like undone in the meantime never matches.
Re-evaluating an already matched pair returns the existing match rather
than raising.

Notification is fire-and-forget: a failed or slow dispatch is logged and
never undoes the match.
"""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog

from someday.config import get_settings
from someday.schemas.match import MatchRecord, SwipeRecord
from someday.schemas.preference import PreferenceVector, ensure_complete
from someday.schemas.profile import ProfileRecord
from someday.services.compatibility_service import CompatibilityService
from someday.services.notification_service import NotificationService
from someday.stores.base import BaseStore

logger = structlog.get_logger("someday.matching_service")


class MatchDetector:
    """Turn reciprocal likes into matches.

    Dependencies are injected at construction so that the detector can be
    tested with fakes and swapped in FastAPI's dependency-injection graph.
    """

    def __init__(
        self,
        store: BaseStore,
        compatibility_service: CompatibilityService | None = None,
        notification_service: NotificationService | None = None,
        notification_timeout: float | None = None,
    ) -> None:
        """Initialise the detector.

        Parameters
        ----------
        store:
            Store holding swipes, profiles and matches.
        compatibility_service:
            Explanation generator; defaults to ``CompatibilityService()``.
        notification_service:
            Match notification dispatcher; defaults to
            ``NotificationService()``.
        notification_timeout:
            Seconds to wait for the dispatcher; defaults to
            ``NOTIFICATION_TIMEOUT_SECONDS``.
        """
        self.store = store
        self.compatibility_service = compatibility_service or CompatibilityService()
        self.notification_service = notification_service or NotificationService()

        if notification_timeout is None:
            notification_timeout = get_settings().NOTIFICATION_TIMEOUT_SECONDS
        self.notification_timeout: float = notification_timeout

    # ── Public API ────────────────────────────────────────────────────────

    async def evaluate(self, swipe: SwipeRecord) -> Optional[MatchRecord]:
        """Return the pair's match if ``swipe`` is one half of a mutual like.

        Returns ``None`` for a pass, for a like with no reciprocal like, and
        for a like that is no longer stored (undone since it was recorded).

        Raises
        ------
        InvalidVectorError
            If either party's preference vector is missing or incomplete.
        StoreUnavailableError
            If the store times out or fails.
        """
        log = logger.bind(
            user_id=swipe.user_id,
            target_id=swipe.target_id,
            swipe_id=swipe.id,
        )

        if not swipe.liked:
            log.debug("evaluate_skipped", reason="pass")
            return None

        user_profile = await self.store.get_profile(swipe.user_id)
        user_vector = self._vector_of(user_profile)

        async with self.store.pair_lock(swipe.user_id, swipe.target_id) as pair:
            # The like may have been undone since it was recorded.
            current = await pair.get_swipe(swipe.user_id, swipe.target_id)
            if current is None or current.id != swipe.id or not current.liked:
                log.info("swipe_withdrawn")
                return None

            reciprocal = await pair.find_reciprocal_like(
                swipe.user_id, swipe.target_id
            )
            if reciprocal is None:
                log.info("no_mutual_like")
                return None

            existing = await pair.find_match(swipe.user_id, swipe.target_id)
            if existing is not None:
                log.info("match_already_exists", match_id=existing.id)
                return existing

            counterparty_profile = await pair.get_profile(swipe.target_id)
            counterparty_vector = self._vector_of(counterparty_profile)

            explanation = self.compatibility_service.explain_compatibility(
                user_vector, counterparty_vector
            )
            candidate = MatchRecord(
                id=str(uuid.uuid4()),
                user_id=swipe.user_id,
                counterparty_id=swipe.target_id,
                compatibility_score=swipe.compatibility_score_at_time,
                explanation=explanation,
                matched_at=datetime.now(timezone.utc),
            )
            match = await pair.add_match(candidate)

        if match.id != candidate.id:
            log.info("match_already_exists", match_id=match.id)
            return match

        log.info(
            "match_created",
            match_id=match.id,
            compatibility_score=match.compatibility_score,
            reciprocal_swipe_id=reciprocal.id,
        )

        await self._notify(
            match,
            user_name=user_profile.display_name if user_profile else swipe.user_id,
            counterparty_name=(
                counterparty_profile.display_name
                if counterparty_profile
                else swipe.target_id
            ),
        )
        return match

    async def check_can_like(self, user_id: str) -> PreferenceVector:
        """Return the user's vector, raising ``InvalidVectorError`` if a like
        from them could never be explained."""
        return self._vector_of(await self.store.get_profile(user_id))

    async def list_matches(self, user_id: str) -> list[MatchRecord]:
        """Return every match involving ``user_id``, newest first."""
        return await self.store.list_matches(user_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _vector_of(profile: Optional[ProfileRecord]) -> PreferenceVector:
        return ensure_complete(profile.preference_vector if profile else None)

    async def _notify(
        self,
        match: MatchRecord,
        user_name: str,
        counterparty_name: str,
    ) -> None:
        try:
            await asyncio.wait_for(
                self.notification_service.notify_match(
                    match,
                    user_name=user_name,
                    counterparty_name=counterparty_name,
                ),
                timeout=self.notification_timeout,
            )
        except Exception:
            logger.warning(
                "match_notification_failed",
                match_id=match.id,
                exc_info=True,
            )
