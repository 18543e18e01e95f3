"""
Someday — Candidate feed placeholder.

Stands in for the external ranking service.  Returns onboarded profiles the
user has not swiped on yet, ordered by a pluggable similarity function.
The default ranker is neutral (every candidate scores 0.5) because real
ranking happens in the vector-similarity search, not in this package.
"""

from __future__ import annotations

from typing import Callable, Optional

import structlog

from someday.schemas.match import Candidate
from someday.schemas.profile import ProfileRecord
from someday.stores.base import BaseStore

logger = structlog.get_logger("someday.candidate_service")

RankFn = Callable[[Optional[ProfileRecord], ProfileRecord], float]

NEUTRAL_SIMILARITY = 0.5


def neutral_rank(viewer: Optional[ProfileRecord], candidate: ProfileRecord) -> float:
    return NEUTRAL_SIMILARITY


class CandidateService:

    def __init__(self, store: BaseStore, rank: RankFn | None = None) -> None:
        self.store = store
        self.rank: RankFn = rank or neutral_rank

    async def get_candidates(self, user_id: str, limit: int) -> list[Candidate]:
        """Return up to ``limit`` unseen candidates, best first."""
        swiped = {s.target_id for s in await self.store.list_swipes(user_id)}
        profiles = await self.store.list_profiles()
        viewer = next((p for p in profiles if p.user_id == user_id), None)

        candidates = [
            Candidate(
                id=profile.user_id,
                name=profile.display_name,
                age=profile.age,
                location=profile.location,
                preference_vector=profile.preference_vector,
                similarity=min(1.0, max(0.0, self.rank(viewer, profile))),
            )
            for profile in profiles
            if profile.user_id != user_id and profile.user_id not in swiped
        ]
        # Stable sort: ties keep onboarding order.
        candidates.sort(key=lambda c: c.similarity, reverse=True)

        logger.info(
            "candidates_served",
            user_id=user_id,
            available=len(candidates),
            returned=min(limit, len(candidates)),
            excluded_swiped=len(swiped),
        )
        return candidates[:limit]
