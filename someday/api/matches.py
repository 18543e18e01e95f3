"""
Someday — Matches API
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from someday.api.dependencies import get_match_detector
from someday.schemas.match import MatchListItem
from someday.services.matching_service import MatchDetector

logger = structlog.get_logger("someday.api.matches")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET /{user_id} — List all matches for a user
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{user_id}",
    response_model=list[MatchListItem],
    summary="List all matches for a user",
)
async def list_matches(
    user_id: str,
    detector: MatchDetector = Depends(get_match_detector),
) -> list[MatchListItem]:
    """Return every match the user is part of, newest first, with the other
    party seen from the caller's side."""
    matches = await detector.list_matches(user_id)
    logger.info("list_matches", user_id=user_id, count=len(matches))

    return [
        MatchListItem(
            match_id=m.id,
            other_user_id=m.other_party(user_id),
            compatibility_score=m.compatibility_score,
            explanation=m.explanation,
            matched_at=m.matched_at,
        )
        for m in matches
    ]
