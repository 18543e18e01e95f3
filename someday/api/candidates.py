"""
Someday — Candidates API

Discovery feed.  Ranking is delegated to ``CandidateService``.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from someday.api.dependencies import get_candidate_service
from someday.config import get_settings
from someday.schemas.match import Candidate
from someday.services.candidate_service import CandidateService

logger = structlog.get_logger("someday.api.candidates")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET /{user_id} — Unseen candidates, best first
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{user_id}",
    response_model=list[Candidate],
    summary="List candidates the user has not swiped on",
)
async def list_candidates(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100, description="Max candidates to return"),
    candidate_service: CandidateService = Depends(get_candidate_service),
) -> list[Candidate]:
    if limit is None:
        limit = get_settings().CANDIDATE_FEED_LIMIT
    logger.info("list_candidates", user_id=user_id, limit=limit)
    return await candidate_service.get_candidates(user_id, limit)
