"""
Someday — Swipes API

Record like/pass decisions, undo the last one, and read the history.  A
like that completes a mutual pair returns the new (or existing) match in
the same response.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from someday.api.dependencies import get_match_detector, get_swipe_ledger
from someday.exceptions import DuplicateSwipeError
from someday.schemas.match import SwipeCreate, SwipeRecord, SwipeResponse, UndoResponse
from someday.services.matching_service import MatchDetector
from someday.services.swipe_service import SwipeLedger

logger = structlog.get_logger("someday.api.swipes")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /{user_id} — Record a swipe and check for a mutual like
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/{user_id}",
    response_model=SwipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a like or pass",
)
async def create_swipe(
    user_id: str,
    payload: SwipeCreate,
    ledger: SwipeLedger = Depends(get_swipe_ledger),
    detector: MatchDetector = Depends(get_match_detector),
) -> SwipeResponse:
    """Record the decision, then evaluate it for a match.

    A repeated decision on the same candidate is rejected with 409 and the
    stored decision in the body, so the client can treat it as a no-op.
    When the stored decision is a like it is evaluated again, and the body
    carries the pair's match (if any) under ``is_match`` and ``match``.
    """
    log = logger.bind(user_id=user_id, target_id=payload.target_id)
    log.info("create_swipe_start", liked=payload.liked)

    # A like must be explainable if it ever turns mutual.
    if payload.liked:
        await detector.check_can_like(user_id)

    try:
        swipe = await ledger.record(
            user_id,
            payload.target_id,
            liked=payload.liked,
            compatibility_score=payload.compatibility_score,
        )
    except DuplicateSwipeError as exc:
        existing = await ledger.store.get_swipe(user_id, payload.target_id)
        # A retry after a failed evaluation lands here; finish the match the
        # stored like should have produced.
        match = None
        if existing is not None and existing.liked:
            match = await detector.evaluate(existing)
        log.info("create_swipe_duplicate", is_match=match is not None)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(exc),
                "existing": existing.model_dump(mode="json") if existing else None,
                "is_match": match is not None,
                "match": match.model_dump(mode="json") if match else None,
            },
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    match = await detector.evaluate(swipe)

    log.info("create_swipe_complete", swipe_id=swipe.id, is_match=match is not None)
    return SwipeResponse(swipe=swipe, is_match=match is not None, match=match)


# ──────────────────────────────────────────────────────────────────────────────
# DELETE /{user_id}/last — Undo the last swipe
# ──────────────────────────────────────────────────────────────────────────────

@router.delete(
    "/{user_id}/last",
    response_model=UndoResponse,
    summary="Undo the user's last swipe",
)
async def undo_last_swipe(
    user_id: str,
    ledger: SwipeLedger = Depends(get_swipe_ledger),
) -> UndoResponse:
    """Remove the last swipe so its candidate can be shown again.

    Only one level of undo is kept; a second call returns
    ``{"undone": false}``.
    """
    undone = await ledger.undo_last(user_id)
    if undone is None:
        return UndoResponse(undone=False)
    return UndoResponse(undone=True, swipe=undone, target_id=undone.target_id)


# ──────────────────────────────────────────────────────────────────────────────
# GET /{user_id} — Swipe history
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{user_id}",
    response_model=list[SwipeRecord],
    summary="List the user's swipes, oldest first",
)
async def list_swipes(
    user_id: str,
    ledger: SwipeLedger = Depends(get_swipe_ledger),
) -> list[SwipeRecord]:
    return await ledger.history(user_id)
