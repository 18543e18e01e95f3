"""
Someday — Profiles API

Onboarding: store a user's basics and wedding-vision preferences, along
with the narrative and psychometric signals derived from them.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from someday.api.dependencies import get_narrative_service, get_store
from someday.schemas.preference import ensure_complete
from someday.schemas.profile import ProfileRecord, ProfileUpsert
from someday.services.narrative_service import NarrativeService
from someday.stores.base import BaseStore

logger = structlog.get_logger("someday.api.profiles")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# PUT /{user_id} — Onboard or re-onboard a user
# ──────────────────────────────────────────────────────────────────────────────

@router.put(
    "/{user_id}",
    response_model=ProfileRecord,
    summary="Create or replace a user's profile",
)
async def upsert_profile(
    user_id: str,
    payload: ProfileUpsert,
    store: BaseStore = Depends(get_store),
    narrative_service: NarrativeService = Depends(get_narrative_service),
) -> ProfileRecord:
    """Validate the preference vector and store the profile.

    Re-submitting replaces the vector, narrative and signals; the original
    ``created_at`` is kept.  An incomplete vector is rejected with 422.
    """
    log = logger.bind(user_id=user_id)
    log.info("upsert_profile_start")

    vector = ensure_complete(payload.model_dump())

    profile = ProfileRecord(
        user_id=user_id,
        display_name=payload.display_name,
        age=payload.age,
        location=payload.location,
        preference_vector=vector,
        narrative=narrative_service.generate_narrative(vector),
        signals=narrative_service.get_psychometric_signals(vector),
        created_at=datetime.now(timezone.utc),
    )
    saved = await store.save_profile(profile)

    log.info(
        "upsert_profile_complete",
        budget_tier=vector.budget_tier.value,
        venue_vibe=vector.venue_vibe.value,
    )
    return saved


# ──────────────────────────────────────────────────────────────────────────────
# GET /{user_id} — Fetch a profile
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{user_id}",
    response_model=ProfileRecord,
    summary="Get a user's profile",
)
async def get_profile(
    user_id: str,
    store: BaseStore = Depends(get_store),
) -> ProfileRecord:
    profile = await store.get_profile(user_id)
    if profile is None:
        logger.info("profile_not_found", user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile for {user_id} not found.",
        )
    return profile
