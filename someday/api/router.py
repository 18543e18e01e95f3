"""
Someday — Main API Router

Aggregates all sub-routers under a single prefix so that ``someday.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from someday.api import candidates, matches, profiles, swipes

router = APIRouter()

router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
router.include_router(candidates.router, prefix="/candidates", tags=["Candidates"])
router.include_router(swipes.router, prefix="/swipes", tags=["Swipes"])
router.include_router(matches.router, prefix="/matches", tags=["Matches"])
