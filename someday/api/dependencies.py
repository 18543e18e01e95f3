"""
Someday — API dependencies

The store is a process-wide singleton chosen by ``STORE_BACKEND``.  Services
are cheap and stateless, so each request gets fresh instances bound to that
store.  Tests swap the store with ``app.dependency_overrides[get_store]``.
"""

from __future__ import annotations

from fastapi import Depends

from someday.config import get_settings
from someday.services.candidate_service import CandidateService
from someday.services.matching_service import MatchDetector
from someday.services.narrative_service import NarrativeService
from someday.services.swipe_service import SwipeLedger
from someday.stores.base import BaseStore
from someday.stores.memory import InMemoryStore
from someday.stores.sql import SQLStore

# ── Singletons ────────────────────────────────────────────────────────────────

_store: BaseStore | None = None
_narrative_service: NarrativeService | None = None


def get_store() -> BaseStore:
    global _store
    if _store is None:
        if get_settings().STORE_BACKEND == "memory":
            _store = InMemoryStore()
        else:
            _store = SQLStore.from_settings()
    return _store


def get_narrative_service() -> NarrativeService:
    global _narrative_service
    if _narrative_service is None:
        _narrative_service = NarrativeService()
    return _narrative_service


# ── Per-request services ─────────────────────────────────────────────────────

def get_swipe_ledger(store: BaseStore = Depends(get_store)) -> SwipeLedger:
    return SwipeLedger(store)


def get_match_detector(store: BaseStore = Depends(get_store)) -> MatchDetector:
    return MatchDetector(store)


def get_candidate_service(store: BaseStore = Depends(get_store)) -> CandidateService:
    return CandidateService(store)
