"""Unit tests for CandidateService — the placeholder discovery feed."""
import pytest
import pytest_asyncio

from someday.services.candidate_service import NEUTRAL_SIMILARITY, CandidateService
from someday.services.swipe_service import SwipeLedger


@pytest_asyncio.fixture
async def populated(store, profile_factory, rustic_vector, lavish_vector):
    await store.save_profile(profile_factory("me", rustic_vector, name="Me"))
    for i, vector in enumerate([rustic_vector, lavish_vector, rustic_vector], start=1):
        await store.save_profile(profile_factory(f"cand-{i}", vector, name=f"Candidate {i}"))
    return store


class TestGetCandidates:

    @pytest.mark.asyncio
    async def test_excludes_self(self, populated):
        candidates = await CandidateService(populated).get_candidates("me", 10)
        assert "me" not in {c.id for c in candidates}
        assert len(candidates) == 3

    @pytest.mark.asyncio
    async def test_excludes_swiped(self, populated):
        ledger = SwipeLedger(populated)
        await ledger.record("me", "cand-1", liked=False, compatibility_score=40.0)
        await ledger.record("me", "cand-3", liked=True, compatibility_score=80.0)

        candidates = await CandidateService(populated).get_candidates("me", 10)
        assert [c.id for c in candidates] == ["cand-2"]

    @pytest.mark.asyncio
    async def test_undo_brings_candidate_back(self, populated):
        ledger = SwipeLedger(populated)
        await ledger.record("me", "cand-1", liked=False, compatibility_score=40.0)
        await ledger.undo_last("me")

        candidates = await CandidateService(populated).get_candidates("me", 10)
        assert "cand-1" in {c.id for c in candidates}

    @pytest.mark.asyncio
    async def test_neutral_similarity_by_default(self, populated):
        candidates = await CandidateService(populated).get_candidates("me", 10)
        assert all(c.similarity == NEUTRAL_SIMILARITY for c in candidates)

    @pytest.mark.asyncio
    async def test_ranked_by_injected_similarity(self, populated):
        scores = {"cand-1": 0.2, "cand-2": 0.9, "cand-3": 0.6}
        service = CandidateService(populated, rank=lambda viewer, c: scores[c.user_id])

        candidates = await service.get_candidates("me", 10)
        assert [c.id for c in candidates] == ["cand-2", "cand-3", "cand-1"]

    @pytest.mark.asyncio
    async def test_ranker_sees_viewer_profile(self, populated, rustic_vector):
        seen = []

        def rank(viewer, candidate):
            seen.append(viewer.user_id if viewer else None)
            return 0.5

        await CandidateService(populated, rank=rank).get_candidates("me", 10)
        assert seen and set(seen) == {"me"}

    @pytest.mark.asyncio
    async def test_similarity_clamped(self, populated):
        service = CandidateService(populated, rank=lambda viewer, c: 1.7)
        candidates = await service.get_candidates("me", 10)
        assert all(c.similarity == 1.0 for c in candidates)

    @pytest.mark.asyncio
    async def test_limit(self, populated):
        candidates = await CandidateService(populated).get_candidates("me", 2)
        assert len(candidates) == 2

    @pytest.mark.asyncio
    async def test_candidate_carries_profile_fields(self, populated, lavish_vector):
        candidates = await CandidateService(populated).get_candidates("me", 10)
        second = next(c for c in candidates if c.id == "cand-2")
        assert second.name == "Candidate 2"
        assert second.location == "Austin, TX"
        assert second.preference_vector == lavish_vector
