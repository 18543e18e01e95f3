"""Shared pytest fixtures for Someday tests."""
import pytest
import uuid
from datetime import datetime, timezone

from someday.schemas.preference import PreferenceVector
from someday.schemas.profile import ProfileRecord
from someday.services.narrative_service import NarrativeService
from someday.stores.memory import InMemoryStore


@pytest.fixture
def sample_user_id():
    return str(uuid.uuid4())


@pytest.fixture
def sample_user_id_b():
    return str(uuid.uuid4())


@pytest.fixture
def rustic_vector():
    """The worked example: modest budget, intimate guest list, rustic venue."""
    return PreferenceVector(
        budget_tier="modest",
        guest_count="intimate",
        venue_vibe="rustic",
        family_involvement=3,
    )


@pytest.fixture
def lavish_vector():
    """Opposite corner of the preference space from ``rustic_vector``."""
    return PreferenceVector(
        budget_tier="lavish",
        guest_count="large",
        venue_vibe="modern",
        family_involvement=5,
    )


@pytest.fixture
def store():
    return InMemoryStore()


def make_profile(user_id, vector, name=None, age=29):
    """Build an onboarded profile the same way the profiles endpoint does."""
    narratives = NarrativeService()
    return ProfileRecord(
        user_id=user_id,
        display_name=name or user_id,
        age=age,
        location="Austin, TX",
        preference_vector=vector,
        narrative=narratives.generate_narrative(vector),
        signals=narratives.get_psychometric_signals(vector),
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
def profile_factory():
    return make_profile
