"""Seed the demo candidate profiles so the discovery feed is not empty."""
import asyncio
import sys
sys.path.insert(0, ".")

from datetime import datetime, timezone

from someday.database import get_engine
from someday.schemas.preference import PreferenceVector
from someday.schemas.profile import ProfileRecord
from someday.services.narrative_service import NarrativeService
from someday.stores.sql import SQLStore


DEMO_LOCATION = "Austin, TX"

DEMO_CANDIDATES = [
    {"user_id": "cand-1", "display_name": "Alex", "age": 28, "venue_vibe": "rustic", "budget_tier": "modest", "guest_count": "intimate"},
    {"user_id": "cand-2", "display_name": "Jordan", "age": 31, "venue_vibe": "modern", "budget_tier": "moderate", "guest_count": "medium"},
    {"user_id": "cand-3", "display_name": "Taylor", "age": 26, "venue_vibe": "adventure", "budget_tier": "micro", "guest_count": "elopement"},
    {"user_id": "cand-4", "display_name": "Morgan", "age": 29, "venue_vibe": "classic", "budget_tier": "lavish", "guest_count": "large"},
    {"user_id": "cand-5", "display_name": "Riley", "age": 27, "venue_vibe": "rustic", "budget_tier": "modest", "guest_count": "medium"},
    {"user_id": "cand-6", "display_name": "Casey", "age": 30, "venue_vibe": "modern", "budget_tier": "moderate", "guest_count": "intimate"},
    {"user_id": "cand-7", "display_name": "Quinn", "age": 25, "venue_vibe": "adventure", "budget_tier": "micro", "guest_count": "elopement"},
    {"user_id": "cand-8", "display_name": "Avery", "age": 32, "venue_vibe": "classic", "budget_tier": "lavish", "guest_count": "medium"},
]

# The demo data predates the family slider; everyone sits in the middle.
DEFAULT_FAMILY_INVOLVEMENT = 3


async def seed():
    store = SQLStore.from_settings()
    narratives = NarrativeService()

    for c in DEMO_CANDIDATES:
        if await store.get_profile(c["user_id"]) is not None:
            print(f"  Candidate {c['user_id']} already exists, skipping.")
            continue

        vector = PreferenceVector.from_fields({
            "budget_tier": c["budget_tier"],
            "guest_count": c["guest_count"],
            "venue_vibe": c["venue_vibe"],
            "family_involvement": DEFAULT_FAMILY_INVOLVEMENT,
        })
        await store.save_profile(
            ProfileRecord(
                user_id=c["user_id"],
                display_name=c["display_name"],
                age=c["age"],
                location=DEMO_LOCATION,
                preference_vector=vector,
                narrative=narratives.generate_narrative(vector),
                signals=narratives.get_psychometric_signals(vector),
                created_at=datetime.now(timezone.utc),
            )
        )
        print(f"  Seeded candidate {c['user_id']}: {c['display_name']} ({c['venue_vibe']})")

    await get_engine().dispose()
    print("Done seeding candidates.")


if __name__ == "__main__":
    asyncio.run(seed())
