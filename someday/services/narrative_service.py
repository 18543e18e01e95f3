"""
Someday — Template-based narrative and psychometric signal generation.

Turns a user's preference vector into:
  1. A first-person narrative paragraph, built from one canned clause per
     preference and the fixed template

       "I envision {budget} {guests}. My ideal atmosphere {venue}. {family}."

  2. Four psychometric signal labels (financial worldview, social style,
     aesthetic personality, boundary style).

Both outputs are pure table lookups: the same vector always yields the same
text, which is what the profile embedding and golden tests rely on.  The
signals are for profile display only and are never read by the
compatibility explanation.
"""

from __future__ import annotations

from typing import Any

import structlog

from someday.schemas.preference import (
    FAMILY_MAX,
    FAMILY_MIN,
    BudgetTier,
    GuestCount,
    VenueVibe,
    ensure_complete,
)
from someday.schemas.profile import PsychometricSignals

logger = structlog.get_logger("someday.narrative_service")


class NarrativeService:
    """Generate profile narratives and psychometric signals."""

    # ── Narrative clauses ───────────────────────────────────────────
    BUDGET_CLAUSES: dict[BudgetTier, str] = {
        BudgetTier.MICRO: (
            "an intimate, budget-conscious celebration under $5,000, "
            "prioritizing connection over spectacle"
        ),
        BudgetTier.MODEST: (
            "a meaningful celebration between $5,000 and $15,000, "
            "valuing substance over extravagance"
        ),
        BudgetTier.MODERATE: (
            "a beautiful, balanced celebration between $15,000 and $40,000, "
            "blending elegance with practicality"
        ),
        BudgetTier.LAVISH: (
            "a grand celebration where budget is secondary to vision, "
            "creating an unforgettable experience"
        ),
    }

    GUEST_CLAUSES: dict[GuestCount, str] = {
        GuestCount.ELOPEMENT: "with just the two of us, prioritizing intimacy over audience",
        GuestCount.INTIMATE: (
            "with only our closest loved ones (under 20 people), "
            "keeping the circle small and meaningful"
        ),
        GuestCount.MEDIUM: (
            "with friends and family (20-100 people), "
            "balancing intimacy with community celebration"
        ),
        GuestCount.LARGE: (
            "with everyone we love (100+ people), "
            "embracing a grand celebration of our community"
        ),
    }

    VENUE_CLAUSES: dict[VenueVibe, str] = {
        VenueVibe.RUSTIC: (
            "is authentic and connected to nature - think barns, vineyards, "
            "or forest clearings. I value genuineness over glamour"
        ),
        VenueVibe.MODERN: (
            "is sleek and contemporary - rooftops, galleries, or minimalist "
            "spaces. I appreciate efficiency and clean aesthetics"
        ),
        VenueVibe.CLASSIC: (
            "is timeless and traditional - elegant ballrooms, historic estates, "
            "or classic churches. I honor heritage and established customs"
        ),
        VenueVibe.ADVENTURE: (
            "is unconventional and experience-driven - mountaintops, beaches, "
            "or surprise destinations. I prioritize adventure over convention"
        ),
    }

    FAMILY_CLAUSES: dict[int, str] = {
        1: (
            "I strongly value independence and making decisions as a couple, "
            "with minimal family input on major choices"
        ),
        2: (
            "I prefer making decisions primarily as a couple, welcoming family "
            "opinions but maintaining boundaries"
        ),
        3: (
            "I balance family involvement with personal autonomy, valuing "
            "input while maintaining final say"
        ),
        4: (
            "I appreciate significant family involvement and consider their "
            "perspectives important in major decisions"
        ),
        5: (
            "I deeply value family input and tradition, seeing our families "
            "as integral to major life decisions"
        ),
    }

    # ── Psychometric signal labels ──────────────────────────────────
    FINANCIAL_SIGNALS: dict[BudgetTier, str] = {
        BudgetTier.MICRO: "Pragmatic & minimalist",
        BudgetTier.MODEST: "Balanced & value-conscious",
        BudgetTier.MODERATE: "Quality-focused & practical",
        BudgetTier.LAVISH: "Experience-prioritizing & generous",
    }

    SOCIAL_SIGNALS: dict[GuestCount, str] = {
        GuestCount.ELOPEMENT: "Deeply private & couple-centric",
        GuestCount.INTIMATE: "Selective & quality-focused connections",
        GuestCount.MEDIUM: "Community-oriented & balanced",
        GuestCount.LARGE: "Extroverted & inclusive",
    }

    # One personality archetype per venue vibe.
    AESTHETIC_SIGNALS: dict[VenueVibe, str] = {
        VenueVibe.RUSTIC: "INFP - Authentic & nature-connected",
        VenueVibe.MODERN: "INTJ - Efficient & status-aware",
        VenueVibe.CLASSIC: "ISFJ - Traditional & security-seeking",
        VenueVibe.ADVENTURE: "ESTP - Experience-driven & independent",
    }

    BOUNDARY_SIGNALS: dict[int, str] = {
        1: "Highly autonomous",
        2: "Independence-leaning",
        3: "Balanced integration",
        4: "Family-connected",
        5: "Deeply family-integrated",
    }

    # ── Public API ──────────────────────────────────────────────────

    def generate_narrative(self, vector: Any) -> str:
        """Render the narrative paragraph for a complete preference vector.

        Parameters
        ----------
        vector : PreferenceVector | Mapping | object
            Anything ``ensure_complete`` accepts.

        Raises
        ------
        InvalidVectorError
            If a field is missing or out of range.
        """
        vector = ensure_complete(vector)
        family = self._clamp_family(vector.family_involvement)

        narrative = (
            f"I envision {self.BUDGET_CLAUSES[vector.budget_tier]} "
            f"{self.GUEST_CLAUSES[vector.guest_count]}. "
            f"My ideal atmosphere {self.VENUE_CLAUSES[vector.venue_vibe]}. "
            f"{self.FAMILY_CLAUSES[family]}."
        )

        logger.debug(
            "narrative.generated",
            budget_tier=vector.budget_tier.value,
            venue_vibe=vector.venue_vibe.value,
            length=len(narrative),
        )
        return narrative

    def get_psychometric_signals(self, vector: Any) -> PsychometricSignals:
        """Map each preference to its display label."""
        vector = ensure_complete(vector)
        return PsychometricSignals(
            financial_worldview=self.FINANCIAL_SIGNALS[vector.budget_tier],
            social_style=self.SOCIAL_SIGNALS[vector.guest_count],
            aesthetic_personality=self.AESTHETIC_SIGNALS[vector.venue_vibe],
            boundary_style=self.BOUNDARY_SIGNALS[
                self._clamp_family(vector.family_involvement)
            ],
        )

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _clamp_family(value: int) -> int:
        return min(FAMILY_MAX, max(FAMILY_MIN, value))
