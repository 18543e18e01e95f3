"""
Someday — Compatibility explanation engine.

Compares two preference vectors and produces the plain-language paragraph
shown on a match card.  Insights are emitted in a fixed field order:

  1. Budget   — same tier: strong alignment; one tier apart: close
                perspectives; further apart: nothing.
  2. Guests   — same size only.
  3. Venue    — same vibe only.
  4. Family   — involvement within one point.

When no dimension contributes, a single "complementary differences" insight
is used so the explanation is never empty.

No numeric score is computed here: the 0-100 compatibility score comes from
the ranking service's similarity and is stored on the swipe.
"""

from __future__ import annotations

from typing import Any

import structlog

from someday.schemas.preference import ensure_complete

logger = structlog.get_logger("someday.compatibility_service")


class CompatibilityService:
    """Build compatibility explanations from two preference vectors."""

    BUDGET_MATCH = (
        "Strong financial alignment - you share similar views on wedding "
        "spending, a key predictor of long-term compatibility"
    )
    BUDGET_CLOSE = (
        "Close financial perspectives - your budget expectations are within "
        "a comfortable range"
    )
    GUEST_MATCH = (
        "Matching social styles - you both envision similar celebration sizes, "
        "suggesting compatible approaches to community"
    )
    VENUE_MATCH = (
        "Aesthetic harmony - your venue preferences reveal aligned personality "
        "traits and values"
    )
    FAMILY_MATCH = (
        "Compatible boundary styles - you share similar views on family "
        "involvement in major decisions"
    )
    FALLBACK = (
        "Complementary differences - your varied preferences could bring "
        "balance and fresh perspectives to the relationship"
    )

    BUDGET_CLOSE_DISTANCE: int = 1
    FAMILY_CLOSE_DISTANCE: int = 1

    def explain_compatibility(self, vector_a: Any, vector_b: Any) -> str:
        """Return the joined explanation paragraph for two vectors.

        Raises ``InvalidVectorError`` if either vector is incomplete.
        """
        insights = self.collect_insights(vector_a, vector_b)
        return ". ".join(insights) + "."

    def collect_insights(self, vector_a: Any, vector_b: Any) -> list[str]:
        """Return the individual insights, in field order."""
        a = ensure_complete(vector_a)
        b = ensure_complete(vector_b)

        insights: list[str] = []

        if a.budget_tier == b.budget_tier:
            insights.append(self.BUDGET_MATCH)
        elif abs(a.budget_index - b.budget_index) <= self.BUDGET_CLOSE_DISTANCE:
            insights.append(self.BUDGET_CLOSE)

        if a.guest_count == b.guest_count:
            insights.append(self.GUEST_MATCH)

        if a.venue_vibe == b.venue_vibe:
            insights.append(self.VENUE_MATCH)

        if abs(a.family_involvement - b.family_involvement) <= self.FAMILY_CLOSE_DISTANCE:
            insights.append(self.FAMILY_MATCH)

        if not insights:
            insights.append(self.FALLBACK)

        logger.debug("compatibility.insights", count=len(insights))
        return insights
