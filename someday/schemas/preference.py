"""
Someday — Preference vector and its enum scales.

A ``PreferenceVector`` is built once when onboarding completes and is only
replaced by re-onboarding.  Budget tier and guest count are ordered scales;
venue vibe is categorical.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from someday.exceptions import InvalidVectorError


class BudgetTier(str, Enum):
    MICRO = "micro"
    MODEST = "modest"
    MODERATE = "moderate"
    LAVISH = "lavish"


class GuestCount(str, Enum):
    ELOPEMENT = "elopement"
    INTIMATE = "intimate"
    MEDIUM = "medium"
    LARGE = "large"


class VenueVibe(str, Enum):
    RUSTIC = "rustic"
    MODERN = "modern"
    CLASSIC = "classic"
    ADVENTURE = "adventure"


# Ordered scales, lowest first.
BUDGET_SCALE: tuple[BudgetTier, ...] = (
    BudgetTier.MICRO,
    BudgetTier.MODEST,
    BudgetTier.MODERATE,
    BudgetTier.LAVISH,
)
GUEST_SCALE: tuple[GuestCount, ...] = (
    GuestCount.ELOPEMENT,
    GuestCount.INTIMATE,
    GuestCount.MEDIUM,
    GuestCount.LARGE,
)

FAMILY_MIN = 1
FAMILY_MAX = 5

VECTOR_FIELDS: tuple[str, ...] = (
    "budget_tier",
    "guest_count",
    "venue_vibe",
    "family_involvement",
)


class PreferenceVector(BaseModel):
    """The four wedding-vision preferences that drive matching."""

    model_config = ConfigDict(frozen=True)

    budget_tier: BudgetTier
    guest_count: GuestCount
    venue_vibe: VenueVibe
    # Strict: JSON true, "3" and 3.0 are rejected rather than coerced.
    family_involvement: StrictInt = Field(ge=FAMILY_MIN, le=FAMILY_MAX)

    @classmethod
    def from_fields(cls, data: Mapping[str, Any]) -> "PreferenceVector":
        """Validate raw field values, raising ``InvalidVectorError`` instead
        of pydantic's ``ValidationError``."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            raise InvalidVectorError(
                f"Incomplete or invalid preference vector: {', '.join(fields)}",
                fields=fields,
            ) from exc

    @property
    def budget_index(self) -> int:
        return BUDGET_SCALE.index(self.budget_tier)

    @property
    def guest_index(self) -> int:
        return GUEST_SCALE.index(self.guest_count)


def ensure_complete(source: Any) -> PreferenceVector:
    """Return a validated ``PreferenceVector`` for ``source``.

    ``source`` may be a ``PreferenceVector``, a mapping of raw field values,
    or any object exposing the four fields as attributes (an ORM profile
    row, for instance).  Instances are re-checked because
    ``model_construct`` can bypass validation.
    """
    if source is None:
        raise InvalidVectorError(
            "Preference vector is missing", fields=list(VECTOR_FIELDS)
        )
    if isinstance(source, Mapping):
        raw = {name: source.get(name) for name in VECTOR_FIELDS}
    else:
        raw = {name: getattr(source, name, None) for name in VECTOR_FIELDS}
    return PreferenceVector.from_fields(raw)
