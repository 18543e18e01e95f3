from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, StrictInt

from someday.schemas.preference import BudgetTier, GuestCount, PreferenceVector, VenueVibe


class PsychometricSignals(BaseModel):
    financial_worldview: str
    social_style: str
    aesthetic_personality: str
    boundary_style: str


class ProfileUpsert(BaseModel):
    display_name: str = Field(min_length=1)
    age: int = Field(ge=18, le=100)
    location: Optional[str] = None
    # Checked as a whole by ensure_complete() so that a partial vector
    # surfaces as InvalidVectorError rather than a field error.
    budget_tier: Optional[BudgetTier] = None
    guest_count: Optional[GuestCount] = None
    venue_vibe: Optional[VenueVibe] = None
    family_involvement: Optional[StrictInt] = None


class ProfileRecord(BaseModel):
    user_id: str
    display_name: str
    age: int = Field(ge=18)
    location: Optional[str] = None
    preference_vector: PreferenceVector
    narrative: str
    signals: PsychometricSignals
    created_at: datetime
    updated_at: Optional[datetime] = None
