from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from someday.schemas.preference import PreferenceVector


class SwipeRecord(BaseModel):
    """One like/pass decision.  Immutable once written; undo deletes it."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    user_id: str
    target_id: str
    liked: bool
    compatibility_score_at_time: float = Field(ge=0.0, le=100.0)
    created_at: datetime


class MatchRecord(BaseModel):
    """A confirmed mutual like.  Append-only; the explanation is never regenerated."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    user_id: str
    counterparty_id: str
    compatibility_score: float = Field(ge=0.0, le=100.0)
    explanation: str
    matched_at: datetime

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_id, self.counterparty_id)

    def other_party(self, user_id: str) -> str:
        return self.counterparty_id if user_id == self.user_id else self.user_id


class Candidate(BaseModel):
    id: str
    name: str
    age: int = Field(ge=18)
    location: Optional[str] = None
    preference_vector: PreferenceVector
    similarity: float = Field(ge=0.0, le=1.0)


# ── Request / response bodies ──────────────────────────────────────────────

class SwipeCreate(BaseModel):
    target_id: str = Field(min_length=1)
    liked: bool
    compatibility_score: float = Field(0.0, ge=0.0, le=100.0)


class SwipeResponse(BaseModel):
    swipe: SwipeRecord
    is_match: bool
    match: Optional[MatchRecord] = None


class UndoResponse(BaseModel):
    undone: bool
    swipe: Optional[SwipeRecord] = None
    target_id: Optional[str] = None


class MatchListItem(BaseModel):
    match_id: str
    other_user_id: str
    compatibility_score: float
    explanation: str
    matched_at: datetime
