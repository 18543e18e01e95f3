"""
Someday — Profile model (identity fields + preference vector + narrative).
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from someday.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(
        String(64), primary_key=True, comment="Opaque id from the identity provider"
    )
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    budget_tier: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="micro / modest / moderate / lavish"
    )
    guest_count: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="elopement / intimate / medium / large"
    )
    venue_vibe: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="rustic / modern / classic / adventure"
    )
    family_involvement: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="1-5"
    )
    narrative: Mapped[str] = mapped_column(Text, nullable=False)
    signals: Mapped[dict] = mapped_column(
        JSON, nullable=False, comment="Four psychometric signal labels"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Profile {self.user_id} vibe={self.venue_vibe!r}>"
