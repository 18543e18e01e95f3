"""
Someday — Swipe, undo-pointer and Match models.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from someday.database import Base


class Swipe(Base):
    __tablename__ = "swipes"
    __table_args__ = (
        UniqueConstraint("user_id", "target_id", name="uq_swipe_pair"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    target_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    liked: Mapped[bool] = mapped_column(Boolean, nullable=False)
    compatibility_score: Mapped[float] = mapped_column(
        Float, nullable=False, comment="0-100 snapshot taken at swipe time"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<Swipe {self.user_id} -> {self.target_id} liked={self.liked}>"


class LastSwipe(Base):
    """Single-level undo pointer: at most one row per user."""

    __tablename__ = "last_swipes"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    swipe_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("swipes.id", ondelete="CASCADE"), nullable=False
    )

    def __repr__(self) -> str:
        return f"<LastSwipe {self.user_id} -> {self.swipe_id}>"


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_match_pair"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(64), nullable=False, comment="User whose like completed the pair"
    )
    counterparty_id: Mapped[str] = mapped_column(String(64), nullable=False)
    pair_low: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    pair_high: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    compatibility_score: Mapped[float] = mapped_column(Float, nullable=False)
    explanation: Mapped[str] = mapped_column(Text, nullable=False)
    matched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<Match {self.user_id} <-> {self.counterparty_id} "
            f"score={self.compatibility_score:.1f}>"
        )
