"""Initial schema — profiles, swipes, undo pointers and matches.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. profiles ─────────────────────────────────────────────────
    op.create_table(
        "profiles",
        sa.Column(
            "user_id",
            sa.String(64),
            primary_key=True,
            comment="Opaque id from the identity provider",
        ),
        sa.Column("display_name", sa.String, nullable=False),
        sa.Column("age", sa.Integer, nullable=False),
        sa.Column("location", sa.String, nullable=True),
        sa.Column(
            "budget_tier",
            sa.String(16),
            nullable=False,
            comment="micro / modest / moderate / lavish",
        ),
        sa.Column(
            "guest_count",
            sa.String(16),
            nullable=False,
            comment="elopement / intimate / medium / large",
        ),
        sa.Column(
            "venue_vibe",
            sa.String(16),
            nullable=False,
            comment="rustic / modern / classic / adventure",
        ),
        sa.Column("family_involvement", sa.Integer, nullable=False, comment="1-5"),
        sa.Column("narrative", sa.Text, nullable=False),
        sa.Column(
            "signals",
            postgresql.JSONB().with_variant(sa.JSON(), "sqlite"),
            nullable=False,
            comment="Four psychometric signal labels",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("age >= 18", name="ck_profiles_adult"),
        sa.CheckConstraint(
            "family_involvement BETWEEN 1 AND 5",
            name="ck_profiles_family_range",
        ),
    )

    # ── 2. swipes ───────────────────────────────────────────────────
    op.create_table(
        "swipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("target_id", sa.String(64), nullable=False),
        sa.Column("liked", sa.Boolean, nullable=False),
        sa.Column(
            "compatibility_score",
            sa.Float,
            nullable=False,
            comment="0-100 snapshot taken at swipe time",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("user_id", "target_id", name="uq_swipe_pair"),
    )
    op.create_index("ix_swipes_user_id", "swipes", ["user_id"])
    op.create_index("ix_swipes_target_id", "swipes", ["target_id"])

    # ── 3. last_swipes (single-level undo pointer) ──────────────────
    op.create_table(
        "last_swipes",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column(
            "swipe_id",
            sa.String(36),
            sa.ForeignKey("swipes.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )

    # ── 4. matches ──────────────────────────────────────────────────
    op.create_table(
        "matches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(64),
            nullable=False,
            comment="User whose like completed the pair",
        ),
        sa.Column("counterparty_id", sa.String(64), nullable=False),
        sa.Column("pair_low", sa.String(64), nullable=False),
        sa.Column("pair_high", sa.String(64), nullable=False),
        sa.Column("compatibility_score", sa.Float, nullable=False),
        sa.Column("explanation", sa.Text, nullable=False),
        sa.Column(
            "matched_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("pair_low", "pair_high", name="uq_match_pair"),
    )
    op.create_index("ix_matches_pair_low", "matches", ["pair_low"])
    op.create_index("ix_matches_pair_high", "matches", ["pair_high"])


def downgrade() -> None:
    op.drop_index("ix_matches_pair_high", table_name="matches")
    op.drop_index("ix_matches_pair_low", table_name="matches")
    op.drop_table("matches")

    op.drop_table("last_swipes")

    op.drop_index("ix_swipes_target_id", table_name="swipes")
    op.drop_index("ix_swipes_user_id", table_name="swipes")
    op.drop_table("swipes")

    op.drop_table("profiles")
