"""Initial schema — users, matches, six game session tables, couple compatibility.

Revision ID: 001_game_sessions
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_game_sessions"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SESSION_TABLES = (
    "two_truths_lie_sessions",
    "would_you_rather_sessions",
    "intimacy_spectrum_sessions",
    "never_have_i_ever_sessions",
    "what_would_you_do_sessions",
    "dream_board_sessions",
)

# Keep in step with app.schemas.enums.NON_TERMINAL_STATUSES.
NON_TERMINAL_SQL = "'active', 'analyzing', 'paused', 'pending', 'playing', 'starting'"


def _create_session_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("match_id", sa.String, nullable=False),
        sa.Column(
            "match_key",
            sa.String,
            nullable=False,
            comment="Sorted user pair, one per couple",
        ),
        sa.Column("player1_id", sa.String, nullable=False),
        sa.Column("player2_id", sa.String, nullable=False),
        sa.Column("status", sa.String, nullable=False),
        sa.Column("version", sa.Integer, server_default="0", nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_question_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "document",
            postgresql.JSONB,
            nullable=False,
            comment="Full session record",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        f"uq_{name}_active_couple",
        name,
        ["match_key"],
        unique=True,
        postgresql_where=sa.text(f"status IN ({NON_TERMINAL_SQL})"),
    )
    op.create_index(f"ix_{name}_match_status", name, ["match_id", "status"])
    op.create_index(f"ix_{name}_player1_status", name, ["player1_id", "status"])
    op.create_index(f"ix_{name}_player2_status", name, ["player2_id", "status"])
    op.create_index(f"ix_{name}_status_expires", name, ["status", "expires_at"])
    op.create_index(
        f"ix_{name}_couple_completed", name, ["match_key", "status", "completed_at"]
    )


def upgrade() -> None:
    # ── 1. users ────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("display_name", sa.String, nullable=False),
        sa.Column("username", sa.String, unique=True, nullable=True),
        sa.Column(
            "photos",
            postgresql.JSONB,
            nullable=True,
            comment="Array of photo URLs",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "is_active",
            sa.Boolean,
            server_default="true",
            nullable=False,
        ),
    )

    # ── 2. matches ──────────────────────────────────────────────────
    op.create_table(
        "matches",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_a_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_b_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "mutual_like",
            sa.Boolean,
            server_default="false",
            nullable=False,
        ),
        sa.Column("distance_km", sa.Float, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("user_a_id", "user_b_id", name="uq_match_pair"),
    )
    op.create_index("ix_matches_user_b_user_a", "matches", ["user_b_id", "user_a_id"])

    # ── 3-8. game sessions ──────────────────────────────────────────
    for name in SESSION_TABLES:
        _create_session_table(name)

    # ── 9. couple_compatibility ─────────────────────────────────────
    op.create_table(
        "couple_compatibility",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("match_key", sa.String, unique=True, nullable=False),
        sa.Column("match_id", sa.String, nullable=False),
        sa.Column("user_a_id", sa.String, nullable=False),
        sa.Column("user_b_id", sa.String, nullable=False),
        sa.Column("version", sa.Integer, server_default="0", nullable=False),
        sa.Column("generating_since", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "document",
            postgresql.JSONB,
            nullable=False,
            comment="Aggregated profile",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_couple_compat_match_id", "couple_compatibility", ["match_id"])
    op.create_index(
        "ix_couple_compat_users", "couple_compatibility", ["user_a_id", "user_b_id"]
    )
    op.create_index(
        "ix_couple_compat_users_rev", "couple_compatibility", ["user_b_id", "user_a_id"]
    )


def downgrade() -> None:
    # Drop in reverse order (children / dependents first).
    op.drop_table("couple_compatibility")
    for name in reversed(SESSION_TABLES):
        op.drop_table(name)
    op.drop_index("ix_matches_user_b_user_a", table_name="matches")
    op.drop_table("matches")
    op.drop_table("users")
