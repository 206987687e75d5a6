"""
Velora Games — Game session tables.

One table per game type.  All six share the envelope columns declared on
``GameSessionMixin``: the fields the store filters or orders on are real,
indexed columns, while the full engine-specific record lives in the JSONB
``document`` column.  ``version`` is the optimistic-concurrency counter
every write compares against.

The partial unique index on ``match_key`` enforces that a couple has at most
one non-terminal session per game type; the store's conditional insert
relies on it.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID as PgUUID
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from app.database import Base
from app.schemas.enums import NON_TERMINAL_STATUSES, GameType

_NON_TERMINAL_SQL = ", ".join(f"'{s.value}'" for s in sorted(NON_TERMINAL_STATUSES, key=lambda s: s.value))


class GameSessionMixin:
    id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    match_id: Mapped[str] = mapped_column(String, nullable=False)
    match_key: Mapped[str] = mapped_column(
        String, nullable=False, comment="Sorted user pair, one per couple"
    )
    player1_id: Mapped[str] = mapped_column(String, nullable=False)
    player2_id: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False)
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    current_question_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    document: Mapped[dict] = mapped_column(
        JSONB, nullable=False, comment="Full session record"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    @declared_attr.directive
    def __table_args__(cls):
        name = cls.__tablename__
        return (
            Index(
                f"uq_{name}_active_couple",
                "match_key",
                unique=True,
                postgresql_where=text(f"status IN ({_NON_TERMINAL_SQL})"),
            ),
            Index(f"ix_{name}_match_status", "match_id", "status"),
            Index(f"ix_{name}_player1_status", "player1_id", "status"),
            Index(f"ix_{name}_player2_status", "player2_id", "status"),
            Index(f"ix_{name}_status_expires", "status", "expires_at"),
            Index(f"ix_{name}_couple_completed", "match_key", "status", "completed_at"),
        )

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} {self.id} status={self.status!r} "
            f"v={self.version}>"
        )


class TwoTruthsLieSessionRow(GameSessionMixin, Base):
    __tablename__ = "two_truths_lie_sessions"


class WouldYouRatherSessionRow(GameSessionMixin, Base):
    __tablename__ = "would_you_rather_sessions"


class IntimacySpectrumSessionRow(GameSessionMixin, Base):
    __tablename__ = "intimacy_spectrum_sessions"


class NeverHaveIEverSessionRow(GameSessionMixin, Base):
    __tablename__ = "never_have_i_ever_sessions"


class WhatWouldYouDoSessionRow(GameSessionMixin, Base):
    __tablename__ = "what_would_you_do_sessions"


class DreamBoardSessionRow(GameSessionMixin, Base):
    __tablename__ = "dream_board_sessions"


SESSION_TABLES: dict[GameType, type[GameSessionMixin]] = {
    GameType.TWO_TRUTHS_LIE: TwoTruthsLieSessionRow,
    GameType.WOULD_YOU_RATHER: WouldYouRatherSessionRow,
    GameType.INTIMACY_SPECTRUM: IntimacySpectrumSessionRow,
    GameType.NEVER_HAVE_I_EVER: NeverHaveIEverSessionRow,
    GameType.WHAT_WOULD_YOU_DO: WhatWouldYouDoSessionRow,
    GameType.DREAM_BOARD: DreamBoardSessionRow,
}
