"""
Velora Games — CoupleCompatibility model.

One row per couple (unique ``match_key``).  The aggregated profile lives in
``document``; ``version`` and ``generating_since`` implement the per-couple
generation lock taken by ``CompatibilityService.generate``.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class CoupleCompatibility(Base):
    __tablename__ = "couple_compatibility"
    __table_args__ = (
        Index("ix_couple_compat_match_id", "match_id"),
        Index("ix_couple_compat_users", "user_a_id", "user_b_id"),
        Index("ix_couple_compat_users_rev", "user_b_id", "user_a_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    match_key: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    match_id: Mapped[str] = mapped_column(String, nullable=False)
    user_a_id: Mapped[str] = mapped_column(String, nullable=False)
    user_b_id: Mapped[str] = mapped_column(String, nullable=False)
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    generating_since: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    document: Mapped[dict] = mapped_column(
        JSONB, nullable=False, default=dict, comment="Aggregated profile"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<CoupleCompatibility {self.match_key} v={self.version}>"
