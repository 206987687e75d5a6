"""
Velora Games — User model (read-only profile source for the identity service).
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID as PgUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        PgUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    username: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    photos: Mapped[list | None] = mapped_column(
        JSONB, nullable=True, comment="Array of photo URLs"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )

    @property
    def profile_photo(self) -> str | None:
        return self.photos[0] if self.photos else None

    def __repr__(self) -> str:
        return f"<User {self.display_name!r} id={self.id}>"
