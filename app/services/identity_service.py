"""
Velora Games — IdentityService adapter.

Bearer tokens are Fernet-sealed claim sets (``{"sub": user_id, "iat": ...}``)
verified with a TTL, so the service needs no token table.  Profiles are read
from the ``users`` table.
"""

from __future__ import annotations

import time
import uuid

import structlog
from cryptography.fernet import InvalidToken
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.errors import Unauthenticated
from app.utils.encryption import open_claims, seal_claims

logger = structlog.get_logger("velora.identity")


class IdentityService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_factory = session_factory
        self._ttl = get_settings().IDENTITY_TOKEN_TTL_SECONDS

    def issue_token(self, user_id: str) -> str:
        return seal_claims({"sub": str(user_id), "iat": int(time.time())})

    def authenticate(self, token: str | None) -> str:
        """Return the user id sealed in ``token`` or raise ``Unauthenticated``."""
        if not token:
            raise Unauthenticated()
        try:
            claims = open_claims(token, ttl_seconds=self._ttl)
        except (InvalidToken, ValueError, UnicodeError):
            logger.info("token_rejected")
            raise Unauthenticated("Invalid or expired token")
        user_id = claims.get("sub") if isinstance(claims, dict) else None
        if not user_id:
            raise Unauthenticated("Invalid or expired token")
        return str(user_id)

    async def get_profile(self, user_id: str) -> dict:
        """``{user_id, display_name, photo}``; unknown users get a placeholder."""
        from app.models.user import User

        profile = {"user_id": str(user_id), "display_name": None, "photo": None}
        try:
            row_id = uuid.UUID(str(user_id))
        except ValueError:
            return profile

        if self._session_factory is None:
            from app.database import get_session_factory

            self._session_factory = get_session_factory()

        async with self._session_factory() as db:
            result = await db.execute(select(User).where(User.id == row_id))
            user = result.scalar_one_or_none()
        if user is not None:
            profile["display_name"] = user.display_name
            profile["photo"] = user.profile_photo
        return profile

    async def get_profiles(self, user_ids) -> dict[str, dict]:
        profiles = {}
        for user_id in user_ids:
            profiles[str(user_id)] = await self.get_profile(user_id)
        return profiles
