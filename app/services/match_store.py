"""
Velora Games — MatchStore adapter and canonical-match resolution.

Each user owns a personal match row, so a couple can be referenced by two
different ``match_id`` values.  ``resolve`` is the single primitive every
engine and the aggregator use to turn whichever id the caller holds into
the unordered user pair (``CanonicalMatch``).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import structlog
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import MatchNotFound, NotParticipant

logger = structlog.get_logger("velora.match_store")


def canonical_key(user_a: str, user_b: str) -> str:
    """Order-independent couple key: the sorted pair joined by ``:``."""
    return ":".join(sorted((str(user_a), str(user_b))))


@dataclass(frozen=True)
class CanonicalMatch:
    match_id: str
    user_a: str
    user_b: str
    mutual_like: bool
    distance_km: float | None = None

    @property
    def match_key(self) -> str:
        return canonical_key(self.user_a, self.user_b)

    @property
    def user_ids(self) -> tuple[str, str]:
        return self.user_a, self.user_b

    def has_user(self, user_id: str) -> bool:
        return user_id in (self.user_a, self.user_b)

    def partner_of(self, user_id: str) -> str:
        if user_id == self.user_a:
            return self.user_b
        if user_id == self.user_b:
            return self.user_a
        raise NotParticipant("You are not part of this match")


class MatchStore:
    """Read-only access to the ``matches`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        if session_factory is None:
            from app.database import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory

    @staticmethod
    def _to_canonical(row) -> CanonicalMatch:
        return CanonicalMatch(
            match_id=str(row.id),
            user_a=str(row.user_a_id),
            user_b=str(row.user_b_id),
            mutual_like=bool(row.mutual_like),
            distance_km=row.distance_km,
        )

    async def get(self, match_id: str) -> CanonicalMatch | None:
        from app.models.match import Match

        try:
            row_id = uuid.UUID(str(match_id))
        except ValueError:
            return None
        async with self._session_factory() as db:
            result = await db.execute(select(Match).where(Match.id == row_id))
            row = result.scalar_one_or_none()
        return self._to_canonical(row) if row is not None else None

    async def find_for_pair(self, user_a: str, user_b: str) -> CanonicalMatch | None:
        """Any match row for the pair, in either ordering."""
        from app.models.match import Match

        try:
            a, b = uuid.UUID(str(user_a)), uuid.UUID(str(user_b))
        except ValueError:
            return None
        stmt = select(Match).where(
            or_(
                and_(Match.user_a_id == a, Match.user_b_id == b),
                and_(Match.user_a_id == b, Match.user_b_id == a),
            )
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = result.scalars().all()
        if not rows:
            return None
        # Prefer a row that records the mutual like.
        rows = sorted(rows, key=lambda r: not r.mutual_like)
        return self._to_canonical(rows[0])

    async def resolve(self, match_id: str, caller_id: str) -> CanonicalMatch:
        """Resolve ``match_id`` for ``caller_id`` or raise.

        Raises ``MatchNotFound`` for unknown ids and ``NotParticipant`` when
        the caller is not one of the two users.
        """
        match = await self.get(match_id)
        if match is None:
            raise MatchNotFound()
        if not match.has_user(caller_id):
            logger.info("match_resolve_denied", match_id=match_id, user_id=caller_id)
            raise NotParticipant("You are not part of this match")
        if not match.mutual_like:
            # A mirror row may carry the mutual flag when this one does not.
            mirror = await self.find_for_pair(match.user_a, match.user_b)
            if mirror is not None and mirror.mutual_like:
                return CanonicalMatch(
                    match_id=match.match_id,
                    user_a=match.user_a,
                    user_b=match.user_b,
                    mutual_like=True,
                    distance_km=match.distance_km,
                )
        return match
