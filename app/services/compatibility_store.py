"""
Velora Games — CoupleCompatibility store

One row per couple, keyed by the canonical ``match_key``.  ``generate`` runs
under a per-couple lock held in the row itself: ``acquire`` is a
compare-and-swap on ``version`` that only succeeds while
``generating_since`` is empty or stale, and ``release`` writes the new
profile and clears the lock in the same statement.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = structlog.get_logger("velora.compatibility_store")


@dataclass
class CompatibilityRecord:
    match_key: str
    match_id: str
    user_a: str
    user_b: str
    version: int = 0
    generating_since: datetime | None = None
    last_generated_at: datetime | None = None
    document: dict[str, Any] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        """A row may exist only as a lock holder before its first profile."""
        return self.last_generated_at is not None


class BaseCompatibilityStore:
    async def get(self, match_key: str) -> CompatibilityRecord | None:
        raise NotImplementedError

    async def acquire(
        self,
        match_key: str,
        match_id: str,
        user_ids: tuple[str, str],
        now: datetime,
        lock_seconds: int,
    ) -> CompatibilityRecord | None:
        """Take the generation lock; ``None`` when another run holds it."""
        raise NotImplementedError

    async def release(
        self,
        record: CompatibilityRecord,
        document: dict[str, Any] | None,
        generated_at: datetime | None,
    ) -> None:
        """Drop the lock, storing ``document`` when one is given."""
        raise NotImplementedError


class CompatibilityStore(BaseCompatibilityStore):
    """SQLAlchemy persistence for ``couple_compatibility``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        if session_factory is None:
            from app.database import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory

    @staticmethod
    def _to_record(row) -> CompatibilityRecord:
        return CompatibilityRecord(
            match_key=row.match_key,
            match_id=row.match_id,
            user_a=row.user_a_id,
            user_b=row.user_b_id,
            version=row.version,
            generating_since=row.generating_since,
            last_generated_at=row.last_generated_at,
            document=dict(row.document or {}),
        )

    async def get(self, match_key: str) -> CompatibilityRecord | None:
        from app.models.compatibility import CoupleCompatibility

        async with self._session_factory() as db:
            result = await db.execute(
                select(CoupleCompatibility).where(CoupleCompatibility.match_key == match_key)
            )
            row = result.scalar_one_or_none()
        return self._to_record(row) if row is not None else None

    async def acquire(self, match_key, match_id, user_ids, now, lock_seconds):
        from app.models.compatibility import CoupleCompatibility as CC

        user_a, user_b = sorted(user_ids)
        async with self._session_factory() as db:
            await db.execute(
                pg_insert(CC)
                .values(
                    id=uuid.uuid4(),
                    match_key=match_key,
                    match_id=match_id,
                    user_a_id=user_a,
                    user_b_id=user_b,
                    version=0,
                    document={},
                )
                .on_conflict_do_nothing(index_elements=[CC.match_key])
            )
            await db.commit()

            current = (await db.execute(select(CC).where(CC.match_key == match_key))).scalar_one()
            stale_before = now - timedelta(seconds=lock_seconds)
            result = await db.execute(
                update(CC)
                .where(
                    CC.match_key == match_key,
                    CC.version == current.version,
                    or_(CC.generating_since.is_(None), CC.generating_since < stale_before),
                )
                .values(version=current.version + 1, generating_since=now)
                .returning(CC)
            )
            row = result.scalar_one_or_none()
            await db.commit()

        if row is None:
            logger.info("compatibility_lock_busy", match_key=match_key)
            return None
        return self._to_record(row)

    async def release(self, record, document, generated_at):
        from app.models.compatibility import CoupleCompatibility as CC

        values: dict[str, Any] = {"version": record.version + 1, "generating_since": None}
        if document is not None:
            values["document"] = document
            values["last_generated_at"] = generated_at
            values["match_id"] = record.match_id
        async with self._session_factory() as db:
            result = await db.execute(
                update(CC)
                .where(CC.match_key == record.match_key, CC.version == record.version)
                .values(**values)
            )
            await db.commit()
        if result.rowcount != 1:
            # A stale-lock takeover replaced this run; its result wins.
            logger.warning("compatibility_lock_lost", match_key=record.match_key)
