"""
Velora Games — Session Store (PersistentStore adapter)

All writes to a session pass through ``mutate``: the document is loaded,
changed in memory by a synchronous callback, then written back with a
compare-and-swap on the ``version`` column.  Losing writers reload and
re-apply their callback, so the callback must be a pure function of the
document it is handed.  No lock is held across I/O.

``BaseSessionStore`` owns the retry discipline; ``SessionStore`` supplies
the SQLAlchemy persistence.  Callbacks may raise ``GameError`` subclasses to
reject an operation, in which case nothing is written.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Callable, Iterable, TypeVar

import structlog
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.errors import ConcurrencyConflict, ConflictActiveSession, NotFound
from app.models.session import SESSION_TABLES
from app.schemas.enums import FINISHED_STATUSES, GameType, SessionStatus
from app.schemas.sessions import DOCUMENT_TYPES, SessionEnvelope

logger = structlog.get_logger("velora.session_store")

DocT = TypeVar("DocT", bound=SessionEnvelope)


class BaseSessionStore:
    """Optimistic-concurrency session repository for one game type."""

    def __init__(self, game_type: GameType, max_retries: int | None = None) -> None:
        self.game_type = game_type
        self.document_cls = DOCUMENT_TYPES[game_type]
        self._max_retries = max_retries or get_settings().CAS_MAX_RETRIES

    # ── Persistence primitives (implemented by subclasses) ────────────

    async def insert(self, doc: SessionEnvelope) -> SessionEnvelope:
        raise NotImplementedError

    async def get(self, session_id: str) -> SessionEnvelope | None:
        raise NotImplementedError

    async def _compare_and_swap(self, doc: SessionEnvelope, expected_version: int) -> bool:
        raise NotImplementedError

    async def list_for_user(
        self,
        user_id: str,
        statuses: Iterable[SessionStatus],
        limit: int = 20,
    ) -> list[SessionEnvelope]:
        raise NotImplementedError

    async def list_for_couple(
        self,
        match_key: str,
        statuses: Iterable[SessionStatus],
        limit: int = 20,
    ) -> list[SessionEnvelope]:
        raise NotImplementedError

    async def count_for_couple(self, match_key: str, statuses: Iterable[SessionStatus]) -> int:
        raise NotImplementedError

    async def list_due_for_expiry(
        self,
        now: datetime,
        statuses: Iterable[SessionStatus],
        limit: int = 200,
    ) -> list[SessionEnvelope]:
        raise NotImplementedError

    async def list_by_status(self, statuses: Iterable[SessionStatus]) -> list[SessionEnvelope]:
        raise NotImplementedError

    # ── Derived helpers ───────────────────────────────────────────────

    async def require(self, session_id: str) -> SessionEnvelope:
        doc = await self.get(session_id)
        if doc is None:
            raise NotFound()
        return doc

    async def latest_finished(self, match_key: str) -> SessionEnvelope | None:
        """Most recently completed (or discussed) session for a couple."""
        docs = await self.list_for_couple(match_key, FINISHED_STATUSES, limit=1)
        return docs[0] if docs else None

    async def mutate(
        self,
        session_id: str,
        fn: Callable[[Any], Any],
    ) -> tuple[Any, Any]:
        """Apply ``fn`` to the session and persist it atomically.

        Returns ``(document, fn_result)``.  When ``fn`` leaves the document
        unchanged nothing is written, which makes stale timer callbacks and
        repeated idempotent calls free.
        """
        log = logger.bind(game_type=self.game_type.value, session_id=session_id)

        for attempt in range(1, self._max_retries + 1):
            doc = await self.require(session_id)
            before = doc.model_dump(mode="json")
            result = fn(doc)
            if doc.model_dump(mode="json") == before:
                return doc, result

            expected = doc.version
            doc.version = expected + 1
            if await self._compare_and_swap(doc, expected):
                return doc, result

            log.info("session_cas_conflict", attempt=attempt, expected_version=expected)

        log.warning("session_cas_exhausted", attempts=self._max_retries)
        raise ConcurrencyConflict()


class SessionStore(BaseSessionStore):
    """SQLAlchemy-backed store: one table per game type, JSONB document."""

    def __init__(
        self,
        game_type: GameType,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        max_retries: int | None = None,
    ) -> None:
        super().__init__(game_type, max_retries)
        self.row_cls = SESSION_TABLES[game_type]
        if session_factory is None:
            from app.database import get_session_factory

            session_factory = get_session_factory()
        self._session_factory = session_factory

    # ── Row <-> document mapping ──────────────────────────────────────

    @staticmethod
    def _columns(doc: SessionEnvelope) -> dict[str, Any]:
        return {
            "match_id": doc.match_id,
            "match_key": doc.match_key,
            "player1_id": doc.player1.user_id,
            "player2_id": doc.player2.user_id,
            "status": doc.status.value,
            "expires_at": doc.expires_at,
            "completed_at": doc.completed_at,
            "current_question_expires_at": getattr(doc, "current_question_expires_at", None),
            "document": doc.model_dump(mode="json"),
        }

    def _to_document(self, row) -> SessionEnvelope:
        doc = self.document_cls.model_validate(row.document)
        doc.version = row.version
        return doc

    @staticmethod
    def _parse_id(session_id: str) -> uuid.UUID | None:
        try:
            return uuid.UUID(str(session_id))
        except ValueError:
            return None

    # ── Primitives ────────────────────────────────────────────────────

    async def insert(self, doc: SessionEnvelope) -> SessionEnvelope:
        """Conditional insert: the partial unique index rejects a second
        non-terminal session for the same couple."""
        row = self.row_cls(
            id=uuid.UUID(doc.session_id),
            version=doc.version,
            **self._columns(doc),
        )
        async with self._session_factory() as db:
            db.add(row)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                logger.info(
                    "session_insert_conflict",
                    game_type=self.game_type.value,
                    match_key=doc.match_key,
                )
                raise ConflictActiveSession() from exc
        return doc

    async def get(self, session_id: str) -> SessionEnvelope | None:
        row_id = self._parse_id(session_id)
        if row_id is None:
            return None
        async with self._session_factory() as db:
            result = await db.execute(select(self.row_cls).where(self.row_cls.id == row_id))
            row = result.scalar_one_or_none()
        return self._to_document(row) if row is not None else None

    async def _compare_and_swap(self, doc: SessionEnvelope, expected_version: int) -> bool:
        stmt = (
            update(self.row_cls)
            .where(
                self.row_cls.id == uuid.UUID(doc.session_id),
                self.row_cls.version == expected_version,
            )
            .values(version=doc.version, **self._columns(doc))
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            await db.commit()
        return result.rowcount == 1

    # ── Queries ───────────────────────────────────────────────────────

    async def _scalars(self, stmt) -> list[SessionEnvelope]:
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            rows = result.scalars().all()
        return [self._to_document(row) for row in rows]

    async def list_for_user(self, user_id, statuses, limit=20):
        cls = self.row_cls
        stmt = (
            select(cls)
            .where(
                or_(cls.player1_id == user_id, cls.player2_id == user_id),
                cls.status.in_([s.value for s in statuses]),
            )
            .order_by(cls.completed_at.desc().nulls_last(), cls.created_at.desc())
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def list_for_couple(self, match_key, statuses, limit=20):
        cls = self.row_cls
        stmt = (
            select(cls)
            .where(cls.match_key == match_key, cls.status.in_([s.value for s in statuses]))
            .order_by(cls.completed_at.desc().nulls_last(), cls.created_at.desc())
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def count_for_couple(self, match_key, statuses) -> int:
        cls = self.row_cls
        stmt = (
            select(func.count())
            .select_from(cls)
            .where(cls.match_key == match_key, cls.status.in_([s.value for s in statuses]))
        )
        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return int(result.scalar_one())

    async def list_due_for_expiry(self, now, statuses, limit=200):
        cls = self.row_cls
        stmt = (
            select(cls)
            .where(cls.status.in_([s.value for s in statuses]), cls.expires_at < now)
            .order_by(cls.expires_at)
            .limit(limit)
        )
        return await self._scalars(stmt)

    async def list_by_status(self, statuses):
        cls = self.row_cls
        stmt = select(cls).where(cls.status.in_([s.value for s in statuses]))
        return await self._scalars(stmt)
