"""
Velora Games — Expiry reaper

Background loop that moves overdue sessions of every game type to
``expired``.  Each candidate is expired through its engine's
``expire_if_due``, which re-checks the deadline inside the CAS write, so a
session that progressed after it was listed is left alone.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

import structlog

from app.config import get_settings
from app.errors import GameError
from app.schemas.enums import REAPABLE_STATUSES

logger = structlog.get_logger("velora.reaper")


class ExpiryReaper:
    def __init__(self, engines: Iterable, interval_seconds: float | None = None, batch_size: int = 200) -> None:
        self.engines = list(engines)
        self.interval = interval_seconds or get_settings().REAPER_INTERVAL_SECONDS
        self.batch_size = batch_size

    async def sweep(self) -> int:
        """One pass over every game type; returns the number expired."""
        expired = 0
        for engine in self.engines:
            due = await engine.store.list_due_for_expiry(engine.now(), REAPABLE_STATUSES, limit=self.batch_size)
            for doc in due:
                try:
                    if await engine.expire_if_due(doc.session_id):
                        expired += 1
                except GameError as exc:
                    logger.warning(
                        "reaper_expire_failed",
                        game_type=engine.game_type.value,
                        session_id=doc.session_id,
                        error=exc.message,
                    )
        if expired:
            logger.info("reaper_sweep", expired=expired)
        return expired

    async def run(self) -> None:
        logger.info("reaper_started", interval_seconds=self.interval)
        while True:
            try:
                await self.sweep()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("reaper_sweep_failed")
            await asyncio.sleep(self.interval)
