"""
Velora Games — Timer service

In-process scheduled callbacks keyed by ``(session_id, kind, question_index)``.
Scheduling a key that is already armed replaces the previous timer.  Timers
are advisory: every callback re-reads the session and no-ops when the state
has moved on, so a late or duplicate fire is harmless.  After a restart the
engines' recovery sweep re-arms timers from the persisted deadlines.

``spawn`` runs fire-and-forget work (analysis, insight generation) while
keeping a strong reference to the task and logging its failure.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Coroutine, Hashable

import structlog

logger = structlog.get_logger("velora.timers")

TimerKey = tuple[Hashable, ...]


class TimerService:
    def __init__(self) -> None:
        self._timers: dict[TimerKey, asyncio.Task] = {}
        self._background: set[asyncio.Task] = set()

    def schedule(
        self,
        key: TimerKey,
        delay_seconds: float,
        callback: Callable[[], Awaitable[Any]],
    ) -> None:
        self.cancel(key)
        task = asyncio.create_task(self._run(key, max(0.0, delay_seconds), callback))
        self._timers[key] = task

    async def _run(self, key: TimerKey, delay: float, callback) -> None:
        try:
            await asyncio.sleep(delay)
            # Detach before running so the callback may re-arm the same key.
            if self._timers.get(key) is asyncio.current_task():
                del self._timers[key]
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("timer_callback_failed", key=list(map(str, key)))

    def cancel(self, key: TimerKey) -> bool:
        task = self._timers.pop(key, None)
        if task is None:
            return False
        if task is not asyncio.current_task():
            task.cancel()
        return True

    def cancel_session(self, session_id: str) -> int:
        keys = [k for k in self._timers if k and k[0] == session_id]
        for key in keys:
            self.cancel(key)
        return len(keys)

    def is_armed(self, key: TimerKey) -> bool:
        return key in self._timers

    def armed_keys(self, session_id: str | None = None) -> list[TimerKey]:
        return [k for k in self._timers if session_id is None or k[0] == session_id]

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "background_task_failed",
                task=task.get_name(),
                error=str(exc),
                error_type=type(exc).__name__,
            )

    async def shutdown(self) -> None:
        tasks = list(self._timers.values()) + list(self._background)
        self._timers.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("timers_shutdown", cancelled=len(tasks))
