"""
Velora Games — Synchronous game engine (Would You Rather, Intimacy Spectrum,
Never Have I Ever)

A server-authoritative question loop shared by the three live games.  The
subclasses only supply the catalog, the answer schema, the reveal details,
the scoring function and the insight prompt.

Per question the session moves through two phases::

    answering --both answered--> revealing --reveal window--> next question
        |                            ^
        +-------deadline-------------+   (missing answers recorded as null)

Both the "both answered" write and the deadline write only act from
``answering`` for the current index, so exactly one of them wins and each
player receives exactly one terminal event (``reveal`` or ``timeout``) per
question.  ``advance`` only acts from ``revealing`` for the index it was
armed for, so stale or duplicate timer fires are no-ops.  After the last
question's reveal the session goes straight to ``completed``.

Both players count as present from the moment the game starts.  Only when
both drop during ``playing`` is the session ``paused`` and its timers
cancelled; the first player to come back resumes it with the remaining time
of the stored deadline (never extended).
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Any, Optional

from app.errors import InsightUnavailable, InvalidState, ValidationFailed
from app.schemas.enums import FINISHED_STATUSES, QuestionPhase, SessionStatus
from app.schemas.sessions import AnswerRecord, SyncPlayer, SyncSession
from app.services.insight_service import insight_error_record
from app.services.session_primitives import SessionEngine, player_slot, require_participant
from app.utils.scoring import round_half_up


class SyncGameEngine(SessionEngine):
    """Shared loop for the three live games."""

    shuffle_questions: bool = True
    insight_schema = None

    # ── Subclass contract ─────────────────────────────────────────────

    def validate_answer(self, answer: Any, story: Optional[str]) -> tuple[Any, Optional[str]]:
        raise NotImplementedError

    def question_payload(self, question_number: int) -> dict[str, Any]:
        raise NotImplementedError

    def reveal_details(self, question_number: int, mine: Any, theirs: Any) -> dict[str, Any]:
        return {}

    def compute_results(self, doc: SyncSession) -> dict[str, Any]:
        raise NotImplementedError

    def build_insight_prompt(self, doc: SyncSession) -> str:
        raise NotImplementedError

    def on_answer_recorded(self, doc: SyncSession, question_number: int) -> None:
        """Hook for per-answer bookkeeping (NHIE discovery points)."""

    # ── Lifecycle hooks ───────────────────────────────────────────────

    def _question_order(self) -> list[int]:
        order = list(range(1, self.question_count + 1))
        if self.shuffle_questions:
            random.shuffle(order)
        return order

    def _invitation_expiry(self, now: datetime) -> datetime:
        return now + timedelta(minutes=self.settings.SYNC_INVITATION_TTL_MINUTES)

    def _session_lifetime(self) -> timedelta:
        return timedelta(minutes=self.settings.SYNC_SESSION_TTL_MINUTES)

    def _on_accepted(self, doc: SyncSession, now: datetime) -> None:
        doc.status = SessionStatus.STARTING
        doc.accepted_at = now
        doc.last_activity_at = now
        doc.expires_at = now + self._session_lifetime()

    async def _after_accepted(self, doc: SyncSession) -> None:
        countdown = self.settings.START_COUNTDOWN_SECONDS
        players = [await self._profile(user_id) for user_id in doc.user_ids]
        await self.emit_both(doc, "game_starting", {
            "session_id": doc.session_id,
            "starts_in": int(countdown * 1000),
            "players": players,
            "total_questions": len(doc.question_order),
        })
        self._arm_start(doc)

    # ── Timers ────────────────────────────────────────────────────────

    def _key(self, doc_or_id, kind: str, index: int = -1) -> tuple:
        session_id = doc_or_id if isinstance(doc_or_id, str) else doc_or_id.session_id
        return (session_id, kind, index)

    def _seconds_until(self, when: Optional[datetime]) -> float:
        if when is None:
            return 0.0
        return max(0.0, (when - self.now()).total_seconds())

    def _arm_start(self, doc: SyncSession) -> None:
        starts_at = (doc.accepted_at or self.now()) + timedelta(seconds=self.settings.START_COUNTDOWN_SECONDS)
        session_id = doc.session_id
        self.timers.schedule(
            self._key(session_id, "start"),
            self._seconds_until(starts_at),
            lambda: self.start(session_id),
        )

    def _arm_deadline(self, doc: SyncSession) -> None:
        session_id, index = doc.session_id, doc.current_question_index
        self.timers.schedule(
            self._key(session_id, "deadline", index),
            self._seconds_until(doc.current_question_expires_at),
            lambda: self.timeout(session_id, index),
        )

    def _arm_reveal(self, doc: SyncSession) -> None:
        session_id, index = doc.session_id, doc.current_question_index
        self.timers.schedule(
            self._key(session_id, "reveal", index),
            self._seconds_until(doc.reveal_ends_at),
            lambda: self.advance(session_id, index),
        )

    def _arm_for_state(self, doc: SyncSession) -> None:
        if doc.status == SessionStatus.STARTING:
            self._arm_start(doc)
        elif doc.status == SessionStatus.PLAYING:
            if doc.question_phase == QuestionPhase.ANSWERING:
                self._arm_deadline(doc)
            elif doc.question_phase == QuestionPhase.REVEALING:
                self._arm_reveal(doc)

    # ── Views ─────────────────────────────────────────────────────────

    def current_question_view(self, doc: SyncSession) -> Optional[dict[str, Any]]:
        number = doc.current_question_number
        if number is None:
            return None
        return {
            "index": doc.current_question_index,
            "number": number,
            **self.question_payload(number),
            "expires_at": doc.current_question_expires_at,
        }

    def _progress(self, doc: SyncSession) -> dict[str, Any]:
        total = len(doc.question_order)
        return {
            "current": min(doc.current_question_index + 1, total),
            "total": total,
            "percent": round_half_up(100.0 * doc.current_question_index / total) if total else 0,
        }

    def question_event(self, doc: SyncSession) -> dict[str, Any]:
        return {
            "session_id": doc.session_id,
            "current_question": self.current_question_view(doc),
            "total_questions": len(doc.question_order),
            "progress": self._progress(doc),
        }

    def _reveal_payload(self, doc: SyncSession, viewer_id: str, index: int) -> dict[str, Any]:
        number = doc.question_order[index]
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        mine = me.answer_for(number)
        theirs = partner.answer_for(number)
        my_answer = mine.answer if mine else None
        their_answer = theirs.answer if theirs else None
        payload = {
            "session_id": doc.session_id,
            "question_index": index,
            "question_number": number,
            "your_answer": my_answer,
            "partner_answer": their_answer,
            "matched": my_answer is not None and my_answer == their_answer,
            "reveal_duration": int(self.settings.REVEAL_WINDOW_SECONDS * 1000),
            "is_last_question": index == len(doc.question_order) - 1,
        }
        if theirs is not None and theirs.story:
            payload["partner_story"] = theirs.story
        if my_answer is not None and their_answer is not None:
            payload.update(self.reveal_details(number, my_answer, their_answer))
        return payload

    def session_view(self, doc: SyncSession, viewer_id: str) -> dict[str, Any]:
        view = self.envelope_view(doc, viewer_id)
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        view.update({
            "total_questions": len(doc.question_order),
            "you": self._player_stats(me),
            "partner": {**self._player_stats(partner), "is_connected": partner.is_connected},
        })
        if doc.status in (SessionStatus.PLAYING, SessionStatus.PAUSED):
            number = doc.current_question_number
            view.update({
                "question_phase": doc.question_phase.value if doc.question_phase else None,
                "current_question": self.current_question_view(doc),
                "progress": self._progress(doc),
                "you_answered": me.answer_for(number) is not None,
                "partner_answered": partner.answer_for(number) is not None,
            })
            if doc.question_phase == QuestionPhase.REVEALING:
                view["reveal"] = self._reveal_payload(doc, viewer_id, doc.current_question_index)
                view["reveal_ends_at"] = doc.reveal_ends_at
        if doc.status in FINISHED_STATUSES:
            view["results"] = doc.results
            view["ai_insights"] = doc.ai_insights
            view["insight_error"] = doc.insight_error
        return view

    @staticmethod
    def _player_stats(player: SyncPlayer) -> dict[str, Any]:
        return {
            "user_id": player.user_id,
            "total_answered": player.total_answered,
            "total_timed_out": player.total_timed_out,
            "average_response_time_ms": player.average_response_time_ms,
        }

    def results_view(self, doc: SyncSession, viewer_id: str) -> dict[str, Any]:
        view = super().results_view(doc, viewer_id)
        view["questions"] = self.question_breakdown(doc, viewer_id)
        return view

    def question_breakdown(self, doc: SyncSession, viewer_id: str) -> list[dict[str, Any]]:
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        rows = []
        for index, number in enumerate(doc.question_order):
            mine = me.answer_for(number)
            theirs = partner.answer_for(number)
            rows.append({
                "index": index,
                "number": number,
                **self.question_payload(number),
                "your_answer": mine.answer if mine else None,
                "partner_answer": theirs.answer if theirs else None,
                "your_story": mine.story if mine else None,
                "partner_story": theirs.story if theirs else None,
            })
        return rows

    # ── Game loop ─────────────────────────────────────────────────────

    def _enter_question(self, doc: SyncSession, index: int, now: datetime) -> None:
        doc.current_question_index = index
        doc.question_phase = QuestionPhase.ANSWERING
        doc.current_question_started_at = now
        doc.current_question_expires_at = now + timedelta(seconds=self.settings.QUESTION_TIMEOUT_SECONDS)
        doc.reveal_ends_at = None
        doc.last_activity_at = now

    async def start(self, session_id: str) -> bool:
        """``starting -> playing``; fans out the first question."""
        now = self.now()

        def _start(doc: SyncSession) -> bool:
            if doc.status != SessionStatus.STARTING:
                return False
            doc.status = SessionStatus.PLAYING
            doc.started_at = now
            for player in (doc.player1, doc.player2):
                player.is_connected = True
                player.last_seen_at = now
            self._enter_question(doc, 0, now)
            return True

        doc, started = await self.store.mutate(session_id, _start)
        if not started:
            return False
        self.log.info("game_started", session_id=session_id)
        await self.emit_both(doc, "question", self.question_event(doc))
        self._arm_deadline(doc)
        return True

    async def record_answer(
        self,
        session_id: str,
        caller_id: str,
        question_index: int,
        answer: Any,
        story: Optional[str] = None,
    ) -> dict[str, Any]:
        """Record the caller's answer for the current question.

        Rejected without any write when the session is not playing, the
        index is not the current one, the phase is already revealing, the
        caller already answered, the deadline has passed, or the answer
        fails the game's schema.
        """
        value, story = self.validate_answer(answer, story)
        if isinstance(question_index, bool) or not isinstance(question_index, int):
            raise ValidationFailed("question_index must be an integer")
        now = self.now()

        def _record(doc: SyncSession) -> dict[str, Any]:
            me = require_participant(doc, caller_id)
            partner = doc.partner_of(caller_id)
            if doc.status != SessionStatus.PLAYING:
                raise InvalidState("Game is not in progress")
            if question_index != doc.current_question_index:
                raise InvalidState("That question is no longer active")
            if doc.question_phase != QuestionPhase.ANSWERING:
                raise InvalidState("Answers for this question are closed")
            number = doc.current_question_number
            if me.answer_for(number) is not None:
                raise InvalidState("You already answered this question")
            if doc.current_question_expires_at is not None and now > doc.current_question_expires_at:
                raise InvalidState("Time is up for this question")

            started = doc.current_question_started_at or now
            response_ms = max(0, int((now - started).total_seconds() * 1000))
            me.answers.append(AnswerRecord(
                question_number=number,
                answer=value,
                story=story,
                answered_at=now,
                response_time_ms=response_ms,
            ))
            me.total_answered += 1
            timed = [a.response_time_ms for a in me.answers if a.answer is not None and a.response_time_ms is not None]
            me.average_response_time_ms = round_half_up(sum(timed) / len(timed)) if timed else 0
            me.last_activity_at = now
            me.is_connected = True
            me.last_seen_at = now
            doc.last_activity_at = now

            theirs = partner.answer_for(number)
            if theirs is None:
                return {"both_answered": False, "partner_answer": None}

            self.on_answer_recorded(doc, number)
            doc.question_phase = QuestionPhase.REVEALING
            doc.reveal_ends_at = now + timedelta(seconds=self.settings.REVEAL_WINDOW_SECONDS)
            return {"both_answered": True, "partner_answer": theirs.answer}

        doc, outcome = await self.store.mutate(session_id, _record)
        self.log.info(
            "answer_recorded",
            session_id=session_id,
            user_id=caller_id,
            question_index=question_index,
            both_answered=outcome["both_answered"],
        )

        if not outcome["both_answered"]:
            partner = doc.partner_of(caller_id)
            await self.emit(partner.user_id, "partner_answered", {
                "session_id": doc.session_id,
                "question_index": question_index,
            })
            return outcome

        self.timers.cancel(self._key(doc, "deadline", question_index))
        for user_id in doc.user_ids:
            await self.emit(user_id, "reveal", self._reveal_payload(doc, user_id, question_index))
        self._arm_reveal(doc)
        return outcome

    async def timeout(self, session_id: str, question_index: int) -> bool:
        """Deadline for ``question_index``.  No-op unless that question is
        still being answered."""
        now = self.now()

        def _timeout(doc: SyncSession) -> Optional[dict[str, bool]]:
            if doc.status != SessionStatus.PLAYING:
                return None
            if question_index != doc.current_question_index or doc.question_phase != QuestionPhase.ANSWERING:
                return None
            number = doc.current_question_number
            missing = {}
            for slot, player in (("player1", doc.player1), ("player2", doc.player2)):
                if player.answer_for(number) is None:
                    player.answers.append(AnswerRecord(question_number=number, answer=None, answered_at=now))
                    player.total_timed_out += 1
                    missing[player.user_id] = True
                else:
                    missing[player.user_id] = False
            self.on_answer_recorded(doc, number)
            doc.question_phase = QuestionPhase.REVEALING
            doc.reveal_ends_at = now + timedelta(seconds=self.settings.REVEAL_WINDOW_SECONDS)
            doc.last_activity_at = now
            return missing

        doc, missing = await self.store.mutate(session_id, _timeout)
        if missing is None:
            return False

        self.log.info(
            "question_timed_out",
            session_id=session_id,
            question_index=question_index,
            timed_out_users=[uid for uid, flag in missing.items() if flag],
        )
        both = all(missing.values())
        for user_id in doc.user_ids:
            partner = doc.partner_of(user_id)
            payload = self._reveal_payload(doc, user_id, question_index)
            payload.update({
                "timed_out": True,
                "you_timed_out": missing[user_id],
                "partner_timed_out": missing[partner.user_id],
                "both_timed_out": both,
            })
            await self.emit(user_id, "timeout", payload)
        self._arm_reveal(doc)
        return True

    async def advance(self, session_id: str, question_index: int) -> bool:
        """End of the reveal window for ``question_index``: next question,
        or ``completed`` after the last one."""
        now = self.now()

        def _advance(doc: SyncSession) -> Optional[str]:
            if doc.status != SessionStatus.PLAYING:
                return None
            if question_index != doc.current_question_index or doc.question_phase != QuestionPhase.REVEALING:
                return None
            if question_index + 1 >= len(doc.question_order):
                doc.status = SessionStatus.COMPLETED
                doc.completed_at = now
                doc.question_phase = None
                doc.current_question_expires_at = None
                doc.reveal_ends_at = None
                doc.results = self.compute_results(doc)
                return "completed"
            self._enter_question(doc, question_index + 1, now)
            return "next"

        doc, outcome = await self.store.mutate(session_id, _advance)
        if outcome is None:
            return False

        if outcome == "next":
            await self.emit_both(doc, "question", self.question_event(doc))
            self._arm_deadline(doc)
            return True

        self.timers.cancel_session(session_id)
        self.log.info(
            "game_completed",
            session_id=session_id,
            score=doc.results.get(self.score_field),
        )
        for user_id in doc.user_ids:
            await self.emit(user_id, "game_completed", {
                "session_id": doc.session_id,
                "you_are": player_slot(doc, user_id),
                "results": doc.results,
            })
        self.timers.spawn(self.generate_insights(session_id), name=f"insights:{session_id}")
        return True

    # ── Connection handling ───────────────────────────────────────────

    async def connect(self, session_id: str, caller_id: str) -> dict[str, Any]:
        """Mark the caller connected and return the current state
        (``resume``).  Un-pauses the game as soon as either player is back."""
        now = self.now()

        def _connect(doc: SyncSession) -> bool:
            me = require_participant(doc, caller_id)
            me.is_connected = True
            me.last_seen_at = now
            if doc.status == SessionStatus.PAUSED:
                doc.status = SessionStatus.PLAYING
                return True
            return False

        doc, resumed = await self.store.mutate(session_id, _connect)
        partner = doc.partner_of(caller_id)
        await self.emit(partner.user_id, "partner_connected", {
            "session_id": doc.session_id,
            "is_connected": True,
        })
        if resumed:
            self.log.info("game_resumed", session_id=session_id)
            self._arm_for_state(doc)
            await self.emit_both(doc, "game_resumed", {"session_id": doc.session_id})
        return self.session_view(doc, caller_id)

    resume = connect

    async def disconnect(self, session_id: str, caller_id: str) -> None:
        now = self.now()

        def _disconnect(doc: SyncSession) -> bool:
            me = require_participant(doc, caller_id)
            me.is_connected = False
            me.last_seen_at = now
            if (
                doc.status == SessionStatus.PLAYING
                and not doc.player1.is_connected
                and not doc.player2.is_connected
            ):
                doc.status = SessionStatus.PAUSED
                return True
            return False

        doc, paused = await self.store.mutate(session_id, _disconnect)
        if paused:
            self.timers.cancel_session(session_id)
            self.log.info("game_paused", session_id=session_id)
        partner = doc.partner_of(caller_id)
        await self.emit(partner.user_id, "partner_connected", {
            "session_id": doc.session_id,
            "is_connected": False,
        })

    # ── Insights ──────────────────────────────────────────────────────

    async def generate_insights(self, session_id: str) -> bool:
        """Ask InsightService for the post-game narrative.  Failures are
        recorded on the session and never undo completion."""
        if self.insights is None:
            return False
        doc = await self.store.require(session_id)
        if doc.status not in FINISHED_STATUSES or doc.results is None:
            return False

        try:
            insights = await self.insights.generate_json(
                self.build_insight_prompt(doc),
                schema=self.insight_schema,
                purpose=f"{self.game_type.value}_insights",
            )
        except InsightUnavailable as exc:
            error = insight_error_record(exc, self.now())

            def _record_failure(d: SyncSession) -> None:
                d.insight_error = error

            await self.store.mutate(session_id, _record_failure)
            self.log.warning("insights_unavailable", session_id=session_id, error=exc.message)
            return False

        generated_at = self.now()

        def _attach(d: SyncSession) -> None:
            d.ai_insights = {**insights, "generated_at": generated_at.isoformat()}
            d.insight_error = None

        doc, _ = await self.store.mutate(session_id, _attach)
        self.log.info("insights_generated", session_id=session_id)
        await self.emit_both(doc, "insights_ready", {
            "session_id": doc.session_id,
            "ai_insights": doc.ai_insights,
        })
        return True

    async def regenerate_insights(self, session_id: str, caller_id: str) -> dict[str, Any]:
        doc = await self.load_for(session_id, caller_id)
        if doc.status not in FINISHED_STATUSES:
            raise InvalidState("Results are not available yet")
        await self.generate_insights(session_id)
        doc = await self.store.require(session_id)
        return self.results_view(doc, caller_id)

    # ── Recovery ──────────────────────────────────────────────────────

    async def recover(self) -> int:
        """Re-arm countdowns, deadlines and reveal windows after a restart."""
        docs = await self.store.list_by_status([SessionStatus.STARTING, SessionStatus.PLAYING])
        for doc in docs:
            self._arm_for_state(doc)
        if docs:
            self.log.info("timers_recovered", sessions=len(docs))
        return len(docs)


# ── Shared scoring helpers ────────────────────────────────────────────

def paired_answers(doc: SyncSession):
    """Yield ``(question_number, p1_record, p2_record)`` in question order."""
    for number in doc.question_order:
        yield number, doc.player1.answer_for(number), doc.player2.answer_for(number)


def answered(record: Optional[AnswerRecord]) -> bool:
    return record is not None and record.answer is not None
