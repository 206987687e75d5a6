"""
Velora Games — Asynchronous game engine base (Two Truths & A Lie, What
Would You Do, Dream Board)

Async games have no per-turn deadline; the whole session carries one
expiry (48-72h).  Each player progresses independently and the session
finishes when both players are complete::

    pending --accept--> active --both complete--> analyzing --> completed

Analysis runs out of band on the timer service.  Its outcome never blocks
completion: a failed insight call still completes the session, with
``ai_insights`` left empty and ``insight_error`` recorded.  Entering
``analyzing`` pushes ``expires_at`` out by ``ANALYSIS_GRACE_MINUTES`` so
the reaper does not expire a session that is merely waiting on Gemini, and
``recover`` re-runs analysis for sessions caught mid-flight by a restart.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

from app.errors import InsightUnavailable, InvalidState
from app.schemas.enums import FINISHED_STATUSES, SessionStatus
from app.schemas.sessions import SessionEnvelope
from app.services.insight_service import insight_error_record
from app.services.session_primitives import SessionEngine, player_slot


class AsyncGameEngine(SessionEngine):
    """Shared completion and analysis flow for the async games."""

    lifetime_setting: str
    insight_schema = None

    def _session_lifetime(self) -> timedelta:
        return timedelta(hours=getattr(self.settings, self.lifetime_setting))

    # ── Subclass contract ─────────────────────────────────────────────

    def is_player_complete(self, doc: SessionEnvelope, user_id: str) -> bool:
        return doc.player_for(user_id).is_complete

    def compute_results(self, doc: SessionEnvelope) -> dict[str, Any]:
        raise NotImplementedError

    def build_insight_prompt(self, doc: SessionEnvelope, results: dict[str, Any]) -> str:
        raise NotImplementedError

    # ── Completion ────────────────────────────────────────────────────

    def _require_active(self, doc: SessionEnvelope) -> None:
        if doc.status != SessionStatus.ACTIVE:
            raise InvalidState("Game is not in progress")

    def _begin_analysis_if_done(self, doc: SessionEnvelope, now: datetime) -> bool:
        """Call inside a mutate callback after recording progress."""
        if doc.status != SessionStatus.ACTIVE:
            return False
        if not all(self.is_player_complete(doc, uid) for uid in doc.user_ids):
            return False
        doc.status = SessionStatus.ANALYZING
        doc.last_activity_at = now
        grace = now + timedelta(minutes=self.settings.ANALYSIS_GRACE_MINUTES)
        if doc.expires_at < grace:
            doc.expires_at = grace
        return True

    async def _after_progress(self, doc: SessionEnvelope, caller_id: str, began_analysis: bool) -> None:
        """Post-commit fan-out for a submit: progress to the partner, and
        kick off analysis when the submit completed the game."""
        partner = doc.partner_of(caller_id)
        await self.emit(partner.user_id, "partner_progress", {
            "session_id": doc.session_id,
            "partner_complete": self.is_player_complete(doc, caller_id),
        })
        if began_analysis:
            self.log.info("analysis_started", session_id=doc.session_id)
            await self.emit_both(doc, "analyzing", {"session_id": doc.session_id})
            self.timers.spawn(self.run_analysis(doc.session_id), name=f"analysis:{doc.session_id}")

    async def analyze(
        self, doc: SessionEnvelope
    ) -> tuple[Optional[dict[str, Any]], Optional[dict[str, Any]], Optional[dict[str, Any]]]:
        """Return ``(results, ai_insights, insight_error)`` for a session
        whose players are both complete."""
        results = self.compute_results(doc)
        insights, error = await self._request_insights(doc, results)
        return results, insights, error

    async def _request_insights(
        self, doc: SessionEnvelope, results: dict[str, Any]
    ) -> tuple[Optional[dict[str, Any]], Optional[dict[str, Any]]]:
        if self.insights is None:
            return None, None
        try:
            insights = await self.insights.generate_json(
                self.build_insight_prompt(doc, results),
                schema=self.insight_schema,
                purpose=f"{self.game_type.value}_insights",
            )
        except InsightUnavailable as exc:
            self.log.warning("insights_unavailable", session_id=doc.session_id, error=exc.message)
            return None, insight_error_record(exc, self.now())
        return {**insights, "generated_at": self.now().isoformat()}, None

    async def run_analysis(self, session_id: str) -> bool:
        doc = await self.store.require(session_id)
        if doc.status != SessionStatus.ANALYZING:
            return False

        results, insights, error = await self.analyze(doc)
        now = self.now()

        def _complete(d: SessionEnvelope) -> bool:
            if d.status != SessionStatus.ANALYZING:
                return False
            d.status = SessionStatus.COMPLETED
            d.completed_at = now
            d.last_activity_at = now
            d.results = results
            d.ai_insights = insights
            d.insight_error = error
            return True

        doc, completed = await self.store.mutate(session_id, _complete)
        if not completed:
            return False

        self.log.info(
            "game_completed",
            session_id=session_id,
            score=self.score_of(doc),
            insights_available=insights is not None,
        )
        for user_id in doc.user_ids:
            await self.emit(user_id, "game_completed", {
                "session_id": doc.session_id,
                "you_are": player_slot(doc, user_id),
                "results": doc.results,
                "ai_insights": doc.ai_insights,
            })
        return True

    async def regenerate_insights(self, session_id: str, caller_id: str) -> dict[str, Any]:
        """Retry the AI narrative for a finished session."""
        doc = await self.load_for(session_id, caller_id)
        if doc.status not in FINISHED_STATUSES:
            raise InvalidState("Results are not available yet")
        if doc.results is None:
            raise InvalidState("This game has no results to analyse")

        insights, error = await self._request_insights(doc, doc.results)

        def _attach(d: SessionEnvelope) -> None:
            if insights is not None:
                d.ai_insights = insights
                d.insight_error = None
            else:
                d.insight_error = error

        doc, _ = await self.store.mutate(session_id, _attach)
        return self.results_view(doc, caller_id)

    async def recover(self) -> int:
        """Resume analysis for sessions a restart left in ``analyzing``."""
        docs = await self.store.list_by_status([SessionStatus.ANALYZING])
        for doc in docs:
            self.timers.spawn(self.run_analysis(doc.session_id), name=f"analysis:{doc.session_id}")
        if docs:
            self.log.info("analysis_recovered", sessions=len(docs))
        return len(docs)

    # ── Views ─────────────────────────────────────────────────────────

    def session_view(self, doc: SessionEnvelope, viewer_id: str) -> dict[str, Any]:
        view = self.envelope_view(doc, viewer_id)
        partner = doc.partner_of(viewer_id)
        view["you_complete"] = self.is_player_complete(doc, viewer_id)
        view["partner_complete"] = self.is_player_complete(doc, partner.user_id)
        if doc.status in FINISHED_STATUSES:
            view["results"] = doc.results
            view["ai_insights"] = doc.ai_insights
            view["insight_error"] = doc.insight_error
        return view
