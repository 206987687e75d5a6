"""
Velora Games — What Would You Do?

Asynchronous: each player answers all fifteen relationship scenarios with a
voice response (5-180 s), in any order.  Responses are transcribed in the
background; once both players are complete the analysis step transcribes
anything still missing, asks InsightService to compare the two answers to
every scenario, and rolls the comparisons up:

- ``overall_compatibility``: mean alignment score of analysed scenarios
- ``compatibility_level``: >=80 highly_compatible, >=65 compatible,
  >=50 needs_discussion, else significant_differences
- per-category means, strongest areas, areas to discuss, conversation
  starters, red and green flags

Scenarios without both transcripts (or whose comparison failed) are
skipped.  When nothing could be analysed the session still completes, with
``results`` empty and ``insight_error`` recorded.
"""

from __future__ import annotations

from typing import Any, Optional

from app.catalogs import what_would_you_do as catalog
from app.errors import (
    DependencyError,
    InsightUnavailable,
    InvalidState,
    NotFound,
    TranscriptionFailed,
    ValidationFailed,
)
from app.schemas.enums import FINISHED_STATUSES, GameType, SessionStatus
from app.schemas.insights import ScenarioComparison, WhatWouldYouDoInsights
from app.schemas.sessions import ScenarioResponse, WhatWouldYouDoSession
from app.services.async_engine import AsyncGameEngine
from app.services.blob_store import validate_audio_upload, voice_object_path
from app.services.insight_service import insight_error_record
from app.services.session_primitives import require_participant
from app.utils.scoring import mean, round_half_up

SCENARIO_COUNT = len(catalog.SCENARIOS)

STRONG_AREA_MIN = 80
DISCUSS_AREA_MAX = 60
STARTER_MAX = 70
RED_FLAG_MAX = 40


def compatibility_level(score: int) -> str:
    if score >= 80:
        return "highly_compatible"
    if score >= 65:
        return "compatible"
    if score >= 50:
        return "needs_discussion"
    return "significant_differences"


def summarise_analyses(analyses: list[dict[str, Any]]) -> dict[str, Any]:
    """Roll per-scenario comparisons up into the session results."""
    by_category: dict[str, list[int]] = {category: [] for category in catalog.CATEGORIES}
    strongest, to_discuss, starters, red_flags, green_flags = [], [], [], [], []

    for analysis in analyses:
        scenario = catalog.SCENARIOS_BY_NUMBER[analysis["question_number"]]
        score = analysis["alignment_score"]
        by_category[scenario.category].append(score)

        if score >= STRONG_AREA_MIN:
            strongest.append({"category": scenario.category, "insight": analysis["comparison_insight"]})
        elif score < DISCUSS_AREA_MAX:
            to_discuss.append({
                "category": scenario.category,
                "insight": analysis["comparison_insight"],
                "question_number": scenario.number,
            })
        if score < STARTER_MAX and analysis["discussion_prompt"]:
            starters.append({"question_number": scenario.number, "prompt": analysis["discussion_prompt"]})

        if analysis["alignment_level"] == "potential_conflict" or score < RED_FLAG_MAX:
            red_flags.append({
                "question_number": scenario.number,
                "category": scenario.category,
                "flag": analysis["comparison_insight"],
                "severity": "high" if score < RED_FLAG_MAX else "medium",
            })
        elif analysis["alignment_level"] == "strong_alignment":
            green_flags.append({
                "question_number": scenario.number,
                "category": scenario.category,
                "flag": analysis["comparison_insight"],
            })

    overall = round_half_up(mean(a["alignment_score"] for a in analyses))
    category_scores = {}
    for category, scores in by_category.items():
        avg = mean(scores)
        category_scores[category] = round_half_up(avg) if avg is not None else None

    return {
        "overall_compatibility": overall,
        "compatibility_score": overall,
        "compatibility_level": compatibility_level(overall),
        "scenarios_analysed": len(analyses),
        "question_analyses": analyses,
        "category_scores": category_scores,
        "strongest_areas": strongest[:3],
        "areas_to_discuss": to_discuss[:5],
        "conversation_starters": starters[:5],
        "red_flags": red_flags,
        "green_flags": green_flags,
    }


class WhatWouldYouDoService(AsyncGameEngine):
    game_type = GameType.WHAT_WOULD_YOU_DO
    event_prefix = "wwyd"
    lifetime_setting = "WHAT_WOULD_YOU_DO_SESSION_HOURS"
    question_count = SCENARIO_COUNT
    insight_schema = WhatWouldYouDoInsights

    @staticmethod
    def _scenario(question_number: Any):
        if isinstance(question_number, bool) or not isinstance(question_number, int):
            raise ValidationFailed("Invalid question number")
        scenario = catalog.SCENARIOS_BY_NUMBER.get(question_number)
        if scenario is None:
            raise ValidationFailed("Invalid question number")
        return scenario

    # ── Questions & answers ───────────────────────────────────────────

    async def get_question(self, session_id: str, caller_id: str, question_number: int) -> dict[str, Any]:
        scenario = self._scenario(question_number)
        doc = await self.load_for(session_id, caller_id)
        self._require_active(doc)
        me = doc.player_for(caller_id)
        if me.response_for(question_number) is not None:
            raise InvalidState("Question already answered")
        info = catalog.CATEGORIES[scenario.category]
        return {
            "question_number": scenario.number,
            "category": scenario.category,
            "category_name": info.name,
            "category_emoji": info.emoji,
            "scenario_text": scenario.text,
            "core_question": scenario.core_question,
            "intensity": scenario.intensity,
            "suggested_duration": scenario.suggested_duration,
            "progress": {"current": me.total_answered + 1, "total": SCENARIO_COUNT},
        }

    async def submit_answer(
        self,
        session_id: str,
        caller_id: str,
        question_number: int,
        data: bytes,
        mime_type: str,
        duration_sec: float,
    ) -> dict[str, Any]:
        """Upload the voice response, record it, and queue transcription."""
        self._scenario(question_number)
        low, high = self.settings.SCENARIO_RESPONSE_MIN_SECONDS, self.settings.SCENARIO_RESPONSE_MAX_SECONDS
        if not low <= duration_sec <= high:
            raise ValidationFailed(f"Responses must be between {low:g} and {high:g} seconds")
        mime_type = validate_audio_upload(data, mime_type)

        doc = await self.load_for(session_id, caller_id)
        self._require_active(doc)
        if doc.player_for(caller_id).response_for(question_number) is not None:
            raise InvalidState("Question already answered")

        path = voice_object_path(self.game_type.value, session_id, caller_id, f"q{question_number}", mime_type)
        blob_url = await self.blobs.put(data, mime_type, path)
        now = self.now()

        def _record(d: WhatWouldYouDoSession) -> bool:
            me = require_participant(d, caller_id)
            self._require_active(d)
            if me.response_for(question_number) is not None:
                raise InvalidState("Question already answered")
            me.responses.append(ScenarioResponse(
                question_number=question_number,
                blob_url=blob_url,
                mime_type=mime_type,
                duration_sec=duration_sec,
                submitted_at=now,
            ))
            me.total_answered = len(me.responses)
            me.last_activity_at = now
            d.last_activity_at = now
            if me.total_answered >= SCENARIO_COUNT:
                me.is_complete = True
                me.completed_at = now
            return self._begin_analysis_if_done(d, now)

        try:
            doc, began = await self.store.mutate(session_id, _record)
        except Exception:
            await self.blobs.delete(blob_url)
            raise

        self.log.info(
            "scenario_answer_recorded",
            session_id=session_id,
            user_id=caller_id,
            question_number=question_number,
        )
        if not began:
            self.timers.spawn(
                self.transcribe_response(session_id, caller_id, question_number),
                name=f"transcribe:{session_id}:{caller_id}:{question_number}",
            )
        await self._after_progress(doc, caller_id, began)

        me = doc.player_for(caller_id)
        return {
            "question_number": question_number,
            "duration_sec": duration_sec,
            "progress": {"answered": me.total_answered, "total": SCENARIO_COUNT},
            "is_complete": me.is_complete,
            "status": doc.status.value,
            "both_complete": all(self.is_player_complete(doc, uid) for uid in doc.user_ids),
        }

    # ── Transcription ─────────────────────────────────────────────────

    async def transcribe_response(self, session_id: str, user_id: str, question_number: int) -> Optional[str]:
        """Transcribe one stored response; failures are recorded and absorbed."""
        doc = await self.store.require(session_id)
        response = doc.player_for(user_id).response_for(question_number)
        if response is None:
            return None
        if response.transcript:
            return response.transcript
        if self.transcriber is None:
            return None

        try:
            transcript = await self.transcriber.transcribe(response.blob_url, response.mime_type)
        except TranscriptionFailed as exc:
            self.log.warning(
                "scenario_transcription_failed",
                session_id=session_id,
                user_id=user_id,
                question_number=question_number,
                error=exc.message,
            )
            transcript = None
        now = self.now()

        def _store(d: WhatWouldYouDoSession) -> None:
            r = d.player_for(user_id).response_for(question_number)
            if r is None or r.transcript:
                return
            if transcript:
                r.transcript = transcript
                r.transcribed_at = now
                r.transcription_failed = False
            else:
                r.transcription_failed = True

        await self.store.mutate(session_id, _store)
        return transcript

    async def retry_transcription(self, session_id: str, caller_id: str, question_number: int) -> dict[str, Any]:
        self._scenario(question_number)
        doc = await self.load_for(session_id, caller_id)
        if doc.player_for(caller_id).response_for(question_number) is None:
            raise NotFound("Answer not found")
        transcript = await self.transcribe_response(session_id, caller_id, question_number)
        if transcript is None:
            raise TranscriptionFailed()
        return {"question_number": question_number, "transcript": transcript}

    # ── Analysis ──────────────────────────────────────────────────────

    def _scenario_prompt(self, scenario, p1_text: str, p2_text: str) -> str:
        hints = "\n".join(f"- {hint}" for hint in scenario.analysis_hints) or "- None"
        return f"""You are a relationship compatibility analyst. Be fair, balanced and constructive; focus on compatibility, not judgment.

=== SCENARIO ===
"{scenario.text}"

CORE QUESTION BEING TESTED: {scenario.core_question}
WHAT TO LISTEN FOR:
{hints}

=== PLAYER 1'S RESPONSE ===
"{p1_text}"

=== PLAYER 2'S RESPONSE ===
"{p2_text}"

Consider whether they share values and priorities, whether their approaches would complement each other or clash, whether both show emotional maturity and healthy communication, and whether either response shows a concerning pattern.

Respond with a single JSON object:
{{
  "alignment_score": 0,
  "alignment_level": "strong_alignment | moderate_alignment | different_approaches | potential_conflict",
  "player1_summary": "one sentence on Player 1's approach",
  "player2_summary": "one sentence on Player 2's approach",
  "comparison_insight": "1-2 sentences on how their approaches compare",
  "discussion_prompt": "a question they should discuss together"
}}"""

    async def analyze(self, doc: WhatWouldYouDoSession):
        for player in (doc.player1, doc.player2):
            for response in player.responses:
                if not response.transcript:
                    await self.transcribe_response(doc.session_id, player.user_id, response.question_number)
        doc = await self.store.require(doc.session_id)

        analyses = []
        last_error: Optional[DependencyError] = None
        for scenario in catalog.SCENARIOS:
            r1 = doc.player1.response_for(scenario.number)
            r2 = doc.player2.response_for(scenario.number)
            if not (r1 and r1.transcript and r2 and r2.transcript):
                continue
            if self.insights is None:
                continue
            try:
                comparison = await self.insights.generate_json(
                    self._scenario_prompt(scenario, r1.transcript, r2.transcript),
                    schema=ScenarioComparison,
                    purpose="what_would_you_do_scenario",
                )
            except InsightUnavailable as exc:
                last_error = exc
                self.log.warning(
                    "scenario_analysis_failed",
                    session_id=doc.session_id,
                    question_number=scenario.number,
                    error=exc.message,
                )
                continue
            analyses.append({"question_number": scenario.number, **comparison})

        if not analyses:
            error = last_error or InsightUnavailable("No scenario had transcripts from both players")
            return None, None, insight_error_record(error, self.now())

        results = summarise_analyses(analyses)
        insights, error = await self._request_insights(doc, results)
        return results, insights, error

    def build_insight_prompt(self, doc: WhatWouldYouDoSession, results: dict[str, Any]) -> str:
        analysis_text = "\n".join(
            f"Q{a['question_number']}: {a['alignment_level']} ({a['alignment_score']}%) - {a['comparison_insight']}"
            for a in results["question_analyses"]
        )
        category_text = ", ".join(
            f"{catalog.CATEGORIES[cat].name}: {score}%"
            for cat, score in results["category_scores"].items()
            if score is not None
        )
        strongest = "\n".join(f"- {a['category']}: {a['insight']}" for a in results["strongest_areas"]) or "None identified"
        discuss = "\n".join(f"- {a['category']}: {a['insight']}" for a in results["areas_to_discuss"]) or "None identified"

        return f"""You are a warm, supportive relationship counselor. Based on a compatibility assessment of {SCENARIO_COUNT} relationship scenarios, give balanced insights that help this couple understand each other better. Be encouraging but honest; each field should be 2-3 sentences.

=== OVERALL COMPATIBILITY ===
{results['overall_compatibility']}% ({results['compatibility_level']})

=== CATEGORY SCORES ===
{category_text}

=== PER-SCENARIO ANALYSIS ===
{analysis_text}

=== STRONGEST AREAS ===
{strongest}

=== AREAS NEEDING DISCUSSION ===
{discuss}

Respond with a single JSON object:
{{
  "overall_summary": "a warm overview of their compatibility",
  "compatibility_analysis": "what makes them work well (or not) together",
  "communication_styles": "how each approaches difficult conversations",
  "values_alignment": "where their core values align or differ",
  "potential_challenges": "what they should watch out for",
  "strengths_as_couple": "what they bring out in each other",
  "advice_forward": "one actionable suggestion for their relationship"
}}"""

    # ── Views ─────────────────────────────────────────────────────────

    def session_view(self, doc: WhatWouldYouDoSession, viewer_id: str) -> dict[str, Any]:
        view = super().session_view(doc, viewer_id)
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        view.update({
            "total_questions": SCENARIO_COUNT,
            "answered_questions": sorted(r.question_number for r in me.responses),
            "your_progress": me.total_answered,
            "partner_progress": partner.total_answered,
        })
        return view

    def results_view(self, doc: WhatWouldYouDoSession, viewer_id: str) -> dict[str, Any]:
        view = super().results_view(doc, viewer_id)
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        rows = []
        for scenario in catalog.SCENARIOS:
            mine = me.response_for(scenario.number)
            theirs = partner.response_for(scenario.number)
            rows.append({
                "question_number": scenario.number,
                "category": scenario.category,
                "scenario_text": scenario.text,
                "your_transcript": mine.transcript if mine else None,
                "partner_transcript": theirs.transcript if theirs else None,
            })
        view["scenarios"] = rows
        return view

    async def get_results(self, session_id: str, caller_id: str) -> dict[str, Any]:
        doc = await self.load_for(session_id, caller_id)
        if doc.status not in FINISHED_STATUSES:
            if doc.status == SessionStatus.ANALYZING:
                raise InvalidState("Analysis is still in progress")
            raise InvalidState("Results are not available yet")
        return self.results_view(doc, caller_id)
