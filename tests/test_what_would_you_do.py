"""Tests for What Would You Do?"""
import pytest

from app.errors import (
    InsightUnavailable,
    InvalidState,
    NotFound,
    PayloadTooLarge,
    TranscriptionFailed,
    UnsupportedMediaType,
    ValidationFailed,
)
from app.schemas.enums import SessionStatus
from app.services.what_would_you_do_service import compatibility_level, summarise_analyses

AUDIO = b"\x1aE\xdf\xa3fake-webm"


def _analysis(number, score, level, insight="insight", prompt="talk about it"):
    return {
        "question_number": number,
        "alignment_score": score,
        "alignment_level": level,
        "player1_summary": "",
        "player2_summary": "",
        "comparison_insight": f"{insight} {number}",
        "discussion_prompt": prompt,
    }


async def _answer_all(engine, session_id, user_id, skip=()):
    for number in range(1, 16):
        if number in skip:
            continue
        await engine.submit_answer(session_id, user_id, number, AUDIO, "audio/webm", 30)


class TestSummariseAnalyses:
    """Tests for the per-scenario roll-up."""

    def test_rollup(self):
        analyses = [
            _analysis(1, 90, "strong_alignment"),
            _analysis(3, 50, "different_approaches"),
            _analysis(6, 30, "potential_conflict"),
        ]

        results = summarise_analyses(analyses)

        assert results["overall_compatibility"] == 57
        assert results["compatibility_score"] == 57
        assert results["compatibility_level"] == "needs_discussion"
        assert results["scenarios_analysed"] == 3
        assert results["category_scores"]["trust_honesty"] == 90
        assert results["category_scores"]["communication"] == 50
        assert results["category_scores"]["respect"] == 30
        assert results["category_scores"]["values"] is None
        assert [a["category"] for a in results["strongest_areas"]] == ["trust_honesty"]
        assert [a["question_number"] for a in results["areas_to_discuss"]] == [3, 6]
        assert [s["question_number"] for s in results["conversation_starters"]] == [3, 6]
        assert results["red_flags"] == [{
            "question_number": 6,
            "category": "respect",
            "flag": "insight 6",
            "severity": "high",
        }]
        assert [g["question_number"] for g in results["green_flags"]] == [1]

    def test_conflict_above_threshold_is_medium_severity(self):
        results = summarise_analyses([_analysis(2, 55, "potential_conflict")])
        assert results["red_flags"][0]["severity"] == "medium"

    def test_empty_prompt_is_not_a_starter(self):
        results = summarise_analyses([_analysis(4, 40, "different_approaches", prompt="")])
        assert results["conversation_starters"] == []

    @pytest.mark.parametrize("score,level", [
        (80, "highly_compatible"),
        (79, "compatible"),
        (65, "compatible"),
        (64, "needs_discussion"),
        (50, "needs_discussion"),
        (49, "significant_differences"),
    ])
    def test_compatibility_level(self, score, level):
        assert compatibility_level(score) == level


class TestSubmitAnswer:
    """Tests for recording voice responses."""

    async def test_records_and_queues_transcription(self, wwyd, open_session, user_a, user_b, blobs, push, timers, transcriber):
        session_id = await open_session(wwyd)

        outcome = await wwyd.submit_answer(session_id, user_a, 4, AUDIO, "audio/webm;codecs=opus", 42)

        assert outcome["progress"] == {"answered": 1, "total": 15}
        assert outcome["is_complete"] is False
        assert outcome["status"] == "active"
        doc = await wwyd.store.require(session_id)
        response = doc.player1.response_for(4)
        assert response.mime_type == "audio/webm"
        assert response.blob_url in blobs.objects
        assert push.events(user_b, "wwyd:partner_progress")

        await timers.drain()
        doc = await wwyd.store.require(session_id)
        assert doc.player1.response_for(4).transcript.startswith("transcript of ")
        assert transcriber.calls == [response.blob_url]

    async def test_duplicate_answer_rejected(self, wwyd, open_session, user_a):
        session_id = await open_session(wwyd)
        await wwyd.submit_answer(session_id, user_a, 1, AUDIO, "audio/webm", 30)
        with pytest.raises(InvalidState, match="already answered"):
            await wwyd.submit_answer(session_id, user_a, 1, AUDIO, "audio/webm", 30)

    @pytest.mark.parametrize("duration", [4.9, 180.1, 0])
    async def test_duration_bounds(self, wwyd, open_session, user_a, duration):
        session_id = await open_session(wwyd)
        with pytest.raises(ValidationFailed):
            await wwyd.submit_answer(session_id, user_a, 1, AUDIO, "audio/webm", duration)

    async def test_unsupported_mime_type(self, wwyd, open_session, user_a):
        session_id = await open_session(wwyd)
        with pytest.raises(UnsupportedMediaType):
            await wwyd.submit_answer(session_id, user_a, 1, AUDIO, "video/mp4", 30)

    async def test_oversized_upload(self, wwyd, open_session, user_a):
        session_id = await open_session(wwyd)
        with pytest.raises(PayloadTooLarge):
            await wwyd.submit_answer(session_id, user_a, 1, b"0" * (10 * 1024 * 1024 + 1), "audio/webm", 30)

    @pytest.mark.parametrize("number", [0, 16, True, "3"])
    async def test_invalid_question_number(self, wwyd, open_session, user_a, number):
        session_id = await open_session(wwyd)
        with pytest.raises(ValidationFailed):
            await wwyd.submit_answer(session_id, user_a, number, AUDIO, "audio/webm", 30)

    async def test_get_question_progress(self, wwyd, open_session, user_a):
        session_id = await open_session(wwyd)
        await wwyd.submit_answer(session_id, user_a, 1, AUDIO, "audio/webm", 30)

        question = await wwyd.get_question(session_id, user_a, 2)

        assert question["question_number"] == 2
        assert question["category"] == "trust_honesty"
        assert question["progress"] == {"current": 2, "total": 15}
        with pytest.raises(InvalidState):
            await wwyd.get_question(session_id, user_a, 1)

    async def test_retry_transcription(self, wwyd, open_session, user_a, transcriber, timers):
        transcriber.fail = True
        session_id = await open_session(wwyd)
        await wwyd.submit_answer(session_id, user_a, 1, AUDIO, "audio/webm", 30)
        await timers.drain()
        doc = await wwyd.store.require(session_id)
        assert doc.player1.response_for(1).transcription_failed is True

        with pytest.raises(TranscriptionFailed):
            await wwyd.retry_transcription(session_id, user_a, 1)

        transcriber.fail = False
        transcriber.text = "I would tell them straight away"
        outcome = await wwyd.retry_transcription(session_id, user_a, 1)
        assert outcome == {"question_number": 1, "transcript": "I would tell them straight away"}

    async def test_retry_unknown_answer(self, wwyd, open_session, user_a):
        session_id = await open_session(wwyd)
        with pytest.raises(NotFound):
            await wwyd.retry_transcription(session_id, user_a, 2)


class TestAnalysis:
    """Tests for completion and scenario analysis."""

    async def test_failed_comparison_is_skipped(self, wwyd, open_session, user_a, user_b, timers, insights, push):
        failures = []

        def _compare(prompt):
            if not failures:
                failures.append(prompt)
                raise InsightUnavailable("flaky", transient=True)
            return {"alignment_score": 80, "alignment_level": "strong_alignment", "comparison_insight": "Close"}

        insights.responses["what_would_you_do_scenario"] = _compare
        insights.responses["what_would_you_do_insights"] = {"overall_summary": "Solid foundations"}
        session_id = await open_session(wwyd)

        await _answer_all(wwyd, session_id, user_a)
        await _answer_all(wwyd, session_id, user_b, skip={15})
        outcome = await wwyd.submit_answer(session_id, user_b, 15, AUDIO, "audio/webm", 30)

        assert outcome["status"] == "analyzing"
        assert outcome["both_complete"] is True
        assert push.events(user_a, "wwyd:analyzing")

        await timers.drain()

        doc = await wwyd.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results["scenarios_analysed"] == 14
        assert doc.results["overall_compatibility"] == 80
        assert doc.results["compatibility_level"] == "highly_compatible"
        assert doc.ai_insights["overall_summary"] == "Solid foundations"
        assert insights.purposes().count("what_would_you_do_scenario") == 15
        assert all(r.transcript for r in doc.player2.responses)

    async def test_no_transcripts_completes_without_results(self, wwyd, open_session, user_a, user_b, timers, transcriber, insights):
        transcriber.fail = True
        session_id = await open_session(wwyd)
        await _answer_all(wwyd, session_id, user_a)
        await _answer_all(wwyd, session_id, user_b)

        await timers.drain()

        doc = await wwyd.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results is None
        assert doc.insight_error["code"] == "INSIGHT_UNAVAILABLE"
        assert "what_would_you_do_scenario" not in insights.purposes()

    async def test_results_while_analyzing(self, wwyd, open_session, user_a, user_b):
        session_id = await open_session(wwyd)
        await _answer_all(wwyd, session_id, user_a)
        await _answer_all(wwyd, session_id, user_b)

        with pytest.raises(InvalidState, match="still in progress"):
            await wwyd.get_results(session_id, user_a)

    async def test_results_view_pairs_transcripts(self, wwyd, open_session, user_a, user_b, timers, insights, transcriber):
        transcriber.text = "Honesty first"
        insights.responses["what_would_you_do_scenario"] = {"alignment_score": 70}
        session_id = await open_session(wwyd)
        await _answer_all(wwyd, session_id, user_a)
        await _answer_all(wwyd, session_id, user_b)
        await timers.drain()

        view = await wwyd.get_results(session_id, user_b)

        assert len(view["scenarios"]) == 15
        assert view["scenarios"][0]["your_transcript"] == "Honesty first"
        assert view["results"]["compatibility_level"] == "compatible"
