"""Tests for the live question loop shared by Would You Rather, Intimacy
Spectrum and Never Have I Ever."""
from collections import Counter

import pytest

from app.errors import InsightUnavailable, InvalidState, ValidationFailed
from app.schemas.enums import QuestionPhase, SessionStatus


async def _play_question(engine, timers, session_id, index, answer_a, answer_b, user_a, user_b):
    await engine.record_answer(session_id, user_a, index, answer_a)
    await engine.record_answer(session_id, user_b, index, answer_b)
    await timers.fire((session_id, "reveal", index))


class TestStart:
    """Tests for the start countdown."""

    async def test_accept_enters_starting_and_arms_countdown(self, wyr, open_session, user_a, push, timers):
        session_id = await open_session(wyr)

        doc = await wyr.store.require(session_id)
        assert doc.status == SessionStatus.STARTING
        assert timers.is_armed((session_id, "start", -1))
        starting = push.events(user_a, "wyr:game_starting")[0]
        assert starting["starts_in"] == 3000
        assert starting["total_questions"] == 50

    async def test_start_sends_first_question(self, wyr, start_live_game, user_a, user_b, push, timers):
        session_id = await start_live_game(wyr)

        doc = await wyr.store.require(session_id)
        assert doc.status == SessionStatus.PLAYING
        assert doc.question_phase == QuestionPhase.ANSWERING
        assert doc.current_question_index == 0
        for user in (user_a, user_b):
            question = push.events(user, "wyr:question")[0]
            assert question["current_question"]["index"] == 0
            assert question["current_question"]["number"] == doc.question_order[0]
        assert timers.is_armed((session_id, "deadline", 0))

    async def test_start_is_idempotent(self, wyr, start_live_game):
        session_id = await start_live_game(wyr)
        assert await wyr.start(session_id) is False

    async def test_question_order_is_a_permutation(self, wyr, open_session):
        session_id = await open_session(wyr)
        doc = await wyr.store.require(session_id)
        assert sorted(doc.question_order) == list(range(1, 51))


class TestRecordAnswer:
    """Tests for record_answer."""

    async def test_first_answer_notifies_partner(self, wyr, start_live_game, user_a, user_b, push):
        session_id = await start_live_game(wyr)

        outcome = await wyr.record_answer(session_id, user_a, 0, "A")

        assert outcome == {"both_answered": False, "partner_answer": None}
        assert push.events(user_b, "wyr:partner_answered") == [{"session_id": session_id, "question_index": 0}]
        assert push.events(user_a, "wyr:partner_answered") == []

    async def test_second_answer_reveals(self, wyr, start_live_game, user_a, user_b, push, timers):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "A")

        outcome = await wyr.record_answer(session_id, user_b, 0, "A")

        assert outcome == {"both_answered": True, "partner_answer": "A"}
        reveal = push.events(user_a, "wyr:reveal")[0]
        assert reveal["your_answer"] == "A"
        assert reveal["partner_answer"] == "A"
        assert reveal["matched"] is True
        assert not timers.is_armed((session_id, "deadline", 0))
        assert timers.is_armed((session_id, "reveal", 0))

    async def test_reveal_window_moves_to_next_question(self, wyr, start_live_game, user_a, user_b, push, timers):
        session_id = await start_live_game(wyr)
        await _play_question(wyr, timers, session_id, 0, "A", "B", user_a, user_b)

        doc = await wyr.store.require(session_id)
        assert doc.current_question_index == 1
        assert doc.question_phase == QuestionPhase.ANSWERING
        assert push.events(user_b, "wyr:question")[-1]["current_question"]["index"] == 1
        assert push.events(user_b, "wyr:reveal")[0]["matched"] is False

    @pytest.mark.parametrize("answer", ["C", "a", 1, None, True])
    async def test_invalid_choice(self, wyr, start_live_game, user_a, answer):
        session_id = await start_live_game(wyr)
        with pytest.raises(ValidationFailed):
            await wyr.record_answer(session_id, user_a, 0, answer)

    async def test_wrong_index_changes_nothing(self, wyr, start_live_game, user_a):
        session_id = await start_live_game(wyr)
        before = await wyr.store.require(session_id)

        with pytest.raises(InvalidState):
            await wyr.record_answer(session_id, user_a, 1, "A")

        after = await wyr.store.require(session_id)
        assert after.version == before.version
        assert after.player1.answers == []

    async def test_double_answer_rejected(self, wyr, start_live_game, user_a):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "A")
        with pytest.raises(InvalidState):
            await wyr.record_answer(session_id, user_a, 0, "B")

    async def test_answer_after_deadline_rejected(self, wyr, start_live_game, user_a, clock):
        session_id = await start_live_game(wyr)
        clock.advance(seconds=16)
        with pytest.raises(InvalidState):
            await wyr.record_answer(session_id, user_a, 0, "A")

    async def test_answer_during_reveal_rejected(self, wyr, start_live_game, user_a, user_b):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "A")
        await wyr.record_answer(session_id, user_b, 0, "B")
        with pytest.raises(InvalidState):
            await wyr.record_answer(session_id, user_a, 0, "A")

    async def test_answer_before_start_rejected(self, wyr, open_session, user_a):
        session_id = await open_session(wyr)
        with pytest.raises(InvalidState):
            await wyr.record_answer(session_id, user_a, 0, "A")

    async def test_response_time_is_recorded(self, wyr, start_live_game, user_a, clock):
        session_id = await start_live_game(wyr)
        clock.advance(seconds=4)
        await wyr.record_answer(session_id, user_a, 0, "B")

        doc = await wyr.store.require(session_id)
        assert doc.player1.answers[0].response_time_ms == 4000
        assert doc.player1.average_response_time_ms == 4000
        assert doc.player1.total_answered == 1


class TestTimeout:
    """Tests for the per-question deadline."""

    async def test_missing_answer_recorded_as_null(self, wyr, start_live_game, user_a, user_b, push, timers):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "B")

        assert await timers.fire((session_id, "deadline", 0)) is True

        doc = await wyr.store.require(session_id)
        number = doc.question_order[0]
        assert doc.player2.answer_for(number).answer is None
        assert doc.player2.total_timed_out == 1
        assert doc.player1.total_timed_out == 0
        mine = push.events(user_a, "wyr:timeout")[0]
        theirs = push.events(user_b, "wyr:timeout")[0]
        assert mine["your_answer"] == "B" and mine["partner_answer"] is None
        assert mine["you_timed_out"] is False and mine["partner_timed_out"] is True
        assert theirs["you_timed_out"] is True and theirs["both_timed_out"] is False
        assert timers.is_armed((session_id, "reveal", 0))

    async def test_both_timed_out(self, wyr, start_live_game, user_a, push, timers):
        session_id = await start_live_game(wyr)
        await timers.fire((session_id, "deadline", 0))
        assert push.events(user_a, "wyr:timeout")[0]["both_timed_out"] is True

    async def test_stale_deadline_after_reveal_is_a_no_op(self, wyr, start_live_game, user_a, user_b, push):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "A")
        await wyr.record_answer(session_id, user_b, 0, "A")

        assert await wyr.timeout(session_id, 0) is False
        assert push.events(user_a, "wyr:timeout") == []

    async def test_stale_advance_is_a_no_op(self, wyr, start_live_game, user_a, user_b, timers):
        session_id = await start_live_game(wyr)
        await _play_question(wyr, timers, session_id, 0, "A", "A", user_a, user_b)

        assert await wyr.advance(session_id, 0) is False
        assert (await wyr.store.require(session_id)).current_question_index == 1


class TestFullGame:
    """End-to-end Would You Rather games."""

    async def test_all_matching_answers(self, wyr, start_live_game, user_a, user_b, push, timers, insights):
        insights.responses["would_you_rather_insights"] = {"summary": "You two agree on everything"}
        session_id = await start_live_game(wyr)

        for index in range(50):
            await _play_question(wyr, timers, session_id, index, "A", "A", user_a, user_b)

        doc = await wyr.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results["compatibility_score"] == 100
        assert doc.results["matched_answers"] == 50
        assert doc.results["both_answered"] == 50
        assert timers.armed_keys(session_id) == []
        completed = push.events(user_b, "wyr:game_completed")[0]
        assert completed["you_are"] == "player2"
        assert completed["results"]["compatibility_score"] == 100

        await timers.drain()
        doc = await wyr.store.require(session_id)
        assert doc.ai_insights["summary"] == "You two agree on everything"
        assert "generated_at" in doc.ai_insights
        assert push.events(user_a, "wyr:insights_ready")

    async def test_timeout_does_not_count_as_answered(self, wyr, start_live_game, user_a, user_b, push, timers):
        session_id = await start_live_game(wyr)

        for index in range(50):
            if index == 7:
                await wyr.record_answer(session_id, user_a, index, "B")
                await timers.fire((session_id, "deadline", index))
                await timers.fire((session_id, "reveal", index))
                continue
            await _play_question(wyr, timers, session_id, index, "A", "A", user_a, user_b)

        doc = await wyr.store.require(session_id)
        assert doc.results["both_answered"] == 49
        assert doc.results["player2_timed_out"] == 1
        assert doc.results["compatibility_score"] == 100
        assert doc.player2.total_timed_out == 1
        for player in (doc.player1, doc.player2):
            assert len(player.answers) == 50
            assert player.total_answered + player.total_timed_out == 50

        # one terminal event per question and player
        for user in (user_a, user_b):
            terminal = Counter(
                event["question_index"]
                for event in push.events(user, "wyr:reveal") + push.events(user, "wyr:timeout")
            )
            assert terminal == Counter(range(50))

    async def test_insight_failure_keeps_completion(self, wyr, start_live_game, user_a, user_b, timers, insights):
        insights.responses["would_you_rather_insights"] = InsightUnavailable("down", transient=True)
        session_id = await start_live_game(wyr)
        for index in range(50):
            await _play_question(wyr, timers, session_id, index, "A", "B", user_a, user_b)

        await timers.drain()

        doc = await wyr.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results["compatibility_score"] == 0
        assert doc.ai_insights is None
        assert doc.insight_error["code"] == "INSIGHT_UNAVAILABLE"
        assert doc.insight_error["transient"] is True

    async def test_results_breakdown(self, wyr, start_live_game, user_a, user_b, timers):
        session_id = await start_live_game(wyr)
        for index in range(50):
            await _play_question(wyr, timers, session_id, index, "A", "A", user_a, user_b)

        results = await wyr.get_results(session_id, user_a)

        assert len(results["questions"]) == 50
        assert all(row["your_answer"] == "A" for row in results["questions"])


class TestConnection:
    """Tests for pause and resume."""

    async def test_players_are_present_once_the_game_starts(self, wyr, start_live_game):
        session_id = await start_live_game(wyr)

        doc = await wyr.store.require(session_id)
        assert doc.player1.is_connected is True
        assert doc.player2.is_connected is True

    async def test_one_player_leaving_keeps_the_game_running(self, wyr, start_live_game, user_a, user_b, timers, push):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "A")

        await wyr.disconnect(session_id, user_b)

        doc = await wyr.store.require(session_id)
        assert doc.status == SessionStatus.PLAYING
        assert timers.is_armed((session_id, "deadline", 0))
        assert push.events(user_a, "wyr:partner_connected")[-1]["is_connected"] is False

    async def test_remaining_player_keeps_answering(self, wyr, start_live_game, user_a, user_b, timers):
        session_id = await start_live_game(wyr)
        await wyr.disconnect(session_id, user_b)

        outcome = await wyr.record_answer(session_id, user_a, 0, "B")

        assert outcome == {"both_answered": False, "partner_answer": None}
        await timers.fire((session_id, "deadline", 0))
        doc = await wyr.store.require(session_id)
        assert doc.question_phase == QuestionPhase.REVEALING

    async def test_both_away_pauses_and_cancels_timers(self, wyr, start_live_game, user_a, user_b, timers):
        session_id = await start_live_game(wyr)

        await wyr.disconnect(session_id, user_a)
        assert (await wyr.store.require(session_id)).status == SessionStatus.PLAYING

        await wyr.disconnect(session_id, user_b)
        assert (await wyr.store.require(session_id)).status == SessionStatus.PAUSED
        assert timers.armed_keys(session_id) == []

        with pytest.raises(InvalidState):
            await wyr.record_answer(session_id, user_a, 0, "A")

    async def test_first_player_back_resumes(self, wyr, start_live_game, user_a, user_b, push, timers, clock):
        session_id = await start_live_game(wyr)
        await wyr.disconnect(session_id, user_a)
        await wyr.disconnect(session_id, user_b)
        clock.advance(seconds=5)

        view = await wyr.resume(session_id, user_b)

        assert view["status"] == "playing"
        assert view["current_question"]["index"] == 0
        delay, _ = timers.armed[(session_id, "deadline", 0)]
        assert delay == 10
        assert push.events(user_a, "wyr:game_resumed")
        await wyr.record_answer(session_id, user_b, 0, "A")

    async def test_answering_marks_the_player_present(self, wyr, start_live_game, user_a, user_b):
        session_id = await start_live_game(wyr)
        await wyr.disconnect(session_id, user_a)

        await wyr.record_answer(session_id, user_a, 0, "A")

        assert (await wyr.store.require(session_id)).player1.is_connected is True

    async def test_partner_presence_events(self, wyr, start_live_game, user_a, user_b, push):
        session_id = await start_live_game(wyr)
        await wyr.connect(session_id, user_a)
        assert push.events(user_b, "wyr:partner_connected")[-1]["is_connected"] is True


class TestRecover:
    """Tests for timer recovery after a restart."""

    async def test_recover_rearms_live_sessions(self, wyr, start_live_game, timers):
        session_id = await start_live_game(wyr)
        timers.armed.clear()

        assert await wyr.recover() == 1
        assert timers.is_armed((session_id, "deadline", 0))

    async def test_recover_rearms_reveal(self, wyr, start_live_game, user_a, user_b, timers):
        session_id = await start_live_game(wyr)
        await wyr.record_answer(session_id, user_a, 0, "A")
        await wyr.record_answer(session_id, user_b, 0, "A")
        timers.armed.clear()

        await wyr.recover()
        assert timers.is_armed((session_id, "reveal", 0))


class TestIntimacySpectrumLive:
    """Live-play details specific to Intimacy Spectrum."""

    async def test_catalog_order(self, spectrum, open_session):
        session_id = await open_session(spectrum)
        doc = await spectrum.store.require(session_id)
        assert doc.question_order == list(range(1, 31))

    async def test_reveal_includes_gap(self, spectrum, start_live_game, user_a, user_b, push):
        session_id = await start_live_game(spectrum)
        await spectrum.record_answer(session_id, user_a, 0, 40)
        await spectrum.record_answer(session_id, user_b, 0, 50)

        reveal = push.events(user_a, "is:reveal")[0]
        assert reveal["gap"] == 10
        assert reveal["alignment"] == "aligned"
        assert reveal["matched"] is True

    @pytest.mark.parametrize("answer", [True, -1, 101, 50.5, "50"])
    async def test_invalid_position(self, spectrum, start_live_game, user_a, answer):
        session_id = await start_live_game(spectrum)
        with pytest.raises(ValidationFailed):
            await spectrum.record_answer(session_id, user_a, 0, answer)


class TestNeverHaveIEverLive:
    """Live-play details specific to Never Have I Ever."""

    async def test_story_is_revealed_to_partner(self, nhie, start_live_game, user_a, user_b, push):
        session_id = await start_live_game(nhie)
        await nhie.record_answer(session_id, user_a, 0, True, "  Once, in Lisbon.  ")
        await nhie.record_answer(session_id, user_b, 0, False)

        reveal = push.events(user_b, "nhie:reveal")[0]
        assert reveal["partner_story"] == "Once, in Lisbon."
        assert reveal["outcome"] == "different"
        assert "partner_story" not in push.events(user_a, "nhie:reveal")[0]

    async def test_discovery_points_update_per_question(self, nhie, start_live_game, user_a, user_b):
        session_id = await start_live_game(nhie)
        await nhie.record_answer(session_id, user_a, 0, True)
        await nhie.record_answer(session_id, user_b, 0, False)

        doc = await nhie.store.require(session_id)
        assert doc.player1.discovery_points == 5
        assert doc.player2.discovery_points == 0

    @pytest.mark.parametrize("answer", ["yes", 1, None])
    async def test_answer_must_be_boolean(self, nhie, start_live_game, user_a, answer):
        session_id = await start_live_game(nhie)
        with pytest.raises(ValidationFailed):
            await nhie.record_answer(session_id, user_a, 0, answer)

    async def test_story_length_limit(self, nhie, start_live_game, user_a):
        session_id = await start_live_game(nhie)
        with pytest.raises(ValidationFailed):
            await nhie.record_answer(session_id, user_a, 0, True, "x" * 501)
