"""Tests for Two Truths & A Lie."""
import pytest

from app.errors import InsightUnavailable, InvalidState, NotParticipant, ValidationFailed
from app.schemas.enums import SessionStatus, TwoTruthsPhase
from app.services.two_truths_service import compatibility_score, validate_guesses, validate_rounds


def _rounds(author, lie_index=2):
    return [
        {
            "statements": [f"{author} truth {n}a", f"{author} truth {n}b", f"{author} lie {n}"],
            "lie_index": lie_index,
        }
        for n in range(1, 11)
    ]


def _guesses(correct, lie_index=2):
    """Guesses for ten rounds, the first ``correct`` of them right."""
    wrong = (lie_index + 1) % 3
    return [
        {"round_number": n, "selected_index": lie_index if n <= correct else wrong}
        for n in range(1, 11)
    ]


class TestCompatibilityScore:
    """Tests for the Two Truths scoring formula."""

    @pytest.mark.parametrize("s1,s2,expected", [
        (10, 10, 100),
        (10, 7, 82),
        (7, 5, 64),
        (0, 0, 20),
        (10, 0, 40),
    ])
    def test_formula(self, s1, s2, expected):
        assert compatibility_score(s1, s2) == expected


class TestValidation:
    """Tests for statement and guess validation."""

    def test_rounds_are_numbered_and_trimmed(self):
        rounds = _rounds("me")
        rounds[0]["statements"][0] = "  padded  "

        validated = validate_rounds(rounds)

        assert [r.round_number for r in validated] == list(range(1, 11))
        assert validated[0].statements[0] == "padded"

    def test_wrong_round_count(self):
        with pytest.raises(ValidationFailed, match="exactly 10 rounds"):
            validate_rounds(_rounds("me")[:9])

    def test_wrong_statement_count(self):
        rounds = _rounds("me")
        rounds[3]["statements"] = ["one", "two"]
        with pytest.raises(ValidationFailed, match="Round 4"):
            validate_rounds(rounds)

    def test_blank_statement(self):
        rounds = _rounds("me")
        rounds[0]["statements"][1] = "   "
        with pytest.raises(ValidationFailed, match="empty"):
            validate_rounds(rounds)

    def test_statement_too_long(self):
        rounds = _rounds("me")
        rounds[0]["statements"][1] = "x" * 201
        with pytest.raises(ValidationFailed, match="200"):
            validate_rounds(rounds)

    @pytest.mark.parametrize("lie_index", [-1, 3, True, None, "1"])
    def test_invalid_lie_index(self, lie_index):
        rounds = _rounds("me")
        rounds[0]["lie_index"] = lie_index
        with pytest.raises(ValidationFailed):
            validate_rounds(rounds)

    def test_duplicate_guess(self):
        guesses = _guesses(10)
        guesses[1]["round_number"] = 1
        with pytest.raises(ValidationFailed, match="Duplicate"):
            validate_guesses(guesses)

    def test_guesses_are_sorted(self):
        guesses = list(reversed(_guesses(10)))
        assert [n for n, _ in validate_guesses(guesses)] == list(range(1, 11))


class TestFlow:
    """Tests for the statements -> guesses -> analysis flow."""

    async def test_full_game(self, ttl, open_session, user_a, user_b, push, timers, insights):
        insights.responses["two_truths_lie_insights"] = {
            "summary": "You read each other well",
            "compatibility_score": 90,
        }
        session_id = await open_session(ttl)

        first = await ttl.submit_statements(session_id, user_a, _rounds("a"))
        assert first == {"session_id": session_id, "phase": "submitted_statements", "both_submitted": False}
        assert push.events(user_b, "ttl:partner_progress")[-1]["partner_complete"] is False

        second = await ttl.submit_statements(session_id, user_b, _rounds("b"))
        assert second["both_submitted"] is True
        assert second["phase"] == "answering"
        assert push.events(user_a, "ttl:answering_open")

        outcome = await ttl.submit_guesses(session_id, user_a, _guesses(10))
        assert outcome["score"] == 10
        assert outcome["status"] == "active"

        outcome = await ttl.submit_guesses(session_id, user_b, _guesses(7))
        assert outcome["score"] == 7
        assert outcome["status"] == "analyzing"
        assert push.events(user_a, "ttl:analyzing")

        await timers.drain()

        doc = await ttl.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results["compatibility_score"] == 82
        assert doc.results["player1_score"] == 10
        assert doc.results["player2_score"] == 7
        assert doc.results["winner"] == "player1"
        assert doc.ai_insights["summary"] == "You read each other well"
        assert doc.insight_error is None
        completed = push.events(user_b, "ttl:game_completed")[0]
        assert completed["you_are"] == "player2"
        assert "two_truths_lie_insights" in insights.purposes()

    async def test_insight_failure_still_completes(self, ttl, open_session, user_a, user_b, timers, insights):
        insights.responses["two_truths_lie_insights"] = InsightUnavailable("quota")
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        await ttl.submit_statements(session_id, user_b, _rounds("b"))
        await ttl.submit_guesses(session_id, user_a, _guesses(5))
        await ttl.submit_guesses(session_id, user_b, _guesses(5))

        await timers.drain()

        doc = await ttl.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results["compatibility_score"] == 60
        assert doc.ai_insights is None
        assert doc.insight_error["code"] == "INSIGHT_UNAVAILABLE"

    async def test_regenerate_insights_after_failure(self, ttl, open_session, user_a, user_b, timers, insights):
        insights.responses["two_truths_lie_insights"] = InsightUnavailable("quota", transient=True)
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        await ttl.submit_statements(session_id, user_b, _rounds("b"))
        await ttl.submit_guesses(session_id, user_a, _guesses(5))
        await ttl.submit_guesses(session_id, user_b, _guesses(5))
        await timers.drain()

        insights.responses["two_truths_lie_insights"] = {"summary": "Second time lucky"}
        view = await ttl.regenerate_insights(session_id, user_a)

        assert view["ai_insights"]["summary"] == "Second time lucky"
        assert view["insight_error"] is None

    async def test_guessing_before_both_wrote(self, ttl, open_session, user_a):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))

        with pytest.raises(InvalidState):
            await ttl.submit_guesses(session_id, user_a, _guesses(10))
        with pytest.raises(InvalidState):
            await ttl.get_questions_to_answer(session_id, user_a)

    async def test_statements_only_once(self, ttl, open_session, user_a):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        with pytest.raises(InvalidState, match="already"):
            await ttl.submit_statements(session_id, user_a, _rounds("a"))

    async def test_guesses_only_once(self, ttl, open_session, user_a, user_b):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        await ttl.submit_statements(session_id, user_b, _rounds("b"))
        await ttl.submit_guesses(session_id, user_a, _guesses(3))
        with pytest.raises(InvalidState, match="already"):
            await ttl.submit_guesses(session_id, user_a, _guesses(3))

    async def test_statements_before_accept(self, ttl, match, user_a):
        doc = await ttl.create_invitation(user_a, match.match_id)
        with pytest.raises(InvalidState):
            await ttl.submit_statements(doc.session_id, user_a, _rounds("a"))

    async def test_outsider_cannot_submit(self, ttl, open_session, outsider):
        session_id = await open_session(ttl)
        with pytest.raises(NotParticipant):
            await ttl.submit_statements(session_id, outsider, _rounds("x"))

    async def test_questions_hide_the_lie_until_finished(self, ttl, open_session, user_a, user_b, timers):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        await ttl.submit_statements(session_id, user_b, _rounds("b", lie_index=0))

        questions = await ttl.get_questions_to_answer(session_id, user_a)
        assert len(questions) == 10
        assert "lie_index" not in questions[0]
        assert questions[0]["statements"][0] == "b truth 1a"
        assert questions[0]["your_guess"] is None

        await ttl.submit_guesses(session_id, user_a, _guesses(10, lie_index=0))
        await ttl.submit_guesses(session_id, user_b, _guesses(10))
        await timers.drain()

        revealed = await ttl.get_questions_to_answer(session_id, user_a)
        assert revealed[0]["lie_index"] == 0
        assert revealed[0]["guessed_correctly"] is True

    async def test_session_view_phases(self, ttl, open_session, user_a, user_b):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))

        view = await ttl.get_session(session_id, user_b)

        assert view["your_phase"] == TwoTruthsPhase.WRITING.value
        assert view["partner_phase"] == TwoTruthsPhase.SUBMITTED_STATEMENTS.value
        assert view["partner_submitted_statements"] is True

    async def test_analysis_extends_expiry(self, ttl, open_session, user_a, user_b, clock):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        await ttl.submit_statements(session_id, user_b, _rounds("b"))
        clock.advance(hours=47, minutes=50)
        await ttl.submit_guesses(session_id, user_a, _guesses(1))
        await ttl.submit_guesses(session_id, user_b, _guesses(1))

        doc = await ttl.store.require(session_id)
        assert doc.status == SessionStatus.ANALYZING
        assert (doc.expires_at - clock()).total_seconds() == 3600

    async def test_recover_reruns_analysis(self, ttl, open_session, user_a, user_b, timers):
        session_id = await open_session(ttl)
        await ttl.submit_statements(session_id, user_a, _rounds("a"))
        await ttl.submit_statements(session_id, user_b, _rounds("b"))
        await ttl.submit_guesses(session_id, user_a, _guesses(1))
        await ttl.submit_guesses(session_id, user_b, _guesses(1))
        timers.close()

        assert await ttl.recover() == 1
        await timers.drain()
        assert (await ttl.store.require(session_id)).status == SessionStatus.COMPLETED
