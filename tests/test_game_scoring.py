"""Tests for the pure scoring functions of the three live games."""
from datetime import datetime, timezone

import pytest

from app.schemas.enums import GameType, SessionStatus
from app.schemas.sessions import AnswerRecord, SyncPlayer, SyncSession
from app.services import intimacy_spectrum_service as spectrum
from app.services import never_have_i_ever_service as nhie
from app.services import would_you_rather_service as wyr

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _player(user_id, order, answers, times=None):
    records = []
    for i, (number, answer) in enumerate(zip(order, answers)):
        records.append(AnswerRecord(
            question_number=number,
            answer=answer,
            answered_at=NOW,
            response_time_ms=None if answer is None else (times[i] if times else 3000),
        ))
    return SyncPlayer(user_id=user_id, answers=records)


def _session(game_type, order, p1_answers, p2_answers):
    return SyncSession(
        session_id="s-1",
        game_type=game_type,
        match_id="m-1",
        match_key="a:b",
        player1=_player("a", order, p1_answers),
        player2=_player("b", order, p2_answers),
        status=SessionStatus.COMPLETED,
        invited_at=NOW,
        expires_at=NOW,
        question_order=order,
    )


class TestWouldYouRatherScoring:
    """Tests for would_you_rather_service.calculate_results."""

    def test_matched_over_both_answered(self):
        doc = _session(GameType.WOULD_YOU_RATHER, [1, 2, 3, 4], ["A", "A", "B", None], ["A", "B", "B", "A"])

        results = wyr.calculate_results(doc)

        assert results["both_answered"] == 3
        assert results["matched_answers"] == 2
        assert results["different_answers"] == 1
        assert results["player1_timed_out"] == 1
        assert results["player2_timed_out"] == 0
        assert results["compatibility_score"] == 67

    def test_no_overlap_scores_zero(self):
        doc = _session(GameType.WOULD_YOU_RATHER, [1, 2], [None, None], ["A", None])

        results = wyr.calculate_results(doc)

        assert results["compatibility_score"] == 0
        assert results["both_timed_out"] == 1
        assert results["strongest_category"] is None

    def test_category_breakdown_counts_questions(self):
        doc = _session(GameType.WOULD_YOU_RATHER, [1, 2, 3, 4], ["A"] * 4, ["A"] * 4)

        results = wyr.calculate_results(doc)

        assert sum(c["total_questions"] for c in results["category_breakdown"]) == 4
        assert all(c["compatibility_percent"] == 100 for c in results["category_breakdown"])

    def test_average_response_ignores_timeouts(self):
        doc = _session(GameType.WOULD_YOU_RATHER, [1, 2], ["A", None], ["A", "B"])
        doc.player1.answers[0].response_time_ms = 2000

        results = wyr.calculate_results(doc)

        assert results["player1_average_response_ms"] == 2000


class TestIntimacySpectrumScoring:
    """Tests for intimacy_spectrum_service scoring."""

    def test_score_is_hundred_minus_mean_gap(self):
        doc = _session(GameType.INTIMACY_SPECTRUM, [1, 2, 3], [50, 0, None], [60, 100, 40])

        results = spectrum.calculate_results(doc)

        assert results["both_answered"] == 2
        assert results["average_gap"] == 55
        assert results["compatibility_score"] == 45
        assert results["aligned_count"] == 1
        assert results["different_count"] == 1
        assert results["player1_timed_out"] == 1

    def test_half_gap_rounds_up(self):
        doc = _session(GameType.INTIMACY_SPECTRUM, [1, 2], [10, 50], [20, 65])

        assert spectrum.calculate_results(doc)["compatibility_score"] == 88

    def test_nothing_answered(self):
        doc = _session(GameType.INTIMACY_SPECTRUM, [1], [None], [None])

        results = spectrum.calculate_results(doc)

        assert results["compatibility_score"] == 0
        assert results["average_gap"] is None
        assert results["both_timed_out"] == 1

    @pytest.mark.parametrize("gap,expected", [
        (0, "aligned"),
        (15, "aligned"),
        (16, "close"),
        (30, "close"),
        (31, "different"),
        (100, "different"),
    ])
    def test_alignment_for_gap(self, gap, expected):
        assert spectrum.alignment_for_gap(gap) == expected

    def test_gap_label_bands(self):
        assert spectrum.gap_label(10)["label"] == "Perfect match"
        assert spectrum.gap_label(71)["label"] == "Opposite desires"


class TestNeverHaveIEverScoring:
    """Tests for never_have_i_ever_service scoring."""

    def test_agreement_rate(self):
        doc = _session(GameType.NEVER_HAVE_I_EVER, [1, 2, 3, 4], [True, False, True, False], [True, False, False, None])

        results = nhie.calculate_results(doc)

        assert results["both_answered"] == 3
        assert results["total_shared_experiences"] == 1
        assert results["total_innocent_together"] == 1
        assert results["total_secrets_unlocked"] == 1
        assert results["compatibility_score"] == 67

    def test_discovery_points(self):
        doc = _session(GameType.NEVER_HAVE_I_EVER, [1, 2, 3, 4], [True, False, True, False], [True, False, False, None])

        assert nhie.discovery_points(doc) == (9, 4)
        results = nhie.calculate_results(doc)
        assert results["player1_points"] == 9
        assert results["player2_points"] == 4

    def test_conversation_starters_come_from_differences(self):
        doc = _session(GameType.NEVER_HAVE_I_EVER, [1, 2, 3], [True, False, True], [True, False, False])

        starters = nhie.calculate_results(doc)["conversation_starters"]

        assert [s["question_number"] for s in starters] == [3]
        assert starters[0]["player1_answer"] is True
        assert starters[0]["statement_text"]

    def test_stories_are_collected(self):
        doc = _session(GameType.NEVER_HAVE_I_EVER, [1], [True], [True])
        doc.player2.answers[0].story = "Twice, actually."

        stories = nhie.calculate_results(doc)["stories"]

        assert stories == [{"question_number": 1, "player": "player2", "story": "Twice, actually."}]

    def test_committed_badge_requires_no_timeouts(self):
        player = SyncPlayer(user_id="a", total_timed_out=1)
        assert "committed" not in nhie.calculate_badges(player)
        assert "committed" in nhie.calculate_badges(SyncPlayer(user_id="a"))
