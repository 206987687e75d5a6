"""Tests for Dream Board."""
from datetime import datetime, timezone

import pytest

from app.errors import InvalidState, NotFound, ValidationFailed
from app.schemas.enums import AlignmentLevel, CardId, Priority, SessionStatus, Timeline
from app.schemas.sessions import DreamSelection
from app.services.dream_board_service import alignment_level, category_alignment

AUDIO = b"OggS-fake-ogg"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _pick(card, priority, timeline):
    return DreamSelection(
        category_number=1,
        category_id="our_home",
        card_id=CardId(card),
        priority=Priority(priority),
        timeline=Timeline(timeline),
        selected_at=NOW,
    )


async def _fill_board(engine, session_id, user_id, overrides=None):
    overrides = overrides or {}
    for number in range(1, 11):
        card, priority, timeline = overrides.get(number, ("A", "heart_set", "cant_wait"))
        await engine.submit_selection(session_id, user_id, number, card, priority, timeline)


class TestCategoryAlignment:
    """Tests for the per-category alignment table."""

    @pytest.mark.parametrize("mine,theirs,expected", [
        (("A", "heart_set", "cant_wait"), ("A", "heart_set", "cant_wait"), 100),
        (("A", "heart_set", "cant_wait"), ("A", "heart_set", "someday"), 90),
        (("A", "heart_set", "cant_wait"), ("A", "dream", "someday"), 80),
        (("A", "flow", "cant_wait"), ("B", "flow", "someday"), 70),
        (("A", "flow", "someday"), ("B", "flow", "someday"), 80),
        (("A", "flow", "cant_wait"), ("B", "dream", "someday"), 55),
        (("A", "heart_set", "cant_wait"), ("B", "heart_set", "cant_wait"), 25),
        (("A", "dream", "when_right"), ("B", "dream", "when_right"), 55),
        (("A", "heart_set", "cant_wait"), ("B", "dream", "someday"), 45),
    ])
    def test_table(self, mine, theirs, expected):
        score, _ = category_alignment(_pick(*mine), _pick(*theirs))
        assert score == expected

    def test_symmetry(self):
        mine, theirs = _pick("A", "flow", "cant_wait"), _pick("C", "heart_set", "cant_wait")
        assert category_alignment(mine, theirs) == category_alignment(theirs, mine)

    @pytest.mark.parametrize("score,level", [
        (100, AlignmentLevel.ALIGNED),
        (80, AlignmentLevel.ALIGNED),
        (79, AlignmentLevel.CLOSE),
        (50, AlignmentLevel.CLOSE),
        (49, AlignmentLevel.DIFFERENT),
        (40, AlignmentLevel.DIFFERENT),
        (39, AlignmentLevel.NEEDS_CONVERSATION),
    ])
    def test_alignment_level(self, score, level):
        assert alignment_level(score) == level


class TestSelections:
    """Tests for picking and re-picking cards."""

    async def test_identical_boards(self, dream_board, open_session, user_a, user_b, timers, push):
        session_id = await open_session(dream_board)

        await _fill_board(dream_board, session_id, user_a)
        await _fill_board(dream_board, session_id, user_b)
        assert push.events(user_a, "db:analyzing")
        await timers.drain()

        doc = await dream_board.store.require(session_id)
        assert doc.status == SessionStatus.COMPLETED
        assert doc.results["overall_alignment"] == 100
        assert doc.results["aligned_count"] == 10
        assert len(doc.results["category_analysis"]) == 10

    async def test_one_conflicting_category(self, dream_board, open_session, user_a, user_b, timers):
        session_id = await open_session(dream_board)

        await _fill_board(dream_board, session_id, user_a)
        await _fill_board(dream_board, session_id, user_b, {3: ("B", "heart_set", "cant_wait")})
        await timers.drain()

        results = (await dream_board.store.require(session_id)).results
        row = results["category_analysis"][2]
        assert row["alignment_score"] == 25
        assert row["alignment_level"] == "needs_conversation"
        assert results["overall_alignment"] == 93
        assert results["needs_conversation_count"] == 1

    async def test_repick_updates_selection(self, dream_board, open_session, user_a):
        session_id = await open_session(dream_board)
        first = await dream_board.submit_selection(session_id, user_a, 4, "A", "dream", "someday")
        second = await dream_board.submit_selection(session_id, user_a, 4, "C", "flow", "when_right")

        assert first["updated"] is False
        assert second["updated"] is True
        assert second["progress"] == {"selected": 1, "total": 10}
        doc = await dream_board.store.require(session_id)
        assert doc.player1.selection_for(4).card_id == CardId.C

    @pytest.mark.parametrize("card,priority,timeline", [
        ("E", "dream", "someday"),
        ("A", "must_have", "someday"),
        ("A", "dream", "never"),
    ])
    async def test_invalid_choice(self, dream_board, open_session, user_a, card, priority, timeline):
        session_id = await open_session(dream_board)
        with pytest.raises(ValidationFailed):
            await dream_board.submit_selection(session_id, user_a, 1, card, priority, timeline)

    @pytest.mark.parametrize("number", [0, 11, True])
    async def test_invalid_category(self, dream_board, open_session, user_a, number):
        session_id = await open_session(dream_board)
        with pytest.raises(ValidationFailed):
            await dream_board.submit_selection(session_id, user_a, number, "A", "dream", "someday")

    async def test_no_changes_after_completion(self, dream_board, open_session, user_a, user_b, timers):
        session_id = await open_session(dream_board)
        await _fill_board(dream_board, session_id, user_a)
        await _fill_board(dream_board, session_id, user_b)
        await timers.drain()

        with pytest.raises(InvalidState):
            await dream_board.submit_selection(session_id, user_a, 1, "B", "dream", "someday")

    async def test_get_category_shows_current_pick(self, dream_board, open_session, user_a):
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 1, "B", "dream", "someday")

        category = await dream_board.get_category(session_id, user_a, 1)

        assert category["current_selection"]["card_title"] == "Suburb Sweet Spot"
        assert len(category["cards"]) == 4

    def test_catalog_listing(self, dream_board):
        listing = dream_board.get_all_categories()
        assert [c["category_number"] for c in listing["categories"]] == list(range(1, 11))


class TestElaborations:
    """Tests for voice elaborations on a selection."""

    async def test_transcript_survives_repick(self, dream_board, open_session, user_a, timers, transcriber):
        transcriber.text = "I want a house with a garden"
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 5, "A", "dream", "someday")

        added = await dream_board.add_elaboration(session_id, user_a, 5, AUDIO, "audio/ogg", 45)
        assert added["elaboration_count"] == 1
        await timers.drain()

        repick = await dream_board.submit_selection(session_id, user_a, 5, "D", "flow", "when_right")

        assert repick["updated"] is True
        assert repick["has_elaboration"] is True
        elaboration = await dream_board.get_elaboration(session_id, user_a, 5)
        assert elaboration["transcript"] == "I want a house with a garden"
        assert elaboration["audio_url"].startswith("https://storage.test/signed/")

    async def test_replacing_deletes_old_clip(self, dream_board, open_session, user_a, blobs):
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 2, "B", "heart_set", "someday")
        await dream_board.add_elaboration(session_id, user_a, 2, AUDIO, "audio/ogg", 30)
        old_url = (await dream_board.store.require(session_id)).player1.selection_for(2).elaboration.blob_url

        await dream_board.add_elaboration(session_id, user_a, 2, AUDIO, "audio/ogg", 20)

        doc = await dream_board.store.require(session_id)
        assert doc.player1.selection_for(2).elaboration.blob_url != old_url
        assert blobs.deleted == [old_url]
        assert doc.player1.elaboration_count == 1

    async def test_elaboration_requires_selection(self, dream_board, open_session, user_a, blobs):
        session_id = await open_session(dream_board)
        with pytest.raises(InvalidState, match="Select a card"):
            await dream_board.add_elaboration(session_id, user_a, 3, AUDIO, "audio/ogg", 30)
        assert blobs.objects == {}

    async def test_elaboration_duration_limit(self, dream_board, open_session, user_a):
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 3, "A", "dream", "someday")
        with pytest.raises(ValidationFailed):
            await dream_board.add_elaboration(session_id, user_a, 3, AUDIO, "audio/ogg", 121)

    async def test_delete_elaboration(self, dream_board, open_session, user_a, blobs):
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 3, "A", "dream", "someday")
        await dream_board.add_elaboration(session_id, user_a, 3, AUDIO, "audio/ogg", 30)

        outcome = await dream_board.delete_elaboration(session_id, user_a, 3)

        assert outcome == {"category_number": 3, "elaboration_count": 0}
        assert len(blobs.deleted) == 1
        with pytest.raises(NotFound):
            await dream_board.get_elaboration(session_id, user_a, 3)
        with pytest.raises(NotFound):
            await dream_board.delete_elaboration(session_id, user_a, 3)

    async def test_transcribes_latest_clip(self, dream_board, open_session, user_a, timers, transcriber):
        transcriber.text = "first take"
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 6, "A", "dream", "someday")
        await dream_board.add_elaboration(session_id, user_a, 6, AUDIO, "audio/ogg", 30)
        await dream_board.add_elaboration(session_id, user_a, 6, AUDIO, "audio/ogg", 30)
        transcriber.text = "second take"

        await timers.drain()

        elaboration = await dream_board.get_elaboration(session_id, user_a, 6)
        assert elaboration["transcript"] == "second take"

    async def test_elaboration_transcripts_reach_the_prompt(self, dream_board, open_session, user_a, user_b, timers, transcriber, insights):
        transcriber.text = "A porch facing the sea"
        prompts = []
        insights.responses["dream_board_insights"] = lambda prompt: prompts.append(prompt) or {}
        session_id = await open_session(dream_board)
        await dream_board.submit_selection(session_id, user_a, 1, "A", "heart_set", "cant_wait")
        await dream_board.add_elaboration(session_id, user_a, 1, AUDIO, "audio/ogg", 30)
        await _fill_board(dream_board, session_id, user_a)
        await _fill_board(dream_board, session_id, user_b)

        await timers.drain()

        assert 'Voice note: "A porch facing the sea"' in prompts[0]
