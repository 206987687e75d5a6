"""Tests for the shared session lifecycle: invitations, expiry, voice notes
and lookups."""
import asyncio

import pytest

from app.errors import (
    ConflictActiveSession,
    InvalidState,
    LimitReached,
    MatchNotFound,
    NotFound,
    NotInvitee,
    NotMutual,
    NotParticipant,
    NotPending,
    SessionExpired,
    ValidationFailed,
)
from app.schemas.enums import SessionStatus


class TestCreateInvitation:
    """Tests for create_invitation."""

    async def test_creates_pending_session_with_inviter_as_player1(self, ttl, match, user_a, user_b, push):
        doc = await ttl.create_invitation(user_a, match.match_id)

        assert doc.status == SessionStatus.PENDING
        assert doc.player1.user_id == user_a
        assert doc.player2.user_id == user_b
        assert doc.match_key == match.match_key
        assert doc.question_order == list(range(1, 11))
        invited = push.events(user_b, "ttl:invited")
        assert invited[0]["session_id"] == doc.session_id
        assert invited[0]["invited_by"] == {"user_id": user_a}
        assert push.events(user_a, "ttl:invitation_sent")[0]["session_id"] == doc.session_id

    async def test_rejects_match_without_mutual_like(self, ttl, matches, user_a, user_b):
        one_sided = matches.add(user_a, user_b, mutual_like=False)
        with pytest.raises(NotMutual):
            await ttl.create_invitation(user_a, one_sided.match_id)

    async def test_mirror_row_supplies_mutual_like(self, ttl, matches, user_a, user_b):
        matches.add(user_a, user_b, mutual_like=True)
        mirror = matches.add(user_b, user_a, mutual_like=False)

        doc = await ttl.create_invitation(user_b, mirror.match_id)
        assert doc.player2.user_id == user_a

    async def test_unknown_match(self, ttl, user_a):
        with pytest.raises(MatchNotFound):
            await ttl.create_invitation(user_a, "no-such-match")

    async def test_outsider_cannot_invite(self, ttl, match, outsider):
        with pytest.raises(NotParticipant):
            await ttl.create_invitation(outsider, match.match_id)

    async def test_second_invitation_while_pending_conflicts(self, ttl, match, user_a, user_b):
        await ttl.create_invitation(user_a, match.match_id)
        with pytest.raises(ConflictActiveSession):
            await ttl.create_invitation(user_b, match.match_id)

    async def test_concurrent_invitations_produce_one_session(self, ttl, match, user_a, user_b):
        results = await asyncio.gather(
            ttl.create_invitation(user_a, match.match_id),
            ttl.create_invitation(user_b, match.match_id),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, ConflictActiveSession)]
        assert len(created) == 1
        assert len(conflicts) == 1
        assert len(ttl.store.rows) == 1

    async def test_other_game_types_do_not_conflict(self, ttl, wyr, match, user_a):
        await ttl.create_invitation(user_a, match.match_id)
        doc = await wyr.create_invitation(user_a, match.match_id)
        assert doc.status == SessionStatus.PENDING

    async def test_overdue_invitation_expires_before_a_new_one(self, ttl, match, user_a, clock):
        first = await ttl.create_invitation(user_a, match.match_id)
        clock.advance(hours=49)

        second = await ttl.create_invitation(user_a, match.match_id)

        assert second.session_id != first.session_id
        assert (await ttl.store.require(first.session_id)).status == SessionStatus.EXPIRED


class TestAcceptDecline:
    """Tests for accept and decline."""

    async def test_accept_activates_async_game(self, ttl, match, user_a, user_b, push, clock):
        doc = await ttl.create_invitation(user_a, match.match_id)
        accepted = await ttl.accept(doc.session_id, user_b)

        assert accepted.status == SessionStatus.ACTIVE
        assert accepted.accepted_at == clock()
        assert accepted.started_at == clock()
        assert push.events(user_a, "ttl:accepted")
        assert push.events(user_b, "ttl:accepted")

    async def test_only_invitee_may_accept(self, ttl, match, user_a):
        doc = await ttl.create_invitation(user_a, match.match_id)
        with pytest.raises(NotInvitee):
            await ttl.accept(doc.session_id, user_a)

    async def test_outsider_cannot_accept(self, ttl, match, user_a, outsider):
        doc = await ttl.create_invitation(user_a, match.match_id)
        with pytest.raises(NotParticipant):
            await ttl.accept(doc.session_id, outsider)

    async def test_accept_after_deadline_expires_the_session(self, wyr, match, user_a, user_b, clock, push):
        doc = await wyr.create_invitation(user_a, match.match_id)
        clock.advance(minutes=6)

        with pytest.raises(SessionExpired):
            await wyr.accept(doc.session_id, user_b)

        stored = await wyr.store.require(doc.session_id)
        assert stored.status == SessionStatus.EXPIRED
        assert push.events(user_a, "session:expired")

    async def test_accept_expired_session(self, ttl, match, user_a, user_b, clock):
        doc = await ttl.create_invitation(user_a, match.match_id)
        clock.advance(hours=49)
        assert await ttl.expire_if_due(doc.session_id) is True

        with pytest.raises(SessionExpired):
            await ttl.accept(doc.session_id, user_b)

    async def test_accept_twice_is_rejected(self, ttl, match, user_a, user_b):
        doc = await ttl.create_invitation(user_a, match.match_id)
        await ttl.accept(doc.session_id, user_b)
        with pytest.raises(NotPending):
            await ttl.accept(doc.session_id, user_b)

    async def test_decline_notifies_inviter(self, ttl, match, user_a, user_b, push):
        doc = await ttl.create_invitation(user_a, match.match_id)
        declined = await ttl.decline(doc.session_id, user_b)

        assert declined.status == SessionStatus.DECLINED
        assert push.events(user_a, "ttl:declined") == [{"session_id": doc.session_id}]

    async def test_decline_frees_the_couple_for_a_new_invitation(self, ttl, match, user_a, user_b):
        doc = await ttl.create_invitation(user_a, match.match_id)
        await ttl.decline(doc.session_id, user_b)
        again = await ttl.create_invitation(user_b, match.match_id)
        assert again.player1.user_id == user_b

    async def test_decline_on_active_session_changes_nothing(self, ttl, open_session, user_b):
        session_id = await open_session(ttl)
        before = await ttl.store.require(session_id)

        with pytest.raises(NotPending):
            await ttl.decline(session_id, user_b)

        after = await ttl.store.require(session_id)
        assert after.version == before.version
        assert after.status == SessionStatus.ACTIVE


class TestAbandon:
    """Tests for abandon."""

    async def test_abandon_notifies_both_players(self, ttl, open_session, user_a, user_b, push):
        session_id = await open_session(ttl)
        doc = await ttl.abandon(session_id, user_a)

        assert doc.status == SessionStatus.ABANDONED
        for user in (user_a, user_b):
            event = push.events(user, "session:abandoned")[0]
            assert event["abandoned_by"] == user_a
            assert event["game_type"] == "two_truths_lie"

    async def test_abandon_cancels_live_timers(self, wyr, open_session, user_b, timers):
        session_id = await open_session(wyr)
        assert timers.armed_keys(session_id)

        await wyr.abandon(session_id, user_b)
        assert timers.armed_keys(session_id) == []

    async def test_abandon_finished_game_is_rejected(self, ttl, finished_session, user_a):
        doc = await finished_session(ttl, 80)
        with pytest.raises(InvalidState):
            await ttl.abandon(doc.session_id, user_a)


class TestExpiry:
    """Tests for expire_if_due."""

    async def test_not_due(self, ttl, match, user_a):
        doc = await ttl.create_invitation(user_a, match.match_id)
        assert await ttl.expire_if_due(doc.session_id) is False

    async def test_idempotent(self, ttl, match, user_a, clock, push):
        doc = await ttl.create_invitation(user_a, match.match_id)
        clock.advance(hours=49)

        assert await ttl.expire_if_due(doc.session_id) is True
        assert await ttl.expire_if_due(doc.session_id) is False
        assert len(push.events(user_a, "session:expired")) == 1

    async def test_finished_sessions_never_expire(self, ttl, finished_session, clock):
        doc = await finished_session(ttl, 70)
        clock.advance(days=30)
        assert await ttl.expire_if_due(doc.session_id) is False


class TestVoiceNotes:
    """Tests for the post-game discussion log."""

    async def test_first_note_moves_completed_to_discussion(self, ttl, finished_session, user_a, user_b, push):
        doc = await finished_session(ttl, 80)

        updated, index = await ttl.append_voice_note(doc.session_id, user_a, "gs://test-bucket/n1.webm", 12.5, 3)

        assert index == 0
        assert updated.status == SessionStatus.DISCUSSION
        received = push.events(user_b, "ttl:voice_note_received")[0]
        assert received["from_user_id"] == user_a
        assert received["related_question"] == 3

    async def test_notes_only_after_completion(self, ttl, open_session, user_a):
        session_id = await open_session(ttl)
        with pytest.raises(InvalidState):
            await ttl.append_voice_note(session_id, user_a, "gs://test-bucket/n.webm", 10)

    async def test_duration_limit(self, ttl, finished_session, user_a):
        doc = await finished_session(ttl, 80)
        with pytest.raises(ValidationFailed):
            await ttl.append_voice_note(doc.session_id, user_a, "gs://test-bucket/n.webm", 61)

    async def test_related_question_must_exist(self, ttl, finished_session, user_a):
        doc = await finished_session(ttl, 80)
        with pytest.raises(ValidationFailed):
            await ttl.append_voice_note(doc.session_id, user_a, "gs://test-bucket/n.webm", 10, 11)

    async def test_per_user_limit(self, ttl, finished_session, user_a):
        doc = await finished_session(ttl, 80)
        for i in range(5):
            await ttl.append_voice_note(doc.session_id, user_a, f"gs://test-bucket/a{i}.webm", 10)
        with pytest.raises(LimitReached):
            await ttl.append_voice_note(doc.session_id, user_a, "gs://test-bucket/a5.webm", 10)

    async def test_session_limit(self, ttl, finished_session, user_a, user_b):
        doc = await finished_session(ttl, 80)
        for i in range(5):
            await ttl.append_voice_note(doc.session_id, user_a, f"gs://test-bucket/a{i}.webm", 10)
            await ttl.append_voice_note(doc.session_id, user_b, f"gs://test-bucket/b{i}.webm", 10)

        with pytest.raises(LimitReached, match="voice note limit"):
            await ttl.append_voice_note(doc.session_id, user_b, "gs://test-bucket/b5.webm", 10)
        assert len((await ttl.store.require(doc.session_id)).voice_notes) == 10

    async def test_mark_listened_twice_equals_once(self, ttl, finished_session, user_a, user_b):
        doc = await finished_session(ttl, 80)
        await ttl.append_voice_note(doc.session_id, user_a, "gs://test-bucket/n.webm", 10)

        first = await ttl.mark_listened(doc.session_id, user_b, 0)
        second = await ttl.mark_listened(doc.session_id, user_b, 0)

        assert first.voice_notes[0].listened_by == [user_b]
        assert second.voice_notes[0].listened_by == [user_b]
        assert second.version == first.version

    async def test_mark_listened_unknown_note(self, ttl, finished_session, user_b):
        doc = await finished_session(ttl, 80)
        with pytest.raises(NotFound):
            await ttl.mark_listened(doc.session_id, user_b, 0)

    async def test_get_voice_notes_signs_urls(self, ttl, finished_session, user_a, user_b):
        doc = await finished_session(ttl, 80)
        await ttl.append_voice_note(doc.session_id, user_a, "gs://test-bucket/n.webm", 10)
        await ttl.mark_listened(doc.session_id, user_b, 0)

        notes = await ttl.get_voice_notes(doc.session_id, user_b)

        assert notes[0]["audio_url"] == "https://storage.test/signed/n.webm"
        assert notes[0]["is_mine"] is False
        assert notes[0]["listened"] is True

    async def test_upload_stores_clip_then_appends(self, ttl, finished_session, user_a, blobs):
        doc = await finished_session(ttl, 80)
        updated, index = await ttl.upload_voice_note(doc.session_id, user_a, b"webm-bytes", "audio/webm", 20)

        url = updated.voice_notes[index].blob_url
        assert url.startswith("gs://test-bucket/voice-notes/two_truths_lie/")
        assert blobs.objects[url] == b"webm-bytes"

    async def test_upload_removes_clip_when_append_fails(self, ttl, finished_session, user_a, blobs):
        doc = await finished_session(ttl, 80)
        with pytest.raises(ValidationFailed):
            await ttl.upload_voice_note(doc.session_id, user_a, b"webm-bytes", "audio/webm", 90)
        assert len(blobs.deleted) == 1
        assert blobs.objects == {}


class TestLookups:
    """Tests for session reads."""

    async def test_outsider_cannot_read(self, ttl, match, user_a, outsider):
        doc = await ttl.create_invitation(user_a, match.match_id)
        with pytest.raises(NotParticipant):
            await ttl.get_session(doc.session_id, outsider)

    async def test_unknown_session(self, ttl, user_a):
        with pytest.raises(NotFound):
            await ttl.get_session("missing", user_a)

    async def test_pending_invitation_is_for_the_invitee(self, ttl, match, user_a, user_b):
        doc = await ttl.create_invitation(user_a, match.match_id)

        pending = await ttl.get_pending_invitation(user_b)
        assert pending["session_id"] == doc.session_id
        assert pending["inviter"] == {"user_id": user_a}
        assert await ttl.get_pending_invitation(user_a) is None

    async def test_active_session(self, ttl, open_session, user_a):
        session_id = await open_session(ttl)
        active = await ttl.get_active_session(user_a)
        assert active["session_id"] == session_id
        assert active["status"] == "active"

    async def test_results_require_finished_game(self, ttl, open_session, user_a):
        session_id = await open_session(ttl)
        with pytest.raises(InvalidState):
            await ttl.get_results(session_id, user_a)

    async def test_history_is_most_recent_first(self, ttl, finished_session, user_a, user_b, clock):
        older = await finished_session(ttl, 40)
        clock.advance(days=1)
        newer = await finished_session(ttl, 90)

        history = await ttl.history(user_b)

        assert [h["session_id"] for h in history] == [newer.session_id, older.session_id]
        assert [h["score"] for h in history] == [90, 40]
        assert history[0]["partner_id"] == user_a
