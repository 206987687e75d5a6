"""
Velora Games — Shared session primitives

``SessionEngine`` is the base every game engine extends.  It owns the parts
of the lifecycle that are identical across games:

- the invitation state machine (invite, accept, decline, abandon)
- participant enforcement on every read and write
- lazy and reaper-driven expiry
- the post-game voice-note log and the ``completed -> discussion`` move
- pending / active / history lookups

Engines override the small hooks (``_new_player``, ``_question_order``,
``_on_accepted``, ``_after_accepted``, views) and add their own operations
on top.  All writes go through ``store.mutate`` so they serialise per
session; push events are emitted only after the write has committed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional
import uuid

import structlog

from app.config import get_settings
from app.errors import (
    InvalidState,
    LimitReached,
    NotFound,
    NotInvitee,
    NotMutual,
    NotParticipant,
    NotPending,
    SessionExpired,
    ValidationFailed,
)
from app.schemas.enums import (
    FINISHED_STATUSES,
    NON_TERMINAL_STATUSES,
    REAPABLE_STATUSES,
    GameType,
    SessionStatus,
)
from app.schemas.sessions import PLAYER_TYPES, PlayerBase, SessionEnvelope, VoiceNote
from app.services.blob_store import validate_audio_upload, voice_object_path

logger = structlog.get_logger("velora.sessions")

IN_PROGRESS_STATUSES: frozenset[SessionStatus] = NON_TERMINAL_STATUSES - {SessionStatus.PENDING}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def require_participant(doc: SessionEnvelope, user_id: str) -> PlayerBase:
    player = doc.player_for(user_id)
    if player is None:
        raise NotParticipant()
    return player


def player_slot(doc: SessionEnvelope, user_id: str) -> str:
    return "player1" if doc.player1.user_id == user_id else "player2"


class SessionEngine:
    """Lifecycle shared by all six game engines."""

    game_type: GameType
    event_prefix: str
    score_field: str = "compatibility_score"
    question_count: int = 0

    def __init__(
        self,
        store,
        matches,
        push,
        timers,
        *,
        identity=None,
        blobs=None,
        insights=None,
        transcriber=None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = get_settings()
        self.store = store
        self.matches = matches
        self.push = push
        self.timers = timers
        self.identity = identity
        self.blobs = blobs
        self.insights = insights
        self.transcriber = transcriber
        self.now = clock or utcnow
        self.log = logger.bind(game_type=self.game_type.value)

    # ── Hooks ─────────────────────────────────────────────────────────

    def _new_player(self, user_id: str) -> PlayerBase:
        return PLAYER_TYPES[self.game_type](user_id=user_id)

    def _question_order(self) -> list[int]:
        return list(range(1, self.question_count + 1))

    def _session_lifetime(self) -> timedelta:
        raise NotImplementedError

    def _invitation_expiry(self, now: datetime) -> datetime:
        return now + self._session_lifetime()

    def _on_accepted(self, doc: SessionEnvelope, now: datetime) -> None:
        doc.status = SessionStatus.ACTIVE
        doc.accepted_at = now
        doc.started_at = now
        doc.last_activity_at = now
        doc.expires_at = now + self._session_lifetime()

    async def _after_accepted(self, doc: SessionEnvelope) -> None:
        """Side effects once acceptance has been committed."""

    def session_view(self, doc: SessionEnvelope, viewer_id: str) -> dict[str, Any]:
        return self.envelope_view(doc, viewer_id)

    def results_view(self, doc: SessionEnvelope, viewer_id: str) -> dict[str, Any]:
        return {
            **self.envelope_view(doc, viewer_id),
            "results": doc.results,
            "ai_insights": doc.ai_insights,
            "insight_error": doc.insight_error,
        }

    # ── Helpers ───────────────────────────────────────────────────────

    def event(self, name: str) -> str:
        return f"{self.event_prefix}:{name}"

    async def emit(self, user_id: str, name: str, payload: dict[str, Any]) -> None:
        await self.push.emit_to_user(user_id, self.event(name), payload)

    async def emit_both(self, doc: SessionEnvelope, name: str, payload: dict[str, Any]) -> None:
        for user_id in doc.user_ids:
            await self.emit(user_id, name, payload)

    def score_of(self, doc: SessionEnvelope) -> Optional[int]:
        if not doc.results:
            return None
        return doc.results.get(self.score_field)

    def envelope_view(self, doc: SessionEnvelope, viewer_id: str) -> dict[str, Any]:
        partner = doc.partner_of(viewer_id)
        return {
            "session_id": doc.session_id,
            "game_type": doc.game_type.value,
            "match_id": doc.match_id,
            "status": doc.status.value,
            "you_are": player_slot(doc, viewer_id),
            "partner_id": partner.user_id if partner else None,
            "invited_by": doc.player1.user_id,
            "invited_at": doc.invited_at,
            "accepted_at": doc.accepted_at,
            "started_at": doc.started_at,
            "completed_at": doc.completed_at,
            "expires_at": doc.expires_at,
            "voice_note_count": len(doc.voice_notes),
        }

    async def _profile(self, user_id: str) -> dict[str, Any]:
        if self.identity is None:
            return {"user_id": user_id}
        return await self.identity.get_profile(user_id)

    async def load_for(self, session_id: str, caller_id: str) -> SessionEnvelope:
        doc = await self.store.require(session_id)
        require_participant(doc, caller_id)
        return doc

    # ── Invitation state machine ──────────────────────────────────────

    async def create_invitation(self, caller_id: str, match_id: str) -> SessionEnvelope:
        """Invite the caller's partner.  At most one non-terminal session of
        this game type may exist per couple."""
        match = await self.matches.resolve(match_id, caller_id)
        if not match.mutual_like:
            raise NotMutual()
        partner_id = match.partner_of(caller_id)
        if partner_id == caller_id:
            raise ValidationFailed("Cannot invite yourself")

        await self._expire_stale_for_couple(match.match_key)

        now = self.now()
        doc = self.store.document_cls(
            session_id=str(uuid.uuid4()),
            game_type=self.game_type,
            match_id=match.match_id,
            match_key=match.match_key,
            player1=self._new_player(caller_id),
            player2=self._new_player(partner_id),
            status=SessionStatus.PENDING,
            invited_at=now,
            expires_at=self._invitation_expiry(now),
            question_order=self._question_order(),
        )
        await self.store.insert(doc)

        self.log.info(
            "invitation_created",
            session_id=doc.session_id,
            match_key=doc.match_key,
            inviter_id=caller_id,
        )
        await self.emit(partner_id, "invited", {
            "session_id": doc.session_id,
            "expires_at": doc.expires_at,
            "invited_by": await self._profile(caller_id),
        })
        await self.emit(caller_id, "invitation_sent", {
            "session_id": doc.session_id,
            "expires_at": doc.expires_at,
        })
        return doc

    async def _expire_stale_for_couple(self, match_key: str) -> None:
        now = self.now()
        for stale in await self.store.list_for_couple(match_key, NON_TERMINAL_STATUSES):
            if stale.expires_at <= now:
                await self.expire_if_due(stale.session_id)

    async def accept(self, session_id: str, caller_id: str) -> SessionEnvelope:
        now = self.now()

        def _accept(doc: SessionEnvelope) -> bool:
            require_participant(doc, caller_id)
            if doc.player2.user_id != caller_id:
                raise NotInvitee()
            if doc.status == SessionStatus.EXPIRED:
                raise SessionExpired()
            if doc.status != SessionStatus.PENDING:
                raise NotPending()
            if doc.expires_at <= now:
                doc.status = SessionStatus.EXPIRED
                return False
            self._on_accepted(doc, now)
            return True

        doc, accepted = await self.store.mutate(session_id, _accept)
        if not accepted:
            self.log.info("invitation_expired_on_accept", session_id=session_id)
            await self._announce_expired(doc)
            raise SessionExpired()

        self.log.info("invitation_accepted", session_id=session_id, user_id=caller_id)
        await self.emit_both(doc, "accepted", {
            "session_id": doc.session_id,
            "status": doc.status.value,
            "expires_at": doc.expires_at,
        })
        await self._after_accepted(doc)
        return doc

    async def decline(self, session_id: str, caller_id: str) -> SessionEnvelope:
        def _decline(doc: SessionEnvelope) -> None:
            require_participant(doc, caller_id)
            if doc.player2.user_id != caller_id:
                raise NotInvitee()
            if doc.status != SessionStatus.PENDING:
                raise NotPending()
            doc.status = SessionStatus.DECLINED
            doc.last_activity_at = self.now()

        doc, _ = await self.store.mutate(session_id, _decline)
        self.log.info("invitation_declined", session_id=session_id, user_id=caller_id)
        await self.emit(doc.player1.user_id, "declined", {"session_id": doc.session_id})
        return doc

    async def abandon(self, session_id: str, caller_id: str) -> SessionEnvelope:
        def _abandon(doc: SessionEnvelope) -> None:
            require_participant(doc, caller_id)
            if doc.status not in NON_TERMINAL_STATUSES:
                raise InvalidState("Game is already over")
            doc.status = SessionStatus.ABANDONED
            doc.last_activity_at = self.now()
            if hasattr(doc, "question_phase"):
                doc.question_phase = None

        doc, _ = await self.store.mutate(session_id, _abandon)
        self.timers.cancel_session(session_id)
        self.log.info("session_abandoned", session_id=session_id, user_id=caller_id)
        for user_id in doc.user_ids:
            await self.push.emit_to_user(user_id, "session:abandoned", {
                "session_id": doc.session_id,
                "game_type": doc.game_type.value,
                "abandoned_by": caller_id,
            })
        return doc

    # ── Expiry ────────────────────────────────────────────────────────

    async def expire_if_due(self, session_id: str) -> bool:
        """Move an overdue session to ``expired``.  Safe to call repeatedly."""
        now = self.now()

        def _expire(doc: SessionEnvelope) -> bool:
            if doc.status not in REAPABLE_STATUSES or doc.expires_at > now:
                return False
            doc.status = SessionStatus.EXPIRED
            if hasattr(doc, "question_phase"):
                doc.question_phase = None
            return True

        doc, expired = await self.store.mutate(session_id, _expire)
        if expired:
            self.timers.cancel_session(session_id)
            self.log.info("session_expired", session_id=session_id)
            await self._announce_expired(doc)
        return expired

    async def _announce_expired(self, doc: SessionEnvelope) -> None:
        for user_id in doc.user_ids:
            await self.push.emit_to_user(user_id, "session:expired", {
                "session_id": doc.session_id,
                "game_type": doc.game_type.value,
            })

    # ── Voice notes / discussion ──────────────────────────────────────

    def _check_related_question(self, related_question: Optional[int]) -> None:
        if related_question is None:
            return
        if not 1 <= related_question <= max(self.question_count, 1):
            raise ValidationFailed(f"related_question must be between 1 and {self.question_count}")

    async def append_voice_note(
        self,
        session_id: str,
        caller_id: str,
        blob_url: str,
        duration_sec: float,
        related_question: Optional[int] = None,
    ) -> tuple[SessionEnvelope, int]:
        """Append to the discussion log; returns ``(doc, note_index)``.

        The first note on a ``completed`` session moves it to ``discussion``.
        """
        if not blob_url:
            raise ValidationFailed("Audio URL is required")
        if not 0 < duration_sec <= self.settings.DISCUSSION_NOTE_MAX_SECONDS:
            raise ValidationFailed(
                f"Voice notes must be between 0 and {self.settings.DISCUSSION_NOTE_MAX_SECONDS:g} seconds"
            )
        self._check_related_question(related_question)
        now = self.now()

        def _append(doc: SessionEnvelope) -> int:
            require_participant(doc, caller_id)
            if doc.status not in FINISHED_STATUSES:
                raise InvalidState("Voice notes can only be sent after the game is complete")
            if len(doc.voice_notes) >= self.settings.VOICE_NOTES_PER_SESSION:
                raise LimitReached("This game has reached its voice note limit")
            mine = sum(1 for note in doc.voice_notes if note.user_id == caller_id)
            if mine >= self.settings.VOICE_NOTES_PER_USER:
                raise LimitReached("You have sent the maximum number of voice notes")
            doc.voice_notes.append(VoiceNote(
                user_id=caller_id,
                blob_url=blob_url,
                duration_sec=duration_sec,
                related_question=related_question,
                created_at=now,
            ))
            if doc.status == SessionStatus.COMPLETED:
                doc.status = SessionStatus.DISCUSSION
            doc.last_activity_at = now
            return len(doc.voice_notes) - 1

        doc, index = await self.store.mutate(session_id, _append)
        self.log.info("voice_note_added", session_id=session_id, user_id=caller_id, note_index=index)

        partner = doc.partner_of(caller_id)
        await self.emit(partner.user_id, "voice_note_received", {
            "session_id": doc.session_id,
            "note_index": index,
            "from_user_id": caller_id,
            "duration_sec": duration_sec,
            "related_question": related_question,
        })
        return doc, index

    async def upload_voice_note(
        self,
        session_id: str,
        caller_id: str,
        data: bytes,
        mime_type: str,
        duration_sec: float,
        related_question: Optional[int] = None,
    ) -> tuple[SessionEnvelope, int]:
        """Store the clip in the blob store, then append it to the log."""
        doc = await self.load_for(session_id, caller_id)
        if doc.status not in FINISHED_STATUSES:
            raise InvalidState("Voice notes can only be sent after the game is complete")
        mime_type = validate_audio_upload(data, mime_type)
        path = voice_object_path(self.game_type.value, session_id, caller_id, "discussion", mime_type)
        blob_url = await self.blobs.put(data, mime_type, path)
        try:
            return await self.append_voice_note(
                session_id, caller_id, blob_url, duration_sec, related_question
            )
        except Exception:
            await self.blobs.delete(blob_url)
            raise

    async def mark_listened(self, session_id: str, caller_id: str, note_index: int) -> SessionEnvelope:
        def _mark(doc: SessionEnvelope) -> None:
            require_participant(doc, caller_id)
            if not 0 <= note_index < len(doc.voice_notes):
                raise NotFound("Voice note not found")
            note = doc.voice_notes[note_index]
            if caller_id not in note.listened_by:
                note.listened_by.append(caller_id)

        doc, _ = await self.store.mutate(session_id, _mark)
        return doc

    async def get_voice_notes(self, session_id: str, caller_id: str) -> list[dict[str, Any]]:
        doc = await self.load_for(session_id, caller_id)
        notes = []
        for index, note in enumerate(doc.voice_notes):
            url = note.blob_url
            if self.blobs is not None:
                url = await self.blobs.signed_url(note.blob_url)
            notes.append({
                "note_index": index,
                "user_id": note.user_id,
                "is_mine": note.user_id == caller_id,
                "audio_url": url,
                "duration_sec": note.duration_sec,
                "related_question": note.related_question,
                "created_at": note.created_at,
                "listened": caller_id in note.listened_by,
            })
        return notes

    # ── Lookups ───────────────────────────────────────────────────────

    async def get_session(self, session_id: str, caller_id: str) -> dict[str, Any]:
        doc = await self.load_for(session_id, caller_id)
        return self.session_view(doc, caller_id)

    async def get_results(self, session_id: str, caller_id: str) -> dict[str, Any]:
        doc = await self.load_for(session_id, caller_id)
        if doc.status not in FINISHED_STATUSES:
            raise InvalidState("Results are not available yet")
        return self.results_view(doc, caller_id)

    async def get_pending_invitation(self, user_id: str) -> Optional[dict[str, Any]]:
        now = self.now()
        for doc in await self.store.list_for_user(user_id, [SessionStatus.PENDING], limit=10):
            if doc.player2.user_id == user_id and doc.expires_at > now:
                view = self.envelope_view(doc, user_id)
                view["inviter"] = await self._profile(doc.player1.user_id)
                return view
        return None

    async def get_active_session(self, user_id: str) -> Optional[dict[str, Any]]:
        docs = await self.store.list_for_user(user_id, IN_PROGRESS_STATUSES, limit=1)
        if not docs:
            return None
        return self.session_view(docs[0], user_id)

    async def history(self, user_id: str, limit: Optional[int] = None) -> list[dict[str, Any]]:
        if limit is None:
            limit = self.settings.HISTORY_DEFAULT_LIMIT
        limit = max(1, min(limit, self.settings.HISTORY_MAX_LIMIT))
        docs = await self.store.list_for_user(user_id, FINISHED_STATUSES, limit=limit)
        entries = []
        for doc in docs:
            partner = doc.partner_of(user_id)
            entries.append({
                "session_id": doc.session_id,
                "match_id": doc.match_id,
                "status": doc.status.value,
                "partner_id": partner.user_id if partner else None,
                "completed_at": doc.completed_at,
                "score": self.score_of(doc),
                "voice_note_count": len(doc.voice_notes),
            })
        return entries

    async def recover(self) -> int:
        """Re-arm in-process work after a restart.  Engines override."""
        return 0
