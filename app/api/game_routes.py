"""
Velora Games — Shared game routes

Every game exposes the same lifecycle surface (invite, accept, decline,
abandon, session / results reads, history, voice notes).  Each game router
calls ``register_session_routes`` with a dependency that yields its engine
and then adds its own play endpoints.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from app.api.deps import get_current_user_id
from app.config import get_settings
from app.schemas.requests import InviteRequest, ListenedRequest


def ok(data: Any) -> dict[str, Any]:
    return {"ok": True, "data": data}


async def read_upload(audio: UploadFile) -> bytes:
    """Read at most one byte past the upload cap so oversize clips are
    rejected without buffering the whole body."""
    return await audio.read(get_settings().MAX_UPLOAD_BYTES + 1)


def register_session_routes(router: APIRouter, engine_dep: Callable[[], Any]) -> None:
    @router.post("/invite", summary="Invite your match to play")
    async def invite(
        body: InviteRequest,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        doc = await engine.create_invitation(user_id, body.match_id)
        return ok(engine.session_view(doc, user_id))

    @router.post("/sessions/{session_id}/accept", summary="Accept an invitation")
    async def accept(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        doc = await engine.accept(session_id, user_id)
        return ok(engine.session_view(doc, user_id))

    @router.post("/sessions/{session_id}/decline", summary="Decline an invitation")
    async def decline(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        doc = await engine.decline(session_id, user_id)
        return ok(engine.session_view(doc, user_id))

    @router.post("/sessions/{session_id}/abandon", summary="Leave a game in progress")
    async def abandon(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        doc = await engine.abandon(session_id, user_id)
        return ok(engine.session_view(doc, user_id))

    @router.get("/sessions/{session_id}", summary="Current session state")
    async def get_session(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.get_session(session_id, user_id))

    @router.get("/sessions/{session_id}/results", summary="Final results")
    async def get_results(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.get_results(session_id, user_id))

    @router.post("/sessions/{session_id}/insights", summary="Retry the AI insights for a finished game")
    async def regenerate_insights(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.regenerate_insights(session_id, user_id))

    @router.get("/pending", summary="Invitation waiting for you")
    async def pending(
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.get_pending_invitation(user_id))

    @router.get("/active", summary="Your session in progress")
    async def active(
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.get_active_session(user_id))

    @router.get("/history", summary="Your finished games")
    async def history(
        limit: Optional[int] = Query(None, ge=1),
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.history(user_id, limit))

    # ── Discussion voice notes ────────────────────────────────────────

    @router.get("/sessions/{session_id}/voice-notes", summary="Discussion voice notes")
    async def list_voice_notes(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.get_voice_notes(session_id, user_id))

    @router.post("/sessions/{session_id}/voice-notes", summary="Send a discussion voice note")
    async def send_voice_note(
        session_id: str,
        audio: UploadFile = File(...),
        duration: float = Form(...),
        related_question: Optional[int] = Form(None),
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        data = await read_upload(audio)
        doc, index = await engine.upload_voice_note(
            session_id, user_id, data, audio.content_type, duration, related_question
        )
        return ok({"note_index": index, "status": doc.status.value, "voice_note_count": len(doc.voice_notes)})

    @router.post("/sessions/{session_id}/voice-notes/listened", summary="Mark a voice note as listened")
    async def mark_listened(
        session_id: str,
        body: ListenedRequest,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        await engine.mark_listened(session_id, user_id, body.note_index)
        return ok({"note_index": body.note_index, "listened": True})
