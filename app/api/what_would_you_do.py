"""
Velora Games — What Would You Do? API
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.api.deps import get_current_user_id, get_engine
from app.api.game_routes import ok, read_upload, register_session_routes
from app.schemas.enums import GameType

router = APIRouter()


def _engine():
    return get_engine(GameType.WHAT_WOULD_YOU_DO)


register_session_routes(router, _engine)


@router.get("/sessions/{session_id}/questions/{question_number}", summary="One scenario")
async def get_question(
    session_id: str,
    question_number: int,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.get_question(session_id, user_id, question_number))


@router.post("/sessions/{session_id}/answers/{question_number}", summary="Submit a voice response")
async def submit_answer(
    session_id: str,
    question_number: int,
    audio: UploadFile = File(...),
    duration: float = Form(...),
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    data = await read_upload(audio)
    result = await engine.submit_answer(
        session_id, user_id, question_number, data, audio.content_type, duration
    )
    return ok(result)


@router.post(
    "/sessions/{session_id}/answers/{question_number}/transcription",
    summary="Retry transcription of a response",
)
async def retry_transcription(
    session_id: str,
    question_number: int,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.retry_transcription(session_id, user_id, question_number))
