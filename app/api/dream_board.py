"""
Velora Games — Dream Board API
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.api.deps import get_current_user_id, get_engine
from app.api.game_routes import ok, read_upload, register_session_routes
from app.schemas.enums import GameType
from app.schemas.requests import SelectionRequest

router = APIRouter()


def _engine():
    return get_engine(GameType.DREAM_BOARD)


register_session_routes(router, _engine)


@router.get("/categories", summary="All categories, cards, priorities and timelines")
async def categories(
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(engine.get_all_categories())


@router.get("/sessions/{session_id}/categories/{category_number}", summary="One category with your pick")
async def get_category(
    session_id: str,
    category_number: int,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.get_category(session_id, user_id, category_number))


@router.post("/sessions/{session_id}/selections", summary="Pick a card for a category")
async def submit_selection(
    session_id: str,
    body: SelectionRequest,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    result = await engine.submit_selection(
        session_id, user_id, body.category_number, body.card_id, body.priority, body.timeline
    )
    return ok(result)


@router.post("/sessions/{session_id}/elaborations/{category_number}", summary="Attach a voice elaboration")
async def add_elaboration(
    session_id: str,
    category_number: int,
    audio: UploadFile = File(...),
    duration: float = Form(...),
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    data = await read_upload(audio)
    result = await engine.add_elaboration(
        session_id, user_id, category_number, data, audio.content_type, duration
    )
    return ok(result)


@router.get("/sessions/{session_id}/elaborations/{category_number}", summary="Your elaboration")
async def get_elaboration(
    session_id: str,
    category_number: int,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.get_elaboration(session_id, user_id, category_number))


@router.delete("/sessions/{session_id}/elaborations/{category_number}", summary="Remove your elaboration")
async def delete_elaboration(
    session_id: str,
    category_number: int,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.delete_elaboration(session_id, user_id, category_number))


@router.post(
    "/sessions/{session_id}/elaborations/{category_number}/transcription",
    summary="Retry transcription of an elaboration",
)
async def retry_transcription(
    session_id: str,
    category_number: int,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.retry_transcription(session_id, user_id, category_number))
