"""
Velora Games — Live game routes (Would You Rather, Intimacy Spectrum, Never
Have I Ever)

Play normally runs over the realtime socket; these endpoints mirror its
commands for clients that fall back to plain HTTP.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user_id, get_engine
from app.api.game_routes import ok, register_session_routes
from app.schemas.enums import GameType
from app.schemas.requests import AnswerRequest


def build_router(game_type: GameType) -> APIRouter:
    router = APIRouter()

    def engine_dep():
        return get_engine(game_type)

    register_session_routes(router, engine_dep)

    @router.post("/sessions/{session_id}/answer", summary="Answer the current question")
    async def answer(
        session_id: str,
        body: AnswerRequest,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        result = await engine.record_answer(
            session_id, user_id, body.question_index, body.answer, body.story
        )
        return ok(result)

    @router.post("/sessions/{session_id}/resume", summary="Reconnect and fetch the live state")
    async def resume(
        session_id: str,
        user_id: str = Depends(get_current_user_id),
        engine=Depends(engine_dep),
    ) -> dict:
        return ok(await engine.resume(session_id, user_id))

    return router


would_you_rather = build_router(GameType.WOULD_YOU_RATHER)
intimacy_spectrum = build_router(GameType.INTIMACY_SPECTRUM)
never_have_i_ever = build_router(GameType.NEVER_HAVE_I_EVER)
