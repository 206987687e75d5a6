"""
Velora Games — Two Truths & A Lie API
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user_id, get_engine
from app.api.game_routes import ok, register_session_routes
from app.schemas.enums import GameType
from app.schemas.requests import GuessesRequest, StatementsRequest

router = APIRouter()


def _engine():
    return get_engine(GameType.TWO_TRUTHS_LIE)


register_session_routes(router, _engine)


@router.post("/sessions/{session_id}/statements", summary="Submit your ten rounds of statements")
async def submit_statements(
    session_id: str,
    body: StatementsRequest,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.submit_statements(session_id, user_id, body.rounds))


@router.get("/sessions/{session_id}/statements", summary="The statements you wrote")
async def my_statements(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.get_my_statements(session_id, user_id))


@router.get("/sessions/{session_id}/questions", summary="Your partner's rounds to guess")
async def questions(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.get_questions_to_answer(session_id, user_id))


@router.post("/sessions/{session_id}/guesses", summary="Submit your guesses")
async def submit_guesses(
    session_id: str,
    body: GuessesRequest,
    user_id: str = Depends(get_current_user_id),
    engine=Depends(_engine),
) -> dict:
    return ok(await engine.submit_guesses(session_id, user_id, body.answers))
