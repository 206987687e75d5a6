"""
Velora Games — Main API Router

Aggregates all sub-routers under a single prefix so that ``app.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from app.api import compatibility, dream_board, live_games, realtime, two_truths, what_would_you_do

router = APIRouter()

router.include_router(
    live_games.would_you_rather, prefix="/games/would-you-rather", tags=["Would You Rather"]
)
router.include_router(
    live_games.intimacy_spectrum, prefix="/games/intimacy-spectrum", tags=["Intimacy Spectrum"]
)
router.include_router(
    live_games.never_have_i_ever, prefix="/games/never-have-i-ever", tags=["Never Have I Ever"]
)
router.include_router(two_truths.router, prefix="/games/two-truths-lie", tags=["Two Truths & A Lie"])
router.include_router(
    what_would_you_do.router, prefix="/games/what-would-you-do", tags=["What Would You Do"]
)
router.include_router(dream_board.router, prefix="/games/dream-board", tags=["Dream Board"])
router.include_router(compatibility.router, prefix="/compatibility", tags=["Compatibility"])
router.include_router(realtime.router, prefix="/realtime", tags=["Realtime"])
