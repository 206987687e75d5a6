"""
Velora Games — Couple Compatibility API

Every endpoint accepts either partner's ``match_id``; the service resolves
it to the couple before reading or writing the shared profile.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_compatibility_service, get_current_user_id
from app.api.game_routes import ok
from app.services.compatibility_service import CompatibilityService

router = APIRouter()


@router.get("/dashboard/{match_id}", summary="Cached profile plus live update check")
async def dashboard(
    match_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CompatibilityService = Depends(get_compatibility_service),
) -> dict:
    return ok(await service.get_dashboard(match_id, user_id))


@router.post("/generate/{match_id}", summary="Rebuild the profile from the latest games")
async def generate(
    match_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CompatibilityService = Depends(get_compatibility_service),
) -> dict:
    return ok(await service.generate(match_id, user_id))


@router.get("/status/{match_id}", summary="Lightweight status for polling")
async def quick_status(
    match_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CompatibilityService = Depends(get_compatibility_service),
) -> dict:
    return ok(await service.get_quick_status(match_id, user_id))


@router.get("/games-status/{match_id}", summary="Per-game play history")
async def games_status(
    match_id: str,
    user_id: str = Depends(get_current_user_id),
    service: CompatibilityService = Depends(get_compatibility_service),
) -> dict:
    return ok(await service.get_game_history(match_id, user_id))


@router.get("/game/{match_id}/{game_type}", summary="Full detail for one game")
async def game_details(
    match_id: str,
    game_type: str,
    session_id: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    service: CompatibilityService = Depends(get_compatibility_service),
) -> dict:
    return ok(await service.get_game_details(match_id, game_type, user_id, session_id))
