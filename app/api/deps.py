"""
Velora Games — API dependencies

Lazily-built service singletons shared by the REST routers, the realtime
gateway and the application lifespan, plus the bearer-token dependency.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import Unauthenticated
from app.schemas.enums import GAME_TYPES, GameType
from app.services.blob_store import BlobStore
from app.services.compatibility_service import CompatibilityService
from app.services.compatibility_store import CompatibilityStore
from app.services.dream_board_service import DreamBoardService
from app.services.identity_service import IdentityService
from app.services.insight_service import InsightService
from app.services.intimacy_spectrum_service import IntimacySpectrumService
from app.services.match_store import MatchStore
from app.services.never_have_i_ever_service import NeverHaveIEverService
from app.services.push_channel import PushChannel
from app.services.session_store import SessionStore
from app.services.timer_service import TimerService
from app.services.transcription_service import TranscriptionService
from app.services.two_truths_service import TwoTruthsService
from app.services.what_would_you_do_service import WhatWouldYouDoService
from app.services.would_you_rather_service import WouldYouRatherService

ENGINE_CLASSES = {
    GameType.WOULD_YOU_RATHER: WouldYouRatherService,
    GameType.INTIMACY_SPECTRUM: IntimacySpectrumService,
    GameType.NEVER_HAVE_I_EVER: NeverHaveIEverService,
    GameType.TWO_TRUTHS_LIE: TwoTruthsService,
    GameType.WHAT_WOULD_YOU_DO: WhatWouldYouDoService,
    GameType.DREAM_BOARD: DreamBoardService,
}

# ── Service singletons ────────────────────────────────────────────────────────

_timers: TimerService | None = None
_push: PushChannel | None = None
_matches: MatchStore | None = None
_identity: IdentityService | None = None
_blobs: BlobStore | None = None
_insights: InsightService | None = None
_transcriber: TranscriptionService | None = None
_engines: dict[GameType, object] = {}
_compatibility: CompatibilityService | None = None


def get_timers() -> TimerService:
    global _timers
    if _timers is None:
        _timers = TimerService()
    return _timers


def get_push() -> PushChannel:
    global _push
    if _push is None:
        _push = PushChannel()
    return _push


def get_match_store() -> MatchStore:
    global _matches
    if _matches is None:
        _matches = MatchStore()
    return _matches


def get_identity() -> IdentityService:
    global _identity
    if _identity is None:
        _identity = IdentityService()
    return _identity


def get_blobs() -> BlobStore:
    global _blobs
    if _blobs is None:
        _blobs = BlobStore()
    return _blobs


def get_insights() -> InsightService:
    global _insights
    if _insights is None:
        _insights = InsightService()
    return _insights


def get_transcriber() -> TranscriptionService:
    global _transcriber
    if _transcriber is None:
        _transcriber = TranscriptionService(get_blobs())
    return _transcriber


def get_engine(game_type: GameType):
    engine = _engines.get(game_type)
    if engine is None:
        engine = ENGINE_CLASSES[game_type](
            SessionStore(game_type),
            get_match_store(),
            get_push(),
            get_timers(),
            identity=get_identity(),
            blobs=get_blobs(),
            insights=get_insights(),
            transcriber=get_transcriber(),
        )
        _engines[game_type] = engine
    return engine


def get_engines() -> dict[GameType, object]:
    return {game_type: get_engine(game_type) for game_type in GAME_TYPES}


def get_compatibility_service() -> CompatibilityService:
    global _compatibility
    if _compatibility is None:
        _compatibility = CompatibilityService(
            get_engines(),
            get_match_store(),
            CompatibilityStore(),
            insights=get_insights(),
        )
    return _compatibility


# ── Auth ──────────────────────────────────────────────────────────────────────

_bearer = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> str:
    if credentials is None:
        raise Unauthenticated()
    return get_identity().authenticate(credentials.credentials)
