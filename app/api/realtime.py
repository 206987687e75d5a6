"""
Velora Games — Realtime gateway

One WebSocket per client tab at ``/realtime/ws?token=...``.  Frames are
``{"event": "<prefix>:<verb>", "data": {...}}`` in both directions; the
live games (``wyr``, ``is``, ``nhie``) accept commands over the socket and
every engine pushes its events through it.

State changes reach both players as engine events.  The caller also
gets a ``<prefix>:ack`` frame carrying the command result, or
``<prefix>:error`` ``{code, message}`` when the command was refused.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder

from app.api.deps import get_engine, get_identity, get_push
from app.errors import GameError, ValidationFailed
from app.schemas.enums import GameType

logger = structlog.get_logger("velora.realtime")

router = APIRouter()

LIVE_PREFIXES: dict[str, GameType] = {
    "wyr": GameType.WOULD_YOU_RATHER,
    "is": GameType.INTIMACY_SPECTRUM,
    "nhie": GameType.NEVER_HAVE_I_EVER,
}


def _require(data: dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise ValidationFailed(f"{key} is required")
    return value


class LiveConnection:
    """Dispatches one socket's commands and remembers which sessions it joined."""

    def __init__(self, websocket: WebSocket, user_id: str) -> None:
        self.websocket = websocket
        self.user_id = user_id
        self.joined: set[tuple[GameType, str]] = set()

    async def send(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": jsonable_encoder(data)})

    async def handle(self, frame: Any) -> None:
        if not isinstance(frame, dict) or not isinstance(frame.get("event"), str):
            await self.send("error", {"code": "VALIDATION", "message": "Frames must be {event, data}"})
            return
        prefix, _, verb = frame["event"].partition(":")
        game_type = LIVE_PREFIXES.get(prefix)
        if game_type is None or not verb:
            await self.send("error", {"code": "VALIDATION", "message": f"Unknown event {frame['event']!r}"})
            return
        data = frame.get("data") or {}
        try:
            if not isinstance(data, dict):
                raise ValidationFailed("data must be an object")
            result = await self.dispatch(game_type, verb, data)
        except GameError as exc:
            logger.info(
                "realtime_command_refused",
                user_id=self.user_id,
                event_name=frame["event"],
                code=exc.code,
            )
            await self.send(f"{prefix}:error", {"code": exc.code, "message": exc.message})
            return
        await self.send(f"{prefix}:ack", {"action": verb, "result": result})

    async def dispatch(self, game_type: GameType, verb: str, data: dict[str, Any]) -> Any:
        engine = get_engine(game_type)
        user_id = self.user_id

        if verb == "invite":
            doc = await engine.create_invitation(user_id, _require(data, "match_id"))
            return engine.session_view(doc, user_id)

        session_id = str(_require(data, "session_id"))

        if verb == "accept":
            doc = await engine.accept(session_id, user_id)
            self.joined.add((game_type, session_id))
            return engine.session_view(doc, user_id)
        if verb == "decline":
            doc = await engine.decline(session_id, user_id)
            return engine.session_view(doc, user_id)
        if verb in ("reconnect", "resume", "join"):
            view = await engine.connect(session_id, user_id)
            self.joined.add((game_type, session_id))
            return view
        if verb == "answer":
            question_index = _require(data, "question_index")
            self.joined.add((game_type, session_id))
            return await engine.record_answer(
                session_id, user_id, question_index, data.get("answer"), data.get("story")
            )
        if verb == "voice_note":
            duration = _require(data, "duration")
            if isinstance(duration, bool) or not isinstance(duration, (int, float)):
                raise ValidationFailed("duration must be a number")
            doc, note_index = await engine.append_voice_note(
                session_id,
                user_id,
                _require(data, "audio_url"),
                float(duration),
                data.get("related_question"),
            )
            return {"session_id": doc.session_id, "note_index": note_index}
        if verb == "listened":
            note_index = _require(data, "note_index")
            if isinstance(note_index, bool) or not isinstance(note_index, int):
                raise ValidationFailed("note_index must be an integer")
            await engine.mark_listened(session_id, user_id, note_index)
            return {"session_id": session_id, "note_index": note_index}
        if verb == "abandon":
            doc = await engine.abandon(session_id, user_id)
            self.joined.discard((game_type, session_id))
            return engine.session_view(doc, user_id)
        raise ValidationFailed(f"Unknown action {verb!r}")

    async def leave_all(self) -> None:
        """Last socket for the user closed: mark them away in every live game."""
        for game_type, session_id in self.joined:
            try:
                await get_engine(game_type).disconnect(session_id, self.user_id)
            except GameError as exc:
                logger.info(
                    "realtime_disconnect_skipped",
                    user_id=self.user_id,
                    session_id=session_id,
                    code=exc.code,
                )


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: str | None = Query(None)) -> None:
    try:
        user_id = get_identity().authenticate(token)
    except GameError as exc:
        await websocket.close(code=4001, reason=exc.message)
        return

    await websocket.accept()
    registry = get_push().registry
    connection_id = await registry.register(websocket, user_id)
    connection = LiveConnection(websocket, user_id)
    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except ValueError:
                await connection.send("error", {"code": "VALIDATION", "message": "Frames must be JSON"})
                continue
            await connection.handle(frame)
    except WebSocketDisconnect as exc:
        logger.info("websocket_closed", user_id=user_id, code=exc.code)
    finally:
        last = await registry.unregister(user_id, connection_id)
        if last:
            await connection.leave_all()
