"""
Velora Games — PushChannel adapter

Delivers ``{"event": ..., "data": ...}`` frames to every WebSocket a user
has open.  Each process keeps a registry of its own sockets; when Redis is
configured, ``emit_to_user`` publishes to a shared channel and every
instance's listener delivers to its local sockets, so a user connected to
another replica still receives the event.

Delivery is best effort.  The session document is the source of truth and
reconnecting clients re-read it, so failures here are logged and dropped.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from app.config import get_settings

logger = structlog.get_logger("velora.push")


@dataclass
class ConnectionInfo:
    websocket: WebSocket
    user_id: str
    connection_id: str
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ConnectionRegistry:
    """Local user -> sockets map.  Supports several sockets per user."""

    def __init__(self) -> None:
        self._connections: dict[str, ConnectionInfo] = {}
        self._user_connections: dict[str, set[str]] = {}
        self._lock = asyncio.Lock()
        self._counter = 0

    async def register(self, websocket: WebSocket, user_id: str) -> str:
        async with self._lock:
            self._counter += 1
            connection_id = f"{user_id}_{self._counter}"
            self._connections[connection_id] = ConnectionInfo(
                websocket=websocket, user_id=user_id, connection_id=connection_id
            )
            self._user_connections.setdefault(user_id, set()).add(connection_id)
        logger.info("websocket_registered", user_id=user_id, connection_id=connection_id)
        return connection_id

    async def unregister(self, user_id: str, connection_id: str) -> bool:
        """Drop one socket; returns True when the user has none left."""
        async with self._lock:
            self._connections.pop(connection_id, None)
            conn_ids = self._user_connections.get(user_id)
            if conn_ids is not None:
                conn_ids.discard(connection_id)
                if not conn_ids:
                    del self._user_connections[user_id]
            remaining = user_id in self._user_connections
        logger.info("websocket_unregistered", user_id=user_id, connection_id=connection_id)
        return not remaining

    def is_online(self, user_id: str) -> bool:
        return bool(self._user_connections.get(user_id))

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def send_to_user(self, user_id: str, message: dict[str, Any], timeout: float) -> int:
        """Send to every local socket of ``user_id``; returns the number reached."""
        conn_ids = list(self._user_connections.get(user_id, ()))
        delivered = 0
        for conn_id in conn_ids:
            conn = self._connections.get(conn_id)
            if conn is None:
                continue
            try:
                await asyncio.wait_for(conn.websocket.send_json(message), timeout=timeout)
                delivered += 1
            except Exception as exc:
                logger.warning(
                    "push_send_failed",
                    user_id=user_id,
                    connection_id=conn_id,
                    error=str(exc),
                )
        return delivered


class PushChannel:
    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        redis_client: Any | None = None,
        channel: str | None = None,
        send_timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self.registry = registry or ConnectionRegistry()
        self._redis = redis_client
        self._channel = channel or settings.PUSH_REDIS_CHANNEL
        self._send_timeout = send_timeout or settings.PUSH_SEND_TIMEOUT_SECONDS

    def attach_redis(self, redis_client: Any | None) -> None:
        self._redis = redis_client

    async def emit_to_user(self, user_id: str, event: str, payload: dict[str, Any]) -> None:
        message = {"event": event, "data": jsonable_encoder(payload)}
        if self._redis is not None:
            try:
                await asyncio.wait_for(
                    self._redis.publish(
                        self._channel, json.dumps({"user_id": user_id, "message": message})
                    ),
                    timeout=self._send_timeout,
                )
                return
            except Exception as exc:
                logger.warning("push_publish_failed", user_id=user_id, event_name=event, error=str(exc))
        await self.registry.send_to_user(user_id, message, self._send_timeout)

    async def emit_to_users(self, user_ids, event: str, payload: dict[str, Any]) -> None:
        for user_id in user_ids:
            await self.emit_to_user(user_id, event, payload)

    async def run_listener(self) -> None:
        """Relay frames published by any instance to this instance's sockets."""
        if self._redis is None:
            return
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._channel)
        logger.info("push_listener_started", channel=self._channel)
        try:
            async for raw in pubsub.listen():
                if raw.get("type") != "message":
                    continue
                try:
                    envelope = json.loads(raw["data"])
                    user_id = envelope["user_id"]
                    message = envelope["message"]
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("push_envelope_invalid", error=str(exc))
                    continue
                await self.registry.send_to_user(user_id, message, self._send_timeout)
        finally:
            await pubsub.unsubscribe(self._channel)
            await pubsub.aclose()
            logger.info("push_listener_stopped")
