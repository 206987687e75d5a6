"""
Velora Games — BlobStore adapter (Google Cloud Storage).

The GCS client is synchronous, so every call runs in a worker thread and is
bounded by ``BLOB_TIMEOUT_SECONDS``.  Stored objects are addressed by their
``gs://`` URI, which is what session documents keep; playback goes through
short-lived signed URLs.
"""

from __future__ import annotations

import asyncio
import uuid

import structlog

from app.config import get_settings
from app.errors import BlobUploadFailed, PayloadTooLarge, UnsupportedMediaType, ValidationFailed
from app.utils import storage

logger = structlog.get_logger("velora.blob_store")

_EXTENSIONS: dict[str, str] = {
    "audio/webm": "webm",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
    "audio/aac": "aac",
}


def validate_audio_upload(data: bytes, mime_type: str | None) -> str:
    """Check size and MIME type of an uploaded clip; returns the bare MIME type."""
    settings = get_settings()
    base_type = (mime_type or "").split(";")[0].strip().lower()
    if base_type not in settings.allowed_audio_types:
        raise UnsupportedMediaType(f"Unsupported audio format: {base_type or 'unknown'}")
    if not data:
        raise ValidationFailed("Audio file is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLarge(
            f"Audio exceeds {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MiB"
        )
    return base_type


def voice_object_path(game_type: str, session_id: str, user_id: str, suffix: str, mime_type: str) -> str:
    """``voice-notes/<game>/<session>/<user>_<suffix>_<rand>.<ext>``"""
    prefix = get_settings().GCS_VOICE_NOTE_PREFIX.rstrip("/")
    ext = _EXTENSIONS.get(mime_type, "bin")
    return f"{prefix}/{game_type}/{session_id}/{user_id}_{suffix}_{uuid.uuid4().hex[:8]}.{ext}"


class BlobStore:
    def __init__(self, timeout_seconds: float | None = None) -> None:
        settings = get_settings()
        self._timeout = timeout_seconds or settings.BLOB_TIMEOUT_SECONDS
        self._signed_url_minutes = settings.SIGNED_URL_EXPIRY_MINUTES

    async def _run(self, fn, *args):
        return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)

    async def put(self, data: bytes, mime_type: str, path: str) -> str:
        """Upload ``data`` and return its ``gs://`` URI."""
        try:
            url = await self._run(storage.upload_file, path, data, mime_type)
        except Exception as exc:
            logger.error("blob_upload_failed", path=path, error=str(exc))
            raise BlobUploadFailed() from exc
        logger.info("blob_uploaded", path=path, size_bytes=len(data), mime_type=mime_type)
        return url

    async def get(self, url: str) -> bytes:
        return await self._run(storage.download_file, url)

    async def signed_url(self, url: str) -> str:
        """Playback URL for a stored object; non-GCS URLs pass through unchanged."""
        if not url.startswith("gs://"):
            return url
        return await self._run(storage.generate_signed_url, url, self._signed_url_minutes)

    async def delete(self, url: str) -> None:
        try:
            await self._run(storage.delete_file, url)
        except Exception as exc:
            # Already detached from the session.
            logger.warning("blob_delete_failed", url=url, error=str(exc))
