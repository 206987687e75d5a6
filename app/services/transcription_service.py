"""
Velora Games — TranscriptionService adapter.

Downloads a stored voice clip and asks Gemini for a verbatim transcript.
Failures are reported as ``TranscriptionFailed``; the engines record the
clip as untranscribed and carry on.
"""

from __future__ import annotations

import asyncio

import google.generativeai as genai
import structlog
from tenacity import AsyncRetrying, RetryError, retry_if_exception, stop_after_attempt, wait_fixed

from app.config import get_settings
from app.errors import TranscriptionFailed
from app.services.insight_service import is_retryable_api_error

logger = structlog.get_logger("velora.transcription")

_TRANSCRIBE_PROMPT = (
    "Transcribe this voice note verbatim. It was recorded by a person answering "
    "a question in a relationship game. Return only the spoken words as plain "
    "text, without timestamps, speaker labels or commentary. If the audio "
    "contains no intelligible speech, return an empty response."
)


class TranscriptionService:
    def __init__(self, blob_store, model_name: str | None = None, timeout_seconds: float | None = None) -> None:
        settings = get_settings()
        genai.configure(api_key=settings.GEMINI_API_KEY)
        self._blob_store = blob_store
        self._model_name = model_name or settings.GEMINI_TRANSCRIPTION_MODEL
        self._timeout = timeout_seconds or settings.TRANSCRIPTION_TIMEOUT_SECONDS

    async def transcribe(self, blob_url: str, mime_type: str) -> str:
        """Return the transcript of the clip at ``blob_url``."""
        log = logger.bind(blob_url=blob_url)
        try:
            audio = await self._blob_store.get(blob_url)
        except Exception as exc:
            log.warning("transcription_download_failed", error=str(exc))
            raise TranscriptionFailed("Audio could not be downloaded") from exc

        model = genai.GenerativeModel(self._model_name)
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(is_retryable_api_error),
                stop=stop_after_attempt(2),
                wait=wait_fixed(1),
            ):
                with attempt:
                    response = await asyncio.wait_for(
                        model.generate_content_async(
                            [_TRANSCRIBE_PROMPT, {"mime_type": mime_type, "data": audio}]
                        ),
                        timeout=self._timeout,
                    )
                    text = (response.text or "").strip()
        except RetryError as retry_err:
            log.warning("transcription_retry_exhausted", error=str(retry_err.last_attempt.exception()))
            raise TranscriptionFailed() from retry_err
        except Exception as exc:
            log.warning("transcription_failed", error=str(exc), error_type=type(exc).__name__)
            raise TranscriptionFailed() from exc

        if not text:
            log.info("transcription_empty")
            raise TranscriptionFailed("No intelligible speech found")

        log.info("transcription_completed", characters=len(text))
        return text
