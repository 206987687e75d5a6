"""
Velora Games — InsightService adapter (Gemini JSON mode)

Thin wrapper around prompt submission and JSON response validation used by
every engine's post-game analysis and by the compatibility aggregator.

- Up to ``INSIGHT_MAX_ATTEMPTS`` attempts with a fixed back-off.  Timeouts,
  HTTP 429 and 5xx responses are transient; any other 4xx is terminal.
- Retries walk the model chain (primary, then fallback) so a struggling
  model is not hammered three times in a row.
- Responses larger than ``INSIGHT_MAX_RESPONSE_BYTES`` are rejected.
- Parsing tolerates markdown fences, leading/trailing chatter and mildly
  broken JSON (``json-repair``), and optionally validates against a
  pydantic schema.

Every failure surfaces as ``InsightUnavailable``; callers absorb it.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any

import google.generativeai as genai
import structlog
from google.generativeai.types import HarmBlockThreshold, HarmCategory
from json_repair import repair_json
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from app.config import get_settings
from app.errors import InsightUnavailable

logger = structlog.get_logger("velora.insight")

_TERMINAL_STATUS = re.compile(r"\b(400|401|403|404|409|413|422)\b")
_TRANSIENT_STATUS = re.compile(r"\b(429|500|502|503|504)\b")


def is_retryable_api_error(exc: BaseException) -> bool:
    """Return True if the exception signals a transient Gemini API error.

    Timeouts, HTTP 429 (rate limit) and 5xx are retried.  The SDK wraps
    these in several exception types, so both the type name and the string
    representation are inspected.  Any other 4xx is terminal.
    """
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, ConnectionError)):
        return True

    exc_str = str(exc).lower()
    exc_type = type(exc).__name__.lower()

    if _TERMINAL_STATUS.search(exc_str) and "429" not in exc_str:
        return False
    # Rate limit
    if "resource_exhausted" in exc_str or "resourceexhausted" in exc_type:
        return True
    # Server errors
    if _TRANSIENT_STATUS.search(exc_str):
        return True
    if any(name in exc_type for name in ("serviceunavailable", "internalservererror", "deadlineexceeded", "timeout")):
        return True
    return False


def parse_json_response(text: str) -> dict:
    """Parse a JSON object out of a model response.

    Pipeline:
    1. Direct ``json.loads`` on the raw text
    2. Markdown code-fence extraction
    3. Brace extraction (first ``{`` to last ``}``)
    4. ``json_repair`` on the raw text, then on the brace candidate

    Raises ``ValueError`` if no strategy yields a JSON object.
    """
    if not text or not text.strip():
        raise ValueError("Empty response text, cannot parse JSON")

    cleaned = text.strip()

    # Strategy 1: Direct parse
    try:
        result = json.loads(cleaned)
        if isinstance(result, dict):
            return result
    except (json.JSONDecodeError, TypeError):
        pass

    # Strategy 2: Markdown code-fence extraction
    md_match = re.search(r"```(?:json)?\s*\n?(.*?)\n?\s*```", cleaned, re.DOTALL)
    if md_match:
        try:
            result = json.loads(md_match.group(1).strip())
            if isinstance(result, dict):
                return result
        except (json.JSONDecodeError, TypeError):
            pass

    # Strategy 3: Brace extraction
    first_brace = cleaned.find("{")
    last_brace = cleaned.rfind("}")
    candidate = None
    if first_brace >= 0 and last_brace > first_brace:
        candidate = cleaned[first_brace : last_brace + 1]
        try:
            result = json.loads(candidate)
            if isinstance(result, dict):
                return result
        except (json.JSONDecodeError, TypeError):
            pass

    # Strategy 4: json_repair
    for source in (cleaned, candidate):
        if source is None:
            continue
        try:
            result = json.loads(repair_json(source))
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            logger.debug("json_repair_failed", error=str(exc))
            continue
        if isinstance(result, dict):
            logger.info("json_parsed_via_repair", original_preview=cleaned[:80])
            return result

    raise ValueError(f"Failed to parse JSON from model response. Preview: {cleaned[:200]}")


class InsightService:
    """Structured-JSON analysis over the Gemini API."""

    def __init__(
        self,
        model_chain: list[str] | None = None,
        max_attempts: int | None = None,
        retry_wait_seconds: float | None = None,
        timeout_seconds: float | None = None,
        max_response_bytes: int | None = None,
    ) -> None:
        settings = get_settings()
        genai.configure(api_key=settings.GEMINI_API_KEY)

        self._model_chain: list[str] = model_chain or [
            settings.GEMINI_MODEL_PRIMARY,
            settings.GEMINI_MODEL_FALLBACK,
        ]
        self._max_attempts = max_attempts or settings.INSIGHT_MAX_ATTEMPTS
        self._retry_wait = (
            retry_wait_seconds if retry_wait_seconds is not None else settings.INSIGHT_RETRY_WAIT_SECONDS
        )
        self._timeout = timeout_seconds or settings.INSIGHT_TIMEOUT_SECONDS
        self._max_response_bytes = max_response_bytes or settings.INSIGHT_MAX_RESPONSE_BYTES

        # Couples' answers touch intimacy and conflict; default blocking
        # would silently empty many responses.
        self._safety_settings = {
            HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
            HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
            HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
            HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
        }
        self._generation_config = genai.GenerationConfig(
            temperature=0.7,
            max_output_tokens=4096,
            response_mime_type="application/json",
        )

    def _model_for_attempt(self, attempt_number: int) -> str:
        return self._model_chain[min(attempt_number - 1, len(self._model_chain) - 1)]

    async def _call_with_retry(self, prompt: str, purpose: str) -> str:
        log = logger.bind(purpose=purpose)
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception(is_retryable_api_error),
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_fixed(self._retry_wait),
            ):
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    model_name = self._model_for_attempt(attempt_number)
                    log.debug("insight_call_attempt", model=model_name, attempt_number=attempt_number)

                    model = genai.GenerativeModel(model_name)
                    response = await asyncio.wait_for(
                        model.generate_content_async(
                            prompt,
                            safety_settings=self._safety_settings,
                            generation_config=self._generation_config,
                        ),
                        timeout=self._timeout,
                    )
                    text = response.text
                    if not text or not text.strip():
                        raise ValueError(f"Gemini returned empty text for model {model_name}")
                    return text
        except RetryError as retry_err:
            last_error = retry_err.last_attempt.exception()
            log.error(
                "insight_retry_exhausted",
                attempts=self._max_attempts,
                last_error=str(last_error),
            )
            raise InsightUnavailable("Insight service is temporarily unavailable", transient=True) from last_error
        except Exception as exc:
            log.error("insight_call_failed", error=str(exc), error_type=type(exc).__name__)
            raise InsightUnavailable(f"Insight request rejected: {type(exc).__name__}") from exc

        raise InsightUnavailable("Insight service returned no response")

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: type[BaseModel] | None = None,
        purpose: str = "insight",
    ) -> dict[str, Any]:
        """Submit ``prompt`` and return the parsed JSON object.

        When ``schema`` is given the object is validated and normalised
        through it (missing optional fields filled with their defaults).
        """
        text = await self._call_with_retry(prompt, purpose)

        size = len(text.encode("utf-8"))
        if size > self._max_response_bytes:
            logger.warning("insight_response_too_large", purpose=purpose, size_bytes=size)
            raise InsightUnavailable("Insight response exceeded the size limit")

        try:
            parsed = parse_json_response(text)
        except ValueError as exc:
            logger.warning("insight_unparseable", purpose=purpose, error=str(exc))
            raise InsightUnavailable("Insight response was not valid JSON") from exc

        if schema is None:
            return parsed
        try:
            return schema.model_validate(parsed).model_dump()
        except ValidationError as exc:
            logger.warning("insight_schema_mismatch", purpose=purpose, errors=exc.error_count())
            raise InsightUnavailable("Insight response did not match the expected shape") from exc


def insight_error_record(exc: InsightUnavailable, when) -> dict[str, Any]:
    """Structured ``insight_error`` stored on a session or profile."""
    return {
        "code": exc.code,
        "message": exc.message,
        "transient": exc.transient,
        "at": when.isoformat(),
    }
