"""
Velora Games — Application Configuration

Loads all configuration from environment variables (and an optional .env file)
using Pydantic Settings.  A cached ``get_settings()`` helper is provided so that
FastAPI dependency-injection (and any other call-site) always receives the same
validated instance without re-parsing the environment on every request.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Velora games backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Gemini LLM (insights + transcription)
    # ------------------------------------------------------------------ #
    GEMINI_API_KEY: str
    GEMINI_MODEL_PRIMARY: str = "gemini-2.5-pro"
    GEMINI_MODEL_FALLBACK: str = "gemini-2.5-flash"
    GEMINI_TRANSCRIPTION_MODEL: str = "gemini-2.5-flash"

    # ------------------------------------------------------------------ #
    # Database – Cloud SQL via Unix socket or private IP
    # ------------------------------------------------------------------ #
    DATABASE_URL: str
    DB_USER: str = "velora_user"
    DB_PASSWORD: str = ""
    DB_NAME: str = "velora"
    DB_COMMAND_TIMEOUT_SECONDS: float = 10.0

    # ------------------------------------------------------------------ #
    # Redis – cross-instance push fan-out
    # ------------------------------------------------------------------ #
    REDIS_URL: str = ""
    PUSH_REDIS_CHANNEL: str = "velora:push"

    # ------------------------------------------------------------------ #
    # Identity tokens
    # ------------------------------------------------------------------ #
    FERNET_KEY: str  # Seals bearer tokens issued by the identity service
    IDENTITY_TOKEN_TTL_SECONDS: int = 7 * 24 * 3600

    # ------------------------------------------------------------------ #
    # Runtime environment
    # ------------------------------------------------------------------ #
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ------------------------------------------------------------------ #
    # Google Cloud Platform
    # ------------------------------------------------------------------ #
    GCP_PROJECT_ID: str = ""
    GCP_REGION: str = "asia-south1"
    GCS_BUCKET_NAME: str = ""
    GCS_VOICE_NOTE_PREFIX: str = "voice-notes/"
    SIGNED_URL_EXPIRY_MINUTES: int = 60
    CLOUD_SQL_INSTANCE_CONNECTION: str = ""
    CLOUD_SQL_USE_UNIX_SOCKET: bool = True

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    ALLOWED_ORIGINS: str = "*"

    # ------------------------------------------------------------------ #
    # Synchronous game loop
    # ------------------------------------------------------------------ #
    QUESTION_TIMEOUT_SECONDS: float = 15.0
    REVEAL_WINDOW_SECONDS: float = 3.0
    START_COUNTDOWN_SECONDS: float = 3.0
    SYNC_INVITATION_TTL_MINUTES: int = 5
    SYNC_SESSION_TTL_MINUTES: int = 60

    # ------------------------------------------------------------------ #
    # Asynchronous game lifetimes
    # ------------------------------------------------------------------ #
    TWO_TRUTHS_SESSION_HOURS: int = 48
    WHAT_WOULD_YOU_DO_SESSION_HOURS: int = 72
    DREAM_BOARD_SESSION_HOURS: int = 48
    ANALYSIS_GRACE_MINUTES: int = 60

    # ------------------------------------------------------------------ #
    # Session store / reaper
    # ------------------------------------------------------------------ #
    CAS_MAX_RETRIES: int = 5
    REAPER_INTERVAL_SECONDS: float = 30.0
    HISTORY_DEFAULT_LIMIT: int = 20
    HISTORY_MAX_LIMIT: int = 50

    # ------------------------------------------------------------------ #
    # Voice notes & uploads
    # ------------------------------------------------------------------ #
    VOICE_NOTES_PER_SESSION: int = 10
    VOICE_NOTES_PER_USER: int = 5
    DISCUSSION_NOTE_MAX_SECONDS: float = 60.0
    ELABORATION_MAX_SECONDS: float = 120.0
    SCENARIO_RESPONSE_MIN_SECONDS: float = 5.0
    SCENARIO_RESPONSE_MAX_SECONDS: float = 180.0
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    ALLOWED_AUDIO_TYPES: str = (
        "audio/webm,audio/mp4,audio/mpeg,audio/wav,audio/ogg,audio/x-m4a,audio/aac"
    )

    # ------------------------------------------------------------------ #
    # Dependency timeouts & insight policy
    # ------------------------------------------------------------------ #
    INSIGHT_TIMEOUT_SECONDS: float = 45.0
    INSIGHT_MAX_ATTEMPTS: int = 3
    INSIGHT_RETRY_WAIT_SECONDS: float = 2.0
    INSIGHT_MAX_RESPONSE_BYTES: int = 16 * 1024
    TRANSCRIPTION_TIMEOUT_SECONDS: float = 60.0
    BLOB_TIMEOUT_SECONDS: float = 30.0
    PUSH_SEND_TIMEOUT_SECONDS: float = 5.0
    MIN_GAMES_FOR_AI: int = 3
    GENERATION_LOCK_SECONDS: int = 180

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list split on commas."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    @property
    def allowed_audio_types(self) -> set[str]:
        return {t.strip() for t in self.ALLOWED_AUDIO_TYPES.split(",") if t.strip()}

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @field_validator(
        "VOICE_NOTES_PER_SESSION",
        "VOICE_NOTES_PER_USER",
        "CAS_MAX_RETRIES",
        "INSIGHT_MAX_ATTEMPTS",
        "MAX_UPLOAD_BYTES",
        "INSIGHT_MAX_RESPONSE_BYTES",
    )
    @classmethod
    def _limit_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Limit must be positive, got {v}")
        return v

    @field_validator("REAPER_INTERVAL_SECONDS")
    @classmethod
    def _reaper_interval_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 60.0:
            raise ValueError(f"Reaper interval must be within (0, 60] seconds, got {v}")
        return v

    @field_validator("QUESTION_TIMEOUT_SECONDS", "REVEAL_WINDOW_SECONDS", "START_COUNTDOWN_SECONDS")
    @classmethod
    def _timer_must_be_positive(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"Timer duration must be positive, got {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, validated ``Settings`` instance.

    Using ``@lru_cache`` guarantees the .env file is read and validated
    exactly once per process lifetime.  Import this function anywhere you
    need access to configuration::

        from app.config import get_settings
        settings = get_settings()
    """
    return Settings()  # type: ignore[call-arg]
