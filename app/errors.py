"""
Velora Games — Error taxonomy

Every failure the core surfaces to a caller is a ``GameError`` subclass
carrying a stable machine-readable ``code`` and the HTTP status it maps to.
Services raise these; ``app.main`` renders them as the
``{"ok": false, "code": ..., "message": ...}`` envelope and the realtime
gateway turns them into ``<prefix>:error`` events.
"""

from __future__ import annotations

from fastapi import status


class GameError(Exception):
    """Base class for all domain errors."""

    code: str = "INTERNAL"
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_envelope(self) -> dict:
        return {"ok": False, "code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code!r} message={self.message!r}>"


# ── Validation ────────────────────────────────────────────────────────────────

class ValidationFailed(GameError):
    code = "VALIDATION"
    http_status = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class PayloadTooLarge(GameError):
    code = "PAYLOAD_TOO_LARGE"
    http_status = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "Upload exceeds the maximum allowed size"


class UnsupportedMediaType(GameError):
    code = "UNSUPPORTED_MEDIA_TYPE"
    http_status = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_message = "Unsupported audio format"


# ── Auth ──────────────────────────────────────────────────────────────────────

class Unauthenticated(GameError):
    code = "UNAUTHENTICATED"
    http_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Missing or invalid credentials"


class NotParticipant(GameError):
    code = "NOT_PARTICIPANT"
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "You are not a participant in this game"


class NotInvitee(GameError):
    code = "NOT_INVITEE"
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "Only the invited player can respond to this invitation"


class NotMutual(GameError):
    code = "NOT_MUTUAL"
    http_status = status.HTTP_403_FORBIDDEN
    default_message = "Both users must have liked each other to play games"


# ── Missing ───────────────────────────────────────────────────────────────────

class NotFound(GameError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND
    default_message = "Game session not found"


class MatchNotFound(NotFound):
    code = "MATCH_NOT_FOUND"
    default_message = "Match not found"


# ── State / conflict ──────────────────────────────────────────────────────────

class InvalidState(GameError):
    code = "INVALID_STATE"
    http_status = status.HTTP_409_CONFLICT
    default_message = "Operation not allowed in the current game state"


class NotPending(InvalidState):
    code = "NOT_PENDING"
    default_message = "Invitation is no longer pending"


class ConflictActiveSession(InvalidState):
    code = "CONFLICT_ACTIVE_SESSION"
    default_message = "An active game of this type already exists between you two"


class SessionExpired(GameError):
    code = "EXPIRED"
    http_status = status.HTTP_410_GONE
    default_message = "Invitation has expired"


# ── Concurrency / resource ────────────────────────────────────────────────────

class ConcurrencyConflict(GameError):
    code = "CONCURRENCY"
    http_status = status.HTTP_409_CONFLICT
    default_message = "The game changed while you were acting; reload and retry"


class LimitReached(GameError):
    code = "LIMIT_REACHED"
    http_status = status.HTTP_409_CONFLICT
    default_message = "Limit reached"


# ── Dependencies ──────────────────────────────────────────────────────────────

class DependencyError(GameError):
    code = "DEPENDENCY"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An upstream dependency failed"


class StoreUnavailable(DependencyError):
    code = "STORE_UNAVAILABLE"


class BlobUploadFailed(DependencyError):
    code = "BLOB_UPLOAD_FAILED"
    default_message = "Could not store the audio file"


class TranscriptionFailed(DependencyError):
    code = "TRANSCRIPTION_FAILED"
    default_message = "Audio could not be transcribed"


class InsightUnavailable(DependencyError):
    code = "INSIGHT_UNAVAILABLE"
    default_message = "Insight generation is unavailable"

    def __init__(self, message: str | None = None, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient
