"""
Velora Games — Session documents

Each game type persists its session as one document: a shared envelope
(identity, players, lifecycle timestamps, voice-note log, results) plus an
engine-specific payload.  The store keeps the whole document in a JSONB
column and mirrors the indexed envelope fields into real columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from app.schemas.enums import (
    CardId,
    GameType,
    Priority,
    QuestionPhase,
    SessionStatus,
    Timeline,
    TwoTruthsPhase,
)


# ──────────────────────────────────────────────────────────────────────────────
# Shared pieces
# ──────────────────────────────────────────────────────────────────────────────

class VoiceNote(BaseModel):
    user_id: str
    blob_url: str
    duration_sec: float
    related_question: Optional[int] = None
    listened_by: list[str] = Field(default_factory=list)
    created_at: datetime


class PlayerBase(BaseModel):
    user_id: str
    is_connected: bool = False
    last_seen_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None


class SessionEnvelope(BaseModel):
    session_id: str
    game_type: GameType
    match_id: str
    match_key: str
    player1: PlayerBase
    player2: PlayerBase
    status: SessionStatus = SessionStatus.PENDING
    version: int = 0

    invited_at: datetime
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    expires_at: datetime
    last_activity_at: Optional[datetime] = None

    question_order: list[int] = Field(default_factory=list)

    results: Optional[dict[str, Any]] = None
    ai_insights: Optional[dict[str, Any]] = None
    insight_error: Optional[dict[str, Any]] = None

    voice_notes: list[VoiceNote] = Field(default_factory=list)

    # ── Participant helpers ───────────────────────────────────────────

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.player1.user_id, self.player2.user_id)

    def player_for(self, user_id: str):
        if user_id == self.player1.user_id:
            return self.player1
        if user_id == self.player2.user_id:
            return self.player2
        return None

    def partner_of(self, user_id: str):
        if user_id == self.player1.user_id:
            return self.player2
        if user_id == self.player2.user_id:
            return self.player1
        return None

    @property
    def user_ids(self) -> tuple[str, str]:
        return self.player1.user_id, self.player2.user_id


# ──────────────────────────────────────────────────────────────────────────────
# Synchronous engines (WYR, IS, NHIE)
# ──────────────────────────────────────────────────────────────────────────────

AnswerValue = Union[bool, int, str, None]


class AnswerRecord(BaseModel):
    question_number: int
    answer: AnswerValue = None
    story: Optional[str] = None
    answered_at: datetime
    response_time_ms: Optional[int] = None

    @property
    def timed_out(self) -> bool:
        return self.answer is None


class SyncPlayer(PlayerBase):
    answers: list[AnswerRecord] = Field(default_factory=list)
    total_answered: int = 0
    total_timed_out: int = 0
    average_response_time_ms: int = 0
    discovery_points: int = 0

    def answer_for(self, question_number: int) -> Optional[AnswerRecord]:
        for record in self.answers:
            if record.question_number == question_number:
                return record
        return None


class SyncSession(SessionEnvelope):
    player1: SyncPlayer
    player2: SyncPlayer
    current_question_index: int = 0
    question_phase: Optional[QuestionPhase] = None
    current_question_started_at: Optional[datetime] = None
    current_question_expires_at: Optional[datetime] = None
    reveal_ends_at: Optional[datetime] = None

    @property
    def current_question_number(self) -> Optional[int]:
        if 0 <= self.current_question_index < len(self.question_order):
            return self.question_order[self.current_question_index]
        return None


# ──────────────────────────────────────────────────────────────────────────────
# Two Truths & A Lie
# ──────────────────────────────────────────────────────────────────────────────

class StatementRound(BaseModel):
    round_number: int
    statements: list[str]
    lie_index: int


class LieGuess(BaseModel):
    round_number: int
    selected_index: int
    correct: bool


class TwoTruthsPlayer(PlayerBase):
    phase: TwoTruthsPhase = TwoTruthsPhase.WRITING
    rounds: list[StatementRound] = Field(default_factory=list)
    guesses: list[LieGuess] = Field(default_factory=list)
    statements_submitted_at: Optional[datetime] = None
    guesses_submitted_at: Optional[datetime] = None
    score: Optional[int] = None
    is_complete: bool = False


class TwoTruthsSession(SessionEnvelope):
    player1: TwoTruthsPlayer
    player2: TwoTruthsPlayer


# ──────────────────────────────────────────────────────────────────────────────
# What Would You Do
# ──────────────────────────────────────────────────────────────────────────────

class ScenarioResponse(BaseModel):
    question_number: int
    blob_url: str
    mime_type: str
    duration_sec: float
    submitted_at: datetime
    transcript: Optional[str] = None
    transcribed_at: Optional[datetime] = None
    transcription_failed: bool = False


class WhatWouldYouDoPlayer(PlayerBase):
    responses: list[ScenarioResponse] = Field(default_factory=list)
    total_answered: int = 0
    is_complete: bool = False
    completed_at: Optional[datetime] = None

    def response_for(self, question_number: int) -> Optional[ScenarioResponse]:
        for response in self.responses:
            if response.question_number == question_number:
                return response
        return None


class WhatWouldYouDoSession(SessionEnvelope):
    player1: WhatWouldYouDoPlayer
    player2: WhatWouldYouDoPlayer


# ──────────────────────────────────────────────────────────────────────────────
# Dream Board
# ──────────────────────────────────────────────────────────────────────────────

class Elaboration(BaseModel):
    blob_url: str
    mime_type: str
    duration_sec: float
    transcript: Optional[str] = None
    transcribed_at: Optional[datetime] = None
    transcription_failed: bool = False
    added_at: datetime


class DreamSelection(BaseModel):
    category_number: int
    category_id: str
    card_id: CardId
    priority: Priority
    timeline: Timeline
    selected_at: datetime
    elaboration: Optional[Elaboration] = None


class DreamBoardPlayer(PlayerBase):
    selections: list[DreamSelection] = Field(default_factory=list)
    total_selected: int = 0
    elaboration_count: int = 0
    is_complete: bool = False
    completed_at: Optional[datetime] = None

    def selection_for(self, category_number: int) -> Optional[DreamSelection]:
        for selection in self.selections:
            if selection.category_number == category_number:
                return selection
        return None


class DreamBoardSession(SessionEnvelope):
    player1: DreamBoardPlayer
    player2: DreamBoardPlayer


DOCUMENT_TYPES: dict[GameType, type[SessionEnvelope]] = {
    GameType.WOULD_YOU_RATHER: SyncSession,
    GameType.INTIMACY_SPECTRUM: SyncSession,
    GameType.NEVER_HAVE_I_EVER: SyncSession,
    GameType.TWO_TRUTHS_LIE: TwoTruthsSession,
    GameType.WHAT_WOULD_YOU_DO: WhatWouldYouDoSession,
    GameType.DREAM_BOARD: DreamBoardSession,
}

PLAYER_TYPES: dict[GameType, type[PlayerBase]] = {
    GameType.WOULD_YOU_RATHER: SyncPlayer,
    GameType.INTIMACY_SPECTRUM: SyncPlayer,
    GameType.NEVER_HAVE_I_EVER: SyncPlayer,
    GameType.TWO_TRUTHS_LIE: TwoTruthsPlayer,
    GameType.WHAT_WOULD_YOU_DO: WhatWouldYouDoPlayer,
    GameType.DREAM_BOARD: DreamBoardPlayer,
}
