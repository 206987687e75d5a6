"""
Velora Games — Couple compatibility profile schemas

The aggregated profile persisted in ``couple_compatibility.document``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from app.schemas.enums import GAME_TYPES, ConfidenceLevel, Dimension


class GameSnapshot(BaseModel):
    included: bool = False
    session_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    score: Optional[int] = None
    quick_summary: Optional[str] = None


class DimensionScore(BaseModel):
    available: bool = False
    score: Optional[int] = None
    source_game: Optional[str] = None


class OverallCompatibility(BaseModel):
    score: Optional[int] = None
    confidence: ConfidenceLevel = ConfidenceLevel.MINIMAL
    level: Optional[str] = None


class Strength(BaseModel):
    area: str
    description: str
    source_game: str
    importance: str = "moderate"


class DiscussionArea(BaseModel):
    area: str
    description: str
    source_game: str
    importance: str = "moderate"


class ConversationStarter(BaseModel):
    question: str
    context: Optional[str] = None
    source_game: str


class RedFlag(BaseModel):
    flag: str
    severity: str = "medium"
    source_game: str


class HiddenAlignment(BaseModel):
    description: str
    source_game: str


def _empty_snapshots() -> dict[str, GameSnapshot]:
    return {game_type.value: GameSnapshot() for game_type in GAME_TYPES}


def _empty_dimensions() -> dict[str, DimensionScore]:
    return {dimension.value: DimensionScore() for dimension in Dimension}


class CompatibilityProfile(BaseModel):
    games_snapshot: dict[str, GameSnapshot] = Field(default_factory=_empty_snapshots)
    total_games_included: int = 0
    dimension_scores: dict[str, DimensionScore] = Field(default_factory=_empty_dimensions)
    overall_compatibility: OverallCompatibility = Field(default_factory=OverallCompatibility)
    strengths: list[Strength] = Field(default_factory=list)
    discussion_areas: list[DiscussionArea] = Field(default_factory=list)
    conversation_starters: list[ConversationStarter] = Field(default_factory=list)
    red_flags: list[RedFlag] = Field(default_factory=list)
    hidden_alignments: list[HiddenAlignment] = Field(default_factory=list)
    ai_insights: Optional[dict[str, Any]] = None
    ai_insights_available: bool = False
    insight_error: Optional[dict[str, Any]] = None
    # Threshold for the AI narrative, and how many more game types reach it
    games_needed_for_ai: int = 0
    games_remaining_for_ai: int = 0
