"""
Velora Games — AI insight response schemas

Pydantic models the InsightService validates Gemini JSON against.  Every
field has a default so a partially filled response still normalises to the
full shape; a response that is not an object (or has wrongly typed fields)
is rejected and recorded as an ``insight_error``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class _InsightModel(BaseModel):
    model_config = {"extra": "ignore"}


# ── Synchronous games ─────────────────────────────────────────────────────────

class WouldYouRatherInsights(_InsightModel):
    summary: str = ""
    compatibility_highlights: list[str] = Field(default_factory=list)
    interesting_differences: list[str] = Field(default_factory=list)
    relationship_tip: str = ""


class IntimacySpectrumInsights(_InsightModel):
    summary: str = ""
    hottest_alignments: list[str] = Field(default_factory=list)
    worth_discussing: list[str] = Field(default_factory=list)
    first_time_prediction: str = ""
    suggestion_to_try: str = ""


class NeverHaveIEverInsights(_InsightModel):
    summary: str = ""
    shared_ground: list[str] = Field(default_factory=list)
    surprising_discoveries: list[str] = Field(default_factory=list)
    conversation_prompts: list[str] = Field(default_factory=list)
    trust_patterns: str = ""
    green_flags: list[str] = Field(default_factory=list)


# ── Asynchronous games ────────────────────────────────────────────────────────

class TwoTruthsInsights(_InsightModel):
    summary: str = ""
    observations: list[str] = Field(default_factory=list)
    fun_facts: list[str] = Field(default_factory=list)
    conversation_starters: list[str] = Field(default_factory=list)
    compatibility_score: Optional[int] = Field(default=None, ge=0, le=100)


ALIGNMENT_LEVELS = ("strong_alignment", "moderate_alignment", "different_approaches", "potential_conflict")


class ScenarioComparison(_InsightModel):
    alignment_score: int = Field(ge=0, le=100)
    alignment_level: str = "moderate_alignment"
    player1_summary: str = ""
    player2_summary: str = ""
    comparison_insight: str = ""
    discussion_prompt: str = ""

    @field_validator("alignment_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = (v or "").strip().lower()
        return v if v in ALIGNMENT_LEVELS else "moderate_alignment"


class WhatWouldYouDoInsights(_InsightModel):
    overall_summary: str = ""
    compatibility_analysis: str = ""
    communication_styles: str = ""
    values_alignment: str = ""
    potential_challenges: str = ""
    strengths_as_couple: str = ""
    advice_forward: str = ""


class HiddenNote(_InsightModel):
    category: str = ""
    insight: str = ""


class DreamBoardInsights(_InsightModel):
    overall_insight: str = ""
    aligned_dreams_summary: str = ""
    close_enough_summary: str = ""
    conversation_starters_summary: str = ""
    hidden_alignments: list[HiddenNote] = Field(default_factory=list)
    hidden_concerns: list[HiddenNote] = Field(default_factory=list)
    category_insights: dict[str, Any] = Field(default_factory=dict)

    @field_validator("hidden_alignments", "hidden_concerns", mode="before")
    @classmethod
    def _coerce_notes(cls, v):
        # Models sometimes return bare strings instead of objects.
        if not isinstance(v, list):
            return []
        return [{"insight": item} if isinstance(item, str) else item for item in v]


# ── Couple narrative ──────────────────────────────────────────────────────────

class LongTermPotential(_InsightModel):
    score: Optional[int] = Field(default=None, ge=0, le=100)
    assessment: str = ""
    factors: list[str] = Field(default_factory=list)


class Recommendations(_InsightModel):
    date_ideas: list[str] = Field(default_factory=list)
    conversation_topics: list[str] = Field(default_factory=list)
    areas_to_explore: list[str] = Field(default_factory=list)
    watch_out_for: list[str] = Field(default_factory=list)


class Verdict(_InsightModel):
    headline: str = ""
    summary: str = ""
    confidence: str = ""


class CoupleNarrative(_InsightModel):
    executive_summary: str = ""
    compatibility_narrative: str = ""
    relationship_dynamic: str = ""
    communication_analysis: str = ""
    long_term_potential: LongTermPotential = Field(default_factory=LongTermPotential)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    verdict: Verdict = Field(default_factory=Verdict)
