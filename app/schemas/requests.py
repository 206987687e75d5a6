"""
Velora Games — API request bodies
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class InviteRequest(BaseModel):
    match_id: str = Field(..., min_length=1)


class AnswerRequest(BaseModel):
    question_index: int = Field(..., ge=0)
    answer: Any
    story: Optional[str] = None


class StatementRoundIn(BaseModel):
    statements: list[str]
    lie_index: int


class StatementsRequest(BaseModel):
    rounds: list[StatementRoundIn]


class GuessIn(BaseModel):
    round_number: int
    selected_index: int


class GuessesRequest(BaseModel):
    answers: list[GuessIn]


class SelectionRequest(BaseModel):
    category_number: int
    card_id: str
    priority: str
    timeline: str


class ListenedRequest(BaseModel):
    note_index: int = Field(..., ge=0)
