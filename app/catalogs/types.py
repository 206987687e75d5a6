"""Velora Games — catalog record types shared by the game engines."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class WouldYouRatherQuestion:
    number: int
    category: str
    option_a: str
    option_b: str
    insight: str
    spice_level: int


@dataclass(frozen=True)
class SpectrumQuestion:
    number: int
    category: str
    text: str
    left_label: str
    right_label: str
    insight: str
    spice_level: int


@dataclass(frozen=True)
class NeverHaveIEverStatement:
    number: int
    category: str
    text: str
    insight: str
    spice_level: int


@dataclass(frozen=True)
class Scenario:
    number: int
    category: str
    text: str
    insight: str
    core_question: str
    intensity: int
    suggested_duration: int
    analysis_hints: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DreamCard:
    card_id: str
    emoji: str
    title: str
    subtitle: str


@dataclass(frozen=True)
class DreamCategory:
    number: int
    category_id: str
    title: str
    emoji: str
    question: str
    insight: str
    analysis_hints: tuple[str, ...]
    cards: tuple[DreamCard, ...]

    def card(self, card_id: str) -> DreamCard | None:
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None


@dataclass(frozen=True)
class CategoryInfo:
    name: str
    emoji: str
    description: str
