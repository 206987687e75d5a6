"""
Velora Games — Intimacy Spectrum

Thirty slider questions played live, always in catalog order (warm-up to
spiciest).  Each answer is an integer position from 0 (left label) to 100
(right label).  For every question both players answered::

    gap = |p1 - p2|        aligned <= 15 < close <= 30 < different

    compatibility_score = round(100 - mean(gap))
"""

from __future__ import annotations

from typing import Any, Optional

from app.catalogs import intimacy_spectrum as catalog
from app.errors import ValidationFailed
from app.schemas.enums import GameType
from app.schemas.insights import IntimacySpectrumInsights
from app.schemas.sessions import SyncSession
from app.services.sync_engine import SyncGameEngine, answered, paired_answers
from app.utils.scoring import mean, round_half_up

ALIGNED_MAX_GAP = 15
CLOSE_MAX_GAP = 30

_GAP_LABELS: tuple[tuple[int, str, str], ...] = (
    (10, "Perfect match", "🔥"),
    (20, "Hot compatibility", "💋"),
    (35, "Good chemistry", "✨"),
    (50, "Worth a conversation", "💬"),
    (70, "Different wavelengths", "🤔"),
)


def alignment_for_gap(gap: int) -> str:
    if gap <= ALIGNED_MAX_GAP:
        return "aligned"
    if gap <= CLOSE_MAX_GAP:
        return "close"
    return "different"


def gap_label(gap: int) -> dict[str, str]:
    """Player-facing wording for a gap."""
    for limit, label, emoji in _GAP_LABELS:
        if gap <= limit:
            return {"label": label, "emoji": emoji}
    return {"label": "Opposite desires", "emoji": "↔️"}


def calculate_results(doc: SyncSession) -> dict[str, Any]:
    gaps: list[int] = []
    counts = {"aligned": 0, "close": 0, "different": 0}
    timeouts = {"player1_timed_out": 0, "player2_timed_out": 0, "both_timed_out": 0}
    per_category: dict[str, dict[str, Any]] = {
        category: {"category": category, "total_questions": 0, "both_answered": 0, "gaps": []}
        for category in catalog.CATEGORIES
    }
    questions = []

    for number, r1, r2 in paired_answers(doc):
        question = catalog.QUESTIONS_BY_NUMBER[number]
        stats = per_category[question.category]
        stats["total_questions"] += 1

        a1, a2 = answered(r1), answered(r2)
        gap = alignment = None
        if a1 and a2:
            gap = abs(r1.answer - r2.answer)
            alignment = alignment_for_gap(gap)
            gaps.append(gap)
            counts[alignment] += 1
            stats["both_answered"] += 1
            stats["gaps"].append(gap)
        elif not a1 and not a2:
            timeouts["both_timed_out"] += 1
        elif not a1:
            timeouts["player1_timed_out"] += 1
        else:
            timeouts["player2_timed_out"] += 1

        questions.append({
            "question_number": number,
            "category": question.category,
            "player1_position": r1.answer if a1 else None,
            "player2_position": r2.answer if a2 else None,
            "gap": gap,
            "alignment": alignment,
        })

    breakdown = []
    for stats in per_category.values():
        avg = mean(stats.pop("gaps"))
        average_gap = round_half_up(avg) if avg is not None else None
        breakdown.append({
            **stats,
            "average_gap": average_gap,
            "compatibility_percent": max(0, 100 - average_gap) if average_gap is not None else None,
        })

    average_gap = mean(gaps)
    return {
        "total_questions": len(doc.question_order),
        "both_answered": len(gaps),
        **timeouts,
        "average_gap": round_half_up(average_gap) if average_gap is not None else None,
        "compatibility_score": round_half_up(100 - average_gap) if average_gap is not None else 0,
        "aligned_count": counts["aligned"],
        "close_count": counts["close"],
        "different_count": counts["different"],
        "gap_label": gap_label(round_half_up(average_gap))["label"] if average_gap is not None else None,
        "category_breakdown": breakdown,
        "questions": questions,
    }


class IntimacySpectrumService(SyncGameEngine):
    game_type = GameType.INTIMACY_SPECTRUM
    event_prefix = "is"
    question_count = len(catalog.QUESTIONS)
    shuffle_questions = False
    insight_schema = IntimacySpectrumInsights

    def validate_answer(self, answer: Any, story: Optional[str]) -> tuple[int, None]:
        # bool is an int subclass; True must not pass as position 1
        if isinstance(answer, bool) or not isinstance(answer, int):
            raise ValidationFailed("Position must be an integer between 0 and 100")
        if not 0 <= answer <= 100:
            raise ValidationFailed("Position must be an integer between 0 and 100")
        return answer, None

    def question_payload(self, question_number: int) -> dict[str, Any]:
        question = catalog.QUESTIONS_BY_NUMBER[question_number]
        info = catalog.CATEGORIES[question.category]
        return {
            "category": question.category,
            "category_name": info.name,
            "category_emoji": info.emoji,
            "text": question.text,
            "left_label": question.left_label,
            "right_label": question.right_label,
            "spice_level": question.spice_level,
        }

    def reveal_details(self, question_number: int, mine: Any, theirs: Any) -> dict[str, Any]:
        gap = abs(mine - theirs)
        label = gap_label(gap)
        return {
            "gap": gap,
            "alignment": alignment_for_gap(gap),
            "gap_label": label["label"],
            "gap_emoji": label["emoji"],
            # Positions are close enough to count as a match on the slider
            "matched": gap <= ALIGNED_MAX_GAP,
        }

    def compute_results(self, doc: SyncSession) -> dict[str, Any]:
        return calculate_results(doc)

    def build_insight_prompt(self, doc: SyncSession) -> str:
        results = doc.results
        alignments, differences = [], []
        for row in results["questions"]:
            if row["gap"] is None:
                continue
            question = catalog.QUESTIONS_BY_NUMBER[row["question_number"]]
            if row["gap"] <= ALIGNED_MAX_GAP:
                alignments.append(
                    f'"{question.text}" - Gap: {row["gap"]} '
                    f'({row["player1_position"]} vs {row["player2_position"]})'
                )
            elif row["gap"] >= 40:
                differences.append(
                    f'"{question.text}" - Gap: {row["gap"]} '
                    f'("{question.left_label}" <-> "{question.right_label}")'
                )

        category_text = "\n".join(
            f"- {c['category']}: average gap {c['average_gap']}, {c['compatibility_percent']}% compatible"
            for c in results["category_breakdown"]
            if c["average_gap"] is not None
        ) or "No category had answers from both players."
        alignment_text = "\n".join(f"{i}. {a}" for i, a in enumerate(alignments[:5], 1)) or "None."
        difference_text = "\n".join(f"{i}. {d}" for i, d in enumerate(differences[:5], 1)) or "None."

        return f"""You are a playful, sex-positive relationship coach. Analyze this couple's "Intimacy Spectrum" answers (sliders from 0 to 100 between two preferences) and describe their sexual compatibility. Be flirty but respectful, encouraging and specific.

=== OVERALL RESULTS ===
Compatibility Score: {results['compatibility_score']}%
Average position gap: {results['average_gap']} points
Aligned / close / different: {results['aligned_count']} / {results['close_count']} / {results['different_count']}

=== CATEGORY BREAKDOWN ===
{category_text}

=== HOTTEST ALIGNMENTS ===
{alignment_text}

=== BIGGEST DIFFERENCES ===
{difference_text}

Respond with a single JSON object:
{{
  "summary": "2-3 flirty sentences about their sexual compatibility",
  "hottest_alignments": ["three things they will enjoy together"],
  "worth_discussing": ["two topics to discuss before getting intimate"],
  "first_time_prediction": "a playful prediction about their first time together",
  "suggestion_to_try": "one specific thing to try based on their results"
}}"""
