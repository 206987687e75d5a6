"""
Velora Games — Would You Rather

Fifty A/B dilemmas played live.  Answers are ``"A"`` or ``"B"``; a question
counts as matched when both players picked the same option.

    compatibility_score = round(100 * matched_answers / both_answered)

Category breakdowns use the same ratio over the questions of that category
that both players answered.
"""

from __future__ import annotations

from typing import Any, Optional

from app.catalogs import would_you_rather as catalog
from app.errors import ValidationFailed
from app.schemas.enums import GameType, WyrChoice
from app.schemas.insights import WouldYouRatherInsights
from app.schemas.sessions import SyncSession
from app.services.sync_engine import SyncGameEngine, answered, paired_answers
from app.utils.scoring import mean, percent, round_half_up


def _option_text(question, choice: str) -> str:
    return question.option_a if choice == WyrChoice.A.value else question.option_b


def calculate_results(doc: SyncSession) -> dict[str, Any]:
    """Pure scoring over a finished (or partially finished) session."""
    totals = {
        "both_answered": 0,
        "matched_answers": 0,
        "different_answers": 0,
        "player1_timed_out": 0,
        "player2_timed_out": 0,
        "both_timed_out": 0,
    }
    per_category: dict[str, dict[str, int]] = {}

    for number, r1, r2 in paired_answers(doc):
        question = catalog.QUESTIONS_BY_NUMBER[number]
        stats = per_category.setdefault(question.category, {
            "total_questions": 0,
            "matched_answers": 0,
            "different_answers": 0,
            "both_timed_out": 0,
        })
        stats["total_questions"] += 1

        a1, a2 = answered(r1), answered(r2)
        if a1 and a2:
            totals["both_answered"] += 1
            if r1.answer == r2.answer:
                totals["matched_answers"] += 1
                stats["matched_answers"] += 1
            else:
                totals["different_answers"] += 1
                stats["different_answers"] += 1
        elif not a1 and not a2:
            totals["both_timed_out"] += 1
            stats["both_timed_out"] += 1
        elif not a1:
            totals["player1_timed_out"] += 1
        else:
            totals["player2_timed_out"] += 1

    breakdown = []
    for category in catalog.CATEGORIES:
        stats = per_category.get(category)
        if not stats:
            continue
        compared = stats["matched_answers"] + stats["different_answers"]
        breakdown.append({
            "category": category,
            **stats,
            "compatibility_percent": percent(stats["matched_answers"], compared),
        })

    ranked = sorted(
        (c for c in breakdown if c["matched_answers"] + c["different_answers"] > 0),
        key=lambda c: c["compatibility_percent"],
        reverse=True,
    )

    def _avg_ms(records) -> int:
        times = [r.response_time_ms for r in records if r.answer is not None and r.response_time_ms is not None]
        avg = mean(times)
        return round_half_up(avg) if avg is not None else 0

    return {
        "total_questions": len(doc.question_order),
        **totals,
        "compatibility_score": percent(totals["matched_answers"], totals["both_answered"]),
        "category_breakdown": breakdown,
        "strongest_category": ranked[0]["category"] if ranked else None,
        "weakest_category": ranked[-1]["category"] if ranked else None,
        "player1_average_response_ms": _avg_ms(doc.player1.answers),
        "player2_average_response_ms": _avg_ms(doc.player2.answers),
    }


class WouldYouRatherService(SyncGameEngine):
    game_type = GameType.WOULD_YOU_RATHER
    event_prefix = "wyr"
    question_count = len(catalog.QUESTIONS)
    insight_schema = WouldYouRatherInsights

    def validate_answer(self, answer: Any, story: Optional[str]) -> tuple[str, None]:
        if not isinstance(answer, str) or answer not in (WyrChoice.A.value, WyrChoice.B.value):
            raise ValidationFailed('Answer must be "A" or "B"')
        return answer, None

    def question_payload(self, question_number: int) -> dict[str, Any]:
        question = catalog.QUESTIONS_BY_NUMBER[question_number]
        info = catalog.CATEGORIES[question.category]
        return {
            "category": question.category,
            "category_name": info.name,
            "category_emoji": info.emoji,
            "option_a": question.option_a,
            "option_b": question.option_b,
            "spice_level": question.spice_level,
        }

    def reveal_details(self, question_number: int, mine: Any, theirs: Any) -> dict[str, Any]:
        question = catalog.QUESTIONS_BY_NUMBER[question_number]
        return {
            "your_choice": _option_text(question, mine),
            "partner_choice": _option_text(question, theirs),
            "insight": question.insight,
        }

    def compute_results(self, doc: SyncSession) -> dict[str, Any]:
        return calculate_results(doc)

    def build_insight_prompt(self, doc: SyncSession) -> str:
        results = doc.results
        alignments, differences = [], []
        for number, r1, r2 in paired_answers(doc):
            if not (answered(r1) and answered(r2)):
                continue
            question = catalog.QUESTIONS_BY_NUMBER[number]
            if r1.answer == r2.answer:
                alignments.append(
                    f'[{question.category}] Both chose: "{_option_text(question, r1.answer)}" - {question.insight}'
                )
            else:
                differences.append(
                    f'[{question.category}] Player 1: "{_option_text(question, r1.answer)}" vs '
                    f'Player 2: "{_option_text(question, r2.answer)}" - {question.insight}'
                )

        def _marker(pct: int) -> str:
            return "✅" if pct >= 70 else "🔶" if pct >= 40 else "⚠️"

        category_text = "\n".join(
            f"{_marker(c['compatibility_percent'])} {c['category']}: {c['compatibility_percent']}% "
            f"({c['matched_answers']}/{c['total_questions']})"
            for c in results["category_breakdown"]
        )
        alignment_text = "\n".join(f"{i}. {a}" for i, a in enumerate(alignments[:5], 1)) or "None."
        difference_text = "\n".join(f"{i}. {d}" for i, d in enumerate(differences[:5], 1)) or "None."

        return f"""You are a warm, insightful relationship compatibility analyst. Analyze this couple's "Would You Rather" game and give actionable, encouraging insights. Focus on how differences can complement each other. Be concise but meaningful and avoid generic advice.

=== OVERALL RESULTS ===
Compatibility Score: {results['compatibility_score']}%
Questions Matched: {results['matched_answers']}/{results['both_answered']}
Strongest Category: {results['strongest_category'] or 'n/a'}
Needs Discussion: {results['weakest_category'] or 'n/a'}

=== CATEGORY BREAKDOWN ===
{category_text}

=== KEY ALIGNMENTS ===
{alignment_text}

=== KEY DIFFERENCES ===
{difference_text}

Respond with a single JSON object:
{{
  "summary": "2-3 sentences about their overall compatibility",
  "compatibility_highlights": ["three compatibility strengths"],
  "interesting_differences": ["two interesting differences and what they mean"],
  "relationship_tip": "one specific, actionable tip based on their results"
}}"""
