"""
Velora Games — Never Have I Ever

Thirty statements played live.  ``True`` means "I have", ``False`` means
"I haven't"; an "I have" answer may carry a short story revealed to the
partner.

Discovery points per question (reported, not scored):

- both have       +3 each
- both haven't    +1 each
- answers differ  +5 to the one who has

``compatibility_score`` is the agreement rate: the share of questions both
answered where the answers agreed (both have or both haven't).
"""

from __future__ import annotations

from typing import Any, Optional

from app.catalogs import never_have_i_ever as catalog
from app.errors import ValidationFailed
from app.schemas.enums import GameType
from app.schemas.insights import NeverHaveIEverInsights
from app.schemas.sessions import SyncPlayer, SyncSession
from app.services.sync_engine import SyncGameEngine, answered, paired_answers
from app.utils.scoring import mean, percent

MAX_STORY_LENGTH = 500
MAX_CONVERSATION_STARTERS = 10

BOTH_HAVE_POINTS = 3
BOTH_HAVENT_POINTS = 1
DIFFERENT_POINTS = 5


def discovery_points(doc: SyncSession) -> tuple[int, int]:
    p1 = p2 = 0
    for _, r1, r2 in paired_answers(doc):
        if not (answered(r1) and answered(r2)):
            continue
        if r1.answer and r2.answer:
            p1 += BOTH_HAVE_POINTS
            p2 += BOTH_HAVE_POINTS
        elif not r1.answer and not r2.answer:
            p1 += BOTH_HAVENT_POINTS
            p2 += BOTH_HAVENT_POINTS
        elif r1.answer:
            p1 += DIFFERENT_POINTS
        else:
            p2 += DIFFERENT_POINTS
    return p1, p2


def _category_yes_count(player: SyncPlayer, category: str) -> int:
    return sum(
        1 for record in player.answers
        if record.answer is True and catalog.STATEMENTS_BY_NUMBER[record.question_number].category == category
    )


def calculate_badges(player: SyncPlayer) -> list[str]:
    badges = []
    i_have = sum(1 for r in player.answers if r.answer is True)
    i_havent = sum(1 for r in player.answers if r.answer is False)
    if i_have >= 20:
        badges.append("experienced")
    if i_havent >= 20:
        badges.append("pure_soul")
    if _category_yes_count(player, "dark_confessions") >= 3:
        badges.append("open_book")
    if _category_yes_count(player, "physical_intimacy") >= 3:
        badges.append("spicy_past")
    avg = mean(r.response_time_ms for r in player.answers if r.answer is not None and r.response_time_ms)
    if avg is not None and avg < 5000:
        badges.append("quick_draw")
    if player.total_timed_out == 0:
        badges.append("committed")
    return badges


def calculate_results(doc: SyncSession) -> dict[str, Any]:
    per_category = {
        category: {
            "category": category,
            "total_questions": 0,
            "both_have": 0,
            "both_havent": 0,
            "different": 0,
            "timed_out": 0,
        }
        for category in catalog.CATEGORIES
    }
    starters = []
    stories = []

    for number, r1, r2 in paired_answers(doc):
        statement = catalog.STATEMENTS_BY_NUMBER[number]
        stats = per_category[statement.category]
        stats["total_questions"] += 1

        for slot, record in (("player1", r1), ("player2", r2)):
            if record is not None and record.story:
                stories.append({"question_number": number, "player": slot, "story": record.story})

        if not (answered(r1) and answered(r2)):
            stats["timed_out"] += 1
        elif r1.answer and r2.answer:
            stats["both_have"] += 1
        elif not r1.answer and not r2.answer:
            stats["both_havent"] += 1
        else:
            stats["different"] += 1
            starters.append({
                "question_number": number,
                "statement_text": statement.text,
                "player1_answer": r1.answer,
                "player2_answer": r2.answer,
            })

    breakdown = []
    for stats in per_category.values():
        agreed = stats["both_have"] + stats["both_havent"]
        breakdown.append({
            **stats,
            "compatibility_percent": percent(agreed, agreed + stats["different"]),
        })

    both_have = sum(c["both_have"] for c in breakdown)
    both_havent = sum(c["both_havent"] for c in breakdown)
    different = sum(c["different"] for c in breakdown)
    p1_points, p2_points = discovery_points(doc)

    return {
        "total_questions": len(doc.question_order),
        "both_answered": both_have + both_havent + different,
        "total_shared_experiences": both_have,
        "total_innocent_together": both_havent,
        "total_secrets_unlocked": different,
        "compatibility_score": percent(both_have + both_havent, both_have + both_havent + different),
        "player1_points": p1_points,
        "player2_points": p2_points,
        "player1_badges": calculate_badges(doc.player1),
        "player2_badges": calculate_badges(doc.player2),
        "category_breakdown": breakdown,
        "conversation_starters": starters[:MAX_CONVERSATION_STARTERS],
        "stories": stories,
    }


class NeverHaveIEverService(SyncGameEngine):
    game_type = GameType.NEVER_HAVE_I_EVER
    event_prefix = "nhie"
    question_count = len(catalog.STATEMENTS)
    insight_schema = NeverHaveIEverInsights

    def validate_answer(self, answer: Any, story: Optional[str]) -> tuple[bool, Optional[str]]:
        if not isinstance(answer, bool):
            raise ValidationFailed("Answer must be true (I have) or false (I haven't)")
        if story is not None:
            if not isinstance(story, str):
                raise ValidationFailed("Story must be text")
            story = story.strip() or None
            if story and len(story) > MAX_STORY_LENGTH:
                raise ValidationFailed(f"Story must be at most {MAX_STORY_LENGTH} characters")
        return answer, story

    def question_payload(self, question_number: int) -> dict[str, Any]:
        statement = catalog.STATEMENTS_BY_NUMBER[question_number]
        info = catalog.CATEGORIES[statement.category]
        return {
            "category": statement.category,
            "category_name": info.name,
            "category_emoji": info.emoji,
            "text": statement.text,
            "spice_level": statement.spice_level,
        }

    def reveal_details(self, question_number: int, mine: Any, theirs: Any) -> dict[str, Any]:
        if mine and theirs:
            outcome = "both_have"
        elif not mine and not theirs:
            outcome = "both_havent"
        else:
            outcome = "different"
        return {"outcome": outcome}

    def on_answer_recorded(self, doc: SyncSession, question_number: int) -> None:
        doc.player1.discovery_points, doc.player2.discovery_points = discovery_points(doc)

    def compute_results(self, doc: SyncSession) -> dict[str, Any]:
        return calculate_results(doc)

    def build_insight_prompt(self, doc: SyncSession) -> str:
        results = doc.results

        def _profile(player: SyncPlayer, slot: str) -> str:
            i_have = sum(1 for r in player.answers if r.answer is True)
            i_havent = sum(1 for r in player.answers if r.answer is False)
            badges = ", ".join(results[f"{slot}_badges"]) or "None"
            return (
                f'"I have" answers: {i_have}\n'
                f'"I haven\'t" answers: {i_havent}\n'
                f"Discovery points: {results[f'{slot}_points']}\n"
                f"Badges: {badges}"
            )

        def _said(value: bool) -> str:
            return "I have" if value else "I haven't"

        category_text = "\n".join(
            f"- {c['category']}: {c['both_have']} shared, {c['both_havent']} both haven't, {c['different']} different"
            for c in results["category_breakdown"]
        )
        starter_text = "\n".join(
            f'- "Never have I ever {s["statement_text"]}": Player 1={_said(s["player1_answer"])}, '
            f'Player 2={_said(s["player2_answer"])}'
            for s in results["conversation_starters"][:5]
        ) or "None."

        return f"""You are a relationship insights expert analyzing a "Never Have I Ever" game between a couple exploring compatibility. Be warm, constructive and specific; each item should be 1-2 sentences.

=== GAME STATISTICS ===
Shared experiences (both "I have"): {results['total_shared_experiences']}
Innocent together (both "I haven't"): {results['total_innocent_together']}
Secrets unlocked (different answers): {results['total_secrets_unlocked']}
Agreement rate: {results['compatibility_score']}%

=== PLAYER 1 ===
{_profile(doc.player1, 'player1')}

=== PLAYER 2 ===
{_profile(doc.player2, 'player2')}

=== CATEGORY BREAKDOWN ===
{category_text}

=== KEY DIFFERENCES ===
{starter_text}

Respond with a single JSON object:
{{
  "summary": "2-3 sentences about how their experiences line up",
  "shared_ground": ["experiences and values they share"],
  "surprising_discoveries": ["differences worth exploring, not red flags"],
  "conversation_prompts": ["specific questions to ask each other"],
  "trust_patterns": "what their answers about honesty and the past suggest",
  "green_flags": ["positive signs from their answers"]
}}"""
