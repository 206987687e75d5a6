"""
Velora Games — Two Truths & A Lie

Asynchronous: each player writes ten rounds of three statements, one of
them a lie.  Once both have written, each guesses the lie in every one of
the partner's rounds.  Per-player score is the number of correct guesses
(0-10).

    guess_rate     = (s1 + s2) / 20
    bluff_balance  = 1 - |s1 - s2| / 10
    compatibility  = round(100 * (0.8 * guess_rate + 0.2 * bluff_balance))
"""

from __future__ import annotations

from typing import Any

from app.errors import InvalidState, ValidationFailed
from app.schemas.enums import FINISHED_STATUSES, GameType, TwoTruthsPhase
from app.schemas.insights import TwoTruthsInsights
from app.schemas.sessions import LieGuess, StatementRound, TwoTruthsPlayer, TwoTruthsSession
from app.services.async_engine import AsyncGameEngine
from app.services.session_primitives import require_participant
from app.utils.scoring import round_half_up

ROUNDS = 10
STATEMENTS_PER_ROUND = 3
MAX_STATEMENT_LENGTH = 200


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def validate_rounds(rounds: Any) -> list[StatementRound]:
    """Check a statement batch and normalise it to ``StatementRound``s
    numbered 1-10 in submission order."""
    if not isinstance(rounds, (list, tuple)) or len(rounds) != ROUNDS:
        raise ValidationFailed(f"Must provide exactly {ROUNDS} rounds")

    validated = []
    for number, item in enumerate(rounds, 1):
        statements = _field(item, "statements")
        lie_index = _field(item, "lie_index")
        if not isinstance(statements, (list, tuple)) or len(statements) != STATEMENTS_PER_ROUND:
            raise ValidationFailed(f"Round {number} must have exactly {STATEMENTS_PER_ROUND} statements")
        cleaned = []
        for text in statements:
            if not isinstance(text, str) or not text.strip():
                raise ValidationFailed(f"Round {number} has an empty statement")
            if len(text.strip()) > MAX_STATEMENT_LENGTH:
                raise ValidationFailed(
                    f"Round {number} has a statement exceeding {MAX_STATEMENT_LENGTH} characters"
                )
            cleaned.append(text.strip())
        if isinstance(lie_index, bool) or not isinstance(lie_index, int) or not 0 <= lie_index < STATEMENTS_PER_ROUND:
            raise ValidationFailed(f"Round {number} must have exactly 1 lie")
        validated.append(StatementRound(round_number=number, statements=cleaned, lie_index=lie_index))
    return validated


def validate_guesses(guesses: Any) -> list[tuple[int, int]]:
    if not isinstance(guesses, (list, tuple)) or len(guesses) != ROUNDS:
        raise ValidationFailed(f"Must provide exactly {ROUNDS} answers")
    seen = set()
    parsed = []
    for item in guesses:
        round_number = _field(item, "round_number")
        selected = _field(item, "selected_index")
        if isinstance(round_number, bool) or not isinstance(round_number, int) or not 1 <= round_number <= ROUNDS:
            raise ValidationFailed(f"Invalid round number: {round_number}")
        if isinstance(selected, bool) or not isinstance(selected, int) or not 0 <= selected < STATEMENTS_PER_ROUND:
            raise ValidationFailed(f"Invalid selected index for round {round_number}")
        if round_number in seen:
            raise ValidationFailed(f"Duplicate answer for round {round_number}")
        seen.add(round_number)
        parsed.append((round_number, selected))
    return sorted(parsed)


def compatibility_score(s1: int, s2: int) -> int:
    guess_rate = (s1 + s2) / (2 * ROUNDS)
    bluff_balance = 1 - abs(s1 - s2) / ROUNDS
    return round_half_up(100 * (0.8 * guess_rate + 0.2 * bluff_balance))


def _round_reveal(author: TwoTruthsPlayer, guesser: TwoTruthsPlayer) -> list[dict[str, Any]]:
    guesses = {g.round_number: g for g in guesser.guesses}
    rows = []
    for rnd in author.rounds:
        guess = guesses.get(rnd.round_number)
        rows.append({
            "round_number": rnd.round_number,
            "statements": rnd.statements,
            "lie_index": rnd.lie_index,
            "partner_guess": guess.selected_index if guess else None,
            "guessed_correctly": guess.correct if guess else False,
        })
    return rows


def calculate_results(doc: TwoTruthsSession) -> dict[str, Any]:
    s1 = doc.player1.score or 0
    s2 = doc.player2.score or 0
    if s1 > s2:
        winner = "player1"
    elif s2 > s1:
        winner = "player2"
    else:
        winner = "tie"
    return {
        "total_rounds": ROUNDS,
        "player1_score": s1,
        "player2_score": s2,
        "total_correct": s1 + s2,
        "max_correct": 2 * ROUNDS,
        "winner": winner,
        "compatibility_score": compatibility_score(s1, s2),
        # Each list is that player's statements with the partner's guesses
        "player1_rounds": _round_reveal(doc.player1, doc.player2),
        "player2_rounds": _round_reveal(doc.player2, doc.player1),
    }


class TwoTruthsService(AsyncGameEngine):
    game_type = GameType.TWO_TRUTHS_LIE
    event_prefix = "ttl"
    lifetime_setting = "TWO_TRUTHS_SESSION_HOURS"
    question_count = ROUNDS
    insight_schema = TwoTruthsInsights

    # ── Writing ───────────────────────────────────────────────────────

    async def submit_statements(self, session_id: str, caller_id: str, rounds: Any) -> dict[str, Any]:
        validated = validate_rounds(rounds)
        now = self.now()

        def _submit(doc: TwoTruthsSession) -> bool:
            me = require_participant(doc, caller_id)
            self._require_active(doc)
            if me.statements_submitted_at is not None:
                raise InvalidState("Statements already submitted")
            me.rounds = validated
            me.statements_submitted_at = now
            me.phase = TwoTruthsPhase.SUBMITTED_STATEMENTS
            me.last_activity_at = now
            doc.last_activity_at = now
            partner = doc.partner_of(caller_id)
            if partner.statements_submitted_at is None:
                return False
            me.phase = TwoTruthsPhase.ANSWERING
            partner.phase = TwoTruthsPhase.ANSWERING
            return True

        doc, both_submitted = await self.store.mutate(session_id, _submit)
        self.log.info(
            "statements_submitted",
            session_id=session_id,
            user_id=caller_id,
            both_submitted=both_submitted,
        )
        await self._after_progress(doc, caller_id, False)
        if both_submitted:
            await self.emit_both(doc, "answering_open", {"session_id": doc.session_id})
        return {
            "session_id": doc.session_id,
            "phase": doc.player_for(caller_id).phase.value,
            "both_submitted": both_submitted,
        }

    async def get_my_statements(self, session_id: str, caller_id: str) -> list[dict[str, Any]]:
        doc = await self.load_for(session_id, caller_id)
        return [rnd.model_dump() for rnd in doc.player_for(caller_id).rounds]

    # ── Guessing ──────────────────────────────────────────────────────

    async def get_questions_to_answer(self, session_id: str, caller_id: str) -> list[dict[str, Any]]:
        """The partner's rounds.  The lie stays hidden until the game is
        finished."""
        doc = await self.load_for(session_id, caller_id)
        me = doc.player_for(caller_id)
        partner = doc.partner_of(caller_id)
        if doc.status in FINISHED_STATUSES:
            return _round_reveal(partner, me)
        if me.phase not in (TwoTruthsPhase.ANSWERING, TwoTruthsPhase.COMPLETED):
            raise InvalidState("Questions are not available until both of you have written your statements")
        guesses = {g.round_number: g.selected_index for g in me.guesses}
        return [
            {
                "round_number": rnd.round_number,
                "statements": rnd.statements,
                "your_guess": guesses.get(rnd.round_number),
            }
            for rnd in partner.rounds
        ]

    async def submit_guesses(self, session_id: str, caller_id: str, guesses: Any) -> dict[str, Any]:
        parsed = validate_guesses(guesses)
        now = self.now()

        def _guess(doc: TwoTruthsSession) -> tuple[int, bool]:
            me = require_participant(doc, caller_id)
            self._require_active(doc)
            if me.phase != TwoTruthsPhase.ANSWERING:
                if me.phase == TwoTruthsPhase.COMPLETED:
                    raise InvalidState("Answers already submitted")
                raise InvalidState("Game is not in the answering phase")
            partner_rounds = {r.round_number: r for r in doc.partner_of(caller_id).rounds}
            me.guesses = [
                LieGuess(
                    round_number=number,
                    selected_index=selected,
                    correct=partner_rounds[number].lie_index == selected,
                )
                for number, selected in parsed
            ]
            me.score = sum(1 for g in me.guesses if g.correct)
            me.guesses_submitted_at = now
            me.phase = TwoTruthsPhase.COMPLETED
            me.is_complete = True
            me.last_activity_at = now
            doc.last_activity_at = now
            return me.score, self._begin_analysis_if_done(doc, now)

        doc, (score, began) = await self.store.mutate(session_id, _guess)
        self.log.info("guesses_submitted", session_id=session_id, user_id=caller_id, score=score)
        await self._after_progress(doc, caller_id, began)
        me = doc.player_for(caller_id)
        return {
            "session_id": doc.session_id,
            "score": score,
            "total_rounds": ROUNDS,
            "results": [g.model_dump() for g in me.guesses],
            "status": doc.status.value,
        }

    # ── Scoring / insights ────────────────────────────────────────────

    def compute_results(self, doc: TwoTruthsSession) -> dict[str, Any]:
        return calculate_results(doc)

    def build_insight_prompt(self, doc: TwoTruthsSession, results: dict[str, Any]) -> str:
        def _rounds(rows: list[dict[str, Any]]) -> str:
            lines = []
            for row in rows:
                truths = [s for i, s in enumerate(row["statements"]) if i != row["lie_index"]]
                lie = row["statements"][row["lie_index"]]
                verdict = "guessed" if row["guessed_correctly"] else "fooled partner"
                lines.append(f"  Round {row['round_number']}: truths={truths} lie={lie!r} ({verdict})")
            return "\n".join(lines)

        return f"""You are a warm, insightful relationship analyst helping a couple who matched on a dating app discover their compatibility through a game of Two Truths and a Lie.

=== PLAYER 1 ===
Score: {results['player1_score']}/{ROUNDS} (lies of Player 2 correctly identified)
Statements:
{_rounds(results['player1_rounds'])}

=== PLAYER 2 ===
Score: {results['player2_score']}/{ROUNDS} (lies of Player 1 correctly identified)
Statements:
{_rounds(results['player2_rounds'])}

INSTRUCTIONS:
1. Judge compatibility (0-100) from shared interests or values in their truths, their communication style (creative lies vs straightforward), how well they read each other, and the topics they chose.
2. Write a warm 2-3 sentence summary of what the game revealed about them as a potential couple.
3. Give 3-4 specific observations, 2-3 fun facts from their truths, and 3 conversation starters.

Respond with a single JSON object:
{{
  "compatibility_score": 0,
  "summary": "...",
  "observations": ["..."],
  "fun_facts": ["..."],
  "conversation_starters": ["..."]
}}

Keep the tone warm, playful and encouraging. Focus on connection potential rather than judgment."""

    # ── Views ─────────────────────────────────────────────────────────

    def session_view(self, doc: TwoTruthsSession, viewer_id: str) -> dict[str, Any]:
        view = super().session_view(doc, viewer_id)
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        view.update({
            "your_phase": me.phase.value,
            "partner_phase": partner.phase.value,
            "you_submitted_statements": me.statements_submitted_at is not None,
            "partner_submitted_statements": partner.statements_submitted_at is not None,
            "your_score": me.score,
        })
        return view

    def results_view(self, doc: TwoTruthsSession, viewer_id: str) -> dict[str, Any]:
        view = super().results_view(doc, viewer_id)
        view["your_score"] = doc.player_for(viewer_id).score
        view["partner_score"] = doc.partner_of(viewer_id).score
        return view
