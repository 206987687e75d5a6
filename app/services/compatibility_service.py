"""
Velora Games — Couple Compatibility aggregator

Builds a cross-game profile for a couple from the latest finished session of
each game type.  Every game feeds exactly one dimension::

    two_truths_lie     -> intuition      would_you_rather  -> lifestyle
    intimacy_spectrum  -> physical       never_have_i_ever -> experience
    what_would_you_do  -> character      dream_board       -> future

The overall score is the unweighted mean of the available dimensions and
the confidence level is a function of how many game types are included.
Once three or more games are included an AI narrative is requested; if it
fails the numeric profile is still stored, with confidence lowered one step.

The profile is cached in ``couple_compatibility`` and only rebuilt by
``generate``.  ``get_dashboard`` compares the cached snapshot with a live
status query (one lookup per game type) to report ``update_available``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, Optional

import structlog

from app.config import get_settings
from app.errors import InsightUnavailable, InvalidState, NotFound, ValidationFailed
from app.schemas.compatibility import (
    CompatibilityProfile,
    ConversationStarter,
    DimensionScore,
    DiscussionArea,
    GameSnapshot,
    HiddenAlignment,
    RedFlag,
    Strength,
)
from app.schemas.enums import FINISHED_STATUSES, GAME_TYPES, ConfidenceLevel, Dimension, GameType
from app.schemas.insights import CoupleNarrative
from app.schemas.sessions import SessionEnvelope
from app.services.insight_service import insight_error_record
from app.services.session_primitives import utcnow
from app.utils.scoring import mean, round_half_up

logger = structlog.get_logger("velora.compatibility")

DIMENSIONS: dict[GameType, Dimension] = {
    GameType.TWO_TRUTHS_LIE: Dimension.INTUITION,
    GameType.WOULD_YOU_RATHER: Dimension.LIFESTYLE,
    GameType.INTIMACY_SPECTRUM: Dimension.PHYSICAL,
    GameType.NEVER_HAVE_I_EVER: Dimension.EXPERIENCE,
    GameType.WHAT_WOULD_YOU_DO: Dimension.CHARACTER,
    GameType.DREAM_BOARD: Dimension.FUTURE,
}

GAME_DISPLAY_INFO: dict[str, dict[str, str]] = {
    GameType.TWO_TRUTHS_LIE.value: {
        "display_name": "Two Truths & A Lie",
        "emoji": "🎭",
        "dimension": "intuition",
        "dimension_label": "Intuition",
        "description": "How well you read each other",
    },
    GameType.WOULD_YOU_RATHER.value: {
        "display_name": "Would You Rather",
        "emoji": "⚖️",
        "dimension": "lifestyle",
        "dimension_label": "Lifestyle",
        "description": "Daily life preferences",
    },
    GameType.INTIMACY_SPECTRUM.value: {
        "display_name": "Intimacy Spectrum",
        "emoji": "🔥",
        "dimension": "physical",
        "dimension_label": "Physical",
        "description": "Sexual compatibility",
    },
    GameType.NEVER_HAVE_I_EVER.value: {
        "display_name": "Never Have I Ever",
        "emoji": "🙊",
        "dimension": "experience",
        "dimension_label": "Experience",
        "description": "Past experiences alignment",
    },
    GameType.WHAT_WOULD_YOU_DO.value: {
        "display_name": "What Would You Do?",
        "emoji": "🎯",
        "dimension": "character",
        "dimension_label": "Character",
        "description": "Values & integrity",
    },
    GameType.DREAM_BOARD.value: {
        "display_name": "Dream Board",
        "emoji": "🌟",
        "dimension": "future",
        "dimension_label": "Future",
        "description": "Vision alignment",
    },
}

CONFIDENCE_LEVEL_INFO: dict[str, dict[str, str]] = {
    "minimal": {
        "label": "Just Getting Started",
        "description": "Play more games to build your compatibility picture",
        "games_range": "0",
    },
    "low": {
        "label": "Early Signals",
        "description": "Some patterns emerging, keep exploring",
        "games_range": "1-2",
    },
    "medium": {
        "label": "Good Understanding",
        "description": "Solid compatibility picture forming",
        "games_range": "3-4",
    },
    "high": {
        "label": "Complete Picture",
        "description": "Full compatibility assessment available",
        "games_range": "5-6",
    },
}

COMPATIBILITY_LEVEL_INFO: dict[str, dict[str, str]] = {
    "exploring": {
        "label": "Exploring",
        "description": "Some differences to discuss",
        "score_range": "0-54",
        "color": "#F59E0B",
    },
    "promising": {
        "label": "Promising",
        "description": "Good foundation with room to grow",
        "score_range": "55-69",
        "color": "#3B82F6",
    },
    "strong": {
        "label": "Strong",
        "description": "Great alignment across dimensions",
        "score_range": "70-84",
        "color": "#10B981",
    },
    "exceptional": {
        "label": "Exceptional",
        "description": "Remarkable compatibility",
        "score_range": "85-100",
        "color": "#8B5CF6",
    },
}

MAX_STRENGTHS = 10
MAX_DISCUSSION_AREAS = 10
MAX_CONVERSATION_STARTERS = 10
MAX_RED_FLAGS = 5
MAX_HIDDEN_ALIGNMENTS = 5
QUICK_SUMMARY_LENGTH = 200

_CONFIDENCE_ORDER = (
    ConfidenceLevel.MINIMAL,
    ConfidenceLevel.LOW,
    ConfidenceLevel.MEDIUM,
    ConfidenceLevel.HIGH,
)


# ── Pure scoring helpers ──────────────────────────────────────────────────────

def confidence_for(games_included: int) -> ConfidenceLevel:
    if games_included >= 5:
        return ConfidenceLevel.HIGH
    if games_included >= 3:
        return ConfidenceLevel.MEDIUM
    if games_included >= 1:
        return ConfidenceLevel.LOW
    return ConfidenceLevel.MINIMAL


def downgrade(level: ConfidenceLevel) -> ConfidenceLevel:
    index = _CONFIDENCE_ORDER.index(level)
    return _CONFIDENCE_ORDER[max(0, index - 1)]


def compatibility_level(score: Optional[int]) -> Optional[str]:
    if score is None:
        return None
    if score >= 85:
        return "exceptional"
    if score >= 70:
        return "strong"
    if score >= 55:
        return "promising"
    return "exploring"


def _results(doc: SessionEnvelope) -> dict[str, Any]:
    return doc.results or {}


def _insights(doc: SessionEnvelope) -> dict[str, Any]:
    return doc.ai_insights or {}


def game_score(doc: SessionEnvelope) -> Optional[int]:
    score = _results(doc).get("compatibility_score")
    return int(score) if score is not None else None


def quick_summary(game_type: GameType, doc: SessionEnvelope) -> str:
    results, insights = _results(doc), _insights(doc)
    if game_type == GameType.WHAT_WOULD_YOU_DO:
        summary = insights.get("overall_summary")
        fallback = results.get("compatibility_level") or "not_analyzed"
    elif game_type == GameType.DREAM_BOARD:
        summary = insights.get("overall_insight")
        fallback = f"{results.get('aligned_count', 0)}/10 aligned dreams"
    else:
        summary = insights.get("summary")
        if game_type == GameType.TWO_TRUTHS_LIE:
            fallback = f"{results.get('total_correct', 0)}/20 correct guesses"
        elif game_type == GameType.WOULD_YOU_RATHER:
            fallback = f"{results.get('matched_answers', 0)}/50 matched"
        elif game_type == GameType.INTIMACY_SPECTRUM:
            fallback = f"Average gap: {results.get('average_gap', 0)} points"
        else:
            fallback = f"{results.get('total_shared_experiences', 0)} shared experiences"
    if summary:
        return summary[:QUICK_SUMMARY_LENGTH]
    return fallback


def snapshot_for(game_type: GameType, doc: SessionEnvelope) -> GameSnapshot:
    return GameSnapshot(
        included=True,
        session_id=doc.session_id,
        completed_at=doc.completed_at,
        score=game_score(doc),
        quick_summary=quick_summary(game_type, doc),
    )


def game_insights(game_type: GameType, doc: SessionEnvelope) -> dict[str, Any]:
    """The per-game material the aggregation rules and the narrative draw on."""
    results, insights = _results(doc), _insights(doc)
    if game_type == GameType.TWO_TRUTHS_LIE:
        return {
            "observations": insights.get("observations", []),
            "fun_facts": insights.get("fun_facts", []),
            "conversation_starters": insights.get("conversation_starters", []),
        }
    if game_type == GameType.WOULD_YOU_RATHER:
        return {
            "compatibility_highlights": insights.get("compatibility_highlights", []),
            "interesting_differences": insights.get("interesting_differences", []),
            "strongest_category": results.get("strongest_category"),
            "weakest_category": results.get("weakest_category"),
        }
    if game_type == GameType.INTIMACY_SPECTRUM:
        return {
            "hottest_alignments": insights.get("hottest_alignments", []),
            "worth_discussing": insights.get("worth_discussing", []),
            "suggestion_to_try": insights.get("suggestion_to_try"),
        }
    if game_type == GameType.NEVER_HAVE_I_EVER:
        return {
            "shared_ground": insights.get("shared_ground", []),
            "surprising_discoveries": insights.get("surprising_discoveries", []),
            "badges": {
                "player1": results.get("player1_badges", []),
                "player2": results.get("player2_badges", []),
            },
        }
    if game_type == GameType.WHAT_WOULD_YOU_DO:
        return {
            "strongest_areas": results.get("strongest_areas", []),
            "areas_to_discuss": results.get("areas_to_discuss", []),
            "red_flags": results.get("red_flags", []),
            "green_flags": results.get("green_flags", []),
        }
    analysis = results.get("category_analysis", [])
    return {
        "aligned_dreams": [c for c in analysis if c.get("alignment_level") == "aligned"],
        "different_dreams": [
            c for c in analysis if c.get("alignment_level") in ("different", "needs_conversation")
        ],
        "hidden_alignments": insights.get("hidden_alignments", []),
        "hidden_concerns": insights.get("hidden_concerns", []),
    }


def _note_text(item: Any) -> str:
    if isinstance(item, dict):
        text = item.get("insight") or item.get("flag") or item.get("description") or ""
        category = item.get("category")
        return f"{category}: {text}" if category and text else text
    return str(item)


def aggregate_insights(profile: CompatibilityProfile, game_data: dict[GameType, dict[str, Any]]) -> None:
    """Fill strengths, discussion areas, starters, red flags and hidden
    alignments from the included games, in game order."""
    strengths, discussion, starters, red_flags, hidden = [], [], [], [], []

    for game_type in GAME_TYPES:
        data = game_data.get(game_type)
        if data is None:
            continue
        info = GAME_DISPLAY_INFO[game_type.value]
        label = info["dimension_label"]
        source = game_type.value
        score = data["score"]
        insights = data["insights"]

        if score is not None and score >= 70:
            strengths.append(Strength(
                area=label,
                description=f"Strong {label.lower()} compatibility from {info['display_name']}",
                source_game=source,
                importance="significant" if score >= 85 else "moderate",
            ))
        if score is not None and score < 60:
            discussion.append(DiscussionArea(
                area=label,
                description=f"Room for growth in {label.lower()} - explore this together",
                source_game=source,
                importance="significant" if score < 40 else "moderate",
            ))

        if game_type == GameType.TWO_TRUTHS_LIE:
            for question in insights["conversation_starters"]:
                starters.append(ConversationStarter(
                    question=str(question),
                    context=f"From your {info['display_name']} game",
                    source_game=source,
                ))
        elif game_type == GameType.WOULD_YOU_RATHER:
            for diff in insights["interesting_differences"][:2]:
                discussion.append(DiscussionArea(
                    area="Lifestyle Preferences", description=str(diff), source_game=source, importance="minor",
                ))
        elif game_type == GameType.INTIMACY_SPECTRUM:
            for alignment in insights["hottest_alignments"][:2]:
                strengths.append(Strength(
                    area="Physical Chemistry", description=str(alignment), source_game=source, importance="significant",
                ))
            for topic in insights["worth_discussing"][:2]:
                discussion.append(DiscussionArea(
                    area="Intimacy", description=str(topic), source_game=source, importance="moderate",
                ))
        elif game_type == GameType.WHAT_WOULD_YOU_DO:
            for flag in insights["red_flags"]:
                red_flags.append(RedFlag(
                    flag=_note_text(flag),
                    severity=flag.get("severity", "medium") if isinstance(flag, dict) else "medium",
                    source_game=source,
                ))
            for flag in insights["green_flags"][:2]:
                strengths.append(Strength(
                    area="Character", description=_note_text(flag), source_game=source, importance="significant",
                ))
        elif game_type == GameType.DREAM_BOARD:
            for note in insights["hidden_alignments"]:
                text = _note_text(note)
                if text:
                    hidden.append(HiddenAlignment(description=text, source_game=source))
            for dream in insights["aligned_dreams"][:2]:
                title = dream.get("category_title") or dream.get("category_id", "")
                strengths.append(Strength(
                    area="Shared Vision", description=f"Aligned on {title}", source_game=source, importance="moderate",
                ))

    profile.strengths = strengths[:MAX_STRENGTHS]
    profile.discussion_areas = discussion[:MAX_DISCUSSION_AREAS]
    profile.conversation_starters = starters[:MAX_CONVERSATION_STARTERS]
    profile.red_flags = red_flags[:MAX_RED_FLAGS]
    profile.hidden_alignments = hidden[:MAX_HIDDEN_ALIGNMENTS]


def build_profile(
    latest: dict[GameType, Optional[SessionEnvelope]],
    min_games_for_ai: int = 3,
) -> tuple[CompatibilityProfile, dict[GameType, dict[str, Any]]]:
    """Numeric profile and aggregated insights from the latest sessions.
    Returns the profile and the per-game data the narrative prompt uses."""
    profile = CompatibilityProfile()
    game_data: dict[GameType, dict[str, Any]] = {}

    for game_type in GAME_TYPES:
        doc = latest.get(game_type)
        if doc is None:
            continue
        snapshot = snapshot_for(game_type, doc)
        profile.games_snapshot[game_type.value] = snapshot
        if snapshot.score is not None:
            profile.dimension_scores[DIMENSIONS[game_type].value] = DimensionScore(
                available=True, score=snapshot.score, source_game=game_type.value,
            )
        game_data[game_type] = {"score": snapshot.score, "insights": game_insights(game_type, doc)}

    included = sum(1 for s in profile.games_snapshot.values() if s.included)
    profile.total_games_included = included
    available = [d.score for d in profile.dimension_scores.values() if d.available]
    avg = mean(available)
    overall = round_half_up(avg) if avg is not None else None
    profile.overall_compatibility.score = overall
    profile.overall_compatibility.level = compatibility_level(overall)
    profile.overall_compatibility.confidence = confidence_for(included)
    profile.games_needed_for_ai = min_games_for_ai
    profile.games_remaining_for_ai = max(0, min_games_for_ai - included)

    aggregate_insights(profile, game_data)
    return profile, game_data


def check_for_updates(
    snapshots: dict[str, GameSnapshot],
    current: dict[str, dict[str, Any]],
) -> dict[str, Any]:
    new_games = []
    for game_type in GAME_TYPES:
        status = current[game_type.value]
        if not status["completed"]:
            continue
        snapshot = snapshots.get(game_type.value)
        if snapshot is None or not snapshot.included:
            new_games.append(game_type.value)
        elif (
            snapshot.completed_at is None
            or (status["latest_completed_at"] and status["latest_completed_at"] > snapshot.completed_at)
        ):
            new_games.append(game_type.value)

    if len(new_games) == 1:
        reason = f"New game completed: {GAME_DISPLAY_INFO[new_games[0]]['display_name']}"
    elif new_games:
        reason = f"{len(new_games)} new games completed since last update"
    else:
        reason = None
    return {"update_available": bool(new_games), "reason": reason, "new_games": new_games}


def _parse_game_type(value: Any) -> GameType:
    try:
        return GameType(value)
    except ValueError:
        raise ValidationFailed(f"Unknown game type: {value}") from None


# ── Service ───────────────────────────────────────────────────────────────────

class CompatibilityService:
    """Dashboard, generation, history and game detail reads for a couple."""

    def __init__(
        self,
        engines: dict[GameType, Any],
        matches,
        store,
        *,
        insights=None,
        clock: Optional[Callable[[], datetime]] = None,
        poll_interval: float = 0.5,
    ) -> None:
        self.settings = get_settings()
        self.engines = engines
        self.matches = matches
        self.store = store
        self.insights = insights
        self.now = clock or utcnow
        self._poll_interval = poll_interval

    # ── Live status ───────────────────────────────────────────────────

    async def _latest_sessions(self, match_key: str) -> dict[GameType, Optional[SessionEnvelope]]:
        return {
            game_type: await self.engines[game_type].store.latest_finished(match_key)
            for game_type in GAME_TYPES
        }

    async def current_games_status(self, match_key: str) -> dict[str, dict[str, Any]]:
        status = {}
        for game_type, doc in (await self._latest_sessions(match_key)).items():
            store = self.engines[game_type].store
            status[game_type.value] = {
                "completed": doc is not None,
                "latest_completed_at": doc.completed_at if doc else None,
                "session_id": doc.session_id if doc else None,
                "play_count": await store.count_for_couple(match_key, FINISHED_STATUSES) if doc else 0,
            }
        return status

    @staticmethod
    def _metadata() -> dict[str, Any]:
        return {
            "game_display_info": GAME_DISPLAY_INFO,
            "confidence_level_info": CONFIDENCE_LEVEL_INFO,
            "compatibility_level_info": COMPATIBILITY_LEVEL_INFO,
        }

    # ── Dashboard ─────────────────────────────────────────────────────

    async def get_dashboard(self, match_id: str, caller_id: str) -> dict[str, Any]:
        match = await self.matches.resolve(match_id, caller_id)
        record = await self.store.get(match.match_key)
        current = await self.current_games_status(match.match_key)
        completed = [gt for gt, s in current.items() if s["completed"]]

        if record is None or not record.exists:
            empty = CompatibilityProfile(
                games_needed_for_ai=self.settings.MIN_GAMES_FOR_AI,
                games_remaining_for_ai=self.settings.MIN_GAMES_FOR_AI,
            )
            count = len(completed)
            return {
                "match_id": match_id,
                "exists": False,
                "last_generated_at": None,
                "update_available": count > 0,
                "update_reason": f"{count} game{'s' if count > 1 else ''} ready to analyze" if count else None,
                "new_games": completed,
                "current_games_status": current,
                "total_games_completed": count,
                **empty.model_dump(mode="json"),
                **self._metadata(),
            }

        profile = CompatibilityProfile.model_validate(record.document)
        update = check_for_updates(profile.games_snapshot, current)
        return {
            "match_id": match_id,
            "exists": True,
            "last_generated_at": record.last_generated_at,
            "update_available": update["update_available"],
            "update_reason": update["reason"],
            "new_games": update["new_games"],
            "current_games_status": current,
            "total_games_completed": len(completed),
            **profile.model_dump(mode="json"),
            **self._metadata(),
        }

    async def get_quick_status(self, match_id: str, caller_id: str) -> dict[str, Any]:
        match = await self.matches.resolve(match_id, caller_id)
        record = await self.store.get(match.match_key)
        if record is None or not record.exists:
            return {
                "exists": False,
                "last_generated_at": None,
                "total_games_included": 0,
                "overall_score": None,
                "ai_insights_available": False,
            }
        profile = CompatibilityProfile.model_validate(record.document)
        return {
            "exists": True,
            "last_generated_at": record.last_generated_at,
            "total_games_included": profile.total_games_included,
            "overall_score": profile.overall_compatibility.score,
            "ai_insights_available": profile.ai_insights is not None,
        }

    # ── Generation ────────────────────────────────────────────────────

    async def generate(self, match_id: str, caller_id: str) -> dict[str, Any]:
        """Rebuild the profile from the latest sessions.  Concurrent calls
        for one couple collapse to a single run; the others wait for it and
        return its dashboard."""
        match = await self.matches.resolve(match_id, caller_id)
        log = logger.bind(match_key=match.match_key, user_id=caller_id)
        now = self.now()

        record = await self.store.acquire(
            match.match_key,
            match.match_id,
            match.user_ids,
            now,
            self.settings.GENERATION_LOCK_SECONDS,
        )
        if record is None:
            log.info("compatibility_generation_joined")
            await self._wait_for_generation(match.match_key)
            return await self.get_dashboard(match_id, caller_id)

        document = None
        try:
            latest = await self._latest_sessions(match.match_key)
            profile, game_data = build_profile(latest, self.settings.MIN_GAMES_FOR_AI)
            if profile.total_games_included >= self.settings.MIN_GAMES_FOR_AI:
                await self._attach_narrative(profile, game_data, log)
            document = profile.model_dump(mode="json")
            log.info(
                "compatibility_generated",
                games_included=profile.total_games_included,
                overall_score=profile.overall_compatibility.score,
                ai_insights=profile.ai_insights_available,
            )
        finally:
            await self.store.release(record, document, self.now() if document is not None else None)

        return await self.get_dashboard(match_id, caller_id)

    async def _wait_for_generation(self, match_key: str) -> None:
        deadline = asyncio.get_running_loop().time() + self.settings.GENERATION_LOCK_SECONDS
        while asyncio.get_running_loop().time() < deadline:
            record = await self.store.get(match_key)
            if record is None or record.generating_since is None:
                return
            await asyncio.sleep(self._poll_interval)

    async def _attach_narrative(self, profile: CompatibilityProfile, game_data, log) -> None:
        if self.insights is None:
            return
        try:
            narrative = await self.insights.generate_json(
                self.build_narrative_prompt(profile, game_data),
                schema=CoupleNarrative,
                purpose="couple_narrative",
            )
        except InsightUnavailable as exc:
            log.warning("compatibility_narrative_failed", error=exc.message)
            profile.ai_insights = None
            profile.ai_insights_available = False
            profile.insight_error = insight_error_record(exc, self.now())
            profile.overall_compatibility.confidence = downgrade(profile.overall_compatibility.confidence)
            return
        profile.ai_insights = {**narrative, "generated_at": self.now().isoformat()}
        profile.ai_insights_available = True
        profile.insight_error = None

    def build_narrative_prompt(self, profile: CompatibilityProfile, game_data: dict[GameType, dict[str, Any]]) -> str:
        overall = profile.overall_compatibility
        dimension_text = "\n".join(
            f"- {name}: {d.score}%" for name, d in profile.dimension_scores.items() if d.available
        )
        game_text = "\n\n".join(
            f"{GAME_DISPLAY_INFO[gt.value]['display_name']} ({GAME_DISPLAY_INFO[gt.value]['dimension_label']})\n"
            f"Score: {data['score'] if data['score'] is not None else 'N/A'}%\n"
            f"Summary: {profile.games_snapshot[gt.value].quick_summary}\n"
            f"Key insights: {data['insights']}"
            for gt, data in game_data.items()
        )
        strengths = "\n".join(f"- {s.area}: {s.description}" for s in profile.strengths) or "None"
        discussion = "\n".join(f"- {d.area}: {d.description}" for d in profile.discussion_areas) or "None"
        concerns = "\n".join(f"- {r.flag} ({r.severity})" for r in profile.red_flags) or "None"
        hidden = "\n".join(f"- {h.description}" for h in profile.hidden_alignments) or "None"

        return f"""You are a relationship compatibility analyst for a dating app called Velora. You have data from {profile.total_games_included} compatibility games played by a couple.

=== OVERALL ===
Overall compatibility: {overall.score}%
Confidence: {overall.confidence.value}

=== DIMENSION SCORES ===
{dimension_text}

=== GAME-BY-GAME ===
{game_text}

=== AGGREGATED STRENGTHS ===
{strengths}

=== DISCUSSION AREAS ===
{discussion}

=== POTENTIAL CONCERNS ===
{concerns}

=== HIDDEN ALIGNMENTS (from voice analysis) ===
{hidden}

Be romantic and encouraging but honest. Focus on actionable insights in warm, conversational language.

Respond with a single JSON object:
{{
  "executive_summary": "3-4 sentence high-level summary of their compatibility",
  "compatibility_narrative": "3-4 paragraphs: what makes them click, complementary traits, friction points, overall dynamic",
  "relationship_dynamic": "their communication patterns and how they might navigate conflict",
  "communication_analysis": "openness, avoidance patterns and emotional intelligence shown in their answers",
  "long_term_potential": {{"score": 0, "assessment": "2-3 sentences", "factors": ["..."]}},
  "recommendations": {{
    "date_ideas": ["..."],
    "conversation_topics": ["..."],
    "areas_to_explore": ["..."],
    "watch_out_for": ["..."]
  }},
  "verdict": {{"headline": "3-5 words", "summary": "2-3 sentences", "confidence": "low | medium | high"}}
}}"""

    # ── History / details ─────────────────────────────────────────────

    async def get_game_history(self, match_id: str, caller_id: str) -> dict[str, Any]:
        match = await self.matches.resolve(match_id, caller_id)
        record = await self.store.get(match.match_key)
        snapshots = CompatibilityProfile.model_validate(record.document).games_snapshot if record and record.exists else {}

        games = []
        for game_type in GAME_TYPES:
            info = GAME_DISPLAY_INFO[game_type.value]
            store = self.engines[game_type].store
            doc = await store.latest_finished(match.match_key)
            entry = {"game_type": game_type.value, **info}
            if doc is None:
                entry.update({
                    "status": "not_played",
                    "completed_at": None,
                    "score": None,
                    "quick_summary": None,
                    "play_count": 0,
                    "session_id": None,
                    "included_in_compatibility": False,
                })
            else:
                snapshot = snapshots.get(game_type.value)
                entry.update({
                    "status": "completed",
                    "completed_at": doc.completed_at,
                    "score": game_score(doc),
                    "quick_summary": quick_summary(game_type, doc),
                    "play_count": await store.count_for_couple(match.match_key, FINISHED_STATUSES),
                    "session_id": doc.session_id,
                    "included_in_compatibility": snapshot is not None and snapshot.session_id == doc.session_id,
                })
            games.append(entry)

        return {
            "match_id": match_id,
            "games": games,
            "total_completed": sum(1 for g in games if g["status"] == "completed"),
            "total_games": len(GAME_TYPES),
        }

    async def get_game_details(
        self,
        match_id: str,
        game_type: Any,
        caller_id: str,
        session_id: Optional[str] = None,
    ) -> dict[str, Any]:
        game_type = _parse_game_type(game_type)
        match = await self.matches.resolve(match_id, caller_id)
        engine = self.engines[game_type]
        info = GAME_DISPLAY_INFO[game_type.value]

        if session_id:
            doc = await engine.store.require(session_id)
            if doc.match_key != match.match_key:
                raise NotFound("Game not found for this match")
            if doc.status not in FINISHED_STATUSES:
                raise InvalidState("This game is not complete yet")
        else:
            doc = await engine.store.latest_finished(match.match_key)
            if doc is None:
                return {"exists": False, "game_type": game_type.value, "display_info": info}

        return {
            "exists": True,
            "game_type": game_type.value,
            "display_info": info,
            "compatibility_score": game_score(doc),
            "quick_summary": quick_summary(game_type, doc),
            **engine.results_view(doc, caller_id),
            "voice_notes": await engine.get_voice_notes(doc.session_id, caller_id),
        }
