"""
Velora Games — Dream Board

Asynchronous: each player picks one vision card (A-D) in each of ten life
categories and tags it with a priority and a timeline.  A selection can be
changed while the game is active; an optional voice elaboration (<=120 s)
rides on the selection and survives a re-pick.

Per-category alignment:

    same card     100 if priority and timeline match, 90 if one does, else 80
    different     both flow 70, one flow 55, both heart_set 25, else 45
                  +10 (max 100) for a matching timeline, except both heart_set

    aligned >=80, close 50-79, different 40-49, needs_conversation <40

``overall_alignment`` is the half-up rounded mean of the ten category scores.
"""

from __future__ import annotations

from typing import Any, Optional

from app.catalogs import dream_board as catalog
from app.errors import InvalidState, NotFound, TranscriptionFailed, ValidationFailed
from app.schemas.enums import AlignmentLevel, CardId, GameType, Priority, SessionStatus, Timeline
from app.schemas.insights import DreamBoardInsights
from app.schemas.sessions import DreamBoardSession, DreamSelection, Elaboration
from app.services.async_engine import AsyncGameEngine
from app.services.blob_store import validate_audio_upload, voice_object_path
from app.services.session_primitives import require_participant
from app.utils.scoring import mean, round_half_up

CATEGORY_COUNT = len(catalog.CATEGORIES)

SAME_CARD_ALL = 100
SAME_CARD_ONE_AXIS = 90
SAME_CARD = 80
BOTH_FLOW = 70
ONE_FLOW = 55
BOTH_HEART_SET = 25
DIFFERENT_CARDS = 45
TIMELINE_BONUS = 10


def alignment_level(score: int) -> AlignmentLevel:
    if score >= 80:
        return AlignmentLevel.ALIGNED
    if score >= 50:
        return AlignmentLevel.CLOSE
    if score >= 40:
        return AlignmentLevel.DIFFERENT
    return AlignmentLevel.NEEDS_CONVERSATION


def category_alignment(mine: DreamSelection, theirs: DreamSelection) -> tuple[int, AlignmentLevel]:
    same_priority = mine.priority == theirs.priority
    same_timeline = mine.timeline == theirs.timeline

    if mine.card_id == theirs.card_id:
        matching_axes = int(same_priority) + int(same_timeline)
        score = (SAME_CARD, SAME_CARD_ONE_AXIS, SAME_CARD_ALL)[matching_axes]
        return score, alignment_level(score)

    flows = int(mine.priority == Priority.FLOW) + int(theirs.priority == Priority.FLOW)
    both_heart_set = mine.priority == theirs.priority == Priority.HEART_SET
    if flows == 2:
        score = BOTH_FLOW
    elif flows == 1:
        score = ONE_FLOW
    elif both_heart_set:
        score = BOTH_HEART_SET
    else:
        score = DIFFERENT_CARDS
    if same_timeline and not both_heart_set:
        score = min(100, score + TIMELINE_BONUS)
    return score, alignment_level(score)


def _selection_view(category, selection: Optional[DreamSelection]) -> Optional[dict[str, Any]]:
    if selection is None:
        return None
    card = category.card(selection.card_id.value)
    return {
        "card_id": selection.card_id.value,
        "card_title": card.title if card else None,
        "card_emoji": card.emoji if card else None,
        "priority": selection.priority.value,
        "timeline": selection.timeline.value,
        "has_elaboration": selection.elaboration is not None,
        "elaboration_transcript": selection.elaboration.transcript if selection.elaboration else None,
    }


def calculate_results(doc: DreamBoardSession) -> dict[str, Any]:
    analysis = []
    counts = {level: 0 for level in AlignmentLevel}
    for category in catalog.CATEGORIES:
        s1 = doc.player1.selection_for(category.number)
        s2 = doc.player2.selection_for(category.number)
        if s1 is None or s2 is None:
            continue
        score, level = category_alignment(s1, s2)
        counts[level] += 1
        analysis.append({
            "category_number": category.number,
            "category_id": category.category_id,
            "category_title": category.title,
            "category_emoji": category.emoji,
            "player1": _selection_view(category, s1),
            "player2": _selection_view(category, s2),
            "same_card": s1.card_id == s2.card_id,
            "alignment_score": score,
            "alignment_level": level.value,
        })

    avg = mean(row["alignment_score"] for row in analysis)
    overall = round_half_up(avg) if avg is not None else 0
    return {
        "overall_alignment": overall,
        "compatibility_score": overall,
        "aligned_count": counts[AlignmentLevel.ALIGNED],
        "close_count": counts[AlignmentLevel.CLOSE],
        "different_count": counts[AlignmentLevel.DIFFERENT],
        "needs_conversation_count": counts[AlignmentLevel.NEEDS_CONVERSATION],
        "category_analysis": analysis,
    }


def _parse_choice(enum_cls, value: Any, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationFailed(f"Invalid {label}; expected one of: {allowed}") from None


class DreamBoardService(AsyncGameEngine):
    game_type = GameType.DREAM_BOARD
    event_prefix = "db"
    lifetime_setting = "DREAM_BOARD_SESSION_HOURS"
    question_count = CATEGORY_COUNT
    insight_schema = DreamBoardInsights

    @staticmethod
    def _category(category_number: Any):
        if isinstance(category_number, bool) or not isinstance(category_number, int):
            raise ValidationFailed("Invalid category number")
        category = catalog.CATEGORIES_BY_NUMBER.get(category_number)
        if category is None:
            raise ValidationFailed("Invalid category number")
        return category

    # ── Catalog ───────────────────────────────────────────────────────

    @staticmethod
    def category_payload(category) -> dict[str, Any]:
        return {
            "category_number": category.number,
            "category_id": category.category_id,
            "title": category.title,
            "emoji": category.emoji,
            "question": category.question,
            "insight": category.insight,
            "cards": [
                {"card_id": c.card_id, "emoji": c.emoji, "title": c.title, "subtitle": c.subtitle}
                for c in category.cards
            ],
        }

    def get_all_categories(self) -> dict[str, Any]:
        return {
            "categories": [self.category_payload(c) for c in catalog.CATEGORIES],
            "priorities": catalog.PRIORITY_INFO,
            "timelines": catalog.TIMELINE_INFO,
        }

    async def get_category(self, session_id: str, caller_id: str, category_number: int) -> dict[str, Any]:
        category = self._category(category_number)
        doc = await self.load_for(session_id, caller_id)
        me = doc.player_for(caller_id)
        current = me.selection_for(category.number)
        return {
            **self.category_payload(category),
            "priorities": catalog.PRIORITY_INFO,
            "timelines": catalog.TIMELINE_INFO,
            "current_selection": _selection_view(category, current),
            "progress": {"selected": me.total_selected, "total": CATEGORY_COUNT},
        }

    # ── Selections ────────────────────────────────────────────────────

    async def submit_selection(
        self,
        session_id: str,
        caller_id: str,
        category_number: int,
        card_id: Any,
        priority: Any,
        timeline: Any,
    ) -> dict[str, Any]:
        """Record (or replace) the caller's pick for one category."""
        category = self._category(category_number)
        card = _parse_choice(CardId, card_id, "card")
        priority = _parse_choice(Priority, priority, "priority")
        timeline = _parse_choice(Timeline, timeline, "timeline")
        now = self.now()

        def _select(doc: DreamBoardSession) -> tuple[bool, bool]:
            me = require_participant(doc, caller_id)
            self._require_active(doc)
            existing = me.selection_for(category.number)
            if existing is not None:
                existing.card_id = card
                existing.priority = priority
                existing.timeline = timeline
                existing.selected_at = now
                updated = True
            else:
                me.selections.append(DreamSelection(
                    category_number=category.number,
                    category_id=category.category_id,
                    card_id=card,
                    priority=priority,
                    timeline=timeline,
                    selected_at=now,
                ))
                me.selections.sort(key=lambda s: s.category_number)
                updated = False
            me.total_selected = len(me.selections)
            me.last_activity_at = now
            doc.last_activity_at = now
            if me.total_selected >= CATEGORY_COUNT and not me.is_complete:
                me.is_complete = True
                me.completed_at = now
            return updated, self._begin_analysis_if_done(doc, now)

        doc, (updated, began) = await self.store.mutate(session_id, _select)
        self.log.info(
            "dream_selection_recorded",
            session_id=session_id,
            user_id=caller_id,
            category_number=category.number,
            updated=updated,
        )
        await self._after_progress(doc, caller_id, began)

        me = doc.player_for(caller_id)
        return {
            "category_number": category.number,
            "updated": updated,
            "progress": {"selected": me.total_selected, "total": CATEGORY_COUNT},
            "is_complete": me.is_complete,
            "status": doc.status.value,
            "elaboration_hint": catalog.ELABORATION_HINTS.get(category.category_id),
            "has_elaboration": me.selection_for(category.number).elaboration is not None,
        }

    # ── Elaborations ──────────────────────────────────────────────────

    async def add_elaboration(
        self,
        session_id: str,
        caller_id: str,
        category_number: int,
        data: bytes,
        mime_type: str,
        duration_sec: float,
    ) -> dict[str, Any]:
        """Attach a voice clip to an existing selection, replacing any prior
        clip for that category."""
        category = self._category(category_number)
        limit = self.settings.ELABORATION_MAX_SECONDS
        if not 0 < duration_sec <= limit:
            raise ValidationFailed(f"Elaborations must be between 0 and {limit:g} seconds")
        mime_type = validate_audio_upload(data, mime_type)

        doc = await self.load_for(session_id, caller_id)
        self._require_active(doc)
        if doc.player_for(caller_id).selection_for(category.number) is None:
            raise InvalidState("Select a card for this category before adding an elaboration")

        path = voice_object_path(self.game_type.value, session_id, caller_id, f"c{category.number}", mime_type)
        blob_url = await self.blobs.put(data, mime_type, path)
        now = self.now()

        def _attach(d: DreamBoardSession) -> Optional[str]:
            me = require_participant(d, caller_id)
            self._require_active(d)
            selection = me.selection_for(category.number)
            if selection is None:
                raise InvalidState("Select a card for this category before adding an elaboration")
            replaced = selection.elaboration.blob_url if selection.elaboration else None
            selection.elaboration = Elaboration(
                blob_url=blob_url,
                mime_type=mime_type,
                duration_sec=duration_sec,
                added_at=now,
            )
            me.elaboration_count = sum(1 for s in me.selections if s.elaboration is not None)
            me.last_activity_at = now
            d.last_activity_at = now
            return replaced

        try:
            doc, replaced = await self.store.mutate(session_id, _attach)
        except Exception:
            await self.blobs.delete(blob_url)
            raise

        if replaced and replaced != blob_url:
            await self.blobs.delete(replaced)
        self.log.info(
            "elaboration_added",
            session_id=session_id,
            user_id=caller_id,
            category_number=category.number,
            duration_sec=duration_sec,
        )
        self.timers.spawn(
            self.transcribe_elaboration(session_id, caller_id, category.number),
            name=f"transcribe:{session_id}:{caller_id}:c{category.number}",
        )
        return {
            "category_number": category.number,
            "duration_sec": duration_sec,
            "elaboration_count": doc.player_for(caller_id).elaboration_count,
        }

    async def get_elaboration(self, session_id: str, caller_id: str, category_number: int) -> dict[str, Any]:
        category = self._category(category_number)
        doc = await self.load_for(session_id, caller_id)
        selection = doc.player_for(caller_id).selection_for(category.number)
        if selection is None or selection.elaboration is None:
            raise NotFound("Elaboration not found")
        elaboration = selection.elaboration
        url = elaboration.blob_url
        if self.blobs is not None:
            url = await self.blobs.signed_url(elaboration.blob_url)
        return {
            "category_number": category.number,
            "audio_url": url,
            "duration_sec": elaboration.duration_sec,
            "transcript": elaboration.transcript,
            "transcription_failed": elaboration.transcription_failed,
            "added_at": elaboration.added_at,
        }

    async def delete_elaboration(self, session_id: str, caller_id: str, category_number: int) -> dict[str, Any]:
        category = self._category(category_number)

        def _remove(d: DreamBoardSession) -> str:
            me = require_participant(d, caller_id)
            if d.status != SessionStatus.ACTIVE:
                raise InvalidState("Elaborations can only be removed while the game is in progress")
            selection = me.selection_for(category.number)
            if selection is None or selection.elaboration is None:
                raise NotFound("Elaboration not found")
            blob_url = selection.elaboration.blob_url
            selection.elaboration = None
            me.elaboration_count = sum(1 for s in me.selections if s.elaboration is not None)
            return blob_url

        doc, blob_url = await self.store.mutate(session_id, _remove)
        if self.blobs is not None:
            await self.blobs.delete(blob_url)
        self.log.info("elaboration_deleted", session_id=session_id, user_id=caller_id, category_number=category.number)
        return {
            "category_number": category.number,
            "elaboration_count": doc.player_for(caller_id).elaboration_count,
        }

    async def transcribe_elaboration(self, session_id: str, user_id: str, category_number: int) -> Optional[str]:
        """Transcribe one elaboration; failures are recorded and absorbed."""
        doc = await self.store.require(session_id)
        selection = doc.player_for(user_id).selection_for(category_number)
        if selection is None or selection.elaboration is None:
            return None
        elaboration = selection.elaboration
        if elaboration.transcript:
            return elaboration.transcript
        if self.transcriber is None:
            return None

        try:
            transcript = await self.transcriber.transcribe(elaboration.blob_url, elaboration.mime_type)
        except TranscriptionFailed as exc:
            self.log.warning(
                "elaboration_transcription_failed",
                session_id=session_id,
                user_id=user_id,
                category_number=category_number,
                error=exc.message,
            )
            transcript = None
        now = self.now()
        blob_url = elaboration.blob_url

        def _store(d: DreamBoardSession) -> None:
            s = d.player_for(user_id).selection_for(category_number)
            # The clip may have been replaced or removed meanwhile.
            if s is None or s.elaboration is None or s.elaboration.blob_url != blob_url:
                return
            if s.elaboration.transcript:
                return
            if transcript:
                s.elaboration.transcript = transcript
                s.elaboration.transcribed_at = now
                s.elaboration.transcription_failed = False
            else:
                s.elaboration.transcription_failed = True

        await self.store.mutate(session_id, _store)
        return transcript

    async def retry_transcription(self, session_id: str, caller_id: str, category_number: int) -> dict[str, Any]:
        category = self._category(category_number)
        doc = await self.load_for(session_id, caller_id)
        selection = doc.player_for(caller_id).selection_for(category.number)
        if selection is None or selection.elaboration is None:
            raise NotFound("Elaboration not found")
        transcript = await self.transcribe_elaboration(session_id, caller_id, category.number)
        if transcript is None:
            raise TranscriptionFailed()
        return {"category_number": category.number, "transcript": transcript}

    # ── Analysis ──────────────────────────────────────────────────────

    async def analyze(self, doc: DreamBoardSession):
        for player in (doc.player1, doc.player2):
            for selection in player.selections:
                if selection.elaboration and not selection.elaboration.transcript:
                    await self.transcribe_elaboration(doc.session_id, player.user_id, selection.category_number)
        doc = await self.store.require(doc.session_id)
        return await super().analyze(doc)

    def compute_results(self, doc: DreamBoardSession) -> dict[str, Any]:
        return calculate_results(doc)

    def build_insight_prompt(self, doc: DreamBoardSession, results: dict[str, Any]) -> str:
        def _choice(category, selection: DreamSelection) -> str:
            card = category.card(selection.card_id.value)
            priority = catalog.PRIORITY_INFO[selection.priority.value]["label"]
            timeline = catalog.TIMELINE_INFO[selection.timeline.value]["label"]
            line = f'"{card.title}" ({card.subtitle}); priority: {priority}; timeline: {timeline}'
            if selection.elaboration and selection.elaboration.transcript:
                line += f'\n    Voice note: "{selection.elaboration.transcript}"'
            return line

        blocks = []
        for row in results["category_analysis"]:
            category = catalog.CATEGORIES_BY_NUMBER[row["category_number"]]
            s1 = doc.player1.selection_for(category.number)
            s2 = doc.player2.selection_for(category.number)
            hints = ", ".join(category.analysis_hints)
            blocks.append(
                f"{category.emoji} {category.title} [{category.category_id}] "
                f"- {row['alignment_level']} ({row['alignment_score']}%)\n"
                f"  Look for: {hints}\n"
                f"  Player 1: {_choice(category, s1)}\n"
                f"  Player 2: {_choice(category, s2)}"
            )
        comparisons = "\n\n".join(blocks)

        return f"""You are a warm, perceptive relationship coach. A couple each built a vision board of their future across {CATEGORY_COUNT} life categories, choosing a card, how much it matters (priority) and when they want it (timeline). Some added voice notes explaining their choice.

=== SCORES ===
Overall alignment: {results['overall_alignment']}%
Aligned: {results['aligned_count']}, close: {results['close_count']}, different: {results['different_count']}, needs conversation: {results['needs_conversation_count']}

=== CATEGORY COMPARISONS ===
{comparisons}

INSTRUCTIONS:
1. Celebrate the dreams they share and name where they are close enough to meet in the middle.
2. Use the voice notes to find hidden alignments (different cards, same underlying wish) and hidden concerns (same card, different reasons).
3. Treat differences as conversations to have, not verdicts.

Respond with a single JSON object:
{{
  "overall_insight": "2-3 sentences on their shared vision",
  "aligned_dreams_summary": "what they already agree on",
  "close_enough_summary": "where small adjustments would bring them together",
  "conversation_starters_summary": "the most important conversations to have",
  "hidden_alignments": [{{"category": "category_id", "insight": "..."}}],
  "hidden_concerns": [{{"category": "category_id", "insight": "..."}}],
  "category_insights": {{"category_id": "one sentence per category"}}
}}"""

    # ── Views ─────────────────────────────────────────────────────────

    def session_view(self, doc: DreamBoardSession, viewer_id: str) -> dict[str, Any]:
        view = super().session_view(doc, viewer_id)
        me = doc.player_for(viewer_id)
        partner = doc.partner_of(viewer_id)
        view.update({
            "total_categories": CATEGORY_COUNT,
            "selected_categories": [s.category_number for s in me.selections],
            "your_progress": me.total_selected,
            "partner_progress": partner.total_selected,
            "your_elaborations": me.elaboration_count,
        })
        return view
