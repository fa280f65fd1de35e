"""SlotFillingEngine - one user turn in, one TurnOutcome out.

Per turn::

    ValidationGate (free-text steps)
        → SlotExtractor → ResponseSanitizer → StyleGuard
        → MergeEngine
    closed questions: KeywordClassifier → MergeEngine (no oracle call)
    any SarkiBotError: FallbackResponder (state unchanged)

The engine holds no per-conversation state. The caller owns the
PartialOrderState, passes it in, and stores the one that comes back.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from sarkibot.config import EngineConfig
from sarkibot.core.exceptions import SarkiBotError, generate_turn_id
from sarkibot.dialog.fallback import FallbackResponder
from sarkibot.dialog.flow import next_step
from sarkibot.dialog.steps import Step, TurnOutcome
from sarkibot.i18n.messages import MessageCode, tr
from sarkibot.llm.base import Oracle
from sarkibot.nlu.contracts import (
    RECIPIENT_INFO_CONTRACT,
    RECIPIENT_NAME_CONTRACT,
    RECIPIENT_RELATION_CONTRACT,
    SONG_SETTINGS_CONTRACT,
    SONG_STYLE_CONTRACT,
    SONG_TYPE_CONTRACT,
    STORY_AND_NOTES_CONTRACT,
    STORY_QUALITY_CONTRACT,
    VOCAL_CONTRACT,
    ExtractionContract,
)
from sarkibot.nlu.extractor import SlotExtractor
from sarkibot.nlu.keywords import ClassificationResult, KeywordClassifier, Question
from sarkibot.nlu.merge import MergeEngine
from sarkibot.nlu.style_guard import StyleGuard
from sarkibot.nlu.types import ExtractionResult, PartialOrderState, Slot
from sarkibot.nlu.validation import ValidationGate

logger = logging.getLogger(__name__)

Handler = Callable[[str, PartialOrderState, str], TurnOutcome]

_EXTRACTION_STEPS: Dict[Step, ExtractionContract] = {
    Step.SONG_TYPE: SONG_TYPE_CONTRACT,
    Step.SONG_STYLE: SONG_STYLE_CONTRACT,
    Step.VOCAL: VOCAL_CONTRACT,
    Step.SONG_SETTINGS: SONG_SETTINGS_CONTRACT,
    Step.RECIPIENT_RELATION: RECIPIENT_RELATION_CONTRACT,
    Step.RECIPIENT_NAME: RECIPIENT_NAME_CONTRACT,
    Step.RECIPIENT_INFO: RECIPIENT_INFO_CONTRACT,
}


class SlotFillingEngine:
    """Wire the NLU components into a per-turn dialog handler."""

    def __init__(
        self,
        oracle: Oracle,
        *,
        combined_steps: bool = True,
        extractor: Optional[SlotExtractor] = None,
        merger: Optional[MergeEngine] = None,
        gate: Optional[ValidationGate] = None,
        classifier: Optional[KeywordClassifier] = None,
        fallback: Optional[FallbackResponder] = None,
    ) -> None:
        self.combined_steps = combined_steps
        self.extractor = extractor or SlotExtractor(oracle)
        self.merger = merger or MergeEngine()
        self.gate = gate or ValidationGate()
        self.classifier = classifier or KeywordClassifier()
        self.fallback = fallback or FallbackResponder()

        self._handlers: Dict[Step, Handler] = {step: self._extraction_handler(step) for step in _EXTRACTION_STEPS}
        self._handlers.update(
            {
                Step.INCLUDE_NAME: self._handle_include_name,
                Step.STORY: self._handle_story,
                Step.NOTES: self._handle_notes,
                Step.STORY_AND_NOTES: self._handle_story_and_notes,
                Step.CONFIRMATION: self._handle_confirmation,
                Step.LYRICS_REVIEW: self._handle_lyrics_review,
            }
        )

    @classmethod
    def from_config(cls, config: EngineConfig, oracle: Optional[Oracle] = None) -> "SlotFillingEngine":
        """Build an engine (and, unless given, an oracle client) from config."""
        if oracle is None:
            from sarkibot.llm.base import create_client
            oracle = create_client("openai", config=config)
        extractor = SlotExtractor(oracle, style_guard=StyleGuard(config.extra_artists))
        return cls(oracle, combined_steps=config.combined_steps, extractor=extractor)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def first_step(self, state: Optional[PartialOrderState] = None) -> Step:
        return next_step(state or PartialOrderState.empty(), combined=self.combined_steps)

    def handle(
        self,
        step: Step,
        text: str,
        state: PartialOrderState,
        *,
        turn_id: Optional[str] = None,
    ) -> TurnOutcome:
        """Process one user turn answering ``step``.

        Never raises for engine errors; those end in the fallback response
        with ``state`` returned unchanged.
        """
        turn_id = turn_id or generate_turn_id()
        handler = self._handlers.get(step)
        if handler is None:
            raise ValueError(f"No handler for step: {step}")

        logger.debug("[engine] turn=%s step=%s chars=%d", turn_id, step.value, len(text or ""))
        try:
            return handler(text or "", state, turn_id)
        except SarkiBotError as e:
            return self.fallback.respond(step, state, e)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _finish(
        self,
        step: Step,
        state: PartialOrderState,
        new_state: PartialOrderState,
        response: str,
        *,
        classification: Optional[ClassificationResult] = None,
    ) -> TurnOutcome:
        return TurnOutcome(
            state=new_state,
            response=response,
            step=step,
            next_step=next_step(new_state, combined=self.combined_steps),
            accepted=new_state != state,
            decision=classification.decision if classification else None,
        )

    def _apply(
        self,
        step: Step,
        state: PartialOrderState,
        values: Dict[Slot, object],
        response: str,
        turn_text: str,
        turn_id: str,
        *,
        classification: Optional[ClassificationResult] = None,
    ) -> TurnOutcome:
        """Merge values the user stated directly (explicit answers)."""
        result = ExtractionResult.of(values, response=response, explicit=True)
        outcome = self.merger.merge(state, result, turn_text, turn_id=turn_id)
        return self._finish(step, state, outcome.state, outcome.response, classification=classification)

    # ------------------------------------------------------------------
    # Oracle-backed steps
    # ------------------------------------------------------------------

    def _extraction_handler(self, step: Step) -> Handler:
        contract = _EXTRACTION_STEPS[step]

        def handle(text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
            result = self.extractor.extract(contract, text, state, turn_id=turn_id)
            outcome = self.merger.merge(state, result, text, turn_id=turn_id)
            return self._finish(step, state, outcome.state, outcome.response)

        return handle

    def _handle_story(self, text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
        story = (text or "").strip()
        self.gate.check(story=story, turn_id=turn_id)

        response = tr(MessageCode.STORY_ACCEPTED)
        try:
            judgment = self.extractor.extract_payload(STORY_QUALITY_CONTRACT, story, state, turn_id=turn_id)
        except SarkiBotError as e:
            # Bounds already hold; a failed judgment accepts the story.
            e.log()
        else:
            if not judgment.is_valid:
                logger.info("[engine] turn=%s story judged too thin", turn_id)
                return self._finish(Step.STORY, state, state, judgment.response)
            response = judgment.response or response

        return self._apply(Step.STORY, state, {Slot.STORY: story}, response, text, turn_id)

    def _handle_notes(self, text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
        if self.classifier.is_notes_skip(text):
            return self._apply(Step.NOTES, state, {Slot.NOTES: ""}, tr(MessageCode.NOTES_SKIPPED), text, turn_id)

        notes = (text or "").strip()
        story = state.get(Slot.STORY)
        if story:
            self.gate.check_combined(story, notes, turn_id=turn_id)
        self.gate.check(notes=notes, turn_id=turn_id)
        return self._apply(Step.NOTES, state, {Slot.NOTES: notes}, tr(MessageCode.NOTES_ACCEPTED), text, turn_id)

    def _handle_story_and_notes(self, text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
        message = (text or "").strip()
        self.gate.check_combined(message, turn_id=turn_id)
        if len(message) < self.gate.story_min:
            self.gate.check_story(message, turn_id=turn_id)

        response = tr(MessageCode.STORY_ACCEPTED)
        try:
            payload = self.extractor.extract_payload(STORY_AND_NOTES_CONTRACT, message, state, turn_id=turn_id)
        except SarkiBotError as e:
            # Unsplit text is taken as the story.
            e.log()
            story, notes = message, None
        else:
            story, notes = payload.story or message, payload.notes
            response = payload.response or response

        self.gate.check(story=story, notes=notes, turn_id=turn_id)
        values: Dict[Slot, object] = {Slot.STORY: story, Slot.NOTES: notes if notes is not None else ""}
        return self._apply(Step.STORY_AND_NOTES, state, values, response, text, turn_id)

    # ------------------------------------------------------------------
    # Closed questions (no oracle)
    # ------------------------------------------------------------------

    def _handle_include_name(self, text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
        answer = self.classifier.classify(Question.INCLUDE_NAME, text, turn_id=turn_id)
        code = MessageCode.INCLUDE_NAME_YES if answer.is_affirmative else MessageCode.INCLUDE_NAME_NO
        return self._apply(
            Step.INCLUDE_NAME,
            state,
            {Slot.INCLUDE_NAME: answer.is_affirmative},
            tr(code),
            text,
            turn_id,
            classification=answer,
        )

    def _handle_confirmation(self, text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
        answer = self.classifier.classify(Question.CONFIRMATION, text, turn_id=turn_id)
        code = MessageCode.ORDER_CONFIRMED if answer.is_affirmative else MessageCode.ORDER_CANCELLED
        return self._apply(
            Step.CONFIRMATION,
            state,
            {Slot.CONFIRMED: answer.is_affirmative},
            tr(code),
            text,
            turn_id,
            classification=answer,
        )

    def _handle_lyrics_review(self, text: str, state: PartialOrderState, turn_id: str) -> TurnOutcome:
        answer = self.classifier.classify(Question.LYRICS_REVIEW, text, turn_id=turn_id)
        code = MessageCode.LYRICS_APPROVED if answer.is_affirmative else MessageCode.LYRICS_REVISING
        return self._apply(
            Step.LYRICS_REVIEW,
            state,
            {Slot.LYRICS_REVIEW: answer.to_review()},
            tr(code),
            text,
            turn_id,
            classification=answer,
        )
