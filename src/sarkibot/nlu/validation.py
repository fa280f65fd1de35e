"""ValidationGate - hard length bounds for story and notes.

Rules are checked in order and the first violation wins:

1. story longer than 900 characters
2. story shorter than 20 characters
3. story + notes longer than 1200 characters
4. notes longer than 300 characters

Lengths are measured on trimmed text. Every violation raises
``ValidationError`` whose ``user_message`` states the bound (and the measured
length where it helps the user shorten the text).
"""

from __future__ import annotations

import logging
from typing import Optional

from sarkibot.core.exceptions import ValidationError
from sarkibot.i18n.messages import MessageCode, tr
from sarkibot.nlu.limits import (
    COMBINED_MAX_CHARS,
    NOTES_MAX_CHARS,
    STORY_MAX_CHARS,
    STORY_MIN_CHARS,
)

logger = logging.getLogger(__name__)


def measure(text: Optional[str]) -> int:
    """Character count used by every bound."""
    return len((text or "").strip())


class ValidationGate:
    """Enforce free-text length bounds before a slot is accepted."""

    def __init__(
        self,
        *,
        story_min: int = STORY_MIN_CHARS,
        story_max: int = STORY_MAX_CHARS,
        notes_max: int = NOTES_MAX_CHARS,
        combined_max: int = COMBINED_MAX_CHARS,
    ) -> None:
        self.story_min = story_min
        self.story_max = story_max
        self.notes_max = notes_max
        self.combined_max = combined_max

    def check_story(self, story: str, *, turn_id: str = "") -> None:
        length = measure(story)
        if length > self.story_max:
            raise ValidationError(
                f"story too long ({length} > {self.story_max})",
                turn_id=turn_id,
                field_name="story",
                length=length,
                limit=self.story_max,
                user_message=tr(MessageCode.STORY_TOO_LONG, length=length, limit=self.story_max),
            )
        if length < self.story_min:
            raise ValidationError(
                f"story too short ({length} < {self.story_min})",
                turn_id=turn_id,
                field_name="story",
                length=length,
                limit=self.story_min,
                user_message=tr(MessageCode.STORY_TOO_SHORT, length=length, limit=self.story_min),
            )

    def check_combined(self, *parts: Optional[str], turn_id: str = "") -> None:
        """Bound the total length of story + notes (or of one raw message)."""
        length = sum(measure(p) for p in parts)
        if length > self.combined_max:
            raise ValidationError(
                f"story and notes too long ({length} > {self.combined_max})",
                turn_id=turn_id,
                field_name="story_and_notes",
                length=length,
                limit=self.combined_max,
                user_message=tr(MessageCode.COMBINED_TOO_LONG, length=length, limit=self.combined_max),
            )

    def check_notes(self, notes: str, *, turn_id: str = "") -> None:
        length = measure(notes)
        if length > self.notes_max:
            raise ValidationError(
                f"notes too long ({length} > {self.notes_max})",
                turn_id=turn_id,
                field_name="notes",
                length=length,
                limit=self.notes_max,
                user_message=tr(MessageCode.NOTES_TOO_LONG, length=length, limit=self.notes_max),
            )

    def check(
        self,
        story: Optional[str] = None,
        notes: Optional[str] = None,
        *,
        turn_id: str = "",
    ) -> None:
        """Apply every applicable rule in order.

        ``story`` and ``notes`` may each be ``None`` when only one of them is
        being accepted this turn.

        Raises:
            ValidationError: first violated rule
        """
        logger.debug(
            "[validate] turn=%s story_chars=%s notes_chars=%s",
            turn_id,
            None if story is None else measure(story),
            None if notes is None else measure(notes),
        )
        if story is not None:
            self.check_story(story, turn_id=turn_id)
        if story is not None and notes is not None:
            self.check_combined(story, notes, turn_id=turn_id)
        if notes is not None:
            self.check_notes(notes, turn_id=turn_id)
