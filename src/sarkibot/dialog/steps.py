"""Dialog steps and per-turn outcome."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sarkibot.nlu.keywords import Decision
from sarkibot.nlu.types import PartialOrderState


class Step(str, Enum):
    """The question the bot is currently waiting on."""

    # Single-slot steps
    SONG_TYPE = "song_type"
    SONG_STYLE = "song_style"
    VOCAL = "vocal"
    RECIPIENT_RELATION = "recipient_relation"
    INCLUDE_NAME = "include_name"
    RECIPIENT_NAME = "recipient_name"
    STORY = "story"
    NOTES = "notes"

    # Combined steps
    SONG_SETTINGS = "song_settings"
    RECIPIENT_INFO = "recipient_info"
    STORY_AND_NOTES = "story_and_notes"

    # Closed questions
    CONFIRMATION = "confirmation"
    LYRICS_REVIEW = "lyrics_review"

    DONE = "done"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TurnOutcome:
    """Everything the caller needs after one user turn.

    Attributes:
        state: State after the turn (the input state on any failure)
        response: Turkish reply for the user
        step: Step that handled the turn
        next_step: Step to ask next
        accepted: Whether the turn changed the state
        error_code: Short error code when the turn fell back
        decision: Keyword decision for closed questions
    """

    state: PartialOrderState
    response: str
    step: Step
    next_step: Step
    accepted: bool = False
    error_code: Optional[str] = None
    decision: Optional[Decision] = None

    @property
    def fell_back(self) -> bool:
        return self.error_code is not None
