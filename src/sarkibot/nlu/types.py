"""Core types for the slot-filling engine.

This module defines the data model shared by every component:

- ``Slot``: named order attributes
- ``SlotValue``: explicit per-slot tri-state (unset / value / correction)
- ``ExtractionResult``: one turn's oracle-derived slot values + response
- ``PartialOrderState``: immutable slot → value mapping owned by the session
- ``CollectionGroup``: slots that are collected together
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


# ============================================================================
# Enums
# ============================================================================


class Slot(str, Enum):
    """Order attributes collected from the conversation."""

    SONG_TYPE = "song_type"
    ARTIST_STYLE = "artist_style_description"
    SONG_STYLE = "song_style"
    VOCAL = "vocal"
    RECIPIENT_RELATION = "recipient_relation"
    RECIPIENT_NAME = "recipient_name"
    INCLUDE_NAME = "include_name_in_song"
    STORY = "story"
    NOTES = "notes"
    CONFIRMED = "confirmed"
    LYRICS_REVIEW = "lyrics_review"

    def __str__(self) -> str:
        return self.value

    @property
    def has_vocabulary(self) -> bool:
        """Slots with a conventional closed vocabulary."""
        return self in {Slot.SONG_TYPE, Slot.SONG_STYLE, Slot.VOCAL}


class Vocal(str, Enum):
    """Vocal preference."""

    FEMALE = "female"
    MALE = "male"
    NO_PREFERENCE = "no_preference"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        """User-facing Turkish label."""
        return {
            Vocal.FEMALE: "Kadın",
            Vocal.MALE: "Erkek",
            Vocal.NO_PREFERENCE: "Fark etmez",
        }[self]


class ReviewAction(str, Enum):
    """Lyrics review decision."""

    APPROVE = "approve"
    REVISE = "revise"

    def __str__(self) -> str:
        return self.value


class SlotValueKind(str, Enum):
    """How an incoming value relates to the stored one."""

    UNSET = "unset"            # no usable value this turn (never clears a slot)
    VALUE = "value"            # fills an unset slot; kept out if slot already set
    CORRECTION = "correction"  # explicitly replaces whatever is stored


# ============================================================================
# Values
# ============================================================================


@dataclass(frozen=True)
class LyricsReview:
    """Outcome of a lyrics review turn."""

    action: ReviewAction
    revision_request: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action.value, "revision_request": self.revision_request}


@dataclass(frozen=True)
class SlotValue:
    """Tri-state wrapper for one slot in one extraction."""

    kind: SlotValueKind = SlotValueKind.UNSET
    value: Any = None

    def __post_init__(self) -> None:
        if self.kind != SlotValueKind.UNSET and self.value is None:
            object.__setattr__(self, "kind", SlotValueKind.UNSET)

    @classmethod
    def unset(cls) -> "SlotValue":
        return cls(SlotValueKind.UNSET, None)

    @classmethod
    def of(cls, value: Any) -> "SlotValue":
        """Plain extracted value; ``None`` becomes unset."""
        return cls(SlotValueKind.VALUE, value)

    @classmethod
    def correction(cls, value: Any) -> "SlotValue":
        """Explicit replacement value; ``None`` becomes unset."""
        return cls(SlotValueKind.CORRECTION, value)

    @property
    def is_unset(self) -> bool:
        return self.kind == SlotValueKind.UNSET

    def promoted(self) -> "SlotValue":
        """The same value as an explicit correction."""
        if self.is_unset:
            return self
        return SlotValue.correction(self.value)


@dataclass(frozen=True)
class ExtractionResult:
    """Sanitized slot values for one turn plus the user-facing response."""

    values: Mapping[Slot, SlotValue] = field(default_factory=dict)
    response: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @classmethod
    def of(
        cls,
        values: Optional[Mapping[Slot, Any]] = None,
        *,
        response: str = "",
        explicit: bool = False,
    ) -> "ExtractionResult":
        """Build from raw values; ``explicit`` marks them as corrections."""
        wrap = SlotValue.correction if explicit else SlotValue.of
        return cls(
            values={slot: wrap(v) for slot, v in (values or {}).items()},
            response=response,
        )

    def get(self, slot: Slot) -> SlotValue:
        return self.values.get(slot, SlotValue.unset())


# ============================================================================
# State
# ============================================================================


def _serialize(value: Any) -> Any:
    if isinstance(value, LyricsReview):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class PartialOrderState:
    """Immutable slot → value mapping for one conversation.

    The engine never mutates a state; every update returns a new instance.
    """

    values: Mapping[Slot, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned = {Slot(k): v for k, v in dict(self.values).items() if v is not None}
        object.__setattr__(self, "values", MappingProxyType(cleaned))

    @classmethod
    def empty(cls) -> "PartialOrderState":
        return cls()

    def get(self, slot: Slot, default: Any = None) -> Any:
        return self.values.get(slot, default)

    def is_set(self, slot: Slot) -> bool:
        return slot in self.values

    def with_values(self, updates: Mapping[Slot, Any]) -> "PartialOrderState":
        """Return a copy with ``updates`` applied (``None`` entries ignored)."""
        merged = dict(self.values)
        for slot, value in updates.items():
            if value is not None:
                merged[slot] = value
        return PartialOrderState(merged)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation for the session store."""
        return {slot.value: _serialize(v) for slot, v in self.values.items()}


# ============================================================================
# Collection groups
# ============================================================================


class CollectionGroup(str, Enum):
    """Slots that are collected (and handed downstream) together."""

    SONG_SETTINGS = "song_settings"
    RECIPIENT = "recipient"
    STORY = "story"
    NOTES = "notes"
    CONFIRMATION = "confirmation"

    def required_slots(self, state: PartialOrderState) -> Tuple[Slot, ...]:
        """Slots that must be set for this group to be complete."""
        if self == CollectionGroup.SONG_SETTINGS:
            return (Slot.SONG_TYPE, Slot.SONG_STYLE, Slot.VOCAL)
        if self == CollectionGroup.RECIPIENT:
            if state.get(Slot.INCLUDE_NAME) is True:
                return (Slot.RECIPIENT_RELATION, Slot.INCLUDE_NAME, Slot.RECIPIENT_NAME)
            return (Slot.RECIPIENT_RELATION, Slot.INCLUDE_NAME)
        if self == CollectionGroup.STORY:
            return (Slot.STORY,)
        if self == CollectionGroup.NOTES:
            return (Slot.NOTES,)
        return (Slot.CONFIRMED,)

    def missing_slots(self, state: PartialOrderState) -> Tuple[Slot, ...]:
        return tuple(s for s in self.required_slots(state) if not state.is_set(s))

    def is_complete(self, state: PartialOrderState) -> bool:
        return not self.missing_slots(state)
