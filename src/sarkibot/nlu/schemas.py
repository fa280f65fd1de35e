"""Pydantic schemas for oracle extraction payloads.

One model per extraction contract. Models enforce the payload *shape*:
- ``response`` is required (the oracle must always say something)
- slot fields are strings (or bool) or null; other types are rejected
- blank strings and the literal "null"/"YOK" mean "not extracted"

Unknown extra keys are ignored; a missing ``response`` or a wrongly typed
field makes validation fail, which the sanitizer reports as malformed output.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator

from sarkibot.nlu.types import ExtractionResult, Slot, Vocal
from sarkibot.nlu.vocabulary import canonical_genre, canonical_mood, canonical_vocal
from sarkibot.text.normalize import collapse_whitespace

_NULL_WORDS = {"null", "none", "yok", "n/a", "-"}


def _blank_to_none(v: Any, keep_lines: bool = False) -> Any:
    if v is None:
        return None
    if isinstance(v, str):
        cleaned = v.strip() if keep_lines else collapse_whitespace(v)
        if not cleaned or cleaned.lower() in _NULL_WORDS:
            return None
        return cleaned
    return v


def _parse_vocal(v: Any) -> Any:
    v = _blank_to_none(v)
    if v is None:
        return None
    if not isinstance(v, (str, Vocal)):
        raise ValueError(f"vocal must be a string, got {type(v).__name__}")
    # Labels outside the closed set are treated as "not understood".
    return canonical_vocal(v)


class ExtractionPayload(BaseModel):
    """Common base: every payload carries a user-facing ``response``."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    response: str = Field(..., description="Message for the user (Turkish)")

    def slot_values(self) -> Dict[Slot, Any]:
        """Slot values carried by this payload (``None`` = not extracted)."""
        return {}

    def to_result(self) -> ExtractionResult:
        return ExtractionResult.of(self.slot_values(), response=self.response)


class SongTypePayload(ExtractionPayload):
    song_type: Optional[str] = Field(None, alias="type")
    artist_style_description: Optional[str] = Field(None, alias="artistStyleDescription")

    @field_validator("song_type", "artist_style_description", mode="before")
    @classmethod
    def blank_is_null(cls, v):
        return _blank_to_none(v)

    @field_validator("song_type")
    @classmethod
    def canonical_type(cls, v):
        return canonical_genre(v)

    def slot_values(self) -> Dict[Slot, Any]:
        return {
            Slot.SONG_TYPE: self.song_type,
            Slot.ARTIST_STYLE: self.artist_style_description,
        }


class SongStylePayload(ExtractionPayload):
    style: Optional[str] = None

    @field_validator("style", mode="before")
    @classmethod
    def blank_is_null(cls, v):
        return _blank_to_none(v)

    @field_validator("style")
    @classmethod
    def canonical_style(cls, v):
        return canonical_mood(v)

    def slot_values(self) -> Dict[Slot, Any]:
        return {Slot.SONG_STYLE: self.style}


class VocalPayload(ExtractionPayload):
    vocal: Optional[Vocal] = None

    @field_validator("vocal", mode="before")
    @classmethod
    def parse_vocal(cls, v):
        return _parse_vocal(v)

    def slot_values(self) -> Dict[Slot, Any]:
        return {Slot.VOCAL: self.vocal}


class SongSettingsPayload(SongTypePayload):
    """Combined type + mood + vocal (+ style description)."""

    style: Optional[str] = None
    vocal: Optional[Vocal] = None

    @field_validator("style", mode="before")
    @classmethod
    def blank_style_is_null(cls, v):
        return _blank_to_none(v)

    @field_validator("style")
    @classmethod
    def canonical_style(cls, v):
        return canonical_mood(v)

    @field_validator("vocal", mode="before")
    @classmethod
    def parse_vocal(cls, v):
        return _parse_vocal(v)

    def slot_values(self) -> Dict[Slot, Any]:
        values = super().slot_values()
        values[Slot.SONG_STYLE] = self.style
        values[Slot.VOCAL] = self.vocal
        return values


class RecipientRelationPayload(ExtractionPayload):
    relation: Optional[str] = None

    @field_validator("relation", mode="before")
    @classmethod
    def blank_is_null(cls, v):
        return _blank_to_none(v)

    def slot_values(self) -> Dict[Slot, Any]:
        return {Slot.RECIPIENT_RELATION: self.relation}


class RecipientNamePayload(ExtractionPayload):
    name: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def blank_is_null(cls, v):
        return _blank_to_none(v)

    def slot_values(self) -> Dict[Slot, Any]:
        return {Slot.RECIPIENT_NAME: self.name}


class RecipientInfoPayload(ExtractionPayload):
    """Combined relation + include-name flag + name."""

    relation: Optional[str] = None
    name: Optional[str] = None
    include_name_in_song: Optional[StrictBool] = Field(None, alias="includeNameInSong")

    @field_validator("relation", "name", mode="before")
    @classmethod
    def blank_is_null(cls, v):
        return _blank_to_none(v)

    def slot_values(self) -> Dict[Slot, Any]:
        return {
            Slot.RECIPIENT_RELATION: self.relation,
            Slot.INCLUDE_NAME: self.include_name_in_song,
            Slot.RECIPIENT_NAME: self.name,
        }


class StoryQualityPayload(ExtractionPayload):
    """Content judgment for a story that already passed the length bounds."""

    is_valid: StrictBool = Field(..., alias="isValid")


class StoryAndNotesPayload(ExtractionPayload):
    """Split of a combined story + notes message."""

    story: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("story", "notes", mode="before")
    @classmethod
    def blank_is_null(cls, v):
        return _blank_to_none(v, keep_lines=True)

    @model_validator(mode="after")
    def notes_without_story(self):
        # A lone notes part is the story.
        if self.story is None and self.notes is not None:
            self.story, self.notes = self.notes, None
        return self

    def slot_values(self) -> Dict[Slot, Any]:
        return {Slot.STORY: self.story, Slot.NOTES: self.notes}
