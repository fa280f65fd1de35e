"""Tests for the shared slot/state data model."""

from __future__ import annotations

import dataclasses

import pytest

from sarkibot.nlu.types import (
    CollectionGroup,
    ExtractionResult,
    LyricsReview,
    PartialOrderState,
    ReviewAction,
    Slot,
    SlotValue,
    SlotValueKind,
    Vocal,
)


class TestSlotValue:
    def test_none_is_unset(self):
        assert SlotValue.of(None).is_unset
        assert SlotValue.correction(None).is_unset

    def test_promoted(self):
        promoted = SlotValue.of("Pop").promoted()
        assert promoted.kind == SlotValueKind.CORRECTION
        assert promoted.value == "Pop"
        assert SlotValue.unset().promoted().is_unset

    def test_explicit_result(self):
        result = ExtractionResult.of({Slot.CONFIRMED: True}, explicit=True)
        assert result.get(Slot.CONFIRMED).kind == SlotValueKind.CORRECTION
        assert result.get(Slot.VOCAL).is_unset


class TestPartialOrderState:
    def test_immutable(self, settings_state):
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings_state.values = {}
        with pytest.raises(TypeError):
            settings_state.values[Slot.SONG_TYPE] = "Rock"

    def test_with_values_returns_copy(self, settings_state):
        updated = settings_state.with_values({Slot.SONG_TYPE: "Rock", Slot.VOCAL: None})
        assert updated.get(Slot.SONG_TYPE) == "Rock"
        assert updated.get(Slot.VOCAL) == Vocal.FEMALE
        assert settings_state.get(Slot.SONG_TYPE) == "Pop"

    def test_none_values_dropped(self):
        state = PartialOrderState({Slot.STORY: None, Slot.NOTES: ""})
        assert not state.is_set(Slot.STORY)
        assert state.is_set(Slot.NOTES)

    def test_to_dict(self, ready_state):
        state = ready_state.with_values(
            {Slot.CONFIRMED: True, Slot.LYRICS_REVIEW: LyricsReview(ReviewAction.REVISE, "daha hızlı")}
        )
        data = state.to_dict()
        assert data["vocal"] == "female"
        assert data["lyrics_review"] == {"action": "revise", "revision_request": "daha hızlı"}
        assert data["song_type"] == "Pop"
        assert "confirmed" in data

    def test_equality(self):
        assert PartialOrderState({Slot.SONG_TYPE: "Pop"}) == PartialOrderState({"song_type": "Pop"})


class TestCollectionGroup:
    def test_settings_missing(self):
        state = PartialOrderState({Slot.VOCAL: Vocal.MALE})
        assert CollectionGroup.SONG_SETTINGS.missing_slots(state) == (Slot.SONG_TYPE, Slot.SONG_STYLE)

    def test_recipient_name_only_when_included(self):
        excluded = PartialOrderState({Slot.RECIPIENT_RELATION: "Annem", Slot.INCLUDE_NAME: False})
        included = excluded.with_values({Slot.INCLUDE_NAME: True})
        assert CollectionGroup.RECIPIENT.is_complete(excluded)
        assert CollectionGroup.RECIPIENT.missing_slots(included) == (Slot.RECIPIENT_NAME,)

    def test_empty_notes_complete(self):
        assert CollectionGroup.NOTES.is_complete(PartialOrderState({Slot.NOTES: ""}))


def test_vocal_labels():
    assert [v.label for v in Vocal] == ["Kadın", "Erkek", "Fark etmez"]
