"""Tests for ResponseSanitizer and the payload schemas.

Covers:
  - fence stripping (tagged / untagged / single line)
  - strict decoding: prose, truncation, arrays, empty output
  - schema enforcement: missing response, wrong field types
  - payload normalization: blank → None, canonical labels, notes → story
"""

from __future__ import annotations

import pytest

from sarkibot.core.exceptions import MalformedOracleOutputError
from sarkibot.nlu.sanitizer import ResponseSanitizer, strip_fences
from sarkibot.nlu.schemas import (
    RecipientInfoPayload,
    SongSettingsPayload,
    SongTypePayload,
    StoryAndNotesPayload,
    StoryQualityPayload,
    VocalPayload,
)
from sarkibot.nlu.types import Slot, SlotValueKind, Vocal


@pytest.fixture
def sanitizer():
    return ResponseSanitizer()


class TestStripFences:
    def test_tagged_fence(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_untagged_fence(self):
        assert strip_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_single_line_fence(self):
        assert strip_fences('```json{"a": 1}```') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_fences('  {"a": 1}  ') == '{"a": 1}'


class TestDecoding:
    def test_fenced_payload(self, sanitizer):
        raw = '```json\n{"type": "Pop", "artistStyleDescription": null, "response": "Pop seçildi"}\n```'
        result = sanitizer.sanitize(raw, SongTypePayload)
        assert result.song_type == "Pop"
        assert result.response == "Pop seçildi"

    @pytest.mark.parametrize(
        "raw,reason",
        [
            ("", "empty_output"),
            ("```json\n```", "empty_output"),
            ('İşte cevap: {"vocal": "Kadın", "response": "ok"}', "json_decode_error"),
            ('{"vocal": "Kadın", "response": "ok"} umarım yardımcı olur', "json_decode_error"),
            ('{"vocal": "Kadın", "respo', "json_decode_error"),
            ('[{"vocal": "Kadın"}]', "json_not_object"),
            ('"just a string"', "json_not_object"),
        ],
    )
    def test_binary_failure(self, sanitizer, raw, reason):
        with pytest.raises(MalformedOracleOutputError) as exc:
            sanitizer.sanitize(raw, VocalPayload, turn_id="t-00000001")
        assert exc.value.reason == reason
        assert exc.value.context.turn_id == "t-00000001"

    def test_missing_response_is_schema_mismatch(self, sanitizer):
        with pytest.raises(MalformedOracleOutputError) as exc:
            sanitizer.sanitize('{"vocal": "Kadın"}', VocalPayload)
        assert exc.value.reason == "schema_mismatch"

    def test_wrong_type_is_schema_mismatch(self, sanitizer):
        with pytest.raises(MalformedOracleOutputError):
            sanitizer.sanitize('{"vocal": 3, "response": "x"}', VocalPayload)

    def test_include_flag_must_be_bool(self, sanitizer):
        with pytest.raises(MalformedOracleOutputError):
            sanitizer.sanitize('{"includeNameInSong": "evet", "response": "x"}', RecipientInfoPayload)

    def test_is_valid_required(self, sanitizer):
        with pytest.raises(MalformedOracleOutputError):
            sanitizer.sanitize('{"response": "x"}', StoryQualityPayload)

    def test_extra_keys_ignored(self, sanitizer):
        result = sanitizer.sanitize('{"vocal": "Erkek", "response": "x", "confidence": 0.9}', VocalPayload)
        assert result.vocal == Vocal.MALE


class TestPayloadNormalization:
    def test_blank_and_null_words(self):
        p = SongSettingsPayload.model_validate(
            {"type": "  ", "style": "YOK", "vocal": "null", "response": "Eksik bilgiler"}
        )
        assert (p.song_type, p.style, p.vocal) == (None, None, None)

    def test_canonical_labels(self):
        p = SongSettingsPayload.model_validate(
            {"type": "hip hop", "style": "hüzünlü", "vocal": "bayan", "response": "ok"}
        )
        assert p.song_type == "Rap"
        assert p.style == "Duygusal"
        assert p.vocal == Vocal.FEMALE

    def test_unknown_genre_passes_through(self):
        p = SongTypePayload.model_validate({"type": "Türkü", "response": "ok"})
        assert p.song_type == "Türkü"

    def test_unknown_vocal_is_unset(self):
        assert VocalPayload.model_validate({"vocal": "robot", "response": "?"}).vocal is None

    def test_notes_without_story_become_story(self):
        p = StoryAndNotesPayload.model_validate({"story": None, "notes": "Annemle anılarımız", "response": "ok"})
        assert p.story == "Annemle anılarımız"
        assert p.notes is None

    def test_to_result_marks_values(self):
        result = SongTypePayload.model_validate(
            {"type": "Pop", "artistStyleDescription": None, "response": "ok"}
        ).to_result()
        assert result.get(Slot.SONG_TYPE).kind == SlotValueKind.VALUE
        assert result.get(Slot.ARTIST_STYLE).is_unset
        assert [s for s, v in result.values.items() if not v.is_unset] == [Slot.SONG_TYPE]
        assert result.response == "ok"
