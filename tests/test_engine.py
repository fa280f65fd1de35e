"""End-to-end turn handling with a deterministic oracle."""

from __future__ import annotations

import pytest

from conftest import payload
from sarkibot.config import EngineConfig
from sarkibot.core.exceptions import OracleTransportError
from sarkibot.dialog.engine import SlotFillingEngine
from sarkibot.dialog.steps import Step
from sarkibot.nlu.keywords import Decision
from sarkibot.nlu.types import LyricsReview, PartialOrderState, ReviewAction, Slot, Vocal
from sarkibot.nlu.vocabulary import GENRES

STORY = "Üniversitede tanıştık, ilk buluşmamızda yağmur yağıyordu ve hiç unutmadık."


@pytest.fixture
def story_state(settings_state):
    """Single-step flow positioned at the story question."""
    return settings_state.with_values({Slot.RECIPIENT_RELATION: "Annem", Slot.INCLUDE_NAME: False})


class TestSongSettings:
    def test_all_values_in_one_turn(self, engine, stub_oracle, empty_state):
        stub_oracle.queue(payload(type="Pop", style="Romantik", vocal="Kadın", response="Harika seçim! 🎵"))

        out = engine.handle(Step.SONG_SETTINGS, "pop romantik kadın sesi", empty_state)

        assert out.accepted
        assert out.state.get(Slot.SONG_TYPE) == "Pop"
        assert out.state.get(Slot.SONG_STYLE) == "Romantik"
        assert out.state.get(Slot.VOCAL) == Vocal.FEMALE
        assert out.response == "Harika seçim! 🎵"
        assert out.next_step == Step.RECIPIENT_INFO

    def test_partial_answer_stays_on_step(self, engine, stub_oracle, empty_state):
        stub_oracle.queue(payload(type="Rock"))
        out = engine.handle(Step.SONG_SETTINGS, "rock olsun", empty_state)
        assert out.state.get(Slot.SONG_TYPE) == "Rock"
        assert out.next_step == Step.SONG_SETTINGS

    def test_correction(self, engine, stub_oracle, settings_state):
        stub_oracle.queue(payload(type="Pop", style="Romantik", vocal="Erkek"))
        out = engine.handle(Step.SONG_SETTINGS, "kadın değil erkek olsun", settings_state)
        assert out.state.get(Slot.VOCAL) == Vocal.MALE

    def test_artist_style_description(self, engine, stub_oracle, empty_state):
        stub_oracle.queue(
            payload(type="Pop", artistStyleDescription="energetic Turkish pop with dance rhythms")
        )
        out = engine.handle(Step.SONG_SETTINGS, "Tarkan tarzında pop", empty_state)
        assert out.state.get(Slot.ARTIST_STYLE) == "energetic Turkish pop with dance rhythms"

    def test_style_violation_falls_back(self, engine, stub_oracle, empty_state):
        stub_oracle.queue(
            payload(type="Pop", style="Romantik", artistStyleDescription="Tarkan style dance pop")
        )
        out = engine.handle(Step.SONG_SETTINGS, "Tarkan gibi romantik pop", empty_state)
        assert out.state == empty_state
        assert out.error_code == "style_violation"

    def test_malformed_output_falls_back(self, engine, stub_oracle, empty_state):
        stub_oracle.queue("Üzgünüm, anlayamadım.")
        out = engine.handle(Step.SONG_SETTINGS, "bilmiyorum", empty_state)
        assert out.state is empty_state
        assert out.error_code == "malformed_output"
        assert ", ".join(GENRES) in out.response
        assert out.next_step == Step.SONG_SETTINGS

    def test_timeout_falls_back(self, engine, stub_oracle, settings_state):
        stub_oracle.queue(OracleTransportError(timed_out=True))
        out = engine.handle(Step.RECIPIENT_INFO, "annem için", settings_state)
        assert out.state is settings_state
        assert out.error_code == "oracle_timeout"


class TestRecipient:
    def test_recipient_info(self, engine, stub_oracle, settings_state):
        stub_oracle.queue(payload(relation="Annem", includeNameInSong=True, name="Ayşe"))
        out = engine.handle(Step.RECIPIENT_INFO, "annem, evet, Ayşe", settings_state)
        assert out.state.get(Slot.RECIPIENT_RELATION) == "Annem"
        assert out.state.get(Slot.INCLUDE_NAME) is True
        assert out.state.get(Slot.RECIPIENT_NAME) == "Ayşe"
        assert out.next_step == Step.STORY_AND_NOTES

    def test_non_person_recipient(self, engine, stub_oracle, settings_state):
        stub_oracle.queue(payload(relation="Kafemiz", includeNameInSong=False))
        out = engine.handle(Step.RECIPIENT_INFO, "kafemiz için, isim olmasın", settings_state)
        assert out.state.get(Slot.RECIPIENT_RELATION) == "Kafemiz"
        assert out.next_step == Step.STORY_AND_NOTES

    def test_include_name_is_keyword_only(self, single_engine, stub_oracle, settings_state):
        state = settings_state.with_values({Slot.RECIPIENT_RELATION: "Annem"})
        out = single_engine.handle(Step.INCLUDE_NAME, "Evet", state)
        assert stub_oracle.calls == []
        assert out.state.get(Slot.INCLUDE_NAME) is True
        assert out.decision == Decision.AFFIRMATIVE
        assert out.next_step == Step.RECIPIENT_NAME

    def test_include_name_undetermined(self, single_engine, stub_oracle, settings_state):
        out = single_engine.handle(Step.INCLUDE_NAME, "bilmem ki", settings_state)
        assert stub_oracle.calls == []
        assert out.error_code == "undetermined"
        assert out.state is settings_state


class TestStory:
    def test_too_short_never_reaches_oracle(self, single_engine, stub_oracle, story_state):
        out = single_engine.handle(Step.STORY, "a" * 19, story_state)
        assert stub_oracle.calls == []
        assert out.state is story_state
        assert out.error_code == "validation_story"
        assert "20" in out.response

    def test_too_long(self, single_engine, stub_oracle, story_state):
        out = single_engine.handle(Step.STORY, "a" * 901, story_state)
        assert stub_oracle.calls == []
        assert "901" in out.response

    def test_line_breaks_count_toward_length(self, single_engine, stub_oracle, story_state):
        story = "a" * 450 + "\n\n" + "b" * 449
        out = single_engine.handle(Step.STORY, story, story_state)
        assert stub_oracle.calls == []
        assert out.state is story_state
        assert out.error_code == "validation_story"

    def test_line_breaks_kept(self, single_engine, stub_oracle, story_state):
        story = "Üniversitede tanıştık.\n\nİlk buluşmamızda yağmur yağıyordu."
        stub_oracle.queue(payload(isValid=True))
        out = single_engine.handle(Step.STORY, "  " + story + "\n", story_state)
        assert out.state.get(Slot.STORY) == story

    def test_accepted(self, single_engine, stub_oracle, story_state):
        stub_oracle.queue(payload(isValid=True, response="Çok güzel bir hikaye 💝"))
        out = single_engine.handle(Step.STORY, STORY, story_state)
        assert out.state.get(Slot.STORY) == STORY
        assert out.response == "Çok güzel bir hikaye 💝"
        assert out.next_step == Step.NOTES

    def test_judged_too_thin(self, single_engine, stub_oracle, story_state):
        stub_oracle.queue(payload(isValid=False, response="Biraz daha anlatır mısınız? 😊"))
        out = single_engine.handle(Step.STORY, "bir şarkı istiyorum işte", story_state)
        assert out.state is story_state
        assert not out.accepted
        assert out.response == "Biraz daha anlatır mısınız? 😊"
        assert out.next_step == Step.STORY

    def test_judgment_failure_accepts_story(self, single_engine, stub_oracle, story_state):
        stub_oracle.queue("not json")
        out = single_engine.handle(Step.STORY, STORY, story_state)
        assert out.state.get(Slot.STORY) == STORY
        assert not out.fell_back


class TestNotes:
    @pytest.fixture
    def notes_state(self, story_state):
        return story_state.with_values({Slot.STORY: STORY})

    @pytest.mark.parametrize("text", ["yok", "Hayır", "gerek yok", "Yok.", "yok 🙂"])
    def test_skip(self, single_engine, stub_oracle, notes_state, text):
        out = single_engine.handle(Step.NOTES, text, notes_state)
        assert stub_oracle.calls == []
        assert out.state.get(Slot.NOTES) == ""
        assert out.next_step == Step.CONFIRMATION

    def test_notes_kept(self, single_engine, notes_state):
        out = single_engine.handle(Step.NOTES, "Nakaratta adı geçsin", notes_state)
        assert out.state.get(Slot.NOTES) == "Nakaratta adı geçsin"

    def test_notes_line_breaks_kept(self, single_engine, notes_state):
        out = single_engine.handle(Step.NOTES, "Nakaratta adı geçsin\nSonu neşeli bitsin", notes_state)
        assert out.state.get(Slot.NOTES) == "Nakaratta adı geçsin\nSonu neşeli bitsin"

    def test_too_long(self, single_engine, notes_state):
        out = single_engine.handle(Step.NOTES, "n" * 301, notes_state)
        assert out.state is notes_state
        assert out.error_code == "validation_notes"

    def test_combined_bound(self, single_engine, story_state):
        state = story_state.with_values({Slot.STORY: "s" * 900})
        out = single_engine.handle(Step.NOTES, "n" * 301, state)
        assert out.error_code == "validation_story_and_notes"


class TestStoryAndNotes:
    @pytest.fixture
    def recipient_state(self, settings_state):
        return settings_state.with_values({Slot.RECIPIENT_RELATION: "Annem", Slot.INCLUDE_NAME: False})

    def test_split(self, engine, stub_oracle, recipient_state):
        stub_oracle.queue(payload(story=STORY, notes="Nakaratta yağmur geçsin"))
        out = engine.handle(Step.STORY_AND_NOTES, f"{STORY} Not: Nakaratta yağmur geçsin", recipient_state)
        assert out.state.get(Slot.STORY) == STORY
        assert out.state.get(Slot.NOTES) == "Nakaratta yağmur geçsin"
        assert out.next_step == Step.CONFIRMATION

    def test_no_notes_recorded_as_empty(self, engine, stub_oracle, recipient_state):
        stub_oracle.queue(payload(story=STORY, notes=None))
        out = engine.handle(Step.STORY_AND_NOTES, STORY, recipient_state)
        assert out.state.get(Slot.NOTES) == ""

    def test_oracle_failure_takes_whole_text(self, engine, stub_oracle, recipient_state):
        stub_oracle.queue(OracleTransportError())
        out = engine.handle(Step.STORY_AND_NOTES, STORY, recipient_state)
        assert out.state.get(Slot.STORY) == STORY
        assert out.state.get(Slot.NOTES) == ""

    def test_message_over_combined_bound(self, engine, stub_oracle, recipient_state):
        out = engine.handle(Step.STORY_AND_NOTES, "x" * 1201, recipient_state)
        assert stub_oracle.calls == []
        assert out.error_code == "validation_story_and_notes"
        assert "1201" in out.response

    def test_line_breaks_count_toward_combined_bound(self, engine, stub_oracle, recipient_state):
        out = engine.handle(Step.STORY_AND_NOTES, "x" * 600 + "\n\n" + "y" * 599, recipient_state)
        assert stub_oracle.calls == []
        assert out.error_code == "validation_story_and_notes"

    def test_oracle_failure_keeps_line_breaks(self, engine, stub_oracle, recipient_state):
        message = STORY + "\n\nNakaratta yağmur geçsin"
        stub_oracle.queue(OracleTransportError())
        out = engine.handle(Step.STORY_AND_NOTES, message, recipient_state)
        assert out.state.get(Slot.STORY) == message

    def test_short_message(self, engine, stub_oracle, recipient_state):
        out = engine.handle(Step.STORY_AND_NOTES, "kısa", recipient_state)
        assert stub_oracle.calls == []
        assert out.error_code == "validation_story"

    def test_split_story_too_long(self, engine, stub_oracle, recipient_state):
        stub_oracle.queue(payload(story="s" * 901, notes="kısa not"))
        out = engine.handle(Step.STORY_AND_NOTES, "s" * 901 + " kısa not", recipient_state)
        assert out.state is recipient_state
        assert out.error_code == "validation_story"


class TestClosedQuestions:
    @pytest.mark.parametrize(
        "text,confirmed,next_step",
        [
            ("Evet", True, Step.LYRICS_REVIEW),
            ("onaylıyorum", True, Step.LYRICS_REVIEW),
            ("hayır", False, Step.DONE),
            ("iptal", False, Step.DONE),
        ],
    )
    def test_confirmation(self, engine, stub_oracle, ready_state, text, confirmed, next_step):
        out = engine.handle(Step.CONFIRMATION, text, ready_state)
        assert stub_oracle.calls == []
        assert out.state.get(Slot.CONFIRMED) is confirmed
        assert out.next_step == next_step

    def test_lyrics_approved(self, engine, ready_state):
        state = ready_state.with_values({Slot.CONFIRMED: True})
        out = engine.handle(Step.LYRICS_REVIEW, "onayla", state)
        assert out.state.get(Slot.LYRICS_REVIEW) == LyricsReview(ReviewAction.APPROVE)
        assert out.next_step == Step.DONE

    def test_lyrics_free_text_is_revision(self, engine, stub_oracle, ready_state):
        state = ready_state.with_values({Slot.CONFIRMED: True})
        request = "nakarat daha duygusal olsun lütfen"
        out = engine.handle(Step.LYRICS_REVIEW, request, state)
        assert stub_oracle.calls == []
        assert out.state.get(Slot.LYRICS_REVIEW) == LyricsReview(ReviewAction.REVISE, request)

    def test_lyrics_short_unclear(self, engine, ready_state):
        state = ready_state.with_values({Slot.CONFIRMED: True})
        out = engine.handle(Step.LYRICS_REVIEW, "hmm", state)
        assert out.error_code == "undetermined"


class TestEngine:
    def test_unknown_step(self, engine, empty_state):
        with pytest.raises(ValueError):
            engine.handle(Step.DONE, "merhaba", empty_state)

    def test_first_step(self, engine, single_engine):
        assert engine.first_step() == Step.SONG_SETTINGS
        assert single_engine.first_step() == Step.SONG_TYPE

    def test_from_config(self, stub_oracle):
        config = EngineConfig(combined_steps=False, extra_artists=("Zeki Müren",))
        engine = SlotFillingEngine.from_config(config, oracle=stub_oracle)
        assert engine.combined_steps is False
        assert engine.extractor.style_guard.find_violation("Zeki Müren style") == "Zeki Müren"

    def test_full_conversation(self, engine, stub_oracle):
        stub_oracle.queue(
            payload(type="Pop", style="Romantik", vocal="Kadın"),
            payload(relation="Sevgilim", includeNameInSong=True, name="Ayşe"),
            payload(story=STORY, notes=None),
        )
        state = PartialOrderState.empty()
        step = engine.first_step(state)
        turns = iter(["pop romantik kadın", "sevgilim, evet, Ayşe", STORY, "evet", "onayla"])

        while step != Step.DONE:
            out = engine.handle(step, next(turns), state)
            assert not out.fell_back
            state, step = out.state, out.next_step

        assert len(stub_oracle.calls) == 3
        assert state.get(Slot.CONFIRMED) is True
        assert state.get(Slot.LYRICS_REVIEW).action == ReviewAction.APPROVE
        assert state.get(Slot.RECIPIENT_NAME) == "Ayşe"
