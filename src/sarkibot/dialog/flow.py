"""Collection-group ordering: which question comes next.

Groups are collected in a fixed order: song settings, recipient, story,
notes, confirmation, then lyrics review once the order is confirmed. With
combined steps a whole group is asked in one turn; otherwise one slot at a
time. The recipient name is only asked when the include-name flag is true.
"""

from __future__ import annotations

from sarkibot.i18n.messages import MessageCode, missing_lines, summarize_order, tr
from sarkibot.nlu.types import CollectionGroup, PartialOrderState, Slot
from sarkibot.dialog.steps import Step

_SINGLE_SLOT_STEPS = (
    (Slot.SONG_TYPE, Step.SONG_TYPE),
    (Slot.SONG_STYLE, Step.SONG_STYLE),
    (Slot.VOCAL, Step.VOCAL),
    (Slot.RECIPIENT_RELATION, Step.RECIPIENT_RELATION),
    (Slot.INCLUDE_NAME, Step.INCLUDE_NAME),
    (Slot.RECIPIENT_NAME, Step.RECIPIENT_NAME),
    (Slot.STORY, Step.STORY),
    (Slot.NOTES, Step.NOTES),
)

_QUESTIONS = {
    Step.SONG_TYPE: MessageCode.ASK_SONG_TYPE,
    Step.SONG_STYLE: MessageCode.ASK_SONG_STYLE,
    Step.VOCAL: MessageCode.ASK_VOCAL,
    Step.RECIPIENT_RELATION: MessageCode.ASK_RECIPIENT_RELATION,
    Step.INCLUDE_NAME: MessageCode.ASK_INCLUDE_NAME,
    Step.RECIPIENT_NAME: MessageCode.ASK_RECIPIENT_NAME,
    Step.STORY: MessageCode.ASK_STORY,
    Step.NOTES: MessageCode.ASK_NOTES,
    Step.STORY_AND_NOTES: MessageCode.ASK_STORY_AND_NOTES,
    Step.LYRICS_REVIEW: MessageCode.ASK_LYRICS_REVIEW,
}


def _closing_step(state: PartialOrderState) -> Step:
    confirmed = state.get(Slot.CONFIRMED)
    if confirmed is None:
        return Step.CONFIRMATION
    if confirmed is True and not state.is_set(Slot.LYRICS_REVIEW):
        return Step.LYRICS_REVIEW
    return Step.DONE


def next_step(state: PartialOrderState, *, combined: bool = True) -> Step:
    """First step whose slots are still missing."""
    if combined:
        if not CollectionGroup.SONG_SETTINGS.is_complete(state):
            return Step.SONG_SETTINGS
        if not CollectionGroup.RECIPIENT.is_complete(state):
            return Step.RECIPIENT_INFO
        if not CollectionGroup.STORY.is_complete(state):
            return Step.STORY_AND_NOTES
        if not CollectionGroup.NOTES.is_complete(state):
            return Step.NOTES
        return _closing_step(state)

    for slot, step in _SINGLE_SLOT_STEPS:
        if slot == Slot.RECIPIENT_NAME and state.get(Slot.INCLUDE_NAME) is not True:
            continue
        if not state.is_set(slot):
            return step
    return _closing_step(state)


def question_for(step: Step, state: PartialOrderState) -> str:
    """The question for ``step``, with vocabularies spelled out."""
    if step == Step.SONG_SETTINGS:
        missing = CollectionGroup.SONG_SETTINGS.missing_slots(state)
        return tr(MessageCode.ASK_SONG_SETTINGS, missing=missing_lines(missing))
    if step == Step.RECIPIENT_INFO:
        missing = CollectionGroup.RECIPIENT.missing_slots(state)
        if not state.is_set(Slot.INCLUDE_NAME) and Slot.RECIPIENT_NAME not in missing:
            missing = missing + (Slot.RECIPIENT_NAME,)
        return tr(MessageCode.ASK_RECIPIENT_INFO, missing=missing_lines(missing))
    if step == Step.CONFIRMATION:
        return tr(MessageCode.ASK_CONFIRMATION, summary=summarize_order(state))
    if step == Step.DONE:
        return ""
    return tr(_QUESTIONS[step])
