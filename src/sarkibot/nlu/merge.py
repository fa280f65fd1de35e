"""MergeEngine - fill vs. correction semantics for PartialOrderState.

For every slot carried by an :class:`ExtractionResult`:

- UNSET: ignored. A null from the oracle never clears a slot.
- slot empty in state: **fill**.
- slot already holds the same value: nothing to do.
- slot holds a different value: **overwrite** only when the value is an
  explicit correction. That is the case when the value was marked as one
  (keyword answers), when the turn contains a correction marker ("değil",
  "demedim", "yanlış", ...), or, for closed-vocabulary slots, when the turn
  names the new value and not the stored one. Otherwise the stored value is
  **kept**.

Slots absent from the result are untouched and the result's response is
passed through unchanged. Fills of disjoint slots commute; corrections do
not, since their effect depends on the state they are applied to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from sarkibot.nlu.types import ExtractionResult, PartialOrderState, Slot, SlotValue, SlotValueKind
from sarkibot.nlu.vocabulary import mentions_value
from sarkibot.text.normalize import contains_term

logger = logging.getLogger(__name__)

CORRECTION_MARKERS: Tuple[str, ...] = (
    "değil",
    "degil",
    "değildi",
    "degildi",
    "demedim",
    "yanlış",
    "yanlis",
    "aslında",
    "aslinda",
    "yerine",
    "olmasın",
    "olmasin",
    "değiştir",
    "degistir",
    "değiştirin",
    "degistirin",
    "değiştirelim",
    "degistirelim",
    "vazgeçtim",
    "vazgectim",
)

# Slot whose correction also lets a differing companion value through.
_LINKED_SLOTS: Dict[Slot, Slot] = {
    Slot.ARTIST_STYLE: Slot.SONG_TYPE,
}


def has_correction_marker(text: str) -> bool:
    """Whether the turn contains an explicit correction word.

    Markers match whole tokens only: "değiştirme" (do not change) must not
    count as "değiştir".
    """
    return any(contains_term(text, marker, min_prefix=len(marker) + 1) for marker in CORRECTION_MARKERS)


@dataclass(frozen=True)
class MergeOutcome:
    """Result of one merge: the new state plus what happened per slot."""

    state: PartialOrderState
    response: str
    filled: Tuple[Slot, ...] = ()
    corrected: Tuple[Slot, ...] = ()
    kept: Tuple[Slot, ...] = ()


class MergeEngine:
    """Combine an extraction result with the existing partial order."""

    def classify(self, slot: Slot, current: Any, incoming: SlotValue, turn_text: str) -> SlotValue:
        """Promote ``incoming`` to a correction when the turn warrants it."""
        if incoming.is_unset or incoming.kind == SlotValueKind.CORRECTION:
            return incoming
        if has_correction_marker(turn_text):
            return incoming.promoted()
        if (
            slot.has_vocabulary
            and mentions_value(slot, incoming.value, turn_text)
            and not mentions_value(slot, current, turn_text)
        ):
            return incoming.promoted()
        return incoming

    def merge(
        self,
        state: PartialOrderState,
        result: ExtractionResult,
        turn_text: str = "",
        *,
        turn_id: str = "",
    ) -> MergeOutcome:
        """Apply ``result`` to ``state`` and return the outcome.

        ``state`` is never modified; the outcome carries a new instance (the
        same instance when nothing changed).
        """
        updates: Dict[Slot, Any] = {}
        filled, corrected, kept = [], [], []

        # Linked slots go last so their anchor is already decided.
        ordered = sorted(result.values.items(), key=lambda item: item[0] in _LINKED_SLOTS)
        for slot, incoming in ordered:
            if incoming.is_unset:
                continue

            current = state.get(slot)
            if current is None:
                updates[slot] = incoming.value
                filled.append(slot)
                logger.info("[merge] turn=%s fill %s=%r", turn_id, slot.value, incoming.value)
                continue

            if current == incoming.value:
                continue

            decided = self.classify(slot, current, incoming, turn_text)
            linked = _LINKED_SLOTS.get(slot)
            if decided.kind != SlotValueKind.CORRECTION and linked in corrected:
                decided = decided.promoted()

            if decided.kind == SlotValueKind.CORRECTION:
                updates[slot] = decided.value
                corrected.append(slot)
                logger.info(
                    "[merge] turn=%s correct %s: %r → %r",
                    turn_id,
                    slot.value,
                    current,
                    decided.value,
                )
            else:
                kept.append(slot)
                logger.info(
                    "[merge] turn=%s keep %s=%r (ignored %r)",
                    turn_id,
                    slot.value,
                    current,
                    incoming.value,
                )

        new_state = state.with_values(updates) if updates else state
        return MergeOutcome(
            state=new_state,
            response=result.response,
            filled=tuple(filled),
            corrected=tuple(corrected),
            kept=tuple(kept),
        )
