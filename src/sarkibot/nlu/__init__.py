"""Slot extraction and merging for song orders.

Usage:
    from sarkibot.nlu import MergeEngine, PartialOrderState, SlotExtractor

    extractor = SlotExtractor(oracle)
    result = extractor.extract(SONG_SETTINGS_CONTRACT, "pop, romantik, kadın", state)
    outcome = MergeEngine().merge(state, result, "pop, romantik, kadın")

``sarkibot.nlu.validation`` is imported directly (it renders Turkish
messages and is not re-exported here).
"""

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
from sarkibot.nlu.contracts import (
    ContractName,
    ExtractionContract,
    render_prompt,
)
from sarkibot.nlu.extractor import SlotExtractor
from sarkibot.nlu.keywords import (
    ClassificationResult,
    Decision,
    KeywordClassifier,
    Question,
)
from sarkibot.nlu.merge import MergeEngine, MergeOutcome, has_correction_marker
from sarkibot.nlu.sanitizer import ResponseSanitizer
from sarkibot.nlu.style_guard import StyleGuard

__all__ = [
    # Types
    "CollectionGroup",
    "ExtractionResult",
    "LyricsReview",
    "PartialOrderState",
    "ReviewAction",
    "Slot",
    "SlotValue",
    "SlotValueKind",
    "Vocal",
    # Contracts
    "ContractName",
    "ExtractionContract",
    "render_prompt",
    # Components
    "ClassificationResult",
    "Decision",
    "KeywordClassifier",
    "MergeEngine",
    "MergeOutcome",
    "Question",
    "ResponseSanitizer",
    "SlotExtractor",
    "StyleGuard",
    "has_correction_marker",
]
