"""KeywordClassifier - oracle-free answers to closed questions.

Closed questions (order confirmation, "should the name be in the song?",
lyrics approve/revise, "any notes?") are answered from two disjoint literal
keyword sets instead of an oracle round trip.

Matching rules:
- The turn is trimmed and Turkish-lower-cased.
- Keywords match by substring containment (or whole-turn equality for
  exact-match sets, ignoring leading and trailing punctuation or emoji).
- The affirmative set is checked first, so "tamam ama hayır" is affirmative.
- No match raises ``UndeterminedClassificationError``; for lyrics review a
  long enough free-text turn is an implicit revision request instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from sarkibot.core.exceptions import UndeterminedClassificationError
from sarkibot.nlu.limits import IMPLICIT_REVISION_MIN_CHARS
from sarkibot.nlu.types import LyricsReview, ReviewAction
from sarkibot.text.normalize import collapse_whitespace, normalize_turn

logger = logging.getLogger(__name__)

# Non-word characters (punctuation, emoji) at either end of a turn
_EDGE_NOISE = re.compile(r"^[\W_]+|[\W_]+$")


class Question(str, Enum):
    """Closed questions answered locally."""

    CONFIRMATION = "confirmation"
    INCLUDE_NAME = "include_name"
    LYRICS_REVIEW = "lyrics_review"
    NOTES_SKIP = "notes_skip"


class Decision(str, Enum):
    """Two-valued answer to a closed question.

    For lyrics review AFFIRMATIVE means approve and NEGATIVE means revise.
    """

    AFFIRMATIVE = "affirmative"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class KeywordSet:
    """Literal keywords for one closed question."""

    question: Question
    affirmative: Tuple[str, ...]
    negative: Tuple[str, ...] = ()
    exact_match: bool = False
    # Unmatched turns at least this long resolve NEGATIVE (implicit revision).
    implicit_negative_min_chars: Optional[int] = None

    def __post_init__(self) -> None:
        affirmative = tuple(normalize_turn(k) for k in self.affirmative)
        negative = tuple(normalize_turn(k) for k in self.negative)
        overlap = set(affirmative) & set(negative)
        if overlap:
            raise ValueError(
                f"Keyword sets for {self.question.value} overlap: {sorted(overlap)}"
            )
        object.__setattr__(self, "affirmative", affirmative)
        object.__setattr__(self, "negative", negative)

    def _find(self, text: str, keywords: Tuple[str, ...]) -> Optional[str]:
        for keyword in keywords:
            if self.exact_match:
                if text == keyword:
                    return keyword
            elif keyword in text:
                return keyword
        return None

    def match(self, text: str) -> Tuple[Optional[Decision], Optional[str]]:
        """Return ``(decision, keyword)``; ``(None, None)`` when nothing matched."""
        normalized = normalize_turn(text)
        if self.exact_match:
            normalized = _EDGE_NOISE.sub("", normalized)
        keyword = self._find(normalized, self.affirmative)
        if keyword is not None:
            return Decision.AFFIRMATIVE, keyword
        keyword = self._find(normalized, self.negative)
        if keyword is not None:
            return Decision.NEGATIVE, keyword
        return None, None


@dataclass(frozen=True)
class ClassificationResult:
    """Decision for one closed-question turn."""

    question: Question
    decision: Decision
    text: str
    keyword: Optional[str] = None
    implicit: bool = False

    @property
    def is_affirmative(self) -> bool:
        return self.decision == Decision.AFFIRMATIVE

    def to_review(self) -> LyricsReview:
        """Interpret as a lyrics review action."""
        if self.is_affirmative:
            return LyricsReview(ReviewAction.APPROVE)
        # A bare action keyword carries no revision request.
        request = None if normalize_turn(self.text) == self.keyword else self.text
        return LyricsReview(ReviewAction.REVISE, request)


CONFIRMATION_KEYWORDS = KeywordSet(
    question=Question.CONFIRMATION,
    affirmative=("evet", "tamam", "onaylıyorum", "onayla", "sipariş ver", "devam", "ok", "okay", "1"),
    negative=("hayır", "hayir", "iptal", "vazgeçtim", "istemiyorum", "2"),
)

INCLUDE_NAME_KEYWORDS = KeywordSet(
    question=Question.INCLUDE_NAME,
    affirmative=("evet", "olsun", "geçsin", "istiyorum", "tabii", "tabi", "1"),
    negative=("hayır", "hayir", "gerek yok", "istemiyorum", "olmasın", "2"),
)

LYRICS_REVIEW_KEYWORDS = KeywordSet(
    question=Question.LYRICS_REVIEW,
    affirmative=("onayla", "onaylıyorum", "tamam", "evet", "güzel", "süper", "harika", "1"),
    negative=("revize", "düzelt", "değiştir", "revize et", "düzeltme", "2"),
    implicit_negative_min_chars=IMPLICIT_REVISION_MIN_CHARS,
)

NOTES_SKIP_KEYWORDS = KeywordSet(
    question=Question.NOTES_SKIP,
    affirmative=("hayır", "hayir", "yok", "gerek yok"),
    exact_match=True,
)

DEFAULT_KEYWORD_SETS: Dict[Question, KeywordSet] = {
    ks.question: ks
    for ks in (
        CONFIRMATION_KEYWORDS,
        INCLUDE_NAME_KEYWORDS,
        LYRICS_REVIEW_KEYWORDS,
        NOTES_SKIP_KEYWORDS,
    )
}


class KeywordClassifier:
    """Deterministic matcher for closed-vocabulary questions."""

    def __init__(self, keyword_sets: Optional[Dict[Question, KeywordSet]] = None) -> None:
        self.keyword_sets = dict(keyword_sets or DEFAULT_KEYWORD_SETS)

    def classify(self, question: Question, text: str, *, turn_id: str = "") -> ClassificationResult:
        """Classify ``text`` as the answer to ``question``.

        Raises:
            UndeterminedClassificationError: no keyword matched
        """
        keyword_set = self.keyword_sets[question]
        trimmed = collapse_whitespace(text)
        decision, keyword = keyword_set.match(trimmed)

        if decision is not None:
            logger.debug("[keywords] %s → %s (keyword=%r)", question.value, decision.value, keyword)
            return ClassificationResult(question, decision, trimmed, keyword=keyword)

        threshold = keyword_set.implicit_negative_min_chars
        if threshold is not None and len(trimmed) > threshold:
            logger.debug("[keywords] %s → implicit %s (%d chars)", question.value, Decision.NEGATIVE.value, len(trimmed))
            return ClassificationResult(question, Decision.NEGATIVE, trimmed, implicit=True)

        raise UndeterminedClassificationError(
            f"No keyword matched for {question.value}",
            turn_id=turn_id,
            question=question.value,
        )

    def is_notes_skip(self, text: str) -> bool:
        """Whether ``text`` declines to give notes ("yok", "gerek yok", ...)."""
        decision, _ = self.keyword_sets[Question.NOTES_SKIP].match(text)
        return decision == Decision.AFFIRMATIVE
