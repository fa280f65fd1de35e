"""Post-extraction assertion layer for artist de-identification.

The downstream music generator rejects prompts that name real artists, and
vocal gender is collected as its own slot. The oracle is told to translate
"Tarkan tarzında" into a neutral musical description; this guard checks that
it actually did before the description reaches the merge step.

A style description violates the contract when it contains:
- a capitalized two-word token that matches a known artist ("Dua Lipa")
- a known single-word artist name as a whole word ("Tarkan")
- "female vocals" / "male vocals"
- a Turkish comparison marker ("tarzında", "gibi") that means a name leaked
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Tuple

from sarkibot.core.exceptions import StyleContractViolationError
from sarkibot.text.normalize import contains_term, turkish_lower

logger = logging.getLogger(__name__)

KNOWN_ARTISTS: Tuple[str, ...] = (
    "Dua Lipa",
    "Tarkan",
    "Melike Şahin",
    "Mabel Matiz",
    "Adele",
    "Sezen Aksu",
    "Sertab Erener",
    "Ajda Pekkan",
    "Barış Manço",
    "Müslüm Gürses",
    "Ezhel",
    "Hadise",
    "Gökhan Türkmen",
    "Taylor Swift",
    "Ed Sheeran",
    "Billie Eilish",
    "The Weeknd",
    "Bruno Mars",
)

VOCAL_TERMS: Tuple[str, ...] = ("female vocals", "male vocals", "female vocal", "male vocal")
COMPARISON_MARKERS: Tuple[str, ...] = ("tarzında", "gibi")

# Two adjacent capitalized words, Turkish letters included
_CAPITALIZED_PAIR = re.compile(
    r"\b([A-ZÇĞİÖŞÜ][a-zçğıöşü]+)\s+([A-ZÇĞİÖŞÜ][a-zçğıöşü]+)\b"
)


class StyleGuard:
    """Reject style descriptions that name an artist or a vocal gender."""

    def __init__(self, extra_artists: Iterable[str] = ()) -> None:
        artists = tuple(KNOWN_ARTISTS) + tuple(a.strip() for a in extra_artists if a and a.strip())
        self._multi_word = {turkish_lower(a) for a in artists if " " in a}
        self._single_word = tuple(a for a in artists if " " not in a)

    def find_violation(self, description: Optional[str]) -> Optional[str]:
        """Return the offending fragment, or ``None`` if the text is clean."""
        if not description:
            return None

        for first, second in _CAPITALIZED_PAIR.findall(description):
            pair = turkish_lower(f"{first} {second}")
            if pair in self._multi_word:
                return f"{first} {second}"

        lowered = turkish_lower(description)
        for name in self._multi_word:
            if name in lowered:
                return name

        for name in self._single_word:
            if contains_term(description, name, min_prefix=len(name) + 1):
                return name

        for term in VOCAL_TERMS + COMPARISON_MARKERS:
            if contains_term(description, term, min_prefix=len(term) + 1):
                return term

        return None

    def check(self, description: Optional[str], *, field_name: str = "artistStyleDescription", turn_id: str = "") -> None:
        """Raise ``StyleContractViolationError`` if ``description`` leaks a name or vocal term."""
        violation = self.find_violation(description)
        if violation is None:
            return
        raise StyleContractViolationError(
            f"style description contains {violation!r}",
            turn_id=turn_id,
            field_name=field_name,
            violation=violation,
        )
