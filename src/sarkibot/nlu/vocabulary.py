"""Closed vocabularies and their surface forms.

The canonical option lists are shown to users verbatim (in prompts and in
fallback re-asks). The alias tables are used in two places: canonicalizing
oracle output ("romantik bir şey" → "Romantik") and detecting whether a turn
explicitly names a value, which is what turns a contradicting extraction into
a correction.

Genres and moods are conventional, not restrictive: an unrecognized value is
kept as free text.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from sarkibot.nlu.types import Slot, Vocal
from sarkibot.text.normalize import collapse_whitespace, contains_term, normalize_turn

GENRES: Tuple[str, ...] = ("Pop", "Rap", "Jazz", "Arabesk", "Klasik", "Rock", "Metal", "Nostaljik")
MOODS: Tuple[str, ...] = ("Romantik", "Duygusal", "Eğlenceli", "Sakin")
VOCAL_OPTIONS: Tuple[str, ...] = tuple(v.label for v in Vocal)

GENRE_ALIASES: Dict[str, Tuple[str, ...]] = {
    "Pop": ("pop",),
    "Rap": ("rap", "hip hop", "hiphop"),
    "Jazz": ("jazz", "caz"),
    "Arabesk": ("arabesk",),
    "Klasik": ("klasik",),
    "Rock": ("rock", "rok"),
    "Metal": ("metal",),
    "Nostaljik": ("nostaljik", "nostalji"),
}

MOOD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "Romantik": ("romantik", "aşk"),
    "Duygusal": ("duygusal", "hüzünlü", "duygulu"),
    "Eğlenceli": ("eğlenceli", "coşkulu", "hareketli", "neşeli", "coşturan"),
    "Sakin": ("sakin", "huzurlu", "yavaş"),
}

VOCAL_ALIASES: Dict[Vocal, Tuple[str, ...]] = {
    Vocal.FEMALE: ("kadın", "bayan", "kız", "female"),
    Vocal.MALE: ("erkek", "bay", "male"),
    Vocal.NO_PREFERENCE: ("fark etmez", "farketmez", "önemli değil", "farketmiyor", "no_preference"),
}


def join_options(options: Tuple[str, ...], conjunction: str = "veya") -> str:
    """``("A", "B", "C")`` → ``"A, B veya C"``."""
    if not options:
        return ""
    if len(options) == 1:
        return options[0]
    return f"{', '.join(options[:-1])} {conjunction} {options[-1]}"


def _match_alias(value: str, table: Dict[str, Tuple[str, ...]]) -> Optional[str]:
    needle = normalize_turn(value)
    for canonical, aliases in table.items():
        if needle == normalize_turn(canonical) or needle in aliases:
            return canonical
    return None


def canonical_genre(value: Optional[str]) -> Optional[str]:
    """Map a genre to its canonical label; unknown genres pass through."""
    text = collapse_whitespace(value or "")
    if not text:
        return None
    return _match_alias(text, GENRE_ALIASES) or text


def canonical_mood(value: Optional[str]) -> Optional[str]:
    """Map a mood to its canonical label; unknown moods pass through."""
    text = collapse_whitespace(value or "")
    if not text:
        return None
    return _match_alias(text, MOOD_ALIASES) or text


def canonical_vocal(value: Any) -> Optional[Vocal]:
    """Map a label, alias or enum value to :class:`Vocal` (``None`` if unknown)."""
    if value is None:
        return None
    if isinstance(value, Vocal):
        return value
    needle = normalize_turn(str(value))
    if not needle:
        return None
    for vocal in Vocal:
        if needle in (vocal.value, normalize_turn(vocal.label)):
            return vocal
    for vocal, aliases in VOCAL_ALIASES.items():
        if needle in aliases:
            return vocal
    for vocal, aliases in VOCAL_ALIASES.items():
        if any(contains_term(needle, alias) for alias in aliases):
            return vocal
    return None


def surface_forms(slot: Slot, value: Any) -> Tuple[str, ...]:
    """Words a user would type to name ``value`` for ``slot``."""
    if slot == Slot.VOCAL:
        vocal = canonical_vocal(value)
        if vocal is None:
            return ()
        return (vocal.label,) + VOCAL_ALIASES[vocal]
    if slot == Slot.SONG_TYPE:
        label = canonical_genre(value)
        return ((label,) + GENRE_ALIASES.get(label, ())) if label else ()
    if slot == Slot.SONG_STYLE:
        label = canonical_mood(value)
        return ((label,) + MOOD_ALIASES.get(label, ())) if label else ()
    return ()


def mentions_value(slot: Slot, value: Any, text: str) -> bool:
    """Whether ``text`` explicitly names ``value`` of a vocabulary slot."""
    return any(contains_term(text, form) for form in surface_forms(slot, value))
