"""Text normalization for incoming chat turns.

Turkish needs its own lower-casing: ``"I".lower()`` is ``"i"`` in Python but
``"ı"`` in Turkish, and ``"İ".lower()`` yields ``"i̇"`` (with a combining dot)
which breaks substring matching against keyword lists.

Apply to:
- Keyword matching for closed questions
- Correction-marker detection during merge
- Measuring free-text length (after trimming only)
"""

from __future__ import annotations

import re
import unicodedata

# Quote characters to normalize before a turn is embedded in a prompt
QUOTE_CHARS = {
    '“': '"',  # left double quote "
    '”': '"',  # right double quote "
    '„': '"',  # low double quote „
    '«': '"',  # left-pointing double angle quote «
    '»': '"',  # right-pointing double angle quote »
    '‘': "'",  # left single quote '
    '’': "'",  # right single quote '
}

MULTI_WHITESPACE_PATTERN = re.compile(r'\s+')
WORD_PATTERN = re.compile(r'\w+', re.UNICODE)

_TR_LOWER_MAP = str.maketrans({"I": "ı", "İ": "i"})


def turkish_lower(text: str) -> str:
    """Lower-case with Turkish dotted/dotless I rules."""
    return unicodedata.normalize("NFC", text).translate(_TR_LOWER_MAP).lower()


def collapse_whitespace(text: str) -> str:
    """Trim and collapse runs of whitespace (including newlines) to one space."""
    return MULTI_WHITESPACE_PATTERN.sub(" ", text or "").strip()


def normalize_turn(text: str) -> str:
    """Normalize a user turn for matching: NFC, trim, collapse, Turkish lower."""
    return turkish_lower(collapse_whitespace(text))


def normalize_quotes(text: str) -> str:
    """Replace curly/angle quotes with straight ones."""
    result = text or ""
    for fancy, plain in QUOTE_CHARS.items():
        result = result.replace(fancy, plain)
    return result


def quote_for_prompt(text: str) -> str:
    """Prepare user text for embedding inside a double-quoted prompt line."""
    return normalize_quotes(text).strip().replace('"', "'")


def tokenize(text: str) -> list[str]:
    """Split normalized text into word tokens."""
    return WORD_PATTERN.findall(normalize_turn(text))


def contains_term(text: str, term: str, *, min_prefix: int = 4) -> bool:
    """Whether ``term`` occurs in ``text`` as a word (or word stem).

    Multi-word terms use substring containment on the normalized text.
    Single-word terms must equal a token, or prefix one when the term is at
    least ``min_prefix`` characters long (so "erkek" matches "erkekler" but
    "bay" does not match "bayan").
    """
    needle = normalize_turn(term)
    if not needle:
        return False
    if " " in needle:
        return needle in normalize_turn(text)
    for token in tokenize(text):
        if token == needle:
            return True
        if len(needle) >= min_prefix and token.startswith(needle):
            return True
    return False
