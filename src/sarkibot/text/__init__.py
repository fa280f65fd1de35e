"""Text normalization package for sarkibot."""

from sarkibot.text.normalize import (
    collapse_whitespace,
    contains_term,
    normalize_quotes,
    normalize_turn,
    quote_for_prompt,
    tokenize,
    turkish_lower,
)

__all__ = [
    "collapse_whitespace",
    "contains_term",
    "normalize_quotes",
    "normalize_turn",
    "quote_for_prompt",
    "tokenize",
    "turkish_lower",
]
