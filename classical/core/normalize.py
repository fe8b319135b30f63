"""
Text and Key Normalisation
==========================

Converts arbitrary input into canonical text: upper-case ``A``-``Z`` only.
Every letter-domain cipher except Caesar works on canonical text.
"""

from __future__ import annotations

import re
from typing import Iterable

from classical.core.errors import InputValidationError, KeyShapeError

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

_NON_LETTERS = re.compile(r"[^A-Z]")


def normalize_text(raw: str) -> str:
    """Upper-case *raw* and drop everything outside ``A``-``Z``.

    >>> normalize_text("Attack at dawn!")
    'ATTACKATDAWN'
    """
    return _NON_LETTERS.sub("", raw.upper())


def normalize_key(raw: str) -> str:
    """Keywords follow the same rule as text."""
    return normalize_text(raw)


def require_text(raw: str, what: str = "text") -> str:
    """Normalise *raw* and reject an empty result.

    Raises:
        InputValidationError: No letters survive normalisation.
    """
    text = normalize_text(raw)
    if not text:
        raise InputValidationError(f"{what} contains no letters A-Z")
    return text


def require_keyword(raw: str, min_length: int = 1, what: str = "key") -> str:
    """Normalise a keyword and enforce a minimum length.

    Raises:
        InputValidationError: The keyword is empty after normalisation.
        KeyShapeError: The keyword is shorter than *min_length*.
    """
    if not isinstance(raw, str):
        raise KeyShapeError(f"{what} must be a string, got {type(raw).__name__}")
    key = require_text(raw, what)
    if len(key) < min_length:
        raise KeyShapeError(
            f"{what} must be at least {min_length} letters long (got {len(key)})"
        )
    return key


def keyword_errors(raw: object, min_length: int, what: str = "Key") -> list[str]:
    """Every reason *raw* is unusable as a keyword, without raising.

    Spaces are tolerated; any other non-letter is reported.
    """
    if not isinstance(raw, str) or not raw.strip():
        return [f"{what} must be a non-empty string"]
    errors = []
    if any(not (ch.isascii() and ch.isalpha()) and not ch.isspace() for ch in raw):
        errors.append(f"{what} must contain only letters (A-Z)")
    if len(normalize_key(raw)) < min_length:
        errors.append(f"{what} must be at least {min_length} letters long")
    return errors


def letter_to_index(letter: str) -> int:
    return ord(letter) - 65


def index_to_letter(index: int) -> str:
    return chr(index % 26 + 65)


def text_to_indices(text: str) -> list[int]:
    """Map canonical text to values in 0..25."""
    return [letter_to_index(ch) for ch in text]


def indices_to_text(values: Iterable[int]) -> str:
    return "".join(index_to_letter(v) for v in values)
