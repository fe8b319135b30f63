"""
Cipher Error Taxonomy
=====================

Every failure raised by a cipher family derives from :class:`CipherError`,
itself a :class:`ValueError`, so callers can catch the whole family or a
single category.
"""

from __future__ import annotations


class CipherError(ValueError):
    """Base class for all cipher failures."""


class InputValidationError(CipherError):
    """Text or key is empty after normalisation."""


class KeyShapeError(CipherError):
    """Key material has the wrong length, size, shape or range.

    Covers short keywords, non-square or wrongly sized matrices,
    non-invertible Hill keys, rail counts below two and out-of-range LCG
    parameters.
    """


class KeyTooShortError(KeyShapeError):
    """One-time-pad key shorter than the text it must cover."""


class CipherFormatError(CipherError):
    """Ciphertext does not have the structure its family requires.

    Odd-length Playfair text, Hill text that is not a whole number of
    blocks, malformed hex, invalid UTF-8 after stream decryption.
    """
