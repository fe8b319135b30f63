"""
Substitution Ciphers
====================

Single-letter substitution with a per-position key value K_i:

    - Caesar:    K_i = shift                      C = (P + K) mod 26
    - Vigenere:  K_i = keyword[i mod len]         C = (P + K) mod 26
    - Beaufort:  K_i = keyword[i mod len]         C = (K - P) mod 26
    - Autokey:   K = keyword || plaintext         C = (P + K) mod 26

Caesar alone keeps case and passes non-letters through; the other three
work on canonical text.  Beaufort is reciprocal: decoding is the same
function as encoding.  The Autokey decoder does not know the plaintext in
advance, so it extends the keystream with each letter as it recovers it.

References:
    - Kahn, D. (1996). The Codebreakers, chapters 4-5. Scribner.
    - Vigenere, B. de (1586). Traicte des Chiffres.
    - Singh, S. (1999). The Code Book, chapter 2. Fourth Estate.
"""

from __future__ import annotations

from typing import Any, Optional

from classical.analyzers.frequency import FrequencyAnalyzer
from classical.core.errors import InputValidationError, KeyShapeError
from classical.core.models import (
    AnalysisRecord,
    CaesarAnalysis,
    CipherFamilyName,
    KeystreamStep,
    KeystreamVisualization,
    LetterMapping,
    PolyalphabeticAnalysis,
    ShiftCandidate,
    ShiftVisualization,
)
from classical.core.modmath import mod
from classical.core.normalize import (
    ALPHABET,
    index_to_letter,
    indices_to_text,
    letter_to_index,
    normalize_text,
    require_keyword,
    require_text,
    text_to_indices,
)


# ===================================================================== #
#  Shared helpers
# ===================================================================== #


def _repeat_key(keyword: str, length: int) -> str:
    """Repeat *keyword* to exactly *length* letters."""
    if not keyword:
        return ""
    return (keyword * (length // len(keyword) + 1))[:length]


def _keystream_steps(
    plaintext: str,
    keystream: str,
    ciphertext: str,
    formula: str,
    sources: Optional[list[str]] = None,
) -> list[KeystreamStep]:
    """Per-position mapping for keystream visualizations.

    *formula* is a format string over ``p``, ``k`` and ``c``.
    """
    steps = []
    for i, (p, k, c) in enumerate(zip(plaintext, keystream, ciphertext)):
        pv, kv, cv = letter_to_index(p), letter_to_index(k), letter_to_index(c)
        steps.append(KeystreamStep(
            position=i,
            plain_char=p,
            key_char=k,
            cipher_char=c,
            plain_value=pv,
            key_value=kv,
            cipher_value=cv,
            calculation=formula.format(p=pv, k=kv, c=cv),
            key_source=sources[i] if sources else None,
        ))
    return steps


def _polyalphabetic_analysis(
    family: CipherFamilyName,
    ciphertext: str,
    analyzer: FrequencyAnalyzer,
    minimum: int,
    *,
    reciprocal: bool = False,
) -> AnalysisRecord:
    text = normalize_text(ciphertext)
    if len(text) < minimum:
        return PolyalphabeticAnalysis.insufficient(family, len(text), minimum)

    key_lengths = analyzer.estimate_key_length(text)
    return PolyalphabeticAnalysis(
        family=family,
        text_length=len(text),
        minimum_length=minimum,
        statistics=analyzer.statistics(text),
        key_lengths=key_lengths,
        best_key_length=key_lengths[0].length if key_lengths else None,
        repeated_sequence_lengths=analyzer.repeated_sequence_key_lengths(text),
        is_reciprocal=reciprocal,
    )


# ===================================================================== #
#  Caesar
# ===================================================================== #


class CaesarCipher:
    """Constant shift; case and punctuation are preserved.

    Usage::

        caesar = CaesarCipher()
        caesar.encode("Hello, World!", 3)   # 'Khoor, Zruog!'
    """

    name = CipherFamilyName.CAESAR

    def __init__(
        self,
        *,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 10,
    ) -> None:
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    @staticmethod
    def coerce_shift(key: Any) -> int:
        """Accept an int or an integer string; return it reduced into [0, 26)."""
        if isinstance(key, bool):
            raise KeyShapeError("Caesar shift must be an integer")
        if isinstance(key, str):
            try:
                key = int(key.strip())
            except ValueError:
                raise KeyShapeError(f"Caesar shift must be an integer, got {key!r}") from None
        if not isinstance(key, int):
            raise KeyShapeError(f"Caesar shift must be an integer, got {type(key).__name__}")
        return mod(key, 26)

    @staticmethod
    def _shift(text: str, shift: int) -> str:
        out = []
        for ch in text:
            if "A" <= ch <= "Z":
                out.append(index_to_letter(letter_to_index(ch) + shift))
            elif "a" <= ch <= "z":
                out.append(chr(mod(ord(ch) - 97 + shift, 26) + 97))
            else:
                out.append(ch)
        return "".join(out)

    def encode(self, text: str, key: Any) -> str:
        shift = self.coerce_shift(key)
        if not normalize_text(text):
            raise InputValidationError("text contains no letters A-Z")
        return self._shift(text, shift)

    def decode(self, ciphertext: str, key: Any) -> str:
        shift = self.coerce_shift(key)
        if not normalize_text(ciphertext):
            raise InputValidationError("ciphertext contains no letters A-Z")
        return self._shift(ciphertext, -shift)

    def rot13(self, text: str) -> str:
        """ROT13 is Caesar with shift 13 and is its own inverse."""
        return self.encode(text, 13)

    def visualize(self, text: str, key: Any) -> Optional[ShiftVisualization]:
        shift = self.coerce_shift(key)
        if not normalize_text(text):
            return None
        cipher_alphabet = self._shift(ALPHABET, shift)
        return ShiftVisualization(
            family=self.name,
            plaintext=text,
            ciphertext=self._shift(text, shift),
            shift=shift,
            plain_alphabet=ALPHABET,
            cipher_alphabet=cipher_alphabet,
            mapping=[
                LetterMapping(plain=p, cipher=c)
                for p, c in zip(ALPHABET, cipher_alphabet)
            ],
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        """Brute-force all 26 shifts, ranked by chi-squared against English."""
        text = normalize_text(ciphertext)
        if len(text) < self.min_analysis_length:
            return CaesarAnalysis.insufficient(self.name, len(text), self.min_analysis_length)

        scores = self.analyzer.best_shifts(text)
        return CaesarAnalysis(
            family=self.name,
            text_length=len(text),
            minimum_length=self.min_analysis_length,
            statistics=self.analyzer.statistics(text),
            candidates=[
                ShiftCandidate(
                    shift=shift,
                    english_chi_squared=round(chi2, 4),
                    preview=self._shift(text[:30], -shift),
                )
                for shift, chi2 in scores
            ],
            best_shift=scores[0][0],
        )


# ===================================================================== #
#  Vigenere
# ===================================================================== #


class VigenereCipher:
    """Repeating-keyword polyalphabetic cipher.

    Usage::

        vig = VigenereCipher()
        vig.encode("ATTACK AT DAWN", "LEMON")   # 'LXFOPVEFRNHR'
    """

    name = CipherFamilyName.VIGENERE

    def __init__(
        self,
        *,
        min_key_length: int = 3,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.min_key_length = min_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    def keystream(self, keyword: str, length: int) -> str:
        return _repeat_key(keyword, length)

    def encode(self, text: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        plain = require_text(text)
        stream = self.keystream(keyword, len(plain))
        return indices_to_text(
            p + k for p, k in zip(text_to_indices(plain), text_to_indices(stream))
        )

    def decode(self, ciphertext: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        cipher = require_text(ciphertext, "ciphertext")
        stream = self.keystream(keyword, len(cipher))
        return indices_to_text(
            c - k for c, k in zip(text_to_indices(cipher), text_to_indices(stream))
        )

    @staticmethod
    def generate_square() -> list[str]:
        """The 26x26 tabula recta; row *k* is the alphabet shifted by *k*."""
        return [ALPHABET[k:] + ALPHABET[:k] for k in range(26)]

    @staticmethod
    def square_char(plain: str, key: str) -> str:
        """Look up the tabula recta at row *key*, column *plain*."""
        return index_to_letter(letter_to_index(plain.upper()) + letter_to_index(key.upper()))

    def visualize(self, text: str, key: Any) -> Optional[KeystreamVisualization]:
        keyword = require_keyword(key, self.min_key_length)
        plain = normalize_text(text)
        if not plain:
            return None
        stream = self.keystream(keyword, len(plain))
        cipher = self.encode(plain, keyword)
        return KeystreamVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=cipher,
            keyword=keyword,
            keystream=stream,
            steps=_keystream_steps(plain, stream, cipher, "({p} + {k}) mod 26 = {c}"),
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        return _polyalphabetic_analysis(
            self.name, ciphertext, self.analyzer, self.min_analysis_length
        )


# ===================================================================== #
#  Beaufort
# ===================================================================== #


class BeaufortCipher:
    """Reciprocal variant of Vigenere: ``C = (K - P) mod 26``.

    Running the cipher twice with the same key returns the original text,
    so :meth:`decode` is :meth:`encode`.
    """

    name = CipherFamilyName.BEAUFORT

    def __init__(
        self,
        *,
        min_key_length: int = 3,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.min_key_length = min_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    def encode(self, text: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        plain = require_text(text)
        stream = _repeat_key(keyword, len(plain))
        return indices_to_text(
            k - p for p, k in zip(text_to_indices(plain), text_to_indices(stream))
        )

    def decode(self, ciphertext: str, key: Any) -> str:
        return self.encode(ciphertext, key)

    @staticmethod
    def generate_square() -> list[str]:
        """Row *k*, column *p* holds ``(k - p) mod 26``."""
        return [
            "".join(index_to_letter(k - p) for p in range(26)) for k in range(26)
        ]

    def visualize(self, text: str, key: Any) -> Optional[KeystreamVisualization]:
        keyword = require_keyword(key, self.min_key_length)
        plain = normalize_text(text)
        if not plain:
            return None
        stream = _repeat_key(keyword, len(plain))
        cipher = self.encode(plain, keyword)
        return KeystreamVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=cipher,
            keyword=keyword,
            keystream=stream,
            steps=_keystream_steps(plain, stream, cipher, "({k} - {p}) mod 26 = {c}"),
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        return _polyalphabetic_analysis(
            self.name,
            ciphertext,
            self.analyzer,
            self.min_analysis_length,
            reciprocal=True,
        )


# ===================================================================== #
#  Autokey
# ===================================================================== #


class AutokeyCipher:
    """Keystream is the keyword followed by the plaintext itself.

    The keystream always has exactly the length of the text; it never
    wraps around the keyword.
    """

    name = CipherFamilyName.AUTOKEY

    def __init__(
        self,
        *,
        min_key_length: int = 3,
        analyzer: Optional[FrequencyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.min_key_length = min_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.min_analysis_length = min_analysis_length

    @staticmethod
    def keystream(keyword: str, plaintext: str) -> str:
        return (keyword + plaintext)[: len(plaintext)]

    def encode(self, text: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        plain = require_text(text)
        stream = self.keystream(keyword, plain)
        return indices_to_text(
            p + k for p, k in zip(text_to_indices(plain), text_to_indices(stream))
        )

    def decode(self, ciphertext: str, key: Any) -> str:
        keyword = require_keyword(key, self.min_key_length)
        cipher = require_text(ciphertext, "ciphertext")

        stream = list(keyword)
        recovered: list[str] = []
        for i, ch in enumerate(cipher):
            # past the keyword, K_i is the letter recovered len(keyword) steps ago
            k = stream[i]
            p = index_to_letter(letter_to_index(ch) - letter_to_index(k))
            recovered.append(p)
            stream.append(p)
        return "".join(recovered)

    def visualize(self, text: str, key: Any) -> Optional[KeystreamVisualization]:
        keyword = require_keyword(key, self.min_key_length)
        plain = normalize_text(text)
        if not plain:
            return None
        stream = self.keystream(keyword, plain)
        cipher = self.encode(plain, keyword)
        sources = ["keyword" if i < len(keyword) else "plaintext" for i in range(len(plain))]
        return KeystreamVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=cipher,
            keyword=keyword,
            keystream=stream,
            steps=_keystream_steps(
                plain, stream, cipher, "({p} + {k}) mod 26 = {c}", sources
            ),
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        return _polyalphabetic_analysis(
            self.name, ciphertext, self.analyzer, self.min_analysis_length
        )
