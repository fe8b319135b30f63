"""
One-Time Pad
============

Vigenere-form substitution ``C = (P + K) mod 26`` with the contract that
gives perfect secrecy: the key is at least as long as the message (it is
never repeated) and it is truly random.

The key-length rule is enforced (:class:`KeyTooShortError`).  Randomness
and single use cannot be enforced; they are reported as advisory
:class:`shared.models.Finding` objects.  The randomness check is a
heuristic: keys under 10 letters are never considered random, longer keys
must have a chi-squared statistic of letter counts against uniform below
40.  The threshold is empirical, not a formal test.

References:
    - Vernam, G. S. (1926). Cipher Printing Telegraph Systems. Journal of
      the AIEE, 45, 109-115.
    - Shannon, C. E. (1949). Communication Theory of Secrecy Systems.
      Bell System Technical Journal, 28(4), 656-715.
"""

from __future__ import annotations

import secrets
from typing import Any, Optional, Sequence

from shared.math_utils import chi_squared_uniform, letter_counts
from shared.models import Finding, Severity
from classical.analyzers.entropy import EntropyAnalyzer
from classical.analyzers.frequency import FrequencyAnalyzer
from classical.core.errors import KeyShapeError, KeyTooShortError
from classical.core.models import (
    AnalysisRecord,
    CipherFamilyName,
    KeyReuseCheck,
    KeystreamStep,
    OTPVisualization,
    ParameterValidation,
    SecurityAssessment,
    StatisticalAnalysis,
)
from classical.core.normalize import (
    ALPHABET,
    indices_to_text,
    letter_to_index,
    normalize_key,
    normalize_text,
    require_text,
    text_to_indices,
)


# ===================================================================== #
#  Key generation and encodings
# ===================================================================== #


def generate_random_key(length: int) -> str:
    """Uniformly random letters from the OS CSPRNG."""
    if isinstance(length, bool) or not isinstance(length, int) or length < 1:
        raise ValueError("key length must be a positive integer")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def text_to_hex(text: str) -> str:
    """Letter values 0..25 as space-separated two-digit hex.

    >>> text_to_hex("HELLO")
    '07 04 0B 0B 0E'
    """
    return " ".join(f"{v:02X}" for v in text_to_indices(normalize_text(text)))


def text_to_binary(text: str) -> str:
    """Letter values 0..25 as space-separated five-bit groups."""
    return " ".join(f"{v:05b}" for v in text_to_indices(normalize_text(text)))


def generate_random_key_hex(length: int) -> str:
    return text_to_hex(generate_random_key(length))


def generate_random_key_binary(length: int) -> str:
    return text_to_binary(generate_random_key(length))


# ===================================================================== #
#  Cipher
# ===================================================================== #


class OneTimePadCipher:
    """Perfect-secrecy pad over the 26-letter alphabet.

    Usage::

        otp = OneTimePadCipher()
        ct = otp.encode("HELLO", "XMCKL")   # 'EQNVZ'
        otp.decode(ct, "XMCKL")             # 'HELLO'
    """

    name = CipherFamilyName.OTP

    def __init__(
        self,
        *,
        random_threshold: float = 40.0,
        min_random_key_length: int = 10,
        analyzer: Optional[FrequencyAnalyzer] = None,
        entropy: Optional[EntropyAnalyzer] = None,
        min_analysis_length: int = 10,
    ) -> None:
        self.random_threshold = random_threshold
        self.min_random_key_length = min_random_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.entropy = entropy or EntropyAnalyzer()
        self.min_analysis_length = min_analysis_length

    def _prepare(self, text: str, key: Any, what: str) -> tuple[str, str]:
        if not isinstance(key, str):
            raise KeyShapeError(f"pad key must be a string, got {type(key).__name__}")
        body = require_text(text, what)
        pad = require_text(key, "key")
        if len(pad) < len(body):
            raise KeyTooShortError(
                f"key must be at least as long as the {what} "
                f"({len(pad)} < {len(body)} letters)"
            )
        return body, pad[: len(body)]

    def encode(self, text: str, key: Any) -> str:
        plain, pad = self._prepare(text, key, "plaintext")
        return indices_to_text(
            p + k for p, k in zip(text_to_indices(plain), text_to_indices(pad))
        )

    def decode(self, ciphertext: str, key: Any) -> str:
        cipher, pad = self._prepare(ciphertext, key, "ciphertext")
        return indices_to_text(
            c - k for c, k in zip(text_to_indices(cipher), text_to_indices(pad))
        )

    # ------------------------------------------------------------------ #
    #  Advisories
    # ------------------------------------------------------------------ #

    def is_key_random(self, key: str) -> bool:
        """Heuristic: long enough and chi-squared vs uniform below threshold."""
        pad = normalize_key(key)
        if len(pad) < self.min_random_key_length:
            return False
        chi2, _ = chi_squared_uniform(letter_counts(pad))
        return chi2 < self.random_threshold

    @staticmethod
    def security_assessment(text_length: int, key_length: int, key_random: bool) -> SecurityAssessment:
        issues: list[str] = []
        if key_length < text_length:
            issues.append(
                f"Key is too short ({key_length} < {text_length}). "
                "Key must be at least as long as plaintext."
            )
        if not key_random:
            issues.append(
                "Key does not appear to be truly random. "
                "Use cryptographically secure random generator."
            )

        if key_length >= text_length and key_random:
            return SecurityAssessment(level="Perfect", score=100, issues=issues)
        if key_length >= text_length:
            return SecurityAssessment(
                level="High (Non-Random Key)", score=70, issues=issues,
                recommendations=["Generate the key with a cryptographic RNG"],
            )
        if key_random:
            return SecurityAssessment(
                level="Medium (Key Too Short)", score=50, issues=issues,
                recommendations=["Use a key at least as long as the message"],
            )
        return SecurityAssessment(
            level="Low (Multiple Issues)", score=30, issues=issues,
            recommendations=[
                "Use a key at least as long as the message",
                "Generate the key with a cryptographic RNG",
            ],
        )

    def validate_params(self, text: str, key: str) -> ParameterValidation:
        """Collect blocking errors and advisory warnings without raising."""
        errors: list[str] = []
        warnings: list[str] = []
        body = normalize_text(text or "")
        pad = normalize_key(key or "")

        if not body:
            errors.append("Text must contain at least one alphabetic character")
        if not pad:
            errors.append("Key must contain at least one alphabetic character")
        if key and any(not (ch.isascii() and ch.isalpha()) and not ch.isspace() for ch in key):
            errors.append("Key must contain only letters (A-Z)")
        if len(pad) < len(body):
            errors.append(
                f"Key is too short ({len(pad)} < {len(body)}). "
                "Key must be at least as long as text."
            )
        if pad and not self.is_key_random(pad):
            warnings.append("Key does not appear to be truly random.")
        if body and len(pad) > len(body):
            warnings.append(
                f"Key is longer than necessary ({len(pad)} > {len(body)}). "
                f"Only the first {len(body)} letters will be used."
            )
        return ParameterValidation(valid=not errors, errors=errors, warnings=warnings)

    def advisories(self, text: str, key: str) -> list[Finding]:
        """Warnings for a key that passes the length check."""
        findings: list[Finding] = []
        pad = normalize_key(key)
        if not self.is_key_random(pad):
            findings.append(Finding(
                severity=Severity.HIGH,
                title="Non-random pad key",
                description=(
                    "The key does not look uniformly random; a pad only gives "
                    "perfect secrecy with a truly random key."
                ),
                evidence=f"key length {len(pad)}",
                recommendation="Generate the key with `classicore keygen`.",
            ))
        body_len = len(normalize_text(text))
        if len(pad) > body_len:
            findings.append(Finding(
                severity=Severity.INFO,
                title="Key longer than text",
                description=f"Only the first {body_len} key letters are used.",
            ))
        return findings

    @staticmethod
    def check_key_reuse(key: str, messages: Sequence[str]) -> KeyReuseCheck:
        """Flag one pad used for two or more messages.

        Reuse cannot be prevented, only reported: two ciphertexts under one
        pad differ by the difference of their plaintexts.
        """
        if len(messages) < 2:
            return KeyReuseCheck(
                vulnerable=False,
                message_count=len(messages),
                message="Need at least 2 messages to check for key reuse",
            )
        return KeyReuseCheck(
            vulnerable=True,
            message_count=len(messages),
            severity=Severity.CRITICAL.value,
            message=(
                f"KEY REUSE DETECTED! Using the same OTP key for {len(messages)} "
                "messages completely breaks security."
            ),
        )

    # ------------------------------------------------------------------ #
    #  Visualization / analysis
    # ------------------------------------------------------------------ #

    def visualize(self, text: str, key: Any) -> Optional[OTPVisualization]:
        if not normalize_text(text):
            return None
        plain, pad = self._prepare(text, key, "plaintext")
        cipher = self.encode(plain, pad)
        steps = [
            KeystreamStep(
                position=i,
                plain_char=p,
                key_char=k,
                cipher_char=c,
                plain_value=letter_to_index(p),
                key_value=letter_to_index(k),
                cipher_value=letter_to_index(c),
                calculation=(
                    f"({letter_to_index(p)} + {letter_to_index(k)}) mod 26 = {letter_to_index(c)}"
                ),
            )
            for i, (p, k, c) in enumerate(zip(plain, pad, cipher))
        ]
        key_random = self.is_key_random(key)
        return OTPVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=cipher,
            keyword=pad,
            keystream=pad,
            steps=steps,
            key_is_random=key_random,
            security=self.security_assessment(
                len(plain), len(normalize_key(key)), key_random
            ),
            plaintext_hex=text_to_hex(plain),
            key_hex=text_to_hex(pad),
            ciphertext_hex=text_to_hex(cipher),
            plaintext_binary=text_to_binary(plain),
            key_binary=text_to_binary(pad),
            ciphertext_binary=text_to_binary(cipher),
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        text = normalize_text(ciphertext)
        if len(text) < self.min_analysis_length:
            return StatisticalAnalysis.insufficient(
                self.name, len(text), self.min_analysis_length
            )

        stats = self.analyzer.statistics(text)
        security = None
        if key:
            pad = normalize_key(key)
            security = self.security_assessment(len(text), len(pad), self.is_key_random(pad))
        return StatisticalAnalysis(
            family=self.name,
            text_length=len(text),
            minimum_length=self.min_analysis_length,
            statistics=stats,
            ic_interpretation=(
                "Excellent - very random"
                if stats.index_of_coincidence < 0.045
                else "Potentially weak encryption"
            ),
            chi_interpretation=(
                "Excellent uniformity"
                if stats.chi_squared_normalized < 30
                else "Non-uniform distribution"
            ),
            entropy_interpretation=self.entropy.interpret(stats.entropy_percentage),
            security=security,
        )
