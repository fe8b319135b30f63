"""
LCG Stream Cipher
=================

XOR stream cipher keyed by a linear congruential generator:

.. math::

    X_{n+1} = (a X_n + c) \\bmod m, \\qquad k_i = X_{i+1} \\bmod 256

Plaintext is UTF-8 encoded, each byte is XORed with ``k_i`` and the
result is rendered as upper-case hex.  XOR is self-inverse, so decoding
regenerates the same keystream.  Unlike the letter ciphers this one works
on raw bytes, not canonical text.

An LCG is trivially predictable from a few outputs; this cipher exists to
show why.

References:
    - Lehmer, D. H. (1951). Mathematical Methods in Large-Scale Computing
      Units. Annals of the Computation Laboratory of Harvard University.
    - Park, S. K., & Miller, K. W. (1988). Random Number Generators: Good
      Ones Are Hard to Find. Communications of the ACM, 31(10).
    - Press, W. H. et al. (2007). Numerical Recipes, 3rd ed., Section 7.1.
"""

from __future__ import annotations

import re
import secrets
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional

from shared.math_utils import byte_counts, chi_squared_uniform
from shared.models import Finding, Severity
from classical.analyzers.entropy import EntropyAnalyzer
from classical.analyzers.rng_tester import LCGQualityTester, lcg_states
from classical.core.errors import CipherFormatError, InputValidationError, KeyShapeError
from classical.core.models import (
    AnalysisRecord,
    CipherFamilyName,
    LCGParams,
    LCGPreset,
    LCGQualityReport,
    StreamAnalysis,
    StreamStep,
    StreamVisualization,
)

# Read-only, process-wide.
PRESETS: Mapping[str, LCGPreset] = MappingProxyType({
    "NUMERICAL_RECIPES": LCGPreset(
        name="Numerical Recipes",
        multiplier=1664525,
        increment=1013904223,
        modulus=2**32,
        description="Common in Numerical Recipes books",
    ),
    "MINSTD": LCGPreset(
        name="MINSTD",
        multiplier=48271,
        increment=0,
        modulus=2**31 - 1,
        description="Minimal Standard by Park & Miller",
    ),
    "GLIBC": LCGPreset(
        name="GLIBC",
        multiplier=1103515245,
        increment=12345,
        modulus=2**31,
        description="Used in glibc rand()",
    ),
    "BORLAND": LCGPreset(
        name="Borland C",
        multiplier=22695477,
        increment=1,
        modulus=2**32,
        description="Borland C/C++ rand()",
    ),
    "SIMPLE": LCGPreset(
        name="Simple",
        multiplier=1103515245,
        increment=12345,
        modulus=256,
        description="Simple 8-bit LCG for demonstration",
    ),
})

_HEX = re.compile(r"^[0-9A-Fa-f]+$")


def validate_params(params: LCGParams) -> list[str]:
    """Every range violation in *params*; empty when usable."""
    errors = []
    if params.modulus <= 0:
        return ["Modulus must be a positive integer"]
    for field in ("seed", "multiplier", "increment"):
        value = getattr(params, field)
        if not 0 <= value < params.modulus:
            errors.append(f"{field.capitalize()} must be between 0 and {params.modulus - 1}")
    return errors


def coerce_params(key: Any) -> LCGParams:
    """Accept :class:`LCGParams`, a mapping or a 4-sequence and validate it.

    Raises:
        KeyShapeError: Wrong shape or a parameter out of range.
    """
    if isinstance(key, LCGParams):
        params = key
    elif isinstance(key, Mapping):
        params = LCGParams(**key)
    elif isinstance(key, (tuple, list)) and len(key) == 4:
        params = LCGParams(seed=key[0], multiplier=key[1], increment=key[2], modulus=key[3])
    else:
        raise KeyShapeError(
            "LCG key must be LCGParams or (seed, multiplier, increment, modulus)"
        )
    errors = validate_params(params)
    if errors:
        raise KeyShapeError("; ".join(errors))
    return params


def text_to_hex(text: str) -> str:
    """UTF-8 bytes of *text* as upper-case hex."""
    return text.encode("utf-8").hex().upper()


def hex_to_bytes(data: str) -> bytes:
    """Parse a hex string, ignoring whitespace.

    Raises:
        CipherFormatError: Non-hex characters or an odd number of digits.
    """
    cleaned = "".join(data.split())
    if not cleaned or not _HEX.match(cleaned):
        raise CipherFormatError("ciphertext must be a valid hex string")
    if len(cleaned) % 2:
        raise CipherFormatError("ciphertext hex string must have even length")
    return bytes.fromhex(cleaned)


def hex_to_text(data: str) -> str:
    try:
        return hex_to_bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CipherFormatError(f"decoded bytes are not valid UTF-8: {exc}") from exc


def generate_random_seed(modulus: int) -> int:
    if modulus <= 0:
        raise KeyShapeError("Modulus must be a positive integer")
    return secrets.randbelow(modulus)


def _printable(byte: int) -> str:
    return chr(byte) if 32 <= byte < 127 else f"\\x{byte:02X}"


class LCGStreamCipher:
    """Byte-level XOR cipher over an LCG keystream.

    Usage::

        lcg = LCGStreamCipher()
        params = PRESETS["NUMERICAL_RECIPES"].with_seed(42)
        ct = lcg.encode("Hello", params)    # hex string
        lcg.decode(ct, params)              # 'Hello'
    """

    name = CipherFamilyName.LCG

    def __init__(
        self,
        *,
        tester: Optional[LCGQualityTester] = None,
        entropy: Optional[EntropyAnalyzer] = None,
        low_quality_score: float = 60.0,
        min_analysis_length: int = 10,
    ) -> None:
        self.tester = tester or LCGQualityTester()
        self.entropy = entropy or EntropyAnalyzer()
        self.low_quality_score = low_quality_score
        self.min_analysis_length = min_analysis_length

    @staticmethod
    def keystream(params: LCGParams, length: int) -> bytes:
        return bytes(s % 256 for s in lcg_states(params, length))

    @staticmethod
    def _xor(data: bytes, stream: bytes) -> bytes:
        return bytes(d ^ k for d, k in zip(data, stream))

    def encode(self, text: str, key: Any) -> str:
        params = coerce_params(key)
        if not isinstance(text, str) or not text:
            raise InputValidationError("plaintext must be a non-empty string")
        data = text.encode("utf-8")
        return self._xor(data, self.keystream(params, len(data))).hex().upper()

    def decode(self, ciphertext: str, key: Any) -> str:
        params = coerce_params(key)
        data = hex_to_bytes(ciphertext)
        plain = self._xor(data, self.keystream(params, len(data)))
        try:
            return plain.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CipherFormatError(
                "decrypted bytes are not valid UTF-8; wrong key or corrupted ciphertext"
            ) from exc

    def quality(self, params: LCGParams, sample_size: Optional[int] = None) -> LCGQualityReport:
        """Grade *params* over ``min(1000, modulus)`` states by default."""
        size = sample_size if sample_size is not None else min(1000, params.modulus)
        return self.tester.evaluate(params, lcg_states(params, size))

    def analyze_parameters(self, key: Any) -> LCGQualityReport:
        return self.quality(coerce_params(key))

    def advisories(self, key: Any) -> list[Finding]:
        report = self.analyze_parameters(key)
        if report.overall_score >= self.low_quality_score:
            return []
        return [Finding(
            severity=Severity.MEDIUM,
            title="Low-quality LCG parameters",
            description=f"Keystream graded {report.grade} ({report.overall_score:.0f}/100).",
            evidence={t.name: t.score for t in report.tests},
            recommendation=report.recommendation,
        )]

    def visualize(self, text: str, key: Any) -> Optional[StreamVisualization]:
        params = coerce_params(key)
        if not isinstance(text, str) or not text:
            return None
        data = text.encode("utf-8")
        states = lcg_states(params, len(data))

        steps = []
        previous = params.seed
        for i, (byte, state) in enumerate(zip(data, states)):
            key_byte = state % 256
            cipher_byte = byte ^ key_byte
            steps.append(StreamStep(
                position=i,
                char=_printable(byte),
                state=state,
                plain_byte=byte,
                key_byte=key_byte,
                cipher_byte=cipher_byte,
                plain_binary=f"{byte:08b}",
                key_binary=f"{key_byte:08b}",
                cipher_binary=f"{cipher_byte:08b}",
                calculation=(
                    f"({params.multiplier} x {previous} + {params.increment}) "
                    f"mod {params.modulus} = {state}; {byte} XOR {key_byte} = {cipher_byte}"
                ),
            ))
            previous = state

        report = self.tester.evaluate(params, states)
        return StreamVisualization(
            family=self.name,
            plaintext=text,
            ciphertext=bytes(s.cipher_byte for s in steps).hex().upper(),
            params=params,
            plaintext_hex=data.hex().upper(),
            steps=steps,
            quality_score=report.overall_score,
            quality_grade=report.grade,
        )

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        data = hex_to_bytes(ciphertext) if (ciphertext or "").strip() else b""
        if len(data) < self.min_analysis_length:
            return StreamAnalysis.insufficient(
                self.name, len(data), self.min_analysis_length, unit="bytes"
            )

        bits, percentage = self.entropy.byte_entropy(data)
        chi2, _ = chi_squared_uniform(byte_counts(data))
        return StreamAnalysis(
            family=self.name,
            text_length=len(data),
            minimum_length=self.min_analysis_length,
            byte_entropy=round(bits, 4),
            byte_entropy_percentage=round(percentage, 2),
            byte_chi_squared=round(chi2, 4),
            quality=self.analyze_parameters(key) if key is not None else None,
        )
