"""
Super Encryption
================

Product cipher of one substitution stage (Vigenere) and one transposition
stage (Columnar), applied in either order:

    - sub-trans:  C = Columnar(Vigenere(P, k_s), k_t)
    - trans-sub:  C = Vigenere(Columnar(P, k_t), k_s)

Decoding undoes the last-applied stage first.

In sub-trans order the plaintext is padded to a full Columnar rectangle
before the Vigenere stage, so the filler is encrypted with everything
else and the transposition adds no plaintext filler of its own.

References:
    - Shannon, C. E. (1949). Communication Theory of Secrecy Systems,
      Section 15 (product ciphers). Bell System Technical Journal, 28(4).
    - Kahn, D. (1996). The Codebreakers, chapter 10 (ADFGVX). Scribner.
"""

from __future__ import annotations

from typing import Any, Optional

from classical.analyzers.entropy import EntropyAnalyzer
from classical.analyzers.frequency import FrequencyAnalyzer
from classical.ciphers.substitution import VigenereCipher
from classical.ciphers.transposition import transpose, untranspose
from classical.core.errors import KeyShapeError
from classical.core.models import (
    AnalysisRecord,
    CipherFamilyName,
    LayeringComparison,
    ParameterValidation,
    SecurityAssessment,
    StatisticalAnalysis,
    SuperKey,
    SuperOrder,
    SuperPass,
    SuperVisualization,
)
from classical.core.normalize import (
    keyword_errors,
    normalize_text,
    require_keyword,
    require_text,
)


def coerce_super_key(key: Any) -> SuperKey:
    if isinstance(key, SuperKey):
        return key
    if isinstance(key, dict):
        return SuperKey(**key)
    if isinstance(key, (tuple, list)) and len(key) in (2, 3):
        order = SuperOrder(key[2]) if len(key) == 3 else SuperOrder.SUB_TRANS
        return SuperKey(substitution_key=key[0], transposition_key=key[1], order=order)
    raise KeyShapeError(
        "super encryption key must be a SuperKey or a "
        "(substitution_key, transposition_key[, order]) tuple"
    )


def security_level(sub_len: int, trans_len: int) -> SecurityAssessment:
    """Heuristic level from key lengths.

    Uses the mean key length and the product of lengths; the bands are
    empirical.
    """
    strength = (sub_len + trans_len) / 2
    complexity = sub_len * trans_len

    if complexity >= 100 and strength >= 8:
        level, score = "Very High", 95
    elif complexity >= 50 and strength >= 6:
        level, score = "High", 80
    elif complexity >= 25 and strength >= 4:
        level, score = "Medium", 60
    else:
        level, score = "Low", 40

    recommendations = []
    if sub_len < 8:
        recommendations.append(
            "Use a longer substitution key (minimum 8 characters recommended)"
        )
    if trans_len < 6:
        recommendations.append(
            "Use a longer transposition key (minimum 6 characters recommended)"
        )
    if sub_len == trans_len:
        recommendations.append("Consider using different key lengths for added complexity")

    return SecurityAssessment(
        level=level,
        score=score,
        issues=[f"key strength {strength:.1f}, complexity {complexity}"],
        recommendations=recommendations,
    )


class SuperEncryptionCipher:
    """Vigenere and Columnar pipelined in a configurable order.

    Usage::

        sup = SuperEncryptionCipher()
        key = SuperKey(substitution_key="LEMON", transposition_key="ZEBRA")
        ct = sup.encode("ATTACK AT DAWN", key)
        sup.decode(ct, key)   # 'ATTACKATDAWN'
    """

    name = CipherFamilyName.SUPER

    def __init__(
        self,
        *,
        filler: str = "X",
        min_substitution_key_length: int = 3,
        min_transposition_key_length: int = 2,
        analyzer: Optional[FrequencyAnalyzer] = None,
        entropy: Optional[EntropyAnalyzer] = None,
        min_analysis_length: int = 20,
    ) -> None:
        self.filler = filler
        self.min_transposition_key_length = min_transposition_key_length
        self.analyzer = analyzer or FrequencyAnalyzer()
        self.entropy = entropy or EntropyAnalyzer()
        self.min_analysis_length = min_analysis_length
        self._vigenere = VigenereCipher(
            min_key_length=min_substitution_key_length, analyzer=self.analyzer
        )

    def _keys(self, key: Any) -> tuple[str, str, SuperOrder]:
        sk = coerce_super_key(key)
        sub_key = require_keyword(
            sk.substitution_key, self._vigenere.min_key_length, "substitution key"
        )
        trans_key = require_keyword(
            sk.transposition_key, self.min_transposition_key_length, "transposition key"
        )
        return sub_key, trans_key, sk.order

    def _pad(self, text: str, cols: int) -> str:
        return text + self.filler * (-len(text) % cols)

    def _passes(self, plain: str, sub_key: str, trans_key: str, order: SuperOrder) -> list[SuperPass]:
        vigenere = ("vigenere", "Vigenere Cipher", sub_key)
        columnar = ("columnar", "Columnar Transposition", trans_key)
        stages = [vigenere, columnar] if order is SuperOrder.SUB_TRANS else [columnar, vigenere]
        if order is SuperOrder.SUB_TRANS:
            plain = self._pad(plain, len(trans_key))

        passes = []
        current = plain
        for number, (method, label, stage_key) in enumerate(stages, start=1):
            if method == "vigenere":
                out = self._vigenere.encode(current, stage_key)
            else:
                out = transpose(current, stage_key, self.filler)
            passes.append(SuperPass(
                pass_number=number,
                method=method,
                method_name=label,
                input=current,
                output=out,
                key=stage_key,
            ))
            current = out
        return passes

    def encode(self, text: str, key: Any) -> str:
        sub_key, trans_key, order = self._keys(key)
        plain = require_text(text)
        return self._passes(plain, sub_key, trans_key, order)[-1].output

    def decode(self, ciphertext: str, key: Any) -> str:
        sub_key, trans_key, order = self._keys(key)
        cipher = require_text(ciphertext, "ciphertext")
        if order is SuperOrder.SUB_TRANS:
            plain = self._vigenere.decode(untranspose(cipher, trans_key), sub_key)
        else:
            plain = untranspose(self._vigenere.decode(cipher, sub_key), trans_key)
        return plain.rstrip(self.filler)

    def visualize(self, text: str, key: Any) -> Optional[SuperVisualization]:
        sub_key, trans_key, order = self._keys(key)
        plain = normalize_text(text)
        if not plain:
            return None
        passes = self._passes(plain, sub_key, trans_key, order)
        return SuperVisualization(
            family=self.name,
            plaintext=plain,
            ciphertext=passes[-1].output,
            order=order,
            passes=passes,
            security=security_level(len(sub_key), len(trans_key)),
        )

    @staticmethod
    def interpret_ic(ic: float) -> str:
        if ic < 0.045:
            return "Very random - consistent with strong encryption"
        if ic < 0.055:
            return "Random - good encryption"
        if ic < 0.065:
            return "Moderate randomness"
        return "Low randomness - may be vulnerable"

    @staticmethod
    def interpret_chi_squared(chi: float) -> str:
        if chi < 15:
            return "Excellent - very uniform distribution"
        if chi < 25:
            return "Good - uniform distribution"
        if chi < 35:
            return "Fair - somewhat uniform"
        return "Poor - non-uniform distribution"

    def analyze(self, ciphertext: str, key: Any = None) -> AnalysisRecord:
        text = normalize_text(ciphertext)
        if len(text) < self.min_analysis_length:
            return StatisticalAnalysis.insufficient(
                self.name, len(text), self.min_analysis_length
            )

        stats = self.analyzer.statistics(text)
        security = None
        if key is not None:
            sub_key, trans_key, _ = self._keys(key)
            security = security_level(len(sub_key), len(trans_key))
        return StatisticalAnalysis(
            family=self.name,
            text_length=len(text),
            minimum_length=self.min_analysis_length,
            statistics=stats,
            ic_interpretation=self.interpret_ic(stats.index_of_coincidence),
            chi_interpretation=self.interpret_chi_squared(stats.chi_squared_normalized),
            entropy_interpretation=self.entropy.interpret(stats.entropy_percentage),
            security=security,
        )

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def validate_params(self, text: str, key: Any) -> ParameterValidation:
        """Collect every problem with *text* and *key* without raising."""
        try:
            sk = coerce_super_key(key)
        except ValueError:    # includes pydantic and SuperOrder failures
            return ParameterValidation(
                valid=False,
                errors=["Key must be a SuperKey or a (substitution_key, transposition_key) pair"],
            )
        errors = keyword_errors(
            sk.substitution_key, self._vigenere.min_key_length, "Substitution key"
        )
        errors.extend(keyword_errors(
            sk.transposition_key, self.min_transposition_key_length, "Transposition key"
        ))
        if not isinstance(text, str) or not normalize_text(text):
            errors.append("Text must contain at least one alphabetic character")
        return ParameterValidation(valid=not errors, errors=errors)

    def compare_with_single(self, key: Any) -> LayeringComparison:
        """Security of both stages against the Vigenere stage alone."""
        sub_key, trans_key, _ = self._keys(key)
        layered = security_level(len(sub_key), len(trans_key))
        single = security_level(len(sub_key), 1)
        return LayeringComparison(
            single_complexity=len(sub_key),
            layered_complexity=len(sub_key) * len(trans_key),
            single_security=single,
            layered_security=layered,
            improvement_percentage=round((layered.score - single.score) / single.score * 100, 2),
            recommendation=(
                "Super encryption provides significantly better security than single ciphers."
            ),
        )
