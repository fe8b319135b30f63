"""
LCG Quality Tester
==================

Heuristic grading of a linear congruential generator used as a keystream
source for the stream cipher.

Tests:
    1. Full Period -- does the generator visit every residue mod m before
       repeating?  Only run when m <= 1000 since it is O(m).
    2. Spectral (simplified) -- mean and variance of the first 100 key
       bytes against the ideal uniform byte (mean 127.5).
    3. Chi-Square -- 16-bin histogram of key bytes against uniform.
       Critical value for 15 degrees of freedom at alpha = 0.05 is 24.996,
       so the test passes below 25.  Needs at least 50 bytes.

The overall score is the mean of the test scores.  Grade bands and the
pass thresholds are empirical and are not a cryptographic guarantee:

    - >= 90 : Excellent
    - >= 75 : Good
    - >= 60 : Fair
    - >= 40 : Poor
    - below : Very Poor

References:
    - Knuth, D. E. (1997). The Art of Computer Programming, Volume 2:
      Seminumerical Algorithms (3rd ed.), Sections 3.2.1 and 3.3.4.
      Addison-Wesley.
    - Hull, T. E., & Dobell, A. R. (1962). Random Number Generators.
      SIAM Review, 4(3), 230-254.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from shared.math_utils import chi_squared_uniform
from classical.core.models import LCGParams, LCGQualityReport, QualityTest


def lcg_states(params: LCGParams, count: int) -> list[int]:
    """Return ``X(1) .. X(count)`` of the generator (the seed is excluded)."""
    states: list[int] = []
    current = params.seed
    for _ in range(count):
        current = (params.multiplier * current + params.increment) % params.modulus
        states.append(current)
    return states


class LCGQualityTester:
    """Period detection and quality grading for LCG keystreams.

    Usage::

        tester = LCGQualityTester()
        states = lcg_states(params, 200)
        report = tester.evaluate(params, states)
        print(report.grade, report.overall_score)
    """

    CHI_SQUARE_BINS: int = 16
    CHI_SQUARE_CRITICAL: float = 25.0
    CHI_SQUARE_MIN_BYTES: int = 50
    SPECTRAL_SAMPLE: int = 100

    def __init__(
        self,
        *,
        period_search_limit: int = 1000,
        full_period_max_modulus: int = 1000,
    ) -> None:
        self.period_search_limit = period_search_limit
        self.full_period_max_modulus = full_period_max_modulus

    # ------------------------------------------------------------------ #
    #  Period
    # ------------------------------------------------------------------ #

    def detect_period(self, sequence: Sequence[int]) -> int | None:
        """Smallest period p with ``sequence[i] == sequence[i + p]`` for all i.

        The search is bounded by ``min(period_search_limit, len // 2)``;
        ``None`` means no period was found within that bound.
        """
        if len(sequence) < 2:
            return None
        max_period = min(self.period_search_limit, len(sequence) // 2)
        for period in range(1, max_period + 1):
            if all(
                sequence[i] == sequence[i + period]
                for i in range(len(sequence) - period)
            ):
                return period
        return None

    def check_full_period(self, params: LCGParams) -> bool | None:
        """``True`` iff the orbit from the seed covers all ``modulus`` residues.

        Returns ``None`` when the modulus is too large to walk.
        """
        if params.modulus > self.full_period_max_modulus:
            return None
        seen: set[int] = set()
        current = params.seed
        for _ in range(params.modulus + 1):
            if current in seen:
                break
            seen.add(current)
            current = (params.multiplier * current + params.increment) % params.modulus
        return len(seen) == params.modulus

    # ------------------------------------------------------------------ #
    #  Distribution tests
    # ------------------------------------------------------------------ #

    def spectral_score(self, key_bytes: Sequence[int]) -> float:
        """Simplified spectral score in [0, 100]; 50 for fewer than 10 bytes."""
        if len(key_bytes) < 10:
            return 50.0
        sample = np.asarray(key_bytes[: self.SPECTRAL_SAMPLE], dtype=np.float64)
        mean = float(sample.mean())
        variance = float(sample.var())
        mean_score = max(0.0, 100.0 - abs(mean - 127.5) * 2.0)
        variance_score = min(100.0, variance / 1000.0 * 100.0)
        return (mean_score + variance_score) / 2.0

    def chi_square_test(self, key_bytes: Sequence[int]) -> QualityTest:
        """16-bin chi-squared uniformity test over key bytes."""
        if len(key_bytes) < self.CHI_SQUARE_MIN_BYTES:
            return QualityTest(
                name="Chi-Square",
                passed=False,
                score=0.0,
                detail="Insufficient data for chi-square test",
            )
        bin_width = 256 // self.CHI_SQUARE_BINS
        bins = np.bincount(
            np.asarray(key_bytes, dtype=np.int64) // bin_width,
            minlength=self.CHI_SQUARE_BINS,
        )
        chi2, _ = chi_squared_uniform(bins.astype(np.float64))
        passed = chi2 < self.CHI_SQUARE_CRITICAL
        return QualityTest(
            name="Chi-Square",
            passed=passed,
            score=float(round(max(0.0, 100.0 - chi2 * 2.0))),
            detail=(
                f"chi2 = {chi2:.2f}: "
                + ("Uniform distribution" if passed else "Non-uniform distribution")
            ),
        )

    # ------------------------------------------------------------------ #
    #  Grading
    # ------------------------------------------------------------------ #

    @staticmethod
    def grade(score: float) -> str:
        if score >= 90:
            return "Excellent"
        if score >= 75:
            return "Good"
        if score >= 60:
            return "Fair"
        if score >= 40:
            return "Poor"
        return "Very Poor"

    @staticmethod
    def recommendation(score: float) -> str:
        if score >= 80:
            return "LCG parameters are well-chosen. Suitable for educational purposes."
        if score >= 60:
            return (
                "LCG parameters are acceptable but could be improved. "
                "Consider using a preset."
            )
        return (
            "LCG parameters are poor. Use a well-tested preset like "
            "NUMERICAL_RECIPES or MINSTD."
        )

    def evaluate(self, params: LCGParams, states: Sequence[int]) -> LCGQualityReport:
        """Run every applicable test over the generator *states*."""
        key_bytes = [s % 256 for s in states]
        tests: list[QualityTest] = []

        full_period = self.check_full_period(params)
        if full_period is not None:
            tests.append(QualityTest(
                name="Full Period",
                passed=full_period,
                score=100.0 if full_period else 50.0,
                detail=(
                    "Generator has full period"
                    if full_period
                    else "Generator does not have full period"
                ),
            ))

        spectral = self.spectral_score(key_bytes)
        tests.append(QualityTest(
            name="Spectral Test",
            passed=spectral > 70,
            score=round(spectral, 2),
            detail="Good distribution" if spectral > 70 else "Poor distribution",
        ))

        tests.append(self.chi_square_test(key_bytes))

        overall = sum(t.score for t in tests) / len(tests)
        return LCGQualityReport(
            params=params,
            sample_size=len(states),
            detected_period=self.detect_period(states),
            tests=tests,
            overall_score=float(round(overall)),
            grade=self.grade(overall),
            recommendation=self.recommendation(overall),
        )
