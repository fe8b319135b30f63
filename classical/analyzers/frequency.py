"""
Frequency Analyzer
==================

Letter-level frequency analysis of canonical ciphertext: letter
histograms, index of coincidence, chi-squared tests, n-gram tables and
two flavours of Kasiski examination.

Key-length search (Friedman / Kasiski style):
    For each candidate length k, split the ciphertext into k interleaved
    subsequences (every k-th letter).  If k is the true key length each
    subsequence is a Caesar shift of English and its IC sits near English
    IC; otherwise it sits near random IC.  Candidates are ranked by how
    close their average subsequence IC is to the reference value 0.065.

Classification by IC:
    - IC >= 0.060 : Monoalphabetic (or transposition / plaintext)
    - IC >= 0.045 : Mixed
    - below       : Polyalphabetic

References:
    - Friedman, W. F. (1922). The Index of Coincidence and Its
      Applications in Cryptography. Riverbank Publication No. 22.
    - Kasiski, F. W. (1863). Die Geheimschriften und die
      Dechiffrir-Kunst. Berlin: E. S. Mittler und Sohn.
    - Lewand, R. E. (2000). Cryptological Mathematics. MAA.
    - Sinkov, A. (1966). Elementary Cryptanalysis: A Mathematical
      Approach. Mathematical Association of America.
"""

from __future__ import annotations

import math
from collections import Counter

import numpy as np

from shared.math_utils import (
    chi_squared_test,
    chi_squared_uniform,
    entropy_percentage,
    index_of_coincidence,
    letter_counts,
    shannon_entropy,
)
from classical.core.models import CipherType, KeyLengthCandidate, NGramCount, TextStatistics
from classical.core.normalize import ALPHABET, normalize_text

# Relative English letter frequencies in percent (Lewand, 2000).
ENGLISH_FREQUENCIES: dict[str, float] = {
    "E": 12.70, "T": 9.06, "A": 8.17, "O": 7.51, "I": 6.97, "N": 6.75,
    "S": 6.33, "H": 6.09, "R": 5.99, "D": 4.25, "L": 4.03, "C": 2.78,
    "U": 2.76, "M": 2.41, "W": 2.36, "F": 2.23, "G": 2.02, "Y": 1.97,
    "P": 1.93, "B": 1.29, "V": 0.98, "K": 0.77, "J": 0.15, "X": 0.15,
    "Q": 0.10, "Z": 0.07,
}

_ENGLISH_VECTOR = np.array([ENGLISH_FREQUENCIES[ch] for ch in ALPHABET], dtype=np.float64)
_ENGLISH_VECTOR /= _ENGLISH_VECTOR.sum()

# Twenty most frequent English bigrams (Lewand, 2000).
COMMON_BIGRAMS: frozenset[str] = frozenset({
    "TH", "HE", "IN", "ER", "AN", "RE", "ND", "AT", "ON", "NT",
    "HA", "ES", "ST", "EN", "ED", "TO", "IT", "OU", "EA", "HI",
})


class FrequencyAnalyzer:
    """Letter-frequency statistics and key-length estimation.

    Usage::

        analyzer = FrequencyAnalyzer()
        stats = analyzer.statistics("LXFOPVEFRNHR")
        for candidate in analyzer.estimate_key_length(ciphertext):
            print(candidate.length, candidate.average_ic)
    """

    def __init__(
        self,
        *,
        english_ic: float = 0.067,
        random_ic: float = 0.038,
        reference_ic: float = 0.065,
        max_key_length: int = 20,
        top_n: int = 5,
        likely_ic: float = 0.055,
    ) -> None:
        self.english_ic = english_ic
        self.random_ic = random_ic
        self.reference_ic = reference_ic
        self.max_key_length = max_key_length
        self.top_n = top_n
        self.likely_ic = likely_ic

    # ------------------------------------------------------------------ #
    #  Summary statistics
    # ------------------------------------------------------------------ #

    def statistics(self, text: str, top: int = 5) -> TextStatistics:
        """Compute the full letter-statistics block for *text*."""
        text = normalize_text(text)
        counts = letter_counts(text)
        n = len(text)
        ic = index_of_coincidence(counts)
        chi2, p_value = chi_squared_uniform(counts)
        entropy = shannon_entropy(text)
        interpretation, classification = self.interpret_ic(ic)

        return TextStatistics(
            length=n,
            index_of_coincidence=round(ic, 6),
            ic_interpretation=interpretation,
            classification=classification,
            chi_squared=round(chi2, 4),
            chi_squared_p_value=round(p_value, 6),
            chi_squared_normalized=round(chi2 / n, 6) if n else 0.0,
            english_chi_squared=round(self.english_chi_squared(text), 4),
            entropy=round(entropy, 4),
            entropy_percentage=round(entropy_percentage(entropy), 2),
            top_letters=self.ngram_frequencies(text, 1, top),
        )

    def interpret_ic(self, ic: float) -> tuple[str, CipherType]:
        """Classify *ic* and say which reference value it sits nearer."""
        nearer = (
            f"nearer English ({self.english_ic})"
            if abs(ic - self.english_ic) <= abs(ic - self.random_ic)
            else f"nearer random ({self.random_ic})"
        )
        if ic >= 0.06:
            return f"Monoalphabetic or transposition; {nearer}", CipherType.MONOALPHABETIC
        if ic >= 0.045:
            return f"Mixed or short-key polyalphabetic; {nearer}", CipherType.MIXED
        return f"Polyalphabetic or random; {nearer}", CipherType.POLYALPHABETIC

    @staticmethod
    def english_chi_squared(text: str) -> float:
        """Chi-squared of *text*'s letter counts against English frequencies.

        Lower is more English-like; ``inf`` for text with no letters.
        """
        counts = letter_counts(text)
        n = counts.sum()
        if n == 0:
            return math.inf
        chi2, _ = chi_squared_test(counts, _ENGLISH_VECTOR * n)
        return chi2

    @staticmethod
    def bigram_score(text: str) -> float:
        """Share of adjacent letter pairs that are common English bigrams.

        Letter counts survive transposition unchanged, so this is the
        statistic that separates a correct transposition decode from a
        wrong one.
        """
        if len(text) < 2:
            return 0.0
        hits = sum(1 for i in range(len(text) - 1) if text[i : i + 2] in COMMON_BIGRAMS)
        return hits / (len(text) - 1)

    @staticmethod
    def ngram_frequencies(text: str, n: int = 2, top: int = 10) -> list[NGramCount]:
        """Most common n-grams of *text* (overlapping), most frequent first."""
        total = len(text) - n + 1
        if total <= 0:
            return []
        counts = Counter(text[i : i + n] for i in range(total))
        return [
            NGramCount(ngram=gram, count=count, frequency=round(count / total, 6))
            for gram, count in counts.most_common(top)
        ]

    # ------------------------------------------------------------------ #
    #  Key-length estimation
    # ------------------------------------------------------------------ #

    @staticmethod
    def average_subsequence_ic(text: str, key_length: int) -> float:
        """Mean IC of the *key_length* interleaved subsequences of *text*."""
        groups = [text[i::key_length] for i in range(key_length)]
        return sum(index_of_coincidence(g) for g in groups) / key_length

    def estimate_key_length(self, text: str) -> list[KeyLengthCandidate]:
        """Rank candidate key lengths 2..min(max_key_length, n // 4).

        Candidates are ordered by closeness of their average subsequence
        IC to ``reference_ic`` (shorter length first on ties) and the best
        ``top_n`` are returned.  ``confidence`` is
        ``min(100, ic / reference_ic * 100)``.
        """
        text = normalize_text(text)
        upper = min(self.max_key_length, len(text) // 4)
        scored: list[tuple[int, float]] = [
            (k, self.average_subsequence_ic(text, k)) for k in range(2, upper + 1)
        ]
        scored.sort(key=lambda item: (abs(item[1] - self.reference_ic), item[0]))

        return [
            KeyLengthCandidate(
                length=k,
                average_ic=round(ic, 6),
                confidence=round(min(100.0, ic / self.reference_ic * 100.0), 2),
                likely=ic > self.likely_ic,
            )
            for k, ic in scored[: self.top_n]
        ]

    @staticmethod
    def repeated_sequence_key_lengths(
        text: str, min_length: int = 3, max_length: int = 6, top: int = 5
    ) -> list[int]:
        """Classic Kasiski examination.

        Collects distances between repeated sequences of 3 to 6 letters,
        counts every factor in 2..20 of those distances and returns the
        most common factors.
        """
        distances: list[int] = []
        for size in range(min_length, max_length + 1):
            positions: dict[str, list[int]] = {}
            for i in range(len(text) - size + 1):
                positions.setdefault(text[i : i + size], []).append(i)
            for occurrences in positions.values():
                for a, b in zip(occurrences, occurrences[1:]):
                    distances.append(b - a)

        factor_counts: Counter[int] = Counter()
        for dist in distances:
            for f in _find_factors(dist):
                if 2 <= f <= 20:
                    factor_counts[f] += 1

        # ties go to the shorter length
        ranked = sorted(factor_counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [f for f, _ in ranked[:top]]

    # ------------------------------------------------------------------ #
    #  Shift search
    # ------------------------------------------------------------------ #

    def best_shifts(self, text: str) -> list[tuple[int, float]]:
        """Score every Caesar shift of *text* against English.

        Returns:
            ``(shift, english_chi_squared)`` pairs, best first.  ``shift``
            is the encryption shift, so decoding uses ``-shift``.
        """
        counts = letter_counts(text)
        n = counts.sum()
        if n == 0:
            return []
        expected = _ENGLISH_VECTOR * n
        scores = []
        for shift in range(26):
            # letter p encrypted to p + shift: undo by rolling counts back
            plain_counts = np.roll(counts, -shift)
            chi2, _ = chi_squared_test(plain_counts, expected)
            scores.append((shift, chi2))
        scores.sort(key=lambda item: (item[1], item[0]))
        return scores


def _find_factors(n: int) -> list[int]:
    """All positive factors of *n*, sorted."""
    if n <= 0:
        return []
    factors: set[int] = set()
    for i in range(1, math.isqrt(n) + 1):
        if n % i == 0:
            factors.add(i)
            factors.add(n // i)
    return sorted(factors)
