"""
Entropy Analyzer
================

Shannon entropy of ciphertext, reported in bits and as a percentage of
the alphabet maximum (log2(26) ~ 4.70 bits for letters, 8 bits for
bytes), plus two structural measures useful against periodic ciphers:

    - conditional entropy H(X[i+1] | X[i]) over adjacent letter pairs;
    - positional entropy: the entropy of each of the k interleaved
      subsequences for an assumed key length k.

Interpretation bands (percentage of maximum):
    - >= 95 : Excellent (near-uniform)
    - >= 85 : Good
    - >= 70 : Fair
    - below : Poor (language structure visible)

References:
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
      Bell System Technical Journal, 27(3), 379-423.
    - Shannon, C. E. (1951). Prediction and Entropy of Printed English.
      Bell System Technical Journal, 30(1), 50-64.
"""

from __future__ import annotations

import math
from collections import Counter

from shared.math_utils import (
    ALPHABET_SIZE,
    BYTE_ALPHABET_SIZE,
    entropy_percentage,
    shannon_entropy,
)


class EntropyAnalyzer:
    """Entropy measures for letter text and byte strings."""

    def letter_entropy(self, text: str) -> tuple[float, float]:
        """Return ``(bits_per_letter, percentage_of_log2_26)``."""
        bits = shannon_entropy(text)
        return bits, entropy_percentage(bits, ALPHABET_SIZE)

    def byte_entropy(self, data: bytes) -> tuple[float, float]:
        """Return ``(bits_per_byte, percentage_of_8_bits)``."""
        bits = shannon_entropy(data)
        return bits, entropy_percentage(bits, BYTE_ALPHABET_SIZE)

    @staticmethod
    def conditional_entropy(text: str) -> float:
        """H(next letter | current letter) in bits, from adjacent pairs.

        Returns 0.0 for fewer than two letters.
        """
        if len(text) < 2:
            return 0.0
        pairs = Counter(zip(text, text[1:]))
        firsts = Counter(text[:-1])
        total = len(text) - 1
        # H(Y|X) = H(X,Y) - H(X)
        return shannon_entropy_from_counts(pairs, total) - shannon_entropy_from_counts(firsts, total)

    @staticmethod
    def positional_entropy(text: str, key_length: int) -> list[float]:
        """Entropy of each interleaved subsequence ``text[i::key_length]``."""
        if key_length < 1:
            return []
        return [shannon_entropy(text[i::key_length]) for i in range(key_length)]

    @staticmethod
    def interpret(percentage: float) -> str:
        if percentage >= 95:
            return "Excellent (near-uniform)"
        if percentage >= 85:
            return "Good"
        if percentage >= 70:
            return "Fair"
        return "Poor (language structure visible)"


def shannon_entropy_from_counts(counts: Counter, total: int) -> float:
    """Entropy of a pre-counted distribution of *total* observations."""
    if total <= 0:
        return 0.0
    entropy = 0.0
    for count in counts.values():
        p = count / total
        entropy -= p * math.log2(p)
    return entropy
