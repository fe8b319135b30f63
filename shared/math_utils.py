"""
ClassiCore Mathematical Utilities
=================================

NumPy-backed statistics shared by the cryptanalysis toolkit: symbol
histograms, Shannon entropy, Pearson's chi-squared test and Friedman's
index of coincidence.

All functions are pure and accept either canonical letter text
(``A``-``Z``) or raw bytes.

References:
    [1] Shannon, C. E. (1948). A Mathematical Theory of Communication.
        Bell System Technical Journal, 27(3), 379-423.
    [2] Pearson, K. (1900). On the Criterion that a Given System of
        Deviations ... Philosophical Magazine, 50(302), 157-175.
    [3] Friedman, W. F. (1922). The Index of Coincidence and Its
        Applications in Cryptography. Riverbank Publication No. 22.
    [4] Press, W. H. et al. (2007). Numerical Recipes (3rd ed.),
        Section 6.2. Cambridge University Press.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Hashable, Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

FloatArray = NDArray[np.floating]

ALPHABET_SIZE = 26
BYTE_ALPHABET_SIZE = 256


# ========================== Histograms =====================================


def letter_counts(text: str) -> FloatArray:
    """Count occurrences of ``A``-``Z`` in canonical *text*.

    Characters outside ``A``-``Z`` are ignored.

    Returns:
        1-D float64 array of length 26.
    """
    codes = np.frombuffer(text.encode("ascii", "ignore"), dtype=np.uint8).astype(np.int64) - 65
    codes = codes[(codes >= 0) & (codes < ALPHABET_SIZE)]
    return np.bincount(codes, minlength=ALPHABET_SIZE).astype(np.float64)


def byte_counts(data: bytes | Sequence[int]) -> FloatArray:
    """Compute a 256-bin byte-value histogram of *data*."""
    hist = np.zeros(BYTE_ALPHABET_SIZE, dtype=np.float64)
    if len(data) == 0:
        return hist
    arr = np.frombuffer(bytes(data), dtype=np.uint8)
    hist[:] = np.bincount(arr, minlength=BYTE_ALPHABET_SIZE)
    return hist


# ========================== Entropy ========================================


def shannon_entropy(symbols: Iterable[Hashable]) -> float:
    """Shannon entropy of a symbol sequence, in bits per symbol.

    .. math::

        H = -\\sum_i p_i \\, \\log_2(p_i)

    Works for ``bytes`` (bits per byte, maximum 8.0) as well as letter
    strings (maximum log2(26) ~ 4.70).

    Returns:
        Entropy in bits. 0.0 for empty input.
    """
    counts = Counter(symbols)
    length = sum(counts.values())
    if length == 0:
        return 0.0

    entropy = 0.0
    for count in counts.values():
        p = count / length
        entropy -= p * math.log2(p)
    return entropy


def entropy_percentage(entropy: float, alphabet_size: int = ALPHABET_SIZE) -> float:
    """Express *entropy* as a percentage of log2(*alphabet_size*)."""
    if alphabet_size < 2:
        return 0.0
    return entropy / math.log2(alphabet_size) * 100.0


# ========================== Index of Coincidence ===========================


def index_of_coincidence(text_or_counts: str | FloatArray) -> float:
    """Friedman's index of coincidence.

    .. math::

        IC = \\frac{\\sum_i f_i (f_i - 1)}{n (n - 1)}

    English text sits near 0.067, uniformly random letters near 0.038.

    Args:
        text_or_counts: Canonical text or a 26-bin count array.

    Returns:
        IC in [0, 1]; 0.0 when fewer than two letters are present.
    """
    counts = letter_counts(text_or_counts) if isinstance(text_or_counts, str) else np.asarray(text_or_counts, dtype=np.float64)
    n = float(counts.sum())
    if n <= 1:
        return 0.0
    return float(np.sum(counts * (counts - 1.0)) / (n * (n - 1.0)))


# ========================== Chi-squared ====================================


def chi_squared_test(observed: FloatArray, expected: FloatArray) -> tuple[float, float]:
    """Pearson's chi-squared goodness-of-fit test.

    .. math::

        \\chi^2 = \\sum_i \\frac{(O_i - E_i)^2}{E_i}

    The p-value uses the regularised upper incomplete gamma function so
    SciPy is not required.

    Args:
        observed: Observed counts (1-D array of length *k*).
        expected: Expected counts (1-D array of length *k*).

    Returns:
        Tuple of ``(chi2_statistic, p_value)``.

    Raises:
        ValueError: If arrays differ in shape or expected contains zeros.
    """
    observed = np.asarray(observed, dtype=np.float64)
    expected = np.asarray(expected, dtype=np.float64)

    if observed.shape != expected.shape:
        raise ValueError("Array shapes must match")
    if np.any(expected <= 0):
        raise ValueError("Expected values must be > 0")

    chi2 = float(np.sum((observed - expected) ** 2 / expected))
    dof = observed.size - 1
    if dof <= 0:
        return chi2, 1.0
    return chi2, _upper_inc_gamma_reg(dof / 2.0, chi2 / 2.0)


def chi_squared_uniform(counts: FloatArray) -> tuple[float, float]:
    """Chi-squared of *counts* against the uniform distribution over its bins.

    Returns ``(0.0, 1.0)`` for an empty histogram.
    """
    counts = np.asarray(counts, dtype=np.float64)
    total = float(counts.sum())
    if total == 0:
        return 0.0, 1.0
    expected = np.full(counts.shape, total / counts.size)
    return chi_squared_test(counts, expected)


def _upper_inc_gamma_reg(a: float, x: float) -> float:
    """Regularised upper incomplete gamma Q(a, x) = 1 - P(a, x).

    Series expansion below ``a + 1``, Lentz continued fraction above.
    """
    if x <= 0.0 or a <= 0.0:
        return 1.0
    if x < a + 1.0:
        return max(0.0, 1.0 - _gamma_p_series(a, x))
    return _gamma_q_cf(a, x)


def _gamma_p_series(a: float, x: float) -> float:
    ap = a
    delta = total = 1.0 / a
    for _ in range(300):
        ap += 1.0
        delta *= x / ap
        total += delta
        if abs(delta) < abs(total) * 1e-15:
            break
    return total * math.exp(-x + a * math.log(x) - math.lgamma(a))


def _gamma_q_cf(a: float, x: float) -> float:
    tiny = 1e-30
    b = x + 1.0 - a
    c = 1.0 / tiny
    d = 1.0 / b
    f = d
    for i in range(1, 300):
        an = -i * (i - a)
        b += 2.0
        d = an * d + b
        if abs(d) < tiny:
            d = tiny
        c = b + an / c
        if abs(c) < tiny:
            c = tiny
        d = 1.0 / d
        delta = d * c
        f *= delta
        if abs(delta - 1.0) < 1e-15:
            break
    return f * math.exp(-x + a * math.log(x) - math.lgamma(a))
