"""
Modular Arithmetic Kernel
=========================

Integer helpers and mod-26 matrix algebra used by the Hill cipher.

The determinant uses closed forms up to 3x3 and cofactor expansion along the
first row beyond that.  Matrix inversion goes through the adjugate:

.. math::

    K^{-1} \\equiv \\det(K)^{-1} \\cdot \\operatorname{adj}(K) \\pmod{26}

which exists iff ``gcd(det(K) mod 26, 26) == 1``.

References:
    - Hill, L. S. (1929). Cryptography in an Algebraic Alphabet.
      The American Mathematical Monthly, 36(6), 306-312.
    - Stinson, D. R. (2005). Cryptography: Theory and Practice, 3rd ed.,
      Section 1.1.6.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from classical.core.errors import KeyShapeError

Matrix = list[list[int]]

MODULUS = 26
SUPPORTED_SIZES = (2, 3, 4)


# ===================================================================== #
#  Scalar arithmetic
# ===================================================================== #


def mod(n: int, m: int = MODULUS) -> int:
    """Mathematical modulus: the result is always in ``[0, m)`` for m > 0."""
    return ((n % m) + m) % m


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by Euclid's algorithm."""
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def are_coprime(a: int, b: int) -> bool:
    return gcd(a, b) == 1


def mod_inverse(a: int, m: int = MODULUS) -> int | None:
    """Multiplicative inverse of *a* modulo *m* by linear search.

    Returns:
        ``x`` in ``[1, m)`` with ``a * x = 1 (mod m)``, or ``None`` when
        ``gcd(a, m) != 1``.
    """
    a = mod(a, m)
    for x in range(1, m):
        if (a * x) % m == 1:
            return x
    return None


# ===================================================================== #
#  Matrix algebra
# ===================================================================== #


def is_square_matrix(matrix: object) -> bool:
    """``True`` for a non-empty list of equal-length integer rows forming a square."""
    if not isinstance(matrix, Sequence) or isinstance(matrix, str) or not matrix:
        return False
    n = len(matrix)
    for row in matrix:
        if not isinstance(row, Sequence) or isinstance(row, str) or len(row) != n:
            return False
        if not all(isinstance(v, (int, np.integer)) and not isinstance(v, bool) for v in row):
            return False
    return True


def minor(matrix: Sequence[Sequence[int]], row: int, col: int) -> Matrix:
    """Matrix with *row* and *col* removed."""
    return [
        [v for j, v in enumerate(r) if j != col]
        for i, r in enumerate(matrix)
        if i != row
    ]


def determinant(matrix: Sequence[Sequence[int]]) -> int:
    """Integer determinant of a square matrix of any size.

    Raises:
        KeyShapeError: *matrix* is not square.
    """
    if not is_square_matrix(matrix):
        raise KeyShapeError("determinant requires a non-empty square integer matrix")

    n = len(matrix)
    m = [[int(v) for v in row] for row in matrix]
    if n == 1:
        return m[0][0]
    if n == 2:
        return m[0][0] * m[1][1] - m[0][1] * m[1][0]
    if n == 3:
        return (
            m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
            - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
            + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
        )

    total = 0
    for col in range(n):
        sign = -1 if col % 2 else 1
        total += sign * m[0][col] * determinant(minor(m, 0, col))
    return total


def adjugate(matrix: Sequence[Sequence[int]]) -> Matrix:
    """Transpose of the cofactor matrix (integer, not reduced)."""
    n = len(matrix)
    if n == 1:
        return [[1]]
    cofactors = [
        [(-1) ** (i + j) * determinant(minor(matrix, i, j)) for j in range(n)]
        for i in range(n)
    ]
    return [[cofactors[j][i] for j in range(n)] for i in range(n)]


def _check_supported(matrix: Sequence[Sequence[int]]) -> None:
    if not is_square_matrix(matrix):
        raise KeyShapeError("matrix key must be a square list of integer rows")
    if len(matrix) not in SUPPORTED_SIZES:
        raise KeyShapeError(
            f"matrix key must be 2x2, 3x3 or 4x4 (got {len(matrix)}x{len(matrix)})"
        )


def inverse_matrix(matrix: Sequence[Sequence[int]], modulo: int = MODULUS) -> Matrix | None:
    """Modular inverse of a 2x2, 3x3 or 4x4 matrix.

    Returns:
        The inverse with entries in ``[0, modulo)``, or ``None`` when the
        determinant has no inverse modulo *modulo*.

    Raises:
        KeyShapeError: Non-square matrix or unsupported size.
    """
    _check_supported(matrix)
    det_inv = mod_inverse(mod(determinant(matrix), modulo), modulo)
    if det_inv is None:
        return None
    return [[mod(det_inv * v, modulo) for v in row] for row in adjugate(matrix)]


def matrix_vector_mod(
    matrix: Sequence[Sequence[int]], vector: Sequence[int], modulo: int = MODULUS
) -> list[int]:
    """``matrix . vector mod modulo`` as a list of ints."""
    product = np.asarray(matrix, dtype=np.int64) @ np.asarray(vector, dtype=np.int64)
    return [int(v) for v in np.mod(product, modulo)]


def matrix_multiply_mod(
    a: Sequence[Sequence[int]], b: Sequence[Sequence[int]], modulo: int = MODULUS
) -> Matrix:
    product = np.asarray(a, dtype=np.int64) @ np.asarray(b, dtype=np.int64)
    return np.mod(product, modulo).astype(int).tolist()
