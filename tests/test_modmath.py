"""Tests for the mod-26 arithmetic kernel."""

import pytest

from classical.core.errors import KeyShapeError
from classical.core.modmath import (
    are_coprime,
    determinant,
    gcd,
    inverse_matrix,
    is_square_matrix,
    matrix_multiply_mod,
    matrix_vector_mod,
    mod,
    mod_inverse,
)

KEY_2X2 = [[3, 3], [2, 5]]
KEY_3X3 = [[6, 24, 1], [13, 16, 10], [20, 17, 15]]


def _identity(n):
    return [[int(i == j) for j in range(n)] for i in range(n)]


class TestScalar:
    def test_mod_is_non_negative(self):
        assert mod(-1) == 25
        assert mod(-27) == 25
        assert mod(52) == 0

    def test_gcd(self):
        assert gcd(26, 12) == 2
        assert gcd(-9, 26) == 1
        assert are_coprime(9, 26)
        assert not are_coprime(13, 26)

    def test_mod_inverse(self):
        assert mod_inverse(3) == 9
        assert mod_inverse(9) == 3
        assert mod_inverse(25) == 25

    @pytest.mark.parametrize("value", [0, 2, 13, 24])
    def test_mod_inverse_missing(self, value):
        assert mod_inverse(value) is None


class TestMatrix:
    def test_square_check(self):
        assert is_square_matrix(KEY_2X2)
        assert not is_square_matrix([[1, 2, 3], [4, 5, 6]])
        assert not is_square_matrix([])
        assert not is_square_matrix("1234")
        assert not is_square_matrix([[1, 2], [3, "4"]])

    def test_determinants(self):
        assert determinant(KEY_2X2) == 9
        assert determinant(KEY_3X3) == 441
        assert determinant(_identity(4)) == 1
        assert determinant([[2, 0, 0, 0], [0, 3, 0, 0], [0, 0, 4, 0], [1, 1, 1, 5]]) == 120

    def test_determinant_rejects_non_square(self):
        with pytest.raises(KeyShapeError):
            determinant([[1, 2, 3]])

    def test_inverse_2x2(self):
        assert inverse_matrix(KEY_2X2) == [[15, 17], [20, 9]]

    @pytest.mark.parametrize("matrix", [
        KEY_2X2,
        KEY_3X3,
        [[1, 2, 0, 0], [0, 1, 0, 0], [0, 0, 1, 3], [0, 0, 0, 1]],
    ])
    def test_inverse_product_is_identity(self, matrix):
        inverse = inverse_matrix(matrix)
        assert matrix_multiply_mod(matrix, inverse) == _identity(len(matrix))

    def test_non_invertible(self):
        assert inverse_matrix([[2, 4], [6, 8]]) is None

    def test_unsupported_size(self):
        with pytest.raises(KeyShapeError):
            inverse_matrix([[5]])

    def test_matrix_vector(self):
        assert matrix_vector_mod(KEY_2X2, [7, 4]) == [7, 8]
