"""Tests for text and key normalisation."""

import pytest

from classical.core.errors import CipherError, InputValidationError, KeyShapeError
from classical.core.normalize import (
    index_to_letter,
    indices_to_text,
    letter_to_index,
    normalize_key,
    normalize_text,
    require_keyword,
    require_text,
    text_to_indices,
)


class TestNormalizeText:
    def test_strips_and_uppercases(self):
        assert normalize_text("Attack at dawn!") == "ATTACKATDAWN"

    def test_drops_digits_and_accents(self):
        assert normalize_text("r2-d2 café") == "RDCAF"

    def test_empty(self):
        assert normalize_text("") == ""

    def test_key_follows_text_rules(self):
        assert normalize_key("le mon") == "LEMON"


class TestRequire:
    def test_require_text_rejects_no_letters(self):
        with pytest.raises(InputValidationError):
            require_text("12345 !!")

    def test_require_text_returns_canonical(self):
        assert require_text("hello world") == "HELLOWORLD"

    def test_keyword_too_short(self):
        with pytest.raises(KeyShapeError, match="at least 3"):
            require_keyword("ab", 3)

    def test_keyword_not_a_string(self):
        with pytest.raises(KeyShapeError):
            require_keyword(42)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            require_text("")
        assert issubclass(InputValidationError, CipherError)


def test_index_round_trip():
    assert text_to_indices("AZ") == [0, 25]
    assert indices_to_text([0, 25, 26, -1]) == "AZAZ"


def test_single_letter_conversions():
    assert letter_to_index("A") == 0
    assert letter_to_index("Z") == 25
    assert index_to_letter(7) == "H"
    assert index_to_letter(-1) == "Z"
    assert index_to_letter(52) == "A"
