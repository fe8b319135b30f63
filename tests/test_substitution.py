"""Tests for Caesar, Vigenere, Beaufort and Autokey."""

import pytest

from classical.ciphers.substitution import (
    AutokeyCipher,
    BeaufortCipher,
    CaesarCipher,
    VigenereCipher,
)
from classical.core.errors import InputValidationError, KeyShapeError
from classical.core.models import CaesarAnalysis, PolyalphabeticAnalysis


class TestCaesar:
    def setup_method(self):
        self.caesar = CaesarCipher()

    def test_known_vector(self):
        assert self.caesar.encode("HELLO", 3) == "KHOOR"
        assert self.caesar.decode("KHOOR", 3) == "HELLO"

    def test_preserves_case_and_punctuation(self):
        assert self.caesar.encode("Hello, World!", 3) == "Khoor, Zruog!"

    def test_shift_reduced_mod_26(self):
        assert self.caesar.encode("ABC", 29) == self.caesar.encode("ABC", 3)
        assert self.caesar.encode("ABC", -1) == "ZAB"

    def test_string_shift(self):
        assert self.caesar.encode("HELLO", "3") == "KHOOR"

    @pytest.mark.parametrize("bad", ["three", 2.5, True, None])
    def test_bad_shift(self, bad):
        with pytest.raises(KeyShapeError):
            self.caesar.encode("HELLO", bad)

    def test_no_letters(self):
        with pytest.raises(InputValidationError):
            self.caesar.encode("1234", 3)

    def test_rot13_is_involution(self):
        assert self.caesar.rot13(self.caesar.rot13("Why did the chicken")) == "Why did the chicken"

    def test_visualize(self):
        record = self.caesar.visualize("abc", 1)
        assert record.ciphertext == "bcd"
        assert record.cipher_alphabet.startswith("BCD")
        assert record.mapping[25].cipher == "A"
        assert self.caesar.visualize("!!!", 1) is None

    def test_analysis_recovers_shift(self, english_text):
        ciphertext = self.caesar.encode(english_text, 7)
        record = self.caesar.analyze(ciphertext)
        assert isinstance(record, CaesarAnalysis)
        assert record.best_shift == 7
        assert len(record.candidates) == 26
        assert record.candidates[0].preview == english_text[:30]

    def test_analysis_short_text(self):
        record = self.caesar.analyze("ABC")
        assert not record.sufficient
        assert "10" in record.message


class TestVigenere:
    def setup_method(self):
        self.vig = VigenereCipher()

    def test_known_vector(self):
        assert self.vig.encode("ATTACK AT DAWN", "LEMON") == "LXFOPVEFRNHR"
        assert self.vig.decode("LXFOPVEFRNHR", "lemon") == "ATTACKATDAWN"

    def test_round_trip(self, english_text):
        assert self.vig.decode(self.vig.encode(english_text, "KEYWORD"), "KEYWORD") == english_text

    def test_short_key(self):
        with pytest.raises(KeyShapeError):
            self.vig.encode("HELLO", "AB")

    def test_empty_key(self):
        with pytest.raises(InputValidationError):
            self.vig.encode("HELLO", "123")

    def test_square(self):
        square = VigenereCipher.generate_square()
        assert len(square) == 26
        assert square[1].startswith("BCD")
        assert VigenereCipher.square_char("a", "L") == "L"
        assert VigenereCipher.square_char("T", "E") == "X"

    def test_visualize_steps(self):
        record = self.vig.visualize("ATTACK", "LEMON")
        assert record.keystream == "LEMONL"
        assert record.steps[1].calculation == "(19 + 4) mod 26 = 23"
        assert record.ciphertext == "LXFOPV"

    def test_analysis_finds_key_length(self, english_text):
        record = self.vig.analyze(self.vig.encode(english_text, "LEMON"))
        assert isinstance(record, PolyalphabeticAnalysis)
        assert record.sufficient
        assert 5 in [c.length for c in record.key_lengths]
        assert record.statistics.index_of_coincidence < 0.06
        assert not record.is_reciprocal


class TestBeaufort:
    def setup_method(self):
        self.beaufort = BeaufortCipher()

    def test_formula(self):
        # K - P: A under key K gives K
        assert self.beaufort.encode("A", "KEY") == "K"
        assert self.beaufort.encode("D", "FOX") == "C"

    def test_reciprocal(self, english_text):
        ciphertext = self.beaufort.encode(english_text, "FORTIFICATION")
        assert self.beaufort.encode(ciphertext, "FORTIFICATION") == english_text
        assert self.beaufort.decode(ciphertext, "FORTIFICATION") == english_text

    def test_square(self):
        square = BeaufortCipher.generate_square()
        assert square[0][0] == "A"
        assert square[0][1] == "Z"

    def test_analysis_flags_reciprocal(self, english_text):
        record = self.beaufort.analyze(self.beaufort.encode(english_text, "KEY"))
        assert record.is_reciprocal


class TestAutokey:
    def setup_method(self):
        self.autokey = AutokeyCipher()

    def test_known_vector(self):
        assert self.autokey.encode("ATTACK AT DAWN", "QUEENLY") == "QNXEPVYTWTWP"
        assert self.autokey.decode("QNXEPVYTWTWP", "QUEENLY") == "ATTACKATDAWN"

    def test_keystream_never_wraps(self):
        assert AutokeyCipher.keystream("KEY", "HELLOWORLD") == "KEYHELLOWO"

    def test_round_trip_short_text(self):
        assert self.autokey.decode(self.autokey.encode("HI", "LONGKEY"), "LONGKEY") == "HI"

    def test_key_sources(self):
        record = self.autokey.visualize("HELLO", "KEY")
        assert [s.key_source for s in record.steps] == [
            "keyword", "keyword", "keyword", "plaintext", "plaintext",
        ]
