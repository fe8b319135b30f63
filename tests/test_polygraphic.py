"""Tests for Playfair and Hill."""

from itertools import product

import pytest

from classical.ciphers.polygraphic import (
    HillCipher,
    PlayfairCipher,
    format_matrix_key,
    parse_matrix_key,
)
from classical.core.errors import CipherFormatError, KeyShapeError
from classical.core.models import PolygraphicAnalysis
from classical.core.modmath import determinant, gcd


class TestPlayfair:
    def setup_method(self):
        self.pf = PlayfairCipher()

    def test_grid(self):
        grid = PlayfairCipher.generate_grid("MONARCHY")
        assert grid[0] == ["M", "O", "N", "A", "R"]
        assert grid[1] == ["C", "H", "Y", "B", "D"]
        assert all(len(row) == 5 for row in grid)
        assert "J" not in "".join("".join(row) for row in grid)

    def test_digraphs_split_doubles(self):
        assert self.pf.make_digraphs("HELLO") == ["HE", "LX", "LO"]
        assert self.pf.make_digraphs("balloon") == ["BA", "LX", "LO", "ON"]

    def test_filler_separated_by_alternate(self):
        assert self.pf.make_digraphs("XX") == ["XQ", "XQ"]
        assert self.pf.make_digraphs("ABX") == ["AB", "XQ"]

    def test_j_merged_into_i(self):
        assert self.pf.make_digraphs("JI") == ["IX", "IX"]

    def test_known_vectors(self):
        assert self.pf.encode("HE", "MONARCHY") == "CF"
        assert self.pf.encode("HELLO", "MONARCHY") == "CFSUPM"
        assert self.pf.encode("balloon", "MONARCHY") == "IBSUPMNA"

    def test_decode(self):
        assert self.pf.decode("IBSUPMNA", "MONARCHY") == "BALXLOON"
        assert self.pf.clean_decrypted_text("BALXLOON") == "BALLOON"

    def test_round_trip_without_doubles(self):
        text = "THEQUICKBROWNFOXIUMPS"
        ct = self.pf.encode(text, "PLAYFAIR EXAMPLE")
        decoded = self.pf.decode(ct, "PLAYFAIR EXAMPLE")
        assert self.pf.clean_decrypted_text(decoded) == text

    def test_odd_ciphertext(self):
        with pytest.raises(CipherFormatError):
            self.pf.decode("ABC", "MONARCHY")

    def test_clean_trailing_filler(self):
        assert self.pf.clean_decrypted_text("HELXLOX") == "HELLO"

    def test_visualize_rules(self):
        record = self.pf.visualize("balloon", "MONARCHY")
        assert record.ciphertext == "IBSUPMNA"
        assert record.prepared_text == "BALXLOON"
        assert [d.rule for d in record.digraphs] == ["column", "rectangle", "rectangle", "row"]
        assert self.pf.visualize("123", "MONARCHY") is None

    def test_validate_grid(self):
        assert PlayfairCipher.validate_grid(PlayfairCipher.generate_grid("KEY")).valid
        bad = [list("ABCDE")] * 5
        result = PlayfairCipher.validate_grid(bad)
        assert not result.valid
        assert any("Duplicate" in e for e in result.errors)
        assert not PlayfairCipher.validate_grid([list("ABCDE")]).valid

    def test_letter_positions(self):
        positions = PlayfairCipher.letter_positions(PlayfairCipher.generate_grid("MONARCHY"))
        assert len(positions) == 25
        assert positions["A"] == (0, 3)
        assert positions["Z"] == (4, 4)
        assert "J" not in positions

    def test_letter_positions_rejects_bad_grid(self):
        with pytest.raises(KeyShapeError, match="invalid Playfair grid"):
            PlayfairCipher.letter_positions([list("ABCDE")])

    @pytest.mark.parametrize("key", ["K", "k 1"])
    def test_one_letter_keyword_rejected(self, key):
        with pytest.raises(KeyShapeError, match="at least 2"):
            self.pf.encode("HELLO", key)
        with pytest.raises(KeyShapeError):
            self.pf.decode("CFSU", key)

    def test_two_letter_keyword_accepted(self):
        assert self.pf.decode(self.pf.encode("BALLOON", "KY"), "KY")

    def test_format_digraphs(self):
        assert PlayfairCipher.format_digraphs(["HE", "LX"]) == "[HE] [LX]"

    def test_analysis(self, english_text):
        record = self.pf.analyze(self.pf.encode(english_text, "MONARCHY"))
        assert isinstance(record, PolygraphicAnalysis)
        assert record.length_fits_blocks
        assert record.doubled_digraphs == 0
        assert record.top_digraphs


class TestHill:
    KEY = [[3, 3], [2, 5]]

    def setup_method(self):
        self.hill = HillCipher()

    def test_known_vector(self):
        assert self.hill.encode("HELP", self.KEY) == "HIAT"
        assert self.hill.decode("HIAT", self.KEY) == "HELP"

    def test_three_by_three(self):
        key = [[6, 24, 1], [13, 16, 10], [20, 17, 15]]
        assert self.hill.encode("ACT", key) == "POH"
        assert self.hill.decode("POH", key) == "ACT"

    def test_string_key(self):
        assert self.hill.encode("HELP", "3,3,2,5") == "HIAT"

    def test_padding(self):
        ct = self.hill.encode("HEL", self.KEY)
        assert len(ct) == 4
        assert self.hill.decode(ct, self.KEY) == "HELX"

    def test_round_trip_four_by_four(self, english_text):
        key = [[1, 2, 0, 0], [0, 1, 0, 0], [0, 0, 1, 3], [0, 0, 0, 1]]
        text = english_text[:40]
        assert self.hill.decode(self.hill.encode(text, key), key) == text

    def test_non_invertible_key(self):
        with pytest.raises(KeyShapeError):
            self.hill.encode("HELP", [[2, 4], [6, 8]])
        with pytest.raises(KeyShapeError):
            self.hill.decode("HIAT", [[2, 4], [6, 8]])

    def test_validate_key_never_raises(self):
        result = HillCipher.validate_key([[2, 4], [6, 8]])
        assert not result.valid
        assert result.determinant == -8
        assert result.determinant_mod26 == 18
        assert not HillCipher.validate_key([[5]]).valid
        assert not HillCipher.validate_key([[1, 2, 3], [4, 5, 6]]).valid
        assert not HillCipher.validate_key([[30, 1], [1, 1]]).valid
        assert not HillCipher.validate_key("1,2,3").valid

    def test_validate_key_reports_inverse(self):
        result = HillCipher.validate_key(self.KEY)
        assert result.valid
        assert result.determinant == 9
        assert result.determinant_inverse == 3
        assert result.inverse == [[15, 17], [20, 9]]

    def test_ciphertext_block_mismatch(self):
        with pytest.raises(CipherFormatError):
            self.hill.decode("HIA", self.KEY)

    def test_visualize(self):
        record = self.hill.visualize("HELP", self.KEY)
        assert record.ciphertext == "HIAT"
        assert record.blocks[0].plain_vector == [7, 4]
        assert record.blocks[0].cipher_vector == [7, 8]
        assert record.inverse_matrix == [[15, 17], [20, 9]]

    def test_analysis_uses_key_block_size(self, english_text):
        key = [[6, 24, 1], [13, 16, 10], [20, 17, 15]]
        ct = self.hill.encode(english_text, key)
        assert self.hill.analyze(ct, key).block_size == 3
        assert self.hill.analyze(ct).block_size == 2

    def test_analysis_with_unusable_key_falls_back(self, english_text):
        ct = self.hill.encode(english_text, self.KEY)
        record = self.hill.analyze(ct, [[2, 4], [6, 8]])
        assert record.sufficient
        assert record.block_size == 2
        assert record.findings[0].title == "Unusable Hill key"
        assert not self.hill.analyze(ct, self.KEY).findings


class TestMatrixKeyParsing:
    def test_parse(self):
        assert parse_matrix_key("3,3,2,5") == [[3, 3], [2, 5]]
        assert parse_matrix_key(" 6 24 1 13 16 10 20 17 15 ")[2] == [20, 17, 15]

    @pytest.mark.parametrize("raw", ["1,2,3", "a,b,c,d", ""])
    def test_parse_rejects(self, raw):
        with pytest.raises(KeyShapeError):
            parse_matrix_key(raw)

    def test_format(self):
        assert format_matrix_key([[3, 3], [2, 5]]) == "3,3,2,5"


def test_invertibility_gate():
    values = range(0, 26, 5)
    for a, b, c, d in product(values, repeat=4):
        matrix = [[a, b], [c, d]]
        expected = gcd(determinant(matrix) % 26, 26) == 1
        assert HillCipher.validate_key(matrix).valid is expected
