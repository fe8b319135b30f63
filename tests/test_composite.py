"""Tests for super encryption."""

import pytest

from classical.ciphers.composite import SuperEncryptionCipher, coerce_super_key, security_level
from classical.ciphers.substitution import VigenereCipher
from classical.ciphers.transposition import ColumnarCipher
from classical.core.errors import KeyShapeError
from classical.core.models import StatisticalAnalysis, SuperKey, SuperOrder


@pytest.fixture
def cipher():
    return SuperEncryptionCipher()


class TestSuperEncryption:
    @pytest.mark.parametrize("order", list(SuperOrder))
    def test_round_trip(self, cipher, order, english_text):
        key = SuperKey(substitution_key="LEMON", transposition_key="ZEBRAS", order=order)
        assert cipher.decode(cipher.encode(english_text, key), key) == english_text

    def test_round_trip_short_text(self, cipher):
        key = SuperKey(substitution_key="LEMON", transposition_key="ZEBRA")
        assert cipher.decode(cipher.encode("ATTACK AT DAWN", key), key) == "ATTACKATDAWN"

    def test_order_matters(self, cipher):
        text = "ATTACK AT DAWN"
        sub_first = cipher.encode(text, ("LEMON", "ZEBRA", "sub-trans"))
        trans_first = cipher.encode(text, ("LEMON", "ZEBRA", "trans-sub"))
        assert sub_first != trans_first

    def test_trans_sub_matches_stages(self, cipher):
        col, vig = ColumnarCipher(), VigenereCipher()
        text = "ATTACKATDAWN"
        expected = vig.encode(col.encode(text, "ZEBRAS"), "LEMON")
        assert cipher.encode(text, ("LEMON", "ZEBRAS", "trans-sub")) == expected

    def test_missing_transposition_key(self, cipher):
        with pytest.raises(KeyShapeError):
            cipher.encode("HELLO", ("LEMON",))

    def test_short_substitution_key(self, cipher):
        with pytest.raises(KeyShapeError):
            cipher.encode("HELLO", ("AB", "ZEBRA"))

    def test_visualize(self, cipher):
        record = cipher.visualize("ATTACK AT DAWN", ("LEMON", "ZEBRA", "trans-sub"))
        assert [p.method for p in record.passes] == ["columnar", "vigenere"]
        assert record.passes[1].input == record.passes[0].output
        assert record.ciphertext == record.passes[-1].output
        assert record.security.level == "Medium"

    def test_analysis(self, cipher, english_text):
        key = SuperKey(substitution_key="FORTIFICATION", transposition_key="ZEBRAS")
        record = cipher.analyze(cipher.encode(english_text, key), key)
        assert isinstance(record, StatisticalAnalysis)
        assert record.ic_interpretation
        assert record.security.level == "High"

    def test_coerce_key(self):
        key = coerce_super_key({"substitution_key": "A", "transposition_key": "B"})
        assert key.order is SuperOrder.SUB_TRANS
        with pytest.raises(KeyShapeError):
            coerce_super_key("LEMON")


    def test_validate_params(self, cipher):
        assert cipher.validate_params("HELLO", ("LEMON", "ZEBRA")).valid
        short = cipher.validate_params("HELLO", ("LE", "ZEBRA"))
        assert not short.valid
        assert short.errors == ["Substitution key must be at least 3 letters long"]
        assert not cipher.validate_params("HELLO", "LEMON").valid
        assert not cipher.validate_params("HELLO", ("LEMON", "ZEBRA", "diagonal")).valid
        empty = cipher.validate_params("42", ("LEMON", "Z3BRA"))
        assert len(empty.errors) == 2

    def test_compare_with_single(self, cipher):
        report = cipher.compare_with_single(("LEMON", "ZEBRA"))
        assert (report.single_complexity, report.layered_complexity) == (5, 25)
        assert report.single_security.level == "Low"
        assert report.layered_security.level == "Medium"
        assert report.improvement_percentage == 50.0


class TestSecurityLevel:
    @pytest.mark.parametrize(
        ("sub_len", "trans_len", "level"),
        [(10, 10, "Very High"), (8, 7, "High"), (5, 5, "Medium"), (3, 2, "Low")],
    )
    def test_bands(self, sub_len, trans_len, level):
        assert security_level(sub_len, trans_len).level == level

    def test_recommends_longer_keys(self):
        recs = security_level(3, 3).recommendations
        assert len(recs) == 3


def test_wrong_order_never_decodes(cipher, english_text):
    text = english_text[:60]
    for sub_key, trans_key in [("LEMON", "ZEBRA"), ("KEYWORD", "CIPHER"), ("ABC", "XY")]:
        encoded = cipher.encode(text, (sub_key, trans_key, "sub-trans"))
        assert cipher.decode(encoded, (sub_key, trans_key, "trans-sub")) != text
