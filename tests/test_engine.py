"""Tests for the cipher engine facade."""

import pytest

from classical.ciphers.base import CipherFamily
from classical.core.engine import CipherEngine
from classical.core.errors import InputValidationError, KeyShapeError
from classical.core.models import (
    CipherFamilyName,
    DoubleKey,
    LCGParams,
    SuperKey,
    SuperOrder,
)
from shared.config import ClassiConfig
from shared.models import Severity, highest_severity

ROUND_TRIP_KEYS = {
    "caesar": "3",
    "vigenere": "LEMON",
    "beaufort": "FORTIFICATION",
    "autokey": "QUEENLY",
    "playfair": "MONARCHY",
    "hill": "3,3,2,5",
    "rail_fence": "3",
    "columnar": "ZEBRAS",
    "myszkowski": "TOMATO",
}


@pytest.fixture(scope="module")
def engine():
    return CipherEngine()


class TestRegistry:
    def test_every_family_registered(self, engine):
        assert engine.families() == list(CipherFamilyName)

    def test_families_satisfy_protocol(self, engine):
        for tag in engine.families():
            assert isinstance(engine.family(tag), CipherFamily)

    @pytest.mark.parametrize("alias", ["rail-fence", "RAIL_FENCE", " rail_fence "])
    def test_aliases(self, engine, alias):
        assert engine.family(alias).name is CipherFamilyName.RAIL_FENCE

    def test_unknown_family(self, engine):
        with pytest.raises(InputValidationError):
            engine.family("enigma")

    def test_myszkowski_is_merging_columnar(self, engine):
        assert engine.family("myszkowski").merge_repeats
        assert not engine.family("columnar").merge_repeats

    def test_presets_exposed(self, engine):
        assert "MINSTD" in engine.presets()


class TestParseKey:
    def test_scalar_keys(self, engine):
        assert engine.parse_key("caesar", "29") == 3
        assert engine.parse_key("rail_fence", "4") == 4
        assert engine.parse_key("vigenere", "lemon") == "lemon"
        assert engine.parse_key("hill", "3,3,2,5") == [[3, 3], [2, 5]]

    def test_double(self, engine):
        assert engine.parse_key("double", "ZEBRAS") == DoubleKey(key1="ZEBRAS")
        assert engine.parse_key("double", "ZEBRAS", key2="TOMATO").key2 == "TOMATO"

    def test_super(self, engine):
        key = engine.parse_key("super", "LEMON", key2="ZEBRA", order="trans-sub")
        assert key == SuperKey(
            substitution_key="LEMON", transposition_key="ZEBRA", order=SuperOrder.TRANS_SUB
        )
        with pytest.raises(KeyShapeError):
            engine.parse_key("super", "LEMON")
        with pytest.raises(KeyShapeError):
            engine.parse_key("super", "LEMON", key2="ZEBRA", order="sideways")

    def test_missing_key(self, engine):
        with pytest.raises(KeyShapeError):
            engine.parse_key("vigenere", None)
        with pytest.raises(KeyShapeError):
            engine.parse_key("caesar", "  ")

    def test_lcg_explicit(self, engine):
        assert engine.parse_key("lcg", "1, 1, 1, 256") == LCGParams(
            seed=1, multiplier=1, increment=1, modulus=256
        )

    def test_lcg_preset(self, engine):
        params = engine.parse_key("lcg", None, preset="simple", seed=5)
        assert params == LCGParams(seed=5, multiplier=109, increment=57, modulus=256)

    def test_lcg_seed_only_uses_default_preset(self, engine):
        params = engine.parse_key("lcg", "42")
        assert params.seed == 42
        assert params.modulus == 2**32

    def test_lcg_random_seed(self, engine):
        params = engine.parse_key("lcg", None, preset="SIMPLE")
        assert 0 <= params.seed < 256

    def test_lcg_errors(self, engine):
        with pytest.raises(KeyShapeError):
            engine.parse_key("lcg", None, preset="NOPE")
        with pytest.raises(KeyShapeError):
            engine.parse_key("lcg", "1,2")
        with pytest.raises(KeyShapeError):
            engine.parse_key("lcg", "a,b,c,d")


class TestTransforms:
    @pytest.mark.parametrize("family", sorted(ROUND_TRIP_KEYS))
    def test_round_trip(self, engine, family):
        key = engine.parse_key(family, ROUND_TRIP_KEYS[family])
        encoded = engine.encode(family, "ATTACK AT DAWN", key)
        assert encoded.operation == "encode"
        assert encoded.family.value == family
        decoded = engine.decode(family, encoded.output, key)
        # Playfair and Hill may append filler
        assert decoded.output.upper().startswith("ATTACK")

    def test_result_fields(self, engine):
        result = engine.encode("vigenere", "ATTACK AT DAWN", "LEMON")
        assert result.output == "LXFOPVEFRNHR"
        assert result.warnings == []
        assert result.elapsed_seconds >= 0

    def test_errors_propagate(self, engine):
        with pytest.raises(KeyShapeError):
            engine.encode("hill", "HELP", [[2, 4], [6, 8]])

    def test_otp_non_random_key_warns(self, engine):
        result = engine.encode("otp", "HELLO", "AAAAAAAAAAAA")
        assert result.output == "HELLO"
        assert highest_severity(result.warnings) is Severity.HIGH

    def test_weak_lcg_warns(self, engine):
        params = LCGParams(seed=0, multiplier=0, increment=0, modulus=256)
        result = engine.encode("lcg", "Hello", params)
        assert [w.severity for w in result.warnings] == [Severity.MEDIUM]

    def test_visualize(self, engine):
        record = engine.visualize("playfair", "HELLO", "MONARCHY")
        assert record.ciphertext == "CFSUPM"
        assert engine.visualize("caesar", "1234", 3) is None


class TestAnalyze:
    def test_insufficient(self, engine):
        record = engine.analyze("vigenere", "SHORT")
        assert not record.sufficient
        assert record.findings == []

    def test_findings_attached_with_key(self, engine, english_text):
        key = "A" * len(english_text)
        ct = engine.encode("otp", english_text, key).output
        record = engine.analyze("otp", ct, key)
        assert record.findings
        assert record.security.level == "High (Non-Random Key)"

    def test_no_findings_without_key(self, engine, english_text):
        record = engine.analyze("caesar", engine.encode("caesar", english_text, 3).output)
        assert record.best_shift == 3
        assert record.findings == []


class TestKeygen:
    def test_formats(self, engine):
        assert len(engine.generate_key(8)) == 8
        assert len(engine.generate_key(8, "hex").split()) == 8
        assert len(engine.generate_key(8, "binary").split()) == 8

    def test_bad_format(self, engine):
        with pytest.raises(InputValidationError):
            engine.generate_key(8, "base64")


def test_config_thresholds_reach_families():
    config = ClassiConfig()
    config.ciphers.min_substitution_key_length = 6
    config.ciphers.filler = "Z"
    engine = CipherEngine(config)
    with pytest.raises(KeyShapeError):
        engine.encode("vigenere", "HELLO", "LEMON")
    assert engine.encode("columnar", "ABC", "KEY").output == "BAC"
    assert engine.encode("columnar", "ABCD", "KEY").output == "BZADCZ"
