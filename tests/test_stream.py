"""Tests for the LCG stream cipher and its quality tester."""

import pytest

from classical.analyzers.rng_tester import LCGQualityTester, lcg_states
from classical.ciphers.stream import (
    PRESETS,
    LCGStreamCipher,
    coerce_params,
    generate_random_seed,
    hex_to_bytes,
    hex_to_text,
    text_to_hex,
    validate_params,
)
from classical.core.errors import CipherFormatError, InputValidationError, KeyShapeError
from classical.core.models import LCGParams, StreamAnalysis
from shared.models import Severity

TINY = LCGParams(seed=1, multiplier=1, increment=1, modulus=256)
FLAT = LCGParams(seed=0, multiplier=0, increment=0, modulus=256)


@pytest.fixture
def lcg():
    return LCGStreamCipher()


class TestStreamCipher:
    def test_known_vector(self, lcg):
        # X1 = 2, 'A' (0x41) XOR 0x02
        assert lcg.encode("A", TINY) == "43"
        assert lcg.decode("43", TINY) == "A"

    def test_keystream(self):
        assert list(LCGStreamCipher.keystream(TINY, 3)) == [2, 3, 4]

    @pytest.mark.parametrize("name", list(PRESETS))
    def test_round_trip_presets(self, lcg, name):
        params = PRESETS[name].with_seed(42)
        text = "Attack at dawn! Café ☃"
        assert lcg.decode(lcg.encode(text, params), params) == text

    def test_tuple_and_mapping_keys(self, lcg):
        as_tuple = lcg.encode("Hello", (1, 1, 1, 256))
        as_dict = lcg.encode("Hello", {"seed": 1, "multiplier": 1, "increment": 1, "modulus": 256})
        assert as_tuple == as_dict == lcg.encode("Hello", TINY)

    def test_decode_accepts_whitespace_and_lowercase(self, lcg):
        assert lcg.decode(" 4 3 ", TINY) == "A"
        ct = lcg.encode("Hi", TINY).lower()
        assert lcg.decode(ct, TINY) == "Hi"

    @pytest.mark.parametrize("bad", ["", "XYZ", "434"])
    def test_bad_hex(self, lcg, bad):
        with pytest.raises(CipherFormatError):
            lcg.decode(bad, TINY)

    def test_invalid_utf8(self, lcg):
        # 0xFF is never valid UTF-8; key byte for TINY at position 0 is 0x02
        with pytest.raises(CipherFormatError):
            lcg.decode("FD", TINY)

    def test_empty_plaintext(self, lcg):
        with pytest.raises(InputValidationError):
            lcg.encode("", TINY)

    @pytest.mark.parametrize(
        "params",
        [
            (300, 1, 1, 256),
            (1, -1, 1, 256),
            (1, 1, 256, 256),
            (0, 0, 0, 0),
            (1, 2, 3),
        ],
    )
    def test_params_out_of_range(self, lcg, params):
        with pytest.raises(KeyShapeError):
            lcg.encode("A", params)

    def test_validate_params_lists_every_error(self):
        errors = validate_params(LCGParams(seed=-1, multiplier=999, increment=0, modulus=10))
        assert len(errors) == 2

    def test_coerce_rejects_strings(self):
        with pytest.raises(KeyShapeError):
            coerce_params("1,1,1,256")


class TestPresets:
    def test_read_only(self):
        with pytest.raises(TypeError):
            PRESETS["MINE"] = PRESETS["SIMPLE"]

    def test_catalogue(self):
        assert set(PRESETS) == {"NUMERICAL_RECIPES", "MINSTD", "GLIBC", "BORLAND", "SIMPLE"}
        assert PRESETS["MINSTD"].modulus == 2**31 - 1

    def test_simple_with_seed_reduces(self):
        params = PRESETS["SIMPLE"].with_seed(0)
        assert params.multiplier == 109
        assert params.increment == 57
        assert validate_params(params) == []

    def test_random_seed(self):
        assert 0 <= generate_random_seed(256) < 256
        with pytest.raises(KeyShapeError):
            generate_random_seed(0)


class TestHexHelpers:
    def test_text_to_hex(self):
        assert text_to_hex("Hi") == "4869"
        assert hex_to_text("4869") == "Hi"

    def test_odd_length(self):
        with pytest.raises(CipherFormatError):
            hex_to_bytes("ABC")


class TestQuality:
    def test_full_period_generator_grades_well(self, lcg):
        report = lcg.quality(PRESETS["SIMPLE"].with_seed(0))
        names = [t.name for t in report.tests]
        assert names == ["Full Period", "Spectral Test", "Chi-Square"]
        assert report.tests[0].passed
        assert report.overall_score >= 80

    def test_degenerate_generator(self, lcg):
        report = lcg.quality(FLAT)
        assert report.grade == "Very Poor"
        assert report.overall_score < 60
        assert report.detected_period == 1

    def test_large_modulus_skips_full_period(self, lcg):
        report = lcg.quality(PRESETS["NUMERICAL_RECIPES"].with_seed(7))
        assert "Full Period" not in [t.name for t in report.tests]
        assert report.sample_size == 1000

    def test_advisories(self, lcg):
        findings = lcg.advisories(FLAT)
        assert len(findings) == 1
        assert findings[0].severity is Severity.MEDIUM
        assert lcg.advisories(PRESETS["SIMPLE"].with_seed(0)) == []

    def test_detect_period(self):
        tester = LCGQualityTester()
        assert tester.detect_period([1, 2, 3] * 3) == 3
        assert tester.detect_period([1, 2, 3, 4]) is None
        assert tester.detect_period([5]) is None

    def test_chi_square_needs_data(self):
        result = LCGQualityTester().chi_square_test([1, 2, 3])
        assert not result.passed
        assert result.score == 0

    def test_grades(self):
        assert [LCGQualityTester.grade(s) for s in (95, 80, 65, 45, 10)] == [
            "Excellent", "Good", "Fair", "Poor", "Very Poor",
        ]

    def test_lcg_states_exclude_seed(self):
        assert lcg_states(TINY, 3) == [2, 3, 4]


class TestStreamVisualizeAnalyze:
    def test_visualize(self, lcg):
        record = lcg.visualize("AB", TINY)
        assert record.ciphertext == "4341"
        assert record.steps[0].calculation.startswith("(1 x 1 + 1) mod 256 = 2")
        assert record.steps[1].key_binary == "00000011"
        assert lcg.visualize("", TINY) is None

    def test_analysis_short(self, lcg):
        record = lcg.analyze("4341")
        assert not record.sufficient
        assert "bytes" in record.message

    @pytest.mark.parametrize("blank", ["", "   ", "\n"])
    def test_analysis_empty_is_insufficient(self, lcg, blank):
        record = lcg.analyze(blank)
        assert not record.sufficient
        assert record.text_length == 0

    def test_analysis_rejects_bad_hex(self, lcg):
        with pytest.raises(CipherFormatError):
            lcg.analyze("ZZ")
        with pytest.raises(CipherFormatError):
            lcg.analyze("434")

    def test_analysis(self, lcg):
        params = PRESETS["GLIBC"].with_seed(1)
        ct = lcg.encode("The quick brown fox jumps over the lazy dog", params)
        record = lcg.analyze(ct, params)
        assert isinstance(record, StreamAnalysis)
        assert record.text_length == 43
        assert 0 < record.byte_entropy <= 8
        assert record.quality is not None
