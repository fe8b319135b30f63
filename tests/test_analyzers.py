"""Tests for the frequency and entropy analyzers and the shared statistics."""

import math

import numpy as np
import pytest

from classical.analyzers.entropy import EntropyAnalyzer
from classical.analyzers.frequency import FrequencyAnalyzer
from classical.ciphers.substitution import VigenereCipher
from classical.core.models import CipherType
from classical.core.normalize import ALPHABET
from shared.math_utils import (
    byte_counts,
    chi_squared_test,
    chi_squared_uniform,
    entropy_percentage,
    index_of_coincidence,
    letter_counts,
    shannon_entropy,
)


class TestMathUtils:
    def test_letter_counts(self):
        counts = letter_counts("AAB")
        assert counts[0] == 2
        assert counts[1] == 1
        assert counts.sum() == 3

    def test_byte_counts(self):
        assert byte_counts(b"\x00\x00\xff")[0] == 2
        assert byte_counts(b"").sum() == 0

    def test_index_of_coincidence(self):
        assert index_of_coincidence("AAAA") == 1.0
        assert index_of_coincidence(ALPHABET) == 0.0
        assert index_of_coincidence("A") == 0.0

    def test_english_ic(self, english_text):
        assert 0.06 < index_of_coincidence(english_text) < 0.075

    def test_entropy(self):
        assert shannon_entropy("AAAA") == 0.0
        assert shannon_entropy("") == 0.0
        assert shannon_entropy(ALPHABET) == pytest.approx(math.log2(26))
        assert entropy_percentage(math.log2(26)) == pytest.approx(100.0)
        assert shannon_entropy(bytes(range(256))) == pytest.approx(8.0)

    def test_chi_squared(self):
        chi2, p = chi_squared_uniform(np.full(26, 10.0))
        assert chi2 == 0.0
        assert p == pytest.approx(1.0)
        assert chi_squared_uniform(np.zeros(26)) == (0.0, 1.0)

    def test_chi_squared_p_value(self):
        # one degree of freedom
        _, p = chi_squared_test(np.array([10.0, 0.0]), np.array([5.0, 5.0]))
        assert p < 0.01
        _, p = chi_squared_test(np.array([6.0, 4.0]), np.array([5.0, 5.0]))
        assert p == pytest.approx(0.5271, abs=1e-3)

    def test_chi_squared_rejects_bad_input(self):
        with pytest.raises(ValueError):
            chi_squared_test(np.ones(3), np.ones(4))
        with pytest.raises(ValueError):
            chi_squared_test(np.ones(2), np.array([1.0, 0.0]))


class TestFrequencyAnalyzer:
    def setup_method(self):
        self.analyzer = FrequencyAnalyzer()

    def test_statistics_of_english(self, english_text):
        stats = self.analyzer.statistics(english_text)
        assert stats.length == len(english_text)
        assert stats.classification is CipherType.MONOALPHABETIC
        assert "nearer English" in stats.ic_interpretation
        assert stats.top_letters[0].ngram in "ETAOIS"
        assert stats.chi_squared_normalized == pytest.approx(stats.chi_squared / stats.length, rel=1e-3)

    def test_interpret_ic_bands(self):
        assert self.analyzer.interpret_ic(0.07)[1] is CipherType.MONOALPHABETIC
        assert self.analyzer.interpret_ic(0.05)[1] is CipherType.MIXED
        text, kind = self.analyzer.interpret_ic(0.039)
        assert kind is CipherType.POLYALPHABETIC
        assert "nearer random" in text

    def test_english_chi_squared(self, english_text):
        shifted = "".join(ALPHABET[(ALPHABET.index(c) + 5) % 26] for c in english_text)
        assert self.analyzer.english_chi_squared(english_text) < self.analyzer.english_chi_squared(shifted)
        assert self.analyzer.english_chi_squared("") == math.inf

    def test_best_shifts(self, english_text):
        shifted = "".join(ALPHABET[(ALPHABET.index(c) + 11) % 26] for c in english_text)
        scores = self.analyzer.best_shifts(shifted)
        assert len(scores) == 26
        assert scores[0][0] == 11

    def test_bigram_score(self):
        assert self.analyzer.bigram_score("THE") == 1.0
        assert self.analyzer.bigram_score("QZ") == 0.0
        assert self.analyzer.bigram_score("A") == 0.0

    def test_ngrams(self):
        grams = self.analyzer.ngram_frequencies("ABABAB", 2, 2)
        assert grams[0].ngram == "AB"
        assert grams[0].count == 3
        assert self.analyzer.ngram_frequencies("A", 2) == []

    def test_key_length_estimate(self, english_text):
        ct = VigenereCipher().encode(english_text, "CRYPTO")
        candidates = self.analyzer.estimate_key_length(ct)
        assert len(candidates) == 5
        by_length = {c.length: c for c in candidates}
        assert 6 in by_length
        assert by_length[6].likely
        assert all(0 <= c.confidence <= 100 for c in candidates)

    def test_kasiski_repeats(self):
        text = "ABCXXABCYYABCZZ"
        assert 5 in self.analyzer.repeated_sequence_key_lengths(text)

    def test_key_length_search_bounded(self):
        assert FrequencyAnalyzer(max_key_length=3).estimate_key_length("A" * 100)[-1].length <= 3


class TestEntropyAnalyzer:
    def setup_method(self):
        self.entropy = EntropyAnalyzer()

    def test_letter_entropy(self):
        bits, pct = self.entropy.letter_entropy(ALPHABET)
        assert pct == pytest.approx(100.0)

    def test_byte_entropy(self):
        bits, pct = self.entropy.byte_entropy(bytes(range(256)))
        assert bits == pytest.approx(8.0)
        assert pct == pytest.approx(100.0)

    def test_conditional_entropy(self):
        # every letter is followed by a fixed successor
        assert self.entropy.conditional_entropy("ABABABAB") == pytest.approx(0.0)
        assert self.entropy.conditional_entropy("A") == 0.0

    def test_positional_entropy(self):
        values = self.entropy.positional_entropy("AAAABBBB", 2)
        assert len(values) == 2
        assert self.entropy.positional_entropy("ABC", 0) == []

    @pytest.mark.parametrize(
        ("pct", "label"),
        [(99, "Excellent"), (90, "Good"), (75, "Fair"), (50, "Poor")],
    )
    def test_interpret(self, pct, label):
        assert self.entropy.interpret(pct).startswith(label)


@pytest.mark.parametrize("text", ["A", "AB", "AAAA", ALPHABET, "HELLOWORLD" * 7])
def test_ic_bounds(text):
    assert 0.0 <= index_of_coincidence(text) <= 1.0
