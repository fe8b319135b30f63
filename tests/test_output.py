"""Tests for the Rich console renderers."""

import pytest

from classical.core.engine import CipherEngine
from classical.output.console import ClassiConsoleOutput
from shared.console import ClassiConsole

SAMPLES = [
    ("caesar", "3"),
    ("vigenere", "LEMON"),
    ("beaufort", "KEY"),
    ("autokey", "QUEENLY"),
    ("playfair", "MONARCHY"),
    ("hill", "3,3,2,5"),
    ("rail_fence", "3"),
    ("columnar", "ZEBRAS"),
    ("myszkowski", "TOMATO"),
]


@pytest.fixture(scope="module")
def engine():
    return CipherEngine()


@pytest.fixture
def display():
    return ClassiConsoleOutput(ClassiConsole(record=True))


def _text(display):
    return display.console.export_text()


@pytest.mark.parametrize(("family", "raw_key"), SAMPLES)
def test_visualizations_render(engine, display, family, raw_key):
    key = engine.parse_key(family, raw_key)
    record = engine.visualize(family, "ATTACK AT DAWN", key)
    display.display_visualization(record)
    assert record.ciphertext in _text(display)


def test_composite_visualizations_render(engine, display):
    display.display_visualization(
        engine.visualize("double", "ATTACK AT DAWN", engine.parse_key("double", "ZEBRA", key2="KEY"))
    )
    display.display_visualization(
        engine.visualize(
            "super", "ATTACK AT DAWN", engine.parse_key("super", "LEMON", key2="ZEBRA")
        )
    )
    display.display_visualization(
        engine.visualize("otp", "HELLO", "XMCKLABCDEFGHIJ")
    )
    display.display_visualization(
        engine.visualize("lcg", "[Hi]", engine.parse_key("lcg", "1,1,1,256"))
    )
    text = _text(display)
    assert "Security" in text
    assert "Keystream quality" in text


def test_nothing_to_visualize(display):
    display.display_visualization(None)
    assert "Nothing to visualize" in _text(display)


@pytest.mark.parametrize(
    "family", ["caesar", "vigenere", "beaufort", "playfair", "hill", "rail_fence",
               "columnar", "myszkowski", "double", "super", "otp"],
)
def test_analyses_render(engine, display, english_text, family):
    display.display_analysis(engine.analyze(family, english_text))
    assert "Analysis" in _text(display)


def test_stream_analysis_renders(engine, display):
    params = engine.parse_key("lcg", "0,0,0,256")
    ct = engine.encode("lcg", "The quick brown fox", params).output
    display.display_analysis(engine.analyze("lcg", ct, params))
    text = _text(display)
    assert "LCG Quality" in text
    assert "MEDIUM" in text


def test_result_with_warnings(engine, display):
    display.display_result(engine.encode("otp", "HELLO", "AAAAAAAAAAAA"))
    text = _text(display)
    assert "HIGH" in text
    assert "Otp Encoded" in text


def test_presets_and_key(engine, display):
    display.display_presets(engine.presets())
    display.display_key("ABCDE", "text")
    text = _text(display)
    assert "LCG Presets" in text
    assert "ABCDE" in text
