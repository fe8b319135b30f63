"""Tests for the structured logger."""

import json
import logging

from shared.logger import ClassiLogger


def _close(log):
    for handler in list(log.underlying.handlers):
        handler.close()
        log.underlying.removeHandler(handler)


def test_json_file_records(tmp_path):
    path = tmp_path / "logs" / "classicore.jsonl"
    log = ClassiLogger(
        "test_json", log_level="INFO", log_file=path, json_logs=True, console_output=False
    )
    try:
        with log.operation("encode", family="caesar"):
            log.info("encode complete", output_length=5)
        log.debug("filtered out")
    finally:
        _close(log)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry["level"] == "INFO"
    assert entry["logger"] == "classicore.test_json"
    assert entry["message"] == "encode complete"
    assert entry["tool_name"] == "test_json"
    assert entry["operation"] == "encode"
    assert entry["family"] == "caesar"
    assert entry["extra"] == {"output_length": 5}


def test_operation_scope_restored(tmp_path):
    path = tmp_path / "scope.jsonl"
    log = ClassiLogger("test_scope", log_file=path, json_logs=True, console_output=False)
    try:
        with log.operation("analyze", family="hill"):
            with log.operation("visualize"):
                log.warning("inner")
            log.warning("outer")
        log.warning("none")
    finally:
        _close(log)

    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [e.get("operation") for e in entries] == ["visualize", "analyze", None]
    assert entries[1]["family"] == "hill"


def test_plain_file_format(tmp_path):
    path = tmp_path / "plain.log"
    log = ClassiLogger("test_plain", log_level="WARNING", log_file=path, console_output=False)
    try:
        log.warning("weak key")
    finally:
        _close(log)
    assert "| WARNING  | classicore.test_plain | weak key" in path.read_text(encoding="utf-8")


def test_timer_elapsed():
    log = ClassiLogger("test_timer", console_output=False)
    with log.timed("work") as timer:
        pass
    assert timer.elapsed >= 0.0
    assert log.underlying.level == logging.WARNING
    assert log.tool_name == "test_timer"
