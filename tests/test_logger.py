"""
Tests for the loguru formatters and the rotating file sink.
"""

import logging

from loguru import logger

from anistream.utils.logger import add_file_sink, cache_logger, format_console, format_file, silence_external_loggers


def test_file_sink_writes_plain_context_lines(tmp_path):
    path = tmp_path / "anistream.log"
    handler_id = add_file_sink(str(path), level="DEBUG")
    try:
        cache_logger.debug("Hit: anitaku:popular;1")
        logger.info("unbound message")
    finally:
        logger.remove(handler_id)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert "| DEBUG    | CACHE     | Hit: anitaku:popular;1" in lines[0]
    assert "| INFO     | APP       | unbound message" in lines[1]
    assert "\x1b[" not in lines[0]


def test_file_sink_respects_level(tmp_path):
    path = tmp_path / "anistream.log"
    handler_id = add_file_sink(str(path), level="ERROR")
    try:
        cache_logger.info("Saved: anitaku:genre-list (86400s)")
        cache_logger.error("Cache save failed: ConnectionError")
    finally:
        logger.remove(handler_id)

    content = path.read_text(encoding="utf-8")
    assert "Saved" not in content
    assert "Cache save failed: ConnectionError" in content


def test_console_format_falls_back_to_default_context():
    record = {"extra": {}, "level": logger.level("INFO")}
    assert "APP" in format_console(record)
    assert "PROVIDER" in format_file({"extra": {"context": "PROVIDER"}})


def test_external_loggers_are_silenced():
    silence_external_loggers()
    assert logging.getLogger("httpx").level == logging.CRITICAL
    assert logging.getLogger("uvicorn.access").disabled
