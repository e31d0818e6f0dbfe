# pylint: disable=unused-import, protected-access, missing-module-docstring
"""
Tests for the logging formatter and Logger class.
"""

import json
import logging
import pytest

from vegtrend.core.logger import Logger


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch):
    """
    Reset Logger configuration and environment variables before each test.
    """
    Logger._configured = False
    monkeypatch.delenv("VEGTREND_LOG_FMT", raising=False)
    monkeypatch.delenv("VEGTREND_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    yield
    for h in list(root.handlers):
        root.removeHandler(h)


def test_text_logging_default(capsys):
    """
    By default, logs should be in text format on stderr.
    """
    Logger.setup()
    logger = Logger.get_logger("test")
    logger.info("hello world")
    captured = capsys.readouterr()
    assert "INFO" in captured.err
    assert "test" in captured.err
    assert "hello world" in captured.err


def test_json_logging_env(capsys, monkeypatch):
    """
    With VEGTREND_LOG_FMT=json and VEGTREND_LOG_LEVEL=DEBUG, output must be JSON.
    """
    monkeypatch.setenv("VEGTREND_LOG_FMT", "json")
    monkeypatch.setenv("VEGTREND_LOG_LEVEL", "DEBUG")

    Logger.setup()
    logger = Logger.get_logger("testjson")
    logger.debug("debug message")
    captured = capsys.readouterr()
    record = json.loads(captured.err.strip())
    assert record["level"] == "DEBUG"
    assert record["name"] == "testjson"
    assert record["message"] == "debug message"
    assert "timestamp" in record


def test_no_duplicate_handlers():
    """
    Calling setup() twice should not add duplicate handlers.
    """
    Logger.setup()
    Logger.setup()
    handlers = [
        h for h in logging.getLogger().handlers if isinstance(h, logging.StreamHandler)
    ]
    assert len(handlers) == 1


def test_json_logging_includes_traceback(capsys):
    """
    Records logged with exc_info keep the traceback in JSON mode.
    """
    Logger.setup(fmt="json")
    logger = Logger.get_logger("testjson")
    try:
        raise RuntimeError("scene unreadable")
    except RuntimeError:
        logger.error("Analysis failed", exc_info=True)
    record = json.loads(capsys.readouterr().err.strip().splitlines()[0])
    assert record["message"] == "Analysis failed"
    assert "RuntimeError: scene unreadable" in record["exc_info"]
