"""Tests for logging configuration."""

import logging
import logging.handlers

import pytest

from gooplex.logging import LOG_FILE, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    """Keep handler changes from leaking into other tests."""
    monkeypatch.delenv("GOOPLEX_LOG_LEVEL", raising=False)
    monkeypatch.delenv("GOOPLEX_LOG_DIR", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_console_only():
    """Test that no file is written without a log directory."""
    assert configure_logging() is None
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.INFO


def test_rotating_file(tmp_path):
    """Test that a log directory adds a rotating file handler."""
    log_file = configure_logging(tmp_path / "logs", level="debug")

    assert log_file == tmp_path / "logs" / LOG_FILE
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
    assert logging.getLogger("aiohttp").level == logging.INFO


def test_environment_fallbacks(tmp_path, monkeypatch):
    """Test GOOPLEX_LOG_LEVEL and GOOPLEX_LOG_DIR."""
    monkeypatch.setenv("GOOPLEX_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("GOOPLEX_LOG_DIR", str(tmp_path))

    assert configure_logging() == tmp_path / LOG_FILE
    assert logging.getLogger().level == logging.WARNING


def test_repeated_calls_do_not_duplicate_handlers():
    configure_logging()
    configure_logging()
    assert len(logging.getLogger().handlers) == 1
