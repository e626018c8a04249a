"""
Tests for logging configuration.
"""

import logging
from pathlib import Path

import pytest

from endpoint_forge.core.observability.logging_config import (
    parse_level,
    resolve_level,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_flag_precedence(self, monkeypatch):
        monkeypatch.setenv("FORGE_LOG_LEVEL", "ERROR")
        assert resolve_level(debug=True, verbose=True) == "DEBUG"
        assert resolve_level(verbose=True) == "INFO"
        assert resolve_level(quiet=True) == "ERROR"

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("FORGE_LOG_LEVEL", "INFO")
        assert resolve_level() == "INFO"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("FORGE_LOG_LEVEL", raising=False)
        assert resolve_level() == "WARNING"


class TestParseLevel:
    def test_known(self):
        assert parse_level("debug") == logging.DEBUG
        assert parse_level("ERROR") == logging.ERROR

    def test_unknown_and_empty(self):
        assert parse_level("loud") == logging.WARNING
        assert parse_level(None) == logging.WARNING


class TestSetupLogging:
    def test_console_handler(self, monkeypatch):
        monkeypatch.delenv("FORGE_LOG_FILE", raising=False)
        setup_logging("INFO")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_file_handler(self, tmp_path: Path, monkeypatch):
        log_file = tmp_path / "forge.log"
        monkeypatch.setenv("FORGE_LOG_FILE", str(log_file))
        monkeypatch.setenv("FORGE_LOG_FILE_LEVEL", "DEBUG")
        setup_logging("WARNING")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        logging.getLogger("endpoint_forge.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")
