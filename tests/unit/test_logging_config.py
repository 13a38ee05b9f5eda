"""
Unit tests for logging configuration.

Tests LOG_LEVEL/LOG_FOCUS handling and the grep pattern helpers.
"""

from __future__ import annotations

import logging

import pytest

from timeshift_service.logging_config import (
    FOCUSED_MODULES,
    LOG_PATTERNS,
    configure_logging,
    get_grep_pattern,
)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for module in FOCUSED_MODULES:
        logging.getLogger(module).setLevel(logging.NOTSET)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_log_level_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.delenv("LOG_FOCUS", raising=False)

        configure_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_default_level_is_info(self, monkeypatch) -> None:
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FOCUS", raising=False)

        configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_focus_mode(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FOCUS", "1")

        configure_logging()

        assert logging.getLogger().level == logging.WARNING
        for module in FOCUSED_MODULES:
            assert logging.getLogger(module).level == logging.DEBUG


class TestGrepPattern:
    """Tests for get_grep_pattern()."""

    def test_single_group(self) -> None:
        assert get_grep_pattern("failures") == "|".join(LOG_PATTERNS["failures"])

    def test_all_groups(self) -> None:
        pattern = get_grep_pattern("all")

        for patterns in LOG_PATTERNS.values():
            for item in patterns:
                assert item in pattern

    def test_unknown_group(self) -> None:
        assert get_grep_pattern("nonsense") == ""
