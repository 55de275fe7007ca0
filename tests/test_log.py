"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest

from pkgtree.log import configure_logging


class TestConfigureLogging:
    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True, log_json=False)
        assert logging.getLogger("pkgtree").level == logging.DEBUG
        assert logging.getLogger().level == logging.WARNING

    def test_non_verbose_sets_warning(self) -> None:
        configure_logging(verbose=False, log_json=False)
        assert logging.getLogger("pkgtree").level == logging.WARNING

    def test_single_handler(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("pkgtree.test").warning("json test")
        captured = capfd.readouterr()
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "json test"
        assert parsed["level"] == "warning"
        assert parsed["logger"] == "pkgtree.test"
        assert "timestamp" in parsed

    def test_debug_hidden_when_not_verbose(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=False, log_json=True)
        logging.getLogger("pkgtree.test").debug("quiet")
        assert capfd.readouterr().err == ""
