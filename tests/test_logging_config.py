"""Tests for singleton logging configuration."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from stalecheck.logging_config import (
    _SUPPRESSED_LOGGERS,
    LOG_DATEFMT,
    LOG_FORMAT,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flag() -> None:
    """Reset the singleton flag before each test."""
    import stalecheck.logging_config as mod

    mod._configured = False


def test_setup_logging_is_idempotent() -> None:
    with patch("stalecheck.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging()  # second call is no-op
        mock_bc.assert_called_once()


def test_force_reapplies_level() -> None:
    with patch("stalecheck.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging("DEBUG", force=True)
    assert mock_bc.call_count == 2
    assert mock_bc.call_args.kwargs["level"] == logging.DEBUG
    assert mock_bc.call_args.kwargs["force"] is True


def test_suppressed_loggers_at_warning() -> None:
    with patch("stalecheck.logging_config.logging.basicConfig"):
        setup_logging()
    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        assert lg.level == logging.WARNING, (
            f"Logger {name!r} level is {lg.level}, expected WARNING"
        )


def test_format_passed_to_basic_config() -> None:
    with patch("stalecheck.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("warning")
    kwargs = mock_bc.call_args.kwargs
    assert kwargs["format"] == LOG_FORMAT
    assert kwargs["datefmt"] == LOG_DATEFMT
    assert kwargs["level"] == logging.WARNING
