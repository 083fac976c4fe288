"""Shared pytest fixtures for datekit tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from click.testing import CliRunner

from datekit.config.settings import get_settings


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Drop cached settings and any DATEKIT_* variables from the host environment."""
    for name in (
        "DATEKIT_DEFAULT_ZONE",
        "DATEKIT_DISAMBIGUATION",
        "DATEKIT_SEARCH_MAX_YEARS",
        "DATEKIT_SCAN_BLOCK_DAYS",
        "DATEKIT_ENUMERATE_MAX_MATCHES",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    datekit_logger = logging.getLogger("datekit")
    datekit_level = datekit_logger.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    datekit_logger.setLevel(datekit_level)
