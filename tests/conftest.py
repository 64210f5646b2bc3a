"""Shared fixtures."""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo logging configuration done by a test."""
    yield
    structlog.reset_defaults()
