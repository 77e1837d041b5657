"""Shared test fixtures."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

pytest_plugins = ["pytester", "tmpfs.pytest_plugin"]


@pytest.fixture
def temp_dir() -> Path:
    """Scratch directory independent of the sandbox under test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
