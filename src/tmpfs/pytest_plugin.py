"""pytest fixture providing a fresh sandbox per test.

Enable it from a ``conftest.py``::

    pytest_plugins = ["tmpfs.pytest_plugin"]
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tmpfs.config import SandboxConfig
from tmpfs.sandbox import TmpFs

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def tmpfs() -> Iterator[TmpFs]:
    """Sandbox directory removed after the test unless TEST_PERSIST_FILES is set."""
    with TmpFs(SandboxConfig.from_env()) as fs:
        yield fs
