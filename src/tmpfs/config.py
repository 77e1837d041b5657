"""Sandbox creation settings resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# Presence toggle: any value, including an empty one, keeps the sandbox on disk
PERSIST_ENV_VAR = "TEST_PERSIST_FILES"


@dataclass(slots=True)
class SandboxConfig:
    """Settings read once when a sandbox is created."""

    persist: bool = False
    prefix: str = "tmpfs-"
    base_dir: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SandboxConfig:
        """Build a config from TEST_PERSIST_FILES and TMPFS_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls(persist=PERSIST_ENV_VAR in env)

        env_mappings = {
            "TMPFS_PREFIX": "prefix",
            "TMPFS_BASE_DIR": "base_dir",
        }

        for env_var, config_key in env_mappings.items():
            if value := env.get(env_var):
                if config_key == "base_dir":
                    config.base_dir = Path(value).expanduser()
                else:
                    config.prefix = value

        return config
