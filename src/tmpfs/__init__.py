"""tmpfs - Disposable filesystem sandboxes for tests."""

__version__ = "0.1.0"

from tmpfs.assets import AssetDir, AssetEntry, AssetFile, copy_assets, package_assets
from tmpfs.config import SandboxConfig
from tmpfs.errors import FixtureError, UsageError
from tmpfs.sandbox import TmpFs

__all__ = [
    "AssetDir",
    "AssetEntry",
    "AssetFile",
    "FixtureError",
    "SandboxConfig",
    "TmpFs",
    "UsageError",
    "copy_assets",
    "package_assets",
]
