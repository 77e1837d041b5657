"""Sandbox error types."""


class FixtureError(Exception):
    """Raised when the sandbox directory cannot be created."""


class UsageError(RuntimeError):
    """Raised when the sandbox is used outside its contract (e.g. non-UTF-8 paths)."""
