"""Temporary directory sandbox for filesystem-based tests."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
import weakref
from pathlib import Path
from typing import TYPE_CHECKING, Self

from tmpfs.assets import copy_assets as _copy_assets
from tmpfs.config import PERSIST_ENV_VAR, SandboxConfig
from tmpfs.errors import FixtureError, UsageError

if TYPE_CHECKING:
    from types import TracebackType

    from tmpfs.assets import AssetEntry

logger = logging.getLogger(__name__)

PathArg = str | bytes | os.PathLike[str] | os.PathLike[bytes]


def _utf8_path(path: PathArg) -> str:
    """Return ``path`` as text, rejecting anything that is not valid UTF-8.

    Raises:
        UnicodeDecodeError: For byte paths that do not decode as UTF-8
        UnicodeEncodeError: For text paths carrying undecodable (surrogate-escaped) data
    """
    value = os.fspath(path)
    if isinstance(value, bytes):
        return value.decode("utf-8")

    value.encode("utf-8")
    return value


def _log_cleanup_error(func: object, path: str, exc: BaseException) -> None:
    logger.debug("Could not remove %s during teardown: %s", path, exc)


def _remove_root(root: Path) -> None:
    # Removal errors are logged, never raised
    shutil.rmtree(root, onexc=_log_cleanup_error)


class TmpFs:
    """A uniquely named temporary directory owned by one test.

    Every operation takes paths relative to the sandbox root and delegates to a
    single filesystem call; failures surface as the underlying ``OSError``.
    The directory is removed on :meth:`close`, on leaving a ``with`` block, or
    when the object is garbage collected, unless persistence was requested when
    it was created (``TEST_PERSIST_FILES`` set, or ``SandboxConfig.persist``).

    Example:
        with TmpFs() as fs:
            fs.write_file("src/main.txt", "hello")
            assert fs.read_file("src/main.txt") == b"hello"
    """

    def __init__(self, config: SandboxConfig | None = None) -> None:
        """Create the sandbox directory.

        Args:
            config: Creation settings; resolved from the environment when omitted

        Raises:
            FixtureError: If the directory cannot be created
        """
        self._config = config if config is not None else SandboxConfig.from_env()

        try:
            root = tempfile.mkdtemp(prefix=self._config.prefix, dir=self._config.base_dir)
        except OSError as err:
            raise FixtureError(f"Failed to create sandbox directory: {err}") from err

        self._root = Path(root).absolute()
        self._closed = False

        if self._config.persist:
            self._finalizer: weakref.finalize | None = None
        else:
            self._finalizer = weakref.finalize(self, _remove_root, self._root)

        logger.debug("Created sandbox %s (persist=%s)", self._root, self._config.persist)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TmpFs({str(self._root)!r})"

    @property
    def root(self) -> Path:
        """Absolute path of the sandbox root."""
        return self._root

    @property
    def persistent(self) -> bool:
        """Whether the directory survives teardown."""
        return self._config.persist

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Remove the sandbox directory unless it was made persistent.

        Safe to call more than once. Errors while removing the directory (for
        example when the test already deleted it) are logged and ignored.
        """
        if self._closed:
            return
        self._closed = True

        if self._finalizer is None:
            logger.info("Keeping sandbox %s (%s is set)", self._root, PERSIST_ENV_VAR)
            return

        self._finalizer()
        logger.debug("Removed sandbox %s", self._root)

    def path(self, path: PathArg) -> Path:
        """Qualify a sandbox-relative path. Does not touch the filesystem."""
        return self._root / _utf8_path(path)

    def write_file(self, path: PathArg, content: str) -> Path:
        """Write text to a file, creating missing parent directories.

        Existing files are overwritten. The content is encoded as UTF-8 and
        written without newline translation.

        Returns:
            The absolute path written
        """
        target = self.path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8"))
        return target

    def read_file(self, path: PathArg) -> bytes:
        return self.path(path).read_bytes()

    def rename(self, src: PathArg, dst: PathArg) -> None:
        """Move a file or directory, replacing an existing destination file."""
        os.replace(self.path(src), self.path(dst))

    def remove_file(self, path: PathArg) -> None:
        self.path(path).unlink()

    def remove_dir_all(self, path: PathArg) -> None:
        shutil.rmtree(self.path(path))

    def create_dir_all(self, path: PathArg) -> None:
        """Create a directory and any missing ancestors; existing directories are fine."""
        self.path(path).mkdir(parents=True, exist_ok=True)

    def set_modification_time(self, path: PathArg) -> None:
        """Set access and modification times of ``path`` to now (nanosecond resolution)."""
        now = time.time_ns()
        os.utime(self.path(path), ns=(now, now))

    def create_symbolic_link(self, src: PathArg, dst: PathArg) -> None:
        """Create a symlink at ``dst`` pointing at ``src``.

        On Windows the link kind follows the target: a directory target gets a
        directory link. Elsewhere the flag is ignored.
        """
        target = self.path(src)
        link = self.path(dst)
        os.symlink(target, link, target_is_directory=target.is_dir())

    def replace_in_file(self, path: PathArg, pattern: str, replacement: str, count: int) -> None:
        """Replace the first ``count`` occurrences of ``pattern`` in a text file.

        A count of 0 leaves the file content unchanged.

        Raises:
            ValueError: If count is negative
            UnicodeDecodeError: If the file is not valid UTF-8
            OSError: On read or write failure
        """
        if count < 0:
            raise ValueError(f"count must be zero or positive, got {count}")

        target = self.path(path)
        content = target.read_bytes().decode("utf-8")
        target.write_bytes(content.replace(pattern, replacement, count).encode("utf-8"))

    def dir_entries_raw(self) -> list[Path]:
        """Every entry under the root, root included, in top-down walk order.

        Paths are not checked for UTF-8 and may carry surrogate-escaped bytes.
        Symlinks are listed but not followed. Entries that cannot be read are
        skipped.
        """
        entries = [self._root]
        for dirpath, dirnames, filenames in os.walk(self._root, onerror=_skip_unreadable):
            base = Path(dirpath)
            entries.extend(base / name for name in dirnames)
            entries.extend(base / name for name in filenames)
        return entries

    def dir_entries(self) -> list[Path]:
        """Like :meth:`dir_entries_raw`, but every path must be valid UTF-8.

        Raises:
            UsageError: If any entry name is not valid UTF-8
        """
        entries = self.dir_entries_raw()
        for entry in entries:
            try:
                str(entry).encode("utf-8")
            except UnicodeEncodeError as err:
                raise UsageError(f"Sandbox entry is not valid UTF-8: {entry!r}") from err
        return entries

    def display_dir_entries_raw(self) -> None:
        for entry in self.dir_entries_raw():
            print(os.fsencode(entry).decode("utf-8", errors="replace"))

    def display_dir_entries(self) -> None:
        for entry in self.dir_entries():
            print(entry)

    def copy_assets(self, tree: AssetEntry) -> None:
        """Copy an asset tree into the sandbox root. See :func:`tmpfs.assets.copy_assets`."""
        logger.debug("Copying assets into %s", self._root)
        _copy_assets(tree, self._root)


def _skip_unreadable(err: OSError) -> None:
    logger.debug("Skipping unreadable entry %s: %s", err.filename, err)
