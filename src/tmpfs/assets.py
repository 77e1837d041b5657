"""Read-only asset trees and their recursive copy into a directory.

An asset tree is anything that walks like :class:`importlib.resources.abc.Traversable`:
bundled package data, a plain :class:`pathlib.Path` directory, or the in-memory
:class:`AssetDir` / :class:`AssetFile` models defined here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from importlib.resources import files
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Protocol

import yaml
from pydantic import BaseModel, ConfigDict, Field

from tmpfs.errors import UsageError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from importlib.resources.abc import Traversable
    from pathlib import Path

logger = logging.getLogger(__name__)


class AssetEntry(Protocol):
    """A node of an asset tree."""

    @property
    def name(self) -> str: ...

    def is_dir(self) -> bool: ...

    def is_file(self) -> bool: ...

    def iterdir(self) -> Iterator[AssetEntry]: ...

    def read_bytes(self) -> bytes: ...


class AssetFile(BaseModel):
    """A file leaf of an in-memory asset tree."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Path of the file inside the tree, '/'-separated")
    contents: bytes = Field(default=b"", description="Raw file contents")

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    def is_dir(self) -> bool:
        return False

    def is_file(self) -> bool:
        return True

    def iterdir(self) -> Iterator[AssetEntry]:
        raise NotADirectoryError(self.path)

    def read_bytes(self) -> bytes:
        return self.contents


class AssetDir(BaseModel):
    """A directory node of an in-memory asset tree."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(default="", description="Path of the directory inside the tree")
    entries: tuple[AssetFile | AssetDir, ...] = Field(default=())

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    def is_dir(self) -> bool:
        return True

    def is_file(self) -> bool:
        return False

    def iterdir(self) -> Iterator[AssetEntry]:
        return iter(self.entries)

    def read_bytes(self) -> bytes:
        raise IsADirectoryError(self.path)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object], path: str = "") -> AssetDir:
        """Build a tree from a nested mapping of name -> contents or sub-mapping.

        String contents are UTF-8 encoded and ``None`` stands for an empty file.
        Entry paths are recorded relative to the tree root.

        Raises:
            ValueError: If a name is not a string or a value has an unsupported type
        """
        entries: list[AssetFile | AssetDir] = []
        for name, value in mapping.items():
            if not isinstance(name, str):
                raise ValueError(f"Asset names must be strings, got {name!r}")

            child = str(PurePosixPath(path, name)) if path else name

            if isinstance(value, Mapping):
                entries.append(cls.from_mapping(value, child))
            elif isinstance(value, str):
                entries.append(AssetFile(path=child, contents=value.encode("utf-8")))
            elif isinstance(value, bytes):
                entries.append(AssetFile(path=child, contents=value))
            elif value is None:
                entries.append(AssetFile(path=child))
            else:
                raise ValueError(
                    f"Unsupported asset value for {child}: {type(value).__name__}"
                )

        return cls(path=path, entries=tuple(entries))

    @classmethod
    def from_yaml(cls, manifest: Path) -> AssetDir:
        """Load a tree from a YAML manifest holding the same nested mapping shape."""
        with open(manifest) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, Mapping):
            raise ValueError(f"Asset manifest must be a mapping: {manifest}")

        return cls.from_mapping(data)


def package_assets(package: str, *parts: str) -> Traversable:
    """Return the bundled data directory ``parts`` inside ``package``."""
    resource = files(package)
    for part in parts:
        resource = resource.joinpath(part)
    return resource


def _target_name(entry: AssetEntry) -> str:
    """Final path component of an entry, which must be valid UTF-8."""
    name = PurePosixPath(entry.name).name
    if name in ("", ".", ".."):
        raise UsageError(f"Asset entry has no usable file name: {entry.name!r}")

    try:
        name.encode("utf-8")
    except UnicodeEncodeError as err:
        raise UsageError(f"Asset entry name is not valid UTF-8: {name!r}") from err

    return name


def copy_assets(tree: AssetEntry, destination: Path) -> None:
    """Copy the entries under ``tree`` into ``destination``.

    Only each entry's final path component is joined onto the current
    destination, so two entries sharing a basename under one directory land on
    the same target and the later one wins. Directories are created with
    ``mkdir`` and must not exist yet; files are overwritten. The first failure
    aborts the copy and leaves whatever was already written in place.

    Raises:
        OSError: On any filesystem failure (``FileExistsError`` for an existing directory)
        UsageError: On entries that are neither files nor directories or have unusable names
    """
    for entry in tree.iterdir():
        target = destination / _target_name(entry)

        if entry.is_dir():
            target.mkdir()
            copy_assets(entry, target)
        elif entry.is_file():
            target.write_bytes(entry.read_bytes())
        else:
            raise UsageError(f"Unsupported asset entry kind: {entry.name!r}")

        logger.debug("Copied asset %s -> %s", entry.name, target)
