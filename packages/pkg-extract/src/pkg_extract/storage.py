# SPDX-License-Identifier: MIT
"""Storage boundary for reading sources and writing the extracted tree."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .errors import StorageError


@runtime_checkable
class Storage(Protocol):
    """Operations the extractor needs from storage. Nothing is ever deleted."""

    def ensure_location(self, path: Path) -> None: ...

    def read_file(self, path: Path) -> bytes: ...

    def write_file(self, path: Path, data: bytes) -> None: ...


def _current_umask() -> int:
    # os.umask can only be read by setting it
    mask = os.umask(0o022)
    os.umask(mask)
    return mask


class FileSystemStorage:
    """Local filesystem storage.

    Each write goes to a temporary file next to the destination and is moved
    into place with ``os.replace``, so a file is either complete or absent.
    Written files get the usual ``0o666`` mode minus the process umask, read
    once when the storage is created.
    """

    def __init__(self) -> None:
        self.file_mode = 0o666 & ~_current_umask()

    def ensure_location(self, path: Path) -> None:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(path, f"Failed to create directory ({e.strerror})") from e

    def read_file(self, path: Path) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise StorageError(path, f"Failed to read ({e.strerror})") from e

    def write_file(self, path: Path, data: bytes) -> None:
        path = Path(path)
        try:
            fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as e:
            raise StorageError(path, f"Failed to write ({e.strerror})") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            # mkstemp creates the file owner-only
            os.chmod(temp_name, self.file_mode)
            os.replace(temp_name, path)
        except OSError as e:
            Path(temp_name).unlink(missing_ok=True)
            raise StorageError(path, f"Failed to write ({e.strerror})") from e
