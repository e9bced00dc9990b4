"""Filesystem operations used by the distribution stage."""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """Existence checks, folder creation and file copies."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """True if a file exists at path."""

    @abstractmethod
    def is_directory(self, path: Path) -> bool:
        """True if a directory exists at path."""

    @abstractmethod
    def make_directory(self, path: Path) -> None:
        """Create a single directory; its parent must already exist."""

    @abstractmethod
    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy file contents byte-for-byte, leaving the source in place."""


class LocalFileSystem(FileSystem):
    """The host filesystem."""

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def is_directory(self, path: Path) -> bool:
        return Path(path).is_dir()

    def make_directory(self, path: Path) -> None:
        Path(path).mkdir(exist_ok=True)

    def copy_file(self, source: Path, destination: Path) -> None:
        shutil.copyfile(source, destination)
