"""
File system capability used by the content store and the dependency index.

Both stores talk to the disk only through the narrow FileSystem protocol
below, so tests can inject an in-memory implementation instead of touching
the real file system. Implementations raise the built-in OSError subclasses
(FileNotFoundError, PermissionError, ...) with a populated errno, exactly
like the os module does.
"""

import os
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileSystem(Protocol):
    """
    Protocol for file system implementations.

    Paths are always absolute or relative pathlib.Path objects; text is
    always UTF-8.
    """

    def read_text(self, path: Path) -> str:
        """Read a whole file as text."""
        ...

    def write_text(self, path: Path, text: str) -> None:
        """Create or truncate a file and write text to it."""
        ...

    def rename(self, src: Path, dst: Path) -> None:
        """Rename src over dst, replacing dst if it exists."""
        ...

    def unlink(self, path: Path) -> None:
        """Delete a file."""
        ...

    def mkdir(self, path: Path) -> None:
        """Create a directory and its parents; an existing directory is fine."""
        ...

    def listdir(self, path: Path) -> list[str]:
        """List entry names of a directory."""
        ...

    def exists(self, path: Path) -> bool:
        """Check whether a file or directory exists."""
        ...


class LocalFileSystem:
    """FileSystem backed by the real disk via pathlib and os."""

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, text: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)

    def rename(self, src: Path, dst: Path) -> None:
        # os.replace overwrites dst atomically on POSIX and Windows
        os.replace(src, dst)

    def unlink(self, path: Path) -> None:
        os.unlink(path)

    def mkdir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def listdir(self, path: Path) -> list[str]:
        return os.listdir(path)

    def exists(self, path: Path) -> bool:
        return path.exists()
