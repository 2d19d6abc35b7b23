"""Filesystem abstraction used by the cache and the installer.

The installer and the cache never touch the disk directly; they receive a
FileSystem implementation so they can be exercised against in-memory or
failure-injecting fakes in tests.
"""

import json
import logging
import os
import shutil
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Minimal filesystem interface needed by powerctl."""

    def exists(self, path: Path) -> bool:
        """Return True if the path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Return True if the path is an existing directory."""
        ...

    def read_dir(self, path: Path) -> list[str]:
        """Return the sorted entry names of a directory."""
        ...

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 text file."""
        ...

    def write_text(self, path: Path, content: str) -> None:
        """Write a UTF-8 text file, creating parent directories."""
        ...

    def make_dirs(self, path: Path) -> None:
        """Create a directory and its parents if missing."""
        ...

    def copy_file(self, source: Path, target: Path) -> None:
        """Copy one file byte for byte, creating parent directories."""
        ...

    def copy_tree(self, source: Path, target: Path) -> None:
        """Recursively copy a directory into target."""
        ...

    def move(self, source: Path, target: Path) -> None:
        """Move a file or directory, replacing nothing."""
        ...

    def remove(self, path: Path) -> None:
        """Remove a file or directory tree if it exists."""
        ...


class LocalFileSystem:
    """FileSystem implementation backed by the real disk.

    Text writes are atomic: content goes to a temporary file in the same
    directory which then replaces the target with os.replace().
    """

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def read_dir(self, path: Path) -> list[str]:
        return sorted(entry.name for entry in path.iterdir())

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(content)
            os.replace(str(tmp_path), str(path))
        except OSError:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise

    def make_dirs(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(source), str(target))

    def copy_tree(self, source: Path, target: Path) -> None:
        shutil.copytree(str(source), str(target), dirs_exist_ok=True)

    def move(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(target))

    def remove(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()


def read_json(fs: FileSystem, path: Path) -> Any:
    """Read and parse a JSON document.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the content is not valid JSON.
    """
    return json.loads(fs.read_text(path))


def write_json(fs: FileSystem, path: Path, data: Any) -> None:
    """Write a pretty-printed UTF-8 JSON document with a trailing newline.

    Raises:
        OSError: If the file cannot be written.
    """
    fs.write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
