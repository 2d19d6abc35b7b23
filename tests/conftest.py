"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: a project
directory with a local Power templates directory, a factory that writes
Power templates into it, and a filesystem wrapper that records writes and
can inject failures.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from powerctl.core.filesystem import LocalFileSystem
from powerctl.core.installer import PowerManager

PowerFactory = Callable[..., Path]


class RecordingFileSystem(LocalFileSystem):
    """LocalFileSystem that records mutating calls and can fail on demand.

    Attributes:
        writes: (operation, path) for every mutating call, in order.
        fail_when: Predicate on (operation, path); a match raises OSError.
    """

    def __init__(self) -> None:
        self.writes: list[tuple[str, Path]] = []
        self.fail_when: Callable[[str, Path], bool] = lambda operation, path: False

    def _record(self, operation: str, path: Path) -> None:
        if self.fail_when(operation, path):
            msg = f"Injected failure: {operation} {path}"
            raise OSError(msg)
        self.writes.append((operation, path))

    def write_text(self, path: Path, content: str) -> None:
        self._record("write_text", path)
        super().write_text(path, content)

    def make_dirs(self, path: Path) -> None:
        self._record("make_dirs", path)
        super().make_dirs(path)

    def copy_file(self, source: Path, target: Path) -> None:
        self._record("copy_file", target)
        super().copy_file(source, target)

    def copy_tree(self, source: Path, target: Path) -> None:
        self._record("copy_tree", target)
        super().copy_tree(source, target)

    def move(self, source: Path, target: Path) -> None:
        self._record("move", target)
        super().move(source, target)

    def remove(self, path: Path) -> None:
        # Removing something that does not exist is not a write
        if path.exists() or path.is_symlink():
            self._record("remove", path)
        super().remove(path)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create an empty project root."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def templates_dir(project_dir: Path) -> Path:
    """Create the project-local Power templates directory."""
    templates = project_dir / "templates" / "powers"
    templates.mkdir(parents=True)
    return templates


@pytest.fixture
def make_power(templates_dir: Path) -> PowerFactory:
    """Factory that writes a Power template and returns its directory.

    Keyword arguments:
        version: package.json version (default "1.0.0").
        servers: Server name to descriptor; None writes no mcp.json.
        steering: File name to content for steering/.
        examples: File name to content for examples/.
        package_extra: Extra package.json keys.
        power_md: Write POWER.md (default True).
        package_json: Write package.json (default True).
    """

    def _make(
        name: str,
        *,
        version: str = "1.0.0",
        servers: dict[str, dict[str, Any]] | None = None,
        steering: dict[str, str] | None = None,
        examples: dict[str, str] | None = None,
        package_extra: dict[str, Any] | None = None,
        power_md: bool = True,
        package_json: bool = True,
    ) -> Path:
        power_dir = templates_dir / name
        power_dir.mkdir(parents=True, exist_ok=True)

        if package_json:
            package = {
                "name": name,
                "version": version,
                "description": f"{name} test Power",
                "author": "tests",
                **(package_extra or {}),
            }
            (power_dir / "package.json").write_text(json.dumps(package, indent=2))
        if power_md:
            (power_dir / "POWER.md").write_text(f"# {name}\n")
        if servers is not None:
            (power_dir / "mcp.json").write_text(json.dumps({"mcpServers": servers}, indent=2))
        for subdir, docs in (("steering", steering), ("examples", examples)):
            if docs:
                (power_dir / subdir).mkdir(exist_ok=True)
                for file_name, content in docs.items():
                    (power_dir / subdir / file_name).write_text(content)
        return power_dir

    return _make


@pytest.fixture
def demo_power(make_power: PowerFactory) -> Path:
    """The demo Power: one MCP server and one steering document."""
    return make_power(
        "demo",
        servers={
            "demo-scanner": {
                "description": "Scans demo projects",
                "command": "run",
                "args": ["serve"],
            }
        },
        steering={"demo-guide.md": "# Demo guide\n"},
    )


@pytest.fixture
def recording_fs() -> RecordingFileSystem:
    """Filesystem that records writes and can inject failures."""
    return RecordingFileSystem()


@pytest.fixture
def manager(project_dir: Path, recording_fs: RecordingFileSystem) -> PowerManager:
    """PowerManager for the project, backed by the recording filesystem."""
    return PowerManager(project_dir, fs=recording_fs)


@pytest.fixture
def read_json() -> Callable[[Path], Any]:
    """Helper to parse a JSON file."""

    def _read(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read
