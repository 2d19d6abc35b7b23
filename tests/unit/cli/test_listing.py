"""Unit tests for the list CLI command."""

import json
from pathlib import Path

from powerctl.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


def _invoke(project_dir: Path, *args: str):
    return runner.invoke(app, ["--cwd", str(project_dir), *args])


class TestListAvailable:
    """Tests for powerctl list."""

    def test_lists_templates(self, project_dir: Path, demo_power: Path) -> None:
        """Available Powers are shown in a table."""
        result = _invoke(project_dir, "list")

        assert result.exit_code == 0, result.output
        assert "demo" in result.stdout
        assert "1 Power(s) available, 0 installed" in result.stdout

    def test_marks_installed(self, project_dir: Path, demo_power: Path) -> None:
        """Installed Powers are counted in the summary."""
        _invoke(project_dir, "install", "demo")

        result = _invoke(project_dir, "list")

        assert "1 Power(s) available, 1 installed" in result.stdout

    def test_json(self, project_dir: Path, demo_power: Path) -> None:
        """--json prints descriptors with the installed version."""
        _invoke(project_dir, "install", "demo")

        result = _invoke(project_dir, "list", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data[0]["name"] == "demo"
        assert data[0]["installedVersion"] == "1.0.0"
        assert data[0]["components"]["mcpServers"][0]["name"] == "demo-scanner"

    def test_empty_templates(self, project_dir: Path, templates_dir: Path) -> None:
        """An empty templates directory prints a hint."""
        result = _invoke(project_dir, "list")

        assert result.exit_code == 0
        assert "No Powers found" in result.stdout


class TestListInstalled:
    """Tests for powerctl list --installed."""

    def test_nothing_installed(self, project_dir: Path) -> None:
        """An empty project reports no installed Powers."""
        result = _invoke(project_dir, "list", "--installed")

        assert result.exit_code == 0
        assert "No Powers installed." in result.stdout

    def test_json_records(self, project_dir: Path, demo_power: Path) -> None:
        """--installed --json prints manifest records."""
        _invoke(project_dir, "install", "demo")

        result = _invoke(project_dir, "list", "--installed", "--json")

        data = json.loads(result.stdout)
        assert data[0]["name"] == "demo"
        assert data[0]["components"]["mcpServers"] == ["demo-scanner"]

    def test_orphans_reported(self, project_dir: Path, demo_power: Path) -> None:
        """Folders without a manifest record are reported."""
        _invoke(project_dir, "install", "demo")
        (project_dir / ".kiro" / "powers" / "stray").mkdir()

        result = _invoke(project_dir, "list", "--installed")

        assert "without a manifest record: stray" in result.output

    def test_broken_manifest(self, project_dir: Path) -> None:
        """An unreadable manifest is an error for --installed."""
        manifest = project_dir / ".kiro" / "powers" / "installed.json"
        manifest.parent.mkdir(parents=True)
        manifest.write_text("{broken")

        result = _invoke(project_dir, "list", "--installed")

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output
