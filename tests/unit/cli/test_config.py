"""Unit tests for the config CLI commands."""

import json
from pathlib import Path

from powerctl.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


def _invoke(project_dir: Path, *args: str):
    return runner.invoke(app, ["--cwd", str(project_dir), *args])


class TestConfigShow:
    """Tests for powerctl config show."""

    def test_defaults_as_json(self, project_dir: Path) -> None:
        """Without a settings file the defaults are shown."""
        result = _invoke(project_dir, "config", "show", "--json")

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {
            "cache_enabled": True,
            "cache_ttl_seconds": 3600,
            "cache_max_entries": 100,
        }

    def test_table(self, project_dir: Path) -> None:
        """The table names the settings source."""
        result = _invoke(project_dir, "config", "show")

        assert result.exit_code == 0
        assert "defaults" in result.stdout
        assert "cache_ttl_seconds" in result.stdout


class TestConfigInit:
    """Tests for powerctl config init."""

    def test_writes_settings(self, project_dir: Path) -> None:
        """init writes the default settings file."""
        result = _invoke(project_dir, "config", "init")

        assert result.exit_code == 0, result.output
        settings = project_dir / ".kiro" / "powerctl.toml"
        assert "cache_enabled = true" in settings.read_text()

    def test_refuses_overwrite(self, project_dir: Path) -> None:
        """init does not overwrite an existing file without --force."""
        settings = project_dir / ".kiro" / "powerctl.toml"
        settings.parent.mkdir(parents=True)
        settings.write_text("cache_ttl_seconds = 120\n")

        refused = _invoke(project_dir, "config", "init")

        assert refused.exit_code == 1
        assert settings.read_text() == "cache_ttl_seconds = 120\n"

        forced = _invoke(project_dir, "config", "init", "--force")

        assert forced.exit_code == 0
        assert "cache_ttl_seconds = 3600" in settings.read_text()

    def test_settings_applied_to_cache(self, project_dir: Path, demo_power: Path) -> None:
        """A disabled cache in settings means listing caches nothing."""
        settings = project_dir / ".kiro" / "powerctl.toml"
        settings.parent.mkdir(parents=True)
        settings.write_text("cache_enabled = false\n")

        _invoke(project_dir, "list")

        assert not (project_dir / ".kiro" / "powers" / ".cache").exists()
