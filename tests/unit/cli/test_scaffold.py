"""Unit tests for the scaffold CLI command."""

from pathlib import Path

from powerctl.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


def _invoke(project_dir: Path, *args: str):
    return runner.invoke(app, ["--cwd", str(project_dir), *args])


class TestScaffoldCommand:
    """Tests for powerctl scaffold."""

    def test_scaffold(self, project_dir: Path, demo_power: Path) -> None:
        """The template is copied into the project root."""
        result = _invoke(project_dir, "scaffold", "demo")

        assert result.exit_code == 0, result.output
        assert "Power scaffolded: demo" in result.stdout
        assert (project_dir / "demo" / "POWER.md").exists()

    def test_conflict_requires_force(self, project_dir: Path, demo_power: Path) -> None:
        """Existing Power files block scaffolding until --force is given."""
        target = project_dir / "demo"
        target.mkdir()
        (target / "package.json").write_text("{}")

        blocked = _invoke(project_dir, "scaffold", "demo")
        forced = _invoke(project_dir, "scaffold", "demo", "--force")

        assert blocked.exit_code == 1
        assert "already exists with power files" in blocked.output
        assert forced.exit_code == 0, forced.output

    def test_bundled_example(self, project_dir: Path) -> None:
        """The bundled example Power can be scaffolded."""
        result = _invoke(project_dir, "scaffold", "example-power")

        assert result.exit_code == 0, result.output
        assert (project_dir / "example-power" / "servers" / "example_server.py").exists()
