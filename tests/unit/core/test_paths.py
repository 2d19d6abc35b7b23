"""Unit tests for path management.

Tests for the paths module that resolves project paths and template sources.
"""

import os
from pathlib import Path
from unittest.mock import patch

from powerctl.core import paths
from powerctl.core.paths import (
    APP_NAME,
    get_bundled_templates_dir,
    get_cache_dir,
    get_config_dir,
    get_dependency_templates_dir,
    get_installed_manifest_path,
    get_mcp_config_path,
    get_power_install_dir,
    get_powers_dir,
    get_powers_template_dir,
    get_scaffold_dir,
    get_settings_path,
    get_steering_dir,
)


class TestProjectPaths:
    """Tests for per-project path helpers."""

    def test_layout_under_kiro(self, tmp_path: Path) -> None:
        """Project paths all live under <project>/.kiro."""
        kiro = tmp_path / ".kiro"

        assert get_powers_dir(tmp_path) == kiro / "powers"
        assert get_power_install_dir("demo", tmp_path) == kiro / "powers" / "demo"
        assert get_installed_manifest_path(tmp_path) == kiro / "powers" / "installed.json"
        assert get_mcp_config_path(tmp_path) == kiro / "settings" / "mcp.json"
        assert get_steering_dir(tmp_path) == kiro / "steering"
        assert get_cache_dir(tmp_path) == kiro / "powers" / ".cache"
        assert get_settings_path(tmp_path) == kiro / "powerctl.toml"

    def test_scaffold_dir_is_project_child(self, tmp_path: Path) -> None:
        """Scaffolding targets <project>/<name>."""
        assert get_scaffold_dir("demo", tmp_path) == tmp_path / "demo"

    def test_defaults_to_current_directory(self, tmp_path: Path) -> None:
        """Without a project root the current directory is used."""
        with patch.object(paths.Path, "cwd", return_value=tmp_path):
            assert get_powers_dir() == tmp_path / ".kiro" / "powers"

    def test_no_directories_created(self, tmp_path: Path) -> None:
        """Resolving paths never touches the disk."""
        get_mcp_config_path(tmp_path)
        get_cache_dir(tmp_path)

        assert not (tmp_path / ".kiro").exists()


class TestGetPowersTemplateDir:
    """Tests for template source resolution."""

    def test_project_local_override_wins(self, tmp_path: Path) -> None:
        """A project-local templates/powers directory takes precedence."""
        local = tmp_path / "templates" / "powers"
        local.mkdir(parents=True)
        venv = (
            tmp_path / ".venv" / "lib" / "python3.12" / "site-packages" / APP_NAME
        ) / "templates" / "powers"
        venv.mkdir(parents=True)

        assert get_powers_template_dir(tmp_path) == local

    def test_dependency_copy_used_without_override(self, tmp_path: Path) -> None:
        """A powerctl copy installed in the project's virtualenv comes second."""
        venv = (
            tmp_path / ".venv" / "lib" / "python3.12" / "site-packages" / APP_NAME
        ) / "templates" / "powers"
        venv.mkdir(parents=True)

        assert get_dependency_templates_dir(tmp_path) == venv
        assert get_powers_template_dir(tmp_path) == venv

    def test_no_dependency_copy(self, tmp_path: Path) -> None:
        """Without a virtualenv there is no dependency copy."""
        assert get_dependency_templates_dir(tmp_path) is None

    def test_bundled_templates_as_fallback(self, tmp_path: Path) -> None:
        """The bundled templates are used when nothing project-level exists."""
        assert get_powers_template_dir(tmp_path) == get_bundled_templates_dir()

    def test_bundled_templates_ship_example(self) -> None:
        """The bundled templates include the example Power."""
        assert (get_bundled_templates_dir() / "example-power" / "package.json").is_file()

    def test_missing_everywhere_returns_local_path(self, tmp_path: Path) -> None:
        """When no source exists the project-local path is returned."""
        with patch.object(paths, "get_bundled_templates_dir", return_value=tmp_path / "absent"):
            result = get_powers_template_dir(tmp_path)

        assert result == tmp_path / "templates" / "powers"
        assert not result.exists()


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}, clear=True):
            os.environ.pop("XDG_CONFIG_HOME", None)

            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME
