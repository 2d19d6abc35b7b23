"""Path management for powerctl.

This module resolves where Power templates come from and where the
per-project installed state lives. All project paths are pure functions
of the project root; nothing here creates directories.

Project layout:
- Installed Powers: <project>/.kiro/powers/<name>/
- Installed-state manifest: <project>/.kiro/powers/installed.json
- Shared MCP server config: <project>/.kiro/settings/mcp.json
- Steering documents: <project>/.kiro/steering/
- Cache: <project>/.kiro/powers/.cache/
- Settings: <project>/.kiro/powerctl.toml

User-level configuration (theme overrides) follows the XDG Base Directory
Specification: ~/.config/powerctl/.
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "powerctl"

# Project-level directory names
KIRO_DIR = ".kiro"
POWERS_DIR = "powers"
SETTINGS_DIR = "settings"
STEERING_DIR = "steering"
CACHE_DIR = ".cache"

# File names
INSTALLED_MANIFEST_FILE = "installed.json"
MCP_CONFIG_FILE = "mcp.json"
SETTINGS_FILE = "powerctl.toml"

# Template source locations, relative to their root
POWER_TEMPLATES_DIR = Path("templates") / "powers"
VENV_DIR = ".venv"


def _resolve_cwd(cwd: Path | None) -> Path:
    """Return the project root, defaulting to the current working directory."""
    return cwd if cwd is not None else Path.cwd()


def get_bundled_templates_dir() -> Path:
    """Get the Power templates shipped inside the powerctl package.

    Returns:
        Path to powerctl/templates/powers.
    """
    return Path(__file__).resolve().parent.parent / POWER_TEMPLATES_DIR


def get_project_templates_dir(cwd: Path | None = None) -> Path:
    """Get the project-local template override directory.

    Returns:
        Path to <project>/templates/powers.
    """
    return _resolve_cwd(cwd) / POWER_TEMPLATES_DIR


def get_dependency_templates_dir(cwd: Path | None = None) -> Path | None:
    """Find a powerctl copy installed into the project's virtualenv.

    Looks for <project>/.venv/lib/python*/site-packages/powerctl/templates/powers
    and returns the first match in sorted order.

    Returns:
        Path to the dependency-installed templates, or None if absent.
    """
    lib_dir = _resolve_cwd(cwd) / VENV_DIR / "lib"
    if not lib_dir.is_dir():
        return None
    pattern = f"python*/site-packages/{APP_NAME}/{POWER_TEMPLATES_DIR.as_posix()}"
    for candidate in sorted(lib_dir.glob(pattern)):
        if candidate.is_dir():
            return candidate
    return None


def get_powers_template_dir(cwd: Path | None = None) -> Path:
    """Resolve the effective Power templates source directory.

    Precedence:
    1. Project-local override (<project>/templates/powers)
    2. Dependency-installed copy in the project's virtualenv
    3. Templates bundled with powerctl itself

    If none of them exists, the project-local path is returned so that
    downstream existence checks fail predictably.

    Args:
        cwd: Project root. Defaults to the current working directory.

    Returns:
        Path to the templates directory (may not exist).
    """
    local_templates = get_project_templates_dir(cwd)
    if local_templates.is_dir():
        return local_templates

    dependency_templates = get_dependency_templates_dir(cwd)
    if dependency_templates is not None:
        return dependency_templates

    bundled_templates = get_bundled_templates_dir()
    if bundled_templates.is_dir():
        return bundled_templates

    return local_templates


def get_kiro_dir(cwd: Path | None = None) -> Path:
    """Get the project's .kiro directory."""
    return _resolve_cwd(cwd) / KIRO_DIR


def get_powers_dir(cwd: Path | None = None) -> Path:
    """Get the directory holding installed Power copies.

    Returns:
        Path to <project>/.kiro/powers.
    """
    return get_kiro_dir(cwd) / POWERS_DIR


def get_power_install_dir(name: str, cwd: Path | None = None) -> Path:
    """Get the installed copy directory for a single Power.

    Returns:
        Path to <project>/.kiro/powers/<name>.
    """
    return get_powers_dir(cwd) / name


def get_installed_manifest_path(cwd: Path | None = None) -> Path:
    """Get the installed-state manifest path.

    Returns:
        Path to <project>/.kiro/powers/installed.json.
    """
    return get_powers_dir(cwd) / INSTALLED_MANIFEST_FILE


def get_mcp_config_path(cwd: Path | None = None) -> Path:
    """Get the shared MCP server configuration path.

    Returns:
        Path to <project>/.kiro/settings/mcp.json.
    """
    return get_kiro_dir(cwd) / SETTINGS_DIR / MCP_CONFIG_FILE


def get_steering_dir(cwd: Path | None = None) -> Path:
    """Get the shared steering documents directory.

    Returns:
        Path to <project>/.kiro/steering.
    """
    return get_kiro_dir(cwd) / STEERING_DIR


def get_cache_dir(cwd: Path | None = None) -> Path:
    """Get the Power metadata cache directory.

    Cache data can always be regenerated from the templates and the
    installed-state manifest.

    Returns:
        Path to <project>/.kiro/powers/.cache.
    """
    return get_powers_dir(cwd) / CACHE_DIR


def get_settings_path(cwd: Path | None = None) -> Path:
    """Get the project settings file path.

    Returns:
        Path to <project>/.kiro/powerctl.toml.
    """
    return get_kiro_dir(cwd) / SETTINGS_FILE


def get_scaffold_dir(name: str, cwd: Path | None = None) -> Path:
    """Get the target directory when scaffolding a Power for development.

    Returns:
        Path to <project>/<name>.
    """
    return _resolve_cwd(cwd) / name


def get_config_dir() -> Path:
    """Get the user configuration directory path.

    Returns:
        Path to ~/.config/powerctl/ (or XDG_CONFIG_HOME/powerctl/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


# =============================================================================
# Power package layout
# =============================================================================

POWER_PACKAGE_FILE = "package.json"
POWER_MANIFEST_FILE = "POWER.md"
POWER_MCP_CONFIG_FILE = "mcp.json"
POWER_STEERING_DIR = "steering"
POWER_EXAMPLES_DIR = "examples"
POWER_SERVERS_DIR = "servers"

# Extension of steering documents and examples
DOC_EXTENSION = ".md"

# Extensions counted as server implementations
SERVER_EXTENSIONS = (".js", ".ts", ".py")
