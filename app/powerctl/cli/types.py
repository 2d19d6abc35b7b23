"""Shared types and utilities for CLI commands.

This module provides the global option holder and the factory that builds
a PowerManager for the selected project, so every command constructs its
collaborators the same way.
"""

from dataclasses import dataclass
from pathlib import Path

import typer

from powerctl.core.cache import PowerCacheManager
from powerctl.core.installer import PowerManager
from powerctl.core.paths import get_cache_dir, get_settings_path
from powerctl.core.settings import PowerSettings, SettingsError, get_settings
from powerctl.utils.formatting import print_error


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Global options shared by all commands.

    Attributes:
        cwd: Project root the command operates on.
        verbose: Debug logging enabled.
        quiet: Suppress non-essential output.
    """

    cwd: Path
    verbose: bool = False
    quiet: bool = False


def get_options(ctx: typer.Context) -> CliOptions:
    """Return the global options stored by the main callback."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    options = obj.get("options")
    if isinstance(options, CliOptions):
        return options
    return CliOptions(cwd=Path.cwd())


def require_settings(cwd: Path) -> PowerSettings:
    """Load project settings or exit with a helpful error message.

    Raises:
        typer.Exit: If an existing settings file is invalid.
    """
    path = get_settings_path(cwd)
    try:
        return get_settings(path)
    except SettingsError as e:
        print_error(f"Failed to load settings from {path}: {e}")
        raise typer.Exit(code=1) from e


def create_cache(cwd: Path, settings: PowerSettings) -> PowerCacheManager:
    """Build the cache for one command invocation."""
    return PowerCacheManager(
        get_cache_dir(cwd),
        max_memory_entries=settings.cache_max_entries,
        default_ttl=settings.cache_ttl_ms,
        enabled=settings.cache_enabled,
    )


def create_manager(ctx: typer.Context) -> PowerManager:
    """Build a PowerManager for the project selected on the command line."""
    options = get_options(ctx)
    settings = require_settings(options.cwd)
    return PowerManager(options.cwd, cache=create_cache(options.cwd, settings))
