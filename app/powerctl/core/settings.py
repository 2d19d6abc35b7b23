"""Project settings for powerctl.

This module provides the settings model and I/O functions for the
optional per-project configuration file (.kiro/powerctl.toml), which
tunes the metadata cache.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from powerctl.core.paths import get_settings_path

DEFAULT_CACHE_TTL_SECONDS = 3600
DEFAULT_CACHE_MAX_ENTRIES = 100


class PowerSettings(BaseModel):
    """Per-project powerctl settings.

    Attributes:
        cache_enabled: Use the metadata cache at all.
        cache_ttl_seconds: Lifetime of cache entries (60-86400s).
        cache_max_entries: Capacity of the in-memory cache tier.
    """

    model_config = ConfigDict(extra="forbid")

    cache_enabled: Annotated[
        bool,
        Field(description="Use the metadata cache"),
    ] = True
    cache_ttl_seconds: Annotated[
        int,
        Field(ge=60, le=86400, description="Cache entry lifetime in seconds (60-86400)"),
    ] = DEFAULT_CACHE_TTL_SECONDS
    cache_max_entries: Annotated[
        int,
        Field(ge=1, description="In-memory cache capacity"),
    ] = DEFAULT_CACHE_MAX_ENTRIES

    @property
    def cache_ttl_ms(self) -> int:
        """Cache TTL in milliseconds, as stored in cache entries."""
        return self.cache_ttl_seconds * 1000


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsNotFoundError(SettingsError):
    """Raised when the settings file is not found."""


class SettingsParseError(SettingsError):
    """Raised when the settings file cannot be parsed."""


def load_settings(path: Path | None = None) -> PowerSettings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the project default.

    Returns:
        Validated PowerSettings object.

    Raises:
        SettingsNotFoundError: If the settings file doesn't exist.
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the content doesn't match the schema.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        raise SettingsNotFoundError(f"Settings not found: {settings_path}")

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return PowerSettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def save_settings(settings: PowerSettings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The PowerSettings object to save.
        path: Path to save the settings. If None, uses the project default.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(settings.model_dump(), f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path


def get_settings(path: Path | None = None) -> PowerSettings:
    """Load settings, falling back to defaults when no file exists.

    Raises:
        SettingsError: If an existing file is invalid.
    """
    try:
        return load_settings(path)
    except SettingsNotFoundError:
        return PowerSettings()
