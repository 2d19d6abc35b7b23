"""Console colour theme for powerctl.

The palette is assembled from layered TOML files: the bundled
``data/theme.toml`` first, then ``~/.config/powerctl/theme.toml``, whose
``[colors]`` table may override any subset of names. Each palette colour
feeds one or more Rich styles through ``STYLE_MAP``.
"""

import logging
import re
import tomllib
from collections.abc import Iterator
from functools import lru_cache
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from powerctl.core.paths import get_config_dir

logger = logging.getLogger(__name__)

THEME_FILE = "theme.toml"

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")

# Rich style name -> (palette colour, style modifiers)
STYLE_MAP: dict[str, tuple[str, str]] = {
    "text": ("text", ""),
    "muted": ("muted", ""),
    "dim": ("muted", ""),
    "header": ("header", ""),
    "bold_header": ("header", "bold"),
    "border": ("border", ""),
    "success": ("success", ""),
    "warning": ("warning", ""),
    "error": ("error", "bold"),
    "info": ("info", ""),
    "added": ("added", ""),
    "removed": ("removed", ""),
    "skipped": ("skipped", ""),
    "power_installed": ("power_installed", "bold"),
    "power_available": ("power_available", ""),
    "power.name": ("text", "bold"),
    "power.version": ("muted", ""),
}


class ThemeError(Exception):
    """A theme file could not be read."""


class ThemeColors(BaseModel):
    """Hex palette (#RGB or #RRGGBB) behind every console style."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Install/uninstall result rows
    added: str = "#c1ff62"
    removed: str = "#f53263"
    skipped: str = "#0e8ac8"

    power_installed: str = "#69B9A1"
    power_available: str = "#226666"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, value: object) -> str:
        if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value.strip()):
            msg = f"expected a #RGB or #RRGGBB colour, got {value!r}"
            raise ValueError(msg)
        return value.strip()


def get_user_theme_path() -> Path:
    """Return the per-user override file, ~/.config/powerctl/theme.toml."""
    return get_config_dir() / THEME_FILE


def get_bundled_theme_path() -> Path:
    """Return the theme file shipped inside the powerctl package."""
    return Path(str(resources.files("powerctl.data").joinpath(THEME_FILE)))


def read_palette(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are ignored so that one stray entry does not discard
    the rest of the palette.

    Args:
        path: TOML file to read.

    Returns:
        Mapping of colour name to colour value.

    Raises:
        ThemeError: If the file cannot be read or parsed, or if ``colors`` is
            not a table.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        raise ThemeError(f"Cannot read theme file {path}: {e}") from e

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        raise ThemeError(f"'colors' in {path} must be a table")
    return {name: value for name, value in colors.items() if isinstance(value, str)}


def _palette_layers() -> Iterator[tuple[Path, dict[str, str]]]:
    """Yield each existing theme file with its palette, lowest priority first."""
    for path in (get_bundled_theme_path(), get_user_theme_path()):
        if not path.is_file():
            continue
        try:
            yield path, read_palette(path)
        except ThemeError as e:
            logger.warning("%s", e)


def load_theme() -> ThemeColors:
    """Merge the theme layers into a validated palette.

    An invalid merged palette is reported and replaced by the defaults.
    """
    merged: dict[str, str] = {}
    for path, palette in _palette_layers():
        logger.debug("Theme colours from %s: %s", path, ", ".join(sorted(palette)))
        merged.update(palette)

    try:
        return ThemeColors.model_validate(merged)
    except ValidationError as e:
        logger.warning("Ignoring invalid theme configuration: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a palette (the configured one by default)."""
    palette = (colors or load_theme()).model_dump()
    return Theme(
        {
            style: f"{modifiers} {palette[color]}".strip()
            for style, (color, modifiers) in STYLE_MAP.items()
        }
    )


@lru_cache(maxsize=1)
def get_theme() -> Theme:
    """Return the configured Rich theme, built once per process."""
    return get_rich_theme()


def reload_theme() -> Theme:
    """Drop the cached theme and rebuild it from the theme files."""
    get_theme.cache_clear()
    return get_theme()
