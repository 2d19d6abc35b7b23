"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from powerctl.core.theme import get_theme

if TYPE_CHECKING:
    from powerctl.models.power import PowerPackage


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_power_table(title: str = "Available Powers") -> Table:
    """Create a pre-configured table for displaying Powers.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for Power display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    # Status column: minimal width, icon only, no header text
    table.add_column("", width=2, justify="center")
    table.add_column("Power", no_wrap=True)
    table.add_column("Version", style="muted")
    table.add_column("Servers", style="info", justify="right")
    table.add_column("Steering", style="info", justify="right")
    table.add_column("Description", style="text", overflow="ellipsis")
    return table


def format_power_row(
    power: PowerPackage,
    installed_version: str | None = None,
) -> tuple[str, str, str, str, str, str]:
    """Format a Power as a table row with proper styling.

    Installed Powers get a filled circle and their installed version;
    available ones an empty circle.

    Args:
        power: The Power descriptor to format.
        installed_version: Installed version, if the Power is installed.

    Returns:
        Tuple of (icon, name, version, servers, steering, description).
    """
    if installed_version is not None:
        icon = "[power_installed]●[/]"
        name = f"[power_installed]{power.name}[/]"
        if installed_version != power.version:
            version = f"[muted]{installed_version}[/] -> [info]{power.version}[/]"
        else:
            version = f"[muted]{installed_version}[/]"
    else:
        icon = "[power_available]○[/]"
        name = f"[power_available]{power.name}[/]"
        version = f"[muted]{power.version}[/]"

    return (
        icon,
        name,
        version,
        str(len(power.components.mcp_servers)),
        str(len(power.components.steering_files)),
        f"[text]{power.description or '-'}[/]",
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")


def print_troubleshooting(tips: list[str]) -> None:
    """Print troubleshooting hints verbatim under a heading."""
    if not tips:
        return
    err_console.print("\n[warning]Troubleshooting:[/]")
    for tip in tips:
        err_console.print(f"  - {tip}")
