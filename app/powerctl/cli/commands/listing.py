"""List command for available and installed Powers.

This module provides the `powerctl list` command.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from powerctl.cli.types import create_manager
from powerctl.core.state import InstalledManifestError
from powerctl.models.installed import InstalledPowerRecord
from powerctl.models.power import PowerPackage
from powerctl.utils.formatting import (
    console,
    create_power_table,
    format_power_row,
    print_error,
    print_info,
    print_warning,
)


def list_powers(
    ctx: typer.Context,
    installed: Annotated[
        bool,
        typer.Option(
            "--installed",
            "-i",
            help="Show installed Powers instead of available ones.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
    refresh: Annotated[
        bool,
        typer.Option(
            "--refresh",
            help="Ignore the cached registry listing.",
        ),
    ] = False,
) -> None:
    """List Powers available for installation.

    Examples:
        powerctl list               # Available Powers
        powerctl list --installed   # Powers installed in this project
        powerctl list --json        # JSON output for scripting
    """
    manager = create_manager(ctx)

    try:
        records = manager.list_installed()
    except InstalledManifestError as e:
        if installed:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        print_warning(f"Ignoring unreadable installed manifest: {e}")
        records = []

    if installed:
        _show_installed(records, json_output)
        orphans = manager.find_orphaned_installs()
        if orphans and not json_output:
            print_warning(f"Installed folders without a manifest record: {', '.join(orphans)}")
        return

    powers = manager.list_available(refresh=refresh)
    installed_versions = {record.name: record.version for record in records}

    if json_output:
        data = [
            {
                **power.model_dump(mode="json", by_alias=True),
                "installedVersion": installed_versions.get(power.name),
            }
            for power in powers
        ]
        console.print_json(json.dumps(data))
        return

    if not powers:
        print_info(f"No Powers found in {manager.templates_dir}")
        return

    _print_available(powers, installed_versions)


def _print_available(powers: list[PowerPackage], installed_versions: dict[str, str]) -> None:
    """Print available Powers as a Rich table."""
    table = create_power_table()
    for power in powers:
        table.add_row(*format_power_row(power, installed_versions.get(power.name)))
    console.print(table)
    console.print(
        f"\n[dim]{len(powers)} Power(s) available, "
        f"{sum(1 for p in powers if p.name in installed_versions)} installed[/dim]"
    )


def _show_installed(records: list[InstalledPowerRecord], json_output: bool) -> None:
    """Print installed Power records as a table or JSON."""
    if json_output:
        data = [record.model_dump(mode="json", by_alias=True) for record in records]
        console.print_json(json.dumps(data))
        return

    if not records:
        print_info("No Powers installed.")
        return

    table = Table(
        title="Installed Powers",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Power", no_wrap=True, style="power_installed")
    table.add_column("Version", style="muted")
    table.add_column("Installed", style="muted")
    table.add_column("MCP Servers")
    table.add_column("Steering Files")

    for record in records:
        table.add_row(
            record.name,
            record.version,
            record.installed_at.strftime("%Y-%m-%d %H:%M"),
            ", ".join(record.components.mcp_servers) or "-",
            ", ".join(record.components.steering_files) or "-",
        )

    console.print(table)
