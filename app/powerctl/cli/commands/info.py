"""Info command for a single Power.

This module provides the `powerctl info` command, which combines the
template descriptor with the installed record, if any.
"""

import json
from typing import Annotated, Any

import typer
from rich.table import Table

from powerctl.cli.types import create_manager
from powerctl.core.metadata import format_power_requirements, get_power_component_info
from powerctl.core.state import InstalledManifestError
from powerctl.models.installed import PowerMetadata
from powerctl.models.power import PowerPackage
from powerctl.utils.formatting import console, print_error


def info(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="Power name."),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show details about a Power.

    Examples:
        powerctl info example-power
        powerctl info example-power --json
    """
    manager = create_manager(ctx)

    try:
        metadata = manager.get_metadata(name)
    except InstalledManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    template = manager.find_template(name)
    package = template or (metadata.package if metadata else None)

    if package is None and metadata is None:
        print_error(f"Power '{name}' not found")
        raise typer.Exit(code=1)

    if json_output:
        console.print_json(json.dumps(_to_json(name, package, metadata)))
        return

    _print_details(name, package, metadata)


def _to_json(
    name: str,
    package: PowerPackage | None,
    metadata: PowerMetadata | None,
) -> dict[str, Any]:
    return {
        "name": name,
        "package": package.model_dump(mode="json", by_alias=True) if package else None,
        "installed": metadata.record.model_dump(mode="json", by_alias=True) if metadata else None,
    }


def _print_details(
    name: str,
    package: PowerPackage | None,
    metadata: PowerMetadata | None,
) -> None:
    """Print Power details as a two-column table."""
    table = Table(show_header=False, border_style="border", title=f"Power: {name}")
    table.add_column("Field", style="bold_header")
    table.add_column("Value")

    if package is not None:
        table.add_row("Display name", package.display_name or package.name)
        table.add_row("Description", package.description or "-")
        table.add_row("Version", package.version)
        table.add_row("Author", package.author or "-")
        if package.keywords:
            table.add_row("Keywords", ", ".join(package.keywords))
        if package.repository:
            table.add_row("Repository", package.repository)

        counts = get_power_component_info(package)
        table.add_row(
            "Components",
            f"{counts['mcp_server_count']} MCP server(s), "
            f"{counts['steering_file_count']} steering file(s), "
            f"{counts['example_count']} example(s)",
        )
        for server in package.components.mcp_servers:
            table.add_row("MCP server", f"{server.name} [muted]({server.description})[/muted]")
        for doc in package.components.steering_files:
            table.add_row("Steering file", doc.name)
        for line in format_power_requirements(package.requirements):
            table.add_row("Requires", line)

    if metadata is not None:
        record = metadata.record
        table.add_row("Installed", f"[power_installed]v{record.version}[/power_installed]")
        table.add_row("Installed at", record.installed_at.strftime("%Y-%m-%d %H:%M:%S"))
        table.add_row("Owns servers", ", ".join(record.components.mcp_servers) or "-")
        table.add_row("Owns steering", ", ".join(record.components.steering_files) or "-")
    else:
        table.add_row("Installed", "[muted]no[/muted]")

    console.print(table)
