"""Validate command for Power authors.

This module provides the `powerctl validate` command, which checks a Power
directory under development and suggests what to add next.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from powerctl.cli.display import print_validation_result
from powerctl.core.validation import PowerStructure, inspect_power_structure
from powerctl.utils.formatting import console, print_info


def validate(
    path: Annotated[
        Path,
        typer.Argument(help="Power directory to validate."),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Validate a Power directory.

    Examples:
        powerctl validate ./my-power
        powerctl validate ./my-power --json
    """
    inspection = inspect_power_structure(path)

    if json_output:
        data = {
            "valid": inspection.valid,
            "errors": inspection.validation.errors,
            "warnings": inspection.validation.warnings,
            "structure": asdict(inspection.structure),
            "suggestions": inspection.suggestions,
        }
        console.print_json(json.dumps(data))
    else:
        if inspection.structure.has_package_json or inspection.structure.has_power_md:
            console.print(_structure_table(inspection.structure))
        print_validation_result(inspection.validation, str(path))
        for suggestion in inspection.suggestions:
            print_info(f"Suggestion: {suggestion}")

    if not inspection.valid:
        raise typer.Exit(code=1)


def _structure_table(structure: PowerStructure) -> Table:
    """Build a table of which layout parts are present."""
    table = Table(
        title="Power Structure",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Part")
    table.add_column("Present", justify="center")
    table.add_column("Count", justify="right", style="info")

    rows = [
        ("package.json", structure.has_package_json, ""),
        ("POWER.md", structure.has_power_md, ""),
        ("mcp.json", structure.has_mcp_config, str(structure.mcp_server_count)),
        ("steering/", structure.has_steering_files, str(structure.steering_count)),
        ("examples/", structure.has_examples, str(structure.example_count)),
        ("servers/", structure.has_servers, str(structure.server_file_count)),
    ]
    for part, present, count in rows:
        mark = "[success]yes[/success]" if present else "[muted]no[/muted]"
        table.add_row(part, mark, count if present else "")
    return table
