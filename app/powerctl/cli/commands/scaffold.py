"""Scaffold command for starting Power development.

This module provides the `powerctl scaffold` command, which copies a Power
template into the project root so it can be edited.
"""

from typing import Annotated

import typer

from powerctl.cli.types import create_manager, get_options
from powerctl.utils.formatting import (
    console,
    print_error,
    print_success,
    print_troubleshooting,
    print_warning,
)


def scaffold(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="Power template to copy."),
    ],
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite a directory that already holds Power files.",
        ),
    ] = False,
) -> None:
    """Copy a Power template into ./<name> for development.

    Examples:
        powerctl scaffold example-power
        powerctl scaffold example-power --force
    """
    options = get_options(ctx)
    manager = create_manager(ctx)

    result = manager.scaffold(name, force=force)

    for warning in result.warnings:
        print_warning(warning)
    if result.failed:
        for error in result.errors:
            print_error(error)
        print_troubleshooting(result.troubleshooting)
        raise typer.Exit(code=1)

    if not options.quiet:
        print_success(result.added[0])
        for entry in result.added[1:]:
            console.print(f"[muted]{entry}[/muted]")
