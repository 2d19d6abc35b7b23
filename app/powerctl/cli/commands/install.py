"""Install and update commands.

This module provides the `powerctl install` and `powerctl update`
commands. Both render an InstallResult and exit non-zero on failure.
"""

from pathlib import Path
from typing import Annotated

import typer

from powerctl.cli.display import print_batch_summary, print_install_result
from powerctl.cli.types import create_manager, get_options
from powerctl.utils.formatting import print_error, print_success


def install(
    ctx: typer.Context,
    names: Annotated[
        list[str] | None,
        typer.Argument(help="Power name(s) to install, or the install name with --path."),
    ] = None,
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Install the Power in this directory instead of a template.",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ] = None,
) -> None:
    """Install one or more Powers into the project.

    Powers are installed one after another. MCP servers and steering
    files that already exist in the project are skipped, never
    overwritten.

    Examples:
        powerctl install example-power
        powerctl install first-power second-power
        powerctl install --path ./my-power
        powerctl install --path ./build my-power
    """
    quiet = get_options(ctx).quiet
    names = names or []
    if path is None and not names:
        print_error("Give at least one Power name, or --path DIR.")
        raise typer.Exit(code=1)
    if path is not None and len(names) > 1:
        print_error("--path installs a single Power; give at most one name.")
        raise typer.Exit(code=1)

    manager = create_manager(ctx)

    if path is not None:
        result = manager.install_from_path(path, names[0] if names else None)
        results = {names[0] if names else path.resolve().name: result}
    else:
        results = manager.install_many(names)
    for name, result in results.items():
        print_install_result(result, f"Install {name}", quiet=quiet)
        if result.success and not quiet:
            print_success(f"Power '{name}' installed.")

    if len(results) > 1:
        print_batch_summary(results, "installed")

    if any(result.failed for result in results.values()):
        raise typer.Exit(code=1)


def update(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Argument(help="Installed Power to update."),
    ],
) -> None:
    """Update an installed Power from its current template.

    Server entries already in the shared config keep any customization;
    newly declared servers and steering files are added.

    Examples:
        powerctl update example-power
    """
    quiet = get_options(ctx).quiet
    manager = create_manager(ctx)

    result = manager.update(name)
    print_install_result(result, f"Update {name}", quiet=quiet)

    if result.failed:
        raise typer.Exit(code=1)
    if not quiet:
        print_success(f"Power '{name}' updated.")
