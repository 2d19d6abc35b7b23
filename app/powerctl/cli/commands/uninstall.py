"""Uninstall command for removing installed Powers.

This module provides the `powerctl uninstall` command.
"""

from typing import Annotated

import typer

from powerctl.cli.display import print_batch_summary, print_install_result
from powerctl.cli.types import create_manager, get_options
from powerctl.core.state import InstalledManifestError
from powerctl.utils.formatting import console, print_error, print_info, print_success


def uninstall(
    ctx: typer.Context,
    names: Annotated[
        list[str],
        typer.Argument(help="Power name(s) to uninstall."),
    ],
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Uninstall one or more Powers.

    Removes only the MCP servers and steering files each Power added,
    then its installed folder and manifest record.

    Examples:
        powerctl uninstall example-power       # With confirmation
        powerctl uninstall example-power -y    # Skip confirmation
    """
    quiet = get_options(ctx).quiet
    manager = create_manager(ctx)

    removable: list[str] = []
    failed = False
    for name in names:
        try:
            check = manager.validate_removal(name)
        except InstalledManifestError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        if not check.valid:
            for error in check.errors:
                print_error(error)
            failed = True
            continue
        removable.append(name)
        if not quiet:
            details = "; ".join(check.warnings) or "no shared components"
            console.print(f"[warning]-[/warning] {name}: [muted]{details}[/muted]")

    if not removable:
        raise typer.Exit(code=1)

    if not yes:
        confirmed = typer.confirm(
            f"\nUninstall {len(removable)} Power(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    results = manager.uninstall_many(removable)
    for name, result in results.items():
        print_install_result(result, f"Uninstall {name}", quiet=quiet)
        if result.success and not quiet:
            print_success(f"Power '{name}' uninstalled.")

    if len(results) > 1:
        print_batch_summary(results, "uninstalled")

    if failed or any(result.failed for result in results.values()):
        raise typer.Exit(code=1)
