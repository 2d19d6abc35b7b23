"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from powerctl import __version__
from powerctl.cli.commands import (
    cache,
    config,
    info,
    install,
    listing,
    scaffold,
    uninstall,
    validate,
)
from powerctl.cli.types import CliOptions
from powerctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="powerctl",
    help="Install and manage Power extensions in a project.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"powerctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    cwd: Annotated[
        Path | None,
        typer.Option(
            "--cwd",
            "-C",
            help="Project root to operate on (default: current directory).",
            file_okay=False,
        ),
    ] = None,
) -> None:
    """powerctl - Install and manage Power extensions.

    Powers bundle MCP server entries and steering documents. powerctl
    merges them into a project without touching entries it did not add,
    and removes exactly what it added on uninstall.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["options"] = CliOptions(
        cwd=(cwd or Path.cwd()).resolve(),
        verbose=verbose,
        quiet=quiet,
    )


# Register commands
app.command("list")(listing.list_powers)
app.command("install")(install.install)
app.command("update")(install.update)
app.command("uninstall")(uninstall.uninstall)
app.command("info")(info.info)
app.command("validate")(validate.validate)
app.command("scaffold")(scaffold.scaffold)
app.add_typer(cache.app, name="cache")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
