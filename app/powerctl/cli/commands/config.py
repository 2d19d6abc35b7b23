"""Settings commands.

Provides commands to show and initialize the project settings file
(.kiro/powerctl.toml).
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from powerctl.cli.types import get_options, require_settings
from powerctl.core.paths import get_settings_path
from powerctl.core.settings import PowerSettings, SettingsError, save_settings
from powerctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and initialize project settings.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show the effective settings."""
    options = get_options(ctx)
    path = get_settings_path(options.cwd)
    settings = require_settings(options.cwd)

    if json_output:
        console.print_json(json.dumps(settings.model_dump()))
        return

    source = str(path) if path.exists() else "defaults (no settings file)"
    table = Table(show_header=False, border_style="border", title="powerctl settings")
    table.add_column("Setting", style="bold_header")
    table.add_column("Value")
    table.add_row("source", source)
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with the default values."""
    path = get_settings_path(get_options(ctx).cwd)

    if path.exists() and not force:
        print_info(f"Settings already exist: {path}")
        print_info("Use --force to overwrite them with the defaults.")
        raise typer.Exit(code=1)

    try:
        saved = save_settings(PowerSettings(), path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Settings written to {saved}")
