"""Cache maintenance commands.

Provides commands to inspect, clean up and clear the project's Power
metadata cache.
"""

import typer
from rich.table import Table

from powerctl.cli.types import create_cache, get_options, require_settings
from powerctl.core.cache import CacheMaintenanceResult, format_cache_size
from powerctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Inspect and maintain the Power metadata cache.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show cache location, size and settings."""
    options = get_options(ctx)
    settings = require_settings(options.cwd)
    cache = create_cache(options.cwd, settings)

    try:
        entries, size = cache.disk_usage()
    except OSError as e:
        print_error(f"Failed to read cache directory: {e}")
        raise typer.Exit(code=1) from e

    table = Table(show_header=False, border_style="border", title="Power Cache")
    table.add_column("Field", style="bold_header")
    table.add_column("Value")
    table.add_row("Directory", str(cache.cache_dir))
    table.add_row("Enabled", "yes" if settings.cache_enabled else "no")
    table.add_row("Entries", str(entries))
    table.add_row("Size", format_cache_size(size))
    table.add_row("TTL", f"{settings.cache_ttl_seconds}s")
    table.add_row("Memory capacity", str(settings.cache_max_entries))
    console.print(table)


@app.command()
def cleanup(ctx: typer.Context) -> None:
    """Remove expired cache entries."""
    options = get_options(ctx)
    cache = create_cache(options.cwd, require_settings(options.cwd))
    _report(cache.cleanup(), "expired")


@app.command()
def clear(ctx: typer.Context) -> None:
    """Remove every cache entry."""
    options = get_options(ctx)
    cache = create_cache(options.cwd, require_settings(options.cwd))
    _report(cache.clear(), "cached")


def _report(result: CacheMaintenanceResult, kind: str) -> None:
    """Print a maintenance result and exit non-zero on errors."""
    for error in result.errors:
        print_error(error)
    if result.removed:
        noun = "entry" if result.removed == 1 else "entries"
        print_success(f"Removed {result.removed} {kind} {noun}.")
    elif not result.errors:
        print_info(f"No {kind} entries to remove.")
    if result.errors:
        raise typer.Exit(code=1)
