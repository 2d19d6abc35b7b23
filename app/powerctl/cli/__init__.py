"""CLI package for powerctl.

This package contains the Typer application and all subcommands.
"""

from powerctl.cli.main import app

__all__ = ["app"]
