"""CLI commands for powerctl.

This package contains all subcommand implementations.
"""

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

__all__ = [
    "cache",
    "config",
    "info",
    "install",
    "listing",
    "scaffold",
    "uninstall",
    "validate",
]
