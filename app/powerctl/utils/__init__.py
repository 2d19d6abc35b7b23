"""Utility modules for powerctl.

This module exports commonly used utility functions.
"""

from powerctl.utils.formatting import (
    console,
    create_power_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_troubleshooting,
    print_warning,
)

__all__ = [
    "console",
    "create_power_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_troubleshooting",
    "print_warning",
]
