"""Shared Rich display functions for install and validation results.

Provides reusable table builders and summary printers used by the
install, uninstall, update, scaffold and validate commands.
"""

from rich.table import Table

from powerctl.models.result import InstallResult, ValidationResult
from powerctl.utils.formatting import (
    console,
    print_error,
    print_success,
    print_troubleshooting,
    print_warning,
)


def create_result_table(result: InstallResult, title: str) -> Table:
    """Create a Rich table listing the components an operation touched.

    One row per added, skipped or removed component, styled by outcome.

    Args:
        result: Result of an install, update or uninstall.
        title: Table title.

    Returns:
        Rich Table configured for result display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9, justify="center")
    table.add_column("Component")

    for entry in result.added:
        table.add_row("[added]+added[/added]", entry)
    for entry in result.skipped:
        table.add_row("[skipped]=skipped[/skipped]", f"[muted]{entry}[/muted]")
    for entry in result.removed:
        table.add_row("[removed]-removed[/removed]", entry)

    return table


def print_install_result(result: InstallResult, title: str, quiet: bool = False) -> None:
    """Print an operation result: components, warnings, then errors.

    Args:
        result: Result to display.
        title: Table title.
        quiet: Suppress the component table and warnings.
    """
    if not quiet and (result.added or result.skipped or result.removed):
        console.print(create_result_table(result, title))

    if not quiet:
        for warning in result.warnings:
            print_warning(warning)

    for error in result.errors:
        print_error(error)
    print_troubleshooting(result.troubleshooting)


def print_validation_result(result: ValidationResult, subject: str) -> None:
    """Print a validation result.

    Args:
        result: Validation outcome.
        subject: What was validated, for the summary line.
    """
    for error in result.errors:
        print_error(error)
    for warning in result.warnings:
        print_warning(warning)

    if result.valid:
        print_success(f"{subject} is valid.")
    else:
        console.print(f"\n[error]{subject} is invalid[/error] ({len(result.errors)} error(s))")


def print_batch_summary(results: dict[str, InstallResult], verb: str) -> None:
    """Print a summary line for a multi-Power operation.

    Args:
        results: Result per Power name.
        verb: Past tense of the operation (e.g. "installed").
    """
    success_count = sum(1 for r in results.values() if r.success)
    fail_count = sum(1 for r in results.values() if r.failed)

    if fail_count == 0:
        print_success(f"All {success_count} Power(s) {verb} successfully.")
    else:
        console.print(
            f"\n[success]{success_count} succeeded[/success], [error]{fail_count} failed[/error]"
        )
