"""Unit tests for cli/display.py.

Tests for shared Rich display functions used by the install, update,
uninstall and validate commands.
"""

import io

import powerctl.cli.display as display_mod
import powerctl.utils.formatting as fmt_mod
import pytest
from powerctl.cli.display import (
    create_result_table,
    print_batch_summary,
    print_install_result,
    print_validation_result,
)
from powerctl.core.theme import get_theme
from powerctl.models.result import InstallResult, ValidationResult
from rich.console import Console


@pytest.fixture
def output(monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
    """Route both shared consoles into one buffer."""
    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=120)
    monkeypatch.setattr(display_mod, "console", test_console)
    monkeypatch.setattr(fmt_mod, "console", test_console)
    monkeypatch.setattr(fmt_mod, "err_console", test_console)
    return buf


def _render(table: object) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=120).print(table)
    return buf.getvalue()


class TestCreateResultTable:
    """Tests for create_result_table."""

    def test_one_row_per_component(self) -> None:
        """Added, skipped and removed components each get a row."""
        result = InstallResult(
            added=["MCP server: a"],
            skipped=["MCP server: b"],
            removed=["Steering file: c.md"],
        )

        table = create_result_table(result, "Install demo")

        assert table.row_count == 3
        assert table.title == "Install demo"
        assert [col.header for col in table.columns] == ["Status", "Component"]

    def test_status_labels(self) -> None:
        """Rows are labelled by outcome."""
        result = InstallResult(added=["MCP server: a"], skipped=["MCP server: b"])

        rendered = _render(create_result_table(result, "Install"))

        assert "+added" in rendered
        assert "=skipped" in rendered
        assert "MCP server: a" in rendered


class TestPrintInstallResult:
    """Tests for print_install_result."""

    def test_prints_table_warnings_and_errors(self, output: io.StringIO) -> None:
        """Components, warnings, errors and hints are all printed."""
        result = InstallResult(
            added=["Power folder: demo"],
            warnings=["careful"],
            errors=["boom"],
            troubleshooting=["Try again"],
        )

        print_install_result(result, "Install demo")

        text = output.getvalue()
        assert "Power folder: demo" in text
        assert "Warning: careful" in text
        assert "Error: boom" in text
        assert "Troubleshooting:" in text
        assert "  - Try again" in text

    def test_quiet_prints_only_errors(self, output: io.StringIO) -> None:
        """Quiet mode hides the table and warnings."""
        result = InstallResult(added=["Power folder: demo"], warnings=["careful"], errors=["boom"])

        print_install_result(result, "Install demo", quiet=True)

        text = output.getvalue()
        assert "Power folder" not in text
        assert "careful" not in text
        assert "Error: boom" in text


class TestPrintValidationResult:
    """Tests for print_validation_result."""

    def test_valid(self, output: io.StringIO) -> None:
        """A valid result prints a success line."""
        print_validation_result(ValidationResult(), "my-power")

        assert "my-power is valid." in output.getvalue()

    def test_invalid(self, output: io.StringIO) -> None:
        """An invalid result lists errors and the error count."""
        result = ValidationResult()
        result.add_error("Missing POWER.md file")

        print_validation_result(result, "my-power")

        text = output.getvalue()
        assert "Error: Missing POWER.md file" in text
        assert "my-power is invalid (1 error(s))" in text


class TestPrintBatchSummary:
    """Tests for print_batch_summary."""

    def test_all_succeeded(self, output: io.StringIO) -> None:
        """All successes print a single success line."""
        print_batch_summary({"a": InstallResult(), "b": InstallResult()}, "installed")

        assert "All 2 Power(s) installed successfully." in output.getvalue()

    def test_mixed(self, output: io.StringIO) -> None:
        """Mixed outcomes print both counts."""
        print_batch_summary({"a": InstallResult(), "b": InstallResult(errors=["x"])}, "installed")

        assert "1 succeeded, 1 failed" in output.getvalue()
