"""Result accumulators passed through the Power lifecycle.

Validators and installer steps never raise for expected problems; they
append messages to these records, which the CLI renders.
"""

from dataclasses import dataclass, field


@dataclass(slots=True)
class ValidationResult:
    """Outcome of validating a Power package.

    Attributes:
        valid: False as soon as any error is recorded.
        errors: Problems that block installation.
        warnings: Problems that never block installation.
    """

    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Record a blocking error."""
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Record a non-blocking warning."""
        self.warnings.append(message)

    def merge(self, other: "ValidationResult") -> None:
        """Fold another result into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        if not other.valid:
            self.valid = False


@dataclass(slots=True)
class InstallResult:
    """Outcome of an install, update or uninstall.

    Entries carry a prefix naming the component kind, e.g.
    "MCP server: scanner" or "Steering file: guide.md".

    Attributes:
        added: Components written to the project.
        skipped: Components left alone because they already existed.
        removed: Components deleted by an uninstall.
        errors: Failures, terminal or partial.
        warnings: Non-blocking notes.
        troubleshooting: Hints attached to the errors, rendered verbatim.
    """

    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    troubleshooting: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Check if the operation finished without errors."""
        return not self.errors

    @property
    def failed(self) -> bool:
        """Check if any error was recorded."""
        return bool(self.errors)

    def to_dict(self) -> dict[str, list[str]]:
        """Serialize to a dictionary for JSON output."""
        return {
            "added": list(self.added),
            "skipped": list(self.skipped),
            "removed": list(self.removed),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "troubleshooting": list(self.troubleshooting),
        }
