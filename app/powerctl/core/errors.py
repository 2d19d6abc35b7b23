"""Typed errors for the Power lifecycle.

Every PowerError is tagged with the kind of failure, the lifecycle phase
it occurred in, whether retrying can help, and a short list of
troubleshooting hints the CLI renders verbatim.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any


class PowerErrorKind(str, Enum):
    """Category of a Power error.

    Attributes:
        NETWORK: Source directory or registry entry unavailable.
        VALIDATION: Structural or content errors in a Power package.
        FILESYSTEM: I/O failure while copying or writing.
        CONFIG_MERGE: Existing shared config cannot be merged safely.
    """

    NETWORK = "network"
    VALIDATION = "validation"
    FILESYSTEM = "filesystem"
    CONFIG_MERGE = "config_merge"


class PowerPhase(str, Enum):
    """Lifecycle phase in which an error happened."""

    DOWNLOAD = "download"
    VALIDATE = "validate"
    INSTALL = "install"


class PowerError(Exception):
    """Base exception for Power lifecycle errors.

    Subclasses fix kind, code, phase, recoverability and troubleshooting
    hints as class attributes.

    Attributes:
        power_name: Name of the Power the error concerns.
        context: Extra structured details (operation, path, cause, ...).
    """

    kind: PowerErrorKind
    code: str
    phase: PowerPhase
    recoverable: bool
    troubleshooting: tuple[str, ...] = ()

    def __init__(
        self,
        message: str,
        power_name: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.power_name = power_name
        self.context = context or {}

    def user_message(self) -> str:
        """Return the message followed by troubleshooting hints."""
        if not self.troubleshooting:
            return self.message
        tips = "\n".join(f"  - {tip}" for tip in self.troubleshooting)
        return f"{self.message}\n\nTroubleshooting:\n{tips}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON output.

        Returns:
            Dictionary with code, kind, phase, recoverability and hints.
        """
        return {
            "code": self.code,
            "kind": self.kind.value,
            "message": self.message,
            "power_name": self.power_name,
            "phase": self.phase.value,
            "recoverable": self.recoverable,
            "troubleshooting": list(self.troubleshooting),
            "context": self.context,
            "timestamp": datetime.now(UTC).isoformat(),
        }


def _with_cause(message: str, cause: str | None) -> str:
    return f"{message}: {cause}" if cause else message


class PowerNetworkError(PowerError):
    """Raised when a Power source cannot be reached or found."""

    kind = PowerErrorKind.NETWORK
    code = "POWER_NETWORK_ERROR"
    phase = PowerPhase.DOWNLOAD
    recoverable = True
    troubleshooting = (
        "Run 'powerctl list' to see the available Powers",
        "Check that the Power templates directory exists",
        "Try again in a few minutes",
    )

    def __init__(self, power_name: str, operation: str, cause: str | None = None) -> None:
        message = _with_cause(
            f"Source unavailable during {operation} for Power '{power_name}'", cause
        )
        super().__init__(message, power_name, {"operation": operation, "cause": cause})


class PowerNotFoundError(PowerNetworkError):
    """Raised when no template exists for the requested Power.

    Retrying cannot help until the template is added.
    """

    code = "POWER_NOT_FOUND"
    recoverable = False

    def __init__(self, power_name: str, templates_dir: str) -> None:
        PowerError.__init__(
            self,
            f"Power '{power_name}' not found in templates directory {templates_dir}",
            power_name,
            {"operation": "lookup", "templates_dir": templates_dir},
        )


class PowerValidationError(PowerError):
    """Raised when a Power package fails validation."""

    kind = PowerErrorKind.VALIDATION
    code = "POWER_VALIDATION_ERROR"
    phase = PowerPhase.VALIDATE
    recoverable = False
    troubleshooting = (
        "Verify the Power package structure is correct",
        "Check that package.json and POWER.md files exist",
    )

    def __init__(self, power_name: str, validation_errors: list[str]) -> None:
        message = f"Power '{power_name}' failed validation: {', '.join(validation_errors)}"
        super().__init__(message, power_name, {"validation_errors": list(validation_errors)})
        self.validation_errors = list(validation_errors)


class PowerFileSystemError(PowerError):
    """Raised when copying or writing Power files fails."""

    kind = PowerErrorKind.FILESYSTEM
    code = "POWER_FILESYSTEM_ERROR"
    phase = PowerPhase.INSTALL
    recoverable = True
    troubleshooting = (
        "Check that you have sufficient disk space",
        "Verify you have read/write permissions",
    )

    def __init__(
        self,
        power_name: str,
        operation: str,
        path: str,
        cause: str | None = None,
    ) -> None:
        message = _with_cause(
            f"File system error during {operation} for Power '{power_name}' at {path}", cause
        )
        super().__init__(
            message, power_name, {"operation": operation, "path": path, "cause": cause}
        )


class PowerConfigMergeError(PowerError):
    """Raised when the shared MCP config cannot be merged safely."""

    kind = PowerErrorKind.CONFIG_MERGE
    code = "POWER_MCP_CONFIG_ERROR"
    phase = PowerPhase.INSTALL
    recoverable = True
    troubleshooting = (
        "Check that the MCP configuration file is valid JSON",
        "Verify you have write permissions to the .kiro/settings directory",
    )

    def __init__(self, power_name: str, operation: str, cause: str | None = None) -> None:
        message = _with_cause(
            f"MCP configuration error during {operation} for Power '{power_name}'", cause
        )
        super().__init__(message, power_name, {"operation": operation, "cause": cause})


def error_from_exception(
    error: BaseException,
    power_name: str,
    phase: PowerPhase,
    operation: str,
) -> PowerError:
    """Wrap a generic exception into the PowerError matching its phase.

    PowerErrors pass through unchanged.

    Args:
        error: The exception to convert.
        power_name: Power the operation concerned.
        phase: Lifecycle phase the exception was raised in.
        operation: Short description of the failed operation.

    Returns:
        A PowerError subclass instance.
    """
    if isinstance(error, PowerError):
        return error
    message = str(error) or type(error).__name__
    if phase == PowerPhase.DOWNLOAD:
        return PowerNetworkError(power_name, operation, message)
    if phase == PowerPhase.VALIDATE:
        return PowerValidationError(power_name, [message])
    path = getattr(error, "filename", None) or "unknown"
    return PowerFileSystemError(power_name, operation, str(path), message)
