"""Structural validation of Power packages.

Validators inspect a candidate Power directory and return a
ValidationResult. They accumulate every problem instead of stopping at the
first one, and they never raise: an unreadable or malformed file is
reported as an error in the result.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from powerctl.core.filesystem import FileSystem, LocalFileSystem, read_json
from powerctl.core.paths import (
    DOC_EXTENSION,
    POWER_EXAMPLES_DIR,
    POWER_MANIFEST_FILE,
    POWER_MCP_CONFIG_FILE,
    POWER_PACKAGE_FILE,
    POWER_SERVERS_DIR,
    POWER_STEERING_DIR,
    SERVER_EXTENSIONS,
)
from powerctl.models.result import ValidationResult

if TYPE_CHECKING:
    from powerctl.models.power import PowerPackage

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def validate_power_package(power_path: Path, fs: FileSystem | None = None) -> ValidationResult:
    """Validate the structure and content of a Power directory.

    Checks, in order:
    1. package.json and POWER.md exist.
    2. package.json is a JSON object with non-empty name and version.
    3. mcp.json, if present, declares well-formed servers.
    4. The Power contributes at least MCP servers or steering files
       (a warning only).

    Args:
        power_path: Candidate Power directory.
        fs: Filesystem to read from. Defaults to the local disk.

    Returns:
        ValidationResult with accumulated errors and warnings.
    """
    fs = fs or LocalFileSystem()
    result = ValidationResult()

    package_json_path = power_path / POWER_PACKAGE_FILE
    mcp_config_path = power_path / POWER_MCP_CONFIG_FILE

    has_package_json = fs.exists(package_json_path)
    if not has_package_json:
        result.add_error(f"Missing {POWER_PACKAGE_FILE} file")
    if not fs.exists(power_path / POWER_MANIFEST_FILE):
        result.add_error(f"Missing {POWER_MANIFEST_FILE} file")

    if has_package_json:
        result.merge(validate_package_json(package_json_path, fs))

    has_mcp_config = fs.exists(mcp_config_path)
    if has_mcp_config:
        result.merge(validate_mcp_configuration(mcp_config_path, fs))

    if not has_mcp_config and not fs.exists(power_path / POWER_STEERING_DIR):
        result.add_warning(
            "Power contributes nothing installable (no MCP servers or steering files)"
        )

    logger.debug(
        "Validated %s: valid=%s, %d error(s), %d warning(s)",
        power_path,
        result.valid,
        len(result.errors),
        len(result.warnings),
    )
    return result


def validate_package_json(
    package_json_path: Path, fs: FileSystem | None = None
) -> ValidationResult:
    """Validate a Power's package.json descriptor.

    Missing name or version are errors; missing description or author are
    warnings.
    """
    fs = fs or LocalFileSystem()
    result = ValidationResult()

    try:
        pkg = read_json(fs, package_json_path)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        result.add_error(f"Invalid {POWER_PACKAGE_FILE} format: {e}")
        return result

    if not isinstance(pkg, dict):
        result.add_error(f"Invalid {POWER_PACKAGE_FILE} format: expected a JSON object")
        return result

    for key in ("name", "version"):
        value = pkg.get(key)
        if not isinstance(value, str) or not value.strip():
            result.add_error(f"{POWER_PACKAGE_FILE} missing or invalid '{key}' field")

    for key in ("description", "author"):
        if not pkg.get(key):
            result.add_warning(f"{POWER_PACKAGE_FILE} missing '{key}' field")

    return result


def validate_mcp_configuration(
    mcp_config_path: Path, fs: FileSystem | None = None
) -> ValidationResult:
    """Validate a Power's mcp.json declaration.

    The file must hold an ``mcpServers`` object; each server is checked
    independently and all problems are reported.
    """
    fs = fs or LocalFileSystem()
    result = ValidationResult()

    try:
        config = read_json(fs, mcp_config_path)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        result.add_error(f"Invalid MCP configuration format: {e}")
        return result

    servers = config.get("mcpServers") if isinstance(config, dict) else None
    if not isinstance(servers, dict):
        result.add_error("MCP configuration missing 'mcpServers' object")
        return result

    for server_name, server_config in servers.items():
        result.merge(validate_mcp_server_config(server_name, server_config))

    return result


def validate_mcp_server_config(server_name: str, server_config: Any) -> ValidationResult:
    """Validate a single MCP server descriptor."""
    result = ValidationResult()
    prefix = f"MCP server '{server_name}'"

    if not isinstance(server_config, dict):
        result.add_error(f"{prefix} must be an object")
        return result

    command = server_config.get("command")
    if not isinstance(command, str) or not command.strip():
        result.add_error(f"{prefix} missing or invalid 'command' field")
    if not isinstance(server_config.get("args"), list):
        result.add_error(f"{prefix} 'args' must be an array")
    env = server_config.get("env")
    if env is not None and not isinstance(env, dict):
        result.add_error(f"{prefix} 'env' must be an object")
    if not server_config.get("description"):
        result.add_warning(f"{prefix} missing 'description' field")

    return result


def normalize_version(version: str) -> tuple[int, int, int] | None:
    """Normalize a version string to its (major, minor, patch) prefix.

    "v3.11", "3.11.4rc1" and ">= 3.11" all normalize; missing components
    count as zero.

    Returns:
        Tuple of integers, or None if no version number is found.
    """
    match = _VERSION_PATTERN.search(version)
    if match is None:
        return None
    major, minor, patch = match.groups()
    return (int(major), int(minor or 0), int(patch or 0))


def validate_power_compatibility(
    package: PowerPackage,
    current_version: str | None = None,
) -> ValidationResult:
    """Check a Power's declared requirements against the host.

    Only ">=X.Y.Z" runtime requirements are enforced; versions compare
    component-wise on their normalized vMAJOR.MINOR.PATCH prefix. Missing
    environment variables are reported as warnings.

    Args:
        package: Power descriptor with optional requirements.
        current_version: Host runtime version. Defaults to the running
            Python interpreter.
    """
    result = ValidationResult()
    requirements = package.requirements
    if requirements is None:
        return result

    required = requirements.runtime_version
    if required and ">=" in required:
        host_version = current_version or platform.python_version()
        minimum = normalize_version(required.replace(">=", "").strip())
        current = normalize_version(host_version)
        if minimum is None or current is None:
            result.add_warning(
                f"Cannot compare runtime versions: requires {required}, current {host_version}"
            )
        elif current < minimum:
            result.add_error(f"Requires Python {required}, current: v{host_version}")

    for variable in requirements.environment:
        if variable not in os.environ:
            result.add_warning(f"Environment variable '{variable}' is not set")

    return result


def validate_power_comprehensive(
    power_path: Path,
    package: PowerPackage | None = None,
    fs: FileSystem | None = None,
) -> ValidationResult:
    """Run structural validation, plus compatibility when a descriptor is given."""
    result = validate_power_package(power_path, fs)
    if package is not None:
        result.merge(validate_power_compatibility(package))
    return result


# =============================================================================
# Development inspection
# =============================================================================


@dataclass(slots=True)
class PowerStructure:
    """What a Power directory contains.

    Attributes:
        has_package_json: package.json exists.
        has_power_md: POWER.md exists.
        has_mcp_config: mcp.json exists.
        has_steering_files: steering/ exists.
        has_examples: examples/ exists.
        has_servers: servers/ exists.
        steering_count: Number of steering documents.
        example_count: Number of example documents.
        server_file_count: Number of server implementation files.
        mcp_server_count: Number of servers declared in mcp.json.
    """

    has_package_json: bool = False
    has_power_md: bool = False
    has_mcp_config: bool = False
    has_steering_files: bool = False
    has_examples: bool = False
    has_servers: bool = False
    steering_count: int = 0
    example_count: int = 0
    server_file_count: int = 0
    mcp_server_count: int = 0


@dataclass(slots=True)
class PowerInspection:
    """Validation plus structure analysis for Power authors."""

    validation: ValidationResult
    structure: PowerStructure
    suggestions: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.validation.valid


def _count_files(fs: FileSystem, directory: Path, extensions: tuple[str, ...]) -> int:
    try:
        return sum(1 for name in fs.read_dir(directory) if name.endswith(extensions))
    except OSError:
        return 0


def analyze_power_structure(power_path: Path, fs: FileSystem | None = None) -> PowerStructure:
    """Describe which parts of the Power layout a directory provides."""
    fs = fs or LocalFileSystem()
    structure = PowerStructure(
        has_package_json=fs.exists(power_path / POWER_PACKAGE_FILE),
        has_power_md=fs.exists(power_path / POWER_MANIFEST_FILE),
        has_mcp_config=fs.exists(power_path / POWER_MCP_CONFIG_FILE),
    )

    steering_dir = power_path / POWER_STEERING_DIR
    if fs.is_dir(steering_dir):
        structure.has_steering_files = True
        structure.steering_count = _count_files(fs, steering_dir, (DOC_EXTENSION,))

    examples_dir = power_path / POWER_EXAMPLES_DIR
    if fs.is_dir(examples_dir):
        structure.has_examples = True
        structure.example_count = _count_files(fs, examples_dir, (DOC_EXTENSION,))

    servers_dir = power_path / POWER_SERVERS_DIR
    if fs.is_dir(servers_dir):
        structure.has_servers = True
        structure.server_file_count = _count_files(fs, servers_dir, SERVER_EXTENSIONS)

    if structure.has_mcp_config:
        try:
            config = read_json(fs, power_path / POWER_MCP_CONFIG_FILE)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError):
            config = None
        if isinstance(config, dict) and isinstance(config.get("mcpServers"), dict):
            structure.mcp_server_count = len(config["mcpServers"])

    return structure


def _suggestions_for(structure: PowerStructure) -> list[str]:
    suggestions: list[str] = []
    if not structure.has_package_json:
        suggestions.append("Create a package.json file with Power metadata")
    if not structure.has_power_md:
        suggestions.append("Create a POWER.md file with documentation")
    if not (structure.has_mcp_config or structure.has_steering_files or structure.has_examples):
        suggestions.append("Add at least one component: MCP servers, steering files, or examples")
    return suggestions


def inspect_power_structure(power_path: Path, fs: FileSystem | None = None) -> PowerInspection:
    """Validate a Power under development and suggest next steps.

    Args:
        power_path: Directory of the Power being authored.
        fs: Filesystem to read from. Defaults to the local disk.

    Returns:
        PowerInspection with validation, structure and suggestions.
    """
    fs = fs or LocalFileSystem()
    if not fs.exists(power_path):
        validation = ValidationResult()
        validation.add_error("Power path does not exist")
        return PowerInspection(validation=validation, structure=PowerStructure())

    structure = analyze_power_structure(power_path, fs)
    return PowerInspection(
        validation=validate_power_comprehensive(power_path, fs=fs),
        structure=structure,
        suggestions=_suggestions_for(structure),
    )
