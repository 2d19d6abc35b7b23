"""Metadata extraction for Power templates.

Turns a Power directory into a PowerPackage descriptor and lists the
Powers available from the resolved templates directory. Extraction is
side-effect free; optional components that cannot be listed degrade to
empty lists.
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from powerctl.core.filesystem import FileSystem, LocalFileSystem, read_json
from powerctl.core.paths import (
    DOC_EXTENSION,
    POWER_EXAMPLES_DIR,
    POWER_MCP_CONFIG_FILE,
    POWER_PACKAGE_FILE,
    POWER_STEERING_DIR,
    get_powers_template_dir,
)
from powerctl.models.power import (
    DocDescriptor,
    PowerComponents,
    PowerPackage,
    PowerRegistry,
    PowerRequirements,
    ServerDescriptor,
)

logger = logging.getLogger(__name__)

REGISTRY_VERSION = "1.0.0"


def _read_json_object(path: Path, fs: FileSystem) -> dict[str, Any] | None:
    if not fs.exists(path):
        return None
    try:
        data = read_json(fs, path)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.debug("Could not read %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def read_package_json(power_path: Path, fs: FileSystem | None = None) -> dict[str, Any] | None:
    """Read a Power's package.json.

    Returns:
        The parsed object, or None if absent or malformed.
    """
    return _read_json_object(power_path / POWER_PACKAGE_FILE, fs or LocalFileSystem())


def read_mcp_config(power_path: Path, fs: FileSystem | None = None) -> dict[str, Any] | None:
    """Read a Power's mcp.json.

    Returns:
        The parsed object, or None if absent or malformed.
    """
    return _read_json_object(power_path / POWER_MCP_CONFIG_FILE, fs or LocalFileSystem())


def read_declared_servers(power_path: Path, fs: FileSystem | None = None) -> dict[str, Any]:
    """Return the raw server mapping from a Power's mcp.json.

    The raw dictionaries are what gets merged into the shared config, so
    every key the author wrote is kept.
    """
    config = read_mcp_config(power_path, fs)
    servers = config.get("mcpServers") if config else None
    return dict(servers) if isinstance(servers, dict) else {}


def _list_docs(
    directory: Path,
    fs: FileSystem,
    category: str,
    label: str,
) -> list[DocDescriptor]:
    if not fs.is_dir(directory):
        return []
    try:
        names = fs.read_dir(directory)
    except OSError as e:
        logger.debug("Could not list %s: %s", directory, e)
        return []
    return [
        DocDescriptor(name=name, description=f"{label}: {name}", category=category)
        for name in names
        if name.endswith(DOC_EXTENSION)
    ]


def _parse_requirements(package_json: dict[str, Any]) -> PowerRequirements | None:
    raw = package_json.get("requirements")
    engines = package_json.get("engines")
    engine_python = engines.get("python") if isinstance(engines, dict) else None

    if not isinstance(raw, dict) and not engine_python:
        return None

    data: dict[str, Any] = dict(raw) if isinstance(raw, dict) else {}
    if engine_python and not data.get("runtimeVersion"):
        data["runtimeVersion"] = engine_python
    try:
        return PowerRequirements.model_validate(data)
    except ValidationError as e:
        logger.debug("Ignoring malformed requirements: %s", e)
        return None


def extract_power_package(power_path: Path, fs: FileSystem | None = None) -> PowerPackage | None:
    """Build a PowerPackage descriptor from a Power directory.

    The directory is expected to have passed validation. MCP servers come
    from mcp.json (none if absent); steering files and examples are listed
    from their subdirectories, keeping only markdown documents.

    Args:
        power_path: Power directory to read.
        fs: Filesystem to read from. Defaults to the local disk.

    Returns:
        PowerPackage, or None if package.json is missing or unusable.
    """
    fs = fs or LocalFileSystem()
    package_json = read_package_json(power_path, fs)
    if package_json is None:
        return None

    servers: list[ServerDescriptor] = []
    for server_name, config in read_declared_servers(power_path, fs).items():
        if not isinstance(config, dict):
            continue
        try:
            servers.append(
                ServerDescriptor.model_validate(
                    {
                        **config,
                        "name": server_name,
                        "description": config.get("description") or f"MCP server: {server_name}",
                    }
                )
            )
        except ValidationError as e:
            logger.debug("Skipping malformed server %s: %s", server_name, e)

    components = PowerComponents(
        mcp_servers=servers,
        steering_files=_list_docs(power_path / POWER_STEERING_DIR, fs, "guide", "Steering file"),
        examples=_list_docs(power_path / POWER_EXAMPLES_DIR, fs, "example", "Example"),
    )

    name = package_json.get("name")
    keywords = package_json.get("keywords")
    try:
        return PowerPackage(
            name=name,
            display_name=package_json.get("displayName") or name,
            description=package_json.get("description") or "",
            version=package_json.get("version"),
            author=_author_name(package_json.get("author")),
            keywords=[str(k) for k in keywords] if isinstance(keywords, list) else [],
            repository=_repository_url(package_json.get("repository")),
            components=components,
            requirements=_parse_requirements(package_json),
        )
    except ValidationError as e:
        logger.debug("Could not build descriptor for %s: %s", power_path, e)
        return None


def _author_name(author: Any) -> str:
    # npm-style packages allow {"name": ..., "email": ...}
    if isinstance(author, dict):
        return str(author.get("name", ""))
    return str(author) if author else ""


def _repository_url(repository: Any) -> str:
    if isinstance(repository, dict):
        return str(repository.get("url", ""))
    return str(repository) if repository else ""


def list_available_powers(
    cwd: Path | None = None,
    fs: FileSystem | None = None,
) -> list[PowerPackage]:
    """List the Powers available in the resolved templates directory.

    Subdirectories that do not yield a descriptor are ignored.

    Returns:
        Power descriptors sorted by name.
    """
    fs = fs or LocalFileSystem()
    templates_dir = get_powers_template_dir(cwd)
    if not fs.is_dir(templates_dir):
        logger.debug("No Power templates directory at %s", templates_dir)
        return []

    try:
        entries = fs.read_dir(templates_dir)
    except OSError as e:
        logger.warning("Could not list Power templates in %s: %s", templates_dir, e)
        return []

    powers: list[PowerPackage] = []
    for entry in entries:
        power_path = templates_dir / entry
        if not fs.is_dir(power_path):
            continue
        package = extract_power_package(power_path, fs)
        if package is not None:
            powers.append(package)

    return sorted(powers, key=lambda p: p.name)


def get_power_registry(cwd: Path | None = None, fs: FileSystem | None = None) -> PowerRegistry:
    """Build the registry listing from the local templates."""
    return PowerRegistry(
        version=REGISTRY_VERSION,
        last_updated=datetime.now(UTC),
        powers=list_available_powers(cwd, fs),
    )


def fetch_power_registry(cwd: Path | None = None, fs: FileSystem | None = None) -> PowerRegistry:
    """Fetch the Power registry.

    There is no remote registry; this returns the locally bundled
    templates.
    """
    return get_power_registry(cwd, fs)


def get_power_component_info(package: PowerPackage) -> dict[str, int | bool]:
    """Count the components of a Power for display."""
    return {
        "mcp_server_count": len(package.components.mcp_servers),
        "steering_file_count": len(package.components.steering_files),
        "example_count": len(package.components.examples),
        "has_requirements": package.requirements is not None,
    }


def format_power_requirements(requirements: PowerRequirements | None) -> list[str]:
    """Render requirements as human-readable lines."""
    if requirements is None:
        return []
    formatted: list[str] = []
    if requirements.runtime_version:
        formatted.append(f"Python {requirements.runtime_version}")
    if requirements.dependencies:
        formatted.append(f"Dependencies: {', '.join(requirements.dependencies)}")
    if requirements.environment:
        formatted.append(f"Environment: {', '.join(requirements.environment)}")
    return formatted
