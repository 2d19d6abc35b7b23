"""Shared MCP server configuration merging.

The project's .kiro/settings/mcp.json belongs to the host project. Powers
only ever add server entries that are not present yet and remove entries
they recorded as added; every other key in the document is preserved.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from powerctl.core.filesystem import FileSystem, LocalFileSystem, read_json, write_json

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcpServers"


class SharedConfigError(Exception):
    """Raised when the shared config cannot be read, parsed or written."""


@dataclass(slots=True)
class MergeOutcome:
    """Server names affected by a merge or removal.

    Attributes:
        added: Servers inserted into the shared config.
        skipped: Servers left alone because they already existed.
        removed: Servers deleted from the shared config.
        missing: Servers that were expected but not found.
    """

    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


class SharedConfig:
    """Reads and edits the shared MCP server configuration document."""

    def __init__(self, path: Path, fs: FileSystem | None = None) -> None:
        self.path = path
        self._fs: FileSystem = fs or LocalFileSystem()

    def load(self) -> dict[str, Any]:
        """Load the document, or an empty one if the file is absent.

        Raises:
            SharedConfigError: If the file is unreadable, not JSON, or its
                server mapping is not an object.
        """
        if not self._fs.exists(self.path):
            return {SERVERS_KEY: {}}

        try:
            data = read_json(self._fs, self.path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"Invalid JSON in {self.path}: {e}"
            raise SharedConfigError(msg) from e
        except OSError as e:
            msg = f"Failed to read {self.path}: {e}"
            raise SharedConfigError(msg) from e

        if not isinstance(data, dict):
            msg = f"Expected a JSON object in {self.path}"
            raise SharedConfigError(msg)

        servers = data.setdefault(SERVERS_KEY, {})
        if not isinstance(servers, dict):
            msg = f"'{SERVERS_KEY}' in {self.path} must be an object"
            raise SharedConfigError(msg)
        return data

    def save(self, data: dict[str, Any]) -> None:
        """Write the document.

        Raises:
            SharedConfigError: If the file cannot be written.
        """
        try:
            write_json(self._fs, self.path, data)
        except OSError as e:
            msg = f"Failed to write {self.path}: {e}"
            raise SharedConfigError(msg) from e

    def server_names(self) -> list[str]:
        """Names of the configured servers."""
        return list(self.load()[SERVERS_KEY])

    def merge_servers(self, servers: dict[str, dict[str, Any]]) -> MergeOutcome:
        """Add servers that are not configured yet.

        Existing entries are never overwritten. The document is written
        only when at least one server was added.

        Args:
            servers: Server name to raw descriptor, in declaration order.

        Returns:
            MergeOutcome listing added and skipped names.

        Raises:
            SharedConfigError: If the document cannot be loaded or saved.
        """
        data = self.load()
        configured: dict[str, Any] = data[SERVERS_KEY]
        outcome = MergeOutcome()

        for name, descriptor in servers.items():
            if name in configured:
                logger.debug("MCP server %s already configured, skipping", name)
                outcome.skipped.append(name)
                continue
            configured[name] = descriptor
            outcome.added.append(name)

        if outcome.added:
            self.save(data)
        return outcome

    def remove_servers(self, names: list[str]) -> MergeOutcome:
        """Remove the named servers, leaving every other entry untouched.

        Names not present are reported as missing. The document is written
        only when at least one server was removed.

        Raises:
            SharedConfigError: If the document cannot be loaded or saved.
        """
        if not self._fs.exists(self.path):
            return MergeOutcome(missing=list(names))

        data = self.load()
        configured: dict[str, Any] = data[SERVERS_KEY]
        outcome = MergeOutcome()

        for name in names:
            if configured.pop(name, None) is None:
                outcome.missing.append(name)
            else:
                outcome.removed.append(name)

        if outcome.removed:
            self.save(data)
        return outcome
