"""Installed-state manifest I/O.

This module provides the InstalledStateManager class for reading and
writing the project's installed-state manifest
(.kiro/powers/installed.json). The manifest is the single record of which
Powers are installed and which components each of them contributed.
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from powerctl.core.filesystem import FileSystem, LocalFileSystem, read_json, write_json
from powerctl.core.paths import get_installed_manifest_path
from powerctl.models.installed import InstalledManifest, InstalledPowerRecord

logger = logging.getLogger(__name__)


class InstalledManifestError(Exception):
    """Base exception for installed-state manifest errors."""


class InstalledManifestParseError(InstalledManifestError):
    """Raised when the manifest is not valid JSON."""


class InstalledManifestValidationError(InstalledManifestError):
    """Raised when the manifest content does not match the schema."""


class InstalledStateManager:
    """Reads and writes the installed-state manifest.

    A missing manifest means nothing is installed. Writes replace the
    whole document atomically.

    Attributes:
        manifest_path: Location of installed.json.
    """

    def __init__(
        self,
        manifest_path: Path | None = None,
        fs: FileSystem | None = None,
    ) -> None:
        """Initialize InstalledStateManager.

        Args:
            manifest_path: Optional override for the manifest location.
                Default: <cwd>/.kiro/powers/installed.json
            fs: Filesystem implementation. Default: local disk.
        """
        self.manifest_path = (
            manifest_path if manifest_path is not None else get_installed_manifest_path()
        )
        self._fs: FileSystem = fs or LocalFileSystem()

    def exists(self) -> bool:
        """Check if the manifest file exists."""
        return self._fs.exists(self.manifest_path)

    def load(self) -> InstalledManifest:
        """Load the manifest.

        Returns:
            The parsed manifest, or an empty one if the file is absent.

        Raises:
            InstalledManifestParseError: If the file is not valid JSON.
            InstalledManifestValidationError: If the content is invalid.
            InstalledManifestError: If the file cannot be read.
        """
        if not self.exists():
            return InstalledManifest()

        try:
            data = read_json(self._fs, self.manifest_path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"Invalid JSON in {self.manifest_path}: {e}"
            raise InstalledManifestParseError(msg) from e
        except OSError as e:
            msg = f"Failed to read installed manifest: {e}"
            raise InstalledManifestError(msg) from e

        try:
            return InstalledManifest.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid installed manifest content: {e}"
            raise InstalledManifestValidationError(msg) from e

    def save(self, manifest: InstalledManifest) -> Path:
        """Write the manifest.

        Args:
            manifest: Manifest to persist.

        Returns:
            Path where the manifest was saved.

        Raises:
            InstalledManifestError: If the file cannot be written.
        """
        data = manifest.model_dump(mode="json", by_alias=True)
        try:
            write_json(self._fs, self.manifest_path, data)
        except OSError as e:
            msg = f"Failed to write installed manifest: {e}"
            raise InstalledManifestError(msg) from e
        logger.debug("Saved installed manifest with %d record(s)", len(manifest.powers))
        return self.manifest_path

    def get_record(self, name: str) -> InstalledPowerRecord | None:
        """Return the record for an installed Power, if any."""
        return self.load().powers.get(name)

    def list_records(self) -> list[InstalledPowerRecord]:
        """Return every installed record, sorted by name."""
        manifest = self.load()
        return [manifest.powers[name] for name in sorted(manifest.powers)]

    def put_record(self, record: InstalledPowerRecord) -> None:
        """Insert or replace a record and save the manifest."""
        manifest = self.load()
        manifest.powers[record.name] = record
        self.save(manifest)

    def remove_record(self, name: str) -> bool:
        """Remove a record and save the manifest.

        Returns:
            True if a record was removed, False if none existed.
        """
        manifest = self.load()
        if name not in manifest.powers:
            return False
        del manifest.powers[name]
        self.save(manifest)
        return True
