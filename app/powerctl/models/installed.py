"""Installed-state models.

This module defines the Pydantic models for the installed-state manifest
(.kiro/powers/installed.json), which records every installed Power and
exactly which components it contributed to the project.
"""

import re
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from powerctl.models.power import PowerPackage

# Power names are directory names under .kiro/powers
POWER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class InstalledComponents(BaseModel):
    """Components a Power actually added during installation.

    Entries that already existed (and were skipped) are never listed here,
    so uninstalling removes only what the Power itself wrote.

    Attributes:
        mcp_servers: MCP server names added to the shared config.
        steering_files: Steering document names copied to the project.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    mcp_servers: Annotated[
        list[str],
        Field(default_factory=list, alias="mcpServers", description="Added MCP servers"),
    ]
    steering_files: Annotated[
        list[str],
        Field(default_factory=list, alias="steeringFiles", description="Added steering files"),
    ]

    @field_validator("steering_files")
    @classmethod
    def validate_plain_file_names(cls, v: list[str]) -> list[str]:
        """Reject names that would resolve outside the steering directory."""
        for name in v:
            if name in ("", ".", "..") or "/" in name or "\\" in name:
                msg = f"Invalid steering file name: {name!r}"
                raise ValueError(msg)
        return v


class InstalledPowerRecord(BaseModel):
    """Record of one installed Power.

    Attributes:
        name: Power name.
        version: Installed version.
        installed_at: When the Power was installed or last updated.
        components: Components this Power contributed.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: Annotated[str, Field(min_length=1, description="Power name")]
    version: Annotated[str, Field(min_length=1, description="Installed version")]
    installed_at: Annotated[datetime, Field(alias="installedAt")]
    components: Annotated[InstalledComponents, Field(default_factory=InstalledComponents)]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that the name is a plain directory name."""
        if not POWER_NAME_PATTERN.match(v):
            msg = f"Invalid Power name: {v!r}"
            raise ValueError(msg)
        return v


class InstalledManifest(BaseModel):
    """All installed Powers of a project, keyed by name."""

    model_config = ConfigDict(extra="forbid")

    powers: Annotated[
        dict[str, InstalledPowerRecord],
        Field(default_factory=dict, description="Installed Powers by name"),
    ]

    @model_validator(mode="after")
    def validate_keys_match_names(self) -> "InstalledManifest":
        """Validate that every record is stored under its own name."""
        mismatched = [key for key, record in self.powers.items() if key != record.name]
        if mismatched:
            msg = f"Manifest keys do not match record names: {mismatched}"
            raise ValueError(msg)
        return self


class PowerMetadata(BaseModel):
    """Installed record enriched with the package descriptor, for display.

    Attributes:
        record: The installed-state record.
        package: Descriptor read from the installed copy, if readable.
    """

    record: InstalledPowerRecord
    package: PowerPackage | None = None

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def version(self) -> str:
        return self.record.version
