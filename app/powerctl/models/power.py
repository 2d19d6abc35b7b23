"""Power package models.

This module defines the Pydantic models describing a Power template as
read from its directory: the package descriptor, its declared MCP servers,
its steering documents and examples, and the registry that lists them.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerDescriptor(BaseModel):
    """A capability (MCP) server declared by a Power.

    Unknown keys such as ``disabled`` or ``autoApprove`` are kept so they
    survive a round trip into the shared config.

    Attributes:
        name: Server name (the key in mcp.json).
        description: Human-readable description.
        command: Executable to launch.
        args: Command-line arguments, possibly empty.
        env: Optional environment variables for the process.
    """

    model_config = ConfigDict(extra="allow")

    name: Annotated[str, Field(description="Server name")]
    description: Annotated[str, Field(description="Server description")] = ""
    command: Annotated[str, Field(min_length=1, description="Executable to launch")]
    args: Annotated[list[str], Field(description="Command-line arguments")]
    env: Annotated[dict[str, str] | None, Field(description="Environment variables")] = None


class DocDescriptor(BaseModel):
    """A markdown document shipped with a Power.

    Attributes:
        name: File name (e.g., "getting-started.md").
        description: Human-readable description.
        category: "guide" for steering files, "example" for examples.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="File name")]
    description: Annotated[str, Field(description="Document description")] = ""
    category: Annotated[str, Field(description="Document category")] = "guide"


class PowerRequirements(BaseModel):
    """Compatibility requirements declared by a Power.

    Attributes:
        runtime_version: Minimum host runtime version, e.g. ">=3.11".
        dependencies: Free-form dependency names for display.
        environment: Environment variables the Power's servers expect.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    runtime_version: Annotated[
        str | None,
        Field(alias="runtimeVersion", description="Minimum runtime version"),
    ] = None
    dependencies: Annotated[list[str], Field(default_factory=list)]
    environment: Annotated[list[str], Field(default_factory=list)]


class PowerComponents(BaseModel):
    """Installable components of a Power."""

    model_config = ConfigDict(populate_by_name=True)

    mcp_servers: Annotated[
        list[ServerDescriptor],
        Field(default_factory=list, alias="mcpServers"),
    ]
    steering_files: Annotated[
        list[DocDescriptor],
        Field(default_factory=list, alias="steeringFiles"),
    ]
    examples: Annotated[list[DocDescriptor], Field(default_factory=list)]


class PowerPackage(BaseModel):
    """In-memory descriptor of a Power template.

    Attributes:
        name: Unique slug.
        display_name: Name shown to users (defaults to name).
        description: Short description.
        version: Version string.
        author: Package author.
        keywords: Search keywords.
        repository: Source repository URL, if any.
        components: Declared MCP servers, steering files and examples.
        requirements: Optional compatibility requirements.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: Annotated[str, Field(min_length=1, description="Unique Power slug")]
    display_name: Annotated[str, Field(alias="displayName")] = ""
    description: str = ""
    version: Annotated[str, Field(min_length=1, description="Version string")]
    author: str = ""
    keywords: Annotated[list[str], Field(default_factory=list)]
    repository: str = ""
    components: Annotated[PowerComponents, Field(default_factory=PowerComponents)]
    requirements: PowerRequirements | None = None

    @field_validator("name", "version")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only names and versions."""
        if not v.strip():
            msg = "must not be blank"
            raise ValueError(msg)
        return v

    @property
    def server_names(self) -> list[str]:
        """Names of the declared MCP servers."""
        return [server.name for server in self.components.mcp_servers]

    @property
    def steering_file_names(self) -> list[str]:
        """File names of the declared steering documents."""
        return [doc.name for doc in self.components.steering_files]


class PowerRegistry(BaseModel):
    """Listing of the Powers available for installation.

    Attributes:
        version: Registry format version.
        last_updated: When the listing was built.
        powers: Available Power descriptors.
    """

    model_config = ConfigDict(populate_by_name=True)

    version: str = "1.0.0"
    last_updated: Annotated[datetime, Field(alias="lastUpdated")]
    powers: Annotated[list[PowerPackage], Field(default_factory=list)]

    def get(self, name: str) -> PowerPackage | None:
        """Find an available Power by name."""
        for power in self.powers:
            if power.name == name:
                return power
        return None
