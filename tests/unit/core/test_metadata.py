"""Unit tests for Power metadata extraction."""

import json
from collections.abc import Callable
from pathlib import Path

from powerctl.core.metadata import (
    extract_power_package,
    format_power_requirements,
    get_power_component_info,
    get_power_registry,
    list_available_powers,
    read_declared_servers,
)
from powerctl.models.power import PowerRequirements


class TestExtractPowerPackage:
    """Tests for extract_power_package function."""

    def test_demo_descriptor(self, demo_power: Path) -> None:
        """The demo Power yields its server and steering document."""
        package = extract_power_package(demo_power)

        assert package is not None
        assert package.name == "demo"
        assert package.version == "1.0.0"
        assert package.display_name == "demo"
        assert package.server_names == ["demo-scanner"]
        assert package.steering_file_names == ["demo-guide.md"]
        server = package.components.mcp_servers[0]
        assert server.command == "run"
        assert server.args == ["serve"]

    def test_only_markdown_documents(self, make_power: Callable[..., Path]) -> None:
        """Steering files and examples only list .md files."""
        power = make_power(
            "docs",
            steering={"guide.md": "g", "image.png": "x"},
            examples={"usage.md": "u", "data.csv": "c"},
        )

        package = extract_power_package(power)

        assert package is not None
        assert package.steering_file_names == ["guide.md"]
        assert [doc.name for doc in package.components.examples] == ["usage.md"]
        assert package.components.examples[0].category == "example"

    def test_no_mcp_config(self, make_power: Callable[..., Path]) -> None:
        """A Power without mcp.json declares no servers."""
        package = extract_power_package(make_power("plain", steering={"a.md": "a"}))

        assert package is not None
        assert package.components.mcp_servers == []

    def test_server_description_defaults(self, make_power: Callable[..., Path]) -> None:
        """Servers without description get a generated one."""
        power = make_power("svc", servers={"svc-a": {"command": "run", "args": []}})

        package = extract_power_package(power)

        assert package is not None
        assert package.components.mcp_servers[0].description == "MCP server: svc-a"

    def test_author_and_repository_objects(self, make_power: Callable[..., Path]) -> None:
        """npm-style author and repository objects are flattened."""
        power = make_power(
            "npm",
            package_extra={
                "author": {"name": "Ada", "email": "ada@example.com"},
                "repository": {"type": "git", "url": "https://example.com/npm.git"},
                "keywords": ["mcp", 1],
            },
        )

        package = extract_power_package(power)

        assert package is not None
        assert package.author == "Ada"
        assert package.repository == "https://example.com/npm.git"
        assert package.keywords == ["mcp", "1"]

    def test_engines_python_becomes_runtime_requirement(
        self, make_power: Callable[..., Path]
    ) -> None:
        """engines.python is used when no runtimeVersion is declared."""
        power = make_power("eng", package_extra={"engines": {"python": ">=3.10"}})

        package = extract_power_package(power)

        assert package is not None
        assert package.requirements is not None
        assert package.requirements.runtime_version == ">=3.10"

    def test_missing_package_json(self, make_power: Callable[..., Path]) -> None:
        """No descriptor without package.json."""
        assert extract_power_package(make_power("nopkg", package_json=False)) is None

    def test_malformed_package_json(self, make_power: Callable[..., Path]) -> None:
        """No descriptor when package.json is not JSON."""
        power = make_power("bad")
        (power / "package.json").write_text("{oops")

        assert extract_power_package(power) is None


class TestReadDeclaredServers:
    """Tests for read_declared_servers function."""

    def test_keeps_every_key(self, make_power: Callable[..., Path]) -> None:
        """Raw descriptors keep keys unknown to the model."""
        power = make_power(
            "raw",
            servers={"s": {"command": "run", "args": [], "autoApprove": ["read"]}},
        )

        assert read_declared_servers(power) == {
            "s": {"command": "run", "args": [], "autoApprove": ["read"]}
        }

    def test_malformed_mcp_json(self, make_power: Callable[..., Path]) -> None:
        """An unreadable mcp.json declares nothing."""
        power = make_power("bad")
        (power / "mcp.json").write_text("nope")

        assert read_declared_servers(power) == {}


class TestListAvailablePowers:
    """Tests for listing templates."""

    def test_sorted_and_filtered(
        self, project_dir: Path, templates_dir: Path, make_power: Callable[..., Path]
    ) -> None:
        """Powers are sorted by name; stray files and unreadable Powers are ignored."""
        make_power("zeta")
        make_power("alpha")
        make_power("broken", package_json=False)
        (templates_dir / "README.md").write_text("not a Power")

        powers = list_available_powers(project_dir)

        assert [p.name for p in powers] == ["alpha", "zeta"]

    def test_registry(self, project_dir: Path, demo_power: Path) -> None:
        """The registry lists the local templates."""
        registry = get_power_registry(project_dir)

        assert registry.version == "1.0.0"
        assert registry.get("demo") is not None
        assert registry.get("missing") is None

    def test_registry_round_trips_through_json(self, project_dir: Path, demo_power: Path) -> None:
        """The registry survives JSON serialization with aliases."""
        registry = get_power_registry(project_dir)
        data = json.loads(json.dumps(registry.model_dump(mode="json", by_alias=True)))

        assert "lastUpdated" in data
        assert data["powers"][0]["components"]["mcpServers"][0]["name"] == "demo-scanner"


class TestDisplayHelpers:
    """Tests for component counts and requirement formatting."""

    def test_component_info(self, demo_power: Path) -> None:
        """Component counts reflect the descriptor."""
        package = extract_power_package(demo_power)
        assert package is not None

        assert get_power_component_info(package) == {
            "mcp_server_count": 1,
            "steering_file_count": 1,
            "example_count": 0,
            "has_requirements": False,
        }

    def test_format_requirements(self) -> None:
        """Requirements render one line per kind."""
        requirements = PowerRequirements(
            runtime_version=">=3.11",
            dependencies=["git"],
            environment=["TOKEN", "HOST"],
        )

        assert format_power_requirements(requirements) == [
            "Python >=3.11",
            "Dependencies: git",
            "Environment: TOKEN, HOST",
        ]
        assert format_power_requirements(None) == []
