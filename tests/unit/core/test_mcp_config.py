"""Unit tests for shared MCP server config merging."""

import json
from pathlib import Path

import pytest
from powerctl.core.mcp_config import SharedConfig, SharedConfigError


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / ".kiro" / "settings" / "mcp.json"


@pytest.fixture
def shared(config_path: Path) -> SharedConfig:
    return SharedConfig(config_path)


def _write(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))


class TestLoad:
    """Tests for SharedConfig.load method."""

    def test_missing_file(self, shared: SharedConfig) -> None:
        """A missing file loads as an empty server mapping."""
        assert shared.load() == {"mcpServers": {}}

    def test_adds_missing_servers_key(self, shared: SharedConfig, config_path: Path) -> None:
        """A document without mcpServers gets an empty mapping."""
        _write(config_path, {"other": True})

        assert shared.load() == {"other": True, "mcpServers": {}}

    @pytest.mark.parametrize(
        "content",
        [b"{not json", b"[]", b'{"mcpServers": []}', b'{"mcpServers": {"caf\xe9": {}}}'],
    )
    def test_rejects_malformed(
        self, shared: SharedConfig, config_path: Path, content: bytes
    ) -> None:
        """Invalid JSON, undecodable bytes or wrong shapes raise SharedConfigError."""
        config_path.parent.mkdir(parents=True)
        config_path.write_bytes(content)

        with pytest.raises(SharedConfigError):
            shared.load()


class TestMergeServers:
    """Tests for SharedConfig.merge_servers method."""

    def test_creates_file(self, shared: SharedConfig, config_path: Path) -> None:
        """Merging into a missing file creates it."""
        outcome = shared.merge_servers({"a": {"command": "run", "args": []}})

        assert outcome.added == ["a"]
        data = json.loads(config_path.read_text())
        assert data == {"mcpServers": {"a": {"command": "run", "args": []}}}

    def test_preserves_existing_entries_and_keys(
        self, shared: SharedConfig, config_path: Path
    ) -> None:
        """Existing servers and top-level keys survive untouched."""
        existing = {"command": "mine", "args": ["--flag"], "env": {"TOKEN": "x"}}
        _write(config_path, {"mcpServers": {"mine": existing}, "theme": "dark"})

        shared.merge_servers({"a": {"command": "run", "args": []}})

        data = json.loads(config_path.read_text())
        assert data["mcpServers"]["mine"] == existing
        assert data["theme"] == "dark"
        assert list(data["mcpServers"]) == ["mine", "a"]

    def test_never_overwrites(self, shared: SharedConfig, config_path: Path) -> None:
        """A server name that is already configured is skipped."""
        _write(config_path, {"mcpServers": {"a": {"command": "custom", "args": []}}})

        outcome = shared.merge_servers(
            {"a": {"command": "run", "args": []}, "b": {"command": "run", "args": []}}
        )

        assert outcome.added == ["b"]
        assert outcome.skipped == ["a"]
        assert json.loads(config_path.read_text())["mcpServers"]["a"]["command"] == "custom"

    def test_no_write_when_nothing_added(self, shared: SharedConfig, config_path: Path) -> None:
        """The document is not rewritten when every server is skipped."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text('{"mcpServers": {"a": {}}}')

        shared.merge_servers({"a": {"command": "run", "args": []}})

        assert config_path.read_text() == '{"mcpServers": {"a": {}}}'

    def test_malformed_file_untouched(self, shared: SharedConfig, config_path: Path) -> None:
        """A malformed document is reported and never overwritten."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("{broken")

        with pytest.raises(SharedConfigError):
            shared.merge_servers({"a": {"command": "run", "args": []}})

        assert config_path.read_text() == "{broken"


class TestRemoveServers:
    """Tests for SharedConfig.remove_servers method."""

    def test_removes_only_named(self, shared: SharedConfig, config_path: Path) -> None:
        """Only the named servers are removed."""
        _write(config_path, {"mcpServers": {"a": {}, "b": {}, "c": {}}})

        outcome = shared.remove_servers(["a", "c"])

        assert outcome.removed == ["a", "c"]
        assert json.loads(config_path.read_text()) == {"mcpServers": {"b": {}}}

    def test_reports_missing(self, shared: SharedConfig, config_path: Path) -> None:
        """Names that are not configured are reported as missing."""
        _write(config_path, {"mcpServers": {"a": {}}})

        outcome = shared.remove_servers(["a", "gone"])

        assert outcome.removed == ["a"]
        assert outcome.missing == ["gone"]

    def test_missing_file(self, shared: SharedConfig, config_path: Path) -> None:
        """Without a config file every name is missing and nothing is created."""
        outcome = shared.remove_servers(["a"])

        assert outcome.missing == ["a"]
        assert not config_path.exists()

    def test_server_names(self, shared: SharedConfig, config_path: Path) -> None:
        """server_names lists configured servers in order."""
        _write(config_path, {"mcpServers": {"x": {}, "y": {}}})

        assert shared.server_names() == ["x", "y"]
