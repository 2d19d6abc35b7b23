"""Unit tests for the cache entry model."""

import json

import pytest
from powerctl.models.cache import CACHE_FORMAT_VERSION, CacheEntry


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_validity_window(self) -> None:
        """An entry is valid while now - timestamp < ttl."""
        entry = CacheEntry(data=1, timestamp=1_000, ttl=500)

        assert entry.is_valid(now=1_499)
        assert not entry.is_valid(now=1_500)

    def test_zero_ttl_never_valid(self) -> None:
        """A TTL of zero expires immediately."""
        assert not CacheEntry(data=1, timestamp=1_000, ttl=0).is_valid(now=1_000)

    def test_json_round_trip(self) -> None:
        """Entries survive JSON serialization."""
        entry = CacheEntry(data={"a": [1]}, timestamp=42, ttl=10)

        assert CacheEntry.from_json(json.dumps(entry.to_dict())) == entry
        assert entry.version == CACHE_FORMAT_VERSION

    def test_missing_version_defaults(self) -> None:
        """Entries written without a version get the current format."""
        entry = CacheEntry.from_dict({"data": None, "timestamp": 1, "ttl": 2})

        assert entry.version == CACHE_FORMAT_VERSION

    @pytest.mark.parametrize(
        "text", ["[]", '{"data": 1}', '{"data": 1, "timestamp": "x", "ttl": 1}']
    )
    def test_malformed(self, text: str) -> None:
        """Malformed entries raise."""
        with pytest.raises((KeyError, ValueError)):
            CacheEntry.from_json(text)
