"""Cache entry model.

This module defines the record stored by the Power cache, both in memory
and as one JSON file per key on disk.
"""

import json
import time
from dataclasses import dataclass
from typing import Any

CACHE_FORMAT_VERSION = "1.0.0"


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached value with its freshness information.

    Attributes:
        data: JSON-serializable payload.
        timestamp: When the entry was written, in epoch milliseconds.
        ttl: Time to live in milliseconds.
        version: Cache format version.
    """

    data: Any
    timestamp: int
    ttl: int
    version: str = CACHE_FORMAT_VERSION

    def is_valid(self, now: int | None = None) -> bool:
        """Check if the entry is still fresh.

        An entry is valid iff ``now - timestamp < ttl``; a TTL of zero is
        therefore expired immediately.

        Args:
            now: Reference time in epoch milliseconds. Defaults to now.
        """
        current = now_ms() if now is None else now
        return current - self.timestamp < self.ttl

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "data": self.data,
            "timestamp": self.timestamp,
            "ttl": self.ttl,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CacheEntry":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If timestamp or ttl are not integers.
        """
        return cls(
            data=data["data"],
            timestamp=int(data["timestamp"]),
            ttl=int(data["ttl"]),
            version=str(data.get("version", CACHE_FORMAT_VERSION)),
        )

    @classmethod
    def from_json(cls, text: str) -> "CacheEntry":
        """Deserialize from a JSON document.

        Raises:
            json.JSONDecodeError: If the text is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            msg = "Cache entry must be a JSON object"
            raise ValueError(msg)
        return cls.from_dict(data)
