"""Two-tier TTL cache for Power registry listings and metadata.

Entries live in an in-memory map and, best effort, as one JSON file per
key in the project cache directory. The cache is an optimization only:
disk failures are logged and swallowed, and stale or unreadable entries
are treated as misses and evicted from both tiers.

A fresh PowerCacheManager is constructed per CLI invocation and passed
to the PowerManager; there is no process-wide instance.
"""

import json
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from powerctl.core.filesystem import FileSystem, LocalFileSystem
from powerctl.core.paths import get_cache_dir
from powerctl.models.cache import CacheEntry, now_ms
from powerctl.models.installed import PowerMetadata
from powerctl.models.power import PowerRegistry

logger = logging.getLogger(__name__)

# One hour, in milliseconds
DEFAULT_CACHE_TTL = 60 * 60 * 1000
DEFAULT_MAX_MEMORY_ENTRIES = 100

REGISTRY_KEY = "registry"
POWER_METADATA_KEY_PREFIX = "power-metadata-"

CACHE_FILE_SUFFIX = ".json"


@dataclass(slots=True)
class CacheStats:
    """Cache counters for observability.

    Attributes:
        hits: Reads served from either tier.
        misses: Reads that found nothing valid.
        evictions: Memory entries dropped to respect capacity.
        last_cleanup: Epoch milliseconds of the last cleanup() call.
    """

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    last_cleanup: int = field(default_factory=now_ms)

    @property
    def hit_ratio(self) -> float:
        return calculate_hit_ratio(self.hits, self.misses)


@dataclass(slots=True)
class CacheMaintenanceResult:
    """Outcome of cleanup() or clear()."""

    removed: int = 0
    errors: list[str] = field(default_factory=list)


def power_metadata_key(power_name: str) -> str:
    """Cache key for a Power's metadata."""
    return f"{POWER_METADATA_KEY_PREFIX}{power_name}"


class PowerCacheManager:
    """Memory + disk TTL cache.

    Read path: memory first, then the entry file on disk (promoted to
    memory when valid). Write path: memory eagerly, evicting the oldest
    inserted entry once capacity is exceeded, then disk best effort.

    Attributes:
        cache_dir: Directory holding one <key>.json file per entry.
        max_memory_entries: Capacity of the memory tier.
        default_ttl: TTL in milliseconds used when set() gets none.
        enabled: When False, every read misses and writes are dropped.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        *,
        fs: FileSystem | None = None,
        max_memory_entries: int = DEFAULT_MAX_MEMORY_ENTRIES,
        default_ttl: int = DEFAULT_CACHE_TTL,
        enabled: bool = True,
    ) -> None:
        """Initialize the cache.

        Nothing is created on disk until the first write.

        Args:
            cache_dir: Cache directory. Default: <cwd>/.kiro/powers/.cache
            fs: Filesystem implementation. Default: local disk.
            max_memory_entries: Memory tier capacity (at least 1).
            default_ttl: Default TTL in milliseconds.
            enabled: Set False to bypass the cache entirely.
        """
        if max_memory_entries < 1:
            msg = "max_memory_entries must be at least 1"
            raise ValueError(msg)
        self.cache_dir = cache_dir if cache_dir is not None else get_cache_dir()
        self.max_memory_entries = max_memory_entries
        self.default_ttl = default_ttl
        self.enabled = enabled
        self._fs: FileSystem = fs or LocalFileSystem()
        self._memory: OrderedDict[str, CacheEntry] = OrderedDict()
        self._stats = CacheStats()

    @property
    def stats(self) -> CacheStats:
        """Snapshot of the cache counters."""
        return CacheStats(
            hits=self._stats.hits,
            misses=self._stats.misses,
            evictions=self._stats.evictions,
            last_cleanup=self._stats.last_cleanup,
        )

    @property
    def memory_size(self) -> int:
        """Number of entries currently held in memory."""
        return len(self._memory)

    def _entry_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{CACHE_FILE_SUFFIX}"

    # -------------------------------------------------------------------------
    # Generic access
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Any | None:
        """Return cached data for a key, or None on a miss.

        Expired entries found in either tier are evicted from both.
        """
        if not self.enabled:
            self._stats.misses += 1
            return None

        entry = self._memory.get(key)
        if entry is not None:
            if entry.is_valid():
                self._stats.hits += 1
                logger.debug("Cache hit (memory): %s", key)
                return entry.data
            self._evict(key)
            self._stats.misses += 1
            return None

        entry = self._read_disk_entry(key)
        if entry is None:
            self._stats.misses += 1
            return None

        if not entry.is_valid():
            logger.debug("Cache entry expired: %s", key)
            self._evict(key)
            self._stats.misses += 1
            return None

        self._remember(key, entry)
        self._stats.hits += 1
        logger.debug("Cache hit (disk): %s", key)
        return entry.data

    def set(self, key: str, data: Any, ttl: int | None = None) -> None:
        """Store data under a key.

        Args:
            key: Logical cache key.
            data: JSON-serializable payload.
            ttl: Time to live in milliseconds. Default: default_ttl.
        """
        if not self.enabled:
            return

        entry = CacheEntry(
            data=data,
            timestamp=now_ms(),
            ttl=self.default_ttl if ttl is None else ttl,
        )
        self._remember(key, entry)

        try:
            self._fs.write_text(self._entry_path(key), json.dumps(entry.to_dict(), indent=2))
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Could not persist cache entry %s: %s", key, e)

    def invalidate(self, key: str) -> None:
        """Drop a key from both tiers."""
        self._evict(key)

    def _remember(self, key: str, entry: CacheEntry) -> None:
        if key in self._memory:
            del self._memory[key]
        elif len(self._memory) >= self.max_memory_entries:
            oldest_key, _ = self._memory.popitem(last=False)
            self._stats.evictions += 1
            logger.debug("Evicted cache entry from memory: %s", oldest_key)
        self._memory[key] = entry

    def _read_disk_entry(self, key: str) -> CacheEntry | None:
        path = self._entry_path(key)
        try:
            if not self._fs.exists(path):
                return None
            return CacheEntry.from_json(self._fs.read_text(path))
        except (OSError, json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
            logger.debug("Discarding unreadable cache entry %s: %s", key, e)
            self._evict(key)
            return None

    def _evict(self, key: str) -> None:
        self._memory.pop(key, None)
        try:
            self._fs.remove(self._entry_path(key))
        except OSError as e:
            logger.warning("Could not remove cache entry %s: %s", key, e)

    # -------------------------------------------------------------------------
    # Typed helpers
    # -------------------------------------------------------------------------

    def get_cached_registry(self) -> PowerRegistry | None:
        """Return the cached registry listing, if fresh."""
        data = self.get(REGISTRY_KEY)
        if data is None:
            return None
        try:
            return PowerRegistry.model_validate(data)
        except ValidationError as e:
            logger.debug("Discarding malformed cached registry: %s", e)
            self.invalidate(REGISTRY_KEY)
            return None

    def set_cached_registry(self, registry: PowerRegistry, ttl: int | None = None) -> None:
        """Cache the registry listing."""
        self.set(REGISTRY_KEY, registry.model_dump(mode="json", by_alias=True), ttl)

    def get_cached_power_metadata(self, power_name: str) -> PowerMetadata | None:
        """Return cached metadata for an installed Power, if fresh."""
        key = power_metadata_key(power_name)
        data = self.get(key)
        if data is None:
            return None
        try:
            return PowerMetadata.model_validate(data)
        except ValidationError as e:
            logger.debug("Discarding malformed cached metadata for %s: %s", power_name, e)
            self.invalidate(key)
            return None

    def set_cached_power_metadata(
        self,
        power_name: str,
        metadata: PowerMetadata,
        ttl: int | None = None,
    ) -> None:
        """Cache metadata for an installed Power."""
        data = metadata.model_dump(mode="json", by_alias=True)
        self.set(power_metadata_key(power_name), data, ttl)

    def invalidate_power_metadata(self, power_name: str) -> None:
        """Drop cached metadata for a Power after it changed."""
        self.invalidate(power_metadata_key(power_name))

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def _disk_entry_files(self) -> list[str]:
        if not self._fs.is_dir(self.cache_dir):
            return []
        names = self._fs.read_dir(self.cache_dir)
        return [name for name in names if name.endswith(CACHE_FILE_SUFFIX)]

    def disk_usage(self) -> tuple[int, int]:
        """Count persisted entries and their total size.

        Returns:
            Tuple of (entry count, size in bytes). Unreadable entries
            count towards the total but not the size.
        """
        names = self._disk_entry_files()
        size = 0
        for name in names:
            try:
                size += len(self._fs.read_text(self.cache_dir / name).encode("utf-8"))
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Could not read cache entry %s: %s", name, e)
        return len(names), size

    def cleanup(self) -> CacheMaintenanceResult:
        """Remove expired or unreadable entries from disk and memory."""
        result = CacheMaintenanceResult()
        try:
            names = self._disk_entry_files()
        except OSError as e:
            result.errors.append(f"Failed to cleanup cache: {e}")
            return result

        for name in names:
            key = name.removesuffix(CACHE_FILE_SUFFIX)
            path = self.cache_dir / name
            try:
                entry = CacheEntry.from_json(self._fs.read_text(path))
                expired = not entry.is_valid()
            except (OSError, json.JSONDecodeError, KeyError, ValueError, TypeError):
                expired = True
            if not expired:
                continue
            try:
                self._fs.remove(path)
                result.removed += 1
            except OSError as e:
                result.errors.append(f"Failed to remove {name}: {e}")
            self._memory.pop(key, None)

        for key in [k for k, entry in self._memory.items() if not entry.is_valid()]:
            del self._memory[key]

        self._stats.last_cleanup = now_ms()
        logger.info("Cache cleanup removed %d entr(y/ies)", result.removed)
        return result

    def clear(self) -> CacheMaintenanceResult:
        """Drop every entry from both tiers."""
        result = CacheMaintenanceResult()
        self._memory.clear()
        try:
            names = self._disk_entry_files()
        except OSError as e:
            result.errors.append(f"Failed to clear cache: {e}")
            return result

        for name in names:
            try:
                self._fs.remove(self.cache_dir / name)
                result.removed += 1
            except OSError as e:
                result.errors.append(f"Failed to remove {name}: {e}")
        return result


def format_cache_size(size_bytes: int) -> str:
    """Format a byte count as a human-readable size (e.g., "1.5 KB")."""
    units = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(units) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.1f} {units[unit_index]}"


def calculate_hit_ratio(hits: int, misses: int) -> float:
    """Fraction of reads served from the cache (0.0 when unused)."""
    total = hits + misses
    return hits / total if total > 0 else 0.0
