"""Data models for powerctl.

This module exports the core data structures used throughout the application.
"""

from powerctl.models.cache import CACHE_FORMAT_VERSION, CacheEntry
from powerctl.models.installed import (
    InstalledComponents,
    InstalledManifest,
    InstalledPowerRecord,
    PowerMetadata,
)
from powerctl.models.power import (
    DocDescriptor,
    PowerComponents,
    PowerPackage,
    PowerRegistry,
    PowerRequirements,
    ServerDescriptor,
)
from powerctl.models.result import InstallResult, ValidationResult

__all__ = [
    "CACHE_FORMAT_VERSION",
    "CacheEntry",
    "DocDescriptor",
    "InstallResult",
    "InstalledComponents",
    "InstalledManifest",
    "InstalledPowerRecord",
    "PowerComponents",
    "PowerMetadata",
    "PowerPackage",
    "PowerRegistry",
    "PowerRequirements",
    "ServerDescriptor",
    "ValidationResult",
]
