"""powerctl - local package manager for Power extensions."""

__version__ = "0.1.0"
