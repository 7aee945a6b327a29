"""Exception hierarchy for the virtual list library."""

from __future__ import annotations


class VirtualListError(Exception):
    """Base exception for all virtual list errors."""


class InvalidConfigurationError(VirtualListError, ValueError):
    """Raised when viewport sizes, overscan or item counts are invalid."""


class LifecycleError(VirtualListError):
    """Raised when a component operation requires a mounted component."""


class CacheError(VirtualListError):
    """Raised when the cache backend encounters an operational error."""
