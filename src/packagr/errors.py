"""Exception types raised by packagr."""

from __future__ import annotations


class PackagrError(Exception):
    """Root exception for all packagr errors."""


class ConfigurationError(PackagrError, ValueError):
    """Raised when the project files or packagr config are missing or invalid."""


class ArchiveError(PackagrError):
    """Raised when the archive stream fails for a reason other than a missing source file."""
