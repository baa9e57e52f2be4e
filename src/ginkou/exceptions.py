"""Custom exception hierarchy for ginkou."""

from __future__ import annotations


class GinkouError(Exception):
    """Base exception for all ginkou errors."""


class StorageError(GinkouError):
    """Database write rejected, connection failure, schema version mismatch."""


class TokenizationError(GinkouError):
    """The segmenter failed or returned something other than word forms."""


class ConfigError(GinkouError):
    """Unreadable or invalid settings file."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)
