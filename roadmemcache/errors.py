"""RoadMemcache Errors - Client Exception Hierarchy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Transport failures are not wrapped: pymemcache's ``MemcacheError``
subclasses and ``OSError`` reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MemCacheError(RuntimeError):
    """Base exception for all client errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ReadonlyCacheError(MemCacheError):
    """Raised when a readonly client is asked to mutate the cache."""

    def __init__(self, operation: str, key: Any = None):
        super().__init__(
            "Update of readonly cache",
            details={"operation": operation, "key": key},
        )
        self.operation = operation


class ConfigurationError(MemCacheError):
    """Raised when constructor arguments or options are invalid."""


__all__ = ["MemCacheError", "ReadonlyCacheError", "ConfigurationError"]
