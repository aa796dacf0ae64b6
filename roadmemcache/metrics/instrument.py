"""RoadMemcache Instrumentation - Per-Operation Observers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class OperationEvent:
    """One completed cache operation.

    Attributes:
        operation: Operation name (read, write, delete, ...)
        key: Logical key, or list of keys for read_multi
        options: Per-call options or counter amount
        duration_ms: Time spent in the collaborator
        result: Raw collaborator result
        error: Exception raised by the collaborator, if any
    """

    operation: str
    key: Any = None
    options: Any = None
    duration_ms: float = 0.0
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        """Check if the operation completed without error."""
        return self.error is None


class CacheObserver:
    """Observer notified after every cache operation.

    The base class ignores every event.
    """

    def on_operation(self, event: OperationEvent) -> None:
        """Handle a completed operation."""
        pass


class LoggingObserver(CacheObserver):
    """Writes one log line per operation.

    Example:
        cache = MemCache("localhost", {"observer": LoggingObserver()})
        cache.read("user:1")
        # DEBUG Cache read: user:1
    """

    def __init__(self, log: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        """Initialize observer.

        Args:
            log: Logger to write to (module logger by default)
            level: Log level for operation lines
        """
        self._logger = log or logger
        self.level = level

    def on_operation(self, event: OperationEvent) -> None:
        if not self._logger.isEnabledFor(self.level):
            return
        suffix = f" ({event.options!r})" if event.options else ""
        if event.error is not None:
            suffix += f" failed: {event.error!r}"
        self._logger.log(self.level, f"Cache {event.operation}: {event.key}{suffix}")


class CompositeObserver(CacheObserver):
    """Fans events out to several observers."""

    def __init__(self, observers: Iterable[CacheObserver] = ()):
        self.observers: List[CacheObserver] = list(observers)

    def add(self, observer: CacheObserver) -> "CompositeObserver":
        """Add observer.

        Returns:
            Self for chaining
        """
        self.observers.append(observer)
        return self

    def on_operation(self, event: OperationEvent) -> None:
        for observer in self.observers:
            try:
                observer.on_operation(event)
            except Exception as e:
                logger.error(f"Observer error: {e}")


__all__ = [
    "OperationEvent",
    "CacheObserver",
    "LoggingObserver",
    "CompositeObserver",
]
