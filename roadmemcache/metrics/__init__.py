"""Metrics module - Stats normalization, instrumentation and metrics."""

from roadmemcache.metrics.stats import (
    normalize_stats,
    StatsRecord,
)
from roadmemcache.metrics.instrument import (
    OperationEvent,
    CacheObserver,
    LoggingObserver,
    CompositeObserver,
)
from roadmemcache.metrics.collector import (
    MetricsCollector,
    CacheMetrics,
)

__all__ = [
    "normalize_stats",
    "StatsRecord",
    "OperationEvent",
    "CacheObserver",
    "LoggingObserver",
    "CompositeObserver",
    "MetricsCollector",
    "CacheMetrics",
]
