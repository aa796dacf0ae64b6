"""RoadMemcache Metrics Collector - Client-Side Cache Metrics.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Counts what the client observes per call. Server-side counters come from
``MemCache.stats()`` instead.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, List, Optional

from roadmemcache.metrics.instrument import CacheObserver, OperationEvent

logger = logging.getLogger(__name__)

# Operation name -> counter it feeds. Reads are counted as hits/misses.
_OPERATION_COUNTERS = {
    "write": "writes",
    "delete": "deletes",
    "incr": "counter_updates",
    "decr": "counter_updates",
}


@dataclass
class CacheMetrics:
    """Snapshot of client-side metrics.

    Attributes:
        hits: Keys found by read, fetch and read_multi
        misses: Keys not found
        writes: Write calls (accepted or not)
        deletes: Delete calls
        counter_updates: incr/decr calls
        errors: Calls that raised
        latency_avg_ms: Mean collaborator latency
        latency_p99_ms: 99th percentile collaborator latency
        ops_per_second: Call rate over the collector window
        operations: Calls per operation name
    """

    hits: int = 0
    misses: int = 0
    writes: int = 0
    deletes: int = 0
    counter_updates: int = 0
    errors: int = 0
    latency_avg_ms: float = 0.0
    latency_p99_ms: float = 0.0
    ops_per_second: float = 0.0
    operations: Dict[str, int] = field(default_factory=dict)

    @property
    def hit_rate(self) -> float:
        """Fraction of looked-up keys that were found."""
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0

    @property
    def total_ops(self) -> int:
        return self.hits + self.misses + self.writes + self.deletes + self.counter_updates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "writes": self.writes,
            "deletes": self.deletes,
            "counter_updates": self.counter_updates,
            "errors": self.errors,
            "hit_rate": self.hit_rate,
            "latency_avg_ms": self.latency_avg_ms,
            "latency_p99_ms": self.latency_p99_ms,
            "ops_per_second": self.ops_per_second,
            "operations": dict(self.operations),
        }


class MetricsCollector(CacheObserver):
    """Observer that aggregates client-side cache metrics.

    Example:
        collector = MetricsCollector()
        cache = MemCache("localhost", {"observer": collector})
        cache.read("key")

        print(f"Hit rate: {collector.get_metrics().hit_rate:.2%}")
        print(collector.to_prometheus())
    """

    def __init__(self, window_seconds: int = 60, max_samples: int = 10000):
        """Initialize collector.

        Args:
            window_seconds: Window for the call rate
            max_samples: Latency samples kept for average and percentile
        """
        self.window_seconds = window_seconds

        self._counts: Counter = Counter()
        self._operations: Counter = Counter()
        self._timestamps: Deque[float] = deque()
        self._latencies: Deque[float] = deque(maxlen=max_samples)

        self._lock = threading.RLock()
        self._exporters: List[Callable[[CacheMetrics], None]] = []

    def on_operation(self, event: OperationEvent) -> None:
        with self._lock:
            now = time.time()
            self._timestamps.append(now)
            self._prune(now)
            self._latencies.append(event.duration_ms)
            self._operations[event.operation] += 1

            if event.error is not None:
                self._counts["errors"] += 1
                return

            if event.operation == "read":
                self._counts["misses" if event.result is None else "hits"] += 1
            elif event.operation == "read_multi":
                found = len(event.result or {})
                self._counts["hits"] += found
                self._counts["misses"] += max(len(event.key or ()) - found, 0)
            else:
                counter = _OPERATION_COUNTERS.get(event.operation)
                if counter:
                    self._counts[counter] += 1

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._timestamps and self._timestamps[0] < cutoff:
            self._timestamps.popleft()

    def _rate(self) -> float:
        now = time.time()
        self._prune(now)
        if not self._timestamps:
            return 0.0
        elapsed = now - self._timestamps[0]
        return len(self._timestamps) / elapsed if elapsed > 0 else 0.0

    def _percentile(self, fraction: float) -> float:
        if not self._latencies:
            return 0.0
        ordered = sorted(self._latencies)
        return ordered[min(int(len(ordered) * fraction), len(ordered) - 1)]

    def get_metrics(self) -> CacheMetrics:
        """Take a snapshot.

        Returns:
            CacheMetrics instance
        """
        with self._lock:
            latencies = self._latencies
            return CacheMetrics(
                hits=self._counts["hits"],
                misses=self._counts["misses"],
                writes=self._counts["writes"],
                deletes=self._counts["deletes"],
                counter_updates=self._counts["counter_updates"],
                errors=self._counts["errors"],
                latency_avg_ms=sum(latencies) / len(latencies) if latencies else 0.0,
                latency_p99_ms=self._percentile(0.99),
                ops_per_second=self._rate(),
                operations=dict(self._operations),
            )

    def reset(self) -> None:
        """Forget everything collected so far."""
        with self._lock:
            self._counts.clear()
            self._operations.clear()
            self._timestamps.clear()
            self._latencies.clear()

    def add_exporter(self, exporter: Callable[[CacheMetrics], None]) -> None:
        """Register a callback that receives snapshots from ``export``."""
        self._exporters.append(exporter)

    def export(self, metrics: Optional[CacheMetrics] = None) -> None:
        """Push a snapshot to every exporter. Exporter failures are logged."""
        metrics = metrics or self.get_metrics()
        for exporter in self._exporters:
            try:
                exporter(metrics)
            except Exception as e:
                logger.error(f"Exporter error: {e}")

    def to_prometheus(self) -> str:
        """Render a snapshot in the Prometheus text format.

        Returns:
            Exposition text, one block per metric
        """
        metrics = self.get_metrics()
        series = [
            ("memcache_hits_total", "counter", "Keys found", str(metrics.hits)),
            ("memcache_misses_total", "counter", "Keys not found", str(metrics.misses)),
            ("memcache_writes_total", "counter", "Write calls", str(metrics.writes)),
            ("memcache_deletes_total", "counter", "Delete calls", str(metrics.deletes)),
            ("memcache_counter_updates_total", "counter", "incr/decr calls", str(metrics.counter_updates)),
            ("memcache_errors_total", "counter", "Failed calls", str(metrics.errors)),
            ("memcache_hit_rate", "gauge", "Cache hit rate", f"{metrics.hit_rate:.4f}"),
            ("memcache_latency_avg_ms", "gauge", "Average latency", f"{metrics.latency_avg_ms:.2f}"),
            ("memcache_latency_p99_ms", "gauge", "P99 latency", f"{metrics.latency_p99_ms:.2f}"),
            ("memcache_ops_per_second", "gauge", "Calls per second", f"{metrics.ops_per_second:.2f}"),
        ]
        blocks = [
            f"# HELP {name} {help_text}\n# TYPE {name} {kind}\n{name} {value}"
            for name, kind, help_text, value in series
        ]
        return "\n\n".join(blocks)

    def __repr__(self) -> str:
        metrics = self.get_metrics()
        return f"MetricsCollector(hits={metrics.hits}, hit_rate={metrics.hit_rate:.2%})"


__all__ = ["MetricsCollector", "CacheMetrics"]
