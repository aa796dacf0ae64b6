"""Tests for instrumentation and metrics.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import logging

from roadmemcache import MemCache
from roadmemcache.metrics.collector import CacheMetrics, MetricsCollector
from roadmemcache.metrics.instrument import (
    CacheObserver,
    CompositeObserver,
    LoggingObserver,
    OperationEvent,
)


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_counts(self):
        collector = MetricsCollector()
        cache = MemCache(observer=collector)

        cache.write("a", 1)
        cache.read("a")
        cache.read("missing")
        cache.read_multi(["a", "b", "c"])
        cache.incr("a")
        cache.delete("a")

        metrics = collector.get_metrics()
        assert metrics.hits == 2
        assert metrics.misses == 3
        assert metrics.writes == 1
        assert metrics.deletes == 1
        assert metrics.counter_updates == 1
        assert metrics.errors == 0
        assert metrics.hit_rate == 0.4
        assert metrics.total_ops == 8
        assert metrics.operations["read"] == 2

    def test_errors(self):
        collector = MetricsCollector()
        collector.on_operation(OperationEvent("read", "k", error=OSError("down")))

        assert collector.get_metrics().errors == 1
        assert collector.get_metrics().misses == 0

    def test_reset(self):
        collector = MetricsCollector()
        collector.on_operation(OperationEvent("write", "k", result=True))
        collector.reset()

        assert collector.get_metrics().writes == 0
        assert collector.get_metrics().latency_avg_ms == 0.0

    def test_latency(self):
        collector = MetricsCollector()
        for ms in (1.0, 2.0, 3.0):
            collector.on_operation(OperationEvent("read", "k", duration_ms=ms, result=b"v"))

        metrics = collector.get_metrics()
        assert metrics.latency_avg_ms == 2.0
        assert metrics.latency_p99_ms == 3.0

    def test_exporters(self):
        collector = MetricsCollector()
        exported = []
        collector.add_exporter(exported.append)
        collector.add_exporter(lambda metrics: 1 / 0)

        collector.export()

        assert isinstance(exported[0], CacheMetrics)

    def test_prometheus(self):
        collector = MetricsCollector()
        collector.on_operation(OperationEvent("read", "k", result=b"v"))
        output = collector.to_prometheus()

        assert "memcache_hits_total 1" in output
        assert "# TYPE memcache_hit_rate gauge" in output

    def test_to_dict(self):
        assert CacheMetrics(hits=1, misses=1).to_dict()["hit_rate"] == 0.5


class TestObservers:
    """Tests for observer implementations."""

    def test_base_is_noop(self):
        CacheObserver().on_operation(OperationEvent("read", "k"))

    def test_logging_observer(self, caplog):
        log = logging.getLogger("test.cache")
        cache = MemCache(observer=LoggingObserver(log=log))

        with caplog.at_level(logging.DEBUG, logger="test.cache"):
            cache.read("user:1")

        assert "Cache read: user:1" in caplog.text

    def test_logging_observer_error(self, caplog):
        log = logging.getLogger("test.cache")
        observer = LoggingObserver(log=log, level=logging.INFO)

        with caplog.at_level(logging.INFO, logger="test.cache"):
            observer.on_operation(OperationEvent("write", "k", error=OSError("down")))

        assert "failed: OSError('down')" in caplog.text

    def test_composite(self):
        collector = MetricsCollector()
        events = []

        class Recorder(CacheObserver):
            def on_operation(self, event):
                events.append(event.operation)

        class Broken(CacheObserver):
            def on_operation(self, event):
                raise RuntimeError("boom")

        composite = CompositeObserver([Broken(), collector]).add(Recorder())
        cache = MemCache(observer=composite)
        cache.write("k", "v")

        assert events == ["write"]
        assert collector.get_metrics().writes == 1

    def test_event_succeeded(self):
        assert OperationEvent("read").succeeded
        assert not OperationEvent("read", error=ValueError()).succeeded
