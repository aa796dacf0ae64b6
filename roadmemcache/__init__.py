"""RoadMemcache - Namespaced Memcached Client.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A caching client in front of a memcached cluster with:
- Key namespacing so several logical caches share one cluster
- Binary-safe encoding of structured values
- Read-through fetch with forced refresh
- Create-only, replace-only and unconditional writes
- Normalized per-server statistics
- Process-wide named connection pools
- Pluggable instrumentation and client-side metrics

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                      RoadMemcache Client                        │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │  MemCache   │  │  Namespace  │  │   Options   │   CACHE     │
    │  │ read/write  │  │   prefix    │  │ write mode  │   LAYER     │
    │  └──────┬──────┘  └─────────────┘  └─────────────┘             │
    │         │                                                       │
    │  ┌──────┴───────────────────────┐  ┌─────────────────┐         │
    │  │  ValueCodec  ->  Serializer  │  │ Observer/Stats  │         │
    │  │   base64        pickle/json  │  │  instrumentation│         │
    │  └──────┬───────────────────────┘  └─────────────────┘         │
    │         │                                                       │
    │  ┌──────┴───────────────────────────────────────┐              │
    │  │  MemcachedStore  ->  SocketPool (per name)   │   STORE      │
    │  │            pymemcache HashClient             │   LAYER      │
    │  └──────────────────────────────────────────────┘              │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from roadmemcache import MemCache

    cache = MemCache(["cache1:11211", "cache2"], {"namespace": "app"})
    cache.write("user:1", {"name": "John"}, expires_in=300)
    user = cache.read("user:1")

    # Read-through
    report = cache.fetch("report", lambda: build_report(), expires_in=60)

    # Only if absent / only if present
    cache.write("lock", 1, unless_exist=True)
    cache.write("user:1", updated, if_exist=True)
"""

__version__ = "1.7.0"
__author__ = "BlackRoad OS"

from roadmemcache.errors import (
    MemCacheError,
    ReadonlyCacheError,
    ConfigurationError,
)
from roadmemcache.cache.client import MemCache
from roadmemcache.cache.config import ClientConfig
from roadmemcache.cache.options import WriteMode, WriteOptions
from roadmemcache.cluster.ring import HashingAlgorithm
from roadmemcache.cluster.config import PoolConfig
from roadmemcache.cluster.pool import (
    SocketPool,
    PoolRegistry,
    get_registry,
    reset_pool,
)
from roadmemcache.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
)
from roadmemcache.protocol.codec import ValueCodec
from roadmemcache.metrics.instrument import (
    CacheObserver,
    LoggingObserver,
    OperationEvent,
)
from roadmemcache.metrics.collector import (
    MetricsCollector,
    CacheMetrics,
)

__all__ = [
    # Client
    "MemCache",
    "ClientConfig",
    "WriteMode",
    "WriteOptions",
    # Errors
    "MemCacheError",
    "ReadonlyCacheError",
    "ConfigurationError",
    # Pools
    "HashingAlgorithm",
    "PoolConfig",
    "SocketPool",
    "PoolRegistry",
    "get_registry",
    "reset_pool",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "ValueCodec",
    # Metrics
    "CacheObserver",
    "LoggingObserver",
    "OperationEvent",
    "MetricsCollector",
    "CacheMetrics",
]
