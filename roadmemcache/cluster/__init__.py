"""Cluster module - Server pools and hashing."""

from roadmemcache.cluster.ring import HashingAlgorithm
from roadmemcache.cluster.config import (
    PoolConfig,
    normalize_server,
    DEFAULT_PORT,
    DEFAULT_WEIGHT,
)
from roadmemcache.cluster.pool import (
    SocketPool,
    PoolRegistry,
    get_registry,
    get_instance,
    reset_pool,
)

__all__ = [
    "HashingAlgorithm",
    "PoolConfig",
    "normalize_server",
    "DEFAULT_PORT",
    "DEFAULT_WEIGHT",
    "SocketPool",
    "PoolRegistry",
    "get_registry",
    "get_instance",
    "reset_pool",
]
