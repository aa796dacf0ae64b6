"""Cache module - Client, options and key namespacing."""

from roadmemcache.cache.namespace import make_cache_key
from roadmemcache.cache.options import (
    WriteMode,
    WriteOptions,
    select_write_mode,
    expiration,
)
from roadmemcache.cache.config import (
    ClientConfig,
    parse_client_args,
    build_pool_config,
)
from roadmemcache.cache.client import MemCache

__all__ = [
    "make_cache_key",
    "WriteMode",
    "WriteOptions",
    "select_write_mode",
    "expiration",
    "ClientConfig",
    "parse_client_args",
    "build_pool_config",
    "MemCache",
]
