"""RoadMemcache Client - Namespaced, Serializing Memcached Client.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from roadmemcache.cache.config import ClientConfig, build_pool_config, parse_client_args
from roadmemcache.cache.namespace import make_cache_key
from roadmemcache.cache.options import WriteMode, WriteOptions, expiration, select_write_mode
from roadmemcache.cluster.pool import SocketPool, get_registry
from roadmemcache.errors import ReadonlyCacheError
from roadmemcache.metrics.instrument import CacheObserver, OperationEvent
from roadmemcache.metrics.stats import StatsRecord, normalize_stats
from roadmemcache.protocol.codec import ValueCodec
from roadmemcache.store.memcached import MemcachedStore

logger = logging.getLogger(__name__)

Options = Union[WriteOptions, Mapping[str, Any], None]

# What the server answers to incr/decr on a missing key.
NOT_FOUND_RESPONSES = frozenset({b"NOT_FOUND", b"NOT_FOUND\r\n", "NOT_FOUND", "NOT_FOUND\r\n"})


def counter_value(response: Any) -> Optional[int]:
    """Translate an incr/decr response.

    Args:
        response: Collaborator response

    Returns:
        New counter value, or None when the key does not exist
    """
    if response is None or response in NOT_FOUND_RESPONSES:
        return None
    if isinstance(response, bytes):
        response = response.strip()
    return int(response)


class MemCache:
    """Memcached client with namespacing, value encoding and read-through.

    Every instance with the same ``pool_name`` shares one process-wide
    connection pool; the first instance configures it.

    Example:
        cache = MemCache(["cache1:11211", "cache2"], {"namespace": "app"})

        cache.write("user:1", {"name": "John"}, expires_in=300)
        cache.read("user:1")                     # {"name": "John"}

        cache.fetch("report", lambda: build_report(), expires_in=60)

        cache.write("hits", 0)
        cache.incr("hits")                       # 1
    """

    def __init__(self, *args: Any, **options: Any):
        """Configure the client.

        Args:
            *args: Servers and/or options, see ``parse_client_args``
            **options: ClientConfig options

        Raises:
            ConfigurationError: On invalid arguments
        """
        servers, config = parse_client_args(args, options)
        self.config: ClientConfig = config

        config.apply_log_level()

        self._codec = ValueCodec(serializer=config.resolve_serializer())
        self._observer: CacheObserver = config.observer or CacheObserver()
        self._error_handler = config.error_handler
        self._silenced = False

        self._pool: SocketPool = get_registry().initialize(
            config.pool_name, build_pool_config(servers, config)
        )
        self._store = MemcachedStore(self._pool)

    @property
    def namespace(self) -> Optional[str]:
        """Namespace for this instance."""
        return self.config.namespace

    @property
    def pool_name(self) -> str:
        """Name of the socket pool this client uses."""
        return self.config.pool_name

    @property
    def readonly(self) -> bool:
        """Check if this client rejects updates."""
        return self.config.readonly

    @property
    def multithread(self) -> bool:
        """Multithread setting for this instance."""
        return self.config.multithread

    @property
    def silenced(self) -> bool:
        """Check if instrumentation is suppressed."""
        return self._silenced

    @property
    def servers(self) -> List[str]:
        """Servers configured on the shared pool."""
        return self._pool.servers

    def silence(self) -> "MemCache":
        """Stop notifying the observer for this instance.

        Returns:
            Self for chaining
        """
        self._silenced = True
        return self

    def read(self, key: str, options: Options = None, **overrides: Any) -> Any:
        """Read a value.

        Args:
            key: Logical key
            options: WriteOptions or mapping; only ``raw`` applies
            **overrides: Individual options

        Returns:
            Stored value, or None on a miss
        """
        opts = WriteOptions.coerce(options, **overrides)
        cache_key = self._make_key(key)
        value = self._instrument("read", key, opts, lambda: self._store.get(cache_key))
        return self._codec.decode(value, raw=opts.raw)

    def read_multi(self, keys: Iterable[str], options: Options = None, **overrides: Any) -> Dict[str, Any]:
        """Read several values in one batch.

        Args:
            keys: Logical keys
            options: WriteOptions or mapping; only ``raw`` applies

        Returns:
            Dict of logical key -> value, for hits only
        """
        opts = WriteOptions.coerce(options, **overrides)
        keys = list(keys)
        logical = {self._make_key(k): k for k in keys}

        found = self._instrument(
            "read_multi", keys, opts, lambda: self._store.get_multi(list(logical))
        )

        values: Dict[str, Any] = {}
        for cache_key, value in found.items():
            if value is None:
                continue
            values[logical.get(cache_key, cache_key)] = self._codec.decode(value, raw=opts.raw)
        return values

    def write(self, key: str, value: Any, options: Options = None, **overrides: Any) -> bool:
        """Write a value.

        Args:
            key: Logical key
            value: Value to store
            options: WriteOptions or mapping
            **overrides: Individual options, e.g. ``expires_in=60``

        Returns:
            True if the store accepted the value

        Raises:
            ReadonlyCacheError: If the client is readonly
        """
        self._check_writable("write", key)
        opts = WriteOptions.coerce(options, **overrides)

        writer = self._writer(select_write_mode(opts))
        wire_value = self._codec.encode(value, raw=opts.raw)
        cache_key = self._make_key(key)
        expiry = expiration(opts.expires_in)

        return self._instrument(
            "write", key, opts, lambda: writer(cache_key, wire_value, expiry)
        )

    def fetch(
        self,
        key: str,
        compute: Optional[Callable[[], Any]] = None,
        options: Options = None,
        **overrides: Any,
    ) -> Any:
        """Read a value, computing and storing it on a miss.

        Args:
            key: Logical key
            compute: Called once on a miss (or always with ``force``)
            options: WriteOptions or mapping
            **overrides: Individual options

        Returns:
            Cached or computed value
        """
        opts = WriteOptions.coerce(options, **overrides)
        if compute is None:
            return self.read(key, opts)

        value = None
        if not opts.force:
            value = self.read(key, opts)
        if value is not None:
            return value

        value = compute()
        self.write(key, value, opts)
        return value

    def delete(self, key: str, options: Options = None, **overrides: Any) -> bool:
        """Delete a value. Missing keys are fine.

        Returns:
            True if a value was removed

        Raises:
            ReadonlyCacheError: If the client is readonly
        """
        self._check_writable("delete", key)
        opts = WriteOptions.coerce(options, **overrides)
        cache_key = self._make_key(key)
        return self._instrument("delete", key, opts, lambda: self._store.delete(cache_key))

    def exist(self, key: str) -> bool:
        """Check if a key exists."""
        cache_key = self._make_key(key)
        return self._instrument("exist", key, None, lambda: self._store.key_exists(cache_key))

    def incr(self, key: str, amount: int = 1) -> Optional[int]:
        """Increment a counter.

        Returns:
            New value, or None if the key does not exist

        Raises:
            ReadonlyCacheError: If the client is readonly
        """
        self._check_writable("incr", key)
        cache_key = self._make_key(key)
        response = self._instrument("incr", key, amount, lambda: self._store.incr(cache_key, amount))
        return counter_value(response)

    def decr(self, key: str, amount: int = 1) -> Optional[int]:
        """Decrement a counter. Memcached stops at zero.

        Returns:
            New value, or None if the key does not exist

        Raises:
            ReadonlyCacheError: If the client is readonly
        """
        self._check_writable("decr", key)
        cache_key = self._make_key(key)
        response = self._instrument("decr", key, amount, lambda: self._store.decr(cache_key, amount))
        return counter_value(response)

    def flush_all(self) -> None:
        """Invalidate everything on every server, across all namespaces."""
        self._instrument("flush_all", None, None, self._store.flush_all)

    def stats(self) -> StatsRecord:
        """Get normalized per-server statistics.

        Returns:
            Dict of "host:port" -> metric -> value
        """
        raw = self._instrument("stats", None, None, self._store.stats)
        return normalize_stats(raw)

    def alive_servers(self) -> List[str]:
        """List configured servers that answer."""
        return self._store.alive_servers()

    def alive(self) -> bool:
        """Check if at least one server answers."""
        return bool(self.alive_servers())

    active = alive

    def reset(self) -> None:
        """Shut down and rebuild the shared pool.

        Affects every client using the same pool name.
        """
        get_registry().reset(self.pool_name)

    def _make_key(self, key: str) -> str:
        return make_cache_key(key, self.config.namespace)

    def _check_writable(self, operation: str, key: Any) -> None:
        if self.config.readonly:
            raise ReadonlyCacheError(operation, key)

    def _writer(self, mode: WriteMode) -> Callable[[str, Any, Optional[int]], bool]:
        return {
            WriteMode.CREATE_ONLY: self._store.add,
            WriteMode.REPLACE_ONLY: self._store.replace,
            WriteMode.UNCONDITIONAL: self._store.set,
        }[mode]

    def _instrument(self, operation: str, key: Any, options: Any, call: Callable[[], Any]) -> Any:
        """Run a collaborator call, reporting errors and notifying the observer."""
        if self._silenced:
            try:
                return call()
            except Exception as e:
                self._handle_error(e, operation, key)
                raise

        start = time.perf_counter()
        try:
            result = call()
        except Exception as e:
            self._handle_error(e, operation, key)
            self._notify(OperationEvent(
                operation=operation,
                key=key,
                options=options,
                duration_ms=(time.perf_counter() - start) * 1000,
                error=e,
            ))
            raise

        self._notify(OperationEvent(
            operation=operation,
            key=key,
            options=options,
            duration_ms=(time.perf_counter() - start) * 1000,
            result=result,
        ))
        return result

    def _notify(self, event: OperationEvent) -> None:
        try:
            self._observer.on_operation(event)
        except Exception as e:
            logger.error(f"Observer error: {e}")

    def _handle_error(self, error: Exception, operation: str, key: Any) -> None:
        logger.warning(f"Cache {operation} failed for {key!r}: {error!r}")
        if self._error_handler is None:
            return
        try:
            self._error_handler(error, operation, key)
        except Exception as e:
            logger.error(f"Error handler failed: {e}")

    def __repr__(self) -> str:
        return (
            f"MemCache(servers={self.servers}, namespace={self.namespace!r}, "
            f"pool_name={self.pool_name!r})"
        )


__all__ = ["MemCache", "counter_value", "NOT_FOUND_RESPONSES"]
