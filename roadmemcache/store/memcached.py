"""RoadMemcache Memcached Store - Collaborator Adapter.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pymemcache.exceptions import MemcacheError as TransportError

from roadmemcache.cluster.pool import SocketPool

logger = logging.getLogger(__name__)


class MemcachedStore:
    """Memcached operations over a shared socket pool.

    Keys and values arrive here already namespaced and encoded. Errors
    from pymemcache propagate unchanged; there are no retries at this
    layer.

    The client is looked up on the pool for every call so that a pool
    reset is picked up by every store sharing it.

    Example:
        store = MemcachedStore(get_instance("default"))
        store.set("key", "value")
        store.get("key")  # b"value"
    """

    def __init__(self, pool: SocketPool):
        """Initialize store.

        Args:
            pool: Initialized socket pool
        """
        self._pool = pool

    @property
    def pool(self) -> SocketPool:
        """Get the underlying pool."""
        return self._pool

    def get(self, key: str) -> Optional[bytes]:
        """Get raw value by key.

        Args:
            key: Wire key

        Returns:
            Stored bytes or None
        """
        return self._pool.client.get(key)

    def get_multi(self, keys: List[str]) -> Dict[str, Any]:
        """Get raw values for several keys in one batch.

        Args:
            keys: Wire keys

        Returns:
            Dict of key -> bytes for found keys
        """
        if not keys:
            return {}
        return self._pool.client.get_many(keys)

    def set(self, key: str, value: Any, expiry: Optional[int] = None) -> bool:
        """Store unconditionally.

        Args:
            key: Wire key
            value: Wire value
            expiry: Absolute unix timestamp, or None for no expiry

        Returns:
            True if stored
        """
        if expiry is None:
            return self._pool.client.set(key, value)
        return self._pool.client.set(key, value, expire=expiry)

    def add(self, key: str, value: Any, expiry: Optional[int] = None) -> bool:
        """Store only if the key does not exist."""
        if expiry is None:
            return self._pool.client.add(key, value)
        return self._pool.client.add(key, value, expire=expiry)

    def replace(self, key: str, value: Any, expiry: Optional[int] = None) -> bool:
        """Store only if the key already exists."""
        if expiry is None:
            return self._pool.client.replace(key, value)
        return self._pool.client.replace(key, value, expire=expiry)

    def delete(self, key: str) -> bool:
        """Delete key.

        Returns:
            True if a value was removed
        """
        return self._pool.client.delete(key)

    def key_exists(self, key: str) -> bool:
        """Check if key exists."""
        return self._pool.client.get(key) is not None

    def incr(self, key: str, amount: int = 1) -> Any:
        """Increment a counter. Returns the raw collaborator response."""
        return self._pool.client.incr(key, amount)

    def decr(self, key: str, amount: int = 1) -> Any:
        """Decrement a counter. Returns the raw collaborator response."""
        return self._pool.client.decr(key, amount)

    def flush_all(self) -> None:
        """Invalidate every item on every server."""
        self._pool.client.flush_all()

    def stats(self) -> Dict[str, Dict[Any, Any]]:
        """Get raw statistics per server.

        Servers that do not answer are left out, the same way they are
        left out of key distribution.

        Returns:
            Dict of "host:port" -> raw stats
        """
        result: Dict[str, Dict[Any, Any]] = {}
        for server, client in list(self._pool.client.clients.items()):
            try:
                result[server] = client.stats()
            except (OSError, TransportError) as e:
                logger.warning(f"Stats unavailable from {server}: {e}")
        return result

    def alive_servers(self) -> List[str]:
        """List servers that answer a stats request."""
        answered = self.stats()
        return [server for server in self._pool.servers if server in answered]

    def __repr__(self) -> str:
        return f"MemcachedStore(pool={self._pool.name!r}, servers={self._pool.servers})"


__all__ = ["MemcachedStore"]
