"""RoadMemcache Socket Pool - Process-Wide Named Pools.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Every client constructed with the same pool name shares one pymemcache
HashClient. The first client to initialize a name configures it; later
clients find it initialized and leave it alone.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from pymemcache.client.hash import HashClient
from pymemcache.exceptions import MemcacheError as TransportError

from roadmemcache.cluster.config import PoolConfig
from roadmemcache.errors import ConfigurationError, MemCacheError

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


def _create_hash_client(**kwargs: Any) -> Any:
    """Default collaborator factory."""
    return HashClient(**kwargs)


class SocketPool:
    """A named pool of memcached connections.

    Wraps one pymemcache HashClient and its configuration. The pool is
    built by ``initialize`` and torn down by ``shut_down``.

    Example:
        pool = get_instance("sessions")
        with pool.lock:
            if not pool.initialized:
                pool.config = PoolConfig(name="sessions", servers=["cache1"])
                pool.initialize()
    """

    def __init__(self, name: str, client_factory: Optional[ClientFactory] = None):
        """Initialize pool handle.

        Args:
            name: Pool name
            client_factory: Builds the collaborator from PoolConfig kwargs
        """
        self.name = name
        self.config: Optional[PoolConfig] = None
        self.lock = threading.RLock()
        self._client_factory = client_factory
        self._client: Optional[Any] = None

    @property
    def initialized(self) -> bool:
        """Check if pool has been initialized."""
        return self._client is not None

    @property
    def client(self) -> Any:
        """Get the collaborator client.

        Raises:
            MemCacheError: If the pool is not initialized
        """
        client = self._client
        if client is None:
            raise MemCacheError(f"Pool {self.name!r} is not initialized")
        return client

    @property
    def servers(self) -> List[str]:
        """Configured server addresses."""
        if self.config is None:
            return []
        return list(self.config.servers)

    def initialize(self) -> None:
        """Build the collaborator client. No-op when already initialized."""
        with self.lock:
            if self._client is not None:
                return
            if self.config is None:
                raise ConfigurationError(f"Pool {self.name!r} has no configuration")

            factory = self._client_factory or _create_hash_client
            self._client = factory(**self.config.client_kwargs())
            logger.info(
                f"Pool {self.name!r} initialized with servers {self.config.servers}"
            )

    def shut_down(self) -> None:
        """Close all connections. The configuration is kept for re-initialization."""
        with self.lock:
            client, self._client = self._client, None
            if client is None:
                return
            try:
                client.close()
            except (OSError, TransportError) as e:
                logger.warning(f"Error closing pool {self.name!r}: {e}")
            logger.info(f"Pool {self.name!r} shut down")

    def __repr__(self) -> str:
        return f"SocketPool(name={self.name!r}, initialized={self.initialized})"


class PoolRegistry:
    """Registry mapping pool names to SocketPool instances.

    Lookup is guarded by a registry lock; configuration of a given pool
    is serialized by that pool's own lock, so only the first caller for
    a name builds it.
    """

    def __init__(self, client_factory: Optional[ClientFactory] = None):
        self._pools: Dict[str, SocketPool] = {}
        self._lock = threading.Lock()
        self._client_factory = client_factory

    def get_instance(self, name: str) -> SocketPool:
        """Get or create the pool registered under a name.

        Args:
            name: Pool name

        Returns:
            SocketPool (possibly not yet initialized)
        """
        with self._lock:
            pool = self._pools.get(name)
            if pool is None:
                pool = SocketPool(name, client_factory=self._client_factory)
                self._pools[name] = pool
            return pool

    def initialize(self, name: str, config: PoolConfig) -> SocketPool:
        """Initialize a pool once.

        Args:
            name: Pool name
            config: Configuration applied when the pool is not yet initialized

        Returns:
            The shared SocketPool
        """
        pool = self.get_instance(name)
        with pool.lock:
            if pool.initialized:
                logger.debug(f"Pool {name!r} already initialized, ignoring new configuration")
                return pool
            pool.config = config
            pool.initialize()
        return pool

    def reset(self, name: str) -> SocketPool:
        """Shut down and rebuild a pool. Affects every client sharing it.

        Args:
            name: Pool name

        Raises:
            KeyError: If no pool is registered under the name
        """
        with self._lock:
            pool = self._pools.get(name)
        if pool is None:
            raise KeyError(f"Unknown pool: {name}")

        with pool.lock:
            pool.shut_down()
            pool.initialize()
        logger.info(f"Pool {name!r} reset")
        return pool

    def shut_down_all(self) -> None:
        """Shut down every pool and forget them."""
        with self._lock:
            pools = list(self._pools.values())
            self._pools.clear()
        for pool in pools:
            pool.shut_down()

    def set_client_factory(self, factory: Optional[ClientFactory]) -> None:
        """Set the collaborator factory used for pools created from now on."""
        with self._lock:
            self._client_factory = factory

    def names(self) -> List[str]:
        """List registered pool names."""
        with self._lock:
            return list(self._pools.keys())

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._pools


# Global registry
_registry = PoolRegistry()


def get_registry() -> PoolRegistry:
    """Get the process-wide pool registry."""
    return _registry


def get_instance(name: str) -> SocketPool:
    """Get the process-wide pool for a name."""
    return _registry.get_instance(name)


def reset_pool(name: str) -> SocketPool:
    """Shut down and rebuild the process-wide pool for a name."""
    return _registry.reset(name)


__all__ = [
    "SocketPool",
    "PoolRegistry",
    "get_registry",
    "get_instance",
    "reset_pool",
]
