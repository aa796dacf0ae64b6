"""Tests for named socket pools.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import threading

import pytest

from roadmemcache.cluster.config import PoolConfig
from roadmemcache.cluster.pool import PoolRegistry, SocketPool, get_instance, get_registry, reset_pool
from roadmemcache.errors import ConfigurationError, MemCacheError
from roadmemcache.store.memcached import MemcachedStore


class CountingFactory:
    """Client factory that counts builds."""

    def __init__(self, client_cls):
        self.client_cls = client_cls
        self.builds = 0
        self._lock = threading.Lock()

    def __call__(self, **kwargs):
        with self._lock:
            self.builds += 1
        return self.client_cls(**kwargs)


class TestSocketPool:
    """Tests for SocketPool."""

    def test_uninitialized(self):
        pool = SocketPool("p")

        assert not pool.initialized
        assert pool.servers == []
        with pytest.raises(MemCacheError, match="not initialized"):
            pool.client

    def test_initialize_requires_config(self):
        with pytest.raises(ConfigurationError):
            SocketPool("p").initialize()

    def test_initialize(self, fake_memcached):
        pool = SocketPool("p", client_factory=fake_memcached)
        pool.config = PoolConfig(name="p", servers=["cache1", "cache2"])
        pool.initialize()

        assert pool.initialized
        assert pool.servers == ["cache1:11211", "cache2:11211"]
        assert pool.client.kwargs["servers"] == [("cache1", 11211), ("cache2", 11211)]

    def test_initialize_idempotent(self, fake_memcached):
        pool = SocketPool("p", client_factory=fake_memcached)
        pool.config = PoolConfig(name="p", servers=["cache1"])
        pool.initialize()
        client = pool.client

        pool.initialize()

        assert pool.client is client

    def test_shut_down(self, fake_memcached):
        pool = SocketPool("p", client_factory=fake_memcached)
        pool.config = PoolConfig(name="p", servers=["cache1"])
        pool.initialize()
        client = pool.client

        pool.shut_down()

        assert client.closed
        assert not pool.initialized
        assert pool.config is not None
        pool.shut_down()


class TestPoolRegistry:
    """Tests for PoolRegistry."""

    def test_singleton_per_name(self):
        registry = get_registry()

        assert registry.get_instance("a") is registry.get_instance("a")
        assert registry.get_instance("a") is not registry.get_instance("b")
        assert get_instance("a") is registry.get_instance("a")
        assert "a" in registry
        assert set(registry.names()) >= {"a", "b"}

    def test_first_config_wins(self):
        registry = get_registry()
        first = registry.initialize("p", PoolConfig(name="p", servers=["cache1"]))
        second = registry.initialize("p", PoolConfig(name="p", servers=["cache2"]))

        assert first is second
        assert second.servers == ["cache1:11211"]

    def test_concurrent_initialize_builds_once(self, fake_memcached):
        factory = CountingFactory(fake_memcached)
        registry = PoolRegistry(client_factory=factory)
        barrier = threading.Barrier(8)
        pools = []

        def init(index):
            barrier.wait()
            pools.append(
                registry.initialize("shared", PoolConfig(name="shared", servers=[f"cache{index}"]))
            )

        threads = [threading.Thread(target=init, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert factory.builds == 1
        assert len({id(p) for p in pools}) == 1
        assert len(pools[0].servers) == 1

    def test_reset(self):
        registry = get_registry()
        pool = registry.initialize("p", PoolConfig(name="p", servers=["cache1"]))
        old = pool.client

        assert reset_pool("p") is pool

        assert old.closed
        assert pool.client is not old
        assert pool.servers == ["cache1:11211"]

    def test_reset_unknown(self):
        with pytest.raises(KeyError):
            get_registry().reset("nope")

    def test_reset_seen_by_stores(self):
        """Test stores sharing a pool pick up the rebuilt client."""
        pool = get_registry().initialize("p", PoolConfig(name="p", servers=["cache1"]))
        store = MemcachedStore(pool)
        store.set("key", "v")

        reset_pool("p")

        assert store.get("key") is None
        store.set("key", "w")
        assert store.get("key") == "w"

    def test_shut_down_all(self):
        registry = get_registry()
        pool = registry.initialize("p", PoolConfig(name="p", servers=["cache1"]))
        client = pool.client

        registry.shut_down_all()

        assert client.closed
        assert "p" not in registry
