"""Shared fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

FakeHashClient stands in for pymemcache's HashClient: it keeps items in a
dict, honours absolute and negative expiry, and answers incr/decr and
stats the way a memcached server does.
"""

import time

import pytest

from roadmemcache.cluster.pool import get_registry

# Relative expiries above this are absolute unix timestamps.
RELATIVE_EXPIRY_LIMIT = 60 * 60 * 24 * 30


class FakeServer:
    """One fake memcached server."""

    def __init__(self, address, alive=True):
        self.address = address
        self.alive = alive

    def stats(self):
        if not self.alive:
            raise ConnectionRefusedError(f"{self.address} is down")
        # pymemcache converts most values; version stays bytes.
        return {
            b"pid": 4242,
            b"uptime": 3600,
            b"version": b"1.6.21",
            b"rusage_user": 1.25,
            b"rusage_system": 0.5,
            b"curr_items": 3,
            b"threads": 4,
            b"hash_is_expanding": False,
            b"growth_factor": 1.0,
        }


class FakeHashClient:
    """In-memory double of pymemcache.client.hash.HashClient.

    Items keep their flags, and values pass through the configured serde
    the way pymemcache applies it.
    """

    dead_servers = set()

    def __init__(self, servers, encoding="ascii", serde=None, **kwargs):
        self.kwargs = dict(kwargs, servers=servers, encoding=encoding, serde=serde)
        self.encoding = encoding
        self.serde = serde
        self.clients = {
            f"{host}:{port}": FakeServer(f"{host}:{port}", alive=f"{host}:{port}" not in self.dead_servers)
            for host, port in servers
        }
        self.items = {}
        self.calls = []
        self.closed = False

    def _store(self, key, value, expire):
        if self.serde is not None:
            data, flags = self.serde.serialize(key, value)
        else:
            data, flags = value, 0
        if not isinstance(data, bytes):
            data = str(data).encode(self.encoding)
        self.items[key] = (data, flags, self._expires_at(expire))

    def _load(self, key, item):
        data, flags = item
        if self.serde is None:
            return data
        return self.serde.deserialize(key, data, flags)

    def _expires_at(self, expire):
        if not expire:
            return None
        if expire < 0:
            return 0
        if expire > RELATIVE_EXPIRY_LIMIT:
            return expire
        return time.time() + expire

    def _live(self, key):
        item = self.items.get(key)
        if item is None:
            return None
        data, flags, expires_at = item
        if expires_at is not None and time.time() >= expires_at:
            del self.items[key]
            return None
        return data, flags

    def get(self, key):
        self.calls.append(("get", key))
        item = self._live(key)
        return None if item is None else self._load(key, item)

    def get_many(self, keys):
        self.calls.append(("get_many", tuple(keys)))
        found = {}
        for key in keys:
            item = self._live(key)
            if item is not None:
                found[key] = self._load(key, item)
        return found

    def set(self, key, value, expire=0):
        self.calls.append(("set", key, expire))
        self._store(key, value, expire)
        return True

    def add(self, key, value, expire=0):
        self.calls.append(("add", key, expire))
        if self._live(key) is not None:
            return False
        self._store(key, value, expire)
        return True

    def replace(self, key, value, expire=0):
        self.calls.append(("replace", key, expire))
        if self._live(key) is None:
            return False
        self._store(key, value, expire)
        return True

    def delete(self, key):
        self.calls.append(("delete", key))
        return self.items.pop(key, None) is not None

    def _update_counter(self, key, delta):
        item = self._live(key)
        if item is None:
            return None
        new_value = max(int(item[0]) + delta, 0)
        _, flags, expires_at = self.items[key]
        self.items[key] = (str(new_value).encode("ascii"), flags, expires_at)
        return new_value

    def incr(self, key, value):
        self.calls.append(("incr", key, value))
        return self._update_counter(key, value)

    def decr(self, key, value):
        self.calls.append(("decr", key, value))
        return self._update_counter(key, -value)

    def flush_all(self):
        self.calls.append(("flush_all",))
        self.items.clear()

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def fake_memcached():
    """Route every pool to a FakeHashClient and forget pools afterwards."""
    registry = get_registry()
    registry.shut_down_all()
    registry.set_client_factory(FakeHashClient)
    FakeHashClient.dead_servers = set()
    yield FakeHashClient
    registry.shut_down_all()
    registry.set_client_factory(None)


@pytest.fixture
def clock(monkeypatch):
    """Controllable time.time()."""

    class Clock:
        def __init__(self):
            self.now = 1_700_000_000.0

        def __call__(self):
            return self.now

        def advance(self, seconds):
            self.now += seconds

    fake = Clock()
    monkeypatch.setattr(time, "time", fake)
    return fake


@pytest.fixture
def backend():
    """Look up the FakeHashClient behind a MemCache."""

    def lookup(cache):
        return get_registry().get_instance(cache.pool_name).client

    return lookup
