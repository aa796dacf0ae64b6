"""Store module - Memcached collaborator adapter."""

from roadmemcache.store.memcached import MemcachedStore

__all__ = ["MemcachedStore"]
