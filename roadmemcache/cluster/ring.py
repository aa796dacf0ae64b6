"""RoadMemcache Hash Ring - Server Selection Hashers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Key distribution is done by pymemcache's rendezvous hasher. The configured
algorithm only chooses the hash primitive it scores servers with.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import zlib
from enum import IntEnum
from typing import Any, Callable, Union

from pymemcache.client.murmur3 import murmur3_32
from pymemcache.client.rendezvous import RendezvousHash

from roadmemcache.errors import ConfigurationError

logger = logging.getLogger(__name__)


class HashingAlgorithm(IntEnum):
    """Server hashing algorithms.

    Values match the numeric constants older pool configurations use.
    """

    NATIVE = 0        # pymemcache's own murmur3
    OLD_COMPAT = 1    # legacy times-33 string hash
    NEW_COMPAT = 2    # CRC32
    CONSISTENT = 3    # MD5

    @classmethod
    def parse(cls, value: Union["HashingAlgorithm", int, str, None]) -> "HashingAlgorithm":
        """Resolve an algorithm from an enum member, number or name.

        Args:
            value: Algorithm selector; None means NATIVE

        Returns:
            HashingAlgorithm member

        Raises:
            ConfigurationError: If the selector is unknown
        """
        if value is None:
            return cls.NATIVE
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ConfigurationError(f"Unknown hashing algorithm: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ConfigurationError(f"Unknown hashing algorithm: {value!r}") from None
        if isinstance(value, str):
            member = _ALIASES.get(value.strip().lower())
            if member is not None:
                return member
        raise ConfigurationError(f"Unknown hashing algorithm: {value!r}")


_ALIASES = {
    "native": HashingAlgorithm.NATIVE,
    "murmur3": HashingAlgorithm.NATIVE,
    "old_compat": HashingAlgorithm.OLD_COMPAT,
    "legacy": HashingAlgorithm.OLD_COMPAT,
    "new_compat": HashingAlgorithm.NEW_COMPAT,
    "crc32": HashingAlgorithm.NEW_COMPAT,
    "consistent": HashingAlgorithm.CONSISTENT,
    "md5": HashingAlgorithm.CONSISTENT,
}


def legacy_hash(key: str, seed: int = 0) -> int:
    """Times-33 string hash used by older clients."""
    h = seed
    for char in key:
        h = (h * 33 + ord(char)) & 0xFFFFFFFF
    return h


def crc32_hash(key: str, seed: int = 0) -> int:
    """CRC32 hash, seeded by chaining."""
    return zlib.crc32(key.encode("utf-8"), seed) & 0xFFFFFFFF


def md5_hash(key: str, seed: int = 0) -> int:
    """First four bytes of the MD5 digest, little endian."""
    digest = hashlib.md5(f"{seed}:{key}".encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "little")


_HASH_FUNCTIONS: dict[HashingAlgorithm, Callable[[str, int], int]] = {
    HashingAlgorithm.NATIVE: murmur3_32,
    HashingAlgorithm.OLD_COMPAT: legacy_hash,
    HashingAlgorithm.NEW_COMPAT: crc32_hash,
    HashingAlgorithm.CONSISTENT: md5_hash,
}


def hash_function(algorithm: HashingAlgorithm) -> Callable[[str, int], int]:
    """Get the hash primitive for an algorithm."""
    return _HASH_FUNCTIONS[HashingAlgorithm.parse(algorithm)]


def hasher_for(algorithm: HashingAlgorithm) -> Callable[[], Any]:
    """Build the hasher factory pymemcache's HashClient instantiates.

    Args:
        algorithm: Hashing algorithm

    Returns:
        Zero-argument callable returning a RendezvousHash
    """
    return functools.partial(RendezvousHash, hash_function=hash_function(algorithm))


__all__ = [
    "HashingAlgorithm",
    "hash_function",
    "hasher_for",
    "legacy_hash",
    "crc32_hash",
    "md5_hash",
]
