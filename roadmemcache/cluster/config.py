"""RoadMemcache Pool Config - Socket Pool Settings.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import math
import re
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from pymemcache.client.base import KeepaliveOpts

from roadmemcache.cluster.ring import HashingAlgorithm, hasher_for
from roadmemcache.protocol.serde import TypedValueSerde
from roadmemcache.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 11211
DEFAULT_WEIGHT = 1
DEFAULT_POOL_NAME = "default"

# Attempts before a failing server leaves the hash ring.
FAILOVER_RETRY_ATTEMPTS = 2

_SERVER_PATTERN = re.compile(r"^(.+):(\d+)$")


def normalize_server(server: str) -> str:
    """Normalize a server address to ``host:port``.

    Args:
        server: ``host`` or ``host:port``

    Returns:
        Address with an explicit port (11211 when none is given)
    """
    if not isinstance(server, str) or not server.strip():
        raise ConfigurationError(f"Invalid server address: {server!r}")
    server = server.strip()
    if _SERVER_PATTERN.match(server):
        return server
    return f"{server}:{DEFAULT_PORT}"


def split_server(server: str) -> Tuple[str, int]:
    """Split a normalized address into host and port."""
    host, port = normalize_server(server).rsplit(":", 1)
    return host, int(port)


@dataclass
class PoolConfig:
    """Socket pool configuration.

    Durations are in milliseconds.

    Attributes:
        name: Pool name, the key of the process-wide singleton
        servers: Server addresses as ``host:port``
        weights: Per-server weights
        initial_size: Connections opened at start
        min_size: Minimum idle connections
        max_size: Maximum connections per server
        max_idle: Idle time before a connection is closed
        max_busy: Maximum time a connection may stay checked out
        maintenance_sleep: Interval between dead-server retries
        socket_timeout: Read timeout
        socket_connect_timeout: Connect timeout
        use_alive: Enable TCP keepalive
        use_failover: Route around failing servers
        use_failback: Bring dead servers back after the maintenance interval
        use_nagle: Enable Nagle's algorithm
        hashing_algorithm: Server hashing algorithm
        multithread: Share the pool between threads
    """

    name: str = DEFAULT_POOL_NAME
    servers: List[str] = field(default_factory=list)
    weights: List[int] = field(default_factory=list)
    initial_size: int = 10
    min_size: int = 5
    max_size: int = 100
    max_idle: int = 1000 * 60 * 5
    max_busy: int = 1000 * 30
    maintenance_sleep: int = 1000 * 30
    socket_timeout: int = 1000 * 3
    socket_connect_timeout: int = 1000 * 3
    use_alive: bool = False
    use_failover: bool = True
    use_failback: bool = True
    use_nagle: bool = False
    hashing_algorithm: HashingAlgorithm = HashingAlgorithm.NATIVE
    multithread: bool = True

    def __post_init__(self):
        self.servers = [normalize_server(s) for s in self.servers]
        if not self.weights:
            self.weights = [DEFAULT_WEIGHT] * len(self.servers)
        elif len(self.weights) != len(self.servers):
            raise ConfigurationError(
                "weights must match servers",
                details={"servers": len(self.servers), "weights": len(self.weights)},
            )
        self.hashing_algorithm = HashingAlgorithm.parse(self.hashing_algorithm)
        if self.max_size < 1:
            raise ConfigurationError(f"max_size must be positive, got {self.max_size}")
        if self.min_size > self.max_size:
            raise ConfigurationError(
                f"min_size ({self.min_size}) exceeds max_size ({self.max_size})"
            )

    @property
    def addresses(self) -> List[Tuple[str, int]]:
        """Servers as (host, port) tuples."""
        return [split_server(s) for s in self.servers]

    def client_kwargs(self) -> Dict[str, Any]:
        """Translate into pymemcache HashClient arguments.

        Returns:
            Keyword arguments for ``HashClient``
        """
        kwargs: Dict[str, Any] = {
            "servers": self.addresses,
            "hasher": hasher_for(self.hashing_algorithm),
            "connect_timeout": self.socket_connect_timeout / 1000,
            "timeout": self.socket_timeout / 1000,
            "no_delay": not self.use_nagle,
            "use_pooling": self.multithread,
            "retry_attempts": FAILOVER_RETRY_ATTEMPTS if self.use_failover else sys.maxsize,
            "dead_timeout": self.maintenance_sleep / 1000 if self.use_failback else math.inf,
            "ignore_exc": False,
            "default_noreply": False,
            "encoding": "utf-8",
            "serde": TypedValueSerde(),
        }
        if self.multithread:
            kwargs["max_pool_size"] = self.max_size
            kwargs["pool_idle_timeout"] = self.max_idle / 1000
        if self.use_alive:
            kwargs["socket_keepalive"] = KeepaliveOpts()
        return kwargs

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "servers": list(self.servers),
            "weights": list(self.weights),
            "initial_size": self.initial_size,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "max_idle": self.max_idle,
            "max_busy": self.max_busy,
            "maintenance_sleep": self.maintenance_sleep,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
            "use_alive": self.use_alive,
            "use_failover": self.use_failover,
            "use_failback": self.use_failback,
            "use_nagle": self.use_nagle,
            "hashing_algorithm": self.hashing_algorithm.name,
            "multithread": self.multithread,
        }


__all__ = [
    "PoolConfig",
    "normalize_server",
    "split_server",
    "DEFAULT_PORT",
    "DEFAULT_WEIGHT",
    "DEFAULT_POOL_NAME",
]
