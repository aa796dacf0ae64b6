"""RoadMemcache Client Config - Client Options and Argument Parsing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from roadmemcache.cluster.config import DEFAULT_POOL_NAME, DEFAULT_PORT, PoolConfig
from roadmemcache.cluster.ring import HashingAlgorithm
from roadmemcache.errors import ConfigurationError
from roadmemcache.metrics.instrument import CacheObserver
from roadmemcache.protocol.serializer import Serializer, get_serializer

logger = logging.getLogger(__name__)

DEFAULT_SERVER = f"localhost:{DEFAULT_PORT}"

# Loggers whose level follows ClientConfig.log_level.
COLLABORATOR_LOGGERS = ("pymemcache", "roadmemcache.cluster", "roadmemcache.store")

_BOOL_OPTIONS = (
    "readonly",
    "multithread",
    "pool_use_alive",
    "pool_use_failover",
    "pool_use_failback",
    "pool_use_nagle",
)

_INT_OPTIONS = (
    "pool_initial_size",
    "pool_min_size",
    "pool_max_size",
    "pool_max_idle",
    "pool_max_busy",
    "pool_maintenance_thread_sleep",
    "pool_socket_timeout",
    "pool_socket_connect_timeout",
)


@dataclass
class ClientConfig:
    """Client configuration.

    Durations are in milliseconds.

    Attributes:
        namespace: Prefix applied to every key
        readonly: Reject write, delete, incr and decr
        multithread: Share pooled connections between threads
        pool_name: Name of the process-wide pool to join
        pool_initial_size: Connections opened at start
        pool_min_size: Minimum idle connections
        pool_max_size: Maximum connections per server
        pool_max_idle: Idle time before a connection is closed
        pool_max_busy: Maximum time a connection may stay checked out
        pool_maintenance_thread_sleep: Interval between dead-server retries
        pool_socket_timeout: Read timeout
        pool_socket_connect_timeout: Connect timeout
        pool_use_alive: Enable TCP keepalive
        pool_use_failover: Route around failing servers
        pool_use_failback: Bring dead servers back
        pool_use_nagle: Enable Nagle's algorithm
        pool_hashing_algorithm: Server hashing algorithm
        error_handler: Called as ``handler(error, operation, key)`` when
            the collaborator raises
        log_level: Level for the collaborator loggers
        observer: Instrumentation hook
        serializer: Serializer format name or instance
    """

    namespace: Optional[str] = None
    readonly: bool = False
    multithread: bool = True
    pool_name: str = DEFAULT_POOL_NAME
    pool_initial_size: int = 10
    pool_min_size: int = 5
    pool_max_size: int = 100
    pool_max_idle: int = 1000 * 60 * 5
    pool_max_busy: int = 1000 * 30
    pool_maintenance_thread_sleep: int = 1000 * 30
    pool_socket_timeout: int = 1000 * 3
    pool_socket_connect_timeout: int = 1000 * 3
    pool_use_alive: bool = False
    pool_use_failover: bool = True
    pool_use_failback: bool = True
    pool_use_nagle: bool = False
    pool_hashing_algorithm: HashingAlgorithm = HashingAlgorithm.NATIVE
    error_handler: Optional[Callable[[BaseException, str, Any], None]] = None
    log_level: Union[int, str] = logging.WARNING
    observer: Optional[CacheObserver] = None
    serializer: Union[str, Serializer] = "pickle"

    def __post_init__(self):
        for name in _BOOL_OPTIONS:
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a bool, got {getattr(self, name)!r}")
        for name in _INT_OPTIONS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(f"{name} must be a non-negative int, got {value!r}")

        if self.namespace is not None and not isinstance(self.namespace, str):
            raise ConfigurationError(f"namespace must be a string, got {self.namespace!r}")
        if not isinstance(self.pool_name, str) or not self.pool_name:
            raise ConfigurationError(f"pool_name must be a non-empty string, got {self.pool_name!r}")
        if self.error_handler is not None and not callable(self.error_handler):
            raise ConfigurationError("error_handler must be callable")
        if self.observer is not None and not callable(getattr(self.observer, "on_operation", None)):
            raise ConfigurationError("observer must define on_operation(event)")

        self.pool_hashing_algorithm = HashingAlgorithm.parse(self.pool_hashing_algorithm)
        self.log_level = _parse_log_level(self.log_level)

    @classmethod
    def from_options(cls, options: Mapping[Any, Any]) -> "ClientConfig":
        """Build config from a mapping of option names to values.

        Args:
            options: Options keyed by name

        Returns:
            ClientConfig with defaults for missing options

        Raises:
            ConfigurationError: On unknown option names or invalid values
        """
        known = {f.name for f in fields(cls)}
        values = {str(k): v for k, v in options.items()}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown options: {sorted(unknown)}")
        return cls(**values)

    def merged(self, overrides: Mapping[str, Any]) -> "ClientConfig":
        """Return a copy with some options replaced."""
        if not overrides:
            return self
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({str(k): v for k, v in overrides.items()})
        return ClientConfig.from_options(values)

    def resolve_serializer(self) -> Serializer:
        """Get the configured serializer instance."""
        if isinstance(self.serializer, Serializer):
            return self.serializer
        try:
            return get_serializer(self.serializer)
        except KeyError as e:
            raise ConfigurationError(str(e)) from e

    def apply_log_level(self) -> None:
        """Set the level of the collaborator loggers."""
        for name in COLLABORATOR_LOGGERS:
            logging.getLogger(name).setLevel(self.log_level)


def _parse_log_level(level: Union[int, str]) -> int:
    if isinstance(level, bool):
        raise ConfigurationError(f"Invalid log_level: {level!r}")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if isinstance(resolved, int):
            return resolved
    raise ConfigurationError(f"Invalid log_level: {level!r}")


def _as_server_list(servers: Any) -> List[str]:
    if isinstance(servers, str):
        return [servers]
    if isinstance(servers, Sequence):
        servers = list(servers)
        for server in servers:
            if not isinstance(server, str):
                raise ConfigurationError(f"Server addresses must be strings, got {server!r}")
        return servers
    raise ConfigurationError(
        f"servers must be a string or a sequence of strings, got {type(servers).__name__}"
    )


def _as_config(source: Any) -> ClientConfig:
    if isinstance(source, ClientConfig):
        return source
    if isinstance(source, Mapping):
        return ClientConfig.from_options(source)
    raise ConfigurationError(
        f"options must be a mapping or ClientConfig, got {type(source).__name__}"
    )


def parse_client_args(
    args: Tuple[Any, ...],
    options: Optional[Mapping[str, Any]] = None,
) -> Tuple[List[str], ClientConfig]:
    """Parse client constructor arguments.

    Accepted forms:
        ()                              default server
        ("host:port",)                  one server
        (["h1", "h2:11212"],)           several servers
        (["h1", "h2", {options}],)      servers with trailing options
        ({options},) / (ClientConfig,)  options only
        (servers, {options})            servers and options

    Keyword options are merged over positional ones.

    Returns:
        (servers, config)

    Raises:
        ConfigurationError: On wrong arity or argument types
    """
    servers: List[str] = []
    config = ClientConfig()

    if len(args) == 1:
        arg = args[0]
        if isinstance(arg, (ClientConfig, Mapping)):
            config = _as_config(arg)
        elif isinstance(arg, str):
            servers = [arg]
        elif isinstance(arg, (list, tuple)):
            items = list(arg)
            if items and isinstance(items[-1], Mapping):
                config = _as_config(items.pop())
            servers = _as_server_list(items)
        else:
            raise ConfigurationError(
                "first argument must be a sequence, mapping, ClientConfig or string"
            )
    elif len(args) == 2:
        servers = _as_server_list(args[0])
        config = _as_config(args[1])
    elif len(args) > 2:
        raise ConfigurationError(f"wrong number of arguments ({len(args)} for 2)")

    config = config.merged(options or {})
    if not servers:
        servers = [DEFAULT_SERVER]
    return servers, config


def build_pool_config(servers: List[str], config: ClientConfig) -> PoolConfig:
    """Translate client configuration into pool settings.

    Args:
        servers: Server addresses
        config: Client configuration

    Returns:
        PoolConfig named after the client's pool
    """
    return PoolConfig(
        name=config.pool_name,
        servers=list(servers),
        initial_size=config.pool_initial_size,
        min_size=config.pool_min_size,
        max_size=config.pool_max_size,
        max_idle=config.pool_max_idle,
        max_busy=config.pool_max_busy,
        maintenance_sleep=config.pool_maintenance_thread_sleep,
        socket_timeout=config.pool_socket_timeout,
        socket_connect_timeout=config.pool_socket_connect_timeout,
        use_alive=config.pool_use_alive,
        use_failover=config.pool_use_failover,
        use_failback=config.pool_use_failback,
        use_nagle=config.pool_use_nagle,
        hashing_algorithm=config.pool_hashing_algorithm,
        multithread=config.multithread,
    )


__all__ = [
    "ClientConfig",
    "parse_client_args",
    "build_pool_config",
    "DEFAULT_SERVER",
]
