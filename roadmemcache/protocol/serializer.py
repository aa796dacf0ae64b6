"""RoadMemcache Serializer - Structured Value Serialization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Serializers turn composite values into opaque bytes. They are the first
step of the value codec; the second (binary-safe text encoding) lives in
``roadmemcache.protocol.codec``.
"""

from __future__ import annotations

import json
import logging
import pickle
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Turns cache values into bytes and back.

    The output may contain any byte; the codec makes it transport-safe.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Name the serializer is registered under."""

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Convert a value to bytes.

        Args:
            value: Value passed to ``MemCache.write``

        Returns:
            Payload bytes
        """

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Rebuild a value from payload bytes.

        May raise anything on bytes it did not produce; the codec treats
        that as "not structured" and falls back to literal coercion.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class JSONSerializer(Serializer):
    """JSON serializer.

    Readable by non-Python clients sharing the cluster. Tuples come back
    as lists, and anything else JSON lacks is stored as its ``str()``.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> bytes:
        return json.dumps(value, default=str).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class PickleSerializer(Serializer):
    """Pickle serializer, the default.

    Round-trips any picklable object, byte strings and sets included.
    Only use it on clusters no untrusted party can write to.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        """Initialize pickle serializer.

        Args:
            protocol: Pickle protocol version
        """
        self.protocol = protocol

    @property
    def format_name(self) -> str:
        return "pickle"

    def serialize(self, value: Any) -> bytes:
        return pickle.dumps(value, protocol=self.protocol)

    def deserialize(self, data: bytes) -> Any:
        return pickle.loads(data)

    def __repr__(self) -> str:
        return f"PickleSerializer(protocol={self.protocol})"


class MsgPackSerializer(Serializer):
    """MessagePack serializer.

    Compact and cross-language. Requires the msgpack package.
    """

    @property
    def format_name(self) -> str:
        return "msgpack"

    def serialize(self, value: Any) -> bytes:
        try:
            import msgpack
        except ImportError as e:
            raise ImportError("msgpack package not installed. Run: pip install msgpack") from e
        return msgpack.packb(value, use_bin_type=True)

    def deserialize(self, data: bytes) -> Any:
        try:
            import msgpack
        except ImportError as e:
            raise ImportError("msgpack package not installed. Run: pip install msgpack") from e
        return msgpack.unpackb(data, raw=False)


class SerializerRegistry:
    """Serializers by format name, as selected by ``ClientConfig.serializer``."""

    def __init__(self, default: str = "pickle"):
        self._serializers: Dict[str, Serializer] = {}
        self._default = default

        for serializer in (JSONSerializer(), PickleSerializer(), MsgPackSerializer()):
            self.register(serializer)

    def register(self, serializer: Serializer) -> None:
        """Add or replace the serializer for its format name."""
        self._serializers[serializer.format_name] = serializer

    def get(self, format_name: str) -> Serializer:
        """Look up a serializer.

        Raises:
            KeyError: If no serializer has that name
        """
        try:
            return self._serializers[format_name]
        except KeyError:
            raise KeyError(
                f"Unknown serializer format: {format_name} "
                f"(available: {', '.join(sorted(self._serializers))})"
            ) from None

    def get_default(self) -> Serializer:
        return self._serializers[self._default]

    def list_formats(self) -> List[str]:
        return list(self._serializers)


# Global registry
_registry = SerializerRegistry()


def get_serializer(format_name: Optional[str] = None) -> Serializer:
    """Get a registered serializer, or the default (pickle) for None."""
    if format_name is None:
        return _registry.get_default()
    return _registry.get(format_name)


def register_serializer(serializer: Serializer) -> None:
    """Make a custom serializer available by its format name."""
    _registry.register(serializer)


__all__ = [
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "SerializerRegistry",
    "get_serializer",
    "register_serializer",
]
