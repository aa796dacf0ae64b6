"""RoadMemcache Serde - Type-Preserving Wire Flags.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

pymemcache hands every value back as bytes. This serde records the Python
type in the item flags so that text, bytes and numbers stored verbatim
(raw writes, counters) come back as what was written. Numbers are still
stored as their decimal digits, so incr/decr work on them and memcached
keeps the flags across counter updates.
"""

from __future__ import annotations

import logging
from typing import Any, Tuple

from pymemcache.serde import FLAG_BYTES, FLAG_INTEGER, FLAG_TEXT

logger = logging.getLogger(__name__)

FLAG_FLOAT = 1 << 5

TEXT_CHARSET = "utf-8"


class TypedValueSerde:
    """pymemcache serde keeping str, bytes, int and float apart.

    Values of any other type are stored as their ``str()``. Items with
    flags this serde did not write (other clients) come back as bytes.
    """

    def serialize(self, key: Any, value: Any) -> Tuple[bytes, int]:
        if isinstance(value, bytes):
            return value, FLAG_BYTES
        if isinstance(value, bool):
            return str(value).encode(TEXT_CHARSET), FLAG_TEXT
        if isinstance(value, int):
            return str(value).encode("ascii"), FLAG_INTEGER
        if isinstance(value, float):
            return repr(value).encode("ascii"), FLAG_FLOAT
        return str(value).encode(TEXT_CHARSET), FLAG_TEXT

    def deserialize(self, key: Any, value: bytes, flags: int) -> Any:
        try:
            if flags == FLAG_TEXT:
                return value.decode(TEXT_CHARSET)
            if flags == FLAG_INTEGER:
                return int(value)
            if flags == FLAG_FLOAT:
                return float(value)
        except ValueError as e:
            # UnicodeDecodeError is a ValueError too.
            logger.debug(f"Item {key!r} does not match its flags {flags}: {e}")
        return value

    def __repr__(self) -> str:
        return "TypedValueSerde()"


__all__ = ["TypedValueSerde", "FLAG_FLOAT", "TEXT_CHARSET"]
