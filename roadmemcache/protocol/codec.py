"""RoadMemcache Codec - Binary-Safe Value Encoding.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Structured values are serialized, then base64-encoded and carried as text
under a fixed charset. Serialized bytes are never handed to the transport
directly: byte sequences that are invalid in the charset get mangled on the
way through, which shows up as intermittent corruption of pickled dicts and
binary blobs.

Decoding assumes nothing about the writer. The stored text may come from
this codec, from an incr/decr counter, or from another client entirely, so
a failed structured decode falls through to literal coercion.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Optional, Union

from roadmemcache.protocol.serializer import PickleSerializer, Serializer

logger = logging.getLogger(__name__)

MARSHALLING_CHARSET = "utf-8"

FLOAT_PATTERN = re.compile(r"^\d+\.\d+$")
INTEGER_PATTERN = re.compile(r"^\d+$")

# Marks "structured decode did not apply"; None is a legitimate decoded value.
_UNDECODED = object()


def is_plain_number(value: Any) -> bool:
    """Numbers travel as their printable form so counters stay usable."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def coerce_literal(text: Union[str, bytes], charset: str = MARSHALLING_CHARSET) -> Any:
    """Parse a stored literal the way a foreign writer most likely meant it.

    Args:
        text: Stored text or bytes
        charset: Charset used to read bytes

    Returns:
        float for ``12.5``, int for ``12``, otherwise the text itself.
        Only unsigned digits count: ``-5`` stays text. Bytes that are not
        valid in the charset are returned unchanged.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode(charset)
        except UnicodeDecodeError:
            return text

    if FLOAT_PATTERN.match(text):
        return float(text)
    if INTEGER_PATTERN.match(text):
        return int(text)
    return text


class ValueCodec:
    """Encodes values for the wire and decodes them back.

    Example:
        codec = ValueCodec()
        wire = codec.encode({"foo": 900})
        assert codec.decode(wire) == {"foo": 900}
    """

    def __init__(
        self,
        serializer: Optional[Serializer] = None,
        charset: str = MARSHALLING_CHARSET,
    ):
        """Initialize codec.

        Args:
            serializer: Structured serializer (pickle by default)
            charset: Charset the encoded text is tagged with
        """
        self.serializer = serializer or PickleSerializer()
        self.charset = charset

    def encode(self, value: Any, raw: bool = False) -> Any:
        """Encode a value for storage.

        Args:
            value: Value to store
            raw: Store the value verbatim

        Returns:
            The wire value
        """
        if raw or is_plain_number(value):
            return value

        payload = self.serializer.serialize(value)
        return base64.b64encode(payload).decode(self.charset)

    def decode(self, wire_value: Any, raw: bool = False) -> Any:
        """Decode a stored value. Never raises.

        Args:
            wire_value: Value returned by the store
            raw: Return the value verbatim

        Returns:
            Decoded value, or None for a miss
        """
        if raw or wire_value is None or is_plain_number(wire_value):
            return wire_value

        value = self._decode_structured(wire_value)
        if value is not _UNDECODED:
            return value

        return coerce_literal(wire_value, self.charset)

    def _decode_structured(self, wire_value: Union[str, bytes]) -> Any:
        """First decode stage: base64 text back to a deserialized value."""
        try:
            if isinstance(wire_value, str):
                wire_value = wire_value.encode(self.charset)
            payload = base64.b64decode(wire_value, validate=True)
        except (binascii.Error, UnicodeEncodeError, TypeError, ValueError):
            return _UNDECODED

        if not payload:
            return _UNDECODED

        # Deserializers raise a wide range of errors on foreign input.
        try:
            return self.serializer.deserialize(payload)
        except Exception as e:
            logger.debug(f"Structured decode failed, coercing literal: {e!r}")
            return _UNDECODED

    def __repr__(self) -> str:
        return f"ValueCodec(serializer={self.serializer!r}, charset={self.charset!r})"


__all__ = [
    "ValueCodec",
    "MARSHALLING_CHARSET",
    "coerce_literal",
    "is_plain_number",
]
