"""Protocol module - Serialization and value codec."""

from roadmemcache.protocol.serializer import (
    Serializer,
    JSONSerializer,
    PickleSerializer,
    MsgPackSerializer,
    get_serializer,
    register_serializer,
)
from roadmemcache.protocol.serde import TypedValueSerde
from roadmemcache.protocol.codec import (
    ValueCodec,
    MARSHALLING_CHARSET,
    coerce_literal,
)

__all__ = [
    "Serializer",
    "JSONSerializer",
    "PickleSerializer",
    "MsgPackSerializer",
    "get_serializer",
    "register_serializer",
    "ValueCodec",
    "MARSHALLING_CHARSET",
    "coerce_literal",
    "TypedValueSerde",
]
