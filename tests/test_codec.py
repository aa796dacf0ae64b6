"""Tests for value encoding.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import base64

import pytest

from roadmemcache.protocol.codec import (
    MARSHALLING_CHARSET,
    ValueCodec,
    coerce_literal,
    is_plain_number,
)
from roadmemcache.protocol.serializer import JSONSerializer


class TestValueCodec:
    """Tests for ValueCodec."""

    def test_structured_round_trip(self):
        """Test nested values survive encode/decode."""
        codec = ValueCodec()
        value = {"foo": 900, "bar": [1, 2.5, None], "nested": {"a": ("x", "y")}}

        assert codec.decode(codec.encode(value)) == value

    def test_encoded_value_is_printable_text(self):
        """Test encoded payloads are base64 text."""
        codec = ValueCodec()
        wire = codec.encode({"foo": 900})

        assert isinstance(wire, str)
        base64.b64decode(wire, validate=True)

    def test_binary_blob_round_trip(self):
        """Test bytes invalid in the charset survive."""
        codec = ValueCodec()
        blob = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x80\x81\xfe"

        with pytest.raises(UnicodeDecodeError):
            blob.decode(MARSHALLING_CHARSET)

        wire = codec.encode(blob)
        assert codec.decode(wire.encode(MARSHALLING_CHARSET)) == blob

    def test_decode_accepts_bytes_and_text(self):
        """Test both wire representations decode."""
        codec = ValueCodec()
        wire = codec.encode(["a", "b"])

        assert codec.decode(wire) == ["a", "b"]
        assert codec.decode(wire.encode("ascii")) == ["a", "b"]

    def test_numbers_stored_verbatim(self):
        """Test ints and floats are not encoded."""
        codec = ValueCodec()

        assert codec.encode(100) == 100
        assert codec.encode(1.5) == 1.5

    def test_bool_is_encoded(self):
        """Test bools keep their type."""
        codec = ValueCodec()
        wire = codec.encode(True)

        assert wire is not True
        assert codec.decode(wire) is True

    def test_none_round_trip(self):
        """Test None value decodes to None."""
        codec = ValueCodec()

        assert codec.decode(codec.encode(None)) is None

    def test_decode_miss(self):
        """Test a missing value stays None."""
        assert ValueCodec().decode(None) is None

    def test_raw_passthrough(self):
        """Test raw mode skips encoding in both directions."""
        codec = ValueCodec()

        assert codec.encode("plain text", raw=True) == "plain text"
        assert codec.decode(b"plain text", raw=True) == b"plain text"

    def test_counter_values_coerced(self):
        """Test values written by incr/decr decode as numbers."""
        codec = ValueCodec()

        assert codec.decode(b"101") == 101
        assert codec.decode(b"1234") == 1234
        assert codec.decode(b"-7") == "-7"
        assert codec.decode(b"12.5") == 12.5

    def test_foreign_text_returned(self):
        """Test undecodable text comes back unchanged."""
        codec = ValueCodec()

        assert codec.decode(b"abc") == "abc"
        assert codec.decode("hello world") == "hello world"

    def test_invalid_charset_bytes_returned(self):
        """Test undecodable bytes come back as bytes."""
        assert ValueCodec().decode(b"\xff\xfe") == b"\xff\xfe"

    def test_custom_serializer(self):
        """Test codec with JSON serializer."""
        codec = ValueCodec(serializer=JSONSerializer())
        wire = codec.encode({"name": "John"})

        assert codec.decode(wire) == {"name": "John"}
        assert b"John" in base64.b64decode(wire)


class TestCoerceLiteral:
    """Tests for literal coercion."""

    def test_float(self):
        """Test decimal with fraction becomes float."""
        assert coerce_literal("3.25") == 3.25
        assert isinstance(coerce_literal("3.0"), float)

    def test_integer(self):
        """Test digits become int."""
        assert coerce_literal("12") == 12
        assert coerce_literal(b"0") == 0

    def test_text(self):
        """Test everything else stays text."""
        assert coerce_literal("1e5") == "1e5"
        assert coerce_literal("12 apples") == "12 apples"
        assert coerce_literal(".5") == ".5"
        assert coerce_literal("") == ""

    def test_signed_stays_text(self):
        """Test only unsigned digits are coerced."""
        assert coerce_literal("-5") == "-5"
        assert coerce_literal(b"-1.5") == "-1.5"


class TestTypedWireValues:
    """Tests for values that arrive already typed."""

    def test_numbers_pass_through(self):
        codec = ValueCodec()

        assert codec.decode(42) == 42
        assert codec.decode(-5) == -5
        assert codec.decode(2.5) == 2.5

    def test_negative_int_round_trip(self):
        codec = ValueCodec()

        assert codec.decode(codec.encode(-5)) == -5


class TestIsPlainNumber:
    """Tests for the numeric fast path."""

    def test_numbers(self):
        assert is_plain_number(1)
        assert is_plain_number(-2.5)

    def test_not_numbers(self):
        assert not is_plain_number(True)
        assert not is_plain_number("1")
        assert not is_plain_number(None)
