"""Tests for serializers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from roadmemcache.protocol.serializer import (
    JSONSerializer,
    MsgPackSerializer,
    PickleSerializer,
    Serializer,
    SerializerRegistry,
    get_serializer,
    register_serializer,
)


class TestSerializers:
    """Tests for built-in serializers."""

    def test_pickle(self):
        """Test pickle keeps Python types."""
        serializer = PickleSerializer()
        value = {"tuple": (1, 2), "bytes": b"\x00\xff", "set": {1, 2}}

        assert serializer.deserialize(serializer.serialize(value)) == value

    def test_json(self):
        """Test JSON serializer."""
        serializer = JSONSerializer()
        data = serializer.serialize({"a": [1, 2]})

        assert data == b'{"a": [1, 2]}'
        assert serializer.deserialize(data) == {"a": [1, 2]}

    def test_msgpack(self):
        """Test msgpack serializer."""
        pytest.importorskip("msgpack")
        serializer = MsgPackSerializer()

        assert serializer.deserialize(serializer.serialize({"a": b"x"})) == {"a": b"x"}


class TestSerializerRegistry:
    """Tests for serializer lookup."""

    def test_default_is_pickle(self):
        """Test default format."""
        assert get_serializer().format_name == "pickle"

    def test_lookup(self):
        """Test lookup by name."""
        assert isinstance(get_serializer("json"), JSONSerializer)

    def test_unknown_format(self):
        """Test unknown format raises KeyError."""
        with pytest.raises(KeyError):
            get_serializer("yaml")

    def test_list_formats(self):
        """Test built-in formats are registered."""
        assert set(SerializerRegistry().list_formats()) == {"json", "pickle", "msgpack"}

    def test_register_custom(self):
        """Test custom serializers become available by name."""

        class ReprSerializer(Serializer):
            @property
            def format_name(self):
                return "test-repr"

            def serialize(self, value):
                return repr(value).encode("utf-8")

            def deserialize(self, data):
                return data.decode("utf-8")

        register_serializer(ReprSerializer())

        assert get_serializer("test-repr").serialize(5) == b"5"
