"""
Tests for the WireQL wire codec
"""

import json

import msgpack  # type: ignore[import-untyped]
import pytest  # type: ignore

from wireql_client import CodecError, SerializationFormat
from wireql_client import codec

REQUEST = {
    "op": "query",
    "query": "SELECT * FROM users WHERE id = ?",
    "values": [42, "héllo", None, 1.5, True],
    "database": "main",
}


class TestEncode:
    def test_json_is_compact_text(self) -> None:
        encoded = codec.encode({"op": "query", "values": [1]}, SerializationFormat.JSON)

        assert encoded == '{"op":"query","values":[1]}'

    def test_msgpack_is_bytes(self) -> None:
        encoded = codec.encode(REQUEST, SerializationFormat.MSGPACK)

        assert isinstance(encoded, bytes)
        assert msgpack.unpackb(encoded, raw=False) == REQUEST

    def test_json_round_trip(self) -> None:
        encoded = codec.encode(REQUEST, SerializationFormat.JSON)

        assert codec.decode(encoded, SerializationFormat.JSON) == REQUEST

    def test_msgpack_round_trip(self) -> None:
        encoded = codec.encode(REQUEST, SerializationFormat.MSGPACK)

        assert codec.decode(encoded, SerializationFormat.MSGPACK) == REQUEST
        assert codec.decode_frame(encoded) == REQUEST

    def test_binary_values_survive_msgpack(self) -> None:
        payload = {"op": "insert", "values": [b"\x00\x01\xff"]}

        decoded = codec.decode(codec.encode(payload, SerializationFormat.MSGPACK), SerializationFormat.MSGPACK)

        assert decoded["values"] == [b"\x00\x01\xff"]

    def test_unencodable_value(self) -> None:
        with pytest.raises(CodecError):  # type: ignore
            codec.encode({"values": [object()]}, SerializationFormat.JSON)


class TestDecode:
    def test_malformed_msgpack(self) -> None:
        with pytest.raises(CodecError) as exc_info:  # type: ignore
            codec.decode(b"\xc1", SerializationFormat.MSGPACK)
        assert exc_info.value.code == "CODEC_ERROR"

    def test_malformed_json(self) -> None:
        with pytest.raises(CodecError):  # type: ignore
            codec.decode("{not json", SerializationFormat.JSON)

    def test_non_object_payload(self) -> None:
        with pytest.raises(CodecError, match="Expected an object"):  # type: ignore
            codec.decode(json.dumps([1, 2]), SerializationFormat.JSON)

    def test_json_bytes(self) -> None:
        assert codec.decode(b'{"success":true}', SerializationFormat.JSON) == {"success": True}


class TestFrames:
    def test_detect_text_frame(self) -> None:
        assert codec.detect_format('{"a":1}') == SerializationFormat.JSON

    def test_detect_json_bytes(self) -> None:
        assert codec.detect_format(b'{"a":1}') == SerializationFormat.JSON

    def test_detect_msgpack(self) -> None:
        frame = msgpack.packb({"requestId": "req_1_0"})

        assert codec.detect_format(frame) == SerializationFormat.MSGPACK
        assert codec.decode_frame(frame) == {"requestId": "req_1_0"}

    def test_empty_frame(self) -> None:
        with pytest.raises(CodecError):  # type: ignore
            codec.detect_format(b"")

    def test_payload_size_counts_utf8_bytes(self) -> None:
        assert codec.payload_size("é") == 2
        assert codec.payload_size(b"abc") == 3
