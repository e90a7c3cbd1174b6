"""
Wire codec for WireQL envelopes
JSON travels as text, MessagePack as bytes; inbound frames are sniffed by their first byte
"""

import json
from typing import Any, Dict, Union

import msgpack  # type: ignore[import-untyped]

from .exceptions import CodecError
from .types import SerializationFormat

JSON_OPEN_BRACE = 0x7B

Encoded = Union[str, bytes]


def encode(payload: Dict[str, Any], fmt: SerializationFormat) -> Encoded:
    """Encode an envelope for the wire"""
    try:
        if fmt == SerializationFormat.MSGPACK:
            return msgpack.packb(payload, use_bin_type=True)
        return json.dumps(payload, separators=(",", ":"))
    except (TypeError, ValueError, OverflowError) as e:
        raise CodecError(f"Failed to encode {fmt.value} payload: {e}")


def decode(data: Encoded, fmt: SerializationFormat) -> Dict[str, Any]:
    """Decode an envelope; the result must be a mapping"""
    try:
        if fmt == SerializationFormat.MSGPACK:
            message = msgpack.unpackb(data, raw=False)
        else:
            message = json.loads(data)
    except Exception as e:
        raise CodecError(f"Failed to decode {fmt.value} payload: {e}")

    if not isinstance(message, dict):
        raise CodecError(
            f"Expected an object in {fmt.value} payload, got {type(message).__name__}"
        )
    return message


def detect_format(frame: Encoded) -> SerializationFormat:
    """JSON when the frame is text or starts with '{', MessagePack otherwise"""
    if isinstance(frame, str):
        return SerializationFormat.JSON
    if not frame:
        raise CodecError("Cannot detect the format of an empty frame")
    if frame[0] == JSON_OPEN_BRACE:
        return SerializationFormat.JSON
    return SerializationFormat.MSGPACK


def decode_frame(frame: Encoded) -> Dict[str, Any]:
    return decode(frame, detect_format(frame))


def payload_size(encoded: Encoded) -> int:
    if isinstance(encoded, str):
        return len(encoded.encode("utf-8"))
    return len(encoded)
