"""Wire framing: a 4-byte head with a big-endian body size, then the body."""

from __future__ import annotations

import struct

HEAD_SIZE = 4
MAX_BODY_SIZE = 1024
_MAX_ENCODED = 2**31 - 1
_MAX_FRAMED = 0xFFFF


class PacketTooLargeError(ValueError):
    """Raised when data does not fit the size a packet allows."""


def encode(text: str) -> bytes:
    """Encode text as UTF-8 bytes for sending."""
    data = text.encode("utf-8")
    if len(data) > _MAX_ENCODED:
        raise PacketTooLargeError("buffer size is too large")
    return data


def decode(data: bytes) -> str:
    """Decode received UTF-8 bytes back to text."""
    return bytes(data).decode("utf-8")


def frame(payload: bytes) -> bytes:
    """Prefix payload with its head: two bytes of size in network order, two of padding."""
    if len(payload) > _MAX_FRAMED:
        raise PacketTooLargeError(f"payload of {len(payload)} bytes does not fit a packet")
    return struct.pack(">H2x", len(payload)) + bytes(payload)


def body_size(head: bytes) -> int:
    """Read the body size from a packet head, refusing bodies over the limit."""
    if len(head) != HEAD_SIZE:
        raise ValueError(f"packet head must be {HEAD_SIZE} bytes, got {len(head)}")
    (size,) = struct.unpack(">H", bytes(head[:2]))
    if size > MAX_BODY_SIZE:
        raise PacketTooLargeError(f"packet body of {size} bytes exceeds {MAX_BODY_SIZE}")
    return size