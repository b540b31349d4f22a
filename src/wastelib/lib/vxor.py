"""Vertical XOR delta codec used by the planar-packed images."""

from typing import Optional

from .exceptions import OutOfRangeError


def _window_size(data, size: Optional[int], offset: int) -> int:
    if size is None:
        size = len(data) - offset
    if offset < 0 or size < 0 or offset + size > len(data):
        raise OutOfRangeError(f"Window {offset}+{size} outside data of {len(data)} bytes")
    return size


def decode_vxor(data: bytes, width: int, size: Optional[int] = None, offset: int = 0) -> bytes:
    """
    Decodes a delta encoded image: each byte is XORed with the decoded byte
    one row (``width`` bytes) above it. The first row is stored as is.
    """
    size = _window_size(data, size, offset)
    result = bytearray(data[offset : offset + size])
    for i in range(width, size):
        result[i] ^= result[i - width]
    return bytes(result)


def decode_vxor_inplace(
    data: bytearray, width: int, size: Optional[int] = None, offset: int = 0
) -> None:
    size = _window_size(data, size, offset)
    for j in range(offset, offset + size - width):
        data[j + width] ^= data[j]


def encode_vxor(data: bytes, width: int) -> bytes:
    result = bytearray(data)
    for i in range(len(data) - 1, width - 1, -1):
        result[i] ^= data[i - width]
    return bytes(result)
