"""Tests for the vertical XOR codec."""

import pytest

from wastelib.lib.exceptions import OutOfRangeError
from wastelib.lib.vxor import decode_vxor, decode_vxor_inplace, encode_vxor

DATA = bytes((i * 37 + 11) & 0xFF for i in range(64))


def test_decode_known_values():
    assert decode_vxor(bytes([1, 2, 3, 4, 5]), 2) == bytes([1, 2, 2, 6, 7])


def test_first_row_unchanged():
    assert decode_vxor(DATA, 8)[:8] == DATA[:8]


@pytest.mark.parametrize("width", [1, 2, 8, 48, 64])
def test_encode_inverts_decode(width):
    assert encode_vxor(decode_vxor(DATA, width), width) == DATA
    assert decode_vxor(encode_vxor(DATA, width), width) == DATA


@pytest.mark.parametrize("width", [1, 3, 8])
def test_inplace_agrees_with_pure(width):
    buffer = bytearray(b"\xaa" * 3 + DATA + b"\xbb" * 2)
    decode_vxor_inplace(buffer, width, len(DATA), 3)
    assert bytes(buffer[3 : 3 + len(DATA)]) == decode_vxor(DATA, width)
    assert bytes(buffer[:3]) == b"\xaa" * 3
    assert bytes(buffer[-2:]) == b"\xbb" * 2
    assert decode_vxor(bytes(b"\xaa" * 3 + DATA), width, len(DATA), 3) == decode_vxor(DATA, width)


def test_inplace_whole_buffer():
    buffer = bytearray(DATA)
    decode_vxor_inplace(buffer, 8)
    assert bytes(buffer) == decode_vxor(DATA, 8)


def test_buffer_shorter_than_width():
    assert decode_vxor(b"\x01\x02", 8) == b"\x01\x02"


def test_window_outside_data():
    with pytest.raises(OutOfRangeError):
        decode_vxor(b"\x01\x02", 1, size=5)
    with pytest.raises(OutOfRangeError):
        decode_vxor(b"\x01\x02", 1, size=1, offset=2)
    with pytest.raises(OutOfRangeError):
        decode_vxor_inplace(bytearray(4), 2, size=3, offset=2)
