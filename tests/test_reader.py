"""Tests for the bit-precise binary reader."""

import pytest

from wastelib.lib.exceptions import EndOfDataError, OutOfRangeError
from wastelib.lib.reader import BitReader

DATA = bytes([0xB3, 0x5C, 0x0F, 0xF0, 0x81, 0x7E, 0x55, 0xAA])


@pytest.mark.parametrize("count", range(1, 33))
def test_split_bit_reads_match_single_read(count):
    """Reading N bits twice equals reading 2N bits at once."""
    reader = BitReader(DATA)
    first = reader.read_bits(count)
    second = reader.read_bits(count)
    assert BitReader(DATA).read_bits(count * 2) == (first << count) | second


@pytest.mark.parametrize("count", range(1, 33))
def test_split_reversed_bit_reads_match_single_read(count):
    """Reversed reads compose with the first bits in the low positions."""
    reader = BitReader(DATA)
    first = reader.read_bits(count, reverse=True)
    second = reader.read_bits(count, reverse=True)
    assert BitReader(DATA).read_bits(count * 2, reverse=True) == first | (second << count)


def test_read_bit_order():
    reader = BitReader(bytes([0b00000110]))
    assert [reader.read_bit() for _ in range(8)] == [0, 0, 0, 0, 0, 1, 1, 0]
    reader = BitReader(bytes([0b00000110]))
    assert reader.read_bits(3, reverse=True) == 6


def test_unaligned_byte_read_stitches_bytes():
    """A byte read after 3 bits takes 5 bits of the first and 3 of the second byte."""
    reader = BitReader(bytes([0b10110011, 0b01011100]))
    assert reader.read_bits(3) == 0b101
    assert reader.read_uint8() == 0b10011010
    assert reader.byte_index == 1
    assert reader.bit_index == 3


def test_unaligned_byte_read_at_end_fails():
    reader = BitReader(bytes([0xFF]))
    reader.read_bit()
    with pytest.raises(EndOfDataError):
        reader.read_uint8()


@pytest.mark.parametrize("bits", [1, 3, 7, 9, 13])
def test_sync_moves_to_next_byte(bits):
    reader = BitReader(DATA)
    reader.read_bits(bits)
    byte_index = reader.byte_index
    reader.sync()
    assert reader.byte_index == byte_index + 1
    assert reader.bit_index == 0


def test_sync_when_aligned_does_nothing():
    reader = BitReader(DATA)
    reader.read_uint8()
    reader.sync()
    assert reader.byte_index == 1


def test_little_endian_integers():
    reader = BitReader(bytes([0x34, 0x12, 0x56, 0x34, 0x12, 0x78, 0x56, 0x34, 0x12]))
    assert reader.read_uint16() == 0x1234
    assert reader.read_uint24() == 0x123456
    assert reader.read_uint32() == 0x12345678


def test_read_uint16s():
    reader = BitReader(bytes([1, 0, 2, 0, 0xFF, 0xFF]))
    assert reader.read_uint16s(3) == [1, 2, 0xFFFF]


def test_read_uint8s_unaligned():
    reader = BitReader(bytes([0x0F, 0xF0, 0xF0]))
    reader.read_bits(4)
    assert reader.read_uint8s(2) == bytes([0xFF, 0x0F])


def test_strings():
    reader = BitReader(b"msq0abc\0def\0ab\0cdX")
    assert reader.read_string(3) == "msq"
    assert reader.read_char() == "0"
    assert reader.read_null_strings(2) == ["abc", "def"]
    assert reader.read_null_string(5) == "ab"
    assert reader.byte_index == 17


def test_null_string_without_terminator_fails():
    with pytest.raises(EndOfDataError):
        BitReader(b"abc").read_null_string()


def test_seek_normalizes_bit_overflow():
    reader = BitReader(DATA)
    reader.seek(0, 11)
    assert (reader.byte_index, reader.bit_index) == (1, 3)


def test_seek_bounds():
    reader = BitReader(bytes(4))
    reader.seek(4)
    assert not reader.has_data()
    with pytest.raises(OutOfRangeError):
        reader.seek(5)
    with pytest.raises(OutOfRangeError):
        reader.seek(4, 1)
    with pytest.raises(OutOfRangeError):
        reader.seek(-1)


def test_has_data():
    reader = BitReader(bytes(2))
    reader.read_bits(3)
    assert reader.has_data(1, 5)
    assert not reader.has_data(1, 6)
    assert not reader.has_data(2)
    assert reader.has_data(0, 13)


def test_read_past_end_fails():
    reader = BitReader(bytes([1]))
    with pytest.raises(EndOfDataError):
        reader.read_uint16()
    with pytest.raises(EndOfDataError):
        BitReader(b"").read_bit()
    with pytest.raises(EndOfDataError):
        BitReader(b"ab").read_uint8s(3)


def test_window():
    reader = BitReader(b"xxABCyy", 2, 3)
    assert reader.byte_length == 3
    assert reader.read_string(3) == "ABC"
    with pytest.raises(EndOfDataError):
        reader.read_uint8()


def test_invalid_window():
    with pytest.raises(OutOfRangeError):
        BitReader(b"abc", 4)
    with pytest.raises(OutOfRangeError):
        BitReader(b"abc", 1, 3)
