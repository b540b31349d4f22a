"""Tests for the EXEPACK unpacker."""

import struct

import pytest

from wastelib.lib.exceptions import CorruptDataError, EndOfDataError, FormatError
from wastelib.lib.exepack import unpack_data, unpack_exe

from encoders import build_exepack


def test_unpack_fill_and_copy():
    """One copy and one fill command unpack into the exact executable."""
    result = unpack_exe(build_exepack(b"HELLO!!!"))

    header = struct.pack(
        "<14H", 0x5A4D, 16, 2, 3, 32, 8, 0xFFFF, 0x0020, 0x0200, 0, 0x1234, 0x0010, 28, 0
    )
    relocations = struct.pack("<6H", 0x10, 0, 0x20, 0, 0x30, 0x1000)
    expected = header + relocations + bytes(512 - 40) + b"HELLO!!!" + bytes(8)
    assert result == expected


def test_declared_size_matches_output():
    result = unpack_exe(build_exepack(bytes(range(200)), fill=0x55))
    last_page, pages = struct.unpack_from("<2H", result, 2)
    assert (pages - 1) * 512 + last_page == len(result)
    header_size = struct.unpack_from("<H", result, 8)[0] * 16
    assert result[header_size:] == bytes(range(200)) + b"\x55" * 8


def test_relocations():
    """Each section of the packed table addresses the next 64K segment."""
    relocations = ((0, (0x100,)), (1, (0x2, 0x4)))
    result = unpack_exe(build_exepack(b"x" * 16, relocations=relocations))
    assert struct.unpack_from("<H", result, 6)[0] == 3
    assert struct.unpack_from("<6H", result, 28) == (0x100, 0, 0x2, 0x1000, 0x4, 0x1000)


def test_empty_section_ends_relocations():
    relocations = ((0, (0x100,)), (1, ()), (2, (0x2,)))
    result = unpack_exe(build_exepack(b"x" * 16, relocations=relocations))
    assert struct.unpack_from("<H", result, 6)[0] == 1


def test_unpack_data_directly():
    src = b"HELLO!!!" + bytes([8, 0, 0xB3, 0x00, 8, 0, 0xB0, 0xFF])
    assert unpack_data(src, 16) == b"HELLO!!!" + bytes(8)


def test_unknown_command():
    src = bytes([0, 1, 0, 0xB4])
    with pytest.raises(CorruptDataError):
        unpack_data(src, 16)


def test_unknown_command_before_length():
    """The command byte is checked before its length is read."""
    with pytest.raises(CorruptDataError):
        unpack_data(bytes([0x42]), 16)


def test_output_underflow():
    src = bytes([0x00, 0x20, 0x00, 0xB1])
    with pytest.raises(CorruptDataError):
        unpack_data(src, 16)


def test_missing_final_command():
    """Running past the start of the packed body is corrupt data."""
    with pytest.raises(CorruptDataError):
        unpack_data(bytes([0x00, 4, 0, 0xB0]), 16)


def test_not_an_exe():
    data = bytearray(build_exepack(b"HELLO!!!"))
    data[0:2] = b"ZM"
    with pytest.raises(FormatError):
        unpack_exe(bytes(data))


def test_not_exepack():
    data = bytearray(build_exepack(b"HELLO!!!"))
    # Stub signature is the last word of the 18 byte stub header
    stub = 32 + 16
    data[stub + 16 : stub + 18] = b"\0\0"
    with pytest.raises(FormatError):
        unpack_exe(bytes(data))


def test_truncated_file():
    with pytest.raises(EndOfDataError):
        unpack_exe(b"MZ")
    with pytest.raises(EndOfDataError):
        unpack_exe(build_exepack(b"HELLO!!!")[:60])
