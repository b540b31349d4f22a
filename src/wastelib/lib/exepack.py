"""
Unpacker for DOS executables compressed with Microsoft EXEPACK.

The packed file is a regular MZ executable whose entry point is a small
unpacker stub. The stub header sits right after the packed body and is
followed by the unpacker code and a compressed relocation table. Unpacking
reads the body backwards, expanding fill and copy commands into a buffer of
the final program size, and then rebuilds an MZ header with the restored
relocation entries and the original entry point and stack.
"""

import logging
import struct
from typing import List

from pydantic import BaseModel

from .exceptions import CorruptDataError, EndOfDataError, FormatError

logger = logging.getLogger(__name__)

MZ_SIGNATURE = 0x5A4D
EXEPACK_SIGNATURE = 0x4252  # "RB"
MZ_HEADER_SIZE = 28
STUB_HEADER_SIZE = 18
# Relocation table offset inside the unpacker, after the code and the error message
RELOC_TABLE_OFFSET = 0x105 + 0x16
RELOC_SECTIONS = 16

CMD_FILL = 0xB0
CMD_COPY = 0xB2


class ExepackHeader(BaseModel):
    """
    Header of the EXEPACK unpacker stub.
    """

    real_start_offset: int
    real_start_segment: int
    mem_start: int
    unpacker_len: int
    real_stack_offset: int
    real_stack_segment: int
    dest_len: int
    skip_len: int
    signature: int
    raw_data: dict


def read_exepack_header(data: bytes, offset: int) -> ExepackHeader:
    if offset + STUB_HEADER_SIZE > len(data):
        raise EndOfDataError("EXEPACK header extends beyond end of file")
    words = struct.unpack_from("<9H", data, offset)
    parsed = {
        "real_start_offset": words[0],
        "real_start_segment": words[1],
        "mem_start": words[2],
        "unpacker_len": words[3],
        "real_stack_offset": words[4],
        "real_stack_segment": words[5],
        "dest_len": words[6],
        "skip_len": words[7],
        "signature": words[8],
    }
    return ExepackHeader(
        **parsed, raw_data={"raw": data[offset : offset + STUB_HEADER_SIZE], "parsed": parsed}
    )


def unpack_data(src: bytes, final_size: int) -> bytes:
    """
    Expands the packed body. Commands are read from the end of ``src`` and
    written from the end of the destination buffer downwards.
    """
    dst = bytearray(b"\xff" * max(final_size, len(src)))
    dst[: len(src)] = src
    src_pos = len(src) - 1
    dst_pos = final_size - 1

    def next_byte() -> int:
        nonlocal src_pos
        if src_pos < 0:
            raise CorruptDataError("EXEPACK stream ended before the final command")
        value = src[src_pos]
        src_pos -= 1
        return value

    def put_byte(value: int) -> None:
        nonlocal dst_pos
        if dst_pos < 0:
            raise CorruptDataError("EXEPACK output underflows the destination buffer")
        dst[dst_pos] = value
        dst_pos -= 1

    # Skip padding
    while src_pos >= 0 and src[src_pos] == 0xFF:
        src_pos -= 1

    while True:
        cmd = next_byte()
        op = cmd & 0xFE
        if op not in (CMD_FILL, CMD_COPY):
            raise CorruptDataError(f"Unknown EXEPACK command {cmd:#04x}")
        length = next_byte() * 0x100
        length += next_byte()
        if op == CMD_FILL:
            fill = next_byte()
            for _ in range(length):
                put_byte(fill)
        else:
            for _ in range(length):
                put_byte(next_byte())
        if cmd & 1:
            break

    return bytes(dst[:final_size])


def read_relocations(data: bytes, offset: int, size: int) -> List[int]:
    """Returns relocation entries as (segment << 16 | offset) values."""
    relocations = []
    pos = offset
    end = offset + size
    for section in range(RELOC_SECTIONS):
        if pos + 2 > end:
            raise EndOfDataError("Relocation table truncated")
        (count,) = struct.unpack_from("<H", data, pos)
        pos += 2
        if count == 0:
            break
        if pos + count * 2 > end:
            raise EndOfDataError("Relocation table truncated")
        entries = struct.unpack_from(f"<{count}H", data, pos)
        pos += count * 2
        segment = 0x1000 * section
        relocations.extend((segment << 16) | entry for entry in entries)
    return relocations


def build_header(header: ExepackHeader, relocations: List[int], body_size: int) -> bytes:
    reloc_size = len(relocations) * 4
    header_size = MZ_HEADER_SIZE + reloc_size
    paragraphs = header_size >> 4
    paragraphs = ((paragraphs >> 5) + 1) << 5
    padding = (paragraphs << 4) - header_size
    full_size = header_size + padding + body_size

    mz = struct.pack(
        "<14H",
        MZ_SIGNATURE,
        full_size % 512,
        ((full_size >> 9) + 1) & 0xFFFF,
        len(relocations),
        paragraphs,
        (full_size // 60) & 0xFFFF,
        0xFFFF,
        header.real_stack_segment,
        header.real_stack_offset,
        0,
        header.real_start_offset,
        header.real_start_segment,
        MZ_HEADER_SIZE,
        0,
    )
    table = b"".join(
        struct.pack("<HH", reloc & 0xFFFF, reloc >> 16) for reloc in relocations
    )
    return mz + table + bytes(padding)


def unpack_exe(data: bytes) -> bytes:
    """
    Unpacks an EXEPACK compressed executable and returns the rebuilt file.
    """
    if len(data) < MZ_HEADER_SIZE:
        raise EndOfDataError("File too short for an MZ header")
    words = struct.unpack_from("<14H", data, 0)
    if words[0] != MZ_SIGNATURE:
        raise FormatError("No EXE file")

    header_paragraphs = words[4]
    code_segment = words[11]
    exe_data_start = header_paragraphs * 16
    exe_len = code_segment * 16

    header = read_exepack_header(data, exe_data_start + exe_len)
    if header.signature != EXEPACK_SIGNATURE:
        raise FormatError("Not an EXEPACK file")
    if exe_data_start + exe_len > len(data):
        raise EndOfDataError("Packed body extends beyond end of file")

    final_size = header.dest_len * 16
    logger.debug(
        f"EXEPACK body {exe_len} bytes at {exe_data_start:#x}, unpacks to {final_size} bytes"
    )
    body = unpack_data(data[exe_data_start : exe_data_start + exe_len], final_size)

    unpacker_start = exe_data_start + exe_len + STUB_HEADER_SIZE
    unpacker_size = header.unpacker_len - STUB_HEADER_SIZE
    if unpacker_size < RELOC_TABLE_OFFSET or unpacker_start + unpacker_size > len(data):
        raise EndOfDataError("Unpacker stub truncated")
    relocations = read_relocations(
        data, unpacker_start + RELOC_TABLE_OFFSET, unpacker_size - RELOC_TABLE_OFFSET
    )
    logger.debug(f"Restored {len(relocations)} relocations")

    return build_header(header, relocations, final_size) + body
