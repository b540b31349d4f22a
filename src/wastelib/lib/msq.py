"""MSQ block headers ("msq" followed by a disk digit) and block scanning."""

import logging
from typing import Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict

from .exceptions import FormatError
from .reader import BitReader, ByteSource

logger = logging.getLogger(__name__)

MSQ_MAGIC = b"msq"
DISKS = (0, 1)


class MsqBlock(BaseModel):
    """Location of a block inside a file, including its msq header."""

    model_config = ConfigDict(frozen=True)

    offset: int
    size: int


def read_msq_header(reader: BitReader, disks: Iterable[int] = DISKS, ascii_disk: bool = True) -> int:
    """
    Reads "msq" plus the disk number and returns the disk number. The game
    files store the disk as an ASCII digit, the compressed blocks of the
    other files as a plain byte.
    """
    magic = reader.read_uint8s(3)
    if magic != MSQ_MAGIC:
        raise FormatError(f"Invalid msq header: {magic!r}")
    disks = tuple(disks)
    if ascii_disk:
        disk_char = reader.read_char()
        if not disk_char.isdigit() or int(disk_char) not in disks:
            raise FormatError(f"Invalid msq disk number: {disk_char!r}")
        return int(disk_char)
    disk = reader.read_uint8()
    if disk not in disks:
        raise FormatError(f"Invalid msq disk number: {disk}")
    return disk


def read_sized_msq_header(reader: BitReader, disks: Iterable[int] = DISKS) -> Tuple[int, int]:
    """Reads the u32 size preceding a compressed block header. Returns (size, disk)."""
    size = reader.read_uint32()
    return size, read_msq_header(reader, disks, ascii_disk=False)


def scan_msq_blocks(data: ByteSource) -> Tuple[int, List[MsqBlock]]:
    """
    Splits a file starting with an msq header into blocks at every further
    occurrence of the same msq header. Returns (disk, blocks).
    """
    view = memoryview(data)
    disk = read_msq_header(BitReader(view))
    marker = MSQ_MAGIC + str(disk).encode("ascii")
    raw = view.tobytes()
    blocks = []
    start = 0
    pos = raw.find(marker, 4)
    while pos >= 0:
        blocks.append(MsqBlock(offset=start, size=pos - start))
        start = pos
        pos = raw.find(marker, pos + 4)
    blocks.append(MsqBlock(offset=start, size=len(raw) - start))
    logger.debug(f"Found {len(blocks)} msq{disk} blocks")
    return disk, blocks
