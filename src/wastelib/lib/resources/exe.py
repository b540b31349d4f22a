"""Access to the data tables inside the unpacked WL.EXE."""

import logging
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from ..exceptions import FormatError, OutOfRangeError
from ..exepack import unpack_exe
from ..strings import decode_string_groups
from .base import Resource

logger = logging.getLogger(__name__)


class StringTable(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: int
    size: int


DEFAULT_STRING_TABLES = {
    "intro": StringTable(offset=0x17723, size=527),
    "message": StringTable(offset=0x17B5E, size=1661),
    "inventory": StringTable(offset=0x18290, size=1847),
    "create_character": StringTable(offset=0x19E6B, size=210),
    "promotion": StringTable(offset=0x1A642, size=1136),
    "library": StringTable(offset=0x1AAEC, size=277),
    "shop": StringTable(offset=0x1AC18, size=229),
    "infirmary": StringTable(offset=0x1AD0D, size=369),
}


class ExeLayout(BaseModel):
    """
    Offsets of the tables inside the unpacked executable.

    The map tables are indexed by location index: one byte per location for
    the map size and one u16 per location for the tile map offset. They have
    no default location and must be configured before maps can be resolved.
    """

    model_config = ConfigDict(frozen=True)

    string_tables: Dict[str, StringTable] = DEFAULT_STRING_TABLES
    map_sizes_offset: Optional[int] = None
    tile_map_offsets_offset: Optional[int] = None


def location_index(disk: int, map_index: int) -> int:
    """
    Index of a map in the per-location tables. Disk 0 maps land at 0x80 and
    disk 1 maps at 0x40.
    """
    return ((disk + 1) ^ 3) << 6 | map_index


class ExeImage(Resource):
    """
    The unpacked game executable together with the layout describing where
    its tables live.
    """

    data: bytes = b""
    layout: ExeLayout = ExeLayout()

    def __init__(self, data: bytes, layout: Optional[ExeLayout] = None, **kwargs):
        if layout is not None:
            kwargs["layout"] = layout
        super().__init__(**kwargs)
        self.data = unpack_exe(bytes(data))
        logger.debug(f"Unpacked executable to {len(self.data)} bytes")

    @classmethod
    def from_unpacked(cls, data: bytes, layout: Optional[ExeLayout] = None) -> "ExeImage":
        """Wraps an already unpacked executable."""
        return cls.model_construct(data=bytes(data), layout=layout or ExeLayout())

    def get_string(self, offset: int) -> str:
        """Reads a NUL terminated string at ``offset``."""
        if offset < 0 or offset > len(self.data):
            raise OutOfRangeError(f"String offset {offset:#x} outside executable")
        end = self.data.find(b"\0", offset)
        if end < 0:
            end = len(self.data)
        return self.data[offset:end].decode("latin-1")

    def get_strings(self, name: str) -> List[List[str]]:
        """Decodes the named string table into its groups."""
        table = self.layout.string_tables.get(name)
        if table is None:
            raise OutOfRangeError(f"Unknown string table: {name}")
        if table.offset + table.size > len(self.data):
            raise OutOfRangeError(f"String table {name} outside executable")
        return decode_string_groups(self.data, table.offset, table.size)

    @property
    def string_table_names(self) -> List[str]:
        return list(self.layout.string_tables)

    def _table_offset(self, name: str, disk: int, map_index: int, entry_size: int) -> int:
        base = getattr(self.layout, name)
        if base is None:
            raise FormatError(f"Executable layout has no {name}")
        if disk not in (0, 1) or map_index < 0 or map_index >= 0x40:
            raise OutOfRangeError(f"No location for disk {disk}, map {map_index}")
        offset = base + location_index(disk, map_index) * entry_size
        if offset + entry_size > len(self.data):
            raise OutOfRangeError(f"Location table entry at {offset:#x} outside executable")
        return offset

    def get_map_size(self, disk: int, map_index: int) -> int:
        return self.data[self._table_offset("map_sizes_offset", disk, map_index, 1)]

    def get_tile_map_offset(self, disk: int, map_index: int) -> int:
        offset = self._table_offset("tile_map_offsets_offset", disk, map_index, 2)
        return self.data[offset] | (self.data[offset + 1] << 8)
