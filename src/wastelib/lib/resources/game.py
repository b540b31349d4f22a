"""Parser for the GAME1 and GAME2 files holding the encrypted game maps."""

import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..cipher import RotatingXorCipher
from ..exceptions import FormatError, OutOfRangeError
from ..huffman import decode_huffman
from ..msq import MsqBlock, read_msq_header, read_sized_msq_header, scan_msq_blocks
from ..reader import BitReader
from ..strings import decode_string_groups
from .base import Resource, get_item
from .exe import ExeImage
from .records import (
    MAP_INFO_SIZE,
    MOB_SIZE,
    ActionClass,
    Character,
    MapInfo,
    Mob,
    read_character,
    read_map_info,
    read_mob,
)

logger = logging.getLogger(__name__)

# "msq" + disk digit + two cipher seed bytes
MAP_HEADER_SIZE = 6
ACTION_CLASS_COUNT = 16
DIRECTORY_SIZE = (5 + ACTION_CLASS_COUNT) * 2


class CentralDirectory(BaseModel):
    """
    Section offsets of a map, relative to the start of the decrypted data.
    """

    model_config = ConfigDict(frozen=True)

    strings_offset: int
    monster_names_offset: int
    monster_data_offset: int
    action_class_offsets: List[int] = Field(..., description="16 action class master offsets")
    nibble6_offset: int
    npc_offset: int


def read_central_directory(reader: BitReader) -> CentralDirectory:
    return CentralDirectory(
        strings_offset=reader.read_uint16(),
        monster_names_offset=reader.read_uint16(),
        monster_data_offset=reader.read_uint16(),
        action_class_offsets=reader.read_uint16s(ACTION_CLASS_COUNT),
        nibble6_offset=reader.read_uint16(),
        npc_offset=reader.read_uint16(),
    )


class MapTile(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_class: ActionClass
    action: int
    image: int


class GameMap(BaseModel):
    """
    A decoded map. The grids are stored row by row with ``map_size``
    entries per row.
    """

    model_config = ConfigDict(frozen=True)

    disk: int
    map_size: int
    action_classes: bytes
    actions: bytes
    directory: CentralDirectory
    info: MapInfo
    monsters: List[Mob]
    npcs: List[Character]
    strings: List[List[str]]
    tiles: bytes

    def _index(self, x: int, y: int) -> int:
        if x < 0 or y < 0 or x >= self.map_size or y >= self.map_size:
            raise OutOfRangeError(f"Map position ({x}, {y}) outside {self.map_size}x{self.map_size} map")
        return y * self.map_size + x

    def get_action_class(self, x: int, y: int) -> ActionClass:
        return ActionClass(self.action_classes[self._index(x, y)])

    def get_action(self, x: int, y: int) -> int:
        return self.actions[self._index(x, y)]

    def get_tile(self, x: int, y: int) -> MapTile:
        index = self._index(x, y)
        return MapTile(
            action_class=ActionClass(self.action_classes[index]),
            action=self.actions[index],
            image=self.tiles[index],
        )

    def get_string(self, string_id: int) -> str:
        """Looks up a string by its id, four strings per group."""
        group = get_item(self.strings, string_id >> 2, "String group")
        return get_item(group, string_id & 3, "String")


def read_action_classes(reader: BitReader, map_size: int) -> bytes:
    """Expands the nibble grid, high nibble first."""
    packed = reader.read_uint8s(map_size * map_size // 2)
    result = bytearray()
    for value in packed:
        result.append(value >> 4)
        result.append(value & 0x0F)
    return bytes(result)


def read_monsters(data: bytes, directory: CentralDirectory) -> List[Mob]:
    names_offset = directory.monster_names_offset
    data_offset = directory.monster_data_offset
    if not names_offset or data_offset <= names_offset or data_offset > len(data):
        return []
    names_reader = BitReader(data, names_offset, data_offset - names_offset)
    names = []
    while names_reader.has_data():
        names.append(names_reader.read_null_string())
    reader = BitReader(data, data_offset)
    return [read_mob(reader, name) for name in names if reader.has_data(MOB_SIZE)]


def read_npcs(data: bytes, directory: CentralDirectory) -> List[Character]:
    """
    Reads the NPC section: a table of u16 pointers relative to the section
    start, the first of which also gives the table size.
    """
    offset = directory.npc_offset
    if not offset or offset >= len(data):
        return []
    reader = BitReader(data, offset)
    count = reader.read_uint16() // 2
    reader.seek(0)
    pointers = reader.read_uint16s(min(count, reader.byte_length // 2))
    npcs = []
    for pointer in pointers:
        if pointer + 256 > reader.byte_length:
            break
        reader.seek(pointer)
        npcs.append(read_character(reader))
    return npcs


def read_strings(data: bytes, directory: CentralDirectory) -> List[List[str]]:
    offset = directory.strings_offset
    if not offset or offset >= len(data):
        return []
    return decode_string_groups(data, offset, len(data) - offset)


def read_tile_map(reader: BitReader, map_size: int) -> bytes:
    size, _ = read_sized_msq_header(reader)
    if size != map_size * map_size:
        raise FormatError(f"Tile map of {size} bytes does not match map size {map_size}")
    return decode_huffman(reader, size)


def read_game_map(data: bytes, offset: int, map_size: int, tile_map_offset: int) -> GameMap:
    """
    Reads the map starting at ``offset``. ``map_size`` and
    ``tile_map_offset`` (relative to ``offset``) are not stored in the map
    itself and come from the executable.
    """
    reader = BitReader(data, offset)
    disk = read_msq_header(reader)
    cipher = RotatingXorCipher(reader)

    layout_size = map_size * map_size * 3 // 2 + DIRECTORY_SIZE + MAP_INFO_SIZE
    encrypted_size = tile_map_offset - MAP_HEADER_SIZE
    if encrypted_size < layout_size:
        raise FormatError(
            f"Tile map offset {tile_map_offset} leaves no room for a {map_size}x{map_size} map"
        )
    plain = cipher.read_bytes(encrypted_size)

    header = BitReader(plain)
    action_classes = read_action_classes(header, map_size)
    actions = header.read_uint8s(map_size * map_size)
    directory = read_central_directory(header)
    info = read_map_info(header)

    tiles = read_tile_map(reader, map_size)
    game_map = GameMap(
        disk=disk,
        map_size=map_size,
        action_classes=action_classes,
        actions=actions,
        directory=directory,
        info=info,
        monsters=read_monsters(plain, directory),
        npcs=read_npcs(plain, directory),
        strings=read_strings(plain, directory),
        tiles=tiles,
    )
    logger.debug(
        f"Read {map_size}x{map_size} map with {len(game_map.monsters)} monsters "
        f"and {len(game_map.strings)} string groups"
    )
    return game_map


class GameFile(Resource):
    """
    A GAME1 or GAME2 file: a sequence of msq blocks, the first of which are
    the maps of the disk.
    """

    disk: int = 0
    blocks: List[MsqBlock] = []
    _data: bytes = PrivateAttr(b"")

    def __init__(self, data: bytes, **kwargs):
        super().__init__(**kwargs)
        self._data = bytes(data)
        self.disk, self.blocks = scan_msq_blocks(self._data)

    def get_block(self, index: int) -> MsqBlock:
        return get_item(self.blocks, index, "Block")

    def read_map_at(self, offset: int, map_index: int, exe: ExeImage) -> GameMap:
        return read_game_map(
            self._data,
            offset,
            exe.get_map_size(self.disk, map_index),
            exe.get_tile_map_offset(self.disk, map_index),
        )

    def read_map(self, map_index: int, exe: ExeImage) -> GameMap:
        return self.read_map_at(self.get_block(map_index).offset, map_index, exe)

    def read_maps(self, exe: ExeImage, count: Optional[int] = None) -> List[GameMap]:
        """Reads the first ``count`` blocks (all blocks by default) as maps."""
        if count is None:
            count = len(self.blocks)
        return [self.read_map(i, exe) for i in range(count)]

    def decrypt_block(self, index: int) -> bytes:
        """
        Decrypts a block whose encrypted length is unknown, stopping where
        the running checksum reaches the value given by the seed bytes.
        """
        block = self.get_block(index)
        reader = BitReader(self._data, block.offset, block.size)
        read_msq_header(reader, disks=(self.disk,))
        return RotatingXorCipher(reader).read_until_checksum()
