"""Parser for the ALLHTDS1 and ALLHTDS2 tileset files."""

import logging
from typing import List

from ..huffman import decode_huffman
from ..image import PicImage
from ..reader import BitReader
from ..msq import read_sized_msq_header
from ..vxor import decode_vxor
from .base import Resource, get_item

logger = logging.getLogger(__name__)

TILE_WIDTH = 16
TILE_HEIGHT = 16
TILE_SIZE = TILE_WIDTH * TILE_HEIGHT // 2


class Tileset(Resource):
    """
    One compressed block of 16x16 tiles. Every tile is delta encoded on its
    own with a row width of 8 bytes.
    """

    disk: int = 0
    tiles: List[PicImage] = []

    def __init__(self, reader: BitReader, **kwargs):
        super().__init__(**kwargs)
        self._parse(reader)

    def _parse(self, reader: BitReader):
        size, self.disk = read_sized_msq_header(reader)
        data = decode_huffman(reader, size)
        self.tiles = [
            PicImage(
                width=TILE_WIDTH,
                height=TILE_HEIGHT,
                data=decode_vxor(data, TILE_WIDTH // 2, TILE_SIZE, offset),
            )
            for offset in range(0, (size >> 7) * TILE_SIZE, TILE_SIZE)
        ]
        logger.debug(f"Read tileset with {len(self.tiles)} tiles from disk {self.disk}")

    def get_tile(self, index: int) -> PicImage:
        return get_item(self.tiles, index, "Tile")


class Tilesets(Resource):
    tilesets: List[Tileset] = []

    def __init__(self, *files: bytes, **kwargs):
        super().__init__(**kwargs)
        for data in files:
            self._parse(data)

    def _parse(self, data: bytes):
        reader = BitReader(data)
        while reader.has_data():
            self.tilesets.append(Tileset(reader))

    def get_tileset(self, index: int) -> Tileset:
        return get_item(self.tilesets, index, "Tileset")

    @classmethod
    def from_files(cls, *files: bytes) -> "Tilesets":
        return cls(*files)
