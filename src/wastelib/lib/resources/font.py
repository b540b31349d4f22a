"""Parser for the COLORF.FNT bitmap font."""

from typing import List

from pydantic import BaseModel, ConfigDict

from ..exceptions import EndOfDataError
from ..image import check_coordinates
from .base import Resource, get_item

CHAR_SIZE = 32
CHAR_COUNT = 172


class FontChar(BaseModel):
    """An 8x8 glyph stored as four 8 byte planes."""

    model_config = ConfigDict(frozen=True)

    width: int = 8
    height: int = 8
    data: bytes

    def color_at(self, x: int, y: int) -> int:
        check_coordinates(self, x, y)
        data = self.data
        bit = 7 - x
        return (
            ((data[y] >> bit) & 1)
            | (((data[y + 8] >> bit) & 1) << 1)
            | (((data[y + 16] >> bit) & 1) << 2)
            | (((data[y + 24] >> bit) & 1) << 3)
        )


class Font(Resource):
    chars: List[FontChar] = []

    def __init__(self, data: bytes, **kwargs):
        super().__init__(**kwargs)
        self._parse(data)

    def _parse(self, data: bytes):
        if len(data) < CHAR_SIZE * CHAR_COUNT:
            raise EndOfDataError(
                f"Font file has {len(data)} bytes, expected {CHAR_SIZE * CHAR_COUNT}"
            )
        self.chars = [
            FontChar(data=bytes(data[i * CHAR_SIZE : (i + 1) * CHAR_SIZE]))
            for i in range(CHAR_COUNT)
        ]

    def get_char(self, index: int) -> FontChar:
        return get_item(self.chars, index, "Font char")
