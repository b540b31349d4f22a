"""Parser for the CURS mouse cursor file."""

from typing import List

from pydantic import BaseModel, ConfigDict

from ..exceptions import EndOfDataError
from ..image import TRANSPARENT, check_coordinates
from .base import Resource, get_item

CURSOR_SIZE = 256
CURSOR_COUNT = 8


class Cursor(BaseModel):
    """
    A 16x16 cursor. Every row takes four bytes per plane: two mask bytes
    and two color bytes, with the four color planes 64 bytes apart.
    """

    model_config = ConfigDict(frozen=True)

    width: int = 16
    height: int = 16
    data: bytes

    def color_at(self, x: int, y: int) -> int:
        check_coordinates(self, x, y)
        data = self.data
        i = (y << 2) + 3 - (x >> 3)
        b = 7 - (x & 7)
        if not (data[i - 2] >> b) & 1:
            return TRANSPARENT
        return (
            ((data[i] >> b) & 1)
            | (((data[i + 64] >> b) & 1) << 1)
            | (((data[i + 128] >> b) & 1) << 2)
            | (((data[i + 192] >> b) & 1) << 3)
        )


class Cursors(Resource):
    """
    The eight mouse cursors.
    """

    cursors: List[Cursor] = []

    def __init__(self, data: bytes, **kwargs):
        super().__init__(**kwargs)
        self._parse(data)

    def _parse(self, data: bytes):
        if len(data) < CURSOR_SIZE * CURSOR_COUNT:
            raise EndOfDataError(
                f"Cursor file has {len(data)} bytes, expected {CURSOR_SIZE * CURSOR_COUNT}"
            )
        self.cursors = [
            Cursor(data=bytes(data[i * CURSOR_SIZE : (i + 1) * CURSOR_SIZE]))
            for i in range(CURSOR_COUNT)
        ]

    def get_cursor(self, index: int) -> Cursor:
        return get_item(self.cursors, index, "Cursor")
