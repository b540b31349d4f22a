"""Parser for the sprites in IC0_9.WLF and their masks in MASKS.WLF."""

from typing import List

from pydantic import BaseModel, ConfigDict

from ..exceptions import EndOfDataError
from ..image import TRANSPARENT, check_coordinates
from .base import Resource, get_item

IMAGE_SIZE = 128
MASK_SIZE = 32
SPRITE_COUNT = 10


class Sprite(BaseModel):
    """
    A 16x16 sprite with four 32 byte color planes and a separate 1 bit mask
    in which a set bit marks a transparent pixel.
    """

    model_config = ConfigDict(frozen=True)

    width: int = 16
    height: int = 16
    image: bytes
    mask: bytes

    def color_at(self, x: int, y: int) -> int:
        check_coordinates(self, x, y)
        i = (y << 1) + (x >> 3)
        b = 7 - (x & 7)
        if (self.mask[i] >> b) & 1:
            return TRANSPARENT
        image = self.image
        return (
            ((image[i] >> b) & 1)
            | (((image[i + 32] >> b) & 1) << 1)
            | (((image[i + 64] >> b) & 1) << 2)
            | (((image[i + 96] >> b) & 1) << 3)
        )


class Sprites(Resource):
    sprites: List[Sprite] = []

    def __init__(self, images: bytes, masks: bytes, **kwargs):
        super().__init__(**kwargs)
        self._parse(images, masks)

    def _parse(self, images: bytes, masks: bytes):
        if len(images) < IMAGE_SIZE * SPRITE_COUNT or len(masks) < MASK_SIZE * SPRITE_COUNT:
            raise EndOfDataError("Sprite image or mask file too short")
        self.sprites = [
            Sprite(
                image=bytes(images[i * IMAGE_SIZE : (i + 1) * IMAGE_SIZE]),
                mask=bytes(masks[i * MASK_SIZE : (i + 1) * MASK_SIZE]),
            )
            for i in range(SPRITE_COUNT)
        ]

    def get_sprite(self, index: int) -> Sprite:
        return get_item(self.sprites, index, "Sprite")
