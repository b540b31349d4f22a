"""Palette, pixel access and blitting for the decoded 16 color images."""

from typing import MutableSequence, Protocol, Tuple, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import OutOfRangeError

# Marker returned by color_at() for pixels that are not drawn.
TRANSPARENT = -1

# EGA palette as 0xRRGGBBAA values.
COLOR_PALETTE: Tuple[int, ...] = (
    0x000000FF,
    0x0000AAFF,
    0x00AA00FF,
    0x00AAAAFF,
    0xAA0000FF,
    0xAA00AAFF,
    0xAA5500FF,
    0xAAAAAAFF,
    0x555555FF,
    0x5555FFFF,
    0x55FF55FF,
    0x55FFFFFF,
    0xFF5555FF,
    0xFF55FFFF,
    0xFFFF55FF,
    0xFFFFFFFF,
)


@runtime_checkable
class PixelImage(Protocol):
    """Anything that can report a palette index for each of its pixels."""

    width: int
    height: int

    def color_at(self, x: int, y: int) -> int: ...


def check_coordinates(image: PixelImage, x: int, y: int) -> None:
    if x < 0 or y < 0 or x >= image.width or y >= image.height:
        raise OutOfRangeError(
            f"Pixel ({x}, {y}) outside {image.width}x{image.height} image"
        )


def to_rgba(color: int) -> Tuple[int, int, int, int]:
    """Expands a palette index into an (r, g, b, a) tuple."""
    if color == TRANSPARENT:
        return (0, 0, 0, 0)
    value = COLOR_PALETTE[color]
    return (value >> 24, (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def blit(
    image: PixelImage,
    target: MutableSequence[int],
    target_width: int,
    x: int = 0,
    y: int = 0,
) -> None:
    """
    Copies the palette indices of ``image`` into a row-major ``target``
    buffer at position (x, y). Transparent pixels leave the target untouched
    and pixels outside the target are clipped.
    """
    target_height = len(target) // target_width
    for sy in range(image.height):
        ty = y + sy
        if ty < 0 or ty >= target_height:
            continue
        for sx in range(image.width):
            tx = x + sx
            if tx < 0 or tx >= target_width:
                continue
            color = image.color_at(sx, sy)
            if color != TRANSPARENT:
                target[ty * target_width + tx] = color


def pic_color(data, width: int, x: int, y: int) -> int:
    """Two pixels per byte, the left one in the high nibble."""
    value = data[(x + y * width) >> 1]
    return value & 0x0F if x & 1 else value >> 4


class PicImage(BaseModel):
    """
    Image in the packed 4 bit layout used by tiles, the title picture, the
    ending and the portraits.
    """

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    data: bytes = Field(..., description="width * height / 2 bytes, two pixels per byte")

    def color_at(self, x: int, y: int) -> int:
        check_coordinates(self, x, y)
        return pic_color(self.data, self.width, x, y)
