"""Tests for the image resources and the pixel helpers."""

import pytest

from wastelib.lib.exceptions import EndOfDataError, FormatError, OutOfRangeError
from wastelib.lib.image import COLOR_PALETTE, TRANSPARENT, PicImage, PixelImage, blit, to_rgba
from wastelib.lib.resources.cursor import Cursor, Cursors
from wastelib.lib.resources.font import Font, FontChar
from wastelib.lib.resources.sprite import Sprites
from wastelib.lib.resources.tileset import Tilesets
from wastelib.lib.resources.title import read_title

from encoders import encode_vxor, msq_block


def make_cursor_record():
    data = bytearray(256)
    data[1] = 0x80  # mask: only (0, 0) is drawn
    data[3] = 0x80  # blue plane
    data[131] = 0x80  # red plane
    return bytes(data)


def test_cursor_pixel():
    cursor = Cursor(data=make_cursor_record())
    assert cursor.color_at(0, 0) == 5
    assert cursor.color_at(1, 0) == TRANSPARENT
    assert cursor.color_at(15, 15) == TRANSPARENT
    with pytest.raises(OutOfRangeError):
        cursor.color_at(16, 0)


def test_cursors_file():
    records = [make_cursor_record()] + [bytes(256)] * 7
    cursors = Cursors(b"".join(records))
    assert len(cursors.cursors) == 8
    assert cursors.get_cursor(0).color_at(0, 0) == 5
    assert cursors.get_cursor(7).color_at(0, 0) == TRANSPARENT
    with pytest.raises(OutOfRangeError):
        cursors.get_cursor(8)


def test_cursors_file_too_short():
    with pytest.raises(EndOfDataError):
        Cursors(bytes(2047))


def test_font_char():
    data = bytearray(32)
    data[0] = 0x80
    data[24] = 0x80
    data[8 + 7] = 0x01
    char = FontChar(data=bytes(data))
    assert char.color_at(0, 0) == 9
    assert char.color_at(7, 7) == 2
    assert char.color_at(1, 0) == 0
    with pytest.raises(OutOfRangeError):
        char.color_at(0, 8)


def test_font_file():
    font = Font(bytes(32 * 172))
    assert len(font.chars) == 172
    assert font.get_char(171).color_at(3, 3) == 0
    with pytest.raises(OutOfRangeError):
        font.get_char(172)
    with pytest.raises(EndOfDataError):
        Font(bytes(100))


def test_sprites():
    images = bytearray(128 * 10)
    masks = bytearray(b"\xff" * 32 * 10)
    # Sprite 1: pixel (8, 1) drawn with color 15
    base = 128
    i = (1 << 1) + 1
    for plane in range(4):
        images[base + i + plane * 32] = 0x80
    masks[32 + i] = 0x7F
    sprites = Sprites(bytes(images), bytes(masks))
    sprite = sprites.get_sprite(1)
    assert sprite.color_at(8, 1) == 15
    assert sprite.color_at(9, 1) == TRANSPARENT
    assert sprites.get_sprite(0).color_at(8, 1) == TRANSPARENT
    with pytest.raises(OutOfRangeError):
        sprites.get_sprite(10)
    with pytest.raises(EndOfDataError):
        Sprites(bytes(images), bytes(10))


def test_pic_image_nibbles():
    image = PicImage(width=4, height=2, data=bytes([0x12, 0x34, 0x56, 0x78]))
    assert [image.color_at(x, 0) for x in range(4)] == [1, 2, 3, 4]
    assert [image.color_at(x, 1) for x in range(4)] == [5, 6, 7, 8]
    with pytest.raises(OutOfRangeError):
        image.color_at(-1, 0)


def test_pixel_image_protocol():
    assert isinstance(PicImage(width=2, height=1, data=b"\x00"), PixelImage)
    assert isinstance(Cursor(data=bytes(256)), PixelImage)
    assert isinstance(FontChar(data=bytes(32)), PixelImage)


def test_blit_clips_and_skips_transparency():
    image = PicImage(width=2, height=2, data=bytes([0x12, 0x34]))
    target = [0] * 16
    blit(image, target, 4, 1, 1)
    assert target[5:7] == [1, 2]
    assert target[9:11] == [3, 4]
    target = [9] * 16
    blit(image, target, 4, 3, 3)
    assert target[15] == 1
    assert target.count(9) == 15

    cursor = Cursor(data=make_cursor_record())
    target = [7] * (16 * 16)
    blit(cursor, target, 16)
    assert target[0] == 5
    assert target[1:] == [7] * 255


def test_palette():
    assert len(COLOR_PALETTE) == 16
    assert to_rgba(15) == (0xFF, 0xFF, 0xFF, 0xFF)
    assert to_rgba(1) == (0x00, 0x00, 0xAA, 0xFF)
    assert to_rgba(TRANSPARENT) == (0, 0, 0, 0)


def test_title():
    pixels = bytes((i * 7) & 0xFF for i in range(288 * 128 // 2))
    title = read_title(encode_vxor(pixels, 144))
    assert (title.width, title.height) == (288, 128)
    assert title.data == pixels
    assert title.color_at(1, 0) == pixels[0] & 0x0F
    with pytest.raises(EndOfDataError):
        read_title(bytes(100))


def make_tileset(tiles, disk=0):
    return msq_block(b"".join(encode_vxor(tile, 8) for tile in tiles), disk)


def test_tilesets():
    tile1 = bytes(range(128))
    tile2 = bytes(reversed(range(128, 256)))
    data1 = make_tileset([tile1, tile2]) + make_tileset([tile2], disk=1)
    data2 = make_tileset([tile1])
    tilesets = Tilesets.from_files(data1, data2)
    assert len(tilesets.tilesets) == 3
    first = tilesets.get_tileset(0)
    assert first.disk == 0
    assert [tile.data for tile in first.tiles] == [tile1, tile2]
    assert first.get_tile(1).color_at(0, 0) == 0x0F
    assert tilesets.get_tileset(1).disk == 1
    assert tilesets.get_tileset(2).get_tile(0).data == tile1
    with pytest.raises(OutOfRangeError):
        first.get_tile(2)


def test_tileset_bad_header():
    data = bytearray(make_tileset([bytes(128)]))
    data[4:7] = b"xyz"
    with pytest.raises(FormatError):
        Tilesets(bytes(data))
