"""
wastelib.lib - Core library components

The binary decoders shared by all resource parsers.
"""

from .reader import BitReader
from .huffman import decode_huffman
from .vxor import decode_vxor, decode_vxor_inplace, encode_vxor
from .cipher import RotatingXorCipher, encrypt_rotating_xor
from .exepack import unpack_exe
from .strings import decode_string_groups, read_strings
from .image import COLOR_PALETTE, TRANSPARENT, PicImage, PixelImage, blit
from .animation import AnimationFrame, AnimationPlayer, AnimationSequence
from .exceptions import (
    CorruptDataError,
    EndOfDataError,
    FormatError,
    OutOfRangeError,
    WastelibError,
)

__all__ = [
    "BitReader",
    "decode_huffman",
    "decode_vxor",
    "decode_vxor_inplace",
    "encode_vxor",
    "RotatingXorCipher",
    "encrypt_rotating_xor",
    "unpack_exe",
    "decode_string_groups",
    "read_strings",
    "COLOR_PALETTE",
    "TRANSPARENT",
    "PicImage",
    "PixelImage",
    "blit",
    "AnimationFrame",
    "AnimationPlayer",
    "AnimationSequence",
    "WastelibError",
    "EndOfDataError",
    "OutOfRangeError",
    "FormatError",
    "CorruptDataError",
]
