"""
wastelib.lib.resources - Resource file parsers

Parsers for the individual game files, built on the core decoders.
"""

from .base import Resource
from .cursor import Cursor, Cursors
from .font import Font, FontChar
from .sprite import Sprite, Sprites
from .tileset import Tileset, Tilesets
from .title import read_title
from .ending import Ending, EndingSequence
from .portrait import Portrait, Portraits, PortraitSequence
from .exe import ExeImage, ExeLayout, location_index
from .game import GameFile, GameMap, read_game_map

__all__ = [
    "Resource",
    "Cursor",
    "Cursors",
    "Font",
    "FontChar",
    "Sprite",
    "Sprites",
    "Tileset",
    "Tilesets",
    "read_title",
    "Ending",
    "EndingSequence",
    "Portrait",
    "Portraits",
    "PortraitSequence",
    "ExeImage",
    "ExeLayout",
    "location_index",
    "GameFile",
    "GameMap",
    "read_game_map",
]
