"""
wastelib - Wasteland asset library for Python

A pure Python library for decoding the asset and executable formats of the
1988 DOS game Wasteland. Based on wastelib by Klaus Reimer.
"""

from .lib.resources import (
    Cursors,
    Ending,
    ExeImage,
    ExeLayout,
    Font,
    GameFile,
    Portraits,
    Sprites,
    Tilesets,
    read_title,
)
from .lib.exceptions import (
    CorruptDataError,
    EndOfDataError,
    FormatError,
    OutOfRangeError,
    WastelibError,
)

__version__ = "0.0.1"

__all__ = [
    "Cursors",
    "Ending",
    "ExeImage",
    "ExeLayout",
    "Font",
    "GameFile",
    "Portraits",
    "Sprites",
    "Tilesets",
    "read_title",
    "WastelibError",
    "EndOfDataError",
    "OutOfRangeError",
    "FormatError",
    "CorruptDataError",
]
