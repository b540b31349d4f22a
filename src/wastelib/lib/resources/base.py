"""Base class for resource file parsers."""

from typing import List

from pydantic import BaseModel

from ..exceptions import OutOfRangeError


class Resource(BaseModel):
    """
    Base class for all resource file parsers.
    """

    filename: str = ""


def get_item(items: List, index: int, kind: str):
    """Bounds checked list access raising OutOfRangeError."""
    if index < 0 or index >= len(items):
        raise OutOfRangeError(f"{kind} index {index} out of range (0-{len(items) - 1})")
    return items[index]
