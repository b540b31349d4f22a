"""
Decoder for the dictionary compressed string tables.

A table starts with a 60 character dictionary followed by a table of u16
pointers (relative to the end of the dictionary). Each pointer addresses a
group of up to four strings stored as 5 bit codes, least significant bit
first. Code 0x1F selects the upper half of the dictionary for the next
character, 0x1E uppercases it, and a dictionary NUL ends the string.
"""

import logging
from typing import List, Optional

from .reader import BitReader, ByteSource

logger = logging.getLogger(__name__)

DICTIONARY_SIZE = 60
STRINGS_PER_GROUP = 4
CODE_HIGH = 0x1F
CODE_UPPER = 0x1E


def read_packed_string(reader: BitReader, dictionary: str) -> Optional[str]:
    """Reads one string, or returns None if the data ends before its NUL."""
    chars = []
    upper = False
    high = False
    while reader.has_data(0, 5):
        index = reader.read_bits(5, reverse=True)
        if index == CODE_HIGH:
            high = True
        elif index == CODE_UPPER:
            upper = True
        else:
            char = dictionary[index + (CODE_UPPER if high else 0)]
            if char == "\0":
                return "".join(chars)
            chars.append(char.upper() if upper else char)
            upper = False
            high = False
    return None


def only_padding_left(reader: BitReader) -> bool:
    """
    True when less than a byte remains and all of it is zero, which is the
    padding after the last string of a table rather than another string.
    """
    remaining = (reader.byte_length - reader.byte_index) * 8 - reader.bit_index
    if remaining >= 8:
        return False
    if remaining <= 0:
        return True
    byte, bit = reader.byte_index, reader.bit_index
    value = reader.read_bits(remaining)
    reader.seek(byte, bit)
    return value == 0


def read_pointers(reader: BitReader, size: int) -> List[int]:
    """
    Reads the group pointer table. The first pointer also tells the size of
    the table, since the first group follows directly after it.
    """
    pointers = []
    count = 1
    limit = size - DICTIONARY_SIZE
    index = 0
    while index < count and reader.has_data(2):
        pointer = reader.read_uint16()
        if index == 0:
            count = pointer >> 1
        if pointer < limit:
            count = min(count, pointer >> 1)
            pointers.append(pointer)
        index += 1
    return pointers


def decode_string_groups(data: ByteSource, offset: int = 0, size: Optional[int] = None) -> List[List[str]]:
    """
    Decodes a string table into its groups. Empty strings are kept so that a
    string id ``group * 4 + index`` keeps addressing the right entry.
    """
    reader = BitReader(data, offset, size)
    size = reader.byte_length
    dictionary = reader.read_string(DICTIONARY_SIZE)
    pointers = read_pointers(reader, size)
    groups = []
    for pointer in pointers:
        reader.seek(DICTIONARY_SIZE + pointer)
        group = []
        while len(group) < STRINGS_PER_GROUP and not only_padding_left(reader):
            string = read_packed_string(reader, dictionary)
            if string is None:
                break
            group.append(string)
        groups.append(group)
    logger.debug(f"Decoded {len(groups)} string groups")
    return groups


def read_strings(data: ByteSource, offset: int = 0, size: Optional[int] = None) -> List[str]:
    """Flattens a string table into its non-empty strings."""
    return [
        string
        for group in decode_string_groups(data, offset, size)
        for string in group
        if string
    ]
