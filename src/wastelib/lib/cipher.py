"""Rotating XOR stream cipher protecting the game map data."""

import logging

from .exceptions import FormatError
from .reader import BitReader

logger = logging.getLogger(__name__)

KEY_STEP = 0x1F


class RotatingXorCipher:
    """
    Decrypts a stream that starts with two seed bytes.

    The initial key is the XOR of both seeds and advances by 0x1F after every
    byte. A running 16 bit checksum (starting at zero, decremented by each
    plaintext byte) reaches the value formed by the seeds exactly at the end
    of the encrypted region.
    """

    def __init__(self, reader: BitReader):
        self.reader = reader
        e1 = reader.read_uint8()
        e2 = reader.read_uint8()
        self.key = e1 ^ e2
        self.end_checksum = e1 | (e2 << 8)
        self.checksum = 0

    @property
    def finished(self) -> bool:
        return self.checksum == self.end_checksum

    def read_byte(self) -> int:
        plain = self.reader.read_uint8() ^ self.key
        self.checksum = (self.checksum - plain) & 0xFFFF
        self.key = (self.key + KEY_STEP) & 0xFF
        return plain

    def read_bytes(self, size: int) -> bytes:
        return bytes(self.read_byte() for _ in range(size))

    def read_until_checksum(self) -> bytes:
        """Decrypts until the running checksum matches the terminator."""
        output = bytearray()
        while not self.finished:
            if not self.reader.has_data():
                raise FormatError(
                    f"Checksum {self.end_checksum:#06x} not reached after {len(output)} bytes"
                )
            output.append(self.read_byte())
        logger.debug(f"Decrypted {len(output)} checksum terminated bytes")
        return bytes(output)


def encrypt_rotating_xor(plaintext: bytes) -> bytes:
    """
    Encrypts ``plaintext`` and prepends the seed bytes, choosing them so the
    checksum terminator falls exactly after the last byte.
    """
    checksum = -sum(plaintext) & 0xFFFF
    e1 = checksum & 0xFF
    e2 = checksum >> 8
    key = e1 ^ e2
    output = bytearray([e1, e2])
    for value in plaintext:
        output.append(value ^ key)
        key = (key + KEY_STEP) & 0xFF
    return bytes(output)
