"""Bit-precise reader over a window of binary data."""

from typing import List, Optional, Union

from .exceptions import EndOfDataError, OutOfRangeError

ByteSource = Union[bytes, bytearray, memoryview]


class BitReader:
    """
    Sequential reader with a byte and bit cursor.

    Bits are read most significant first unless ``reverse`` is requested,
    in which case the least significant bit of the current byte comes first.
    Multi-byte integers are little-endian and are assembled from byte reads,
    so they work at unaligned bit positions too.
    """

    __slots__ = ("_data", "_byte", "_bit")

    def __init__(self, data: ByteSource, offset: int = 0, size: Optional[int] = None):
        view = memoryview(data)
        if offset < 0 or offset > len(view):
            raise OutOfRangeError(f"Offset {offset} outside data of {len(view)} bytes")
        if size is None:
            size = len(view) - offset
        if size < 0 or offset + size > len(view):
            raise OutOfRangeError(f"Window {offset}+{size} outside data of {len(view)} bytes")
        self._data = view[offset : offset + size]
        self._byte = 0
        self._bit = 0

    @property
    def byte_index(self) -> int:
        return self._byte

    @property
    def bit_index(self) -> int:
        return self._bit

    @property
    def byte_length(self) -> int:
        return len(self._data)

    def sync(self) -> None:
        """Moves to the start of the next byte if a byte is partially read."""
        if self._bit:
            self._byte += 1
            self._bit = 0

    def seek(self, byte: int, bit: int = 0) -> None:
        byte += bit >> 3
        bit &= 7
        length = len(self._data)
        if byte < 0 or byte > length or (byte == length and bit != 0):
            raise OutOfRangeError(f"Seek to {byte}:{bit} outside data of {length} bytes")
        self._byte = byte
        self._bit = bit

    def has_data(self, num_bytes: int = 1, num_bits: int = 0) -> bool:
        remaining = ((len(self._data) - self._byte) << 3) - self._bit
        return remaining >= num_bits + (num_bytes << 3)

    def read_bit(self, reverse: bool = False) -> int:
        if self._byte >= len(self._data):
            raise EndOfDataError("End of data while reading bit")
        value = self._data[self._byte]
        if reverse:
            result = (value >> self._bit) & 1
        else:
            result = (value >> (7 - self._bit)) & 1
        self._bit += 1
        if self._bit > 7:
            self._bit = 0
            self._byte += 1
        return result

    def read_bits(self, count: int, reverse: bool = False) -> int:
        result = 0
        for i in range(count):
            bit = self.read_bit(reverse)
            if reverse:
                result |= bit << i
            else:
                result = (result << 1) | bit
        return result

    def read_uint8(self) -> int:
        data = self._data
        if self._bit:
            if self._byte + 1 >= len(data):
                raise EndOfDataError("End of data while reading unaligned byte")
            result = ((data[self._byte] << self._bit) & 0xFF) | (
                data[self._byte + 1] >> (8 - self._bit)
            )
            self._byte += 1
            return result
        if self._byte >= len(data):
            raise EndOfDataError("End of data while reading byte")
        result = data[self._byte]
        self._byte += 1
        return result

    def read_uint8s(self, count: int) -> bytes:
        if not self._bit:
            end = self._byte + count
            if end > len(self._data):
                raise EndOfDataError(f"End of data while reading {count} bytes")
            result = self._data[self._byte : end].tobytes()
            self._byte = end
            return result
        return bytes(self.read_uint8() for _ in range(count))

    def read_uint16(self) -> int:
        return self.read_uint8() | (self.read_uint8() << 8)

    def read_uint16s(self, count: int) -> List[int]:
        return [self.read_uint16() for _ in range(count)]

    def read_uint24(self) -> int:
        return self.read_uint16() | (self.read_uint8() << 16)

    def read_uint32(self) -> int:
        return self.read_uint16() | (self.read_uint16() << 16)

    def read_char(self) -> str:
        return chr(self.read_uint8())

    def read_string(self, length: int) -> str:
        return self.read_uint8s(length).decode("latin-1")

    def read_null_string(self, max_length: Optional[int] = None) -> str:
        """
        Reads a NUL terminated string.

        With ``max_length`` exactly that many bytes are consumed and the
        result is cut at the first NUL inside the field.
        """
        if max_length is not None:
            raw = self.read_uint8s(max_length)
            end = raw.find(b"\0")
            if end >= 0:
                raw = raw[:end]
            return raw.decode("latin-1")
        chars = bytearray()
        while True:
            value = self.read_uint8()
            if value == 0:
                return chars.decode("latin-1")
            chars.append(value)

    def read_null_strings(self, count: int) -> List[str]:
        return [self.read_null_string() for _ in range(count)]
