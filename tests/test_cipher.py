"""Tests for the rotating XOR cipher."""

import pytest

from wastelib.lib.cipher import RotatingXorCipher, encrypt_rotating_xor
from wastelib.lib.exceptions import EndOfDataError, FormatError
from wastelib.lib.reader import BitReader

PLAINTEXT = bytes(range(1, 200))


def test_key_schedule():
    """Key starts as the XOR of both seeds and advances by 0x1F."""
    cipher = RotatingXorCipher(BitReader(bytes([0x10, 0x01, 0x50, 0x72])))
    assert cipher.key == 0x11
    assert cipher.end_checksum == 0x0110
    assert cipher.read_bytes(2) == b"AB"
    assert cipher.key == (0x11 + 0x3E) & 0xFF


def test_key_wraps():
    cipher = RotatingXorCipher(BitReader(bytes([0xF0, 0x00]) + bytes(10)))
    keys = []
    for _ in range(10):
        keys.append(cipher.key)
        cipher.read_byte()
    assert keys == [(0xF0 + 0x1F * i) & 0xFF for i in range(10)]


def test_checksum_terminated_decrypt_stops_at_checksum():
    data = encrypt_rotating_xor(PLAINTEXT) + b"trailing data"
    reader = BitReader(data)
    cipher = RotatingXorCipher(reader)
    assert cipher.read_until_checksum() == PLAINTEXT
    assert cipher.checksum == cipher.end_checksum
    assert reader.byte_index == 2 + len(PLAINTEXT)


def test_reencrypting_reproduces_ciphertext():
    ciphertext = encrypt_rotating_xor(PLAINTEXT)
    plaintext = RotatingXorCipher(BitReader(ciphertext)).read_until_checksum()
    assert encrypt_rotating_xor(plaintext) == ciphertext


def test_fixed_length_decrypt():
    ciphertext = encrypt_rotating_xor(PLAINTEXT)
    cipher = RotatingXorCipher(BitReader(ciphertext))
    assert cipher.read_bytes(10) == PLAINTEXT[:10]
    assert not cipher.finished


def test_unmet_checksum():
    cipher = RotatingXorCipher(BitReader(bytes([0x01, 0x00, 0x00])))
    with pytest.raises(FormatError):
        cipher.read_until_checksum()


def test_fixed_length_past_end():
    cipher = RotatingXorCipher(BitReader(bytes([0x01, 0x00, 0x00])))
    with pytest.raises(EndOfDataError):
        cipher.read_bytes(2)
