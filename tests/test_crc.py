import struct

import pytest

from systdecode.crc import crc32c


def test_bytes():
    assert crc32c(b"0123456789ABCDEF") == 0xB5D83007


def test_halfwords():
    words = [0x1, 0x2, 0x3, 0x4, 0x5, 0x6, 0x7, 0x8, 0x9, 0x10,
             0x11, 0x12, 0x13, 0x14, 0x15, 0x16, 0x17, 0x18, 0x19, 0x20]
    assert crc32c(struct.pack(f"<{len(words)}H", *words)) == 0xAA2741E5


def test_dwords():
    dwords = [0x00000000, 0xABCDEF12, 0x12345678, 0xFADEDBAD, 0xAA55AA55]
    assert crc32c(struct.pack(f"<{len(dwords)}I", *dwords)) == 0xCDBDE657


def test_quadwords():
    qwords = [0x1122334455667788, 0x1122334455667788, 0xABCDEFAABBCCDDEE,
              0x0000000000000000, 0xFFFFFFFFFFFFFFFF, 0x0101010101010101]
    assert crc32c(struct.pack(f"<{len(qwords)}Q", *qwords)) == 0x61A6DF0B


def test_standard_check_value():
    assert crc32c(b"123456789") == 0xE3069283


def test_empty_input():
    assert crc32c(b"") == 0


@pytest.mark.parametrize("split", [0, 1, 5, 16])
def test_chaining_matches_whole(split):
    data = b"0123456789ABCDEF"
    assert crc32c(data[split:], crc32c(data[:split])) == crc32c(data)