"""
Tests for the CRC Implementations
=================================

The CRC parameters are part of the image format, so each algorithm is
pinned to its published check value.
"""

import zlib

import pytest

from binforge.crc import (
    CHECK_INPUT,
    CRC16_CHECK,
    CRC16_TABLE,
    CRC32_CHECK,
    CRC32_TABLE,
    crc16_ibm_sdlc,
    crc32_iso_hdlc,
    crc_to_bytes,
)


# =============================================================================
# CRC-16/IBM-SDLC Tests
# =============================================================================

class TestCRC16:
    """Tests for CRC-16/IBM-SDLC."""

    def test_check_value(self):
        assert crc16_ibm_sdlc(CHECK_INPUT) == 0x906E
        assert CRC16_CHECK == 0x906E

    def test_empty(self):
        """Initial value and final XOR cancel out on empty input."""
        assert crc16_ibm_sdlc(b"") == 0x0000

    def test_table_entries(self):
        assert len(CRC16_TABLE) == 256
        assert CRC16_TABLE[0] == 0x0000
        assert CRC16_TABLE[1] == 0x1189
        assert CRC16_TABLE[0x80] == 0x8408

    def test_result_is_16_bit(self):
        assert 0 <= crc16_ibm_sdlc(bytes(range(256)) * 4) <= 0xFFFF

    def test_order_matters(self):
        assert crc16_ibm_sdlc(b"\x01\x02") != crc16_ibm_sdlc(b"\x02\x01")


# =============================================================================
# CRC-32 Tests
# =============================================================================

class TestCRC32:
    """Tests for CRC-32 (ISO-HDLC)."""

    def test_check_value(self):
        assert crc32_iso_hdlc(CHECK_INPUT) == CRC32_CHECK == 0xCBF43926

    def test_empty(self):
        assert crc32_iso_hdlc(b"") == 0

    def test_table_entries(self):
        assert CRC32_TABLE[1] == 0x77073096

    @pytest.mark.parametrize("data", [
        b"\x00",
        b"\xFF" * 17,
        bytes(range(256)),
        b"binforge layout compiler",
    ])
    def test_matches_zlib(self, data):
        assert crc32_iso_hdlc(data) == zlib.crc32(data)


# =============================================================================
# Byte Conversion Tests
# =============================================================================

class TestCRCToBytes:

    def test_16_bit_little_endian(self):
        assert crc_to_bytes(0x906E, 2) == b"\x6e\x90"

    def test_32_bit_little_endian(self):
        assert crc_to_bytes(0xCBF43926, 4) == b"\x26\x39\xf4\xcb"
