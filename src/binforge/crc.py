"""
CRC Implementations for Checksum Directives
===========================================

This module implements the checksum algorithms behind the `crc16` and
`crc32` directives. Both are table-driven, reflected CRCs; their exact
parameters are part of binforge's output format.

CRC-16/IBM-SDLC (also known as CRC-16/X-25)
-------------------------------------------
- Polynomial: x^16 + x^12 + x^5 + 1 (0x1021, reflected 0x8408)
- Initial value: 0xFFFF
- Input/output reflected: yes
- Final XOR: 0xFFFF
- Check value, CRC("123456789"): 0x906E
- Written to the output low byte first

CRC-32 (ISO-HDLC, as used by zlib, PNG and Ethernet)
----------------------------------------------------
- Polynomial: 0x04C11DB7 (reflected 0xEDB88320)
- Initial value: 0xFFFFFFFF
- Input/output reflected: yes
- Final XOR: 0xFFFFFFFF
- Check value, CRC("123456789"): 0xCBF43926
- Written to the output low byte first

Usage
-----
    from binforge.crc import crc16_ibm_sdlc, crc_to_bytes

    checksum = crc16_ibm_sdlc(b"123456789")   # 0x906E
    crc_to_bytes(checksum, 2)                 # b'\\x6e\\x90'
"""

from typing import Final

# =============================================================================
# CRC Constants
# =============================================================================

CRC16_POLY_REFLECTED: Final[int] = 0x8408
CRC16_INITIAL: Final[int] = 0xFFFF
CRC16_XOROUT: Final[int] = 0xFFFF
CRC16_MASK: Final[int] = 0xFFFF

CRC32_POLY_REFLECTED: Final[int] = 0xEDB88320
CRC32_INITIAL: Final[int] = 0xFFFFFFFF
CRC32_XOROUT: Final[int] = 0xFFFFFFFF
CRC32_MASK: Final[int] = 0xFFFFFFFF


# =============================================================================
# Lookup Table Generation
# =============================================================================

def _generate_reflected_table(poly: int) -> tuple[int, ...]:
    """
    Generate the 256-entry lookup table for a reflected CRC.

    Each entry is the register contents after shifting one byte value
    through eight rounds of the bitwise algorithm.

    Args:
        poly: Reflected generator polynomial

    Returns:
        Tuple of 256 CRC values for each possible byte value.
    """
    table = []
    for byte_val in range(256):
        crc = byte_val
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ poly
            else:
                crc >>= 1
        table.append(crc)
    return tuple(table)


# Pre-computed lookup tables - generated once at import time
CRC16_TABLE: Final[tuple[int, ...]] = _generate_reflected_table(CRC16_POLY_REFLECTED)
CRC32_TABLE: Final[tuple[int, ...]] = _generate_reflected_table(CRC32_POLY_REFLECTED)


# =============================================================================
# Checksum Functions
# =============================================================================

def crc16_ibm_sdlc(data: bytes) -> int:
    """
    Calculate CRC-16/IBM-SDLC over data.

    Returns:
        16-bit CRC value (0x0000 to 0xFFFF).

    Example:
        >>> hex(crc16_ibm_sdlc(b"123456789"))
        '0x906e'
        >>> crc16_ibm_sdlc(b"")
        0
    """
    crc = CRC16_INITIAL

    for byte in data:
        crc = (crc >> 8) ^ CRC16_TABLE[(crc ^ byte) & 0xFF]

    return (crc ^ CRC16_XOROUT) & CRC16_MASK


def crc32_iso_hdlc(data: bytes) -> int:
    """
    Calculate CRC-32 (ISO-HDLC) over data.

    Produces the same value as zlib.crc32().

    Example:
        >>> hex(crc32_iso_hdlc(b"123456789"))
        '0xcbf43926'
    """
    crc = CRC32_INITIAL

    for byte in data:
        crc = (crc >> 8) ^ CRC32_TABLE[(crc ^ byte) & 0xFF]

    return (crc ^ CRC32_XOROUT) & CRC32_MASK


# =============================================================================
# Utility Functions
# =============================================================================

def crc_to_bytes(crc: int, width: int) -> bytes:
    """
    Convert a CRC value to little-endian bytes for the output image.

    Args:
        crc: CRC value
        width: Number of bytes (2 for CRC-16, 4 for CRC-32)

    Example:
        >>> crc_to_bytes(0x906E, 2)
        b'n\\x90'
    """
    return crc.to_bytes(width, "little")


# =============================================================================
# Reference Values for Testing
# =============================================================================

CHECK_INPUT: Final[bytes] = b"123456789"
CRC16_CHECK: Final[int] = 0x906E
CRC32_CHECK: Final[int] = 0xCBF43926
