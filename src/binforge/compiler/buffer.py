"""
Output Buffer Assembler
=======================

The growable byte buffer a compilation writes into.

The buffer is addressable from offset 0. Writing past the current extent
grows it, and every newly introduced byte, including any gap between the
old extent and the write offset, starts as 0x00. Writes may overlap earlier
ones; the later write wins, which is how a checksum patches a region an
earlier statement reserved. The buffer never shrinks.

Example
-------
>>> buf = OutputBuffer()
>>> buf.write(4, b"\\xAA\\xBB")
>>> buf.finalize()
b'\\x00\\x00\\x00\\x00\\xaa\\xbb'
"""

from typing import Optional

from binforge.errors import OutOfRangeError, SourceLocation


class OutputBuffer:
    """
    Zero-filled, monotonically growing output image.

    Attributes:
        limit: Largest extent the buffer may grow to (None for no limit)
    """

    def __init__(self, limit: Optional[int] = None):
        self._data = bytearray()
        self.limit = limit

    @property
    def extent(self) -> int:
        """Number of bytes materialized so far."""
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def write(
        self,
        offset: int,
        data: bytes,
        location: Optional[SourceLocation] = None,
    ) -> None:
        """
        Write data at offset, growing and zero-filling as needed.

        Raises:
            OutOfRangeError: If the write would exceed the size limit
        """
        end = offset + len(data)

        if self.limit is not None and end > self.limit:
            raise OutOfRangeError(
                f"write of {len(data)} bytes at 0x{offset:X} ends at 0x{end:X}, "
                f"beyond the output size limit 0x{self.limit:X}",
                location,
            )

        if end > len(self._data):
            self._data.extend(bytes(end - len(self._data)))

        self._data[offset:end] = data

    def read(
        self,
        start: int,
        length: int,
        location: Optional[SourceLocation] = None,
    ) -> bytes:
        """
        Return bytes [start, start + length) of the assembled output.

        Raises:
            OutOfRangeError: If any part of the range is not yet written
        """
        end = start + length
        if end > len(self._data):
            raise OutOfRangeError(
                f"range 0x{start:X}..0x{end:X} extends past the assembled "
                f"output (0x{len(self._data):X} bytes)",
                location,
                hint="checksums can only cover bytes written by earlier statements",
            )
        return bytes(self._data[start:end])

    def finalize(self) -> bytes:
        """Return the complete buffer contents."""
        return bytes(self._data)
