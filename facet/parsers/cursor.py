"""
Bounds-Checked Byte Cursor
===========================

:class:`ByteCursor` is the single read path every PE parsing stage goes
through.  It wraps an immutable byte buffer plus a read position, and
validates every read against the buffer length *before* touching the data,
so a hostile length or offset surfaces as :class:`TruncatedDataError`
instead of a short slice or a :class:`struct.error`.

All multi-byte integers are little-endian, the fixed byte order of the
PE/COFF format.
"""

from __future__ import annotations

import struct
from typing import Optional, Union

from facet.core.errors import TruncatedDataError

BytesLike = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """Little-endian reader over a fixed byte buffer.

    Reads without an explicit *offset* start at the current position and
    advance it.  Passing *offset* turns the call into a peek: the position
    is left untouched.

    Usage::

        cursor = ByteCursor(raw_bytes)
        magic = cursor.read_u16()
        e_lfanew = cursor.read_u32(offset=0x3C)
    """

    __slots__ = ("_data", "_position")

    def __init__(self, data: BytesLike, position: int = 0) -> None:
        self._data: bytes = bytes(data)
        self._position: int = 0
        self.seek(position)

    # ------------------------------------------------------------------ #
    #  Position
    # ------------------------------------------------------------------ #

    @property
    def position(self) -> int:
        return self._position

    @property
    def length(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        return self._data

    def seek(self, offset: int) -> None:
        """Move the read position to *offset*.

        Seeking past the end is allowed; the next read reports the
        truncation with the attempted offset.
        """
        if offset < 0:
            raise TruncatedDataError(offset, 0, len(self._data))
        self._position = offset

    def remaining(self) -> int:
        """Number of bytes between the position and the end of the buffer."""
        return max(0, len(self._data) - self._position)

    # ------------------------------------------------------------------ #
    #  Reads
    # ------------------------------------------------------------------ #

    def _claim(self, size: int, offset: Optional[int]) -> int:
        """Validate a read of *size* bytes and return its start offset."""
        start = self._position if offset is None else offset
        if start < 0 or size < 0 or start + size > len(self._data):
            raise TruncatedDataError(start, size, len(self._data))
        if offset is None:
            self._position = start + size
        return start

    def read_bytes(self, count: int, offset: Optional[int] = None) -> bytes:
        start = self._claim(count, offset)
        return self._data[start:start + count]

    def read_struct(self, fmt: str, offset: Optional[int] = None) -> tuple:
        """Unpack a little-endian :mod:`struct` layout (``fmt`` without prefix)."""
        layout = struct.Struct("<" + fmt)
        start = self._claim(layout.size, offset)
        return layout.unpack_from(self._data, start)

    def read_u8(self, offset: Optional[int] = None) -> int:
        return self.read_struct("B", offset)[0]

    def read_u16(self, offset: Optional[int] = None) -> int:
        return self.read_struct("H", offset)[0]

    def read_u32(self, offset: Optional[int] = None) -> int:
        return self.read_struct("I", offset)[0]

    def read_u64(self, offset: Optional[int] = None) -> int:
        return self.read_struct("Q", offset)[0]
