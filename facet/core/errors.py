"""
Facet Error Taxonomy
=====================

Exception hierarchy raised by the PE decoder and the surrounding engine.

Every parsing stage fails fast by raising one of the :class:`ParseError`
subclasses below; no partially-built image is ever returned.  The
:class:`RvaOutOfRangeError` is raised only by RVA resolution, never by
``parse`` itself.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
      https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
"""

from __future__ import annotations

from typing import Optional


class FacetError(Exception):
    """Root of all Facet exceptions."""

    pass


# ========================== Parse errors ===================================


class ParseError(FacetError):
    """A buffer could not be decoded as a PE image.

    Attributes:
        offset: File offset at which the problem was detected, if known.
    """

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (offset 0x{offset:x})"
        super().__init__(message)


class InvalidSignatureError(ParseError):
    """A required magic value (``MZ`` or ``PE\\0\\0``) did not match."""

    def __init__(self, what: str, expected: bytes, actual: bytes, offset: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{what} signature mismatch: expected {expected.hex()} got {actual.hex()}",
            offset,
        )


class UnsupportedOptionalHeaderMagicError(ParseError):
    """The optional header magic is neither PE32 (0x10B) nor PE32+ (0x20B)."""

    def __init__(self, magic: int, offset: int, reason: str = "") -> None:
        self.magic = magic
        message = reason or f"Optional header magic 0x{magic:04x} unknown"
        super().__init__(message, offset)


class TruncatedDataError(ParseError):
    """A read would extend past the end of the buffer.

    Attributes:
        length:    Number of bytes the read requested.
        available: Size of the underlying buffer.
    """

    def __init__(self, offset: int, length: int, available: int) -> None:
        self.length = length
        self.available = available
        super().__init__(
            f"Read of {length} byte(s) exceeds buffer of {available} byte(s)",
            offset,
        )


class InvalidStructureError(ParseError):
    """A derived offset or length is internally inconsistent."""

    pass


# ========================== Non-parse errors ===============================


class RvaOutOfRangeError(FacetError):
    """A relative virtual address is not covered by any section."""

    def __init__(self, rva: int) -> None:
        self.rva = rva
        super().__init__(f"RVA 0x{rva:x} does not fall within any section")


class FileTooLargeError(FacetError):
    """The input file exceeds the configured size limit."""

    def __init__(self, path: str, size: int, limit: int) -> None:
        self.path = path
        self.size = size
        self.limit = limit
        super().__init__(
            f"File too large: {path} is {size:,} bytes (max: {limit:,} bytes)"
        )
