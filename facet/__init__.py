"""
Facet -- PE Image Decoder
==========================

Structured, bounds-checked decoder for the Windows Portable Executable
(PE/COFF) image format.  Given the raw bytes of an ``.exe`` or ``.dll``,
Facet produces an immutable object graph of the DOS header and stub, the
COFF file header, the PE32 / PE32+ optional header, the data directories,
and every section with its raw data.

Input is treated as untrusted: truncated or crafted files fail with a
typed :class:`~facet.core.errors.ParseError` instead of over-reading.

Modules:
    - facet.parsers: Byte cursor and per-structure readers
    - facet.core.models: Pydantic data models
    - facet.core.errors: Exception hierarchy
    - facet.core.engine: File loading and hashing
    - facet.output: Console and report output
    - facet.cli: Click-based command-line interface

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
"""

from facet.parsers.pe_image import parse
from facet.parsers.rva import resolve_rva

__version__ = "1.0.0"
__tool_name__ = "facet"
__all__ = [
    "parse",
    "resolve_rva",
]
