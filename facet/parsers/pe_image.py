"""
PE/COFF Image Parser
=====================

Single entry point that turns a raw byte buffer into a :class:`PeImage`.

All parsing is performed with :mod:`struct` through a bounds-checked
:class:`ByteCursor`, without external libraries such as ``pefile`` or
``lief``.  The stages run strictly in file order:

    1. DOS header (``MZ``) and DOS stub
    2. PE signature and COFF file header
    3. Optional header (PE32 or PE32+)
    4. Data directories
    5. Section headers and section data

The first failure propagates to the caller; a partially decoded image is
never returned.  No I/O and no logging happen here -- loading a file is
the job of :class:`facet.core.engine.FacetEngine`.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
      https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
    - Pietrek, M. (1994). Peering Inside the PE: A Tour of the Win32
      Portable Executable File Format. Microsoft Systems Journal.
"""

from __future__ import annotations

from facet.core.models import PeImage
from facet.parsers.coff_header import read_coff_header
from facet.parsers.cursor import ByteCursor, BytesLike
from facet.parsers.data_directory import read_data_directories
from facet.parsers.dos_header import read_dos_header, read_dos_stub
from facet.parsers.optional_header import read_optional_header
from facet.parsers.section_table import read_section_table


def parse(data: BytesLike) -> PeImage:
    """Decode *data* as a PE image.

    Args:
        data: Complete PE file contents.

    Returns:
        The immutable decoded image.

    Raises:
        TruncatedDataError: A structure runs past the end of *data*.
        InvalidSignatureError: ``MZ`` or ``PE\\0\\0`` is missing.
        InvalidStructureError: ``e_lfanew`` is inconsistent with the buffer.
        UnsupportedOptionalHeaderMagicError: Neither PE32 nor PE32+.
    """
    cursor = ByteCursor(data)

    dos_header = read_dos_header(cursor)
    dos_stub = read_dos_stub(cursor, dos_header)
    coff_header = read_coff_header(cursor, dos_header)

    optional_header_start = cursor.position
    optional_header = read_optional_header(cursor)
    data_directories = read_data_directories(
        cursor, optional_header.number_of_rva_and_sizes
    )
    sections = read_section_table(cursor, coff_header, optional_header_start)

    return PeImage(
        dos_header=dos_header,
        dos_stub=dos_stub,
        coff_header=coff_header,
        optional_header=optional_header,
        data_directories=data_directories,
        sections=sections,
    )
