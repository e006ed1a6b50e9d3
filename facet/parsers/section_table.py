"""
Section Table Reader
=====================

Decodes the array of 40-byte ``IMAGE_SECTION_HEADER`` entries and pulls
each section's raw bytes out of the file.

The table starts at ``optional_header_start + SizeOfOptionalHeader``.  That
declared size is authoritative even when it disagrees with the layout just
parsed: malformed images are read from the declared offset and any
resulting inconsistency is left to the bounds checks.

Raw data is clamped, never over-read:

    - ``PointerToRawData == 0`` or at/after the end of the file -> empty
    - otherwise ``min(SizeOfRawData, file_size - PointerToRawData)`` bytes

Sections without file backing (``.bss``-style) are therefore a normal,
successful case.
"""

from __future__ import annotations

from facet.core.errors import TruncatedDataError
from facet.core.models import CoffHeader, Section, SectionHeader
from facet.parsers.cursor import ByteCursor

SECTION_HEADER_SIZE: int = 40  # IMAGE_SECTION_HEADER is always 40 bytes

_SECTION_HEADER_FMT = "8sIIIIIIHHI"


def read_section_header(cursor: ByteCursor) -> SectionHeader:
    """Decode one section header at the cursor position."""
    (
        raw_name,
        virtual_size,
        virtual_address,
        size_of_raw_data,
        pointer_to_raw_data,
        pointer_to_relocations,
        pointer_to_line_numbers,
        number_of_relocations,
        number_of_line_numbers,
        characteristics,
    ) = cursor.read_struct(_SECTION_HEADER_FMT)

    return SectionHeader(
        raw_name=raw_name,
        virtual_size=virtual_size,
        virtual_address=virtual_address,
        size_of_raw_data=size_of_raw_data,
        pointer_to_raw_data=pointer_to_raw_data,
        pointer_to_relocations=pointer_to_relocations,
        pointer_to_line_numbers=pointer_to_line_numbers,
        number_of_relocations=number_of_relocations,
        number_of_line_numbers=number_of_line_numbers,
        characteristics=characteristics,
    )


def read_section_data(cursor: ByteCursor, header: SectionHeader) -> bytes:
    """Return the file bytes backing *header*, clamped to the buffer end."""
    pointer = header.pointer_to_raw_data
    if pointer == 0 or pointer >= cursor.length:
        return b""
    length = min(header.size_of_raw_data, cursor.length - pointer)
    return cursor.read_bytes(length, offset=pointer)


def read_section_table(
    cursor: ByteCursor,
    coff_header: CoffHeader,
    optional_header_start: int,
) -> tuple[Section, ...]:
    """Read every section header and its raw data.

    Args:
        cursor: Cursor over the whole image.
        coff_header: Supplies the section count and the declared optional
            header size.
        optional_header_start: File offset of the optional header magic.

    Raises:
        TruncatedDataError: The declared table does not fit in the buffer.
    """
    table_start = optional_header_start + coff_header.size_of_optional_header
    cursor.seek(table_start)
    table_size = coff_header.number_of_sections * SECTION_HEADER_SIZE
    if table_size > cursor.remaining():
        raise TruncatedDataError(table_start, table_size, cursor.length)

    headers = [read_section_header(cursor) for _ in range(coff_header.number_of_sections)]
    return tuple(
        Section(header=header, data=read_section_data(cursor, header))
        for header in headers
    )
