"""
COFF File Header Reader
========================

Verifies the ``PE\\0\\0`` signature at ``e_lfanew`` and decodes the
20-byte ``IMAGE_FILE_HEADER`` that follows it.

``NumberOfSections`` is carried forward as-is.  A pathological count is
not bounded here; it surfaces later as a truncated read in the section
table reader.
"""

from __future__ import annotations

from facet.core.errors import InvalidSignatureError
from facet.core.models import CoffHeader, DosHeader
from facet.parsers.cursor import ByteCursor

PE_MAGIC: bytes = b"PE\x00\x00"
COFF_HEADER_SIZE: int = 20

_COFF_HEADER_FMT = "HHIIIHH"


def read_coff_header(cursor: ByteCursor, dos_header: DosHeader) -> CoffHeader:
    """Check the PE signature and decode the COFF header.

    The cursor is left at the first byte of the optional header.

    Raises:
        TruncatedDataError: The signature or header runs past the buffer.
        InvalidSignatureError: The four bytes at ``e_lfanew`` are not ``PE\\0\\0``.
    """
    pe_offset = dos_header.file_address_of_new_header
    cursor.seek(pe_offset)
    signature = cursor.read_bytes(len(PE_MAGIC))
    if signature != PE_MAGIC:
        raise InvalidSignatureError("PE", PE_MAGIC, signature, pe_offset)

    (
        machine,
        number_of_sections,
        time_date_stamp,
        pointer_to_symbol_table,
        number_of_symbols,
        size_of_optional_header,
        characteristics,
    ) = cursor.read_struct(_COFF_HEADER_FMT)

    return CoffHeader(
        machine=machine,
        number_of_sections=number_of_sections,
        time_date_stamp=time_date_stamp,
        pointer_to_symbol_table=pointer_to_symbol_table,
        number_of_symbols=number_of_symbols,
        size_of_optional_header=size_of_optional_header,
        characteristics=characteristics,
    )
