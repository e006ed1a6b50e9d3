"""
MS-DOS Header Reader
=====================

Decodes the fixed 64-byte ``IMAGE_DOS_HEADER`` at offset 0 and the DOS
stub program that sits between it and the PE signature.

Only two fields matter to a modern loader -- ``e_magic`` (``MZ``) and
``e_lfanew`` (offset of the PE signature) -- but all of them are kept so
that the decoded image reflects the file exactly.
"""

from __future__ import annotations

from facet.core.errors import InvalidSignatureError, InvalidStructureError
from facet.core.models import DosHeader
from facet.parsers.cursor import ByteCursor

MZ_MAGIC: bytes = b"MZ"
DOS_HEADER_SIZE: int = 64

# e_magic, 13 header words, e_res[4], e_oemid, e_oeminfo, e_res2[10], e_lfanew
_DOS_HEADER_FMT = "2s13H4HHH10HI"


def read_dos_header(cursor: ByteCursor) -> DosHeader:
    """Decode the DOS header and leave *cursor* at offset 64.

    Raises:
        TruncatedDataError: Fewer than 64 bytes are available.
        InvalidSignatureError: The first two bytes are not ``MZ``.
    """
    cursor.seek(0)
    fields = cursor.read_struct(_DOS_HEADER_FMT)
    magic = fields[0]
    if magic != MZ_MAGIC:
        raise InvalidSignatureError("DOS", MZ_MAGIC, magic, 0)

    words = fields[1:14]
    return DosHeader(
        magic=int.from_bytes(magic, "little"),
        last_page_size=words[0],
        page_count=words[1],
        relocation_count=words[2],
        header_size=words[3],
        min_alloc=words[4],
        max_alloc=words[5],
        initial_ss=words[6],
        initial_sp=words[7],
        checksum=words[8],
        initial_ip=words[9],
        initial_cs=words[10],
        relocation_offset=words[11],
        overlay_number=words[12],
        reserved1=tuple(fields[14:18]),
        oem_identifier=fields[18],
        oem_information=fields[19],
        reserved2=tuple(fields[20:30]),
        file_address_of_new_header=fields[30],
    )


def read_dos_stub(cursor: ByteCursor, dos_header: DosHeader) -> bytes:
    """Read the bytes between the DOS header and ``e_lfanew``.

    Raises:
        InvalidStructureError: ``e_lfanew`` points inside the DOS header or
            past the end of the buffer.
    """
    pe_offset = dos_header.file_address_of_new_header
    if pe_offset < DOS_HEADER_SIZE:
        raise InvalidStructureError(
            f"PE header offset 0x{pe_offset:x} lies inside the DOS header",
            DOS_HEADER_SIZE - 4,
        )
    if pe_offset > cursor.length:
        raise InvalidStructureError(
            f"PE header offset 0x{pe_offset:x} exceeds file size of {cursor.length} bytes",
            DOS_HEADER_SIZE - 4,
        )
    cursor.seek(DOS_HEADER_SIZE)
    return cursor.read_bytes(pe_offset - DOS_HEADER_SIZE)
