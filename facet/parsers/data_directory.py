"""
Data Directory Reader
======================

Decodes the ``IMAGE_DATA_DIRECTORY`` array that trails the optional
header.  Each entry is an 8-byte (RVA, size) pair; the count comes from
``NumberOfRvaAndSizes`` and is not capped, but the whole table must fit in
the buffer: an oversized count raises :class:`TruncatedDataError` before a
single entry is decoded.
"""

from __future__ import annotations

from facet.core.errors import TruncatedDataError
from facet.core.models import DataDirectory, DataDirectoryName
from facet.parsers.cursor import ByteCursor

DATA_DIRECTORY_SIZE: int = 8
KNOWN_DIRECTORY_COUNT: int = len(DataDirectoryName)


def read_data_directories(cursor: ByteCursor, count: int) -> tuple[DataDirectory, ...]:
    """Read *count* consecutive directory entries from the cursor position.

    Raises:
        TruncatedDataError: The table needs more bytes than remain, checked
            before any entry is decoded.
    """
    table_size = count * DATA_DIRECTORY_SIZE
    if table_size > cursor.remaining():
        raise TruncatedDataError(cursor.position, table_size, cursor.length)

    directories: list[DataDirectory] = []
    for index in range(count):
        virtual_address, size = cursor.read_struct("II")
        directories.append(DataDirectory(
            index=index,
            name=DataDirectoryName(index) if index < KNOWN_DIRECTORY_COUNT else None,
            virtual_address=virtual_address,
            size=size,
        ))
    return tuple(directories)
