"""
RVA Resolution
===============

Maps a relative virtual address onto the section that contains it and the
matching file offset.  These are pure functions over an already-built
section table; higher-level directory parsers (imports, exports,
resources, debug) build on them.

Sections are not guaranteed to be sorted, so the whole table is scanned.
If virtual ranges overlap -- which a well-formed image never does -- the
first match in table order wins.
"""

from __future__ import annotations

from typing import Iterable, Optional

from facet.core.errors import RvaOutOfRangeError
from facet.core.models import PeImage, Section


def find_section(sections: Iterable[Section], rva: int) -> Optional[Section]:
    """Return the first section whose ``[VirtualAddress, +VirtualSize)`` holds *rva*."""
    for section in sections:
        if section.header.contains_rva(rva):
            return section
    return None


def resolve_rva(image: PeImage, rva: int) -> int:
    """Translate *rva* into a file offset.

    Returns:
        ``PointerToRawData + (rva - VirtualAddress)`` of the containing section.

    Raises:
        RvaOutOfRangeError: No section contains *rva*.
    """
    section = find_section(image.sections, rva)
    if section is None:
        raise RvaOutOfRangeError(rva)
    return section.header.pointer_to_raw_data + (rva - section.header.virtual_address)
