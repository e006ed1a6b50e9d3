"""
Optional Header Reader
=======================

Decodes the PE optional header, which -- despite its name -- every image
carries.  The two-byte magic selects the variant:

    ====== ======= ====================================================
    Magic  Variant Address-sized fields
    ====== ======= ====================================================
    0x10B  PE32    image base, stack/heap reserve/commit are 4 bytes;
                   ``BaseOfData`` is present
    0x20B  PE32+   the same five fields are 8 bytes; no ``BaseOfData``
    ====== ======= ====================================================

Both variants are read from a single field table.  Fields marked ``A``
take their width from the matched variant, and the ``D`` field
(``BaseOfData``) exists only in PE32.  The final field,
``NumberOfRvaAndSizes``, seeds the data directory reader.
"""

from __future__ import annotations

from typing import Union

from facet.core.errors import UnsupportedOptionalHeaderMagicError
from facet.core.models import OptionalHeader32, OptionalHeader64
from facet.parsers.cursor import ByteCursor

PE32_MAGIC: int = 0x10B      # PE32 (32-bit)
PE32PLUS_MAGIC: int = 0x20B  # PE32+ (64-bit)
ROM_MAGIC: int = 0x107       # ROM image

_OPTIONAL_HEADER_LAYOUT: tuple[tuple[str, str], ...] = (
    ("magic", "H"),
    ("major_linker_version", "B"),
    ("minor_linker_version", "B"),
    ("size_of_code", "I"),
    ("size_of_initialized_data", "I"),
    ("size_of_uninitialized_data", "I"),
    ("address_of_entry_point", "I"),
    ("base_of_code", "I"),
    ("base_of_data", "D"),
    ("image_base", "A"),
    ("section_alignment", "I"),
    ("file_alignment", "I"),
    ("major_operating_system_version", "H"),
    ("minor_operating_system_version", "H"),
    ("major_image_version", "H"),
    ("minor_image_version", "H"),
    ("major_subsystem_version", "H"),
    ("minor_subsystem_version", "H"),
    ("win32_version_value", "I"),
    ("size_of_image", "I"),
    ("size_of_headers", "I"),
    ("checksum", "I"),
    ("subsystem", "H"),
    ("dll_characteristics", "H"),
    ("size_of_stack_reserve", "A"),
    ("size_of_stack_commit", "A"),
    ("size_of_heap_reserve", "A"),
    ("size_of_heap_commit", "A"),
    ("loader_flags", "I"),
    ("number_of_rva_and_sizes", "I"),
)


class _Variant:
    """Concrete field names and ``struct`` format for one optional header width."""
    __slots__ = ("model", "names", "fmt")

    def __init__(self, model: type, address_code: str, has_base_of_data: bool) -> None:
        self.model = model
        names: list[str] = []
        codes: list[str] = []
        for name, code in _OPTIONAL_HEADER_LAYOUT:
            if code == "D":
                if not has_base_of_data:
                    continue
                code = "I"
            elif code == "A":
                code = address_code
            names.append(name)
            codes.append(code)
        self.names: tuple[str, ...] = tuple(names)
        self.fmt: str = "".join(codes)


_VARIANTS: dict[int, _Variant] = {
    PE32_MAGIC: _Variant(OptionalHeader32, "I", has_base_of_data=True),
    PE32PLUS_MAGIC: _Variant(OptionalHeader64, "Q", has_base_of_data=False),
}


def read_optional_header(cursor: ByteCursor) -> Union[OptionalHeader32, OptionalHeader64]:
    """Decode the optional header starting at the cursor position.

    The cursor is left immediately after ``NumberOfRvaAndSizes``, i.e. on
    the first data directory entry.

    Raises:
        TruncatedDataError: The header runs past the end of the buffer.
        UnsupportedOptionalHeaderMagicError: The magic is not 0x10B or 0x20B.
    """
    start = cursor.position
    magic = cursor.read_u16(offset=start)

    variant = _VARIANTS.get(magic)
    if variant is None:
        if magic == ROM_MAGIC:
            raise UnsupportedOptionalHeaderMagicError(
                magic, start, "Optional header for ROM images is not supported"
            )
        raise UnsupportedOptionalHeaderMagicError(magic, start)

    values = cursor.read_struct(variant.fmt)
    return variant.model(**dict(zip(variant.names, values)))
