"""Synthetic PE image builder used across the test suite."""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Optional, Sequence

PE32 = 0x10B
PE32_PLUS = 0x20B


@dataclass
class SectionSpec:
    """Describes one section to emit.

    ``pointer`` / ``size_of_raw_data`` default to an aligned placement of
    ``data`` after the headers; set them explicitly to craft bad input.
    """
    name: bytes = b".text"
    virtual_address: int = 0x1000
    virtual_size: int = 0x100
    data: bytes = b""
    pointer: Optional[int] = None
    size_of_raw_data: Optional[int] = None
    characteristics: int = 0x60000020


@dataclass
class ImageSpec:
    magic: int = PE32
    machine: int = 0x14C
    e_lfanew: int = 0x80
    stub: bytes = b""
    timestamp: int = 0
    characteristics: int = 0x0102
    entry_point: int = 0x1000
    image_base: Optional[int] = None
    subsystem: int = 3
    dll_characteristics: int = 0x8140
    directories: Sequence[tuple[int, int]] = field(default_factory=list)
    number_of_rva_and_sizes: Optional[int] = None
    size_of_optional_header: Optional[int] = None
    number_of_sections: Optional[int] = None
    sections: Sequence[SectionSpec] = field(default_factory=list)
    truncate_to: Optional[int] = None


def _put(buf: bytearray, offset: int, data: bytes) -> None:
    end = offset + len(data)
    if end > len(buf):
        buf.extend(b"\x00" * (end - len(buf)))
    buf[offset:end] = data


def _optional_header(spec: ImageSpec, rva_count: int) -> bytes:
    if spec.magic == PE32_PLUS:
        image_base = 0x140000000 if spec.image_base is None else spec.image_base
        return (
            struct.pack("<HBBIIIII", spec.magic, 14, 30, 0x200, 0x400, 0, spec.entry_point, 0x1000)
            + struct.pack("<QII", image_base, 0x1000, 0x200)
            + struct.pack("<HHHHHH", 6, 0, 1, 2, 6, 0)
            + struct.pack("<IIII", 0, 0x5000, 0x400, 0xABCD)
            + struct.pack("<HH", spec.subsystem, spec.dll_characteristics)
            + struct.pack("<QQQQ", 0x100000, 0x1000, 0x100000, 0x1000)
            + struct.pack("<II", 0, rva_count)
        )
    image_base = 0x400000 if spec.image_base is None else spec.image_base
    return (
        struct.pack("<HBBIIIIII", spec.magic, 14, 30, 0x200, 0x400, 0, spec.entry_point, 0x1000, 0x2000)
        + struct.pack("<III", image_base, 0x1000, 0x200)
        + struct.pack("<HHHHHH", 6, 0, 1, 2, 6, 0)
        + struct.pack("<IIII", 0, 0x5000, 0x400, 0xABCD)
        + struct.pack("<HH", spec.subsystem, spec.dll_characteristics)
        + struct.pack("<IIII", 0x100000, 0x1000, 0x100000, 0x1000)
        + struct.pack("<II", 0, rva_count)
    )


def build_pe(spec: Optional[ImageSpec] = None, **overrides) -> bytes:
    """Assemble a PE image from *spec* (or keyword overrides of the defaults)."""
    if spec is None:
        spec = ImageSpec(**overrides)

    buf = bytearray()
    # DOS header + stub
    _put(buf, 0, b"MZ")
    _put(buf, 2, struct.pack("<H", 0x90))
    _put(buf, 0x3C, struct.pack("<I", spec.e_lfanew))
    _put(buf, 64, b"\x00" * max(0, spec.e_lfanew - 64))
    if spec.stub:
        _put(buf, 64, spec.stub)

    rva_count = (
        len(spec.directories)
        if spec.number_of_rva_and_sizes is None
        else spec.number_of_rva_and_sizes
    )
    optional = _optional_header(spec, rva_count)
    optional += b"".join(struct.pack("<II", rva, size) for rva, size in spec.directories)
    size_of_optional_header = (
        len(optional) if spec.size_of_optional_header is None else spec.size_of_optional_header
    )
    number_of_sections = (
        len(spec.sections) if spec.number_of_sections is None else spec.number_of_sections
    )

    pe = spec.e_lfanew
    _put(buf, pe, b"PE\x00\x00")
    _put(buf, pe + 4, struct.pack(
        "<HHIIIHH", spec.machine, number_of_sections, spec.timestamp,
        0, 0, size_of_optional_header, spec.characteristics,
    ))
    optional_start = pe + 24
    _put(buf, optional_start, optional)

    table_start = optional_start + size_of_optional_header
    next_pointer = (table_start + 40 * len(spec.sections) + 0x1FF) & ~0x1FF
    for i, section in enumerate(spec.sections):
        pointer = section.pointer
        if pointer is None:
            pointer = next_pointer if section.data else 0
            next_pointer = (next_pointer + len(section.data) + 0x1FF) & ~0x1FF
        size_of_raw_data = (
            len(section.data) if section.size_of_raw_data is None else section.size_of_raw_data
        )
        _put(buf, table_start + 40 * i, struct.pack(
            "<8sIIIIIIHHI",
            section.name, section.virtual_size, section.virtual_address,
            size_of_raw_data, pointer, 0, 0, 0, 0, section.characteristics,
        ))
        if pointer and section.data:
            _put(buf, pointer, section.data)

    if spec.truncate_to is not None:
        del buf[spec.truncate_to:]
    return bytes(buf)


def section_table_offset(data: bytes) -> int:
    """Return the offset of the first section header in a built image."""
    e_lfanew = struct.unpack_from("<I", data, 0x3C)[0]
    size_of_optional_header = struct.unpack_from("<H", data, e_lfanew + 4 + 16)[0]
    return e_lfanew + 24 + size_of_optional_header
