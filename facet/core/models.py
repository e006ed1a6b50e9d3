"""
Facet Data Models
==================

Pydantic-based immutable models describing a decoded Portable Executable
image: DOS header, COFF file header, optional header (PE32 / PE32+), data
directories, and sections.

Every model is frozen -- instances are produced exactly once by the parser
and never mutated afterwards, so a :class:`PeImage` can be shared read-only
across threads without synchronisation.

The optional header is a tagged variant over :class:`OptionalHeader32` and
:class:`OptionalHeader64`, discriminated by the ``kind`` field.  Callers
branch on ``header.kind`` rather than on dynamic type checks.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
      https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
    - Pietrek, M. (1994). Peering Inside the PE: A Tour of the Win32
      Portable Executable File Format. Microsoft Systems Journal.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class MachineType(enum.IntEnum):
    """Target architecture recorded in the COFF ``Machine`` field."""
    UNKNOWN = 0x0
    I386 = 0x14C
    R3000 = 0x162
    R4000 = 0x166
    R10000 = 0x168
    MIPS_WCE_V2 = 0x169
    ALPHA = 0x184
    SH3 = 0x1A2
    SH3_DSP = 0x1A3
    SH3E = 0x1A4
    SH4 = 0x1A6
    SH5 = 0x1A8
    ARM = 0x1C0
    THUMB = 0x1C2
    ARMNT = 0x1C4
    AM33 = 0x1D3
    POWERPC = 0x1F0
    POWERPC_FP = 0x1F1
    IA64 = 0x200
    MIPS16 = 0x266
    ALPHA64 = 0x284
    MIPS_FPU = 0x366
    MIPS_FPU16 = 0x466
    TRICORE = 0x520
    CEF = 0xCEF
    EBC = 0xEBC
    RISCV32 = 0x5032
    RISCV64 = 0x5064
    RISCV128 = 0x5128
    AMD64 = 0x8664
    M32R = 0x9041
    ARM64 = 0xAA64
    CEE = 0xC0EE


_MACHINE_NAMES: dict[MachineType, str] = {
    MachineType.UNKNOWN: "Unknown",
    MachineType.I386: "x86",
    MachineType.R3000: "MIPS R3000",
    MachineType.R4000: "MIPS R4000",
    MachineType.R10000: "MIPS R10000",
    MachineType.MIPS16: "MIPS16",
    MachineType.ARM: "ARM",
    MachineType.THUMB: "ARM Thumb",
    MachineType.ARMNT: "ARM Thumb-2",
    MachineType.AMD64: "x86_64",
    MachineType.ARM64: "AArch64",
    MachineType.IA64: "IA-64",
    MachineType.EBC: "EFI Byte Code",
    MachineType.RISCV32: "RISC-V 32",
    MachineType.RISCV64: "RISC-V 64",
    MachineType.RISCV128: "RISC-V 128",
}


class FileCharacteristics(enum.IntFlag):
    """COFF header ``Characteristics`` bit flags."""
    RELOCS_STRIPPED = 0x0001
    EXECUTABLE_IMAGE = 0x0002
    LINE_NUMS_STRIPPED = 0x0004
    LOCAL_SYMS_STRIPPED = 0x0008
    AGGRESSIVE_WS_TRIM = 0x0010
    LARGE_ADDRESS_AWARE = 0x0020
    BYTES_REVERSED_LO = 0x0080
    MACHINE_32BIT = 0x0100
    DEBUG_STRIPPED = 0x0200
    REMOVABLE_RUN_FROM_SWAP = 0x0400
    NET_RUN_FROM_SWAP = 0x0800
    SYSTEM = 0x1000
    DLL = 0x2000
    UP_SYSTEM_ONLY = 0x4000
    BYTES_REVERSED_HI = 0x8000


class Subsystem(enum.IntEnum):
    """Optional header ``Subsystem`` values."""
    UNKNOWN = 0
    NATIVE = 1
    WINDOWS_GUI = 2
    WINDOWS_CUI = 3
    OS2_CUI = 5
    POSIX_CUI = 7
    NATIVE_WINDOWS = 8
    WINDOWS_CE_GUI = 9
    EFI_APPLICATION = 10
    EFI_BOOT_SERVICE_DRIVER = 11
    EFI_RUNTIME_DRIVER = 12
    EFI_ROM = 13
    XBOX = 14
    WINDOWS_BOOT_APPLICATION = 16


_SUBSYSTEM_NAMES: dict[Subsystem, str] = {
    Subsystem.UNKNOWN: "Unknown",
    Subsystem.NATIVE: "Native",
    Subsystem.WINDOWS_GUI: "Windows GUI",
    Subsystem.WINDOWS_CUI: "Windows Console",
    Subsystem.OS2_CUI: "OS/2 Console",
    Subsystem.POSIX_CUI: "POSIX Console",
    Subsystem.NATIVE_WINDOWS: "Native Win9x Driver",
    Subsystem.WINDOWS_CE_GUI: "Windows CE GUI",
    Subsystem.EFI_APPLICATION: "EFI Application",
    Subsystem.EFI_BOOT_SERVICE_DRIVER: "EFI Boot Service Driver",
    Subsystem.EFI_RUNTIME_DRIVER: "EFI Runtime Driver",
    Subsystem.EFI_ROM: "EFI ROM",
    Subsystem.XBOX: "Xbox",
    Subsystem.WINDOWS_BOOT_APPLICATION: "Windows Boot Application",
}


class DllCharacteristics(enum.IntFlag):
    """Optional header ``DllCharacteristics`` bit flags."""
    HIGH_ENTROPY_VA = 0x0020
    DYNAMIC_BASE = 0x0040
    FORCE_INTEGRITY = 0x0080
    NX_COMPAT = 0x0100
    NO_ISOLATION = 0x0200
    NO_SEH = 0x0400
    NO_BIND = 0x0800
    APPCONTAINER = 0x1000
    WDM_DRIVER = 0x2000
    GUARD_CF = 0x4000
    TERMINAL_SERVER_AWARE = 0x8000


class SectionFlags(enum.IntFlag):
    """Section header ``Characteristics`` bit flags.

    The alignment nibble (bits 20-23) is a packed value rather than a flag
    set and is exposed separately through :attr:`SectionHeader.alignment`.
    """
    TYPE_NO_PAD = 0x00000008
    CNT_CODE = 0x00000020
    CNT_INITIALIZED_DATA = 0x00000040
    CNT_UNINITIALIZED_DATA = 0x00000080
    LNK_OTHER = 0x00000100
    LNK_INFO = 0x00000200
    LNK_REMOVE = 0x00000800
    LNK_COMDAT = 0x00001000
    GPREL = 0x00008000
    LNK_NRELOC_OVFL = 0x01000000
    MEM_DISCARDABLE = 0x02000000
    MEM_NOT_CACHED = 0x04000000
    MEM_NOT_PAGED = 0x08000000
    MEM_SHARED = 0x10000000
    MEM_EXECUTE = 0x20000000
    MEM_READ = 0x40000000
    MEM_WRITE = 0x80000000


class DataDirectoryName(enum.IntEnum):
    """Well-known data directory slots, by table position."""
    EXPORT = 0
    IMPORT = 1
    RESOURCE = 2
    EXCEPTION = 3
    CERTIFICATE = 4
    BASE_RELOCATION = 5
    DEBUG = 6
    ARCHITECTURE = 7
    GLOBAL_PTR = 8
    TLS = 9
    LOAD_CONFIG = 10
    BOUND_IMPORT = 11
    IAT = 12
    DELAY_IMPORT = 13
    CLR_RUNTIME = 14


def flag_names(flags: enum.IntFlag) -> list[str]:
    """Return the names of every single-bit member set in *flags*."""
    return [
        member.name
        for member in type(flags)
        if member.name and member.value and (flags & member) == member
    ]


# ---------------------------------------------------------------------------
# Base model
# ---------------------------------------------------------------------------

class _Frozen(BaseModel):
    """Common configuration: immutable, strict about unknown fields."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        ser_json_bytes="base64",
    )


# ---------------------------------------------------------------------------
# DOS header
# ---------------------------------------------------------------------------

class DosHeader(_Frozen):
    """The legacy 64-byte MS-DOS ``IMAGE_DOS_HEADER``.

    Attributes:
        magic: ``e_magic`` -- always ``0x5A4D`` (``MZ``) for a parsed image.
        file_address_of_new_header: ``e_lfanew`` -- offset of the PE signature.
    """
    magic: int
    last_page_size: int = 0
    page_count: int = 0
    relocation_count: int = 0
    header_size: int = 0
    min_alloc: int = 0
    max_alloc: int = 0
    initial_ss: int = 0
    initial_sp: int = 0
    checksum: int = 0
    initial_ip: int = 0
    initial_cs: int = 0
    relocation_offset: int = 0
    overlay_number: int = 0
    reserved1: tuple[int, ...] = (0, 0, 0, 0)
    oem_identifier: int = 0
    oem_information: int = 0
    reserved2: tuple[int, ...] = (0,) * 10
    file_address_of_new_header: int


# ---------------------------------------------------------------------------
# COFF header
# ---------------------------------------------------------------------------

class CoffHeader(_Frozen):
    """The 20-byte COFF ``IMAGE_FILE_HEADER`` following ``PE\\0\\0``.

    ``machine`` keeps the raw value so unknown architectures survive
    parsing; :attr:`machine_type` maps it onto :class:`MachineType`.
    """
    machine: int
    number_of_sections: int
    time_date_stamp: int
    pointer_to_symbol_table: int
    number_of_symbols: int
    size_of_optional_header: int
    characteristics: int

    @property
    def machine_type(self) -> Optional[MachineType]:
        try:
            return MachineType(self.machine)
        except ValueError:
            return None

    @property
    def machine_name(self) -> str:
        machine = self.machine_type
        if machine is None:
            return f"unknown(0x{self.machine:x})"
        return _MACHINE_NAMES.get(machine, machine.name)

    @property
    def flags(self) -> FileCharacteristics:
        return FileCharacteristics(self.characteristics)

    @property
    def is_dll(self) -> bool:
        return bool(self.characteristics & FileCharacteristics.DLL)

    @property
    def is_executable(self) -> bool:
        return bool(self.characteristics & FileCharacteristics.EXECUTABLE_IMAGE)

    @property
    def timestamp(self) -> Optional[datetime]:
        """Link time as a UTC datetime, or ``None`` if the stamp is zero."""
        if self.time_date_stamp == 0:
            return None
        try:
            return datetime.fromtimestamp(self.time_date_stamp, tz=timezone.utc)
        except (OSError, ValueError, OverflowError):
            return None


# ---------------------------------------------------------------------------
# Optional header (tagged variant)
# ---------------------------------------------------------------------------

class _OptionalHeaderFields(_Frozen):
    """Fields shared by PE32 and PE32+ optional headers."""
    magic: int
    major_linker_version: int
    minor_linker_version: int
    size_of_code: int
    size_of_initialized_data: int
    size_of_uninitialized_data: int
    address_of_entry_point: int
    base_of_code: int
    image_base: int
    section_alignment: int
    file_alignment: int
    major_operating_system_version: int
    minor_operating_system_version: int
    major_image_version: int
    minor_image_version: int
    major_subsystem_version: int
    minor_subsystem_version: int
    win32_version_value: int
    size_of_image: int
    size_of_headers: int
    checksum: int
    subsystem: int
    dll_characteristics: int
    size_of_stack_reserve: int
    size_of_stack_commit: int
    size_of_heap_reserve: int
    size_of_heap_commit: int
    loader_flags: int
    number_of_rva_and_sizes: int

    @property
    def subsystem_type(self) -> Optional[Subsystem]:
        try:
            return Subsystem(self.subsystem)
        except ValueError:
            return None

    @property
    def subsystem_name(self) -> str:
        subsystem = self.subsystem_type
        if subsystem is None:
            return f"Unknown(0x{self.subsystem:x})"
        return _SUBSYSTEM_NAMES[subsystem]

    @property
    def dll_flags(self) -> DllCharacteristics:
        return DllCharacteristics(self.dll_characteristics)


class OptionalHeader32(_OptionalHeaderFields):
    """PE32 optional header (magic ``0x10B``); address-sized fields are 4 bytes."""
    kind: Literal["pe32"] = "pe32"
    base_of_data: int = 0

    @property
    def address_width(self) -> int:
        return 4


class OptionalHeader64(_OptionalHeaderFields):
    """PE32+ optional header (magic ``0x20B``); address-sized fields are 8 bytes."""
    kind: Literal["pe32+"] = "pe32+"

    @property
    def address_width(self) -> int:
        return 8


OptionalHeader = Annotated[
    Union[OptionalHeader32, OptionalHeader64],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Data directories
# ---------------------------------------------------------------------------

class DataDirectory(_Frozen):
    """One ``IMAGE_DATA_DIRECTORY`` entry.

    Attributes:
        index: Position in the directory table.
        name: Well-known slot name for indices 0-14, ``None`` beyond.
        virtual_address: RVA of the referenced table.
        size: Size of the referenced table in bytes.
    """
    index: int
    name: Optional[DataDirectoryName] = None
    virtual_address: int
    size: int

    @property
    def is_present(self) -> bool:
        return self.virtual_address != 0 and self.size != 0

    @property
    def label(self) -> str:
        return self.name.name if self.name is not None else f"#{self.index}"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

class SectionHeader(_Frozen):
    """A 40-byte ``IMAGE_SECTION_HEADER``.

    ``raw_name`` keeps all 8 bytes as stored; the name is not necessarily
    NUL-terminated.
    """
    raw_name: bytes
    virtual_size: int
    virtual_address: int
    size_of_raw_data: int
    pointer_to_raw_data: int
    pointer_to_relocations: int
    pointer_to_line_numbers: int
    number_of_relocations: int
    number_of_line_numbers: int
    characteristics: int

    @property
    def name(self) -> str:
        return self.raw_name.split(b"\x00", 1)[0].decode("utf-8", errors="replace")

    @property
    def flags(self) -> SectionFlags:
        return SectionFlags(self.characteristics & ~0x00F00000)

    @property
    def alignment(self) -> int:
        """Alignment in bytes encoded in bits 20-23, or 0 if unspecified."""
        nibble = (self.characteristics >> 20) & 0xF
        if nibble == 0 or nibble == 0xF:
            return 0
        return 1 << (nibble - 1)

    def contains_rva(self, rva: int) -> bool:
        return self.virtual_address <= rva < self.virtual_address + self.virtual_size


class Section(_Frozen):
    """A section header paired with the bytes stored for it in the file."""
    header: SectionHeader
    data: bytes = b""

    @property
    def name(self) -> str:
        return self.header.name

    @property
    def is_truncated(self) -> bool:
        """``True`` when the file holds fewer bytes than the header declares."""
        return len(self.data) < self.header.size_of_raw_data


# ---------------------------------------------------------------------------
# Image root
# ---------------------------------------------------------------------------

class PeImage(_Frozen):
    """Root of a fully decoded PE image.

    Attributes:
        dos_header: MS-DOS header.
        dos_stub: Raw bytes between the DOS header and the PE signature.
        coff_header: COFF file header.
        optional_header: PE32 or PE32+ optional header.
        data_directories: Directory table, ordered by index.
        sections: Sections in table order.
    """
    dos_header: DosHeader
    dos_stub: bytes = b""
    coff_header: CoffHeader
    optional_header: OptionalHeader
    data_directories: tuple[DataDirectory, ...] = ()
    sections: tuple[Section, ...] = ()

    @property
    def is_64bit(self) -> bool:
        return self.optional_header.kind == "pe32+"

    @property
    def is_dll(self) -> bool:
        return self.coff_header.is_dll

    @property
    def image_base(self) -> int:
        return self.optional_header.image_base

    @property
    def entry_point(self) -> int:
        return self.optional_header.address_of_entry_point

    def get_section(self, name: str) -> Optional[Section]:
        """Return the first section called *name*, or ``None``."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def get_data_directory(self, name: DataDirectoryName) -> Optional[DataDirectory]:
        """Return the directory in slot *name*, or ``None`` if the table is shorter."""
        if name < len(self.data_directories):
            return self.data_directories[name]
        return None

    def resolve_rva(self, rva: int) -> int:
        """Translate *rva* into a file offset; see :func:`facet.parsers.rva.resolve_rva`."""
        from facet.parsers.rva import resolve_rva

        return resolve_rva(self, rva)
