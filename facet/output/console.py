"""
Facet Console Output
=====================

Rich-powered terminal display for decoded PE images: file summary, DOS
header, COFF header, optional header, data directories, and the section
table.

Uses the :class:`CoreConsole` abstraction for consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from rich.markup import escape

from shared.console import CoreConsole

from facet.core.engine import InspectionResult
from facet.core.models import (
    CoffHeader,
    DataDirectory,
    DosHeader,
    PeImage,
    Section,
    flag_names,
)
from facet.parsers.dos_header import DOS_HEADER_SIZE


def _hex(value: int) -> str:
    return f"0x{value:x}"


def _section_perms(section: Section) -> str:
    """Return an ``RWX``-style permission string for *section*."""
    names = set(flag_names(section.header.flags))
    return "".join((
        "R" if "MEM_READ" in names else "-",
        "W" if "MEM_WRITE" in names else "-",
        "X" if "MEM_EXECUTE" in names else "-",
    ))


class FacetConsoleOutput:
    """Render an :class:`InspectionResult` to the terminal.

    Args:
        console: Target console; a new :class:`CoreConsole` if omitted.
        show_empty_directories: Include directory slots with no RVA and size.
        stub_preview_bytes: How many DOS stub bytes to show as hex.
    """

    def __init__(
        self,
        console: CoreConsole | None = None,
        *,
        show_empty_directories: bool = False,
        stub_preview_bytes: int = 32,
    ) -> None:
        self._console = console or CoreConsole()
        self._show_empty_directories = show_empty_directories
        self._stub_preview_bytes = stub_preview_bytes

    def display(self, result: InspectionResult) -> None:
        """Display every part of the decoded image."""
        image = result.image
        self._display_summary(result)
        self._display_dos_header(image.dos_header, image.dos_stub)
        self._display_coff_header(image.coff_header)
        self._display_optional_header(image)
        self._display_data_directories(image.data_directories)
        self._display_sections(image.sections)

    # ------------------------------------------------------------------ #
    #  Individual panels
    # ------------------------------------------------------------------ #

    def _display_summary(self, result: InspectionResult) -> None:
        image = result.image
        self._console.section("PE Image")
        self._console.key_values("File", [
            ("Source", escape(result.source)),
            ("Size", f"{result.size:,} bytes"),
            ("MD5", result.md5),
            ("SHA-256", result.sha256),
            ("Format", "PE32+" if image.is_64bit else "PE32"),
            ("Type", "DLL" if image.is_dll else "Executable"),
        ])

    def _display_dos_header(self, header: DosHeader, stub: bytes) -> None:
        self._console.section("DOS Header")
        self._console.key_values("IMAGE_DOS_HEADER", [
            ("e_magic", _hex(header.magic)),
            ("e_cblp", header.last_page_size),
            ("e_cp", header.page_count),
            ("e_cparhdr", header.header_size),
            ("e_lfanew", _hex(header.file_address_of_new_header)),
            ("Stub length", f"{len(stub)} bytes"),
        ])
        if stub and self._stub_preview_bytes:
            self._console.hexdump(
                "DOS stub", stub, base_offset=DOS_HEADER_SIZE, limit=self._stub_preview_bytes
            )

    def _display_coff_header(self, header: CoffHeader) -> None:
        self._console.section("COFF Header")
        timestamp = header.timestamp
        self._console.key_values("IMAGE_FILE_HEADER", [
            ("Machine", f"{header.machine_name} ({_hex(header.machine)})"),
            ("Sections", header.number_of_sections),
            ("Timestamp", timestamp.isoformat() if timestamp else "-"),
            ("Symbol table", _hex(header.pointer_to_symbol_table)),
            ("Symbols", header.number_of_symbols),
            ("Optional header size", header.size_of_optional_header),
            ("Characteristics", (
                f"{_hex(header.characteristics)} "
                f"{' | '.join(flag_names(header.flags)) or '-'}"
            )),
        ])

    def _display_optional_header(self, image: PeImage) -> None:
        header = image.optional_header
        self._console.section("Optional Header")
        pairs: list[tuple[str, object]] = [
            ("Magic", f"{_hex(header.magic)} ({header.kind.upper()})"),
            ("Linker", f"{header.major_linker_version}.{header.minor_linker_version}"),
            ("Entry point", _hex(header.address_of_entry_point)),
            ("Base of code", _hex(header.base_of_code)),
        ]
        if header.kind == "pe32":
            pairs.append(("Base of data", _hex(header.base_of_data)))
        pairs += [
            ("Image base", _hex(header.image_base)),
            ("Alignment", (
                f"section {_hex(header.section_alignment)}, "
                f"file {_hex(header.file_alignment)}"
            )),
            ("OS version", (
                f"{header.major_operating_system_version}."
                f"{header.minor_operating_system_version}"
            )),
            ("Subsystem", f"{header.subsystem_name} ({header.subsystem})"),
            ("Subsystem version", (
                f"{header.major_subsystem_version}.{header.minor_subsystem_version}"
            )),
            ("Size of image", _hex(header.size_of_image)),
            ("Size of headers", _hex(header.size_of_headers)),
            ("Checksum", _hex(header.checksum)),
            ("DLL characteristics", (
                f"{_hex(header.dll_characteristics)} "
                f"{' | '.join(flag_names(header.dll_flags)) or '-'}"
            )),
            ("Stack reserve/commit", (
                f"{_hex(header.size_of_stack_reserve)} / "
                f"{_hex(header.size_of_stack_commit)}"
            )),
            ("Heap reserve/commit", (
                f"{_hex(header.size_of_heap_reserve)} / "
                f"{_hex(header.size_of_heap_commit)}"
            )),
            ("Loader flags", _hex(header.loader_flags)),
            ("RVA and sizes", header.number_of_rva_and_sizes),
        ]
        self._console.key_values("IMAGE_OPTIONAL_HEADER", pairs)

    def _display_data_directories(self, directories: tuple[DataDirectory, ...]) -> None:
        self._console.section("Data Directories")
        shown = [
            d for d in directories
            if self._show_empty_directories or d.is_present
        ]
        if not shown:
            self._console.info("No data directories present.")
            return
        self._console.table(
            "IMAGE_DATA_DIRECTORY",
            ["#", "Name", "RVA", "Size"],
            [
                (d.index, d.label, _hex(d.virtual_address), _hex(d.size))
                for d in shown
            ],
            caption=f"{len(shown)} of {len(directories)} shown",
            styles=["dim", "bright_cyan", "", ""],
        )

    def _display_sections(self, sections: tuple[Section, ...]) -> None:
        self._console.section("Sections")
        if not sections:
            self._console.info("Image has no sections.")
            return
        rows = []
        for section in sections:
            header = section.header
            extracted = f"{len(section.data):,}"
            if section.is_truncated:
                extracted = f"[core.warning]{extracted} (truncated)[/core.warning]"
            rows.append((
                escape(section.name) or "-",
                _hex(header.virtual_address),
                _hex(header.virtual_size),
                _hex(header.pointer_to_raw_data),
                _hex(header.size_of_raw_data),
                extracted,
                _section_perms(section),
            ))
        self._console.table(
            "IMAGE_SECTION_HEADER",
            ["Name", "VA", "VSize", "Raw ptr", "Raw size", "Extracted", "Perm"],
            rows,
            styles=["bright_cyan"],
        )
        truncated = [s.name for s in sections if s.is_truncated]
        if truncated:
            self._console.warning(
                "File ends before the raw data of: " + ", ".join(escape(n) or "-" for n in truncated)
            )
