"""End-to-end tests for :func:`facet.parsers.pe_image.parse`."""
import struct

import pytest
from pydantic import ValidationError

from facet import parse
from facet.core.errors import (
    InvalidSignatureError,
    InvalidStructureError,
    ParseError,
    TruncatedDataError,
    UnsupportedOptionalHeaderMagicError,
)
from facet.core.models import DataDirectoryName, MachineType, PeImage
from tests.builders import PE32_PLUS, build_pe


class TestWellFormedPe32:
    """Two sections and three data directories."""

    def test_structure(self, pe32_bytes):
        image = parse(pe32_bytes)
        assert image.dos_header.file_address_of_new_header == 0x80
        assert len(image.dos_stub) == 0x80 - 64
        assert image.coff_header.machine_type is MachineType.I386
        assert image.coff_header.number_of_sections == 2
        assert image.optional_header.kind == "pe32"
        assert not image.is_64bit
        assert image.image_base == 0x400000
        assert image.entry_point == 0x1000
        assert len(image.data_directories) == 3
        assert [s.name for s in image.sections] == [".text", ".rdata"]

    def test_section_bytes(self, pe32_bytes):
        image = parse(pe32_bytes)
        text, rdata = image.sections
        assert text.data == b"\xCC" * 0x80
        assert rdata.data == bytes(range(256)) * 2
        assert pe32_bytes[text.header.pointer_to_raw_data:][:0x80] == text.data

    def test_lookup_helpers(self, pe32_bytes):
        image = parse(pe32_bytes)
        assert image.get_section(".rdata") is image.sections[1]
        assert image.get_section(".reloc") is None
        imports = image.get_data_directory(DataDirectoryName.IMPORT)
        assert (imports.virtual_address, imports.size) == (0x2100, 0x28)
        assert image.get_data_directory(DataDirectoryName.DEBUG) is None

    def test_parse_is_deterministic(self, pe32_bytes):
        assert parse(pe32_bytes) == parse(pe32_bytes)

    @pytest.mark.parametrize("wrap", [bytes, bytearray, memoryview])
    def test_accepts_bytes_like(self, pe32_bytes, wrap):
        assert parse(wrap(pe32_bytes)) == parse(pe32_bytes)

    def test_image_is_immutable(self, pe32_bytes):
        image = parse(pe32_bytes)
        with pytest.raises(ValidationError):
            image.sections = ()
        with pytest.raises(ValidationError):
            image.coff_header.machine = 0

    def test_model_round_trip(self, pe32_bytes):
        image = parse(pe32_bytes)
        assert PeImage.model_validate(image.model_dump()).model_dump() == image.model_dump()


class TestWellFormedPe64:

    def test_structure(self, pe64_bytes):
        image = parse(pe64_bytes)
        assert image.is_64bit
        assert image.is_dll
        assert image.coff_header.machine_name == "x86_64"
        assert image.optional_header.kind == "pe32+"
        assert image.image_base == 0x140000000
        assert len(image.data_directories) == 16
        assert image.data_directories[1].is_present
        assert image.data_directories[15].name is None

    def test_bss_section_has_no_data(self, pe64_bytes):
        bss = parse(pe64_bytes).get_section(".bss")
        assert bss.header.pointer_to_raw_data == 0
        assert bss.data == b""
        assert not bss.is_truncated

    def test_round_trip_keeps_variant(self, pe64_bytes):
        image = parse(pe64_bytes)
        restored = PeImage.model_validate(image.model_dump())
        assert restored.optional_header.kind == "pe32+"
        assert restored.model_dump() == image.model_dump()


class TestFailures:
    """Every malformed input fails with a typed ParseError."""

    def test_empty_buffer(self):
        with pytest.raises(TruncatedDataError):
            parse(b"")

    def test_not_mz(self):
        data = bytearray(build_pe())
        data[0] = ord("X")
        with pytest.raises(InvalidSignatureError):
            parse(bytes(data))

    def test_bad_pe_offset(self):
        data = bytearray(build_pe())
        data[0x3C:0x40] = struct.pack("<I", 0x10)
        with pytest.raises(InvalidStructureError):
            parse(bytes(data))

    def test_bad_pe_signature(self):
        data = bytearray(build_pe())
        data[0x81] = ord("X")
        with pytest.raises(InvalidSignatureError):
            parse(bytes(data))

    def test_unsupported_magic(self):
        with pytest.raises(UnsupportedOptionalHeaderMagicError):
            parse(build_pe(magic=0x107))

    @pytest.mark.parametrize("cut", [0x30, 0x82, 0x90, 0x80 + 24 + 60])
    def test_truncated_headers(self, cut):
        with pytest.raises(TruncatedDataError):
            parse(build_pe(magic=PE32_PLUS, truncate_to=cut))

    def test_errors_share_a_base(self):
        with pytest.raises(ParseError):
            parse(b"MZ")
