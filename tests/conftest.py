"""Shared fixtures for Facet tests."""
import pytest

from shared.logger import CoreLogger
from tests.builders import PE32, PE32_PLUS, SectionSpec, build_pe


@pytest.fixture
def pe32_bytes():
    """A PE32 image with 2 sections and 3 data directories."""
    return build_pe(
        magic=PE32,
        directories=[(0x2000, 0x3C), (0x2100, 0x28), (0x3000, 0x1F0)],
        sections=[
            SectionSpec(b".text", 0x1000, 0x80, data=b"\xCC" * 0x80),
            SectionSpec(b".rdata", 0x2000, 0x300, data=bytes(range(256)) * 2,
                        characteristics=0x40000040),
        ],
    )


@pytest.fixture
def pe64_bytes():
    """A PE32+ DLL with 16 data directories and 3 sections, one without file data."""
    directories = [(0, 0)] * 16
    directories[1] = (0x2000, 0x50)
    return build_pe(
        magic=PE32_PLUS,
        machine=0x8664,
        characteristics=0x2022,
        directories=directories,
        sections=[
            SectionSpec(b".text", 0x1000, 0x200, data=b"\x90" * 0x200),
            SectionSpec(b".rdata", 0x2000, 0x100, data=b"\x01" * 0x100,
                        characteristics=0x40000040),
            SectionSpec(b".bss", 0x3000, 0x800, characteristics=0xC0000080),
        ],
    )


@pytest.fixture
def quiet_logger():
    """A CoreLogger that writes nowhere."""
    return CoreLogger("test", console_output=False)
