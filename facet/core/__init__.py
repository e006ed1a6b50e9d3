"""
Facet Core Module
==================

Contains the data models and the exception hierarchy for the Facet PE
decoder.  The file-loading engine lives in :mod:`facet.core.engine` and is
imported from there directly, since it depends on the parsers.
"""

from facet.core.errors import (
    FacetError,
    FileTooLargeError,
    InvalidSignatureError,
    InvalidStructureError,
    ParseError,
    RvaOutOfRangeError,
    TruncatedDataError,
    UnsupportedOptionalHeaderMagicError,
)
from facet.core.models import (
    CoffHeader,
    DataDirectory,
    DataDirectoryName,
    DosHeader,
    MachineType,
    OptionalHeader32,
    OptionalHeader64,
    PeImage,
    Section,
    SectionHeader,
)

__all__ = [
    "CoffHeader",
    "DataDirectory",
    "DataDirectoryName",
    "DosHeader",
    "FacetError",
    "FileTooLargeError",
    "InvalidSignatureError",
    "InvalidStructureError",
    "MachineType",
    "OptionalHeader32",
    "OptionalHeader64",
    "ParseError",
    "PeImage",
    "RvaOutOfRangeError",
    "Section",
    "SectionHeader",
    "TruncatedDataError",
    "UnsupportedOptionalHeaderMagicError",
]
