"""
Facet Parsers
==============

Bounds-checked readers for each PE structure, threaded through a single
:class:`ByteCursor`, plus the :func:`parse` orchestrator and RVA
resolution helpers.
"""

from facet.parsers.cursor import ByteCursor
from facet.parsers.pe_image import parse
from facet.parsers.rva import find_section, resolve_rva

__all__ = [
    "ByteCursor",
    "find_section",
    "parse",
    "resolve_rva",
]
