"""
Facet Output Module
====================

Console display and report generation for decoded PE images.
"""

from facet.output.console import FacetConsoleOutput
from facet.output.report import FacetReportGenerator

__all__ = [
    "FacetConsoleOutput",
    "FacetReportGenerator",
]
