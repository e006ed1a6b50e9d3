"""
Facet Report Generator
=======================

Generates structured JSON reports from decoded PE images, suitable for
machine consumption and downstream analysis pipelines.

Header models are serialised with Pydantic's JSON mode.  Section bytes
are not embedded; each section reports how many bytes were extracted and
whether the file truncated it.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from facet import __version__
from facet.core.engine import InspectionResult
from facet.core.models import flag_names


class FacetReportGenerator:
    """Build and write JSON reports for :class:`InspectionResult` objects.

    Usage::

        generator = FacetReportGenerator()
        generator.generate_json(result, "report.json")
    """

    def build(self, result: InspectionResult) -> dict[str, Any]:
        """Return the report as a JSON-serialisable dictionary."""
        image = result.image
        coff = image.coff_header
        optional = image.optional_header
        timestamp = coff.timestamp

        return {
            "report_type": "facet_pe_image",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "file": {
                "source": result.source,
                "size": result.size,
                "md5": result.md5,
                "sha256": result.sha256,
            },
            "dos_header": image.dos_header.model_dump(mode="json"),
            "dos_stub_size": len(image.dos_stub),
            "coff_header": {
                **coff.model_dump(mode="json"),
                "machine_name": coff.machine_name,
                "timestamp_utc": timestamp.isoformat() if timestamp else None,
                "characteristics_flags": flag_names(coff.flags),
            },
            "optional_header": {
                **optional.model_dump(mode="json"),
                "subsystem_name": optional.subsystem_name,
                "dll_characteristics_flags": flag_names(optional.dll_flags),
            },
            "data_directories": [
                {
                    "index": d.index,
                    "name": d.name.name if d.name is not None else None,
                    "virtual_address": d.virtual_address,
                    "size": d.size,
                }
                for d in image.data_directories
            ],
            "sections": [
                {
                    "name": s.name,
                    "raw_name": s.header.raw_name.hex(),
                    "virtual_address": s.header.virtual_address,
                    "virtual_size": s.header.virtual_size,
                    "pointer_to_raw_data": s.header.pointer_to_raw_data,
                    "size_of_raw_data": s.header.size_of_raw_data,
                    "extracted_size": len(s.data),
                    "truncated": s.is_truncated,
                    "characteristics": s.header.characteristics,
                    "flags": flag_names(s.header.flags),
                }
                for s in image.sections
            ],
        }

    def to_json(self, result: InspectionResult) -> str:
        return json.dumps(self.build(result), indent=2, ensure_ascii=False, default=str)

    def generate_json(self, result: InspectionResult, output_path: str | Path) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_json(result))

        return str(path.resolve())
