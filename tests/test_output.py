"""Tests for the console renderer and JSON report generator."""
import json

import pytest

import facet
from shared.console import CoreConsole
from facet.core.engine import FacetEngine
from facet.output import FacetConsoleOutput, FacetReportGenerator
from tests.builders import SectionSpec, build_pe


@pytest.fixture
def result(quiet_logger, pe32_bytes):
    return FacetEngine(logger=quiet_logger).inspect_data(pe32_bytes, source="sample.exe")


class TestReport:

    def test_build(self, result):
        report = FacetReportGenerator().build(result)
        assert report["report_type"] == "facet_pe_image"
        assert report["file"]["sha256"] == result.sha256
        assert report["coff_header"]["machine_name"] == "x86"
        assert report["optional_header"]["kind"] == "pe32"
        assert report["optional_header"]["base_of_data"] == 0x2000
        assert [d["name"] for d in report["data_directories"]] == ["EXPORT", "IMPORT", "RESOURCE"]
        text = report["sections"][0]
        assert text["name"] == ".text"
        assert text["extracted_size"] == 0x80
        assert text["truncated"] is False
        assert "MEM_EXECUTE" in text["flags"]
        assert "data" not in text

    def test_version_matches_package(self, result):
        assert FacetReportGenerator().build(result)["version"] == facet.__version__

    def test_to_json_is_valid(self, result):
        parsed = json.loads(FacetReportGenerator().to_json(result))
        assert len(parsed["sections"]) == 2

    def test_generate_json(self, result, tmp_path):
        target = tmp_path / "reports" / "out.json"
        written = FacetReportGenerator().generate_json(result, target)
        assert written == str(target.resolve())
        assert json.loads(target.read_text(encoding="utf-8"))["file"]["source"] == "sample.exe"


class TestConsoleOutput:

    def _render(self, result, **kwargs) -> str:
        console = CoreConsole(record=True, width=160)
        FacetConsoleOutput(console, **kwargs).display(result)
        return console.export_text()

    def test_renders_all_parts(self, result):
        text = self._render(result)
        for expected in ("DOS Header", "COFF Header", "Optional Header", ".text", ".rdata", "IMPORT"):
            assert expected in text
        assert "R-X" in text

    def test_empty_directories_hidden_by_default(self, quiet_logger, pe64_bytes):
        result = FacetEngine(logger=quiet_logger).inspect_data(pe64_bytes)
        assert "DEBUG" not in self._render(result)
        assert "DEBUG" in self._render(result, show_empty_directories=True)

    def test_stub_hexdump(self, quiet_logger):
        data = build_pe(stub=b"This program cannot be run in DOS mode.")
        result = FacetEngine(logger=quiet_logger).inspect_data(data)
        text = self._render(result, stub_preview_bytes=16)
        assert "00000040" in text
        assert "This program can" in text
        assert "48 more byte(s)" in text

    def test_truncated_section_warning(self, quiet_logger):
        data = build_pe(sections=[SectionSpec(b".text", 0x1000, 0x200, data=b"\x90" * 0x200)])
        result = FacetEngine(logger=quiet_logger).inspect_data(data[:0x280])
        text = self._render(result)
        assert "truncated" in text
        assert "File ends before the raw data of: .text" in text
