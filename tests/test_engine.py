"""Tests for the file-loading FacetEngine."""
import hashlib

import pytest

from shared.config import CoreConfig, FacetConfig
from facet.core.engine import FacetEngine, InspectionResult
from facet.core.errors import FileTooLargeError, InvalidSignatureError
from tests.builders import SectionSpec, build_pe


@pytest.fixture
def engine(quiet_logger):
    return FacetEngine(logger=quiet_logger)


class TestLoad:

    def test_load_file(self, engine, tmp_path, pe32_bytes):
        path = tmp_path / "sample.exe"
        path.write_bytes(pe32_bytes)
        result = engine.load(path)
        assert isinstance(result, InspectionResult)
        assert result.source == str(path.resolve())
        assert result.size == len(pe32_bytes)
        assert result.md5 == hashlib.md5(pe32_bytes).hexdigest()
        assert result.sha256 == hashlib.sha256(pe32_bytes).hexdigest()
        assert len(result.image.sections) == 2

    def test_missing_file(self, engine, tmp_path):
        with pytest.raises(FileNotFoundError):
            engine.load(tmp_path / "absent.exe")

    def test_directory_is_not_a_file(self, engine, tmp_path):
        with pytest.raises(FileNotFoundError):
            engine.load(tmp_path)

    def test_size_limit(self, quiet_logger, tmp_path, pe32_bytes):
        path = tmp_path / "big.exe"
        path.write_bytes(pe32_bytes)
        config = CoreConfig(facet=FacetConfig(max_file_size=1024))
        engine = FacetEngine(config=config, logger=quiet_logger)
        with pytest.raises(FileTooLargeError) as info:
            engine.load(path)
        assert info.value.limit == 1024
        assert info.value.size == len(pe32_bytes)


class TestInspectData:

    def test_memory_source(self, engine, pe64_bytes):
        result = engine.inspect_data(pe64_bytes)
        assert result.source == "<memory>"
        assert result.image.is_64bit

    def test_parse_error_propagates(self, engine):
        with pytest.raises(InvalidSignatureError):
            engine.inspect_data(b"\x00" * 128)

    def test_truncated_section_is_logged(self, engine, quiet_logger, caplog):
        data = build_pe(sections=[SectionSpec(b".text", 0x1000, 0x200, data=b"\x90" * 0x200)])
        quiet_logger.underlying.propagate = True
        with caplog.at_level("WARNING", logger="facetcore.test"):
            result = engine.inspect_data(data[:0x280])
        assert result.image.sections[0].is_truncated
        assert any("truncated" in r.getMessage() for r in caplog.records)

    def test_default_config(self, engine):
        assert engine.config.facet.max_file_size == FacetConfig().max_file_size
