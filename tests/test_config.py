"""Tests for TOML configuration loading."""
import pytest

from shared.config import ConfigError, CoreConfig, FacetConfig, GlobalConfig


class TestCoreConfig:

    def test_defaults(self):
        config = CoreConfig()
        assert config.facet == FacetConfig()
        assert config.global_settings == GlobalConfig()
        assert config.facet.output_format == "table"

    def test_load_overrides(self, tmp_path):
        path = tmp_path / "facet.toml"
        path.write_text(
            '[global]\nlog_level = "DEBUG"\n\n'
            '[facet]\nmax_file_size = 4096\nshow_empty_directories = true\n',
            encoding="utf-8",
        )
        config = CoreConfig.load(path)
        assert config.global_settings.log_level == "DEBUG"
        assert config.facet.max_file_size == 4096
        assert config.facet.show_empty_directories is True
        assert config.facet.stub_preview_bytes == 32

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "facet.toml"
        path.write_text('[facet]\nfuture_option = 1\n[other]\nx = 2\n', encoding="utf-8")
        assert CoreConfig.load(path).facet == FacetConfig()

    def test_explicit_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CoreConfig.load(tmp_path / "nope.toml")

    def test_project_config_loads(self):
        config = CoreConfig.load()
        assert config.facet.output_format in ("table", "json")

    def test_to_dict(self):
        data = CoreConfig().to_dict()
        assert set(data) == {"global_settings", "facet"}
        assert data["facet"]["max_file_size"] == 268_435_456


class TestValidation:

    @pytest.mark.parametrize("body", [
        '[facet]\noutput_format = "xml"\n',
        '[facet]\nmax_file_size = 0\n',
        '[facet]\nstub_preview_bytes = -1\n',
        '[global]\nlog_level = "LOUD"\n',
        'facet = 3\n',
    ])
    def test_rejects_bad_values(self, tmp_path, body):
        path = tmp_path / "bad.toml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ConfigError):
            CoreConfig.load(path)

    def test_log_level_normalised(self):
        assert GlobalConfig(log_level="debug").log_level == "DEBUG"

    def test_stale_global_keys_are_ignored(self, tmp_path):
        path = tmp_path / "old.toml"
        path.write_text(
            '[global]\nlog_level = "WARNING"\noutput_dir = "reports"\nversion = "0.9"\n',
            encoding="utf-8",
        )
        config = CoreConfig.load(path)
        assert config.global_settings.log_level == "WARNING"
        assert set(config.to_dict()["global_settings"]) == {"log_level", "log_file", "log_json", "debug"}
