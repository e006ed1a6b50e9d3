"""
Facet Configuration Management
===============================

TOML-backed settings for the Facet engine and command-line tool, held in
slotted dataclasses.

The file has two tables, ``[global]`` (logging) and ``[facet]``
(input limits and presentation).  Every key is optional.  Keys the code
does not know are ignored; values of the wrong kind or outside their range
raise :class:`ConfigError` when the file is loaded.

Only the engine and the CLI read configuration.  ``facet.parse`` takes a
byte buffer and nothing else.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_OUTPUT_FORMATS = ("table", "json")


class ConfigError(ValueError):
    """A configuration value is missing its expected type or range."""


# ========================== Sections =======================================


@dataclass(slots=True)
class FacetConfig:
    """``[facet]`` -- engine limits and display options."""

    max_file_size: int = 268_435_456  # 256 MiB
    show_empty_directories: bool = False
    stub_preview_bytes: int = 32
    output_format: str = "table"

    def __post_init__(self) -> None:
        if not isinstance(self.max_file_size, int) or self.max_file_size <= 0:
            raise ConfigError(f"facet.max_file_size must be a positive integer, got {self.max_file_size!r}")
        if not isinstance(self.stub_preview_bytes, int) or self.stub_preview_bytes < 0:
            raise ConfigError(
                f"facet.stub_preview_bytes must be a non-negative integer, got {self.stub_preview_bytes!r}"
            )
        if self.output_format not in _OUTPUT_FORMATS:
            raise ConfigError(
                f"facet.output_format must be one of {', '.join(_OUTPUT_FORMATS)}, "
                f"got {self.output_format!r}"
            )


@dataclass(slots=True)
class GlobalConfig:
    """``[global]`` -- logging verbosity and destinations."""

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if str(self.log_level).upper() not in _LOG_LEVELS:
            raise ConfigError(f"global.log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}")
        self.log_level = self.log_level.upper()


# =========================== Root ==========================================


@dataclass(slots=True)
class CoreConfig:
    """Root configuration object.

    Usage:
        >>> config = CoreConfig.load()                  # project config.toml
        >>> config = CoreConfig.load("custom.toml")
        >>> config.facet.max_file_size
        268435456
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    facet: FacetConfig = field(default_factory=FacetConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> CoreConfig:
        """Load configuration from *path*, or from the project ``config.toml``.

        A missing default file yields pure defaults; a missing file that
        the caller named explicitly is an error.

        Raises:
            FileNotFoundError: *path* was given and does not exist.
            tomllib.TOMLDecodeError: The file is not valid TOML.
            ConfigError: A value has the wrong type or is out of range.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=_build_section(GlobalConfig, raw.get("global", {})),
            facet=_build_section(FacetConfig, raw.get("facet", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _build_section(section_cls: type, data: Any) -> Any:
    """Instantiate *section_cls* from the keys of *data* it declares."""
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a table for {section_cls.__name__}, got {type(data).__name__}")
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in data.items() if k in known})
