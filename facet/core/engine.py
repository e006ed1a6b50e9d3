"""
Facet Engine
=============

File-loading wrapper around the in-memory PE parser.

The parser in :mod:`facet.parsers.pe_image` works on a resident byte
buffer and performs no I/O.  The engine supplies everything around it:

    1. Check the file exists and respects the configured size limit
    2. Read the bytes and compute hashes (MD5, SHA-256)
    3. Decode the image
    4. Log each step and any failure

Parse failures are logged and re-raised unchanged so that callers see the
typed :class:`~facet.core.errors.ParseError`.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from shared.config import CoreConfig
from shared.logger import CoreLogger

from facet.core.errors import FileTooLargeError, ParseError
from facet.core.models import PeImage
from facet.parsers.cursor import BytesLike
from facet.parsers.pe_image import parse


class InspectionResult(BaseModel):
    """A decoded image together with the metadata of its source.

    Attributes:
        source: Resolved file path, or ``"<memory>"``.
        size: Input size in bytes.
        md5: MD5 hash of the input.
        sha256: SHA-256 hash of the input.
        image: The decoded PE image.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    size: int
    md5: str
    sha256: str
    image: PeImage


class FacetEngine:
    """Loads PE files from disk and decodes them.

    Usage::

        engine = FacetEngine()
        result = engine.load("/path/to/app.exe")
        print(result.image.coff_header.machine_name)
    """

    def __init__(
        self,
        config: CoreConfig | None = None,
        logger: CoreLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Facet configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: CoreConfig = config or CoreConfig()
        self._logger: CoreLogger = logger or CoreLogger("facet.engine")

    @property
    def config(self) -> CoreConfig:
        return self._config

    def load(self, file_path: str | Path) -> InspectionResult:
        """Read *file_path* and decode it.

        Raises:
            FileNotFoundError: The path does not exist or is not a file.
            FileTooLargeError: The file exceeds ``facet.max_file_size``.
            ParseError: The contents are not a valid PE image.
        """
        path = Path(file_path)
        if not path.is_file():
            self._logger.error("File not found: %s", path)
            raise FileNotFoundError(f"File not found: {path}")

        file_size = path.stat().st_size
        max_size = self._config.facet.max_file_size
        if file_size > max_size:
            self._logger.error(
                "File too large: %s (%d bytes, max %d)", path, file_size, max_size
            )
            raise FileTooLargeError(str(path), file_size, max_size)

        self._logger.info("Loading %s (%d bytes)", path, file_size)
        return self.inspect_data(path.read_bytes(), source=str(path.resolve()))

    def inspect_data(self, data: BytesLike, source: str = "<memory>") -> InspectionResult:
        """Hash and decode an in-memory buffer.

        Raises:
            ParseError: The buffer is not a valid PE image.
        """
        data = bytes(data)
        with self._logger.operation("parse"):
            try:
                with self._logger.timed(f"parse {source}"):
                    image = parse(data)
            except ParseError as exc:
                self._logger.error(
                    "Parse failed for %s: %s", source, exc,
                    error_type=type(exc).__name__, offset=exc.offset,
                )
                raise

            self._logger.info(
                "Decoded %s: %s %s, %d section(s), %d data director%s",
                source,
                image.coff_header.machine_name,
                image.optional_header.kind.upper(),
                len(image.sections),
                len(image.data_directories),
                "y" if len(image.data_directories) == 1 else "ies",
            )
            for section in image.sections:
                if section.is_truncated:
                    self._logger.warning(
                        "Section %r truncated: %d of %d byte(s) present",
                        section.name,
                        len(section.data),
                        section.header.size_of_raw_data,
                    )

        return InspectionResult(
            source=source,
            size=len(data),
            md5=hashlib.md5(data).hexdigest(),
            sha256=hashlib.sha256(data).hexdigest(),
            image=image,
        )
