"""
Facet Structured Logger
========================

Provides :class:`CoreLogger`, the logging facade used by the engine and
the command-line front end.  Records go to a Rich handler on stderr (so
``--json`` output on stdout stays clean) and, optionally, to a rotating
file as plain text or JSON lines.

The PE parser itself never logs; a parse failure reaches the caller as a
typed exception and is logged once, by whoever handles it.

Every record carries the component name and, while a
:meth:`CoreLogger.operation` block is active, the operation name.  Keyword
arguments that are not standard :mod:`logging` options are gathered into
a ``context`` mapping::

    log.error("Parse failed for %s", path, error_type="TruncatedDataError", offset=0x3c)

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_LOGGER_PREFIX = "facetcore"
_PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s%(context_suffix)s"
_RESERVED_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


def _format_context(context: dict[str, Any]) -> str:
    """Render *context* as ``key=value`` pairs; ints named ``offset`` in hex."""
    parts = []
    for key, value in context.items():
        if key == "offset" and isinstance(value, int):
            value = f"0x{value:x}"
        parts.append(f"{key}={value}")
    return " ".join(parts)


# ========================== Formatters =====================================


class _JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: ``timestamp``, ``level``, ``logger``, ``message``, ``component``,
    and where present ``operation``, ``context`` and ``exc_info``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "component": getattr(record, "component", None),
        }
        operation = getattr(record, "operation", None)
        if operation:
            entry["operation"] = operation
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _ContextFilter(logging.Filter):
    """Adds ``context_suffix`` so plain-text handlers can show the context."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = getattr(record, "context", None)
        record.context_suffix = f" [{_format_context(context)}]" if context else ""
        return True


def _console_handler(level: int) -> RichHandler:
    handler = RichHandler(
        console=Console(theme=_LOG_THEME, stderr=True),
        level=level,
        show_path=False,
        show_time=True,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s%(context_suffix)s"))
    handler.addFilter(_ContextFilter())
    return handler


def _file_handler(
    path: Path, level: int, json_logs: bool, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
        handler.addFilter(_ContextFilter())
    return handler


# ========================== CoreLogger =====================================


class CoreLogger:
    """Component-scoped logger for Facet.

    Usage::

        log = CoreLogger("engine", log_file="facet.log", json_logs=True)
        log.info("Loading %s", path)
        with log.operation("parse"), log.timed("parse sample.exe"):
            ...

    Args:
        component:       Name of the component; the stdlib logger is
                         ``facetcore.<component>``.
        log_level:       Minimum severity name (DEBUG, INFO, WARNING, ...).
        log_file:        Rotating log file path; empty or ``None`` disables it.
        json_logs:       Write JSON lines instead of plain text to the file.
        max_bytes:       Rotation threshold of the log file.
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._operation: str | None = None
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        self._logger = logging.getLogger(f"{_LOGGER_PREFIX}.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False
        # Re-instantiating for the same component replaces the handlers
        self._logger.handlers.clear()

        if console_output:
            self._logger.addHandler(_console_handler(level))
        if log_file:
            self._logger.addHandler(
                _file_handler(Path(log_file), level, json_logs, max_bytes, backup_count)
            )

    @property
    def component(self) -> str:
        return self._component

    @property
    def underlying(self) -> logging.Logger:
        """The stdlib :class:`logging.Logger` behind this facade."""
        return self._logger

    # ------------------------------------------------------------------ #
    #  Scopes
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[CoreLogger]:
        """Tag every record logged inside the block with ``operation=name``."""
        previous, self._operation = self._operation, name
        try:
            yield self
        finally:
            self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log *label* at DEBUG on entry and again with the elapsed time on exit."""
        start = time.perf_counter()
        self.debug("Started: %s", label)
        try:
            yield
        finally:
            self.debug("Completed: %s (%.3f sec)", label, time.perf_counter() - start)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        options = {k: kwargs.pop(k) for k in list(kwargs) if k in _RESERVED_KWARGS}
        extra = {
            "component": self._component,
            "operation": self._operation,
            "context": kwargs,
        }
        self._logger.log(level, msg, *args, extra=extra, **options)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, args, kwargs)
