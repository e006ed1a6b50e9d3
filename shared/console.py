"""
Facet Console Interface
========================

Rich-powered console used by the Facet command-line tool.

:class:`CoreConsole` wraps :class:`rich.console.Console` with a fixed
theme and the handful of shapes the PE views need: section rules,
severity-coloured one-liners, column tables, field/value tables, and a
classic ``offset | hex | ascii`` dump for raw byte runs.

Callers pass Rich markup; anything taken from the input file must be run
through :func:`rich.markup.escape` first.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_CORE_THEME = Theme(
    {
        "core.section": "bold bright_magenta",
        "core.success": "bold green",
        "core.warning": "bold yellow",
        "core.error": "bold red",
        "core.info": "bold bright_blue",
        "core.dim": "dim white",
        "core.highlight": "bold bright_white",
        "core.key": "bold bright_cyan",
        "core.offset": "dim cyan",
    }
)

_HEXDUMP_WIDTH = 16


def _printable(chunk: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)


class CoreConsole:
    """Themed console for Facet output.

    Usage::

        con = CoreConsole()
        con.section("COFF Header")
        con.key_values("IMAGE_FILE_HEADER", [("Machine", "x86_64")])
        con.hexdump("DOS stub", stub, base_offset=0x40)
    """

    def __init__(self, *, quiet: bool = False, record: bool = False, width: int | None = None) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output.
            record: Keep a copy of everything printed for :meth:`export_text`.
            width:  Fixed width; ``None`` follows the terminal.

        Errors go to stderr so that a failed ``--json`` run leaves stdout empty.
        """
        self._console = Console(
            theme=_CORE_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
            width=width,
        )
        self._err_console = Console(
            theme=_CORE_THEME,
            stderr=True,
            quiet=quiet,
            highlight=False,
            width=width,
        )

    # ------------------------------------------------------------------ #
    #  Headings and messages
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        self._console.rule(f"  {title}  ", style="core.section", characters="─")
        self._console.print()

    def _message(self, style: str, marker: str, label: str, message: str, *, console: Console | None = None) -> None:
        (console or self._console).print(f"[{style}][{marker}] {label}:[/{style}] {message}")

    def success(self, message: str) -> None:
        self._message("core.success", "✔", "SUCCESS", message)

    def warning(self, message: str) -> None:
        self._message("core.warning", "⚠", "WARNING", message)

    def error(self, message: str) -> None:
        self._message("core.error", "✘", "ERROR", message, console=self._err_console)

    def info(self, message: str) -> None:
        self._message("core.info", "ℹ", "INFO", message)

    # ------------------------------------------------------------------ #
    #  Tables
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Render a column table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Row tuples; every cell is passed through ``str``.
            caption:  Optional footer caption.
            styles:   Per-column Rich styles; missing entries are unstyled.
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        styles = list(styles or ())
        for idx, name in enumerate(columns):
            tbl.add_column(name, style=styles[idx] if idx < len(styles) else "")
        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))
        self._console.print(tbl)

    def key_values(self, title: str, pairs: Sequence[tuple[str, Any]]) -> None:
        """Render a two-column field/value table."""
        tbl = Table(title=title, border_style="bright_cyan", show_header=False, padding=(0, 1))
        tbl.add_column("Field", style="core.key")
        tbl.add_column("Value", style="core.highlight")
        for key, value in pairs:
            tbl.add_row(key, str(value))
        self._console.print(tbl)

    def hexdump(self, title: str, data: bytes, *, base_offset: int = 0, limit: int | None = None) -> None:
        """Render *data* as 16-byte rows of offset, hex, and ASCII.

        Args:
            title:       Table title.
            data:        Bytes to show.
            base_offset: File offset of ``data[0]``, used for the offset column.
            limit:       Show at most this many bytes; the caption notes the rest.
        """
        shown = data if limit is None else data[:limit]
        tbl = Table(title=title, border_style="bright_cyan", show_header=False, padding=(0, 1))
        tbl.add_column("Offset", style="core.offset")
        tbl.add_column("Hex")
        tbl.add_column("ASCII", style="core.dim")
        for start in range(0, len(shown), _HEXDUMP_WIDTH):
            chunk = shown[start:start + _HEXDUMP_WIDTH]
            tbl.add_row(
                f"{base_offset + start:08x}",
                chunk.hex(" "),
                escape(_printable(chunk)),
            )
        if len(shown) < len(data):
            tbl.caption = f"{len(data) - len(shown)} more byte(s)"
        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Recording
    # ------------------------------------------------------------------ #

    def export_text(self) -> str:
        """Return everything printed so far (requires ``record=True``)."""
        return self._console.export_text()
