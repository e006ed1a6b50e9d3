"""
Facet CLI -- PE Image Decoder
==============================

Click-based command-line interface for the Facet PE decoder.  Loads a
file, decodes its headers, data directories and sections, and renders the
result as Rich tables or JSON.

Usage::

    # Decode and display
    facet /path/to/app.exe

    # JSON to stdout
    facet /path/to/app.exe --json

    # Write a JSON report
    facet /path/to/app.exe --output report.json

    # Translate RVAs to file offsets
    facet /path/to/app.exe --rva 0x1000 --rva 0x2040

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys
from typing import Optional

import click
from rich.markup import escape

from shared.config import CoreConfig
from shared.console import CoreConsole
from shared.logger import CoreLogger

from facet.core.engine import FacetEngine, InspectionResult
from facet.core.errors import FacetError, RvaOutOfRangeError
from facet.output.console import FacetConsoleOutput
from facet.output.report import FacetReportGenerator
from facet.parsers.rva import find_section


def _parse_rvas(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> tuple[int, ...]:
    """Convert ``--rva`` arguments (decimal or ``0x`` hex) to integers."""
    result: list[int] = []
    for value in values:
        try:
            rva = int(value, 0)
        except ValueError:
            raise click.BadParameter(f"{value!r} is not an integer address")
        if rva < 0:
            raise click.BadParameter(f"{value!r} is negative")
        result.append(rva)
    return tuple(result)


def _show_rvas(console: CoreConsole, result: InspectionResult, rvas: tuple[int, ...]) -> None:
    console.section("RVA Resolution")
    rows = []
    for rva in rvas:
        try:
            offset = result.image.resolve_rva(rva)
        except RvaOutOfRangeError:
            rows.append((f"0x{rva:x}", "-", "out of range"))
            continue
        section = find_section(result.image.sections, rva)
        rows.append((f"0x{rva:x}", escape(section.name) if section else "-", f"0x{offset:x}"))
    console.table("RVA -> file offset", ["RVA", "Section", "File offset"], rows)


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------

@click.command("facet")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output the decoded image as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path.",
)
@click.option(
    "--rva",
    "rvas",
    multiple=True,
    callback=_parse_rvas,
    help="Resolve an RVA to a file offset (repeatable; accepts 0x hex).",
)
@click.option(
    "--all-directories",
    is_flag=True,
    default=False,
    help="Show data directory slots with zero RVA and size.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable verbose/debug output.",
)
def facet_cli(
    path: str,
    json_output: bool,
    output_path: Optional[str],
    rvas: tuple[int, ...],
    all_directories: bool,
    config_path: Optional[str],
    verbose: bool,
) -> None:
    """Facet -- PE Image Decoder.

    Decode the DOS header, COFF header, optional header, data directories
    and section table of a Windows PE file (EXE / DLL / SYS).

    PATH is the path to the file to decode.

    Examples:

    \b
        python -m facet C:/Windows/System32/notepad.exe
        python -m facet sample.dll --json
        python -m facet sample.dll --rva 0x1000
    """
    console = CoreConsole()

    try:
        config = CoreConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    json_output = json_output or config.facet.output_format == "json"
    settings = config.global_settings
    if verbose or settings.debug:
        log_level = "DEBUG"
    elif json_output:
        log_level = "WARNING"
    else:
        log_level = settings.log_level
    logger = CoreLogger(
        "facet.cli",
        log_level=log_level,
        log_file=settings.log_file or None,
        json_logs=settings.log_json,
    )

    engine = FacetEngine(config=config, logger=logger)
    try:
        result = engine.load(path)
    except (FacetError, OSError) as exc:
        console.error(f"{type(exc).__name__}: {escape(str(exc))}")
        sys.exit(1)

    report_gen = FacetReportGenerator()

    if json_output:
        click.echo(report_gen.to_json(result))
    else:
        output_display = FacetConsoleOutput(
            console=console,
            show_empty_directories=all_directories or config.facet.show_empty_directories,
            stub_preview_bytes=config.facet.stub_preview_bytes,
        )
        output_display.display(result)
        if rvas:
            _show_rvas(console, result, rvas)

    if output_path:
        report_path = report_gen.generate_json(result, output_path)
        if not json_output:
            console.success(f"JSON report saved: {report_path}")


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for ``facet`` and ``python -m facet``."""
    facet_cli()


if __name__ == "__main__":
    main()
