"""Typer CLI for parsing and inspecting SDF delay files.

Provides commands to dump a parsed SDF file as JSON and to display a
summary of its header, cells, delay kinds and value range.
"""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path  # noqa: TC003 - required at runtime by Typer
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from sdf_delay.analysis import compute_stats
from sdf_delay.core.model import DelayFile
from sdf_delay.errors import SDFError
from sdf_delay.parser import parse_sdf_file

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)


class Corner(StrEnum):
    """Value component used for the delay range."""

    min = "min"
    typ = "typ"
    max = "max"


def _load(sdf_file: Path) -> DelayFile:
    """Parse an SDF file, exiting with status 1 on failure.

    Parameters
    ----------
    sdf_file : Path
        Path to the SDF file.

    Returns
    -------
    DelayFile
        The parsed delay file.
    """
    try:
        return parse_sdf_file(sdf_file)
    except (SDFError, OSError) as e:
        err_console.print(f"Error: {e}", markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1) from e


@app.command()
def parse(
    sdf_file: Annotated[
        Path,
        typer.Argument(help="Path to the SDF file to parse."),
    ],
    indent: Annotated[
        int,
        typer.Option("--indent", "-i", help="JSON indentation."),
    ] = 2,
) -> None:
    """Parse an SDF file and output it as JSON."""
    delay_file = _load(sdf_file)
    typer.echo(json.dumps(delay_file.to_dict(), indent=indent))


@app.command()
def info(
    sdf_file: Annotated[
        Path,
        typer.Argument(help="Path to the SDF file to inspect."),
    ],
    corner: Annotated[
        Corner,
        typer.Option("--corner", "-c", help="Value component for the delay range."),
    ] = Corner.max,
) -> None:
    """Show a summary of an SDF file (header, cells, delay kinds, value range)."""
    delay_file = _load(sdf_file)
    stats = compute_stats(delay_file, corner=str(corner))

    # Header table
    header_table = Table(title="SDF Header")
    header_table.add_column("Field", style="cyan")
    header_table.add_column("Value", style="green")
    header = delay_file.header
    for key, value in (
        ("sdf_version", header.sdf_version),
        ("design_name", header.design_name),
        ("date", header.date),
        ("vendor", header.vendor),
        ("program", header.program),
        ("program_version", header.program_version),
        ("divider", header.divider),
        ("voltage", header.voltage),
        ("process", header.process),
        ("temperature", header.temperature),
        ("timescale", header.timescale),
    ):
        if value is not None:
            header_table.add_row(key, str(value))
    console.print(header_table)

    # Cell summary
    summary_table = Table(title="Cell Summary")
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Total cells", str(stats.total_cells))
    summary_table.add_row("Cell types", str(stats.cell_types))
    summary_table.add_row("Delay definitions", str(stats.total_delays))
    console.print(summary_table)

    # Delay kind breakdown
    kind_table = Table(title="Delay Kinds")
    kind_table.add_column("Kind", style="cyan")
    kind_table.add_column("Count", style="green")
    for kind, count in sorted(stats.delay_kind_counts.items()):
        kind_table.add_row(kind, str(count))
    console.print(kind_table)

    if stats.check_kind_counts:
        check_table = Table(title="Timing Checks")
        check_table.add_column("Kind", style="cyan")
        check_table.add_column("Count", style="green")
        for kind, count in sorted(stats.check_kind_counts.items()):
            check_table.add_row(kind, str(count))
        console.print(check_table)

    # Value range, in the file's time unit
    range_table = Table(title=f"Delay Range ({corner})")
    range_table.add_column("Statistic", style="cyan")
    range_table.add_column("Value", style="green")
    for label, value in (
        ("min", stats.delay_min),
        ("max", stats.delay_max),
        ("mean", stats.delay_mean),
        ("median", stats.delay_median),
    ):
        range_table.add_row(label, "-" if value is None else f"{value:g}")
    console.print(range_table)


def main() -> None:
    """Entry point for the sdf-delay CLI."""
    app()
