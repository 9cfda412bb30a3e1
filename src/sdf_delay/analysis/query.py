"""Filter parsed SDF files by cell type, instance and delay kind."""

import re
from collections.abc import Iterable

from sdf_delay.core.model import (
    Cell,
    DelayFile,
    DelayKind,
    DelaySpec,
    TimingSpec,
)


def query(
    delay_file: DelayFile,
    cell_types: Iterable[str] | None = None,
    instance_pattern: str | None = None,
    delay_kinds: Iterable[DelayKind | str] | None = None,
) -> tuple[Cell, ...]:
    """Select cells and delay definitions matching the given criteria.

    Parameters
    ----------
    delay_file : DelayFile
        The parsed file to filter. It is never modified.
    cell_types : Iterable[str] | None
        If given, only include cells with these cell types.
    instance_pattern : str | None
        Regex searched in the rendered instance path. Wildcard cells
        (no instance) never match a pattern.
    delay_kinds : Iterable[DelayKind | str] | None
        If given, keep only delay definitions of these kinds. Cells left
        without any delay definition are dropped; TIMINGCHECK blocks are
        dropped from the result.

    Returns
    -------
    tuple[Cell, ...]
        New cells, in source order.

    Examples
    --------
    >>> from sdf_delay.parser import parse_sdf
    >>> sdf = parse_sdf(
    ...     '(DELAYFILE (SDFVERSION "3.0") (DIVIDER .)'
    ...     ' (CELL (CELLTYPE "BUF") (INSTANCE top.b0))'
    ...     ' (CELL (CELLTYPE "INV") (INSTANCE top.i0)))'
    ... )
    >>> [c.cell_type for c in query(sdf, cell_types=["BUF"])]
    ['BUF']
    >>> [str(c.instance) for c in query(sdf, instance_pattern=r"i\\d$")]
    ['top.i0']
    """
    types = set(cell_types) if cell_types is not None else None
    kinds = {DelayKind(k) for k in delay_kinds} if delay_kinds is not None else None
    pattern = re.compile(instance_pattern) if instance_pattern is not None else None

    result: list[Cell] = []
    for cell in delay_file.cells:
        if types is not None and cell.cell_type not in types:
            continue
        if pattern is not None and (
            cell.instance is None or not pattern.search(str(cell.instance))
        ):
            continue

        if kinds is None:
            result.append(Cell(cell.cell_type, cell.instance, cell.timing_specs))
            continue

        specs = _filter_specs(cell.timing_specs, kinds)
        if specs:
            result.append(Cell(cell.cell_type, cell.instance, specs))

    return tuple(result)


def _filter_specs(
    specs: tuple[TimingSpec, ...], kinds: set[DelayKind]
) -> tuple[TimingSpec, ...]:
    """Keep the DELAY blocks' definitions whose kind is in ``kinds``."""
    kept: list[TimingSpec] = []
    for spec in specs:
        if not isinstance(spec, DelaySpec):
            continue
        defs = tuple(d for d in spec.delay_defs if d.kind in kinds)
        if defs:
            kept.append(DelaySpec(defs))
    return tuple(kept)
