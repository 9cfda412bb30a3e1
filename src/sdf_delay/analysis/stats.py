"""Aggregate statistics over SDF delay values."""

import statistics
from collections import Counter
from dataclasses import dataclass, field

from sdf_delay.core.model import DelayFile, Interconnect, RValue

_CORNERS = {"min": 0, "typ": 1, "max": 2}


@dataclass
class SDFStats:
    """Aggregate statistics for an SDF file.

    Attributes
    ----------
    total_cells : int
        Number of CELL entries.
    cell_types : int
        Number of distinct cell types.
    total_delays : int
        Total number of delay definitions.
    delay_kind_counts : dict[str, int]
        Count of delay definitions by kind.
    check_kind_counts : dict[str, int]
        Count of timing checks by kind.
    delay_min : float | None
        Minimum delay value across all definitions.
    delay_max : float | None
        Maximum delay value across all definitions.
    delay_mean : float | None
        Mean delay value across all definitions.
    delay_median : float | None
        Median delay value across all definitions.
    """

    total_cells: int
    cell_types: int
    total_delays: int
    delay_kind_counts: dict[str, int] = field(default_factory=dict)
    check_kind_counts: dict[str, int] = field(default_factory=dict)
    delay_min: float | None = None
    delay_max: float | None = None
    delay_mean: float | None = None
    delay_median: float | None = None


def _corner_values(values: tuple[RValue, ...], index: int) -> list[float]:
    picked = (v.corners()[index] for v in values)
    return [v for v in picked if v is not None]


def compute_stats(delay_file: DelayFile, corner: str = "max") -> SDFStats:
    """Compute aggregate statistics over delay values in an SDF file.

    Unspecified values (``()`` or an empty triple component) are skipped,
    they never count as zero. RETAIN values are not included.

    Parameters
    ----------
    delay_file : DelayFile
        The parsed file to analyze.
    corner : str
        Which component of each value to use (min, typ, max).

    Returns
    -------
    SDFStats
        Aggregate statistics.

    Examples
    --------
    >>> from sdf_delay.parser import parse_sdf
    >>> sdf = parse_sdf(
    ...     '(DELAYFILE (SDFVERSION "3.0") (DIVIDER /)'
    ...     ' (CELL (CELLTYPE "BUF") (INSTANCE b0)'
    ...     '  (DELAY (ABSOLUTE (IOPATH A Y (1:2:3)))))'
    ...     ' (CELL (CELLTYPE "INV") (INSTANCE i0)'
    ...     '  (DELAY (ABSOLUTE (IOPATH A Y (4:5:6) ())))))'
    ... )
    >>> stats = compute_stats(sdf, corner="max")
    >>> stats.total_cells
    2
    >>> stats.delay_min
    3.0
    >>> stats.delay_max
    6.0
    """
    try:
        index = _CORNERS[corner]
    except KeyError:
        raise ValueError(
            f"Invalid corner {corner!r}, expected one of: {', '.join(_CORNERS)}"
        ) from None

    delay_kinds: Counter[str] = Counter()
    check_kinds: Counter[str] = Counter()
    scalars: list[float] = []

    for _cell, delay in delay_file.iter_delays():
        delay_kinds[str(delay.kind)] += 1
        values = delay.values if isinstance(delay, Interconnect) else delay.iopath.values
        scalars.extend(_corner_values(values, index))

    for cell in delay_file.cells:
        for check in cell.timing_checks:
            check_kinds[str(check.kind)] += 1

    return SDFStats(
        total_cells=len(delay_file.cells),
        cell_types=len({cell.cell_type for cell in delay_file.cells}),
        total_delays=sum(delay_kinds.values()),
        delay_kind_counts=dict(delay_kinds),
        check_kind_counts=dict(check_kinds),
        delay_min=min(scalars) if scalars else None,
        delay_max=max(scalars) if scalars else None,
        delay_mean=statistics.mean(scalars) if scalars else None,
        delay_median=statistics.median(scalars) if scalars else None,
    )
