"""sdf_delay -- parse Standard Delay Format (SDF) files into an immutable tree."""

from sdf_delay.analysis import SDFStats, compute_stats, query
from sdf_delay.core import (
    Cell,
    CondElseIOPath,
    CondIOPath,
    DelayFile,
    Header,
    Interconnect,
    IOPath,
    Path,
    Port,
    SingleValue,
    TimingCheck,
    TripleValue,
)
from sdf_delay.errors import SDFError
from sdf_delay.parser import parse_sdf, parse_sdf_file

__all__ = [
    # core
    "Cell",
    "CondElseIOPath",
    "CondIOPath",
    "DelayFile",
    "Header",
    "IOPath",
    "Interconnect",
    "Path",
    "Port",
    "SingleValue",
    "TimingCheck",
    "TripleValue",
    # errors
    "SDFError",
    # parser
    "parse_sdf",
    "parse_sdf_file",
    # analysis
    "SDFStats",
    "compute_stats",
    "query",
]
