"""Core data models and utility functions for SDF delay files."""

from sdf_delay.core.model import (
    MAX_DELAY_VALUES,
    Bus,
    Cell,
    CheckKind,
    CondElseIOPath,
    CondExpr,
    CondIOPath,
    CondLiteral,
    ConditionalPortSpec,
    DelayDef,
    DelayFile,
    DelayKind,
    DelaySpec,
    EdgeType,
    Header,
    Interconnect,
    IOPath,
    Path,
    Port,
    PortSpec,
    RValue,
    SingleValue,
    Timescale,
    TimeUnit,
    TimingCheck,
    TimingCheckSpec,
    TimingCheckTerm,
    TimingSpec,
    TripleValue,
)
from sdf_delay.core.utils import escape_identifier, get_scale_seconds, unescape

__all__ = [
    # model -- data classes and type aliases
    "MAX_DELAY_VALUES",
    "Bus",
    "Cell",
    "CheckKind",
    "CondElseIOPath",
    "CondExpr",
    "CondIOPath",
    "CondLiteral",
    "ConditionalPortSpec",
    "DelayDef",
    "DelayFile",
    "DelayKind",
    "DelaySpec",
    "EdgeType",
    "Header",
    "IOPath",
    "Interconnect",
    "Path",
    "Port",
    "PortSpec",
    "RValue",
    "SingleValue",
    "TimeUnit",
    "Timescale",
    "TimingCheck",
    "TimingCheckSpec",
    "TimingCheckTerm",
    "TimingSpec",
    "TripleValue",
    # utils
    "escape_identifier",
    "get_scale_seconds",
    "unescape",
]
