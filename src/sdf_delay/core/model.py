"""Data models for parsed SDF delay files.

Every class is a frozen dataclass holding tuples, so a parsed
:class:`DelayFile` is an immutable tree that consumers traverse but never
modify. ``None`` inside a value always means "not specified", never zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sdf_delay.core.utils import escape_identifier, get_scale_seconds

if TYPE_CHECKING:
    from collections.abc import Iterator


MAX_DELAY_VALUES = 12


class EdgeType(StrEnum):
    """Port edge qualifiers allowed on an input port specification."""

    POSEDGE = "posedge"
    NEGEDGE = "negedge"
    T01 = "01"
    T10 = "10"
    T0Z = "0z"
    TZ1 = "z1"
    T1Z = "1z"
    TZ0 = "z0"


class TimeUnit(StrEnum):
    """Units accepted by the TIMESCALE header entry."""

    US = "us"
    NS = "ns"
    PS = "ps"


class DelayKind(StrEnum):
    """Shapes of a delay definition inside an ABSOLUTE block."""

    INTERCONNECT = "interconnect"
    IOPATH = "iopath"
    COND_IOPATH = "cond_iopath"
    CONDELSE_IOPATH = "condelse_iopath"


class CheckKind(StrEnum):
    """Timing check kinds retained (opaquely) from TIMINGCHECK blocks."""

    SETUP = "SETUP"
    HOLD = "HOLD"
    RECOVERY = "RECOVERY"
    REMOVAL = "REMOVAL"
    WIDTH = "WIDTH"
    RECREM = "RECREM"
    SKEW = "SKEW"
    PERIOD = "PERIOD"


# ── Values ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SingleValue:
    """A single, possibly unspecified, real value such as ``(1.5)`` or ``()``."""

    value: float | None = None

    @property
    def is_specified(self) -> bool:
        """Whether the value is present."""
        return self.value is not None

    def corners(self) -> tuple[float | None, float | None, float | None]:
        """Return the value for the min, typ and max corners."""
        return (self.value, self.value, self.value)

    def to_dict(self) -> dict[str, Any]:
        """Return the value as a tagged dictionary."""
        return {"type": "single", "value": self.value}

    def __str__(self) -> str:
        return _format_real(self.value)


@dataclass(frozen=True)
class TripleValue:
    """A ``min:typ:max`` triple whose components are independently optional."""

    min: float | None = None
    typ: float | None = None
    max: float | None = None

    @property
    def is_specified(self) -> bool:
        """Whether at least one component is present."""
        return any(v is not None for v in self.corners())

    def corners(self) -> tuple[float | None, float | None, float | None]:
        """Return the min, typ and max components."""
        return (self.min, self.typ, self.max)

    def to_dict(self) -> dict[str, Any]:
        """Return the triple as a tagged dictionary."""
        return {"type": "triple", "min": self.min, "typ": self.typ, "max": self.max}

    def __str__(self) -> str:
        return ":".join(_format_real(v) for v in self.corners())


RValue = SingleValue | TripleValue


def _format_real(value: float | None) -> str:
    if value is None:
        return ""
    if value == int(value):
        return str(int(value))
    return str(value)


# ── Names ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Bus:
    """A bus suffix: a single bit ``[high]`` or an inclusive range ``[high:low]``."""

    high: int
    low: int | None = None

    @property
    def width(self) -> int:
        """Number of bits covered by the bus."""
        if self.low is None:
            return 1
        return abs(self.high - self.low) + 1

    def indices(self) -> range:
        """Return the covered bit indices in ascending order.

        >>> list(Bus(3, 0).indices())
        [0, 1, 2, 3]

        >>> list(Bus(2).indices())
        [2]
        """
        if self.low is None:
            return range(self.high, self.high + 1)
        lo, hi = sorted((self.high, self.low))
        return range(lo, hi + 1)

    def to_dict(self) -> dict[str, int | None]:
        """Return the bus as a dictionary."""
        return {"high": self.high, "low": self.low}

    def __str__(self) -> str:
        if self.low is None:
            return f"[{self.high}]"
        return f"[{self.high}:{self.low}]"


@dataclass(frozen=True)
class Path:
    """A hierarchical instance or pin path.

    Attributes
    ----------
    segments : tuple[str, ...]
        Unescaped identifier segments, outermost first.
    divider : str
        The header's hierarchy divider the path was read with.
    bus : Bus | None
        Optional trailing bus suffix.
    """

    segments: tuple[str, ...]
    divider: str = "."
    bus: Bus | None = None

    @property
    def hierarchy(self) -> tuple[str, ...]:
        """All segments except the last one."""
        return self.segments[:-1]

    @property
    def leaf(self) -> str:
        """The last segment (instance or pin name)."""
        return self.segments[-1]

    def pins(self) -> Iterator[tuple[tuple[str, ...], str, int | None]]:
        """Yield ``(hierarchy, pin, bit)`` for every bit the path names.

        A path without a bus yields a single entry whose bit is ``None``;
        a bit range is expanded from its lowest to its highest index.
        """
        if self.bus is None:
            yield self.hierarchy, self.leaf, None
            return
        for index in self.bus.indices():
            yield self.hierarchy, self.leaf, index

    def to_dict(self) -> dict[str, Any]:
        """Return the path as a dictionary."""
        return {
            "segments": list(self.segments),
            "divider": self.divider,
            "bus": self.bus.to_dict() if self.bus is not None else None,
        }

    def __str__(self) -> str:
        text = self.divider.join(escape_identifier(s) for s in self.segments)
        if self.bus is not None:
            text += str(self.bus)
        return text


@dataclass(frozen=True)
class Port:
    """A cell port, optionally with a bus suffix."""

    name: str
    bus: Bus | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the port as a dictionary."""
        return {
            "name": self.name,
            "bus": self.bus.to_dict() if self.bus is not None else None,
        }

    def __str__(self) -> str:
        text = escape_identifier(self.name)
        if self.bus is not None:
            text += str(self.bus)
        return text


@dataclass(frozen=True)
class PortSpec:
    """A port, optionally qualified with a transition edge."""

    port: Port
    edge: EdgeType | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the port specification as a dictionary."""
        return {
            "port": self.port.to_dict(),
            "edge": str(self.edge) if self.edge is not None else None,
        }

    def __str__(self) -> str:
        if self.edge is None:
            return str(self.port)
        return f"({self.edge} {self.port})"


# ── Conditions ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class CondLiteral:
    """A signed port reference: ``A`` or ``A==1'b1`` (positive), ``!A`` or ``A==1'b0``."""

    port: Port
    positive: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Return the literal as a dictionary."""
        return {"port": self.port.to_dict(), "positive": self.positive}

    def __str__(self) -> str:
        return str(self.port) if self.positive else f"!{self.port}"


@dataclass(frozen=True)
class CondExpr:
    """A non-empty conjunction of literals, in source order."""

    literals: tuple[CondLiteral, ...]

    def to_dict(self) -> dict[str, Any]:
        """Return the condition as a dictionary."""
        return {"literals": [lit.to_dict() for lit in self.literals]}

    def __str__(self) -> str:
        return " && ".join(str(lit) for lit in self.literals)


# ── Delay definitions ────────────────────────────────────────────────


@dataclass(frozen=True)
class Interconnect:
    """Net delay between two absolute hierarchical paths."""

    from_path: Path
    to_path: Path
    values: tuple[RValue, ...]

    kind = DelayKind.INTERCONNECT

    def to_dict(self) -> dict[str, Any]:
        """Return the interconnect delay as a tagged dictionary."""
        return {
            "type": str(self.kind),
            "from": self.from_path.to_dict(),
            "to": self.to_path.to_dict(),
            "values": [v.to_dict() for v in self.values],
        }


@dataclass(frozen=True)
class IOPath:
    """Cell delay from an (edge-qualified) input port to an output port."""

    input_port: PortSpec
    output_port: Port
    values: tuple[RValue, ...]
    retain: tuple[RValue, ...] | None = None

    kind = DelayKind.IOPATH

    @property
    def iopath(self) -> IOPath:
        """The unconditional body, for uniform access across IOPATH shapes."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the IO path delay as a tagged dictionary."""
        return {
            "type": str(self.kind),
            "input": self.input_port.to_dict(),
            "output": self.output_port.to_dict(),
            "retain": [v.to_dict() for v in self.retain] if self.retain is not None else None,
            "values": [v.to_dict() for v in self.values],
        }


@dataclass(frozen=True)
class CondIOPath:
    """An IOPATH that applies only while ``condition`` holds."""

    condition: CondExpr
    body: IOPath
    name: str | None = None

    kind = DelayKind.COND_IOPATH

    @property
    def iopath(self) -> IOPath:
        """The wrapped IOPATH."""
        return self.body

    def to_dict(self) -> dict[str, Any]:
        """Return the conditional IO path as a tagged dictionary."""
        return {
            "type": str(self.kind),
            "name": self.name,
            "condition": self.condition.to_dict(),
            "body": self.body.to_dict(),
        }


@dataclass(frozen=True)
class CondElseIOPath:
    """An IOPATH that applies when no sibling COND matches."""

    body: IOPath

    kind = DelayKind.CONDELSE_IOPATH

    @property
    def iopath(self) -> IOPath:
        """The wrapped IOPATH."""
        return self.body

    def to_dict(self) -> dict[str, Any]:
        """Return the default conditional IO path as a tagged dictionary."""
        return {"type": str(self.kind), "body": self.body.to_dict()}


DelayDef = Interconnect | IOPath | CondIOPath | CondElseIOPath


# ── Timing checks ────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConditionalPortSpec:
    """A timing-check port guarded by ``(COND expr port_spec)``."""

    condition: CondExpr
    port_spec: PortSpec
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the guarded port as a tagged dictionary."""
        return {
            "type": "cond_port",
            "name": self.name,
            "condition": self.condition.to_dict(),
            "port_spec": self.port_spec.to_dict(),
        }


TimingCheckTerm = PortSpec | ConditionalPortSpec | SingleValue | TripleValue


@dataclass(frozen=True)
class TimingCheck:
    """An opaque timing check: its kind plus the raw terms in source order."""

    kind: CheckKind
    terms: tuple[TimingCheckTerm, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the check as a dictionary."""
        terms: list[dict[str, Any]] = []
        for term in self.terms:
            if isinstance(term, PortSpec):
                terms.append({"type": "port", **term.to_dict()})
            else:
                terms.append(term.to_dict())
        return {"kind": str(self.kind), "terms": terms}


# ── Cells and file ───────────────────────────────────────────────────


@dataclass(frozen=True)
class DelaySpec:
    """A DELAY block: the ABSOLUTE delay definitions in source order."""

    delay_defs: tuple[DelayDef, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the block as a tagged dictionary."""
        return {"type": "delay", "delay_defs": [d.to_dict() for d in self.delay_defs]}


@dataclass(frozen=True)
class TimingCheckSpec:
    """A TIMINGCHECK block: its checks retained without interpretation."""

    checks: tuple[TimingCheck, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return the block as a tagged dictionary."""
        return {"type": "timingcheck", "checks": [c.to_dict() for c in self.checks]}


TimingSpec = DelaySpec | TimingCheckSpec


@dataclass(frozen=True)
class Cell:
    """A CELL entry. ``instance`` is ``None`` for wildcard/default cells."""

    cell_type: str
    instance: Path | None = None
    timing_specs: tuple[TimingSpec, ...] = ()

    @property
    def delays(self) -> tuple[DelayDef, ...]:
        """All delay definitions of the cell, across its DELAY blocks."""
        return tuple(
            d
            for spec in self.timing_specs
            if isinstance(spec, DelaySpec)
            for d in spec.delay_defs
        )

    @property
    def timing_checks(self) -> tuple[TimingCheck, ...]:
        """All timing checks of the cell, across its TIMINGCHECK blocks."""
        return tuple(
            c
            for spec in self.timing_specs
            if isinstance(spec, TimingCheckSpec)
            for c in spec.checks
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the cell as a dictionary."""
        return {
            "cell_type": self.cell_type,
            "instance": self.instance.to_dict() if self.instance is not None else None,
            "timing_specs": [s.to_dict() for s in self.timing_specs],
        }


@dataclass(frozen=True)
class Timescale:
    """The TIMESCALE header entry, e.g. ``1 ns`` or ``100 ps``."""

    magnitude: float
    unit: TimeUnit

    @property
    def seconds(self) -> float:
        """The timescale expressed in seconds."""
        return get_scale_seconds(self.magnitude, str(self.unit))

    def __str__(self) -> str:
        return f"{_format_real(self.magnitude)}{self.unit}"


DEFAULT_TIMESCALE = Timescale(1.0, TimeUnit.NS)


@dataclass(frozen=True)
class Header:
    """SDF header entries, in their mandated order.

    ``sdf_version`` and ``divider`` are mandatory; the divider governs how
    every path in the rest of the file is read.
    """

    sdf_version: str
    divider: str
    design_name: str | None = None
    date: str | None = None
    vendor: str | None = None
    program: str | None = None
    program_version: str | None = None
    voltage: RValue | None = None
    process: str | None = None
    temperature: RValue | None = None
    timescale: Timescale | None = None

    @property
    def timescale_seconds(self) -> float:
        """The timescale in seconds, 1 ns when the header has none."""
        return (self.timescale or DEFAULT_TIMESCALE).seconds

    def to_dict(self) -> dict[str, Any]:
        """Return the header fields that are present as a dictionary."""
        fields: dict[str, Any] = {
            "sdf_version": self.sdf_version,
            "design_name": self.design_name,
            "date": self.date,
            "vendor": self.vendor,
            "program": self.program,
            "program_version": self.program_version,
            "divider": self.divider,
            "voltage": self.voltage.to_dict() if self.voltage is not None else None,
            "process": self.process,
            "temperature": (
                self.temperature.to_dict() if self.temperature is not None else None
            ),
            "timescale": (
                {"magnitude": self.timescale.magnitude, "unit": str(self.timescale.unit)}
                if self.timescale is not None
                else None
            ),
        }
        return {k: v for k, v in fields.items() if v is not None}


@dataclass(frozen=True)
class DelayFile:
    """Root of a parsed SDF document: one header followed by its cells."""

    header: Header
    cells: tuple[Cell, ...] = ()

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    def iter_delays(self) -> Iterator[tuple[Cell, DelayDef]]:
        """Yield every delay definition together with its owning cell."""
        for cell in self.cells:
            for delay in cell.delays:
                yield cell, delay

    def to_dict(self) -> dict[str, Any]:
        """Return the full tree as a nested, JSON-serialisable dictionary."""
        return {
            "header": self.header.to_dict(),
            "cells": [cell.to_dict() for cell in self.cells],
        }
