"""SDF parse tree transformers that convert Lark trees into the AST.

The header is assembled first by :class:`HeaderTransformer`; its divider is
then bound into a :class:`CellTransformer`, which reads every path in the
cells with that divider. Neither transformer keeps state between files.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import chain
from typing import TYPE_CHECKING, Any, cast

from lark import Token, Transformer, v_args

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
from sdf_delay.core.utils import unescape
from sdf_delay.errors import (
    DividerMismatchError,
    HeaderOrderError,
    MissingDividerError,
    MissingVersionError,
    UnsupportedExprError,
    ValueListBoundsError,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lark.tree import Meta

# Header entries in their mandated relative order, with their SDF keyword.
HEADER_FIELDS: dict[str, str] = {
    "sdf_version": "SDFVERSION",
    "design_name": "DESIGN",
    "date": "DATE",
    "vendor": "VENDOR",
    "program": "PROGRAM",
    "program_version": "VERSION",
    "divider": "DIVIDER",
    "voltage": "VOLTAGE",
    "process": "PROCESS",
    "temperature": "TEMPERATURE",
    "timescale": "TIMESCALE",
}

_HEADER_ORDER = {name: i for i, name in enumerate(HEADER_FIELDS)}

_CONJUNCTION = frozenset({"&&", "&"})


@dataclass(frozen=True)
class HeaderField:
    """One parsed header entry, kept with its position until ordering is checked."""

    name: str
    value: Any
    meta: Meta


@dataclass(frozen=True)
class _CondGroup:
    """A parenthesised condition; only one enclosing pair is accepted."""

    expr: CondExpr
    meta: Meta


class SDFTransformer(Transformer):
    """Terminal and value handling shared by the header and cell transformers."""

    # ── Terminal values ──────────────────────────────────────────────

    def QSTRING(self, token: Token) -> str:
        """Strip the quotes from a string literal and drop escape backslashes."""
        return unescape(token[1:-1])

    def REAL(self, token: Token) -> float:
        """Convert REAL token to float."""
        return float(token)

    def INT(self, token: Token) -> int:
        """Convert INT token to int."""
        return int(token)

    def IDENTIFIER(self, token: Token) -> Token:
        """Unescape an identifier, keeping its position for error reporting."""
        return token.update(value=unescape(token))

    # ── Values ───────────────────────────────────────────────────────

    @v_args(inline=True)
    def single(self, value: float | None) -> SingleValue:
        """Process a single, possibly empty, value."""
        return SingleValue(value)

    @v_args(inline=True)
    def triple(
        self,
        min_val: float | None,
        typ_val: float | None,
        max_val: float | None,
    ) -> TripleValue:
        """Process a min:typ:max triple."""
        return TripleValue(min=min_val, typ=typ_val, max=max_val)


class HeaderTransformer(SDFTransformer):
    """Build a :class:`Header` from a ``header`` tree of header entries.

    Examples
    --------
    >>> from lark import Tree
    >>> from lark.tree import Meta
    >>> entries = [
    ...     Tree("sdf_version", ["3.0"], Meta()),
    ...     Tree("divider", [Token("HCHAR", "/")], Meta()),
    ... ]
    >>> HeaderTransformer().transform(Tree("header", entries, Meta())).divider
    '/'
    """

    @v_args(inline=True, meta=True)
    def header(self, meta: Meta, *fields: HeaderField) -> Header:
        """Check the field order and mandatory fields, then build the header."""
        values = check_header_order(fields)
        if "sdf_version" not in values:
            raise MissingVersionError.at(meta, "header has no SDFVERSION entry")
        if "divider" not in values:
            raise MissingDividerError.at(meta, "header has no DIVIDER entry")
        return Header(**values)

    @v_args(inline=True, meta=True)
    def sdf_version(self, meta: Meta, value: str) -> HeaderField:
        """Process SDF version header field."""
        return HeaderField("sdf_version", value, meta)

    @v_args(inline=True, meta=True)
    def design_name(self, meta: Meta, value: str) -> HeaderField:
        """Process design name header field."""
        return HeaderField("design_name", value, meta)

    @v_args(inline=True, meta=True)
    def date(self, meta: Meta, value: str) -> HeaderField:
        """Process date header field."""
        return HeaderField("date", value, meta)

    @v_args(inline=True, meta=True)
    def vendor(self, meta: Meta, value: str) -> HeaderField:
        """Process vendor header field."""
        return HeaderField("vendor", value, meta)

    @v_args(inline=True, meta=True)
    def program(self, meta: Meta, value: str) -> HeaderField:
        """Process program header field."""
        return HeaderField("program", value, meta)

    @v_args(inline=True, meta=True)
    def program_version(self, meta: Meta, value: str) -> HeaderField:
        """Process program version header field."""
        return HeaderField("program_version", value, meta)

    @v_args(inline=True, meta=True)
    def divider(self, meta: Meta, value: Token) -> HeaderField:
        """Process hierarchy divider."""
        return HeaderField("divider", str(value), meta)

    @v_args(inline=True, meta=True)
    def voltage(self, meta: Meta, value: RValue) -> HeaderField:
        """Process voltage specification."""
        return HeaderField("voltage", value, meta)

    @v_args(inline=True, meta=True)
    def process(self, meta: Meta, value: str) -> HeaderField:
        """Process process header field."""
        return HeaderField("process", value, meta)

    @v_args(inline=True, meta=True)
    def temperature(self, meta: Meta, value: RValue) -> HeaderField:
        """Process temperature specification."""
        return HeaderField("temperature", value, meta)

    @v_args(inline=True, meta=True)
    def timescale(self, meta: Meta, magnitude: float, unit: Token) -> HeaderField:
        """Process timescale specification."""
        return HeaderField("timescale", Timescale(magnitude, TimeUnit(str(unit))), meta)


class CellTransformer(SDFTransformer):
    """Build :class:`Cell` objects, reading paths with a fixed divider.

    Parameters
    ----------
    divider : str
        The hierarchy divider declared in the file header.
    """

    def __init__(self, divider: str) -> None:
        super().__init__()
        self.divider = divider

    # ── Names ────────────────────────────────────────────────────────

    @v_args(inline=True)
    def bus(self, high: int, low: int | None) -> Bus:
        """Process a bus suffix."""
        return Bus(high, low)

    @v_args(inline=True)
    def path(self, *items: Token | Bus | None) -> Path:
        """Process a hierarchical path, checking every separator."""
        *names, bus = items
        segments: list[str] = []
        for item in cast("list[Token]", names):
            if item.type != "HCHAR":
                segments.append(str(item))
            elif item != self.divider:
                raise DividerMismatchError.at(
                    item,
                    f"hierarchy separator {str(item)!r} does not match "
                    f"the header divider {self.divider!r}",
                )
        return Path(tuple(segments), self.divider, bus)  # type: ignore[arg-type]

    @v_args(inline=True)
    def port(self, name: Token, bus: Bus | None) -> Port:
        """Process a port name."""
        return Port(str(name), bus)

    @v_args(inline=True)
    def port_spec(self, *items: Token | Port) -> PortSpec:
        """Process port specification."""
        if len(items) == 1:
            return PortSpec(items[0])  # type: ignore[arg-type]
        edge, port = items
        return PortSpec(port, EdgeType(str(edge)))  # type: ignore[arg-type]

    # ── Cell structure ───────────────────────────────────────────────

    @v_args(inline=True)
    def cell(
        self, cell_type: str, instance: Path | None, *timing_specs: TimingSpec
    ) -> Cell:
        """Process individual cell definition."""
        return Cell(cell_type, instance, timing_specs)

    @v_args(inline=True)
    def celltype(self, value: str) -> str:
        """Process cell type."""
        return value

    @v_args(inline=True)
    def instance(self, value: Path | Token | None = None) -> Path | None:
        """Process instance name; empty and ``*`` instances are wildcards."""
        if isinstance(value, Path):
            return value
        return None

    # ── Delays ───────────────────────────────────────────────────────

    @v_args(inline=True)
    def rvalue(self, value: RValue) -> RValue:
        """Unwrap a parenthesised value."""
        return value

    def value_list(self, values: list[RValue]) -> tuple[RValue, ...]:
        """Collect a delay value list; bounds are checked by the owner."""
        return tuple(values)

    @v_args(inline=True)
    def delay_spec(self, *blocks: tuple[DelayDef, ...]) -> DelaySpec:
        """Process a DELAY block."""
        return DelaySpec(tuple(chain.from_iterable(blocks)))

    @v_args(inline=True)
    def absolute(self, *delays: DelayDef) -> tuple[DelayDef, ...]:
        """Process absolute delay block."""
        return delays

    @v_args(inline=True, meta=True)
    def interconnect(
        self,
        meta: Meta,
        from_path: Path,
        to_path: Path,
        values: tuple[RValue, ...],
    ) -> Interconnect:
        """Process INTERCONNECT delay specification."""
        _check_bounds(meta, "INTERCONNECT", values)
        return Interconnect(from_path, to_path, values)

    @v_args(inline=True, meta=True)
    def iopath(
        self,
        meta: Meta,
        input_port: PortSpec,
        output_port: Port,
        retain: tuple[RValue, ...] | None,
        values: tuple[RValue, ...],
    ) -> IOPath:
        """Process IOPATH delay specification."""
        _check_bounds(meta, "IOPATH", values)
        return IOPath(input_port, output_port, values, retain)

    @v_args(inline=True, meta=True)
    def retain(self, meta: Meta, values: tuple[RValue, ...]) -> tuple[RValue, ...]:
        """Process the RETAIN clause of an IOPATH."""
        _check_bounds(meta, "RETAIN", values)
        return values

    @v_args(inline=True)
    def cond_iopath(
        self, name: str | None, condition: CondExpr | _CondGroup, body: IOPath
    ) -> CondIOPath:
        """Process conditional IOPATH."""
        return CondIOPath(_unwrap(condition), body, name)

    @v_args(inline=True)
    def condelse_iopath(self, body: IOPath) -> CondElseIOPath:
        """Process default conditional IOPATH."""
        return CondElseIOPath(body)

    # ── Conditions ───────────────────────────────────────────────────

    @v_args(inline=True)
    def cond_expr(self, *items: CondLiteral | _CondGroup | Token) -> CondExpr | _CondGroup:
        """Process a condition; only a flat conjunction of literals is accepted."""
        terms = items[0::2]
        for op in items[1::2]:
            if op not in _CONJUNCTION:
                raise UnsupportedExprError.at(
                    op,
                    f"operator {str(op)!r} is not supported in conditions; "
                    "only '&&' and '&' are",
                    construct=str(op),
                )
        if len(terms) == 1 and isinstance(terms[0], _CondGroup):
            return terms[0]
        for term in terms:
            if isinstance(term, _CondGroup):
                raise UnsupportedExprError.at(
                    term.meta,
                    "parenthesised sub-expressions are not supported in conditions",
                    construct="(",
                )
        return CondExpr(terms)  # type: ignore[arg-type]

    @v_args(inline=True, meta=True)
    def cond_group(self, meta: Meta, expr: CondExpr | _CondGroup) -> _CondGroup:
        """Process a parenthesised condition."""
        if isinstance(expr, _CondGroup):
            raise UnsupportedExprError.at(
                expr.meta,
                "nested parentheses are not supported in conditions",
                construct="(",
            )
        return _CondGroup(expr, meta)

    @v_args(inline=True)
    def pos_literal(self, port: Port) -> CondLiteral:
        """Process a bare port reference."""
        return CondLiteral(port, positive=True)

    @v_args(inline=True)
    def neg_literal(self, _neg: Token, port: Port) -> CondLiteral:
        """Process a ``!port`` or ``~port`` reference."""
        return CondLiteral(port, positive=False)

    @v_args(inline=True)
    def cmp_literal(self, port: Port, op: Token, scalar: Token) -> CondLiteral:
        """Process a comparison of a port against a scalar constant."""
        is_one = scalar.endswith("1")
        positive = is_one if op in ("==", "===") else not is_one
        return CondLiteral(port, positive=positive)

    # ── Timing checks ────────────────────────────────────────────────

    @v_args(inline=True)
    def timing_check(self, *checks: TimingCheck) -> TimingCheckSpec:
        """Process a TIMINGCHECK block."""
        return TimingCheckSpec(checks)

    @v_args(inline=True)
    def tc_def(self, kind: CheckKind, *terms: TimingCheckTerm) -> TimingCheck:
        """Process one timing check, retaining its terms verbatim."""
        return TimingCheck(kind, terms)

    @v_args(inline=True)
    def check_kind(self, token: Token) -> CheckKind:
        """Process timing check keyword."""
        return CheckKind(str(token))

    @v_args(inline=True)
    def cond_port_spec(
        self, name: str | None, condition: CondExpr | _CondGroup, port_spec: PortSpec
    ) -> ConditionalPortSpec:
        """Process a COND-guarded timing check port."""
        return ConditionalPortSpec(_unwrap(condition), port_spec, name)


def check_header_order(fields: Iterable[HeaderField]) -> dict[str, Any]:
    """Return the header values by name, raising on a misplaced or repeated entry."""
    values: dict[str, Any] = {}
    last = -1
    for field in fields:
        position = _HEADER_ORDER[field.name]
        if position <= last:
            keyword = HEADER_FIELDS[field.name]
            reason = "repeated" if field.name in values else "out of order"
            raise HeaderOrderError.at(
                field.meta,
                f"header entry {keyword} is {reason}; expected order is "
                + " ".join(HEADER_FIELDS.values()),
            )
        values[field.name] = field.value
        last = position
    return values


def _unwrap(condition: CondExpr | _CondGroup) -> CondExpr:
    """Drop the single enclosing pair of parentheses, if any."""
    if isinstance(condition, _CondGroup):
        return condition.expr
    return condition


def _check_bounds(meta: Meta, owner: str, values: tuple[RValue, ...]) -> None:
    """Raise if a delay value list is empty or longer than twelve values."""
    if not 1 <= len(values) <= MAX_DELAY_VALUES:
        raise ValueListBoundsError.at(
            meta,
            f"{owner} takes 1 to {MAX_DELAY_VALUES} delay values, got {len(values)}",
        )
