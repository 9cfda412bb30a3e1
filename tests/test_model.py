"""Tests for model.py -- helpers, rendering and to_dict."""

import dataclasses
import json

import pytest

from sdf_delay.core.model import (
    Bus,
    Cell,
    CondExpr,
    CondLiteral,
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
    SingleValue,
    Timescale,
    TimeUnit,
    TripleValue,
)


class TestValues:
    def test_single_corners(self):
        assert SingleValue(1.5).corners() == (1.5, 1.5, 1.5)

    def test_triple_corners(self):
        assert TripleValue(1.0, None, 3.0).corners() == (1.0, None, 3.0)

    def test_is_specified(self):
        assert SingleValue(0.0).is_specified
        assert not SingleValue().is_specified
        assert TripleValue(typ=2.0).is_specified
        assert not TripleValue().is_specified

    def test_str(self):
        assert str(SingleValue(1.5)) == "1.5"
        assert str(SingleValue()) == ""
        assert str(TripleValue(1.0, None, 3.25)) == "1::3.25"

    def test_to_dict(self):
        assert SingleValue(2.0).to_dict() == {"type": "single", "value": 2.0}
        assert TripleValue(None, 2.0, None).to_dict() == {
            "type": "triple",
            "min": None,
            "typ": 2.0,
            "max": None,
        }


class TestBus:
    def test_width(self):
        assert Bus(3, 0).width == 4
        assert Bus(0, 3).width == 4
        assert Bus(5).width == 1

    def test_indices_ascending(self):
        assert list(Bus(0, 3).indices()) == [0, 1, 2, 3]
        assert list(Bus(7, 4).indices()) == [4, 5, 6, 7]

    def test_str(self):
        assert str(Bus(3, 0)) == "[3:0]"
        assert str(Bus(2)) == "[2]"


class TestPath:
    def test_hierarchy_and_leaf(self):
        path = Path(("top", "u1", "A"), "/")
        assert path.hierarchy == ("top", "u1")
        assert path.leaf == "A"

    def test_pins_without_bus(self):
        path = Path(("top", "A"), "/")
        assert list(path.pins()) == [(("top",), "A", None)]

    def test_pins_expand_bus(self):
        path = Path(("u", "D"), "/", Bus(2, 1))
        assert list(path.pins()) == [(("u",), "D", 1), (("u",), "D", 2)]

    def test_str_uses_divider(self):
        assert str(Path(("a", "b"), "/")) == "a/b"
        assert str(Path(("a", "b"), ".", Bus(1))) == "a.b[1]"

    def test_str_escapes_specials(self):
        assert str(Path(("a.b", "c"), ".")) == "a\\.b.c"

    def test_to_dict(self):
        assert Path(("a",), "/", Bus(0)).to_dict() == {
            "segments": ["a"],
            "divider": "/",
            "bus": {"high": 0, "low": None},
        }


class TestPorts:
    def test_port_str(self):
        assert str(Port("Q", Bus(3))) == "Q[3]"

    def test_port_spec_str(self):
        assert str(PortSpec(Port("CLK"), EdgeType.POSEDGE)) == "(posedge CLK)"
        assert str(PortSpec(Port("A"))) == "A"

    def test_cond_str(self):
        cond = CondExpr((CondLiteral(Port("A"), False), CondLiteral(Port("B"))))
        assert str(cond) == "!A && B"


class TestDelayDefs:
    def test_iopath_shortcut(self):
        body = IOPath(PortSpec(Port("A")), Port("Y"), (SingleValue(1.0),))
        assert body.iopath is body
        assert body.kind == DelayKind.IOPATH

    def test_interconnect_to_dict(self):
        delay = Interconnect(Path(("a", "Y"), "/"), Path(("b", "A"), "/"), (SingleValue(1.0),))
        d = delay.to_dict()
        assert d["type"] == "interconnect"
        assert d["from"]["segments"] == ["a", "Y"]
        assert d["values"] == [{"type": "single", "value": 1.0}]


class TestTimescale:
    def test_seconds(self):
        assert Timescale(1.0, TimeUnit.PS).seconds == 1e-12
        assert Timescale(10.0, TimeUnit.NS).seconds == pytest.approx(1e-8)

    def test_str(self):
        assert str(Timescale(100.0, TimeUnit.PS)) == "100ps"


class TestHeader:
    def test_to_dict_filters_none(self):
        header = Header(sdf_version="3.0", divider="/", design_name="top")
        assert header.to_dict() == {"sdf_version": "3.0", "design_name": "top", "divider": "/"}

    def test_default_timescale(self):
        assert Header(sdf_version="3.0", divider=".").timescale_seconds == 1e-9

    def test_frozen(self):
        header = Header(sdf_version="3.0", divider=".")
        with pytest.raises(dataclasses.FrozenInstanceError):
            header.divider = "/"  # type: ignore[misc]


class TestDelayFile:
    def test_iter(self, spm: DelayFile):
        assert len(spm.cells) == 4
        assert [c.cell_type for c in spm][0] == "spm"

    def test_iter_delays(self, spm: DelayFile):
        pairs = list(spm.iter_delays())
        assert len(pairs) == 11
        cell, delay = pairs[4]
        assert cell.cell_type == "sky130_fd_sc_hd__buf_1"
        assert delay.kind == DelayKind.IOPATH

    def test_cell_delays_flatten_blocks(self):
        a = IOPath(PortSpec(Port("A")), Port("Y"), (SingleValue(1.0),))
        b = IOPath(PortSpec(Port("B")), Port("Y"), (SingleValue(2.0),))
        cell = Cell("C", None, (DelaySpec((a,)), DelaySpec((b,))))
        assert cell.delays == (a, b)
        assert cell.timing_checks == ()

    def test_to_dict_is_json_serialisable(self, spm: DelayFile):
        data = json.loads(json.dumps(spm.to_dict()))
        assert data["header"]["divider"] == "/"
        assert data["cells"][0]["instance"] is None
        specs = data["cells"][2]["timing_specs"]
        assert [s["type"] for s in specs] == ["delay", "timingcheck"]
        assert specs[1]["checks"][0]["terms"][0]["type"] == "port"
        assert specs[1]["checks"][3]["terms"][0]["type"] == "cond_port"

    def test_to_dict_header_timescale(self, spm: DelayFile):
        assert spm.to_dict()["header"]["timescale"] == {"magnitude": 1.0, "unit": "ns"}

    def test_header_only_file_is_truthy(self):
        delay_file = DelayFile(Header(sdf_version="3.0", divider="/"))
        assert delay_file
        assert list(delay_file) == []
