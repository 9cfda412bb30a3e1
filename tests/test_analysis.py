"""Tests for the analysis package -- statistics and querying."""

import pytest

from sdf_delay.analysis import compute_stats, query
from sdf_delay.core.model import DelayFile, DelayKind, DelaySpec
from sdf_delay.parser import parse_sdf


class TestComputeStats:
    def test_counts(self, spm: DelayFile) -> None:
        stats = compute_stats(spm)
        assert stats.total_cells == 4
        assert stats.cell_types == 4
        assert stats.total_delays == 11
        assert stats.delay_kind_counts == {
            "interconnect": 4,
            "iopath": 4,
            "cond_iopath": 2,
            "condelse_iopath": 1,
        }
        assert stats.check_kind_counts == {
            "REMOVAL": 1,
            "RECOVERY": 1,
            "HOLD": 1,
            "SETUP": 1,
            "WIDTH": 1,
        }

    def test_max_corner(self, spm: DelayFile) -> None:
        stats = compute_stats(spm, corner="max")
        assert stats.delay_min == 0.0
        assert stats.delay_max == 1.001

    def test_min_corner_skips_unspecified(self, example: DelayFile) -> None:
        stats = compute_stats(example, corner="min")
        assert stats.delay_min == 0.4
        assert stats.delay_max == 1.5
        assert stats.delay_mean == pytest.approx(0.9)
        assert stats.delay_median == pytest.approx(0.85)

    def test_typ_corner(self, example: DelayFile) -> None:
        stats = compute_stats(example, corner="typ")
        assert stats.delay_min == 0.5
        assert stats.delay_max == 2.5

    def test_repeated_cell_types(self, example: DelayFile) -> None:
        stats = compute_stats(example)
        assert stats.total_cells == 4
        assert stats.cell_types == 3

    def test_no_values(self) -> None:
        stats = compute_stats(parse_sdf('(DELAYFILE (SDFVERSION "3.0") (DIVIDER /))'))
        assert stats.total_cells == 0
        assert stats.delay_min is None
        assert stats.delay_mean is None
        assert stats.delay_kind_counts == {}

    def test_invalid_corner(self, spm: DelayFile) -> None:
        with pytest.raises(ValueError, match="Invalid corner"):
            compute_stats(spm, corner="avg")


class TestQuery:
    def test_by_cell_type(self, example: DelayFile) -> None:
        result = query(example, cell_types=["BUF"])
        assert [c.cell_type for c in result] == ["BUF", "BUF"]
        assert result[0] == example.cells[0]

    def test_by_instance_pattern(self, example: DelayFile) -> None:
        result = query(example, instance_pattern=r"^top\.u1$")
        assert len(result) == 1
        assert str(result[0].instance) == "top.u1"

    def test_pattern_skips_wildcard_cells(self, spm: DelayFile) -> None:
        result = query(spm, instance_pattern=".*")
        assert all(c.instance is not None for c in result)
        assert len(result) == 3

    def test_by_delay_kind(self, example: DelayFile) -> None:
        result = query(example, delay_kinds=["interconnect"])
        assert [c.cell_type for c in result] == ["top"]

    def test_by_delay_kind_enum(self, spm: DelayFile) -> None:
        result = query(spm, delay_kinds=[DelayKind.COND_IOPATH])
        assert len(result) == 1
        assert [d.kind for d in result[0].delays] == [DelayKind.COND_IOPATH] * 2

    def test_delay_kind_drops_checks(self, spm: DelayFile) -> None:
        result = query(spm, delay_kinds=[DelayKind.IOPATH])
        dff = next(c for c in result if c.cell_type == "sky130_fd_sc_hd__dfrtp_4")
        assert all(isinstance(s, DelaySpec) for s in dff.timing_specs)
        assert dff.timing_checks == ()

    def test_combined_filters(self, spm: DelayFile) -> None:
        result = query(
            spm,
            cell_types=["sram_macro", "spm"],
            instance_pattern="sram",
            delay_kinds=["condelse_iopath"],
        )
        assert len(result) == 1
        assert len(result[0].delays) == 1

    def test_input_not_modified(self, spm: DelayFile) -> None:
        before = spm.to_dict()
        query(spm, delay_kinds=["iopath"])
        assert spm.to_dict() == before

    def test_invalid_kind(self, spm: DelayFile) -> None:
        with pytest.raises(ValueError):
            query(spm, delay_kinds=["bogus"])
