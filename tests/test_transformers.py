"""Tests for transformer.py -- header and cell transformers on raw trees."""

import pytest
from lark import Tree
from lark.exceptions import VisitError

from sdf_delay.core.model import Cell, Header, Path
from sdf_delay.errors import DividerMismatchError
from sdf_delay.parser.parser import SDFLarkParser
from sdf_delay.parser.transformer import HEADER_FIELDS, CellTransformer, HeaderTransformer


@pytest.fixture(scope="module")
def lark_parser():
    return SDFLarkParser().parser


def cell_tree(lark_parser, instance: str) -> Tree:
    tree = lark_parser.parse(
        f'(DELAYFILE (SDFVERSION "3.0") (DIVIDER .) (CELL (CELLTYPE "C") (INSTANCE {instance})))'
    )
    sdf_file = tree.children[0]
    return next(c for c in sdf_file.children if isinstance(c, Tree) and c.data == "cell")


class TestHeaderTransformer:
    def test_header_fields_order(self):
        assert list(HEADER_FIELDS)[0] == "sdf_version"
        assert list(HEADER_FIELDS)[-1] == "timescale"
        assert HEADER_FIELDS["program_version"] == "VERSION"

    def test_build_header(self, lark_parser):
        tree = lark_parser.parse('(DELAYFILE (SDFVERSION "3.0") (DESIGN "d") (DIVIDER /))')
        sdf_file = tree.children[0]
        header = HeaderTransformer().transform(Tree("header", sdf_file.children, sdf_file.meta))
        assert header == Header(sdf_version="3.0", divider="/", design_name="d")


class TestCellTransformer:
    def test_divider_bound_at_construction(self, lark_parser):
        tree = cell_tree(lark_parser, "top/u1")
        cell = CellTransformer("/").transform(tree)
        assert cell == Cell("C", Path(("top", "u1"), "/"))

    def test_same_tree_other_divider(self, lark_parser):
        tree = cell_tree(lark_parser, "top/u1")
        with pytest.raises(VisitError) as exc:
            CellTransformer(".").transform(tree)
        assert isinstance(exc.value.orig_exc, DividerMismatchError)

    def test_transformer_is_reusable(self, lark_parser):
        transformer = CellTransformer(".")
        first = transformer.transform(cell_tree(lark_parser, "a.b"))
        second = transformer.transform(cell_tree(lark_parser, "c"))
        assert first.instance == Path(("a", "b"), ".")
        assert second.instance == Path(("c",), ".")
