"""Shared test constants and fixtures."""

from pathlib import Path

import pytest

from sdf_delay.core.model import DelayFile
from sdf_delay.parser.parser import parse_sdf_file

DATA_DIR = (Path(__file__).parent / "data").resolve()

HEADER = '(SDFVERSION "3.0") (DIVIDER /)'


def wrap(body: str, header: str = HEADER) -> str:
    """Build a one-line SDF document around ``body`` (a sequence of cells)."""
    return f"(DELAYFILE {header} {body})"


def delay_cell(defs: str, header: str = HEADER) -> str:
    """Build a document with a single cell holding ``defs`` in one ABSOLUTE block."""
    return wrap(f'(CELL (CELLTYPE "C") (INSTANCE u1) (DELAY (ABSOLUTE {defs})))', header)


@pytest.fixture
def spm() -> DelayFile:
    """Parse the spm.sdf test fixture (``/`` divider, COND, RETAIN, checks)."""
    return parse_sdf_file(DATA_DIR / "spm.sdf")


@pytest.fixture
def example() -> DelayFile:
    """Parse the example.sdf test fixture (``.`` divider, wildcards, buses)."""
    return parse_sdf_file(DATA_DIR / "example.sdf")
