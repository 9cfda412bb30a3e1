"""Lark-based SDF file parser with thread-safe caching."""

from sdf_delay.parser.parser import (
    SDFLarkParser,
    get_parser,
    parse_sdf,
    parse_sdf_file,
)

__all__ = [
    "SDFLarkParser",
    "get_parser",
    "parse_sdf",
    "parse_sdf_file",
]
