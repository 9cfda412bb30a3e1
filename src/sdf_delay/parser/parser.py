"""Lark-based SDF file parser with thread-safe caching."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any, cast

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError
from lark.tree import Meta

from sdf_delay.core.model import DelayFile
from sdf_delay.errors import (
    InvalidNumberError,
    ParseError,
    SDFError,
    TrailingInputError,
    UnsupportedCheckError,
    UnsupportedConstructError,
    UnsupportedDelayError,
    UnsupportedTimingEnvError,
    UnterminatedStringError,
)
from sdf_delay.parser.transformer import (
    HEADER_FIELDS,
    CellTransformer,
    HeaderTransformer,
    check_header_order,
)

logger = logging.getLogger(__name__)

_STRICT_REAL = re.compile(r"-?[0-9]+(?:\.[0-9]*)?(?:[eE][+-][0-9]+)?")


def _check_real(token: Token) -> Token:
    """Reject numbers that the lenient REAL terminal let through."""
    if not _STRICT_REAL.fullmatch(token):
        raise InvalidNumberError.at(
            token,
            f"invalid number {str(token)!r}: expected an optional '-', digits, "
            "an optional fraction and an optional signed exponent",
        )
    return token


def _reject(
    error: type[UnsupportedConstructError], description: str
) -> Callable[[Token], Token]:
    """Build a lexer callback that refuses an unsupported keyword."""

    def callback(token: Token) -> Token:
        raise error.at(
            token,
            f"{token} {description} are not supported",
            construct=str(token),
        )

    return callback


LEXER_CALLBACKS: dict[str, Callable[[Token], Token]] = {
    "REAL": _check_real,
    "INCREMENT": _reject(UnsupportedDelayError, "delays"),
    "PATHPULSE": _reject(UnsupportedDelayError, "pulse limits"),
    "PATHPULSEPERCENT": _reject(UnsupportedDelayError, "pulse limits"),
    "PORT": _reject(UnsupportedDelayError, "delays"),
    "DEVICE": _reject(UnsupportedDelayError, "delays"),
    "TIMINGENV": _reject(UnsupportedTimingEnvError, "blocks"),
    "SETUPHOLD": _reject(UnsupportedCheckError, "timing checks"),
}


class SDFLarkParser:
    """Lark-based SDF parser producing immutable :class:`DelayFile` trees."""

    def __init__(self) -> None:
        """Initialize the parser with the SDF grammar."""
        grammar_path = (Path(__file__).parent / "sdf.lark").resolve()

        try:
            with grammar_path.open() as f:
                grammar = f.read()
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Grammar file not found: {grammar_path}") from exc

        # NOTE: no transformer= here. The cell transformer depends on the
        # divider of the file being parsed, so a fresh one is built per parse.
        self.parser = Lark(
            grammar,
            parser="lalr",
            start="start",
            propagate_positions=True,
            maybe_placeholders=True,
            lexer_callbacks=LEXER_CALLBACKS,
        )
        self._qstring = re.compile(self.parser.get_terminal("QSTRING").pattern.to_regexp())
        logger.debug("Loaded SDF grammar from %s", grammar_path)

    def parse(self, input_text: str) -> DelayFile:
        """Parse SDF input text and return the delay file.

        Parameters
        ----------
        input_text : str
            The SDF file content as a string.

        Returns
        -------
        DelayFile
            Parsed delay file.

        Raises
        ------
        SDFError
            If the text is not valid SDF, or uses an unsupported construct.
            The error carries the line and column of the offending input.
        """
        try:
            interactive = self.parser.parse_interactive(input_text)
            try:
                tree = interactive.resume_parse()
            except (SDFError, UnexpectedInput):
                self._check_reduced(interactive.parser_state.value_stack)
                raise
            delay_file = self._assemble(tree)
        except SDFError:
            raise
        except UnexpectedInput as e:
            raise self._translate(input_text, e) from e
        except VisitError as e:
            if isinstance(e.orig_exc, SDFError):
                raise e.orig_exc from None
            raise
        except Exception as e:
            raise type(e)(f"Unexpected error during SDF parsing: {e!s}") from e

        logger.debug("Parsed SDF file with %d cells", len(delay_file.cells))
        return delay_file

    def parse_file(self, filepath: Path | str) -> DelayFile:
        """Parse an SDF file directly.

        Parameters
        ----------
        filepath : Path | str
            Path to the SDF file.

        Returns
        -------
        DelayFile
            Parsed delay file.
        """
        try:
            with Path(filepath).open("r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise OSError(f"Error reading SDF file {filepath}: {e!s}") from e
        return self.parse(content)

    @staticmethod
    def _assemble(tree: Tree) -> DelayFile:
        """Build the header first, then read the cells with its divider."""
        sdf_file = cast(Tree, tree.children[0])
        trailing = tree.children[1]

        entries = [c for c in sdf_file.children if isinstance(c, Tree) and c.data != "cell"]
        cell_trees = [c for c in sdf_file.children if isinstance(c, Tree) and c.data == "cell"]

        header = HeaderTransformer().transform(Tree("header", entries, sdf_file.meta))
        cell_transformer = CellTransformer(header.divider)
        cells = tuple(cell_transformer.transform(c) for c in cell_trees)

        if trailing is not None:
            raise TrailingInputError.at(
                trailing,
                f"unexpected input {_snippet(trailing)!r} after the end of DELAYFILE",
            )
        return DelayFile(header=header, cells=cells)

    @staticmethod
    def _check_reduced(stack: list[Any]) -> None:
        """Raise the first semantic error among the subtrees reduced so far.

        A lexical or syntax error stops the parse before the tree is complete.
        Everything already on the parser's value stack precedes that error in
        the text, so a header, divider, bounds or condition error found there
        is reported instead.
        """
        items = list(_flatten(stack))
        entries = [i for i in items if isinstance(i, Tree) and i.data in HEADER_FIELDS]
        in_cells = any(
            (isinstance(i, Token) and i.type == "CELL")
            or (isinstance(i, Tree) and i.data == "cell")
            for i in items
        )
        try:
            if not in_cells:
                check_header_order(HeaderTransformer().transform(e) for e in entries)
                return
            first = cast(Token, items[0])
            start = Meta()
            start.line, start.column = first.line, first.column
            start.start_pos = first.start_pos
            header = HeaderTransformer().transform(Tree("header", entries, start))
            cell_transformer = CellTransformer(header.divider)
            for item in items:
                if isinstance(item, Tree) and item.data not in HEADER_FIELDS:
                    cell_transformer.transform(item)
        except VisitError as e:
            if isinstance(e.orig_exc, SDFError):
                raise e.orig_exc from None
            raise

    def _translate(self, text: str, e: UnexpectedInput) -> SDFError:
        """Convert a Lark syntax error into the matching :class:`SDFError`."""
        pos = e.pos_in_stream
        line = e.line if isinstance(e.line, int) and e.line > 0 else None
        column = e.column if isinstance(e.column, int) and e.column > 0 else None

        if pos is not None and pos >= 0 and text.startswith('"', pos):
            if not self._qstring.match(text, pos):
                return UnterminatedStringError(
                    "unterminated string literal", line, column, pos
                )

        if isinstance(e, UnexpectedEOF) or (
            isinstance(e, UnexpectedToken) and e.token.type == "$END"
        ):
            return ParseError("unexpected end of input", line, column, pos)

        if isinstance(e, UnexpectedToken):
            expected = ", ".join(sorted(e.expected))
            return ParseError(
                f"unexpected {_snippet(e.token)!r}, expected one of: {expected}",
                line,
                column,
                pos,
            )

        char = getattr(e, "char", "")
        return ParseError(f"unexpected character {char!r}", line, column, pos)


def _flatten(stack: list[Any]) -> Iterator[Tree | Token]:
    """Yield stack items in order, opening the parser's internal list rules."""
    for item in stack:
        if isinstance(item, Tree) and item.data.startswith("_"):
            yield from _flatten(item.children)
        elif isinstance(item, (Tree, Token)):
            yield item


def _snippet(
token: str, limit: int = 20) -> str:
    """Return the first word of a token, shortened for error messages."""
    words = str(token).split(None, 1)
    word = words[0] if words else ""
    return word if len(word) <= limit else word[:limit] + "..."


# Thread-local storage for parser instances to ensure thread safety

_local = threading.local()


def get_parser() -> SDFLarkParser:
    """Get or create a thread-local parser instance."""
    if not hasattr(_local, "parser"):
        _local.parser = SDFLarkParser()
    return _local.parser


def parse_sdf(input_text: str) -> DelayFile:
    """Parse SDF text using the Lark parser.

    Parameters
    ----------
    input_text : str
        SDF content as string.

    Returns
    -------
    DelayFile
        Parsed delay file.

    Examples
    --------
    >>> sdf = parse_sdf(
    ...     '(DELAYFILE (SDFVERSION "3.0") (DIVIDER .)'
    ...     ' (CELL (CELLTYPE "BUF") (INSTANCE top.u1)'
    ...     ' (DELAY (ABSOLUTE (IOPATH A Y (0.1:0.2:0.3))))))'
    ... )
    >>> str(sdf.cells[0].instance)
    'top.u1'
    >>> sdf.cells[0].delays[0].values[0].typ
    0.2
    """
    parser = get_parser()
    return parser.parse(input_text)


def parse_sdf_file(filepath: Path | str) -> DelayFile:
    """Parse an SDF file using the Lark parser.

    Parameters
    ----------
    filepath : Path | str
        Path to SDF file.

    Returns
    -------
    DelayFile
        Parsed delay file.
    """
    parser = get_parser()
    return parser.parse_file(filepath)
