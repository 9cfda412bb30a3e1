"""Error taxonomy raised while parsing SDF text.

Every error derives from :class:`SDFError`, which is a :class:`lark.LarkError`
so callers that already guard Lark parsing keep working. Constructs that are
valid SDF but deliberately unsupported additionally derive from
:class:`UnsupportedConstructError`, letting callers tell "malformed SDF" apart
from "SDF this parser does not handle".
"""

from __future__ import annotations

from lark import LarkError


class SDFError(LarkError):
    """Base class for every SDF parsing error.

    Parameters
    ----------
    message : str
        Human-readable description of the failure.
    line : int | None
        1-based line of the offending input, if known.
    column : int | None
        1-based column of the offending input, if known.
    pos_in_stream : int | None
        0-based character offset of the offending input, if known.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        pos_in_stream: int | None = None,
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.pos_in_stream = pos_in_stream
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (at {self.line}:{self.column})"

    @classmethod
    def at(cls, where: object, message: str, **kwargs: object) -> SDFError:
        """Build an error positioned at a Lark token or tree meta."""
        return cls(
            message,
            line=getattr(where, "line", None),
            column=getattr(where, "column", None),
            pos_in_stream=getattr(where, "start_pos", None),
            **kwargs,  # type: ignore[arg-type]
        )


class UnsupportedConstructError(SDFError):
    """A valid SDF construct that this parser rejects on purpose."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        pos_in_stream: int | None = None,
        construct: str = "",
    ) -> None:
        self.construct = construct
        super().__init__(message, line, column, pos_in_stream)


# Lexical errors
class LexError(SDFError):
    """Malformed literal."""


class UnterminatedStringError(LexError):
    """A quoted string has no closing quote before end of input."""


class InvalidNumberError(LexError):
    """A real number is malformed (e.g. exponent without sign)."""


# Header errors
class HeaderError(SDFError):
    """Missing or misplaced header field."""


class MissingVersionError(HeaderError):
    """The header has no SDFVERSION entry."""


class MissingDividerError(HeaderError):
    """The header has no DIVIDER entry."""


class HeaderOrderError(HeaderError):
    """A header field is out of the fixed order, or repeated."""


# Delay errors
class DelayError(SDFError):
    """Invalid delay definition."""


class ValueListBoundsError(DelayError):
    """A delay value list holds fewer than 1 or more than 12 values."""


class UnsupportedDelayError(DelayError, UnsupportedConstructError):
    """INCREMENT, PATHPULSE, PATHPULSEPERCENT, PORT or DEVICE delays."""


# Condition errors
class CondError(SDFError):
    """Invalid delay condition."""


class UnsupportedExprError(CondError, UnsupportedConstructError):
    """Disjunction, grouping or another operator outside flat conjunction."""


# Timing check errors
class CheckError(SDFError):
    """Invalid timing check."""


class UnsupportedCheckError(CheckError, UnsupportedConstructError):
    """SETUPHOLD checks."""


# Structural errors
class ParseError(SDFError):
    """Structural mismatch anywhere in the grammar."""


class TrailingInputError(ParseError):
    """Non-comment text follows the closing parenthesis of DELAYFILE."""


class DividerMismatchError(ParseError):
    """A path uses a hierarchy separator other than the header's divider."""


class UnsupportedTimingEnvError(ParseError, UnsupportedConstructError):
    """TIMINGENV blocks."""
