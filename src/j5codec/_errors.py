"""
Exception hierarchy for JSON5 parsing, typed decoding and encoding.

Syntax errors carry the raw document and a byte offset; line and column
numbers are derived from them so callers can point at the offending input.
"""

import functools
import sys
from collections.abc import Callable

from ._utf8_mapper import UTF8PositionMapper

# Maximum container nesting accepted by the parser, decoders, encoders and
# emitters.
MAX_DEPTH = 512

# Interpreter frames a single nesting level may hold. Typed decoding through
# Lazy/Optional/List shapes is the deepest at five.
_FRAMES_PER_LEVEL = 8

# Nesting beyond this many levels gets no extra stack.
_MAX_STACK_LEVELS = 4096


class JSON5Error(ValueError):
    """Base class for every error raised by the codec."""

    def __init__(self, msg: str) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        self.msg = msg
        super().__init__(msg)


class JSON5DecodeError(JSON5Error):
    """
    Handles JSON5 syntax failures with precise position information.

    ``pos`` is a byte offset into the UTF-8 encoded document, as reported by
    the scanner. ``lineno`` and ``colno`` count characters, not bytes.
    """

    def __init__(self, msg: str, doc: bytes | str = b"", pos: int = 0) -> None:
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")
        if isinstance(doc, str):
            doc = doc.encode("utf-8", "surrogatepass")

        super().__init__(msg)
        self.doc = doc
        self.pos = pos

        mapper = UTF8PositionMapper(doc)
        self.lineno, self.colno = mapper.line_col(pos)

        # Replace the bare message with the located one for str()
        self.args = (f"{msg} at line {self.lineno}, column {self.colno}",)


class UnexpectedCharError(JSON5DecodeError):
    def __init__(self, char: str, pos: int, doc: bytes | str = b"") -> None:
        self.char = char
        super().__init__(f"Unexpected char {char!r}", doc, pos)


class UnexpectedEofError(JSON5DecodeError):
    def __init__(self, pos: int = 0, doc: bytes | str = b"") -> None:
        super().__init__("Unexpected end of input", doc, pos)


class InvalidEscapeError(JSON5DecodeError):
    def __init__(self, char: str, pos: int = 0, doc: bytes | str = b"") -> None:
        self.char = char
        super().__init__(f"Invalid escape sequence: \\{char}", doc, pos)


class InvalidUnicodeError(JSON5DecodeError):
    def __init__(
        self, code_point: int, pos: int = 0, doc: bytes | str = b""
    ) -> None:
        self.code_point = code_point
        super().__init__(
            f"Invalid unicode code point: U+{code_point:04X}", doc, pos
        )


class InvalidNumberError(JSON5DecodeError):
    def __init__(self, literal: str, pos: int = 0, doc: bytes | str = b"") -> None:
        self.literal = literal
        super().__init__(f"Invalid number: {literal}", doc, pos)


class TrailingDataError(JSON5DecodeError):
    def __init__(self, pos: int, doc: bytes | str = b"") -> None:
        super().__init__("Trailing data", doc, pos)


class ExpectedCharError(JSON5DecodeError):
    def __init__(
        self,
        expected: str,
        actual: str | None,
        pos: int = 0,
        doc: bytes | str = b"",
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected!r}, got {actual!r}", doc, pos)


class TypeMismatchError(JSON5Error):
    """Raised when a decoded value does not have the shape a target asked for."""

    def __init__(self, expected: str, got: str) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"Type mismatch: expected {expected}, got {got}")


class CustomError(JSON5Error):
    """Catch-all for binding-level invariant violations."""


class RecursionLimitError(CustomError):
    def __init__(self, msg: str = "Recursion limit exceeded") -> None:
        super().__init__(msg)


class DepthGuard:
    """
    Counts container nesting across one parse, decode, encode or emit call.

    Used as a context manager around every descent into an array or object;
    entering one level too many raises ``RecursionLimitError``.
    """

    __slots__ = ("depth", "limit")

    def __init__(self, limit: int = MAX_DEPTH) -> None:
        self.limit = limit
        self.depth = 0

    def __enter__(self) -> "DepthGuard":
        if self.depth >= self.limit:
            raise RecursionLimitError()
        self.depth += 1
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.depth -= 1


def recursion_limited[**P, R](func: Callable[P, R]) -> Callable[P, R]:
    """
    Runs a public entry point with stack room for its nesting limit.

    Every nesting level costs a few interpreter frames, so the interpreter
    recursion limit is raised by ``max_depth`` levels for the duration of
    the call and restored afterwards. Stack exhaustion that still happens,
    with limits above ``_MAX_STACK_LEVELS``, is reported as
    ``RecursionLimitError``.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        max_depth = kwargs.get("max_depth", MAX_DEPTH)
        if not isinstance(max_depth, int) or max_depth < 0:
            max_depth = MAX_DEPTH
        previous = sys.getrecursionlimit()
        sys.setrecursionlimit(
            previous + min(max_depth, _MAX_STACK_LEVELS) * _FRAMES_PER_LEVEL
        )
        try:
            return func(*args, **kwargs)
        except RecursionError:
            raise RecursionLimitError() from None
        finally:
            sys.setrecursionlimit(previous)

    return wrapper
