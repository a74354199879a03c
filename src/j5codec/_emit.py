"""
Text emitters turning ``Value`` trees back into JSON5.

``CompactFormatter`` writes no insignificant whitespace at all;
``PrettyFormatter`` puts every member on its own line, indented once per
nesting level. Both write identifier-safe keys bare unless asked to quote
them, and both refuse trees nested deeper than their ``max_depth``.
"""

import re
from abc import ABC
from abc import abstractmethod

from ._errors import MAX_DEPTH
from ._errors import RecursionLimitError
from ._profile import ProfileContext
from ._scanner import is_identifier
from ._value import I64_MAX
from ._value import Array
from ._value import Bool
from ._value import Float
from ._value import Infinity
from ._value import Int
from ._value import NaN
from ._value import NegInfinity
from ._value import Null
from ._value import Number
from ._value import Object
from ._value import String
from ._value import Uint
from ._value import Value

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_NEEDS_ESCAPE = re.compile(r'[\x00-\x1f"\\]')
_NEEDS_ESCAPE_ASCII = re.compile(r'[\x00-\x1f"\\]|[^\x00-\x7f]')


def _escape_char(match: re.Match[str]) -> str:
    char = match.group()
    escaped = _ESCAPES.get(char)
    if escaped is not None:
        return escaped
    code_point = ord(char)
    if code_point < 0x10000:
        return f"\\u{code_point:04x}"
    # Astral code points become a UTF-16 surrogate pair
    code_point -= 0x10000
    high = 0xD800 | (code_point >> 10)
    low = 0xDC00 | (code_point & 0x3FF)
    return f"\\u{high:04x}\\u{low:04x}"


def encode_string(s: str, ensure_ascii: bool = False) -> str:
    """Encode string as a double-quoted literal with escape sequences."""
    pattern = _NEEDS_ESCAPE_ASCII if ensure_ascii else _NEEDS_ESCAPE
    return '"' + pattern.sub(_escape_char, s) + '"'


def encode_number(n: Number) -> str:
    """
    Encode a number so that re-parsing yields the same variant.

    Floats always carry a fraction or exponent. A ``Uint`` small enough to
    read back as ``Int`` is written in hex, the one literal form that parses
    to ``Uint`` at that magnitude.
    """
    if isinstance(n, Int):
        return str(n.value)
    if isinstance(n, Uint):
        return f"0x{n.value:x}" if n.value <= I64_MAX else str(n.value)
    if isinstance(n, Float):
        return repr(n.value)
    if isinstance(n, NaN):
        return "NaN"
    if isinstance(n, Infinity):
        return "Infinity"
    if isinstance(n, NegInfinity):
        return "-Infinity"
    raise TypeError(f"Unknown number variant {type(n).__name__}")


class Formatter(ABC):
    """
    Shared writing logic for the emitters.

    Output is collected as a list of string fragments and joined once at
    the end. Subclasses decide only how containers are laid out.
    """

    def __init__(
        self,
        *,
        quote_keys: bool = False,
        ensure_ascii: bool = False,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.quote_keys = quote_keys
        self.ensure_ascii = ensure_ascii
        self.max_depth = max_depth

    def format(self, value: Value) -> str:
        """Serializes a whole tree."""
        with ProfileContext("format"):
            out: list[str] = []
            self.write_value(out, value, 0)
            return "".join(out)

    def write_null(self, out: list[str]) -> None:
        out.append("null")

    def write_bool(self, out: list[str], value: bool) -> None:
        out.append("true" if value else "false")

    def write_number(self, out: list[str], number: Number) -> None:
        out.append(encode_number(number))

    def write_string(self, out: list[str], s: str) -> None:
        out.append(encode_string(s, self.ensure_ascii))

    def write_object_key(self, out: list[str], key: str) -> None:
        """Writes a key bare when it reads back as the same identifier."""
        if (
            not self.quote_keys
            and is_identifier(key)
            and (not self.ensure_ascii or key.isascii())
        ):
            out.append(key)
        else:
            self.write_string(out, key)

    def write_value(self, out: list[str], value: Value, depth: int) -> None:
        if isinstance(value, Null):
            self.write_null(out)
        elif isinstance(value, Bool):
            self.write_bool(out, value.value)
        elif isinstance(value, Number):
            self.write_number(out, value)
        elif isinstance(value, String):
            self.write_string(out, value.value)
        elif isinstance(value, Array):
            self._check_depth(depth)
            self.write_array(out, value, depth)
        elif isinstance(value, Object):
            self._check_depth(depth)
            self.write_object(out, value, depth)
        else:
            raise TypeError(
                f"Object of type {type(value).__name__} is not a JSON5 value"
            )

    def _check_depth(self, depth: int) -> None:
        if depth >= self.max_depth:
            raise RecursionLimitError()

    @abstractmethod
    def write_array(self, out: list[str], array: Array, depth: int) -> None:
        """Writes an array whose opening bracket sits at ``depth``."""

    @abstractmethod
    def write_object(self, out: list[str], obj: Object, depth: int) -> None:
        """Writes an object whose opening brace sits at ``depth``."""


class CompactFormatter(Formatter):
    """Writes the shortest text: no spaces, no newlines."""

    def write_array(self, out: list[str], array: Array, depth: int) -> None:
        out.append("[")
        for i, item in enumerate(array):
            if i:
                out.append(",")
            self.write_value(out, item, depth + 1)
        out.append("]")

    def write_object(self, out: list[str], obj: Object, depth: int) -> None:
        out.append("{")
        for i, (key, item) in enumerate(obj.pairs()):
            if i:
                out.append(",")
            self.write_object_key(out, key)
            out.append(":")
            self.write_value(out, item, depth + 1)
        out.append("}")


class PrettyFormatter(Formatter):
    """
    Writes one member per line.

    Each nesting level is indented by one more copy of ``indent``; keys are
    followed by ``": "`` and empty containers stay on one line.
    """

    def __init__(
        self,
        indent: str = "    ",
        *,
        quote_keys: bool = False,
        ensure_ascii: bool = False,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        super().__init__(
            quote_keys=quote_keys, ensure_ascii=ensure_ascii, max_depth=max_depth
        )
        self.indent = indent

    def _write_indent(self, out: list[str], depth: int) -> None:
        out.append(self.indent * depth)

    def write_array(self, out: list[str], array: Array, depth: int) -> None:
        if not array:
            out.append("[]")
            return

        out.append("[\n")
        last = len(array) - 1
        for i, item in enumerate(array):
            self._write_indent(out, depth + 1)
            self.write_value(out, item, depth + 1)
            out.append(",\n" if i < last else "\n")
        self._write_indent(out, depth)
        out.append("]")

    def write_object(self, out: list[str], obj: Object, depth: int) -> None:
        if not obj:
            out.append("{}")
            return

        out.append("{\n")
        last = len(obj) - 1
        for i, (key, item) in enumerate(obj.pairs()):
            self._write_indent(out, depth + 1)
            self.write_object_key(out, key)
            out.append(": ")
            self.write_value(out, item, depth + 1)
            out.append(",\n" if i < last else "\n")
        self._write_indent(out, depth)
        out.append("}")
