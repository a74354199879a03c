"""
JSON5 parsing and encoding with a typed binding layer.

Parses the human-friendly JSON5 superset of JSON (comments, unquoted keys,
single-quoted strings, trailing commas, hex and special numbers) into an
immutable ``Value`` tree, emits such trees as compact or indented text, and
binds them to application types through the shapes in ``j5codec.shapes``.
A ``json``-style ``loads``/``dumps`` surface covers plain Python data.
"""

from typing import IO
from typing import Any

from . import shapes
from ._config import EncodeConfig
from ._config import ParseConfig
from ._decode import Decoder
from ._decode import ParserDecoder
from ._decode import ValueDecoder
from ._decode import VariantAccess
from ._emit import CompactFormatter
from ._emit import Formatter
from ._emit import PrettyFormatter
from ._encode import Encoder
from ._encode import ValueEncoder
from ._errors import MAX_DEPTH
from ._errors import CustomError
from ._errors import ExpectedCharError
from ._errors import InvalidEscapeError
from ._errors import InvalidNumberError
from ._errors import InvalidUnicodeError
from ._errors import JSON5DecodeError
from ._errors import JSON5Error
from ._errors import RecursionLimitError
from ._errors import TrailingDataError
from ._errors import TypeMismatchError
from ._errors import UnexpectedCharError
from ._errors import UnexpectedEofError
from ._errors import recursion_limited
from ._native import from_python
from ._native import to_python
from ._parser import Parser
from ._profile import HotPathStats
from ._profile import ProfileContext
from ._profile import clear_hot_path_stats
from ._profile import get_hot_path_stats
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
from ._value import ObjectMap
from ._value import String
from ._value import Uint
from ._value import Value

__version__ = "0.1.0"

type Json5Text = str | bytes | bytearray


def _as_bytes(text: Json5Text) -> bytes:
    """Returns the UTF-8 encoding of a document given as text or bytes."""
    if isinstance(text, str):
        return text.encode("utf-8", "surrogatepass")
    if isinstance(text, bytes | bytearray | memoryview):
        return bytes(text)
    raise TypeError(
        f"the JSON5 object must be str, bytes or bytearray, "
        f"not {type(text).__name__}"
    )


@recursion_limited
def parse_value(text: Json5Text, *, max_depth: int = MAX_DEPTH) -> Value:
    """
    Parses a whole document into a ``Value`` tree.

    Raises a ``JSON5DecodeError`` subclass on malformed input, including
    ``TrailingDataError`` when anything but whitespace and comments follows
    the value.
    """
    data = _as_bytes(text)
    with ProfileContext("parse_value", len(data)):
        return Parser(data, max_depth).parse_document()


@recursion_limited
def decode(
    text: Json5Text,
    target: Any,
    *,
    fast: bool = True,
    max_depth: int = MAX_DEPTH,
) -> Any:
    """
    Parses a document straight into ``target``.

    ``target`` is anything ``shapes.as_shape`` accepts. With ``fast`` the
    decoder reads scalars and strings off the parser without building a
    tree; otherwise the whole document is parsed first. Both give the same
    result.
    """
    shape = shapes.as_shape(target)
    data = _as_bytes(text)
    with ProfileContext("decode", len(data)):
        if fast:
            parser = Parser(data, max_depth)
            result = shape.decode(ParserDecoder(parser))
            parser.finish()
            return result

        value = Parser(data, max_depth).parse_document()
        return shape.decode(ValueDecoder(value, max_depth=max_depth))


@recursion_limited
def decode_value(value: Value, target: Any, *, max_depth: int = MAX_DEPTH) -> Any:
    """Decodes an already parsed tree into ``target``."""
    return shapes.as_shape(target).decode(ValueDecoder(value, max_depth=max_depth))


@recursion_limited
def encode_value(
    obj: Any, *, target: Any = None, max_depth: int = MAX_DEPTH
) -> Value:
    """
    Builds the ``Value`` tree for ``obj``.

    Without ``target`` the object is converted by the same rules as
    ``dumps``.
    """
    if target is None:
        return from_python(obj, EncodeConfig(max_depth=max_depth))
    return shapes.as_shape(target).encode(ValueEncoder(max_depth=max_depth), obj)


@recursion_limited
def to_text(
    value: Value,
    *,
    indent: str | int | None = None,
    quote_keys: bool = False,
    ensure_ascii: bool = False,
    max_depth: int = MAX_DEPTH,
) -> str:
    """Emits a tree, compactly or with one ``indent`` per nesting level."""
    if indent is None:
        formatter: Formatter = CompactFormatter(
            quote_keys=quote_keys, ensure_ascii=ensure_ascii, max_depth=max_depth
        )
    else:
        if isinstance(indent, int):
            indent = " " * indent
        formatter = PrettyFormatter(
            indent,
            quote_keys=quote_keys,
            ensure_ascii=ensure_ascii,
            max_depth=max_depth,
        )
    return formatter.format(value)


@recursion_limited
def encode_compact(obj: Any, *, target: Any = None, quote_keys: bool = False) -> str:
    """Encodes ``obj`` as text without any insignificant whitespace."""
    value = encode_value(obj, target=target)
    return CompactFormatter(quote_keys=quote_keys).format(value)


@recursion_limited
def encode_pretty(
    obj: Any,
    indent: str = "    ",
    quote_keys: bool = False,
    *,
    target: Any = None,
) -> str:
    """Encodes ``obj`` one member per line, indenting each level by ``indent``."""
    value = encode_value(obj, target=target)
    return PrettyFormatter(indent, quote_keys=quote_keys).format(value)


@recursion_limited
def loads(s: Json5Text, **kwargs: Any) -> Any:
    """
    Parses a JSON5 document into Python objects.

    Keyword arguments build a ``ParseConfig``; the hooks behave as in the
    standard library ``json`` module.
    """
    if not isinstance(s, str | bytes | bytearray):
        raise TypeError(
            f"the JSON5 object must be str, bytes or bytearray, "
            f"not {type(s).__name__}"
        )

    config = ParseConfig(**kwargs)
    value = parse_value(s, max_depth=config.max_depth)
    return to_python(value, config)


def load(fp: IO[str] | IO[bytes], **kwargs: Any) -> Any:
    """Parses a JSON5 document read from a file-like object."""
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return loads(fp.read(), **kwargs)


@recursion_limited
def dumps(obj: Any, **kwargs: Any) -> str:
    """
    Serializes Python objects to JSON5 text.

    Keyword arguments build an ``EncodeConfig``. Output is compact unless
    ``indent`` is given.
    """
    config = EncodeConfig(**kwargs)
    value = from_python(obj, config)
    return to_text(
        value,
        indent=config.indent_unit,
        quote_keys=config.quote_keys,
        ensure_ascii=config.ensure_ascii,
        max_depth=config.max_depth,
    )


def dump(obj: Any, fp: IO[str], **kwargs: Any) -> None:
    """Serializes Python objects as JSON5 text to a file-like object."""
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(dumps(obj, **kwargs))


__all__ = [
    "MAX_DEPTH",
    "Array",
    "Bool",
    "CompactFormatter",
    "CustomError",
    "Decoder",
    "EncodeConfig",
    "Encoder",
    "ExpectedCharError",
    "Float",
    "Formatter",
    "HotPathStats",
    "Infinity",
    "Int",
    "InvalidEscapeError",
    "InvalidNumberError",
    "InvalidUnicodeError",
    "JSON5DecodeError",
    "JSON5Error",
    "NaN",
    "NegInfinity",
    "Null",
    "Number",
    "Object",
    "ObjectMap",
    "ParseConfig",
    "Parser",
    "ParserDecoder",
    "PrettyFormatter",
    "RecursionLimitError",
    "String",
    "TrailingDataError",
    "TypeMismatchError",
    "Uint",
    "UnexpectedCharError",
    "UnexpectedEofError",
    "Value",
    "ValueDecoder",
    "ValueEncoder",
    "VariantAccess",
    "clear_hot_path_stats",
    "decode",
    "decode_value",
    "dump",
    "dumps",
    "encode_compact",
    "encode_pretty",
    "encode_value",
    "from_python",
    "get_hot_path_stats",
    "load",
    "loads",
    "parse_value",
    "shapes",
    "to_python",
    "to_text",
]
