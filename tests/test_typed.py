"""
Typed binding tests.

Validates decoding documents straight into application types through the
shape descriptors, encoding those types back, and the errors raised when a
document does not have the requested shape.
"""

import enum
from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import NamedTuple

import pytest

import j5codec
from j5codec import shapes
from j5codec.shapes import (
    ANY,
    BOOL,
    BYTES,
    CHAR,
    F32,
    F64,
    I8,
    I64,
    STR,
    U8,
    U64,
    UNIT,
    Lazy,
    List,
    Map,
    Newtype,
    NewtypeCase,
    Optional,
    Record,
    StructCase,
    Tuple,
    TupleCase,
    UnitCase,
    UnitStruct,
    Variant,
)


@dataclass(frozen=True)
class Dependency:
    name: str
    version: str = "*"
    optional: bool = False


@dataclass(frozen=True)
class Manifest:
    name: str
    version: str
    dependencies: list[Dependency] = field(default_factory=list)
    description: str | None = None


DEPENDENCY = Record(Dependency, {"name": STR, "version": STR, "optional": BOOL})
MANIFEST = Record(
    Manifest,
    {
        "name": STR,
        "version": STR,
        "dependencies": List(DEPENDENCY),
        "description": Optional(STR),
    },
)


class Point(NamedTuple):
    x: int
    y: int


@dataclass(frozen=True)
class Circle:
    radius: float


@dataclass(frozen=True)
class Rect:
    width: float
    height: float


@dataclass(frozen=True)
class Moved:
    dx: int
    dy: int


SHAPE = Variant(
    UnitCase("Empty"),
    NewtypeCase("Circle", Circle, F64),
    TupleCase("Moved", Moved, I64, I64),
    StructCase("Rect", Rect, {"width": F64, "height": F64}),
)


class Color(enum.Enum):
    Red = 1
    Green = 2


@dataclass(frozen=True)
class UserId:
    value: int


@dataclass(frozen=True)
class Marker:
    pass


@dataclass
class Tree:
    label: str
    children: list["Tree"] = field(default_factory=list)


TREE: Record[Tree] = Record(Tree, {"label": STR, "children": List(Lazy(lambda: TREE))})


MANIFEST_DOC = """
// package manifest
{
  name: 'demo',
  version: '1.2.0',
  dependencies: [
    {name: 'left-pad', version: '^1.3.0'},
    {name: 'lodash', optional: true, homepage: 'ignored'},
  ],
}
"""


@pytest.mark.parametrize("fast", [True, False])
def test_decode_record(fast: bool) -> None:
    """
    Validates decoding a nested record with defaults and unknown members.
    """
    manifest = j5codec.decode(MANIFEST_DOC, MANIFEST, fast=fast)
    assert manifest == Manifest(
        name="demo",
        version="1.2.0",
        dependencies=[
            Dependency("left-pad", "^1.3.0"),
            Dependency("lodash", optional=True),
        ],
    )


def test_encode_record() -> None:
    """
    Validates encoding a record and reading it back.
    """
    manifest = Manifest("demo", "1.0.0", [Dependency("a")], "A demo")
    text = j5codec.encode_compact(manifest, target=MANIFEST)
    assert text == (
        '{name:"demo",version:"1.0.0",'
        'dependencies:[{name:"a",version:"*",optional:false}],'
        'description:"A demo"}'
    )
    assert j5codec.decode(text, MANIFEST) == manifest


def test_encode_pretty_record() -> None:
    """
    Validates indented typed output with quoted keys.
    """
    text = j5codec.encode_pretty(Dependency("a"), "  ", True, target=DEPENDENCY)
    assert text == '{\n  "name": "a",\n  "version": "*",\n  "optional": false\n}'


def test_record_missing_field() -> None:
    """
    Validates the error for a missing required field.
    """
    with pytest.raises(j5codec.CustomError, match="missing field 'version'"):
        j5codec.decode("{name: 'demo'}", MANIFEST)


def test_record_positional_form() -> None:
    """
    Validates that records also decode from arrays in field order.
    """
    assert j5codec.decode("['a', '1.0', true]", DEPENDENCY) == Dependency(
        "a", "1.0", True
    )
    assert j5codec.decode("['a']", DEPENDENCY) == Dependency("a")
    with pytest.raises(j5codec.CustomError, match="invalid length"):
        j5codec.decode("['a', '1', true, 4]", DEPENDENCY)


def test_record_from_namedtuple() -> None:
    """
    Validates records over NamedTuple classes.
    """
    shape = Record(Point, {"x": I64, "y": I64})
    assert j5codec.decode("{y: 2, x: 1}", shape) == Point(1, 2)
    assert j5codec.encode_compact(Point(1, 2), target=shape) == "{x:1,y:2}"


def test_type_mismatch() -> None:
    """
    Validates the error for an object where a sequence was expected.
    """
    with pytest.raises(j5codec.TypeMismatchError) as exc_info:
        j5codec.decode("{a: 1}", List(I64))
    assert exc_info.value.expected == "array"
    assert exc_info.value.got == "object"
    assert str(exc_info.value) == "Type mismatch: expected array, got object"


@pytest.mark.parametrize(
    "doc,target,expected",
    [
        ("true", BOOL, True),
        ("-5", I64, -5),
        ("0xFF", U8, 255),
        ("2.9", I64, 2),
        ("-2.9", I64, -2),
        ("18446744073709551615", U64, 2**64 - 1),
        ("1", F64, 1.0),
        ("0.1", F32, 0.10000000149011612),
        ("Infinity", F64, float("inf")),
        ("'text'", STR, "text"),
        ("12", STR, "12"),
        ("1.5", STR, "1.5"),
        ("false", STR, "false"),
        ("'x'", CHAR, "x"),
        ("'abc'", BYTES, b"abc"),
        ("[104, 0x69]", BYTES, b"hi"),
        ("null", UNIT, None),
        ("null", Optional(I64), None),
        ("7", Optional(I64), 7),
        ("[1, 2, 3]", List(I64), [1, 2, 3]),
        ("[1, 'a', true]", Tuple(I64, STR, BOOL), (1, "a", True)),
        ("{a: 1, b: 2}", Map(I64), {"a": 1, "b": 2}),
        ("{a: null, b: [1]}", Map(Optional(List(I64))), {"a": None, "b": [1]}),
        ("[0x1]", ANY, j5codec.Array((j5codec.Uint(1),))),
    ],
)
def test_decode_scalars_and_containers(doc: str, target: Any, expected: Any) -> None:
    """
    Validates every builtin shape on both decoding paths.
    """
    assert j5codec.decode(doc, target) == expected
    assert j5codec.decode(doc, target, fast=False) == expected
    assert j5codec.decode_value(j5codec.parse_value(doc), target) == expected


@pytest.mark.parametrize(
    "doc,target,error",
    [
        ("'1'", I64, j5codec.TypeMismatchError),
        ("-1", U8, j5codec.TypeMismatchError),
        ("256", U8, j5codec.CustomError),
        ("128", I8, j5codec.CustomError),
        ("NaN", I64, j5codec.TypeMismatchError),
        ("1", BOOL, j5codec.TypeMismatchError),
        ("null", STR, j5codec.TypeMismatchError),
        ("[1]", STR, j5codec.TypeMismatchError),
        ("'ab'", CHAR, j5codec.CustomError),
        ("[256]", BYTES, j5codec.CustomError),
        ("0", UNIT, j5codec.TypeMismatchError),
        ("[1, 2]", Tuple(I64), j5codec.CustomError),
        ("{a: 'x'}", Map(I64), j5codec.TypeMismatchError),
        ("[1] x", List(I64), j5codec.TrailingDataError),
        ("[1,", List(I64), j5codec.UnexpectedEofError),
    ],
)
def test_decode_errors(doc: str, target: Any, error: type[Exception]) -> None:
    """
    Validates the error raised for each kind of shape violation, on both
    decoding paths.
    """
    with pytest.raises(error):
        j5codec.decode(doc, target)
    with pytest.raises(error):
        j5codec.decode(doc, target, fast=False)


@pytest.mark.parametrize("fast", [True, False])
def test_decode_variants(fast: bool) -> None:
    """
    Validates every kind of variant case.
    """
    assert j5codec.decode("'Empty'", SHAPE, fast=fast) == "Empty"
    assert j5codec.decode("{Empty: null}", SHAPE, fast=fast) == "Empty"
    assert j5codec.decode("{Circle: 2.5}", SHAPE, fast=fast) == Circle(2.5)
    assert j5codec.decode("{Moved: [1, -1]}", SHAPE, fast=fast) == Moved(1, -1)
    assert j5codec.decode(
        "{Rect: {width: 2, height: 3}}", SHAPE, fast=fast
    ) == Rect(2.0, 3.0)


def test_encode_variants() -> None:
    """
    Validates tagged output for every kind of variant case.
    """
    assert j5codec.encode_compact("Empty", target=SHAPE) == '"Empty"'
    assert j5codec.encode_compact(Circle(2.5), target=SHAPE) == "{Circle:2.5}"
    assert j5codec.encode_compact(Moved(1, -1), target=SHAPE) == "{Moved:[1,-1]}"
    assert (
        j5codec.encode_compact(Rect(2.0, 3.0), target=SHAPE)
        == "{Rect:{width:2.0,height:3.0}}"
    )
    with pytest.raises(TypeError):
        j5codec.encode_compact(42, target=SHAPE)


@pytest.mark.parametrize(
    "doc,message",
    [
        ("'Unknown'", "unknown variant 'Unknown'"),
        ("{Empty: 1}", "expected null for unit variant"),
        ("'Circle'", "expected unit variant"),
        ("{Circle: 1, Rect: {}}", "exactly one key"),
        ("{}", "exactly one key"),
    ],
)
def test_variant_errors(doc: str, message: str) -> None:
    """
    Validates the errors for malformed tagged unions.
    """
    with pytest.raises(j5codec.CustomError, match=message):
        j5codec.decode(doc, SHAPE)


def test_variant_payload_mismatch() -> None:
    """
    Validates payloads of the wrong kind are type mismatches.
    """
    with pytest.raises(j5codec.TypeMismatchError):
        j5codec.decode("{Moved: {dx: 1}}", SHAPE)
    with pytest.raises(j5codec.TypeMismatchError):
        j5codec.decode("{Rect: [1, 2]}", SHAPE)
    with pytest.raises(j5codec.TypeMismatchError):
        j5codec.decode("5", SHAPE)


def test_duplicate_case_names_rejected() -> None:
    """
    Validates variant case names must be unique.
    """
    with pytest.raises(ValueError):
        Variant(UnitCase("A"), UnitCase("A"))


def test_enum_shape() -> None:
    """
    Validates enums decode from and encode to member names.
    """
    assert j5codec.decode("'Green'", Color) is Color.Green
    assert j5codec.decode("{Red: null}", Color) is Color.Red
    assert j5codec.encode_compact(Color.Red, target=Color) == '"Red"'
    with pytest.raises(j5codec.CustomError, match="expected one of 'Red', 'Green'"):
        j5codec.decode("'Blue'", Color)


def test_newtype_and_unit_struct() -> None:
    """
    Validates wrappers encoded as their inner value and payload-free types.
    """
    user_id = Newtype(UserId, U64)
    assert j5codec.decode("42", user_id) == UserId(42)
    assert j5codec.encode_compact(UserId(42), target=user_id) == "42"

    marker = UnitStruct(Marker)
    assert j5codec.decode("null", marker) == Marker()
    assert j5codec.encode_compact(Marker(), target=marker) == "null"


def test_recursive_shape() -> None:
    """
    Validates self-referencing shapes built with ``Lazy``.
    """
    doc = "{label: 'root', children: [{label: 'leaf'}, {label: 'mid', children: [{label: 'x'}]}]}"
    tree = j5codec.decode(doc, TREE)
    assert tree == Tree("root", [Tree("leaf"), Tree("mid", [Tree("x")])])
    assert j5codec.decode(j5codec.encode_compact(tree, target=TREE), TREE) == tree


def test_decode_depth_limit() -> None:
    """
    Validates the nesting limit applies while binding as well.
    """
    doc = "{label: 'a', children: [" * 5 + "{label: 'z'}" + "]}" * 5
    assert j5codec.decode(doc, TREE).label == "a"
    with pytest.raises(j5codec.RecursionLimitError):
        j5codec.decode(doc, TREE, max_depth=5)
    with pytest.raises(j5codec.RecursionLimitError):
        j5codec.decode_value(j5codec.parse_value(doc), TREE, max_depth=5)


def test_builtin_targets() -> None:
    """
    Validates builtin types resolve to their shapes.
    """
    assert j5codec.decode("7", int) == 7
    assert j5codec.decode("7", float) == 7.0
    assert j5codec.decode("'s'", str) == "s"
    assert j5codec.decode("true", bool) is True
    assert j5codec.decode("null", type(None)) is None
    assert j5codec.decode("{a: 1}", j5codec.Value) == j5codec.parse_value("{a: 1}")
    with pytest.raises(TypeError):
        shapes.as_shape(object)


def test_protocol_classes() -> None:
    """
    Validates classes providing their own decode and encode hooks.
    """

    class Version:
        def __init__(self, major: int, minor: int) -> None:
            self.major = major
            self.minor = minor

        @classmethod
        def __json5_decode__(cls, decoder: j5codec.Decoder) -> "Version":
            major, minor = decoder.decode_str().split(".")
            return cls(int(major), int(minor))

        def __json5_encode__(self, encoder: j5codec.Encoder) -> j5codec.Value:
            return encoder.encode_str(f"{self.major}.{self.minor}")

    version = j5codec.decode("'2.7'", Version)
    assert (version.major, version.minor) == (2, 7)
    assert j5codec.encode_compact(version, target=Version) == '"2.7"'
    assert j5codec.dumps({"v": version}) == '{v:"2.7"}'


def test_decode_function_target() -> None:
    """
    Validates plain functions taking a decoder as targets.
    """

    def pair(decoder: j5codec.Decoder) -> tuple[int, int]:
        return decoder.decode_tuple([I64.decode, I64.decode])

    assert j5codec.decode("[1, 2]", pair) == (1, 2)
    with pytest.raises(TypeError):
        j5codec.encode_value((1, 2), target=pair)


def test_encode_value() -> None:
    """
    Validates tree building with and without a shape.
    """
    assert j5codec.encode_value({"a": [1, None]}) == j5codec.parse_value(
        "{a: [1, null]}"
    )
    assert j5codec.encode_value(b"\x01\xff", target=BYTES) == j5codec.Array(
        (j5codec.Uint(1), j5codec.Uint(255))
    )
    assert j5codec.encode_value(2**63, target=U64) == j5codec.Uint(2**63)


@pytest.mark.parametrize(
    "obj,target,error",
    [
        ("x", I64, TypeError),
        (True, I64, TypeError),
        (300, U8, j5codec.CustomError),
        (-1, U64, j5codec.CustomError),
        (1, STR, TypeError),
        ("ab", CHAR, j5codec.CustomError),
        ((1, 2), Tuple(I64), j5codec.CustomError),
        ({1: 2}, Map(I64), j5codec.CustomError),
        ({"a": 1}, List(I64), TypeError),
        ({"name": "a"}, DEPENDENCY, j5codec.CustomError),
    ],
)
def test_encode_errors(obj: Any, target: Any, error: type[Exception]) -> None:
    """
    Validates the errors raised when an object does not fit its shape.
    """
    with pytest.raises(error):
        j5codec.encode_value(obj, target=target)


def test_encode_record_from_mapping() -> None:
    """
    Validates records read fields from mappings as well as attributes.
    """
    text = j5codec.encode_compact(
        {"name": "a", "version": "1", "optional": True, "extra": 0}, target=DEPENDENCY
    )
    assert text == '{name:"a",version:"1",optional:true}'


def test_encode_record_from_mapping_without_optional() -> None:
    """
    Validates an absent ``Optional`` key encodes as null, mirroring the
    decode side that supplies None for the missing member.
    """
    source = {"name": "demo", "version": "1.0", "dependencies": []}
    text = j5codec.encode_compact(source, target=MANIFEST)
    assert text == '{name:"demo",version:"1.0",dependencies:[],description:null}'

    decoded = j5codec.decode("{name: 'demo', version: '1.0'}", MANIFEST)
    assert decoded.description is None
    assert j5codec.encode_compact(decoded, target=MANIFEST) == text

    with pytest.raises(j5codec.CustomError, match="missing field 'version'"):
        j5codec.encode_compact({"name": "demo", "dependencies": []}, target=MANIFEST)


def test_round_trip_through_shapes() -> None:
    """
    Validates encode then decode gives back the original object.
    """
    shape = Map(Tuple(Optional(I64), List(STR), BYTES))
    data = {"first": (None, ["x"], b"\x00\x10"), "second": (-3, [], b"")}
    text = j5codec.encode_pretty(data, target=shape)
    assert j5codec.decode(text, shape) == data
    assert j5codec.decode(text, shape, fast=False) == data
