"""
Shape descriptors for typed decoding and encoding.

A shape knows which ``Decoder`` and ``Encoder`` calls describe one kind of
Python data. Shapes compose, so a manifest type can be spelled out once and
used in both directions::

    PACKAGE = Record(Package, {
        "name": STR,
        "version": STR,
        "dependencies": Optional(Map(STR)),
    })

Classes can instead implement ``__json5_decode__(cls, decoder)`` and
``__json5_encode__(self, encoder)``; ``as_shape`` accepts those classes, any
``Shape``, plain callables taking a decoder, and the builtin scalar types.
"""

import dataclasses
import enum
from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Mapping
from typing import Any

from ._decode import Decoder
from ._decode import VariantAccess
from ._encode import Encoder
from ._errors import CustomError
from ._value import Value


class Shape[T](ABC):
    """Describes how one kind of Python data maps onto JSON5 values."""

    __slots__ = ()

    @abstractmethod
    def decode(self, decoder: Decoder) -> T:
        """Pulls a ``T`` out of ``decoder``."""

    @abstractmethod
    def encode(self, encoder: Encoder, obj: T) -> Value:
        """Turns ``obj`` into a value using ``encoder``."""


def _not_encodable(shape: str, obj: object) -> TypeError:
    return TypeError(f"{shape} cannot encode object of type {type(obj).__name__}")


def _field_names(cls: Any) -> tuple[str, ...]:
    if dataclasses.is_dataclass(cls):
        return tuple(field.name for field in dataclasses.fields(cls))
    fields = getattr(cls, "_fields", None)
    if fields is not None:
        return tuple(fields)
    raise TypeError(f"cannot determine the fields of {cls!r}")


def _defaulted_fields(cls: Any) -> frozenset[str]:
    if dataclasses.is_dataclass(cls):
        return frozenset(
            field.name
            for field in dataclasses.fields(cls)
            if field.default is not dataclasses.MISSING
            or field.default_factory is not dataclasses.MISSING
        )
    return frozenset(getattr(cls, "_field_defaults", ()))


# Scalars


class _Bool(Shape[bool]):
    __slots__ = ()

    def decode(self, decoder: Decoder) -> bool:
        return decoder.decode_bool()

    def encode(self, encoder: Encoder, obj: bool) -> Value:
        if not isinstance(obj, bool):
            raise _not_encodable("BOOL", obj)
        return encoder.encode_bool(obj)

    def __repr__(self) -> str:
        return "BOOL"


class Integer(Shape[int]):
    """A fixed-width integer, range checked in both directions."""

    __slots__ = ("bits", "signed")

    def __init__(self, bits: int, signed: bool = True) -> None:
        self.bits = bits
        self.signed = signed

    def decode(self, decoder: Decoder) -> int:
        return decoder.decode_int(self.bits, self.signed)

    def encode(self, encoder: Encoder, obj: int) -> Value:
        if not isinstance(obj, int) or isinstance(obj, bool):
            raise _not_encodable(repr(self), obj)
        if self.signed:
            low, high = -(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1
        else:
            low, high = 0, (1 << self.bits) - 1
        if not low <= obj <= high:
            raise CustomError(f"integer overflow: {obj}")
        return encoder.encode_int(obj)

    def __repr__(self) -> str:
        return f"{'I' if self.signed else 'U'}{self.bits}"


class FloatingPoint(Shape[float]):
    __slots__ = ("bits",)

    def __init__(self, bits: int = 64) -> None:
        self.bits = bits

    def decode(self, decoder: Decoder) -> float:
        return decoder.decode_float(self.bits)

    def encode(self, encoder: Encoder, obj: float) -> Value:
        if not isinstance(obj, int | float) or isinstance(obj, bool):
            raise _not_encodable(repr(self), obj)
        return encoder.encode_float(float(obj))

    def __repr__(self) -> str:
        return f"F{self.bits}"


class _Str(Shape[str]):
    __slots__ = ()

    def decode(self, decoder: Decoder) -> str:
        return decoder.decode_str()

    def encode(self, encoder: Encoder, obj: str) -> Value:
        if not isinstance(obj, str):
            raise _not_encodable("STR", obj)
        return encoder.encode_str(obj)

    def __repr__(self) -> str:
        return "STR"


class _Char(Shape[str]):
    __slots__ = ()

    def decode(self, decoder: Decoder) -> str:
        return decoder.decode_char()

    def encode(self, encoder: Encoder, obj: str) -> Value:
        if not isinstance(obj, str):
            raise _not_encodable("CHAR", obj)
        return encoder.encode_char(obj)

    def __repr__(self) -> str:
        return "CHAR"


class _Bytes(Shape[bytes]):
    __slots__ = ()

    def decode(self, decoder: Decoder) -> bytes:
        return decoder.decode_bytes()

    def encode(self, encoder: Encoder, obj: bytes) -> Value:
        if not isinstance(obj, bytes | bytearray):
            raise _not_encodable("BYTES", obj)
        return encoder.encode_bytes(bytes(obj))

    def __repr__(self) -> str:
        return "BYTES"


class _Unit(Shape[None]):
    __slots__ = ()

    def decode(self, decoder: Decoder) -> None:
        decoder.decode_unit()

    def encode(self, encoder: Encoder, obj: None) -> Value:
        if obj is not None:
            raise _not_encodable("UNIT", obj)
        return encoder.encode_unit()

    def __repr__(self) -> str:
        return "UNIT"


class _Any(Shape[Value]):
    """Keeps the generic ``Value`` as is."""

    __slots__ = ()

    def decode(self, decoder: Decoder) -> Value:
        return decoder.decode_any()

    def encode(self, encoder: Encoder, obj: Value) -> Value:
        return encoder.encode_value(obj)

    def __repr__(self) -> str:
        return "ANY"


BOOL = _Bool()
I8 = Integer(8)
I16 = Integer(16)
I32 = Integer(32)
I64 = Integer(64)
U8 = Integer(8, signed=False)
U16 = Integer(16, signed=False)
U32 = Integer(32, signed=False)
U64 = Integer(64, signed=False)
F32 = FloatingPoint(32)
F64 = FloatingPoint(64)
STR = _Str()
CHAR = _Char()
BYTES = _Bytes()
UNIT = _Unit()
ANY = _Any()


# Containers


class Optional[T](Shape[T | None]):
    """``null`` or an ``inner`` value."""

    __slots__ = ("inner",)

    def __init__(self, inner: Any) -> None:
        self.inner: Shape[T] = as_shape(inner)

    def decode(self, decoder: Decoder) -> T | None:
        return decoder.decode_optional(self.inner.decode)

    def encode(self, encoder: Encoder, obj: T | None) -> Value:
        return encoder.encode_optional(obj, self.inner.encode)


class List[T](Shape[list[T]]):
    __slots__ = ("element",)

    def __init__(self, element: Any) -> None:
        self.element: Shape[T] = as_shape(element)

    def decode(self, decoder: Decoder) -> list[T]:
        return decoder.decode_sequence(self.element.decode)

    def encode(self, encoder: Encoder, obj: list[T]) -> Value:
        if isinstance(obj, str | bytes | Mapping):
            raise _not_encodable("List", obj)
        return encoder.encode_sequence(obj, self.element.encode)


class Tuple(Shape[tuple[Any, ...]]):
    """A fixed-length array whose positions have their own shapes."""

    __slots__ = ("elements",)

    def __init__(self, *elements: Any) -> None:
        self.elements: tuple[Shape[Any], ...] = tuple(
            as_shape(element) for element in elements
        )

    def decode(self, decoder: Decoder) -> tuple[Any, ...]:
        return decoder.decode_tuple([element.decode for element in self.elements])

    def encode(self, encoder: Encoder, obj: tuple[Any, ...]) -> Value:
        return encoder.encode_tuple(
            tuple(obj), [element.encode for element in self.elements]
        )


class Map[T](Shape[dict[str, T]]):
    """An object with arbitrary string keys and uniformly shaped values."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value: Shape[T] = as_shape(value)

    def decode(self, decoder: Decoder) -> dict[str, T]:
        return decoder.decode_mapping(self.value.decode)

    def encode(self, encoder: Encoder, obj: dict[str, T]) -> Value:
        if not isinstance(obj, Mapping):
            raise _not_encodable("Map", obj)
        return encoder.encode_mapping(obj, self.value.encode)


class Lazy[T](Shape[T]):
    """Defers building a shape, for recursive definitions."""

    __slots__ = ("_factory", "_shape")

    def __init__(self, factory: Callable[[], Any]) -> None:
        self._factory = factory
        self._shape: Shape[T] | None = None

    @property
    def shape(self) -> Shape[T]:
        if self._shape is None:
            self._shape = as_shape(self._factory())
        return self._shape

    def decode(self, decoder: Decoder) -> T:
        return self.shape.decode(decoder)

    def encode(self, encoder: Encoder, obj: T) -> Value:
        return self.shape.encode(encoder, obj)


# Records


class Record[T](Shape[T]):
    """
    An object with named fields, built by calling ``cls(**fields)``.

    A field is required unless its shape is ``Optional`` or ``cls`` declares
    a default for it (dataclass defaults and NamedTuple defaults are
    recognised). Missing ``Optional`` fields without a default are passed
    as None. Encoding reads fields as attributes, or as keys when the object
    is a mapping; a mapping without an ``Optional`` key encodes it as null.
    """

    __slots__ = ("cls", "fields", "required", "_missing", "_absent")

    def __init__(self, cls: Callable[..., T], fields: Mapping[str, Any]) -> None:
        self.cls = cls
        self.fields: dict[str, Shape[Any]] = {
            name: as_shape(shape) for name, shape in fields.items()
        }
        defaults = _defaulted_fields(cls)
        self.required = frozenset(
            name
            for name, shape in self.fields.items()
            if name not in defaults and not isinstance(shape, Optional)
        )
        self._missing = {
            name: None
            for name, shape in self.fields.items()
            if name not in defaults and isinstance(shape, Optional)
        }
        self._absent = {
            name: None
            for name, shape in self.fields.items()
            if isinstance(shape, Optional)
        }

    def field_decoders(self) -> dict[str, Callable[[Decoder], Any]]:
        return {name: shape.decode for name, shape in self.fields.items()}

    def field_encoders(self) -> dict[str, Callable[[Encoder, Any], Value]]:
        return {name: shape.encode for name, shape in self.fields.items()}

    def build(self, values: Mapping[str, Any]) -> T:
        return self.cls(**{**self._missing, **values})

    def field_values(self, obj: T) -> dict[str, Any]:
        if isinstance(obj, Mapping):
            present = {name: obj[name] for name in self.fields if name in obj}
            return {**self._absent, **present}
        return {name: getattr(obj, name) for name in self.fields}

    def decode(self, decoder: Decoder) -> T:
        return self.build(decoder.decode_record(self.field_decoders(), self.required))

    def encode(self, encoder: Encoder, obj: T) -> Value:
        return encoder.encode_record(self.field_values(obj), self.field_encoders())


class Newtype[T](Shape[T]):
    """
    A wrapper around one inner value, encoded as the inner value alone.

    ``unwrap`` defaults to reading the single field of a dataclass and to
    the identity for anything else, which suits ``typing.NewType``.
    """

    __slots__ = ("cls", "inner", "unwrap")

    def __init__(
        self,
        cls: Callable[[Any], T],
        inner: Any,
        unwrap: Callable[[T], Any] | None = None,
    ) -> None:
        self.cls = cls
        self.inner: Shape[Any] = as_shape(inner)
        if unwrap is None:
            unwrap = _default_unwrap(cls)
        self.unwrap = unwrap

    def decode(self, decoder: Decoder) -> T:
        return self.cls(self.inner.decode(decoder))

    def encode(self, encoder: Encoder, obj: T) -> Value:
        return self.inner.encode(encoder, self.unwrap(obj))


def _default_unwrap(cls: Any) -> Callable[[Any], Any]:
    if dataclasses.is_dataclass(cls):
        (name,) = _field_names(cls)
        return lambda obj: getattr(obj, name)
    return lambda obj: obj


class UnitStruct[T](Shape[T]):
    """A payload-free type, written as ``null``."""

    __slots__ = ("cls",)

    def __init__(self, cls: Callable[[], T]) -> None:
        self.cls = cls

    def decode(self, decoder: Decoder) -> T:
        decoder.decode_unit()
        return self.cls()

    def encode(self, encoder: Encoder, obj: T) -> Value:
        return encoder.encode_unit()


# Variants

# Default for UnitCase values
_NAME = object()


class Case(ABC):
    """One alternative of a ``Variant``."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def matches(self, obj: Any) -> bool:
        """True when ``obj`` is encoded by this case."""

    @abstractmethod
    def decode_payload(self, access: VariantAccess) -> Any: ...

    @abstractmethod
    def encode(self, encoder: Encoder, obj: Any) -> Value: ...


class UnitCase(Case):
    """A case without payload, written as its bare name.

    Decodes to ``value``, which defaults to the name itself.
    """

    __slots__ = ("value",)

    def __init__(self, name: str, value: Any = _NAME) -> None:
        super().__init__(name)
        self.value = name if value is _NAME else value

    def matches(self, obj: Any) -> bool:
        return obj is self.value or (
            type(obj) is type(self.value) and obj == self.value
        )

    def decode_payload(self, access: VariantAccess) -> Any:
        access.unit_variant()
        return self.value

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        return encoder.encode_unit_variant(self.name)


class NewtypeCase(Case):
    """A case carrying a single value: ``{name: value}``."""

    __slots__ = ("cls", "inner", "unwrap")

    def __init__(
        self,
        name: str,
        cls: type,
        inner: Any,
        unwrap: Callable[[Any], Any] | None = None,
    ) -> None:
        super().__init__(name)
        self.cls = cls
        self.inner: Shape[Any] = as_shape(inner)
        self.unwrap = unwrap if unwrap is not None else _default_unwrap(cls)

    def matches(self, obj: Any) -> bool:
        return isinstance(obj, self.cls)

    def decode_payload(self, access: VariantAccess) -> Any:
        return self.cls(access.newtype_variant(self.inner.decode))

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        return encoder.encode_newtype_variant(
            self.name, self.unwrap(obj), self.inner.encode
        )


class TupleCase(Case):
    """A case carrying positional fields: ``{name: [a, b]}``."""

    __slots__ = ("cls", "elements", "field_names")

    def __init__(self, name: str, cls: type, *elements: Any) -> None:
        super().__init__(name)
        self.cls = cls
        self.elements: tuple[Shape[Any], ...] = tuple(
            as_shape(element) for element in elements
        )
        self.field_names = _field_names(cls)

    def matches(self, obj: Any) -> bool:
        return isinstance(obj, self.cls)

    def decode_payload(self, access: VariantAccess) -> Any:
        items = access.tuple_variant([element.decode for element in self.elements])
        return self.cls(*items)

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        items = tuple(getattr(obj, name) for name in self.field_names)
        return encoder.encode_tuple_variant(
            self.name, items, [element.encode for element in self.elements]
        )


class StructCase(Case):
    """A case carrying named fields: ``{name: {field: value}}``."""

    __slots__ = ("record",)

    def __init__(self, name: str, cls: type, fields: Mapping[str, Any]) -> None:
        super().__init__(name)
        self.record = Record(cls, fields)

    def matches(self, obj: Any) -> bool:
        return isinstance(obj, self.record.cls)  # type: ignore[arg-type]

    def decode_payload(self, access: VariantAccess) -> Any:
        record = self.record
        return record.build(
            access.struct_variant(record.field_decoders(), record.required)
        )

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        record = self.record
        return encoder.encode_struct_variant(
            self.name, record.field_values(obj), record.field_encoders()
        )


class Variant(Shape[Any]):
    """
    A tagged union of ``Case`` alternatives.

    Encoding picks the first case whose ``matches`` accepts the object.
    """

    __slots__ = ("cases",)

    def __init__(self, *cases: Case) -> None:
        names = [case.name for case in cases]
        if len(set(names)) != len(names):
            raise ValueError("variant case names must be unique")
        self.cases = cases

    def decode(self, decoder: Decoder) -> Any:
        return decoder.decode_variant(
            {case.name: case.decode_payload for case in self.cases}
        )

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        for case in self.cases:
            if case.matches(obj):
                return case.encode(encoder, obj)
        raise _not_encodable("Variant", obj)


class UnitEnum[E: enum.Enum](Shape[E]):
    """An ``enum.Enum`` written as the bare name of its member."""

    __slots__ = ("enum_cls",)

    def __init__(self, enum_cls: type[E]) -> None:
        self.enum_cls = enum_cls

    def decode(self, decoder: Decoder) -> E:
        return decoder.decode_variant(
            {
                name: UnitCase(name, member).decode_payload
                for name, member in self.enum_cls.__members__.items()
            }
        )

    def encode(self, encoder: Encoder, obj: E) -> Value:
        if not isinstance(obj, self.enum_cls):
            raise _not_encodable(self.enum_cls.__name__, obj)
        return encoder.encode_unit_variant(obj.name)


# Adapters for everything else


class _Protocol(Shape[Any]):
    """Delegates to ``__json5_decode__`` and ``__json5_encode__``."""

    __slots__ = ("cls",)

    def __init__(self, cls: Any) -> None:
        self.cls = cls

    def decode(self, decoder: Decoder) -> Any:
        return self.cls.__json5_decode__(decoder)

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        return obj.__json5_encode__(encoder)


class _DecodeFunction(Shape[Any]):
    __slots__ = ("func",)

    def __init__(self, func: Callable[[Decoder], Any]) -> None:
        self.func = func

    def decode(self, decoder: Decoder) -> Any:
        return self.func(decoder)

    def encode(self, encoder: Encoder, obj: Any) -> Value:
        raise TypeError(f"{self.func!r} is a decode function and cannot encode")


_BUILTIN_SHAPES: dict[Any, Shape[Any]] = {
    bool: BOOL,
    int: I64,
    float: F64,
    str: STR,
    bytes: BYTES,
    type(None): UNIT,
    Value: ANY,
}


def as_shape(target: Any) -> Shape[Any]:
    """Resolves anything accepted as a decode or encode target to a ``Shape``."""
    if isinstance(target, Shape):
        return target
    if isinstance(target, type):
        if target in _BUILTIN_SHAPES:
            return _BUILTIN_SHAPES[target]
        if issubclass(target, enum.Enum):
            return UnitEnum(target)
    if hasattr(target, "__json5_decode__") or hasattr(target, "__json5_encode__"):
        return _Protocol(target)
    if callable(target) and not isinstance(target, type):
        return _DecodeFunction(target)
    raise TypeError(f"{target!r} cannot be used as a JSON5 shape")


__all__ = [
    "ANY",
    "BOOL",
    "BYTES",
    "CHAR",
    "F32",
    "F64",
    "I8",
    "I16",
    "I32",
    "I64",
    "STR",
    "U8",
    "U16",
    "U32",
    "U64",
    "UNIT",
    "Case",
    "FloatingPoint",
    "Integer",
    "Lazy",
    "List",
    "Map",
    "NewtypeCase",
    "Newtype",
    "Optional",
    "Record",
    "Shape",
    "StructCase",
    "Tuple",
    "TupleCase",
    "UnitCase",
    "UnitEnum",
    "UnitStruct",
    "Variant",
    "as_shape",
]
