"""
Typed encoding: the interface a source shape drives to build a ``Value``.

Each ``encode_*`` method returns the node for one piece of data; composite
methods take a callback per child so shapes stay in charge of how their
members are encoded.
"""

from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from ._errors import MAX_DEPTH
from ._errors import CustomError
from ._errors import DepthGuard
from ._value import Array
from ._value import Bool
from ._value import Null
from ._value import Object
from ._value import ObjectMap
from ._value import String
from ._value import Uint
from ._value import Value
from ._value import float_number
from ._value import int_number

EncodeFn = Callable[["Encoder", Any], Value]


class Encoder(ABC):
    """Sink for typed data coming from a source shape."""

    __slots__ = ()

    @abstractmethod
    def encode_bool(self, value: bool) -> Value: ...

    @abstractmethod
    def encode_int(self, value: int) -> Value:
        """``Int`` in signed 64-bit range, ``Uint`` above it, ``Float`` beyond."""

    @abstractmethod
    def encode_float(self, value: float) -> Value: ...

    @abstractmethod
    def encode_str(self, value: str) -> Value: ...

    @abstractmethod
    def encode_char(self, value: str) -> Value: ...

    @abstractmethod
    def encode_bytes(self, value: bytes) -> Value:
        """An array holding one unsigned number per byte."""

    @abstractmethod
    def encode_unit(self) -> Value: ...

    @abstractmethod
    def encode_optional(self, value: Any, inner: EncodeFn) -> Value: ...

    @abstractmethod
    def encode_sequence(self, items: Iterable[Any], element: EncodeFn) -> Value: ...

    @abstractmethod
    def encode_tuple(
        self, items: Sequence[Any], elements: Sequence[EncodeFn]
    ) -> Value: ...

    @abstractmethod
    def encode_mapping(self, mapping: Mapping[Any, Any], value: EncodeFn) -> Value:
        """Encodes a mapping whose keys must all be strings."""

    @abstractmethod
    def encode_record(
        self, values: Mapping[str, Any], fields: Mapping[str, EncodeFn]
    ) -> Value:
        """Encodes ``values[name]`` with ``fields[name]``, in field order."""

    @abstractmethod
    def encode_unit_variant(self, name: str) -> Value: ...

    @abstractmethod
    def encode_newtype_variant(
        self, name: str, value: Any, inner: EncodeFn
    ) -> Value: ...

    @abstractmethod
    def encode_tuple_variant(
        self, name: str, items: Sequence[Any], elements: Sequence[EncodeFn]
    ) -> Value: ...

    @abstractmethod
    def encode_struct_variant(
        self, name: str, values: Mapping[str, Any], fields: Mapping[str, EncodeFn]
    ) -> Value: ...

    @abstractmethod
    def encode_value(self, value: Value) -> Value:
        """Passes an already built node through."""


class ValueEncoder(Encoder):
    """Builds ``Value`` trees."""

    __slots__ = ("guard",)

    def __init__(
        self, guard: DepthGuard | None = None, *, max_depth: int = MAX_DEPTH
    ) -> None:
        self.guard = guard if guard is not None else DepthGuard(max_depth)

    def encode_bool(self, value: bool) -> Value:
        return Bool(bool(value))

    def encode_int(self, value: int) -> Value:
        return int_number(value)

    def encode_float(self, value: float) -> Value:
        return float_number(float(value))

    def encode_str(self, value: str) -> Value:
        return String(value)

    def encode_char(self, value: str) -> Value:
        if len(value) != 1:
            raise CustomError("expected single char")
        return String(value)

    def encode_bytes(self, value: bytes) -> Value:
        return Array(tuple(Uint(byte) for byte in value))

    def encode_unit(self) -> Value:
        return Null()

    def encode_optional(self, value: Any, inner: EncodeFn) -> Value:
        if value is None:
            return Null()
        return inner(self, value)

    def encode_sequence(self, items: Iterable[Any], element: EncodeFn) -> Value:
        with self.guard:
            return Array([element(self, item) for item in items])

    def encode_tuple(
        self, items: Sequence[Any], elements: Sequence[EncodeFn]
    ) -> Value:
        if len(items) != len(elements):
            raise CustomError(
                f"invalid length {len(items)}, expected a tuple of "
                f"{len(elements)} elements"
            )
        with self.guard:
            return Array(
                [
                    element(self, item)
                    for element, item in zip(elements, items, strict=True)
                ]
            )

    def encode_mapping(self, mapping: Mapping[Any, Any], value: EncodeFn) -> Value:
        members = ObjectMap()
        with self.guard:
            for key, item in mapping.items():
                if not isinstance(key, str):
                    raise CustomError("map key must be a string")
                members.insert(key, value(self, item))
        return Object(members)

    def encode_record(
        self, values: Mapping[str, Any], fields: Mapping[str, EncodeFn]
    ) -> Value:
        members = ObjectMap()
        with self.guard:
            for name, field in fields.items():
                if name not in values:
                    raise CustomError(f"missing field '{name}'")
                members.insert(name, field(self, values[name]))
        return Object(members)

    def _tagged(self, name: str, payload: Callable[[], Value]) -> Value:
        with self.guard:
            return Object(ObjectMap([(name, payload())]))

    def encode_unit_variant(self, name: str) -> Value:
        return String(name)

    def encode_newtype_variant(
        self, name: str, value: Any, inner: EncodeFn
    ) -> Value:
        return self._tagged(name, lambda: inner(self, value))

    def encode_tuple_variant(
        self, name: str, items: Sequence[Any], elements: Sequence[EncodeFn]
    ) -> Value:
        return self._tagged(name, lambda: self.encode_tuple(items, elements))

    def encode_struct_variant(
        self, name: str, values: Mapping[str, Any], fields: Mapping[str, EncodeFn]
    ) -> Value:
        return self._tagged(name, lambda: self.encode_record(values, fields))

    def encode_value(self, value: Value) -> Value:
        if not isinstance(value, Value):
            raise TypeError(
                f"Object of type {type(value).__name__} is not a JSON5 value"
            )
        return value
