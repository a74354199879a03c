"""
Typed decoding: the interface a target shape drives to pull data out of a
document.

A target asks for the kind of value it expects by calling the matching
``decode_*`` method; the decoder supplies it or raises
``TypeMismatchError``. Composite requests take callbacks that decode each
child from a fresh decoder, so shapes never see the document tree.

``ValueDecoder`` works over an already parsed ``Value``. ``ParserDecoder``
reads scalars, strings and options straight from a ``Parser`` and only
builds a tree for the composites it hands to a ``ValueDecoder``.
"""

import struct
from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Collection
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from ._emit import encode_number
from ._errors import MAX_DEPTH
from ._errors import CustomError
from ._errors import DepthGuard
from ._errors import TypeMismatchError
from ._parser import DOUBLE_QUOTE
from ._parser import SINGLE_QUOTE
from ._parser import Parser
from ._value import Array
from ._value import Bool
from ._value import Float
from ._value import Int
from ._value import Null
from ._value import Number
from ._value import Object
from ._value import String
from ._value import Uint
from ._value import Value

DecodeFn = Callable[["Decoder"], Any]
VariantFn = Callable[["VariantAccess"], Any]


class Decoder(ABC):
    """Source of typed data for a target shape."""

    __slots__ = ()

    @abstractmethod
    def decode_any(self) -> Value:
        """Returns the next value untouched."""

    @abstractmethod
    def decode_bool(self) -> bool: ...

    @abstractmethod
    def decode_int(self, bits: int = 64, signed: bool = True) -> int:
        """
        Decodes an integer that fits in ``bits`` bits.

        Floats are truncated toward zero. Values outside the target range
        raise ``CustomError``; negative values for an unsigned target and
        the non-finite specials raise ``TypeMismatchError``.
        """

    @abstractmethod
    def decode_float(self, bits: int = 64) -> float:
        """Decodes any number, rounded to single precision when ``bits`` is 32."""

    @abstractmethod
    def decode_str(self) -> str: ...

    @abstractmethod
    def decode_char(self) -> str: ...

    @abstractmethod
    def decode_bytes(self) -> bytes: ...

    @abstractmethod
    def decode_unit(self) -> None: ...

    @abstractmethod
    def decode_optional(self, inner: DecodeFn) -> Any:
        """Returns None for ``null``, else whatever ``inner`` decodes."""

    @abstractmethod
    def decode_sequence(self, element: DecodeFn) -> list[Any]: ...

    @abstractmethod
    def decode_tuple(self, elements: Sequence[DecodeFn]) -> tuple[Any, ...]: ...

    @abstractmethod
    def decode_mapping(self, value: DecodeFn) -> dict[str, Any]: ...

    @abstractmethod
    def decode_record(
        self, fields: Mapping[str, DecodeFn], required: Collection[str] = ()
    ) -> dict[str, Any]:
        """
        Decodes the named fields of a record.

        Unknown members are ignored. Missing members named in ``required``
        raise ``CustomError``; other missing members are left out of the
        result.
        """

    @abstractmethod
    def decode_variant(self, cases: Mapping[str, VariantFn]) -> Any:
        """
        Decodes a tagged union.

        A bare string selects a case without payload; an object with exactly
        one member selects the case named by its key. The selected callback
        receives a ``VariantAccess`` and its result is returned.
        """


def _mismatch(expected: str, value: Value) -> TypeMismatchError:
    return TypeMismatchError(expected, value.type_name())


def _narrow(n: int, bits: int, signed: bool) -> int:
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    if not low <= n <= high:
        raise CustomError(f"integer overflow: {n}")
    return n


def value_to_int(value: Value, bits: int = 64, signed: bool = True) -> int:
    """Overflow-checked integer narrowing of a number value."""
    expected = "integer" if signed else "unsigned int"
    if isinstance(value, Int | Uint):
        n = value.value
    elif isinstance(value, Float):
        n = int(value.value)
    else:
        raise _mismatch(expected, value)
    if not signed and (n < 0 or value.as_float() < 0):
        raise _mismatch(expected, value)
    return _narrow(n, bits, signed)


def value_to_float(value: Value, bits: int = 64) -> float:
    if not isinstance(value, Number):
        raise _mismatch(f"f{bits}", value)
    f = value.as_float()
    if bits == 32:
        try:
            return struct.unpack("f", struct.pack("f", f))[0]
        except OverflowError:
            return float("inf") if f > 0 else float("-inf")
    return f


class VariantAccess:
    """Payload of the selected case of a tagged union."""

    __slots__ = ("_guard", "_payload", "name")

    def __init__(
        self, name: str, payload: Value | None, guard: DepthGuard
    ) -> None:
        self.name = name
        self._payload = payload
        self._guard = guard

    def _require_payload(self) -> Value:
        if self._payload is None:
            raise CustomError("expected unit variant")
        return self._payload

    def unit_variant(self) -> None:
        if self._payload is not None and not isinstance(self._payload, Null):
            raise CustomError("expected null for unit variant")

    def newtype_variant(self, inner: DecodeFn) -> Any:
        return inner(ValueDecoder(self._require_payload(), self._guard))

    def tuple_variant(self, elements: Sequence[DecodeFn]) -> tuple[Any, ...]:
        payload = self._require_payload()
        if not isinstance(payload, Array):
            raise _mismatch("array", payload)
        return ValueDecoder(payload, self._guard).decode_tuple(elements)

    def struct_variant(
        self, fields: Mapping[str, DecodeFn], required: Collection[str] = ()
    ) -> dict[str, Any]:
        payload = self._require_payload()
        if not isinstance(payload, Object):
            raise _mismatch("object", payload)
        return ValueDecoder(payload, self._guard).decode_record(fields, required)


class ValueDecoder(Decoder):
    """Decodes from a parsed ``Value``."""

    __slots__ = ("guard", "value")

    def __init__(
        self,
        value: Value,
        guard: DepthGuard | None = None,
        *,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self.value = value
        self.guard = guard if guard is not None else DepthGuard(max_depth)

    def _child(self, value: Value) -> "ValueDecoder":
        return ValueDecoder(value, self.guard)

    def decode_any(self) -> Value:
        return self.value

    def decode_bool(self) -> bool:
        if isinstance(self.value, Bool):
            return self.value.value
        raise _mismatch("bool", self.value)

    def decode_int(self, bits: int = 64, signed: bool = True) -> int:
        return value_to_int(self.value, bits, signed)

    def decode_float(self, bits: int = 64) -> float:
        return value_to_float(self.value, bits)

    def decode_str(self) -> str:
        value = self.value
        if isinstance(value, String):
            return value.value
        if isinstance(value, Bool):
            return "true" if value.value else "false"
        if isinstance(value, Number):
            return encode_number(value)
        raise _mismatch("string", value)

    def decode_char(self) -> str:
        if not isinstance(self.value, String):
            raise _mismatch("char", self.value)
        if len(self.value.value) != 1:
            raise CustomError("expected single char")
        return self.value.value

    def decode_bytes(self) -> bytes:
        value = self.value
        if isinstance(value, String):
            return value.value.encode("utf-8")
        if isinstance(value, Array):
            return bytes(value_to_int(item, 8, False) for item in value)
        raise _mismatch("bytes", value)

    def decode_unit(self) -> None:
        if not isinstance(self.value, Null):
            raise _mismatch("null", self.value)

    def decode_optional(self, inner: DecodeFn) -> Any:
        if isinstance(self.value, Null):
            return None
        return inner(self)

    def decode_sequence(self, element: DecodeFn) -> list[Any]:
        if not isinstance(self.value, Array):
            raise _mismatch("array", self.value)
        with self.guard:
            return [element(self._child(item)) for item in self.value]

    def decode_tuple(self, elements: Sequence[DecodeFn]) -> tuple[Any, ...]:
        if not isinstance(self.value, Array):
            raise _mismatch("array", self.value)
        if len(self.value) != len(elements):
            raise CustomError(
                f"invalid length {len(self.value)}, expected a tuple of "
                f"{len(elements)} elements"
            )
        with self.guard:
            return tuple(
                [
                    element(self._child(item))
                    for element, item in zip(elements, self.value, strict=True)
                ]
            )

    def decode_mapping(self, value: DecodeFn) -> dict[str, Any]:
        if not isinstance(self.value, Object):
            raise _mismatch("object", self.value)
        with self.guard:
            return {key: value(self._child(item)) for key, item in self.value.pairs()}

    def decode_record(
        self, fields: Mapping[str, DecodeFn], required: Collection[str] = ()
    ) -> dict[str, Any]:
        value = self.value
        if isinstance(value, Object):
            members: Mapping[str, Value] = value.members
        elif isinstance(value, Array):
            # Positional form: members in field declaration order
            if len(value) > len(fields):
                raise CustomError(
                    f"invalid length {len(value)}, expected at most "
                    f"{len(fields)} fields"
                )
            members = dict(zip(fields, value.items, strict=False))
        else:
            raise _mismatch("object", value)

        result: dict[str, Any] = {}
        with self.guard:
            for name, field in fields.items():
                member = members.get(name)
                if member is None:
                    if name in required:
                        raise CustomError(f"missing field '{name}'")
                    continue
                result[name] = field(self._child(member))
        return result

    def decode_variant(self, cases: Mapping[str, VariantFn]) -> Any:
        value = self.value
        if isinstance(value, String):
            name, payload = value.value, None
        elif isinstance(value, Object):
            if len(value) != 1:
                raise CustomError("enum object must have exactly one key")
            name, payload = next(value.pairs())
        else:
            raise _mismatch("enum", value)

        case = cases.get(name)
        if case is None:
            expected = ", ".join(f"'{known}'" for known in cases)
            raise CustomError(
                f"unknown variant '{name}', expected one of {expected}"
            )
        with self.guard:
            return case(VariantAccess(name, payload, self.guard))


class ParserDecoder(Decoder):
    """
    Decodes while parsing.

    Scalars, strings and ``null`` checks are read from the token stream
    without building a tree. Every composite request parses its sub-value
    and hands it to a ``ValueDecoder`` sharing this decoder's depth guard,
    so both paths produce identical results.
    """

    __slots__ = ("parser",)

    def __init__(self, parser: Parser) -> None:
        self.parser = parser

    def _delegate(self) -> ValueDecoder:
        return ValueDecoder(self.parser.parse_value(), self.parser.guard)

    def _at_string(self) -> bool:
        byte = self.parser.lookahead()
        return byte == DOUBLE_QUOTE or byte == SINGLE_QUOTE

    def decode_any(self) -> Value:
        return self.parser.parse_value()

    def decode_bool(self) -> bool:
        result = self.parser.parse_bool()
        if result is None:
            return self._delegate().decode_bool()
        return result

    def decode_int(self, bits: int = 64, signed: bool = True) -> int:
        return value_to_int(self.parser.parse_value(), bits, signed)

    def decode_float(self, bits: int = 64) -> float:
        return value_to_float(self.parser.parse_value(), bits)

    def decode_str(self) -> str:
        if self._at_string():
            return self.parser.parse_string()
        return self._delegate().decode_str()

    def decode_char(self) -> str:
        if self._at_string():
            text = self.parser.parse_string()
            if len(text) != 1:
                raise CustomError("expected single char")
            return text
        return self._delegate().decode_char()

    def decode_bytes(self) -> bytes:
        if self._at_string():
            return self.parser.parse_string().encode("utf-8")
        return self._delegate().decode_bytes()

    def decode_unit(self) -> None:
        if not self.parser.at_null():
            self._delegate().decode_unit()

    def decode_optional(self, inner: DecodeFn) -> Any:
        if self.parser.at_null():
            return None
        return inner(self)

    def decode_sequence(self, element: DecodeFn) -> list[Any]:
        return self._delegate().decode_sequence(element)

    def decode_tuple(self, elements: Sequence[DecodeFn]) -> tuple[Any, ...]:
        return self._delegate().decode_tuple(elements)

    def decode_mapping(self, value: DecodeFn) -> dict[str, Any]:
        return self._delegate().decode_mapping(value)

    def decode_record(
        self, fields: Mapping[str, DecodeFn], required: Collection[str] = ()
    ) -> dict[str, Any]:
        return self._delegate().decode_record(fields, required)

    def decode_variant(self, cases: Mapping[str, VariantFn]) -> Any:
        return self._delegate().decode_variant(cases)
