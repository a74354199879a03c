"""Conversion between ``Value`` trees and plain Python objects."""

import math
from collections.abc import Mapping
from typing import Any

from ._config import EncodeConfig
from ._config import ParseConfig
from ._emit import encode_number
from ._encode import ValueEncoder
from ._errors import DepthGuard
from ._value import Array
from ._value import Bool
from ._value import Float
from ._value import Infinity
from ._value import Int
from ._value import NaN
from ._value import NegInfinity
from ._value import Null
from ._value import Object
from ._value import ObjectMap
from ._value import String
from ._value import Uint
from ._value import Value
from ._value import float_number
from ._value import int_number

_CONSTANTS: dict[type, tuple[str, float]] = {
    NaN: ("NaN", math.nan),
    Infinity: ("Infinity", math.inf),
    NegInfinity: ("-Infinity", -math.inf),
}


def _convert_number(value: Value, config: ParseConfig) -> Any:
    if isinstance(value, Int | Uint):
        if config.parse_int:
            return config.parse_int(str(value.value))
        return value.value
    if isinstance(value, Float):
        if config.parse_float:
            return config.parse_float(repr(value.value))
        return value.value
    literal, special = _CONSTANTS[type(value)]
    if config.parse_constant:
        return config.parse_constant(literal)
    return special


def _apply_object_hooks(pairs: list[tuple[str, Any]], config: ParseConfig) -> Any:
    """Applies object hooks to converted pairs."""
    if config.object_pairs_hook:
        return config.object_pairs_hook(pairs)
    obj = dict(pairs)
    if config.object_hook:
        return config.object_hook(obj)
    return obj


def to_python(value: Value, config: ParseConfig | None = None) -> Any:
    """
    Converts a value tree to dicts, lists and scalars.

    ``parse_int`` and ``parse_float`` receive the canonical literal text of
    the number, ``parse_constant`` one of ``NaN``, ``Infinity`` and
    ``-Infinity``.
    """
    if config is None:
        config = ParseConfig()
    return _to_python(value, config)


def _to_python(value: Value, config: ParseConfig) -> Any:
    if isinstance(value, Null):
        return None
    if isinstance(value, Bool):
        return value.value
    if isinstance(value, String):
        return value.value
    if isinstance(value, Array):
        return [_to_python(item, config) for item in value]
    if isinstance(value, Object):
        pairs = [(key, _to_python(item, config)) for key, item in value.pairs()]
        return _apply_object_hooks(pairs, config)
    return _convert_number(value, config)


def _coerce_key(key: Any, config: EncodeConfig) -> str | None:
    """Returns the string form of a mapping key, or None to skip it."""
    if isinstance(key, str):
        return key
    # Only allow basic types to be converted to strings
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    if isinstance(key, float):
        return encode_number(float_number(key))
    if key is None:
        return "null"
    if config.skipkeys:
        return None
    raise TypeError(f"keys must be strings, not {type(key).__name__}")


class _NativeConverter:
    """Walks plain Python data, producing a value tree."""

    __slots__ = ("config", "guard")

    def __init__(self, config: EncodeConfig) -> None:
        self.config = config
        self.guard = DepthGuard(config.max_depth)

    def convert(self, obj: Any) -> Value:  # noqa: PLR0911
        if obj is None:
            return Null()
        if obj is True or obj is False:
            return Bool(obj)
        if isinstance(obj, Value):
            return obj
        if isinstance(obj, str):
            return String(obj)
        if isinstance(obj, int):
            return int_number(obj)
        if isinstance(obj, float):
            return float_number(obj)
        if isinstance(obj, Mapping):
            return self._convert_mapping(obj)
        if isinstance(obj, list | tuple):
            with self.guard:
                return Array([self.convert(item) for item in obj])
        if hasattr(obj, "__json5_encode__"):
            return obj.__json5_encode__(ValueEncoder(self.guard))
        if self.config.default is not None:
            with self.guard:
                return self.convert(self.config.default(obj))
        raise TypeError(
            f"Object of type {type(obj).__name__} is not JSON5 serializable"
        )

    def _convert_mapping(self, obj: Mapping[Any, Any]) -> Value:
        items = []
        for key, item in obj.items():
            str_key = _coerce_key(key, self.config)
            if str_key is not None:
                items.append((key, str_key, item))

        if self.config.sort_keys:
            items.sort(key=lambda x: x[1])

        members = ObjectMap()
        with self.guard:
            for _, str_key, item in items:
                members.insert(str_key, self.convert(item))
        return Object(members)


def from_python(obj: Any, config: EncodeConfig | None = None) -> Value:
    """
    Converts plain Python data to a value tree.

    Mapping keys that are bools, numbers or None are written as their
    literal text; other non-string keys raise ``TypeError`` unless
    ``skipkeys`` is set. Objects implementing ``__json5_encode__`` encode
    themselves, anything else goes through ``default``.
    """
    if config is None:
        config = EncodeConfig()
    return _NativeConverter(config).convert(obj)
