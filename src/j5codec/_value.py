"""
Generic value model for parsed JSON5 documents.

A document parses into a tree of immutable nodes: ``Null``, ``Bool``, one of
the ``Number`` variants, ``String``, ``Array`` and ``Object``. Numbers keep
the representation their literal had (signed, unsigned, float or one of the
three special constants) so that emitting and re-parsing a tree reproduces
it exactly.
"""

import math
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from typing import ClassVar

I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1
U64_MAX = (1 << 64) - 1


class Value:
    """Base class of every node in a document tree."""

    __slots__ = ()

    kind: ClassVar[str] = "value"

    def type_name(self) -> str:
        """Kind of node, for error messages only."""
        return self.kind


@dataclass(frozen=True, slots=True)
class Null(Value):
    kind: ClassVar[str] = "null"


@dataclass(frozen=True, slots=True)
class Bool(Value):
    kind: ClassVar[str] = "bool"

    value: bool


class Number(Value):
    """Base class of the numeric variants."""

    __slots__ = ()

    kind: ClassVar[str] = "number"

    def as_float(self) -> float:
        """Widens any variant to a float for comparisons and casts."""
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class Int(Number):
    value: int

    def __post_init__(self) -> None:
        if not I64_MIN <= self.value <= I64_MAX:
            raise ValueError(f"{self.value} is outside the signed 64-bit range")

    def as_float(self) -> float:
        return float(self.value)


@dataclass(frozen=True, slots=True)
class Uint(Number):
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= U64_MAX:
            raise ValueError(
                f"{self.value} is outside the unsigned 64-bit range"
            )

    def as_float(self) -> float:
        return float(self.value)


@dataclass(frozen=True, slots=True)
class Float(Number):
    value: float

    def __post_init__(self) -> None:
        value = float(self.value)
        if not math.isfinite(value):
            raise ValueError(
                "non-finite floats are represented by NaN, Infinity "
                "and NegInfinity"
            )
        object.__setattr__(self, "value", value)

    def as_float(self) -> float:
        return self.value


@dataclass(frozen=True, slots=True, eq=False)
class NaN(Number):
    # IEEE semantics: never equal, not even to itself
    def __eq__(self, other: object) -> bool:
        return False

    def __hash__(self) -> int:
        return hash("NaN")

    def as_float(self) -> float:
        return math.nan


@dataclass(frozen=True, slots=True)
class Infinity(Number):
    def as_float(self) -> float:
        return math.inf


@dataclass(frozen=True, slots=True)
class NegInfinity(Number):
    def as_float(self) -> float:
        return -math.inf


@dataclass(frozen=True, slots=True)
class String(Value):
    kind: ClassVar[str] = "string"

    value: str


@dataclass(frozen=True, slots=True)
class Array(Value):
    kind: ClassVar[str] = "array"

    items: tuple[Value, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


class ObjectMap(Mapping[str, Value]):
    """
    Insertion-ordered mapping from string keys to values.

    Keys live in a list beside their values, with a dict from key to list
    index for lookups. Re-inserting a key replaces its value in place, so
    the key keeps the position of its first occurrence.
    """

    __slots__ = ("_index", "_keys", "_values")

    def __init__(
        self, pairs: Mapping[str, Value] | Iterable[tuple[str, Value]] = ()
    ) -> None:
        self._keys: list[str] = []
        self._values: list[Value] = []
        self._index: dict[str, int] = {}

        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        for key, value in items:
            self.insert(key, value)

    def insert(self, key: str, value: Value) -> None:
        """Adds a member, overwriting the value of an existing key."""
        position = self._index.get(key)
        if position is None:
            self._index[key] = len(self._keys)
            self._keys.append(key)
            self._values.append(value)
        else:
            self._values[position] = value

    def __getitem__(self, key: str) -> Value:
        return self._values[self._index[key]]

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def pairs(self) -> Iterator[tuple[str, Value]]:
        """Members in insertion order."""
        return zip(self._keys, self._values, strict=True)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {v!r}" for k, v in self.pairs())
        return f"ObjectMap({{{inner}}})"


@dataclass(frozen=True, slots=True)
class Object(Value):
    kind: ClassVar[str] = "object"

    members: ObjectMap = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.members is None:
            object.__setattr__(self, "members", ObjectMap())
        elif not isinstance(self.members, ObjectMap):
            object.__setattr__(self, "members", ObjectMap(self.members))

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[str]:
        return iter(self.members)

    def __getitem__(self, key: str) -> Value:
        return self.members[key]

    def __contains__(self, key: object) -> bool:
        return key in self.members

    def get(self, key: str, default: Any = None) -> Any:
        return self.members.get(key, default)

    def pairs(self) -> Iterator[tuple[str, Value]]:
        return self.members.pairs()


def int_number(n: int) -> Number:
    """Classifies a Python int by sign and magnitude."""
    if I64_MIN <= n <= I64_MAX:
        return Int(n)
    if 0 <= n <= U64_MAX:
        return Uint(n)
    try:
        return float_number(float(n))
    except OverflowError:
        return Infinity() if n > 0 else NegInfinity()


def float_number(f: float) -> Number:
    """Classifies a Python float, mapping the specials to their variants."""
    if math.isnan(f):
        return NaN()
    if math.isinf(f):
        return Infinity() if f > 0 else NegInfinity()
    return Float(f)
