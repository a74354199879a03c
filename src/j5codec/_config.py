"""Immutable option sets for ``loads``/``dumps`` and friends."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ._errors import MAX_DEPTH

# Hook type definitions - hooks can return custom types
ObjectHook = Callable[[dict[str, Any]], Any] | None
ObjectPairsHook = Callable[[list[tuple[str, Any]]], Any] | None
ParseFloatHook = Callable[[str], Any] | None
ParseIntHook = Callable[[str], Any] | None
ParseConstantHook = Callable[[str], Any] | None
DefaultHook = Callable[[Any], Any] | None


def _check_max_depth(max_depth: object) -> None:
    if not isinstance(max_depth, int) or isinstance(max_depth, bool):
        raise TypeError("max_depth must be an integer")
    if max_depth < 1:
        raise ValueError("max_depth must be at least 1")


def _check_hooks(config: object, names: tuple[str, ...]) -> None:
    for name in names:
        hook = getattr(config, name)
        if hook is not None and not callable(hook):
            raise TypeError(f"{name} must be callable")


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures JSON5 parsing behavior with immutable settings.

    The hooks mirror the standard library: ``parse_int``, ``parse_float``
    and ``parse_constant`` receive the literal text, ``object_pairs_hook``
    takes precedence over ``object_hook``.
    """

    max_depth: int = MAX_DEPTH
    parse_float: ParseFloatHook = None
    parse_int: ParseIntHook = None
    parse_constant: ParseConstantHook = None
    object_hook: ObjectHook = None
    object_pairs_hook: ObjectPairsHook = None

    def __post_init__(self) -> None:
        _check_max_depth(self.max_depth)
        _check_hooks(
            self,
            (
                "parse_float",
                "parse_int",
                "parse_constant",
                "object_hook",
                "object_pairs_hook",
            ),
        )


@dataclass(frozen=True)
class EncodeConfig:
    """
    Configures JSON5 encoding behavior with immutable settings.

    ``indent`` selects the pretty emitter; an int means that many spaces
    per level. Keys that are valid identifiers are written bare unless
    ``quote_keys`` is set.
    """

    indent: str | int | None = None
    quote_keys: bool = False
    ensure_ascii: bool = False
    sort_keys: bool = False
    skipkeys: bool = False
    default: DefaultHook = None
    max_depth: int = MAX_DEPTH

    def __post_init__(self) -> None:
        for name in ("quote_keys", "ensure_ascii", "sort_keys", "skipkeys"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a boolean")
        if self.indent is not None:
            if isinstance(self.indent, bool) or not isinstance(
                self.indent, int | str
            ):
                raise TypeError("indent must be an int, a string or None")
            if isinstance(self.indent, int) and self.indent < 0:
                raise ValueError("indent must not be negative")
        _check_hooks(self, ("default",))
        _check_max_depth(self.max_depth)

    @property
    def indent_unit(self) -> str | None:
        """The string written once per nesting level, or None for compact."""
        if self.indent is None:
            return None
        if isinstance(self.indent, int):
            return " " * self.indent
        return self.indent
