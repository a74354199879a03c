"""
Recursive descent parser producing ``Value`` trees from JSON5 text.

Dispatch happens on the lookahead byte; every routine leaves the cursor
just past the construct it consumed. Errors are raised immediately with the
byte offset at which they were detected.
"""

import re

from ._errors import MAX_DEPTH
from ._errors import DepthGuard
from ._errors import InvalidEscapeError
from ._errors import InvalidNumberError
from ._errors import InvalidUnicodeError
from ._errors import TrailingDataError
from ._errors import UnexpectedCharError
from ._errors import UnexpectedEofError
from ._profile import ProfileContext
from ._scanner import CR
from ._scanner import LF
from ._scanner import Scanner
from ._scanner import hex_value
from ._scanner import is_id_continue
from ._scanner import is_id_start
from ._value import I64_MIN
from ._value import U64_MAX
from ._value import Array
from ._value import Bool
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
from ._value import float_number
from ._value import int_number

DOUBLE_QUOTE = 0x22
SINGLE_QUOTE = 0x27

_DIGITS = frozenset(b"0123456789")
_NONZERO_DIGITS = frozenset(b"123456789")
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")
_NUMBER_START = frozenset(b"0123456789.+-")
# Longer integer literals are outside 64 bits whatever their value
_MAX_INT_DIGITS = 20
_LITERAL_CHARS = frozenset(
    b"0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_.+-"
)

# Anything that keeps a string off the fast path
_NEEDS_SLOW_PATH = re.compile(rb"[\x00-\x1f\\]")
_STRING_STOPS = {
    DOUBLE_QUOTE: re.compile(rb'["\\\n\r]'),
    SINGLE_QUOTE: re.compile(rb"['\\\n\r]"),
}

_SIMPLE_ESCAPES = {
    ord('"'): '"',
    ord("'"): "'",
    ord("\\"): "\\",
    ord("/"): "/",
    ord("b"): "\b",
    ord("f"): "\f",
    ord("n"): "\n",
    ord("r"): "\r",
    ord("t"): "\t",
    ord("v"): "\v",
}


def _is_high_surrogate(code_point: int) -> bool:
    return 0xD800 <= code_point <= 0xDBFF


def _is_low_surrogate(code_point: int) -> bool:
    return 0xDC00 <= code_point <= 0xDFFF


class Parser:
    """
    Parses one UTF-8 encoded JSON5 document.

    The parser owns a ``Scanner`` for the cursor and a ``DepthGuard`` for
    container nesting. Besides whole-document parsing it exposes the token
    level routines the streaming typed decoder drives directly.
    """

    __slots__ = ("data", "guard", "scanner")

    def __init__(self, data: bytes, max_depth: int = MAX_DEPTH) -> None:
        self.data = data
        self.scanner = Scanner(data)
        self.guard = DepthGuard(max_depth)

    @property
    def pos(self) -> int:
        return self.scanner.pos

    def parse_document(self) -> Value:
        """Parses a value that must span the whole input."""
        value = self.parse_value()
        self.finish()
        return value

    def finish(self) -> None:
        """Requires that only whitespace and comments remain."""
        self.scanner.skip_whitespace_and_comments()
        if self.scanner.remaining() > 0:
            raise TrailingDataError(self.scanner.pos, self.data)

    def lookahead(self) -> int | None:
        """Skips insignificant input and returns the next byte."""
        self.scanner.skip_whitespace_and_comments()
        return self.scanner.peek()

    def _unexpected(self) -> UnexpectedCharError | UnexpectedEofError:
        scanner = self.scanner
        if scanner.peek() is None:
            return UnexpectedEofError(scanner.pos, self.data)
        return UnexpectedCharError(scanner.current_char(), scanner.pos, self.data)

    def parse_value(self) -> Value:
        """Parses any value based on the lookahead byte."""
        byte = self.lookahead()
        if byte is None:
            raise UnexpectedEofError(self.scanner.pos, self.data)

        if byte == 0x7B:  # {
            return self.parse_object()
        if byte == 0x5B:  # [
            return self.parse_array()
        if byte == DOUBLE_QUOTE or byte == SINGLE_QUOTE:
            return String(self.parse_string())
        if byte == 0x6E:  # n
            return self._parse_keyword(b"null", Null())
        if byte == 0x74:  # t
            return self._parse_keyword(b"true", Bool(True))
        if byte == 0x66:  # f
            return self._parse_keyword(b"false", Bool(False))
        if byte == 0x49:  # I
            return self._parse_keyword(b"Infinity", Infinity())
        if byte == 0x4E:  # N
            return self._parse_keyword(b"NaN", NaN())
        if byte in _NUMBER_START:
            return self.parse_number()
        raise self._unexpected()

    def _parse_keyword(self, keyword: bytes, value: Value) -> Value:
        if not self.scanner.startswith(keyword):
            raise self._unexpected()
        self.scanner.advance(len(keyword))
        return value

    def at_null(self) -> bool:
        """Consumes a ``null`` literal if one is next."""
        if self.lookahead() == 0x6E and self.scanner.startswith(b"null"):
            self.scanner.advance(4)
            return True
        return False

    def parse_bool(self) -> bool | None:
        """Consumes a boolean literal if one is next, else returns None."""
        scanner = self.scanner
        byte = self.lookahead()
        if byte == 0x74 and scanner.startswith(b"true"):
            scanner.advance(4)
            return True
        if byte == 0x66 and scanner.startswith(b"false"):
            scanner.advance(5)
            return False
        return None

    # Strings

    def parse_string(self, *, fast: bool = True) -> str:
        """
        Parses a quoted string with the cursor on its opening quote.

        The fast path slices everything up to the closing quote and decodes
        it in one step. Strings containing escapes, control bytes or invalid
        UTF-8 are re-scanned from the opening quote by the escape-aware path,
        so both paths return the same text for every input.
        """
        with ProfileContext("parse_string"):
            scanner = self.scanner
            quote = scanner.peek()
            if quote != DOUBLE_QUOTE and quote != SINGLE_QUOTE:
                raise self._unexpected()
            start = scanner.pos + 1

            if fast:
                end = self.data.find(quote, start)
                if end >= 0:
                    segment = self.data[start:end]
                    if not _NEEDS_SLOW_PATH.search(segment):
                        try:
                            text = segment.decode("utf-8")
                        except UnicodeDecodeError:
                            pass
                        else:
                            scanner.pos = end + 1
                            return text

            scanner.pos = start
            return self._parse_string_slow(quote)

    def _parse_string_slow(self, quote: int) -> str:
        scanner = self.scanner
        data = self.data
        stops = _STRING_STOPS[quote]
        chunks: list[str] = []

        while True:
            match = stops.search(data, scanner.pos)
            if match is None:
                self._append_raw(chunks, scanner.pos, scanner.length)
                raise UnexpectedEofError(scanner.length, data)

            self._append_raw(chunks, scanner.pos, match.start())
            scanner.pos = match.start()
            byte = data[scanner.pos]
            if byte == quote:
                scanner.advance()
                return "".join(chunks)
            if byte == LF or byte == CR:
                # Only escaped line terminators may appear in a string
                raise UnexpectedCharError(chr(byte), scanner.pos, data)

            scanner.advance()
            self._parse_escape(chunks)

    def _append_raw(self, chunks: list[str], start: int, end: int) -> None:
        if start == end:
            return
        try:
            chunks.append(self.data[start:end].decode("utf-8"))
        except UnicodeDecodeError as exc:
            bad = start + exc.start
            raise InvalidUnicodeError(self.data[bad], bad, self.data) from None

    def _parse_escape(self, chunks: list[str]) -> None:
        """Resolves one escape sequence; the backslash is already consumed."""
        scanner = self.scanner
        escape_pos = scanner.pos
        byte = scanner.peek()
        if byte is None:
            raise UnexpectedEofError(escape_pos, self.data)

        simple = _SIMPLE_ESCAPES.get(byte)
        if simple is not None:
            scanner.advance()
            chunks.append(simple)
        elif byte == 0x30:  # 0
            scanner.advance()
            if scanner.peek() in _NONZERO_DIGITS:
                raise InvalidEscapeError("0", escape_pos, self.data)
            chunks.append("\0")
        elif byte == 0x78:  # x
            scanner.advance()
            chunks.append(chr(self._read_hex_digits(2, "x", escape_pos)))
        elif byte == 0x75:  # u
            scanner.advance()
            chunks.append(self._parse_unicode_escape(escape_pos))
        elif byte == LF:
            scanner.advance()
        elif byte == CR:
            scanner.advance()
            if scanner.peek() == LF:
                scanner.advance()
        else:
            raise InvalidEscapeError(scanner.current_char(), escape_pos, self.data)

    def _read_hex_digits(self, count: int, escape: str, escape_pos: int) -> int:
        scanner = self.scanner
        value = 0
        for _ in range(count):
            digit = hex_value(scanner.peek())
            if digit is None:
                raise InvalidEscapeError(escape, escape_pos, self.data)
            value = value * 16 + digit
            scanner.advance()
        return value

    def _parse_unicode_escape(self, escape_pos: int) -> str:
        scanner = self.scanner
        if scanner.peek() == 0x7B:  # {
            scanner.advance()
            code_point = 0
            digits = 0
            while (digit := hex_value(scanner.peek())) is not None:
                code_point = code_point * 16 + digit
                digits += 1
                scanner.advance()
            if scanner.peek() != 0x7D or not 1 <= digits <= 6:
                raise InvalidEscapeError("u", escape_pos, self.data)
            scanner.advance()
            if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
                raise InvalidUnicodeError(code_point, escape_pos, self.data)
            return chr(code_point)

        code_point = self._read_hex_digits(4, "u", escape_pos)
        if _is_low_surrogate(code_point):
            raise InvalidUnicodeError(code_point, escape_pos, self.data)
        if not _is_high_surrogate(code_point):
            return chr(code_point)

        # A high surrogate must be followed by an escaped low surrogate
        if not scanner.startswith(b"\\u"):
            raise InvalidUnicodeError(code_point, escape_pos, self.data)
        scanner.advance(2)
        low = self._read_hex_digits(4, "u", scanner.pos - 1)
        if not _is_low_surrogate(low):
            raise InvalidUnicodeError(code_point, escape_pos, self.data)
        return chr(0x10000 + ((code_point - 0xD800) << 10) + (low - 0xDC00))

    # Numbers

    def _literal_text(self, start: int) -> str:
        """Text of the malformed literal starting at ``start``, for errors."""
        end = max(self.scanner.pos, start + 1)
        while end < self.scanner.length and self.data[end] in _LITERAL_CHARS:
            end += 1
        return self.data[start:end].decode("utf-8", "replace")

    def _scan_digits(self, allowed: frozenset[int]) -> int:
        """Consumes digits and underscores, returns how many digits it saw."""
        scanner = self.scanner
        digits = 0
        while (byte := scanner.peek()) is not None:
            if byte in allowed:
                digits += 1
            elif byte != 0x5F:  # _
                break
            scanner.advance()
        return digits

    def _scan_integer_part(self, start: int) -> int:
        """Scans the integer part of a decimal literal."""
        scanner = self.scanner
        if scanner.peek() == 0x30 and scanner.peek2() in _DIGITS:
            raise InvalidNumberError(self._literal_text(start), start, self.data)
        return self._scan_digits(_DIGITS)

    def _scan_decimal_part(self) -> tuple[bool, int]:
        """Scans an optional fraction; either side of the dot may be empty."""
        if self.scanner.peek() != 0x2E:  # .
            return False, 0
        self.scanner.advance()
        return True, self._scan_digits(_DIGITS)

    def _scan_exponent_part(self, start: int) -> bool:
        """Scans an optional exponent, which needs at least one digit."""
        scanner = self.scanner
        if scanner.peek() not in (0x65, 0x45):  # e, E
            return False
        scanner.advance()
        if scanner.peek() in (0x2B, 0x2D):
            scanner.advance()
        if not self._scan_digits(_DIGITS):
            raise InvalidNumberError(self._literal_text(start), start, self.data)
        return True

    def parse_number(self) -> Number:
        """
        Parses a numeric literal, choosing the variant from its lexical form.

        Hex literals give ``Uint`` (``Int`` when negated). Decimal literals
        with a fraction or exponent give ``Float``; integral ones give
        ``Int`` when they fit in 64 signed bits, ``Uint`` when they fit in 64
        unsigned bits and ``Float`` beyond that.
        """
        with ProfileContext("parse_number"):
            scanner = self.scanner
            start = scanner.pos
            sign = scanner.peek()
            if sign == 0x2D or sign == 0x2B:
                scanner.advance()
                if scanner.startswith(b"Infinity"):
                    scanner.advance(8)
                    return NegInfinity() if sign == 0x2D else Infinity()
            negative = sign == 0x2D

            if scanner.peek() == 0x30 and scanner.peek2() in (0x78, 0x58):
                return self._parse_hex(start, negative)

            int_digits = self._scan_integer_part(start)
            has_fraction, fraction_digits = self._scan_decimal_part()
            if not int_digits and not fraction_digits:
                raise InvalidNumberError(self._literal_text(start), start, self.data)
            has_exponent = self._scan_exponent_part(start)

            literal = self.data[start : scanner.pos].replace(b"_", b"")
            if has_fraction or has_exponent:
                return float_number(float(literal))

            if int_digits > _MAX_INT_DIGITS:
                if negative:
                    raise InvalidNumberError(
                        literal.decode("ascii"), start, self.data
                    )
                return float_number(float(literal))

            n = int(literal)
            if n < I64_MIN:
                raise InvalidNumberError(
                    literal.decode("ascii"), start, self.data
                )
            if n > U64_MAX:
                return float_number(float(literal))
            return int_number(n)

    def _parse_hex(self, start: int, negative: bool) -> Number:
        scanner = self.scanner
        scanner.advance(2)
        digits_start = scanner.pos
        if not self._scan_digits(_HEX_DIGITS):
            raise InvalidNumberError(self._literal_text(start), start, self.data)

        n = int(self.data[digits_start : scanner.pos].replace(b"_", b""), 16)
        if n > U64_MAX or (negative and n > -I64_MIN):
            raise InvalidNumberError(
                self.data[start : scanner.pos].decode("ascii"), start, self.data
            )
        if negative:
            return Int(-n)
        return Uint(n)

    # Containers

    def parse_array(self) -> Array:
        """Parses an array, allowing one trailing comma."""
        with ProfileContext("parse_array"), self.guard:
            scanner = self.scanner
            scanner.expect(0x5B)
            items: list[Value] = []

            while True:
                byte = self.lookahead()
                if byte is None:
                    raise UnexpectedEofError(scanner.pos, self.data)
                if byte == 0x5D:  # ]
                    scanner.advance()
                    return Array(tuple(items))

                items.append(self.parse_value())

                byte = self.lookahead()
                if byte == 0x2C:  # ,
                    scanner.advance()
                elif byte != 0x5D:
                    raise self._unexpected()

    def parse_object(self) -> Object:
        """Parses an object; later duplicates overwrite earlier members."""
        with ProfileContext("parse_object"), self.guard:
            scanner = self.scanner
            scanner.expect(0x7B)
            members = ObjectMap()

            while True:
                byte = self.lookahead()
                if byte is None:
                    raise UnexpectedEofError(scanner.pos, self.data)
                if byte == 0x7D:  # }
                    scanner.advance()
                    return Object(members)

                key = self.parse_key()
                self.lookahead()
                scanner.expect(0x3A)  # :
                members.insert(key, self.parse_value())

                byte = self.lookahead()
                if byte == 0x2C:  # ,
                    scanner.advance()
                elif byte != 0x7D:
                    raise self._unexpected()

    def parse_key(self) -> str:
        """Parses a quoted or bare object key."""
        byte = self.lookahead()
        if byte is None:
            raise UnexpectedEofError(self.scanner.pos, self.data)
        if byte == DOUBLE_QUOTE or byte == SINGLE_QUOTE:
            return self.parse_string()
        return self.parse_identifier()

    def parse_identifier(self) -> str:
        """Parses a bare identifier key."""
        scanner = self.scanner
        start = scanner.pos
        first = scanner.decode_utf8_char()
        if not is_id_start(first):
            raise UnexpectedCharError(first, start, self.data)

        chars = [first]
        while scanner.peek() is not None:
            mark = scanner.pos
            char = scanner.decode_utf8_char()
            if not is_id_continue(char):
                scanner.pos = mark
                break
            chars.append(char)
        return "".join(chars)

