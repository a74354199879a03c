"""
Byte cursor primitives shared by the JSON5 parser.

The scanner works on the UTF-8 encoded document directly. Most of the
grammar is ASCII, so bytes are compared as integers and multi-byte
sequences are only decoded where a code point actually matters.
"""

from ._errors import ExpectedCharError
from ._errors import InvalidUnicodeError
from ._errors import UnexpectedEofError
from ._profile import ProfileContext

LF = 0x0A
CR = 0x0D
SLASH = 0x2F
STAR = 0x2A

_ASCII_WHITESPACE = frozenset(b" \t\n\r\x0b\x0c")

# Non-ASCII space separators, line terminators and the byte order mark,
# keyed by their UTF-8 lead byte.
_UNICODE_WHITESPACE: dict[int, frozenset[bytes]] = {}
for _code_point in (
    0x00A0, 0x1680, *range(0x2000, 0x200B),
    0x2028, 0x2029, 0x202F, 0x205F, 0x3000, 0xFEFF,
):
    _encoded = chr(_code_point).encode("utf-8")
    _UNICODE_WHITESPACE.setdefault(_encoded[0], frozenset())
    _UNICODE_WHITESPACE[_encoded[0]] |= {_encoded}

_LINE_SEPARATOR = b"\xe2\x80\xa8"
_PARAGRAPH_SEPARATOR = b"\xe2\x80\xa9"


def hex_value(byte: int | None) -> int | None:
    """Value of an ASCII hex digit, or None."""
    if byte is None:
        return None
    if 0x30 <= byte <= 0x39:
        return byte - 0x30
    if 0x61 <= byte <= 0x66:
        return byte - 0x61 + 10
    if 0x41 <= byte <= 0x46:
        return byte - 0x41 + 10
    return None


def is_id_start(char: str) -> bool:
    return char.isalpha() or char == "_" or char == "$"


def is_id_continue(char: str) -> bool:
    return char.isalnum() or char in "_$\u200c\u200d"


def is_identifier(text: str) -> bool:
    """True when ``text`` can be written as an unquoted object key."""
    if not text or not is_id_start(text[0]):
        return False
    return all(is_id_continue(char) for char in text[1:])


class Scanner:
    """
    Cursor over one UTF-8 encoded document.

    All state is local to the instance; a scanner is used by exactly one
    parse call.
    """

    __slots__ = ("data", "length", "pos")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0
        self.length = len(data)

    def remaining(self) -> int:
        return self.length - self.pos

    def peek(self) -> int | None:
        """Returns the current byte without advancing."""
        return self.data[self.pos] if self.pos < self.length else None

    def peek2(self) -> int | None:
        """Returns the byte after the current one."""
        pos = self.pos + 1
        return self.data[pos] if pos < self.length else None

    def advance(self, count: int = 1) -> None:
        self.pos += count

    def eat(self) -> int | None:
        """Returns the current byte and advances past it."""
        byte = self.peek()
        self.pos += 1
        return byte

    def startswith(self, literal: bytes) -> bool:
        return self.data.startswith(literal, self.pos)

    def expect(self, byte: int) -> None:
        """Consumes ``byte`` or fails."""
        current = self.peek()
        if current == byte:
            self.pos += 1
            return
        if current is None:
            raise UnexpectedEofError(self.pos, self.data)
        raise ExpectedCharError(
            chr(byte), self.current_char(), self.pos, self.data
        )

    def current_char(self) -> str:
        """Decodes the code point at the cursor without consuming it."""
        mark = self.pos
        try:
            return self.decode_utf8_char()
        except (InvalidUnicodeError, UnexpectedEofError):
            return chr(self.data[mark])
        finally:
            self.pos = mark

    def _whitespace_width(self) -> int:
        """Byte length of the whitespace at the cursor, 0 if there is none."""
        byte = self.data[self.pos]
        if byte in _ASCII_WHITESPACE:
            return 1
        candidates = _UNICODE_WHITESPACE.get(byte)
        if candidates is None:
            return 0
        for encoded in candidates:
            if self.data.startswith(encoded, self.pos):
                return len(encoded)
        return 0

    def _at_line_terminator(self) -> bool:
        byte = self.data[self.pos]
        return (
            byte == LF
            or byte == CR
            or self.data.startswith(_LINE_SEPARATOR, self.pos)
            or self.data.startswith(_PARAGRAPH_SEPARATOR, self.pos)
        )

    def skip_whitespace_and_comments(self) -> None:
        """Skips whitespace, ``//`` line comments and ``/* */`` comments."""
        with ProfileContext("skip_whitespace_and_comments"):
            data = self.data
            length = self.length
            while self.pos < length:
                width = self._whitespace_width()
                if width:
                    self.pos += width
                    continue

                if data[self.pos] != SLASH:
                    return
                follower = self.peek2()
                if follower == SLASH:
                    self.pos += 2
                    while self.pos < length and not self._at_line_terminator():
                        self.pos += 1
                elif follower == STAR:
                    end = data.find(b"*/", self.pos + 2)
                    # An unterminated block comment runs to the end of input
                    self.pos = length if end < 0 else end + 2
                else:
                    return

    def decode_utf8_char(self) -> str:
        """Decodes and consumes one code point."""
        start = self.pos
        lead = self.eat()
        if lead is None:
            raise UnexpectedEofError(start, self.data)
        if lead < 0x80:
            return chr(lead)

        if 0xC0 <= lead <= 0xDF:
            width, code_point = 2, lead & 0x1F
        elif 0xE0 <= lead <= 0xEF:
            width, code_point = 3, lead & 0x0F
        elif 0xF0 <= lead <= 0xF7:
            width, code_point = 4, lead & 0x07
        else:
            raise InvalidUnicodeError(lead, start, self.data)

        end = start + width
        if end > self.length:
            raise UnexpectedEofError(self.length, self.data)
        for byte in self.data[start + 1 : end]:
            code_point = (code_point << 6) | (byte & 0x3F)

        try:
            char = self.data[start:end].decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidUnicodeError(code_point, start, self.data) from None

        self.pos = end
        return char
