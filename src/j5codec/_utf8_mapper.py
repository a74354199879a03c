"""Byte offset to character position mapping for UTF-8 encoded documents."""

from __future__ import annotations

from bisect import bisect_right
from typing import Final


def _is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


class UTF8PositionMapper:
    """Maps scanner byte offsets onto character offsets, lines and columns.

    The scanner walks raw UTF-8 bytes, while people read characters. Rather
    than decoding the whole document on every error, the mapper records a
    checkpoint every ``checkpoint_interval`` characters and walks forward
    from the nearest one.
    """

    def __init__(self, data: bytes, checkpoint_interval: int = 256) -> None:
        """Initialize the mapper.

        Args:
            data: The UTF-8 encoded document
            checkpoint_interval: Characters between checkpoints (default 256)
        """
        self.data: Final = data
        self.checkpoint_interval: Final = checkpoint_interval
        self._byte_marks: list[int] = [0]
        self._char_marks: list[int] = [0]
        self._is_ascii_only: bool = data.isascii()

        if not self._is_ascii_only:
            self._build_checkpoints()

    def _build_checkpoints(self) -> None:
        """Record (byte, char) pairs at regular character intervals."""
        char_pos = 0

        for byte_pos, byte in enumerate(self.data):
            if _is_continuation(byte):
                continue
            if char_pos and char_pos % self.checkpoint_interval == 0:
                self._byte_marks.append(byte_pos)
                self._char_marks.append(char_pos)
            char_pos += 1

        self._byte_marks.append(len(self.data))
        self._char_marks.append(char_pos)

    def byte_to_char(self, byte_pos: int) -> int:
        """Convert a byte offset into a character offset.

        Offsets that land inside a multi-byte sequence count the partial
        character as already started.
        """
        byte_pos = min(byte_pos, len(self.data))

        # Fast path for ASCII-only documents
        if self._is_ascii_only:
            return byte_pos

        index = bisect_right(self._byte_marks, byte_pos) - 1
        current_byte = self._byte_marks[index]
        current_char = self._char_marks[index]

        while current_byte < byte_pos:
            if not _is_continuation(self.data[current_byte]):
                current_char += 1
            current_byte += 1

        return current_char

    def line_col(self, byte_pos: int) -> tuple[int, int]:
        """Return the 1-based (line, column) for a byte offset."""
        byte_pos = min(byte_pos, len(self.data))
        lineno = self.data.count(b"\n", 0, byte_pos) + 1
        line_start = self.data.rfind(b"\n", 0, byte_pos) + 1
        colno = self.byte_to_char(byte_pos) - self.byte_to_char(line_start) + 1
        return lineno, colno
