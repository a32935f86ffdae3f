"""Forward-only byte cursor used by the decoder."""

from __future__ import annotations

import re
from typing import Optional

from ._errors import MalformedInputError, TruncatedInputError


class StreamReader:
    """Position-tracking reader over an in-memory byte string.

    Never moves backwards.  Every short read raises TruncatedInputError so
    a decode either consumes exactly what the framing declares or fails.
    """

    __slots__ = ("_buf", "_pos")

    def __init__(self, data: bytes) -> None:
        self._buf = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._buf)

    def read_exact(self, n: int) -> bytes:
        """Return the next `n` bytes."""
        if n < 0:
            raise MalformedInputError("negative length {} at offset {}".format(n, self._pos))
        end = self._pos + n
        if end > len(self._buf):
            raise TruncatedInputError(
                "wanted {} bytes at offset {}, only {} left".format(n, self._pos, self.remaining))
        chunk = self._buf[self._pos:end]
        self._pos = end
        return chunk

    def read_until(self, delimiter: bytes) -> bytes:
        """Return bytes up to `delimiter`, consuming but not returning it."""
        idx = self._buf.find(delimiter, self._pos)
        if idx < 0:
            raise TruncatedInputError(
                "delimiter {!r} not found after offset {}".format(delimiter, self._pos))
        chunk = self._buf[self._pos:idx]
        self._pos = idx + len(delimiter)
        return chunk

    def expect(self, literal: bytes) -> None:
        """Consume `literal` or fail."""
        start = self._pos
        got = self.read_exact(len(literal))
        if got != literal:
            raise MalformedInputError(
                "expected {!r} at offset {}, got {!r}".format(literal, start, got))

    def peek_match(self, pattern: re.Pattern[bytes]) -> Optional[re.Match[bytes]]:
        """Match `pattern` at the current position without consuming."""
        return pattern.match(self._buf, self._pos)

    def skip(self, n: int) -> None:
        self.read_exact(n)
