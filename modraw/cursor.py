from __future__ import annotations

from typing import Optional, Union

from common.errors import EndOfInput


ASCII_LF = 0x0A


class ByteCursor:
    """
    Read index over an owned byte arena.

    Framing needs to look at the byte *after* a candidate terminator, so the
    position is a plain integer that can be saved with `mark()` and put back
    with `reset()`, rather than a one-shot iterator.
    """

    def __init__(self, data: Union[bytes, bytearray]) -> None:
        self._buf = bytearray(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def size(self) -> int:
        return len(self._buf)

    @property
    def remaining(self) -> int:
        return len(self._buf) - self._pos

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._buf)

    @property
    def buffer(self) -> bytearray:
        """The arena itself; framer helpers search it in place."""
        return self._buf

    def mark(self) -> int:
        return self._pos

    def reset(self, mark: int) -> None:
        if not 0 <= mark <= len(self._buf):
            raise ValueError(f"mark {mark} outside buffer of {len(self._buf)} bytes")
        self._pos = mark

    def peek(self) -> Optional[int]:
        if self._pos >= len(self._buf):
            return None
        return self._buf[self._pos]

    def read_byte(self) -> int:
        if self._pos >= len(self._buf):
            raise EndOfInput()
        b = self._buf[self._pos]
        self._pos += 1
        return b

    def read_line(self) -> Optional[bytes]:
        """Bytes up to and including LF; None if nothing was left to read."""
        if self._pos >= len(self._buf):
            return None
        end = self._buf.find(b"\n", self._pos)
        end = len(self._buf) if end < 0 else end + 1
        line = bytes(self._buf[self._pos:end])
        self._pos = end
        return line

    def read_marker(self, literal: bytes) -> bool:
        """True if `literal` starts at the cursor. Never moves the cursor."""
        saved = self.mark()
        try:
            for expected in literal:
                if self.read_byte() != expected:
                    return False
            return True
        except EndOfInput:
            return False
        finally:
            self.reset(saved)

    def splice(self, data: bytes) -> None:
        """Insert bytes at the cursor; they are the next bytes read."""
        self._buf[self._pos:self._pos] = data

    def remove(self, start: int, end: int) -> bytes:
        """Cut [start, end) out of the arena and return it."""
        if not 0 <= start <= end <= len(self._buf):
            raise ValueError(f"invalid range [{start}, {end}) for {len(self._buf)} bytes")
        cut = bytes(self._buf[start:end])
        del self._buf[start:end]
        if self._pos >= end:
            self._pos -= end - start
        elif self._pos > start:
            self._pos = start
        return cut

    def progress(self) -> float:
        """Percent of the arena consumed, one decimal."""
        if not self._buf:
            return 100.0
        return round(1000.0 * self._pos / len(self._buf)) / 10.0
