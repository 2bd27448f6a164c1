"""Forward-only, bounds-checked reader over a byte buffer."""

from __future__ import annotations

from formula_metrics.errors import OutOfBounds


class ByteCursor:
    """Sequential reader used by the PNG chunk walker.

    The buffer is copied to immutable `bytes` on construction; the position only
    moves forward. A failed read leaves the position unchanged.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def _take(self, n: int) -> int:
        if n < 0:
            raise ValueError("length must be >= 0")
        if n > self.remaining:
            raise OutOfBounds(position=self._pos, requested=n, available=self.remaining)
        start = self._pos
        self._pos += n
        return start

    def read_bytes(self, n: int) -> bytes:
        start = self._take(n)
        return self._data[start : start + n]

    def read_byte(self) -> int:
        start = self._take(1)
        return self._data[start]

    def read_uint32_be(self) -> int:
        start = self._take(4)
        return int.from_bytes(self._data[start : start + 4], "big", signed=False)

    def skip(self, n: int) -> None:
        self._take(n)
