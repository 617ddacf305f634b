"""Parsing and serialization of big-endian wire formats over lists of buffers."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any, Union

BytesLike = Union[bytes, bytearray, memoryview]


def _as_buffer_list(buffers: BytesLike | Iterable[BytesLike]) -> list[bytes]:
    if isinstance(buffers, (bytes, bytearray, memoryview)):
        return [bytes(buffers)]
    return [bytes(chunk) for chunk in buffers]


class Parser:
    """Reads integers and byte strings from a sequence of buffers.

    Running past the end of the input does not raise; it sets an error flag
    that the caller checks with ``has_error``.
    """

    def __init__(self, buffers: BytesLike | Iterable[BytesLike]) -> None:
        self._buffers: deque[bytes] = deque(b for b in _as_buffer_list(buffers) if b)
        self._skip = 0
        self._size = sum(len(b) for b in self._buffers)
        self._error = False

    def __len__(self) -> int:
        return self._size

    def has_error(self) -> bool:
        return self._error

    def set_error(self) -> None:
        self._error = True

    def _check_size(self, size: int) -> None:
        if size > self._size:
            self._error = True

    def _take(self, n: int) -> bytes:
        pieces = []
        while n and self._buffers:
            front = self._buffers[0]
            take = min(n, len(front) - self._skip)
            pieces.append(front[self._skip:self._skip + take])
            n -= take
            self._size -= take
            self._skip += take
            if self._skip == len(front):
                self._buffers.popleft()
                self._skip = 0
        return b"".join(pieces)

    def remove_prefix(self, n: int) -> None:
        """Discard up to ``n`` bytes from the front of the input."""
        self._take(n)

    def truncate(self, length: int) -> None:
        """Drop everything past the first ``length`` remaining bytes."""
        if self._size <= length:
            return
        if self._skip:
            self._buffers[0] = self._buffers[0][self._skip:]
            self._skip = 0
        kept = []
        remaining = length
        for chunk in self._buffers:
            if remaining == 0:
                break
            piece = chunk[:remaining]
            kept.append(piece)
            remaining -= len(piece)
        self._buffers = deque(kept)
        self._size = length

    def all_remaining(self) -> list[bytes]:
        """Return and consume all remaining buffers."""
        out = self.buffer()
        self._buffers.clear()
        self._skip = 0
        self._size = 0
        return out

    def buffer(self) -> list[bytes]:
        """Return the remaining buffers without consuming them."""
        out = list(self._buffers)
        if out and self._skip:
            out[0] = out[0][self._skip:]
        return out

    def read_bytes(self, n: int) -> bytes:
        """Read exactly ``n`` bytes; returns b"" and flags an error if too few remain."""
        self._check_size(n)
        if self._error:
            return b""
        return self._take(n)

    def concatenate_all_remaining(self) -> bytes:
        return b"".join(self.all_remaining())

    def integer(self, width: int) -> int:
        """Read an unsigned big-endian integer of ``width`` bytes (0 on error)."""
        self._check_size(width)
        if self._error:
            return 0
        return int.from_bytes(self._take(width), "big")


class Serializer:
    """Writes big-endian integers and byte buffers into a list of buffers."""

    def __init__(self) -> None:
        self._output: list[bytes] = []
        self._pending = bytearray()

    def _flush(self) -> None:
        if self._pending:
            self._output.append(bytes(self._pending))
            self._pending.clear()

    def integer(self, value: int, width: int) -> None:
        """Append ``value`` as an unsigned big-endian integer of ``width`` bytes."""
        mask = (1 << (8 * width)) - 1
        self._pending += (value & mask).to_bytes(width, "big")

    def buffer(self, data: BytesLike | Iterable[BytesLike]) -> None:
        """Append a byte buffer (or several) as separate output chunks."""
        for chunk in _as_buffer_list(data):
            if chunk:
                self._flush()
                self._output.append(chunk)

    def finish(self) -> list[bytes]:
        """Return the serialized buffers and reset the serializer."""
        self._flush()
        out = self._output
        self._output = []
        return out


def parse(obj: Any, buffers: BytesLike | Iterable[BytesLike], *args: Any) -> bool:
    """Parse ``obj`` in place from ``buffers``; return True on success."""
    parser = Parser(buffers)
    obj.parse(parser, *args)
    return not parser.has_error()


def serialize(obj: Any) -> list[bytes]:
    """Serialize ``obj`` into a list of buffers."""
    serializer = Serializer()
    obj.serialize(serializer)
    return serializer.finish()