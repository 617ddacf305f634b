"""The Internet checksum (one's-complement sum of 16-bit words)."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_MASK32 = 0xFFFFFFFF


class InternetChecksum:
    """Running Internet checksum over one or more byte buffers.

    Bytes are paired into 16-bit big-endian words across buffer boundaries,
    so a byte string split anywhere gives the same result as the whole.
    """

    def __init__(self, initial: int = 0) -> None:
        self._sum = initial & _MASK32
        self._odd = False

    def add(self, data: BytesLike | Iterable[BytesLike]) -> None:
        """Add a byte buffer, or an iterable of byte buffers, to the sum."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            total = self._sum
            odd = self._odd
            for byte in bytes(data):
                total += byte if odd else byte << 8
                odd = not odd
            self._sum = total & _MASK32
            self._odd = odd
            return
        for chunk in data:
            self.add(chunk)

    def value(self) -> int:
        """Return the 16-bit checksum of everything added so far."""
        folded = self._sum
        while folded > 0xFFFF:
            folded = (folded >> 16) + (folded & 0xFFFF)
        return ~folded & 0xFFFF