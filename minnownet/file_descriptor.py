"""Reference-counted handles on kernel file descriptors."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Iterable
from typing import Optional, Union

from minnownet.errors import UnixError

BytesLike = Union[bytes, bytearray, memoryview]

READ_BUFFER_SIZE = 16384

_WOULD_BLOCK = (errno.EAGAIN, errno.EWOULDBLOCK, errno.EINPROGRESS)


class _FDState:
    """The kernel descriptor and its flags, shared by every duplicate handle."""

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        try:
            blocking = os.get_blocking(fd)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        self.fd = fd
        self.eof = False
        self.closed = False
        self.non_blocking = not blocking
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            raise UnixError("close", exc.errno) from exc
        self.eof = True
        self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except UnixError as exc:
            sys.stderr.write(f"Exception destructing FDWrapper: {exc}\n")


class FileDescriptor:
    """A handle on a file descriptor; the descriptor closes when the last handle goes away.

    Handles made with ``duplicate`` share the descriptor and its EOF, closed
    and read/write-count state.
    """

    READ_BUFFER_SIZE = READ_BUFFER_SIZE

    def __init__(self, fd: int) -> None:
        self._state = _FDState(fd)

    def duplicate(self) -> FileDescriptor:
        """Return another handle on the same descriptor."""
        other = FileDescriptor.__new__(FileDescriptor)
        other._state = self._state
        return other

    @property
    def fd_num(self) -> int:
        return self._state.fd

    def fileno(self) -> int:
        return self._state.fd

    @property
    def eof(self) -> bool:
        return self._state.eof

    @property
    def closed(self) -> bool:
        return self._state.closed

    @property
    def read_count(self) -> int:
        return self._state.read_count

    @property
    def write_count(self) -> int:
        return self._state.write_count

    def _set_eof(self) -> None:
        self._state.eof = True

    def _register_read(self) -> None:
        self._state.read_count += 1

    def _register_write(self) -> None:
        self._state.write_count += 1

    def _would_block(self, exc: OSError) -> bool:
        return self._state.non_blocking and exc.errno in _WOULD_BLOCK

    def read(self, limit: Optional[int] = None) -> bytes:
        """Read up to ``limit`` bytes (READ_BUFFER_SIZE if not given or zero).

        Returns b"" when a non-blocking descriptor has nothing to read; an
        empty read on a blocking descriptor marks EOF.
        """
        if not limit:
            limit = READ_BUFFER_SIZE
        try:
            data = os.read(self.fd_num, limit)
        except OSError as exc:
            if self._would_block(exc):
                return b""
            raise UnixError("read", exc.errno) from exc
        self._register_read()
        if not data:
            self._set_eof()
        if len(data) > limit:
            raise RuntimeError("read() read more than requested")
        return data

    def read_multiple(self, sizes: Iterable[int]) -> list[bytes]:
        """Scatter-read into buffers of the given sizes; the last one always holds READ_BUFFER_SIZE.

        Buffers past the data read come back shortened or empty. A non-blocking
        descriptor with nothing to read gives an empty list.
        """
        sizes = list(sizes)
        if not sizes:
            return []
        buffers = [bytearray(size) for size in sizes[:-1]]
        buffers.append(bytearray(READ_BUFFER_SIZE))
        total = sum(len(b) for b in buffers)
        try:
            count = os.readv(self.fd_num, buffers)
        except OSError as exc:
            if self._would_block(exc):
                return []
            raise UnixError("read", exc.errno) from exc
        self._register_read()
        if count > total:
            raise RuntimeError("read() read more than requested")

        out = []
        remaining = count
        for buf in buffers:
            take = min(remaining, len(buf))
            out.append(bytes(buf[:take]))
            remaining -= take
        return out

    def write(self, buffers: BytesLike | Iterable[BytesLike]) -> int:
        """Write one buffer or several (gathered); return the number of bytes written."""
        if isinstance(buffers, (bytes, bytearray, memoryview)):
            chunks = [bytes(buffers)]
        else:
            chunks = [bytes(b) for b in buffers]
        total = sum(len(c) for c in chunks)
        try:
            written = os.writev(self.fd_num, chunks or [b""])
        except OSError as exc:
            if not self._would_block(exc):
                raise UnixError("writev", exc.errno) from exc
            written = 0
        self._register_write()

        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        """Close the descriptor for every handle that shares it."""
        self._state.close()

    def set_blocking(self, blocking: bool) -> None:
        try:
            os.set_blocking(self.fd_num, blocking)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno) from exc
        self._state.non_blocking = not blocking

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *args: object) -> None:
        if not self.closed:
            self.close()