"""Exceptions for failed system calls and resolver lookups."""

from __future__ import annotations

import os
from typing import Optional, TypeVar

T = TypeVar("T")


class TaggedError(OSError):
    """An error code with a description of what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(code, message)
        self.attempt = attempt
        self.error_code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.attempt}: {self.message}"


class UnixError(TaggedError):
    """A failed operating-system call, described by its errno value."""

    def __init__(self, attempt: str, errno_value: Optional[int] = None) -> None:
        if errno_value is None:
            super().__init__(attempt, 0, "unknown error")
        else:
            super().__init__(attempt, errno_value, os.strerror(errno_value))


def check_system_call(attempt: str, return_value: int) -> int:
    """Return ``return_value`` if it is non-negative; otherwise raise UnixError."""
    if return_value >= 0:
        return return_value
    raise UnixError(attempt)


def notnull(context: str, value: Optional[T]) -> T:
    """Return ``value``, raising RuntimeError if it is None."""
    if value is None:
        raise RuntimeError(f"{context}: returned null pointer")
    return value