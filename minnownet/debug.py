"""Debug output that goes to a replaceable handler (stderr by default)."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DebugHandler = Callable[[str], None]


def _default_handler(message: str) -> None:
    sys.stderr.write(f"DEBUG: {message}\n")


@dataclass
class _DebugState:
    handler: DebugHandler = _default_handler


_state = _DebugState()


def debug_str(message: str) -> None:
    """Send a message to the current debug handler."""
    _state.handler(message)


def debug(fmt: str, *args: Any, **kwargs: Any) -> None:
    """Format a message with ``str.format`` and send it, unless optimizations are on."""
    if __debug__:
        debug_str(fmt.format(*args, **kwargs))


def set_debug_handler(handler: DebugHandler) -> None:
    """Route debug messages to ``handler``."""
    if not callable(handler):
        raise TypeError("debug handler must be callable")
    _state.handler = handler


def reset_debug_handler() -> None:
    """Route debug messages back to stderr."""
    _state.handler = _default_handler