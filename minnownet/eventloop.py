"""An event loop that polls file descriptors and runs callbacks for them."""

from __future__ import annotations

import enum
import os
import select
import socket
import stat
import sys
import weakref
from collections.abc import Callable
from typing import Optional, Union

from minnownet.errors import UnixError
from minnownet.file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

MAX_CATEGORIES = 64
_MAX_BUSY_ITERATIONS = 128


class Direction(enum.Enum):
    """Whether a rule waits for its descriptor to be readable (IN) or writable (OUT)."""

    IN = "in"
    OUT = "out"


class Result(enum.Enum):
    """Outcome of one call to EventLoop.wait_next_event."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


class _BasicRule:
    def __init__(self, category_id: int, interest: Interest, callback: Callback) -> None:
        self.category_id = category_id
        self.interest = interest
        self.callback = callback
        self.cancel_requested = False


class _FDRule(_BasicRule):
    def __init__(
        self,
        base: _BasicRule,
        fd: FileDescriptor,
        direction: Direction,
        on_cancel: Callback,
        on_error: Callback,
    ) -> None:
        super().__init__(base.category_id, base.interest, base.callback)
        self.fd = fd
        self.direction = direction
        self.on_cancel = on_cancel
        self.on_error = on_error

    def service_count(self) -> int:
        return self.fd.read_count if self.direction is Direction.IN else self.fd.write_count


class RuleHandle:
    """Lets the owner of a rule cancel it without keeping it alive."""

    def __init__(self, rule: _BasicRule) -> None:
        self._rule = weakref.ref(rule)

    def cancel(self) -> None:
        """Ask the loop to drop the rule (its cancel callback is not called)."""
        rule = self._rule()
        if rule is not None:
            rule.cancel_requested = True


def _socket_error(fd: int) -> Optional[int]:
    """Return the pending socket error on ``fd``, or None if it is not a socket."""
    try:
        mode = os.fstat(fd).st_mode
    except OSError as exc:
        raise UnixError("getsockopt", exc.errno) from exc
    if not stat.S_ISSOCK(mode):
        return None
    sock = socket.socket(fileno=fd)
    try:
        return sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
    except OSError as exc:
        raise UnixError("getsockopt", exc.errno) from exc
    finally:
        sock.detach()


class EventLoop:
    """Runs rules: plain rules whenever interested, fd rules when their descriptor is ready."""

    def __init__(self) -> None:
        self._categories: list[str] = []
        self._fd_rules: list[_FDRule] = []
        self._non_fd_rules: list[_BasicRule] = []

    def add_category(self, name: str) -> int:
        """Register a rule category name; return its id."""
        if len(self._categories) >= MAX_CATEGORIES:
            raise RuntimeError("maximum categories reached")
        self._categories.append(name)
        return len(self._categories) - 1

    def _category_id(self, category: Union[int, str]) -> int:
        if isinstance(category, str):
            return self.add_category(category)
        if not 0 <= category < len(self._categories):
            raise IndexError("bad category_id")
        return category

    def add_fd_rule(
        self,
        category: Union[int, str],
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Optional[Interest] = None,
        cancel: Optional[Callback] = None,
        error: Optional[Callback] = None,
    ) -> RuleHandle:
        """Call ``callback`` when ``fd`` is ready in ``direction`` and ``interest()`` is true.

        ``category`` is a category id, or a name to register as a new category.
        """
        category_id = self._category_id(category)
        rule = _FDRule(
            _BasicRule(category_id, interest or _always, callback),
            fd.duplicate(),
            direction,
            cancel or _nothing,
            error or _nothing,
        )
        self._fd_rules.append(rule)
        return RuleHandle(rule)

    def add_rule(
        self,
        category: Union[int, str],
        callback: Callback,
        interest: Optional[Interest] = None,
    ) -> RuleHandle:
        """Call ``callback`` repeatedly while ``interest()`` is true."""
        category_id = self._category_id(category)
        rule = _BasicRule(category_id, interest or _always, callback)
        self._non_fd_rules.append(rule)
        return RuleHandle(rule)

    def _name(self, rule: _BasicRule) -> str:
        return self._categories[rule.category_id]

    def _report_poll_error(self, rule: _FDRule) -> None:
        error_code = _socket_error(rule.fd.fd_num)
        if error_code is None:
            sys.stderr.write(f'error on polled file descriptor for rule "{self._name(rule)}"\n')
        elif error_code:
            sys.stderr.write(
                f'error on polled socket for rule "{self._name(rule)}": {os.strerror(error_code)}\n'
            )

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Serve at most one rule, waiting up to ``timeout_ms`` for a descriptor to be ready."""
        for rule in list(self._non_fd_rules):
            if rule.cancel_requested:
                self._non_fd_rules.remove(rule)
                continue
            fired = False
            iterations = 0
            while rule.interest():
                if iterations >= _MAX_BUSY_ITERATIONS:
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" is still interested'
                        f" after {iterations + 1} iterations"
                    )
                iterations += 1
                fired = True
                rule.callback()
            if fired:
                return Result.SUCCESS

        polled: list[tuple[_FDRule, int]] = []
        masks: dict[int, int] = {}
        something_to_poll = False
        for rule in list(self._fd_rules):
            if rule.cancel_requested:
                self._fd_rules.remove(rule)
                continue
            if (rule.direction is Direction.IN and rule.fd.eof) or rule.fd.closed:
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue
            if rule.interest():
                events = select.POLLIN if rule.direction is Direction.IN else select.POLLOUT
                something_to_poll = True
            else:
                events = 0  # still registered so that errors are seen
            polled.append((rule, events))
            fd_num = rule.fd.fd_num
            masks[fd_num] = masks.get(fd_num, 0) | events

        if not something_to_poll:
            return Result.EXIT

        poller = select.poll()
        for fd_num, mask in masks.items():
            poller.register(fd_num, mask)
        try:
            ready = poller.poll(timeout_ms)
        except OSError as exc:
            raise UnixError("poll", exc.errno) from exc
        if not ready:
            return Result.TIMEOUT

        revents_by_fd = dict(ready)
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num, 0)

            if revents & (select.POLLERR | select.POLLNVAL):
                self._report_poll_error(rule)
                rule.on_error()
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and ((events and not poll_ready) or rule.direction is Direction.OUT):
                # a hangup with nothing else to report means the descriptor is defunct
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and not rule.fd.closed and rule.interest():
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}"'
                        " did not read/write fd and is still interested"
                    )
                return Result.SUCCESS

        return Result.SUCCESS