"""An adapter wrapper that drops datagrams at random."""

from __future__ import annotations

from typing import Any, Optional

from minnownet.tcp_config import FdAdapterConfig, get_random_engine
from minnownet.tcp_segment import TCPMessage


class LossyFdAdapter:
    """Wraps a datagram adapter, dropping reads and writes at its configured loss rates.

    ``rng`` is anything with a ``getrandbits`` method, such as ``random.Random``;
    a message is dropped when 16 random bits fall below the loss rate.
    """

    def __init__(self, adapter: Any, rng: Optional[Any] = None) -> None:
        self._adapter = adapter
        self._rng = rng if rng is not None else get_random_engine()

    def _should_drop(self, uplink: bool) -> bool:
        config = self._adapter.config
        loss = config.loss_rate_up if uplink else config.loss_rate_dn
        return loss != 0 and self._rng.getrandbits(16) < loss

    @property
    def fd(self) -> Any:
        return self._adapter.fd

    @property
    def config(self) -> FdAdapterConfig:
        return self._adapter.config

    @config.setter
    def config(self, value: FdAdapterConfig) -> None:
        self._adapter.config = value

    @property
    def listening(self) -> bool:
        return self._adapter.listening

    def read(self) -> Optional[TCPMessage]:
        """Read from the wrapped adapter; None if nothing was read or it was dropped."""
        message = self._adapter.read()
        if self._should_drop(False):
            return None
        return message

    def write(self, message: TCPMessage) -> None:
        """Write through the wrapped adapter unless the message is dropped."""
        if self._should_drop(True):
            return
        self._adapter.write(message)

    def tick(self, ms_since_last_tick: int) -> None:
        self._adapter.tick(ms_since_last_tick)

    def set_listening(self, listening: bool) -> None:
        self._adapter.listening = listening