"""State shared by all datagram adapters."""

from __future__ import annotations

from minnownet.tcp_config import FdAdapterConfig


class FdAdapterBase:
    """Holds an adapter's configuration and whether it is waiting for a connection."""

    def __init__(self) -> None:
        self.config = FdAdapterConfig()
        self.listening = False

    def tick(self, ms_since_last_tick: int) -> None:
        """Called periodically as time passes; the base adapter has nothing to do."""