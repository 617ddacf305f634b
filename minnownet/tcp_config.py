"""Configuration for TCP endpoints and datagram adapters."""

from __future__ import annotations

import os
import random
import socket
from dataclasses import dataclass, field

from minnownet.address import Address


def _any_address() -> Address:
    return Address(socket.AF_INET, ("0.0.0.0", 0))


@dataclass
class TCPConfig:
    """Settings for a TCP sender and receiver."""

    DEFAULT_CAPACITY = 64000
    MAX_PAYLOAD_SIZE = 1000
    TIMEOUT_DFLT = 1000
    MAX_RETX_ATTEMPTS = 8

    rt_timeout: int = TIMEOUT_DFLT
    recv_capacity: int = DEFAULT_CAPACITY
    send_capacity: int = DEFAULT_CAPACITY
    isn: int = 137


@dataclass
class FdAdapterConfig:
    """Addresses and loss rates for a datagram adapter.

    Loss rates are out of 65536: 0 never drops, 65535 almost always does.
    """

    source: Address = field(default_factory=_any_address)
    destination: Address = field(default_factory=_any_address)
    loss_rate_dn: int = 0
    loss_rate_up: int = 0


def get_random_engine() -> random.Random:
    """Return a pseudo-random generator seeded from the system's entropy source."""
    return random.Random(int.from_bytes(os.urandom(4096), "big"))