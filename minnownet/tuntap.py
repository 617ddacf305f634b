"""TUN/TAP devices and an adapter that carries TCP over IPv4 through a TUN device."""

from __future__ import annotations

import fcntl
import os
import struct
from typing import Optional

from minnownet.errors import UnixError
from minnownet.file_descriptor import FileDescriptor
from minnownet.ipv4 import IPv4Datagram, IPv4Header
from minnownet.parser import parse, serialize
from minnownet.tcp_over_ip import TCPOverIPv4Adapter
from minnownet.tcp_segment import TCPMessage, TCPSegment

CLONE_DEVICE = "/dev/net/tun"

TUNSETIFF = 0x400454CA
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000

_IFNAMSIZ = 16
_IFREQ_SIZE = 40


def _ifreq(devname: str, flags: int) -> bytes:
    """Build a ``struct ifreq`` naming a device (truncated and NUL-terminated) with flags."""
    name = devname.encode()[: _IFNAMSIZ - 1]
    return struct.pack(f"{_IFNAMSIZ}sH{_IFREQ_SIZE - _IFNAMSIZ - 2}x", name, flags)


class TunTapFD(FileDescriptor):
    """A descriptor on an existing persistent TUN or TAP device.

    The device must already exist and be usable by this user.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(CLONE_DEVICE, os.O_RDWR | os.O_CLOEXEC)
        except OSError as exc:
            raise UnixError("open", exc.errno) from exc
        super().__init__(fd)
        flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
        try:
            fcntl.ioctl(fd, TUNSETIFF, _ifreq(devname, flags))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno) from exc


class TunFD(TunTapFD):
    """A TUN device: reads and writes IP datagrams."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A TAP device: reads and writes Ethernet frames."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)


class TCPOverIPv4OverTunFdAdapter(TCPOverIPv4Adapter):
    """Reads and writes TCP messages as IPv4 datagrams on a TUN descriptor."""

    def __init__(self, tun: FileDescriptor) -> None:
        super().__init__()
        self._tun = tun

    @property
    def tun(self) -> FileDescriptor:
        return self._tun

    @property
    def fd(self) -> FileDescriptor:
        return self._tun

    def read(self) -> Optional[TCPMessage]:
        """Read one datagram; return its TCP message if it is valid and for this connection."""
        buffers = self._tun.read_multiple([IPv4Header.LENGTH, TCPSegment.HEADER_LENGTH, 0])
        datagram = IPv4Datagram()
        if parse(datagram, buffers):
            return self.unwrap_tcp_in_ip(datagram)
        return None

    def write(self, message: TCPMessage) -> None:
        """Wrap ``message`` in an IPv4 datagram and write it to the device."""
        self._tun.write(serialize(self.wrap_tcp_in_ip(message)))