"""Network and local sockets as FileDescriptor handles."""

from __future__ import annotations

import socket
import struct
from collections.abc import Callable
from typing import Optional, TypeVar, Union

from minnownet.address import Address
from minnownet.errors import UnixError
from minnownet.file_descriptor import READ_BUFFER_SIZE, FileDescriptor

T = TypeVar("T")
BytesLike = Union[bytes, bytearray, memoryview]

_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_SOL_PACKET = getattr(socket, "SOL_PACKET", 263)
_PACKET_ADD_MEMBERSHIP = 1
_PACKET_MR_PROMISC = 1
_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


class Socket(FileDescriptor):
    """A file descriptor that refers to a socket."""

    def __init__(self, domain: int, sock_type: int, protocol: int = 0) -> None:
        try:
            sock = socket.socket(domain, sock_type, protocol)
        except OSError as exc:
            raise UnixError("socket", exc.errno) from exc
        super().__init__(sock.detach())

    @classmethod
    def _from_fd(cls, fd: FileDescriptor, domain: int, sock_type: int, protocol: int = 0) -> Socket:
        instance = cls.__new__(cls)
        instance._adopt(fd, domain, sock_type, protocol)
        return instance

    def _adopt(self, fd: FileDescriptor, domain: int, sock_type: int, protocol: int) -> None:
        """Take over ``fd``, checking that it is a socket of the expected kind."""
        self._state = fd._state
        family, kind, proto = self._syscall(
            "getsockopt", lambda s: (s.family, s.type, s.proto), allow_would_block=False
        )
        if family != domain:
            raise RuntimeError("socket domain mismatch")
        if kind != sock_type:
            raise RuntimeError("socket type mismatch")
        if proto != protocol:
            raise RuntimeError("socket protocol mismatch")

    def _syscall(
        self,
        attempt: str,
        operation: Callable[[socket.socket], T],
        allow_would_block: bool = True,
    ) -> Optional[T]:
        """Run ``operation`` on a socket object borrowing this descriptor.

        On a non-blocking descriptor, an operation that would block gives None
        when ``allow_would_block`` is set.
        """
        try:
            sock = socket.socket(fileno=self.fd_num)
        except OSError as exc:
            raise UnixError(attempt, exc.errno) from exc
        try:
            return operation(sock)
        except UnixError:
            raise
        except OSError as exc:
            if allow_would_block and self._would_block(exc):
                return None
            raise UnixError(attempt, exc.errno) from exc
        finally:
            sock.detach()

    def _setsockopt(self, level: int, option: int, value: Union[int, bytes]) -> None:
        self._syscall("setsockopt", lambda s: s.setsockopt(level, option, value), allow_would_block=False)

    def _get_address(self, attempt: str, method: str) -> Address:
        return self._syscall(
            attempt, lambda s: Address(s.family, getattr(s, method)()), allow_would_block=False
        )

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listening."""
        self._syscall("bind", lambda s: s.bind(address.sockaddr), allow_would_block=False)

    def bind_to_device(self, device_name: str) -> None:
        """Only send and receive through the named network device."""
        self._setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        """Connect to a peer (returns at once on a non-blocking socket)."""
        self._syscall("connect", lambda s: s.connect(address.sockaddr))

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        self._syscall("shutdown", lambda s: s.shutdown(how), allow_would_block=False)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        return self._get_address("getsockname", "getsockname")

    def peer_address(self) -> Address:
        return self._get_address("getpeername", "getpeername")

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def raise_if_error(self) -> None:
        """Raise UnixError if the socket has a pending error (as non-blocking sockets report)."""
        error_code = self._syscall(
            "getsockopt",
            lambda s: s.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR),
            allow_would_block=False,
        )
        if error_code:
            raise UnixError("socket error", error_code)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> Optional[tuple[Address, bytes]]:
        """Receive one datagram and its sender's address.

        Returns None on a non-blocking socket with nothing waiting; raises
        RuntimeError if the datagram is larger than READ_BUFFER_SIZE.
        """
        buffer = bytearray(READ_BUFFER_SIZE)

        def receive(sock: socket.socket) -> tuple[int, Address]:
            count, source = sock.recvfrom_into(buffer, 0, _MSG_TRUNC)
            return count, Address(sock.family, source)

        result = self._syscall("recvfrom", receive)
        if result is None:
            return None
        count, source = result
        if count > len(buffer):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return source, bytes(buffer[:count])

    def sendto(self, destination: Address, payload: BytesLike) -> None:
        data = bytes(payload)
        self._syscall("sendto", lambda s: s.sendto(data, destination.sockaddr))
        self._register_write()

    def send(self, payload: BytesLike) -> None:
        """Send to the connected peer."""
        data = bytes(payload)
        self._syscall("send", lambda s: s.send(data))
        self._register_write()


class UDPSocket(DatagramSocket):
    """An IPv4 UDP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        self._syscall("listen", lambda s: s.listen(backlog), allow_would_block=False)

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self._register_read()

        def take(sock: socket.socket) -> int:
            connection, _ = sock.accept()
            return connection.detach()

        fd_num = self._syscall("accept", take, allow_would_block=False)
        return TCPSocket._from_fd(
            FileDescriptor(fd_num), socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP
        )


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, type: int, protocol: int) -> None:
        super().__init__(socket.AF_PACKET, type, protocol)

    def set_promiscuous(self) -> None:
        """Receive every frame on the bound interface, not only those addressed to it."""
        address = self.local_address()
        if address.family != socket.AF_PACKET:
            raise RuntimeError("Address conversion failure")
        ifname = address.sockaddr[0]
        try:
            ifindex = socket.if_nametoindex(ifname) if ifname else 0
        except OSError as exc:
            raise UnixError("if_nametoindex", exc.errno) from exc
        request = struct.pack("iHH8s", ifindex, _PACKET_MR_PROMISC, 0, b"")
        self._setsockopt(_SOL_PACKET, _PACKET_ADD_MEMBERSHIP, request)


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket, taken over from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        self._adopt(fd, socket.AF_UNIX, socket.SOCK_STREAM, 0)


class LocalDatagramSocket(DatagramSocket):
    """A Unix-domain datagram socket."""

    def __init__(self) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_DGRAM)


def socket_pair() -> tuple[LocalStreamSocket, LocalStreamSocket]:
    """Return two connected Unix-domain stream sockets."""
    try:
        first, second = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
    except OSError as exc:
        raise UnixError("socketpair", exc.errno) from exc
    return (
        LocalStreamSocket(FileDescriptor(first.detach())),
        LocalStreamSocket(FileDescriptor(second.detach())),
    )