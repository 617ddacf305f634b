"""Socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any, Union

from minnownet.errors import TaggedError
from minnownet.ipv4 import format_ipv4

_INET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _normalize(family: int, sockaddr: Any) -> Any:
    if family == socket.AF_INET:
        host, port = sockaddr
        try:
            host = str(ipaddress.IPv4Address(host))
        except ValueError as exc:
            raise ValueError(f"invalid IPv4 address: {host!r}") from exc
        return (host, int(port))
    if family == socket.AF_INET6:
        host, port, *rest = sockaddr
        flowinfo, scope_id = (list(rest) + [0, 0])[:2]
        try:
            host = str(ipaddress.IPv6Address(host))
        except ValueError as exc:
            raise ValueError(f"invalid IPv6 address: {host!r}") from exc
        return (host, int(port), int(flowinfo), int(scope_id))
    return sockaddr


class Address:
    """An immutable socket address: a family plus the address in socket-module form."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, family: int, sockaddr: Any) -> None:
        self._family = family
        self._sockaddr = _normalize(family, sockaddr)

    @property
    def family(self) -> int:
        return self._family

    @property
    def sockaddr(self) -> Any:
        return self._sockaddr

    @classmethod
    def _lookup(cls, node: str, service: str, flags: int) -> Address:
        try:
            results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
        except socket.gaierror as exc:
            raise TaggedError(f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)) from exc
        if not results:
            raise RuntimeError("getaddrinfo returned successfully but with no results")
        family, _type, _proto, _canon, sockaddr = results[0]
        return cls(family, sockaddr)

    @classmethod
    def resolve(cls, hostname: str, service: Union[str, int]) -> Address:
        """Resolve a hostname and a service name (or port) to an IPv4 address."""
        return cls._lookup(hostname, str(service), socket.AI_ALL)

    @classmethod
    def from_ip_port(cls, ip: str, port: int = 0) -> Address:
        """Build an address from a dotted-quad string and a numeric port, without lookups."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        return cls._lookup(ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build an IPv4 address (port 0) from its 32-bit numeric value."""
        return cls(socket.AF_INET, (format_ipv4(ip_address), 0))

    def ip_port(self) -> tuple[str, int]:
        """Return the numeric host string and port."""
        if self._family not in _INET_FAMILIES:
            raise ValueError("ip_port() called on non-Internet address")
        try:
            host, port = socket.getnameinfo(self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(port)

    def ip(self) -> str:
        return self.ip_port()[0]

    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """Return the IPv4 address as an integer in host order."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def __str__(self) -> str:
        if self._family in _INET_FAMILIES:
            ip, port = self.ip_port()
            return f"{ip}:{port}"
        return "(non-Internet address)"

    def __repr__(self) -> str:
        return f"Address({self._family!r}, {self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))