"""IPv4 headers and datagrams (IP options are skipped, not interpreted)."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field

from minnownet.checksum import InternetChecksum
from minnownet.parser import Parser, Serializer

IPV4_ADDRESS_SIZE = 4


def format_ipv4(value: int) -> str:
    """Render a numeric IPv4 address as a dotted quad."""
    return str(ipaddress.IPv4Address(value & 0xFFFFFFFF))


@dataclass
class IPv4Header:
    """IPv4 datagram header."""

    LENGTH = 20
    DEFAULT_TTL = 128
    PROTO_TCP = 6

    ver: int = 4
    hlen: int = LENGTH // 4
    tos: int = 0
    len: int = 0
    id: int = 0
    df: bool = True
    mf: bool = False
    offset: int = 0
    ttl: int = DEFAULT_TTL
    proto: int = PROTO_TCP
    cksum: int = 0
    src: int = 0
    dst: int = 0

    def payload_length(self) -> int:
        return (self.len - 4 * self.hlen) & 0xFFFF

    def pseudo_checksum(self) -> int:
        """The pseudo-header's contribution to an encapsulated TCP checksum."""
        total = (self.src >> 16) + (self.src & 0xFFFF)
        total += (self.dst >> 16) + (self.dst & 0xFFFF)
        total += self.proto
        total += self.payload_length()
        return total & 0xFFFFFFFF

    def compute_checksum(self) -> None:
        """Set ``cksum`` to the correct value for the other fields."""
        self.cksum = 0
        serializer = Serializer()
        self.serialize(serializer)
        check = InternetChecksum()
        check.add(serializer.finish())
        self.cksum = check.value()

    def __str__(self) -> str:
        return (
            f"IPv{self.ver:x} len={self.len} proto={self.proto} ttl={self.ttl}"
            f" src={format_ipv4(self.src)} dst={format_ipv4(self.dst)}"
        )

    def parse(self, parser: Parser) -> None:
        first_byte = parser.integer(1)
        self.ver = first_byte >> 4
        self.hlen = first_byte & 0x0F
        self.tos = parser.integer(1)
        self.len = parser.integer(2)
        self.id = parser.integer(2)

        fo_val = parser.integer(2)
        self.df = bool(fo_val & 0x4000)
        self.mf = bool(fo_val & 0x2000)
        self.offset = fo_val & 0x1FFF

        self.ttl = parser.integer(1)
        self.proto = parser.integer(1)
        self.cksum = parser.integer(2)
        self.src = parser.integer(4)
        self.dst = parser.integer(4)

        if self.ver != 4 or self.hlen < 5:
            parser.set_error()
        if parser.has_error():
            return

        parser.remove_prefix(self.hlen * 4 - self.LENGTH)

        given = self.cksum
        self.compute_checksum()
        if self.cksum != given:
            parser.set_error()

    def serialize(self, serializer: Serializer) -> None:
        """Write the header as-is (the checksum is not recomputed)."""
        if self.ver != 4:
            raise ValueError("wrong IP version")
        serializer.integer((self.ver << 4) | (self.hlen & 0xF), 1)
        serializer.integer(self.tos, 1)
        serializer.integer(self.len, 2)
        serializer.integer(self.id, 2)
        fo_val = (0x4000 if self.df else 0) | (0x2000 if self.mf else 0) | (self.offset & 0x1FFF)
        serializer.integer(fo_val, 2)
        serializer.integer(self.ttl, 1)
        serializer.integer(self.proto, 1)
        serializer.integer(self.cksum, 2)
        serializer.integer(self.src, 4)
        serializer.integer(self.dst, 4)


@dataclass
class IPv4Datagram:
    """An IPv4 header and its payload buffers."""

    header: IPv4Header = field(default_factory=IPv4Header)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        self.header.parse(parser)
        parser.truncate(self.header.payload_length())
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffer(self.payload)


InternetDatagram = IPv4Datagram