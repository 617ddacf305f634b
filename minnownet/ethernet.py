"""Ethernet addresses, headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field

from minnownet.parser import Parser, Serializer

ETHERNET_ADDRESS_SIZE = 6
ETHERNET_BROADCAST = b"\xff" * ETHERNET_ADDRESS_SIZE


def format_ethernet_address(address: bytes) -> str:
    """Render an Ethernet address as colon-separated lowercase hex."""
    return ":".join(f"{byte:02x}" for byte in address)


def _write_address(serializer: Serializer, address: bytes) -> None:
    if len(address) != ETHERNET_ADDRESS_SIZE:
        raise ValueError(f"Ethernet address must be {ETHERNET_ADDRESS_SIZE} bytes")
    for byte in address:
        serializer.integer(byte, 1)


@dataclass
class EthernetHeader:
    """Ethernet frame header."""

    LENGTH = 14
    TYPE_IPV4 = 0x800
    TYPE_ARP = 0x806

    dst: bytes = bytes(ETHERNET_ADDRESS_SIZE)
    src: bytes = bytes(ETHERNET_ADDRESS_SIZE)
    type: int = 0

    def __str__(self) -> str:
        if self.type == self.TYPE_IPV4:
            kind = "IPv4"
        elif self.type == self.TYPE_ARP:
            kind = "ARP"
        else:
            kind = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}"
            f" src={format_ethernet_address(self.src)} type={kind}"
        )

    def parse(self, parser: Parser) -> None:
        self.dst = parser.read_bytes(ETHERNET_ADDRESS_SIZE)
        self.src = parser.read_bytes(ETHERNET_ADDRESS_SIZE)
        self.type = parser.integer(2)

    def serialize(self, serializer: Serializer) -> None:
        _write_address(serializer, self.dst)
        _write_address(serializer, self.src)
        serializer.integer(self.type, 2)


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload buffers."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffer(self.payload)