"""ARP messages for Ethernet/IPv4."""

from __future__ import annotations

from dataclasses import dataclass

from minnownet.ethernet import ETHERNET_ADDRESS_SIZE, EthernetHeader, format_ethernet_address
from minnownet.ipv4 import IPV4_ADDRESS_SIZE, format_ipv4
from minnownet.parser import Parser, Serializer


@dataclass
class ARPMessage:
    """An ARP request or reply."""

    LENGTH = 28
    TYPE_ETHERNET = 1
    OPCODE_REQUEST = 1
    OPCODE_REPLY = 2

    hardware_type: int = TYPE_ETHERNET
    protocol_type: int = EthernetHeader.TYPE_IPV4
    hardware_address_size: int = ETHERNET_ADDRESS_SIZE
    protocol_address_size: int = IPV4_ADDRESS_SIZE
    opcode: int = 0
    sender_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_SIZE)
    sender_ip_address: int = 0
    target_ethernet_address: bytes = bytes(ETHERNET_ADDRESS_SIZE)
    target_ip_address: int = 0

    def supported(self) -> bool:
        """Is this an Ethernet/IPv4 request or reply?"""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPV4
            and self.hardware_address_size == ETHERNET_ADDRESS_SIZE
            and self.protocol_address_size == IPV4_ADDRESS_SIZE
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    def __str__(self) -> str:
        opcode = {self.OPCODE_REQUEST: "REQUEST", self.OPCODE_REPLY: "REPLY"}.get(self.opcode, "(unknown type)")
        return (
            f"opcode={opcode}, sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{format_ipv4(self.sender_ip_address)}, "
            f"target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{format_ipv4(self.target_ip_address)}"
        )

    def parse(self, parser: Parser) -> None:
        self.hardware_type = parser.integer(2)
        self.protocol_type = parser.integer(2)
        self.hardware_address_size = parser.integer(1)
        self.protocol_address_size = parser.integer(1)
        self.opcode = parser.integer(2)

        if not self.supported():
            parser.set_error()
            return

        self.sender_ethernet_address = parser.read_bytes(ETHERNET_ADDRESS_SIZE)
        self.sender_ip_address = parser.integer(IPV4_ADDRESS_SIZE)
        self.target_ethernet_address = parser.read_bytes(ETHERNET_ADDRESS_SIZE)
        self.target_ip_address = parser.integer(IPV4_ADDRESS_SIZE)

    def serialize(self, serializer: Serializer) -> None:
        if not self.supported():
            raise ValueError(
                "ARPMessage: unsupported field combination (must be Ethernet/IP, and request or reply)"
            )
        for address in (self.sender_ethernet_address, self.target_ethernet_address):
            if len(address) != ETHERNET_ADDRESS_SIZE:
                raise ValueError(f"Ethernet address must be {ETHERNET_ADDRESS_SIZE} bytes")

        serializer.integer(self.hardware_type, 2)
        serializer.integer(self.protocol_type, 2)
        serializer.integer(self.hardware_address_size, 1)
        serializer.integer(self.protocol_address_size, 1)
        serializer.integer(self.opcode, 2)
        for byte in self.sender_ethernet_address:
            serializer.integer(byte, 1)
        serializer.integer(self.sender_ip_address, IPV4_ADDRESS_SIZE)
        for byte in self.target_ethernet_address:
            serializer.integer(byte, 1)
        serializer.integer(self.target_ip_address, IPV4_ADDRESS_SIZE)