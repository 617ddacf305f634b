"""Wrapping TCP messages in IPv4 datagrams and unwrapping them again."""

from __future__ import annotations

import socket
from typing import Optional

from minnownet.address import Address
from minnownet.fd_adapter import FdAdapterBase
from minnownet.ipv4 import IPv4Datagram, IPv4Header, format_ipv4
from minnownet.parser import parse, serialize
from minnownet.tcp_segment import TCPMessage, TCPSegment


class TCPOverIPv4Adapter(FdAdapterBase):
    """Converts between TCP messages and IPv4 datagrams for one connection."""

    def unwrap_tcp_in_ip(self, datagram: IPv4Datagram) -> Optional[TCPMessage]:
        """Return the TCP message in ``datagram`` if it is valid and belongs to this connection.

        While listening, a SYN (without RST) fixes the connection's addresses
        and ports and ends listening.
        """
        header = datagram.header
        config = self.config

        # Binding to 0.0.0.0 and replying from the address contacted is valid.
        if not self.listening and header.dst != config.source.ipv4_numeric():
            return None
        if not self.listening and header.src != config.destination.ipv4_numeric():
            return None
        if header.proto != IPv4Header.PROTO_TCP:
            return None

        segment = TCPSegment()
        if not parse(segment, datagram.payload, header.pseudo_checksum()):
            return None

        if segment.udinfo.dst_port != config.source.port():
            return None

        if self.listening:
            sender = segment.message.sender
            if not (sender.syn and not sender.rst):
                return None
            config.source = Address(socket.AF_INET, (format_ipv4(header.dst), config.source.port()))
            config.destination = Address(socket.AF_INET, (format_ipv4(header.src), segment.udinfo.src_port))
            self.listening = False

        if segment.udinfo.src_port != config.destination.port():
            return None

        return segment.message

    def wrap_tcp_in_ip(self, message: TCPMessage) -> IPv4Datagram:
        """Put ``message`` in a TCP segment with this connection's ports, inside an IPv4 datagram."""
        config = self.config
        segment = TCPSegment(message=TCPMessage(sender=message.sender, receiver=message.receiver))
        segment.udinfo.src_port = config.source.port()
        segment.udinfo.dst_port = config.destination.port()

        datagram = IPv4Datagram()
        datagram.header.src = config.source.ipv4_numeric()
        datagram.header.dst = config.destination.ipv4_numeric()
        datagram.header.len = (
            datagram.header.hlen * 4 + TCPSegment.HEADER_LENGTH + len(message.sender.payload)
        )

        segment.compute_checksum(datagram.header.pseudo_checksum())
        datagram.header.compute_checksum()
        datagram.payload = serialize(segment)
        return datagram