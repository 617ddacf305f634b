"""Convenience functions for inspecting frames and buffers."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import Union

from minnownet.arp import ARPMessage
from minnownet.ethernet import EthernetFrame, EthernetHeader
from minnownet.ipv4 import IPv4Datagram, IPv4Header
from minnownet.parser import parse

BytesLike = Union[bytes, bytearray, memoryview]


def pretty_print(data: BytesLike | str, max_length: int = 32) -> str:
    """Escape unprintable bytes and double quotes, truncating long output with '...'."""
    raw = data.encode() if isinstance(data, str) else bytes(data)
    out = ""
    truncated = False
    for byte in raw:
        if len(out) >= max_length:
            truncated = True
            break
        if 0x20 <= byte < 0x7F and byte != ord('"'):
            out += chr(byte)
        else:
            out += f"\\x{byte:02x}"
    if truncated:
        out = out[:-3] + "..." if len(out) >= 3 else out + "..."
    return out


def concat(buffers: Iterable[BytesLike]) -> bytes:
    """Join a sequence of buffers into one byte string."""
    return b"".join(bytes(b) for b in buffers)


def clone(obj: EthernetFrame | IPv4Datagram) -> EthernetFrame | IPv4Datagram:
    """Return an independent copy of a frame or datagram."""
    if not isinstance(obj, (EthernetFrame, IPv4Datagram)):
        raise TypeError(f"cannot clone {type(obj).__name__}")
    return type(obj)(header=dataclasses.replace(obj.header), payload=list(obj.payload))


def summary(frame: EthernetFrame) -> str:
    """Describe an Ethernet frame and what it carries in one line."""
    from minnownet.tcp_segment import TCPSegment

    out = f"{frame.header} payload: "
    if frame.header.type == EthernetHeader.TYPE_IPV4:
        dgram = IPv4Datagram()
        if not parse(dgram, clone(frame).payload):
            return out + "bad IPv4 datagram"
        out += f"{dgram.header} payload="
        if dgram.header.proto == IPv4Header.PROTO_TCP:
            seg = TCPSegment()
            if parse(seg, dgram.payload, dgram.header.pseudo_checksum()):
                return out + str(seg)
            return out + "bad TCP segment"
        return out + f'"{pretty_print(concat(dgram.payload))}"'
    if frame.header.type == EthernetHeader.TYPE_ARP:
        arp = ARPMessage()
        if parse(arp, clone(frame).payload):
            return out + str(arp)
        return out + "bad ARP message"
    return out + "unknown frame type"