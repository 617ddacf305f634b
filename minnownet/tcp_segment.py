"""TCP messages and complete TCP segments (header plus payload)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from minnownet.checksum import InternetChecksum
from minnownet.helpers import pretty_print
from minnownet.parser import Parser, Serializer

_FLAG_ACK = 0b0001_0000
_FLAG_RST = 0b0000_0100
_FLAG_SYN = 0b0000_0010
_FLAG_FIN = 0b0000_0001


@dataclass
class TCPSenderMessage:
    """What a TCP sender tells its receiver.

    ``seqno`` is the raw 32-bit sequence number of the first sequence number
    the message occupies (the SYN flag if set, otherwise the payload).
    """

    seqno: int = 0
    syn: bool = False
    payload: bytes = b""
    fin: bool = False
    rst: bool = False

    def sequence_length(self) -> int:
        """How many sequence numbers this message uses."""
        return int(self.syn) + len(self.payload) + int(self.fin)


@dataclass
class TCPReceiverMessage:
    """What a TCP receiver tells its sender.

    ``ackno`` is None until the receiver has seen the initial sequence number.
    """

    ackno: Optional[int] = None
    window_size: int = 0
    rst: bool = False


@dataclass
class UserDatagramInfo:
    """The port numbers and checksum of a TCP header."""

    src_port: int = 0
    dst_port: int = 0
    cksum: int = 0


@dataclass
class TCPMessage:
    """A sender message and a receiver message travelling together."""

    sender: TCPSenderMessage = field(default_factory=TCPSenderMessage)
    receiver: TCPReceiverMessage = field(default_factory=TCPReceiverMessage)


@dataclass
class TCPSegment:
    """A complete TCP segment: a TCPMessage plus ports and checksum."""

    HEADER_LENGTH = 20

    message: TCPMessage = field(default_factory=TCPMessage)
    udinfo: UserDatagramInfo = field(default_factory=UserDatagramInfo)

    def parse(self, parser: Parser, pseudo_checksum: int) -> None:
        """Parse the segment, verifying the checksum against the pseudo-header sum."""
        check = InternetChecksum(pseudo_checksum)
        check.add(parser.buffer())
        if check.value():
            parser.set_error()
            return

        sender = self.message.sender
        receiver = self.message.receiver

        self.udinfo.src_port = parser.integer(2)
        self.udinfo.dst_port = parser.integer(2)
        sender.seqno = parser.integer(4)
        ackno = parser.integer(4)
        data_offset = parser.integer(1) >> 4

        flags = parser.integer(1)
        receiver.ackno = ackno if flags & _FLAG_ACK else None
        rst = bool(flags & _FLAG_RST)
        sender.rst = rst
        receiver.rst = rst
        sender.syn = bool(flags & _FLAG_SYN)
        sender.fin = bool(flags & _FLAG_FIN)

        receiver.window_size = parser.integer(2)
        self.udinfo.cksum = parser.integer(2)
        parser.integer(2)  # urgent pointer

        if data_offset < (self.HEADER_LENGTH >> 2):
            parser.set_error()
            return
        parser.remove_prefix(data_offset * 4 - self.HEADER_LENGTH)

        sender.payload = parser.concatenate_all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        sender = self.message.sender
        receiver = self.message.receiver
        serializer.integer(self.udinfo.src_port, 2)
        serializer.integer(self.udinfo.dst_port, 2)
        serializer.integer(sender.seqno, 4)
        serializer.integer(receiver.ackno if receiver.ackno is not None else 0, 4)
        serializer.integer((self.HEADER_LENGTH >> 2) << 4, 1)
        flags = (
            (_FLAG_ACK if receiver.ackno is not None else 0)
            | (_FLAG_RST if sender.rst or receiver.rst else 0)
            | (_FLAG_SYN if sender.syn else 0)
            | (_FLAG_FIN if sender.fin else 0)
        )
        serializer.integer(flags, 1)
        serializer.integer(receiver.window_size, 2)
        serializer.integer(self.udinfo.cksum, 2)
        serializer.integer(0, 2)  # urgent pointer
        serializer.buffer(sender.payload)

    def compute_checksum(self, pseudo_checksum: int) -> None:
        """Set ``udinfo.cksum`` to the correct value for this segment."""
        self.udinfo.cksum = 0
        serializer = Serializer()
        self.serialize(serializer)
        check = InternetChecksum(pseudo_checksum)
        check.add(serializer.finish())
        self.udinfo.cksum = check.value()

    def __str__(self) -> str:
        sender = self.message.sender
        receiver = self.message.receiver
        parts = ["TCP", f"seqno={sender.seqno}"]
        if sender.syn:
            parts.append("+SYN")
        if sender.payload:
            parts.append(f'payload="{pretty_print(sender.payload)}"')
        if sender.fin:
            parts.append("+FIN")
        if sender.rst or receiver.rst:
            parts.append("+RST")
        if receiver.ackno is not None:
            parts.append(f"ACK<{receiver.ackno}>")
        parts.append(f"winsize={receiver.window_size}")
        parts.append(f"src={self.udinfo.src_port} dst={self.udinfo.dst_port}")
        return " ".join(parts)