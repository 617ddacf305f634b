import socket
import struct

import pytest

from minnownet.address import Address
from minnownet.file_descriptor import FileDescriptor
from minnownet.helpers import concat
from minnownet.ipv4 import IPv4Datagram
from minnownet.parser import parse, serialize
from minnownet.tcp_over_ip import TCPOverIPv4Adapter
from minnownet.tcp_segment import TCPMessage, TCPSenderMessage
from minnownet.tuntap import IFF_NO_PI, IFF_TAP, IFF_TUN, TCPOverIPv4OverTunFdAdapter, _ifreq


@pytest.fixture
def link():
    ours, theirs = socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM)
    tun = FileDescriptor(ours.detach())
    adapter = TCPOverIPv4OverTunFdAdapter(tun)
    adapter.config.source = Address.from_ip_port("10.0.0.1", 40000)
    adapter.config.destination = Address.from_ip_port("10.0.0.2", 80)
    yield adapter, theirs
    theirs.close()
    if not tun.closed:
        tun.close()


def _peer(dst_port: int = 40000) -> TCPOverIPv4Adapter:
    peer = TCPOverIPv4Adapter()
    peer.config.source = Address.from_ip_port("10.0.0.2", 80)
    peer.config.destination = Address.from_ip_port("10.0.0.1", dst_port)
    return peer


def _message() -> TCPMessage:
    return TCPMessage(sender=TCPSenderMessage(seqno=1000, syn=True, payload=b"hi"))


def test_ifreq_layout():
    request = _ifreq("tun144", IFF_TUN | IFF_NO_PI)
    assert len(request) == 40
    assert request[:16] == b"tun144".ljust(16, b"\0")
    assert struct.unpack_from("H", request, 16)[0] == IFF_TUN | IFF_NO_PI


def test_ifreq_truncates_long_names():
    request = _ifreq("x" * 20, IFF_TAP)
    assert request[:16] == b"x" * 15 + b"\0"


def test_fd_is_the_tun_descriptor(link):
    adapter, _ = link
    assert adapter.fd is adapter.tun


def test_write_sends_ip_datagram(link):
    adapter, theirs = link
    adapter.write(_message())
    raw = theirs.recv(65536)

    datagram = IPv4Datagram()
    assert parse(datagram, [raw])
    assert datagram.header.src == adapter.config.source.ipv4_numeric()
    assert datagram.header.dst == adapter.config.destination.ipv4_numeric()

    message = _peer().unwrap_tcp_in_ip(datagram)
    assert message.sender.payload == b"hi"
    assert message.sender.seqno == 1000
    assert message.sender.syn
    assert adapter.fd.write_count == 1


def test_read_returns_message_for_connection(link):
    adapter, theirs = link
    theirs.send(concat(serialize(_peer().wrap_tcp_in_ip(_message()))))
    message = adapter.read()
    assert message.sender.payload == b"hi"
    assert message.sender.seqno == 1000
    assert message.sender.syn
    assert adapter.fd.read_count == 1


def test_read_ignores_other_ports(link):
    adapter, theirs = link
    theirs.send(concat(serialize(_peer(dst_port=40001).wrap_tcp_in_ip(_message()))))
    assert adapter.read() is None


def test_read_ignores_garbage(link):
    adapter, theirs = link
    theirs.send(b"not an ip datagram")
    assert adapter.read() is None
    assert adapter.fd.read_count == 1


def test_listening_adapter_learns_peer(link):
    adapter, theirs = link
    adapter.listening = True
    theirs.send(concat(serialize(_peer().wrap_tcp_in_ip(_message()))))
    message = adapter.read()
    assert message.sender.syn
    assert adapter.listening is False
    assert adapter.config.destination == Address.from_ip_port("10.0.0.2", 80)