# minnownet

The pieces needed to build and experiment with a TCP/IP stack in user space:

- **Wire formats** for Ethernet frames (`minnownet.ethernet`), ARP messages
  (`minnownet.arp`), IPv4 datagrams (`minnownet.ipv4`) and TCP segments
  (`minnownet.tcp_segment`), each able to `parse` itself from a `Parser` and
  `serialize` itself into a `Serializer`.
- **The Internet checksum** (`InternetChecksum`), used for IPv4 headers and TCP
  segments together with the IPv4 pseudo-header.
- **Addresses** (`Address`) for IPv4 hosts and ports, with name resolution and
  conversion to and from 32-bit numbers.
- **File descriptors, sockets and TUN/TAP devices** (`FileDescriptor`,
  `UDPSocket`, `TCPSocket`, `PacketSocket`, `LocalStreamSocket`,
  `LocalDatagramSocket`, `TunFD`, `TapFD`) that count their reads and writes,
  plus an `EventLoop` that polls descriptors and runs callbacks.
- **Adapters**: `TCPOverIPv4Adapter` wraps TCP messages in IPv4 datagrams and
  filters incoming datagrams for one connection, `TCPOverIPv4OverTunFdAdapter`
  does this on a TUN device, and `LossyFdAdapter` drops traffic at random to
  simulate an unreliable network.

The package has no dependencies beyond the standard library. Sockets, the event
loop and TUN/TAP devices need a POSIX system; TUN/TAP devices need Linux and a
persistent device created beforehand.

## Parsing and serializing

Every wire-format type works with the two helpers in `minnownet.parser`:

```python
from minnownet.parser import parse, serialize
from minnownet.ipv4 import IPv4Datagram

datagram = IPv4Datagram()
datagram.payload = [b"hello"]
datagram.header.len = datagram.header.hlen * 4 + 5
datagram.header.compute_checksum()

wire = serialize(datagram)          # a list of byte strings

copy = IPv4Datagram()
if parse(copy, wire):               # False when the input is malformed
    print(copy.header)              # IPv4 len=25 proto=6 ttl=128 src=0.0.0.0 dst=0.0.0.0
```

A failed parse never raises: `parse` returns `False` and the object's fields
should not be relied on. Serializing an object whose fields make no sense (an
IPv4 header with a version other than 4, an unsupported ARP message) raises
`ValueError`.

TCP segments carry a checksum over an IPv4 pseudo-header, so
`TCPSegment.parse` and `TCPSegment.compute_checksum` take the value of
`IPv4Header.pseudo_checksum()`. Sequence and acknowledgment numbers are kept as
raw 32-bit integers.

## Checksums

```python
from minnownet.checksum import InternetChecksum

check = InternetChecksum(0)
check.add(b"\x45\x00\x00\x1c")
print(hex(check.value()))
```

`add` takes a byte string or an iterable of byte strings; bytes pair into
16-bit words across buffer boundaries.

## Addresses

```python
from minnownet.address import Address

addr = Address.from_ip_port("10.0.0.1", 80)
print(addr, addr.ipv4_numeric())               # 10.0.0.1:80 167772161
print(Address.from_ipv4_numeric(167772161).ip())
```

`Address.resolve(hostname, service)` looks a name up; failed lookups raise
`minnownet.errors.TaggedError`.

## The event loop

```python
from minnownet.eventloop import Direction, EventLoop
from minnownet.sockets import socket_pair

left, right = socket_pair()
loop = EventLoop()
received = []
loop.add_fd_rule("read", right, Direction.IN, lambda: received.append(right.read()))

left.write(b"ping")
print(loop.wait_next_event(100), received)     # Result.SUCCESS [b'ping']
```

Each call to `wait_next_event` serves at most one rule and returns
`Result.SUCCESS`, `Result.TIMEOUT`, or `Result.EXIT` once nothing is left to
poll. A rule that is called but neither reads nor writes its descriptor while
staying interested raises `RuntimeError` (busy wait). Rules are cancelled
through the `RuleHandle` returned when they are added.

## Inspecting traffic

`minnownet.helpers.summary` turns an `EthernetFrame` into one readable line,
decoding ARP, IPv4 and TCP where it can; `pretty_print` escapes unprintable
bytes and double quotes and truncates long output with `...`.

## Debug output

`minnownet.debug.debug` formats a message with `str.format` and passes it to
the current handler, which writes `DEBUG: ...` to standard error by default.
Install a different handler with `set_debug_handler` and restore the default
with `reset_debug_handler`. Under `python -O` nothing is emitted.

## What the package does not do

It supplies the message types, checksums, descriptors and adapters that a TCP
implementation uses, but no TCP connection logic itself: there is no sender,
receiver, stream reassembly, retransmission timer or connection state machine,
and no ARP cache or network interface that routes datagrams. There is no
command-line program.

## Running the tests

Install the `test` extra and run pytest from the project directory.