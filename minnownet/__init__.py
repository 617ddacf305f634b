"""User-space networking building blocks: wire formats, checksums, addresses, sockets, TUN/TAP and an event loop."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "arp",
    "checksum",
    "debug",
    "errors",
    "ethernet",
    "eventloop",
    "fd_adapter",
    "file_descriptor",
    "helpers",
    "ipv4",
    "lossy_fd_adapter",
    "parser",
    "sockets",
    "tcp_config",
    "tcp_over_ip",
    "tcp_segment",
    "tuntap",
]