import socket

import pytest

from minnownet.address import Address
from minnownet.errors import TaggedError


def test_ip_port_and_string():
    addr = Address.from_ip_port("18.243.0.1", 53)
    assert addr.ip_port() == ("18.243.0.1", 53)
    assert addr.ip() == "18.243.0.1"
    assert addr.port() == 53
    assert str(addr) == "18.243.0.1:53"


def test_default_port_is_zero():
    assert Address.from_ip_port("8.8.8.8").port() == 0


def test_numeric_round_trip():
    addr = Address.from_ip_port("192.168.0.1", 0)
    numeric = addr.ipv4_numeric()
    assert Address.from_ipv4_numeric(numeric) == addr
    assert Address.from_ipv4_numeric(numeric).ipv4_numeric() == numeric


def test_from_numeric_zero_is_any_address():
    assert Address.from_ipv4_numeric(0).ip_port() == ("0.0.0.0", 0)


def test_numeric_orders_like_dotted_quads():
    low = Address.from_ip_port("10.0.0.1").ipv4_numeric()
    high = Address.from_ip_port("10.0.0.2").ipv4_numeric()
    assert high == low + 1


def test_resolve_numeric_host():
    addr = Address.resolve("127.0.0.1", "80")
    assert addr.ip_port() == ("127.0.0.1", 80)


def test_invalid_ip_raises_tagged_error():
    with pytest.raises(TaggedError) as info:
        Address.from_ip_port("not an ip", 0)
    assert str(info.value).startswith("getaddrinfo(not an ip, 0): ")
    assert info.value.error_code != 0


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address.from_ip_port("1.2.3.4", 70000)


def test_equality_and_hash():
    a = Address.from_ip_port("1.2.3.4", 5)
    b = Address(socket.AF_INET, ("1.2.3.4", 5))
    assert a == b
    assert hash(a) == hash(b)
    assert a != Address.from_ip_port("1.2.3.4", 6)


def test_direct_construction_rejects_bad_host():
    with pytest.raises(ValueError):
        Address(socket.AF_INET, ("bogus", 1))


def test_non_internet_address():
    addr = Address(socket.AF_UNIX, "/tmp/some.sock")
    assert str(addr) == "(non-Internet address)"
    with pytest.raises(ValueError):
        addr.ip_port()
    with pytest.raises(ValueError):
        addr.ipv4_numeric()


def test_ipv6_address():
    addr = Address(socket.AF_INET6, ("::1", 8080))
    assert addr.ip_port() == ("::1", 8080)
    assert str(addr) == "::1:8080"
    with pytest.raises(ValueError):
        addr.ipv4_numeric()