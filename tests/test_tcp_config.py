import random

from minnownet.address import Address
from minnownet.tcp_config import FdAdapterConfig, TCPConfig, get_random_engine


def test_tcp_config_defaults_match_class_constants():
    cfg = TCPConfig()
    assert cfg.rt_timeout == TCPConfig.TIMEOUT_DFLT
    assert cfg.recv_capacity == TCPConfig.DEFAULT_CAPACITY
    assert cfg.send_capacity == TCPConfig.DEFAULT_CAPACITY
    assert cfg.isn == 137


def test_tcp_config_override_keeps_other_fields():
    cfg = TCPConfig(rt_timeout=100)
    assert cfg.rt_timeout == 100
    assert cfg.recv_capacity == 64000


def test_adapter_config_defaults_to_any_address():
    cfg = FdAdapterConfig()
    assert cfg.source.ip_port() == ("0.0.0.0", 0)
    assert cfg.destination == cfg.source
    assert (cfg.loss_rate_dn, cfg.loss_rate_up) == (0, 0)


def test_adapter_configs_are_independent():
    first = FdAdapterConfig()
    second = FdAdapterConfig()
    first.source = Address.from_ip_port("10.0.0.1", 80)
    assert second.source.ip_port() == ("0.0.0.0", 0)


def test_random_engine_draws_in_range():
    engine = get_random_engine()
    draws = [engine.getrandbits(16) for _ in range(100)]
    assert all(0 <= d < 65536 for d in draws)


def test_random_engines_are_seeded_differently():
    first = get_random_engine()
    second = get_random_engine()
    assert isinstance(first, random.Random)
    assert [first.getrandbits(64) for _ in range(8)] != [second.getrandbits(64) for _ in range(8)]