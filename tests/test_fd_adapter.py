from minnownet.address import Address
from minnownet.fd_adapter import FdAdapterBase


def test_defaults():
    adapter = FdAdapterBase()
    assert adapter.listening is False
    assert adapter.config.source.ip_port() == ("0.0.0.0", 0)


def test_config_is_mutable_per_instance():
    first = FdAdapterBase()
    second = FdAdapterBase()
    first.config.loss_rate_up = 500
    first.config.destination = Address.from_ip_port("1.2.3.4", 9)
    assert first.config.loss_rate_up == 500
    assert second.config.loss_rate_up == 0
    assert second.config.destination.port() == 0


def test_listening_flag():
    adapter = FdAdapterBase()
    adapter.listening = True
    assert adapter.listening is True


def test_tick_leaves_state_alone():
    adapter = FdAdapterBase()
    before = (adapter.config.source, adapter.config.destination, adapter.listening)
    assert adapter.tick(100) is None
    assert (adapter.config.source, adapter.config.destination, adapter.listening) == before