"""Fakes standing in for the radio and the printer socket."""

import pytest

from thermalprint.adapter import BluetoothAdapter, PairedDevice
from thermalprint.config import Settings
from thermalprint.connection import ConnectionManager
from thermalprint.transport import BaseTransport


class FakeTransport(BaseTransport):
    """Records writes; fails every write once ``broken`` is set."""

    def __init__(self, address, **kwargs):
        self.address = address
        self.kwargs = kwargs
        self.written = bytearray()
        self.broken = False
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.broken or self.closed:
            raise BrokenPipeError("connection reset by printer")
        self.written.extend(data)
        return len(data)

    def close(self):
        self.closed = True


class FakeAdapter(BluetoothAdapter):
    def __init__(self, enabled=True, devices=()):
        super().__init__()
        self.enabled = enabled
        self.devices = list(devices)
        self.discovery_cancelled = 0

    def is_enabled(self) -> bool:
        return self.enabled

    def paired_devices(self):
        return list(self.devices)

    def cancel_discovery(self):
        self.discovery_cancelled += 1
        return True


class TransportFactory:
    """Stands in for get_transport and keeps every transport it opened."""

    def __init__(self):
        self.opened = []
        self.error = None

    def __call__(self, transport_type, **kwargs):
        if self.error is not None:
            raise self.error
        transport = FakeTransport(**kwargs)
        self.opened.append(transport)
        return transport


@pytest.fixture
def adapter():
    return FakeAdapter(devices=[PairedDevice("PT-210", "86:67:7A:11:22:33")])


@pytest.fixture
def factory():
    return TransportFactory()


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def manager(adapter, factory, notifications):
    manager = ConnectionManager(
        Settings(),
        adapter=adapter,
        transport_factory=factory,
        notify=notifications.append,
    )
    yield manager
    manager.close()
