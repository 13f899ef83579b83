import errno
import socket

import pytest

from thermalprint.errors import PermissionDeniedError
from thermalprint.transport import get_transport
from thermalprint.transport import bluetooth


class FakeSocket:
    connect_error = None

    def __init__(self, family, type_, proto):
        self.args = (family, type_, proto)
        self.timeout = None
        self.peer = None
        self.sent = bytearray()
        self.closed = False

    def settimeout(self, timeout):
        self.timeout = timeout

    def connect(self, peer):
        if self.connect_error is not None:
            raise self.connect_error
        self.peer = peer

    def sendall(self, data):
        self.sent.extend(data)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_socket(monkeypatch):
    # AF_BLUETOOTH only exists on Linux builds
    monkeypatch.setattr(socket, "AF_BLUETOOTH", 31, raising=False)
    monkeypatch.setattr(socket, "BTPROTO_RFCOMM", 3, raising=False)
    sockets = []

    def make(*args):
        sock = FakeSocket(*args)
        sockets.append(sock)
        return sock

    monkeypatch.setattr(bluetooth.socket, "socket", make)
    yield sockets
    FakeSocket.connect_error = None


def test_connects_to_rfcomm_channel(fake_socket):
    transport = get_transport("bluetooth", address="86:67:7A:11:22:33", channel=2, timeout=3)
    sock = fake_socket[0]
    assert sock.peer == ("86:67:7A:11:22:33", 2)
    assert sock.timeout == 3
    assert transport.write(b"\x1b@") == 2
    assert sock.sent == b"\x1b@"
    with transport:
        pass
    assert sock.closed


def test_connection_refused(fake_socket):
    FakeSocket.connect_error = OSError(errno.ECONNREFUSED, "Connection refused")
    with pytest.raises(ConnectionError, match="refused"):
        get_transport("bluetooth", address="86:67:7A:11:22:33")
    assert fake_socket[0].closed


def test_host_down(fake_socket):
    FakeSocket.connect_error = OSError(errno.EHOSTDOWN, "Host is down")
    with pytest.raises(ConnectionError, match="Powered on and in range"):
        get_transport("bluetooth", address="86:67:7A:11:22:33")


def test_timeout(fake_socket):
    FakeSocket.connect_error = socket.timeout("timed out")
    with pytest.raises(ConnectionError, match="Timed out"):
        get_transport("bluetooth", address="86:67:7A:11:22:33", timeout=1.5)


def test_permission_denied(fake_socket):
    FakeSocket.connect_error = PermissionError(errno.EACCES, "Permission denied")
    with pytest.raises(PermissionDeniedError):
        get_transport("bluetooth", address="86:67:7A:11:22:33")


def test_unknown_transport():
    with pytest.raises(ValueError):
        get_transport("carrier-pigeon", address="x")


class FakeSerial:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.sent = bytearray()
        self.is_open = True

    def write(self, data):
        self.sent.extend(data)
        return len(data)

    def close(self):
        self.is_open = False


class FakePort:
    def __init__(self, device):
        self.device = device

    def __iter__(self):
        return iter((self.device, "n/a", "n/a"))


@pytest.fixture
def serial_module(monkeypatch):
    from thermalprint.transport import serial as serial_transport

    monkeypatch.setattr(serial_transport.serial, "Serial", FakeSerial)
    return serial_transport


def test_serial_transport(serial_module):
    transport = get_transport("serial", address="/dev/rfcomm0", baudrate=19200, timeout=2)
    assert transport._serial.kwargs["port"] == "/dev/rfcomm0"
    assert transport._serial.kwargs["baudrate"] == 19200
    assert transport._serial.kwargs["write_timeout"] == 2
    assert transport.write(b"hi") == 2
    transport.close()
    assert not transport._serial.is_open


def test_serial_detects_single_rfcomm_port(monkeypatch, serial_module):
    monkeypatch.setattr(
        serial_module, "list_comports", lambda: [FakePort("/dev/ttyS0"), FakePort("/dev/rfcomm0")]
    )
    transport = get_transport("serial")
    assert transport.address == "/dev/rfcomm0"


def test_serial_refuses_ambiguous_ports(monkeypatch, serial_module):
    monkeypatch.setattr(
        serial_module, "list_comports", lambda: [FakePort("/dev/rfcomm0"), FakePort("/dev/rfcomm1")]
    )
    with pytest.raises(RuntimeError, match="Too many serial ports"):
        get_transport("serial")


def test_missing_bluetooth_socket_support(monkeypatch):
    monkeypatch.delattr(socket, "AF_BLUETOOTH", raising=False)
    with pytest.raises(ConnectionError, match="no Bluetooth socket support"):
        get_transport("bluetooth", address="86:67:7A:11:22:33")


def test_bad_address_is_a_connection_error(fake_socket):
    FakeSocket.connect_error = ValueError("embedded null character")
    with pytest.raises(ConnectionError, match="Bad Bluetooth address"):
        get_transport("bluetooth", address="86:67\x00")
    assert fake_socket[0].closed


def test_writes_are_logged_as_hex(fake_socket, caplog):
    transport = get_transport("bluetooth", address="86:67:7A:11:22:33")
    with caplog.at_level("DEBUG"):
        transport.write(b"\x1b@\n")
    assert "write: 1b:40:0a" in caplog.text
