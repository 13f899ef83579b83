"""Bluetooth RFCOMM transport for thermal printers (Linux/standard)."""

import errno
import logging
import socket

from thermalprint.errors import PermissionDeniedError

from .base import BaseTransport

# Serial Port Profile service class. Printers advertise it on RFCOMM channel 1.
SPP_UUID = "00001101-0000-1000-8000-00805F9B34FB"
DEFAULT_CHANNEL = 1


class BluetoothTransport(BaseTransport):
    """Standard Bluetooth RFCOMM transport implementation for Linux."""

    def __init__(
        self, address: str, channel: int = DEFAULT_CHANNEL, timeout: float = 10.0
    ):
        self.address = address
        if not hasattr(socket, "AF_BLUETOOTH"):
            raise ConnectionError(
                "This Python build has no Bluetooth socket support (AF_BLUETOOTH). "
                "Use a Linux build with BlueZ headers, or a bound serial port: -c serial"
            )
        try:
            self._sock = socket.socket(
                socket.AF_BLUETOOTH,
                socket.SOCK_STREAM,
                socket.BTPROTO_RFCOMM,
            )
        except PermissionError as e:
            raise PermissionDeniedError(
                "Bluetooth permissions not granted", details=str(e)
            ) from e
        self._sock.settimeout(timeout)
        logging.info(f"Connecting to {address} on RFCOMM channel {channel}")
        try:
            self._sock.connect((address, channel))
        except OSError as e:
            self._sock.close()
            if e.errno in (errno.EACCES, errno.EPERM):
                raise PermissionDeniedError(
                    "Bluetooth permissions not granted", details=str(e)
                ) from e
            elif e.errno == errno.EHOSTDOWN:  # errno 112
                raise ConnectionError(
                    f"Cannot connect to Bluetooth device {address}. "
                    f"Please ensure the device is:\n"
                    f"1. Powered on and in range\n"
                    f"2. Properly paired with this system using: bluetoothctl\n"
                    f"3. Not connected to another device\n"
                    f"4. Your Bluetooth adapter is up: bluetoothctl power on"
                ) from e
            elif e.errno == errno.ECONNREFUSED:  # errno 111
                raise ConnectionError(
                    f"Connection refused by device {address}. "
                    f"The printer may be busy or listening on another channel."
                ) from e
            elif isinstance(e, socket.timeout):
                raise ConnectionError(
                    f"Timed out after {timeout}s connecting to {address}"
                ) from e
            else:
                raise
        except ValueError as e:
            self._sock.close()
            raise ConnectionError(f"Bad Bluetooth address {address!r}: {e}") from e
        logging.info(f"Connected to {address}")

    def write(self, data: bytes) -> int:
        self._log_buffer("write", data)
        self._sock.sendall(data)
        return len(data)

    def close(self):
        self._sock.close()

    def _log_buffer(self, prefix: str, buff: bytes):
        msg = ":".join(f"{i:#04x}"[-2:] for i in buff)
        logging.debug(f"{prefix}: {msg}")
