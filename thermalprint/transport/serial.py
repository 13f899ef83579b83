"""Serial transport for printers bound to an RFCOMM TTY (/dev/rfcommN, COMx)."""

import serial
from serial.tools.list_ports import comports as list_comports

from .base import BaseTransport


class SerialTransport(BaseTransport):
    """Serial port implementation, for Bluetooth printers exposed as a TTY."""

    def __init__(self, address: str = "auto", baudrate: int = 9600, timeout: float = 10.0):
        address = address if address != "auto" else self._detect_port()
        self.address = address
        self._serial = serial.Serial(
            port=address, baudrate=baudrate, timeout=0.5, write_timeout=timeout
        )

    def _detect_port(self):
        all_ports = [p for p in list_comports() if "rfcomm" in p.device.lower()]
        if len(all_ports) == 0:
            raise RuntimeError("No RFCOMM serial ports detected")
        if len(all_ports) > 1:
            msg = "Too many serial ports, please select specific one:"
            for port, desc, hwid in all_ports:
                msg += f"\n- {port} : {desc} [{hwid}]"
            raise RuntimeError(msg)
        return all_ports[0].device

    def write(self, data: bytes) -> int:
        # SerialException is an OSError subclass
        return self._serial.write(data)

    def close(self):
        self._serial.close()
