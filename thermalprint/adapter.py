"""Local Bluetooth adapter queries through BlueZ's bluetoothctl."""

import logging
import re
import subprocess
from typing import List, NamedTuple, Optional

DEVICE_LINE = re.compile(r"^Device\s+((?:[0-9A-Fa-f]{2}:){5}[0-9A-Fa-f]{2})\s*(.*)$")


class PairedDevice(NamedTuple):
    name: str
    address: str

    def __str__(self):
        return f"{self.name}#{self.address}"


class BluetoothAdapter:
    """Powered state, bonded devices and discovery control of the default adapter."""

    def __init__(self, timeout: float = 5.0, stop_find_timeout: float = 2.0):
        self.timeout = timeout
        self.stop_find_timeout = stop_find_timeout

    def _run(self, command: List[str], timeout: float) -> Optional[str]:
        """Run a BlueZ tool, returning stdout or None on failure."""
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logging.debug(f"{' '.join(command)} failed: {e}")
            return None
        if result.returncode != 0:
            logging.debug(
                f"{' '.join(command)} exited with {result.returncode}: "
                f"{(result.stderr or result.stdout).strip()}"
            )
            return None
        return result.stdout

    def _bluetoothctl(self, *args: str) -> Optional[str]:
        return self._run(["bluetoothctl", *args], self.timeout)

    def _btmgmt(self, *args: str) -> Optional[str]:
        return self._run(["btmgmt", *args], self.stop_find_timeout)

    def is_enabled(self) -> bool:
        output = self._bluetoothctl("show")
        if output is None:
            return False
        return any(
            line.strip().lower() == "powered: yes" for line in output.splitlines()
        )

    def paired_devices(self) -> List[PairedDevice]:
        """List bonded devices; empty when the adapter cannot be queried."""
        output = self._bluetoothctl("devices", "Paired")
        if output is None:
            # BlueZ < 5.65
            output = self._bluetoothctl("paired-devices")
        if output is None:
            return []

        devices = []
        for line in output.splitlines():
            match = DEVICE_LINE.match(line.strip())
            if match:
                address, name = match.groups()
                devices.append(PairedDevice(name.strip() or address, address.upper()))
        return devices

    def cancel_discovery(self) -> bool:
        """Stop any inquiry running on the adapter, whoever started it.

        An active inquiry slows down or breaks RFCOMM connection setup.
        bluetoothctl's "scan off" only ends sessions owned by its own D-Bus
        client, so this goes through the management socket instead. That
        needs CAP_NET_ADMIN; without it, or with no inquiry running, the
        connect simply goes ahead.
        """
        if self._btmgmt("stop-find") is None:
            logging.debug("Could not stop discovery, continuing")
            return False
        return True
