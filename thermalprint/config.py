"""Connection settings shared by the CLI and the method bridge."""

from dataclasses import dataclass

from thermalprint.commands import DEFAULT_ENCODING
from thermalprint.transport.bluetooth import DEFAULT_CHANNEL

ENV_PREFIX = "THERMALPRINT_"


@dataclass
class Settings:
    conn: str = "bluetooth"
    channel: int = DEFAULT_CHANNEL
    connect_timeout: float = 10.0
    encoding: str = DEFAULT_ENCODING
    baudrate: int = 9600

    def transport_kwargs(self, address: str) -> dict:
        """Constructor arguments for ``get_transport(self.conn, ...)``."""
        if self.conn == "serial":
            return {
                "address": address,
                "baudrate": self.baudrate,
                "timeout": self.connect_timeout,
            }
        return {
            "address": address,
            "channel": self.channel,
            "timeout": self.connect_timeout,
        }
