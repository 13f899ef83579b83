"""Ownership of the single printer connection."""

import enum
import errno
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional

from thermalprint.adapter import BluetoothAdapter, PairedDevice
from thermalprint.commands import encode_text, raw_bytes
from thermalprint.config import Settings
from thermalprint.errors import (
    NotConnectedError,
    PermissionDeniedError,
    TransportError,
)
from thermalprint.transport import BaseTransport, get_transport

PROBE_PAYLOAD = b" "
DISCONNECTED_MESSAGE = "Device was disconnected, reconnect"


class ConnectionStatus(enum.Enum):
    CONNECTED = "connected"
    ALREADY_CONNECTED = "already_connected"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is not ConnectionStatus.FAILED


def _log_notification(message: str):
    logging.warning(message)


class ConnectionManager:
    """Holds at most one open transport and every transition of it.

    The manager starts empty, holds a transport after a successful
    :meth:`connect` and is emptied again by :meth:`disconnect` or by the
    first failed write. State changes happen under one lock, and the
    ``*_async`` variants run on a single worker thread so only one
    connect or disconnect is ever in flight.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        adapter: Optional[BluetoothAdapter] = None,
        transport_factory: Callable[..., BaseTransport] = get_transport,
        notify: Callable[[str], None] = _log_notification,
    ):
        self.settings = settings or Settings()
        self.adapter = adapter or BluetoothAdapter()
        self.last_error: Optional[Exception] = None
        self._transport_factory = transport_factory
        self._notify = notify
        self._transport: Optional[BaseTransport] = None
        self._address: Optional[str] = None
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="thermalprint-connection"
        )

    @property
    def is_connected(self) -> bool:
        """Last known state; use :meth:`probe` to check the link itself."""
        return self._transport is not None

    @property
    def address(self) -> Optional[str]:
        return self._address

    def is_adapter_enabled(self) -> bool:
        return self.adapter.is_enabled()

    def list_paired_devices(self) -> List[PairedDevice]:
        return self.adapter.paired_devices()

    def connect(self, address: str) -> ConnectionStatus:
        """Open a connection to ``address`` unless one is already open.

        Raises:
            PermissionDeniedError: If the process may not use Bluetooth
        """
        if not address:
            logging.error("No printer address given")
            return ConnectionStatus.FAILED

        with self._lock:
            if self._transport is not None:
                logging.info(f"Already connected to {self._address}")
                return ConnectionStatus.ALREADY_CONNECTED

            if self.settings.conn == "bluetooth":
                if not self.adapter.is_enabled():
                    logging.error("Bluetooth adapter not enabled")
                    self.last_error = TransportError("Bluetooth adapter not enabled")
                    return ConnectionStatus.FAILED
                self.adapter.cancel_discovery()

            try:
                transport = self._transport_factory(
                    self.settings.conn, **self.settings.transport_kwargs(address)
                )
            except PermissionDeniedError:
                raise
            except Exception as e:
                if isinstance(e, OSError) and e.errno in (errno.EACCES, errno.EPERM):
                    raise PermissionDeniedError(
                        "Bluetooth permissions not granted", details=str(e)
                    ) from e
                logging.error(f"Connection failed: {e}")
                self.last_error = e
                return ConnectionStatus.FAILED

            self._transport = transport
            self._address = address
            self.last_error = None
            return ConnectionStatus.CONNECTED

    def disconnect(self) -> bool:
        """Close the connection. Returns False only if closing it failed."""
        with self._lock:
            transport, self._transport = self._transport, None
            self._address = None
            if transport is None:
                return True
            try:
                transport.close()
            except OSError as e:
                logging.error(f"Error during disconnection: {e}")
                self.last_error = e
                return False
            logging.debug("Disconnected successfully")
            return True

    def probe(self) -> bool:
        """Check the link by writing a single space through it."""
        return self.write(PROBE_PAYLOAD)

    def write(self, data: bytes) -> bool:
        with self._lock:
            if self._transport is None:
                self.last_error = NotConnectedError("No printer connected")
                return False
            try:
                self._transport.write(data)
            except OSError as e:
                self._collapse(e)
                return False
            return True

    def write_raw(self, values: Iterable[int]) -> bool:
        return self.write(raw_bytes(values))

    def print_text(self, directive: str) -> bool:
        return self.write(encode_text(directive, self.settings.encoding))

    def _collapse(self, error: OSError):
        """Drop a transport whose write failed. Caller holds the lock."""
        logging.warning(f"Lost connection to {self._address}: {error}")
        self.last_error = TransportError(str(error))
        self.last_error.__cause__ = error
        transport, self._transport = self._transport, None
        self._address = None
        try:
            transport.close()
        except OSError as e:
            logging.debug(f"Ignoring error closing dead transport: {e}")
        self._notify(DISCONNECTED_MESSAGE)

    def connect_async(self, address: str) -> "Future[ConnectionStatus]":
        return self._executor.submit(self.connect, address)

    def disconnect_async(self) -> "Future[bool]":
        return self._executor.submit(self.disconnect)

    def close(self):
        """Disconnect and stop the worker thread."""
        self._executor.shutdown(wait=True)
        self.disconnect()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
