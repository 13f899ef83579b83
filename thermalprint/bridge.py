"""Method-call bridge between a host application and the connection manager.

Results keep the wire convention existing callers depend on: yes/no answers
are the strings ``"true"`` and ``"false"``, never booleans.
"""

import json
import logging
import platform
from pathlib import Path

from thermalprint.connection import ConnectionManager
from thermalprint.errors import (
    InvalidArgumentsError,
    MethodCallError,
    NotImplementedMethodError,
    UnavailableError,
)

POWER_SUPPLY_DIR = Path("/sys/class/power_supply")


def _wire_bool(value: bool) -> str:
    return "true" if value else "false"


def get_platform_version() -> str:
    return f"{platform.system()} {platform.release()}"


def get_battery_level(power_supply_dir: Path = POWER_SUPPLY_DIR) -> int:
    """Charge of the first battery, in percent.

    Raises:
        UnavailableError: If no battery reports its capacity
    """
    for supply in sorted(power_supply_dir.glob("*")):
        try:
            if (supply / "type").read_text().strip() != "Battery":
                continue
            return int((supply / "capacity").read_text().strip())
        except (OSError, ValueError) as e:
            logging.debug(f"Skipping power supply {supply.name}: {e}")
    raise UnavailableError("Battery level not available.")


class MethodBridge:
    """Dispatches named method calls, one handler per method."""

    def __init__(self, manager: ConnectionManager):
        self.manager = manager
        self._handlers = {
            "getPlatformVersion": self._platform_version,
            "getBatteryLevel": self._battery_level,
            "BluetoothStatus": self._bluetooth_status,
            "connectionStatus": self._connection_status,
            "connectPrinter": self._connect_printer,
            "disconnectPrinter": self._disconnect_printer,
            "writeBytes": self._write_bytes,
            "printText": self._print_text,
            "bluetothLinked": self._linked_devices,
        }

    @property
    def methods(self):
        return list(self._handlers)

    def handle(self, method: str, arguments=None):
        """Run ``method`` and return its wire result.

        Raises:
            MethodCallError: For permission, argument and availability errors
                and for unknown methods
        """
        handler = self._handlers.get(method)
        if handler is None:
            raise NotImplementedMethodError(f"Method {method!r} not implemented")
        logging.debug(f"method call {method}")
        return handler(arguments)

    def _platform_version(self, arguments):
        return get_platform_version()

    def _battery_level(self, arguments):
        return get_battery_level()

    def _bluetooth_status(self, arguments):
        return _wire_bool(self.manager.is_adapter_enabled())

    def _connection_status(self, arguments):
        return _wire_bool(self.manager.probe())

    def _connect_printer(self, arguments):
        address = "" if arguments is None else str(arguments)
        # The connect runs on the manager's worker; PermissionDeniedError
        # is re-raised here by result()
        status = self.manager.connect_async(address).result()
        return _wire_bool(status.ok)

    def _disconnect_printer(self, arguments):
        return _wire_bool(self.manager.disconnect_async().result())

    def _write_bytes(self, arguments):
        if not isinstance(arguments, (list, tuple)) or not all(
            isinstance(v, int) and not isinstance(v, bool) for v in arguments
        ):
            raise InvalidArgumentsError("Invalid byte array")
        return _wire_bool(self.manager.write_raw(arguments))

    def _print_text(self, arguments):
        return _wire_bool(self.manager.print_text(str(arguments)))

    def _linked_devices(self, arguments):
        return [str(device) for device in self.manager.list_paired_devices()]


def _respond(request_id, bridge: MethodBridge, request) -> dict:
    if not isinstance(request, dict) or not isinstance(request.get("method"), str):
        raise InvalidArgumentsError("Request must be an object with a 'method'")
    return {
        "id": request_id,
        "result": bridge.handle(request["method"], request.get("arguments")),
    }


def serve(bridge: MethodBridge, infile, outfile):
    """Answer line-delimited JSON requests until ``infile`` is exhausted.

    Each request is ``{"id": ..., "method": ..., "arguments": ...}``; the
    response carries the same id and either ``result`` or ``error``.
    """
    for line in infile:
        if not line.strip():
            continue
        request_id = None
        try:
            request = json.loads(line)
            if isinstance(request, dict):
                request_id = request.get("id")
            response = _respond(request_id, bridge, request)
        except json.JSONDecodeError as e:
            response = {
                "id": None,
                "error": InvalidArgumentsError(f"Malformed request: {e}").to_dict(),
            }
        except MethodCallError as e:
            logging.info(f"{e.code}: {e.message}")
            response = {"id": request_id, "error": e.to_dict()}
        except Exception as e:
            logging.exception(f"Request {request_id} failed")
            response = {"id": request_id, "error": MethodCallError(str(e)).to_dict()}
        outfile.write(json.dumps(response) + "\n")
        outfile.flush()
