"""Bluetooth RFCOMM control of ESC/POS thermal printers."""

from thermalprint.bridge import MethodBridge
from thermalprint.commands import COMMANDS, encode_text, parse_directive, raw_bytes
from thermalprint.config import Settings
from thermalprint.connection import ConnectionManager, ConnectionStatus

__all__ = [
    "COMMANDS",
    "ConnectionManager",
    "ConnectionStatus",
    "MethodBridge",
    "Settings",
    "encode_text",
    "parse_directive",
    "raw_bytes",
]
