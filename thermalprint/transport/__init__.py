"""Transport layer for thermal printers.

This module provides different transport implementations that can be dynamically
imported based on the connection type selected by the user.
"""

from .base import BaseTransport

__all__ = ["BaseTransport", "get_transport", "TRANSPORT_TYPES"]

TRANSPORT_TYPES = ("bluetooth", "serial")


def get_transport(transport_type: str, **kwargs):
    """Dynamically import and create a transport instance based on type.

    Args:
        transport_type: One of 'bluetooth', 'serial'
        **kwargs: Arguments to pass to the transport constructor

    Returns:
        Transport instance

    Raises:
        ImportError: If the transport's dependencies are missing
        ValueError: If transport_type is unknown
    """
    if transport_type == "bluetooth":
        from .bluetooth import BluetoothTransport
        return BluetoothTransport(**kwargs)
    elif transport_type == "serial":
        from .serial import SerialTransport
        return SerialTransport(**kwargs)
    else:
        raise ValueError(f"Unknown transport type: {transport_type}")
