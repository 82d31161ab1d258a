"""Transport layer for ZPL printers.

This module provides different transport implementations that are imported
lazily based on the connection target selected by the user, so e.g. PyUSB is
only needed when a USB printer is opened.
"""

from .base import BaseTransport, frame
from .errors import (
    ClaimFailure,
    CloseFailure,
    ConfigInvalid,
    ConnectionFailure,
    DeviceNotFound,
    EndpointNotFound,
    TransportError,
    WriteFailure,
)
from .targets import ConnectionTarget, NetworkTarget, SerialTarget, UsbTarget

__all__ = [
    "BaseTransport",
    "ClaimFailure",
    "CloseFailure",
    "ConfigInvalid",
    "ConnectionFailure",
    "ConnectionTarget",
    "DeviceNotFound",
    "EndpointNotFound",
    "NetworkTarget",
    "SerialTarget",
    "TransportError",
    "UsbTarget",
    "WriteFailure",
    "frame",
    "open_connection",
]


def open_connection(target: ConnectionTarget, **options) -> BaseTransport:
    """Open the transport matching the target's type.

    Args:
        target: A UsbTarget, NetworkTarget or SerialTarget
        **options: Passed to the backend's ``open`` (``timeout`` for all of
            them, ``platform`` and ``context_factory`` for USB)

    Returns:
        An open transport

    Raises:
        TransportError: Whatever the backend raised while opening
        ConfigInvalid: If the target type is unknown
    """
    if isinstance(target, UsbTarget):
        from .usb import UsbTransport
        return UsbTransport.open(target.vendor_id, target.product_id, **options)
    elif isinstance(target, NetworkTarget):
        from .network import NetworkTransport
        return NetworkTransport.open(target.address, **options)
    elif isinstance(target, SerialTarget):
        from .serial import SerialTransport
        return SerialTransport.open(target.port_name, target.baud_rate, **options)
    else:
        raise ConfigInvalid(f"Unknown connection target: {target!r}")
