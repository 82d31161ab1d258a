"""USB bulk transport for ZPL printers, using PyUSB over libusb."""

import contextlib
import logging
import sys
from typing import Optional

import usb.backend.libusb1
import usb.core
import usb.util

from .base import BaseTransport
from .errors import (
    ClaimFailure,
    CloseFailure,
    ConnectionFailure,
    DeviceNotFound,
    EndpointNotFound,
    WriteFailure,
)
from .targets import TLP2844_PRODUCT_ID, ZEBRA_VENDOR_ID

DEFAULT_INTERFACE = 0


def should_auto_detach(platform: str) -> bool:
    """Whether the OS binds a kernel driver that must be detached before claiming.

    Only Linux attaches usblp (or similar) to printers by default.
    """
    return platform.startswith("linux")


class UsbContext:
    """Thin wrapper over a libusb context as exposed by PyUSB.

    Every acquiring method has a matching release method so that
    UsbTransport can unwind a partial open. All failures surface as
    usb.core.USBError.
    """

    def __init__(self):
        self._backend = usb.backend.libusb1.get_backend()
        if self._backend is None:
            raise ConnectionFailure(
                "libusb backend not available. Install libusb-1.0 for your platform."
            )

    def close(self):
        """Drop the backend reference; PyUSB's libusb1 backend is process-wide, so nothing is freed here."""
        self._backend = None

    def open_device(self, vendor_id: int, product_id: int):
        return usb.core.find(
            idVendor=vendor_id, idProduct=product_id, backend=self._backend
        )

    def close_device(self, device):
        usb.util.dispose_resources(device)

    def detach_kernel_driver(self, device, interface_number: int) -> bool:
        """Detach an active kernel driver. Returns whether one was detached."""
        if device.is_kernel_driver_active(interface_number):
            device.detach_kernel_driver(interface_number)
            return True
        return False

    def attach_kernel_driver(self, device, interface_number: int):
        device.attach_kernel_driver(interface_number)

    def claim_interface(self, device, interface_number: int):
        try:
            config = device.get_active_configuration()
        except usb.core.USBError:
            # Unconfigured device
            device.set_configuration()
            config = device.get_active_configuration()
        interface = config[(interface_number, 0)]
        usb.util.claim_interface(device, interface.bInterfaceNumber)
        return interface

    def release_interface(self, device, interface):
        usb.util.release_interface(device, interface.bInterfaceNumber)


def find_out_endpoint(interface):
    """Return the first OUT endpoint of the interface, or None."""
    for endpoint in interface:
        direction = usb.util.endpoint_direction(endpoint.bEndpointAddress)
        if direction == usb.util.ENDPOINT_OUT:
            return endpoint
    return None


def _unwind(stack: contextlib.ExitStack, device_id: str) -> None:
    """Release a partially opened device, keeping the open error as the one raised."""
    try:
        stack.close()
    except usb.core.USBError as e:
        logging.warning(f"Error releasing USB device {device_id} after failed open: {e}")


class UsbTransport(BaseTransport):
    """Writes commands to the printer's bulk OUT endpoint.

    The transport owns a chain of release callbacks (interface, kernel
    driver, device, context) built while opening. Closing runs the chain
    once in reverse acquisition order.
    """

    def __init__(self, endpoint, resources: contextlib.ExitStack, timeout: Optional[float] = None):
        self._endpoint = endpoint
        self._resources = resources
        self._timeout = timeout

    @classmethod
    def open(
        cls,
        vendor_id: int = ZEBRA_VENDOR_ID,
        product_id: int = TLP2844_PRODUCT_ID,
        timeout: Optional[float] = None,
        platform: str = sys.platform,
        context_factory=UsbContext,
    ) -> "UsbTransport":
        device_id = f"{vendor_id:04x}:{product_id:04x}"

        stack = contextlib.ExitStack()
        try:
            context = context_factory()
            stack.callback(context.close)

            try:
                device = context.open_device(vendor_id, product_id)
            except usb.core.USBError as e:
                raise ConnectionFailure(f"Failed to open USB device {device_id}: {e}") from e
            if device is None:
                raise DeviceNotFound(f"USB printer {device_id} not found")
            stack.callback(context.close_device, device)

            if should_auto_detach(platform):
                try:
                    detached = context.detach_kernel_driver(device, DEFAULT_INTERFACE)
                except usb.core.USBError as e:
                    raise ClaimFailure(
                        f"Failed to detach kernel driver from {device_id}: {e}"
                    ) from e
                if detached:
                    logging.debug(f"Detached kernel driver from {device_id}")
                    stack.callback(context.attach_kernel_driver, device, DEFAULT_INTERFACE)

            try:
                interface = context.claim_interface(device, DEFAULT_INTERFACE)
            except (usb.core.USBError, KeyError, IndexError) as e:
                raise ClaimFailure(f"Failed to claim interface of {device_id}: {e}") from e
            stack.callback(context.release_interface, device, interface)

            endpoint = find_out_endpoint(interface)
            if endpoint is None:
                raise EndpointNotFound(f"No OUT endpoint found on {device_id}")

            logging.info(
                f"Connected to USB printer {device_id}, "
                f"endpoint 0x{endpoint.bEndpointAddress:02x}"
            )
            return cls(endpoint, stack, timeout)
        except BaseException:
            _unwind(stack, device_id)
            raise

    @property
    def closed(self) -> bool:
        return self._endpoint is None

    def _write(self, data: bytes) -> None:
        logging.debug(f"write {len(data)} bytes: {data!r}")
        # libusb treats 0 as no timeout
        timeout_ms = 0 if self._timeout is None else int(self._timeout * 1000)
        try:
            written = self._endpoint.write(data, timeout_ms)
        except usb.core.USBError as e:
            raise WriteFailure(f"USB bulk transfer failed: {e}") from e
        if written != len(data):
            raise WriteFailure(f"USB bulk transfer short: {written} of {len(data)} bytes")

    def close(self) -> None:
        if self._endpoint is None:
            return
        self._endpoint = None
        try:
            self._resources.close()
        except usb.core.USBError as e:
            raise CloseFailure(f"Failed to release USB resources: {e}") from e
        logging.info("USB connection closed")
