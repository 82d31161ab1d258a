"""Connection targets, one per transport type."""

from dataclasses import dataclass
from typing import Union

ZEBRA_VENDOR_ID = 0x0A5F
TLP2844_PRODUCT_ID = 0x00D4

DEFAULT_BAUD_RATE = 9600


@dataclass(frozen=True)
class UsbTarget:
    vendor_id: int = ZEBRA_VENDOR_ID
    product_id: int = TLP2844_PRODUCT_ID

    def __str__(self):
        return f"USB {self.vendor_id:04x}:{self.product_id:04x}"


@dataclass(frozen=True)
class NetworkTarget:
    address: str

    def __str__(self):
        return f"network {self.address}"


@dataclass(frozen=True)
class SerialTarget:
    port_name: str
    baud_rate: int = DEFAULT_BAUD_RATE

    def __str__(self):
        return f"serial {self.port_name} @ {self.baud_rate} baud"


ConnectionTarget = Union[UsbTarget, NetworkTarget, SerialTarget]
