"""TCP transport for ZPL printers (raw printing port)."""

import errno
import ipaddress
import logging
import socket
from typing import Optional, Tuple

from .base import BaseTransport
from .errors import CloseFailure, ConfigInvalid, ConnectionFailure, WriteFailure

RAW_PRINTING_PORT = 9100


def parse_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts.

    An IPv6 host needs brackets to carry a port (``[::1]:9100``); an
    unbracketed IPv6 address is taken whole as the host, so ``fe80::1:9100``
    means host ``fe80::1:9100`` on port 9100. Without a port the raw
    printing port 9100 is assumed.
    """
    address = address.strip()
    if not address:
        raise ConfigInvalid("Printer address must not be empty")

    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if not sep:
            raise ConfigInvalid(f"Unterminated IPv6 address: {address}")
        port = rest[1:] if rest.startswith(":") else rest
    elif address.count(":") == 1:
        host, port = address.split(":")
    elif ":" not in address:
        host, port = address, ""
    else:
        try:
            ipaddress.IPv6Address(address)
        except ValueError:
            raise ConfigInvalid(
                f"Invalid address {address}, bracket IPv6 hosts: [host]:port"
            ) from None
        host, port = address, ""

    if not host:
        raise ConfigInvalid(f"Missing host in address: {address}")
    if not port:
        return host, RAW_PRINTING_PORT
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ConfigInvalid(f"Invalid port in address: {address}")
    return host, int(port)


class NetworkTransport(BaseTransport):
    """Raw TCP socket transport."""

    def __init__(self, sock: socket.socket, address: str):
        self._sock = sock
        self.address = address

    @classmethod
    def open(cls, address: str, timeout: Optional[float] = None) -> "NetworkTransport":
        host, port = parse_address(address)
        try:
            sock = socket.create_connection((host, port), timeout=timeout)
        except OSError as e:
            if e.errno == errno.ECONNREFUSED:
                raise ConnectionFailure(
                    f"Connection refused by printer {host}:{port}. "
                    f"Check that raw printing is enabled on that port."
                ) from e
            raise ConnectionFailure(f"Cannot connect to printer {host}:{port}: {e}") from e

        logging.info(f"Connected to printer at {host}:{port}")
        return cls(sock, f"{host}:{port}")

    @property
    def closed(self) -> bool:
        return self._sock is None

    def _write(self, data: bytes) -> None:
        logging.debug(f"write {len(data)} bytes: {data!r}")
        try:
            while data:
                sent = self._sock.send(data)
                if sent == 0:
                    raise WriteFailure(f"Connection to {self.address} broken")
                data = data[sent:]
        except OSError as e:
            raise WriteFailure(f"Write to {self.address} failed: {e}") from e

    def close(self) -> None:
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        try:
            sock.close()
        except OSError as e:
            raise CloseFailure(f"Cannot close connection to {self.address}: {e}") from e
        logging.info(f"Connection to {self.address} closed")
