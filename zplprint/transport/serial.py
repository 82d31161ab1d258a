"""Serial transport for ZPL printers."""

import logging
from typing import Optional

import serial
from serial.tools.list_ports import comports as list_comports

from .base import BaseTransport
from .errors import CloseFailure, ConfigInvalid, ConnectionFailure, WriteFailure
from .targets import DEFAULT_BAUD_RATE


class SerialTransport(BaseTransport):
    """Serial port transport, 8 data bits, no parity, one stop bit."""

    def __init__(self, port: serial.Serial):
        self._serial = port

    @classmethod
    def open(
        cls,
        port_name: str,
        baud_rate: int = DEFAULT_BAUD_RATE,
        timeout: Optional[float] = None,
    ) -> "SerialTransport":
        if not port_name:
            raise ConfigInvalid("Serial port name must not be empty")
        if port_name == "auto":
            port_name = cls._detect_port()

        try:
            port = serial.Serial(
                port=port_name,
                baudrate=baud_rate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                write_timeout=timeout,
            )
        except (serial.SerialException, ValueError) as e:
            raise ConnectionFailure(
                f"Cannot open serial port {port_name} at {baud_rate} baud: {e}"
            ) from e

        logging.info(f"Opened serial port {port_name} at {baud_rate} baud")
        return cls(port)

    @staticmethod
    def _detect_port():
        all_ports = list(list_comports())
        if len(all_ports) == 0:
            raise ConfigInvalid("No serial ports detected")
        if len(all_ports) > 1:
            msg = "Too many serial ports, please select specific one:"
            for port, desc, hwid in all_ports:
                msg += f"\n- {port} : {desc} [{hwid}]"
            raise ConfigInvalid(msg)
        return all_ports[0][0]

    @property
    def closed(self) -> bool:
        return self._serial is None

    def _write(self, data: bytes) -> None:
        logging.debug(f"write {len(data)} bytes: {data!r}")
        try:
            while data:
                written = self._serial.write(data)
                if not written:
                    raise WriteFailure(
                        f"Serial port accepted no data, {len(data)} bytes unsent"
                    )
                data = data[written:]
            self._serial.flush()
        except (serial.SerialException, OSError) as e:
            raise WriteFailure(f"Serial write failed: {e}") from e

    def close(self) -> None:
        if self._serial is None:
            return
        port, self._serial = self._serial, None
        try:
            port.close()
        except (serial.SerialException, OSError) as e:
            raise CloseFailure(f"Cannot close serial port: {e}") from e
        logging.info("Serial port closed")
