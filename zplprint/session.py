"""Interactive printer sessions.

The menu-driven session is a small state machine: the user picks a
connection (DISCONNECTED), sends labels over it (CONNECTED), and may drop
back to picking a new connection any number of times before FINISHED.
"""

import enum
import logging
from typing import Callable, Optional, TextIO

import click

from zplprint.transport import (
    BaseTransport,
    NetworkTarget,
    TransportError,
    UsbTarget,
    open_connection,
)

TEST_LABEL = """^XA
^FO50,50^A0N,50,50^FDZebra TLP 2844 Test^FS
^FO50,120^A0N,30,30^FDThis is a test label^FS
^FO50,170^BCN,100,Y,N,N^FD123456789^FS
^XZ"""

EXIT_COMMAND = "exit"


class SessionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    FINISHED = "finished"


def send_lines(transport: BaseTransport, stream: TextIO, echo: Callable = click.echo) -> int:
    """Send each non-empty input line as its own command.

    Stops at end of input or when the line ``exit`` is read. A failed send is
    reported and skipped.

    Returns:
        int: Number of commands sent successfully
    """
    sent = 0
    for line in stream:
        line = line.strip()
        if line == EXIT_COMMAND:
            break
        if not line:
            continue
        try:
            transport.send(line.encode("utf-8"))
        except TransportError as e:
            echo(f"Error sending ZPL: {e}", err=True)
            continue
        sent += 1
    return sent


class PrinterSession:
    """Menu-driven session over stdin, reconnecting without recursion."""

    def __init__(
        self,
        stream: TextIO,
        echo: Callable = click.echo,
        usb_target: UsbTarget = UsbTarget(),
        opener: Optional[Callable] = None,
        **options,
    ):
        self.state = SessionState.DISCONNECTED
        self.transport: Optional[BaseTransport] = None
        self._stream = stream
        self._echo = echo
        self._usb_target = usb_target
        self._opener = opener or open_connection
        self._options = options

    def run(self) -> None:
        self._echo("Zebra TLP 2844 Printer Control")
        self._echo("==============================")
        try:
            while self.state is not SessionState.FINISHED:
                if self.state is SessionState.DISCONNECTED:
                    self._select_connection()
                else:
                    self._select_command()
        finally:
            self._disconnect()

    def _ask(self, prompt: str) -> Optional[str]:
        """Prompt for one line; None at end of input."""
        self._echo(prompt, nl=False)
        line = self._stream.readline()
        if not line:
            self._echo()
            return None
        return line.strip()

    def _finish(self) -> None:
        self._echo("Exiting...")
        self.state = SessionState.FINISHED

    def _connect(self, target) -> None:
        try:
            self.transport = self._opener(target, **self._options)
        except TransportError as e:
            logging.debug(f"Opening {target} failed", exc_info=True)
            self._echo(f"Printer error: {e}", err=True)
            return
        self._echo(f"Connected to {target}")
        self.state = SessionState.CONNECTED

    def _disconnect(self) -> None:
        if self.transport is None:
            return
        transport, self.transport = self.transport, None
        try:
            transport.close()
        except TransportError as e:
            self._echo(f"Error closing printer connection: {e}", err=True)

    def _select_connection(self) -> None:
        self._echo("\nSelect connection type:")
        self._echo("1. USB")
        self._echo("2. Network (TCP)")
        self._echo("3. Exit")
        choice = self._ask("Enter choice: ")

        if choice is None or choice == "3":
            self._finish()
        elif choice == "1":
            self._connect(self._usb_target)
        elif choice == "2":
            address = self._ask("Enter printer IP address (e.g., 192.168.1.100:9100): ")
            if address is None:
                self._finish()
                return
            self._connect(NetworkTarget(address))
        else:
            self._echo("Invalid choice, please try again")

    def _select_command(self) -> None:
        self._echo("\nOptions:")
        self._echo("1. Send test label")
        self._echo("2. Enter custom ZPL")
        self._echo("3. Change printer connection")
        self._echo("4. Exit")
        choice = self._ask("Enter choice: ")

        if choice is None or choice == "4":
            self._finish()
        elif choice == "1":
            self._send(TEST_LABEL, "Test label sent successfully")
        elif choice == "2":
            zpl = self._read_block()
            if zpl:
                self._send(zpl, "ZPL sent successfully")
        elif choice == "3":
            self._disconnect()
            self.state = SessionState.DISCONNECTED
        else:
            self._echo("Invalid choice, please try again")

    def _read_block(self) -> str:
        """Read ZPL lines up to the first blank line or end of input."""
        self._echo("Enter ZPL commands (end with blank line):")
        lines = []
        for line in iter(self._stream.readline, ""):
            if not line.strip():
                break
            lines.append(line)
        return "".join(lines)

    def _send(self, zpl: str, success_message: str) -> None:
        try:
            self.transport.send(zpl.encode("utf-8"))
        except TransportError as e:
            self._echo(f"Error sending ZPL: {e}", err=True)
        else:
            self._echo(success_message)
