import logging

import click

from zplprint.session import PrinterSession, send_lines
from zplprint.transport import (
    NetworkTarget,
    SerialTarget,
    TransportError,
    UsbTarget,
    open_connection,
)
from zplprint.transport.targets import (
    DEFAULT_BAUD_RATE,
    TLP2844_PRODUCT_ID,
    ZEBRA_VENDOR_ID,
)


class UsbIdType(click.ParamType):
    """USB vendor/product id given in hex (0x0a5f, 0a5f) or decimal."""

    name = "usb_id"

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        text = value.strip().lower()
        try:
            if text.startswith("0x"):
                number = int(text, 16)
            elif text.isdigit():
                number = int(text)
            else:
                number = int(text, 16)
        except ValueError:
            self.fail(f"{value!r} is not a valid USB id", param, ctx)
        if not 0 <= number <= 0xFFFF:
            self.fail(f"{value!r} is out of range for a USB id", param, ctx)
        return number


@click.command("zplprint")
@click.option(
    "-c",
    "--conn",
    type=click.Choice(["usb", "network", "serial"]),
    help="Connection type (implied by --addr or --port)",
)
@click.option(
    "-a",
    "--addr",
    help="Network printer address, host:port",
)
@click.option(
    "-p",
    "--port",
    "-port",
    help="Serial port name, or 'auto' to detect it",
)
@click.option(
    "-b",
    "--baud",
    "-baud",
    type=click.IntRange(min=1),
    default=DEFAULT_BAUD_RATE,
    show_default=True,
    help="Serial baud rate",
)
@click.option(
    "--vid",
    type=UsbIdType(),
    default=ZEBRA_VENDOR_ID,
    show_default="0x0a5f",
    help="USB vendor id",
)
@click.option(
    "--pid",
    type=UsbIdType(),
    default=TLP2844_PRODUCT_ID,
    show_default="0x00d4",
    help="USB product id",
)
@click.option(
    "-f",
    "--file",
    "-file",
    "zpl_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Send the content of this ZPL file",
)
@click.option(
    "-z",
    "--zpl",
    "-zpl",
    help="Send this ZPL text",
)
@click.option(
    "-t",
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    help="I/O timeout in seconds (default: wait forever)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging",
)
def print_cmd(conn, addr, port, baud, vid, pid, zpl_file, zpl, timeout, verbose):
    """Send ZPL to a label printer over USB, TCP or a serial port.

    Without a connection option an interactive menu is started.
    """
    logging.basicConfig(
        level="DEBUG" if verbose else "INFO",
        format="%(asctime)s.%(msecs)03d | %(levelname)s | %(module)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%H:%M:%S",
    )

    if conn is None:
        if port is not None:
            conn = "serial"
        elif addr is not None:
            conn = "network"

    stdin = click.get_text_stream("stdin")

    if conn is None:
        if zpl_file is not None or zpl is not None:
            raise click.UsageError("--zpl/--file need a target (--port, --addr or --conn)")
        session = PrinterSession(stdin, usb_target=UsbTarget(vid, pid), timeout=timeout)
        session.run()
        return

    if conn == "usb":
        target = UsbTarget(vid, pid)
    elif conn == "network":
        if addr is None:
            raise click.UsageError("--addr is required for a network connection")
        target = NetworkTarget(addr)
    else:
        if port is None:
            raise click.UsageError("--port is required for a serial connection")
        target = SerialTarget(port, baud)

    payload = None
    if zpl_file is not None:
        try:
            with open(zpl_file, "rb") as f:
                payload = f.read()
        except OSError as e:
            raise click.ClickException(f"Cannot read {zpl_file}: {e}")
    elif zpl is not None:
        payload = zpl.encode("utf-8")

    try:
        transport = open_connection(target, timeout=timeout)
    except TransportError as e:
        raise click.ClickException(f"Cannot open {target}: {e}")
    click.echo(f"Connected to {target}")

    with transport:
        if payload is not None:
            try:
                transport.send(payload)
            except TransportError as e:
                raise click.ClickException(f"Error sending ZPL: {e}")
            click.echo("ZPL sent successfully")
        else:
            click.echo("Enter ZPL commands, one per line ('exit' to quit):")
            sent = send_lines(transport, stdin)
            logging.info(f"Sent {sent} commands")


if __name__ == "__main__":
    print_cmd()
