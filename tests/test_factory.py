import pytest

import zplprint.transport.serial as serial_mod
from fakes import FakeUsbContext
from zplprint.transport import (
    ConfigInvalid,
    ConnectionFailure,
    DeviceNotFound,
    NetworkTarget,
    SerialTarget,
    UsbTarget,
    open_connection,
)
from zplprint.transport.network import NetworkTransport
from zplprint.transport.serial import SerialTransport
from zplprint.transport.usb import UsbTransport


def test_targets_are_immutable():
    target = SerialTarget("COM3")
    with pytest.raises(AttributeError):
        target.port_name = "COM4"


def test_target_defaults():
    assert UsbTarget() == UsbTarget(0x0A5F, 0x00D4)
    assert SerialTarget("COM3").baud_rate == 9600


def test_usb_target_opens_usb_transport(usb_context):
    context, factory = usb_context
    t = open_connection(UsbTarget(), platform="linux", context_factory=factory)

    assert isinstance(t, UsbTransport)
    t.send(b"^XA^FS^XZ")
    t.close()
    assert context.endpoints[1].writes == [b"^XA^FS^XZ\n"]
    assert context.balanced


def test_usb_target_passes_ids(usb_context):
    context = FakeUsbContext(devices={(0x1234, 0x5678): "other"})

    t = open_connection(UsbTarget(0x1234, 0x5678), context_factory=lambda: context)

    assert isinstance(t, UsbTransport)


def test_usb_not_found_then_valid_target_succeeds():
    with pytest.raises(DeviceNotFound):
        open_connection(
            UsbTarget(0x1234, 0x5678), context_factory=lambda: FakeUsbContext()
        )

    context = FakeUsbContext()
    t = open_connection(UsbTarget(), platform="linux", context_factory=lambda: context)
    t.close()
    assert context.balanced


def test_network_target_opens_network_transport(sink_server):
    t = open_connection(NetworkTarget(sink_server.address), timeout=5)

    assert isinstance(t, NetworkTransport)
    t.send(b"^XA^FS^XZ")
    t.close()
    assert sink_server.wait() == b"^XA^FS^XZ\n"


def test_network_target_unreachable(unreachable_address):
    with pytest.raises(ConnectionFailure):
        open_connection(NetworkTarget(unreachable_address), timeout=5)


def test_serial_target_opens_serial_transport(monkeypatch):
    seen = {}

    class FakeSerial:
        def __init__(self, **kwargs):
            seen.update(kwargs)
            self.written = b""

        def write(self, data):
            self.written += bytes(data)
            return len(data)

        def flush(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(serial_mod.serial, "Serial", FakeSerial)

    t = open_connection(SerialTarget("COM3", 115200))

    assert isinstance(t, SerialTransport)
    assert seen["port"] == "COM3"
    assert seen["baudrate"] == 115200
    t.send(b"^XA^FS^XZ")
    assert t._serial.written == b"^XA^FS^XZ\n"


def test_serial_target_empty_port_touches_nothing(monkeypatch):
    monkeypatch.setattr(
        serial_mod.serial, "Serial", lambda **k: pytest.fail("port opened")
    )

    with pytest.raises(ConfigInvalid):
        open_connection(SerialTarget(""))


def test_unknown_target_is_config_invalid():
    with pytest.raises(ConfigInvalid):
        open_connection("192.168.1.100:9100")
