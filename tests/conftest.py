import socket

import pytest

from fakes import FakeUsbContext, SinkServer


@pytest.fixture
def usb_context():
    """A fake USB context and a factory returning it."""
    context = FakeUsbContext()
    return context, lambda: context


@pytest.fixture
def sink_server():
    return SinkServer()


@pytest.fixture
def unreachable_address():
    """Address of a loopback port nobody listens on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return f"127.0.0.1:{port}"
