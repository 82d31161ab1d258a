import pytest

from zplprint.transport import BaseTransport, WriteFailure, frame


class RecordingTransport(BaseTransport):
    def __init__(self):
        self.written = []
        self._closed = False

    @property
    def closed(self):
        return self._closed

    def _write(self, data):
        self.written.append(data)

    def close(self):
        self._closed = True


@pytest.mark.parametrize(
    "payload, expected",
    [
        (b"^XA^FS^XZ", b"^XA^FS^XZ\n"),
        (b"^XA^FS^XZ\n", b"^XA^FS^XZ\n"),
        (b"^XA\r\n", b"^XA\r\n"),
        (b"^XA\n\n", b"^XA\n\n"),
        (b"^XA\r", b"^XA\r\n"),
        (b"", b"\n"),
    ],
)
def test_frame(payload, expected):
    assert frame(payload) == expected


def test_frame_leaves_caller_buffer_untouched():
    payload = bytearray(b"^XA^XZ")
    framed = frame(payload)

    assert payload == bytearray(b"^XA^XZ")
    assert framed == b"^XA^XZ\n"
    assert isinstance(framed, bytes)


def test_send_frames_before_writing():
    t = RecordingTransport()
    t.send(b"^XA^FS^XZ")
    t.send(b"^XA^FS^XZ\n")

    assert t.written == [b"^XA^FS^XZ\n", b"^XA^FS^XZ\n"]


def test_send_on_closed_transport_raises():
    t = RecordingTransport()
    t.close()

    with pytest.raises(WriteFailure):
        t.send(b"^XA^XZ")
    assert t.written == []


def test_context_manager_closes_on_error():
    with pytest.raises(RuntimeError):
        with RecordingTransport() as t:
            raise RuntimeError("boom")

    assert t.closed
