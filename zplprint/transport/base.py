"""Base transport class for ZPL printers."""

import abc

from .errors import WriteFailure

LINE_FEED = b"\n"


def frame(data: bytes) -> bytes:
    """Return `data` terminated by exactly one trailing line feed.

    A payload that already ends with a line feed is returned unchanged. The
    caller's buffer is never modified.
    """
    data = bytes(data)
    if data.endswith(LINE_FEED):
        return data
    return data + LINE_FEED


class BaseTransport(metaclass=abc.ABCMeta):
    """Abstract base class for all transport implementations.

    A transport is created fully connected by its backend's ``open``
    classmethod and owns its underlying OS handles until ``close``.
    """

    def send(self, data: bytes) -> None:
        """Frame and transmit one command.

        Args:
            data: Raw command bytes

        Raises:
            WriteFailure: If the transport is closed or the write fails
        """
        if self.closed:
            raise WriteFailure("Transport is closed")
        self._write(frame(data))

    @abc.abstractmethod
    def _write(self, data: bytes) -> None:
        """Write already framed data to the transport."""
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> None:
        """Release every resource owned by the transport.

        Calling it again after the first call does nothing.
        """
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def closed(self) -> bool:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
