"""Exceptions raised by the transport layer."""


class TransportError(Exception):
    """Base class for all transport failures."""


class DeviceNotFound(TransportError):
    """No attached USB device matches the requested vendor/product id."""


class ClaimFailure(TransportError):
    """The USB interface could not be claimed (or its kernel driver detached)."""


class EndpointNotFound(TransportError):
    """The claimed USB interface has no OUT endpoint."""


class ConnectionFailure(TransportError, ConnectionError):
    """The transport could not be opened."""


class ConfigInvalid(TransportError):
    """The connection target is malformed; no hardware was touched."""


class WriteFailure(TransportError):
    """Sending a command failed; nothing is retried."""


class CloseFailure(TransportError):
    """Releasing an underlying resource failed."""
