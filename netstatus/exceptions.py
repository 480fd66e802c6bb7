"""Exception hierarchy for network status reporting."""


class NetStatusError(Exception):
    """Base exception for all netstatus errors."""


class TransportError(NetStatusError):
    """Opening, sending on or receiving from the rtnetlink socket failed."""

    def __init__(self, message: str, errno: int | None = None):
        self.errno = errno
        super().__init__(message)


class ProtocolDecodeError(NetStatusError):
    """A kernel message is malformed or lacks a required attribute."""


class LldpDecodeError(NetStatusError):
    """A captured frame is not a valid LLDPDU."""


class InterfaceNotFoundError(NetStatusError):
    """The requested interface does not exist."""
