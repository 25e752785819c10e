"""Server exceptions."""


class ServerError(Exception):
    """Base exception for the packet server."""


class ProtocolError(ServerError):
    """Raised when a packet buffer cannot be decoded."""


class HandlerFault(ServerError):
    """Raised when a handler cannot build its response."""
