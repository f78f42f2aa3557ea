"""Exceptions raised by the service clients."""


class ConnectionFailed(IOError):
    """The remote service could not be reached at the transport level."""
