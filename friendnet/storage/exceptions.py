"""Exceptions raised by table storage."""


class StorageError(RuntimeError):
    """Base class for table storage failures."""


class NoSuchTable(StorageError):
    """A table was requested that does not exist."""


class NoSuchEntity(StorageError):
    """An entity was requested that does not exist."""


class AuthorizationFailure(StorageError):
    """
    An access token does not grant the requested operation.

    Raised for a malformed, forged or expired token, and for a token that was
    issued for a different table, partition or row, or with weaker
    permissions than the operation needs.
    """
