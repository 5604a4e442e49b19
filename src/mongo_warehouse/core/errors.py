"""Exceptions raised by the warehouse connection helpers."""

from __future__ import annotations


class WarehouseError(Exception):
    """Base class for every error this package raises on purpose."""


class ConnectionTimeoutError(WarehouseError):
    """No usable connection was made before the deadline or a shutdown."""

    def __init__(self, address: str, timeout: float) -> None:
        self.address = address
        self.timeout = timeout
        super().__init__(f"Failed to connect to MongoDB at {address} within {timeout:g}s")


class InvalidSettingsError(WarehouseError, ValueError):
    """The merged connection settings do not describe a usable server."""


class AuthenticationError(WarehouseError):
    """Credentials were rejected and the policy says that is fatal."""

    def __init__(self, database_name: str, user: str, reason: str) -> None:
        self.database_name = database_name
        self.user = user
        self.reason = reason
        super().__init__(f"Authentication as {user!r} on {database_name!r} failed: {reason}")


class MessageTypeNotFoundError(WarehouseError, LookupError):
    def __init__(self, database_name: str, collection_name: str) -> None:
        self.database_name = database_name
        self.collection_name = collection_name
        super().__init__(
            f"No message type recorded for collection {collection_name!r} in {database_name!r}"
        )
