"""Exceptions related to shipdock-kvstore."""

__all__ = [
    "KVStoreException",
    "InputException",
    "InvalidKeyError",
    "DecodeError",
    "ConfigException",
    "StoreException",
    "KeyNotFoundError",
    "BackendError",
]


class KVStoreException(Exception):
    """Generic base exception used for this library."""


class InputException(KVStoreException):
    """Raised when keys or documents are not formatted as expected."""


class InvalidKeyError(InputException, ValueError):
    """Raised when a key would resolve outside of the subtree that owns it."""


class DecodeError(InputException):
    """Raised when stored bytes are not a valid document of the expected shape."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"Unable to decode value at {key}: {message}")
        self.key = key


class ConfigException(KVStoreException):
    """Raised when the store connection is not configured correctly."""


class StoreException(KVStoreException):
    """Raised when there is a failure talking to the backend store."""


class KeyNotFoundError(StoreException):
    """Raised when a key or prefix does not exist in the backend store."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Key not found in store: {key}")
        self.key = key


class BackendError(StoreException):
    """Raised for any other backend or connectivity failure."""
