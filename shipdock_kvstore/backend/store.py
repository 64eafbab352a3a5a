"""Store module describing the backend key/value contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shipdock_kvstore.exceptions import KeyNotFoundError

__all__ = [
    "KVPair",
    "WriteOptions",
    "Store",
]


@dataclass(frozen=True)
class KVPair:
    """A single key and its raw value as held by the backend."""

    key: str
    """Full key without surrounding separators."""

    value: bytes
    """Raw stored bytes. Directory markers have an empty value."""

    last_index: int = 0
    """Backend specific modification index, if the backend reports one."""


@dataclass(frozen=True)
class WriteOptions:
    """Options for a single write."""

    is_dir: bool = False
    """Write a directory marker instead of a value."""

    ttl: float | None = None
    """Seconds the key lives for, on backends that support expiry."""


class Store(ABC):
    """Abstract base class for a hierarchical key/value backend.

    Keys are `/` separated paths. The backend is treated as plain convergent
    storage: no locks, sessions or watches are used. Implementations block
    until the backend responds.
    """

    @abstractmethod
    def get(self, key: str) -> KVPair:
        """Return the value of a key.

        Raises:
            KeyNotFoundError: If the key does not exist.
        """

    @abstractmethod
    def put(self, key: str, value: bytes, options: WriteOptions | None = None) -> None:
        """Write a value for a key, overwriting any existing value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a single key.

        Raises:
            KeyNotFoundError: If the key does not exist.
        """

    @abstractmethod
    def delete_tree(self, key: str) -> None:
        """Delete a key and everything below it.

        Raises:
            KeyNotFoundError: If nothing matched the key.
        """

    @abstractmethod
    def list(self, prefix: str, recursive: bool = True) -> list[KVPair]:
        """List the entries below a directory.

        The entry for the directory itself is never returned. No ordering is
        guaranteed.

        Raises:
            KeyNotFoundError: If the directory has no entries.
        """

    def exists(self, key: str) -> bool:
        """Return True if the key exists."""
        try:
            self.get(key)
        except KeyNotFoundError:
            return False
        return True

    def close(self) -> None:
        """Release any resources held by the backend client."""
