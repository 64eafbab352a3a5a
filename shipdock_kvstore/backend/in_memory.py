"""Module for an in memory key/value store."""

import logging

from shipdock_kvstore.exceptions import KeyNotFoundError
from shipdock_kvstore.paths import SEPARATOR, trim_relative

from .store import KVPair, Store, WriteOptions

__all__ = [
    "InMemoryStore",
]

_LOGGER = logging.getLogger(__name__)


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Directories are implicit: a directory exists as long as any key lives
    below it. Writing with `WriteOptions(is_dir=True)` stores an explicit
    empty marker, the same way a backend that models directories would.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryStore."""
        self._entries: dict[str, tuple[bytes, int]] = {}
        self._index = 0

    def keys(self) -> list[str]:
        """Return all keys currently held, including directory markers."""
        return sorted(self._entries)

    def get(self, key: str) -> KVPair:
        """Return the value of a key."""
        key = trim_relative(key)
        if (entry := self._entries.get(key)) is None:
            raise KeyNotFoundError(key)
        return KVPair(key=key, value=entry[0], last_index=entry[1])

    def put(self, key: str, value: bytes, options: WriteOptions | None = None) -> None:
        """Write a value for a key."""
        key = trim_relative(key)
        self._index += 1
        if options is not None and options.is_dir:
            self._entries[key] = (b"", self._index)
            return
        self._entries[key] = (bytes(value), self._index)

    def delete(self, key: str) -> None:
        """Delete a single key."""
        key = trim_relative(key)
        if key not in self._entries:
            raise KeyNotFoundError(key)
        del self._entries[key]

    def delete_tree(self, key: str) -> None:
        """Delete a key and everything below it."""
        key = trim_relative(key)
        matched = [k for k in self._entries if _is_within(k, key)]
        if not matched:
            raise KeyNotFoundError(key)
        _LOGGER.debug("Deleting %d keys under %s", len(matched), key)
        for k in matched:
            del self._entries[k]

    def list(self, prefix: str, recursive: bool = True) -> list[KVPair]:
        """List the entries below a directory."""
        prefix = trim_relative(prefix)
        base = f"{prefix}{SEPARATOR}" if prefix else ""
        results: dict[str, KVPair] = {}
        for k, (value, index) in self._entries.items():
            if not k.startswith(base) or k == prefix:
                continue
            if recursive:
                results[k] = KVPair(key=k, value=value, last_index=index)
                continue
            child, sep, _ = k[len(base) :].partition(SEPARATOR)
            child_key = base + child
            if not sep:
                results[child_key] = KVPair(key=k, value=value, last_index=index)
            elif child_key not in results:
                results[child_key] = KVPair(key=child_key, value=b"")
        if not results:
            raise KeyNotFoundError(prefix)
        return list(results.values())


def _is_within(key: str, root: str) -> bool:
    if not root:
        return True
    return key == root or key.startswith(f"{root}{SEPARATOR}")
