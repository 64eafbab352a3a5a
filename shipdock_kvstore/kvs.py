"""Raw string values grouped by owner.

Values live at `<parent>/<owner>/<key>` and are written as plain strings
rather than documents. `sync` follows the same rules as `Proxy.sync`.
"""

from collections.abc import Mapping
import logging
from typing import TYPE_CHECKING

from .exceptions import InvalidKeyError, KeyNotFoundError
from .paths import child_path, relative_to, trim_relative
from .proxy import SyncResult

if TYPE_CHECKING:
    from .kvstore import KVStore

__all__ = [
    "KeyValues",
]

_LOGGER = logging.getLogger(__name__)


class KeyValues:
    """String values stored per owner below a parent directory."""

    def __init__(self, kvstore: "KVStore", root_path: str) -> None:
        """Initialize KeyValues rooted at a full path."""
        self._kvstore = kvstore
        self._root_path = trim_relative(root_path)

    @property
    def root_path(self) -> str:
        """Full path of the parent directory holding the owners."""
        return self._root_path

    def _owner_path(self, owner: str) -> str:
        return child_path(self._root_path, owner)

    def put(self, owner: str, key: str, value: str) -> None:
        """Write a value, overwriting any existing one."""
        target = child_path(self._owner_path(owner), key)
        _LOGGER.debug("PUT:%s %s", target, value)
        self._kvstore.store.put(target, value.encode())

    def delete(self, owner: str, key: str) -> None:
        """Delete a single value.

        Raises:
            KeyNotFoundError: If the key does not exist.
        """
        target = child_path(self._owner_path(owner), key)
        _LOGGER.debug("DELETE:%s", target)
        self._kvstore.store.delete(target)

    def get(self, owner: str, key: str) -> str:
        """Return a value.

        Raises:
            KeyNotFoundError: If the key does not exist.
        """
        kv = self._kvstore.store.get(child_path(self._owner_path(owner), key))
        return kv.value.decode()

    def list(self, owner: str, recursive: bool = True) -> dict[str, str]:
        """Return the values of an owner keyed by path relative to the owner."""
        base = self._owner_path(owner)
        try:
            kvs = self._kvstore.store.list(base, recursive)
        except KeyNotFoundError:
            return {}
        results: dict[str, str] = {}
        for kv in kvs:
            if not kv.value:
                continue
            if (key := relative_to(base, kv.key)) is None:
                continue
            results[key] = kv.value.decode(errors="replace")
        return results

    def sync(self, owner: str, values: Mapping[str, str]) -> SyncResult:
        """Converge the values of an owner to exactly `values`.

        Raises:
            InvalidKeyError: If a key is invalid or two keys name the same value.
        """
        base = self._owner_path(owner)
        desired: dict[str, str] = {}
        for key, value in values.items():
            relative = relative_to(base, child_path(base, key)) or key
            if relative in desired:
                raise InvalidKeyError(f"Duplicate key '{key}' for {base}")
            desired[relative] = value
        remote = self.list(owner, recursive=True)
        result = SyncResult()
        for key, value in desired.items():
            if key not in remote:
                self.put(owner, key, value)
                result.added.append(key)
            elif remote[key] != value:
                self.put(owner, key, value)
                result.updated.append(key)
            else:
                result.unchanged.append(key)
        for key in remote:
            if key not in desired:
                self.delete(owner, key)
                result.deleted.append(key)
        if result.changed:
            _LOGGER.info("Synced %s: %s", base, result)
        return result
