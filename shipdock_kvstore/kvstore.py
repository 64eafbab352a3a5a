"""Root store owning the backend handle and the namespace root.

The namespace is laid out as `<root>/<kind>[/<host>]/<entity-key>`. Removing
a key also removes the directories above it that became empty, walking
upward until a non-empty directory or the kind directory is reached.
"""

import logging
import socket
from typing import Any

from .backend import BackendRegistry, Store, default_registry
from .config import StoreConfig
from .entity import BaseEntity, encode_document
from .exceptions import InvalidKeyError, KeyNotFoundError
from .kvs import KeyValues
from .paths import SEPARATOR, join_path, parent_path, relative_to, trim_relative
from .proxy import Comparator, Proxy, T
from .resources import Containers, Networks, Nodes, Services, Volumes

__all__ = [
    "KVStore",
]

_LOGGER = logging.getLogger(__name__)


class KVStore:
    """Entry point for reading and writing cluster state.

    Holds one typed collection per resource kind. Host scoped collections
    (containers, volumes) write below the `hostname` segment.
    """

    def __init__(
        self, store: Store, root_path: str = "", hostname: str | None = None
    ) -> None:
        """Initialize the KVStore and its collections."""
        self._store = store
        self._root_path = trim_relative(root_path)
        self._hostname = trim_relative(hostname or socket.gethostname())
        if not self._hostname or SEPARATOR in self._hostname:
            raise InvalidKeyError(f"Invalid hostname '{hostname}'")
        self.networks = Networks(self)
        self.services = Services(self)
        self.volumes = Volumes(self)
        self.containers = Containers(self, self.networks)
        self.nodes = Nodes(self)

    @classmethod
    def from_config(
        cls,
        config: StoreConfig,
        registry: BackendRegistry | None = None,
        hostname: str | None = None,
    ) -> "KVStore":
        """Create the backend selected by the config and wrap it."""
        registry = registry or default_registry()
        return cls(registry.create(config), config.root_path, hostname=hostname)

    @property
    def store(self) -> Store:
        """The backend store."""
        return self._store

    @property
    def root_path(self) -> str:
        """The namespace root, without surrounding separators."""
        return self._root_path

    @property
    def hostname(self) -> str:
        """Host segment used by host scoped collections."""
        return self._hostname

    def path(self, *parts: str) -> str:
        """Return the full key for a path relative to the namespace root."""
        return join_path(self._root_path, *parts)

    def proxy(
        self,
        kind: str,
        entity_cls: type[T],
        comparator: Comparator[T] | None = None,
        host_scoped: bool = False,
    ) -> Proxy[T]:
        """Create a proxy for the subtree of a resource kind.

        A host scoped proxy owns `<root>/<kind>/<hostname>` and may prune its
        host directory once it becomes empty.
        """
        kind_path = self.path(kind)
        if host_scoped:
            return Proxy(
                self,
                join_path(kind_path, self._hostname),
                entity_cls,
                comparator=comparator,
                prune_root=kind_path,
            )
        return Proxy(self, kind_path, entity_cls, comparator=comparator)

    def kvs(self, parent: str) -> KeyValues:
        """Return a raw string collection stored below `<root>/<parent>`."""
        return KeyValues(self, self.path(parent))

    def put(self, key: str, entity: BaseEntity) -> None:
        """Serialize and write an entity directly at a full key."""
        key = self._check_key(key)
        _LOGGER.debug("PUT:%s", key)
        self._store.put(key, encode_document(entity, indent=None))

    def remove(
        self,
        key: str,
        stop_at: str | None = None,
        missing_ok: bool = True,
        tree: bool = True,
    ) -> None:
        """Delete a key with its subtree and prune empty parent directories.

        Args:
            key: Full key inside the namespace.
            stop_at: Highest directory that may be pruned. Defaults to the
                kind directory holding the key, which is never pruned itself.
            missing_ok: Do not raise when nothing exists at the key.
            tree: Delete everything below the key, not only the key itself.
        """
        key = self._check_key(key)
        if stop_at is None:
            kind = (relative_to(self._root_path, key) or "").split(SEPARATOR)[0]
            stop_at = join_path(self._root_path, kind)
        _LOGGER.debug("DEL:%s", key)
        try:
            if tree:
                self._store.delete_tree(key)
            else:
                self._store.delete(key)
        except KeyNotFoundError:
            if not missing_ok:
                raise
        self._prune(parent_path(key), trim_relative(stop_at))

    def _prune(self, directory: str, boundary: str) -> None:
        """Delete empty directories from `directory` up to, not including, `boundary`.

        A directory key that holds a value of its own is an entity and stops
        the walk like a non-empty directory does.
        """
        while directory and relative_to(boundary, directory) is not None:
            try:
                if self._store.list(directory, recursive=True):
                    return
            except KeyNotFoundError:
                pass
            try:
                if self._store.get(directory).value:
                    return
            except KeyNotFoundError:
                pass
            _LOGGER.debug("Pruning empty directory %s", directory)
            try:
                self._store.delete_tree(directory)
            except KeyNotFoundError:
                pass
            directory = parent_path(directory)

    def _check_key(self, key: str) -> str:
        key = trim_relative(key)
        if relative_to(self._root_path, key) is None:
            raise InvalidKeyError(f"Key '{key}' is outside of '{self._root_path}'")
        normalized = join_path(key)
        if normalized != key:
            raise InvalidKeyError(f"Key '{key}' is not normalized")
        return key

    def close(self) -> None:
        """Close the backend store."""
        self._store.close()

    def __enter__(self) -> "KVStore":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
