"""Common behavior of the typed resource collections."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
import logging
from typing import Any, ClassVar, Generic, TYPE_CHECKING

from shipdock_kvstore.entity import decode_document
from shipdock_kvstore.exceptions import DecodeError, KeyNotFoundError
from shipdock_kvstore.proxy import Comparator, Proxy, SyncResult, T

if TYPE_CHECKING:
    from shipdock_kvstore.kvstore import KVStore

__all__ = [
    "ResourceCollection",
    "HostScopedCollection",
]

_LOGGER = logging.getLogger(__name__)


class ResourceCollection(ABC, Generic[T]):
    """A typed facade over the proxy of one resource kind.

    Subclasses translate runtime documents into entities and decide the key
    each entity is stored under. Persistence and reconciliation are left to
    the proxy.
    """

    kind: ClassVar[str]
    """Directory name of the kind below the namespace root."""

    entity_cls: ClassVar[type[Any]]
    """The stored entity type."""

    host_scoped: ClassVar[bool] = False
    """Whether entities are written below a per host directory."""

    def __init__(
        self, kvstore: "KVStore", comparator: Comparator[T] | None = None
    ) -> None:
        """Initialize the collection."""
        self._kvstore = kvstore
        self._proxy: Proxy[T] = kvstore.proxy(
            self.kind,
            self.entity_cls,
            comparator=comparator,
            host_scoped=self.host_scoped,
        )

    @property
    def proxy(self) -> Proxy[T]:
        """The proxy owning this collection's subtree."""
        return self._proxy

    @abstractmethod
    def build(self, doc: dict[str, Any]) -> T:
        """Translate a runtime document into the stored entity."""

    @abstractmethod
    def key(self, entity: T) -> str:
        """Return the key an entity is stored under."""

    def put(self, doc: dict[str, Any]) -> T:
        """Translate and write a single runtime document."""
        entity = self.build(doc)
        self._proxy.put(self.key(entity), entity)
        return entity

    def delete(self, key: str) -> None:
        """Delete an entity by key."""
        self._proxy.delete(key)

    def get(self, key: str) -> T:
        """Read an entity by key."""
        return self._proxy.get(key)

    def list(self, recursive: bool = True) -> dict[str, T]:
        """Return the stored entities keyed by key."""
        return self._proxy.list(recursive)

    def sync(self, docs: Iterable[dict[str, Any]]) -> SyncResult:
        """Converge the stored entities to the given runtime documents."""
        return self._proxy.sync(self._desired(self.build(doc) for doc in docs))

    def _desired(self, entities: Iterable[T]) -> dict[str, T]:
        desired: dict[str, T] = {}
        for entity in entities:
            desired[self.key(entity)] = entity
        return desired


class HostScopedCollection(ResourceCollection[T]):
    """A collection whose entities are written below a per host directory.

    `list` only sees the local host. `list_all` reads the entries of every
    host. Entities are keyed by their own key there, assuming keys are unique
    across the cluster; when they are not, the last one seen wins.
    """

    host_scoped = True

    def list_all(self) -> dict[str, T]:
        """Return the entities written by every host."""
        kind_path = self._kvstore.path(self.kind)
        try:
            kvs = self._kvstore.store.list(kind_path, recursive=True)
        except KeyNotFoundError:
            return {}
        results: dict[str, T] = {}
        for kv in kvs:
            if not kv.value:
                continue
            try:
                entity = decode_document(self.entity_cls, kv.key, kv.value)
            except DecodeError as err:
                _LOGGER.warning("Skipping %s: %s", kv.key, err)
                continue
            results[self.key(entity)] = entity
        return results
