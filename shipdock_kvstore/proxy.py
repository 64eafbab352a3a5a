"""Module for mapping typed entities onto a subtree of the key/value store.

A `Proxy` owns one subtree of the namespace and converges it to a desired set
of entities with `sync`:

  - Entities missing remotely are written.
  - Entities present on both sides are compared with the comparator and
    written only when they differ.
  - Remote entities missing from the desired set are deleted.

The reconciliation is not transactional. The first failure is raised and any
writes or deletes already issued stay applied. Running `sync` again with the
same desired set resumes convergence, since every step is idempotent.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Generic, TypeVar, TYPE_CHECKING

from .entity import BaseEntity, decode_document, encode_document
from .exceptions import DecodeError, InvalidKeyError, KeyNotFoundError
from .paths import child_path, relative_to, trim_relative

if TYPE_CHECKING:
    from .kvstore import KVStore

__all__ = [
    "Comparator",
    "Proxy",
    "SyncResult",
    "structural_equal",
]

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseEntity)

Comparator = Callable[[T, T], bool]
"""Decides whether a local and remote entity are treated as equal.

Called as `comparator(local, remote)`. Returning True means no write is
needed.
"""


def structural_equal(local: BaseEntity, remote: BaseEntity) -> bool:
    """Default comparator: full structural equality."""
    return local == remote


@dataclass
class SyncResult:
    """Keys touched by a `Proxy.sync` call."""

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """Return True if any write or delete was issued."""
        return bool(self.added or self.updated or self.deleted)

    def __str__(self) -> str:
        return (
            f"added={len(self.added)} updated={len(self.updated)} "
            f"deleted={len(self.deleted)} unchanged={len(self.unchanged)}"
        )


class Proxy(Generic[T]):
    """Typed view of one subtree of the namespace."""

    def __init__(
        self,
        kvstore: "KVStore",
        root_path: str,
        entity_cls: type[T],
        comparator: Comparator[T] | None = None,
        prune_root: str | None = None,
    ) -> None:
        """Initialize the Proxy.

        Args:
            kvstore: The root store owning the backend handle.
            root_path: Full path of the subtree owned by this proxy.
            entity_cls: Type used to decode stored documents.
            comparator: Equality policy used by `sync`, structural by default.
            prune_root: Highest directory that may be removed when pruning
                empty parents after a delete. Defaults to `root_path`.
        """
        self._kvstore = kvstore
        self._root_path = trim_relative(root_path)
        self._entity_cls = entity_cls
        self._compare: Comparator[T] = comparator or structural_equal
        self._prune_root = trim_relative(
            prune_root if prune_root is not None else root_path
        )

    @property
    def root_path(self) -> str:
        """Full path of the subtree owned by this proxy."""
        return self._root_path

    @property
    def entity_cls(self) -> type[T]:
        """Type of the entities held in this subtree."""
        return self._entity_cls

    def _target(self, key: str) -> str:
        return child_path(self._root_path, key)

    def put(self, key: str, entity: T) -> None:
        """Write an entity, overwriting any existing value."""
        target = self._target(key)
        _LOGGER.debug("PUT:%s", target)
        self._kvstore.store.put(target, encode_document(entity))

    def delete(self, key: str) -> None:
        """Delete an entity and anything nested below it.

        Raises:
            KeyNotFoundError: If nothing exists at the key.
        """
        self._remove(key, missing_ok=False)

    def _remove(self, key: str, missing_ok: bool, tree: bool = True) -> None:
        target = self._target(key)
        _LOGGER.debug("DELETE:%s", target)
        self._kvstore.remove(
            target, stop_at=self._prune_root, missing_ok=missing_ok, tree=tree
        )

    def get(self, key: str) -> T:
        """Read and decode an entity.

        Raises:
            KeyNotFoundError: If the key does not exist or has no value.
            DecodeError: If the stored value is not a valid document.
        """
        target = self._target(key)
        kv = self._kvstore.store.get(target)
        if not kv.value:
            raise KeyNotFoundError(target)
        return decode_document(self._entity_cls, target, kv.value)

    def list(self, recursive: bool = True) -> dict[str, T]:
        """Return all entities in the subtree keyed by their relative path.

        Empty values are directory markers and are skipped. Values that fail
        to decode are skipped as well so that a change in the document shape
        only hides the stale keys until they are overwritten.
        """
        try:
            kvs = self._kvstore.store.list(self._root_path, recursive)
        except KeyNotFoundError:
            return {}
        results: dict[str, T] = {}
        for kv in kvs:
            if not kv.value:
                continue
            if (key := relative_to(self._root_path, kv.key)) is None:
                continue
            try:
                results[key] = decode_document(self._entity_cls, kv.key, kv.value)
            except DecodeError as err:
                _LOGGER.debug("Ignoring undecodable value: %s", err)
        return results

    def _normalize(self, desired: Mapping[str, T]) -> dict[str, T]:
        results: dict[str, T] = {}
        for key, entity in desired.items():
            relative = relative_to(self._root_path, self._target(key)) or key
            if relative in results:
                raise InvalidKeyError(f"Duplicate key '{key}' for {self._root_path}")
            results[relative] = entity
        return results

    def sync(self, desired: Mapping[str, T]) -> SyncResult:
        """Converge the subtree to exactly the desired entities.

        Desired keys are normalized the same way `put` resolves them.

        Raises:
            InvalidKeyError: If a key is invalid or two keys name the same entity.
        """
        desired = self._normalize(desired)
        remote = self.list(recursive=True)
        result = SyncResult()
        for key, local in desired.items():
            if (current := remote.get(key)) is None:
                self.put(key, local)
                result.added.append(key)
            elif not self._compare(local, current):
                self.put(key, local)
                result.updated.append(key)
            else:
                result.unchanged.append(key)
        for key in remote:
            if key in desired:
                continue
            # A stale entity may have desired entities nested below it, in
            # which case only the entity itself is removed. Keys already gone
            # with an earlier subtree delete are fine.
            nested = any(other.startswith(f"{key}/") for other in desired)
            self._remove(key, missing_ok=True, tree=not nested)
            result.deleted.append(key)
        if result.changed:
            _LOGGER.info("Synced %s: %s", self._root_path, result)
        else:
            _LOGGER.debug("Synced %s: no changes", self._root_path)
        return result
