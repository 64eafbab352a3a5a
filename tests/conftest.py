"""Shared fixtures for shipdock-kvstore tests."""

import pytest

from shipdock_kvstore.backend import InMemoryStore
from shipdock_kvstore.kvstore import KVStore

ROOT = "shipdock"
HOSTNAME = "host-a"


@pytest.fixture
def store() -> InMemoryStore:
    """A fresh in memory backend."""
    return InMemoryStore()


@pytest.fixture
def kvstore(store: InMemoryStore) -> KVStore:
    """A root store for the local host `host-a`."""
    return KVStore(store, ROOT, hostname=HOSTNAME)
