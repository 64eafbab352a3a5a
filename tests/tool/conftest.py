"""Fixtures for command line tool tests."""

from collections.abc import Generator

import pytest

from shipdock_kvstore.kvstore import KVStore
from shipdock_kvstore.tool.shipdock_kvstore import STORE_URL_ENV


@pytest.fixture(autouse=True)
def clear_store_url(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Do not pick up a store from the environment running the tests."""
    monkeypatch.delenv(STORE_URL_ENV, raising=False)
    yield


@pytest.fixture
def populated(kvstore: KVStore) -> KVStore:
    """A store holding a few entities of each kind."""
    kvstore.networks.put({"Id": "net-b", "Name": "backend", "Driver": "overlay"})
    kvstore.networks.put({"Id": "net-a", "Name": "frontend", "Driver": "bridge"})
    kvstore.volumes.put({"Name": "web-data", "Driver": "local"})
    other = KVStore(kvstore.store, kvstore.root_path, hostname="host-b")
    other.volumes.put({"Name": "db-data", "Driver": "local"})
    return kvstore
