"""
shipdock-kvstore mirrors cluster resource metadata into a key/value store.

Agents on each host translate what the container runtime reports into typed
entities and converge the store to them with `sync`. Other agents, such as
the load balancer controller, read cluster state back from the store.

Example usage:

    config = StoreConfig.from_url("consul://127.0.0.1:8500/shipdock")
    with KVStore.from_config(config) as kvstore:
        kvstore.services.sync(docker_client.api.services())
"""

from .config import StoreConfig
from .kvstore import KVStore
from .proxy import Proxy, SyncResult

__all__ = [
    "StoreConfig",
    "KVStore",
    "Proxy",
    "SyncResult",
    "backend",
    "exceptions",
    "resources",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
