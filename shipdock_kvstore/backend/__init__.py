"""
The backend module holds the key/value store contract and its implementations.

The core of this library only consumes the `Store` interface. Which backend
is used is decided by the scheme of the connection descriptor, looked up in
a `BackendRegistry`.
"""

from .store import KVPair, Store, WriteOptions
from .in_memory import InMemoryStore
from .consul import ConsulStore
from .etcd import EtcdStore
from .registry import BackendRegistry, default_registry

__all__ = [
    "KVPair",
    "Store",
    "WriteOptions",
    "InMemoryStore",
    "ConsulStore",
    "EtcdStore",
    "BackendRegistry",
    "default_registry",
]
