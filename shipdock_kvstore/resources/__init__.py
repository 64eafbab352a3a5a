"""Typed collections for each kind of cluster resource.

Each module holds the stored entity, its translation from the runtime
document, and the collection persisting it through a `Proxy`.
"""

from .base import HostScopedCollection, ResourceCollection
from .containers import Container, Containers, MountInfo, NetInfo, container_key
from .networks import IPAMConfig, Network, Networks
from .nodes import Node, Nodes
from .services import PortConfig, Service, Services
from .volumes import Volume, Volumes, owner_preserving_equal

__all__ = [
    "ResourceCollection",
    "HostScopedCollection",
    "Container",
    "Containers",
    "MountInfo",
    "NetInfo",
    "container_key",
    "IPAMConfig",
    "Network",
    "Networks",
    "Node",
    "Nodes",
    "PortConfig",
    "Service",
    "Services",
    "Volume",
    "Volumes",
    "owner_preserving_equal",
]
