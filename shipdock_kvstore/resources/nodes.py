"""Nodes stored at `<root>/nodes/<hostname>`."""

from dataclasses import dataclass, field
from typing import Any

from mashumaro import field_options

from shipdock_kvstore.entity import BaseEntity
from shipdock_kvstore.exceptions import InputException

from .base import ResourceCollection

__all__ = [
    "Node",
    "Nodes",
]


@dataclass
class Node(BaseEntity):
    """A member node of the swarm."""

    hostname: str = field(metadata=field_options(alias="Hostname"))
    id: str = field(metadata=field_options(alias="ID"))
    labels: dict[str, str] = field(
        metadata=field_options(alias="Labels"), default_factory=dict
    )
    role: str = field(metadata=field_options(alias="Role"), default="")
    availability: str = field(metadata=field_options(alias="Availability"), default="")
    architecture: str = field(metadata=field_options(alias="Architecture"), default="")
    os: str = field(metadata=field_options(alias="OS"), default="")
    nano_cpus: int = field(metadata=field_options(alias="NanoCPUs"), default=0)
    memory_bytes: int = field(metadata=field_options(alias="MemoryBytes"), default=0)
    engine_version: str = field(
        metadata=field_options(alias="EngineVersion"), default=""
    )
    state: str = field(metadata=field_options(alias="State"), default="")
    address: str = field(metadata=field_options(alias="Address"), default="")

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Node":
        """Parse a Node from a runtime node document."""
        if not (node_id := doc.get("ID")):
            raise InputException(f"Invalid node missing ID: {doc}")
        description = doc.get("Description") or {}
        if not (hostname := description.get("Hostname")):
            raise InputException(f"Invalid node missing Description.Hostname: {doc}")
        spec = doc.get("Spec") or {}
        platform = description.get("Platform") or {}
        resources = description.get("Resources") or {}
        status = doc.get("Status") or {}
        return cls(
            hostname=hostname,
            id=node_id,
            labels=dict(spec.get("Labels") or {}),
            role=spec.get("Role", ""),
            availability=spec.get("Availability", ""),
            architecture=platform.get("Architecture", ""),
            os=platform.get("OS", ""),
            nano_cpus=int(resources.get("NanoCPUs", 0)),
            memory_bytes=int(resources.get("MemoryBytes", 0)),
            engine_version=(description.get("Engine") or {}).get("EngineVersion", ""),
            state=status.get("State", ""),
            address=status.get("Addr", ""),
        )


class Nodes(ResourceCollection[Node]):
    """Nodes of the cluster keyed by hostname."""

    kind = "nodes"
    entity_cls = Node

    def build(self, doc: dict[str, Any]) -> Node:
        return Node.parse_doc(doc)

    def key(self, entity: Node) -> str:
        return entity.hostname
