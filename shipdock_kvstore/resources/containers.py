"""Containers stored at `<root>/containers/<host>/<name>-<short id>`."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from mashumaro import field_options

from shipdock_kvstore.entity import BaseEntity
from shipdock_kvstore.exceptions import InputException
from shipdock_kvstore.paths import (
    LABEL_OWNER,
    LABEL_OWNER_NAME,
    LABEL_TASK_NAME,
    trim_relative,
)
from shipdock_kvstore.proxy import SyncResult

from .base import HostScopedCollection
from .networks import Network, Networks

if TYPE_CHECKING:
    from shipdock_kvstore.kvstore import KVStore

__all__ = [
    "NetInfo",
    "MountInfo",
    "Container",
    "Containers",
    "container_key",
]

INGRESS_NETWORK = "ingress"
SHORT_ID_LENGTH = 8


def container_key(display_name: str, container_id: str) -> str:
    """Return the key of a container.

    The display name is trimmed of separators, any trailing extension (the
    task ID swarm appends after the last `.`) is dropped, and the first
    characters of the container ID are appended.
    """
    name = trim_relative(display_name)
    if (dot := name.rfind(".")) >= 0:
        name = name[:dot]
    return f"{name}-{container_id[:SHORT_ID_LENGTH]}"


@dataclass
class NetInfo(BaseEntity):
    """A container's attachment to a network."""

    name: str = field(metadata=field_options(alias="Name"))
    driver: str = field(metadata=field_options(alias="Driver"), default="")
    ip_address: str = field(metadata=field_options(alias="IPAddress"), default="")
    gateway: str = field(metadata=field_options(alias="Gateway"), default="")
    mac_address: str = field(metadata=field_options(alias="MacAddress"), default="")


@dataclass
class MountInfo(BaseEntity):
    """A volume mounted into a container."""

    name: str = field(metadata=field_options(alias="Name"))
    driver: str = field(metadata=field_options(alias="Driver"), default="")


@dataclass
class Container(BaseEntity):
    """A container running on one host."""

    id: str = field(metadata=field_options(alias="ID"))

    name: str = field(metadata=field_options(alias="Name"))
    """The container key, see `container_key`."""

    service_name: str = field(metadata=field_options(alias="ServiceName"), default="")
    """Swarm service of the task running in the container."""

    task_num: str = field(metadata=field_options(alias="TaskNum"), default="")
    """Slot of the swarm task running in the container."""

    owner: str = field(metadata=field_options(alias="Owner"), default="")
    owner_name: str = field(metadata=field_options(alias="OwnerName"), default="")

    networks: dict[str, NetInfo] = field(
        metadata=field_options(alias="Networks"), default_factory=dict
    )
    mounts: dict[str, MountInfo] = field(
        metadata=field_options(alias="Mounts"), default_factory=dict
    )
    labels: dict[str, str] = field(
        metadata=field_options(alias="Labels"), default_factory=dict
    )

    @classmethod
    def parse_doc(
        cls, doc: dict[str, Any], networks: Mapping[str, Network]
    ) -> "Container":
        """Parse a Container from a runtime container document.

        Network attachments are resolved against `networks`, keyed by network
        ID. Attachments to the ingress network or to unknown networks are
        left out.
        """
        if not (container_id := doc.get("Id") or doc.get("ID")):
            raise InputException(f"Invalid container missing Id: {doc}")
        if names := doc.get("Names"):
            display_name = names[0]
        elif not (display_name := doc.get("Name")):
            raise InputException(f"Invalid container missing Names: {doc}")
        labels = dict(doc.get("Labels") or (doc.get("Config") or {}).get("Labels") or {})

        service_name = ""
        task_num = ""
        if task_name := labels.get(LABEL_TASK_NAME):
            parts = task_name.split(".")
            if len(parts) > 2:
                service_name, task_num = parts[0], parts[1]

        attachments: dict[str, NetInfo] = {}
        settings = (doc.get("NetworkSettings") or {}).get("Networks") or {}
        for net_name, endpoint in settings.items():
            if net_name == INGRESS_NETWORK:
                continue
            if (network := networks.get(endpoint.get("NetworkID", ""))) is None:
                continue
            attachments[net_name] = NetInfo(
                name=net_name,
                driver=network.driver,
                ip_address=endpoint.get("IPAddress", ""),
                gateway=endpoint.get("Gateway", ""),
                mac_address=endpoint.get("MacAddress", ""),
            )

        mounts: dict[str, MountInfo] = {}
        for mount in doc.get("Mounts") or ():
            mount_name = mount.get("Name", "")
            mounts[mount_name] = MountInfo(
                name=mount_name, driver=mount.get("Driver", "")
            )

        return cls(
            id=container_id,
            name=container_key(display_name, container_id),
            service_name=service_name,
            task_num=task_num,
            owner=labels.get(LABEL_OWNER, ""),
            owner_name=labels.get(LABEL_OWNER_NAME, ""),
            networks=attachments,
            mounts=mounts,
            labels=labels,
        )


class Containers(HostScopedCollection[Container]):
    """Containers of the local host, keyed by container key."""

    kind = "containers"
    entity_cls = Container

    def __init__(self, kvstore: "KVStore", networks: Networks) -> None:
        """Initialize Containers, resolving attachments through `networks`."""
        super().__init__(kvstore)
        self._networks = networks

    def build(self, doc: dict[str, Any]) -> Container:
        return Container.parse_doc(doc, self._networks.id_map())

    def key(self, entity: Container) -> str:
        return entity.name

    def sync(self, docs: Iterable[dict[str, Any]]) -> SyncResult:
        """Converge the local host's containers to the given documents.

        The stored networks are read once for the whole batch.
        """
        networks = self._networks.id_map()
        return self._proxy.sync(
            self._desired(Container.parse_doc(doc, networks) for doc in docs)
        )
