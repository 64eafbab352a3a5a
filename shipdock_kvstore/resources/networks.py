"""Networks stored at `<root>/networks/<network id>`."""

from dataclasses import dataclass, field
from typing import Any

from mashumaro import field_options

from shipdock_kvstore.entity import BaseEntity
from shipdock_kvstore.exceptions import InputException
from shipdock_kvstore.paths import LABEL_OWNER, LABEL_OWNER_NAME

from .base import ResourceCollection

__all__ = [
    "IPAMConfig",
    "Network",
    "Networks",
]


@dataclass
class IPAMConfig(BaseEntity):
    """Address management settings of one network subnet."""

    subnet: str | None = field(metadata=field_options(alias="Subnet"), default=None)
    ip_range: str | None = field(metadata=field_options(alias="IPRange"), default=None)
    gateway: str | None = field(metadata=field_options(alias="Gateway"), default=None)
    aux_addresses: dict[str, str] | None = field(
        metadata=field_options(alias="AuxiliaryAddresses"), default=None
    )

    class Config(BaseEntity.Config):
        omit_default = True


@dataclass
class Network(BaseEntity):
    """A runtime network."""

    id: str = field(metadata=field_options(alias="ID"))
    """The network ID, used as the key."""

    name: str = field(metadata=field_options(alias="Name"))

    owner: str = field(metadata=field_options(alias="Owner"), default="")
    """Owner promoted from the owner label."""

    owner_name: str = field(metadata=field_options(alias="OwnerName"), default="")
    """Owner display name promoted from the owner name label."""

    driver: str = field(metadata=field_options(alias="Driver"), default="")

    config: list[IPAMConfig] | None = field(
        metadata=field_options(alias="Config"), default=None
    )
    """IPAM subnets of the network."""

    labels: dict[str, str] = field(
        metadata=field_options(alias="Labels"), default_factory=dict
    )

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Network":
        """Parse a Network from a runtime network document."""
        if not (network_id := doc.get("Id") or doc.get("ID")):
            raise InputException(f"Invalid network missing Id: {doc}")
        labels = dict(doc.get("Labels") or {})
        config: list[IPAMConfig] | None = None
        if (ipam_config := (doc.get("IPAM") or {}).get("Config")) is not None:
            config = [IPAMConfig.from_dict(entry) for entry in ipam_config]
        return cls(
            id=network_id,
            name=doc.get("Name", ""),
            owner=labels.get(LABEL_OWNER, ""),
            owner_name=labels.get(LABEL_OWNER_NAME, ""),
            driver=doc.get("Driver", ""),
            config=config,
            labels=labels,
        )


class Networks(ResourceCollection[Network]):
    """Networks of the cluster keyed by network ID."""

    kind = "networks"
    entity_cls = Network

    def build(self, doc: dict[str, Any]) -> Network:
        return Network.parse_doc(doc)

    def key(self, entity: Network) -> str:
        return entity.id

    def id_map(self) -> dict[str, Network]:
        """Return the stored networks keyed by network ID."""
        return {network.id: network for network in self.list(recursive=True).values()}
