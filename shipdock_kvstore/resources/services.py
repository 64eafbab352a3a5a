"""Services stored at `<root>/services/<service name>`.

Besides the runtime attributes, a service carries the load balancer settings
declared through labels: a virtual IP and a list of ports. When no virtual IP
is declared, the first virtual IP the runtime assigned outside of the ingress
network is used.
"""

from dataclasses import dataclass, field
from datetime import datetime
import logging
import re
from typing import Any, TYPE_CHECKING

from mashumaro import field_options

from shipdock_kvstore.entity import BaseEntity
from shipdock_kvstore.exceptions import InputException
from shipdock_kvstore.paths import (
    LABEL_OWNER,
    LABEL_OWNER_NAME,
    LABEL_SERVICE_IP,
    LABEL_SERVICE_NAME,
    LABEL_SERVICE_PORTS,
)
from shipdock_kvstore.retry import RetryPolicy, retry_read

from .base import ResourceCollection

if TYPE_CHECKING:
    from shipdock_kvstore.kvstore import KVStore

__all__ = [
    "PortConfig",
    "Service",
    "Services",
    "build_port_configs",
    "parse_timestamp",
]

_LOGGER = logging.getLogger(__name__)

INGRESS_NETWORK_PREFIX = "10.255."
DEFAULT_PROTOCOL = "tcp"

VIRTUAL_IP_TYPE_SHIPDOCK = "shipdock"
VIRTUAL_IP_TYPE_DEFAULT = "swarm"

RESOLUTION_MODE_VIP = "vip"
RESOLUTION_MODE_DNSRR = "dnsrr"

_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parse a runtime timestamp, which may carry nanosecond precision."""
    return datetime.fromisoformat(
        _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    )


@dataclass
class PortConfig(BaseEntity):
    """A port exposed by a service."""

    name: str = field(metadata=field_options(alias="Name"), default="")
    protocol: str = field(metadata=field_options(alias="Protocol"), default="")
    target_port: int = field(metadata=field_options(alias="TargetPort"), default=0)
    published_port: int = field(
        metadata=field_options(alias="PublishedPort"), default=0
    )
    publish_mode: str = field(metadata=field_options(alias="PublishMode"), default="")

    class Config(BaseEntity.Config):
        omit_default = True


def build_port_configs(value: str) -> dict[str, PortConfig]:
    """Parse a declared port list such as `80,443/tcp,53/udp`.

    Entries without a protocol default to tcp. Entries whose port is not a
    number are skipped.
    """
    results: dict[str, PortConfig] = {}
    for entry in value.split(","):
        port_text, sep, protocol = entry.partition("/")
        if not sep:
            protocol = DEFAULT_PROTOCOL
        if not port_text.isdigit() or int(port_text) > 0xFFFFFFFF:
            _LOGGER.debug("Skipping invalid port declaration '%s'", entry)
            continue
        port = int(port_text)
        results[f"{port_text}/{protocol}"] = PortConfig(
            protocol=protocol, target_port=port, published_port=port
        )
    return results


@dataclass
class Service(BaseEntity):
    """A swarm service and its load balancer settings."""

    id: str = field(metadata=field_options(alias="ID"))
    name: str = field(metadata=field_options(alias="Name"))

    shipdock_service_name: str = field(
        metadata=field_options(alias="ShipdockServiceName"), default=""
    )
    """Display name, from the service name label or the service name."""

    owner: str = field(metadata=field_options(alias="Owner"), default="")
    owner_name: str = field(metadata=field_options(alias="OwnerName"), default="")
    virtual_ip: str = field(metadata=field_options(alias="VirtualIP"), default="")

    virtual_ip_type: str = field(
        metadata=field_options(alias="VirtualIPType"),
        default=VIRTUAL_IP_TYPE_DEFAULT,
    )
    """`shipdock` when the virtual IP was declared by label, else `swarm`."""

    resolution_mode: str = field(
        metadata=field_options(alias="ResolutionMode"),
        default=RESOLUTION_MODE_DNSRR,
    )
    ports: dict[str, PortConfig] = field(
        metadata=field_options(alias="Ports"), default_factory=dict
    )
    labels: dict[str, str] = field(
        metadata=field_options(alias="Labels"), default_factory=dict
    )
    updated_at: datetime | None = field(
        metadata=field_options(alias="UpdatedAt"), default=None
    )

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Service":
        """Parse a Service from a runtime service document."""
        if not (service_id := doc.get("ID")):
            raise InputException(f"Invalid service missing ID: {doc}")
        spec = doc.get("Spec") or {}
        if not (name := spec.get("Name")):
            raise InputException(f"Invalid service missing Spec.Name: {doc}")
        labels = dict(spec.get("Labels") or {})
        service = cls(
            id=service_id,
            name=name,
            shipdock_service_name=labels.get(LABEL_SERVICE_NAME, name),
            owner=labels.get(LABEL_OWNER, ""),
            owner_name=labels.get(LABEL_OWNER_NAME, ""),
            labels=labels,
        )
        if virtual_ip := labels.get(LABEL_SERVICE_IP):
            service.virtual_ip = virtual_ip
            service.virtual_ip_type = VIRTUAL_IP_TYPE_SHIPDOCK
        if (declared_ports := labels.get(LABEL_SERVICE_PORTS)) is not None:
            service.ports = build_port_configs(declared_ports)

        endpoint = doc.get("Endpoint") or {}
        if not service.virtual_ip:
            for entry in endpoint.get("VirtualIPs") or ():
                addr = entry.get("Addr", "")
                if not addr or addr.startswith(INGRESS_NETWORK_PREFIX):
                    continue
                service.virtual_ip = addr.split("/")[0]
                break
        service.resolution_mode = (
            RESOLUTION_MODE_VIP if service.virtual_ip else RESOLUTION_MODE_DNSRR
        )

        for port in endpoint.get("Ports") or ():
            config = PortConfig.from_dict(port)
            protocol = config.protocol or DEFAULT_PROTOCOL
            service.ports[f"{config.published_port}/{protocol}"] = config

        if updated_at := doc.get("UpdatedAt"):
            try:
                service.updated_at = parse_timestamp(updated_at)
            except ValueError as err:
                raise InputException(
                    f"Invalid service UpdatedAt '{updated_at}': {err}"
                ) from err
        return service


class Services(ResourceCollection[Service]):
    """Services of the cluster keyed by service name.

    Reads are retried, since a service is often looked up right after an
    agent on another host wrote it.
    """

    kind = "services"
    entity_cls = Service

    def __init__(
        self, kvstore: "KVStore", retry_policy: RetryPolicy | None = None
    ) -> None:
        """Initialize Services."""
        super().__init__(kvstore)
        self._retry_policy = retry_policy or RetryPolicy()

    def build(self, doc: dict[str, Any]) -> Service:
        return Service.parse_doc(doc)

    def key(self, entity: Service) -> str:
        return entity.name

    def get(self, key: str) -> Service:
        """Read a service, waiting for it to appear if it is not visible yet."""
        return retry_read(lambda: self._proxy.get(key), self._retry_policy)
