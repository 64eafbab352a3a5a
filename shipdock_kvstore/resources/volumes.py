"""Volumes stored at `<root>/volumes/<host>/<volume name>`."""

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from mashumaro import field_options

from shipdock_kvstore.entity import BaseEntity
from shipdock_kvstore.exceptions import InputException
from shipdock_kvstore.paths import LABEL_OWNER, LABEL_OWNER_NAME

from .base import HostScopedCollection

if TYPE_CHECKING:
    from shipdock_kvstore.kvstore import KVStore

__all__ = [
    "Volume",
    "Volumes",
    "owner_preserving_equal",
]


@dataclass
class Volume(BaseEntity):
    """A volume on one host."""

    name: str = field(metadata=field_options(alias="Name"))
    driver: str = field(metadata=field_options(alias="Driver"), default="")
    owner: str = field(metadata=field_options(alias="Owner"), default="")
    owner_name: str = field(metadata=field_options(alias="OwnerName"), default="")
    labels: dict[str, str] = field(
        metadata=field_options(alias="Labels"), default_factory=dict
    )

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "Volume":
        """Parse a Volume from a runtime volume document."""
        if not (name := doc.get("Name")):
            raise InputException(f"Invalid volume missing Name: {doc}")
        labels = dict(doc.get("Labels") or {})
        return cls(
            name=name,
            driver=doc.get("Driver", ""),
            owner=labels.get(LABEL_OWNER, ""),
            owner_name=labels.get(LABEL_OWNER_NAME, ""),
            labels=labels,
        )


def owner_preserving_equal(local: Volume, remote: Volume) -> bool:
    """Compare volumes without dropping an owner only known remotely.

    The owner of a volume may be attached after it was created, in which case
    the runtime reports the volume without it. Such a local copy is treated as
    equal so the stored owner is kept. A local owner always wins over a
    missing remote one.
    """
    if not local.owner and remote.owner:
        return True
    if local.owner and not remote.owner:
        return False
    return local == remote


class Volumes(HostScopedCollection[Volume]):
    """Volumes of the local host keyed by volume name."""

    kind = "volumes"
    entity_cls = Volume

    def __init__(self, kvstore: "KVStore") -> None:
        """Initialize Volumes with the owner preserving comparator."""
        super().__init__(kvstore, comparator=owner_preserving_equal)

    def build(self, doc: dict[str, Any]) -> Volume:
        return Volume.parse_doc(doc)

    def key(self, entity: Volume) -> str:
        return entity.name
