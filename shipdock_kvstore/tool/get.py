"""shipdock-kvstore get action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import logging
from typing import Any, cast

from shipdock_kvstore.kvstore import KVStore
from shipdock_kvstore.resources import HostScopedCollection, ResourceCollection

from .format import JsonFormatter, PrintFormatter, StructFormatter, YamlFormatter

__all__ = [
    "GetAction",
]

_LOGGER = logging.getLogger(__name__)

KINDS = ["containers", "networks", "nodes", "services", "volumes"]

COLUMNS = {
    "containers": ["Name", "ServiceName", "TaskNum", "Owner"],
    "networks": ["ID", "Name", "Driver", "Owner"],
    "nodes": ["Hostname", "Role", "Availability", "State", "Address"],
    "services": ["Name", "VirtualIP", "ResolutionMode", "Owner"],
    "volumes": ["Name", "Driver", "Owner"],
}

FORMATTERS: dict[str, type[StructFormatter]] = {
    "yaml": YamlFormatter,
    "json": JsonFormatter,
}


class GetAction:
    """Get entities stored for a resource kind."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print stored entities",
                description="Print the entities stored for a resource kind",
            ),
        )
        args.add_argument("kind", choices=KINDS, help="Kind of resource")
        args.add_argument(
            "key",
            nargs="?",
            default=None,
            help="Key of a single entity. All entities are printed when omitted",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=sorted(FORMATTERS),
            default=None,
            help="Output format of the command",
        )
        args.add_argument(
            "--all-hosts",
            action="store_true",
            help="For containers and volumes, include entities of every host",
        )
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        kvstore: KVStore,
        kind: str,
        key: str | None,
        output: str | None,
        all_hosts: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        collection: ResourceCollection[Any] = getattr(kvstore, kind)
        if key is not None:
            entities = [collection.get(key)]
        elif all_hosts:
            if not isinstance(collection, HostScopedCollection):
                _LOGGER.debug("%s are not host scoped, listing all", kind)
                entities = list(collection.list().values())
            else:
                entities = list(collection.list_all().values())
        else:
            entities = list(collection.list().values())
        data = [entity.to_dict() for entity in entities]
        if output is None:
            data.sort(key=lambda row: str(row.get(COLUMNS[kind][0], "")))
            PrintFormatter(COLUMNS[kind]).print(data)
            return
        FORMATTERS[output]().print(data)
