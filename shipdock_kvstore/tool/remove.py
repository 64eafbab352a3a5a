"""shipdock-kvstore remove action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
import logging
from typing import cast

from shipdock_kvstore.kvstore import KVStore

__all__ = [
    "RemoveAction",
]

_LOGGER = logging.getLogger(__name__)


class RemoveAction:
    """Remove a path and prune the directories it leaves empty."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "remove",
                aliases=["rm"],
                help="Remove a path from the store",
                description=(
                    "Remove a path relative to the namespace root, along with "
                    "everything below it"
                ),
            ),
        )
        args.add_argument("path", help="Path relative to the namespace root")
        args.set_defaults(cls=cls)
        return args

    def run(  # type: ignore[no-untyped-def]
        self,
        kvstore: KVStore,
        path: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Action implementation."""
        target = kvstore.path(path)
        _LOGGER.info("Removing %s", target)
        kvstore.remove(target)
