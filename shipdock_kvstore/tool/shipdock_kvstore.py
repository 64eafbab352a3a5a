"""Command line tool for inspecting the cluster state held in the store."""

import argparse
import logging
import os
import sys
import traceback

from shipdock_kvstore.backend import BackendRegistry
from shipdock_kvstore.config import StoreConfig
from shipdock_kvstore.exceptions import KVStoreException
from shipdock_kvstore.kvstore import KVStore

from . import get, remove

_LOGGER = logging.getLogger(__name__)

STORE_URL_ENV = "SHIPDOCK_KVSTORE_URL"


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for inspecting shipdock cluster state.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )
    parser.add_argument(
        "--store-url",
        default=os.environ.get(STORE_URL_ENV),
        help=(
            "Store connection descriptor, e.g. consul://127.0.0.1:8500/shipdock "
            f"(default: ${STORE_URL_ENV})"
        ),
    )
    parser.add_argument(
        "--connection-timeout",
        default="",
        help="Backend connection timeout, e.g. 3s or 500ms",
    )
    parser.add_argument("--username", default="", help="Backend username")
    parser.add_argument("--password", default="", help="Backend password")
    parser.add_argument(
        "--hostname",
        default=None,
        help="Host segment of host scoped resources (default: this host)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    get.GetAction.register(subparsers)
    remove.RemoveAction.register(subparsers)
    return parser


def main(
    argv: list[str] | None = None, registry: BackendRegistry | None = None
) -> None:
    """shipdock-kvstore command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    if not args.store_url:
        parser.error(f"--store-url or ${STORE_URL_ENV} is required")

    action = args.cls()
    try:
        config = StoreConfig.from_url(
            args.store_url,
            connection_timeout=args.connection_timeout,
            username=args.username,
            password=args.password,
        )
        with KVStore.from_config(
            config, registry=registry, hostname=args.hostname
        ) as kvstore:
            action.run(kvstore, **vars(args))
    except KVStoreException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("shipdock-kvstore error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
