"""Test helpers for shipdock-kvstore tools."""

from shipdock_kvstore.backend import BackendRegistry, InMemoryStore
from shipdock_kvstore.tool.shipdock_kvstore import main

STORE_URL = "memory://localhost/shipdock"


def run_tool(store: InMemoryStore, args: list[str]) -> None:
    """Run the command line tool against an in memory store."""
    registry = BackendRegistry()
    registry.register("memory", lambda config: store)
    main(["--store-url", STORE_URL, "--hostname", "host-a"] + args, registry=registry)
