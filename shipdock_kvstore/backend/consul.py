"""Store backed by the Consul HTTP key/value API."""

import base64
import logging
from typing import Any
from urllib.parse import quote

import requests

from shipdock_kvstore.config import StoreConfig
from shipdock_kvstore.exceptions import BackendError, KeyNotFoundError
from shipdock_kvstore.paths import SEPARATOR, trim_relative

from .http import HttpClient, raise_for_status
from .store import KVPair, Store, WriteOptions

__all__ = [
    "ConsulStore",
]

_LOGGER = logging.getLogger(__name__)

_KV_PATH = "v1/kv"


class ConsulStore(Store):
    """Store implementation for Consul.

    Directories in Consul are key prefixes, optionally with an explicit key
    ending in a separator. Those markers are reported as empty values.
    """

    def __init__(
        self, config: StoreConfig, session: requests.Session | None = None
    ) -> None:
        """Initialize the ConsulStore."""
        self._client = HttpClient(config, session=session)
        if config.has_credentials:
            self._client.session.auth = (config.username or "", config.password or "")

    def _url(self, key: str, directory: bool = False) -> str:
        path = quote(trim_relative(key), safe=SEPARATOR)
        if directory and path:
            path += SEPARATOR
        return f"{_KV_PATH}/{path}"

    def _read(self, key: str, directory: bool = False, **params: Any) -> list[KVPair]:
        response = self._client.request(
            "GET", self._url(key, directory), params=params or None
        )
        if response.status_code == 404:
            raise KeyNotFoundError(trim_relative(key))
        raise_for_status(response)
        try:
            entries = response.json()
        except ValueError as err:
            raise BackendError(f"Invalid response from consul: {err}") from err
        return [_parse_entry(entry) for entry in entries or ()]

    def get(self, key: str) -> KVPair:
        """Return the value of a key."""
        entries = self._read(key)
        if not entries:
            raise KeyNotFoundError(trim_relative(key))
        return entries[0]

    def put(self, key: str, value: bytes, options: WriteOptions | None = None) -> None:
        """Write a value for a key."""
        is_dir = options is not None and options.is_dir
        if options is not None and options.ttl:
            _LOGGER.debug("Consul KV does not expire keys, ignoring ttl for %s", key)
        response = self._client.request(
            "PUT",
            self._url(key, directory=is_dir),
            data=None if is_dir else value,
        )
        raise_for_status(response)

    def delete(self, key: str) -> None:
        """Delete a single key."""
        self.get(key)
        response = self._client.request("DELETE", self._url(key))
        raise_for_status(response)

    def delete_tree(self, key: str) -> None:
        """Delete a key and everything below it.

        Consul's recursive delete matches raw prefixes, so the key itself and
        the directory below it are deleted separately to avoid removing
        siblings that merely share a prefix.
        """
        if not self.exists(key) and not self._has_children(key):
            raise KeyNotFoundError(trim_relative(key))
        for url, params in (
            (self._url(key), None),
            (self._url(key, directory=True), {"recurse": "true"}),
        ):
            response = self._client.request("DELETE", url, params=params)
            raise_for_status(response)

    def _has_children(self, key: str) -> bool:
        try:
            return bool(self._read(key, directory=True, recurse="true"))
        except KeyNotFoundError:
            return False

    def list(self, prefix: str, recursive: bool = True) -> list[KVPair]:
        """List the entries below a directory."""
        prefix = trim_relative(prefix)
        entries = self._read(prefix, directory=True, recurse="true")
        base = f"{prefix}{SEPARATOR}" if prefix else ""
        results: dict[str, KVPair] = {}
        for entry in entries:
            if entry.key == prefix or not entry.key.startswith(base):
                continue
            if recursive:
                results[entry.key] = entry
                continue
            child, sep, _ = entry.key[len(base) :].partition(SEPARATOR)
            child_key = base + child
            if not sep:
                results[child_key] = entry
            elif child_key not in results:
                results[child_key] = KVPair(key=child_key, value=b"")
        if not results:
            raise KeyNotFoundError(prefix)
        return list(results.values())

    def close(self) -> None:
        """Close the HTTP session."""
        self._client.close()


def _parse_entry(entry: dict[str, Any]) -> KVPair:
    """Parse a single entry of a Consul KV response."""
    value = entry.get("Value")
    try:
        raw = base64.b64decode(value) if value else b""
    except ValueError as err:
        raise BackendError(f"Invalid value for {entry.get('Key')}: {err}") from err
    return KVPair(
        key=trim_relative(entry["Key"]),
        value=raw,
        last_index=int(entry.get("ModifyIndex", 0)),
    )
