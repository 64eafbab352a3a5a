"""Store backed by the etcd v3 JSON gateway."""

import base64
import logging
from typing import Any

import requests

from shipdock_kvstore.config import StoreConfig
from shipdock_kvstore.exceptions import BackendError, KeyNotFoundError
from shipdock_kvstore.paths import SEPARATOR, trim_relative

from .http import HttpClient, raise_for_status
from .store import KVPair, Store, WriteOptions

__all__ = [
    "EtcdStore",
]

_LOGGER = logging.getLogger(__name__)


def _encode(value: bytes | str) -> str:
    if isinstance(value, str):
        value = value.encode()
    return base64.b64encode(value).decode("ascii")


def _decode(value: str | None) -> bytes:
    if not value:
        return b""
    return base64.b64decode(value)


def prefix_range_end(prefix: bytes) -> bytes:
    """Return the exclusive end of the key range sharing `prefix`."""
    end = bytearray(prefix)
    for i in reversed(range(len(end))):
        if end[i] < 0xFF:
            end[i] += 1
            return bytes(end[: i + 1])
    # All bytes were 0xff, so the range extends to the end of the keyspace.
    return b"\x00"


class EtcdStore(Store):
    """Store implementation for etcd using the v3 HTTP/JSON gateway.

    etcd has a flat keyspace, so directories are inferred from key prefixes.
    Directory markers are written as empty values.
    """

    def __init__(
        self, config: StoreConfig, session: requests.Session | None = None
    ) -> None:
        """Initialize the EtcdStore."""
        self._client = HttpClient(config, session=session)
        if config.has_credentials:
            self._authenticate(config.username or "", config.password or "")

    def _authenticate(self, username: str, password: str) -> None:
        result = self._call(
            "auth/authenticate", {"name": username, "password": password}
        )
        if not (token := result.get("token")):
            raise BackendError("etcd authentication did not return a token")
        self._client.set_header("Authorization", token)

    def _call(self, method: str, body: dict[str, Any]) -> dict[str, Any]:
        response = self._client.request("POST", f"v3/{method}", json=body)
        raise_for_status(response)
        try:
            return response.json()
        except ValueError as err:
            raise BackendError(f"Invalid response from etcd: {err}") from err

    def _range(self, key: str, prefix: bool = False) -> list[KVPair]:
        raw_key = trim_relative(key).encode()
        body = {"key": _encode(raw_key)}
        if prefix:
            start = raw_key + SEPARATOR.encode() if raw_key else b"\x00"
            body["key"] = _encode(start)
            body["range_end"] = _encode(
                prefix_range_end(start) if raw_key else b"\x00"
            )
        result = self._call("kv/range", body)
        return [
            KVPair(
                key=trim_relative(_decode(kv["key"]).decode()),
                value=_decode(kv.get("value")),
                last_index=int(kv.get("mod_revision", 0)),
            )
            for kv in result.get("kvs", ())
        ]

    def _delete_range(self, key: bytes, range_end: bytes | None = None) -> int:
        body = {"key": _encode(key)}
        if range_end is not None:
            body["range_end"] = _encode(range_end)
        result = self._call("kv/deleterange", body)
        return int(result.get("deleted", 0))

    def get(self, key: str) -> KVPair:
        """Return the value of a key."""
        if not (kvs := self._range(key)):
            raise KeyNotFoundError(trim_relative(key))
        return kvs[0]

    def put(self, key: str, value: bytes, options: WriteOptions | None = None) -> None:
        """Write a value for a key, attaching a lease when a ttl is requested."""
        body: dict[str, Any] = {"key": _encode(trim_relative(key))}
        if options is None or not options.is_dir:
            body["value"] = _encode(value)
        if options is not None and options.ttl:
            lease = self._call("lease/grant", {"TTL": int(options.ttl)})
            body["lease"] = lease["ID"]
        self._call("kv/put", body)

    def delete(self, key: str) -> None:
        """Delete a single key."""
        key = trim_relative(key)
        if not self._delete_range(key.encode()):
            raise KeyNotFoundError(key)

    def delete_tree(self, key: str) -> None:
        """Delete a key and everything below it."""
        key = trim_relative(key)
        deleted = self._delete_range(key.encode())
        start = f"{key}{SEPARATOR}".encode()
        deleted += self._delete_range(start, prefix_range_end(start))
        if not deleted:
            raise KeyNotFoundError(key)
        _LOGGER.debug("Deleted %d keys under %s", deleted, key)

    def list(self, prefix: str, recursive: bool = True) -> list[KVPair]:
        """List the entries below a directory."""
        prefix = trim_relative(prefix)
        base = f"{prefix}{SEPARATOR}" if prefix else ""
        results: dict[str, KVPair] = {}
        for entry in self._range(prefix, prefix=True):
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
