"""Configuration objects for shipdock-kvstore."""

from dataclasses import dataclass, field
import re
from urllib.parse import urlparse

from .exceptions import ConfigException
from .paths import trim_relative

__all__ = [
    "DEFAULT_CONNECTION_TIMEOUT",
    "StoreConfig",
    "parse_duration",
]

DEFAULT_CONNECTION_TIMEOUT = 3.0
"""Seconds to wait for the backend when no timeout is configured."""

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str) -> float:
    """Parse a duration string such as `3s`, `500ms` or `1m30s` into seconds."""
    text = value.strip()
    if not text:
        raise ConfigException("Empty duration")
    if text == "0":
        return 0.0
    pos = 0
    total = 0.0
    while pos < len(text):
        if not (match := _DURATION_PART.match(text, pos)):
            raise ConfigException(f"Invalid duration '{value}'")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return total


@dataclass
class StoreConfig:
    """Connection settings for the backend store.

    Built from a connection descriptor of the form
    `scheme://host[:port][,host...]/root-path`.
    """

    scheme: str
    """Name of the backend, e.g. `consul` or `etcd`."""

    hosts: list[str] = field(default_factory=list)
    """Backend endpoints as `host[:port]`."""

    root_path: str = ""
    """Namespace root inside the store, without surrounding separators."""

    connection_timeout: float = DEFAULT_CONNECTION_TIMEOUT
    """Seconds to wait for each backend request."""

    username: str | None = None
    password: str | None = None

    @classmethod
    def from_url(
        cls,
        url: str,
        connection_timeout: str = "",
        username: str = "",
        password: str = "",
    ) -> "StoreConfig":
        """Parse a connection descriptor and optional connection parameters."""
        uri = urlparse(url.strip())
        if not uri.scheme:
            raise ConfigException(f"Store url is missing a scheme: {url}")
        if not uri.netloc:
            raise ConfigException(f"Store url is missing a host: {url}")
        hosts = [host.strip() for host in uri.netloc.split(",") if host.strip()]
        timeout = DEFAULT_CONNECTION_TIMEOUT
        if connection_timeout:
            timeout = parse_duration(connection_timeout)
        config = cls(
            scheme=uri.scheme.lower(),
            hosts=hosts,
            root_path=trim_relative(uri.path),
            connection_timeout=timeout,
        )
        if username and password:
            config.username = username
            config.password = password
        return config

    @property
    def has_credentials(self) -> bool:
        """Return True when both username and password are configured."""
        return bool(self.username and self.password)
