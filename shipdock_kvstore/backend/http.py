"""Shared HTTP plumbing for backends that speak JSON over HTTP."""

import logging
from typing import Any

import requests

from shipdock_kvstore.config import StoreConfig
from shipdock_kvstore.exceptions import BackendError

__all__ = [
    "HttpClient",
    "raise_for_status",
]

_LOGGER = logging.getLogger(__name__)


class HttpClient:
    """Blocking HTTP client that fails over across the configured hosts.

    A host that refuses connections or times out is skipped and the next one
    is tried. The last host that answered is tried first on the next request.
    """

    def __init__(
        self,
        config: StoreConfig,
        session: requests.Session | None = None,
        scheme: str = "http",
    ) -> None:
        """Initialize the HttpClient."""
        if not config.hosts:
            raise BackendError(f"No hosts configured for {config.scheme} backend")
        self._hosts = list(config.hosts)
        self._scheme = scheme
        self._timeout = config.connection_timeout or None
        self._session = session or requests.Session()
        self._headers: dict[str, str] = {}

    @property
    def session(self) -> requests.Session:
        """The underlying requests session."""
        return self._session

    def set_header(self, name: str, value: str) -> None:
        """Send a header with every subsequent request."""
        self._headers[name] = value

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: bytes | None = None,
    ) -> requests.Response:
        """Send a request, trying each host in turn on connection failures.

        The response is returned for any HTTP status; the caller decides what
        a status means for its backend.
        """
        last_error: requests.RequestException | None = None
        for host in list(self._hosts):
            url = f"{self._scheme}://{host}/{path.lstrip('/')}"
            try:
                response = self._session.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    data=data,
                    headers=self._headers,
                    timeout=self._timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as err:
                _LOGGER.debug("Request to %s failed: %s", url, err)
                last_error = err
                continue
            except requests.RequestException as err:
                raise BackendError(f"{method} {url} failed: {err}") from err
            if host != self._hosts[0]:
                self._hosts.remove(host)
                self._hosts.insert(0, host)
            return response
        raise BackendError(
            f"{method} {path} failed on all hosts {self._hosts}: {last_error}"
        ) from last_error

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()


def raise_for_status(response: requests.Response) -> None:
    """Raise a BackendError for an unexpected HTTP status."""
    if response.ok:
        return
    raise BackendError(
        f"{response.request.method} {response.url} returned "
        f"{response.status_code}: {response.text.strip()}"
    )
