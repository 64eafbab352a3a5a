"""Bounded retries for reads that may race with another writer.

A value written by an agent on another host may not be visible yet when it
is read here. `retry_read` waits a fixed interval between attempts, blocking
the calling thread, so it must not be used on a latency sensitive path.
"""

from collections.abc import Callable
from dataclasses import dataclass
import logging
import time
from typing import TypeVar

from .exceptions import BackendError, KeyNotFoundError

__all__ = [
    "MAX_RETRY_COUNT",
    "RETRY_INTERVAL",
    "RetryPolicy",
    "retry_read",
]

_LOGGER = logging.getLogger(__name__)

MAX_RETRY_COUNT = 10
RETRY_INTERVAL = 1.0

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed interval retry settings."""

    max_retries: int = MAX_RETRY_COUNT
    """Retries after the first attempt."""

    interval: float = RETRY_INTERVAL
    """Seconds to sleep before each retry."""

    @property
    def max_attempts(self) -> int:
        """Total number of attempts including the first one."""
        return self.max_retries + 1


def retry_read(read: Callable[[], T], policy: RetryPolicy | None = None) -> T:
    """Call `read` until it succeeds or the policy is exhausted.

    Missing keys and backend failures are retried. Any other error, such as a
    value that fails to decode, is raised immediately.

    Raises:
        KeyNotFoundError | BackendError: The error of the last attempt.
    """
    policy = policy or RetryPolicy()
    attempt = 1
    while True:
        try:
            return read()
        except (KeyNotFoundError, BackendError) as err:
            if attempt >= policy.max_attempts:
                _LOGGER.debug("Giving up after %d attempts: %s", attempt, err)
                raise
            _LOGGER.debug(
                "Read attempt %d/%d failed (%s), retrying in %ss",
                attempt,
                policy.max_attempts,
                err,
                policy.interval,
            )
        time.sleep(policy.interval)
        attempt += 1
