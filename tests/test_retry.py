"""Tests for the retry read policy."""

from collections.abc import Generator
from unittest import mock

import pytest

from shipdock_kvstore.exceptions import BackendError, DecodeError, KeyNotFoundError
from shipdock_kvstore.retry import RetryPolicy, retry_read


@pytest.fixture(autouse=True)
def mock_sleep() -> Generator[mock.Mock, None, None]:
    """Do not wait between attempts."""
    with mock.patch("shipdock_kvstore.retry.time.sleep") as sleep:
        yield sleep


class FlakyRead:
    """A read that fails until a given attempt."""

    def __init__(self, succeed_on: int, error: Exception) -> None:
        self.succeed_on = succeed_on
        self.error = error
        self.attempts = 0

    def __call__(self) -> str:
        self.attempts += 1
        if self.attempts < self.succeed_on:
            raise self.error
        return "value"


def test_default_policy() -> None:
    """Test the default retry settings."""
    policy = RetryPolicy()
    assert policy.max_retries == 10
    assert policy.interval == 1.0
    assert policy.max_attempts == 11


def test_first_attempt_succeeds(mock_sleep: mock.Mock) -> None:
    """Test that a successful read does not wait."""
    read = FlakyRead(succeed_on=1, error=KeyNotFoundError("k"))
    assert retry_read(read) == "value"
    assert read.attempts == 1
    mock_sleep.assert_not_called()


@pytest.mark.parametrize("succeed_on", [2, 5, 11])
def test_value_appears_within_attempts(
    mock_sleep: mock.Mock, succeed_on: int
) -> None:
    """Test that a key becoming readable on attempt k is returned."""
    read = FlakyRead(succeed_on=succeed_on, error=KeyNotFoundError("k"))
    assert retry_read(read, RetryPolicy(max_retries=10, interval=0.5)) == "value"
    assert read.attempts == succeed_on
    assert mock_sleep.call_count == succeed_on - 1
    mock_sleep.assert_called_with(0.5)


def test_value_never_appears(mock_sleep: mock.Mock) -> None:
    """Test that the missing key error is raised once attempts run out."""
    read = FlakyRead(succeed_on=100, error=KeyNotFoundError("k"))
    with pytest.raises(KeyNotFoundError):
        retry_read(read, RetryPolicy(max_retries=3, interval=1.0))
    assert read.attempts == 4
    assert mock_sleep.call_count == 3


def test_backend_errors_are_retried() -> None:
    """Test that transient backend failures are retried."""
    read = FlakyRead(succeed_on=3, error=BackendError("timeout"))
    assert retry_read(read, RetryPolicy(max_retries=2)) == "value"


def test_decode_errors_are_not_retried(mock_sleep: mock.Mock) -> None:
    """Test that a value that fails to decode is raised immediately."""
    read = FlakyRead(succeed_on=3, error=DecodeError("k", "bad"))
    with pytest.raises(DecodeError):
        retry_read(read)
    assert read.attempts == 1
    mock_sleep.assert_not_called()
