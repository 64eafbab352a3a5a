"""Tests for the consul backend."""

import pytest
import requests
from requests_mock import ANY, Mocker

from shipdock_kvstore.backend import ConsulStore, KVPair, WriteOptions
from shipdock_kvstore.config import StoreConfig
from shipdock_kvstore.exceptions import BackendError, KeyNotFoundError

KV_URL = "http://127.0.0.1:8500/v1/kv"


@pytest.fixture(name="consul")
def consul_fixture(consul_config: StoreConfig) -> ConsulStore:
    return ConsulStore(consul_config)


def test_get(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test reading a value."""
    requests_mock.get(
        f"{KV_URL}/root/a",
        json=[{"Key": "root/a", "Value": "MQ==", "ModifyIndex": 7}],
    )
    assert consul.get("/root/a") == KVPair(key="root/a", value=b"1", last_index=7)


def test_get_null_value(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test that a key without a value reads as empty."""
    requests_mock.get(f"{KV_URL}/root/a", json=[{"Key": "root/a/", "Value": None}])
    assert consul.get("root/a").value == b""


def test_get_missing(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test that a 404 is reported as a missing key."""
    requests_mock.get(f"{KV_URL}/root/a", status_code=404)
    with pytest.raises(KeyNotFoundError):
        consul.get("root/a")
    assert not consul.exists("root/a")


def test_get_server_error(
    consul: ConsulStore, requests_mock: Mocker
) -> None:
    """Test that other statuses are backend errors."""
    requests_mock.get(f"{KV_URL}/root/a", status_code=500, text="boom")
    with pytest.raises(BackendError, match="500: boom"):
        consul.get("root/a")


def test_put(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test writing a value."""
    requests_mock.put(f"{KV_URL}/root/a", json=True)
    consul.put("root/a", b'{"Name":"a"}')
    assert requests_mock.last_request.body == b'{"Name":"a"}'


def test_put_directory(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test writing a directory marker."""
    requests_mock.put(f"{KV_URL}/root/dir/", json=True)
    consul.put("root/dir", b"ignored", WriteOptions(is_dir=True))
    assert requests_mock.last_request.path == "/v1/kv/root/dir/"
    assert not requests_mock.last_request.body


def test_delete(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test deleting a single key."""
    requests_mock.get(f"{KV_URL}/root/a", json=[{"Key": "root/a", "Value": "MQ=="}])
    requests_mock.delete(f"{KV_URL}/root/a", json=True)
    consul.delete("root/a")
    assert [r.method for r in requests_mock.request_history] == ["GET", "DELETE"]


def test_delete_missing(
    consul: ConsulStore, requests_mock: Mocker
) -> None:
    """Test deleting a key that does not exist issues no delete."""
    requests_mock.get(f"{KV_URL}/root/a", status_code=404)
    with pytest.raises(KeyNotFoundError):
        consul.delete("root/a")
    assert [r.method for r in requests_mock.request_history] == ["GET"]


def test_delete_tree(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test deleting a directory without touching siblings sharing a prefix."""
    requests_mock.get(f"{KV_URL}/root/a", status_code=404)
    requests_mock.get(
        f"{KV_URL}/root/a/?recurse=true",
        json=[{"Key": "root/a/one", "Value": "MQ=="}],
    )
    requests_mock.delete(f"{KV_URL}/root/a", json=True)
    requests_mock.delete(f"{KV_URL}/root/a/", json=True)
    consul.delete_tree("root/a")
    assert [
        r.url for r in requests_mock.request_history if r.method == "DELETE"
    ] == [f"{KV_URL}/root/a", f"{KV_URL}/root/a/?recurse=true"]


def test_delete_tree_missing(
    consul: ConsulStore, requests_mock: Mocker
) -> None:
    """Test deleting a directory that does not exist."""
    requests_mock.get(f"{KV_URL}/root/a", status_code=404)
    requests_mock.get(f"{KV_URL}/root/a/", status_code=404)
    with pytest.raises(KeyNotFoundError):
        consul.delete_tree("root/a")
    assert all(r.method == "GET" for r in requests_mock.request_history)


@pytest.fixture(name="listing")
def listing_fixture(requests_mock: Mocker) -> None:
    requests_mock.get(
        f"{KV_URL}/root/a/?recurse=true",
        json=[
            {"Key": "root/a/", "Value": None},
            {"Key": "root/a/one", "Value": "MQ=="},
            {"Key": "root/a/nested/two", "Value": "Mg=="},
        ],
    )


@pytest.mark.usefixtures("listing")
def test_list_recursive(consul: ConsulStore) -> None:
    """Test listing every key below a directory."""
    assert {kv.key: kv.value for kv in consul.list("root/a")} == {
        "root/a/one": b"1",
        "root/a/nested/two": b"2",
    }


@pytest.mark.usefixtures("listing")
def test_list_one_level(consul: ConsulStore) -> None:
    """Test listing direct children only."""
    assert {kv.key: kv.value for kv in consul.list("root/a", recursive=False)} == {
        "root/a/one": b"1",
        "root/a/nested": b"",
    }


def test_list_missing(consul: ConsulStore, requests_mock: Mocker) -> None:
    """Test listing a directory that does not exist."""
    requests_mock.get(f"{KV_URL}/root/a/", status_code=404)
    with pytest.raises(KeyNotFoundError):
        consul.list("root/a")


def test_credentials(
    consul_config: StoreConfig, requests_mock: Mocker
) -> None:
    """Test that credentials are sent as basic auth."""
    consul_config.username = "agent"
    consul_config.password = "secret"
    consul = ConsulStore(consul_config)
    requests_mock.get(f"{KV_URL}/root/a", json=[{"Key": "root/a", "Value": "MQ=="}])
    consul.get("root/a")
    assert requests_mock.last_request.headers["Authorization"].startswith("Basic ")


def test_host_failover(requests_mock: Mocker) -> None:
    """Test that an unreachable host is skipped and demoted."""
    config = StoreConfig(scheme="consul", hosts=["down:8500", "127.0.0.1:8500"])
    consul = ConsulStore(config)
    requests_mock.get(
        "http://down:8500/v1/kv/root/a", exc=requests.exceptions.ConnectionError
    )
    requests_mock.get(f"{KV_URL}/root/a", json=[{"Key": "root/a", "Value": "MQ=="}])
    assert consul.get("root/a").value == b"1"
    assert consul.get("root/a").value == b"1"
    assert [r.hostname for r in requests_mock.request_history] == [
        "down",
        "127.0.0.1",
        "127.0.0.1",
    ]


def test_all_hosts_down(requests_mock: Mocker) -> None:
    """Test that a request fails once every host failed."""
    config = StoreConfig(scheme="consul", hosts=["down-1:8500", "down-2:8500"])
    consul = ConsulStore(config)
    requests_mock.get(ANY, exc=requests.exceptions.ConnectTimeout)
    with pytest.raises(BackendError, match="failed on all hosts"):
        consul.get("root/a")
    assert len(requests_mock.request_history) == 2
