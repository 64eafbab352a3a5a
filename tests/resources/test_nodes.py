"""Tests for stored nodes."""

import json

import pytest

from shipdock_kvstore.backend import InMemoryStore
from shipdock_kvstore.exceptions import InputException
from shipdock_kvstore.kvstore import KVStore
from shipdock_kvstore.resources import Node

NODE_DOC = {
    "ID": "node-id-1",
    "Spec": {
        "Labels": {"zone": "a"},
        "Role": "manager",
        "Availability": "active",
    },
    "Description": {
        "Hostname": "host-a",
        "Platform": {"Architecture": "x86_64", "OS": "linux"},
        "Resources": {"NanoCPUs": 4000000000, "MemoryBytes": 8589934592},
        "Engine": {"EngineVersion": "24.0.7"},
    },
    "Status": {"State": "ready", "Addr": "192.168.0.10"},
}


def test_parse_doc() -> None:
    """Test translating a runtime node."""
    assert Node.parse_doc(NODE_DOC) == Node(
        hostname="host-a",
        id="node-id-1",
        labels={"zone": "a"},
        role="manager",
        availability="active",
        architecture="x86_64",
        os="linux",
        nano_cpus=4000000000,
        memory_bytes=8589934592,
        engine_version="24.0.7",
        state="ready",
        address="192.168.0.10",
    )


@pytest.mark.parametrize(
    "doc",
    [
        {"Description": {"Hostname": "host-a"}},
        {"ID": "node-id-1"},
        {"ID": "node-id-1", "Description": {}},
    ],
)
def test_parse_doc_invalid(doc: dict) -> None:
    """Test that nodes missing an ID or hostname are rejected."""
    with pytest.raises(InputException):
        Node.parse_doc(doc)


def test_put_keyed_by_hostname(kvstore: KVStore, store: InMemoryStore) -> None:
    """Test writing a node keyed by its hostname."""
    kvstore.nodes.put(NODE_DOC)
    doc = json.loads(store.get("shipdock/nodes/host-a").value)
    assert doc["Hostname"] == "host-a"
    assert doc["NanoCPUs"] == 4000000000
    assert kvstore.nodes.get("host-a").role == "manager"


def test_sync(kvstore: KVStore) -> None:
    """Test converging the nodes of the cluster."""
    kvstore.nodes.put({"ID": "old", "Description": {"Hostname": "host-z"}})
    result = kvstore.nodes.sync([NODE_DOC])
    assert result.added == ["host-a"]
    assert result.deleted == ["host-z"]
    assert list(kvstore.nodes.list()) == ["host-a"]
