"""Fixtures for backend tests."""

import pytest

from shipdock_kvstore.config import StoreConfig


@pytest.fixture(name="consul_config")
def consul_config_fixture() -> StoreConfig:
    return StoreConfig(scheme="consul", hosts=["127.0.0.1:8500"], root_path="root")


@pytest.fixture(name="etcd_config")
def etcd_config_fixture() -> StoreConfig:
    return StoreConfig(scheme="etcd", hosts=["127.0.0.1:2379"], root_path="root")
