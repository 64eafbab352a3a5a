"""Runtime documents shared by the resource tests."""

from typing import Any

import pytest

OVERLAY_ID = "net0123456789"
INGRESS_ID = "ingress0123456"


@pytest.fixture
def network_doc() -> dict[str, Any]:
    """A runtime document of an overlay network."""
    return {
        "Id": OVERLAY_ID,
        "Name": "backend",
        "Driver": "overlay",
        "IPAM": {
            "Driver": "default",
            "Config": [{"Subnet": "10.0.1.0/24", "Gateway": "10.0.1.1"}],
        },
        "Labels": {
            "com.docker.swarm.owner": "team-a",
            "com.docker.swarm.owner.name": "Team A",
        },
    }


@pytest.fixture
def ingress_doc() -> dict[str, Any]:
    """A runtime document of the ingress network."""
    return {"Id": INGRESS_ID, "Name": "ingress", "Driver": "overlay"}


@pytest.fixture
def container_doc() -> dict[str, Any]:
    """A runtime document of a container running a swarm task."""
    return {
        "Id": "abc1234567890",
        "Names": ["/web.1.x8f2kd93"],
        "Labels": {
            "com.docker.swarm.task.name": "web.1.x8f2kd93",
            "com.docker.swarm.owner": "team-a",
        },
        "NetworkSettings": {
            "Networks": {
                "backend": {
                    "NetworkID": OVERLAY_ID,
                    "IPAddress": "10.0.1.5",
                    "Gateway": "10.0.1.1",
                    "MacAddress": "02:42:0a:00:01:05",
                },
                "ingress": {"NetworkID": INGRESS_ID, "IPAddress": "10.255.0.7"},
                "unknown": {"NetworkID": "missing", "IPAddress": "172.18.0.2"},
            }
        },
        "Mounts": [
            {"Type": "volume", "Name": "web-data", "Driver": "local"},
        ],
    }
