"""pytest configuration and shared fakes for flowsync tests."""

from __future__ import annotations

import pytest

from flowsync.client.base import NotFoundError, RemoteControlClient, TransportFailure
from flowsync.models import ProcessGroup, RemoteConnection, TargetState


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


class FakeControlClient(RemoteControlClient):
    """In-memory control plane that records every remote call.

    Port counts are derived on every read from the group's own connections
    and all of its descendants, the way NiFi reports them.
    """

    def __init__(self, enable_rpg: bool = True, lag: int = 0) -> None:
        self.enable_rpg = enable_rpg
        self.lag = lag
        self.groups: dict[str, dict] = {}
        self.connections: dict[str, dict] = {}
        self.calls: list[tuple[str, str]] = []
        self.set_errors: set[str] = set()
        self.group_errors: set[str] = set()
        self.stuck: set[str] = set()

    # -- topology setup ------------------------------------------------- #

    def add_group(self, group_id: str, parent: str | None = None, name: str = "") -> None:
        self.groups[group_id] = {"name": name or group_id, "children": []}
        if parent is not None:
            self.groups[parent]["children"].append(group_id)

    def add_connection(self, connection_id: str, group_id: str, transmitting: bool,
                       name: str = "") -> None:
        self.connections[connection_id] = {
            "group": group_id,
            "name": name or connection_id,
            "transmitting": transmitting,
            "pending": None,
            "reads_left": 0,
        }

    def set_calls(self) -> list[str]:
        return [cid for op, cid in self.calls if op == "set"]

    # -- RemoteControlClient -------------------------------------------- #

    async def fetch_group(self, group_id: str, include_children: bool = True) -> ProcessGroup:
        self.calls.append(("fetch_group", group_id))
        self._check_group(group_id)
        return self._snapshot(group_id)

    async def fetch_child_groups(self, group_id: str) -> list[ProcessGroup]:
        self.calls.append(("fetch_child_groups", group_id))
        self._check_group(group_id)
        return [self._snapshot(c) for c in self.groups[group_id]["children"]]

    async def fetch_connections_for_group(self, group_id: str) -> list[RemoteConnection]:
        self.calls.append(("fetch_connections", group_id))
        self._check_group(group_id)
        return [
            RemoteConnection(cid, c["group"], c["name"], c["transmitting"])
            for cid, c in self.connections.items()
            if c["group"] == group_id
        ]

    async def set_connection_state(self, connection_id: str, target: TargetState) -> None:
        self.calls.append(("set", connection_id))
        if connection_id in self.set_errors:
            raise TransportFailure(f"connection refused for {connection_id}")
        conn = self.connections[connection_id]
        if connection_id in self.stuck:
            return
        conn["pending"] = target.transmitting
        conn["reads_left"] = self.lag
        if self.lag == 0:
            conn["transmitting"] = target.transmitting

    async def fetch_connection_state(self, connection_id: str) -> bool | str:
        self.calls.append(("state", connection_id))
        conn = self.connections[connection_id]
        if conn["pending"] is not None:
            if conn["reads_left"] == 0:
                conn["transmitting"] = conn["pending"]
                conn["pending"] = None
            else:
                conn["reads_left"] -= 1
        return "true" if conn["transmitting"] else "false"

    async def delete_connection(self, connection_id: str) -> None:
        self.calls.append(("delete", connection_id))
        del self.connections[connection_id]

    def is_remote_enable_feature_active(self) -> bool:
        return self.enable_rpg

    async def __aenter__(self) -> "FakeControlClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        return None

    # -- helpers -------------------------------------------------------- #

    def _check_group(self, group_id: str) -> None:
        if group_id not in self.groups:
            raise NotFoundError(f"no group {group_id}")
        if group_id in self.group_errors:
            raise TransportFailure(f"timeout reading {group_id}")

    def _subtree(self, group_id: str) -> list[str]:
        ids = [group_id]
        for child in self.groups[group_id]["children"]:
            ids.extend(self._subtree(child))
        return ids

    def _snapshot(self, group_id: str) -> ProcessGroup:
        subtree = set(self._subtree(group_id))
        flags = [c["transmitting"] for c in self.connections.values() if c["group"] in subtree]
        return ProcessGroup(
            id=group_id,
            name=self.groups[group_id]["name"],
            child_ids=tuple(self.groups[group_id]["children"]),
            active_remote_port_count=sum(1 for f in flags if f),
            inactive_remote_port_count=sum(1 for f in flags if not f),
        )


@pytest.fixture
def fake_client():
    return FakeControlClient()


@pytest.fixture
def nested_tree(fake_client):
    """root -> A -> B, one connection per group, all transmitting."""
    fake_client.add_group("root")
    fake_client.add_group("A", parent="root")
    fake_client.add_group("B", parent="A")
    fake_client.add_connection("rpg-root", "root", transmitting=True)
    fake_client.add_connection("rpg-a", "A", transmitting=True)
    fake_client.add_connection("rpg-b", "B", transmitting=True)
    return fake_client
