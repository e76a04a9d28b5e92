"""NiFi implementation of the flowsync control-plane client.

Every method maps to one or two ``/nifi-api`` calls. Updates and deletes
read the remote process group first because NiFi rejects any write that
does not carry the current revision.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from flowsync.client.base import (
    AuthError,
    ControlClientError,
    NotFoundError,
    RemoteControlClient,
    TransportFailure,
)
from flowsync.models import ProcessGroup, RemoteConnection, TargetState

logger = logging.getLogger(__name__)


class NiFiClient(RemoteControlClient):
    """Reads process groups and remote process groups, and toggles
    ``transmitting``, through the NiFi REST API.

    ``enable_rpg`` mirrors the deployment switch that keeps remote
    transmission off; ENABLE runs are skipped while it is false.  Close with
    :meth:`aclose` or use as an async context manager.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        enable_rpg: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/nifi-api"
        self.token = token
        self.timeout = timeout
        self.enable_rpg = enable_rpg
        self._client: httpx.AsyncClient = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers(),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and free resources."""
        await self._client.aclose()

    async def __aenter__(self) -> "NiFiClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # RemoteControlClient interface
    # ------------------------------------------------------------------ #

    async def fetch_group(self, group_id: str, include_children: bool = True) -> ProcessGroup:
        """Return the latest group entity (GET /process-groups/{id}).

        Child ids need a second call to the flow endpoint; pass
        ``include_children=False`` when they are already known.
        """
        entity = await self._get(f"/process-groups/{group_id}")
        if not include_children:
            return self._to_group(entity)
        children = await self._child_entities(group_id)
        return self._to_group(entity, child_ids=tuple(c["id"] for c in children))

    async def fetch_child_groups(self, group_id: str) -> list[ProcessGroup]:
        """Return child group snapshots (GET /flow/process-groups/{id})."""
        return [self._to_group(e) for e in await self._child_entities(group_id)]

    async def fetch_connections_for_group(self, group_id: str) -> list[RemoteConnection]:
        """Return remote process groups (GET /process-groups/{id}/remote-process-groups)."""
        result = await self._get(f"/process-groups/{group_id}/remote-process-groups")
        entities = result.get("remoteProcessGroups") if isinstance(result, dict) else None
        return [self._to_connection(e, group_id) for e in entities or []]

    async def set_connection_state(self, connection_id: str, target: TargetState) -> None:
        """Update ``transmitting`` (PUT /remote-process-groups/{id}).

        NiFi rejects stale revisions, so the latest entity is read first.
        """
        entity = await self._get(f"/remote-process-groups/{connection_id}")
        payload = {
            "revision": {"version": self._revision(entity)},
            "component": {"id": connection_id, "transmitting": target.transmitting},
        }
        logger.debug("Setting %s transmitting=%s", connection_id, target.flag_text)
        await self._put(f"/remote-process-groups/{connection_id}", payload)

    async def fetch_connection_state(self, connection_id: str) -> bool | str:
        entity = await self._get(f"/remote-process-groups/{connection_id}")
        return (entity.get("component") or {}).get("transmitting", False)

    async def delete_connection(self, connection_id: str) -> None:
        """Remove a remote process group (DELETE /remote-process-groups/{id}?version=N)."""
        entity = await self._get(f"/remote-process-groups/{connection_id}")
        await self._delete(
            f"/remote-process-groups/{connection_id}",
            params={"version": self._revision(entity)},
        )

    def is_remote_enable_feature_active(self) -> bool:
        return self.enable_rpg

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _child_entities(self, group_id: str) -> list[dict]:
        result = await self._get(f"/flow/process-groups/{group_id}")
        flow = ((result or {}).get("processGroupFlow") or {}).get("flow") or {}
        return flow.get("processGroups") or []

    async def _get(self, path: str) -> Any:
        return await self._request("GET", path)

    async def _put(self, path: str, data: dict) -> Any:
        return await self._request("PUT", path, json=data)

    async def _delete(self, path: str, params: dict | None = None) -> Any:
        return await self._request("DELETE", path, params=params)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            raise TransportFailure(f"Cannot reach NiFi at {url}: {exc}") from exc
        self._raise_for_status(response, url)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise TransportFailure(f"NiFi sent a non-JSON body for {url}: {exc}") from exc

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status in (401, 403):
            raise AuthError(f"NiFi returned {status} for {url}; check your token")
        if status == 404:
            raise NotFoundError(f"NiFi has no resource at {url}")
        if status >= 500:
            raise TransportFailure(f"NiFi returned {status} for {url}: {response.text[:300]}")
        if status >= 400:
            raise ControlClientError(f"NiFi returned {status} for {url}: {response.text[:300]}")

    @staticmethod
    def _revision(entity: dict) -> int:
        return int((entity.get("revision") or {}).get("version", 0))

    @staticmethod
    def _to_group(entity: dict, child_ids: tuple[str, ...] = ()) -> ProcessGroup:
        component = entity.get("component") or {}
        return ProcessGroup(
            id=entity["id"],
            name=component.get("name", ""),
            child_ids=child_ids,
            active_remote_port_count=int(entity.get("activeRemotePortCount") or 0),
            inactive_remote_port_count=int(entity.get("inactiveRemotePortCount") or 0),
        )

    @classmethod
    def _to_connection(cls, entity: dict, group_id: str) -> RemoteConnection:
        component = entity.get("component") or {}
        return RemoteConnection(
            id=entity["id"],
            group_id=component.get("parentGroupId") or group_id,
            name=component.get("name", ""),
            transmitting=bool(component.get("transmitting", False)),
            revision=cls._revision(entity),
        )
