"""Helpers for tearing down a group's remote connections."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from flowsync.client.base import RemoteControlClient
from flowsync.models import RemoteConnection

logger = logging.getLogger(__name__)


async def select_for_undeploy(
    client: RemoteControlClient,
    group_id: str,
    template_names: Iterable[str],
) -> list[RemoteConnection]:
    """Return the group's remote connections whose names come from a template."""
    names = set(template_names)
    connections = await client.fetch_connections_for_group(group_id)
    return [c for c in connections if c.name in names]


async def delete_all_remote_connections(
    client: RemoteControlClient,
    group_id: str,
) -> list[str]:
    """Delete every remote connection owned by *group_id*; returns the deleted ids."""
    group = await client.fetch_group(group_id)
    logger.info("Deleting all remote connections of %s starts", group.name or group.id)
    connections = await client.fetch_connections_for_group(group_id)
    if not connections:
        logger.warning("No remote connections found for group %s", group.name or group.id)
        return []

    deleted: list[str] = []
    for connection in connections:
        await client.delete_connection(connection.id)
        deleted.append(connection.id)
    logger.info("Deleted %d remote connections from %s", len(deleted), group.name or group.id)
    return deleted
