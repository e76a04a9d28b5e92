"""Public entry point: drive a process-group tree to a transmission state.

Quickstart::

    from flowsync.client import NiFiClient
    from flowsync.models import TargetState
    from flowsync.orchestrator import sync

    async with NiFiClient("http://nifi:8080") as client:
        report = await sync(client, root_id, TargetState.DISABLE, timeout_seconds=120)

Callers must serialize runs per root group; overlapping runs are not
guarded against.
"""

from __future__ import annotations

import asyncio
import logging

from flowsync.client.base import ControlClientError, NotFoundError, RemoteControlClient
from flowsync.models import GroupReport, SyncReport, SyncStatus, TargetState
from flowsync.poller import DEFAULT_POLL_INTERVAL, ConvergencePoller
from flowsync.transition import DEFAULT_MAX_WAIT_SECONDS, ConnectionStateTransition
from flowsync.walker import GroupStateWalker

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Validates a request, applies the enable feature gate and runs the walker."""

    def __init__(
        self,
        client: RemoteControlClient,
        max_wait_seconds: int = DEFAULT_MAX_WAIT_SECONDS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._client = client
        poller = ConvergencePoller(client, poll_interval=poll_interval)
        transition = ConnectionStateTransition(client, poller, max_wait_seconds=max_wait_seconds)
        self._walker = GroupStateWalker(client, transition)

    async def sync(
        self,
        root_group_id: str,
        target: TargetState,
        timeout_seconds: float | None = None,
    ) -> SyncReport:
        """Converge every remote connection under *root_group_id* to *target*.

        Raises :class:`ValueError` for a missing root id or an unknown target
        and :class:`~flowsync.client.base.NotFoundError` when the root group
        does not exist.  Every other failure is reported in the result.
        """
        if not root_group_id:
            raise ValueError("root_group_id is required")
        if not isinstance(target, TargetState):
            raise ValueError(f"Unknown target state: {target!r}")

        if target is TargetState.ENABLE and not self._client.is_remote_enable_feature_active():
            logger.warning("Remote enable is switched off; skipping enable of %s", root_group_id)
            return SyncReport(root_group_id=root_group_id, target=target, status=SyncStatus.SKIPPED)

        try:
            root = await self._client.fetch_group(root_group_id, include_children=False)
        except NotFoundError:
            raise
        except ControlClientError as exc:
            logger.error("Reading root group %s failed: %s", root_group_id, exc)
            return SyncReport(
                root_group_id=root_group_id,
                target=target,
                status=SyncStatus.PARTIAL,
                groups=[GroupReport(group_id=root_group_id, error=str(exc))],
            )
        logger.info("Sync of %s (%s) toward %s starts", root.name or root.id, root.id, target.value)

        deadline = None
        if timeout_seconds is not None:
            deadline = asyncio.get_running_loop().time() + timeout_seconds

        return await self._walker.walk(root_group_id, target, deadline)


async def sync(
    client: RemoteControlClient,
    root_group_id: str,
    target: TargetState,
    timeout_seconds: float | None = None,
    max_wait_seconds: int = DEFAULT_MAX_WAIT_SECONDS,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> SyncReport:
    """One-shot helper around :class:`SyncOrchestrator`."""
    orchestrator = SyncOrchestrator(
        client, max_wait_seconds=max_wait_seconds, poll_interval=poll_interval
    )
    return await orchestrator.sync(root_group_id, target, timeout_seconds)
