"""Depth-first walk of a process-group tree toward a target transmission state.

Descendants are always handled before a group's own remote connections:

  - DISABLE recurses into children reporting active remote ports, so a
    parent is never reported disabled while its descendants still transmit.
  - ENABLE recurses into children reporting inactive remote ports, so a
    connection is only enabled once everything below it is ready.

The remote system is the only source of truth.  Nothing is cached across a
step that may change remote state; the group and its connections are
re-read after the recursion, right before transitions are applied.
"""

from __future__ import annotations

import logging

from flowsync.client.base import ControlClientError, NotFoundError, RemoteControlClient
from flowsync.models import (
    ConvergenceOutcome,
    ConvergenceResult,
    GroupReport,
    SyncReport,
    SyncStatus,
    TargetState,
)
from flowsync.poller import deadline_passed
from flowsync.transition import ConnectionStateTransition

logger = logging.getLogger(__name__)


class _WalkRun:
    """Mutable bookkeeping for a single walk."""

    def __init__(self, root_group_id: str, target: TargetState, deadline: float | None) -> None:
        self.target = target
        self.deadline = deadline
        self.report = SyncReport(root_group_id=root_group_id, target=target)
        self.converged_ids: set[str] = set()
        self.cancelled = False

    def expired(self) -> bool:
        if not self.cancelled and deadline_passed(self.deadline):
            logger.warning("Sync deadline reached; no further groups or connections will be started")
            self.cancelled = True
        return self.cancelled

    def finish(self) -> SyncReport:
        report = self.report
        if any(r.outcome is ConvergenceOutcome.CANCELLED for r in report.results):
            self.cancelled = True
        if self.cancelled:
            report.status = SyncStatus.CANCELLED
        elif all(g.ok for g in report.groups):
            report.status = SyncStatus.ALL_CONVERGED
        else:
            report.status = SyncStatus.PARTIAL
        return report


class GroupStateWalker:
    """Drives every remote connection under a group toward a target state."""

    def __init__(self, client: RemoteControlClient, transition: ConnectionStateTransition) -> None:
        self._client = client
        self._transition = transition

    async def walk(
        self,
        root_group_id: str,
        target: TargetState,
        deadline: float | None = None,
    ) -> SyncReport:
        run = _WalkRun(root_group_id, target, deadline)
        await self._walk_group(root_group_id, run, is_root=True)
        report = run.finish()
        logger.info(
            "Walk of %s toward %s finished: %s (%d converged, %d not converged)",
            root_group_id,
            target.value,
            report.status.value,
            len(report.converged),
            len(report.failed),
        )
        return report

    async def _walk_group(self, group_id: str, run: _WalkRun, is_root: bool = False) -> None:
        if run.expired():
            return

        try:
            children = await self._client.fetch_child_groups(group_id)
        except ControlClientError as exc:
            if is_root and isinstance(exc, NotFoundError):
                raise
            self._record_group_error(group_id, run, exc)
            return

        for child in children:
            if not child.needs_visit(run.target):
                continue
            await self._walk_group(child.id, run)
            if run.expired():
                return

        try:
            group = await self._client.fetch_group(group_id, include_children=False)
            connections = await self._client.fetch_connections_for_group(group_id)
        except ControlClientError as exc:
            if is_root and isinstance(exc, NotFoundError):
                raise
            self._record_group_error(group_id, run, exc)
            return

        report = GroupReport(group_id=group.id, name=group.name)
        run.report.groups.append(report)

        if not connections:
            logger.debug("No remote connections found for group %s", group.name or group.id)
            return

        logger.info("%s of group %s starts", run.target.value, group.name or group.id)
        for connection in connections:
            if connection.id in run.converged_ids:
                continue
            if run.expired():
                break
            if connection.transmitting == run.target.transmitting:
                result = ConvergenceResult(
                    connection.id,
                    ConvergenceOutcome.CONVERGED,
                    observed=connection.transmitting,
                )
            else:
                logger.info("%s of remote connection %s starts", run.target.value, connection.id)
                result = await self._transition.apply(connection, run.target, run.deadline)
                logger.info(
                    "%s of remote connection %s ends: %s",
                    run.target.value,
                    connection.id,
                    result.outcome.value,
                )
            report.results.append(result)
            if result.converged:
                run.converged_ids.add(connection.id)
        logger.info("%s of group %s ends", run.target.value, group.name or group.id)

    @staticmethod
    def _record_group_error(group_id: str, run: _WalkRun, exc: ControlClientError) -> None:
        logger.error("Reading group %s failed: %s", group_id, exc)
        run.report.groups.append(GroupReport(group_id=group_id, error=str(exc)))
