"""Apply one transmission state change and confirm it converged."""

from __future__ import annotations

import logging

from flowsync.client.base import ControlClientError, RemoteControlClient
from flowsync.models import (
    ConvergenceOutcome,
    ConvergenceResult,
    RemoteConnection,
    TargetState,
)
from flowsync.poller import ConvergencePoller

logger = logging.getLogger(__name__)

DEFAULT_MAX_WAIT_SECONDS = 30


class ConnectionStateTransition:
    """Issues a single set-state command, then hands over to the poller.

    The command is never retried here; retries belong to the client.
    """

    def __init__(
        self,
        client: RemoteControlClient,
        poller: ConvergencePoller,
        max_wait_seconds: int = DEFAULT_MAX_WAIT_SECONDS,
    ) -> None:
        self._client = client
        self._poller = poller
        self.max_wait_seconds = max_wait_seconds

    async def apply(
        self,
        connection: RemoteConnection,
        target: TargetState,
        deadline: float | None = None,
    ) -> ConvergenceResult:
        try:
            await self._client.set_connection_state(connection.id, target)
        except ControlClientError as exc:
            logger.error("Setting %s to %s failed: %s", connection.id, target.value, exc)
            return ConvergenceResult(
                connection.id,
                ConvergenceOutcome.FAILED,
                observed=connection.transmitting,
                error=str(exc),
            )

        result = await self._poller.wait(connection.id, target, self.max_wait_seconds, deadline)
        result.changed = True
        return result
