"""Bounded polling of a remote connection's observed transmission flag."""

from __future__ import annotations

import asyncio
import logging

from flowsync.client.base import ControlClientError, RemoteControlClient
from flowsync.models import ConvergenceOutcome, ConvergenceResult, TargetState

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


def deadline_passed(deadline: float | None) -> bool:
    """True once the event-loop clock has reached *deadline* (``None`` never expires)."""
    return deadline is not None and asyncio.get_running_loop().time() >= deadline


class ConvergencePoller:
    """Polls a connection until it reports the target state or the budget runs out.

    One read per ``poll_interval`` seconds, at most ``max_wait_seconds`` reads.
    An overall ``deadline`` (event-loop time) ends the wait early with
    ``CANCELLED``.  Task cancellation is left to propagate.
    """

    def __init__(
        self,
        client: RemoteControlClient,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._client = client
        self.poll_interval = poll_interval

    async def wait(
        self,
        connection_id: str,
        target: TargetState,
        max_wait_seconds: int,
        deadline: float | None = None,
    ) -> ConvergenceResult:
        observed: bool | None = None
        polls = 0

        for attempt in range(max_wait_seconds):
            if deadline_passed(deadline):
                logger.warning(
                    "Deadline reached while waiting on %s after %d polls", connection_id, polls
                )
                return ConvergenceResult(
                    connection_id, ConvergenceOutcome.CANCELLED, observed, polls
                )

            try:
                raw = await self._client.fetch_connection_state(connection_id)
            except ControlClientError as exc:
                logger.warning("Reading state of %s failed: %s", connection_id, exc)
                return ConvergenceResult(
                    connection_id, ConvergenceOutcome.FAILED, observed, polls, error=str(exc)
                )
            polls += 1
            observed = str(raw).lower() == "true"
            logger.debug(
                "Poll %d/%d for %s: transmitting=%s", polls, max_wait_seconds, connection_id, raw
            )

            if str(raw).lower() == target.flag_text:
                return ConvergenceResult(
                    connection_id, ConvergenceOutcome.CONVERGED, observed, polls
                )

            if attempt < max_wait_seconds - 1:
                await asyncio.sleep(self._sleep_time(deadline))

        logger.warning(
            "%s did not reach transmitting=%s after %d polls",
            connection_id,
            target.flag_text,
            polls,
        )
        return ConvergenceResult(connection_id, ConvergenceOutcome.TIMED_OUT, observed, polls)

    def _sleep_time(self, deadline: float | None) -> float:
        if deadline is None:
            return self.poll_interval
        remaining = deadline - asyncio.get_running_loop().time()
        return max(0.0, min(self.poll_interval, remaining))
