"""Abstract control-plane client for flowsync.

Any remote dataflow engine (NiFi today) implements this interface. The
convergence controller only ever talks to the remote system through it.
"""

from __future__ import annotations

import abc

from flowsync.models import ProcessGroup, RemoteConnection, TargetState


class ControlClientError(Exception):
    """Base error for control-plane client failures."""


class TransportFailure(ControlClientError):
    """Raised when the remote system is unreachable or answers with a server error."""


class AuthError(ControlClientError):
    """Raised when the remote system returns 401 or 403."""


class NotFoundError(ControlClientError):
    """Raised when a group or connection id does not resolve."""


class RemoteControlClient(abc.ABC):
    """Abstract interface to the remote control plane.

    Every fetch returns the latest state; implementations must not cache
    snapshots between calls.
    """

    @abc.abstractmethod
    async def fetch_group(self, group_id: str, include_children: bool = True) -> ProcessGroup:
        """Return the latest snapshot of *group_id*.

        With ``include_children=False`` implementations may leave
        ``child_ids`` empty to save a round trip.

        Raises :class:`NotFoundError` when the id does not resolve.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_child_groups(self, group_id: str) -> list[ProcessGroup]:
        """Return snapshots of the direct children of *group_id*, including
        their active/inactive remote port counts."""
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_connections_for_group(self, group_id: str) -> list[RemoteConnection]:
        """Return the remote connections owned directly by *group_id*."""
        raise NotImplementedError

    @abc.abstractmethod
    async def set_connection_state(self, connection_id: str, target: TargetState) -> None:
        """Issue a fire-and-forget transmission state command."""
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_connection_state(self, connection_id: str) -> bool | str:
        """Return the observed transmission flag (bool or ``"true"``/``"false"``)."""
        raise NotImplementedError

    @abc.abstractmethod
    async def delete_connection(self, connection_id: str) -> None:
        """Remove a remote connection from its group."""
        raise NotImplementedError

    @abc.abstractmethod
    def is_remote_enable_feature_active(self) -> bool:
        """Administrative switch consulted before any ENABLE run."""
        raise NotImplementedError
