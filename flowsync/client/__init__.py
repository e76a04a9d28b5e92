"""Control-plane clients for flowsync.

Usage::

    from flowsync.client import NiFiClient

    async with NiFiClient("http://nifi:8080", token=None) as client:
        group = await client.fetch_group("root")
"""

from __future__ import annotations

from flowsync.client.base import (
    AuthError,
    ControlClientError,
    NotFoundError,
    RemoteControlClient,
    TransportFailure,
)
from flowsync.client.nifi import NiFiClient

__all__ = [
    "AuthError",
    "ControlClientError",
    "NiFiClient",
    "NotFoundError",
    "RemoteControlClient",
    "TransportFailure",
]
