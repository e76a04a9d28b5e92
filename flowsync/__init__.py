"""flowsync: converge a NiFi process-group tree to a transmission state.

Walks nested process groups depth-first, enabling or disabling their remote
process groups leaves-first and polling until NiFi reports the new state.

Quickstart::

    from flowsync import NiFiClient, SyncOrchestrator, TargetState

    async with NiFiClient("http://nifi:8080") as client:
        report = await SyncOrchestrator(client).sync(root_id, TargetState.ENABLE)
"""

from flowsync.client import NiFiClient, NotFoundError, RemoteControlClient
from flowsync.models import SyncReport, SyncStatus, TargetState
from flowsync.orchestrator import SyncOrchestrator, sync

__version__ = "1.0.0"

__all__ = [
    "NiFiClient",
    "NotFoundError",
    "RemoteControlClient",
    "SyncOrchestrator",
    "SyncReport",
    "SyncStatus",
    "TargetState",
    "sync",
]
