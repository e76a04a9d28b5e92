"""Runtime settings for flowsync, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.environ.get(name, "").strip()
    return float(raw) if raw else default


@dataclass
class SyncSettings:
    nifi_url: str = "http://localhost:8080"
    nifi_token: str | None = None
    http_timeout: float = 10.0
    wait_seconds: int = 30
    poll_interval: float = 1.0
    sync_timeout: float | None = None
    enable_rpg: bool = True

    @classmethod
    def from_env(cls) -> "SyncSettings":
        """Build settings from ``NIFI_*`` and ``FLOWSYNC_*`` variables.

        Raises :class:`ValueError` when a numeric variable does not parse.
        """
        return cls(
            nifi_url=os.environ.get("NIFI_URL", cls.nifi_url),
            nifi_token=os.environ.get("NIFI_TOKEN") or None,
            http_timeout=_env_float("FLOWSYNC_HTTP_TIMEOUT", cls.http_timeout),
            wait_seconds=int(os.environ.get("FLOWSYNC_WAIT_SECONDS", str(cls.wait_seconds))),
            poll_interval=_env_float("FLOWSYNC_POLL_INTERVAL", cls.poll_interval),
            sync_timeout=_env_float("FLOWSYNC_SYNC_TIMEOUT", None),
            enable_rpg=os.environ.get("FLOWSYNC_ENABLE_RPG", "true").strip().lower()
            not in _FALSE_VALUES,
        )
