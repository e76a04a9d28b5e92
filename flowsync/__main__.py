"""CLI entry point: python -m flowsync <root-group-id> {enable,disable}

Runs one sync against the NiFi instance configured through ``NIFI_URL`` /
``NIFI_TOKEN`` and prints the report as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="flowsync",
        description="Drive every remote process group under a process group to a transmission state.",
    )
    parser.add_argument("root_group_id", help="Process group id to start from")
    parser.add_argument("target", choices=["enable", "disable"])
    parser.add_argument("--timeout", type=float, default=None, help="Overall deadline in seconds")
    parser.add_argument("--nifi-url", default=None, help="Overrides NIFI_URL")
    return parser.parse_args(argv)


async def _main(argv: list[str] | None = None) -> int:
    from flowsync.client import NiFiClient, NotFoundError
    from flowsync.config import SyncSettings
    from flowsync.models import SyncStatus, TargetState
    from flowsync.orchestrator import sync

    args = _parse_args(argv)
    settings = SyncSettings.from_env()
    timeout = args.timeout if args.timeout is not None else settings.sync_timeout

    async with NiFiClient(
        args.nifi_url or settings.nifi_url,
        token=settings.nifi_token,
        timeout=settings.http_timeout,
        enable_rpg=settings.enable_rpg,
    ) as client:
        try:
            report = await sync(
                client,
                args.root_group_id,
                TargetState(args.target),
                timeout_seconds=timeout,
                max_wait_seconds=settings.wait_seconds,
                poll_interval=settings.poll_interval,
            )
        except NotFoundError as exc:
            logger.error("%s", exc)
            return 2

    print(json.dumps(report.to_dict(), indent=2))
    return 0 if report.status in (SyncStatus.ALL_CONVERGED, SyncStatus.SKIPPED) else 1


def run() -> None:
    sys.exit(asyncio.run(_main()))


if __name__ == "__main__":
    run()
