"""Follow the dashboard stream from a running service and print a summary.

Prints progress frames as they arrive, reassembles chunked payloads and
reports the headline counters. Exit code 1 on a stream error or a
reassembly failure.

Usage:
    python -m scripts.watch_dashboard [base_url] [--refresh]

Default base_url: http://localhost:8000
"""

from __future__ import annotations

import asyncio
import sys

import httpx

from taskboard.api.streaming import read_dashboard_stream
from taskboard.domain.exceptions import TaskboardException

STREAM_PATH = "/api/v1/dashboard/tasks/stream"


def _print_progress(message: str, percent: int) -> None:
    print(f"[{percent:3d}%] {message}")


async def watch(base_url: str, refresh: bool) -> int:
    params = {"refresh": "true"} if refresh else {}
    async with httpx.AsyncClient(base_url=base_url, timeout=None) as client:
        async with client.stream("GET", STREAM_PATH, params=params) as response:
            if response.status_code != 200:
                await response.aread()
                print(f"HTTP {response.status_code}: {response.text}", file=sys.stderr)
                return 1
            try:
                outcome = await read_dashboard_stream(
                    response.aiter_lines(), on_progress=_print_progress
                )
            except TaskboardException as exc:
                print(f"{exc.error_code}: {exc.message}", file=sys.stderr)
                return 1
    stats = outcome.payload["stats"]
    print(
        f"Loaded in {outcome.load_time_ms} ms"
        f" ({'chunked' if outcome.chunked else 'inline'}):"
        f" {stats['totalActive']} active, {stats['totalCompleted']} completed,"
        f" {stats['criticalTasks']} critical, {stats['overdueTasks']} overdue"
    )
    if outcome.payload.get("partial"):
        print(f"Partial result: {outcome.payload.get('failedGroups')} group fetches failed")
    return 0


def main() -> None:
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    base_url = args[0] if args else "http://localhost:8000"
    sys.exit(asyncio.run(watch(base_url, refresh="--refresh" in sys.argv[1:])))


if __name__ == "__main__":
    main()
