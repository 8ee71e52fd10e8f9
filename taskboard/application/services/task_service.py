"""Task fetching for a set of users, group by group.

Users are split into groups of at most group_size ids; each group is one
ID-cursor listing. A failed group is logged and skipped so the other
groups still contribute (the caller marks the result as partial). At
most max_concurrency groups are in flight at once; the default of 1
keeps fetches strictly sequential to bound upstream load.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, TypeVar

from taskboard.application.interfaces import IUpstreamClient
from taskboard.domain.enums import TaskStatus
from taskboard.shared.telemetry.tracing import traced
from taskboard.shared.utils.datetime import to_iso, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Active listing excludes finished and deferred tasks
_EXCLUDED_FROM_ACTIVE = [int(TaskStatus.COMPLETED.value), int(TaskStatus.DEFERRED.value)]


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive lists of at most size elements."""
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


@dataclass
class TaskFetchResult:
    """Raw task records gathered across groups, plus the failure count."""

    tasks: list[dict[str, Any]] = field(default_factory=list)
    groups: int = 0
    failed_groups: int = 0


class TaskService:
    """Fetches active and recently completed tasks for department members."""

    def __init__(
        self,
        upstream: IUpstreamClient,
        *,
        group_size: int = 10,
        max_concurrency: int = 1,
        completed_window_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.upstream = upstream
        self.group_size = group_size
        self.max_concurrency = max_concurrency
        self.completed_window_days = completed_window_days
        self._clock = clock

    async def _fetch_groups(
        self,
        kind: str,
        user_ids: Sequence[str],
        build_filter: Callable[[list[str]], Mapping[str, Any]],
    ) -> TaskFetchResult:
        groups = chunked(user_ids, self.group_size)
        result = TaskFetchResult(groups=len(groups))
        if not groups:
            return result
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run(index: int, group: list[str]) -> list[dict[str, Any]] | None:
            async with semaphore:
                started = time.perf_counter()
                try:
                    tasks = await self.upstream.list_tasks(build_filter(group))
                except Exception:
                    logger.exception(
                        "Fetching %s tasks failed for group %s/%s (%s users); skipping",
                        kind,
                        index + 1,
                        len(groups),
                        len(group),
                    )
                    return None
                logger.info(
                    "Group %s/%s: %s %s tasks in %.0f ms",
                    index + 1,
                    len(groups),
                    len(tasks),
                    kind,
                    (time.perf_counter() - started) * 1000,
                )
                return tasks

        # gather keeps group order, so output order does not depend on timing
        outcomes = await asyncio.gather(*(run(i, g) for i, g in enumerate(groups)))
        for tasks in outcomes:
            if tasks is None:
                result.failed_groups += 1
            else:
                result.tasks.extend(tasks)
        return result

    @traced("tasks.fetch_active")
    async def fetch_active(self, user_ids: Sequence[str]) -> TaskFetchResult:
        """Tasks responsible by user_ids that are neither completed nor deferred."""
        return await self._fetch_groups(
            "active",
            user_ids,
            lambda group: {"RESPONSIBLE_ID": group, "!STATUS": _EXCLUDED_FROM_ACTIVE},
        )

    @traced("tasks.fetch_completed")
    async def fetch_completed(self, user_ids: Sequence[str]) -> TaskFetchResult:
        """Tasks responsible by user_ids completed within the trailing window."""
        since = to_iso(self._clock() - timedelta(days=self.completed_window_days))
        return await self._fetch_groups(
            "completed",
            user_ids,
            lambda group: {
                "RESPONSIBLE_ID": group,
                "STATUS": int(TaskStatus.COMPLETED.value),
                ">=CLOSED_DATE": since,
            },
        )
