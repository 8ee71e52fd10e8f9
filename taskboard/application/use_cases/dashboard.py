"""Dashboard use case: cache lookup, then resolve, fetch, enrich and aggregate.

One run is a strictly ordered chain of upstream calls. Department
resolution and member listing failures abort the run; per-group task
fetch failures are absorbed and reported through DashboardResult.partial.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime

from taskboard.application.dtos import DashboardResult
from taskboard.application.interfaces import (
    IAbsenceProvider,
    ICacheService,
    IUpstreamClient,
    ProgressCallback,
)
from taskboard.application.services import (
    DepartmentResolver,
    NullAbsenceProvider,
    TaskEnricher,
    TaskService,
    UserDirectory,
    aggregate,
)
from taskboard.domain.exceptions import DepartmentNotFoundException
from taskboard.infrastructure.cache.keys import dashboard_key
from taskboard.shared.telemetry.tracing import add_span_attributes, traced
from taskboard.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


def _no_progress(message: str, percent: int) -> None:
    return None


class BuildDashboardUseCase:
    """Build (or load from cache) the department dashboard result."""

    def __init__(
        self,
        upstream: IUpstreamClient,
        cache: ICacheService,
        *,
        department_name: str,
        include_subdepartments: bool = True,
        cache_ttl: int = 900,
        task_service: TaskService | None = None,
        user_directory: UserDirectory | None = None,
        absence_provider: IAbsenceProvider | None = None,
        enricher: TaskEnricher | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.upstream = upstream
        self.cache = cache
        self.department_name = department_name
        self.include_subdepartments = include_subdepartments
        self.cache_ttl = cache_ttl
        self.task_service = task_service or TaskService(upstream, clock=clock)
        self.user_directory = user_directory or UserDirectory(upstream)
        self.absence_provider = absence_provider or NullAbsenceProvider()
        self.enricher = enricher or TaskEnricher(clock=clock)
        self._clock = clock

    async def _load_cached(self) -> DashboardResult | None:
        payload = await self.cache.get(dashboard_key())
        if payload is None:
            return None
        try:
            return DashboardResult.from_dict(payload)
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed cached dashboard result", exc_info=True)
            return None

    @traced("dashboard.build")
    async def execute(
        self,
        force_refresh: bool = False,
        progress: ProgressCallback | None = None,
    ) -> DashboardResult:
        """Return the dashboard result.

        Args:
            force_refresh: Skip the cache read (the fresh result is still cached).
            progress: Optional (message, percent) callback for milestones.

        Raises:
            DepartmentNotFoundException: No department has the configured name.
            UpstreamException: Department or member lookup failed.
        """
        report = progress or _no_progress
        add_span_attributes(**{"dashboard.force_refresh": force_refresh})

        if not force_refresh:
            cached = await self._load_cached()
            if cached is not None:
                logger.info("Dashboard served from cache (computed %s)", cached.timestamp)
                return cached
        started = time.perf_counter()

        report(f'Resolving department "{self.department_name}"', 10)
        resolver = DepartmentResolver(self.upstream)
        department = await resolver.resolve(self.department_name)
        if department is None:
            raise DepartmentNotFoundException(self.department_name)
        logger.info("Department resolved: %s (id %s)", department.name, department.id)

        report("Listing department members", 20)
        member_ids = await resolver.collect_members(
            department.id, self.include_subdepartments
        )
        logger.info("Department %s has %s members", department.id, len(member_ids))

        report("Loading active tasks", 30)
        active = await self.task_service.fetch_active(member_ids)

        report("Loading completed tasks", 50)
        completed = await self.task_service.fetch_completed(member_ids)

        report("Loading user details", 70)
        users = await self.user_directory.get_users(member_ids)

        report("Checking absences", 85)
        absences = await self.absence_provider.get_absences(member_ids)

        report("Generating statistics", 95)
        now = self._clock()
        active_tasks = self.enricher.enrich(active.tasks, now=now)
        completed_tasks = self.enricher.enrich(completed.tasks, now=now)
        stats = aggregate(active_tasks, completed_tasks, users, absences)
        failed_groups = active.failed_groups + completed.failed_groups
        if failed_groups:
            logger.warning(
                "Dashboard built from partial data: %s of %s group fetches failed",
                failed_groups,
                active.groups + completed.groups,
            )

        result = DashboardResult(
            tasks=active_tasks,
            completed_tasks=completed_tasks,
            users=users,
            department=department,
            stats=stats,
            absences=absences,
            timestamp=now,
            partial=failed_groups > 0,
            failed_groups=failed_groups,
        )
        await self.cache.set(dashboard_key(), result.to_dict(), self.cache_ttl)
        logger.info(
            "Dashboard built in %.0f ms: %s active, %s completed, %s users",
            (time.perf_counter() - started) * 1000,
            stats.total_active,
            stats.total_completed,
            len(users),
        )
        return result
