"""Application services: enrichment, aggregation and upstream-backed lookups."""

from taskboard.application.services.absence_service import NullAbsenceProvider
from taskboard.application.services.department_resolver import (
    DepartmentResolver,
    descendant_ids,
    find_department,
    normalize_department,
)
from taskboard.application.services.stats_aggregator import aggregate
from taskboard.application.services.task_enricher import (
    TaskEnricher,
    derive_signals,
    normalize_task,
)
from taskboard.application.services.task_service import (
    TaskFetchResult,
    TaskService,
    chunked,
)
from taskboard.application.services.user_directory import UserDirectory, normalize_user

__all__ = [
    "DepartmentResolver",
    "NullAbsenceProvider",
    "TaskEnricher",
    "TaskFetchResult",
    "TaskService",
    "UserDirectory",
    "aggregate",
    "chunked",
    "derive_signals",
    "descendant_ids",
    "find_department",
    "normalize_department",
    "normalize_task",
    "normalize_user",
]
