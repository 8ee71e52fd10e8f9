"""Task normalization and derived-signal computation.

Pure: no network or cache access. Upstream task records arrive with
UPPER_SNAKE or camelCase field names (per task, sometimes mixed);
normalize_task() reads each field with UPPER_SNAKE taking precedence
and produces one canonical Task. TaskEnricher then computes staleness,
overdue, in-progress and priority against a single "now" per batch.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from typing import Any

from taskboard.core.constants import UNTITLED_TASK
from taskboard.domain.entities import EnrichedTask, Task, TaskSignals
from taskboard.domain.enums import PriorityTier
from taskboard.shared.utils.datetime import ensure_utc, parse_datetime, utc_now, whole_days_between
from taskboard.shared.utils.records import as_str, as_str_list, pick_field


def _responsible_name(raw: Mapping[str, Any]) -> str | None:
    """Display name of the responsible user, flat or from a nested object."""
    flat = as_str(pick_field(raw, "RESPONSIBLE_NAME", "responsibleName"))
    if flat:
        return flat
    nested = raw.get("responsible")
    if not isinstance(nested, Mapping):
        return None
    first = as_str(pick_field(nested, "NAME", "name")) or ""
    last = as_str(pick_field(nested, "LAST_NAME", "lastName")) or ""
    return f"{first} {last}".strip() or None


def normalize_task(raw: Mapping[str, Any]) -> Task:
    """Build a canonical Task from one upstream record.

    Missing title becomes UNTITLED_TASK; missing status becomes "" (the
    aggregator files it under "Unknown"); unparseable timestamps become
    None.
    """
    return Task(
        id=as_str(pick_field(raw, "ID", "id")) or "",
        title=as_str(pick_field(raw, "TITLE", "title")) or UNTITLED_TASK,
        status=as_str(pick_field(raw, "STATUS", "status")) or "",
        description=as_str(pick_field(raw, "DESCRIPTION", "description")),
        responsible_id=as_str(pick_field(raw, "RESPONSIBLE_ID", "responsibleId")),
        responsible_name=_responsible_name(raw),
        created_by=as_str(pick_field(raw, "CREATED_BY", "createdBy")),
        created_date=parse_datetime(pick_field(raw, "CREATED_DATE", "createdDate")),
        changed_date=parse_datetime(pick_field(raw, "CHANGED_DATE", "changedDate")),
        closed_date=parse_datetime(pick_field(raw, "CLOSED_DATE", "closedDate")),
        deadline=parse_datetime(pick_field(raw, "DEADLINE", "deadline")),
        raw_priority=as_str(pick_field(raw, "PRIORITY", "priority")),
        group_id=as_str(pick_field(raw, "GROUP_ID", "groupId")),
        tags=as_str_list(pick_field(raw, "TAGS", "tags")),
        crm_bindings=as_str_list(pick_field(raw, "UF_CRM_TASK", "ufCrmTask")),
    )


def derive_signals(task: Task, now: datetime) -> TaskSignals:
    """Compute the derived values of task as of now.

    inactive_days is 0 when the task carries neither a changed nor a
    created timestamp. The in-progress start is approximated by the last
    activity, since status history is not fetched.
    """
    last_activity = task.last_activity
    inactive_days = whole_days_between(last_activity, now) if last_activity else 0
    is_overdue = task.deadline is not None and task.deadline < now
    in_progress = task.is_in_progress
    execution_start = last_activity if in_progress else None
    execution_time = (
        whole_days_between(execution_start, now) if execution_start is not None else 0
    )
    return TaskSignals(
        last_activity=last_activity,
        inactive_days=inactive_days,
        is_overdue=is_overdue,
        is_in_progress=in_progress,
        execution_time=execution_time,
        execution_start_date=execution_start,
        priority=PriorityTier.classify(is_overdue, inactive_days),
    )


class TaskEnricher:
    """Normalizes and enriches batches of raw task records."""

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    def enrich(
        self,
        raw_tasks: Iterable[Mapping[str, Any]],
        now: datetime | None = None,
    ) -> list[EnrichedTask]:
        """Return enriched tasks in input order.

        now is read once for the whole batch (from the clock when not
        given) so relative staleness is consistent across it.
        """
        now = ensure_utc(now) if now is not None else self._clock()
        enriched = []
        for raw in raw_tasks:
            task = normalize_task(raw)
            enriched.append(EnrichedTask(task=task, signals=derive_signals(task, now)))
        return enriched
