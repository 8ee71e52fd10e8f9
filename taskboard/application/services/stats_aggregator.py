"""Single-pass statistics over enriched tasks.

Each collection is scanned once; per-user accumulators are seeded from
the user list before scanning so users without tasks still appear with
zero values. Tasks whose responsible user is not in the list count
toward department totals only.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from taskboard.application.dtos import EmployeeStats, TaskStats
from taskboard.application.interfaces import AbsenceInfo
from taskboard.domain.entities import EnrichedTask, User
from taskboard.domain.enums import PriorityTier, StalenessBucket, TaskStatus


def round_half_up(value: float) -> int:
    """Round a non-negative mean to the nearest int, halves upward."""
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


@dataclass
class _EmployeeAccumulator:
    name: str
    active: int = 0
    completed: int = 0
    critical: int = 0
    warning: int = 0
    overdue: int = 0
    in_progress: int = 0
    inactive_days_sum: int = 0

    def finish(self, is_absent: bool) -> EmployeeStats:
        avg = round_half_up(self.inactive_days_sum / self.active) if self.active else 0
        return EmployeeStats(
            name=self.name,
            active=self.active,
            completed=self.completed,
            critical=self.critical,
            warning=self.warning,
            overdue=self.overdue,
            in_progress=self.in_progress,
            avg_inactive_days=avg,
            is_absent=is_absent,
        )


def aggregate(
    active_tasks: Sequence[EnrichedTask],
    completed_tasks: Sequence[EnrichedTask],
    users: Sequence[User],
    absences: Mapping[str, AbsenceInfo] | None = None,
) -> TaskStats:
    """Roll enriched tasks and users up into TaskStats.

    Runs in O(active + completed + users). Priority, overdue and
    staleness counters consider active tasks only; completed tasks add
    to totals and per-employee completed counts.
    """
    absences = absences or {}
    per_user: dict[str, _EmployeeAccumulator] = {
        user.id: _EmployeeAccumulator(name=user.display_name) for user in users
    }
    by_status: dict[str, int] = {}
    staleness = {bucket.value: 0 for bucket in StalenessBucket}
    critical = warning = overdue = in_progress = 0

    for task in active_tasks:
        label = TaskStatus.label_for(task.status)
        by_status[label] = by_status.get(label, 0) + 1
        staleness[StalenessBucket.for_days(task.inactive_days).value] += 1

        is_critical = task.priority is PriorityTier.CRITICAL
        is_warning = task.priority is PriorityTier.WARNING
        critical += is_critical
        warning += is_warning
        overdue += task.is_overdue
        in_progress += task.is_in_progress

        acc = per_user.get(task.responsible_id or "")
        if acc is None:
            continue
        acc.active += 1
        acc.critical += is_critical
        acc.warning += is_warning
        acc.overdue += task.is_overdue
        acc.in_progress += task.is_in_progress
        acc.inactive_days_sum += task.inactive_days

    for task in completed_tasks:
        acc = per_user.get(task.responsible_id or "")
        if acc is not None:
            acc.completed += 1

    return TaskStats(
        total_active=len(active_tasks),
        total_completed=len(completed_tasks),
        critical_tasks=critical,
        warning_tasks=warning,
        overdue_tasks=overdue,
        in_progress_tasks=in_progress,
        by_employee={
            user_id: acc.finish(
                is_absent=absences[user_id].is_absent if user_id in absences else False
            )
            for user_id, acc in per_user.items()
        },
        by_status=by_status,
        inactivity_distribution=staleness,
    )
