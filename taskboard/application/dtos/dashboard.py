"""DTOs for the dashboard result (no dependency on transport or storage).

Serialized with camelCase keys for the browser client; from_dict()
rebuilds a result from a cached payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskboard.application.interfaces import AbsenceInfo
from taskboard.domain.entities import Department, EnrichedTask, User
from taskboard.shared.utils.datetime import parse_datetime, to_iso


@dataclass(kw_only=True)
class EmployeeStats:
    """Per-user rollup over active and completed tasks."""

    name: str
    active: int = 0
    completed: int = 0
    critical: int = 0
    warning: int = 0
    overdue: int = 0
    in_progress: int = 0
    avg_inactive_days: int = 0
    is_absent: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "active": self.active,
            "completed": self.completed,
            "critical": self.critical,
            "warning": self.warning,
            "overdue": self.overdue,
            "inProgress": self.in_progress,
            "avgInactiveDays": self.avg_inactive_days,
            "isAbsent": self.is_absent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmployeeStats:
        return cls(
            name=data.get("name", ""),
            active=data.get("active", 0),
            completed=data.get("completed", 0),
            critical=data.get("critical", 0),
            warning=data.get("warning", 0),
            overdue=data.get("overdue", 0),
            in_progress=data.get("inProgress", 0),
            avg_inactive_days=data.get("avgInactiveDays", 0),
            is_absent=data.get("isAbsent", False),
        )


@dataclass(kw_only=True)
class TaskStats:
    """Department-wide counters, per-employee breakdown and histograms.

    by_employee is keyed by user id in user-list order. by_status maps
    status labels to counts (only labels that occur). inactivity_distribution
    always carries all four staleness buckets.
    """

    total_active: int
    total_completed: int
    critical_tasks: int
    warning_tasks: int
    overdue_tasks: int
    in_progress_tasks: int
    by_employee: dict[str, EmployeeStats] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)
    inactivity_distribution: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalActive": self.total_active,
            "totalCompleted": self.total_completed,
            "criticalTasks": self.critical_tasks,
            "warningTasks": self.warning_tasks,
            "overdueTasks": self.overdue_tasks,
            "inProgressTasks": self.in_progress_tasks,
            "byEmployee": {uid: s.to_dict() for uid, s in self.by_employee.items()},
            "byStatus": dict(self.by_status),
            "inactivityDistribution": dict(self.inactivity_distribution),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskStats:
        return cls(
            total_active=data["totalActive"],
            total_completed=data["totalCompleted"],
            critical_tasks=data["criticalTasks"],
            warning_tasks=data["warningTasks"],
            overdue_tasks=data["overdueTasks"],
            in_progress_tasks=data["inProgressTasks"],
            by_employee={
                uid: EmployeeStats.from_dict(s)
                for uid, s in (data.get("byEmployee") or {}).items()
            },
            by_status=dict(data.get("byStatus") or {}),
            inactivity_distribution=dict(data.get("inactivityDistribution") or {}),
        )


@dataclass(frozen=True, kw_only=True)
class DashboardResult:
    """Aggregate root of one pipeline run. Immutable once built.

    partial is True when one or more per-group task fetches failed and
    were skipped; failed_groups counts those fetches.
    """

    tasks: list[EnrichedTask]
    completed_tasks: list[EnrichedTask]
    users: list[User]
    department: Department
    stats: TaskStats
    absences: dict[str, AbsenceInfo] = field(default_factory=dict)
    timestamp: datetime
    partial: bool = False
    failed_groups: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON delivery and caching."""
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "completedTasks": [t.to_dict() for t in self.completed_tasks],
            "users": [u.to_dict() for u in self.users],
            "department": self.department.to_dict(),
            "stats": self.stats.to_dict(),
            "absences": {uid: a.to_dict() for uid, a in self.absences.items()},
            "timestamp": to_iso(self.timestamp),
            "partial": self.partial,
            "failedGroups": self.failed_groups,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DashboardResult:
        """Rebuild from to_dict() output."""
        return cls(
            tasks=[EnrichedTask.from_dict(t) for t in data.get("tasks") or []],
            completed_tasks=[
                EnrichedTask.from_dict(t) for t in data.get("completedTasks") or []
            ],
            users=[User.from_dict(u) for u in data.get("users") or []],
            department=Department.from_dict(data["department"]),
            stats=TaskStats.from_dict(data["stats"]),
            absences={
                uid: AbsenceInfo.from_dict(a)
                for uid, a in (data.get("absences") or {}).items()
            },
            timestamp=parse_datetime(data["timestamp"]),
            partial=bool(data.get("partial", False)),
            failed_groups=int(data.get("failedGroups", 0)),
        )
