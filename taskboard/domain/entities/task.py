"""Task domain entities.

Task is the canonical, normalized form of an upstream task record.
TaskSignals holds the values derived from it at a given instant, and
EnrichedTask pairs the two for aggregation and delivery.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from taskboard.domain.enums import PriorityTier, TaskStatus
from taskboard.shared.utils.datetime import parse_datetime, to_iso


@dataclass(frozen=True)
class Task:
    """Canonical task record (one naming convention, typed timestamps)."""

    id: str
    title: str
    status: str
    description: str | None = None
    responsible_id: str | None = None
    responsible_name: str | None = None
    created_by: str | None = None
    created_date: datetime | None = None
    changed_date: datetime | None = None
    closed_date: datetime | None = None
    deadline: datetime | None = None
    raw_priority: str | None = None
    group_id: str | None = None
    tags: tuple[str, ...] = ()
    crm_bindings: tuple[str, ...] = ()

    @property
    def last_activity(self) -> datetime | None:
        """Changed timestamp, or created timestamp when the task never changed."""
        return self.changed_date or self.created_date

    @property
    def is_in_progress(self) -> bool:
        return self.status == TaskStatus.IN_PROGRESS.value


@dataclass(frozen=True)
class TaskSignals:
    """Derived per-task values computed by the enricher."""

    last_activity: datetime | None
    inactive_days: int
    is_overdue: bool
    is_in_progress: bool
    execution_time: int
    execution_start_date: datetime | None
    priority: PriorityTier


@dataclass(frozen=True)
class EnrichedTask:
    """Task plus its derived signals. Serialized flat (camelCase) for delivery."""

    task: Task
    signals: TaskSignals = field(repr=False)

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def responsible_id(self) -> str | None:
        return self.task.responsible_id

    @property
    def status(self) -> str:
        return self.task.status

    @property
    def inactive_days(self) -> int:
        return self.signals.inactive_days

    @property
    def is_overdue(self) -> bool:
        return self.signals.is_overdue

    @property
    def is_in_progress(self) -> bool:
        return self.signals.is_in_progress

    @property
    def priority(self) -> PriorityTier:
        return self.signals.priority

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON delivery and caching."""
        t, s = self.task, self.signals
        return {
            "id": t.id,
            "title": t.title,
            "description": t.description,
            "responsibleId": t.responsible_id,
            "responsibleName": t.responsible_name,
            "createdBy": t.created_by,
            "createdDate": to_iso(t.created_date),
            "changedDate": to_iso(t.changed_date),
            "closedDate": to_iso(t.closed_date),
            "deadline": to_iso(t.deadline),
            "status": t.status,
            "rawPriority": t.raw_priority,
            "groupId": t.group_id,
            "tags": list(t.tags),
            "crmBindings": list(t.crm_bindings),
            "lastActivity": to_iso(s.last_activity),
            "inactiveDays": s.inactive_days,
            "isOverdue": s.is_overdue,
            "isInProgress": s.is_in_progress,
            "executionTime": s.execution_time,
            "executionStartDate": to_iso(s.execution_start_date),
            "priority": s.priority.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EnrichedTask":
        """Rebuild from to_dict() output (e.g. a cached payload)."""
        task = Task(
            id=data["id"],
            title=data["title"],
            status=data["status"],
            description=data.get("description"),
            responsible_id=data.get("responsibleId"),
            responsible_name=data.get("responsibleName"),
            created_by=data.get("createdBy"),
            created_date=parse_datetime(data.get("createdDate")),
            changed_date=parse_datetime(data.get("changedDate")),
            closed_date=parse_datetime(data.get("closedDate")),
            deadline=parse_datetime(data.get("deadline")),
            raw_priority=data.get("rawPriority"),
            group_id=data.get("groupId"),
            tags=tuple(data.get("tags") or ()),
            crm_bindings=tuple(data.get("crmBindings") or ()),
        )
        signals = TaskSignals(
            last_activity=parse_datetime(data.get("lastActivity")),
            inactive_days=int(data.get("inactiveDays", 0)),
            is_overdue=bool(data.get("isOverdue", False)),
            is_in_progress=bool(data.get("isInProgress", False)),
            execution_time=int(data.get("executionTime", 0)),
            execution_start_date=parse_datetime(data.get("executionStartDate")),
            priority=PriorityTier(data.get("priority", PriorityTier.NORMAL.value)),
        )
        return cls(task=task, signals=signals)
