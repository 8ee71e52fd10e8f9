"""Domain entities: canonical task, user and department records."""

from taskboard.domain.entities.department import Department
from taskboard.domain.entities.task import EnrichedTask, Task, TaskSignals
from taskboard.domain.entities.user import User

__all__ = [
    "Department",
    "EnrichedTask",
    "Task",
    "TaskSignals",
    "User",
]
