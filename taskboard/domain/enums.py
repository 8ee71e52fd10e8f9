"""Domain enumerations for the Taskboard application.

Enums represent fixed sets of domain values: upstream task status codes,
the derived priority tier and the staleness histogram buckets.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Upstream task status codes (transmitted as numeric strings)."""

    NEW = "1"
    WAITING_EXECUTION = "2"
    IN_PROGRESS = "3"
    WAITING_CONTROL = "4"
    COMPLETED = "5"
    DEFERRED = "6"
    REJECTED = "7"

    @property
    def label(self) -> str:
        """Display label used in the status histogram."""
        return _STATUS_LABELS[self]

    @classmethod
    def label_for(cls, code: str | int | None) -> str:
        """Return the display label for a raw status code; "Unknown" if unrecognized."""
        try:
            return cls(str(code).strip()).label
        except ValueError:
            return UNKNOWN_STATUS_LABEL


UNKNOWN_STATUS_LABEL = "Unknown"

_STATUS_LABELS: dict[TaskStatus, str] = {
    TaskStatus.NEW: "New",
    TaskStatus.WAITING_EXECUTION: "WaitingExecution",
    TaskStatus.IN_PROGRESS: "InProgress",
    TaskStatus.WAITING_CONTROL: "WaitingControl",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.DEFERRED: "Deferred",
    TaskStatus.REJECTED: "Rejected",
}


class PriorityTier(_ValuesMixin, str, Enum):
    """Derived attention tier of a task.

    Pure function of (is_overdue, inactive_days); see classify().
    """

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"

    @classmethod
    def classify(cls, is_overdue: bool, inactive_days: int) -> "PriorityTier":
        """Return CRITICAL if overdue or idle >= 7 days, WARNING if idle >= 3 days, else NORMAL."""
        if is_overdue or inactive_days >= 7:
            return cls.CRITICAL
        if inactive_days >= 3:
            return cls.WARNING
        return cls.NORMAL


class StalenessBucket(_ValuesMixin, str, Enum):
    """Inactivity histogram buckets (inclusive day ranges)."""

    DAYS_0_1 = "0-1"
    DAYS_2_3 = "2-3"
    DAYS_4_7 = "4-7"
    DAYS_8_PLUS = "8+"

    @classmethod
    def for_days(cls, inactive_days: int) -> "StalenessBucket":
        """Return the bucket for an inactive-days value (negatives fall in 0-1)."""
        if inactive_days <= 1:
            return cls.DAYS_0_1
        if inactive_days <= 3:
            return cls.DAYS_2_3
        if inactive_days <= 7:
            return cls.DAYS_4_7
        return cls.DAYS_8_PLUS
