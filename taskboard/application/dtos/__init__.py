"""Application DTOs: dashboard result and statistics."""

from taskboard.application.dtos.dashboard import DashboardResult, EmployeeStats, TaskStats

__all__ = ["DashboardResult", "EmployeeStats", "TaskStats"]
