"""Application use cases."""

from taskboard.application.use_cases.dashboard import BuildDashboardUseCase

__all__ = ["BuildDashboardUseCase"]
