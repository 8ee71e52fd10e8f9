"""Service interfaces (ports) for the application layer.

Protocols define contracts for infrastructure implementations (DIP):
the upstream REST client, cache backends and the optional absence
integration.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

# Progress reporter: (message, percent 0..100)
ProgressCallback = Callable[[str, int], None]


@dataclass
class BatchResult:
    """Outcome of a batch upstream call: named results plus named errors."""

    results: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, Any] = field(default_factory=dict)


# Upstream client interface
class IUpstreamClient(Protocol):
    """Protocol for the paged project-management REST API."""

    async def call(self, method: str, params: Mapping[str, Any] | None = None) -> Any:
        """Perform one call and return its unwrapped result."""

    async def get_all(
        self, method: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Return all pages of an offset-paginated list method, concatenated."""

    async def list_tasks(
        self,
        task_filter: Mapping[str, Any],
        select: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """Return every task matching task_filter using the id-cursor strategy."""

    async def batch(
        self, commands: Mapping[str, tuple[str, Mapping[str, Any]]]
    ) -> BatchResult:
        """Run named sub-requests in one round trip."""


# Cache interface
class ICacheService(Protocol):
    """Protocol for result cache backends (in-memory or Redis)."""

    def is_available(self) -> bool:
        """Return True if cache is connected and usable."""
        ...

    async def get(self, key: str) -> Any:
        """Return cached value or None (absent or expired)."""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store value with TTL in seconds."""
        ...

    async def delete(self, key: str) -> bool:
        """Remove key from cache."""
        ...


# Absence integration interface
class IAbsenceProvider(Protocol):
    """Capability interface for employee absence lookups (vacations, sick leave)."""

    async def get_absences(self, user_ids: list[str]) -> dict[str, "AbsenceInfo"]:
        """Return absence info keyed by user id; users without info may be omitted."""


@dataclass(frozen=True)
class AbsenceInfo:
    """Absence state of one user at computation time."""

    user_id: str
    is_absent: bool = False
    absence_type: str | None = None
    date_from: str | None = None
    date_to: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "isAbsent": self.is_absent,
            "absenceType": self.absence_type,
            "dateFrom": self.date_from,
            "dateTo": self.date_to,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AbsenceInfo":
        return cls(
            user_id=data["userId"],
            is_absent=bool(data.get("isAbsent", False)),
            absence_type=data.get("absenceType"),
            date_from=data.get("dateFrom"),
            date_to=data.get("dateTo"),
        )
