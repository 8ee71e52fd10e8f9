"""User domain entity (member of the reported department)."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class User:
    """Upstream user, normalized."""

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    work_position: str | None = None
    departments: tuple[str, ...] = ()
    active: bool = True

    @property
    def display_name(self) -> str:
        """First and last name joined and trimmed."""
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "name": self.display_name,
            "email": self.email,
            "workPosition": self.work_position,
            "departments": list(self.departments),
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            email=data.get("email", ""),
            work_position=data.get("workPosition"),
            departments=tuple(data.get("departments") or ()),
            active=bool(data.get("active", True)),
        )
