"""Department domain entity.

Departments form a tree. The upstream may return it flat (children linked
by parent_id) or nested (children listed inline); both are kept as given.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Department:
    """Department node with optional inline children."""

    id: str
    name: str
    parent_id: str | None = None
    sort: int | None = None
    head_id: str | None = None
    children: tuple["Department", ...] = ()

    def walk(self) -> Iterator["Department"]:
        """Yield this node then its inline descendants, depth-first pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parentId": self.parent_id,
            "sort": self.sort,
            "headId": self.head_id,
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Department":
        return cls(
            id=data["id"],
            name=data["name"],
            parent_id=data.get("parentId"),
            sort=data.get("sort"),
            head_id=data.get("headId"),
            children=tuple(cls.from_dict(c) for c in data.get("children") or ()),
        )
