"""Department lookup by name and member collection across sub-departments."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from taskboard.application.interfaces import IUpstreamClient
from taskboard.core.constants import METHOD_DEPARTMENT_GET, METHOD_USER_GET
from taskboard.domain.entities import Department
from taskboard.shared.telemetry.tracing import traced
from taskboard.shared.utils.records import as_int, as_str, pick_field

logger = logging.getLogger(__name__)


def normalize_department(raw: Mapping[str, Any]) -> Department:
    """Build a Department (and its inline children) from an upstream record."""
    children = pick_field(raw, "CHILDREN", "children") or ()
    return Department(
        id=as_str(pick_field(raw, "ID", "id")) or "",
        name=str(pick_field(raw, "NAME", "name", default="")),
        parent_id=as_str(pick_field(raw, "PARENT", "parent", "parentId")),
        sort=as_int(pick_field(raw, "SORT", "sort")),
        head_id=as_str(pick_field(raw, "UF_HEAD", "ufHead", "headId")),
        children=tuple(
            normalize_department(c) for c in children if isinstance(c, Mapping)
        ),
    )


def walk_tree(roots: Iterable[Department]) -> Iterator[Department]:
    """Yield every node of a forest, depth-first pre-order, in list order."""
    for root in roots:
        yield from root.walk()


def find_department(roots: Iterable[Department], name: str) -> Department | None:
    """Return the first node (pre-order) whose name equals name exactly.

    Duplicate names are not an error: the first match wins and the
    number of matches is logged.
    """
    matches = [d for d in walk_tree(roots) if d.name == name]
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            'Department name "%s" matches %s departments (ids %s); using %s',
            name,
            len(matches),
            ", ".join(d.id for d in matches),
            matches[0].id,
        )
    return matches[0]


def descendant_ids(roots: Iterable[Department], department_id: str) -> list[str]:
    """Ids of all departments below department_id (not including it).

    Children are linked either by parent id (flat list) or inline
    (nested list); both are followed. Cycles in upstream data are cut.
    """
    children_of: dict[str, list[str]] = {}
    for node in walk_tree(roots):
        linked = [c.id for c in node.children]
        if node.parent_id:
            children_of.setdefault(node.parent_id, []).append(node.id)
        children_of.setdefault(node.id, []).extend(linked)

    seen = {department_id}
    result: list[str] = []
    queue = deque([department_id])
    while queue:
        for child_id in children_of.get(queue.popleft(), ()):
            if child_id not in seen:
                seen.add(child_id)
                result.append(child_id)
                queue.append(child_id)
    return result


class DepartmentResolver:
    """Resolves a department by name and collects its member user ids.

    The department tree is fetched once per resolver instance and reused
    by collect_members(); create a resolver per pipeline run.
    """

    def __init__(self, upstream: IUpstreamClient) -> None:
        self.upstream = upstream
        self._tree: list[Department] | None = None

    async def fetch_tree(self) -> list[Department]:
        """Return the department forest, fetching it on first use."""
        if self._tree is None:
            records = await self.upstream.get_all(METHOD_DEPARTMENT_GET)
            self._tree = [normalize_department(r) for r in records]
            logger.debug("Loaded %s top-level departments", len(self._tree))
        return self._tree

    @traced("department.resolve")
    async def resolve(self, name: str) -> Department | None:
        """Return the department named name (exact, case-sensitive) or None."""
        return find_department(await self.fetch_tree(), name)

    async def _direct_members(self, department_id: str) -> list[str]:
        records = await self.upstream.get_all(
            METHOD_USER_GET, {"filter": {"UF_DEPARTMENT": department_id}}
        )
        return [uid for uid in (as_str(pick_field(r, "ID", "id")) for r in records) if uid]

    @traced("department.collect_members")
    async def collect_members(
        self, department_id: str, include_subdepartments: bool = True
    ) -> list[str]:
        """Return unique member user ids of the department.

        Direct members always; with include_subdepartments, direct members
        of every descendant department as well. First-seen order is kept
        for stable output but carries no meaning.
        """
        member_ids = await self._direct_members(department_id)
        if include_subdepartments:
            for sub_id in descendant_ids(await self.fetch_tree(), department_id):
                member_ids.extend(await self._direct_members(sub_id))
        return list(dict.fromkeys(member_ids))
