"""User detail lookup and normalization."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from taskboard.application.interfaces import IUpstreamClient
from taskboard.core.constants import METHOD_USER_GET
from taskboard.domain.entities import User
from taskboard.shared.utils.records import as_bool, as_str, as_str_list, pick_field

logger = logging.getLogger(__name__)


def normalize_user(raw: Mapping[str, Any]) -> User:
    """Build a User from an upstream record (UPPER_SNAKE wins over camelCase)."""
    return User(
        id=as_str(pick_field(raw, "ID", "id")) or "",
        first_name=as_str(pick_field(raw, "NAME", "name")) or "",
        last_name=as_str(pick_field(raw, "LAST_NAME", "lastName")) or "",
        email=as_str(pick_field(raw, "EMAIL", "email")) or "",
        work_position=as_str(pick_field(raw, "WORK_POSITION", "workPosition")),
        departments=as_str_list(pick_field(raw, "UF_DEPARTMENT", "ufDepartment")),
        active=as_bool(pick_field(raw, "ACTIVE", "active"), default=True),
    )


class UserDirectory:
    """Loads user details for a list of ids."""

    def __init__(self, upstream: IUpstreamClient) -> None:
        self.upstream = upstream

    async def get_users(self, user_ids: Sequence[str]) -> list[User]:
        """Return users for user_ids, in upstream order. No call when empty."""
        if not user_ids:
            return []
        records = await self.upstream.get_all(
            METHOD_USER_GET, {"filter": {"ID": list(user_ids)}}
        )
        users = [normalize_user(r) for r in records]
        missing = len(set(user_ids) - {u.id for u in users})
        if missing:
            logger.warning("%s member ids returned no user record", missing)
        return users
