"""Tests for group-wise task fetching and user lookup."""

import asyncio
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import pytest

from taskboard.application.services import TaskService, UserDirectory, chunked, normalize_user
from taskboard.infrastructure.exceptions import UpstreamException
from taskboard.infrastructure.upstream import UpstreamClient
from tests.fakes import BASE_URL, FakePortal

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class StubUpstream:
    """Records list_tasks filters; fails for groups naming a user in fail_for."""

    def __init__(self, fail_for: set[str] | None = None, delay: int = 0) -> None:
        self.filters: list[Mapping[str, Any]] = []
        self.fail_for = fail_for or set()
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_tasks(self, task_filter, select=None):
        self.filters.append(task_filter)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            for _ in range(self.delay):
                await asyncio.sleep(0)
            group = task_filter["RESPONSIBLE_ID"]
            if self.fail_for & set(group):
                raise UpstreamException("tasks.task.list", "boom", status_code=500)
            return [{"ID": f"t-{uid}", "RESPONSIBLE_ID": uid} for uid in group]
        finally:
            self.in_flight -= 1


def user_ids(count: int) -> list[str]:
    return [f"U{i}" for i in range(1, count + 1)]


def test_chunked() -> None:
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
    assert chunked([], 3) == []


async def test_users_are_split_into_groups_of_ten() -> None:
    upstream = StubUpstream()
    service = TaskService(upstream, group_size=10)

    result = await service.fetch_active(user_ids(25))

    assert [len(f["RESPONSIBLE_ID"]) for f in upstream.filters] == [10, 10, 5]
    assert result.groups == 3
    assert result.failed_groups == 0
    assert len(result.tasks) == 25


async def test_active_filter_excludes_completed_and_deferred() -> None:
    upstream = StubUpstream()
    await TaskService(upstream).fetch_active(["U1"])
    assert upstream.filters == [{"RESPONSIBLE_ID": ["U1"], "!STATUS": [5, 6]}]


async def test_completed_filter_uses_trailing_window() -> None:
    upstream = StubUpstream()
    service = TaskService(upstream, completed_window_days=30, clock=lambda: NOW)

    await service.fetch_completed(["U1"])

    assert upstream.filters == [
        {"RESPONSIBLE_ID": ["U1"], "STATUS": 5, ">=CLOSED_DATE": "2024-05-16T12:00:00+00:00"}
    ]


async def test_failed_group_is_skipped_and_counted(caplog) -> None:
    upstream = StubUpstream(fail_for={"U12"})
    service = TaskService(upstream, group_size=10)

    result = await service.fetch_active(user_ids(25))

    assert result.failed_groups == 1
    assert len(result.tasks) == 15
    assert [t["RESPONSIBLE_ID"] for t in result.tasks][:10] == user_ids(10)
    assert "group 2/3" in caplog.text


async def test_unexpected_group_error_is_skipped_and_counted(caplog) -> None:
    class BrokenRecords(StubUpstream):
        async def list_tasks(self, task_filter, select=None):
            if "U2" in task_filter["RESPONSIBLE_ID"]:
                raise AttributeError("'NoneType' object has no attribute 'get'")
            return await super().list_tasks(task_filter, select)

    upstream = BrokenRecords()
    result = await TaskService(upstream, group_size=1).fetch_active(user_ids(3))

    assert result.failed_groups == 1
    assert [t["RESPONSIBLE_ID"] for t in result.tasks] == ["U1", "U3"]
    assert "group 2/3" in caplog.text


async def test_no_users_means_no_calls() -> None:
    upstream = StubUpstream()
    result = await TaskService(upstream).fetch_active([])
    assert upstream.filters == []
    assert result.groups == 0
    assert result.tasks == []


@pytest.mark.parametrize("limit", [1, 2, 3])
async def test_concurrency_is_bounded(limit: int) -> None:
    upstream = StubUpstream(delay=3)
    service = TaskService(upstream, group_size=2, max_concurrency=limit)

    result = await service.fetch_active(user_ids(12))

    assert upstream.max_in_flight == limit
    # Group order is kept regardless of completion order
    assert [t["RESPONSIBLE_ID"] for t in result.tasks] == user_ids(12)


# -- users ----------------------------------------------------------------


def test_normalize_user() -> None:
    user = normalize_user(
        {"ID": 7, "NAME": "Ann", "LAST_NAME": "Lee", "EMAIL": "ann@example.com", "UF_DEPARTMENT": [3, 5], "ACTIVE": "N"}
    )
    assert user.id == "7"
    assert user.display_name == "Ann Lee"
    assert user.departments == ("3", "5")
    assert user.active is False


def test_normalize_user_defaults() -> None:
    user = normalize_user({"id": "8", "name": "Bo"})
    assert user.display_name == "Bo"
    assert user.active is True
    assert user.email == ""


async def test_get_users_empty_makes_no_call() -> None:
    portal = FakePortal()
    async with portal.http_client() as http:
        assert await UserDirectory(UpstreamClient(BASE_URL, http)).get_users([]) == []
    assert portal.calls == []


async def test_get_users_by_id(caplog) -> None:
    portal = FakePortal(users=[{"ID": "U1", "NAME": "Ann"}, {"ID": "U2", "NAME": "Bob"}, {"ID": "U3"}])
    async with portal.http_client() as http:
        users = await UserDirectory(UpstreamClient(BASE_URL, http)).get_users(["U1", "U2", "U7"])

    assert [u.id for u in users] == ["U1", "U2"]
    assert portal.calls[0][1]["filter"] == {"ID": ["U1", "U2", "U7"]}
    assert "1 member ids returned no user record" in caplog.text
