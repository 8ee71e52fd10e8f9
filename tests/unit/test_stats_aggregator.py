"""Tests for the single-pass statistics aggregator."""

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from taskboard.application.interfaces import AbsenceInfo
from taskboard.application.services import TaskEnricher, aggregate
from taskboard.application.services.stats_aggregator import round_half_up
from taskboard.domain.entities import EnrichedTask, User

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def raw_task(
    task_id: int,
    responsible: str | None,
    *,
    status: str = "2",
    idle_days: int = 0,
    overdue: bool = False,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "ID": str(task_id),
        "TITLE": f"Task {task_id}",
        "STATUS": status,
        "CHANGED_DATE": (NOW - timedelta(days=idle_days)).isoformat(),
    }
    if responsible is not None:
        record["RESPONSIBLE_ID"] = responsible
    if overdue:
        record["DEADLINE"] = (NOW - timedelta(hours=1)).isoformat()
    return record


def enrich(records: list[dict[str, Any]]) -> list[EnrichedTask]:
    return TaskEnricher().enrich(records, now=NOW)


USERS = [
    User(id="U1", first_name="Ann", last_name="Lee"),
    User(id="U2", first_name="Bob", last_name="Ray"),
]


def test_round_half_up() -> None:
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert round_half_up(-0.5) == -1


def test_department_totals_equal_sum_of_per_user_counts() -> None:
    active = enrich(
        [
            raw_task(1, "U1", idle_days=0),
            raw_task(2, "U1", idle_days=4),
            raw_task(3, "U2", idle_days=9),
            raw_task(4, "U2", status="3", idle_days=1, overdue=True),
        ]
    )
    completed = enrich([raw_task(10, "U1", status="5"), raw_task(11, "U2", status="5")])

    stats = aggregate(active, completed, USERS)

    per_user = stats.by_employee.values()
    assert stats.total_active == sum(s.active for s in per_user) == 4
    assert stats.total_completed == sum(s.completed for s in per_user) == 2
    assert stats.critical_tasks == sum(s.critical for s in per_user) == 2
    assert stats.warning_tasks == sum(s.warning for s in per_user) == 1
    assert stats.overdue_tasks == sum(s.overdue for s in per_user) == 1
    assert stats.in_progress_tasks == sum(s.in_progress for s in per_user) == 1


def test_histograms_sum_to_total_active() -> None:
    active = enrich(
        [
            raw_task(1, "U1", idle_days=0),
            raw_task(2, "U1", idle_days=2),
            raw_task(3, "U2", idle_days=5),
            raw_task(4, "U2", idle_days=30, status="3"),
            raw_task(5, "U2", status="99"),
        ]
    )

    stats = aggregate(active, [], USERS)

    assert sum(stats.by_status.values()) == stats.total_active == 5
    assert sum(stats.inactivity_distribution.values()) == 5
    assert stats.inactivity_distribution == {"0-1": 2, "2-3": 1, "4-7": 1, "8+": 1}
    assert stats.by_status == {"WaitingExecution": 3, "InProgress": 1, "Unknown": 1}


def test_staleness_histogram_always_has_every_bucket() -> None:
    stats = aggregate([], [], [])
    assert stats.inactivity_distribution == {"0-1": 0, "2-3": 0, "4-7": 0, "8+": 0}
    assert stats.by_status == {}


def test_users_without_tasks_appear_with_zeros() -> None:
    stats = aggregate(enrich([raw_task(1, "U1")]), [], USERS)

    bob = stats.by_employee["U2"]
    assert bob.name == "Bob Ray"
    assert (bob.active, bob.completed, bob.critical, bob.avg_inactive_days) == (0, 0, 0, 0)
    assert bob.is_absent is False


def test_by_employee_follows_user_list_order() -> None:
    users = [User(id="Z"), User(id="A"), User(id="M")]
    assert list(aggregate([], [], users).by_employee) == ["Z", "A", "M"]


def test_task_with_unknown_responsible_counts_toward_totals_only() -> None:
    active = enrich([raw_task(1, "U9", idle_days=10), raw_task(2, None, idle_days=10)])

    stats = aggregate(active, [], USERS)

    assert stats.total_active == 2
    assert stats.critical_tasks == 2
    assert set(stats.by_employee) == {"U1", "U2"}
    assert all(s.active == 0 for s in stats.by_employee.values())


def test_average_inactive_days_rounds_half_up() -> None:
    active = enrich([raw_task(1, "U1", idle_days=1), raw_task(2, "U1", idle_days=2)])
    assert aggregate(active, [], USERS).by_employee["U1"].avg_inactive_days == 2


def test_completed_tasks_do_not_affect_priority_counters() -> None:
    completed = enrich([raw_task(1, "U1", status="5", idle_days=20, overdue=True)])

    stats = aggregate([], completed, USERS)

    assert stats.total_completed == 1
    assert stats.critical_tasks == stats.overdue_tasks == 0
    assert stats.by_employee["U1"].completed == 1
    assert stats.by_employee["U1"].critical == 0
    assert stats.inactivity_distribution["8+"] == 0


def test_absences_mark_employees() -> None:
    absences = {"U2": AbsenceInfo(user_id="U2", is_absent=True, absence_type="vacation")}
    stats = aggregate([], [], USERS, absences)
    assert stats.by_employee["U1"].is_absent is False
    assert stats.by_employee["U2"].is_absent is True


def test_aggregate_is_deterministic() -> None:
    active = enrich([raw_task(i, "U1" if i % 2 else "U2", idle_days=i % 9) for i in range(1, 30)])
    completed = enrich([raw_task(100, "U1", status="5")])
    assert aggregate(active, completed, USERS) == aggregate(active, completed, USERS)


def test_qa_department_scenario() -> None:
    """One active in-progress task idle 10 days, one completed task, a user with nothing."""
    active = enrich(
        [
            {
                "id": "101",
                "title": "Regression suite",
                "responsibleId": "U1",
                "status": "3",
                "createdDate": (NOW - timedelta(days=10)).isoformat(),
            }
        ]
    )
    completed = enrich(
        [
            {
                "ID": "102",
                "RESPONSIBLE_ID": "U1",
                "STATUS": "5",
                "CLOSED_DATE": (NOW - timedelta(days=2)).isoformat(),
            }
        ]
    )

    stats = aggregate(active, completed, USERS)

    assert active[0].inactive_days == 10
    assert active[0].priority.value == "critical"
    assert stats.to_dict() == {
        "totalActive": 1,
        "totalCompleted": 1,
        "criticalTasks": 1,
        "warningTasks": 0,
        "overdueTasks": 0,
        "inProgressTasks": 1,
        "byEmployee": {
            "U1": {
                "name": "Ann Lee",
                "active": 1,
                "completed": 1,
                "critical": 1,
                "warning": 0,
                "overdue": 0,
                "inProgress": 1,
                "avgInactiveDays": 10,
                "isAbsent": False,
            },
            "U2": {
                "name": "Bob Ray",
                "active": 0,
                "completed": 0,
                "critical": 0,
                "warning": 0,
                "overdue": 0,
                "inProgress": 0,
                "avgInactiveDays": 0,
                "isAbsent": False,
            },
        },
        "byStatus": {"InProgress": 1},
        "inactivityDistribution": {"0-1": 0, "2-3": 0, "4-7": 0, "8+": 1},
    }


@pytest.mark.parametrize("count", [0, 1, 7, 50])
def test_scan_counts_scale_with_input(count: int) -> None:
    active = enrich([raw_task(i, "U1", idle_days=i % 12) for i in range(count)])
    stats = aggregate(active, [], USERS)
    assert stats.by_employee["U1"].active == count
    assert sum(stats.inactivity_distribution.values()) == count
