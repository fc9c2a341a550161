# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime

import pytest

from asteritime.tasks.task_models import Task, TaskFilter, TaskStatus, format_local_dt, parse_local_dt


def test_parse_accepts_backend_variants() -> None:
    expected = datetime(2024, 1, 1, 9, 0, 0)
    assert parse_local_dt("2024-01-01T09:00:00") == expected
    assert parse_local_dt("2024-01-01T09:00:00.123456") == expected
    assert parse_local_dt("2024-01-01 09:00:00") == expected
    assert parse_local_dt("2024-01-01T09:00") == expected
    assert parse_local_dt("") is None
    assert parse_local_dt(None) is None


def test_format_drops_microseconds() -> None:
    assert format_local_dt(datetime(2024, 1, 1, 9, 0, 0, 999)) == "2024-01-01T09:00:00"
    assert format_local_dt(None) is None


def test_status_parsing_is_case_insensitive() -> None:
    assert TaskStatus.from_wire("doing") == TaskStatus.DOING
    assert TaskStatus.from_wire(" Delay ") == TaskStatus.DELAY


@pytest.mark.parametrize("raw", ["ARCHIVED", None, ""])
def test_unknown_or_missing_status_is_rejected(raw) -> None:
    with pytest.raises(ValueError):
        TaskStatus.from_wire(raw)

    with pytest.raises(ValueError):
        Task.from_json({"id": 1, "title": "x", "quadrant": 1, "status": raw})


def test_task_from_backend_json() -> None:
    task = Task.from_json(
        {
            "id": 7,
            "title": "Gym",
            "quadrant": 2,
            "status": "DOING",
            "plannedStartTime": "2024-01-01T18:00:00",
            "plannedEndTime": "2024-01-01T19:00:00",
            "actualStartTime": "2024-01-01T18:05:00",
            "actualEndTime": None,
            "type": {"id": 3, "name": "Health"},
            "recurrenceRule": {"id": 1, "frequencyExpression": "3/week"},
            "version": 4,
            "user": {"id": 1, "email": "someone@example.com"},
        }
    )

    assert task.status == TaskStatus.DOING
    assert task.actual_start_time == datetime(2024, 1, 1, 18, 5)
    assert task.actual_end_time is None
    assert task.type is not None and task.type.name == "Health"
    assert task.recurrence_rule is not None and task.recurrence_rule.frequency_expression == "3/week"

    wire = task.to_json()
    assert wire["type"] == {"id": 3, "name": "Health"}
    assert wire["version"] == 4
    assert "actualEndTime" not in wire
    assert "user" not in wire


def test_filter_params_omit_absent_fields() -> None:
    assert TaskFilter().to_params() == {}
    assert TaskFilter(
        quadrant=1,
        category_id=5,
        status=TaskStatus.TODO,
        start_time=datetime(2024, 1, 1),
        end_time=datetime(2024, 1, 1, 23, 59, 59),
    ).to_params() == {
        "quadrant": "1",
        "categoryId": "5",
        "status": "TODO",
        "startTime": "2024-01-01T00:00:00",
        "endTime": "2024-01-01T23:59:59",
    }
