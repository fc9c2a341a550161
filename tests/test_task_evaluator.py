# tests/test_task_evaluator.py

from __future__ import annotations

import pytest

from asteritime.tasks.task_evaluator import RULES, diverges, evaluate, matching_rule
from asteritime.tasks.task_models import TaskStatus

from .fakes import at, make_task

ANY_TIMES = [
    "2023-12-31T23:00:00",
    "2024-01-01T08:59:59",
    "2024-01-01T09:00:00",
    "2024-01-01T09:30:00",
    "2024-01-01T10:00:00",
    "2024-01-01T11:00:00",
    "2024-06-01T00:00:00",
]


@pytest.mark.parametrize("status", [TaskStatus.DONE, TaskStatus.CANCEL])
@pytest.mark.parametrize("now", ANY_TIMES)
def test_terminal_tasks_are_never_touched(status: TaskStatus, now: str) -> None:
    task = make_task(status=status)
    assert evaluate(task, at(now)) is task


def test_doing_task_at_planned_end_is_done_not_delayed() -> None:
    task = make_task(status=TaskStatus.DOING, actual_start_time=at("2024-01-01T09:05:00"))

    result = evaluate(task, at("2024-01-01T10:00:00"))

    assert result.status == TaskStatus.DONE
    assert result.actual_end_time == at("2024-01-01T10:00:00")
    assert result.actual_start_time == at("2024-01-01T09:05:00")


def test_late_reconciliation_records_planned_end_not_wall_clock() -> None:
    task = make_task(status=TaskStatus.DOING)
    result = evaluate(task, at("2024-01-01T17:45:00"))
    assert result.status == TaskStatus.DONE
    assert result.actual_end_time == at("2024-01-01T10:00:00")


def test_pending_task_past_deadline_is_delayed() -> None:
    task = make_task(status=TaskStatus.TODO)

    result = evaluate(task, at("2024-01-01T10:00:01"))

    assert result.status == TaskStatus.DELAY
    assert result.actual_start_time is None
    assert result.actual_end_time is None


def test_delayed_task_stays_delayed() -> None:
    task = make_task(status=TaskStatus.DELAY)
    assert evaluate(task, at("2024-01-02T00:00:00")) is task


def test_deadline_without_start_still_delays() -> None:
    task = make_task(status=TaskStatus.TODO, start=None)
    assert evaluate(task, at("2024-01-01T12:00:00")).status == TaskStatus.DELAY


@pytest.mark.parametrize("now", ["2024-01-01T09:00:00", "2024-01-01T09:30:00"])
def test_pending_task_inside_window_starts_at_planned_start(now: str) -> None:
    task = make_task(status=TaskStatus.TODO)

    result = evaluate(task, at(now))

    assert result.status == TaskStatus.DOING
    assert result.actual_start_time == at("2024-01-01T09:00:00")
    assert result.actual_end_time is None


def test_pending_task_exactly_at_end_enters_window() -> None:
    # Deadline rule needs now > end; at the boundary the window rule wins.
    task = make_task(status=TaskStatus.TODO)
    result = evaluate(task, at("2024-01-01T10:00:00"))
    assert result.status == TaskStatus.DOING


def test_pending_task_before_window_is_unchanged() -> None:
    task = make_task(status=TaskStatus.TODO)
    assert evaluate(task, at("2024-01-01T08:59:59")) is task


def test_doing_task_inside_window_is_unchanged() -> None:
    task = make_task(status=TaskStatus.DOING)
    assert evaluate(task, at("2024-01-01T09:59:59")) is task


@pytest.mark.parametrize("start,end", [(None, None), ("2024-01-01T09:00:00", None)])
def test_missing_planned_end_disables_automatic_transitions(start, end) -> None:
    task = make_task(status=TaskStatus.TODO, start=start, end=end)
    for now in ANY_TIMES:
        assert evaluate(task, at(now)) is task


def test_evaluation_does_not_mutate_input() -> None:
    task = make_task(status=TaskStatus.TODO)
    evaluate(task, at("2024-01-01T09:30:00"))
    assert task.status == TaskStatus.TODO
    assert task.actual_start_time is None


def test_rule_order_is_fixed() -> None:
    assert [name for name, _ in RULES] == [
        "keep_terminal",
        "finish_on_schedule",
        "mark_missed_deadline",
        "enter_window",
    ]


def test_matching_rule_names_the_winner() -> None:
    assert matching_rule(make_task(status=TaskStatus.DOING), at("2024-01-01T11:00:00")) == "finish_on_schedule"
    assert matching_rule(make_task(status=TaskStatus.TODO), at("2024-01-01T11:00:00")) == "mark_missed_deadline"
    assert matching_rule(make_task(status=TaskStatus.TODO), at("2024-01-01T08:00:00")) is None


def test_full_day_scenario() -> None:
    task = make_task(status=TaskStatus.TODO)

    task = evaluate(task, at("2024-01-01T09:30:00"))
    assert task.status == TaskStatus.DOING
    assert task.actual_start_time == at("2024-01-01T09:00:00")

    task = evaluate(task, at("2024-01-01T10:00:00"))
    assert task.status == TaskStatus.DONE
    assert task.actual_end_time == at("2024-01-01T10:00:00")

    assert evaluate(task, at("2024-01-01T11:00:00")) is task


def test_diverges_only_on_lifecycle_fields() -> None:
    task = make_task()
    assert not diverges(task, task)
    assert diverges(task, evaluate(task, at("2024-01-01T09:30:00")))
    assert not diverges(task, make_task(title="renamed"))
