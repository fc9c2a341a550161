# src/asteritime/tasks/task_evaluator.py

from __future__ import annotations

"""
Automatic status transitions.

`evaluate(task, now)` is pure: it never talks to the backend and never reads
the clock itself. Callers decide whether a changed snapshot gets persisted.

Rules are an ordered tuple and the first one that matches wins. The order is
product behavior, not an implementation detail: a DOING task that reaches its
planned end becomes DONE (rule 2) before the missed-deadline rule (3) gets a
chance to mark it DELAY.
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from .task_models import TERMINAL_STATUSES, Task, TaskStatus

# A rule returns the resulting snapshot when it applies (possibly the task
# itself, meaning "stop here, unchanged") or None to fall through.
Rule = Callable[[Task, datetime], Task | None]


def _keep_terminal(task: Task, now: datetime) -> Task | None:
    if task.status in TERMINAL_STATUSES:
        return task
    return None


def _finish_on_schedule(task: Task, now: datetime) -> Task | None:
    end = task.planned_end_time
    if task.status == TaskStatus.DOING and end is not None and now >= end:
        # Completed exactly at the scheduled end, however late we noticed.
        return replace(task, status=TaskStatus.DONE, actual_end_time=end)
    return None


def _mark_missed_deadline(task: Task, now: datetime) -> Task | None:
    end = task.planned_end_time
    if end is not None and now > end and task.status not in (TaskStatus.DELAY, TaskStatus.DONE):
        return replace(task, status=TaskStatus.DELAY)
    return None


def _enter_window(task: Task, now: datetime) -> Task | None:
    start, end = task.planned_start_time, task.planned_end_time
    if start is None or end is None or task.status != TaskStatus.TODO:
        return None
    if start <= now <= end:
        # The system, not the user, detected the start: record the planned start.
        return replace(task, status=TaskStatus.DOING, actual_start_time=start)
    return None


RULES: tuple[tuple[str, Rule], ...] = (
    ("keep_terminal", _keep_terminal),
    ("finish_on_schedule", _finish_on_schedule),
    ("mark_missed_deadline", _mark_missed_deadline),
    ("enter_window", _enter_window),
)


def evaluate(task: Task, now: datetime) -> Task:
    """Return the snapshot `task` should have at `now` (the same object if unchanged)."""
    for _name, rule in RULES:
        result = rule(task, now)
        if result is not None:
            return result
    return task


def matching_rule(task: Task, now: datetime) -> str | None:
    """Name of the first rule that applies (diagnostics / logging)."""
    for name, rule in RULES:
        if rule(task, now) is not None:
            return name
    return None


def diverges(before: Task, after: Task) -> bool:
    """True when the lifecycle fields differ, i.e. the change must be persisted."""
    return (
        before.status != after.status
        or before.actual_start_time != after.actual_start_time
        or before.actual_end_time != after.actual_end_time
    )
