# src/asteritime/tasks/task_views.py

from __future__ import annotations

"""
Display projections over the current task list. Pure, no side effects.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from .task_models import Task, TaskStatus

QUADRANTS = (1, 2, 3, 4)

QUADRANT_LABELS = {
    1: "Urgent & important",
    2: "Important, not urgent",
    3: "Urgent, not important",
    4: "Neither",
}

# DELAY and CANCEL share one column.
KANBAN_COLUMNS = ("TODO", "DOING", "DONE", "DELAY_OR_CANCEL")

_INACTIVE = (TaskStatus.DELAY, TaskStatus.CANCEL)


def group_by_quadrant(tasks: Iterable[Task]) -> dict[int, list[Task]]:
    """Active planning view: DELAY/CANCEL tasks have left the matrix."""
    out: dict[int, list[Task]] = {q: [] for q in QUADRANTS}
    for task in tasks:
        if task.status in _INACTIVE:
            continue
        bucket = out.get(task.quadrant)
        if bucket is not None:
            bucket.append(task)
    return out


def kanban_column(status: TaskStatus) -> str:
    if status in _INACTIVE:
        return "DELAY_OR_CANCEL"
    return status.value


def group_by_kanban(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    out: dict[str, list[Task]] = {col: [] for col in KANBAN_COLUMNS}
    for task in tasks:
        out[kanban_column(task.status)].append(task)
    return out


def week_start_for(day: date | datetime) -> date:
    """Monday of the week containing `day`."""
    if isinstance(day, datetime):
        day = day.date()
    return day - timedelta(days=day.weekday())


def group_by_weekday(tasks: Iterable[Task], week_start: date) -> dict[date, list[Task]]:
    """
    Weekly timeline: seven day buckets starting at `week_start`.

    Tasks are placed by the date of their planned start and sorted by it.
    Unscheduled tasks and tasks outside the week are left out.
    """
    days = [week_start + timedelta(days=i) for i in range(7)]
    out: dict[date, list[Task]] = {d: [] for d in days}
    for task in tasks:
        start = task.planned_start_time
        if start is None:
            continue
        bucket = out.get(start.date())
        if bucket is not None:
            bucket.append(task)
    for bucket in out.values():
        bucket.sort(key=lambda t: (t.planned_start_time, t.id))
    return out
