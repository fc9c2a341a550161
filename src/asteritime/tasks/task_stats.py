# src/asteritime/tasks/task_stats.py

from __future__ import annotations

"""
Time statistics over a task list (daily or weekly report).

All figures are planned minutes: plannedEnd - plannedStart, rounded to whole
minutes. Tasks without a complete planned window count as zero and are left
out of every breakdown.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .task_models import Task, TaskStatus

UNCATEGORIZED = "Uncategorized"

# Planned time that was given up on, as opposed to spent.
LOST_STATUSES = (TaskStatus.DELAY, TaskStatus.CANCEL)
OUTCOME_STATUSES = (TaskStatus.DONE, TaskStatus.DELAY, TaskStatus.CANCEL)


@dataclass(slots=True, frozen=True)
class DurationStat:
    name: str
    minutes: int
    percentage: float
    tasks: tuple[Task, ...] = ()

    @property
    def hours(self) -> float:
        return round(self.minutes / 60, 1)


def planned_minutes(task: Task) -> float:
    if not task.has_window:
        return 0.0
    delta = task.planned_end_time - task.planned_start_time  # type: ignore[operator]
    return max(delta.total_seconds() / 60, 0.0)


def _with_percentages(rows: list[tuple[str, int, tuple[Task, ...]]]) -> list[DurationStat]:
    total = sum(minutes for _, minutes, _ in rows)
    return [
        DurationStat(
            name=name,
            minutes=minutes,
            percentage=round(minutes * 100 / total, 1) if total else 0.0,
            tasks=tasks,
        )
        for name, minutes, tasks in rows
    ]


def category_durations(tasks: Iterable[Task]) -> list[DurationStat]:
    """
    Planned time per category, largest first.

    DELAY and CANCEL tasks are excluded; everything still planned or done
    counts. Tasks without a category (or with a blank name) are grouped under
    UNCATEGORIZED.
    """
    totals: dict[str, float] = {}
    members: dict[str, list[Task]] = {}
    for task in tasks:
        if task.status in LOST_STATUSES:
            continue
        minutes = planned_minutes(task)
        if minutes <= 0:
            continue
        name = task.type.name if task.type is not None and task.type.name else UNCATEGORIZED
        totals[name] = totals.get(name, 0.0) + minutes
        members.setdefault(name, []).append(task)

    rows = [(name, round(total), tuple(members[name])) for name, total in totals.items()]
    rows.sort(key=lambda r: r[1], reverse=True)
    return _with_percentages(rows)


def status_durations(
    tasks: Iterable[Task],
    statuses: Sequence[TaskStatus] = OUTCOME_STATUSES,
    *,
    by_minutes: bool = False,
) -> list[DurationStat]:
    """
    Planned time per status, for the given statuses only.

    Statuses with no planned time are omitted. Rows keep the order of
    `statuses` unless by_minutes=True (largest first). Percentages are shares
    of the rows returned.
    """
    totals: dict[TaskStatus, int] = {s: 0 for s in statuses}
    members: dict[TaskStatus, list[Task]] = {s: [] for s in statuses}
    for task in tasks:
        if task.status not in totals or not task.has_window:
            continue
        totals[task.status] += round(planned_minutes(task))
        members[task.status].append(task)

    rows = [(s.value, totals[s], tuple(members[s])) for s in statuses if totals[s] > 0]
    if by_minutes:
        rows.sort(key=lambda r: r[1], reverse=True)
    return _with_percentages(rows)
