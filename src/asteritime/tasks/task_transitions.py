# src/asteritime/tasks/task_transitions.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..core.errors import NetworkError, ValidationError
from ..core.ports import Clock, TaskRepo
from .task_board import TaskBoard
from .task_models import TERMINAL_STATUSES, Task, TaskStatus, format_local_dt
from .task_reconciler import TaskReconciler

logger = logging.getLogger(__name__)


def locked_statuses(*, lock_delayed: bool = True) -> frozenset[TaskStatus]:
    if lock_delayed:
        return TERMINAL_STATUSES | {TaskStatus.DELAY}
    return TERMINAL_STATUSES


def coerce_status(raw: TaskStatus | str) -> TaskStatus:
    try:
        return TaskStatus(str(raw).strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(f"unknown status {raw!r} (expected one of: {allowed})") from None


def check_transition(current: TaskStatus, new: TaskStatus, *, lock_delayed: bool = True) -> None:
    """Raise ValidationError if a user may not move a task from `current` to `new`."""
    if current == new:
        return
    if current in locked_statuses(lock_delayed=lock_delayed):
        raise ValidationError("task status is locked")
    if current == TaskStatus.TODO and new == TaskStatus.DONE:
        raise ValidationError("must pass through DOING first")
    if current == TaskStatus.DOING and new == TaskStatus.TODO:
        raise ValidationError("cannot revert to TODO")


def transition_fields(task: Task, new_status: TaskStatus, now: datetime) -> dict[str, Any]:
    """
    Partial update body for a manual transition.

    Manual stamps use the clock reading at the moment of the action, unlike the
    automatic path which records planned times.
    """
    fields: dict[str, Any] = {"status": new_status.value}
    if task.status == TaskStatus.TODO and new_status == TaskStatus.DOING:
        fields["actualStartTime"] = format_local_dt(now)
    if new_status == TaskStatus.DONE and task.status not in (TaskStatus.TODO, TaskStatus.DONE):
        fields["actualEndTime"] = format_local_dt(now)
    return fields


class TransitionController:
    """
    Validates and executes user-initiated status changes.

    Successful changes are written to the board and followed by a plain
    (non-evaluating) refresh when a reconciler is wired in. Store errors are
    never swallowed here: the caller shows them and lets the user retry.
    """

    def __init__(
        self,
        repo: TaskRepo,
        board: TaskBoard,
        *,
        clock: Clock = datetime.now,
        reconciler: TaskReconciler | None = None,
        lock_delayed: bool = True,
    ) -> None:
        self._repo = repo
        self._board = board
        self._clock = clock
        self._reconciler = reconciler
        self._lock_delayed = lock_delayed

    def allowed_targets(self, task: Task) -> list[TaskStatus]:
        """Statuses the user may pick for `task` (excluding its current one)."""
        out: list[TaskStatus] = []
        for status in TaskStatus:
            if status == task.status:
                continue
            try:
                check_transition(task.status, status, lock_delayed=self._lock_delayed)
            except ValidationError:
                continue
            out.append(status)
        return out

    async def request_transition(self, task: Task, new_status: TaskStatus | str) -> Task:
        target = coerce_status(new_status)
        if target == task.status:
            return task

        check_transition(task.status, target, lock_delayed=self._lock_delayed)

        fields = transition_fields(task, target, self._clock())
        saved = await self._repo.update_task(task.id, fields)
        logger.info("Task %s %s -> %s (manual)", task.id, task.status.value, target.value)

        self._board.apply(saved, source="manual")

        if self._reconciler is not None:
            try:
                await self._reconciler.load_tasks(auto_update=False)
            except NetworkError:
                # The transition itself is stored; the next tick refreshes the board.
                logger.warning("Refresh after manual transition of task %s failed", task.id)

        return saved
