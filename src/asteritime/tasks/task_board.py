# src/asteritime/tasks/task_board.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskBoard:
    """
    The in-memory task collection shown to the user.

    Single owner (AppState), keyed by task id. All writers go through one of:
    - replace_all(): reconciliation swaps in a whole new day at once
    - apply():       one record written back after a manual action
    - remove():      a deleted task

    There is no version check: whichever write arrives last wins. `revision`
    increments on every mutation so callers (and tests) can detect staleness.

    Reads come from the console thread while writes happen on the engine loop,
    so every read and mutation takes a small lock.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._lock = threading.Lock()
        self._tasks: dict[int, Task] = {t.id: t for t in tasks}
        self._revision = 0

    @property
    def revision(self) -> int:
        return self._revision

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._tasks

    def get(self, task_id: int) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def snapshot(self) -> list[Task]:
        with self._lock:
            return list(self._tasks.values())

    # ---- mutation entry points ----

    def replace_all(self, tasks: Iterable[Task], *, source: str = "reconcile") -> int:
        new = {t.id: t for t in tasks}
        with self._lock:
            self._tasks = new
            self._revision += 1
            rev = self._revision
        logger.debug("Board replaced by %s: %d tasks (rev=%d)", source, len(new), rev)
        return rev

    def apply(self, task: Task, *, source: str = "manual") -> int:
        with self._lock:
            prev = self._tasks.get(task.id)
            self._tasks[task.id] = task
            self._revision += 1
            rev = self._revision
        if prev is not None and prev.status != task.status:
            logger.debug(
                "Board task %s %s -> %s by %s (rev=%d)",
                task.id,
                prev.status.value,
                task.status.value,
                source,
                rev,
            )
        return rev

    def remove(self, task_id: int) -> bool:
        with self._lock:
            existed = self._tasks.pop(task_id, None) is not None
            if existed:
                self._revision += 1
        return existed
