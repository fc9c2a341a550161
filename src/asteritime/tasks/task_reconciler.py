# src/asteritime/tasks/task_reconciler.py

from __future__ import annotations

"""
Task reconciler.

A small polling loop that:
- fetches today's tasks,
- runs each one through the evaluator,
- persists tasks whose lifecycle fields changed (one independent update per task),
- replaces the in-memory board with the result.

A failed update only affects its own task: the original snapshot is kept and
the next tick tries again.
"""

import asyncio
import logging
from datetime import datetime, time, timedelta

from ..core.errors import NetworkError
from ..core.ports import Clock, TaskRepo
from .task_board import TaskBoard
from .task_evaluator import diverges, evaluate
from .task_models import Task, TaskFilter

logger = logging.getLogger(__name__)


def day_range(now: datetime) -> tuple[datetime, datetime]:
    """Local midnight .. 23:59:59 of the day containing `now`."""
    start = datetime.combine(now.date(), time.min)
    end = start + timedelta(days=1) - timedelta(seconds=1)
    return start, end


class TaskReconciler:
    def __init__(self, repo: TaskRepo, board: TaskBoard, *, clock: Clock = datetime.now) -> None:
        self._repo = repo
        self._board = board
        self._clock = clock

    async def load_tasks(self, *, auto_update: bool = True) -> list[Task]:
        """
        Fetch today's tasks and replace the board with them.

        auto_update=True  -> evaluate + persist divergent tasks first
        auto_update=False -> plain refresh (used right after manual changes / creation)

        Fetch failures propagate and leave the board untouched; per-task update
        failures are logged and swallowed.
        """
        now = self._clock()
        start, end = day_range(now)

        tasks = await self._repo.list_tasks(TaskFilter(start_time=start, end_time=end))

        if auto_update:
            tasks = list(await asyncio.gather(*(self._reconcile_one(t, now) for t in tasks)))

        self._board.replace_all(tasks, source="reconcile" if auto_update else "refresh")
        return tasks

    async def _reconcile_one(self, task: Task, now: datetime) -> Task:
        updated = evaluate(task, now)
        if not diverges(task, updated):
            return task

        try:
            # Full merged record: original fields plus the changed lifecycle fields.
            saved = await self._repo.update_task(task.id, updated.to_json())
        except NetworkError:
            logger.exception(
                "Auto-transition of task %s (%s -> %s) failed; keeping previous state",
                task.id,
                task.status.value,
                updated.status.value,
            )
            return task
        except Exception:
            logger.exception("Unexpected error persisting auto-transition of task %s", task.id)
            return task

        logger.info("Task %s -> %s (auto)", task.id, updated.status.value)
        return saved


async def run_reconciliation_loop(
        reconciler: TaskReconciler,
        *,
        interval_seconds: float = 60.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling loop: reconcile immediately, then every interval_seconds.

    A failing tick (backend down, ...) is logged and retried on the next one.
    To stop the loop, set stop_event (the current tick finishes first) or
    cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    stop_event = stop_event or asyncio.Event()

    while not stop_event.is_set():
        try:
            tasks = await reconciler.load_tasks(auto_update=True)
            logger.debug("Reconciled %d tasks", len(tasks))
        except NetworkError as e:
            logger.warning("Reconciliation tick failed: %s", e)
        except Exception:
            logger.exception("Reconciliation tick crashed")

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
        except asyncio.TimeoutError:
            continue


class ReconciliationLoop:
    """
    Start/stop handle around run_reconciliation_loop().

    start() must be called from inside a running event loop. stop() signals the
    ticker and waits for it; a tick already in flight completes (its updates are
    not cancelled) unless `timeout` expires, in which case the task is cancelled.
    """

    def __init__(self, reconciler: TaskReconciler, *, interval_seconds: float = 60.0) -> None:
        self._reconciler = reconciler
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> list[Task]:
        """One evaluating tick outside the schedule; fetch errors propagate."""
        return await self._reconciler.load_tasks(auto_update=True)

    def start(self) -> asyncio.Task[None]:
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            run_reconciliation_loop(
                self._reconciler,
                interval_seconds=self._interval_seconds,
                stop_event=self._stop_event,
            ),
            name="asteritime-reconciler",
        )
        logger.info("Reconciliation loop started (interval=%.0fs)", self._interval_seconds)
        return self._task

    async def stop(self, *, timeout: float | None = 30.0) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        if self._stop_event is not None:
            self._stop_event.set()
        try:
            await asyncio.wait_for(task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Reconciliation loop did not stop in %.0fs; cancelled", timeout or 0)
        except asyncio.CancelledError:
            # Only the loop task's own cancellation ends here; ours propagates.
            current = asyncio.current_task()
            if (current is not None and current.cancelling()) or not task.cancelled():
                raise
        logger.info("Reconciliation loop stopped")
