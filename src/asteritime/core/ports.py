# src/asteritime/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The lifecycle engine depends on Protocols instead of concrete implementations.
This keeps the REST backend swappable and makes testing easier.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Protocol

from ..tasks.task_models import Task, TaskFilter

Clock = Callable[[], datetime]
# Returns the current *local* wall-clock time as a naive datetime.


class TaskRepo(Protocol):
    """Remote task collection (see tasks.task_client.TaskApiClient)."""

    def list_tasks(self, flt: TaskFilter | None = None) -> Awaitable[list[Task]]: ...

    def create_task(
            self,
            *,
            title: str,
            quadrant: int,
            description: str | None = None,
            planned_start_time: datetime | None = None,
            planned_end_time: datetime | None = None,
            category_id: int | None = None,
            recurrence_rule_id: int | None = None,
    ) -> Awaitable[Task]: ...

    def update_task(self, task_id: int, fields: dict[str, Any]) -> Awaitable[Task]: ...

    def delete_task(self, task_id: int) -> Awaitable[None]: ...


class CoroutineRunner(Protocol):
    """Runs a coroutine on the engine's event loop from a synchronous caller."""

    def call(self, coro: Awaitable[Any], timeout: float | None = None) -> Any: ...
