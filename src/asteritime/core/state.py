# src/asteritime/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable

from ..tasks.task_board import TaskBoard
from ..tasks.task_reconciler import TaskReconciler
from ..tasks.task_transitions import TransitionController
from .ports import Clock, CoroutineRunner, TaskRepo


@dataclass
class AppState:
    # Settings object (config.Settings in the app, a SimpleNamespace in tests).
    settings: Any

    repo: TaskRepo
    board: TaskBoard
    reconciler: TaskReconciler
    transitions: TransitionController

    clock: Clock = datetime.now

    # Set once the engine loop is running (see cli.runner).
    runner: CoroutineRunner | None = None

    def run(self, coro: Awaitable[Any], timeout: float | None = None) -> Any:
        """Execute `coro` on the engine loop and return its result (blocking)."""
        if self.runner is None:
            close = getattr(coro, "close", None)
            if callable(close):
                close()
            raise RuntimeError("Engine is not running.")
        return self.runner.call(coro, timeout=timeout)
