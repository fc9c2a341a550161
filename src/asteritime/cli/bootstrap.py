# src/asteritime/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the REST client, board, reconciler and transition controller into AppState.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_board import TaskBoard
from ..tasks.task_client import TaskApiClient
from ..tasks.task_reconciler import TaskReconciler
from ..tasks.task_transitions import TransitionController

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, repo=None, clock=datetime.now) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the repo) injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if repo is None:
        if not settings.api_token:
            logger.warning("ASTERI_API_TOKEN is empty; the backend will likely answer 401.")
        repo = TaskApiClient(
            settings.api_base_url,
            settings.api_token,
            timeout_seconds=settings.http_timeout_seconds,
        )

    board = TaskBoard()
    reconciler = TaskReconciler(repo, board, clock=clock)
    transitions = TransitionController(
        repo,
        board,
        clock=clock,
        reconciler=reconciler,
        lock_delayed=settings.lock_delayed,
    )

    return AppState(
        settings=settings,
        repo=repo,
        board=board,
        reconciler=reconciler,
        transitions=transitions,
        clock=clock,
    )
