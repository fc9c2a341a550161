# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from asteritime.cli.bootstrap import create_initial_state
from asteritime.core.state import AppState
from asteritime.tasks.task_board import TaskBoard

from .fakes import FakeTaskRepo, FixedClock, InlineRunner, at


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="asteritime-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_base_url="http://backend.test/api",
        api_token="test-token",
        http_timeout_seconds=2.0,
        reconcile_enabled=True,
        reconcile_interval_seconds=60.0,
        lock_delayed=True,
        console_enabled=False,
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(at("2024-01-01T09:30:00"))


@pytest.fixture()
def repo() -> FakeTaskRepo:
    return FakeTaskRepo()


@pytest.fixture()
def board() -> TaskBoard:
    return TaskBoard()


@pytest.fixture()
def state(settings: SimpleNamespace, repo: FakeTaskRepo, clock: FixedClock) -> AppState:
    """
    AppState wired with the in-memory repo, a fixed clock and an inline runner.

    The board, reconciler and transition controller are the real ones: their
    interplay is what the command tests exercise.
    """
    st = create_initial_state(settings=settings, repo=repo, clock=clock)
    st.runner = InlineRunner()
    return st
