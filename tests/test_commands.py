# tests/test_commands.py

from __future__ import annotations

from asteritime.cli.commands import CommandRegistry, registry
from asteritime.core.errors import ValidationError
from asteritime.tasks.task_models import TaskCategory, TaskStatus

from .fakes import FakeTaskRepo, at, make_task


def test_command_registry_routes_and_aliases(state) -> None:
    reg = CommandRegistry()
    called = {"a": 0}

    def handler(state, args, emit):
        called["a"] += 1
        if emit is not None:
            emit("note")
        return "a:" + ",".join(args)

    reg.register("a", handler, "a", aliases=["alpha"])

    assert reg.handle(state, "/a x y") == "a:x,y"
    assert reg.handle(state, "/ALPHA z", emit=lambda _: None) == "a:z"
    assert called["a"] == 2


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_validation_errors_are_shown_verbatim(state) -> None:
    reg = CommandRegistry()

    def handler(state, args, emit):
        raise ValidationError("must pass through DOING first")

    reg.register("boom", handler, "boom")
    assert reg.handle(state, "/boom") == "Error: must pass through DOING first"


def test_status_command_changes_task_and_refreshes(state, repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1, status=TaskStatus.TODO, start="2024-01-01T11:00:00", end="2024-01-01T12:00:00")
    state.board.replace_all(list(repo.tasks.values()))

    reply = registry.handle(state, "/status 1 doing")

    assert reply == "Task #1: TODO -> DOING"
    assert repo.update_calls == [(1, {"status": "DOING", "actualStartTime": "2024-01-01T09:30:00"})]
    assert state.board.get(1).status == TaskStatus.DOING


def test_status_command_reports_illegal_transition(state, repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1, status=TaskStatus.TODO)
    state.board.replace_all(list(repo.tasks.values()))

    assert registry.handle(state, "/status 1 DONE") == "Error: must pass through DOING first"
    assert repo.update_calls == []


def test_status_command_lists_allowed_targets(state, repo: FakeTaskRepo) -> None:
    state.board.replace_all([make_task(1, status=TaskStatus.DONE)])
    reply = registry.handle(state, "/status 1") or ""
    assert "none (locked)" in reply


def test_reconcile_then_list(state, repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1, status=TaskStatus.TODO, title="deep work")
    repo.tasks[2] = make_task(2, status=TaskStatus.TODO, start="2024-01-01T07:00:00", end="2024-01-01T08:00:00")

    assert registry.handle(state, "/reconcile") == "Reconciled 2 tasks."
    listing = registry.handle(state, "/list") or ""

    assert "#1 [DOING] Q1 09:00-10:00 deep work" in listing
    assert "DELAY OR CANCEL (1):" in listing


def test_add_creates_task_for_today(state, repo: FakeTaskRepo) -> None:
    reply = registry.handle(state, "/add 2 14:00 15:30 call the bank") or ""

    assert reply.startswith("Created #1 [TODO] Q2 14:00-15:30 call the bank")
    assert 1 in state.board
    assert registry.handle(state, "/add 2 14h 15:30 x", emit=None).startswith("Usage")


def test_delete_removes_from_store_and_board(state, repo: FakeTaskRepo) -> None:
    repo.tasks[1] = make_task(1)
    state.board.replace_all([repo.tasks[1]])

    assert registry.handle(state, "/delete 1") == "Deleted task #1."
    assert repo.deleted == [1]
    assert 1 not in state.board
    assert registry.handle(state, "/delete 1") == "Error: Task not found"


def test_stats_reports_today_and_week(state, repo: FakeTaskRepo) -> None:
    work = TaskCategory(id=1, name="Work")
    repo.tasks[1] = make_task(1, status=TaskStatus.DONE, type=work)
    repo.tasks[2] = make_task(2, status=TaskStatus.CANCEL, start="2024-01-01T13:00:00", end="2024-01-01T13:30:00")
    repo.tasks[3] = make_task(3, type=work, start="2024-01-03T09:00:00", end="2024-01-03T11:00:00")

    today = registry.handle(state, "/stats") or ""
    assert today.startswith("2024-01-01: 2 tasks")
    assert "  Work: 60 min (1.0h, 100.0%)" in today
    assert "  CANCEL: 30 min (0.5h, 100.0%)" in today
    assert "  DONE: 60 min (1.0h, 66.7%)" in today

    week = registry.handle(state, "/stats week") or ""
    assert week.startswith("Week of 2024-01-01: 3 tasks")
    assert "  Work: 180 min (3.0h, 100.0%)" in week
    assert repo.list_calls[-1].end_time == at("2024-01-07T23:59:59")

    assert registry.handle(state, "/stats month") == "Usage: /stats [week]"
