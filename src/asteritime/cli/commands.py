# src/asteritime/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, time, timedelta

from ..core.errors import AsteriError
from ..core.state import AppState
from ..tasks.task_models import Task, TaskFilter
from ..tasks.task_reconciler import day_range
from ..tasks.task_stats import LOST_STATUSES, DurationStat, category_durations, status_durations
from ..tasks.task_views import (
    KANBAN_COLUMNS,
    QUADRANT_LABELS,
    group_by_kanban,
    group_by_quadrant,
    group_by_weekday,
    week_start_for,
)

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args, emit)
        except AsteriError as e:
            # Validation and backend messages are shown verbatim.
            logger.info("/%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _hm(value: datetime | None) -> str:
    return value.strftime("%H:%M") if value else "--:--"


def format_task_line(task: Task) -> str:
    window = f"{_hm(task.planned_start_time)}-{_hm(task.planned_end_time)}"
    line = f"#{task.id} [{task.status.value}] Q{task.quadrant} {window} {task.title}"
    if task.actual_start_time or task.actual_end_time:
        line += f" (actual {_hm(task.actual_start_time)}-{_hm(task.actual_end_time)})"
    return line


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def _parse_hm(raw: str) -> time | None:
    try:
        return datetime.strptime(raw, "%H:%M").time()
    except ValueError:
        return None


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """Kanban view of the board."""
    columns = group_by_kanban(state.board.snapshot())
    lines = [f"Today's tasks (board rev {state.board.revision}):"]
    for col in KANBAN_COLUMNS:
        tasks = columns[col]
        lines.append(f"{col.replace('_', ' ')} ({len(tasks)}):")
        lines.extend(f"  {format_task_line(t)}" for t in tasks)
    return "\n".join(lines)


def cmd_quadrants(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    groups = group_by_quadrant(state.board.snapshot())
    lines = []
    for q, tasks in groups.items():
        lines.append(f"Q{q} {QUADRANT_LABELS[q]} ({len(tasks)}):")
        lines.extend(f"  {format_task_line(t)}" for t in tasks)
    return "\n".join(lines)


def _week_range(state: AppState) -> tuple[datetime, datetime]:
    start = datetime.combine(week_start_for(state.clock()), time.min)
    return start, start + timedelta(days=7) - timedelta(seconds=1)


def _stat_lines(title: str, stats: list[DurationStat]) -> list[str]:
    lines = [f"{title}:"]
    if not stats:
        lines.append("  (nothing)")
    for s in stats:
        lines.append(f"  {s.name}: {s.minutes} min ({s.hours}h, {s.percentage}%)")
    return lines


def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /stats       -> today's planned-time report
    /stats week  -> the same for this week
    """
    if args and args[0].lower() != "week":
        return "Usage: /stats [week]"

    if args:
        start, end = _week_range(state)
        label = f"Week of {start:%Y-%m-%d}"
    else:
        start, end = day_range(state.clock())
        label = f"{start:%Y-%m-%d}"
    tasks = state.run(state.repo.list_tasks(TaskFilter(start_time=start, end_time=end)))

    lines = [f"{label}: {len(tasks)} tasks"]
    lines += _stat_lines("By category (excluding DELAY/CANCEL)", category_durations(tasks))
    lines += _stat_lines("Delayed vs cancelled", status_durations(tasks, LOST_STATUSES, by_minutes=True))
    lines += _stat_lines("Done vs delayed vs cancelled", status_durations(tasks))
    return "\n".join(lines)


def cmd_week(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /week  -> this week's timeline (fetched from the backend, not the day board)
    """
    start_day = week_start_for(state.clock())
    start, end = _week_range(state)
    tasks = state.run(state.repo.list_tasks(TaskFilter(start_time=start, end_time=end)))

    lines = []
    for day, items in group_by_weekday(tasks, start_day).items():
        lines.append(day.strftime("%a %Y-%m-%d") + f" ({len(items)}):")
        lines.extend(f"  {format_task_line(t)}" for t in items)
    return "\n".join(lines)


def cmd_refresh(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    tasks = state.run(state.reconciler.load_tasks(auto_update=False))
    return f"Loaded {len(tasks)} tasks."


def cmd_reconcile(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    tasks = state.run(state.reconciler.load_tasks(auto_update=True))
    return f"Reconciled {len(tasks)} tasks."


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /status <id>           -> show task + allowed target statuses
    /status <id> <STATUS>  -> change status manually
    """
    if not args:
        return "Usage: /status <id> [TODO|DOING|DONE|DELAY|CANCEL]"

    task_id = _parse_id(args[0])
    task = state.board.get(task_id) if task_id is not None else None
    if task is None:
        return f"No task {args[0]} on today's board. Try /refresh."

    if len(args) == 1:
        targets = state.transitions.allowed_targets(task)
        allowed = ", ".join(s.value for s in targets) if targets else "none (locked)"
        return f"{format_task_line(task)}\n  Allowed: {allowed}"

    before = task.status
    saved = state.run(state.transitions.request_transition(task, args[1]))
    if saved.status == before:
        return f"Task #{task.id} is already {before.value}."
    return f"Task #{saved.id}: {before.value} -> {saved.status.value}"


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <quadrant> <HH:MM> <HH:MM> <title...>  -> create a task for today
    """
    usage = "Usage: /add <quadrant 1-4> <start HH:MM> <end HH:MM> <title...>"
    if len(args) < 4:
        return usage

    try:
        quadrant = int(args[0])
    except ValueError:
        return usage
    start_t, end_t = _parse_hm(args[1]), _parse_hm(args[2])
    if start_t is None or end_t is None:
        return usage

    today = state.clock().date()
    task = state.run(
        state.repo.create_task(
            title=" ".join(args[3:]),
            quadrant=quadrant,
            planned_start_time=datetime.combine(today, start_t),
            planned_end_time=datetime.combine(today, end_t),
        )
    )
    state.run(state.reconciler.load_tasks(auto_update=False))
    return f"Created {format_task_line(task)}"


def cmd_delete(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None:
        return "Usage: /delete <id>"
    state.run(state.repo.delete_task(task_id))
    state.board.remove(task_id)
    return f"Deleted task #{task_id}."


def cmd_categories(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    list_categories = getattr(state.repo, "list_categories", None)
    if not callable(list_categories):
        return "Categories are not supported by this backend."
    cats = state.run(list_categories())
    if not cats:
        return "No categories."
    return "\n".join(f"  {c.id}: {c.name}" for c in cats)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Kanban view of today's tasks.", aliases=["ls"])
registry.register("quadrants", cmd_quadrants, help_text="Eisenhower matrix of active tasks.", aliases=["q"])
registry.register("week", cmd_week, help_text="This week's timeline.")
registry.register("stats", cmd_stats, help_text="Planned-time report: /stats [week].")
registry.register("refresh", cmd_refresh, help_text="Reload today's tasks without auto-transitions.")
registry.register("reconcile", cmd_reconcile, help_text="Run automatic transitions now.")
registry.register("status", cmd_status, help_text="Show or change a task status: /status <id> [STATUS].")
registry.register("add", cmd_add, help_text="Create a task: /add <quadrant> <HH:MM> <HH:MM> <title>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("categories", cmd_categories, help_text="List task categories.")
