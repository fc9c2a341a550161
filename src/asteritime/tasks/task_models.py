# src/asteritime/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

# Backend wire format: local wall-clock time, no timezone offset.
WIRE_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_local_dt(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.replace(tzinfo=None, microsecond=0).strftime(WIRE_DATETIME_FORMAT)


def parse_local_dt(raw: Any) -> datetime | None:
    """
    Parse a backend timestamp into a naive local datetime.

    Accepts "YYYY-MM-DDTHH:mm:ss" and longer variants (fractional seconds,
    trailing zone designators); only the first 19 characters are used.
    A space instead of "T" is tolerated as well.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.replace(tzinfo=None, microsecond=0)
    s = str(raw).strip()
    if not s:
        return None
    s = s[:19].replace(" ", "T")
    try:
        return datetime.strptime(s, WIRE_DATETIME_FORMAT)
    except ValueError:
        # Date-only or minute precision ("2024-01-01T09:00").
        return datetime.fromisoformat(s)


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    TODO -> DOING -> DONE is the happy path; DELAY and CANCEL are side exits.
    """

    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"
    DELAY = "DELAY"
    CANCEL = "CANCEL"

    @classmethod
    def from_wire(cls, raw: str | None) -> TaskStatus:
        """Case-insensitive parse; missing or unknown values raise ValueError."""
        if not raw:
            raise ValueError("task record has no status")
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            raise ValueError(f"unknown task status {raw!r}") from None


# No automatic or manual transition leaves these.
TERMINAL_STATUSES = frozenset({TaskStatus.DONE, TaskStatus.CANCEL})


@dataclass(slots=True, frozen=True)
class TaskCategory:
    id: int
    name: str

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TaskCategory:
        return cls(id=int(data["id"]), name=str(data.get("name") or ""))

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(slots=True, frozen=True)
class RecurrenceRule:
    id: int
    frequency_expression: str  # e.g. "1/day", "2/week"

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> RecurrenceRule:
        return cls(
            id=int(data["id"]),
            frequency_expression=str(data.get("frequencyExpression") or ""),
        )

    def to_json(self) -> dict[str, Any]:
        return {"id": self.id, "frequencyExpression": self.frequency_expression}


@dataclass(slots=True, frozen=True)
class Task:
    id: int
    title: str
    quadrant: int
    status: TaskStatus

    description: str | None = None

    planned_start_time: datetime | None = None
    planned_end_time: datetime | None = None
    actual_start_time: datetime | None = None
    actual_end_time: datetime | None = None

    type: TaskCategory | None = None
    recurrence_rule: RecurrenceRule | None = None

    # Server bookkeeping, carried through untouched.
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_window(self) -> bool:
        return self.planned_start_time is not None and self.planned_end_time is not None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Task:
        raw_type = data.get("type")
        raw_rule = data.get("recurrenceRule")
        version = data.get("version")
        return cls(
            id=int(data["id"]),
            title=str(data.get("title") or ""),
            quadrant=int(data.get("quadrant") or 0),
            status=TaskStatus.from_wire(data.get("status")),
            description=data.get("description"),
            planned_start_time=parse_local_dt(data.get("plannedStartTime")),
            planned_end_time=parse_local_dt(data.get("plannedEndTime")),
            actual_start_time=parse_local_dt(data.get("actualStartTime")),
            actual_end_time=parse_local_dt(data.get("actualEndTime")),
            type=(
                TaskCategory.from_json(raw_type)
                if isinstance(raw_type, dict) and raw_type.get("id") is not None
                else None
            ),
            recurrence_rule=(
                RecurrenceRule.from_json(raw_rule)
                if isinstance(raw_rule, dict) and raw_rule.get("id") is not None
                else None
            ),
            version=int(version) if version is not None else None,
            created_at=parse_local_dt(data.get("createdAt")),
            updated_at=parse_local_dt(data.get("updatedAt")),
        )

    def to_json(self) -> dict[str, Any]:
        """Full record in wire shape; absent optional fields are omitted."""
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "quadrant": self.quadrant,
            "status": self.status.value,
        }
        optional: dict[str, Any] = {
            "description": self.description,
            "plannedStartTime": format_local_dt(self.planned_start_time),
            "plannedEndTime": format_local_dt(self.planned_end_time),
            "actualStartTime": format_local_dt(self.actual_start_time),
            "actualEndTime": format_local_dt(self.actual_end_time),
            "type": self.type.to_json() if self.type else None,
            "recurrenceRule": self.recurrence_rule.to_json() if self.recurrence_rule else None,
            "version": self.version,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


@dataclass(slots=True, frozen=True)
class TaskFilter:
    """Query for GET /tasks. The backend matches the time range against plannedStartTime."""

    quadrant: int | None = None
    category_id: int | None = None
    status: TaskStatus | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.quadrant is not None:
            params["quadrant"] = str(self.quadrant)
        if self.category_id is not None:
            params["categoryId"] = str(self.category_id)
        if self.status is not None:
            params["status"] = TaskStatus(self.status).value
        if self.start_time is not None:
            params["startTime"] = format_local_dt(self.start_time) or ""
        if self.end_time is not None:
            params["endTime"] = format_local_dt(self.end_time) or ""
        return params
