# src/asteritime/tasks/task_client.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from ..core.errors import NetworkError, ServerRejection, ValidationError
from .task_models import RecurrenceRule, Task, TaskCategory, TaskFilter, TaskStatus, format_local_dt

logger = logging.getLogger(__name__)


class TaskApiClient:
    """
    Async REST client for the task backend.

    Every request carries `Authorization: Bearer <token>`.
    Failures are mapped onto the package error taxonomy:
    - transport errors (connect/read timeouts, DNS, ...) -> NetworkError
    - non-2xx responses                                  -> ServerRejection (body text as message)

    One instance owns one httpx.AsyncClient; use it from a single event loop.
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout_seconds, connect=min(5.0, timeout_seconds)),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> TaskApiClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- low-level helpers ----

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {self._base_url}{path} failed: {e}") from e

        if not resp.is_success:
            text = ""
            try:
                text = resp.text
            except httpx.HTTPError:
                logger.debug("Could not read error body for %s %s", method, path, exc_info=True)
            raise ServerRejection(resp.status_code, text)

        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise ServerRejection(resp.status_code, f"invalid JSON in response: {e}") from e

    # ---- tasks ----

    async def list_tasks(self, flt: TaskFilter | None = None) -> list[Task]:
        params = (flt or TaskFilter()).to_params()
        resp = await self._request("GET", "/tasks", params=params)
        data = self._json(resp)
        if not isinstance(data, list):
            raise ServerRejection(resp.status_code, "expected a JSON array of tasks")

        out: list[Task] = []
        for item in data:
            try:
                out.append(Task.from_json(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed task record: %r", item)
        return out

    async def create_task(
        self,
        *,
        title: str,
        quadrant: int,
        description: str | None = None,
        planned_start_time: datetime | None = None,
        planned_end_time: datetime | None = None,
        category_id: int | None = None,
        recurrence_rule_id: int | None = None,
    ) -> Task:
        if not title or not title.strip():
            raise ValidationError("title is required")
        if quadrant not in (1, 2, 3, 4):
            raise ValidationError(f"quadrant must be 1..4, got {quadrant!r}")
        if (
            planned_start_time is not None
            and planned_end_time is not None
            and planned_end_time < planned_start_time
        ):
            raise ValidationError("planned end time is before planned start time")

        payload: dict[str, Any] = {
            "title": title.strip(),
            "quadrant": int(quadrant),
            # The server forces TODO as well; sending it keeps the request self-describing.
            "status": TaskStatus.TODO.value,
        }
        if description:
            payload["description"] = description
        if planned_start_time is not None:
            payload["plannedStartTime"] = format_local_dt(planned_start_time)
        if planned_end_time is not None:
            payload["plannedEndTime"] = format_local_dt(planned_end_time)
        if category_id is not None:
            payload["type"] = {"id": int(category_id)}
        if recurrence_rule_id is not None:
            payload["recurrenceRule"] = {"id": int(recurrence_rule_id)}

        resp = await self._request("POST", "/tasks", json=payload)
        task = Task.from_json(self._json(resp))
        logger.info("Created task id=%s quadrant=%s", task.id, task.quadrant)
        return task

    async def update_task(self, task_id: int, fields: dict[str, Any]) -> Task:
        """Partial update: only the supplied (wire-named) fields change server-side."""
        resp = await self._request("PUT", f"/tasks/{int(task_id)}", json=fields)
        return Task.from_json(self._json(resp))

    async def delete_task(self, task_id: int) -> None:
        await self._request("DELETE", f"/tasks/{int(task_id)}")
        logger.info("Deleted task id=%s", task_id)

    # ---- categories / recurrence rules ----

    async def list_categories(self) -> list[TaskCategory]:
        resp = await self._request("GET", "/task-categories")
        return [TaskCategory.from_json(item) for item in self._json(resp) or []]

    async def create_category(self, name: str) -> TaskCategory:
        if not name or not name.strip():
            raise ValidationError("category name is required")
        resp = await self._request("POST", "/task-categories", json={"name": name.strip()})
        return TaskCategory.from_json(self._json(resp))

    async def list_recurrence_rules(self) -> list[RecurrenceRule]:
        resp = await self._request("GET", "/task-recurrence-rules")
        return [RecurrenceRule.from_json(item) for item in self._json(resp) or []]

    async def create_recurrence_rule(self, frequency_expression: str) -> RecurrenceRule:
        expr = (frequency_expression or "").strip()
        if not expr:
            raise ValidationError("frequency expression is required")
        resp = await self._request(
            "POST", "/task-recurrence-rules", json={"frequencyExpression": expr}
        )
        return RecurrenceRule.from_json(self._json(resp))
