# src/todo_tracker/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

import httpx

from .task_models import NewTask, Task, TaskStatus

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"
PENDING_ORDER = "priority.asc,due_date.asc"


class BackendError(RuntimeError):
    """A backend request failed (transport error, HTTP error status, or bad payload)."""


class TaskNotFoundError(BackendError):
    pass


def eq(value: Any) -> str:
    return f"eq.{value}"


class TaskStore:
    """
    Task collection behind a PostgREST-style REST interface (/rest/v1/<table>).

    Conventions of the remote side:
    - filters are query params: field=eq.value, field=lt.value, ...
    - ordering is explicit: order=priority.asc,due_date.asc (the client never re-sorts)
    - auth is two fixed headers: apikey and a bearer token (same service key)
    - inserts/updates ask for the row back via Prefer: return=representation

    IDs are owned by the backend; this class never deletes anything.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
        table: str = TASKS_TABLE,
    ) -> None:
        self._table = table
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)
        self._url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ---- low-level helpers ----

    def _request(
        self,
        method: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        want_rows: bool = True,
    ) -> list[dict[str, Any]]:
        headers = dict(self._headers)
        if json_body is not None:
            headers["Content-Type"] = "application/json"
            if want_rows:
                headers["Prefer"] = "return=representation"

        try:
            resp = self._client.request(
                method,
                self._url,
                params=dict(params or {}),
                json=json_body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise BackendError(f"{method} {self._table} failed: {e}") from e

        if resp.status_code >= 400:
            raise BackendError(f"API error {resp.status_code}: {resp.text.strip()}")

        if not want_rows or not resp.content:
            return []

        try:
            data = resp.json()
        except ValueError as e:
            raise BackendError(f"Unparseable response: {resp.text[:200]}") from e

        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise BackendError(f"Unexpected response shape: {type(data).__name__}")
        return [r for r in data if isinstance(r, dict)]

    @staticmethod
    def _to_tasks(rows: list[dict[str, Any]]) -> list[Task]:
        out: list[Task] = []
        for row in rows:
            try:
                out.append(Task.from_row(row))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed task row: %r", row)
        return out

    # ---- queries ----

    def list_tasks(self, *, order: str | None = None, **filters: str) -> list[Task]:
        """Select rows; filters are passed through verbatim (e.g. status="eq.Todo")."""
        params = dict(filters)
        if order:
            params["order"] = order
        return self._to_tasks(self._request("GET", params=params))

    def list_pending(self, owner_id: str) -> list[Task]:
        return self.list_tasks(
            user_id=eq(owner_id),
            status=eq(TaskStatus.TODO.value),
            order=PENDING_ORDER,
        )

    def get_task(self, task_id: int, owner_id: str | None = None) -> Task:
        params = {"id": eq(task_id)}
        if owner_id is not None:
            params["user_id"] = eq(owner_id)
        tasks = self._to_tasks(self._request("GET", params=params))
        if not tasks:
            raise TaskNotFoundError(f"Task {task_id} not found")
        return tasks[0]

    def list_done_since(self, owner_id: str, since: date, until: date | None = None) -> list[Task]:
        """Done tasks created in [since, until). Used by the digest/report builders."""
        params = {
            "user_id": eq(owner_id),
            "status": eq(TaskStatus.DONE.value),
            "order": "created_at.desc",
        }
        if until is None:
            params["created_at"] = f"gte.{since.isoformat()}T00:00:00"
        else:
            # Two conditions on one column need PostgREST's and=(...) form.
            params["and"] = (
                f"(created_at.gte.{since.isoformat()}T00:00:00,"
                f"created_at.lt.{until.isoformat()}T00:00:00)"
            )
        return self._to_tasks(self._request("GET", params=params))

    def count_created_since(self, owner_id: str, since: date) -> int:
        params = {
            "user_id": eq(owner_id),
            "created_at": f"gte.{since.isoformat()}T00:00:00",
            "select": "id",
        }
        return len(self._request("GET", params=params))

    # ---- mutations ----

    def insert_task(self, new_task: NewTask) -> Task:
        rows = self._request("POST", json_body=new_task.to_row())
        tasks = self._to_tasks(rows)
        if not tasks:
            raise BackendError("No task returned from insert")
        logger.debug("Inserted task id=%s title=%r", tasks[0].id, tasks[0].title)
        return tasks[0]

    def update_task(self, task_id: int, fields: Mapping[str, Any], owner_id: str | None = None) -> Task:
        """Partial update: only the given fields are sent."""
        params = {"id": eq(task_id)}
        if owner_id is not None:
            params["user_id"] = eq(owner_id)
        rows = self._request("PATCH", params=params, json_body=dict(fields))
        tasks = self._to_tasks(rows)
        if not tasks:
            raise TaskNotFoundError(f"Task {task_id} not found")
        logger.debug("Updated task id=%s fields=%s", task_id, sorted(fields))
        return tasks[0]
