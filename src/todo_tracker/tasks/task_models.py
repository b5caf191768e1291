# src/todo_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    """Ordinal urgency label; P0 is the most urgent."""

    P0 = "P0"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return DEFAULT_PRIORITY
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            return DEFAULT_PRIORITY


DEFAULT_PRIORITY = Priority.P1


class TaskStatus(StrEnum):
    TODO = "Todo"
    DONE = "Done"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if raw == cls.DONE.value:
            return cls.DONE
        return cls.TODO


@dataclass(slots=True, frozen=True)
class Task:
    """
    A task row as returned by the backend.

    id and created_at are assigned by the backend; clients never invent them.
    """

    id: int
    title: str
    due_date: date
    priority: Priority
    status: TaskStatus
    user_id: str
    parent_id: int | None = None
    created_at: str | None = None

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        """Decode a backend JSON row. Raises KeyError/ValueError on malformed rows."""
        parent = row.get("parent_id")
        return cls(
            id=int(row["id"]),
            title=str(row.get("title") or ""),
            due_date=date.fromisoformat(str(row["due_date"])[:10]),
            priority=Priority.from_db(row.get("priority")),
            status=TaskStatus.from_db(row.get("status")),
            user_id=str(row.get("user_id") or ""),
            parent_id=int(parent) if parent is not None else None,
            created_at=row.get("created_at"),
        )


@dataclass(slots=True, frozen=True)
class NewTask:
    """Insert payload; the backend fills in id and created_at."""

    title: str
    due_date: date
    priority: Priority
    user_id: str
    status: TaskStatus = TaskStatus.TODO
    parent_id: int | None = None

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "title": self.title,
            "due_date": self.due_date.isoformat(),
            "priority": self.priority.value,
            "status": self.status.value,
            "user_id": self.user_id,
        }
        if self.parent_id is not None:
            row["parent_id"] = self.parent_id
        return row
