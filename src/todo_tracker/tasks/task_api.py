# src/todo_tracker/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date

from ..core.ports import TaskRepo
from .task_input import CommandError, parse_task_input, tomorrow_of
from .task_models import NewTask, Task, TaskStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DueBuckets:
    """Pending tasks split by due date relative to a given day."""

    overdue: list[Task] = field(default_factory=list)
    today: list[Task] = field(default_factory=list)
    upcoming: list[Task] = field(default_factory=list)

    def sections(self) -> list[tuple[str, list[Task]]]:
        return [("Overdue", self.overdue), ("Today", self.today), ("Upcoming", self.upcoming)]

    def __len__(self) -> int:
        return len(self.overdue) + len(self.today) + len(self.upcoming)


def partition_by_due(tasks: Iterable[Task], today: date) -> DueBuckets:
    """Every task lands in exactly one bucket; order inside a bucket is the input order."""
    buckets = DueBuckets()
    for t in tasks:
        if t.due_date < today:
            buckets.overdue.append(t)
        elif t.due_date == today:
            buckets.today.append(t)
        else:
            buckets.upcoming.append(t)
    return buckets


def add_task(store: TaskRepo, *, owner_id: str, text: str, today: date) -> Task:
    if not text.strip():
        raise CommandError("Missing task title.")
    parsed = parse_task_input(text, today)
    created = store.insert_task(
        NewTask(
            title=parsed.title,
            due_date=parsed.due_date,
            priority=parsed.priority,
            user_id=owner_id,
        )
    )
    logger.info("Task added id=%s owner=%s", created.id, owner_id)
    return created


def list_pending(store: TaskRepo, *, owner_id: str) -> list[Task]:
    return store.list_pending(owner_id)


def complete_task(store: TaskRepo, *, owner_id: str, task_id: int) -> Task:
    # Fetch first so "not found" is reported as such instead of an empty update.
    store.get_task(task_id, owner_id)
    done = store.update_task(task_id, {"status": TaskStatus.DONE.value}, owner_id)
    logger.info("Task %s -> Done", task_id)
    return done


def snooze_task(store: TaskRepo, *, owner_id: str, task_id: int, today: date) -> Task:
    store.get_task(task_id, owner_id)
    due = tomorrow_of(today)
    snoozed = store.update_task(task_id, {"due_date": due.isoformat()}, owner_id)
    logger.info("Task %s snoozed to %s", task_id, due.isoformat())
    return snoozed


def add_subtask(store: TaskRepo, *, owner_id: str, parent_id: int, title: str) -> tuple[Task, Task]:
    """
    Create a subtask that inherits the parent's due date and priority.

    The parent must exist now; nothing keeps the link valid afterwards.
    Returns (parent, subtask).
    """
    title = title.strip()
    if not title:
        raise CommandError("Missing subtask title.")
    parent = store.get_task(parent_id, owner_id)
    child = store.insert_task(
        NewTask(
            title=title,
            due_date=parent.due_date,
            priority=parent.priority,
            user_id=owner_id,
            parent_id=parent.id,
        )
    )
    logger.info("Subtask added id=%s parent=%s", child.id, parent.id)
    return parent, child
