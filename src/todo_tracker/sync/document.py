# src/todo_tracker/sync/document.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

from ..tasks.task_api import partition_by_due
from ..tasks.task_models import Task, TaskStatus
from .formats import DocumentFormat, DocumentLine

logger = logging.getLogger(__name__)

HEADER = "# TODO List"
EMPTY_PLACEHOLDER = "No pending tasks! 🎉"


def render_document(tasks: Iterable[Task], fmt: DocumentFormat, today: date) -> str:
    """
    Render pending tasks as a checkbox document.

    Sections appear as Overdue, Today, Upcoming and are omitted when empty.
    Output depends only on (tasks, fmt, today), so re-rendering an unchanged set
    gives byte-identical text.
    """
    buckets = partition_by_due(tasks, today)

    parts = [f"{HEADER}\n\n"]
    for title, section in buckets.sections():
        if not section:
            continue
        parts.append(f"## {title}\n")
        parts.extend(fmt.render_line(t, today) + "\n" for t in section)
        parts.append("\n")

    if not len(buckets):
        parts.append(f"{EMPTY_PLACEHOLDER}\n")

    return "".join(parts)


def parse_document(text: str, fmt: DocumentFormat) -> list[DocumentLine]:
    """Parse every well-formed task line; anything else (headers, prose, broken lines) is ignored."""
    lines: list[DocumentLine] = []
    for raw in text.splitlines():
        parsed = fmt.parse_line(raw)
        if parsed is None:
            if raw.lstrip().startswith("- ["):
                logger.debug("Ignoring unparseable task line: %r", raw)
            continue
        lines.append(parsed)
    return lines


def diff_line(line: DocumentLine, task: Task) -> dict[str, Any]:
    """
    Fields where the document disagrees with the backend row.

    Only changed fields are returned; fields the encoding does not carry are None
    on the line and never appear in the diff.
    """
    updates: dict[str, Any] = {}

    status = TaskStatus.DONE if line.checked else TaskStatus.TODO
    if status != task.status:
        updates["status"] = status.value
    if line.title and line.title != task.title:
        updates["title"] = line.title
    if line.priority is not None and line.priority != task.priority:
        updates["priority"] = line.priority.value
    if line.due_date is not None and line.due_date != task.due_date:
        updates["due_date"] = line.due_date.isoformat()

    return updates
