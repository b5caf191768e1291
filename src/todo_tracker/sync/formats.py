# src/todo_tracker/sync/formats.py

"""
Line encodings for the local checkbox document.

Two encodings exist and are chosen by configuration (TODO_CLI_DOC_FORMAT):

    inline:  - [ ] Buy milk — P1 — id:5 — due:2026-02-02
    comment: - [ ] [P1] Buy milk — due 2026-02-03 <!-- id:5 -->

"inline" round-trips title/priority/due date; "comment" only round-trips the checkbox.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from ..config import ConfigError
from ..tasks.task_models import Priority, Task

SEP = " — "


@dataclass(slots=True, frozen=True)
class DocumentLine:
    """One parsed checkbox line. Fields the encoding does not carry are None."""

    task_id: int
    checked: bool
    title: str | None = None
    priority: Priority | None = None
    due_date: date | None = None


def _checkbox(task: Task) -> str:
    return "- [x]" if task.is_done else "- [ ]"


class DocumentFormat(Protocol):
    """One task per line; carries_fields tells whether title/priority/due date round-trip."""

    name: str
    carries_fields: bool

    def render_line(self, task: Task, today: date) -> str: ...
    def parse_line(self, line: str) -> DocumentLine | None: ...


class InlineFormat:
    name = "inline"
    carries_fields = True

    LINE_RE = re.compile(
        r"^\s*- \[(?P<mark>[ xX])\] (?P<title>.+?) — (?P<prio>P[0-4]) — id:(?P<id>\d+)"
        r" — due:(?P<due>\d{4}-\d{2}-\d{2})\s*$"
    )

    def render_line(self, task: Task, today: date) -> str:
        return (
            f"{_checkbox(task)} {task.title}{SEP}{task.priority.value}{SEP}"
            f"id:{task.id}{SEP}due:{task.due_date.isoformat()}"
        )

    def parse_line(self, line: str) -> DocumentLine | None:
        m = self.LINE_RE.match(line)
        if not m:
            return None
        try:
            due = date.fromisoformat(m.group("due"))
        except ValueError:
            return None
        return DocumentLine(
            task_id=int(m.group("id")),
            checked=m.group("mark").lower() == "x",
            title=m.group("title").strip(),
            priority=Priority(m.group("prio")),
            due_date=due,
        )


class CommentFormat:
    name = "comment"
    carries_fields = False

    LINE_RE = re.compile(r"^\s*- \[(?P<mark>[ xX])\] .*<!-- id:(?P<id>\d+) -->\s*$")

    def render_line(self, task: Task, today: date) -> str:
        due = "" if task.due_date == today else f"{SEP}due {task.due_date.isoformat()}"
        return f"{_checkbox(task)} [{task.priority.value}] {task.title}{due} <!-- id:{task.id} -->"

    def parse_line(self, line: str) -> DocumentLine | None:
        m = self.LINE_RE.match(line)
        if not m:
            return None
        return DocumentLine(task_id=int(m.group("id")), checked=m.group("mark").lower() == "x")


FORMATS: dict[str, Callable[[], DocumentFormat]] = {
    InlineFormat.name: InlineFormat,
    CommentFormat.name: CommentFormat,
}


def get_format(name: str) -> DocumentFormat:
    try:
        return FORMATS[name.strip().lower()]()
    except KeyError:
        raise ConfigError(
            f"Unknown document format {name!r}; expected one of: {', '.join(sorted(FORMATS))}"
        ) from None
