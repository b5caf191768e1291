# src/todo_tracker/tasks/task_input.py

"""
Free-text task input parsing shared by the CLI and the chat webhook.

    "[P2] Ship release 2026-03-01" -> title="Ship release", priority=P2, due=2026-03-01
    "Pay rent today"               -> title="Pay rent",     priority=P1, due=today
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

from .task_models import DEFAULT_PRIORITY, Priority

PRIORITY_TAG_RE = re.compile(r"\[P([0-4])\]", re.IGNORECASE)
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class CommandError(ValueError):
    """User input that cannot be turned into an operation; the message is shown as-is."""


@dataclass(slots=True, frozen=True)
class ParsedInput:
    title: str
    priority: Priority
    due_date: date


def tomorrow_of(today: date) -> date:
    return today + timedelta(days=1)


def parse_date_token(token: str, today: date) -> date | None:
    """Return the date for "today", "tomorrow" or yyyy-mm-dd; None for anything else."""
    word = token.strip().lower()
    if word == "today":
        return today
    if word == "tomorrow":
        return tomorrow_of(today)
    if ISO_DATE_RE.match(word):
        try:
            return date.fromisoformat(word)
        except ValueError:
            return None
    return None


def parse_task_input(text: str, today: date) -> ParsedInput:
    priority = DEFAULT_PRIORITY
    due = tomorrow_of(today)

    m = PRIORITY_TAG_RE.search(text)
    if m:
        priority = Priority(f"P{m.group(1)}")
        text = PRIORITY_TAG_RE.sub("", text)

    words = text.split()
    # A lone word is always the title, even if it looks like a date.
    if len(words) > 1:
        parsed = parse_date_token(words[-1], today)
        if parsed is not None:
            due = parsed
            words = words[:-1]

    title = " ".join(words)
    if not title:
        raise CommandError("Missing task title.")
    return ParsedInput(title=title, priority=priority, due_date=due)


def parse_task_id(raw: str | None, what: str = "task ID") -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise CommandError(f"Invalid {what}: {raw!r}") from None
    if value <= 0:
        raise CommandError(f"Invalid {what}: {raw!r}")
    return value
