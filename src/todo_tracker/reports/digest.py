# src/todo_tracker/reports/digest.py

"""
Scheduled chat summaries: the morning digest and the weekly review.

Both are plain text builders over the task store; sending is the caller's job.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Protocol

from ..tasks.task_api import partition_by_due
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

SECTION_LIMIT = 10


class ReportSource(Protocol):
    def list_pending(self, owner_id: str) -> list[Task]: ...
    def list_done_since(self, owner_id: str, since: date, until: date | None = None) -> list[Task]: ...
    def count_created_since(self, owner_id: str, since: date) -> int: ...


def _section(lines: list[str], header: str, tasks: list[Task], fmt) -> None:
    if not tasks:
        return
    lines.append("")
    lines.append(f"{header} ({len(tasks)})")
    lines.extend(fmt(t) for t in tasks[:SECTION_LIMIT])
    if len(tasks) > SECTION_LIMIT:
        lines.append(f"...and {len(tasks) - SECTION_LIMIT} more")


def _short_date(d: date) -> str:
    return f"{d:%b} {d.day}"


def build_daily_digest(store: ReportSource, owner_id: str, today: date) -> str:
    pending = store.list_pending(owner_id)
    buckets = partition_by_due(pending, today)
    horizon = today + timedelta(days=2)
    upcoming = [t for t in buckets.upcoming if t.due_date <= horizon]
    yesterday = today - timedelta(days=1)
    completed = store.list_done_since(owner_id, yesterday, until=today)

    if not (buckets.overdue or buckets.today or upcoming or completed):
        return "🎉 No pending tasks! Enjoy your day."

    lines = ["☀️ Good morning! Here's your task overview:"]
    _section(
        lines,
        "🔴 OVERDUE",
        buckets.overdue,
        lambda t: f"• [{t.priority.value}] {t.title} — was due {t.due_date.isoformat()}",
    )
    _section(lines, "📅 TODAY", buckets.today, lambda t: f"• [{t.priority.value}] {t.title}")
    _section(
        lines,
        "📆 NEXT 2 DAYS",
        upcoming,
        lambda t: f"• [{t.priority.value}] {t.title} — due {t.due_date.isoformat()}",
    )
    if completed:
        lines.append("")
        lines.append(f"✅ COMPLETED YESTERDAY ({len(completed)})")
        lines.append("Great job! You finished:")
        lines.extend(f"• {t.title}" for t in completed[:SECTION_LIMIT])

    lines.append("")
    lines.append("Have a productive day! 💪")
    return "\n".join(lines)


def build_weekly_report(store: ReportSource, owner_id: str, today: date) -> str:
    week_ago = today - timedelta(days=7)
    week_ahead = today + timedelta(days=7)

    completed = store.list_done_since(owner_id, week_ago)
    pending = store.list_pending(owner_id)
    added = store.count_created_since(owner_id, week_ago)
    upcoming = sorted(
        (t for t in pending if today < t.due_date <= week_ahead),
        key=lambda t: (t.due_date, t.priority.value),
    )

    total = len(completed) + len(pending)
    rate = round(len(completed) * 100 / total) if total else 0

    lines = [f"📊 Weekly Review — Week of {_short_date(today - timedelta(days=6))} - {_short_date(today)}"]
    _section(lines, "✅ COMPLETED THIS WEEK", completed, lambda t: f"• {t.title}")

    def _pending_line(t: Task) -> str:
        when = "was due" if t.due_date < today else "due"
        return f"• [{t.priority.value}] {t.title} — {when} {t.due_date.isoformat()}"

    _section(lines, "📋 STILL PENDING", pending, _pending_line)

    lines.append("")
    lines.append("📈 STATS")
    lines.append(f"• Completion rate: {rate}%")
    lines.append(f"• Tasks completed: {len(completed)}")
    lines.append(f"• Tasks added: {added}")

    _section(
        lines,
        "🎯 UPCOMING NEXT WEEK",
        upcoming,
        lambda t: f"• [{t.priority.value}] {t.title} — due {t.due_date.isoformat()}",
    )

    lines.append("")
    lines.append("Have a great week ahead! 🚀")
    logger.debug("Weekly report: completed=%d pending=%d added=%d", len(completed), len(pending), added)
    return "\n".join(lines)
