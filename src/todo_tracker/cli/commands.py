# src/todo_tracker/cli/commands.py

from __future__ import annotations

import sys
from collections.abc import Callable

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_input import CommandError, parse_task_id
from ..tasks.task_models import Task
from ..tasks.task_store import BackendError, TaskNotFoundError

CommandHandler = Callable[[AppState, list[str], str], str]

CHAT_LIST_SECTION_LIMIT = 10


class UnknownCommandError(CommandError):
    pass


class CommandRegistry:
    """
    Command registry shared by the CLI ("add ...") and the chat webhook ("/add ...").

    Handlers receive (state, args, owner_id) and return the reply text.
    Input problems are raised as CommandError; backend failures as BackendError.
    """

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

    def handle(self, state: AppState, line: str, owner_id: str | None = None) -> str | None:
        """
        Handle "/command args" or "command args" (the slash is optional).
        Returns a reply string or None if the line is not a command.
        """
        line = line.strip().removeprefix("/")

        parts = line.split()
        if not parts:
            return None

        # Telegram appends the bot name in groups: /add@my_bot
        name = parts[0].split("@", 1)[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            raise UnknownCommandError(f"Unknown command: {name}")

        return handler(state, args, owner_id or state.owner_id)

    def build_help(self, prefix: str = "") -> str:
        lines = ["Commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {prefix}{name} - {help_text}")
        return "\n".join(lines)


def format_error(exc: Exception) -> str:
    if isinstance(exc, TaskNotFoundError):
        return "❌ Task not found"
    if isinstance(exc, CommandError):
        return f"❌ {exc}"
    if isinstance(exc, BackendError):
        return f"❌ Request failed: {exc}"
    return "❌ Internal error"


def _require_text(args: list[str], usage: str) -> str:
    text = " ".join(args).strip()
    if not text:
        raise CommandError(f"Missing task title. Usage: {usage}")
    return text


def _require_id(args: list[str], usage: str, what: str = "task ID") -> int:
    if not args:
        raise CommandError(f"Missing {what}. Usage: {usage}")
    return parse_task_id(args[0], what)


# ---- shared handlers ----


def cmd_add(state: AppState, args: list[str], owner_id: str) -> str:
    text = _require_text(args, "add <task> [today|tomorrow|yyyy-mm-dd]")
    task = task_api.add_task(state.task_store, owner_id=owner_id, text=text, today=state.today())
    return f"✅ Task added: {task.title} — due {task.due_date.isoformat()} [{task.priority.value}]"


def cmd_done(state: AppState, args: list[str], owner_id: str) -> str:
    task_id = _require_id(args, "done <id>")
    task = task_api.complete_task(state.task_store, owner_id=owner_id, task_id=task_id)
    return f"✅ Marked as done: {task.title}"


def cmd_snooze(state: AppState, args: list[str], owner_id: str) -> str:
    task_id = _require_id(args, "snooze <id>")
    task = task_api.snooze_task(state.task_store, owner_id=owner_id, task_id=task_id, today=state.today())
    return f"✅ Snoozed: {task.title} — now due {task.due_date.isoformat()}"


def cmd_subtask(state: AppState, args: list[str], owner_id: str) -> str:
    usage = "subtask <parent_id> <task>"
    parent_id = _require_id(args, usage, what="parent task ID")
    title = _require_text(args[1:], usage)
    parent, child = task_api.add_subtask(state.task_store, owner_id=owner_id, parent_id=parent_id, title=title)
    return f"✅ Subtask added to '{parent.title}': {child.title} (id:{child.id})"


# ---- CLI-only handlers ----


def _paint(text: str, code: str) -> str:
    if sys.stdout.isatty():
        return f"\033[{code}m{text}\033[0m"
    return text


def cmd_list_cli(state: AppState, args: list[str], owner_id: str) -> str:
    tasks = task_api.list_pending(state.task_store, owner_id=owner_id)
    if not tasks:
        return "🎉 No pending tasks!"

    today = state.today()
    lines = ["📋 All pending tasks:", ""]
    for t in tasks:
        if t.due_date == today:
            due_info = " " + _paint("(today)", "33")
        else:
            due_info = f" — due {t.due_date.isoformat()}"
        overdue = " " + _paint("⚠️ overdue", "31") if t.due_date < today else ""
        lines.append(f"[id:{t.id}] [{t.priority.value}] {t.title}{due_info}{overdue}")
    return "\n".join(lines)


CLI_HELP = """TODO Tracker CLI

Usage: todo <command> [arguments]

Commands:
  add <task> [date]      Add a new task (default: due tomorrow, P1)
                         Examples:
                           todo add "Buy groceries"
                           todo add "Meeting" today
                           todo add "[P2] Report" 2026-02-15

  list, ls               Show all pending tasks

  done, rm <id>          Mark task as complete
                         Example: todo done 5

  snooze <id>            Postpone task to tomorrow
                         Example: todo snooze 3

  subtask <id> <task>    Add subtask to existing task
                         Example: todo subtask 2 "Review section"

  help                   Show this help message"""


def cmd_help_cli(state: AppState, args: list[str], owner_id: str) -> str:
    return CLI_HELP


# ---- chat-only handlers ----


def _chat_task_line(t: Task, section: str) -> str:
    line = f"[id:{t.id}] [{t.priority.value}] {t.title}"
    if section == "Overdue":
        return f"{line} — was due {t.due_date.isoformat()}"
    if section == "Upcoming":
        return f"{line} — due {t.due_date.isoformat()}"
    return line


def cmd_list_chat(state: AppState, args: list[str], owner_id: str) -> str:
    tasks = task_api.list_pending(state.task_store, owner_id=owner_id)
    if not tasks:
        return "🎉 No pending tasks!"

    buckets = task_api.partition_by_due(tasks, state.today())
    icons = {"Overdue": "🔴", "Today": "📅", "Upcoming": "📆"}

    lines = ["📋 Your tasks:"]
    for section, items in buckets.sections():
        if not items:
            continue
        lines.append("")
        lines.append(f"{icons[section]} {section.upper()} ({len(items)})")
        lines.extend(_chat_task_line(t, section) for t in items[:CHAT_LIST_SECTION_LIMIT])
        if len(items) > CHAT_LIST_SECTION_LIMIT:
            lines.append(f"...and {len(items) - CHAT_LIST_SECTION_LIMIT} more")
    return "\n".join(lines)


WELCOME_TEXT = (
    "👋 Welcome to TODO Tracker!\n\n"
    "Commands:\n"
    "/add <task> - Add task\n"
    "/list, /ls - Show tasks\n"
    "/done, /rm <id> - Complete task\n"
    "/snooze <id> - Postpone to tomorrow\n"
    "/subtask <id> <task> - Add subtask\n\n"
    "(Slash prefix is optional)"
)


def cmd_start(state: AppState, args: list[str], owner_id: str) -> str:
    return WELCOME_TEXT


def cmd_help_chat(state: AppState, args: list[str], owner_id: str) -> str:
    return chat_registry.build_help(prefix="/")


cli_registry = CommandRegistry()
cli_registry.register("add", cmd_add, help_text="Add a task: add <task> [date].")
cli_registry.register("list", cmd_list_cli, help_text="Show all pending tasks.", aliases=["ls"])
cli_registry.register("done", cmd_done, help_text="Mark a task as complete: done <id>.", aliases=["rm"])
cli_registry.register("snooze", cmd_snooze, help_text="Postpone a task to tomorrow: snooze <id>.")
cli_registry.register("subtask", cmd_subtask, help_text="Add a subtask: subtask <parent_id> <task>.")
cli_registry.register("help", cmd_help_cli, help_text="Show help.", aliases=["--help", "-h"])

chat_registry = CommandRegistry()
chat_registry.register("add", cmd_add, help_text="Add task.")
chat_registry.register("list", cmd_list_chat, help_text="Show tasks.", aliases=["ls"])
chat_registry.register("done", cmd_done, help_text="Complete task.", aliases=["rm"])
chat_registry.register("snooze", cmd_snooze, help_text="Postpone to tomorrow.")
chat_registry.register("subtask", cmd_subtask, help_text="Add subtask.")
chat_registry.register("start", cmd_start, help_text="Show welcome message.")
chat_registry.register("help", cmd_help_chat, help_text="List commands.")
