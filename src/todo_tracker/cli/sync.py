# src/todo_tracker/cli/sync.py

"""
`todo-sync` entrypoint.

    todo-sync export   write pending tasks to TODO_CLI_FILE once
    todo-sync watch    export, then keep file and backend in sync (default)
    todo-sync help
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..config import ConfigError, Settings
from ..sync.daemon import SyncDaemon
from ..sync.formats import get_format
from .bootstrap import BACKEND_FIELDS, create_task_store, init_logging, load_settings_or_exit

logger = logging.getLogger(__name__)

SYNC_HELP = """Todo Sync - Two-way sync between the task backend and a markdown file

Usage: todo-sync [command]

Commands:
  export    Export tasks to the markdown file
  watch     Export tasks and watch for changes (default)
  help      Show this help message

Environment:
  TODO_CLI_FILE        Path to your todo.md file (required)
  TODO_CLI_DOC_FORMAT  Line format: inline (default) or comment"""


def build_daemon(settings: Settings, store) -> SyncDaemon:
    if settings.todo_file is None:
        raise ConfigError("Missing required environment variable(s): TODO_CLI_FILE")
    return SyncDaemon(
        store,
        owner_id=settings.owner_id,
        path=settings.todo_file,
        fmt=get_format(settings.doc_format),
        poll_interval=settings.poll_interval_seconds,
        debounce=settings.debounce_seconds,
        settle=settings.settle_seconds,
    )


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    command = argv[0].lower() if argv else "watch"

    if command in ("help", "--help", "-h"):
        print(SYNC_HELP)
        return 0
    if command not in ("export", "watch"):
        print(f"❌ Unknown command: {command}")
        print(SYNC_HELP)
        return 1

    settings = load_settings_or_exit(*BACKEND_FIELDS, "todo_file")
    init_logging(settings, log_name="todo-sync.log")

    store = create_task_store(settings)
    try:
        daemon = build_daemon(settings, store)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        store.close()
        return 1

    try:
        if command == "export":
            return 0 if daemon.export() else 1

        stop = threading.Event()

        def _handle_signal(signum, _frame) -> None:
            logger.info("Signal %s received, shutting down...", signum)
            stop.set()

        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)

        logger.info("Edit checkboxes in the file to sync status changes; Ctrl+C to stop.")
        daemon.run(stop)
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
