# src/todo_tracker/cli/main.py

"""
`todo` entrypoint: one command per invocation, then exit.

    todo add "[P2] Ship release" 2026-03-01
    todo list
    todo done 5
"""

from __future__ import annotations

import logging
import sys

from ..tasks.task_input import CommandError
from ..tasks.task_store import BackendError
from .bootstrap import (
    BACKEND_FIELDS,
    create_initial_state,
    create_task_store,
    init_logging,
    load_settings_or_exit,
)
from .commands import CLI_HELP, UnknownCommandError, cli_registry, format_error

logger = logging.getLogger(__name__)

HELP_WORDS = {"help", "--help", "-h"}


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or argv[0].lower() in HELP_WORDS:
        print(CLI_HELP)
        return 0

    settings = load_settings_or_exit(*BACKEND_FIELDS)
    # Results go to stdout; keep the console log to warnings and up.
    init_logging(settings, log_name="todo-cli.log", console_level=logging.WARNING)

    store = create_task_store(settings)
    state = create_initial_state(settings=settings, task_store=store)
    try:
        reply = cli_registry.handle(state, " ".join(argv))
    except UnknownCommandError as e:
        print(format_error(e))
        print(CLI_HELP)
        return 1
    except (CommandError, BackendError) as e:
        logger.debug("Command failed", exc_info=True)
        print(format_error(e))
        return 1
    finally:
        store.close()

    if reply:
        print(reply)
    return 0


if __name__ == "__main__":
    sys.exit(main())
