# src/todo_tracker/cli/digest.py

"""
`todo-digest` entrypoint (meant for cron).

    todo-digest daily [--dry-run]
    todo-digest weekly [--dry-run]
"""

from __future__ import annotations

import logging
import sys
from datetime import date

from ..connectors.telegram_client import TelegramError
from ..reports.digest import build_daily_digest, build_weekly_report
from ..tasks.task_store import BackendError
from .bootstrap import BACKEND_FIELDS, create_chat_client, create_task_store, init_logging, load_settings_or_exit

logger = logging.getLogger(__name__)

BUILDERS = {
    "daily": build_daily_digest,
    "weekly": build_weekly_report,
}

USAGE = "Usage: todo-digest daily|weekly [--dry-run]"


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    dry_run = "--dry-run" in argv
    args = [a for a in argv if a != "--dry-run"]

    if len(args) != 1 or args[0].lower() not in BUILDERS:
        print(USAGE)
        return 0 if args[:1] in (["help"], ["--help"], ["-h"]) else 1

    required = BACKEND_FIELDS if dry_run else (*BACKEND_FIELDS, "bot_token")
    settings = load_settings_or_exit(*required)
    init_logging(settings, log_name="todo-digest.log")

    store = create_task_store(settings)
    try:
        text = BUILDERS[args[0].lower()](store, settings.owner_id, date.today())
    except BackendError as e:
        logger.error("Failed to build %s report: %s", args[0], e)
        return 1
    finally:
        store.close()

    if dry_run:
        print(text)
        return 0

    chat = create_chat_client(settings)
    try:
        chat.send_text(settings.owner_id, text)
    except TelegramError as e:
        logger.error("Failed to send %s report: %s", args[0], e)
        return 1
    finally:
        chat.close()

    logger.info("%s report sent to %s", args[0].capitalize(), settings.owner_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
