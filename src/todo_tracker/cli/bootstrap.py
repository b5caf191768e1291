# src/todo_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once and checks what the entry point requires,
- configures logging,
- wires the concrete REST store / chat client into AppState.
"""

from __future__ import annotations

import logging
import sys

from ..config import ConfigError, Settings, get_settings
from ..connectors.telegram_client import TelegramClient
from ..core.state import AppState
from ..logging_setup import level_from_name, setup_logging
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

BACKEND_FIELDS = ("supabase_url", "supabase_key")


def load_settings_or_exit(*required: str) -> Settings:
    """Load settings and exit(1) with a readable message if a required value is missing."""
    try:
        settings = get_settings()
        settings.require(*required)
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        raise SystemExit(1) from None
    return settings


def init_logging(settings: Settings, *, log_name: str, console_level: int | None = None) -> None:
    if console_level is None:
        console_level = level_from_name(settings.log_level)
    setup_logging(log_dir=settings.data_dir, log_name=log_name, console_level=console_level)


def create_task_store(settings: Settings) -> TaskStore:
    return TaskStore(
        settings.supabase_url,
        settings.supabase_key,
        timeout=settings.http_timeout_seconds,
    )


def create_chat_client(settings: Settings) -> TelegramClient:
    return TelegramClient(settings.bot_token, timeout=settings.http_timeout_seconds)


def create_initial_state(*, settings: Settings | None = None, task_store=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    """
    if settings is None:
        settings = get_settings()
    if task_store is None:
        task_store = create_task_store(settings)
    return AppState(settings=settings, task_store=task_store)
