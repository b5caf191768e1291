# src/todo_tracker/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from ..config import Settings
from .ports import TaskRepo


@dataclass(slots=True)
class AppState:
    """
    Per-process wiring handed to command handlers.

    settings is read-only after startup; nothing here is mutated across requests.
    """

    settings: Settings
    task_store: TaskRepo
    today: Callable[[], date] = field(default=date.today)

    @property
    def owner_id(self) -> str:
        return self.settings.owner_id
