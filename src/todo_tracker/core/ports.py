# src/todo_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the task operations, the sync daemon and the connectors.

Components depend on Protocols instead of concrete implementations,
so the REST store and the chat API can be replaced by fakes in tests.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from ..tasks.task_models import NewTask, Task


class TaskRepo(Protocol):
    def list_pending(self, owner_id: str) -> list[Task]: ...
    def get_task(self, task_id: int, owner_id: str | None = None) -> Task: ...
    def insert_task(self, new_task: NewTask) -> Task: ...
    def update_task(
            self,
            task_id: int,
            fields: Mapping[str, Any],
            owner_id: str | None = None,
    ) -> Task: ...


class ChatSender(Protocol):
    """Connector-side port: how replies and digests leave the process."""

    def send_text(self, chat_id: str | int, text: str) -> None: ...
