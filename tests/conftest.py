# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_tracker.core.state import AppState

from .fakes import FakeTaskRepo, make_task

TODAY = date(2026, 2, 2)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the daemon.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        supabase_url="https://backend.test",
        supabase_key="service-key",
        owner_id="cli",
        bot_token="bot-token",
        port=8080,
        todo_file=tmp_path / "todo.md",
        doc_format="inline",
        poll_interval_seconds=30.0,
        debounce_seconds=2.0,
        settle_seconds=0.5,
        http_timeout_seconds=5.0,
        log_level="INFO",
        data_dir=tmp_path / "logs",
    )


@pytest.fixture()
def repo() -> FakeTaskRepo:
    return FakeTaskRepo(
        [
            make_task(1, "Old invoice", due="2026-01-30", priority="P0"),
            make_task(5, "Buy milk", due="2026-02-02", priority="P1"),
            make_task(7, "Plan trip", due="2026-02-10", priority="P3"),
            make_task(9, "Someone else's", due="2026-02-02", user_id="42"),
        ]
    )


@pytest.fixture()
def state(settings: SimpleNamespace, repo: FakeTaskRepo) -> AppState:
    return AppState(settings=settings, task_store=repo, today=lambda: TODAY)
