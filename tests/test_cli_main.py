# tests/test_cli_main.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from todo_tracker.cli import digest as digest_cli
from todo_tracker.cli import main as cli_main

from .fakes import FakeChat, FakeTaskRepo


@pytest.fixture()
def wired(monkeypatch: pytest.MonkeyPatch, settings: SimpleNamespace, repo: FakeTaskRepo) -> FakeTaskRepo:
    """Patch the composition root so main() runs against the in-memory repo."""
    monkeypatch.setattr(cli_main, "load_settings_or_exit", lambda *required: settings)
    monkeypatch.setattr(cli_main, "init_logging", lambda *a, **kw: None)
    monkeypatch.setattr(cli_main, "create_task_store", lambda s: repo)
    return repo


def test_help_needs_no_settings(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main([]) == 0
    assert "Usage: todo <command>" in capsys.readouterr().out

    assert cli_main.main(["--help"]) == 0


def test_done_prints_reply_and_closes_store(wired: FakeTaskRepo, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["done", "5"]) == 0
    assert capsys.readouterr().out.strip() == "✅ Marked as done: Buy milk"
    assert wired.closed is True


def test_quoted_title_argument(wired: FakeTaskRepo) -> None:
    assert cli_main.main(["add", "[P2] Ship release", "2026-03-01"]) == 0
    assert wired.inserts[-1].title == "Ship release"


def test_unknown_command_prints_help(wired: FakeTaskRepo, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["frobnicate"]) == 1
    out = capsys.readouterr().out
    assert "Unknown command" in out
    assert "Usage: todo <command>" in out


def test_missing_task_exits_nonzero(wired: FakeTaskRepo, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_main.main(["done", "404"]) == 1
    assert "❌ Task not found" in capsys.readouterr().out
    assert wired.closed is True


def test_backend_failure_exits_nonzero(wired: FakeTaskRepo, capsys: pytest.CaptureFixture[str]) -> None:
    wired.fail_list = True
    assert cli_main.main(["list"]) == 1
    assert "❌ Request failed" in capsys.readouterr().out


def test_missing_config_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(*required):
        raise SystemExit(1)

    monkeypatch.setattr(cli_main, "load_settings_or_exit", _fail)
    with pytest.raises(SystemExit):
        cli_main.main(["list"])


@pytest.fixture()
def digest_wired(monkeypatch: pytest.MonkeyPatch, settings: SimpleNamespace, repo: FakeTaskRepo) -> FakeChat:
    chat = FakeChat()
    monkeypatch.setattr(digest_cli, "load_settings_or_exit", lambda *required: settings)
    monkeypatch.setattr(digest_cli, "init_logging", lambda *a, **kw: None)
    monkeypatch.setattr(digest_cli, "create_task_store", lambda s: repo)
    monkeypatch.setattr(digest_cli, "create_chat_client", lambda s: chat)
    return chat


def test_digest_dry_run_prints_without_sending(digest_wired: FakeChat, capsys: pytest.CaptureFixture[str]) -> None:
    assert digest_cli.main(["daily", "--dry-run"]) == 0
    assert "Good morning" in capsys.readouterr().out
    assert digest_wired.sent == []


def test_digest_sends_to_owner(digest_wired: FakeChat) -> None:
    assert digest_cli.main(["weekly"]) == 0
    assert digest_wired.sent[0].chat_id == "cli"
    assert digest_wired.sent[0].text.startswith("📊 Weekly Review")


def test_digest_backend_failure(digest_wired: FakeChat, repo: FakeTaskRepo) -> None:
    repo.fail_list = True
    assert digest_cli.main(["daily"]) == 1
    assert digest_wired.sent == []


def test_digest_usage() -> None:
    assert digest_cli.main(["monthly"]) == 1
    assert digest_cli.main([]) == 1
