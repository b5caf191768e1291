# tests/test_sync_daemon.py

from __future__ import annotations

import threading
from pathlib import Path

import pytest
from watchdog.events import FileModifiedEvent

from todo_tracker.sync.daemon import SyncDaemon
from todo_tracker.sync.formats import CommentFormat, InlineFormat
from todo_tracker.tasks.task_models import TaskStatus

from .conftest import TODAY
from .fakes import FakeTaskRepo, ManualClock, make_task


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def doc_path(tmp_path: Path) -> Path:
    return tmp_path / "notes" / "todo.md"


def _daemon(repo: FakeTaskRepo, path: Path, clock: ManualClock, fmt=None) -> SyncDaemon:
    return SyncDaemon(
        repo,
        owner_id="cli",
        path=path,
        fmt=fmt or InlineFormat(),
        poll_interval=30.0,
        debounce=2.0,
        settle=0.5,
        clock=clock,
        sleep=clock.sleep,
        today=lambda: TODAY,
    )


def test_export_creates_directory_and_writes_sections(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    assert daemon.export() is True

    text = doc_path.read_text("utf-8")
    assert "## Overdue\n- [ ] Old invoice — P0 — id:1 — due:2026-01-30\n" in text
    assert "## Today\n- [ ] Buy milk — P1 — id:5 — due:2026-02-02\n" in text
    assert "## Upcoming\n- [ ] Plan trip — P3 — id:7 — due:2026-02-10\n" in text
    assert "id:9" not in text


def test_checkbox_toggle_pushes_status_only_then_reexports(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()

    text = doc_path.read_text("utf-8")
    doc_path.write_text(text.replace("- [ ] Buy milk", "- [x] Buy milk"), "utf-8")

    attempted = daemon.sync_from_document()

    assert attempted == 1
    assert repo.updates == [(5, {"status": "Done"})]
    assert repo.tasks[5].status == TaskStatus.DONE
    # Completed task drops out of the re-exported document.
    assert "Buy milk" not in doc_path.read_text("utf-8")


def test_field_edits_are_pushed_with_inline_format(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()
    text = doc_path.read_text("utf-8")
    doc_path.write_text(
        text.replace("Plan trip — P3 — id:7 — due:2026-02-10", "Plan road trip — P2 — id:7 — due:2026-02-12"),
        "utf-8",
    )

    daemon.sync_from_document()

    assert repo.updates == [(7, {"title": "Plan road trip", "priority": "P2", "due_date": "2026-02-12"})]


def test_comment_format_only_syncs_checkbox(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock, fmt=CommentFormat())
    doc_path.parent.mkdir(parents=True)
    doc_path.write_text(
        "- [ ] [P0] Renamed here — due 2030-01-01 <!-- id:7 -->\n- [x] [P1] Buy milk <!-- id:5 -->\n",
        "utf-8",
    )

    daemon.sync_from_document()

    assert repo.updates == [(5, {"status": "Done"})]


def test_n_good_lines_m_bad_lines_and_unknown_ids(repo, doc_path, clock) -> None:
    doc_path.parent.mkdir(parents=True)
    doc_path.write_text(
        "\n".join(
            [
                "- [x] Old invoice — P0 — id:1 — due:2026-01-30",
                "- [x] Buy milk — P1 — id:5 — due:2026-02-02",
                "- [x] Plan trip — P3 — id:7 — due:2026-02-10",
                "- [x] Ghost — P1 — id:404 — due:2026-02-02",
                "- [x] no id here",
                "- [x Buy milk — P1 — id:5 — due:2026-02-02",
            ]
        ),
        "utf-8",
    )
    daemon = _daemon(repo, doc_path, clock)

    attempted = daemon.sync_from_document()

    assert attempted == 3
    assert sorted(task_id for task_id, _ in repo.updates) == [1, 5, 7]


def test_one_failed_update_does_not_abort_the_pass(repo, doc_path, clock) -> None:
    repo.fail_update = {1}
    repo.fail_get = {7}
    doc_path.parent.mkdir(parents=True)
    doc_path.write_text(
        "- [x] Old invoice — P0 — id:1 — due:2026-01-30\n"
        "- [x] Plan trip — P3 — id:7 — due:2026-02-10\n"
        "- [x] Buy milk — P1 — id:5 — due:2026-02-02\n",
        "utf-8",
    )
    daemon = _daemon(repo, doc_path, clock)

    daemon.sync_from_document()

    assert repo.tasks[5].status == TaskStatus.DONE
    assert repo.tasks[1].status == TaskStatus.TODO


def test_missing_file_aborts_pass_without_raising(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    assert daemon.sync_from_document() == 0
    assert repo.updates == []


def test_event_filtering(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()

    assert daemon.on_file_event("modified", str(doc_path.parent / "other.md")) is False
    assert daemon.on_file_event("created", str(doc_path)) is False
    assert daemon.on_file_event("modified", str(doc_path)) is True
    assert clock.sleeps == [0.5]


def test_debounce_drops_events_within_two_seconds(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()

    assert daemon.on_file_event("modified", str(doc_path)) is True
    clock.advance(1.0)  # 1.5s after the accepted event (settle sleep included)
    assert daemon.on_file_event("modified", str(doc_path)) is False
    clock.advance(0.6)
    assert daemon.on_file_event("modified", str(doc_path)) is True


def test_poll_writes_only_when_rendering_changed(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()
    before = doc_path.stat().st_mtime_ns

    assert daemon.poll_remote() is False
    assert doc_path.stat().st_mtime_ns == before

    repo.tasks[7] = make_task(7, "Plan trip", due="2026-02-10", priority="P0")
    assert daemon.poll_remote() is True
    assert "- [ ] Plan trip — P0 — id:7" in doc_path.read_text("utf-8")


def test_tick_skipped_within_poll_interval_of_local_edit(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()
    daemon.on_file_event("modified", str(doc_path))
    calls = repo.list_calls

    clock.advance(10)
    assert daemon.on_tick() is False
    assert repo.list_calls == calls

    clock.advance(30)
    daemon.on_tick()
    assert repo.list_calls == calls + 1


def test_backend_failure_during_poll_is_reported_not_raised(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()
    repo.fail_list = True

    assert daemon.on_tick() is False
    assert daemon.export() is False


def test_run_exports_and_stops(repo, doc_path, clock) -> None:
    doc_path.parent.mkdir(parents=True)
    daemon = _daemon(repo, doc_path, clock)
    stop = threading.Event()
    stop.set()

    daemon.run(stop)

    assert "Buy milk" in doc_path.read_text("utf-8")


def test_run_with_backend_down_and_missing_directory(repo, doc_path, clock) -> None:
    repo.fail_list = True
    daemon = _daemon(repo, doc_path, clock)
    stop = threading.Event()
    stop.set()

    daemon.run(stop)

    assert doc_path.parent.is_dir()
    assert not doc_path.exists()


def test_loop_step_routes_watcher_event_to_sync(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()
    text = doc_path.read_text("utf-8")
    doc_path.write_text(text.replace("- [ ] Buy milk", "- [x] Buy milk"), "utf-8")
    next_poll = clock() + 30

    assert daemon._step(FileModifiedEvent(str(doc_path)), next_poll) == next_poll
    assert repo.updates == [(5, {"status": "Done"})]


def test_loop_step_polls_once_interval_elapses(repo, doc_path, clock) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()
    calls = repo.list_calls
    next_poll = clock() + 30

    assert daemon._step(None, next_poll) == next_poll
    assert repo.list_calls == calls

    clock.advance(30)
    assert daemon._step(None, next_poll) == clock() + 30
    assert repo.list_calls == calls + 1


def test_loop_step_survives_a_crashing_pass(repo, doc_path, clock, monkeypatch) -> None:
    daemon = _daemon(repo, doc_path, clock)
    daemon.export()

    def _boom(event_type, src_path):
        raise RuntimeError("editor exploded")

    monkeypatch.setattr(daemon, "on_file_event", _boom)
    next_poll = daemon._step(FileModifiedEvent(str(doc_path)), clock() + 30)

    calls = repo.list_calls
    clock.advance(30)
    daemon._step(None, next_poll)
    assert repo.list_calls == calls + 1
