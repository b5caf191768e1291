# src/todo_tracker/sync/daemon.py

"""
Two-way sync between the backend and a local checkbox document.

One loop, one event at a time:
- directory watcher (watchdog) -> local edit -> push changed fields, then re-export
- periodic tick -> fetch pending tasks, rewrite the file only if the rendering changed

A slow backend call delays the next event; it never overlaps with it.
Backend errors skip the affected task or poll; file errors abort the current pass only.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import time
from collections.abc import Callable
from datetime import date
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..core.ports import TaskRepo
from ..tasks.task_store import BackendError
from .document import diff_line, parse_document, render_document
from .formats import DocumentFormat

logger = logging.getLogger(__name__)

MODIFIED = "modified"


class _QueueingHandler(FileSystemEventHandler):
    """Forward raw watchdog events to the daemon loop (observer thread -> loop thread)."""

    def __init__(self, events: queue.Queue[FileSystemEvent]) -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._events.put(event)


class SyncDaemon:
    def __init__(
        self,
        store: TaskRepo,
        *,
        owner_id: str,
        path: str | Path,
        fmt: DocumentFormat,
        poll_interval: float = 30.0,
        debounce: float = 2.0,
        settle: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.owner_id = owner_id
        self.path = Path(path)
        self.fmt = fmt
        self.poll_interval = float(poll_interval)
        self.debounce = float(debounce)
        self.settle = float(settle)
        self._clock = clock
        self._sleep = sleep
        self._today = today

        self.last_local_edit: float | None = None
        self.last_remote_poll: float | None = None

    # ---- remote -> local ----

    def _render_remote(self) -> tuple[str, int] | None:
        try:
            tasks = self.store.list_pending(self.owner_id)
        except BackendError as e:
            logger.error("Failed to fetch tasks: %s", e)
            return None
        return render_document(tasks, self.fmt, self._today()), len(tasks)

    def _write(self, text: str) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)
            return False
        return True

    def export(self) -> bool:
        """Fetch pending tasks and overwrite the document unconditionally."""
        rendered = self._render_remote()
        if rendered is None:
            return False
        text, count = rendered
        if not self._write(text):
            return False
        logger.info("Exported %d tasks to %s", count, self.path)
        return True

    def poll_remote(self) -> bool:
        """Rewrite the document only if the fresh rendering differs from what is on disk."""
        rendered = self._render_remote()
        if rendered is None:
            return False
        text, count = rendered

        try:
            current = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Failed to read %s: %s", self.path, e)
            return False

        if current == text:
            logger.debug("Remote poll: no changes")
            return False

        logger.info("Remote changes detected, updating file...")
        if not self._write(text):
            return False
        self.last_remote_poll = self._clock()
        logger.info("File updated with %d tasks", count)
        return True

    # ---- local -> remote ----

    def sync_from_document(self) -> int:
        """
        Push document edits to the backend, then re-export.

        Only existing tasks are updated (never created or deleted) and only changed
        fields are sent. Returns the number of update requests issued.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Failed to read %s: %s", self.path, e)
            return 0

        attempted = 0
        for line in parse_document(text, self.fmt):
            try:
                task = self.store.get_task(line.task_id)
            except BackendError as e:
                logger.debug("Skipping id:%s (%s)", line.task_id, e)
                continue

            updates = diff_line(line, task)
            if not updates:
                continue

            attempted += 1
            try:
                self.store.update_task(task.id, updates)
            except BackendError as e:
                logger.error("Failed to update task %s: %s", task.id, e)
                continue
            logger.info("Task %s updated (%s)", task.id, ", ".join(sorted(updates)))

        # Normalize: fills in what the encoding cannot express and drops completed tasks.
        self.export()
        return attempted

    # ---- events ----

    def on_file_event(self, event_type: str, src_path: str | bytes) -> bool:
        """Handle one watcher event. Returns True if it triggered a sync pass."""
        if os.path.basename(os.fsdecode(src_path)) != self.path.name:
            return False
        if event_type != MODIFIED:
            return False

        now = self._clock()
        if self.last_local_edit is not None and now - self.last_local_edit < self.debounce:
            return False
        self.last_local_edit = now

        logger.info("File changed, syncing...")
        # Let the editor finish flushing the write.
        self._sleep(self.settle)
        self.sync_from_document()
        return True

    def on_tick(self) -> bool:
        """Periodic poll. Skipped while a local edit is more recent than one poll interval."""
        now = self._clock()
        if self.last_local_edit is not None and now - self.last_local_edit < self.poll_interval:
            logger.debug("Remote poll skipped (recent local edit)")
            return False
        return self.poll_remote()

    def _step(self, event: FileSystemEvent | None, next_poll: float) -> float:
        """One loop pass: handle a watcher event, then poll if due. Returns the next poll time."""
        try:
            if event is not None:
                self.on_file_event(event.event_type, event.src_path)
            if self._clock() >= next_poll:
                next_poll = self._clock() + self.poll_interval
                self.on_tick()
        except Exception:
            logger.exception("Sync pass crashed; continuing with next event")
        return next_poll

    def run(self, stop_event: threading.Event) -> None:
        """Export once, then serve watcher events and poll ticks until stop_event is set."""
        # The watcher needs the directory even when the first export fails.
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot create %s: %s", self.path.parent, e)
            return
        self.export()

        events: queue.Queue[FileSystemEvent] = queue.Queue()
        observer = Observer()
        # Watch the directory; editors often replace the file instead of writing in place.
        observer.schedule(_QueueingHandler(events), str(self.path.parent), recursive=False)
        observer.start()
        logger.info("Watching %s for changes (poll every %.0fs)", self.path, self.poll_interval)

        next_poll = self._clock() + self.poll_interval
        try:
            while not stop_event.is_set():
                wait_s = min(1.0, max(0.0, next_poll - self._clock()))
                try:
                    event = events.get(timeout=wait_s)
                except queue.Empty:
                    event = None
                next_poll = self._step(event, next_poll)
        finally:
            observer.stop()
            observer.join(timeout=5.0)
            logger.info("Watcher stopped.")
