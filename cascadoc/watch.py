"""Filesystem watch loop that rebuilds changed source documents."""

from __future__ import annotations

import queue
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from . import patterns
from .converter import Converter
from .logging import get_logger
from .models import (
    EVENT_ADDED,
    EVENT_CHANGED,
    EVENT_REMOVED,
    BuildContext,
    WatchEvent,
)


class SourceEventHandler(FileSystemEventHandler):
    """Translates watchdog events on source documents into ``WatchEvent`` values."""

    def __init__(self, emit: Callable[[WatchEvent], None]) -> None:
        super().__init__()
        self._emit = emit

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle(EVENT_ADDED, event.src_path, event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle(EVENT_CHANGED, event.src_path, event.is_directory)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle(EVENT_REMOVED, event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle(EVENT_REMOVED, event.src_path, event.is_directory)
        self._handle(EVENT_ADDED, event.dest_path, event.is_directory)

    def _handle(self, kind: str, path: str | bytes, is_directory: bool) -> None:
        if is_directory:
            return
        text = path.decode() if isinstance(path, bytes) else path
        if patterns.is_source(Path(text).name):
            self._emit(WatchEvent(kind=kind, path=text))


class WatchLoop:
    """Batches source events and rebuilds changed or added documents in arrival order."""

    def __init__(
        self,
        context: BuildContext,
        converter: Converter,
        *,
        observer_factory: Callable[[], object] = Observer,
    ) -> None:
        self.context = context
        self.converter = converter
        self.logger = get_logger("watch")
        self._events: "queue.Queue[WatchEvent]" = queue.Queue()
        self._observer_factory = observer_factory
        self._observer: Optional[object] = None
        self._worker: Optional[threading.Thread] = None
        self._stopping = threading.Event()

    @property
    def root(self) -> Path:
        watch_path = self.context.options.watch_path
        if not watch_path:
            return self.context.working_root
        candidate = Path(watch_path)
        if not candidate.is_absolute():
            candidate = self.context.working_root / candidate
        return candidate

    def submit(self, event: WatchEvent) -> None:
        self._events.put(event)

    def handle_batch(self, events: Sequence[WatchEvent]) -> List[int]:
        """Process one batch sequentially; returns the status of each rebuild."""
        statuses: List[int] = []
        for event in events:
            identifier = self.context.identifier(event.path)
            if event.kind == EVENT_REMOVED:
                self.logger.info("Removed %s", identifier)
                continue
            self.logger.info("Rebuilding %s (%s)", identifier, event.kind)
            statuses.append(self.converter.build(identifier, {}, preload=True))
        return statuses

    def start(self) -> None:
        """Start the watchdog observer and the batching worker."""
        root = self.root
        observer = self._observer_factory()
        observer.schedule(SourceEventHandler(self.submit), str(root), recursive=True)  # type: ignore[attr-defined]
        observer.start()  # type: ignore[attr-defined]
        self._observer = observer
        self._stopping.clear()
        self._worker = threading.Thread(target=self._run, name="cascadoc-watch", daemon=True)
        self._worker.start()
        self.logger.info("Watching %s", root)

    def stop(self) -> None:
        self._stopping.set()
        if self._observer is not None:
            self._observer.stop()  # type: ignore[attr-defined]
            self._observer.join()  # type: ignore[attr-defined]
            self._observer = None
        if self._worker is not None:
            self._worker.join(timeout=self.context.options.latency + 1.0)
            self._worker = None

    def next_batch(self, timeout: float = 0.5) -> List[WatchEvent]:
        """Wait for one event, then gather whatever else arrives within the latency window."""
        try:
            first = self._events.get(timeout=timeout)
        except queue.Empty:
            return []
        batch = [first]
        deadline = time.monotonic() + self.context.options.latency
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                batch.append(self._events.get(timeout=remaining))
            except queue.Empty:
                break
        return batch

    def _run(self) -> None:
        while not self._stopping.is_set():
            batch = self.next_batch()
            if not batch:
                continue
            if self.context.options.settle > 0:
                time.sleep(self.context.options.settle)
            try:
                self.handle_batch(batch)
            except Exception:  # pragma: no cover - keeps the watcher alive
                self.logger.exception("Rebuild failed for batch of %d events", len(batch))


__all__ = ["SourceEventHandler", "WatchLoop"]
