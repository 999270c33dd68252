from __future__ import annotations

import logging
import os
from threading import Event, Lock
from typing import Any

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .errors import NotAFile, SignalDeliveryFailed
from .events import log_event

CHANGE_EVENTS = {EVENT_TYPE_MODIFIED, EVENT_TYPE_CREATED, EVENT_TYPE_MOVED, EVENT_TYPE_DELETED}

logger = logging.getLogger(__name__)


def _norm(path: Any) -> str:
    if isinstance(path, bytes):
        path = os.fsdecode(path)
    return os.path.realpath(path)


def _container_label(target: Any) -> str | None:
    name = getattr(target, "name", None)
    if name:
        return str(name)
    cid = getattr(target, "id", None)
    return str(cid)[:12] if cid else None


def deliver_signal(target: Any, signal: str) -> None:
    try:
        target.kill(signal=signal)
    except Exception as e:
        raise SignalDeliveryFailed(f"Failed to send {signal}: {type(e).__name__}: {e}") from e


class SignalOnChange(FileSystemEventHandler):
    """Sends one signal to the target per change event on a single file.

    The parent directory is observed, so the file may be replaced or
    recreated and still be followed.
    """

    def __init__(self, target: Any, path: str, signal: str = "SIGHUP"):
        super().__init__()
        self.target = target
        self.path = _norm(path)
        self.signal = signal
        self.deliveries = 0
        self.failures = 0

    def _matches(self, event: FileSystemEvent) -> bool:
        if event.is_directory or event.event_type not in CHANGE_EVENTS:
            return False
        if _norm(event.src_path) == self.path:
            return True
        dest = getattr(event, "dest_path", None)
        return bool(dest) and _norm(dest) == self.path

    def on_any_event(self, event: FileSystemEvent) -> None:
        # Runs on the observer's dispatch thread: an exception here would end the watch.
        try:
            self._handle(event)
        except Exception:
            logger.exception("Unexpected error while handling %s event for %s", event.event_type, self.path)

    def _handle(self, event: FileSystemEvent) -> None:
        if not self._matches(event):
            return
        container = _container_label(self.target)
        log_event(
            "INFO",
            f"FS event: {event.event_type}, file: {self.path}; signalling {self.signal}.",
            container=container,
            log=logger,
        )
        self.deliveries += 1
        try:
            deliver_signal(self.target, self.signal)
        except SignalDeliveryFailed as e:
            self.failures += 1
            log_event("ERROR", str(e), container=container, log=logger)


class WatchSession:
    """A running observer for one file. Close it to release the watch."""

    def __init__(self, handler: SignalOnChange, observer: Any):
        self.handler = handler
        self._observer = observer
        self._lock = Lock()
        self._closed = Event()

    @property
    def path(self) -> str:
        return self.handler.path

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        with self._lock:
            if self._closed.is_set():
                return
            self._closed.set()
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the session is closed. Returns True once it is."""
        return self._closed.wait(timeout)

    def __enter__(self) -> "WatchSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def signal_on_file_change(target: Any, path: str, signal: str = "SIGHUP") -> WatchSession:
    """Watch `path` and send `signal` to `target` on every change."""
    if not os.path.isfile(path):
        raise NotAFile(f"File to watch {path} was not found or is not a file")

    handler = SignalOnChange(target, path, signal=signal)
    observer = Observer()
    observer.schedule(handler, os.path.dirname(handler.path), recursive=False)
    observer.daemon = True
    observer.start()
    log_event(
        "INFO",
        f"Watching {handler.path} for changes ({signal} on change).",
        container=_container_label(target),
        log=logger,
    )
    return WatchSession(handler, observer)
