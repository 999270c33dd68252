from __future__ import annotations

import logging
import sqlite3
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .settings import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(process)d %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Send all records to stderr so they end up in the container log.

    Existing root handlers are replaced.
    """
    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return logger


def _resolve_db_path(db_path: str) -> str:
    """Journal file for the configured path.

    Docker turns a bind mount of a missing file into a directory, so a
    directory path gets `meshreload.db` inside it.
    """
    path = Path(db_path).absolute()
    if path.is_dir():
        path = path / "meshreload.db"
    path.parent.mkdir(parents=True, exist_ok=True)
    return str(path)


def journal_enabled() -> bool:
    return bool(settings.events_db)


def connect() -> sqlite3.Connection:
    if not settings.events_db:
        raise RuntimeError("Event journal is disabled (MESHRELOAD_EVENTS_DB is not set).")
    conn = sqlite3.connect(_resolve_db_path(settings.events_db), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db() -> None:
    """Create the events table if it does not exist."""
    if not journal_enabled():
        return
    with connect() as conn:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS events (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              ts TEXT NOT NULL,
              level TEXT NOT NULL,
              container TEXT,
              message TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_ts ON events(ts);
            """
        )


def log_event(
    level: str,
    message: str,
    container: str | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Log a message and, when the journal is enabled, record it there too.

    Journal failures are logged and otherwise ignored.
    """
    level = level.upper()
    text = f"[{container}] {message}" if container else message
    (log or logger).log(_LEVELS.get(level, logging.INFO), text)

    if not journal_enabled():
        return
    try:
        with connect() as conn:
            conn.execute(
                "INSERT INTO events (ts, level, container, message) VALUES (?, ?, ?, ?)",
                (utc_now(), level, container, message),
            )
    except sqlite3.Error:
        logger.exception("Could not write event to the journal")


def latest_events(limit: int = 100) -> list[dict[str, Any]]:
    if not journal_enabled():
        return []
    with connect() as conn:
        rows = conn.execute("SELECT * FROM events ORDER BY id DESC LIMIT ?", (limit,)).fetchall()
        return [dict(r) for r in rows]
