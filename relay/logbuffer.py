"""Bounded in-memory log buffer backing the /logs endpoint."""

import logging
import threading
from collections import deque
from datetime import datetime, timezone

from pydantic import BaseModel


class LogEntry(BaseModel):
    timestamp: datetime
    level: str
    logger: str
    message: str


class LogBuffer:
    """Fixed-capacity ring buffer of log entries. Oldest entries are evicted first.

    Appends may come from the event loop and from worker threads, so every
    access goes through a lock. Readers get copies, never the underlying deque.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def last_activity(self) -> datetime | None:
        with self._lock:
            return self._entries[-1].timestamp if self._entries else None

    def append(self, level: str, message: str, logger: str = "relay") -> LogEntry:
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc),
            level=level,
            logger=logger,
            message=message,
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def snapshot(self, limit: int | None = None) -> list[LogEntry]:
        """Return up to ``limit`` most recent entries, oldest first."""
        with self._lock:
            entries = list(self._entries)
        if limit is not None:
            entries = entries[-limit:] if limit > 0 else []
        return entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class LogBufferHandler(logging.Handler):
    """logging.Handler that mirrors records into a LogBuffer."""

    def __init__(self, buffer: LogBuffer, level: int = logging.INFO):
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append(record.levelname, record.getMessage(), record.name)
        except Exception:
            self.handleError(record)


def configure_logging(level: str, buffer: LogBuffer) -> None:
    """Attach stream and buffer handlers to the ``relay`` logger tree."""
    root = logging.getLogger("relay")
    root.setLevel(level.upper())

    # Idempotent: reloads and repeated app construction must not stack handlers
    for handler in list(root.handlers):
        if getattr(handler, "_relay_managed", False):
            root.removeHandler(handler)

    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    buffered = LogBufferHandler(buffer)
    for handler in (stream, buffered):
        handler._relay_managed = True
        root.addHandler(handler)
