"""Bounded cache of received messages and errors for display."""

from __future__ import annotations

import threading
from collections import deque

ERROR_PREFIX = "ERROR: "


class MessageLog:
    """Thread-safe ring of the most recent log entries, oldest first."""

    def __init__(self, maxlen: int = 500) -> None:
        if maxlen < 1:
            raise ValueError(f"maxlen must be positive, got {maxlen}")
        self._lock = threading.Lock()
        self._entries: deque[str] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._entries.maxlen or 0

    def append(self, message: str) -> None:
        with self._lock:
            self._entries.append(message)

    def append_error(self, message: str) -> None:
        self.append(f"{ERROR_PREFIX}{message}")

    def entries(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
