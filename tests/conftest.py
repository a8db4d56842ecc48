"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import queue
import threading
import time

import pytest

from pantilt.config import SessionConfig
from pantilt.core.session import SessionManager
from pantilt.exceptions import TransportError
from pantilt.transport.base import Transport

_EOF = object()


class FakeTransport(Transport):
    """In-memory transport that records writes and returns queued lines."""

    def __init__(self, name: str = "fake"):
        self._name = name
        self._lines: queue.Queue = queue.Queue()
        self._closed = threading.Event()
        self.writes: list[bytes] = []
        self.close_calls = 0
        self.write_error: Exception | None = None
        self.close_error: Exception | None = None
        self.responder = None
        self.write_delay = 0.0

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_open(self) -> bool:
        return not self._closed.is_set()

    def feed(self, line: str | bytes) -> None:
        if isinstance(line, str):
            line = line.encode("utf-8")
        self._lines.put(line)

    def hang_up(self) -> None:
        """Simulate the remote closing the stream."""
        self._lines.put(_EOF)

    def fail_read(self, exc: Exception) -> None:
        self._lines.put(exc)

    def write(self, data: bytes) -> None:
        if self.write_error is not None:
            raise self.write_error
        if self._closed.is_set():
            raise TransportError(f"{self._name} is closed")
        if self.write_delay:
            time.sleep(self.write_delay)
        self.writes.append(data)
        if self.responder is not None:
            for reply in self.responder(data):
                self.feed(reply)

    def readline(self) -> bytes:
        if self._closed.is_set():
            return b""
        item = self._lines.get()
        if item is _EOF:
            self._lines.put(_EOF)
            return b""
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.close_calls += 1
        self._closed.set()
        self._lines.put(_EOF)
        if self.close_error is not None:
            raise self.close_error


class FakeConnector:
    """Connector that hands out FakeTransports or raises a canned error."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.opened: list[str] = []
        self.transports: list[FakeTransport] = []
        self.prepared: list[FakeTransport] = []

    @property
    def last(self) -> FakeTransport:
        return self.transports[-1]

    def open(self, selector: str) -> FakeTransport:
        self.opened.append(selector)
        if self.error is not None:
            raise self.error
        transport = self.prepared.pop(0) if self.prepared else FakeTransport(selector)
        self.transports.append(transport)
        return transport


@pytest.fixture
def fake_transport_cls():
    return FakeTransport


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(read_poll_interval=0.02, teardown_timeout=1.0)


@pytest.fixture
def manager(connector, session_config):
    mgr = SessionManager(connector=connector, config=session_config)
    yield mgr
    mgr.disconnect()


@pytest.fixture
def wait_until():
    """Poll *predicate* until it is true or *timeout* elapses."""

    def _wait(predicate, timeout: float = 2.0, interval: float = 0.005) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait
