"""Queue-backed publish/subscribe channels.

Publishing never runs subscriber code: each event is put on every
subscriber's own queue and consumed from the subscriber's thread. That keeps
publishers free to publish while holding their internal locks.
"""

from __future__ import annotations

import queue
import threading
from typing import Generic, TypeVar

from pantilt.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Subscription(Generic[T]):
    """One consumer's view of a channel.

    With ``maxsize > 0`` the queue is bounded and the oldest event is dropped
    to make room for a new one.
    """

    def __init__(self, channel: EventChannel[T], maxsize: int = 0) -> None:
        self._channel = channel
        self._queue: queue.Queue[T] = queue.Queue(maxsize)
        self._lock = threading.Lock()
        self._dropped = 0
        self._closed = False

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, timeout: float | None = None) -> T:
        """Wait for the next event.

        Raises:
            queue.Empty: If nothing arrives within *timeout*.
        """
        return self._queue.get(timeout=timeout)

    def get_nowait(self) -> T:
        return self._queue.get_nowait()

    def drain(self) -> list[T]:
        """Return every queued event without blocking."""
        events: list[T] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def close(self) -> None:
        self._closed = True
        self._channel.unsubscribe(self)

    def _offer(self, event: T) -> None:
        # Publishers on other threads share this queue; the lock keeps the
        # drop-oldest step and the drop count consistent.
        with self._lock:
            while True:
                try:
                    self._queue.put_nowait(event)
                    return
                except queue.Full:
                    try:
                        self._queue.get_nowait()
                    except queue.Empty:
                        continue
                    self._dropped += 1
                    if self._dropped == 1 or self._dropped % 100 == 0:
                        logger.warning(
                            "subscription_event_dropped",
                            channel=self._channel.name,
                            dropped=self._dropped,
                        )

    def __enter__(self) -> Subscription[T]:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class EventChannel(Generic[T]):
    """A named stream of events of one concern (state, telemetry, errors).

    ``maxsize`` is the default queue bound for new subscriptions; 0 means
    unbounded.
    """

    def __init__(self, name: str, maxsize: int = 0) -> None:
        if maxsize < 0:
            raise ValueError(f"maxsize must not be negative, got {maxsize}")
        self._name = name
        self._maxsize = maxsize
        self._lock = threading.Lock()
        self._subscribers: list[Subscription[T]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, maxsize: int | None = None) -> Subscription[T]:
        """Start receiving events published from now on.

        *maxsize* overrides the channel default; 0 makes the queue unbounded.
        """
        bound = self._maxsize if maxsize is None else maxsize
        subscription: Subscription[T] = Subscription(self, maxsize=bound)
        with self._lock:
            self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)

    def publish(self, event: T) -> int:
        """Deliver *event* to every current subscriber; returns their count."""
        with self._lock:
            subscribers = list(self._subscribers)
        for subscription in subscribers:
            subscription._offer(event)
        return len(subscribers)
