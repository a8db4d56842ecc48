"""Unit tests for event channels and the message log."""

from __future__ import annotations

import queue
import threading

import pytest

from pantilt.core.events import EventChannel
from pantilt.core.message_log import MessageLog


class TestEventChannel:
    def test_publish_reaches_every_subscriber(self):
        channel: EventChannel[int] = EventChannel("numbers")
        a = channel.subscribe()
        b = channel.subscribe()

        assert channel.publish(1) == 2

        assert a.get(timeout=0.1) == 1
        assert b.get(timeout=0.1) == 1

    def test_order_preserved(self):
        channel: EventChannel[int] = EventChannel("numbers")
        sub = channel.subscribe()
        for i in range(10):
            channel.publish(i)
        assert sub.drain() == list(range(10))

    def test_late_subscriber_misses_earlier_events(self):
        channel: EventChannel[str] = EventChannel("text")
        channel.publish("early")
        sub = channel.subscribe()
        with pytest.raises(queue.Empty):
            sub.get_nowait()

    def test_close_unsubscribes(self):
        channel: EventChannel[int] = EventChannel("numbers")
        with channel.subscribe() as sub:
            assert channel.subscriber_count == 1
        assert sub.closed
        assert channel.subscriber_count == 0
        assert channel.publish(1) == 0

    def test_bounded_subscription_drops_oldest(self):
        channel: EventChannel[int] = EventChannel("numbers")
        sub = channel.subscribe(maxsize=2)
        for i in range(5):
            channel.publish(i)
        assert sub.drain() == [3, 4]
        assert sub.dropped == 3

    def test_channel_default_bound_applies(self):
        channel: EventChannel[int] = EventChannel("numbers", maxsize=3)
        sub = channel.subscribe()
        for i in range(10):
            channel.publish(i)
        assert sub.maxsize == 3
        assert sub.drain() == [7, 8, 9]
        assert sub.dropped == 7

    def test_explicit_zero_is_unbounded(self):
        channel: EventChannel[int] = EventChannel("numbers", maxsize=3)
        sub = channel.subscribe(maxsize=0)
        for i in range(10):
            channel.publish(i)
        assert sub.drain() == list(range(10))
        assert sub.dropped == 0

    def test_rejects_negative_bound(self):
        with pytest.raises(ValueError):
            EventChannel("numbers", maxsize=-1)

    def test_drop_count_exact_under_concurrent_publishers(self):
        channel: EventChannel[int] = EventChannel("numbers", maxsize=5)
        sub = channel.subscribe()
        barrier = threading.Barrier(4)

        def publish_many():
            barrier.wait()
            for i in range(250):
                channel.publish(i)

        threads = [threading.Thread(target=publish_many) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        kept = sub.drain()
        assert len(kept) == 5
        assert sub.dropped + len(kept) == 1000

    def test_get_timeout(self):
        sub = EventChannel("empty").subscribe()
        with pytest.raises(queue.Empty):
            sub.get(timeout=0.01)


class TestMessageLog:
    def test_entries_oldest_first(self):
        log = MessageLog()
        log.append("one")
        log.append_error("Not connected.")
        assert log.entries() == ["one", "ERROR: Not connected."]
        assert len(log) == 2

    def test_bounded(self):
        log = MessageLog(maxlen=3)
        for i in range(5):
            log.append(str(i))
        assert log.entries() == ["2", "3", "4"]
        assert log.maxlen == 3

    def test_clear(self):
        log = MessageLog()
        log.append("x")
        log.clear()
        assert log.entries() == []

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            MessageLog(maxlen=0)
