"""Tests for the event channel."""

import threading
import time

import pytest

from sysdash.events import ChannelClosed, EventChannel, KeyInput, MouseAction, MouseInput, Update


class TestEventChannel:
    """Tests for EventChannel."""

    def test_fifo_order(self):
        channel = EventChannel()
        sent = [KeyInput("a"), MouseInput(MouseAction.WHEEL_UP), KeyInput("b")]
        for event in sent:
            channel.send(event)

        assert [channel.receive(timeout=0.1) for _ in sent] == sent

    def test_receive_timeout_returns_none(self):
        channel = EventChannel()
        start = time.monotonic()

        assert channel.receive(timeout=0.05) is None
        assert time.monotonic() - start >= 0.04

    def test_send_after_close_raises(self):
        channel = EventChannel()
        channel.close()

        assert channel.closed
        with pytest.raises(ChannelClosed):
            channel.send(KeyInput("q"))

    def test_close_drains_queued_events_first(self):
        """Test events sent before close are still delivered."""
        channel = EventChannel()
        channel.send(KeyInput("x"))
        channel.close()

        assert channel.receive(timeout=0.1) == KeyInput("x")
        with pytest.raises(ChannelClosed):
            channel.receive(timeout=0.1)
        # Stays closed for later receives
        with pytest.raises(ChannelClosed):
            channel.receive(timeout=0.1)

    def test_close_is_idempotent(self):
        channel = EventChannel()
        channel.close()
        channel.close()

        with pytest.raises(ChannelClosed):
            channel.receive(timeout=0.1)

    def test_close_wakes_blocked_receiver(self):
        channel = EventChannel()
        outcome = []

        def consume():
            try:
                channel.receive(timeout=5.0)
            except ChannelClosed:
                outcome.append("closed")

        consumer = threading.Thread(target=consume)
        consumer.start()
        time.sleep(0.05)
        channel.close()
        consumer.join(timeout=1.0)

        assert outcome == ["closed"]

    def test_multiple_producers_keep_per_producer_order(self, make_snapshot):
        channel = EventChannel()

        def produce(tag):
            for i in range(100):
                channel.send(KeyInput(f"{tag}{i}"))

        producers = [threading.Thread(target=produce, args=(tag,)) for tag in "ab"]
        for p in producers:
            p.start()
        for p in producers:
            p.join()
        channel.send(Update(make_snapshot()))

        received = [channel.receive(timeout=0.1) for _ in range(201)]
        for tag in "ab":
            keys = [e.key for e in received if isinstance(e, KeyInput) and e.key.startswith(tag)]
            assert keys == [f"{tag}{i}" for i in range(100)]
        assert isinstance(received[-1], Update)
