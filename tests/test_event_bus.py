"""
Unit tests for the in-process event bus.

Covers subscription management, batched fan-out and the queued (non
recursive) handling of publishes made from inside a handler.
"""
import pytest

from autofi_agents.errors import DispatchLimitExceededError
from autofi_agents.swarm.event_bus import EventBus


class TestSubscriptions:
    """Test subscribe / unsubscribe / publish basics."""

    def test_publish_reaches_subscribers_in_order(self):
        bus = EventBus()
        received = []
        bus.subscribe("topic", lambda data: received.append(("first", data)))
        bus.subscribe("topic", lambda data: received.append(("second", data)))

        bus.publish("topic", 1)

        assert received == [("first", 1), ("second", 1)]

    def test_publish_without_subscribers_is_noop(self):
        bus = EventBus()
        bus.publish("nobody-listens", {"x": 1})
        assert bus.listener_count("nobody-listens") == 0

    def test_unsubscribe_removes_handler(self):
        bus = EventBus()
        received = []
        handler = received.append
        bus.subscribe("topic", handler)
        bus.unsubscribe("topic", handler)

        bus.publish("topic", "data")

        assert received == []
        assert bus.listener_count("topic") == 0

    def test_unsubscribe_unknown_handler_is_ignored(self):
        bus = EventBus()
        bus.unsubscribe("topic", print)
        bus.subscribe("topic", print)
        bus.unsubscribe("topic", len)
        assert bus.listener_count("topic") == 1

    def test_buses_are_independent(self):
        """No hidden global state: two buses never share subscribers."""
        first, second = EventBus(), EventBus()
        received = []
        first.subscribe("topic", received.append)

        second.publish("topic", "lost")

        assert received == []


class TestReentrantDispatch:
    """Test publishes made while a dispatch is in progress."""

    def test_nested_publish_is_delivered_after_current_handler(self):
        bus = EventBus()
        order = []

        def on_a(data):
            order.append("a-start")
            bus.publish("b", None)
            order.append("a-end")

        bus.subscribe("a", on_a)
        bus.subscribe("b", lambda data: order.append("b"))

        bus.publish("a", None)

        assert order == ["a-start", "a-end", "b"]

    def test_batch_defers_delivery_until_exit(self):
        bus = EventBus()
        received = []
        bus.subscribe("topic", received.append)

        with bus.batch():
            bus.publish("topic", 1)
            bus.publish("topic", 2)
            assert received == []

        assert received == [1, 2]

    def test_failed_batch_discards_its_events(self):
        bus = EventBus()
        received = []
        bus.subscribe("topic", received.append)

        with pytest.raises(ValueError):
            with bus.batch():
                bus.publish("topic", "never")
                raise ValueError("abort")

        bus.publish("topic", "after")
        assert received == ["after"]

    def test_direct_fan_out_is_not_bounded(self):
        bus = EventBus(max_cascade=5, max_listeners=100)
        received = []
        for _ in range(20):
            bus.subscribe("topic", received.append)

        bus.publish("topic", "x")

        assert len(received) == 20

    def test_follow_ups_are_bounded(self):
        bus = EventBus(max_cascade=5, max_listeners=100)
        received = []
        bus.subscribe("start", lambda data: bus.publish("echo", data))
        for _ in range(10):
            bus.subscribe("echo", received.append)

        with pytest.raises(DispatchLimitExceededError):
            bus.publish("start", "x")

        assert len(received) == 5

    def test_infinite_ping_pong_is_aborted(self):
        bus = EventBus(max_cascade=20)
        bus.subscribe("ping", lambda data: bus.publish("pong", data))
        bus.subscribe("pong", lambda data: bus.publish("ping", data))

        with pytest.raises(DispatchLimitExceededError) as exc_info:
            bus.publish("ping", None)

        assert exc_info.value.kind == "DISPATCH_LIMIT_EXCEEDED"

        # Bus is usable again afterwards
        received = []
        bus.subscribe("fresh", received.append)
        bus.publish("fresh", "ok")
        assert received == ["ok"]

    def test_handler_error_propagates_and_clears_queue(self):
        bus = EventBus()
        received = []

        def boom(data):
            bus.publish("later", "queued")
            raise RuntimeError("handler failed")

        bus.subscribe("start", boom)
        bus.subscribe("later", received.append)

        with pytest.raises(RuntimeError, match="handler failed"):
            bus.publish("start", None)

        bus.publish("other", None)
        assert received == []
