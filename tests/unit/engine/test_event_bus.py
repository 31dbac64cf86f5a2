"""
Unit tests for cybersim/engine/event_bus.py
"""

import pytest

from cybersim.engine.event_bus import EventBus


class TestEventBus:
    """Test suite for the EventBus class."""

    def test_initialization(self):
        """Test that EventBus initializes with empty subscribers and not closed."""
        bus = EventBus()
        assert bus._subscribers == []
        assert bus._closed is False
        assert bus.subscriber_count == 0

    def test_subscribe_adds_handler(self):
        """Test that subscribe adds a handler to the subscribers list."""
        bus = EventBus()

        def handler1(_):
            pass

        def handler2(_):
            pass

        bus.subscribe(handler1)
        assert len(bus._subscribers) == 1
        assert bus._subscribers[0] is handler1

        bus.subscribe(handler2)
        assert len(bus._subscribers) == 2
        assert bus._subscribers[1] is handler2

    def test_subscribe_returns_unsubscriber(self):
        """Test that the callable returned by subscribe removes the handler."""
        bus = EventBus()
        received = []

        remove = bus.subscribe(received.append)
        bus.publish("first")
        remove()
        bus.publish("second")

        assert received == ["first"]
        assert bus.subscriber_count == 0

    def test_unsubscribe_unknown_handler(self):
        """Test that removing an unknown handler reports False."""
        bus = EventBus()
        assert bus.unsubscribe(lambda _: None) is False

    def test_handler_can_unsubscribe_itself_during_publish(self):
        """Test that a handler removing itself does not skip the next handler."""
        bus = EventBus()
        calls = []

        def once(event):
            calls.append(("once", event))
            bus.unsubscribe(once)

        def always(event):
            calls.append(("always", event))

        bus.subscribe(once)
        bus.subscribe(always)

        bus.publish(1)
        bus.publish(2)

        assert calls == [("once", 1), ("always", 1), ("always", 2)]

    def test_subscribe_raises_error_when_closed(self):
        """Test that subscribe raises RuntimeError when bus is closed."""
        bus = EventBus()
        bus.close()

        with pytest.raises(RuntimeError) as exc_info:
            bus.subscribe(lambda _: None)

        assert "Cannot subscribe to a closed event bus" in str(exc_info.value)

    def test_publish_calls_subscribers_in_order(self):
        """Test that publish calls subscribers in the order they were registered."""
        bus = EventBus()

        call_order = []

        def make_handler(name):
            def handler(_):
                call_order.append(name)
            return handler

        for name in ("A", "B", "C"):
            bus.subscribe(make_handler(name))

        bus.publish({"tick": 1})

        assert call_order == ["A", "B", "C"]

    def test_publish_with_no_subscribers(self):
        """Test that publish works correctly when there are no subscribers."""
        bus = EventBus()
        bus.publish({"tick": 1})

    def test_publish_raises_error_when_closed(self):
        """Test that publish raises RuntimeError when bus is closed."""
        bus = EventBus()
        bus.subscribe(lambda _: None)
        bus.close()

        with pytest.raises(RuntimeError) as exc_info:
            bus.publish({"tick": 1})

        assert "Cannot publish to a closed event bus" in str(exc_info.value)

    def test_close_drops_subscribers(self):
        """Test that close releases every registered handler."""
        bus = EventBus()
        bus.subscribe(lambda _: None)

        bus.close()

        assert bus.closed is True
        assert bus.subscriber_count == 0

    def test_publish_stops_on_first_exception(self):
        """Test that publish stops calling subscribers when one raises an exception."""
        bus = EventBus()

        call_log = []

        def handler1(_):
            call_log.append("handler1")
            raise RuntimeError("First handler failed")

        def handler2(_):
            call_log.append("handler2")

        bus.subscribe(handler1)
        bus.subscribe(handler2)

        with pytest.raises(RuntimeError):
            bus.publish({"tick": 1})

        assert call_log == ["handler1"]

    def test_close_is_idempotent(self):
        """Test that calling close multiple times doesn't cause issues."""
        bus = EventBus()

        bus.close()
        bus.close()
        assert bus._closed is True


def test_event_bus_lifecycle():
    """Test the complete lifecycle of an EventBus."""
    bus = EventBus()

    events_log = []

    bus.subscribe(events_log.append)
    bus.publish("tick-1")
    bus.publish("tick-2")

    bus.close()

    with pytest.raises(RuntimeError):
        bus.subscribe(events_log.append)
    with pytest.raises(RuntimeError):
        bus.publish("tick-3")

    assert events_log == ["tick-1", "tick-2"]
