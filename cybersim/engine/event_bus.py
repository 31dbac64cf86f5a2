"""
Event bus for the cybersim warfare engine.

The event bus is the only mechanism by which tick snapshots leave the
simulation core. It provides a narrow, explicit boundary between the
engine and whatever renders or records its state.

The bus does not interpret snapshots. It does not copy them. It simply
delivers them to registered subscribers, once per tick.
"""

from collections.abc import Callable
from typing import Any

Subscriber = Callable[[Any], None]


class EventBus:
    """
    Simple publish-subscribe event bus.

    Subscribers are called synchronously, in the order they were
    registered. If a subscriber raises an exception, propagation stops
    and the error is surfaced to the caller.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._closed: bool = False

    def subscribe(self, handler: Subscriber) -> Callable[[], None]:
        """
        Register a new handler and return a callable that removes it again.
        """
        if self._closed:
            raise RuntimeError("Cannot subscribe to a closed event bus")

        self._subscribers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: Subscriber) -> bool:
        """
        Remove a handler. Returns False if it was not registered.
        """
        try:
            self._subscribers.remove(handler)
        except ValueError:
            return False
        return True

    def publish(self, event: Any) -> None:
        """
        Publish an event to all subscribers.
        """
        if self._closed:
            raise RuntimeError("Cannot publish to a closed event bus")

        # Copy so a handler may unsubscribe itself mid-delivery
        for handler in list(self._subscribers):
            handler(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Close the event bus.

        After closing, no further subscriptions or publications are
        permitted. Registered handlers are dropped.
        """
        self._subscribers.clear()
        self._closed = True
