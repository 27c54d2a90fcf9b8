"""Fake event bus for testing."""

import fnmatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vatcounsel.core.protocols.event_bus import DomainEvent, EventHandler


def _type_of(event: "DomainEvent") -> str:
    return str(getattr(event.event_type, "value", event.event_type))


class FakeEventBus:
    """Test implementation of EventBus that records published events.

    Usage:
        bus = FakeEventBus()
        await service.consume_usage(db, user_id)
        event = bus.assert_published("usage.consumed")
        assert event.used == 1
    """

    def __init__(self, call_subscribers: bool = False, should_raise: Exception = None) -> None:
        """Initialize the fake.

        Args:
            call_subscribers: Also invoke registered subscribers.
            should_raise: Raise this from every publish after recording the event.
        """
        self.events: list["DomainEvent"] = []
        self._subscribers: list[tuple[str, "EventHandler"]] = []
        self._call_subscribers = call_subscribers
        self._should_raise = should_raise

    def subscribe(self, event_pattern: str, handler: "EventHandler") -> None:
        """Register a handler (only called if call_subscribers=True)."""
        self._subscribers.append((event_pattern, handler))

    async def publish(self, event: "DomainEvent") -> None:
        """Record the event (and optionally call subscribers)."""
        self.events.append(event)
        if self._should_raise:
            raise self._should_raise
        if self._call_subscribers:
            for pattern, handler in self._subscribers:
                if fnmatch.fnmatch(_type_of(event), pattern):
                    await handler(event)

    # Test helpers

    def get_events(self, event_type: str) -> list["DomainEvent"]:
        """All recorded events of the given type."""
        return [e for e in self.events if _type_of(e) == event_type]

    def has_event(self, event_type: str) -> bool:
        """Whether an event of the given type was published."""
        return bool(self.get_events(event_type))

    def assert_published(self, event_type: str) -> "DomainEvent":
        """Assert that an event was published and return the first one."""
        events = self.get_events(event_type)
        if not events:
            published = [_type_of(e) for e in self.events]
            raise AssertionError(
                f"Expected event '{event_type}' was not published. Published events: {published}"
            )
        return events[0]

    def assert_not_published(self, event_type: str) -> None:
        """Assert that no event of the given type was published."""
        if self.has_event(event_type):
            raise AssertionError(f"Event '{event_type}' was published but should not have been")
