"""EventBus protocol for domain event fan-out.

The event bus decouples domain code from event consumers. Domain code
publishes events to the bus and subscribers handle them.

Usage:
    # Domain code publishes
    await event_bus.publish(UsageConsumedEvent(...))

    # Subscribers react (registered at startup)
    event_bus.subscribe("usage.*", audit_listener.handle)
"""

from datetime import datetime
from typing import Awaitable, Callable, List, Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class DomainEvent(Protocol):
    """Base protocol for all domain events.

    The bus only cares about these three fields for routing and metadata.
    Subscribers type-narrow to the concrete event class they expect.
    """

    @property
    def event_type(self) -> str:
        """Dot-separated event identifier (e.g., 'usage.consumed').

        Convention: {domain}.{action}, used for pattern matching.
        """
        ...

    @property
    def timestamp(self) -> datetime:
        """When the event occurred (UTC)."""
        ...

    @property
    def user_id(self) -> UUID:
        """User this event belongs to."""
        ...


# Type alias for event handlers (async callables that receive a DomainEvent)
EventHandler = Callable[[DomainEvent], Awaitable[None]]


@runtime_checkable
class EventSubscriber(Protocol):
    """A subscriber that declares its own patterns and handles matching events."""

    EVENT_PATTERNS: List[str]

    async def handle(self, event: DomainEvent) -> None:
        """Handle one event."""
        ...


@runtime_checkable
class EventBus(Protocol):
    """Protocol for publishing domain events to multiple subscribers.

    The bus matches events to subscribers by glob pattern on event_type.
    Failures in one subscriber don't affect others.
    """

    async def publish(self, event: DomainEvent) -> None:
        """Publish an event to all matching subscribers.

        Args:
            event: The domain event to publish.
        """
        ...

    def subscribe(self, event_pattern: str, handler: EventHandler) -> None:
        """Register a handler for events matching the pattern.

        Args:
            event_pattern: Glob pattern to match (e.g., 'usage.*', 'usage.consumed').
            handler: Async callable invoked when a matching event is published.
        """
        ...
