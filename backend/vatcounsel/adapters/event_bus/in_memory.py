"""In-process event bus.

Fans events out to subscribers in the publishing task. Subscriber failures
are logged and never reach the publisher.
"""

import asyncio
import fnmatch
from typing import TYPE_CHECKING

from vatcounsel.core.logging import logger

if TYPE_CHECKING:
    from vatcounsel.core.protocols.event_bus import DomainEvent, EventHandler

bus_logger = logger.with_prefix("EventBus: ")


class InMemoryEventBus:
    """In-memory event bus with glob-pattern subscriptions.

    Implements the EventBus protocol.

    Usage:
        bus = InMemoryEventBus()
        bus.subscribe("usage.*", audit_listener.handle)
        await bus.publish(UsageConsumedEvent(...))
    """

    def __init__(self) -> None:
        """Initialize with no subscribers."""
        self._subscribers: list[tuple[str, "EventHandler"]] = []

    def subscribe(self, event_pattern: str, handler: "EventHandler") -> None:
        """Register ``handler`` for event types matching ``event_pattern``."""
        self._subscribers.append((event_pattern, handler))
        bus_logger.debug(f"subscribed handler to '{event_pattern}'")

    async def publish(self, event: "DomainEvent") -> None:
        """Deliver ``event`` to every matching subscriber concurrently."""
        event_type = str(getattr(event.event_type, "value", event.event_type))
        handlers = [
            handler
            for pattern, handler in self._subscribers
            if fnmatch.fnmatch(event_type, pattern)
        ]
        if not handlers:
            bus_logger.debug(f"no subscribers for '{event_type}'")
            return

        results = await asyncio.gather(
            *[handler(event) for handler in handlers],
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                bus_logger.error(
                    f"subscriber failed for '{event_type}': {result}",
                    exc_info=result,
                )
