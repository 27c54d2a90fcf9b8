"""Domain events published on the event bus."""

from vatcounsel.core.events.base import DomainEvent
from vatcounsel.core.events.enums import UsageEventType
from vatcounsel.core.events.usage import UsageConsumedEvent, UsageLimitReachedEvent

__all__ = ["DomainEvent", "UsageEventType", "UsageConsumedEvent", "UsageLimitReachedEvent"]
