"""Event type enums, the vocabulary of the event bus."""

from enum import Enum


class UsageEventType(str, Enum):
    """Usage metering event types."""

    CONSUMED = "usage.consumed"
    LIMIT_REACHED = "usage.limit_reached"


# Union of all known event types.
EventType = UsageEventType
