"""Usage metering events."""

from typing import Optional

from vatcounsel.core.events.base import DomainEvent
from vatcounsel.core.events.enums import UsageEventType


class UsageConsumedEvent(DomainEvent):
    """A message was charged against the user's quota."""

    event_type: UsageEventType = UsageEventType.CONSUMED

    amount: int
    used: int
    monthly_limit: int
    plan_key: str
    period_key: str
    conversation_id: Optional[str] = None
    model: Optional[str] = None
    tokens_estimate: Optional[int] = None


class UsageLimitReachedEvent(DomainEvent):
    """A consumption was refused because the quota is exhausted."""

    event_type: UsageEventType = UsageEventType.LIMIT_REACHED

    used: int
    monthly_limit: int
    plan_key: str
    period_key: Optional[str] = None
