"""Usage audit listener, an EventBus subscriber for usage events."""

from typing import List

from vatcounsel.core.events.base import DomainEvent
from vatcounsel.core.events.usage import UsageConsumedEvent, UsageLimitReachedEvent
from vatcounsel.core.logging import ContextualLogger, logger
from vatcounsel.core.protocols.event_bus import EventSubscriber


class UsageAuditListener(EventSubscriber):
    """Writes one structured log line per consumption and per refusal."""

    EVENT_PATTERNS: List[str] = ["usage.*"]

    def __init__(self, audit_logger: ContextualLogger = logger) -> None:
        """Initialize with the logger audit lines are written to."""
        self._logger = audit_logger.with_prefix("[usage-audit] ")

    async def handle(self, event: DomainEvent) -> None:
        """Log usage events with their figures as context dimensions."""
        if isinstance(event, UsageConsumedEvent):
            self._logger.with_context(
                user_id=str(event.user_id),
                period_key=event.period_key,
                plan_key=event.plan_key,
                conversation_id=event.conversation_id,
                model=event.model,
                tokens_estimate=event.tokens_estimate,
            ).info(f"consumed {event.amount} ({event.used}/{event.monthly_limit})")
        elif isinstance(event, UsageLimitReachedEvent):
            self._logger.with_context(
                user_id=str(event.user_id),
                period_key=event.period_key,
                plan_key=event.plan_key,
            ).warning(f"limit reached ({event.used}/{event.monthly_limit})")
