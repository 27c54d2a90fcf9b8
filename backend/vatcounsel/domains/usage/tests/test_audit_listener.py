"""Unit tests for UsageAuditListener."""

import logging

import pytest

from vatcounsel.adapters.event_bus.in_memory import InMemoryEventBus
from vatcounsel.core.events.usage import UsageConsumedEvent, UsageLimitReachedEvent
from vatcounsel.core.logging import ContextualLogger
from vatcounsel.domains.usage.subscribers.audit_listener import UsageAuditListener
from vatcounsel.domains.usage.tests.conftest import PERIOD_KEY, USER_ID


@pytest.fixture
def audit_logger():
    base = logging.getLogger("usage_audit_test")
    base.setLevel(logging.INFO)
    base.propagate = True
    return ContextualLogger(base)


def _consumed(**overrides):
    fields = dict(
        user_id=USER_ID,
        amount=1,
        used=3,
        monthly_limit=10,
        plan_key="FREE",
        period_key=PERIOD_KEY,
        conversation_id="conv-42",
    )
    fields.update(overrides)
    return UsageConsumedEvent(**fields)


class TestUsageAuditListener:
    def test_subscribes_to_usage_events(self):
        assert UsageAuditListener.EVENT_PATTERNS == ["usage.*"]

    @pytest.mark.asyncio
    async def test_logs_consumption_with_context(self, audit_logger, caplog):
        listener = UsageAuditListener(audit_logger=audit_logger)
        with caplog.at_level(logging.INFO, logger="usage_audit_test"):
            await listener.handle(_consumed())

        record = caplog.records[-1]
        assert record.getMessage() == "[usage-audit] consumed 1 (3/10)"
        assert record.user_id == str(USER_ID)
        assert record.conversation_id == "conv-42"

    @pytest.mark.asyncio
    async def test_logs_limit_reached_as_warning(self, audit_logger, caplog):
        listener = UsageAuditListener(audit_logger=audit_logger)
        event = UsageLimitReachedEvent(
            user_id=USER_ID, used=10, monthly_limit=10, plan_key="FREE", period_key=PERIOD_KEY
        )
        with caplog.at_level(logging.INFO, logger="usage_audit_test"):
            await listener.handle(event)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "limit reached (10/10)" in record.getMessage()

    @pytest.mark.asyncio
    async def test_receives_events_through_bus(self, audit_logger, caplog):
        bus = InMemoryEventBus()
        listener = UsageAuditListener(audit_logger=audit_logger)
        for pattern in listener.EVENT_PATTERNS:
            bus.subscribe(pattern, listener.handle)

        with caplog.at_level(logging.INFO, logger="usage_audit_test"):
            await bus.publish(_consumed(used=4))

        assert any("consumed 1 (4/10)" in r.getMessage() for r in caplog.records)
