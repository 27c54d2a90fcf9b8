"""Usage domain test fixtures.

Services are built from the root fakes (see backend/conftest.py); every
test seeds its own user so that anchors and plans stay explicit.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import UUID

import pytest

from vatcounsel.core.config import PeriodKind
from vatcounsel.domains.usage.entitlement import EntitlementResolver
from vatcounsel.domains.usage.service import UsageService

USER_ID = UUID("00000000-0000-4000-8000-0000000000aa")
ANCHOR = datetime(2024, 1, 1, 9, 30)
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
PERIOD_KEY = "2024-01-01"


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def user(fake_user_repo):
    """A user on the default free plan created at ANCHOR."""
    return fake_user_repo.seed(USER_ID, created_at=ANCHOR, email="user@example.com")


@pytest.fixture
def resolver(fake_user_repo, fake_subscription_repo):
    return EntitlementResolver(
        user_repo=fake_user_repo,
        subscription_repo=fake_subscription_repo,
        free_period_kind=PeriodKind.MONTHLY,
    )


@pytest.fixture
def service(fake_usage_counter_repo, resolver, fake_event_bus):
    return UsageService(
        counter_repo=fake_usage_counter_repo,
        entitlement_resolver=resolver,
        event_bus=fake_event_bus,
    )
