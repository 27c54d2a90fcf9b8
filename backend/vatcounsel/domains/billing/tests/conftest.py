"""Billing domain test fixtures."""

from unittest.mock import AsyncMock
from uuid import UUID

import pytest

from vatcounsel.domains.billing.service import BillingService
from vatcounsel.domains.billing.webhook_processor import BillingWebhookProcessor

USER_ID = UUID("00000000-0000-4000-8000-0000000000bb")
SITE_URL = "https://vatcounsel.test"


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def billing_service(fake_payment_gateway, fake_subscription_repo):
    return BillingService(
        payment_gateway=fake_payment_gateway,
        subscription_repo=fake_subscription_repo,
        site_url=SITE_URL + "/",
        checkout_success_path="/billing/success",
        checkout_cancel_path="/billing/cancel",
        portal_return_path="/app/billing",
    )


@pytest.fixture
def processor(fake_payment_gateway, fake_subscription_repo, fake_stripe_event_repo):
    return BillingWebhookProcessor(
        payment_gateway=fake_payment_gateway,
        subscription_repo=fake_subscription_repo,
        event_repo=fake_stripe_event_repo,
    )
