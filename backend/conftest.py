"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before both testpaths (tests/ and vatcounsel/domains/),
making its fixtures available to centralized tests AND colocated domain tests.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables, set before any vatcounsel module import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("AUTH_ENABLED", "false")
os.environ.setdefault("LOCAL_USER_ID", "00000000-0000-4000-8000-000000000001")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-minimum-32-characters-long")
os.environ.setdefault("STRIPE_ENABLED", "false")


# ---------------------------------------------------------------------------
# Shared fake fixtures, individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_event_bus():
    """Fake EventBus that records published events."""
    from vatcounsel.adapters.event_bus.fake import FakeEventBus

    return FakeEventBus()


@pytest.fixture
def fake_payment_gateway():
    """Fake PaymentGateway that records calls and returns canned Stripe objects."""
    from vatcounsel.adapters.payment.fake import FakePaymentGateway

    return FakePaymentGateway()


@pytest.fixture
def fake_user_repo():
    """Fake UserRepository backed by a dict."""
    from vatcounsel.domains.users.fakes.repository import FakeUserRepository

    return FakeUserRepository()


@pytest.fixture
def fake_subscription_repo():
    """Fake SubscriptionRepository backed by a dict."""
    from vatcounsel.domains.billing.fakes.repository import FakeSubscriptionRepository

    return FakeSubscriptionRepository()


@pytest.fixture
def fake_stripe_event_repo():
    """Fake StripeEventRepository backed by a dict."""
    from vatcounsel.domains.billing.fakes.repository import FakeStripeEventRepository

    return FakeStripeEventRepository()


@pytest.fixture
def fake_usage_counter_repo():
    """Fake UsageCounterRepository with an atomic check-and-increment."""
    from vatcounsel.domains.usage.fakes.repository import FakeUsageCounterRepository

    return FakeUsageCounterRepository()


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------


@pytest.fixture
def test_container(
    fake_event_bus,
    fake_payment_gateway,
    fake_user_repo,
    fake_subscription_repo,
    fake_stripe_event_repo,
    fake_usage_counter_repo,
):
    """A Container with real services wired to fake adapters and repositories.

    For partial overrides, use container.replace():
        modified = test_container.replace(usage_service=FakeUsageService())
    """
    from vatcounsel.core.config import PeriodKind
    from vatcounsel.core.container import Container
    from vatcounsel.domains.billing.service import BillingService
    from vatcounsel.domains.billing.webhook_processor import BillingWebhookProcessor
    from vatcounsel.domains.usage.entitlement import EntitlementResolver
    from vatcounsel.domains.usage.metering import UsageMeter
    from vatcounsel.domains.usage.service import UsageService

    entitlement_resolver = EntitlementResolver(
        user_repo=fake_user_repo,
        subscription_repo=fake_subscription_repo,
        free_period_kind=PeriodKind.MONTHLY,
    )
    usage_service = UsageService(
        counter_repo=fake_usage_counter_repo,
        entitlement_resolver=entitlement_resolver,
        event_bus=fake_event_bus,
    )

    return Container(
        event_bus=fake_event_bus,
        payment_gateway=fake_payment_gateway,
        user_repo=fake_user_repo,
        subscription_repo=fake_subscription_repo,
        stripe_event_repo=fake_stripe_event_repo,
        usage_counter_repo=fake_usage_counter_repo,
        entitlement_resolver=entitlement_resolver,
        usage_service=usage_service,
        usage_meter=UsageMeter(usage_service=usage_service),
        billing_service=BillingService(
            payment_gateway=fake_payment_gateway,
            subscription_repo=fake_subscription_repo,
            site_url="https://app.test",
            checkout_success_path="/billing/success",
            checkout_cancel_path="/billing/cancel",
            portal_return_path="/app/billing",
        ),
        billing_webhook=BillingWebhookProcessor(
            payment_gateway=fake_payment_gateway,
            subscription_repo=fake_subscription_repo,
            event_repo=fake_stripe_event_repo,
        ),
    )
