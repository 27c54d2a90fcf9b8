"""Unit tests for the Stripe payment gateway.

The SDK entry points are monkeypatched; nothing reaches the network.
"""

import pytest
import stripe
from tenacity import wait_none

from vatcounsel.adapters.payment.stripe import StripePaymentGateway
from vatcounsel.core.config import settings
from vatcounsel.core.exceptions import ExternalServiceError
from vatcounsel.domains.billing.exceptions import StripeConfigError


@pytest.fixture
def gateway(monkeypatch):
    monkeypatch.setattr(StripePaymentGateway._send.retry, "wait", wait_none())
    return StripePaymentGateway(
        api_key="sk_test_123", webhook_secret="whsec_test", premium_price_id="price_1"
    )


class _Recorder:
    """Stands in for an SDK classmethod, failing with the queued errors first."""

    def __init__(self, *errors, result=None):
        self.errors = list(errors)
        self.result = result
        self.calls = []

    def __call__(self, **params):
        self.calls.append(params)
        if self.errors:
            raise self.errors.pop(0)
        return self.result


def test_missing_secret_key(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "")
    with pytest.raises(StripeConfigError):
        StripePaymentGateway(api_key="")


def test_premium_price_id(gateway):
    assert gateway.get_premium_price_id() == "price_1"


@pytest.mark.asyncio
async def test_create_customer_passes_api_key_and_locales(gateway, monkeypatch):
    create = _Recorder(result={"id": "cus_1"})
    monkeypatch.setattr(stripe.Customer, "create", create)

    customer = await gateway.create_customer(
        "a@b.bg", metadata={"userId": "u-1"}, preferred_locales=["bg"]
    )

    assert customer == {"id": "cus_1"}
    assert create.calls == [
        {
            "api_key": "sk_test_123",
            "email": "a@b.bg",
            "metadata": {"userId": "u-1"},
            "preferred_locales": ["bg"],
        }
    ]


@pytest.mark.asyncio
async def test_checkout_session_is_subscription_mode(gateway, monkeypatch):
    create = _Recorder(result={"url": "https://checkout.stripe.com/c/1"})
    monkeypatch.setattr(stripe.checkout.Session, "create", create)

    await gateway.create_checkout_session(
        "cus_1", "price_1", "https://app/s", "https://app/c", metadata={"userId": "u-1"}
    )

    [params] = create.calls
    assert params["mode"] == "subscription"
    assert params["line_items"] == [{"price": "price_1", "quantity": 1}]
    assert params["subscription_data"] == {"metadata": {"userId": "u-1"}}


@pytest.mark.asyncio
async def test_transient_errors_are_retried(gateway, monkeypatch):
    retrieve = _Recorder(stripe.APIConnectionError("reset"), result={"id": "sub_1"})
    monkeypatch.setattr(stripe.Subscription, "retrieve", retrieve)

    assert await gateway.get_subscription("sub_1") == {"id": "sub_1"}
    assert len(retrieve.calls) == 2


@pytest.mark.asyncio
async def test_provider_errors_become_external_service_errors(gateway, monkeypatch):
    create = _Recorder(stripe.InvalidRequestError("No such customer", param="customer"))
    monkeypatch.setattr(stripe.billing_portal.Session, "create", create)

    with pytest.raises(ExternalServiceError) as exc_info:
        await gateway.create_portal_session("cus_missing", "https://app/billing")

    assert "No such customer" in exc_info.value.message
    assert len(create.calls) == 1


def test_invalid_webhook_signature(gateway):
    with pytest.raises(ValueError):
        gateway.verify_webhook_signature(b"{}", "t=1,v1=bad")


def test_webhook_secret_required(gateway):
    gateway._webhook_secret = ""
    with pytest.raises(StripeConfigError):
        gateway.verify_webhook_signature(b"{}", "t=1,v1=bad")
