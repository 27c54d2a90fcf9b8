"""Fake payment gateway for testing.

In-memory implementation of PaymentGatewayProtocol.
Records all calls for assertions. No external API calls.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import uuid4

from vatcounsel.core.protocols.payment import PaymentGatewayProtocol

VALID_SIGNATURE = "t=1,v1=valid"


class FakePaymentGateway(PaymentGatewayProtocol):
    """Test implementation of PaymentGatewayProtocol.

    Webhook events are queued with ``queue_event`` and returned by
    ``verify_webhook_signature`` when the signature equals VALID_SIGNATURE.

    Usage::

        fake = FakePaymentGateway()
        customer = await fake.create_customer("a@b.com")
        assert fake.call_count("create_customer") == 1
    """

    def __init__(
        self,
        premium_price_id: Optional[str] = "price_premium",
        should_raise: Optional[Exception] = None,
    ) -> None:
        """Initialize with an optional price id and error injection."""
        self._premium_price_id = premium_price_id
        self._should_raise = should_raise
        self._calls: list[tuple[str, tuple, dict]] = []
        self._customers: dict[str, _obj] = {}
        self._subscriptions: dict[str, _obj] = {}
        self._event: Optional[_obj] = None

    def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        self._calls.append((method, args, kwargs))
        if self._should_raise:
            raise self._should_raise

    # ---- Test helpers ----

    def call_count(self, method: str) -> int:
        """Number of times a method was called."""
        return sum(1 for name, _, _ in self._calls if name == method)

    def calls_for(self, method: str) -> list[tuple[tuple, dict]]:
        """Return (args, kwargs) for each call to *method*."""
        return [(a, k) for name, a, k in self._calls if name == method]

    def seed_subscription(self, subscription: _obj) -> None:
        """Make ``get_subscription`` return ``subscription``."""
        self._subscriptions[subscription.id] = subscription

    def queue_event(self, event_type: str, data_object: Any, event_id: Optional[str] = None) -> _obj:
        """Set the event the next verified webhook payload decodes to."""
        self._event = _obj(
            id=event_id or f"evt_{uuid4().hex[:14]}",
            type=event_type,
            data=_obj(object=data_object),
        )
        return self._event

    # ---- Protocol ----

    def get_premium_price_id(self) -> Optional[str]:
        """Return the configured fake price id."""
        return self._premium_price_id

    async def create_customer(
        self,
        email: str,
        metadata: Optional[Dict[str, str]] = None,
        preferred_locales: Optional[List[str]] = None,
    ) -> Any:
        """Create a fake customer in memory."""
        self._record(
            "create_customer", email, metadata=metadata, preferred_locales=preferred_locales
        )
        customer = _obj(id=f"cus_{uuid4().hex[:14]}", email=email, metadata=metadata or {})
        self._customers[customer.id] = customer
        return customer

    async def create_checkout_session(
        self,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Return a fake checkout session."""
        self._record(
            "create_checkout_session",
            customer_id,
            price_id,
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata,
        )
        return _obj(id=f"cs_{uuid4().hex[:14]}", url="https://checkout.fake/session")

    async def create_portal_session(self, customer_id: str, return_url: str) -> Any:
        """Return a fake portal session."""
        self._record("create_portal_session", customer_id, return_url=return_url)
        return _obj(url="https://portal.fake/session")

    async def get_subscription(self, subscription_id: str) -> Any:
        """Return a seeded subscription or a bare active one."""
        self._record("get_subscription", subscription_id)
        return self._subscriptions.get(
            subscription_id,
            make_subscription(subscription_id=subscription_id),
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> Any:
        """Return the queued event when the signature is valid, else raise ValueError."""
        self._calls.append(("verify_webhook_signature", (payload, signature), {}))
        if signature != VALID_SIGNATURE:
            raise ValueError("Invalid signature")
        if self._event is None:
            return _obj(id="evt_fake", type="test.event", data=_obj(object=_obj()))
        return self._event


def make_subscription(
    subscription_id: str = "sub_test",
    customer_id: str = "cus_test",
    status: str = "active",
    user_id: Optional[str] = None,
    price_id: str = "price_premium",
    trial_end: Optional[int] = None,
    current_period_end: Optional[int] = None,
    cancel_at_period_end: bool = False,
) -> _obj:
    """Build a Stripe-shaped subscription object."""
    return _obj(
        id=subscription_id,
        customer=customer_id,
        status=status,
        metadata={"userId": user_id} if user_id else {},
        items=_obj(
            data=[_obj(price=_obj(id=price_id), current_period_end=current_period_end)]
        ),
        trial_end=trial_end,
        cancel_at_period_end=cancel_at_period_end,
    )


class _obj:
    """Tiny attribute-bag to emulate Stripe object shapes in tests."""

    def __init__(self, **kwargs: Any):
        for k, v in kwargs.items():
            setattr(self, k, v)

    def get(self, key: str, default: Any = None) -> Any:
        """Get attribute by key with default."""
        return getattr(self, key, default)
