"""Billing request and response schemas."""

from datetime import datetime
from typing import Literal, Optional

from vatcounsel.domains.billing.types import BillingStatus
from vatcounsel.schemas.common import CamelModel


class BillingStatusResponse(CamelModel):
    """Subscription state as stored from Stripe webhooks."""

    plan_key: str
    status: str
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False

    @classmethod
    def from_status(cls, status: BillingStatus) -> "BillingStatusResponse":
        """Build the response from the domain billing status."""
        return cls(
            plan_key=status.plan_key.value,
            status=status.status.value,
            current_period_end=status.current_period_end,
            cancel_at_period_end=status.cancel_at_period_end,
        )


class CheckoutSessionRequest(CamelModel):
    """Body of ``POST /billing/checkout-session``."""

    plan: Literal["PREMIUM"]


class SessionUrlResponse(CamelModel):
    """Redirect target of a hosted Stripe page."""

    url: str


class WebhookAck(CamelModel):
    """Acknowledgement returned to Stripe."""

    received: bool = True
