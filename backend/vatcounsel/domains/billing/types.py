"""Billing domain types."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SubscriptionPlan(str, Enum):
    """Plan stored on subscription rows."""

    FREE = "FREE"
    PREMIUM = "PREMIUM"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle states, mirroring Stripe's statuses."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"
    INCOMPLETE = "incomplete"
    INCOMPLETE_EXPIRED = "incomplete_expired"


class SubscriptionProvider(str, Enum):
    """Who manages the subscription."""

    NONE = "none"
    STRIPE = "stripe"


def parse_status(value: Optional[str]) -> SubscriptionStatus:
    """Map a provider status string to SubscriptionStatus; unknown values are inactive."""
    try:
        return SubscriptionStatus(value)
    except ValueError:
        return SubscriptionStatus.INACTIVE


@dataclass(frozen=True)
class BillingStatus:
    """Subscription state shown to the user."""

    plan_key: SubscriptionPlan
    status: SubscriptionStatus
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False


FREE_BILLING_STATUS = BillingStatus(
    plan_key=SubscriptionPlan.FREE, status=SubscriptionStatus.INACTIVE
)
