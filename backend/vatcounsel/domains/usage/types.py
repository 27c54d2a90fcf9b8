"""Usage domain types and pure business logic.

Plan table, entitlement and period value objects, and the closed set of
results returned by consumption. No IO, everything here is deterministic.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from vatcounsel.core.config import PeriodKind


class PlanKey(str, Enum):
    """Plan tiers a user can be entitled to."""

    FREE = "FREE"
    PAID = "PAID"
    INTERNAL = "INTERNAL"


class EntitlementSource(str, Enum):
    """Which rule of the resolution chain produced an entitlement."""

    USER_OVERRIDE = "user_override"
    SUBSCRIPTION_ACTIVE = "subscription_active"
    DEFAULT_FREE = "default_free"


@dataclass(frozen=True)
class PlanConfig:
    """Static quota configuration of a plan tier."""

    key: PlanKey
    monthly_limit: int
    name: str
    description: str
    period_kind: PeriodKind = PeriodKind.MONTHLY

    def __post_init__(self) -> None:
        """Limits are non-negative message counts."""
        if self.monthly_limit < 0:
            raise ValueError(f"Plan {self.key.value} has a negative monthly limit")


PLANS: dict[PlanKey, PlanConfig] = {
    PlanKey.FREE: PlanConfig(
        key=PlanKey.FREE,
        monthly_limit=10,
        name="Free Plan",
        description="Default plan for new users",
    ),
    PlanKey.PAID: PlanConfig(
        key=PlanKey.PAID,
        monthly_limit=50,
        name="Paid Plan",
        description="Premium plan via Stripe",
    ),
    PlanKey.INTERNAL: PlanConfig(
        key=PlanKey.INTERNAL,
        monthly_limit=1000,
        name="Internal Plan",
        description="Internal/admin users",
    ),
}


def get_plan_config(plan_key: PlanKey, period_kind: Optional[PeriodKind] = None) -> PlanConfig:
    """Look up a plan, optionally with its period kind replaced.

    Raises:
        KeyError: If the plan key is not in the table
    """
    plan = PLANS[plan_key]
    if period_kind is not None and period_kind != plan.period_kind:
        plan = replace(plan, period_kind=period_kind)
    return plan


# Subscription statuses that grant the paid tier.
ACTIVE_SUBSCRIPTION_STATUSES = frozenset({"active", "trialing"})

# Plan key stored on subscription rows by the billing webhooks.
PREMIUM_SUBSCRIPTION_PLAN = "PREMIUM"


@dataclass(frozen=True)
class Entitlement:
    """Plan and quota in effect for one user at one instant. Never cached."""

    plan_key: PlanKey
    monthly_limit: int
    source: EntitlementSource
    period_anchor: datetime
    period_kind: PeriodKind = PeriodKind.MONTHLY


@dataclass(frozen=True)
class PeriodInfo:
    """Accounting window ``[period_start, period_end)`` keyed by its start date."""

    period_key: str
    period_start: datetime
    period_end: datetime


@dataclass(frozen=True)
class UsageSnapshot:
    """Point-in-time view of a user's consumption in the current period."""

    plan_key: PlanKey
    monthly_limit: int
    used: int
    remaining: int
    percent_used: int
    period_key: str
    period_start: datetime
    period_end: datetime
    source: EntitlementSource


@dataclass(frozen=True)
class ConsumeMeta:
    """Optional details about the work a consumption pays for."""

    conversation_id: Optional[str] = None
    model: Optional[str] = None
    tokens_estimate: Optional[int] = None


# ---------------------------------------------------------------------------
# Consumption results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ConsumeOk:
    """Consumption was recorded."""

    used: int
    remaining: int
    plan_key: PlanKey
    monthly_limit: int
    period_key: str


def limit_exceeded_message(used: int, limit: int) -> str:
    return (
        f"Monthly usage limit of {limit} messages has been reached "
        f"(used: {used}). Upgrade your plan or wait for the next billing period."
    )


@dataclass(frozen=True)
class LimitExceeded:
    """Consumption was refused because the period quota is exhausted."""

    used: int
    limit: int
    plan_key: PlanKey
    period_key: Optional[str] = None

    @property
    def message(self) -> str:
        """User-facing explanation."""
        return limit_exceeded_message(self.used, self.limit)


@dataclass(frozen=True)
class StoreFailure:
    """The counter store failed; nothing was committed."""

    message: str
    cause: Optional[BaseException] = None


ConsumeOutcome = Union[ConsumeOk, LimitExceeded, StoreFailure]


def percent_used(used: int, limit: int) -> int:
    """Share of the quota consumed, halves rounded up. Zero for zero limits."""
    if limit <= 0:
        return 0
    return int(math.floor(100 * used / limit + 0.5))
