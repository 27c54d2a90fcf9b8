"""Entitlement resolution.

Priority chain, first match wins:

1. User-level plan override (support/ops escape hatch), with an optional
   monthly limit override.
2. A PREMIUM subscription that is active or trialing grants the paid tier.
3. The free tier.

A failed user lookup is never downgraded to a default: it raises
EntitlementLookupError.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.core.config import PeriodKind
from vatcounsel.core.logging import logger
from vatcounsel.domains.billing.repository import SubscriptionRepositoryProtocol
from vatcounsel.domains.usage.exceptions import EntitlementLookupError
from vatcounsel.domains.usage.protocols import EntitlementResolverProtocol
from vatcounsel.domains.usage.types import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    PREMIUM_SUBSCRIPTION_PLAN,
    Entitlement,
    EntitlementSource,
    PlanKey,
    get_plan_config,
)
from vatcounsel.domains.users.repository import UserRepositoryProtocol


class EntitlementResolver(EntitlementResolverProtocol):
    """Resolves entitlements from the user directory and the subscription store."""

    def __init__(
        self,
        user_repo: UserRepositoryProtocol,
        subscription_repo: SubscriptionRepositoryProtocol,
        free_period_kind: PeriodKind = PeriodKind.MONTHLY,
    ) -> None:
        """Initialize with repositories and the free tier's period kind."""
        self._user_repo = user_repo
        self._subscription_repo = subscription_repo
        self._free_period_kind = free_period_kind

    async def resolve(self, db: AsyncSession, user_id: UUID) -> Entitlement:
        """Resolve the entitlement in effect for ``user_id``."""
        try:
            user = await self._user_repo.get(db, user_id=user_id)
        except Exception as e:
            raise EntitlementLookupError(f"User lookup failed for {user_id}: {e}") from e
        if user is None:
            raise EntitlementLookupError(f"User {user_id} not found")

        anchor = user.created_at

        if user.plan_override:
            try:
                plan = get_plan_config(PlanKey(user.plan_override))
            except ValueError as e:
                raise EntitlementLookupError(
                    f"Unknown plan override '{user.plan_override}' for user {user_id}"
                ) from e
            limit = user.monthly_limit_override
            if limit is None:
                limit = plan.monthly_limit
            elif limit < 0:
                raise EntitlementLookupError(
                    f"Negative monthly limit override {limit} for user {user_id}"
                )
            return Entitlement(
                plan_key=plan.key,
                monthly_limit=limit,
                source=EntitlementSource.USER_OVERRIDE,
                period_anchor=anchor,
                period_kind=plan.period_kind,
            )

        try:
            subscription = await self._subscription_repo.get_by_user_id(db, user_id=user_id)
        except Exception as e:
            raise EntitlementLookupError(
                f"Subscription lookup failed for {user_id}: {e}"
            ) from e

        if (
            subscription is not None
            and subscription.plan_key == PREMIUM_SUBSCRIPTION_PLAN
            and subscription.status in ACTIVE_SUBSCRIPTION_STATUSES
        ):
            plan = get_plan_config(PlanKey.PAID)
            return Entitlement(
                plan_key=plan.key,
                monthly_limit=plan.monthly_limit,
                source=EntitlementSource.SUBSCRIPTION_ACTIVE,
                period_anchor=anchor,
                period_kind=plan.period_kind,
            )

        if subscription is not None and subscription.status not in ("inactive", "canceled"):
            logger.with_context(user_id=str(user_id)).debug(
                f"Subscription in status '{subscription.status}' does not grant the paid tier"
            )

        plan = get_plan_config(PlanKey.FREE, self._free_period_kind)
        return Entitlement(
            plan_key=plan.key,
            monthly_limit=plan.monthly_limit,
            source=EntitlementSource.DEFAULT_FREE,
            period_anchor=anchor,
            period_kind=plan.period_kind,
        )
