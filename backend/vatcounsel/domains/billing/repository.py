"""Billing domain repositories wrapping crud.subscription and crud.stripe_event."""

from typing import Any, Optional, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel import crud
from vatcounsel.models.subscription import Subscription


@runtime_checkable
class SubscriptionRepositoryProtocol(Protocol):
    """Data access for per-user subscription rows."""

    async def get_by_user_id(self, db: AsyncSession, *, user_id: UUID) -> Optional[Subscription]:
        """Get the user's subscription row, or None if the user never subscribed."""
        ...

    async def get_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str
    ) -> Optional[Subscription]:
        """Get a subscription row by its Stripe subscription id."""
        ...

    async def upsert_for_user(
        self, db: AsyncSession, *, user_id: UUID, values: dict[str, Any]
    ) -> Subscription:
        """Create or update the user's subscription row."""
        ...

    async def update_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str, values: dict[str, Any]
    ) -> Optional[Subscription]:
        """Update the row holding the Stripe subscription id."""
        ...


@runtime_checkable
class StripeEventRepositoryProtocol(Protocol):
    """Ledger of processed webhook event ids."""

    async def exists(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event has already been processed."""
        ...

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> None:
        """Mark the event as processed."""
        ...


class SubscriptionRepository(SubscriptionRepositoryProtocol):
    """Delegates to the crud.subscription singleton."""

    async def get_by_user_id(self, db: AsyncSession, *, user_id: UUID) -> Optional[Subscription]:
        """Get the user's subscription row."""
        return await crud.subscription.get_by_user_id(db, user_id=user_id)

    async def get_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str
    ) -> Optional[Subscription]:
        """Get a subscription row by its Stripe subscription id."""
        return await crud.subscription.get_by_stripe_subscription_id(
            db, stripe_subscription_id=stripe_subscription_id
        )

    async def upsert_for_user(
        self, db: AsyncSession, *, user_id: UUID, values: dict[str, Any]
    ) -> Subscription:
        """Create or update the user's subscription row."""
        return await crud.subscription.upsert_for_user(db, user_id=user_id, values=values)

    async def update_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str, values: dict[str, Any]
    ) -> Optional[Subscription]:
        """Update the row holding the Stripe subscription id."""
        return await crud.subscription.update_by_stripe_subscription_id(
            db, stripe_subscription_id=stripe_subscription_id, values=values
        )


class StripeEventRepository(StripeEventRepositoryProtocol):
    """Delegates to the crud.stripe_event singleton."""

    async def exists(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event has already been processed."""
        return await crud.stripe_event.exists(db, event_id=event_id)

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> None:
        """Mark the event as processed."""
        await crud.stripe_event.record(db, event_id=event_id, event_type=event_type)
