"""CRUD operations for the Subscription model."""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.crud._base import CRUDBase
from vatcounsel.models.subscription import Subscription


class CRUDSubscription(CRUDBase[Subscription]):
    """CRUD operations for Subscription."""

    async def get_by_user_id(self, db: AsyncSession, *, user_id: UUID) -> Optional[Subscription]:
        """Get the subscription row of a user."""
        result = await db.execute(select(self.model).where(self.model.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str
    ) -> Optional[Subscription]:
        """Get a subscription row by its Stripe subscription id."""
        result = await db.execute(
            select(self.model).where(self.model.stripe_subscription_id == stripe_subscription_id)
        )
        return result.scalars().first()

    async def upsert_for_user(
        self, db: AsyncSession, *, user_id: UUID, values: dict[str, Any]
    ) -> Subscription:
        """Create the user's subscription row or update it in place."""
        db_obj = await self.get_by_user_id(db, user_id=user_id)
        if db_obj is None:
            db_obj = self.model(user_id=user_id, **values)
            db.add(db_obj)
        else:
            for field, value in values.items():
                setattr(db_obj, field, value)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def update_by_stripe_subscription_id(
        self, db: AsyncSession, *, stripe_subscription_id: str, values: dict[str, Any]
    ) -> Optional[Subscription]:
        """Update the row holding ``stripe_subscription_id``; None when there is none."""
        db_obj = await self.get_by_stripe_subscription_id(
            db, stripe_subscription_id=stripe_subscription_id
        )
        if db_obj is None:
            return None
        for field, value in values.items():
            setattr(db_obj, field, value)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj


subscription = CRUDSubscription(Subscription)
