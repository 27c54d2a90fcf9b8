"""CRUD operations for processed Stripe events."""

from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.crud._base import CRUDBase, dialect_insert
from vatcounsel.models._base import utcnow
from vatcounsel.models.stripe_event import StripeEvent


class CRUDStripeEvent(CRUDBase[StripeEvent]):
    """CRUD operations for StripeEvent."""

    async def exists(self, db: AsyncSession, *, event_id: str) -> bool:
        """Whether the event id has already been processed."""
        result = await db.execute(
            select(self.model.id).where(self.model.event_id == event_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def record(self, db: AsyncSession, *, event_id: str, event_type: str) -> None:
        """Record a processed event id. Recording the same id twice is a no-op."""
        now = utcnow()
        stmt = (
            dialect_insert(db, self.model)
            .values(
                id=uuid4(),
                event_id=event_id,
                event_type=event_type,
                processed_at=now,
                created_at=now,
                modified_at=now,
            )
            .on_conflict_do_nothing(index_elements=["event_id"])
        )
        await db.execute(stmt)
        await db.commit()


stripe_event = CRUDStripeEvent(StripeEvent)
