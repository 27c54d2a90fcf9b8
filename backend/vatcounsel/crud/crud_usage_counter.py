"""CRUD operations for the UsageCounter model."""

from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.crud._base import CRUDBase, dialect_insert
from vatcounsel.models._base import utcnow
from vatcounsel.models.usage_counter import UsageCounter


class CRUDUsageCounter(CRUDBase[UsageCounter]):
    """CRUD operations for UsageCounter."""

    async def get_by_period(
        self, db: AsyncSession, *, user_id: UUID, period_key: str
    ) -> Optional[UsageCounter]:
        """Get the counter row for a user's period, or None if nothing was consumed yet."""
        query = select(self.model).where(
            self.model.user_id == user_id,
            self.model.period_key == period_key,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def consume_atomic(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        period_key: str,
        amount: int,
        limit: int,
    ) -> Optional[UsageCounter]:
        """Add ``amount`` to the counter unless the result would exceed ``limit``.

        Runs as a single INSERT ... ON CONFLICT DO UPDATE ... WHERE statement, so
        concurrent callers are serialized by the database row lock. The row is
        created with ``used = amount`` on the first consumption of a period.

        Args:
            db: Database session
            user_id: Owner of the counter
            period_key: Accounting period identifier (YYYY-MM-DD)
            amount: Units to add, at least 1
            limit: Ceiling that ``used`` may reach but never exceed

        Returns:
            The updated counter, or None when the ceiling rejected the write.
            Nothing is written on rejection.

        Raises:
            ValueError: If amount is less than 1
        """
        if amount < 1:
            raise ValueError(f"amount must be at least 1, got {amount}")
        if amount > limit:
            return None

        now = utcnow()
        stmt = dialect_insert(db, self.model).values(
            id=uuid4(),
            user_id=user_id,
            period_key=period_key,
            used=amount,
            created_at=now,
            modified_at=now,
        )
        stmt = (
            stmt.on_conflict_do_update(
                index_elements=["user_id", "period_key"],
                set_={"used": self.model.used + stmt.excluded.used, "modified_at": now},
                where=self.model.used + amount <= limit,
            )
            .returning(self.model)
            .execution_options(populate_existing=True)
        )

        result = await db.execute(stmt)
        counter = result.scalar_one_or_none()
        await db.commit()
        if counter is not None:
            await db.refresh(counter)
        return counter


usage_counter = CRUDUsageCounter(UsageCounter)
