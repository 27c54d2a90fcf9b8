"""Usage counter repository wrapping crud.usage_counter."""

from typing import Optional, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel import crud
from vatcounsel.models.usage_counter import UsageCounter


@runtime_checkable
class UsageCounterRepositoryProtocol(Protocol):
    """Per-user per-period counters, mutated only through ``consume_atomic``."""

    async def get_counter(
        self, db: AsyncSession, *, user_id: UUID, period_key: str
    ) -> Optional[UsageCounter]:
        """Get the period's counter. None means nothing was consumed yet."""
        ...

    async def consume_atomic(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        period_key: str,
        amount: int,
        limit: int,
    ) -> Optional[UsageCounter]:
        """Increment by ``amount`` unless the result would exceed ``limit``.

        Returns the updated counter, or None when rejected (nothing written).
        """
        ...


class UsageCounterRepository(UsageCounterRepositoryProtocol):
    """Delegates to the crud.usage_counter singleton."""

    async def get_counter(
        self, db: AsyncSession, *, user_id: UUID, period_key: str
    ) -> Optional[UsageCounter]:
        """Get the period's counter."""
        return await crud.usage_counter.get_by_period(db, user_id=user_id, period_key=period_key)

    async def consume_atomic(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        period_key: str,
        amount: int,
        limit: int,
    ) -> Optional[UsageCounter]:
        """Increment by ``amount`` unless the result would exceed ``limit``."""
        return await crud.usage_counter.consume_atomic(
            db, user_id=user_id, period_key=period_key, amount=amount, limit=limit
        )
