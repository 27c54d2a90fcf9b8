"""Fake usage counter repository for testing."""

import asyncio
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.models.usage_counter import UsageCounter


class FakeUsageCounterRepository:
    """In-memory fake for UsageCounterRepositoryProtocol.

    ``consume_atomic`` yields to the event loop before taking its lock, so
    concurrent callers genuinely interleave while the check-and-increment
    itself stays indivisible.
    """

    def __init__(self) -> None:
        """Initialize empty in-memory store."""
        self._store: dict[tuple[UUID, str], UsageCounter] = {}
        self._lock = asyncio.Lock()
        self._calls: list[tuple] = []
        self._should_raise: Optional[Exception] = None

    def seed(self, user_id: UUID, period_key: str, used: int) -> UsageCounter:
        """Set the counter for a user's period."""
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        counter = UsageCounter(
            id=uuid4(),
            user_id=user_id,
            period_key=period_key,
            used=used,
            created_at=now,
            modified_at=now,
        )
        self._store[(user_id, period_key)] = counter
        return counter

    def set_error(self, error: Optional[Exception]) -> None:
        """Make every call raise ``error`` (None to clear)."""
        self._should_raise = error

    def used(self, user_id: UUID, period_key: str) -> Optional[int]:
        """Synchronous accessor for assertions. None when no row exists."""
        counter = self._store.get((user_id, period_key))
        return counter.used if counter else None

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    async def get_counter(
        self, db: AsyncSession, *, user_id: UUID, period_key: str
    ) -> Optional[UsageCounter]:
        """Get the period's counter."""
        self._calls.append(("get_counter", db, user_id, period_key))
        if self._should_raise:
            raise self._should_raise
        return self._store.get((user_id, period_key))

    async def consume_atomic(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        period_key: str,
        amount: int,
        limit: int,
    ) -> Optional[UsageCounter]:
        """Increment under a lock unless the ceiling would be exceeded."""
        self._calls.append(("consume_atomic", db, user_id, period_key, amount, limit))
        if amount < 1:
            raise ValueError(f"amount must be at least 1, got {amount}")
        if self._should_raise:
            raise self._should_raise
        await asyncio.sleep(0)
        async with self._lock:
            counter = self._store.get((user_id, period_key))
            current = counter.used if counter else 0
            if current + amount > limit:
                return None
            await asyncio.sleep(0)
            if counter is None:
                return self.seed(user_id, period_key, amount)
            counter.used = current + amount
            return counter
