"""Fake usage service for API tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.domains.usage.exceptions import UsageLimitExceededError
from vatcounsel.domains.usage.types import (
    ConsumeMeta,
    ConsumeOk,
    ConsumeOutcome,
    EntitlementSource,
    LimitExceeded,
    PlanKey,
    UsageSnapshot,
    percent_used,
)


class FakeUsageService:
    """In-memory fake for UsageServiceProtocol with a single flat quota."""

    def __init__(
        self,
        limit: int = 10,
        plan_key: PlanKey = PlanKey.FREE,
        period_start: Optional[datetime] = None,
    ) -> None:
        """Initialize with a quota and period start."""
        self.limit = limit
        self.plan_key = plan_key
        self.period_start = period_start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._used: dict[UUID, int] = {}
        self._calls: list[tuple] = []
        self._should_raise: Optional[Exception] = None

    def seed(self, user_id: UUID, used: int) -> None:
        """Set a user's consumption."""
        self._used[user_id] = used

    def set_error(self, error: Optional[Exception]) -> None:
        """Make every call raise ``error`` (None to clear)."""
        self._should_raise = error

    def call_count(self, method: str) -> int:
        """Return the number of times a method was called."""
        return sum(1 for name, *_ in self._calls if name == method)

    def _check(self, method: str, *args: object) -> None:
        self._calls.append((method, *args))
        if self._should_raise:
            raise self._should_raise

    @property
    def period_key(self) -> str:
        """Key of the fake's single period."""
        return self.period_start.strftime("%Y-%m-%d")

    async def get_usage_snapshot(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> UsageSnapshot:
        """Build a snapshot from the in-memory count."""
        self._check("get_usage_snapshot", user_id)
        used = self._used.get(user_id, 0)
        return UsageSnapshot(
            plan_key=self.plan_key,
            monthly_limit=self.limit,
            used=used,
            remaining=max(0, self.limit - used),
            percent_used=percent_used(used, self.limit),
            period_key=self.period_key,
            period_start=self.period_start,
            period_end=self.period_start + timedelta(days=31),
            source=EntitlementSource.DEFAULT_FREE,
        )

    async def check_within_limit(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> Optional[LimitExceeded]:
        """Return LimitExceeded when the count reached the limit."""
        self._check("check_within_limit", user_id)
        used = self._used.get(user_id, 0)
        if used >= self.limit:
            return LimitExceeded(used=used, limit=self.limit, plan_key=self.plan_key)
        return None

    async def assert_within_limit(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> None:
        """Raise UsageLimitExceededError when the count reached the limit."""
        exceeded = await self.check_within_limit(db, user_id, now)
        if exceeded is not None:
            raise UsageLimitExceededError(
                used=exceeded.used, limit=exceeded.limit, plan_key=exceeded.plan_key.value
            )

    async def consume_usage(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: int = 1,
        meta: Optional[ConsumeMeta] = None,
        now: Optional[datetime] = None,
    ) -> ConsumeOutcome:
        """Increment the in-memory count unless the limit would be exceeded."""
        self._check("consume_usage", user_id, amount)
        used = self._used.get(user_id, 0)
        if used + amount > self.limit:
            return LimitExceeded(
                used=used, limit=self.limit, plan_key=self.plan_key, period_key=self.period_key
            )
        self._used[user_id] = used + amount
        return ConsumeOk(
            used=used + amount,
            remaining=self.limit - used - amount,
            plan_key=self.plan_key,
            monthly_limit=self.limit,
            period_key=self.period_key,
        )
