"""Usage service.

Orchestrates entitlement resolution, period calculation and the counter
store. ``consume_usage`` is the only enforcement point: the pre-flight
checks can race with concurrent consumption and are an optimization only.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from vatcounsel.core.events.base import DomainEvent
from vatcounsel.core.events.usage import UsageConsumedEvent, UsageLimitReachedEvent
from vatcounsel.core.logging import logger
from vatcounsel.core.protocols.event_bus import EventBus
from vatcounsel.domains.usage.exceptions import UsageError, UsageLimitExceededError
from vatcounsel.domains.usage.periods import is_period_open, resolve_period
from vatcounsel.domains.usage.protocols import EntitlementResolverProtocol, UsageServiceProtocol
from vatcounsel.domains.usage.repository import UsageCounterRepositoryProtocol
from vatcounsel.domains.usage.types import (
    ConsumeMeta,
    ConsumeOk,
    ConsumeOutcome,
    Entitlement,
    LimitExceeded,
    PeriodInfo,
    StoreFailure,
    UsageSnapshot,
    percent_used,
)


def unwrap(outcome: ConsumeOutcome) -> ConsumeOk:
    """Return the success value or raise the matching typed error.

    Raises:
        UsageLimitExceededError: For LimitExceeded
        UsageError: For StoreFailure
    """
    if isinstance(outcome, ConsumeOk):
        return outcome
    if isinstance(outcome, LimitExceeded):
        raise UsageLimitExceededError(
            used=outcome.used,
            limit=outcome.limit,
            plan_key=outcome.plan_key.value,
            message=outcome.message,
        )
    raise UsageError(outcome.message) from outcome.cause


class UsageService(UsageServiceProtocol):
    """Per-user message accounting against the plan quota."""

    def __init__(
        self,
        counter_repo: UsageCounterRepositoryProtocol,
        entitlement_resolver: EntitlementResolverProtocol,
        event_bus: EventBus,
    ) -> None:
        """Initialize with the counter store, resolver and event bus."""
        self._counter_repo = counter_repo
        self._entitlement_resolver = entitlement_resolver
        self._event_bus = event_bus

    async def _resolve(
        self, db: AsyncSession, user_id: UUID, now: datetime
    ) -> tuple[Entitlement, PeriodInfo, bool]:
        entitlement = await self._entitlement_resolver.resolve(db, user_id)
        period = resolve_period(entitlement.period_anchor, now, entitlement.period_kind)
        return entitlement, period, is_period_open(period, now)

    async def _read_used(self, db: AsyncSession, user_id: UUID, period_key: str) -> int:
        try:
            counter = await self._counter_repo.get_counter(
                db, user_id=user_id, period_key=period_key
            )
        except Exception as e:
            raise UsageError(f"Failed to read usage: {e}") from e
        # No row yet means nothing consumed this period
        return counter.used if counter is not None else 0

    async def _publish(self, event: DomainEvent) -> None:
        try:
            await self._event_bus.publish(event)
        except Exception as e:
            logger.with_context(user_id=str(event.user_id)).warning(
                f"Failed to publish {event.event_type.value}: {e}"
            )

    async def get_usage_snapshot(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> UsageSnapshot:
        """Read-only view of the user's current period."""
        now = now or datetime.now(timezone.utc)
        entitlement, period, is_open = await self._resolve(db, user_id, now)
        used = await self._read_used(db, user_id, period.period_key)
        limit = entitlement.monthly_limit
        remaining = max(0, limit - used) if is_open else 0

        return UsageSnapshot(
            plan_key=entitlement.plan_key,
            monthly_limit=limit,
            used=used,
            remaining=remaining,
            percent_used=percent_used(used, limit),
            period_key=period.period_key,
            period_start=period.period_start,
            period_end=period.period_end,
            source=entitlement.source,
        )

    async def check_within_limit(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> Optional[LimitExceeded]:
        """Return LimitExceeded when no message is left this period, else None."""
        snapshot = await self.get_usage_snapshot(db, user_id, now)
        if snapshot.remaining <= 0:
            return LimitExceeded(
                used=snapshot.used,
                limit=snapshot.monthly_limit,
                plan_key=snapshot.plan_key,
                period_key=snapshot.period_key,
            )
        return None

    async def assert_within_limit(
        self, db: AsyncSession, user_id: UUID, now: Optional[datetime] = None
    ) -> None:
        """Raise UsageLimitExceededError when no message is left this period."""
        exceeded = await self.check_within_limit(db, user_id, now)
        if exceeded is not None:
            unwrap(exceeded)

    async def consume_usage(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: int = 1,
        meta: Optional[ConsumeMeta] = None,
        now: Optional[datetime] = None,
    ) -> ConsumeOutcome:
        """Atomically charge ``amount`` messages.

        Returns:
            ConsumeOk with the new totals, LimitExceeded when the store refused
            the increment (nothing written), or StoreFailure when the store failed.

        Raises:
            ValueError: If amount is less than 1
            EntitlementLookupError: If the entitlement cannot be resolved
        """
        if amount < 1:
            raise ValueError(f"amount must be at least 1, got {amount}")

        now = now or datetime.now(timezone.utc)
        meta = meta or ConsumeMeta()
        log = logger.with_context(user_id=str(user_id))

        entitlement, period, is_open = await self._resolve(db, user_id, now)
        limit = entitlement.monthly_limit

        if not is_open:
            # Trial window closed: nothing can be consumed any more
            try:
                used = await self._read_used(db, user_id, period.period_key)
            except UsageError as e:
                return StoreFailure(message=e.message, cause=e.__cause__)
            return await self._limit_exceeded(user_id, entitlement, period, used)

        try:
            counter = await self._counter_repo.consume_atomic(
                db,
                user_id=user_id,
                period_key=period.period_key,
                amount=amount,
                limit=limit,
            )
        except Exception as e:
            log.error(f"Usage store failed during consumption: {e}", exc_info=True)
            return StoreFailure(message="Failed to record usage", cause=e)

        if counter is None:
            try:
                used = await self._read_used(db, user_id, period.period_key)
            except UsageError as e:
                return StoreFailure(message=e.message, cause=e.__cause__)
            log.info(f"Usage limit reached: {used}/{limit} in period {period.period_key}")
            return await self._limit_exceeded(user_id, entitlement, period, used)

        outcome = ConsumeOk(
            used=counter.used,
            remaining=max(0, limit - counter.used),
            plan_key=entitlement.plan_key,
            monthly_limit=limit,
            period_key=period.period_key,
        )
        await self._publish(
            UsageConsumedEvent(
                user_id=user_id,
                amount=amount,
                used=outcome.used,
                monthly_limit=limit,
                plan_key=entitlement.plan_key.value,
                period_key=period.period_key,
                conversation_id=meta.conversation_id,
                model=meta.model,
                tokens_estimate=meta.tokens_estimate,
            )
        )
        return outcome

    async def _limit_exceeded(
        self, user_id: UUID, entitlement: Entitlement, period: PeriodInfo, used: int
    ) -> LimitExceeded:
        outcome = LimitExceeded(
            used=used,
            limit=entitlement.monthly_limit,
            plan_key=entitlement.plan_key,
            period_key=period.period_key,
        )
        await self._publish(
            UsageLimitReachedEvent(
                user_id=user_id,
                used=used,
                monthly_limit=entitlement.monthly_limit,
                plan_key=entitlement.plan_key.value,
                period_key=period.period_key,
            )
        )
        return outcome
